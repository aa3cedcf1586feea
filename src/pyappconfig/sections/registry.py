# -*- encoding: utf-8 -*-
# @File   : registry.py
# @Time   : 2024/11/06 00:47:29
# @Author : Kariko Lin

"""Named sections and section groups.

Every section (or group) lives in two places at the same depth:

    ```xml
    <configuration>
      <configSections>                      <!-- declarations -->
        <section name="a" type="..." />
        <sectionGroup name="g">
          <section name="b" type="..." />
        </sectionGroup>
      </configSections>
      <a> ... </a>                          <!-- contents -->
      <g>
        <b> ... </b>
      </g>
    </configuration>
    ```

A registry keeps one `_Pair` record per name holding both nodes,
and every change goes through it, so a declaration never lives
longer than its content (or the other way around).
"""

import warnings
from collections.abc import Iterator, Mapping, MutableMapping
from copy import deepcopy
from dataclasses import dataclass
from typing import Any, Generic, TypeVar
from xml.etree import ElementTree as et

from ..abstract import Savable
from ..codec import is_xml_name, is_xml_text
from ..errors import (
    ArgumentRequired,
    DuplicateKey,
    InvalidKey,
    InvalidType,
    UnsupportedType
)
from .consts import GROUP_TAG, SECTION_TAG, SectionKind
from .model import (
    SECTION_TYPES,
    ConfigSection,
    CustomSection,
    infer_section_kind,
    section_class
)

__all__ = ['ConfigSectionSet', 'ConfigSectionGroupSet', 'ConfigSectionGroup']


def child(parent: et.Element, tag: str) -> et.Element | None:
    # not `find()`, names like `system.web` are no paths.
    for i in parent:
        if i.tag == tag:
            return i
    return None


def check_name(name: str | None) -> None:
    if name is None or not name.strip():
        raise ArgumentRequired('A non-empty name is required.')
    if not is_xml_name(name):
        raise InvalidKey(f'"{name}" is not a valid XML name.')


def _replace_content(target: et.Element, source: et.Element) -> None:
    tail = target.tail
    target.clear()
    target.tail = tail
    target.text = source.text
    target.attrib.update(source.attrib)
    target.extend(list(source))


T = TypeVar('T')
S = TypeVar('S', bound=ConfigSection)


@dataclass
class _Pair(Generic[T]):
    declaration: et.Element
    content: et.Element
    item: T


class _PairedSet(Mapping[str, T]):
    _decl_tag: str

    def __init__(self, declaration_superior: et.Element,
                 content_superior: et.Element,
                 savable: Savable | None = None, *,
                 reserved: tuple[str, ...] = ()) -> None:
        self._decl_superior = declaration_superior
        self._content_superior = content_superior
        self._savable = savable
        self._reserved = reserved
        self._pairs: dict[str, _Pair[T]] = {}
        for decl in declaration_superior.findall(self._decl_tag):
            name = decl.get('name')
            if not name:
                warnings.warn(
                    f'<{declaration_superior.tag}> has a <{self._decl_tag}> '
                    'without name, skipped.')
                continue
            if (content := child(content_superior, name)) is None:
                warnings.warn(
                    f'"{name}" is declared but has no content node, '
                    'an empty one is added.')
                content = et.SubElement(content_superior, name)
            self._pairs[name] = _Pair(decl, content, self._make(decl, content))

    def _make(self, declaration: et.Element, content: et.Element) -> T:
        raise NotImplementedError

    def _commit(self) -> None:
        if self._savable is not None:
            self._savable.commit()

    def _check_new(self, name: str) -> None:
        """For names about to be added."""
        check_name(name)
        if name in self._pairs:
            raise DuplicateKey(f'"{name}" already exists.')
        if name in self._reserved or child(self._content_superior, name) is not None:
            raise DuplicateKey(
                f'<{name}> already exists in <{self._content_superior.tag}>.')

    def _add_pair(self, declaration: et.Element, content: et.Element) -> T:
        item = self._make(declaration, content)
        self._decl_superior.append(declaration)
        self._content_superior.append(content)
        self._pairs[content.tag] = _Pair(declaration, content, item)
        return item

    def __getitem__(self, name: str) -> T:
        return self._pairs[name].item

    def __contains__(self, name: object) -> bool:
        return name in self._pairs

    def __iter__(self) -> Iterator[str]:
        return iter(self._pairs)

    def __len__(self) -> int:
        return len(self._pairs)

    def __repr__(self) -> str:
        return '<%s %s>' % (type(self).__name__, list(self._pairs))

    def __delitem__(self, name: str) -> None:
        if not self.remove(name):
            raise KeyError(name)

    def contains_name(self, name: str) -> bool:
        return name in self._pairs

    def remove(self, name: str) -> bool:
        """Drop declaration and content of `name` together."""
        if (pair := self._pairs.pop(name, None)) is None:
            return False
        self._decl_superior.remove(pair.declaration)
        self._content_superior.remove(pair.content)
        self._commit()
        return True

    def clear(self) -> None:
        """Drop all pairs of *this* set. Siblings are left alone."""
        for pair in self._pairs.values():
            self._decl_superior.remove(pair.declaration)
            self._content_superior.remove(pair.content)
        self._pairs.clear()
        self._commit()

    def rename(self, old: str, new: str) -> bool:
        """Rename declaration and content together.

        Returns:
            `True` if succeed, otherwise `False`.
            May not success if `old` is not found or `new` already exists.
        """
        check_name(new)
        if old not in self._pairs or new in self._pairs:
            return False
        if new in self._reserved or child(self._content_superior, new) is not None:
            return False
        pair = self._pairs[old]
        pair.declaration.set('name', new)
        pair.content.tag = new
        # keep the order.
        self._pairs = {
            (new if k == old else k): v for k, v in self._pairs.items()}
        self._commit()
        return True


class ConfigSectionSet(_PairedSet[ConfigSection],
                       MutableMapping[str, ConfigSection]):
    """Sections under one declaration/content pair.

    Assigning equals `add_or_update()`, which stores a *copy*.
    """
    _decl_tag = SECTION_TAG

    def _make(self, declaration: et.Element,
              content: et.Element) -> ConfigSection:
        type_name = declaration.get('type', '')
        if (kind := SectionKind.of(type_name)) is None:
            return CustomSection(type_name, content)
        return SECTION_TYPES[kind](content, self._savable)

    def __setitem__(self, name: str, value: Any) -> None:
        self.add_or_update(name, value)

    def get_or_add(self, name: str,
                   kind: SectionKind | str | type[ConfigSection]) -> ConfigSection:
        """Get the section, or add an empty one of `kind`.

        Raises:
            InvalidType: `name` exists but is not of `kind`.
        """
        cls = section_class(kind)
        if (pair := self._pairs.get(name)) is not None:
            if not isinstance(pair.item, cls):
                raise InvalidType(
                    f'"{name}" is a {pair.item.type_name}, not {cls.kind.value}.')
            return pair.item
        self._check_new(name)
        section = self._add_pair(
            et.Element(SECTION_TAG, {'name': name, 'type': cls.kind.value}),
            et.Element(name))
        self._commit()
        return section

    def get_typed(self, name: str, cls: type[S]) -> S | None:
        """`None` if not found, or not an instance of `cls`."""
        if (pair := self._pairs.get(name)) is None:
            return None
        return pair.item if isinstance(pair.item, cls) else None

    def add_custom_section(self, name: str, type_name: str,
                           raw_text: str) -> CustomSection:
        """Add a section of some handler we don't know.

        `raw_text` is read as the children of the section node.
        If it isn't XML (or has no elements), it is kept as text.
        """
        if name is None or type_name is None or raw_text is None:
            raise ArgumentRequired('name, type_name and raw_text are required.')
        if not type_name.strip():
            raise ArgumentRequired('type_name must not be blank.')
        self._check_new(name)
        if not (is_xml_text(type_name) and is_xml_text(raw_text)):
            raise UnsupportedType(
                f'"{name}" has characters XML cannot hold.')
        try:
            content = et.fromstring(f'<{name}>{raw_text}</{name}>')
        except et.ParseError:
            content = None
        if content is None or len(content) == 0:
            content = et.Element(name)
            content.text = raw_text
        section = self._add_pair(
            et.Element(SECTION_TAG, {'name': name, 'type': type_name}),
            content)
        self._commit()
        return section

    def _build(self, name: str, value: Any,
               kind: SectionKind | str | None) -> tuple[str, et.Element]:
        """Type name and a fresh content node for `value`.

        Everything is converted here, before the document is touched.
        """
        match value:
            case CustomSection():
                if not value.type_name.strip():
                    raise ArgumentRequired('type_name must not be blank.')
                if not is_xml_text(value.type_name):
                    raise UnsupportedType(
                        f'"{name}" has characters XML cannot hold.')
                content = deepcopy(value._content)
                content.tag = name
                content.tail = None
                return value.type_name, content
            case ConfigSection():
                cls = type(value)
                values = value.properties.get_internal_values()
            case Mapping():
                cls = (SECTION_TYPES[infer_section_kind(value)] if kind is None
                       else section_class(kind))
                values = value
            case _:
                raise UnsupportedType(
                    f'A section or a mapping is expected, '
                    f'not {type(value).__name__}.')
        content = et.Element(name)
        properties = cls.properties_class(content)
        for k, v in values.items():
            properties[k] = v
        return cls.kind.value, content

    def add_or_update(self, name: str, value: Any,
                      kind: SectionKind | str | None = None) -> None:
        """Add or replace `name` with a copy of `value`.

        `value` is a section, or a mapping written as `kind`
        (inferred when omitted). `None` removes the section.
        """
        if value is None:
            self.remove(name)
            return
        check_name(name)
        if name not in self._pairs:
            self._check_new(name)
        type_name, content = self._build(name, value, kind)
        if (pair := self._pairs.get(name)) is None:
            self._add_pair(
                et.Element(SECTION_TAG, {'name': name, 'type': type_name}),
                content)
        else:
            _replace_content(pair.content, content)
            pair.declaration.set('type', type_name)
            pair.item = self._make(pair.declaration, pair.content)
        self._commit()


class ConfigSectionGroup:
    """A group owns its own sections and groups, nested one level down."""

    def __init__(self, declaration: et.Element, content: et.Element,
                 savable: Savable | None = None) -> None:
        self._content = content
        self._groups = ConfigSectionGroupSet(declaration, content, savable)
        self._sections = ConfigSectionSet(declaration, content, savable)

    @property
    def name(self) -> str:
        return self._content.tag

    @property
    def groups(self) -> 'ConfigSectionGroupSet':
        return self._groups

    @property
    def sections(self) -> ConfigSectionSet:
        return self._sections

    def __eq__(self, other: object) -> bool:
        return (isinstance(other, ConfigSectionGroup)
                and self._content is other._content)

    def __hash__(self) -> int:
        return id(self._content)

    def __str__(self) -> str:
        return et.tostring(self._content, encoding='unicode')

    def __repr__(self) -> str:
        return f'<ConfigSectionGroup [{self.name}]>'


class ConfigSectionGroupSet(_PairedSet[ConfigSectionGroup]):
    _decl_tag = GROUP_TAG

    def _make(self, declaration: et.Element,
              content: et.Element) -> ConfigSectionGroup:
        return ConfigSectionGroup(declaration, content, self._savable)

    def get_or_add(self, name: str) -> ConfigSectionGroup:
        if (pair := self._pairs.get(name)) is not None:
            return pair.item
        self._check_new(name)
        group = self._add_pair(
            et.Element(GROUP_TAG, {'name': name}), et.Element(name))
        self._commit()
        return group
