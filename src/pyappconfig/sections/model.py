# -*- encoding: utf-8 -*-
# @File   : model.py
# @Time   : 2024/11/05 21:02:16
# @Author : Kariko Lin

"""Section variants. All of them wrap the *content* node of a section,
while the declaration belongs to `ConfigSectionSet`.

Sections got from a document share its save policy;
those made by `ConfigSection.create()` are detached (never save),
and are only copied when assigned into a document.
"""

from abc import ABCMeta
from collections.abc import Mapping, Sequence
from typing import Any, ClassVar, Generic, TypeVar
from xml.etree import ElementTree as et

from ..abstract import Savable
from ..errors import InvalidType
from ..props import (
    DictionaryPropertySet,
    NameValuePropertySet,
    PropertySet,
    SingleTagPropertySet
)
from .consts import SectionKind

__all__ = [
    'ConfigSection', 'SingleTagSection', 'NameValueSection',
    'DictionarySection', 'CustomSection',
    'SECTION_TYPES', 'infer_section_kind', 'section_class',
    'inner_xml', 'outer_xml'
]

DETACHED_TAG = 'newSection'


def inner_xml(node: et.Element) -> str:
    """Text and children of `node`, without the node itself."""
    ret = node.text or ''
    for i in node:
        ret += et.tostring(i, encoding='unicode')
    return ret


def outer_xml(node: et.Element) -> str:
    """`node` itself, without the whitespace that follows it."""
    tail, node.tail = node.tail, None
    try:
        return et.tostring(node, encoding='unicode')
    finally:
        node.tail = tail


class ConfigSection(metaclass=ABCMeta):
    kind: ClassVar[SectionKind | None] = None

    def __init__(self, type_name: str, content: et.Element) -> None:
        self._type_name = type_name
        self._content = content

    @property
    def type_name(self) -> str:
        return self._type_name

    @property
    def name(self) -> str:
        return self._content.tag

    def __eq__(self, other: object) -> bool:
        return (isinstance(other, ConfigSection)
                and self._content is other._content)

    def __hash__(self) -> int:
        return id(self._content)

    def __str__(self) -> str:
        return outer_xml(self._content)

    def __repr__(self) -> str:
        return f'<{type(self).__name__} [{self.name}] {self._type_name}>'

    @staticmethod
    def create(values: Mapping[str, Any],
               kind: SectionKind | str | None = None) -> 'ConfigSection':
        """A detached section holding a copy of `values`.

        Without `kind`, string values make a name-value section,
        otherwise a dictionary one.
        """
        cls = (SECTION_TYPES[infer_section_kind(values)] if kind is None
               else section_class(kind))
        section = cls()
        for k, v in values.items():
            section.properties[k] = v
        return section


P = TypeVar('P', bound=PropertySet)


class _PropertySection(ConfigSection, Generic[P]):
    properties_class: ClassVar[type[PropertySet]]

    def __init__(self, content: et.Element | None = None,
                 savable: Savable | None = None) -> None:
        if content is None:
            content = et.Element(DETACHED_TAG)
        super().__init__(self.kind.value, content)
        self._properties: P = self.properties_class(content, savable)

    @property
    def properties(self) -> P:
        return self._properties


class SingleTagSection(_PropertySection[SingleTagPropertySet]):
    """`<name key1="value1" key2="value2" />`"""
    kind = SectionKind.SINGLE_TAG
    properties_class = SingleTagPropertySet


class NameValueSection(_PropertySection[NameValuePropertySet]):
    kind = SectionKind.NAME_VALUE
    properties_class = NameValuePropertySet


class DictionarySection(_PropertySection[DictionaryPropertySet]):
    kind = SectionKind.DICTIONARY
    properties_class = DictionaryPropertySet


class CustomSection(ConfigSection):
    """Section of a handler we don't know. Its content is kept as is,
    only the XML text is available."""

    @property
    def xml_string(self) -> str:
        return outer_xml(self._content)

    @property
    def inner_xml(self) -> str:
        return inner_xml(self._content)


SECTION_TYPES: dict[SectionKind, type[_PropertySection]] = {
    SectionKind.SINGLE_TAG: SingleTagSection,
    SectionKind.NAME_VALUE: NameValueSection,
    SectionKind.DICTIONARY: DictionarySection,
}


def infer_section_kind(values: Mapping[str, Any]) -> SectionKind:
    for v in values.values():
        if v is None or isinstance(v, str):
            continue
        if isinstance(v, Sequence) and not isinstance(v, (bytes, bytearray)) \
                and all(isinstance(i, str) for i in v):
            continue
        return SectionKind.DICTIONARY
    return SectionKind.NAME_VALUE


def section_class(kind: SectionKind | str | type[ConfigSection]) -> type[_PropertySection]:
    """Resolve a kind, a type name or a section class."""
    if isinstance(kind, type):
        if kind in SECTION_TYPES.values():
            return kind
        raise InvalidType(f'{kind.__name__} is not a standard section.')
    if (found := SectionKind.of(kind)) is None:
        raise InvalidType(f'"{kind}" is not a standard section type.')
    return SECTION_TYPES[found]
