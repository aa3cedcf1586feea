# -*- encoding: utf-8 -*-
# @File   : model.py
# @Time   : 2024/11/03 15:12:48
# @Author : Kariko Lin

"""Property sets, i.e. flat key-value views over document nodes.

Every set keeps a dict in memory and the nodes in the document,
and *always* changes both together. After each change the save
policy of the owning document gets a chance to save.

    ```xml
    <single a="1" b="2" />          <!-- SingleTagPropertySet -->
    <appSettings>                   <!-- NameValuePropertySet -->
      <add key="a" value="1,2" />
    </appSettings>
    <dict>                          <!-- DictionaryPropertySet -->
      <add key="a" value="1" type="System.Int32" />
    </dict>
    ```
"""

import warnings
from abc import abstractmethod
from collections.abc import Iterator, MutableMapping, Sequence
from typing import Any, TypeVar
from xml.etree import ElementTree as et

from ..abstract import Savable
from ..codec import (
    TypedValue,
    ValueKind,
    decode,
    encode,
    is_xml_name,
    is_xml_text
)
from ..errors import ArgumentRequired, InvalidKey, UnsupportedType

__all__ = [
    'PropertySet', 'check_key', 'check_text',
    'SingleTagPropertySet', 'NameValuePropertySet', 'DictionaryPropertySet'
]


def check_key(key: str | None) -> None:
    if key is None or key == '':
        raise ArgumentRequired('A non-empty key is required.')
    if not is_xml_text(key):
        raise InvalidKey(f'{key!r} has characters XML cannot hold.')


def check_text(key: str, text: str) -> str:
    if not is_xml_text(text):
        raise UnsupportedType(
            f'Value of "{key}" has characters XML cannot hold: {text!r}.')
    return text


V = TypeVar('V')


class PropertySet(MutableMapping[str, V]):
    """Base of the property sets.

    Assigning `None` removes the key (if any), just like `remove()`.
    """
    def __init__(self, content: et.Element,
                 savable: Savable | None = None) -> None:
        self._content = content
        # None for detached sets, which never save.
        self._savable = savable
        self._values: dict[str, V] = {}
        self._load()

    @abstractmethod
    def _load(self) -> None:
        """Fill `self._values` from the backing node."""
        raise NotImplementedError

    @abstractmethod
    def _write(self, key: str, value: V) -> None:
        """Create or replace the backing node of `key`."""
        raise NotImplementedError

    @abstractmethod
    def _erase(self, key: str) -> None:
        raise NotImplementedError

    @abstractmethod
    def _erase_all(self) -> None:
        raise NotImplementedError

    def _normalize(self, key: str, value: Any) -> V:
        """Validate before anything is touched."""
        return value

    def _commit(self) -> None:
        if self._savable is not None:
            self._savable.commit()

    def __getitem__(self, key: str) -> V:
        return self._values[key]

    def __setitem__(self, key: str, value: Any) -> None:
        self.set(key, value)

    def __delitem__(self, key: str) -> None:
        if not self.remove(key):
            raise KeyError(key)

    def __contains__(self, key: object) -> bool:
        return key in self._values

    def __iter__(self) -> Iterator[str]:
        return iter(self._values)

    def __len__(self) -> int:
        return len(self._values)

    def __repr__(self) -> str:
        return '<%s { .cnt = %d }>' % (type(self).__name__, len(self))

    def __str__(self) -> str:
        return et.tostring(self._content, encoding='unicode')

    def set(self, key: str, value: Any) -> None:
        check_key(key)
        if value is None:
            self.remove(key)
            return
        value = self._normalize(key, value)
        self._write(key, value)
        self._values[key] = value
        self._commit()

    def remove(self, key: str) -> bool:
        """Returns `True` if `key` existed and got removed."""
        if key not in self._values:
            return False
        self._erase(key)
        del self._values[key]
        self._commit()
        return True

    def clear(self) -> None:
        """Drop every entry at once (and save once)."""
        self._erase_all()
        self._values.clear()
        self._commit()

    def contains_key(self, key: str) -> bool:
        return key in self._values

    def get_internal_values(self) -> dict[str, V]:
        """A copy of the raw values, for copying into another section."""
        return self._values.copy()


class SingleTagPropertySet(PropertySet[str]):
    """Attributes right on the content node. Always strings."""

    def _load(self) -> None:
        self._values.update(self._content.attrib)

    def _normalize(self, key: str, value: Any) -> str:
        if not is_xml_name(key):
            raise InvalidKey(f'"{key}" is not a valid attribute name.')
        if not isinstance(value, str):
            raise UnsupportedType(
                f'"{key}" only takes strings, not {type(value).__name__}.')
        return check_text(key, value)

    def _write(self, key: str, value: str) -> None:
        self._content.set(key, value)

    def _erase(self, key: str) -> None:
        del self._content.attrib[key]

    def _erase_all(self) -> None:
        self._content.attrib.clear()


class _AddNodeSet(PropertySet[V]):
    """Sets backed by `<add key=".." ... />` children,
    or `<add name=".." ... />` ones as `_key_attr` says."""
    _key_attr = 'key'

    def __init__(self, content: et.Element,
                 savable: Savable | None = None) -> None:
        self._nodes: dict[str, et.Element] = {}
        super().__init__(content, savable)

    @abstractmethod
    def _parse(self, node: et.Element) -> V:
        raise NotImplementedError

    @abstractmethod
    def _fill(self, node: et.Element, value: V) -> None:
        raise NotImplementedError

    def _load(self) -> None:
        for node in self._content.findall('add'):
            key = node.get(self._key_attr)
            if key is None:
                warnings.warn(
                    f'<{self._content.tag}> has an <add> '
                    f'without {self._key_attr}.')
                continue
            if key in self._nodes:
                # later one wins, as the framework reads it.
                warnings.warn(
                    f'<{self._content.tag}> declares "{key}" more than once, '
                    'only the last one is kept.')
                self._content.remove(self._nodes[key])
            self._values[key] = self._parse(node)
            self._nodes[key] = node

    def _write(self, key: str, value: V) -> None:
        if (node := self._nodes.get(key)) is None:
            node = et.SubElement(self._content, 'add', {self._key_attr: key})
            self._nodes[key] = node
        self._fill(node, value)

    def _erase(self, key: str) -> None:
        self._content.remove(self._nodes.pop(key))

    def _erase_all(self) -> None:
        for node in self._nodes.values():
            self._content.remove(node)
        self._nodes.clear()


class NameValuePropertySet(_AddNodeSet[str]):
    """`<add key value />` pairs, the shape of `appSettings`.

    Note: sequences are stored comma joined and `get_list()` splits
    them again, so values containing commas won't survive that trip.
    """

    def _parse(self, node: et.Element) -> str:
        return node.get('value', '')

    def _fill(self, node: et.Element, value: str) -> None:
        node.set('value', value)

    def _normalize(self, key: str, value: Any) -> str:
        if isinstance(value, str):
            return check_text(key, value)
        if isinstance(value, Sequence) and all(
                isinstance(i, str) for i in value):
            if any(',' in i for i in value):
                warnings.warn(
                    f'Some items of "{key}" contain commas, '
                    '`get_list()` would split them apart.')
            return check_text(key, ','.join(value))
        raise UnsupportedType(
            f'"{key}" takes a string or strings, not {type(value).__name__}.')

    def add_or_update(self, key: str, value: str | Sequence[str] | None) -> None:
        self.set(key, value)

    def add_or_merge(self, key: str, value: str | Sequence[str] | None) -> None:
        """Like `add_or_update()`, but append to the old value by comma."""
        check_key(key)
        if value is None:
            self.remove(key)
            return
        value = self._normalize(key, value)
        if (old := self._values.get(key)) is not None:
            value = f'{old},{value}'
        self.set(key, value)

    def get_list(self, key: str) -> list[str] | None:
        if key not in self._values:
            return None
        return self._values[key].split(',')


class DictionaryPropertySet(_AddNodeSet[TypedValue]):
    """`<add key value type />` children with typed values.

    Reading gives plain Python values; see `get_typed()` for the kind.
    """

    def _parse(self, node: et.Element) -> TypedValue:
        kind = ValueKind.of(node.get('type'))
        return TypedValue(decode(node.get('value'), node.get('type')), kind)

    def _fill(self, node: et.Element, value: TypedValue) -> None:
        text, kind = encode(value)
        node.set('value', text)
        node.set('type', kind.value)

    def _normalize(self, key: str, value: Any) -> TypedValue:
        text, kind = encode(value)
        check_text(key, text)
        # keep what a reload would give, e.g. narrowed float32.
        return TypedValue(decode(text, kind), kind)

    def __getitem__(self, key: str) -> Any:
        return self._values[key].value

    def add_or_update(self, key: str, value: Any,
                      kind: ValueKind | str | None = None) -> None:
        if value is not None and kind is not None:
            value = TypedValue(value, kind)
        self.set(key, value)

    def get_typed(self, key: str) -> TypedValue | None:
        return self._values.get(key)
