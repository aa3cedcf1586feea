# -*- encoding: utf-8 -*-
# @File   : manager.py
# @Time   : 2024/11/07 23:40:18
# @Author : Kariko Lin

"""The document root and its three top-level regions.

```python
with ConfigurationManager('app.exe.config', auto_save=True) as cfg:
    cfg.app_settings.properties['theme'] = 'dark'  # saved right away.
```

Regions are looked up (or created) on first access, and share
the save policy of the manager.
"""

import logging
import sys
from io import IOBase, TextIOBase
from os import PathLike
from xml.etree import ElementTree as et

from .abstract import FileHandler, Savable
from .errors import ConfigurationClosed, UnsupportedType
from .parser import ConfigFileHandler, dumps, parse
from .props import ConnectionStringsPropertySet, NameValuePropertySet
from .props.connections import ProviderResolver
from .sections.consts import (
    APP_SETTINGS_TAG,
    CONNECTION_STRINGS_TAG,
    DECLARATIONS_TAG,
    RESERVED_NAMES,
    ROOT_TAG
)
from .sections.registry import ConfigSectionGroupSet, ConfigSectionSet, child

__all__ = [
    'ConfigurationManager', 'AppSettings', 'ConnectionStrings', 'ConfigSections'
]


class _Region:
    def __init__(self, content: et.Element) -> None:
        self._content = content

    def __eq__(self, other: object) -> bool:
        return (isinstance(other, type(self))
                and self._content is other._content)

    def __hash__(self) -> int:
        return id(self._content)

    def __str__(self) -> str:
        return et.tostring(self._content, encoding='unicode')


class AppSettings(_Region):
    def __init__(self, content: et.Element,
                 savable: Savable | None = None) -> None:
        super().__init__(content)
        self._properties = NameValuePropertySet(content, savable)

    @property
    def properties(self) -> NameValuePropertySet:
        return self._properties

    def __repr__(self) -> str:
        return f'<AppSettings {self._properties!r}>'


class ConnectionStrings(_Region):
    def __init__(self, content: et.Element,
                 savable: Savable | None = None, *,
                 resolver: ProviderResolver | None = None) -> None:
        super().__init__(content)
        self._properties = ConnectionStringsPropertySet(
            content, savable, resolver=resolver)

    @property
    def properties(self) -> ConnectionStringsPropertySet:
        return self._properties

    def __repr__(self) -> str:
        return f'<ConnectionStrings {self._properties!r}>'


class ConfigSections(_Region):
    """`<configSections>` and the content nodes right under the root.

    Section and group names share the root with the other regions,
    so `configSections`, `appSettings` and `connectionStrings`
    are never taken.
    """

    def __init__(self, declarations: et.Element, root: et.Element,
                 savable: Savable | None = None) -> None:
        super().__init__(declarations)
        self._groups = ConfigSectionGroupSet(
            declarations, root, savable, reserved=RESERVED_NAMES)
        self._sections = ConfigSectionSet(
            declarations, root, savable, reserved=RESERVED_NAMES)

    @property
    def sections(self) -> ConfigSectionSet:
        return self._sections

    @property
    def groups(self) -> ConfigSectionGroupSet:
        return self._groups

    def __repr__(self) -> str:
        return f'<ConfigSections {self._sections!r} {self._groups!r}>'


class ConfigurationManager(Savable):
    """An `app.config` like document.

    Args:
        source: where the document comes from.
            - path (`str` or `PathLike`): read if exists; `save()` writes back.
            - `FileHandler` of `Element`: the same, but your own storage.
            - opened stream (binary or text): read once, `save()` is a no-op.
            - `None`: a blank document, not bound as well.
        auto_save: save on every change made through the regions.
        encoding: codec of `source`, guessed if omitted.
        resolver: provider resolver for `connection_strings`.
        indent: indent of the saved XML.
    """

    def __init__(self, source: str | PathLike[str] | FileHandler[et.Element]
                 | IOBase | None = None, *,
                 auto_save: bool = False,
                 encoding: str | None = None,
                 resolver: ProviderResolver | None = None,
                 indent: str = '  ') -> None:
        self._auto_save = auto_save
        self._resolver = resolver
        self._indent = indent
        self._handler: FileHandler[et.Element] | None = None
        match source:
            case None:
                root = et.Element(ROOT_TAG)
            case FileHandler():
                self._handler = source
                root = source.read()
            case str() | PathLike():
                self._handler = ConfigFileHandler(
                    source, encoding, indent=indent)
                root = self._handler.read()
            case IOBase():
                root = parse(source.read(), encoding)
            case _:
                raise UnsupportedType(
                    f'Cannot load a configuration from {type(source).__name__}.')
        self._root: et.Element | None = root
        self._hash = id(root)
        self._app_settings: AppSettings | None = None
        self._connection_strings: ConnectionStrings | None = None
        self._config_sections: ConfigSections | None = None

    @classmethod
    def create_standard(cls, *, auto_save: bool = False,
                        encoding: str | None = None,
                        resolver: ProviderResolver | None = None
                        ) -> 'ConfigurationManager':
        """The one next to the running program, `<argv[0]>.config`."""
        return cls(f'{sys.argv[0]}.config', auto_save=auto_save,
                   encoding=encoding, resolver=resolver)

    @property
    def root(self) -> et.Element:
        if self._root is None:
            raise ConfigurationClosed('The configuration is closed.')
        return self._root

    @property
    def closed(self) -> bool:
        return self._root is None

    @property
    def handler(self) -> FileHandler[et.Element] | None:
        return self._handler

    @property
    def auto_save(self) -> bool:
        return self._auto_save

    @auto_save.setter
    def auto_save(self, value: bool) -> None:
        self._auto_save = value

    def _region(self, tag: str, first: bool = False) -> et.Element:
        root = self.root
        if (node := child(root, tag)) is None:
            node = et.Element(tag)
            if first:
                # declarations go before anything they declare.
                root.insert(0, node)
            else:
                root.append(node)
        return node

    @property
    def app_settings(self) -> AppSettings:
        if self._app_settings is None:
            self._app_settings = AppSettings(
                self._region(APP_SETTINGS_TAG), self)
        return self._app_settings

    @property
    def connection_strings(self) -> ConnectionStrings:
        if self._connection_strings is None:
            self._connection_strings = ConnectionStrings(
                self._region(CONNECTION_STRINGS_TAG), self,
                resolver=self._resolver)
        return self._connection_strings

    @property
    def config_sections(self) -> ConfigSections:
        if self._config_sections is None:
            self._config_sections = ConfigSections(
                self._region(DECLARATIONS_TAG, first=True), self.root, self)
        return self._config_sections

    def save(self, target: str | PathLike[str] | FileHandler[et.Element]
             | IOBase | None = None) -> None:
        """Write the document.

        Without `target`, write back to where it was read from;
        skipped if it has no such place.
        Streams are truncated before written.
        """
        root = self.root
        match target:
            case None:
                if self._handler is None:
                    logging.debug('Configuration not bound to a file, '
                                  'save skipped.')
                    return
                self._handler.write(root)
            case FileHandler():
                target.write(root)
            case str() | PathLike():
                ConfigFileHandler(target, indent=self._indent).write(root)
            case TextIOBase():
                text = dumps(root, self._indent)
                target.seek(0)
                target.truncate()
                target.write(text)
            case IOBase():
                text = dumps(root, self._indent)
                target.seek(0)
                target.truncate()
                target.write(text.encode('utf-8'))
            case _:
                raise UnsupportedType(
                    f'Cannot save a configuration to {type(target).__name__}.')

    def to_xml(self) -> str:
        return dumps(self.root, self._indent, declaration=False)

    def close(self) -> None:
        """Release the document. Nothing is saved here."""
        self._root = None
        self._app_settings = None
        self._connection_strings = None
        self._config_sections = None

    def __enter__(self) -> 'ConfigurationManager':
        return self

    def __exit__(self, *args) -> None:
        self.close()

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, ConfigurationManager):
            return False
        return self is other or (
            self._root is not None and self._root is other._root)

    def __hash__(self) -> int:
        return self._hash

    def __str__(self) -> str:
        return self.to_xml()

    def __repr__(self) -> str:
        state = 'closed' if self._root is None else (
            str(self._handler) if self._handler else 'unbound')
        return f'<ConfigurationManager ({state})>'
