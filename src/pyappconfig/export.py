# -*- encoding: utf-8 -*-
# @File   : export.py
# @Time   : 2024/11/09 16:27:05
# @Author : Kariko Lin

"""Dump a configuration to YAML, or load one back.

    ```yaml
    appSettings:
      theme: dark
    connectionStrings:
      main:
        connectionString: Data Source=app.db
        providerName: System.Data.SQLite
    configSections:
      sections:
        limits:
          type: System.Configuration.DictionarySectionHandler
          properties:
            retry: {value: '3', type: System.Int32}
        legacy:
          type: Some.Handler, Some.Assembly
          xml: <legacy><item id="1" /></legacy>
      groups:
        plugins:
          sections: {}
          groups: {}
    ```

Custom sections are kept as their whole XML, attributes included;
hand-written files may give `content` (the children only) instead.
Typed values are kept in their XML text form,
so nothing depends on how YAML reads numbers.
"""

from os import PathLike
from typing import Any, TypedDict
from xml.etree import ElementTree as et

import yaml

from .abstract import FileHandler
from .codec import TypedValue, ValueKind, decode, encode
from .errors import MalformedInput
from .manager import ConfigurationManager
from .props.connections import ProviderResolver
from .sections.consts import SectionKind
from .sections.model import (
    ConfigSection,
    CustomSection,
    DictionarySection
)
from .sections.registry import ConfigSectionGroupSet, ConfigSectionSet

__all__ = ['ConfigYamlHandler']


class _TypedPack(TypedDict):
    value: str
    type: str


class _SectionPack(TypedDict, total=False):
    type: str
    properties: dict[str, Any]
    xml: str
    content: str


class _GroupPack(TypedDict):
    sections: dict[str, _SectionPack]
    groups: dict[str, '_GroupPack']


class _ConnectionPack(TypedDict, total=False):
    connectionString: str
    providerName: str


class _ConfigPack(TypedDict, total=False):
    appSettings: dict[str, str]
    connectionStrings: dict[str, _ConnectionPack]
    configSections: _GroupPack


def _plain(value: Any) -> str | list[str]:
    # hand-written yaml may have pure digits read as int.
    if value is None:
        return ''
    if isinstance(value, list):
        return [str(i) for i in value]
    return str(value)


class ConfigYamlHandler(FileHandler[ConfigurationManager]):
    def __init__(self, filename: str | PathLike[str],
                 encoding: str = 'utf-8', *,
                 resolver: ProviderResolver | None = None) -> None:
        super().__init__(filename)
        self._codec = encoding
        self._resolver = resolver

    @staticmethod
    def __to_section(section: ConfigSection) -> _SectionPack:
        ret = _SectionPack(type=section.type_name)
        if isinstance(section, CustomSection):
            ret['xml'] = section.xml_string
        elif isinstance(section, DictionarySection):
            ret['properties'] = {}
            for k, v in section.properties.get_internal_values().items():
                text, kind = encode(v)
                ret['properties'][k] = _TypedPack(value=text, type=kind.value)
        else:
            ret['properties'] = section.properties.get_internal_values()
        return ret

    @classmethod
    def __to_group(cls, sections: ConfigSectionSet,
                   groups: ConfigSectionGroupSet) -> _GroupPack:
        return _GroupPack(
            sections={k: cls.__to_section(v) for k, v in sections.items()},
            groups={k: cls.__to_group(v.sections, v.groups)
                    for k, v in groups.items()})

    @staticmethod
    def dumps(config: ConfigurationManager) -> _ConfigPack:
        ret = _ConfigPack()
        ret['appSettings'] = dict(config.app_settings.properties)
        ret['connectionStrings'] = {}
        for k, v in config.connection_strings.properties.items():
            conn = _ConnectionPack(connectionString=v.connection_string)
            if v.provider_name is not None:
                conn['providerName'] = v.provider_name
            ret['connectionStrings'][k] = conn
        ret['configSections'] = ConfigYamlHandler.__to_group(
            config.config_sections.sections, config.config_sections.groups)
        return ret

    @staticmethod
    def __parse_section(sections: ConfigSectionSet, name: str,
                        pack: _SectionPack) -> None:
        type_name = pack.get('type') or ''
        if SectionKind.of(type_name) is None:
            if (xml := pack.get('xml')) is None:
                sections.add_custom_section(
                    name, type_name, pack.get('content') or '')
                return
            try:
                content = et.fromstring(xml)
            except et.ParseError as e:
                raise MalformedInput(f'XML of "{name}" is broken: {e}') from e
            # stored under `name`, whatever the tag in the dump is.
            sections.add_or_update(name, CustomSection(type_name, content))
            return
        section = sections.get_or_add(name, type_name)
        for k, v in (pack.get('properties') or {}).items():
            if isinstance(section, DictionarySection) and isinstance(v, dict):
                kind = ValueKind.of(v.get('type'))
                section.properties[k] = TypedValue(
                    decode(v.get('value'), v.get('type')), kind)
            else:
                section.properties[k] = _plain(v)

    @classmethod
    def __parse_group(cls, sections: ConfigSectionSet,
                      groups: ConfigSectionGroupSet, pack: _GroupPack) -> None:
        for k, v in (pack.get('sections') or {}).items():
            cls.__parse_section(sections, k, v)
        for k, v in (pack.get('groups') or {}).items():
            group = groups.get_or_add(k)
            cls.__parse_group(group.sections, group.groups, v)

    def loads(self, src: _ConfigPack | None) -> ConfigurationManager:
        ret = ConfigurationManager(resolver=self._resolver)
        if not src:
            return ret
        for k, v in (src.get('appSettings') or {}).items():
            ret.app_settings.properties[k] = _plain(v)
        for k, v in (src.get('connectionStrings') or {}).items():
            ret.connection_strings.properties.add_or_update(
                k, v.get('connectionString', ''), v.get('providerName'))
        if (sections := src.get('configSections')):
            self.__parse_group(ret.config_sections.sections,
                               ret.config_sections.groups, sections)
        return ret

    def read(self) -> ConfigurationManager:
        with open(self._fn, 'r', encoding=self._codec) as fp:
            src: _ConfigPack = yaml.load(fp, yaml.SafeLoader)
        return self.loads(src)

    def write(self, instance: ConfigurationManager) -> None:
        with open(self._fn, 'w', encoding=self._codec) as fp:
            yaml.safe_dump(self.dumps(instance), fp,
                           allow_unicode=True, sort_keys=False)
