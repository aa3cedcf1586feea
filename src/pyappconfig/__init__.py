# -*- encoding: utf-8 -*-
# @File   : __init__.py
# @Time   : 2024/11/02 20:15:46
# @Author : Kariko Lin

import logging

from .abstract import FileHandler, Savable
from .codec import TypedValue, ValueKind
from .errors import (
    ConfigurationError,
    ArgumentRequired,
    InvalidKey,
    DuplicateKey,
    InvalidType,
    UnsupportedType,
    MalformedInput,
    ProviderNotFound,
    ConfigurationClosed
)
from .props import (
    SingleTagPropertySet,
    NameValuePropertySet,
    DictionaryPropertySet,
    ConnectionStringsValue,
    ConnectionStringsPropertySet
)
from .sections import (
    SectionKind,
    ConfigSection,
    SingleTagSection,
    NameValueSection,
    DictionarySection,
    CustomSection,
    ConfigSectionSet,
    ConfigSectionGroupSet,
    ConfigSectionGroup
)
from .parser import ConfigFileHandler
from .manager import (
    ConfigurationManager,
    AppSettings,
    ConnectionStrings,
    ConfigSections
)
from .export import ConfigYamlHandler

__all__ = [
    'FileHandler', 'Savable', 'TypedValue', 'ValueKind',
    'ConfigurationError', 'ArgumentRequired', 'InvalidKey', 'DuplicateKey',
    'InvalidType', 'UnsupportedType', 'MalformedInput', 'ProviderNotFound',
    'ConfigurationClosed',
    'SingleTagPropertySet', 'NameValuePropertySet', 'DictionaryPropertySet',
    'ConnectionStringsValue', 'ConnectionStringsPropertySet',
    'SectionKind', 'ConfigSection', 'SingleTagSection', 'NameValueSection',
    'DictionarySection', 'CustomSection',
    'ConfigSectionSet', 'ConfigSectionGroupSet', 'ConfigSectionGroup',
    'ConfigFileHandler', 'ConfigYamlHandler',
    'ConfigurationManager', 'AppSettings', 'ConnectionStrings', 'ConfigSections'
]

logging.basicConfig(level=logging.INFO,
                    format='[%(asctime)s] %(levelname)s: %(message)s')
