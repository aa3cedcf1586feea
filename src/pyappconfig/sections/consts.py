# -*- encoding: utf-8 -*-
# @File   : consts.py
# @Time   : 2024/11/05 20:31:44
# @Author : Kariko Lin

from enum import Enum

ROOT_TAG = 'configuration'
DECLARATIONS_TAG = 'configSections'
APP_SETTINGS_TAG = 'appSettings'
CONNECTION_STRINGS_TAG = 'connectionStrings'
SECTION_TAG = 'section'
GROUP_TAG = 'sectionGroup'

# content nodes right under the root that no section may take.
RESERVED_NAMES = (DECLARATIONS_TAG, APP_SETTINGS_TAG, CONNECTION_STRINGS_TAG)


class SectionKind(str, Enum):
    """The three standard section handlers, by canonical type name."""
    DICTIONARY = 'System.Configuration.DictionarySectionHandler'
    NAME_VALUE = 'System.Configuration.NameValueSectionHandler'
    SINGLE_TAG = 'System.Configuration.SingleTagSectionHandler'

    @classmethod
    def of(cls, type_name: str | None) -> 'SectionKind | None':
        """Also takes assembly qualified names,
        like `System.Configuration.NameValueSectionHandler, System`.

        Returns `None` for custom handlers.
        """
        if not type_name:
            return None
        try:
            return cls(type_name.split(',')[0].strip())
        except ValueError:
            return None
