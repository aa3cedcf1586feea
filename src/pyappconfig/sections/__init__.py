# -*- encoding: utf-8 -*-
# @File   : __init__.py
# @Time   : 2024/11/05 20:30:02
# @Author : Kariko Lin

from .consts import SectionKind
from .model import (
    ConfigSection,
    SingleTagSection,
    NameValueSection,
    DictionarySection,
    CustomSection
)
from .registry import (
    ConfigSectionSet,
    ConfigSectionGroupSet,
    ConfigSectionGroup
)
