# -*- encoding: utf-8 -*-
# @File   : __init__.py
# @Time   : 2024/11/03 15:10:21
# @Author : Kariko Lin

from .model import (
    PropertySet,
    SingleTagPropertySet,
    NameValuePropertySet,
    DictionaryPropertySet
)
from .connections import (
    ConnectionStringsValue,
    ConnectionStringsPropertySet,
    DEFAULT_PROVIDERS,
    default_resolver,
    parse_connection_string
)
