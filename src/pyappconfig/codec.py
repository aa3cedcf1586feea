# -*- encoding: utf-8 -*-
# @File   : codec.py
# @Time   : 2024/11/02 22:05:37
# @Author : Kariko Lin

"""Typed values of dictionary sections.

Each `<add>` of a dictionary section carries `value` in text
and `type` in .NET full type name, e.g.

    ```xml
    <add key="retry" value="3" type="System.Int32" />
    <add key="salt" value="010AFF" type="System.Byte[]" />
    ```

No `type` (or a blank one) means `System.String`.
"""

from decimal import Decimal, InvalidOperation
from enum import Enum
from math import inf, isinf, isnan, nan
from re import compile as regex
from struct import pack, unpack
from typing import Any, NamedTuple

from .errors import ArgumentRequired, InvalidType, MalformedInput, UnsupportedType

__all__ = [
    'ValueKind', 'TypedValue',
    'infer_kind', 'encode', 'decode', 'bytes_hex', 'hex_bytes',
    'is_xml_name', 'is_xml_text'
]


class ValueKind(str, Enum):
    BOOLEAN = 'System.Boolean'
    CHAR = 'System.Char'
    INT8 = 'System.SByte'
    UINT8 = 'System.Byte'
    INT16 = 'System.Int16'
    UINT16 = 'System.UInt16'
    INT32 = 'System.Int32'
    UINT32 = 'System.UInt32'
    INT64 = 'System.Int64'
    UINT64 = 'System.UInt64'
    FLOAT32 = 'System.Single'
    FLOAT64 = 'System.Double'
    DECIMAL = 'System.Decimal'
    STRING = 'System.String'
    BYTES = 'System.Byte[]'

    @classmethod
    def of(cls, type_name: str | None) -> 'ValueKind | None':
        """Kind of a `type` attribute. Blank means string,
        unknown names give `None`."""
        if type_name is None or not type_name.strip():
            return cls.STRING
        try:
            return cls(type_name)
        except ValueError:
            return None


class TypedValue(NamedTuple):
    value: Any
    kind: ValueKind


_INT_RANGES: dict[ValueKind, tuple[int, int]] = {
    ValueKind.INT8: (-1 << 7, (1 << 7) - 1),
    ValueKind.UINT8: (0, (1 << 8) - 1),
    ValueKind.INT16: (-1 << 15, (1 << 15) - 1),
    ValueKind.UINT16: (0, (1 << 16) - 1),
    ValueKind.INT32: (-1 << 31, (1 << 31) - 1),
    ValueKind.UINT32: (0, (1 << 32) - 1),
    ValueKind.INT64: (-1 << 63, (1 << 63) - 1),
    ValueKind.UINT64: (0, (1 << 64) - 1),
}
# System.Decimal: 96-bit integer with a scale of 0..28.
_DECIMAL_MAX = Decimal((1 << 96) - 1)

# ASCII digits only, `\d` would also take other scripts.
_INTEGER = regex(r'\s*[+-]?[0-9]+\s*')
_DECIMAL = regex(r'\s*[+-]?([0-9]+(\.[0-9]*)?|\.[0-9]+)\s*')
_FLOAT = regex(r'\s*[+-]?([0-9]+(\.[0-9]*)?|\.[0-9]+)([eE][+-]?[0-9]+)?\s*')
_HEX = regex(r'([0-9A-Fa-f]{2})*')
_FLOAT_NAMES = {
    'infinity': inf, '+infinity': inf, '-infinity': -inf,
    'inf': inf, '+inf': inf, '-inf': -inf,
    'nan': nan
}

# XML 1.0 `NameStartChar` / `NameChar`, without ':' (no namespaces here).
_NAME_START = (
    'A-Z_a-z\\u00C0-\\u00D6\\u00D8-\\u00F6\\u00F8-\\u02FF\\u0370-\\u037D'
    '\\u037F-\\u1FFF\\u200C-\\u200D\\u2070-\\u218F\\u2C00-\\u2FEF'
    '\\u3001-\\uD7FF\\uF900-\\uFDCF\\uFDF0-\\uFFFD\\U00010000-\\U000EFFFF')
_NAME_CHAR = _NAME_START + '\\-.0-9\\u00B7\\u0300-\\u036F\\u203F-\\u2040'
_XML_NAME = regex(f'[{_NAME_START}][{_NAME_CHAR}]*')
_XML_ILLEGAL = regex(
    '[^\\t\\n\\r\\u0020-\\uD7FF\\uE000-\\uFFFD\\U00010000-\\U0010FFFF]')


def is_xml_name(text: str) -> bool:
    """Usable as a tag or attribute name."""
    return _XML_NAME.fullmatch(text) is not None


def is_xml_text(text: str) -> bool:
    """No characters XML 1.0 can't hold, e.g. `\\x01`."""
    return _XML_ILLEGAL.search(text) is None


def bytes_hex(data: bytes | bytearray) -> str:
    """`b'\\x01\\x0a\\xff'` -> `'010AFF'`."""
    return bytes(data).hex().upper()


def hex_bytes(text: str) -> bytes:
    """`'010AFF'` -> `b'\\x01\\x0a\\xff'`."""
    if _HEX.fullmatch(text) is None:
        raise MalformedInput(f'"{text}" is not an even-length hex string.')
    return bytes.fromhex(text)


def _to_single(value: float) -> float:
    try:
        return unpack('<f', pack('<f', value))[0]
    except OverflowError as e:
        raise UnsupportedType(
            f'{value!r} is out of range of {ValueKind.FLOAT32.value}.') from e


def _float_text(value: float) -> str:
    # what .NET writes for the non-finite ones.
    if isnan(value):
        return 'NaN'
    if isinf(value):
        return 'Infinity' if value > 0 else '-Infinity'
    return repr(value)


def infer_kind(value: Any) -> ValueKind:
    """Pick a kind for a plain Python value."""
    match value:
        case TypedValue():
            return value.kind
        case bool():
            return ValueKind.BOOLEAN
        case int():
            for kind in (ValueKind.INT32, ValueKind.INT64, ValueKind.UINT64):
                low, high = _INT_RANGES[kind]
                if low <= value <= high:
                    return kind
            raise UnsupportedType(f'{value} does not fit in 64 bits.')
        case float():
            return ValueKind.FLOAT64
        case Decimal():
            return ValueKind.DECIMAL
        case str():
            return ValueKind.STRING
        case bytes() | bytearray():
            return ValueKind.BYTES
        case _:
            raise UnsupportedType(
                f'Values of {type(value).__name__} are not supported.')


def _unsupported(value: Any, kind: ValueKind) -> UnsupportedType:
    return UnsupportedType(f'{value!r} cannot be stored as {kind.value}.')


def encode(value: Any, kind: ValueKind | str | None = None) -> tuple[str, ValueKind]:
    """Convert a value to its `(text, kind)` form.

    Raises:
        UnsupportedType: value of other types, or out of range of `kind`.
        InvalidType: `kind` is not a known type name.
    """
    if isinstance(value, TypedValue):
        if kind is None:
            kind = value.kind
        value = value.value
    if value is None:
        raise ArgumentRequired('Cannot encode `None`.')
    if kind is None:
        kind = infer_kind(value)
    elif (found := ValueKind.of(kind)) is None:
        raise InvalidType(f'Unknown value type "{kind}".')
    else:
        kind = found

    is_int = isinstance(value, int) and not isinstance(value, bool)
    match kind:
        case ValueKind.BOOLEAN:
            if not isinstance(value, bool):
                raise _unsupported(value, kind)
            return ('True' if value else 'False'), kind
        case ValueKind.CHAR:
            if not isinstance(value, str) or len(value) != 1:
                raise _unsupported(value, kind)
            return value, kind
        case ValueKind.STRING:
            if not isinstance(value, str):
                raise _unsupported(value, kind)
            return value, kind
        case ValueKind.BYTES:
            if not isinstance(value, (bytes, bytearray)):
                raise _unsupported(value, kind)
            return bytes_hex(value), kind
        case ValueKind.FLOAT32 | ValueKind.FLOAT64:
            if not (is_int or isinstance(value, float)):
                raise _unsupported(value, kind)
            value = float(value)
            if kind is ValueKind.FLOAT32:
                value = _to_single(value)
            return _float_text(value), kind
        case ValueKind.DECIMAL:
            if is_int:
                value = Decimal(value)
            if not isinstance(value, Decimal) or not value.is_finite():
                raise _unsupported(value, kind)
            if abs(value) > _DECIMAL_MAX:
                raise _unsupported(value, kind)
            return format(value, 'f'), kind
        case _:
            low, high = _INT_RANGES[kind]
            if not is_int or not low <= value <= high:
                raise _unsupported(value, kind)
            return str(value), kind


def decode(text: str | None, type_name: ValueKind | str | None = None) -> Any:
    """Convert stored text back to a Python value.

    Raises:
        InvalidType: unknown `type_name`.
        MalformedInput: `text` is not valid for the kind.
    """
    kind = ValueKind.of(type_name)
    if kind is None:
        raise InvalidType(f'Unknown value type "{type_name}".')
    if text is None:
        raise ArgumentRequired(f'Missing text of a {kind.value} value.')

    match kind:
        case ValueKind.STRING:
            return text
        case ValueKind.BOOLEAN:
            match text.strip().lower():
                case 'true':
                    return True
                case 'false':
                    return False
            raise MalformedInput(f'"{text}" is not a boolean.')
        case ValueKind.CHAR:
            if len(text) != 1:
                raise MalformedInput(f'"{text}" is not a single character.')
            return text
        case ValueKind.BYTES:
            return hex_bytes(text)
        case ValueKind.FLOAT32 | ValueKind.FLOAT64:
            if (special := _FLOAT_NAMES.get(text.strip().lower())) is not None:
                return special
            if _FLOAT.fullmatch(text) is None:
                raise MalformedInput(f'"{text}" is not a {kind.value}.')
            value = float(text)
            if kind is ValueKind.FLOAT32:
                try:
                    value = unpack('<f', pack('<f', value))[0]
                except OverflowError as e:
                    raise MalformedInput(
                        f'"{text}" is out of range of {kind.value}.') from e
            return value
        case ValueKind.DECIMAL:
            if _DECIMAL.fullmatch(text) is None:
                raise MalformedInput(f'"{text}" is not a {kind.value}.')
            try:
                value = Decimal(text.strip())
            except InvalidOperation as e:
                raise MalformedInput(f'"{text}" is not a {kind.value}.') from e
            if abs(value) > _DECIMAL_MAX:
                raise MalformedInput(f'"{text}" is out of range of {kind.value}.')
            return value
        case _:
            if _INTEGER.fullmatch(text) is None:
                raise MalformedInput(f'"{text}" is not a {kind.value}.')
            value = int(text)
            low, high = _INT_RANGES[kind]
            if not low <= value <= high:
                raise MalformedInput(f'"{text}" is out of range of {kind.value}.')
            return value
