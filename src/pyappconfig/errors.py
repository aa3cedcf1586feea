# -*- encoding: utf-8 -*-
# @File   : errors.py
# @Time   : 2024/11/02 21:40:12
# @Author : Kariko Lin

__all__ = [
    'ConfigurationError',
    'ArgumentRequired', 'InvalidKey', 'DuplicateKey',
    'InvalidType', 'UnsupportedType', 'MalformedInput',
    'ProviderNotFound', 'ConfigurationClosed'
]


class ConfigurationError(Exception):
    """Base of all errors raised by this package."""
    pass


class ArgumentRequired(ConfigurationError, ValueError):
    """A required key, name or value was `None` (or blank)."""
    pass


class InvalidKey(ConfigurationError, ValueError):
    """A key or name contains characters not allowed in the document."""
    pass


class DuplicateKey(ConfigurationError, ValueError):
    """The specified key already exists."""
    pass


class InvalidType(ConfigurationError, TypeError):
    """Typed retrieval mismatch, or an unknown type name in the document."""
    pass


class UnsupportedType(ConfigurationError, TypeError):
    """The value cannot be stored as any of the supported value kinds."""
    pass


class MalformedInput(ConfigurationError, ValueError):
    """Text that should be hex, numeric or XML could not be parsed."""
    pass


class ProviderNotFound(ConfigurationError, LookupError):
    """No connection factory for the given provider name."""
    pass


class ConfigurationClosed(ConfigurationError, ValueError):
    """The document has been released by `close()`."""
    pass
