# -*- encoding: utf-8 -*-
# @File   : parser.py
# @Time   : 2024/11/07 22:14:53
# @Author : Kariko Lin

"""Read and write the XML configuration file itself.

Missing or zero-length files are read as an empty `<configuration />`,
so a manager can be pointed to a file that doesn't exist yet.
"""

import logging
from copy import deepcopy
from os import PathLike, remove, replace
from os.path import exists, getsize
from xml.etree import ElementTree as et

import chardet

from .abstract import FileHandler
from .errors import MalformedInput
from .sections.consts import ROOT_TAG

__all__ = ['ConfigFileHandler', 'parse', 'dumps']

# written by hand, `tostring(xml_declaration=True)` would take
# the locale encoding for `encoding='unicode'`.
XML_DECLARATION = '<?xml version="1.0" encoding="utf-8"?>'


def _decode(raw: bytes) -> str:
    codec = chardet.detect(raw)
    if codec is None or codec['encoding'] is None or codec['confidence'] < 0.8:
        codec = {'encoding': 'utf-8'}

    # fallbacks
    try:
        return raw.decode(codec['encoding'])
    except UnicodeDecodeError:
        return raw.decode('gbk')


def parse(raw: bytes | str, encoding: str | None = None) -> et.Element:
    """Parse a whole document. Blank input gives an empty root.

    Raises:
        MalformedInput: not well-formed, even after guessing the codec.
    """
    if not raw or not raw.strip():
        return et.Element(ROOT_TAG)
    try:
        if isinstance(raw, str):
            return et.fromstring(raw)
        if encoding is not None:
            return et.fromstring(raw.decode(encoding))
        # expat honors the `<?xml encoding ?>` declaration by itself.
        return et.fromstring(raw)
    except (et.ParseError, UnicodeDecodeError) as e:
        if isinstance(raw, str):
            raise MalformedInput(f'Not a well-formed document: {e}') from e
        first_error = e
    # when encoding got wrong, fallback to `chardet`.
    try:
        return et.fromstring(_decode(raw))
    except (et.ParseError, UnicodeDecodeError) as e:
        raise MalformedInput(
            f'Not a well-formed document: {first_error}') from e


def dumps(root: et.Element, indent: str = '  ', *,
          declaration: bool = True) -> str:
    """Indented text of `root`. Attribute values are written as is,
    newlines in them included (as `&#10;`).

    Raises:
        TypeError: some attribute or text is not a string.
    """
    # `indent()` only rewrites whitespace-only text, so saving twice
    # gives the same output.
    formatted = deepcopy(root)
    formatted.tail = None
    et.indent(formatted, space=indent)
    ret = et.tostring(formatted, encoding='unicode') + '\n'
    if declaration:
        ret = XML_DECLARATION + '\n' + ret
    return ret


class ConfigFileHandler(FileHandler[et.Element]):
    """Since the encoding of xml declaration is fixed here,
    this handler writes 'utf-8' only. Reading takes any codec."""

    def __init__(self, filename: str | PathLike[str],
                 encoding: str | None = None, *, indent: str = '  ') -> None:
        super().__init__(filename)
        self._codec = encoding
        self._indent = indent

    def read(self) -> et.Element:
        if not exists(self._fn) or getsize(self._fn) == 0:
            logging.debug(f'{self._fn} is empty or missing, start from blank.')
            return et.Element(ROOT_TAG)
        with open(self._fn, 'rb') as fp:
            raw = fp.read()
        root = parse(raw, self._codec)
        if root.tag != ROOT_TAG:
            logging.warning(
                f'{self._fn}: root node is <{root.tag}>, not <{ROOT_TAG}>.')
        return root

    def write(self, instance: et.Element) -> None:
        """Serialize first, then swap the file in,
        so a failed save never leaves a half-written file."""
        text = dumps(instance, self._indent)
        tmp = self._fn + '.tmp'
        try:
            with open(tmp, 'w', encoding='utf-8') as fp:
                fp.write(text)
            replace(tmp, self._fn)
        except OSError:
            if exists(tmp):
                remove(tmp)
            raise
        logging.debug(f'Configuration saved to {self._fn}.')

    def __str__(self) -> str:
        ret = 'Configuration file: ' + super().__str__()
        if self._codec is not None:
            ret += f' ({self._codec})'
        return ret
