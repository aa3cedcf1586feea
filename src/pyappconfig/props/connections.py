# -*- encoding: utf-8 -*-
# @File   : connections.py
# @Time   : 2024/11/04 23:18:05
# @Author : Kariko Lin

"""`connectionStrings` entries and DB-API connections made from them.

    ```xml
    <connectionStrings>
      <add name="main" connectionString="Data Source=app.db"
           providerName="System.Data.SQLite" />
    </connectionStrings>
    ```

The provider names are the ADO.NET invariant names people already
write in these files. We don't instantiate anything by type name,
just look the name up in a table of small factories (or in whatever
resolver the caller gives).
"""

import sqlite3
from collections.abc import Callable, Mapping
from importlib import import_module
from re import compile as regex
from typing import Any
from xml.etree import ElementTree as et

from ..abstract import Savable
from ..errors import ArgumentRequired, ProviderNotFound, UnsupportedType
from .model import _AddNodeSet, check_key, check_text

__all__ = [
    'ConnectionFactory', 'ProviderResolver', 'DEFAULT_PROVIDERS',
    'default_resolver', 'parse_connection_string',
    'ConnectionStringsValue', 'ConnectionStringsPropertySet'
]

ConnectionFactory = Callable[[str], Any]
ProviderResolver = Callable[[str | None], ConnectionFactory]

# key=value; key='va;lue'; key="va""lue"
_PAIR = regex(
    r'\s*([^=;]+?)\s*=\s*'
    r'("(?:[^"]|"")*"|\'(?:[^\']|\'\')*\'|[^;]*)\s*(?:;|$)')


def parse_connection_string(text: str) -> dict[str, str]:
    """Split an ADO.NET styled connection string.

    Keys are lower-cased; quoted values are unquoted.
    """
    ret: dict[str, str] = {}
    pos = 0
    while pos < len(text):
        if text[pos] in '; \t':
            pos += 1
            continue
        m = _PAIR.match(text, pos)
        if m is None or m.end() == pos:
            break
        key, val = m.group(1).lower(), m.group(2).strip()
        if len(val) > 1 and val[0] == val[-1] and val[0] in '"\'':
            val = val[1:-1].replace(val[0] * 2, val[0])
        ret[key] = val
        pos = m.end()
    return ret


def _pick(pairs: Mapping[str, str], *keys: str) -> str | None:
    for k in keys:
        if k in pairs:
            return pairs[k]
    return None


def _kwargs(pairs: Mapping[str, str], table: Mapping[str, tuple[str, ...]]) -> dict[str, str]:
    ret = {}
    for arg, keys in table.items():
        if (val := _pick(pairs, *keys)) is not None:
            ret[arg] = val
    return ret


_SERVER_KEYS = {
    'host': ('server', 'data source', 'host', 'address', 'addr'),
    'user': ('user id', 'uid', 'user', 'username', 'user name'),
    'password': ('password', 'pwd'),
    'database': ('database', 'initial catalog'),
}


def _driver(name: str):
    # drivers other than sqlite3 are optional.
    try:
        return import_module(name)
    except ImportError as e:
        raise ProviderNotFound(f'Driver "{name}" is not installed.') from e


def _sqlite(conn_str: str) -> sqlite3.Connection:
    pairs = parse_connection_string(conn_str)
    return sqlite3.connect(
        _pick(pairs, 'data source', 'datasource', 'filename') or ':memory:')


def _odbc(conn_str: str) -> Any:
    return _driver('pyodbc').connect(conn_str)


def _oledb(conn_str: str) -> Any:
    return _driver('adodbapi').connect(conn_str)


def _mssql(conn_str: str) -> Any:
    kw = _kwargs(parse_connection_string(conn_str), _SERVER_KEYS)
    if 'host' in kw:
        kw['server'] = kw.pop('host')
    return _driver('pymssql').connect(**kw)


def _mysql(conn_str: str) -> Any:
    pairs = parse_connection_string(conn_str)
    kw = _kwargs(pairs, _SERVER_KEYS)
    if (port := _pick(pairs, 'port')) is not None:
        kw['port'] = int(port)
    return _driver('pymysql').connect(**kw)


def _postgres(conn_str: str) -> Any:
    pairs = parse_connection_string(conn_str)
    kw = _kwargs(pairs, _SERVER_KEYS)
    if 'database' in kw:
        kw['dbname'] = kw.pop('database')
    if (port := _pick(pairs, 'port')) is not None:
        kw['port'] = port
    return _driver('psycopg').connect(**kw)


def _oracle(conn_str: str) -> Any:
    pairs = parse_connection_string(conn_str)
    return _driver('oracledb').connect(
        user=_pick(pairs, 'user id', 'uid', 'user'),
        password=_pick(pairs, 'password', 'pwd'),
        dsn=_pick(pairs, 'data source', 'dsn'))


DEFAULT_PROVIDERS: dict[str, ConnectionFactory] = {
    'System.Data.SQLite': _sqlite,
    'Microsoft.Data.Sqlite': _sqlite,
    'System.Data.Odbc': _odbc,
    'System.Data.OleDb': _oledb,
    'System.Data.SqlClient': _mssql,
    'Microsoft.Data.SqlClient': _mssql,
    'System.Data.OracleClient': _oracle,
    'Oracle.DataAccess.Client': _oracle,
    'Oracle.ManagedDataAccess.Client': _oracle,
    'MySql.Data.MySqlClient': _mysql,
    'MySqlConnector': _mysql,
    'Npgsql': _postgres,
}


def default_resolver(provider_name: str | None) -> ConnectionFactory:
    if not provider_name:
        raise ProviderNotFound('The entry has no providerName.')
    try:
        return DEFAULT_PROVIDERS[provider_name]
    except KeyError as e:
        raise ProviderNotFound(
            f'Unknown provider "{provider_name}".') from e


class ConnectionStringsValue:
    """A `(connection_string, provider_name)` pair.

    `connection` is made on first access, then kept.
    """
    def __init__(self, connection_string: str,
                 provider_name: str | None = None, *,
                 resolver: ProviderResolver | None = None) -> None:
        if connection_string is None:
            raise ArgumentRequired('connection_string is required.')
        self._conn_str = connection_string
        self._provider = provider_name
        self._resolver = resolver or default_resolver
        self._connection: Any = None
        self._generated = False

    @property
    def connection_string(self) -> str:
        return self._conn_str

    @property
    def provider_name(self) -> str | None:
        return self._provider

    @property
    def connection(self) -> Any:
        """Raises:
            ProviderNotFound: no `provider_name`, or no factory for it.
        """
        if not self._generated:
            factory = self._resolver(self._provider)
            self._connection = factory(self._conn_str)
            self._generated = True
        return self._connection

    def __eq__(self, other: object) -> bool:
        return (isinstance(other, ConnectionStringsValue)
                and self._conn_str == other._conn_str
                and self._provider == other._provider)

    def __hash__(self) -> int:
        return hash((self._conn_str, self._provider))

    def __repr__(self) -> str:
        return (f'ConnectionStringsValue({self._conn_str!r}, '
                f'{self._provider!r})')


class ConnectionStringsPropertySet(_AddNodeSet[ConnectionStringsValue]):
    """`<add name connectionString providerName />` children."""
    _key_attr = 'name'

    def __init__(self, content: et.Element,
                 savable: Savable | None = None, *,
                 resolver: ProviderResolver | None = None) -> None:
        self._resolver = resolver or default_resolver
        super().__init__(content, savable)

    def _parse(self, node: et.Element) -> ConnectionStringsValue:
        return ConnectionStringsValue(
            node.get('connectionString', ''),
            node.get('providerName'),
            resolver=self._resolver)

    def _fill(self, node: et.Element, value: ConnectionStringsValue) -> None:
        node.set('connectionString', value.connection_string)
        if value.provider_name is None:
            node.attrib.pop('providerName', None)
        else:
            node.set('providerName', value.provider_name)

    def _normalize(self, key: str, value: Any) -> ConnectionStringsValue:
        match value:
            case ConnectionStringsValue():
                conn_str, provider = value.connection_string, value.provider_name
            case str():
                conn_str, provider = value, None
            case (str() as conn_str, str() | None as provider):
                pass
            case _:
                raise UnsupportedType(
                    f'"{key}" takes a ConnectionStringsValue, '
                    f'not {type(value).__name__}.')
        check_text(key, conn_str)
        if provider is not None:
            check_text(key, provider)
        # fresh one, so the connection is bound to our resolver.
        return ConnectionStringsValue(
            conn_str, provider, resolver=self._resolver)

    def add_or_update(self, name: str, connection_string: str | None,
                      provider_name: str | None = None) -> None:
        """Both `None` removes the entry."""
        check_key(name)
        if connection_string is None:
            if provider_name is not None:
                raise ArgumentRequired('connection_string is required.')
            self.remove(name)
            return
        self.set(name, ConnectionStringsValue(connection_string, provider_name))

    def contains_name(self, name: str) -> bool:
        return name in self._values

    def get_connection(self, name: str) -> Any:
        """The (memoized) connection of `name`, `None` if not found."""
        if (value := self._values.get(name)) is None:
            return None
        return value.connection
