"""
Vertica dialect adapter.

Translates a generic connect/execute/introspect contract into vertica-python
calls and Vertica SQL, and reports column metadata, including decoded
default values, from the Vertica catalog.

Catalog operations can be called either as:
- Module functions: db.list_columns(cn, 'orders')
- VerticaAdapter methods: cn.list_columns('orders')
"""
__version__ = '0.1.0'

from typing import Any

from vertica_adapter.connection import VerticaAdapter, connect, load_driver
from vertica_adapter.defaults import extract_value_from_default
from vertica_adapter.exceptions import ConfigurationError, DatabaseError
from vertica_adapter.exceptions import DriverUnavailableError
from vertica_adapter.introspection import ColumnDescriptor
from vertica_adapter.options import VerticaOptions, iterdict_data_loader
from vertica_adapter.options import pandas_data_loader
from vertica_adapter.quoting import quote_identifier_as_literal
from vertica_adapter.quoting import quote_table_reference
from vertica_adapter.schema import SchemaContext, SchemaResolver
from vertica_adapter.types import NATIVE_DATABASE_TYPES, native_type_mapping


def execute(cn: VerticaAdapter, sql: str) -> list[dict] | None:
    """Execute a statement and return its rows, if any.
    """
    return cn.execute(sql)


def select(cn: VerticaAdapter, sql: str, **kwargs: Any) -> Any:
    """Execute a query and load the rows with the connection's data loader.
    """
    return cn.select(sql, **kwargs)


def list_columns(cn: VerticaAdapter, table: str, bypass_cache: bool = False) -> list[ColumnDescriptor]:
    """Get column metadata for a table.
    """
    return cn.list_columns(table, bypass_cache=bypass_cache)


def list_tables(cn: VerticaAdapter, bypass_cache: bool = False) -> list[str]:
    """Get the tables of the connection's default schema.
    """
    return cn.list_tables(bypass_cache=bypass_cache)


def table_exists(cn: VerticaAdapter, name: str) -> bool:
    """Check whether a table exists.
    """
    return cn.table_exists(name)


__all__ = [
    'connect',
    'load_driver',
    'VerticaAdapter',
    'VerticaOptions',
    'iterdict_data_loader',
    'pandas_data_loader',
    'execute',
    'select',
    'list_columns',
    'list_tables',
    'table_exists',
    'ColumnDescriptor',
    'SchemaContext',
    'SchemaResolver',
    'extract_value_from_default',
    'quote_identifier_as_literal',
    'quote_table_reference',
    'native_type_mapping',
    'NATIVE_DATABASE_TYPES',
    'DatabaseError',
    'ConfigurationError',
    'DriverUnavailableError',
]
