"""
Catalog introspection for Vertica.

Columns and tables are read from the ``v_catalog`` system tables. Each
column row is turned into an immutable ColumnDescriptor whose default is
decoded from the catalog's default expression.
"""
import logging
from collections.abc import Callable, Mapping
from dataclasses import dataclass, field
from typing import Any

import sqlalchemy as sa
from vertica_adapter.defaults import DefaultValue, extract_value_from_default
from vertica_adapter.quoting import quote_identifier_as_literal
from vertica_adapter.schema import SchemaResolver, strip_quotes
from vertica_adapter.types import resolve_python_type, resolve_sa_type

logger = logging.getLogger(__name__)

__all__ = ['ColumnDescriptor', 'MetadataIntrospector', 'to_bool']

_TRUE_STRINGS = {'t', 'true', 'y', 'yes', '1'}


def to_bool(value: Any) -> bool:
    """Normalise a catalog flag (bool, 't'/'f', 'YES'/'NO', 0/1) to bool."""
    if isinstance(value, str):
        return value.strip().lower() in _TRUE_STRINGS
    return bool(value)


@dataclass(frozen=True)
class ColumnDescriptor:
    """Column metadata as reported by the catalog.
    """
    name: str
    sql_type: str
    nullable: bool = True
    default: DefaultValue = None
    raw_default: str | None = field(default=None, repr=False, compare=False)

    @classmethod
    def from_catalog_row(cls, row: Mapping[str, Any]) -> 'ColumnDescriptor':
        """Build a descriptor from one ``v_catalog.columns`` row.
        """
        raw_default = row.get('column_default')
        return cls(
            name=row['column_name'],
            sql_type=row['data_type'],
            nullable=to_bool(row.get('is_nullable', True)),
            default=extract_value_from_default(raw_default),
            raw_default=raw_default,
        )

    @property
    def sa_type(self) -> sa.types.TypeEngine:
        """SQLAlchemy type object for the declared type."""
        return resolve_sa_type(self.sql_type)

    @property
    def python_type(self) -> type | None:
        """Python type of the column's values, None when unknown."""
        return resolve_python_type(self.sql_type)


def _first_value(row: Any) -> Any:
    if isinstance(row, Mapping):
        return next(iter(row.values()))
    return row[0]


class MetadataIntrospector:
    """Catalog queries for columns, tables and table existence.

    Args:
        execute: Callable ``execute(sql, callback=None)``. With a callback
            it is called once per row; without one, all rows are returned.
        resolver: Resolves table names against the connection's schema
    """

    def __init__(self, execute: Callable[..., Any], resolver: SchemaResolver) -> None:
        self._execute = execute
        self.resolver = resolver

    def list_columns(self, table_name: str) -> list[ColumnDescriptor]:
        """Get the columns of a table in ordinal order.

        An unknown table yields an empty list.
        """
        context = self.resolver.resolve(table_name)
        sql = f"""
SELECT column_name, data_type, column_default, is_nullable
FROM v_catalog.columns
WHERE table_name = {quote_identifier_as_literal(context.bare_table)}
AND table_schema = {quote_identifier_as_literal(context.schema)}
ORDER BY ordinal_position
"""
        columns = []
        self._execute(sql, lambda row: columns.append(ColumnDescriptor.from_catalog_row(row)))
        logger.debug(f'Found {len(columns)} columns for {context.schema}.{context.bare_table}')
        return columns

    def list_tables(self) -> list[str]:
        """Get table names in the default schema, in catalog order.
        """
        schema = self.resolver.default_schema
        sql = f"""
SELECT table_name
FROM v_catalog.tables
WHERE table_schema = {quote_identifier_as_literal(schema)}
"""
        tables = []
        self._execute(sql, lambda row: tables.append(row['table_name']))
        return tables

    def table_exists(self, name: str) -> bool:
        """Check whether a table with the given name exists.

        The schema part of a qualified name is not used: a table of the
        same name in any schema counts.
        """
        context = self.resolver.resolve(name)
        table = strip_quotes(context.table)
        sql = f"""
SELECT COUNT(*)
FROM v_catalog.tables
WHERE table_name = {quote_identifier_as_literal(table)}
"""
        rows = self._execute(sql)
        if not rows:
            return False
        return int(_first_value(rows[0])) > 0
