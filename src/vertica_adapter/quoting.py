"""
Identifier and literal quoting for Vertica catalog queries.
"""
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from vertica_adapter.schema import SchemaContext

__all__ = [
    'escape_string_literal',
    'quote_identifier',
    'quote_identifier_as_literal',
    'quote_table_reference',
]


def escape_string_literal(s: str) -> str:
    """Escape a string for use inside a single-quoted SQL literal."""
    return s.replace("'", "''")


def quote_identifier_as_literal(name: str) -> str:
    """Quote a table, column or schema name as a string literal.

    Catalog tables such as ``v_catalog.columns`` store names as varchar data,
    so names are compared as literals rather than as quoted identifiers.
    Embedded single quotes are doubled.

    >>> quote_identifier_as_literal('orders')
    "'orders'"
    >>> quote_identifier_as_literal("o'brien")
    "'o''brien'"
    """
    return f"'{escape_string_literal(str(name))}'"


def quote_table_reference(name: str, context: 'SchemaContext') -> str:
    """Qualify a table name with the schema of the given context.

    Returns the bare name when the context carries no schema.
    """
    if not context.schema:
        return name
    return f'{context.schema}.{name}'


def quote_identifier(identifier: str) -> str:
    """Quote a SQL identifier using double quotes.

    Args:
        identifier: Schema, table or column name

    Returns
        Quoted identifier with embedded double quotes doubled
    """
    return '"' + identifier.replace('"', '""') + '"'
