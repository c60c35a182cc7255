"""
Schema and table name resolution.

Table names reach the adapter in three forms:

- ``"Quoted Name"`` - a delimited identifier, taken whole as the table name
- ``schema.table`` - split on the first ``.``
- ``table`` - unqualified

Unqualified and quoted names are placed in the connection's default schema.
"""
from dataclasses import dataclass

__all__ = ['DEFAULT_SCHEMA', 'SchemaContext', 'SchemaResolver', 'strip_quotes']

DEFAULT_SCHEMA = 'public'


def strip_quotes(name: str) -> str:
    """Remove one leading and one trailing double quote from a name."""
    if name.startswith('"'):
        name = name[1:]
    if name.endswith('"'):
        name = name[:-1]
    return name


@dataclass(frozen=True)
class SchemaContext:
    """Schema and table a possibly qualified name refers to.
    """
    schema: str
    table: str

    @property
    def bare_table(self) -> str:
        """Table name without surrounding quote delimiters."""
        return strip_quotes(self.table)


class SchemaResolver:
    """Split table names into a SchemaContext.

    The default schema is fixed for the life of the resolver; it is the
    schema already resolved for the owning connection.
    """

    def __init__(self, default_schema: str | None = None) -> None:
        self._default_schema = default_schema or DEFAULT_SCHEMA

    @property
    def default_schema(self) -> str:
        return self._default_schema

    def resolve(self, name: str) -> SchemaContext:
        """Resolve a table name to its schema and table parts.

        Args:
            name: ``table``, ``schema.table`` or a quoted ``"table"``

        Returns
            SchemaContext with the default schema applied when none was given
        """
        name = str(name)

        if name.startswith('"'):
            return SchemaContext(self._default_schema, name)

        schema, sep, table = name.partition('.')
        if not sep:
            return SchemaContext(self._default_schema, name)

        return SchemaContext(schema or self._default_schema, table)
