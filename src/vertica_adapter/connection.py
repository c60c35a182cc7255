"""
Vertica connection handling.

This module provides:
1. The `connect()` function for opening a Vertica connection
2. The `VerticaAdapter` class that wraps the driver connection and answers
   execution and catalog questions for a mapping layer

The adapter owns exactly one driver connection and performs no locking;
callers sharing an adapter across threads must serialize access.
Driver errors raised while executing statements propagate unchanged.
"""
import logging
import re
import time
from collections.abc import Callable, Iterator, Mapping
from contextlib import contextmanager
from dataclasses import fields
from typing import Any, Self

from vertica_adapter.cache import MetadataCache, cacheable
from vertica_adapter.exceptions import DriverUnavailableError
from vertica_adapter.introspection import ColumnDescriptor, MetadataIntrospector
from vertica_adapter.options import VerticaOptions, use_iterdict_data_loader
from vertica_adapter.quoting import quote_identifier, quote_identifier_as_literal
from vertica_adapter.quoting import quote_table_reference
from vertica_adapter.schema import DEFAULT_SCHEMA, SchemaContext, SchemaResolver
from vertica_adapter.types import NATIVE_DATABASE_TYPES

from libb import load_options

__all__ = [
    'VerticaAdapter',
    'connect',
    'load_driver',
]

logger = logging.getLogger(__name__)

ADAPTER_NAME = 'Vertica'

_DDL_STATEMENT = re.compile(r'\A\s*(?:create|alter|drop|truncate)\b', re.IGNORECASE)
_DDL_TABLE = re.compile(r'\b(?:table|view)\s+(?:if\s+(?:not\s+)?exists\s+)?("[^"]+"|[\w.]+)',
                        re.IGNORECASE)


def load_driver() -> Callable[..., Any]:
    """Import the Vertica client and return its connect function.

    Raises
        DriverUnavailableError: If vertica-python is not installed
    """
    try:
        import vertica_python
    except ImportError as exc:
        raise DriverUnavailableError('Vertica driver not installed: pip install vertica-python') from exc
    return vertica_python.connect


def _column_names(cursor: Any) -> list[str] | None:
    if cursor.description is None:
        return None
    return [getattr(desc, 'name', None) or desc[0] for desc in cursor.description]


def _connection_schema(connection: Any) -> str | None:
    options = getattr(connection, 'options', None)
    if isinstance(options, Mapping):
        return options.get('schema')
    return None


class VerticaAdapter:
    """Wraps a Vertica driver connection

    This class provides:
    1. Connection lifecycle (active check, reconnect, idempotent disconnect)
    2. Statement execution with timing and statistics tracking
    3. Catalog introspection (columns, tables, table existence) with caching
    4. Vertica quoting and native type names for SQL generation

    The default schema is resolved once, when the adapter is created:
    the configured schema, else the driver connection's schema option,
    else `public`.
    """

    def __init__(self, connection: Any, options: VerticaOptions) -> None:
        """Initialize the adapter

        Args:
            connection: Open driver connection (DB-API style, e.g. vertica_python)
            options: The VerticaOptions used to create this connection
        """
        self.connection = connection
        self.options = options
        self._schema_name = options.schema or _connection_schema(connection) or DEFAULT_SCHEMA
        self.resolver = SchemaResolver(self._schema_name)
        self.introspector = MetadataIntrospector(self.execute, self.resolver)
        self.metadata_cache = MetadataCache(maxsize=options.cache_maxsize, ttl=options.cache_ttl)
        self.calls = 0
        self.time = 0

    def __enter__(self) -> Self:
        return self

    def __exit__(self, exc_type: type | None, exc_val: Exception | None,
                 exc_tb: Any | None) -> None:
        """Disconnect when leaving the context manager
        """
        self.disconnect()

    @property
    def adapter_name(self) -> str:
        return ADAPTER_NAME

    @property
    def schema_name(self) -> str:
        """Default schema for unqualified table names."""
        return self._schema_name

    def addcall(self, elapsed: float) -> None:
        """Track execution statistics

        Args:
            elapsed: Time in seconds that the statement took to execute
        """
        self.time += elapsed
        self.calls += 1

    # Lifecycle

    def configure_connection(self) -> None:
        """Apply session settings to a new or reset connection.

        A configured schema is put first on the search path.
        """
        if self.options.schema:
            self.execute(f'SET SEARCH_PATH TO {quote_identifier(self.options.schema)}, public')

    def is_active(self) -> bool:
        """Check whether the driver connection reports itself open."""
        return bool(self.connection.opened())

    def reconnect(self) -> None:
        """Close and re-open the driver connection, keeping this adapter.
        """
        logger.debug(f'Reconnecting to {self.options.host}:{self.options.port}/{self.options.database}')
        self.connection.reset_connection()
        self.metadata_cache.clear_all()
        self.configure_connection()

    reset = reconnect

    def disconnect(self) -> None:
        """Close the driver connection.

        Closing an already closed connection is not an error.
        """
        try:
            self.connection.close()
        except Exception as e:
            logger.debug(f'Error closing connection: {e}')
        self.metadata_cache.clear_all()
        logger.debug(f'Connection closed: {self.calls} queries in {self.time:.2f}s (avg: {self.time/max(1,self.calls):.3f}s per query)')

    close = disconnect

    # Execution

    def _invalidate_metadata(self, sql: str) -> None:
        """Drop cached catalog results a DDL statement may have changed.

        The table list is always dropped. Column lists are dropped for the
        named table, or all of them when no table name can be found.
        """
        if not _DDL_STATEMENT.match(sql):
            return
        self.metadata_cache.clear_cache('tables')
        match = _DDL_TABLE.search(sql)
        if match is None:
            self.metadata_cache.clear_all()
            return
        context = self.resolver.resolve(match.group(1))
        self.metadata_cache.clear_for_table(context.bare_table)

    @contextmanager
    def _cursor(self, sql: str) -> Iterator[Any]:
        """Context manager for cursor lifecycle and statement logging.
        """
        logger.debug(f'Executing: {sql.strip()}')
        start = time.time()
        cursor = self.connection.cursor()
        try:
            cursor.execute(sql)
            self._invalidate_metadata(sql)
            yield cursor
        finally:
            cursor.close()
            self.addcall(time.time() - start)

    def execute(self, sql: str, callback: Callable[[dict], Any] | None = None) -> list[dict] | None:
        """Execute one statement.

        Args:
            sql: Statement text
            callback: Called once per result row when given

        Returns
            Result rows as dicts, or None when a callback was given or the
            statement produced no result set
        """
        with self._cursor(sql) as cursor:
            columns = _column_names(cursor)
            if columns is None:
                return None
            if callback is None:
                return [dict(zip(columns, row)) for row in cursor.fetchall()]
            while (row := cursor.fetchone()) is not None:
                callback(dict(zip(columns, row)))
        return None

    def select(self, sql: str, **kwargs: Any) -> Any:
        """Execute a query and load its rows through the configured data loader.
        """
        with self._cursor(sql) as cursor:
            columns = _column_names(cursor) or []
            data = [dict(zip(columns, row)) for row in cursor.fetchall()]
        result = self.options.data_loader(data, columns, **kwargs)
        logger.debug(f"Select query returned {len(result) if hasattr(result, '__len__') else 'scalar'} result")
        return result

    @use_iterdict_data_loader
    def select_rows(self, sql: str) -> list[list[Any]]:
        """Execute a query and return each row as a list of values.
        """
        return [list(row.values()) for row in self.select(sql)]

    # Catalog

    @cacheable('columns')
    def _columns(self, table_name: str) -> list[ColumnDescriptor]:
        return self.introspector.list_columns(table_name)

    @cacheable('tables')
    def _tables(self) -> list[str]:
        return self.introspector.list_tables()

    def list_columns(self, table_name: str, bypass_cache: bool = False) -> list[ColumnDescriptor]:
        """Get the columns of a table.

        Args:
            table_name: ``table``, ``schema.table`` or a quoted ``"table"``
            bypass_cache: If True, query the catalog even if a result is cached

        Returns
            list: ColumnDescriptor per column, empty if the table is unknown
        """
        return list(self._columns(table_name, bypass_cache=bypass_cache))

    columns = list_columns

    def list_tables(self, bypass_cache: bool = False) -> list[str]:
        """Get the names of the tables in the default schema.
        """
        return list(self._tables(bypass_cache=bypass_cache))

    tables = list_tables

    def table_exists(self, name: str) -> bool:
        """Check whether a table exists, in any schema.
        """
        return self.introspector.table_exists(name)

    def primary_key(self, table: str) -> None:
        """Vertica does not report single-column primary keys here."""
        return None

    # Quoting and types

    def quote_column_name(self, name: str) -> str:
        return quote_identifier_as_literal(name)

    def quote_table_name(self, name: str) -> str:
        """Qualify a table name with the default schema."""
        return quote_table_reference(name, SchemaContext(self.schema_name, name))

    def resolve(self, name: str) -> SchemaContext:
        return self.resolver.resolve(name)

    def native_database_types(self):
        return NATIVE_DATABASE_TYPES

    native_type_mapping = native_database_types

    # Index management has no Vertica equivalent

    def add_index(self, table_name: str, column_name: str | list[str], **options: Any) -> None:
        logger.debug(f'add_index ignored for {table_name}: Vertica has no indexes')

    def remove_index(self, table_name: str, **options: Any) -> None:
        logger.debug(f'remove_index ignored for {table_name}: Vertica has no indexes')

    def remove_index_by_name(self, table_name: str, index_name: str) -> None:
        logger.debug(f'remove_index_by_name ignored for {table_name}: Vertica has no indexes')

    def rename_index(self, table_name: str, old_name: str, new_name: str) -> None:
        logger.debug(f'rename_index ignored for {table_name}: Vertica has no indexes')


@load_options(cls=VerticaOptions)
def connect(options: VerticaOptions | dict[str, Any] | str | None = None,
            config: Any | None = None, **kw: Any) -> VerticaAdapter:
    """Connect to Vertica and wrap the connection in a VerticaAdapter

    Args:
        options: Can be:
                - VerticaOptions object
                - String path to configuration
                - Dictionary of options
                - Options specified as keyword arguments
        config: Configuration object (for loading from config files)
        **kw: Additional keyword arguments to override options

    Returns
        VerticaAdapter for the new connection

    Raises
        ConfigurationError: If no database is specified
        DriverUnavailableError: If no driver is given and vertica-python is missing
    """
    if isinstance(options, VerticaOptions):
        for field in fields(options):
            kw.pop(field.name, None)
    else:
        options_func = load_options(cls=VerticaOptions)(lambda o, c: o)
        options = options_func(options, config, **kw)

    driver = options.driver or load_driver()
    connection = driver(**options.connection_kwargs())
    logger.debug(f'Connected to {options.host}:{options.port}/{options.database}')

    adapter = VerticaAdapter(connection, options)
    adapter.configure_connection()
    return adapter
