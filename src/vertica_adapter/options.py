from collections.abc import Callable
from dataclasses import dataclass
from functools import wraps
from typing import Any

import pandas as pd
from vertica_adapter.exceptions import ConfigurationError

from libb import ConfigOptions, scriptname

__all__ = [
    'VerticaOptions',
    'iterdict_data_loader',
    'pandas_data_loader',
    'use_iterdict_data_loader',
]


def use_iterdict_data_loader(func):
    """Temporarily use default dict loader over user-specified loader"""

    @wraps(func)
    def inner(cn, *args, **kwargs):
        original_data_loader = cn.options.data_loader
        cn.options.data_loader = iterdict_data_loader

        try:
            return func(cn, *args, **kwargs)
        finally:
            cn.options.data_loader = original_data_loader

    return inner


def iterdict_data_loader(data, columns, **kwargs) -> list[dict]:
    """Minimal data loader.

    Accepts additional keyword arguments for compatibility with other data
    loaders, but doesn't use them.
    """
    if not data:
        return []
    return list(data)


def pandas_data_loader(data, columns, **kwargs) -> pd.DataFrame:
    """pandas DataFrame loader.

    Always returns a DataFrame, never None, with columns preserved for empty results.
    """
    if not data:
        return pd.DataFrame(columns=columns)
    return pd.DataFrame.from_records(list(data), columns=columns)


@dataclass
class VerticaOptions(ConfigOptions):
    """Options

    Connection options:
    - host, port (default 5433), username, password
    - database: required
    - schema: default schema for unqualified names (default: connection's, else `public`)
    - timeout: connection timeout in seconds, 0 for the driver default
    - appname: session label reported to the server

    Adapter options:
    - driver: connection factory, called with keyword options; defaults to
      `vertica_python.connect`, loaded when connecting
    - data_loader: turns fetched rows into the result of `select`
    - cache_ttl, cache_maxsize: catalog metadata cache settings
    """
    host: str = 'localhost'
    port: int = 5433
    username: str = None
    password: str = None
    database: str = None
    schema: str = None
    timeout: int = 0
    appname: str = None
    autocommit: bool = True
    driver: Callable[..., Any] | None = None
    data_loader: Callable[..., Any] | None = None
    cache_ttl: int = 300
    cache_maxsize: int = 100

    def __post_init__(self):
        if not self.database:
            raise ConfigurationError('No database specified. Missing argument: database.')
        if self.port is None:
            self.port = 5433
        try:
            self.port = int(self.port)
        except (TypeError, ValueError) as exc:
            raise ConfigurationError(f'Invalid port: {self.port!r}') from exc
        if self.port <= 0:
            raise ConfigurationError(f'Invalid port: {self.port!r}')
        if self.username is not None:
            self.username = str(self.username)
        if self.password is not None:
            self.password = str(self.password)
        if self.schema is not None:
            self.schema = str(self.schema)
        self.appname = self.appname or scriptname() or 'python_console'
        if self.data_loader is None:
            self.data_loader = iterdict_data_loader

    def connection_kwargs(self) -> dict[str, Any]:
        """Keyword arguments for the driver's connect function."""
        kwargs = {
            'host': self.host,
            'port': self.port,
            'user': self.username,
            'password': self.password,
            'database': self.database,
            'session_label': self.appname,
            'autocommit': self.autocommit,
            }
        if self.timeout:
            kwargs['connection_timeout'] = self.timeout
        return {k: v for k, v in kwargs.items() if v is not None}
