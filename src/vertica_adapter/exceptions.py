"""
Vertica adapter exception classes.
"""


class DatabaseError(Exception):
    """Base class for all vertica_adapter errors.
    """


class ConfigurationError(DatabaseError, ValueError):
    """Required connection option missing or invalid.

    Raised while building connection options, before any network activity.
    """


class DriverUnavailableError(DatabaseError, ImportError):
    """The Vertica client library cannot be imported.
    """
