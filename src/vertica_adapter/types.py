"""
Vertica type names.

Two directions are covered here:

1. Abstract column kinds (``string``, ``integer``, ...) to the physical type
   names used when a mapping layer generates DDL (``NATIVE_DATABASE_TYPES``)
2. Declared catalog types (``varchar(80)``, ``numeric(10,2)``, ...) to
   SQLAlchemy type objects, from which the Python type follows
"""
import logging
import re
from dataclasses import dataclass
from types import MappingProxyType

import sqlalchemy as sa

logger = logging.getLogger(__name__)

__all__ = [
    'NativeType',
    'NATIVE_DATABASE_TYPES',
    'native_type_mapping',
    'resolve_sa_type',
    'resolve_python_type',
]


@dataclass(frozen=True)
class NativeType:
    """Physical type name with an optional default length limit.
    """
    name: str
    limit: int | None = None

    def render(self, limit: int | None = None) -> str:
        """Render the type as used in DDL, e.g. ``varchar(255)``."""
        limit = limit or self.limit
        if limit is None:
            return self.name
        return f'{self.name}({limit})'


NATIVE_DATABASE_TYPES = MappingProxyType({
    'primary_key': NativeType('integer not null primary key'),
    'string': NativeType('varchar', 255),
    'text': NativeType('varchar', 15000),
    'integer': NativeType('integer'),
    'float': NativeType('float'),
    'decimal': NativeType('decimal'),
    'datetime': NativeType('datetime'),
    'timestamp': NativeType('timestamp'),
    'time': NativeType('time'),
    'date': NativeType('date'),
    'binary': NativeType('bytea'),
    'boolean': NativeType('boolean'),
    'xml': NativeType('xml'),
})


def native_type_mapping() -> MappingProxyType:
    """Return the read-only mapping of column kinds to Vertica types."""
    return NATIVE_DATABASE_TYPES


_DECLARED_TYPE = re.compile(r'\A(?P<base>[a-z][a-z0-9 ]*?)\s*(?:\((?P<args>[^)]*)\)(?P<suffix>[a-z ]*))?\Z')


def _int_args(args: str | None) -> list[int]:
    if not args:
        return []
    return [int(a) for a in args.split(',') if a.strip().isdigit()]


def _string(args, tz):
    length = _int_args(args)
    return sa.String(length[0]) if length else sa.String()


def _char(args, tz):
    length = _int_args(args)
    return sa.CHAR(length[0]) if length else sa.CHAR()


def _binary(args, tz):
    length = _int_args(args)
    return sa.LargeBinary(length[0]) if length else sa.LargeBinary()


def _numeric(args, tz):
    return sa.Numeric(*_int_args(args)[:2])


_TYPE_FACTORIES = {
    ('varchar', 'character varying', 'long varchar', 'text'): _string,
    ('char', 'character', 'bpchar'): _char,
    ('int', 'integer', 'int8', 'smallint', 'tinyint'): lambda args, tz: sa.Integer(),
    ('bigint',): lambda args, tz: sa.BigInteger(),
    ('numeric', 'decimal', 'number', 'money'): _numeric,
    ('float', 'float8', 'real', 'double precision'): lambda args, tz: sa.Float(),
    ('timestamp', 'datetime', 'smalldatetime', 'timestamptz'): lambda args, tz: sa.DateTime(timezone=tz),
    ('time', 'timetz'): lambda args, tz: sa.Time(timezone=tz),
    ('date',): lambda args, tz: sa.Date(),
    ('interval',): lambda args, tz: sa.Interval(),
    ('boolean', 'bool'): lambda args, tz: sa.Boolean(),
    ('binary', 'varbinary', 'long varbinary', 'bytea', 'raw'): _binary,
    ('uuid',): lambda args, tz: sa.Uuid(),
}

_FACTORY_BY_NAME = {name: factory for names, factory in _TYPE_FACTORIES.items() for name in names}


def resolve_sa_type(sql_type: str | None) -> sa.types.TypeEngine:
    """Map a declared Vertica type to a SQLAlchemy type object.

    Unknown or unparseable declarations map to ``NullType``.

    >>> resolve_sa_type('varchar(80)').length
    80
    """
    if not sql_type:
        return sa.types.NullType()

    declared = ' '.join(sql_type.lower().split())
    match = _DECLARED_TYPE.match(declared)
    if not match:
        logger.debug(f'Unparseable declared type: {sql_type!r}')
        return sa.types.NullType()

    base = match.group('base')
    suffix = (match.group('suffix') or '').strip()
    tz = base.endswith('tz') or 'with time zone' in f'{base} {suffix}'
    base = base.replace(' with time zone', '').replace(' without time zone', '')
    if base.startswith('interval'):
        base = 'interval'

    factory = _FACTORY_BY_NAME.get(base)
    if factory is None:
        logger.debug(f'No SQLAlchemy type for declared type: {sql_type!r}')
        return sa.types.NullType()
    return factory(match.group('args'), tz)


def resolve_python_type(sql_type: str | None) -> type | None:
    """Python type of values stored in a column of the declared type."""
    try:
        return resolve_sa_type(sql_type).python_type
    except NotImplementedError:
        return None
