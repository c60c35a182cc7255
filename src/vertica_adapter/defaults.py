"""
Decoding of column default expressions reported by the Vertica catalog.

The catalog stores a column default as the SQL expression the server would
evaluate on insert (``'abc'::varchar``, ``nextval('seq')``, ``now()``). Only
literal expressions can be turned into a value without a round trip to the
server, so decoding is a fixed, ordered list of literal shapes:

1. Numeric literals, optionally parenthesized
2. Character literals cast to a character type
3. Escape string literals (``E'...'``) cast to a character type
4. Binary literals
5. Date, time and interval literals
6. ``true`` / ``false``
7. Geometric literals
8. Network address literals
9. Bit string literals
10. XML literals
11. Array literals
12. Object identifiers

The first matching shape wins. Numbers and most literal payloads are kept as
text: a default such as ``(-1)::numeric(10,2)`` cannot be reduced to a Python
number without changing its meaning. Only booleans are coerced. Anything else
(function calls, identity expressions, user types) decodes to ``None``.
"""
import logging
import re
from collections.abc import Callable
from typing import NamedTuple

logger = logging.getLogger(__name__)

__all__ = [
    'DefaultRule',
    'DEFAULT_VALUE_RULES',
    'extract_value_from_default',
    'unescape_octal',
]

DefaultValue = str | bool | None

_CHARACTER_TYPES = r'(?:character varying|varchar|character|char|bpchar|text)(?:\(\d+\))?'
_OCTAL_ESCAPE = re.compile(r'\\([0-3][0-7]{2})')


class DefaultRule(NamedTuple):
    """One literal shape: a pattern and the extractor applied to its match.
    """
    name: str
    pattern: re.Pattern
    extract: Callable[[re.Match], DefaultValue]


def unescape_octal(payload: str) -> str:
    """Replace every ``\\ddd`` octal escape with the byte it encodes.

    Escaped bytes are decoded together with the surrounding text as UTF-8,
    so multi-byte sequences such as ``\\303\\251`` give one character.
    Invalid UTF-8 is replaced rather than raised.

    >>> unescape_octal('ab\\\\040c')
    'ab c'
    """
    if not _OCTAL_ESCAPE.search(payload):
        return payload

    buf = bytearray()
    pos = 0
    for match in _OCTAL_ESCAPE.finditer(payload):
        buf += payload[pos:match.start()].encode('utf-8', 'surrogatepass')
        buf.append(int(match.group(1), 8))
        pos = match.end()
    buf += payload[pos:].encode('utf-8', 'surrogatepass')
    return buf.decode('utf-8', 'replace')


def _payload(match: re.Match) -> str:
    return match.group(1)


def _rule(name: str, pattern: str, extract=_payload, flags: int = 0) -> DefaultRule:
    return DefaultRule(name, re.compile(pattern, flags), extract)


DEFAULT_VALUE_RULES: tuple[DefaultRule, ...] = (
    _rule('numeric', r'\A\(?(-?\d+(?:\.\d*)?)\)?\Z'),
    _rule('character', rf"\A'(.*)'::{_CHARACTER_TYPES}\Z", flags=re.DOTALL),
    _rule('escaped_character', rf"\AE'(.*)'::{_CHARACTER_TYPES}\Z",
          extract=lambda m: unescape_octal(m.group(1)), flags=re.DOTALL),
    _rule('binary', r"\A'(.*)'::(?:bytea|long varbinary|varbinary|binary)(?:\(\d+\))?\Z",
          flags=re.DOTALL),
    _rule('datetime', r"\A'(.+)'::(?:time(?:stamp)?(?:tz)?(?: with(?:out)? time zone)?|date)\Z"),
    _rule('interval', r"\A'(.*)'::interval(?: [a-z ]+)?\Z"),
    _rule('boolean', r'\A(true|false)\Z', extract=lambda m: m.group(1) == 'true'),
    _rule('geometric', r"\A'(.*)'::(?:point|line|lseg|box|\"?path\"?|polygon|circle)\Z"),
    _rule('network', r"\A'(.*)'::(?:cidr|inet|macaddr)\Z"),
    _rule('bit_string', r"\AB'(.*)'::\"?bit(?: varying)?\"?\Z"),
    _rule('xml', r"\A'(.*)'::xml\Z", flags=re.DOTALL),
    _rule('array', r"\A'(.*)'::\"?\D+\"?\[\]\Z"),
    _rule('object_identifier', r'\A(-?\d+)\Z'),
)


def extract_value_from_default(default: str | None) -> DefaultValue:
    """Decode a catalog default expression into a value.

    Args:
        default: Default expression exactly as stored in the catalog, or None

    Returns
        The literal payload as a string, a bool for ``true``/``false``, or None
        when the column has no default or the expression is not a literal
    """
    if not default or not isinstance(default, str):
        return None

    for rule in DEFAULT_VALUE_RULES:
        match = rule.pattern.match(default)
        if match:
            return rule.extract(match)

    logger.debug(f'Default expression is not a literal: {default!r}')
    return None
