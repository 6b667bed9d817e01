"""
TOON Primitives - Scalar tokens to values and back.

Decoding tries the most precise numeric class first: integer, then exact
decimal, then binary float. A non-integer literal stays a ``float`` only when
the float's shortest repr denotes the same decimal value; otherwise the
literal is kept as a ``Decimal`` so no digits are lost. The class follows the
literal, not the value that was encoded: a ``Decimal`` that a float holds
exactly, such as ``Decimal("1.5")``, decodes as the equal ``float`` 1.5.
"""

from __future__ import annotations

import math
import re
from decimal import Decimal, InvalidOperation
from typing import Any, Iterable

from toon.errors import ToonSyntaxError
from toon.notation import (
    BACKSLASH,
    COLON,
    FALSE_LITERAL,
    LIST_ITEM_PREFIX,
    NULL_LITERAL,
    QUOTE,
    RESERVED_LITERALS,
    TRUE_LITERAL,
    escape_string,
    find_closing_quote,
    is_control,
    is_valid_identifier,
    split_unquoted,
    unescape_string,
)

_NUMBER_RE = re.compile(r"-?\d+(?:\.\d+)?(?:[eE][+-]?\d+)?", re.ASCII)
_INTEGER_RE = re.compile(r"-?\d+", re.ASCII)
_STRUCTURAL_RE = re.compile(r"\[#?\d+[\t|]?\]|\{[\w,|]+\}")


# =============================================================================
# Decoding
# =============================================================================

def number_from_literal(text: str) -> float | Decimal:
    """Pick float or Decimal for a non-integer numeric literal."""
    value = float(text)
    if math.isfinite(value) and Decimal(repr(value)) == Decimal(text):
        return value
    return Decimal(text)


def parse_number(token: str) -> int | float | Decimal | None:
    """Parse a numeric-shaped token. Returns None if the token is not numeric."""
    if not _NUMBER_RE.fullmatch(token):
        return None
    if _INTEGER_RE.fullmatch(token):
        try:
            return int(token)
        except ValueError:
            # Beyond the interpreter's int-from-str digit limit
            return Decimal(token)
    try:
        return number_from_literal(token)
    except InvalidOperation:
        return None


def _unquote(token: str, line_number: int, what: str) -> str:
    close = find_closing_quote(token, 0)
    if close == -1:
        raise ToonSyntaxError(f"Unterminated quoted {what}: {token}", line_number)
    if close != len(token) - 1:
        raise ToonSyntaxError(
            f"Unexpected characters after closing quote: {token[close + 1:]!r}", line_number
        )
    return unescape_string(token[1:close])


def parse_primitive_token(token: str, line_number: int = 0) -> Any:
    """Parse one scalar token: quoted string, literal, number or bare string.

    An empty token is null.
    """
    token = token.strip()
    if not token:
        return None

    if token[0] == QUOTE:
        return _unquote(token, line_number, "string")

    if token == TRUE_LITERAL:
        return True
    if token == FALSE_LITERAL:
        return False
    if token == NULL_LITERAL:
        return None

    number = parse_number(token)
    if number is not None:
        return number

    return token


def parse_delimited_values(content: str, delimiter: str, line_number: int = 0) -> list[Any]:
    """Split inline array values / a tabular row and parse each token."""
    return [parse_primitive_token(piece, line_number) for piece in split_unquoted(content, delimiter)]


def parse_key_token(token: str, line_number: int = 0) -> str:
    """Parse a key, unquoting it if needed."""
    token = token.strip()
    if token.startswith(QUOTE):
        return _unquote(token, line_number, "key")
    return token


# =============================================================================
# Encoding
# =============================================================================

def should_quote(value: str, delimiter: str) -> bool:
    """Decide whether a string must be quoted to survive a decode."""
    if not value:
        return True
    if value[0].isspace() or value[-1].isspace():
        return True
    if (
        delimiter in value
        or COLON in value
        or QUOTE in value
        or BACKSLASH in value
        or any(is_control(ch) for ch in value)
    ):
        return True
    if value in RESERVED_LITERALS:
        return True
    if _NUMBER_RE.fullmatch(value):
        return True
    if value.startswith(LIST_ITEM_PREFIX):
        return True
    if _STRUCTURAL_RE.fullmatch(value):
        return True
    return False


def encode_string(value: str, delimiter: str) -> str:
    if should_quote(value, delimiter):
        return f'"{escape_string(value)}"'
    return value


def encode_number(value: int | float | Decimal) -> str:
    """Base-10 text for a number. Non-finite values have no token and become null."""
    if isinstance(value, float):
        if not math.isfinite(value):
            return NULL_LITERAL
        return repr(value)
    if isinstance(value, Decimal):
        if not value.is_finite():
            return NULL_LITERAL
        return str(value)
    return str(int(value))


def encode_primitive(value: Any, delimiter: str) -> str:
    """Format a scalar value as a token."""
    if value is None:
        return NULL_LITERAL
    if isinstance(value, bool):
        return TRUE_LITERAL if value else FALSE_LITERAL
    if isinstance(value, str):
        return encode_string(value, delimiter)
    if isinstance(value, (int, float, Decimal)):
        return encode_number(value)
    raise TypeError(f"Not a primitive value: {type(value).__name__}")


def encode_key(key: str) -> str:
    if is_valid_identifier(key):
        return key
    return f'"{escape_string(key)}"'


def join_primitives(values: Iterable[Any], delimiter: str) -> str:
    return delimiter.join(encode_primitive(v, delimiter) for v in values)


def is_primitive(value: Any) -> bool:
    return value is None or isinstance(value, (bool, int, float, Decimal, str))
