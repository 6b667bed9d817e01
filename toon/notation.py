"""
TOON Notation Reference
=======================

Layout:
    name: Alice                  <- key: value (primitive)
    user:                        <- key alone opens a nested object
     id: 7                       <- one indent unit deeper
    tags[3]: a,b,c               <- inline primitive array, declared length
    users[2]{id,name}:           <- tabular array: header declares fields once
     1,Alice                     <- one delimited row per element
     2,Bob
    items[2]:                    <- list array: one dash item per element
     - id: 1                     <- first property shares the dash line
     name: a                     <- later properties at the dash line's depth
     - plain string

Header grammar:
    key? '[' ['#'] length ['\\t' | '|'] ']' ['{' field (delim field)* '}'] ':'

Design Decisions:
    - Depth is the only block terminator; there is no closing token
    - A leading tab always counts as one full indent unit
    - Comma is the default delimiter and is never shown in a header
    - Blank lines carry no meaning and are dropped before depth numbering

String Escaping:
    - '"', '\\', LF, CR and TAB become two-character escapes
    - Other control characters become \\u + 4 hex digits
    - Unknown escapes pass through literally on decode
"""

from __future__ import annotations

# Structural tokens
COLON = ":"
QUOTE = '"'
BACKSLASH = "\\"
OPEN_BRACKET = "["
CLOSE_BRACKET = "]"
OPEN_BRACE = "{"
CLOSE_BRACE = "}"
LENGTH_MARKER = "#"
LIST_ITEM_MARKER = "-"
LIST_ITEM_PREFIX = "- "
PATH_SEPARATOR = "."

# Literal tokens
TRUE_LITERAL = "true"
FALSE_LITERAL = "false"
NULL_LITERAL = "null"
RESERVED_LITERALS = frozenset({TRUE_LITERAL, FALSE_LITERAL, NULL_LITERAL})

# Defaults
DEFAULT_INDENT = 1        # smallest unit that still distinguishes levels
DEFAULT_NEWLINE = "\n"

# Safety limits
MAX_INPUT_SIZE = 100 * 1024 * 1024  # 100MB max text size for file helpers
MAX_DEPTH = 200                     # max nesting depth (keeps recursion well under the interpreter limit)

# File extension
EXTENSION = ".toon"

_ESCAPES = {
    '"': '\\"',
    "\\": "\\\\",
    "\n": "\\n",
    "\r": "\\r",
    "\t": "\\t",
}

_UNESCAPES = {
    '"': '"',
    "\\": "\\",
    "n": "\n",
    "r": "\r",
    "t": "\t",
}

_HEX_DIGITS = frozenset("0123456789abcdefABCDEF")


def is_control(ch: str) -> bool:
    """True for C0/C1 control characters (Unicode category Cc)."""
    code = ord(ch)
    return code < 0x20 or 0x7F <= code <= 0x9F


def is_identifier_start(ch: str) -> bool:
    return ch.isalpha() or ch == "_"


def is_identifier_part(ch: str) -> bool:
    return ch.isalnum() or ch == "_" or ch == PATH_SEPARATOR


def is_valid_identifier(text: str) -> bool:
    """Check whether a key can be written without quotes.

    Starts with a letter or underscore, continues with letters, digits,
    underscores or the path separator.
    """
    if not text or not is_identifier_start(text[0]):
        return False
    return all(is_identifier_part(ch) for ch in text[1:])


def is_path_segment(text: str) -> bool:
    """An identifier that does not itself contain the path separator."""
    return is_valid_identifier(text) and PATH_SEPARATOR not in text


def escape_string(text: str) -> str:
    """Escape a string for use between quotes."""
    out: list[str] = []
    for ch in text:
        escaped = _ESCAPES.get(ch)
        if escaped is not None:
            out.append(escaped)
        elif is_control(ch):
            out.append(f"\\u{ord(ch):04x}")
        else:
            out.append(ch)
    return "".join(out)


def unescape_string(text: str) -> str:
    """Reverse escape_string. Unrecognized escapes are kept verbatim."""
    out: list[str] = []
    i = 0
    n = len(text)
    while i < n:
        ch = text[i]
        if ch != BACKSLASH or i + 1 >= n:
            out.append(ch)
            i += 1
            continue

        nxt = text[i + 1]
        if nxt in _UNESCAPES:
            out.append(_UNESCAPES[nxt])
            i += 2
        elif nxt == "u" and i + 6 <= n and all(c in _HEX_DIGITS for c in text[i + 2:i + 6]):
            out.append(chr(int(text[i + 2:i + 6], 16)))
            i += 6
        else:
            out.append(ch)
            out.append(nxt)
            i += 2
    return "".join(out)


def find_closing_quote(text: str, start: int) -> int:
    """Index of the quote closing the one at ``start``, or -1."""
    escaped = False
    for i in range(start + 1, len(text)):
        ch = text[i]
        if escaped:
            escaped = False
        elif ch == BACKSLASH:
            escaped = True
        elif ch == QUOTE:
            return i
    return -1


def find_unquoted(text: str, target: str, start: int = 0) -> int:
    """Index of the first ``target`` char outside double quotes, or -1."""
    in_quotes = False
    escaped = False
    for i in range(start, len(text)):
        ch = text[i]
        if escaped:
            escaped = False
            continue
        if ch == BACKSLASH:
            escaped = True
            continue
        if ch == QUOTE:
            in_quotes = not in_quotes
            continue
        if ch == target and not in_quotes:
            return i
    return -1


def split_unquoted(text: str, delimiter: str) -> list[str]:
    """Split on ``delimiter`` outside quotes. Pieces are returned raw (untrimmed).

    An empty string yields no pieces; a trailing delimiter yields a trailing
    empty piece.
    """
    if not text:
        return []
    pieces: list[str] = []
    start = 0
    while True:
        idx = find_unquoted(text, delimiter, start)
        if idx == -1:
            pieces.append(text[start:])
            return pieces
        pieces.append(text[start:idx])
        start = idx + 1
