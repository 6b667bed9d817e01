"""
TOON Array Headers - The shared ``[N]{fields}:`` grammar.

A header is built while one line is read, consumed by the array-body parser,
then discarded. Encoder and decoder both go through this module so the two
sides agree on the syntax.
"""

from __future__ import annotations

import re
from dataclasses import dataclass

from toon.errors import ToonSyntaxError
from toon.notation import (
    CLOSE_BRACE,
    CLOSE_BRACKET,
    COLON,
    LENGTH_MARKER,
    OPEN_BRACE,
    OPEN_BRACKET,
    QUOTE,
    find_closing_quote,
    split_unquoted,
)
from toon.options import Delimiter
from toon.primitives import encode_key, parse_key_token

_HEADER_RE = re.compile(r"\[(#?)(\d+)([\t|]?)\](?:\{(.*)\})?", re.DOTALL | re.ASCII)


@dataclass
class ArrayHeader:
    """Declared shape of one array, as read from its header line."""
    length: int
    delimiter: Delimiter = Delimiter.COMMA
    fields: list[str] | None = None
    length_marker: bool = False
    line_number: int = 0
    key: str | None = None

    @property
    def is_tabular(self) -> bool:
        return bool(self.fields)


def parse_array_header(syntax: str, line_number: int = 0) -> ArrayHeader | None:
    """Parse ``[#N<glyph>]{f,...}`` (without the trailing colon).

    Returns None when the text does not follow the header grammar; the
    caller then treats the line as an ordinary key.
    """
    match = _HEADER_RE.fullmatch(syntax.strip())
    if match is None:
        return None

    marker, digits, glyph, field_text = match.groups()
    delimiter = Delimiter(glyph) if glyph else Delimiter.COMMA

    fields = None
    if field_text is not None:
        pieces = split_unquoted(field_text, delimiter.value)
        fields = [parse_key_token(p, line_number) for p in pieces] or None

    return ArrayHeader(
        length=int(digits),
        delimiter=delimiter,
        fields=fields,
        length_marker=bool(marker),
        line_number=line_number,
    )


def split_key_and_header(key_part: str, line_number: int = 0) -> tuple[str, ArrayHeader | None]:
    """Split ``key[N]{...}`` into the decoded key and its header, if any.

    A bracket suffix that fails the header grammar is not an error: the whole
    text is re-read as a plain key.
    """
    key_part = key_part.strip()

    if key_part.startswith(QUOTE):
        close = find_closing_quote(key_part, 0)
        if close == -1:
            raise ToonSyntaxError(f"Unterminated quoted key: {key_part}", line_number)
        raw_key, suffix = key_part[:close + 1], key_part[close + 1:]
    else:
        idx = key_part.find(OPEN_BRACKET)
        if idx == -1:
            return parse_key_token(key_part, line_number), None
        raw_key, suffix = key_part[:idx], key_part[idx:]

    if not suffix.strip():
        return parse_key_token(raw_key, line_number), None

    header = parse_array_header(suffix, line_number)
    if header is None:
        return parse_key_token(key_part, line_number), None

    key = parse_key_token(raw_key, line_number)
    header.key = key
    return key, header


def format_array_header(
    key: str | None,
    length: int,
    delimiter: Delimiter,
    length_marker: bool = False,
    fields: list[str] | None = None,
) -> str:
    """Render a header line, e.g. ``users[#2|]{id|name}:``."""
    parts: list[str] = []
    if key is not None:
        parts.append(encode_key(key))
    parts.append(OPEN_BRACKET)
    if length_marker:
        parts.append(LENGTH_MARKER)
    parts.append(str(length))
    parts.append(delimiter.header_glyph)
    parts.append(CLOSE_BRACKET)
    if fields:
        parts.append(OPEN_BRACE)
        parts.append(delimiter.value.join(encode_key(f) for f in fields))
        parts.append(CLOSE_BRACE)
    parts.append(COLON)
    return "".join(parts)
