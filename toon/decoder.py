"""
TOON Decoder - Recursive descent over depth-tagged lines.

Depth is the only block terminator: a block ends at the first line that is
shallower than the block. Deeper lines that nothing claims are skipped.

Line ownership in list bodies:
  - an item ends at the next dash line at item depth, or at any shallower line
  - a list ends once its declared count is reached, or at a shallower line,
    so keys that follow a list are never absorbed into its last item
  - tabular rows are taken only while they sit exactly at row depth
"""

from __future__ import annotations

import logging
from typing import Any

from toon.errors import LengthMismatchError, ToonSyntaxError
from toon.headers import ArrayHeader, parse_array_header, split_key_and_header
from toon.notation import COLON, OPEN_BRACKET, find_unquoted
from toon.options import (
    DecodeOptions,
    DecodeWarning,
    DecodeWarningKind,
    LengthMismatchBehavior,
)
from toon.paths import expand_paths
from toon.primitives import parse_delimited_values, parse_primitive_token
from toon.scanner import LineCursor, ParsedLine, Scanner

logger = logging.getLogger(__name__)


class ToonDecoder:
    """
    Decodes notation text into a document value.

    Usage:
        value = ToonDecoder().decode("name: Alice\\nage: 30")

        warnings = []
        lenient = ToonDecoder(DecodeOptions(strict=False, length_mismatch="warn", warnings=warnings))
        value = lenient.decode("items[3]: a,b")
    """

    def __init__(self, options: DecodeOptions | None = None) -> None:
        self._options = (options if options is not None else DecodeOptions()).validate()
        self._scanner = Scanner(
            indent=self._options.indent,
            strict=self._options.strict,
            max_depth=self._options.max_depth,
        )

    @property
    def options(self) -> DecodeOptions:
        return self._options

    def decode(self, text: str) -> Any:
        lines = self._scanner.scan(text)
        if not lines:
            return {}

        cursor = LineCursor(lines)
        first = lines[0]

        # Root array
        if first.content.startswith(OPEN_BRACKET):
            header, inline = self._split_header_line(first.content, first.line_number)
            if header is not None:
                cursor.advance()
                if inline:
                    result = self._decode_inline(header, inline)
                else:
                    result = self._decode_array(header, cursor, first.depth)
                logger.debug("Decoded root array of %d items from %d lines", len(result), len(lines))
                return expand_paths(result, self._options.expand_paths)

        # Root primitive
        if len(lines) == 1 and not self._is_key_value(first.content):
            return parse_primitive_token(first.content, first.line_number)

        result = self._decode_object(cursor, 0)
        logger.debug("Decoded root object with %d keys from %d lines", len(result), len(lines))
        return expand_paths(result, self._options.expand_paths)

    # -- Objects ---------------------------------------------------------

    def _decode_object(self, cursor: LineCursor, depth: int) -> dict[str, Any]:
        obj: dict[str, Any] = {}
        while True:
            line = cursor.peek()
            if line is None or line.depth < depth:
                break
            if line.depth > depth:
                cursor.advance()
                continue

            cursor.advance()
            key, value = self._decode_key_value(line.content, line.line_number, depth, cursor)
            self._assign(obj, key, value, line.line_number)
        return obj

    def _decode_key_value(
        self, content: str, line_number: int, depth: int, cursor: LineCursor
    ) -> tuple[str, Any]:
        colon = find_unquoted(content, COLON)
        if colon == -1:
            raise ToonSyntaxError("Missing colon in key-value pair", line_number)

        key, header = split_key_and_header(content[:colon], line_number)
        value_part = content[colon + 1:].strip()

        if header is not None:
            header.line_number = line_number
            if value_part:
                return key, self._decode_inline(header, value_part)
            return key, self._decode_array(header, cursor, depth)

        if value_part:
            return key, parse_primitive_token(value_part, line_number)

        nxt = cursor.peek()
        if nxt is not None and nxt.depth > depth:
            return key, self._decode_object(cursor, depth + 1)
        return key, {}

    def _assign(self, obj: dict[str, Any], key: str, value: Any, line_number: int) -> None:
        if key in obj and self._options.strict:
            raise ToonSyntaxError(f"Duplicate key: {key!r}", line_number)
        obj[key] = value

    # -- Arrays ----------------------------------------------------------

    def _decode_array(self, header: ArrayHeader, cursor: LineCursor, depth: int) -> list[Any]:
        if header.length == 0:
            return []
        if header.is_tabular:
            return self._decode_tabular(header, cursor, depth)
        return self._decode_list(header, cursor, depth)

    def _decode_inline(self, header: ArrayHeader, content: str) -> list[Any]:
        values = parse_delimited_values(content, header.delimiter.value, header.line_number)
        if len(values) != header.length:
            self._length_mismatch(header, len(values))
        return values

    def _decode_tabular(self, header: ArrayHeader, cursor: LineCursor, depth: int) -> list[Any]:
        fields = header.fields or []
        row_depth = depth + 1
        rows: list[Any] = []

        while len(rows) < header.length:
            line = cursor.peek()
            if line is None or line.depth < row_depth:
                break
            if line.depth > row_depth:
                cursor.advance()
                continue

            cursor.advance()
            values = parse_delimited_values(line.content, header.delimiter.value, line.line_number)
            if len(values) != len(fields):
                self._report(
                    DecodeWarningKind.ROW_WIDTH_MISMATCH, header.key,
                    len(fields), len(values), line.line_number,
                )
            # Short rows leave trailing fields absent
            rows.append(dict(zip(fields, values)))

        if len(rows) != header.length:
            self._length_mismatch(header, len(rows))
        return rows

    def _decode_list(self, header: ArrayHeader, cursor: LineCursor, depth: int) -> list[Any]:
        item_depth = depth + 1
        items: list[Any] = []

        while len(items) < header.length:
            line = cursor.peek()
            if line is None or line.depth < item_depth:
                break
            if line.depth > item_depth:
                cursor.advance()
                continue
            if not line.is_list_item:
                break

            cursor.advance()
            items.append(self._decode_list_item(line, cursor, item_depth))

        if len(items) != header.length:
            self._length_mismatch(header, len(items))
        return items

    def _decode_list_item(self, line: ParsedLine, cursor: LineCursor, item_depth: int) -> Any:
        body = line.list_item_body.strip()
        line_number = line.line_number

        if body.startswith(OPEN_BRACKET):
            header, inline = self._split_header_line(body, line_number)
            if header is not None:
                if inline:
                    return self._decode_inline(header, inline)
                return self._decode_array(header, cursor, item_depth)

        if not body:
            # Bare dash: properties one level deeper, then siblings at item depth
            obj = self._decode_object(cursor, item_depth + 1)
            return self._decode_item_fields(obj, cursor, item_depth)

        if self._is_key_value(body):
            # First property shares the dash line
            obj: dict[str, Any] = {}
            key, value = self._decode_key_value(body, line_number, item_depth, cursor)
            obj[key] = value
            return self._decode_item_fields(obj, cursor, item_depth)

        return parse_primitive_token(body, line_number)

    def _decode_item_fields(self, obj: dict[str, Any], cursor: LineCursor, item_depth: int) -> dict[str, Any]:
        """Collect the later properties of a list-item object."""
        while True:
            line = cursor.peek()
            if line is None or line.depth < item_depth:
                break
            if line.depth > item_depth:
                cursor.advance()
                continue
            if line.is_list_item:
                break

            cursor.advance()
            key, value = self._decode_key_value(line.content, line.line_number, item_depth, cursor)
            self._assign(obj, key, value, line.line_number)
        return obj

    # -- Helpers ---------------------------------------------------------

    @staticmethod
    def _is_key_value(content: str) -> bool:
        return find_unquoted(content, COLON) != -1

    @staticmethod
    def _split_header_line(content: str, line_number: int) -> tuple[ArrayHeader | None, str]:
        """Read a keyless ``[N]...:`` line. Returns (header, inline values)."""
        colon = find_unquoted(content, COLON)
        if colon == -1:
            return None, ""
        header = parse_array_header(content[:colon], line_number)
        if header is None:
            return None, ""
        return header, content[colon + 1:].strip()

    def _length_mismatch(self, header: ArrayHeader, actual: int) -> None:
        self._report(
            DecodeWarningKind.LENGTH_MISMATCH, header.key,
            header.length, actual, header.line_number,
        )

    def _report(
        self,
        kind: DecodeWarningKind,
        key: str | None,
        declared: int,
        actual: int,
        line_number: int,
    ) -> None:
        """Route a cardinality problem through strict mode and the mismatch policy."""
        what = "Row width" if kind == DecodeWarningKind.ROW_WIDTH_MISMATCH else "Array length"
        behavior = self._options.length_mismatch

        if self._options.strict or behavior == LengthMismatchBehavior.ERROR:
            raise LengthMismatchError(key, declared, actual, line_number, what=what)

        if behavior == LengthMismatchBehavior.WARN:
            logger.warning(
                "%s mismatch for %r on line %d: expected %d, got %d",
                what, key, line_number, declared, actual,
            )
            if self._options.warnings is not None:
                self._options.warnings.append(DecodeWarning(
                    kind=kind,
                    key=key,
                    declared=declared,
                    actual=actual,
                    line_number=line_number,
                ))
        else:
            logger.debug("Ignoring %s mismatch on line %d", what.lower(), line_number)
