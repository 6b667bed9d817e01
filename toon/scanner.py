"""
TOON Scanner - Raw text to depth-tagged lines.

Blank and whitespace-only lines are dropped before depth numbering (their
line numbers are still counted for messages). Depth is the leading
indentation divided by the indent unit; a tab always counts as one full unit.
"""

from __future__ import annotations

import re
from dataclasses import dataclass

from toon.errors import DepthLimitError, ToonIndentationError
from toon.notation import DEFAULT_INDENT, LIST_ITEM_MARKER, LIST_ITEM_PREFIX, MAX_DEPTH

_LINE_SPLIT_RE = re.compile(r"\r\n|\r|\n")


@dataclass(frozen=True)
class ParsedLine:
    """One non-blank input line."""
    raw: str
    depth: int
    indent: int       # indentation measured in spaces (tabs count as one unit)
    content: str      # text past the indentation
    line_number: int  # 1-based, counting blank lines

    @property
    def is_list_item(self) -> bool:
        """Dash-prefixed line; a bare ``-`` counts too."""
        return self.content.startswith(LIST_ITEM_PREFIX) or self.content.rstrip() == LIST_ITEM_MARKER

    @property
    def list_item_body(self) -> str:
        """Text after the dash marker (only meaningful when is_list_item)."""
        return self.content[len(LIST_ITEM_PREFIX):] if self.content.startswith(LIST_ITEM_PREFIX) else ""


class Scanner:
    """Splits text into ParsedLine records."""

    def __init__(self, indent: int = DEFAULT_INDENT, strict: bool = True, max_depth: int = MAX_DEPTH) -> None:
        self.indent = indent
        self.strict = strict
        self.max_depth = max_depth

    def measure_indentation(self, line: str) -> tuple[int, int]:
        """Return (indent in spaces, index of first content char)."""
        indent = 0
        index = 0
        while index < len(line):
            ch = line[index]
            if ch == " ":
                indent += 1
            elif ch == "\t":
                indent += self.indent
            else:
                break
            index += 1
        return indent, index

    def scan(self, text: str) -> list[ParsedLine]:
        lines: list[ParsedLine] = []
        for line_number, raw in enumerate(_LINE_SPLIT_RE.split(text), start=1):
            if not raw.strip():
                continue

            indent, content_index = self.measure_indentation(raw)
            if self.strict and indent % self.indent != 0:
                raise ToonIndentationError(
                    f"Invalid indentation. Expected multiple of {self.indent}, got {indent}.",
                    line_number,
                )

            depth = indent // self.indent
            if depth > self.max_depth:
                raise DepthLimitError(depth, self.max_depth, line_number)

            lines.append(ParsedLine(
                raw=raw,
                depth=depth,
                indent=indent,
                content=raw[content_index:],
                line_number=line_number,
            ))
        return lines


class LineCursor:
    """Forward-only position over scanned lines."""

    def __init__(self, lines: list[ParsedLine]) -> None:
        self._lines = lines
        self._position = 0

    def peek(self) -> ParsedLine | None:
        if self._position < len(self._lines):
            return self._lines[self._position]
        return None

    def advance(self) -> ParsedLine | None:
        if self._position < len(self._lines):
            line = self._lines[self._position]
            self._position += 1
            return line
        return None

    def has_more(self) -> bool:
        return self._position < len(self._lines)

    @property
    def position(self) -> int:
        return self._position

    def __len__(self) -> int:
        return len(self._lines)
