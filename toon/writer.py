"""
TOON Line Writer - Depth-tagged content to indented text.
"""

from __future__ import annotations

from toon.notation import DEFAULT_INDENT, DEFAULT_NEWLINE


class LineWriter:
    """Collects output lines; indentation is spaces, ``indent`` per level."""

    def __init__(self, indent: int = DEFAULT_INDENT, newline: str = DEFAULT_NEWLINE) -> None:
        self._indent = indent
        self._newline = newline or DEFAULT_NEWLINE
        self._lines: list[str] = []

    def push(self, depth: int, content: str) -> None:
        self._lines.append(" " * (depth * self._indent) + content)

    def __len__(self) -> int:
        return len(self._lines)

    def to_text(self) -> str:
        """Joined output, with no trailing line terminator."""
        return self._newline.join(self._lines)
