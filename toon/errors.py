"""Exception types raised by the TOON codec.

Every codec failure is a ``ValueError`` so callers that already guard
parsing with ``except ValueError`` keep working.
"""

from __future__ import annotations


class ToonError(ValueError):
    """Base class for all encode/decode failures."""


class ToonSyntaxError(ToonError):
    """Malformed line: missing colon, bad quoting, duplicate key."""

    def __init__(self, message: str, line_number: int = 0) -> None:
        self.line_number = line_number
        if line_number > 0:
            message = f"Line {line_number}: {message}"
        super().__init__(message)


class ToonIndentationError(ToonSyntaxError):
    """Leading whitespace is not an exact multiple of the indent unit."""


class LengthMismatchError(ToonError):
    """Declared array length (or row width) differs from what was found."""

    def __init__(
        self,
        key: str | None,
        declared: int,
        actual: int,
        line_number: int = 0,
        what: str = "Array length",
    ) -> None:
        self.key = key
        self.declared = declared
        self.actual = actual
        self.line_number = line_number
        name = key if key is not None else "<root array>"
        super().__init__(
            f"{what} mismatch for '{name}' on line {line_number}: "
            f"expected {declared}, got {actual}"
        )


class DepthLimitError(ToonError):
    """Nesting deeper than the configured maximum."""

    def __init__(self, depth: int, max_depth: int, line_number: int = 0) -> None:
        self.depth = depth
        self.max_depth = max_depth
        self.line_number = line_number
        where = f"Line {line_number}: " if line_number > 0 else ""
        super().__init__(f"{where}Nesting depth {depth} exceeds maximum {max_depth}")


class OptionError(ToonError):
    """Invalid encoder or decoder configuration."""
