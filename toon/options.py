"""
TOON Options - Encoder/decoder configuration and decode warnings.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any

from toon.errors import OptionError
from toon.notation import DEFAULT_INDENT, DEFAULT_NEWLINE, MAX_DEPTH


class Delimiter(str, Enum):
    """Separator for inline array values and tabular rows."""
    COMMA = ","
    TAB = "\t"
    PIPE = "|"

    @classmethod
    def coerce(cls, value: Delimiter | str) -> Delimiter:
        """Accept an enum member, its glyph, or its name ("tab", "PIPE")."""
        if isinstance(value, cls):
            return value
        if isinstance(value, str):
            try:
                return cls(value)
            except ValueError:
                pass
            member = cls.__members__.get(value.upper())
            if member is not None:
                return member
        raise OptionError(f"Unknown delimiter: {value!r}. Use comma, tab or pipe.")

    @property
    def header_glyph(self) -> str:
        """Glyph shown inside ``[N]``; comma is implied and never written."""
        return "" if self is Delimiter.COMMA else self.value


class KeyFoldingMode(str, Enum):
    OFF = "off"
    SAFE = "safe"


class PathExpansionMode(str, Enum):
    OFF = "off"
    SAFE = "safe"


class LengthMismatchBehavior(str, Enum):
    """What a lenient decoder does when a declared count is wrong."""
    SILENT = "silent"   # accept the actual count
    WARN = "warn"       # accept and record a DecodeWarning
    ERROR = "error"     # fatal even with strict disabled


class DecodeWarningKind(str, Enum):
    LENGTH_MISMATCH = "length_mismatch"
    ROW_WIDTH_MISMATCH = "row_width_mismatch"


def _coerce_enum(enum_cls: type[Enum], value: Any, label: str) -> Any:
    if isinstance(value, enum_cls):
        return value
    if isinstance(value, str):
        try:
            return enum_cls(value.lower())
        except ValueError:
            pass
    choices = ", ".join(m.value for m in enum_cls)
    raise OptionError(f"Invalid {label}: {value!r}. Expected one of: {choices}")


def _check_indent(indent: Any) -> None:
    if isinstance(indent, bool) or not isinstance(indent, int):
        raise OptionError(f"Indent must be an integer, got {type(indent).__name__}")
    if indent < 1:
        raise OptionError(f"Indent must be at least 1, got {indent}")


def _check_max_depth(max_depth: Any) -> None:
    if isinstance(max_depth, bool) or not isinstance(max_depth, int) or max_depth < 1:
        raise OptionError(f"max_depth must be a positive integer, got {max_depth!r}")


@dataclass
class DecodeWarning:
    """A recoverable problem recorded while decoding under the ``warn`` policy."""
    kind: DecodeWarningKind
    key: str | None
    declared: int
    actual: int
    line_number: int


@dataclass
class EncodeOptions:
    """
    Encoder settings.

    Usage:
        opts = EncodeOptions(indent=2, delimiter="tab", key_folding="safe")
        text = toon.encode(data, opts)
    """

    indent: int = DEFAULT_INDENT
    delimiter: Delimiter = Delimiter.COMMA
    length_marker: bool = False
    key_folding: KeyFoldingMode = KeyFoldingMode.OFF
    flatten_depth: int | None = None   # max segments per folded key; None = unlimited
    newline: str = DEFAULT_NEWLINE
    max_depth: int = MAX_DEPTH

    def validate(self) -> EncodeOptions:
        """Check and normalize every field in place. Returns self."""
        _check_indent(self.indent)
        self.delimiter = Delimiter.coerce(self.delimiter)
        self.key_folding = _coerce_enum(KeyFoldingMode, self.key_folding, "key folding mode")
        if self.flatten_depth is not None:
            if isinstance(self.flatten_depth, bool) or not isinstance(self.flatten_depth, int):
                raise OptionError(f"flatten_depth must be an integer or None, got {self.flatten_depth!r}")
            if self.flatten_depth < 0:
                raise OptionError(f"flatten_depth must be non-negative, got {self.flatten_depth}")
        if not isinstance(self.newline, str) or self.newline not in ("\n", "\r\n", "\r"):
            raise OptionError(f"newline must be one of '\\n', '\\r\\n', '\\r', got {self.newline!r}")
        _check_max_depth(self.max_depth)
        return self


@dataclass
class DecodeOptions:
    """
    Decoder settings.

    ``strict`` makes indentation and cardinality violations fatal. With
    ``strict=False`` length mismatches follow ``length_mismatch``; under
    ``warn`` each one is appended to ``warnings`` (a caller-owned list).
    """

    indent: int = DEFAULT_INDENT
    strict: bool = True
    expand_paths: PathExpansionMode = PathExpansionMode.OFF
    length_mismatch: LengthMismatchBehavior = LengthMismatchBehavior.SILENT
    warnings: list[DecodeWarning] | None = None
    max_depth: int = MAX_DEPTH

    def validate(self) -> DecodeOptions:
        """Check and normalize every field in place. Returns self."""
        _check_indent(self.indent)
        self.strict = bool(self.strict)
        self.expand_paths = _coerce_enum(PathExpansionMode, self.expand_paths, "path expansion mode")
        self.length_mismatch = _coerce_enum(
            LengthMismatchBehavior, self.length_mismatch, "length mismatch behavior"
        )
        if self.warnings is not None and not callable(getattr(self.warnings, "append", None)):
            raise OptionError("warnings sink must support append()")
        _check_max_depth(self.max_depth)
        return self
