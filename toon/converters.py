"""
TOON Converters - JSON <-> notation, and size comparison.

Both directions keep Decimal precision: JSON numbers that a float cannot
hold exactly are read as Decimal, and Decimal values are written back as
bare JSON numbers rather than strings.
"""

from __future__ import annotations

import json
import math
import re
from decimal import Decimal
from typing import Any

from toon.codec import decode, encode
from toon.options import DecodeOptions, EncodeOptions
from toon.primitives import number_from_literal

# Private-use marker wrapping Decimal text until json.dumps has run
_DECIMAL_MARK = ""
_MARKED_DECIMAL_RE = re.compile(
    f'"{_DECIMAL_MARK}(-?\\d+(?:\\.\\d+)?(?:[eE][+-]?\\d+)?){_DECIMAL_MARK}"'
)
_TOKEN_RE = re.compile(r"\w+|[^\w\s]")


# =============================================================================
# JSON
# =============================================================================

def _prepare_for_json(value: Any) -> Any:
    if isinstance(value, dict):
        return {k: _prepare_for_json(v) for k, v in value.items()}
    if isinstance(value, list):
        return [_prepare_for_json(v) for v in value]
    if isinstance(value, Decimal):
        if not value.is_finite():
            return None
        return f"{_DECIMAL_MARK}{value}{_DECIMAL_MARK}"
    if isinstance(value, float) and not math.isfinite(value):
        return None
    return value


def to_json(value: Any, indent: int | None = 2) -> str:
    """Serialize a document value as JSON text."""
    text = json.dumps(_prepare_for_json(value), indent=indent, ensure_ascii=False)
    return _MARKED_DECIMAL_RE.sub(r"\1", text)


def from_json(json_str: str) -> Any:
    """Parse JSON text into a document value.

    NaN and Infinity literals, which JSON itself does not allow, become None.
    """
    return json.loads(
        json_str,
        parse_float=number_from_literal,
        parse_constant=lambda _name: None,
    )


def convert_to(toon_text: str, fmt: str = "json", options: DecodeOptions | None = None) -> str:
    """Convert notation text to the specified format."""
    if fmt.lower() != "json":
        raise ValueError(f"Unknown format: {fmt}. Supported: ['json']")
    return to_json(decode(toon_text, options))


def convert_from(data: str, fmt: str = "json", options: EncodeOptions | None = None) -> str:
    """Convert data in the specified format to notation text."""
    if fmt.lower() != "json":
        raise ValueError(f"Unknown format: {fmt}. Supported: ['json']")
    return encode(from_json(data), options)


# =============================================================================
# Size comparison
# =============================================================================

def estimate_tokens(text: str) -> int:
    """Rough token count: words and individual punctuation marks."""
    return len(_TOKEN_RE.findall(text))


def estimate_savings(value: Any, options: EncodeOptions | None = None) -> dict[str, Any]:
    """Compare compact JSON with notation text for the same value."""
    json_text = to_json(value, indent=None)
    toon_text = encode(value, options)

    json_tokens = estimate_tokens(json_text)
    toon_tokens = estimate_tokens(toon_text)
    saved = json_tokens - toon_tokens

    return {
        "json_chars": len(json_text),
        "toon_chars": len(toon_text),
        "json_tokens": json_tokens,
        "toon_tokens": toon_tokens,
        "tokens_saved": saved,
        "savings_percent": round(100.0 * saved / json_tokens, 1) if json_tokens else 0.0,
    }
