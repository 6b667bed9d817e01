"""
TOON Dotted Paths - Key folding (encode) and path expansion (decode).

Folding collapses a chain of single-property objects into one dotted key:
    {"a": {"b": {"c": 1}}}  ->  a.b.c: 1
Expansion is the inverse and rebuilds the nested objects from every key that
contains the separator. Folding only joins plain identifiers, so
``expand_paths(fold(T)) == T`` whenever T has no literal dotted key.
"""

from __future__ import annotations

from typing import Any

from toon.notation import PATH_SEPARATOR, is_path_segment
from toon.options import PathExpansionMode


# =============================================================================
# Folding (encoder side)
# =============================================================================

def collect_literal_keys(obj: dict[str, Any]) -> frozenset[str]:
    """Keys in this scope that already contain the path separator."""
    return frozenset(k for k in obj if PATH_SEPARATOR in k)


def fold_key_chain(
    key: str,
    value: Any,
    literal_keys: frozenset[str],
    max_segments: int | None = None,
) -> tuple[str, Any] | None:
    """Walk single-property objects under ``key`` and join their keys.

    The walk stops at the segment limit, at a segment that is not a plain
    identifier, or before a step whose dotted path equals a literal key of
    the enclosing scope. Returns ``(dotted_key, terminal_value)`` when at
    least two segments were gathered, else None.
    """
    if max_segments is not None and max_segments <= 1:
        return None
    if not is_path_segment(key):
        return None

    segments = [key]
    current = value
    while isinstance(current, dict) and len(current) == 1:
        if max_segments is not None and len(segments) >= max_segments:
            break
        (next_key, next_value), = current.items()
        if not is_path_segment(next_key):
            break
        candidate = PATH_SEPARATOR.join(segments) + PATH_SEPARATOR + next_key
        if candidate in literal_keys:
            break
        segments.append(next_key)
        current = next_value

    if len(segments) < 2:
        return None
    return PATH_SEPARATOR.join(segments), current


# =============================================================================
# Expansion (decoder side)
# =============================================================================

def _has_conflicts(keys: list[str], dotted: list[str]) -> bool:
    """True if expanding any dotted key could overwrite a sibling value."""
    all_keys = set(keys)
    for dotted_key in dotted:
        parts = dotted_key.split(PATH_SEPARATOR)
        for i in range(1, len(parts)):
            if PATH_SEPARATOR.join(parts[:i]) in all_keys:
                return True
        prefix = dotted_key + PATH_SEPARATOR
        if any(other.startswith(prefix) for other in all_keys):
            return True
    return False


def _set_path(target: dict[str, Any], path: str, value: Any) -> None:
    parts = path.split(PATH_SEPARATOR)
    current = target
    for part in parts[:-1]:
        nxt = current.get(part)
        if not isinstance(nxt, dict):
            nxt = {}
            current[part] = nxt
        current = nxt
    current[parts[-1]] = value


def _expand_object(obj: dict[str, Any], mode: PathExpansionMode) -> dict[str, Any]:
    expanded = {k: expand_paths(v, mode) for k, v in obj.items()}
    dotted = [k for k in expanded if PATH_SEPARATOR in k]
    dotted_set = set(dotted)
    if not dotted or _has_conflicts(list(expanded), dotted):
        return expanded

    result: dict[str, Any] = {}
    for key, value in expanded.items():
        if key in dotted_set:
            _set_path(result, key, value)
        else:
            result[key] = value
    return result


def expand_paths(value: Any, mode: PathExpansionMode = PathExpansionMode.SAFE) -> Any:
    """Rewrite dotted keys into nested objects, recursively.

    Per object the decision is all-or-nothing: if any dotted key has a proper
    prefix that is a sibling key, or a sibling key extends a dotted key, every
    key in that object stays literal.
    """
    if mode == PathExpansionMode.OFF:
        return value
    if isinstance(value, dict):
        return _expand_object(value, mode)
    if isinstance(value, list):
        return [expand_paths(item, mode) for item in value]
    return value
