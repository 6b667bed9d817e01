"""
TOON Binding - Native Python values to document trees and back.

to_document() normalizes what callers usually hold (dataclasses, pydantic
models, tuples, enums, dates) into the plain value model the encoder
understands. from_document() goes the other way through pydantic's
TypeAdapter, so any annotation pydantic can validate is a valid target.
"""

from __future__ import annotations

import dataclasses
import datetime as dt
import math
from collections.abc import Mapping
from decimal import Decimal
from enum import Enum
from pathlib import PurePath
from typing import Any, TypeVar
from uuid import UUID

from pydantic import BaseModel, TypeAdapter

from toon.errors import DepthLimitError
from toon.notation import MAX_DEPTH

T = TypeVar("T")


def to_document(value: Any, max_depth: int = MAX_DEPTH, _depth: int = 0) -> Any:
    """Normalize a native value into the document value model.

    Raises TypeError for values with no document representation, and
    DepthLimitError when containers nest deeper than ``max_depth``.
    """
    if _depth > max_depth:
        raise DepthLimitError(_depth, max_depth)
    if value is None or isinstance(value, (bool, str)):
        return value
    if isinstance(value, Enum):
        return to_document(value.value, max_depth, _depth)
    if isinstance(value, (int, Decimal)):
        return value
    if isinstance(value, float):
        return value if math.isfinite(value) else None

    if isinstance(value, BaseModel):
        return to_document(value.model_dump(mode="python"), max_depth, _depth)
    if dataclasses.is_dataclass(value) and not isinstance(value, type):
        return to_document(dataclasses.asdict(value), max_depth, _depth)

    if isinstance(value, Mapping):
        result: dict[str, Any] = {}
        for key, item in value.items():
            result[_to_key(key)] = to_document(item, max_depth, _depth + 1)
        return result
    if isinstance(value, (list, tuple)):
        return [to_document(item, max_depth, _depth + 1) for item in value]
    if isinstance(value, (set, frozenset)):
        items = [to_document(item, max_depth, _depth + 1) for item in value]
        try:
            return sorted(items)
        except TypeError:
            return items

    if isinstance(value, (dt.datetime, dt.date, dt.time)):
        return value.isoformat()
    if isinstance(value, (UUID, PurePath)):
        return str(value)
    if isinstance(value, bytes):
        raise TypeError("bytes have no document representation; decode them to str first")

    raise TypeError(f"Cannot convert {type(value).__name__} to a document value")


def _to_key(key: Any) -> str:
    if isinstance(key, str):
        return key
    if isinstance(key, Enum):
        key = key.value
    if isinstance(key, bool):
        return "true" if key else "false"
    if isinstance(key, (int, float, Decimal, UUID)):
        return str(key)
    raise TypeError(f"Object keys must be strings, got {type(key).__name__}")


def from_document(value: Any, target: type[T]) -> T:
    """Validate a decoded document into ``target``.

    ``target`` may be a pydantic model, a dataclass, a TypedDict or any
    typing annotation (``list[int]``, ``dict[str, Item]``). Validation
    failures surface as ``pydantic.ValidationError``.
    """
    return TypeAdapter(target).validate_python(value)
