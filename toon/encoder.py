"""
TOON Encoder - Document value to notation text.

Array shape is chosen per array:
  1. empty          -> header only, ``key[0]:``
  2. tabular        -> every element an object with the same primitive-valued
                       keys; header lists the fields, one row per element
  3. inline         -> every element primitive, values on the header line
  4. list           -> anything else, one dash item per element

The encoder never mutates its input.
"""

from __future__ import annotations

import logging
from typing import Any

from toon.errors import DepthLimitError
from toon.headers import format_array_header
from toon.notation import LIST_ITEM_MARKER, LIST_ITEM_PREFIX
from toon.options import EncodeOptions, KeyFoldingMode
from toon.paths import collect_literal_keys, fold_key_chain
from toon.primitives import encode_key, encode_primitive, is_primitive, join_primitives
from toon.writer import LineWriter

logger = logging.getLogger(__name__)


def tabular_fields(items: list[Any]) -> list[str] | None:
    """Field order for a tabular array, or None if the array is not uniform.

    Key sets are compared without regard to order; rows follow the first
    element's order.
    """
    if not items:
        return None
    first = items[0]
    if not isinstance(first, dict) or not first:
        return None
    if not all(is_primitive(v) for v in first.values()):
        return None

    field_set = set(first)
    for item in items[1:]:
        if not isinstance(item, dict) or set(item) != field_set:
            return None
        if not all(is_primitive(v) for v in item.values()):
            return None
    return list(first)


class ToonEncoder:
    """
    Encodes a document value into notation text.

    Usage:
        text = ToonEncoder().encode({"tags": ["a", "b"]})
        text = ToonEncoder(EncodeOptions(delimiter="|", key_folding="safe")).encode(data)
    """

    def __init__(self, options: EncodeOptions | None = None) -> None:
        self._options = (options if options is not None else EncodeOptions()).validate()
        self._delimiter = self._options.delimiter.value
        self._writer = LineWriter(self._options.indent, self._options.newline)

    @property
    def options(self) -> EncodeOptions:
        return self._options

    def encode(self, value: Any) -> str:
        if not isinstance(value, (dict, list)):
            return encode_primitive(value, self._delimiter)

        self._writer = LineWriter(self._options.indent, self._options.newline)
        if isinstance(value, dict):
            self._encode_object(value, 0)
        else:
            self._encode_array(None, value, 0)

        logger.debug("Encoded %s into %d lines", type(value).__name__, len(self._writer))
        return self._writer.to_text()

    # -- Objects ---------------------------------------------------------

    def _check_depth(self, depth: int) -> None:
        if depth > self._options.max_depth:
            raise DepthLimitError(depth, self._options.max_depth)

    def _encode_object(self, obj: dict[str, Any], depth: int) -> None:
        self._check_depth(depth)
        literal_keys = collect_literal_keys(obj)
        for key, value in obj.items():
            self._encode_key_value(key, value, depth, literal_keys)

    def _encode_key_value(
        self,
        key: str,
        value: Any,
        depth: int,
        literal_keys: frozenset[str],
        prefix: str = "",
    ) -> None:
        if not isinstance(key, str):
            raise TypeError(f"Object keys must be strings, got {type(key).__name__}")

        if (
            self._options.key_folding == KeyFoldingMode.SAFE
            and isinstance(value, dict)
            and len(value) == 1
        ):
            folded = fold_key_chain(key, value, literal_keys, self._options.flatten_depth)
            if folded is not None:
                key, value = folded

        if isinstance(value, list):
            self._encode_array(key, value, depth, prefix)
        elif isinstance(value, dict):
            self._writer.push(depth, f"{prefix}{encode_key(key)}:")
            if value:
                self._encode_object(value, depth + 1)
        else:
            token = encode_primitive(value, self._delimiter)
            self._writer.push(depth, f"{prefix}{encode_key(key)}: {token}")

    # -- Arrays ----------------------------------------------------------

    def _header(self, key: str | None, length: int, fields: list[str] | None = None) -> str:
        return format_array_header(
            key, length, self._options.delimiter, self._options.length_marker, fields
        )

    def _encode_array(self, key: str | None, items: list[Any], depth: int, prefix: str = "") -> None:
        self._check_depth(depth)

        if not items:
            self._writer.push(depth, prefix + self._header(key, 0))
            return

        fields = tabular_fields(items)
        if fields is not None:
            self._writer.push(depth, prefix + self._header(key, len(items), fields))
            for item in items:
                row = join_primitives((item.get(f) for f in fields), self._delimiter)
                self._writer.push(depth + 1, row)
            return

        if all(is_primitive(item) for item in items):
            values = join_primitives(items, self._delimiter)
            self._writer.push(depth, f"{prefix}{self._header(key, len(items))} {values}")
            return

        self._writer.push(depth, prefix + self._header(key, len(items)))
        for item in items:
            self._encode_list_item(item, depth + 1)

    def _encode_list_item(self, item: Any, depth: int) -> None:
        if isinstance(item, dict):
            if not item:
                self._writer.push(depth, LIST_ITEM_MARKER)
                return
            self._check_depth(depth)
            literal_keys = collect_literal_keys(item)
            prefix = LIST_ITEM_PREFIX
            for key, value in item.items():
                self._encode_key_value(key, value, depth, literal_keys, prefix)
                prefix = ""
        elif isinstance(item, list):
            self._encode_array(None, item, depth, LIST_ITEM_PREFIX)
        else:
            self._writer.push(depth, LIST_ITEM_PREFIX + encode_primitive(item, self._delimiter))
