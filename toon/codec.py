"""
TOON Codec - Public entry points.

    encode(value, options)            native value -> text
    decode(text, options)             text -> document value
    decode_typed(text, target)        text -> validated instance of target
    load(path) / dump(value, path)    file helpers with size limit and atomic write
"""

from __future__ import annotations

import logging
import os
import tempfile
from pathlib import Path
from typing import Any, TypeVar

from toon.binding import from_document, to_document
from toon.decoder import ToonDecoder
from toon.encoder import ToonEncoder
from toon.notation import EXTENSION, MAX_INPUT_SIZE
from toon.options import DecodeOptions, EncodeOptions

logger = logging.getLogger(__name__)

T = TypeVar("T")


def encode(value: Any, options: EncodeOptions | None = None) -> str:
    """Encode a value as notation text. Options are validated before any work."""
    encoder = ToonEncoder(options)
    return encoder.encode(to_document(value, encoder.options.max_depth))


def decode(text: str, options: DecodeOptions | None = None) -> Any:
    """Decode notation text into a document value (dict, list or primitive)."""
    if not isinstance(text, str):
        raise TypeError(f"decode() expects str, got {type(text).__name__}")
    return ToonDecoder(options).decode(text)


def decode_typed(text: str, target: type[T], options: DecodeOptions | None = None) -> T:
    """Decode, then validate the document into ``target`` (pydantic TypeAdapter)."""
    return from_document(decode(text, options), target)


def load(
    path: str | Path,
    options: DecodeOptions | None = None,
    max_size: int = MAX_INPUT_SIZE,
) -> Any:
    """Read and decode a notation file."""
    path = Path(path)
    file_size = path.stat().st_size
    if file_size > max_size:
        raise ValueError(
            f"File size {file_size} exceeds maximum {max_size} bytes. "
            f"Pass max_size= to override."
        )
    text = path.read_text(encoding="utf-8")
    logger.debug("Loaded %s (%d bytes)", path, file_size)
    return decode(text, options)


def dump(
    value: Any,
    path: str | Path,
    options: EncodeOptions | None = None,
    mode: int = 0o644,
) -> int:
    """Encode a value and write it to a file atomically. Returns bytes written.

    The text goes to a temp file in the target directory, is fsynced, then
    renamed over the target, so the target is never partially written.
    """
    data = encode(value, options).encode("utf-8")
    target = os.path.abspath(path)
    dir_name = os.path.dirname(target) or "."
    fd, tmp_path = tempfile.mkstemp(dir=dir_name, suffix=f"{EXTENSION}.tmp")
    try:
        with os.fdopen(fd, "wb") as f:
            f.write(data)
            f.flush()
            os.fsync(f.fileno())
        os.chmod(tmp_path, mode)
        os.replace(tmp_path, target)
    except BaseException:
        try:
            os.unlink(tmp_path)
        except OSError:
            pass
        raise
    logger.debug("Wrote %s (%d bytes)", target, len(data))
    return len(data)
