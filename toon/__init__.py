"""
TOON - Token-Oriented Object Notation
Indentation-based notation for JSON-shaped data.

Fewer tokens > Lossless round trip > Human Readability
"""

__version__ = "0.1.0"

from toon.codec import encode, decode, decode_typed, load, dump
from toon.decoder import ToonDecoder
from toon.encoder import ToonEncoder
from toon.errors import (
    ToonError, ToonSyntaxError, ToonIndentationError,
    LengthMismatchError, DepthLimitError, OptionError,
)
from toon.options import (
    Delimiter, KeyFoldingMode, PathExpansionMode, LengthMismatchBehavior,
    DecodeWarningKind, DecodeWarning, EncodeOptions, DecodeOptions,
)
