"""
TOON Conformance Tests

Shared test vectors in conformance/vectors.json.
Covers: decoding, exact encoder output, and inputs that must fail.

Vectors are plain JSON so other implementations can run the same suite;
they are loaded through the JSON converter so decimal literals keep their
precision.
"""

from pathlib import Path

import pytest

import toon
from toon import errors
from toon.converters import from_json
from toon.options import DecodeOptions, EncodeOptions


VECTORS_PATH = Path(__file__).parent / "conformance" / "vectors.json"


@pytest.fixture(scope="module")
def vectors():
    return from_json(VECTORS_PATH.read_text(encoding="utf-8"))


# ================================================================
# Decoding
# ================================================================

class TestDecodeVectors:

    def test_conformance_vectors(self, vectors):
        for case in vectors["decode"]["cases"]:
            options = DecodeOptions(**case.get("options", {}))
            result = toon.decode(case["input"], options)
            assert result == case["expected"], (
                f"[{case['desc']}] decode({case['input']!r}) = {result!r}, "
                f"expected {case['expected']!r}"
            )

    def test_decoded_values_re_encode(self, vectors):
        """Whatever decodes must survive another encode/decode pass."""
        for case in vectors["decode"]["cases"]:
            options = DecodeOptions(**case.get("options", {}))
            value = toon.decode(case["input"], options)
            assert toon.decode(toon.encode(value)) == value, case["desc"]


# ================================================================
# Encoding
# ================================================================

class TestEncodeVectors:

    def test_conformance_vectors(self, vectors):
        for case in vectors["encode"]["cases"]:
            options = EncodeOptions(**case.get("options", {}))
            text = toon.encode(case["input"], options)
            assert text == case["expected"], (
                f"[{case['desc']}] encode({case['input']!r}) = {text!r}, "
                f"expected {case['expected']!r}"
            )

    def test_encoded_text_decodes_back(self, vectors):
        for case in vectors["encode"]["cases"]:
            opts = case.get("options", {})
            if opts.get("key_folding"):
                continue
            encode_options = EncodeOptions(**opts)
            decode_options = DecodeOptions(indent=opts.get("indent", 1))
            text = toon.encode(case["input"], encode_options)
            assert toon.decode(text, decode_options) == case["input"], case["desc"]

    def test_folded_text_expands_back(self, vectors):
        for case in vectors["encode"]["cases"]:
            opts = case.get("options", {})
            if not opts.get("key_folding"):
                continue
            text = toon.encode(case["input"], EncodeOptions(**opts))
            result = toon.decode(text, DecodeOptions(expand_paths="safe"))
            assert result == case["input"], case["desc"]


# ================================================================
# Errors
# ================================================================

class TestErrorVectors:

    def test_conformance_vectors(self, vectors):
        for case in vectors["errors"]["cases"]:
            expected = getattr(errors, case["error"])
            with pytest.raises(expected):
                toon.decode(case["input"], DecodeOptions(**case.get("options", {})))

    def test_errors_are_value_errors(self, vectors):
        for case in vectors["errors"]["cases"]:
            with pytest.raises(ValueError):
                toon.decode(case["input"], DecodeOptions(**case.get("options", {})))


# ================================================================
# Vector file sanity
# ================================================================

class TestVectorFile:

    def test_has_all_sections(self, vectors):
        for section in ("decode", "encode", "errors"):
            assert vectors[section]["cases"], section

    def test_descriptions_unique(self, vectors):
        for section in ("decode", "encode", "errors"):
            descs = [c["desc"] for c in vectors[section]["cases"]]
            assert len(descs) == len(set(descs)), section
