"""
Security Tests - Adversarial input: depth bombs, size limits, injection
through strings and keys, malformed quoting.
"""

import pytest

import toon
from toon import DecodeOptions, DepthLimitError, EncodeOptions, LengthMismatchError, ToonSyntaxError
from toon.binding import to_document
from toon.notation import MAX_DEPTH


def _nested(depth):
    value = {"leaf": 1}
    for _ in range(depth):
        value = {"k": value}
    return value


class TestDepthLimits:

    def test_decode_depth_bomb(self):
        text = "\n".join(" " * i + "k:" for i in range(MAX_DEPTH + 5))
        with pytest.raises(DepthLimitError):
            toon.decode(text)

    def test_decode_custom_limit(self):
        text = "a:\n b:\n  c:\n   d: 1"
        with pytest.raises(DepthLimitError):
            toon.decode(text, DecodeOptions(max_depth=2))
        assert toon.decode(text, DecodeOptions(max_depth=3)) == {"a": {"b": {"c": {"d": 1}}}}

    def test_encode_depth_bomb(self):
        with pytest.raises(DepthLimitError):
            toon.encode(_nested(MAX_DEPTH + 5))

    def test_encode_nested_lists_depth(self):
        value = [1, "x"]
        for _ in range(MAX_DEPTH + 5):
            value = [value, {"a": 1}]
        with pytest.raises(DepthLimitError):
            toon.encode(value)

    def test_encode_far_past_recursion_limit(self):
        with pytest.raises(DepthLimitError):
            toon.encode(_nested(5000))

    def test_encode_deep_lists_past_recursion_limit(self):
        value = ["leaf"]
        for _ in range(5000):
            value = [value]
        with pytest.raises(DepthLimitError):
            toon.encode(value)

    def test_normalization_depth_bound(self):
        with pytest.raises(DepthLimitError):
            to_document(_nested(5000))
        with pytest.raises(DepthLimitError):
            to_document(_nested(5), max_depth=3)
        assert to_document(_nested(3), max_depth=4) == _nested(3)

    def test_encode_custom_limit(self):
        with pytest.raises(DepthLimitError):
            toon.encode(_nested(5), EncodeOptions(max_depth=3))

    def test_depth_errors_are_value_errors(self):
        with pytest.raises(ValueError):
            toon.encode(_nested(MAX_DEPTH + 5))


class TestDeclaredLengths:

    def test_huge_declared_length_strict(self):
        with pytest.raises(LengthMismatchError):
            toon.decode("xs[99999999999999999999]: a")

    def test_huge_declared_length_lenient(self):
        assert toon.decode("xs[99999999999999999999]: a", DecodeOptions(strict=False)) == {"xs": ["a"]}

    def test_huge_declared_list_consumes_only_its_lines(self):
        text = "xs[1000000]:\n - a\nafter: 1"
        assert toon.decode(text, DecodeOptions(strict=False)) == {"xs": ["a"], "after": 1}

    def test_extra_items_are_not_attached_elsewhere(self):
        text = "xs[1]:\n - a\n - injected\nafter: 1"
        assert toon.decode(text) == {"xs": ["a"], "after": 1}


class TestInjection:
    """Strings and keys must never change the document structure."""

    @pytest.mark.parametrize("payload", [
        "x\nadmin: true",
        "x\r\nadmin: true",
        "x\radmin: true",
        "- admin: true",
        "[1]: admin",
        "users[1]{id}:",
        "a, b, c",
        '"quoted"',
        "trailing\\",
        "\\u0000",
        "\x00\x1b[31mred",
        "   ",
    ])
    def test_string_values(self, payload):
        value = {"name": payload, "list": [payload, payload], "rows": [{"v": payload}]}
        text = toon.encode(value)
        assert toon.decode(text) == value

    @pytest.mark.parametrize("key", [
        "a\nb: 1",
        "a: b",
        "- item",
        "k[2]",
        "k[2]{a,b}",
        '"',
        "",
        " ",
        "a.b",
    ])
    def test_keys(self, key):
        value = {key: "v", "other": [{key: 1}], "table": [{key: 1, "z": 2}]}
        assert toon.decode(toon.encode(value)) == value

    def test_newline_in_value_stays_one_line(self):
        text = toon.encode({"a": "x\nb: 2"})
        assert len(text.splitlines()) == 1

    def test_delimiter_in_tabular_value(self):
        value = {"rows": [{"a": "1,2", "b": "3|4"}]}
        for delimiter in ("comma", "tab", "pipe"):
            assert toon.decode(toon.encode(value, EncodeOptions(delimiter=delimiter))) == value


class TestMalformed:

    @pytest.mark.parametrize("text", [
        'a: "unterminated',
        'a: "x" trailing',
        '"key: 1',
        'xs[2]: "a,b',
        "a: 1\njust text",
    ])
    def test_rejected(self, text):
        with pytest.raises(ToonSyntaxError):
            toon.decode(text)

    def test_error_does_not_leak_partial_result(self):
        with pytest.raises(ValueError):
            toon.decode("a: 1\nb: 2\nbroken")

    def test_unknown_escape_passes_through(self):
        assert toon.decode(r'a: "x\qy"') == {"a": "x\\qy"}
