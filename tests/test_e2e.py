"""
End-to-End Tests - Files on disk, converters and the CLI.
"""

import json
import os
import stat
import subprocess
import sys
from decimal import Decimal
from pathlib import Path

import pytest

import toon
from toon import converters
from toon.options import DecodeOptions, EncodeOptions


PROJECT_ROOT = str(Path(__file__).parent.parent)

SAMPLE = {
    "project": "toon",
    "version": 1,
    "maintainers": [
        {"id": 1, "name": "Alice", "active": True},
        {"id": 2, "name": "Bob", "active": False},
    ],
    "tags": ["codec", "notation"],
    "settings": {"indent": 1, "strict": True, "ratio": Decimal("0.123456789012345678901")},
}


def run_cli(*args, input_text=None):
    return subprocess.run(
        [sys.executable, "-m", "toon.cli", *args],
        capture_output=True,
        text=True,
        input=input_text,
        cwd=PROJECT_ROOT,
    )


class TestFileWorkflow:
    """dump -> load on real files."""

    def test_dump_and_load(self, tmp_path):
        path = tmp_path / "sample.toon"
        nbytes = toon.dump(SAMPLE, path)
        assert nbytes == path.stat().st_size
        assert toon.load(path) == SAMPLE

    def test_dump_overwrites_atomically(self, tmp_path):
        path = tmp_path / "data.toon"
        toon.dump({"a": 1}, path)
        toon.dump({"b": 2}, path)
        assert toon.load(path) == {"b": 2}
        leftovers = [p for p in tmp_path.iterdir() if p.name.endswith(".tmp")]
        assert leftovers == []

    @pytest.mark.skipif(os.name == "nt", reason="POSIX permissions")
    def test_dump_mode(self, tmp_path):
        path = tmp_path / "secret.toon"
        toon.dump({"k": "v"}, path, mode=0o600)
        assert stat.S_IMODE(path.stat().st_mode) == 0o600

    def test_dump_with_options(self, tmp_path):
        path = tmp_path / "opts.toon"
        toon.dump({"a": {"b": [1, 2]}}, path, EncodeOptions(indent=2, key_folding="safe"))
        assert path.read_text(encoding="utf-8") == "a.b[2]: 1,2"
        assert toon.load(path, DecodeOptions(indent=2, expand_paths="safe")) == {"a": {"b": [1, 2]}}

    def test_dump_failure_leaves_no_temp_file(self, tmp_path):
        path = tmp_path / "bad.toon"
        with pytest.raises(TypeError):
            toon.dump({"x": object()}, path)
        assert not path.exists()
        assert list(tmp_path.iterdir()) == []

    def test_load_size_limit(self, tmp_path):
        path = tmp_path / "big.toon"
        path.write_text("a: " + "x" * 200, encoding="utf-8")
        with pytest.raises(ValueError, match="exceeds maximum"):
            toon.load(path, max_size=100)

    def test_load_missing(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            toon.load(tmp_path / "missing.toon")


class TestConverters:

    def test_json_round_trip(self):
        text = converters.to_json(SAMPLE)
        assert converters.from_json(text) == SAMPLE

    def test_decimal_written_as_number(self):
        text = converters.to_json({"d": Decimal("0.123456789012345678901")}, indent=None)
        assert text == '{"d": 0.123456789012345678901}'

    def test_decimal_read_back_exactly(self):
        value = converters.from_json('{"d": 0.123456789012345678901, "f": 1.5, "i": 3}')
        assert value == {"d": Decimal("0.123456789012345678901"), "f": 1.5, "i": 3}
        assert isinstance(value["f"], float)

    def test_non_finite_become_null(self):
        assert converters.to_json({"x": float("inf"), "y": Decimal("NaN")}, indent=None) == '{"x": null, "y": null}'
        assert converters.from_json('{"x": NaN}') == {"x": None}

    def test_strings_that_look_like_markers_untouched(self):
        value = {"s": "0.5", "u": "ünï"}
        assert converters.from_json(converters.to_json(value)) == value

    def test_convert_from_and_to(self):
        toon_text = converters.convert_from('{"tags": ["a", "b"]}', "json")
        assert toon_text == "tags[2]: a,b"
        assert json.loads(converters.convert_to(toon_text, "json")) == {"tags": ["a", "b"]}

    def test_unknown_format(self):
        with pytest.raises(ValueError, match="Unknown format"):
            converters.convert_to("a: 1", "yaml")
        with pytest.raises(ValueError, match="Unknown format"):
            converters.convert_from("{}", "csv")

    def test_estimate_savings(self):
        rows = [{"id": i, "name": f"user{i}", "active": i % 2 == 0} for i in range(50)]
        stats = converters.estimate_savings({"users": rows})
        assert stats["toon_chars"] < stats["json_chars"]
        assert stats["toon_tokens"] < stats["json_tokens"]
        assert stats["tokens_saved"] == stats["json_tokens"] - stats["toon_tokens"]
        assert 0 < stats["savings_percent"] < 100

    def test_estimate_tokens(self):
        assert converters.estimate_tokens("a: 1") == 3
        assert converters.estimate_tokens("") == 0


class TestCLI:
    """Test the CLI commands via subprocess."""

    def test_cli_help(self):
        result = run_cli("--help")
        assert result.returncode == 0
        assert "TOON" in result.stdout

    def test_cli_version(self):
        result = run_cli("--version")
        assert result.returncode == 0
        assert toon.__version__ in result.stdout

    def test_cli_no_command_prints_usage(self):
        result = run_cli()
        assert result.returncode == 0
        assert "Usage:" in result.stdout

    def test_cli_encode_stdin(self):
        result = run_cli("encode", input_text='{"name": "Alice", "tags": ["a", "b"]}')
        assert result.returncode == 0
        assert result.stdout == "name: Alice\ntags[2]: a,b\n"

    def test_cli_encode_options(self):
        result = run_cli(
            "encode", "--delimiter", "pipe", "--length-marker", "--fold-keys", "--indent", "2",
            input_text='{"a": {"b": [1, 2]}, "c": {"d": 1, "e": 2}}',
        )
        assert result.returncode == 0
        assert result.stdout == "a.b[#2|]: 1|2\nc:\n  d: 1\n  e: 2\n"

    def test_cli_encode_invalid_json(self):
        result = run_cli("encode", input_text="{not json")
        assert result.returncode == 1
        assert "Error" in result.stderr

    def test_cli_encode_decode_files(self, tmp_path):
        src = tmp_path / "in.json"
        mid = tmp_path / "mid.toon"
        out = tmp_path / "out.json"
        src.write_text(json.dumps({"users": [{"id": 1, "name": "A"}, {"id": 2, "name": "B"}]}), encoding="utf-8")

        result = run_cli("encode", str(src), "-o", str(mid))
        assert result.returncode == 0, result.stderr
        assert mid.read_text(encoding="utf-8") == "users[2]{id,name}:\n 1,A\n 2,B\n"

        result = run_cli("decode", str(mid), "-o", str(out))
        assert result.returncode == 0, result.stderr
        assert json.loads(out.read_text(encoding="utf-8")) == {"users": [{"id": 1, "name": "A"}, {"id": 2, "name": "B"}]}

    def test_cli_decode_stdin_compact(self):
        result = run_cli("decode", "--json-indent", "-1", input_text="a: 1\nb[2]: x,y\n")
        assert result.returncode == 0
        assert result.stdout == '{"a": 1, "b": ["x", "y"]}\n'

    def test_cli_decode_expand_paths(self):
        result = run_cli("decode", "--expand-paths", "--json-indent", "-1", input_text="a.b: 1\n")
        assert result.stdout == '{"a": {"b": 1}}\n'

    def test_cli_decode_strict_failure(self):
        result = run_cli("decode", input_text="items[3]: a,b\n")
        assert result.returncode == 1
        assert "mismatch" in result.stderr

    def test_cli_decode_lenient_warn(self):
        result = run_cli(
            "decode", "--lenient", "--on-mismatch", "warn", "--json-indent", "-1",
            input_text="items[3]: a,b\n",
        )
        assert result.returncode == 0
        assert result.stdout == '{"items": ["a", "b"]}\n'
        assert "Warning: line 1" in result.stderr
        assert "declared 3, found 2" in result.stderr

    def test_cli_validate(self, tmp_path):
        good = tmp_path / "good.toon"
        bad = tmp_path / "bad.toon"
        good.write_text("a: 1\nb[2]: x,y\n", encoding="utf-8")
        bad.write_text("a: 1\nno colon here\n", encoding="utf-8")

        result = run_cli("validate", str(good))
        assert result.returncode == 0
        assert result.stdout.startswith("OK:")
        assert "object with 2 keys" in result.stdout

        result = run_cli("validate", str(bad))
        assert result.returncode == 1
        assert result.stdout.startswith("FAIL:")
        assert "Line 2" in result.stdout

    def test_cli_validate_missing(self, tmp_path):
        result = run_cli("validate", str(tmp_path / "nope.toon"))
        assert result.returncode == 1
        assert "FAIL" in result.stdout

    def test_cli_stats(self, tmp_path):
        src = tmp_path / "rows.json"
        src.write_text(json.dumps([{"id": i, "name": f"n{i}"} for i in range(20)]), encoding="utf-8")
        result = run_cli("stats", str(src))
        assert result.returncode == 0
        assert "JSON chars" in result.stdout
        assert "Savings" in result.stdout

    def test_cli_env_defaults(self):
        env = dict(os.environ, TOON_INDENT="2", TOON_DELIMITER="tab")
        result = subprocess.run(
            [sys.executable, "-m", "toon.cli", "encode"],
            capture_output=True,
            text=True,
            input='{"a": {"b": ["x", "y"]}}',
            cwd=PROJECT_ROOT,
            env=env,
        )
        assert result.returncode == 0
        assert result.stdout == "a:\n  b[2\t]: x\ty\n"

    def test_cli_output_rejects_traversal(self):
        result = run_cli("encode", "-o", "../escape.toon", input_text="{}")
        assert result.returncode == 1
        assert "traversal" in result.stderr
