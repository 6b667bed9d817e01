"""
TOON CLI - Command-line interface for .toon files.

Commands:
  toon encode   - Convert JSON (file or stdin) to TOON
  toon decode   - Convert TOON (file or stdin) to JSON
  toon validate - Check that a .toon file decodes cleanly
  toon stats    - Compare JSON and TOON sizes for the same data
  toon view     - Browse a .toon file in the terminal (TUI)

Environment:
  TOON_INDENT     default for --indent
  TOON_DELIMITER  default for --delimiter (comma, tab or pipe)
"""

from __future__ import annotations

import argparse
import logging
import os
import sys
from pathlib import Path


def _env_indent() -> int:
    raw = os.environ.get("TOON_INDENT", "")
    try:
        return int(raw) if raw else 1
    except ValueError:
        print(f"Warning: ignoring invalid TOON_INDENT={raw!r}", file=sys.stderr)
        return 1


def _read_input(source: str | None) -> str:
    """Read text from a file path, or stdin when source is None or '-'."""
    from toon.notation import MAX_INPUT_SIZE

    if source is None or source == "-":
        return sys.stdin.read()

    path = Path(source)
    if not path.is_file():
        print(f"Error: File not found: {source}", file=sys.stderr)
        sys.exit(1)
    file_size = path.stat().st_size
    if file_size > MAX_INPUT_SIZE:
        print(f"Error: File size {file_size} exceeds maximum {MAX_INPUT_SIZE} bytes", file=sys.stderr)
        sys.exit(1)
    return path.read_text(encoding="utf-8")


def _write_output(text: str, output: str | None, source: str | None) -> None:
    if not output:
        print(text)
        return
    if ".." in Path(output).parts:
        print("Error: Output path must not contain '..' (path traversal)", file=sys.stderr)
        sys.exit(1)
    Path(output).write_text(text + "\n", encoding="utf-8")
    print(f"Converted {source or 'stdin'} -> {output}", file=sys.stderr)


def cmd_encode(args: argparse.Namespace) -> None:
    """Convert JSON to TOON."""
    from toon.converters import convert_from
    from toon.options import EncodeOptions

    data = _read_input(args.input)
    options = EncodeOptions(
        indent=args.indent,
        delimiter=args.delimiter,
        length_marker=args.length_marker,
        key_folding="safe" if args.fold_keys else "off",
        flatten_depth=args.flatten_depth,
    )
    try:
        result = convert_from(data, "json", options)
    except ValueError as e:
        # Covers JSON syntax errors and invalid options
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(1)
    _write_output(result, args.output, args.input)


def cmd_decode(args: argparse.Namespace) -> None:
    """Convert TOON to JSON."""
    from toon.codec import decode
    from toon.converters import to_json
    from toon.options import DecodeOptions

    text = _read_input(args.input)
    warnings: list = []
    options = DecodeOptions(
        indent=args.indent,
        strict=not args.lenient,
        expand_paths="safe" if args.expand_paths else "off",
        length_mismatch=args.on_mismatch,
        warnings=warnings,
    )
    try:
        value = decode(text, options)
    except ValueError as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(1)

    for w in warnings:
        name = w.key if w.key is not None else "<root array>"
        print(
            f"Warning: line {w.line_number}: {w.kind.value} for '{name}' "
            f"(declared {w.declared}, found {w.actual})",
            file=sys.stderr,
        )

    indent = args.json_indent if args.json_indent >= 0 else None
    _write_output(to_json(value, indent=indent), args.output, args.input)


def cmd_validate(args: argparse.Namespace) -> None:
    """Validate a .toon file."""
    from toon.codec import load
    from toon.options import DecodeOptions

    path = args.path
    if not Path(path).is_file():
        print(f"FAIL: {path} not found")
        sys.exit(1)

    try:
        value = load(path, DecodeOptions(indent=args.indent, strict=not args.lenient))
    except ValueError as e:
        # ValueError from parser (syntax, indentation, lengths) -- safe to show
        print(f"FAIL: {e}")
        sys.exit(1)
    except UnicodeDecodeError:
        print(f"FAIL: {path} is not valid UTF-8")
        sys.exit(1)

    if isinstance(value, dict):
        shape = f"object with {len(value)} keys"
    elif isinstance(value, list):
        shape = f"array of {len(value)} items"
    else:
        shape = type(value).__name__
    print(f"OK: {path} is valid TOON ({shape})")


def cmd_stats(args: argparse.Namespace) -> None:
    """Compare JSON and TOON sizes."""
    from toon.codec import decode
    from toon.converters import estimate_savings, from_json

    path = args.path
    text = _read_input(path)
    try:
        if Path(path).suffix.lower() == ".json":
            value = from_json(text)
        else:
            value = decode(text)
        stats = estimate_savings(value)
    except ValueError as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(1)

    print(f"Stats: {path}\n")
    print(f"  JSON chars:   {stats['json_chars']:>10d}")
    print(f"  TOON chars:   {stats['toon_chars']:>10d}")
    print(f"  JSON tokens:  {stats['json_tokens']:>10d}  (estimated)")
    print(f"  TOON tokens:  {stats['toon_tokens']:>10d}  (estimated)")
    print(f"  Savings:      {stats['savings_percent']:>9.1f}%")


def cmd_view(args: argparse.Namespace) -> None:
    """View a .toon file in the TUI."""
    try:
        from toon.tui.viewer import run_viewer
    except ImportError:
        print(
            "TUI viewer requires the 'textual' package.\n"
            "Install it with: pip install \"toon-codec[tui]\"",
            file=sys.stderr,
        )
        sys.exit(1)
    run_viewer(args.path)


def main(argv: list[str] | None = None) -> None:
    parser = argparse.ArgumentParser(
        prog="toon",
        description="TOON - indentation-based notation for JSON-shaped data.",
    )
    from toon import __version__
    parser.add_argument("--version", action="version", version=f"toon {__version__}")
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging")
    sub = parser.add_subparsers(dest="command")

    default_indent = _env_indent()
    default_delimiter = os.environ.get("TOON_DELIMITER", "comma")

    # encode
    p_encode = sub.add_parser("encode", help="Convert JSON to TOON")
    p_encode.add_argument("input", nargs="?", default=None, help="JSON file (default: stdin)")
    p_encode.add_argument("-o", "--output", help="Output file path")
    p_encode.add_argument("--indent", type=int, default=default_indent, help="Spaces per level (default: 1)")
    p_encode.add_argument("--delimiter", default=default_delimiter, help="comma, tab or pipe (default: comma)")
    p_encode.add_argument("--length-marker", action="store_true", help="Write array lengths as [#N]")
    p_encode.add_argument("--fold-keys", action="store_true", help="Fold single-key object chains into dotted keys")
    p_encode.add_argument("--flatten-depth", type=int, default=None, help="Max segments per folded key")

    # decode
    p_decode = sub.add_parser("decode", help="Convert TOON to JSON")
    p_decode.add_argument("input", nargs="?", default=None, help="TOON file (default: stdin)")
    p_decode.add_argument("-o", "--output", help="Output file path")
    p_decode.add_argument("--indent", type=int, default=default_indent, help="Spaces per level (default: 1)")
    p_decode.add_argument("--lenient", action="store_true", help="Tolerate indentation and length problems")
    p_decode.add_argument("--expand-paths", action="store_true", help="Expand dotted keys into nested objects")
    p_decode.add_argument(
        "--on-mismatch", choices=["silent", "warn", "error"], default="silent",
        help="Length mismatch policy in lenient mode (default: silent)",
    )
    p_decode.add_argument("--json-indent", type=int, default=2, help="JSON indent; negative for compact")

    # validate
    p_validate = sub.add_parser("validate", help="Validate a .toon file")
    p_validate.add_argument("path", help="Path to .toon file")
    p_validate.add_argument("--indent", type=int, default=default_indent, help="Spaces per level (default: 1)")
    p_validate.add_argument("--lenient", action="store_true", help="Non-strict decoding")

    # stats
    p_stats = sub.add_parser("stats", help="Compare JSON and TOON sizes")
    p_stats.add_argument("path", help="Path to .json or .toon file")

    # view
    p_view = sub.add_parser("view", help="View a .toon file (TUI)")
    p_view.add_argument("path", help="Path to .toon file")

    args = parser.parse_args(argv)

    if args.verbose:
        logging.basicConfig(level=logging.DEBUG, format="%(levelname)s %(name)s: %(message)s")

    if not args.command:
        print("TOON - Token-Oriented Object Notation")
        print("Indentation-based notation for JSON-shaped data.\n")
        print("Usage:")
        print("  toon encode data.json -o data.toon")
        print("  toon encode data.json --delimiter tab --fold-keys")
        print("  cat data.json | toon encode")
        print("  toon decode data.toon -o data.json")
        print("  toon decode data.toon --lenient --on-mismatch warn")
        print("  toon validate data.toon")
        print("  toon stats data.json")
        print("  toon view data.toon")
        print()
        print("Run 'toon <command> --help' for details on any command.")
        print("Run 'toon --version' for version info.")
        sys.exit(0)

    commands = {
        "encode": cmd_encode,
        "decode": cmd_decode,
        "validate": cmd_validate,
        "stats": cmd_stats,
        "view": cmd_view,
    }

    commands[args.command](args)


if __name__ == "__main__":
    main()
