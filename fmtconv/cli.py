"""
cli.py

Responsibility: CLI entrypoint for fmtconv.

Subcommands:
- `greet`: console output variants, then prompt for name and age and greet
- `convert`: walk through the numeric and text conversions
- `render`: render a template with typed arguments (`kind:value` or bare values)
- `parse`: parse text as a given kind and report the value or the error

This module orchestrates only. Rendering and emission live in `formatter.py`,
reading in `scanner.py`, conversions in `converter.py`, settings in `config.py`.
"""

from __future__ import annotations

import argparse
import logging
import sys
from typing import Any

from fmtconv.config import Settings, SettingsError, apply_overrides, load_settings
from fmtconv.converter import convert, number_to_text, text_to_float, text_to_integer, text_to_value
from fmtconv.formatter import Console, FormatError
from fmtconv.kinds import Kind, TypedValue
from fmtconv.scanner import Scanner

logger = logging.getLogger(__name__)


class CLIError(RuntimeError):
    pass


def _float_kind(settings: Settings) -> Kind:
    return Kind.FLOAT32 if settings.float_precision == 32 else Kind.FLOAT64


def _read_or_fail(result: Any, what: str) -> Any:
    if not result.ok:
        raise CLIError(f"Could not read {what}: {result.error}")
    return result.value


def greet_cmd(args: argparse.Namespace) -> int:
    console = Console(strict=args.settings.strict)
    scanner = Scanner()

    console.emit("This is emit (no newline) | ")
    console.emit_line("This is emit_line (with newline)")
    console.emitf("This is emitf with formatting: %d + %d = %d\n", 2, 3, 2 + 3)

    message = console.sprintf("hello, %s! Welcome to fmtconv.", args.name)
    console.emit_line(message)

    console.emit("Enter your first name: ")
    first_name = _read_or_fail(scanner.read_token(), "first name")

    console.emit("Enter your last name: ")
    last_name = _read_or_fail(scanner.read_line(), "last name")

    console.emit("Enter your age: ")
    (age,) = _read_or_fail(scanner.read_formatted("%d", Kind.INT), "age")

    console.emitf("Hi %s %s, you are %d years old!\n", first_name, last_name, age)
    return 0


def convert_cmd(args: argparse.Namespace) -> int:
    console = Console(strict=args.settings.strict)

    # Integer widths
    i = TypedValue.of(Kind.INT, args.value)
    i8 = convert(i, Kind.INT8)
    i32 = convert(i, Kind.INT32)
    i64 = convert(i, Kind.INT64)
    console.emit_line(i, i8, i32, i64)
    console.emitf("Type of i: %T , i8: %T, i32: %T, i64: %T\n", i, i8, i32, i64)

    # Integer to text
    str_int = number_to_text(i)
    console.emitf("The value is %s and type is %T\n", str_int, str_int)

    # Integer to float
    f32 = convert(i, Kind.FLOAT32)
    f64 = convert(i, Kind.FLOAT64)
    console.emitf("f32 value: %f, f64 value: %g\n", f32, f64)
    console.emitf("Type f32:%T , f64:%T\n", f32, f64)

    # Float to text
    float_to_string = console.sprintf("%f", f64)
    console.emitf("Type float_to_string : %T, Value: %s\n", float_to_string, float_to_string)

    # Signed to unsigned wraps instead of failing
    signed = TypedValue.of(Kind.INT, args.signed)
    unsigned = convert(signed, Kind.UINT)
    console.emit_line("Value unsigned:", unsigned)
    console.emitf("Type unsigned:%T\n", unsigned)

    # Text to integer
    num = text_to_integer(args.int_text)
    if num.error is not None:
        console.emitf("Error: %v\n", str(num.error))
    else:
        as_int = TypedValue(Kind.INT, num.value)
        console.emitf(
            "String type:%T %s converted to type:%T integer: %d\n", args.int_text, args.int_text, as_int, as_int
        )

    # Text to float
    parsed = text_to_float(args.float_text, 64)
    if parsed.error is not None:
        console.emitf("Error %v\n", str(parsed.error))
    else:
        new_f64 = TypedValue(Kind.FLOAT64, parsed.value)
        console.emitf("new_f64 value is %f with type %T\n", new_f64, new_f64)

    return 0


def _unescape(template: str) -> str:
    return template.replace("\\n", "\n").replace("\\t", "\t")


def _parse_render_arg(raw: str, settings: Settings) -> Any:
    """
    `kind:value` gives an explicitly tagged value; a bare value is an int if it
    parses as one, else a float if it parses as one, else a string.
    """
    prefix, sep, rest = raw.partition(":")
    if sep:
        try:
            kind = Kind.parse(prefix)
        except ValueError:
            kind = None
        if kind is not None:
            result = text_to_value(rest, kind)
            if not result.ok:
                raise CLIError(f"Invalid {kind.value} argument {rest!r}: {result.error}")
            return TypedValue.of(kind, result.value)

    as_int = text_to_integer(raw)
    if as_int.ok:
        return as_int.value
    float_kind = _float_kind(settings)
    as_float = text_to_float(raw, float_kind.width)
    if as_float.ok:
        return TypedValue(float_kind, as_float.value)
    return raw


def render_cmd(args: argparse.Namespace) -> int:
    console = Console(strict=args.settings.strict)
    values = [_parse_render_arg(a, args.settings) for a in args.args]
    try:
        text = console.sprintf(_unescape(args.template), *values)
    except FormatError as e:
        raise CLIError(f"Template does not match its arguments: {e}") from e
    console.emit(text if text.endswith("\n") else text + "\n")
    return 0


def parse_cmd(args: argparse.Namespace) -> int:
    console = Console(strict=args.settings.strict)
    if args.kind.strip().lower() == "float":
        kind = _float_kind(args.settings)
    else:
        try:
            kind = Kind.parse(args.kind)
        except ValueError as e:
            raise CLIError(str(e)) from e

    result = text_to_value(args.text, kind)
    if result.error is not None:
        console.emitf("Error: %v\n", str(result.error))
        return 1
    value = TypedValue.of(kind, result.value)
    console.emitf("%v (%T)\n", value, value)
    return 0


def _build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(prog="fmtconv", description="fmtconv - formatted console I/O and type conversion")
    p.add_argument("--config", default=None, help="YAML settings file")
    p.add_argument("--strict", action="store_true", default=None, help="Fail on template/argument mismatches")
    p.add_argument("--log-level", default=None, help="Logging level (default: WARNING or from settings)")
    sub = p.add_subparsers(dest="command", required=True)

    g = sub.add_parser("greet", help="Print examples, then read a name and age from stdin and greet")
    g.add_argument("--name", default="Paul", help="Name used in the welcome message (default: Paul)")
    g.set_defaults(func=greet_cmd)

    c = sub.add_parser("convert", help="Show numeric and text conversions")
    c.add_argument("--value", type=int, default=32, help="Integer to convert between widths (default: 32)")
    c.add_argument("--signed", type=int, default=-42, help="Signed value converted to uint (default: -42)")
    c.add_argument("--int-text", default="32", help="Text parsed as an integer (default: 32)")
    c.add_argument("--float-text", default="3.14159", help="Text parsed as a float64 (default: 3.14159)")
    c.set_defaults(func=convert_cmd)

    r = sub.add_parser("render", help="Render a template with typed arguments")
    r.add_argument("template", help="Template, e.g. '%%d + %%d = %%d'")
    r.add_argument("args", nargs="*", help="Arguments as kind:value (e.g. int32:5) or bare values")
    r.set_defaults(func=render_cmd)

    s = sub.add_parser("parse", help="Parse text as a kind")
    s.add_argument("text", help="Text to parse")
    s.add_argument("--kind", default="int", help="Target kind, or 'float' for the configured precision (default: int)")
    s.set_defaults(func=parse_cmd)

    return p


def _resolve_settings(args: argparse.Namespace) -> Settings:
    settings = load_settings(args.config)
    return apply_overrides(settings, strict=args.strict, log_level=args.log_level)


def main(argv: list[str] | None = None) -> int:
    parser = _build_parser()
    args = parser.parse_args(argv)
    try:
        args.settings = _resolve_settings(args)
        logging.basicConfig(
            level=args.settings.log_level,
            stream=sys.stderr,
            format="%(levelname)s %(name)s: %(message)s",
        )
        return int(args.func(args))
    except (CLIError, SettingsError) as e:
        logger.debug("command failed", exc_info=True)
        sys.stderr.write(f"fmtconv: error: {e}\n")
        return 2


if __name__ == "__main__":
    raise SystemExit(main())
