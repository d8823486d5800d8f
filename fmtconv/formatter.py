"""
formatter.py

Responsibility: Turn values into text and write text to an output sink.

Template placeholders have the shape `%[-][width][.precision]verb`:
- `%d` integer, `%s` string, `%v` default text of any value, `%T` kind name
- `%f` fixed point (6 fractional digits unless a precision is given)
- `%g` shortest round-trip float (or `precision` significant digits)
- `%%` a literal percent sign

Mismatched placeholders and arguments are rendered inline (`%!d(string=hi)`,
`%!d(MISSING)`, `%!(EXTRA int=5)`) unless `strict=True`, which raises
`FormatError` for the same conditions.
"""

from __future__ import annotations

import logging
import re
import sys
from typing import Any, Sequence, TextIO

from fmtconv.converter import format_fixed, format_general, format_shortest
from fmtconv.kinds import Kind, kind_of, unwrap

logger = logging.getLogger(__name__)

_PLACEHOLDER_RE = re.compile(r"%(?P<left>-?)(?P<width>[0-9]+)?(?:\.(?P<precision>[0-9]*))?(?P<verb>.?)", re.DOTALL)

DEFAULT_FIXED_PLACES = 6


class FormatError(ValueError):
    pass


def _kind(value: Any) -> Kind | None:
    try:
        return kind_of(value)
    except TypeError:
        return None


def type_name(value: Any) -> str:
    """The `%T` identifier of a value: its kind, or the Python type name."""
    kind = _kind(value)
    return kind.value if kind is not None else type(value).__name__


def default_text(value: Any) -> str:
    """The `%v` text of a value."""
    kind = _kind(value)
    raw = unwrap(value)
    if kind is None:
        return str(raw)
    if kind is Kind.BOOL:
        return "true" if raw else "false"
    if kind.is_float:
        return format_shortest(float(raw), kind.width)
    if kind.is_integer:
        return str(int(raw))
    return str(raw)


def _bad_verb(verb: str, value: Any) -> str:
    return f"%!{verb}({type_name(value)}={default_text(value)})"


def _pad(text: str, width: str | None, left: bool) -> str:
    if not width:
        return text
    return text.ljust(int(width)) if left else text.rjust(int(width))


def _format_one(verb: str, value: Any, precision: int | None) -> str | None:
    """Render one argument, or return None when `verb` does not fit its kind."""
    kind = _kind(value)
    raw = unwrap(value)

    if verb == "T":
        return type_name(value)
    if verb == "v":
        text = default_text(value)
        if precision is not None and kind is Kind.STRING:
            text = text[:precision]
        return text
    if kind is None:
        return None
    if verb == "d":
        return str(int(raw)) if kind.is_integer else None
    if verb == "s":
        if kind is not Kind.STRING:
            return None
        return raw if precision is None else raw[:precision]
    if verb == "f":
        if not kind.is_float:
            return None
        return format_fixed(float(raw), DEFAULT_FIXED_PLACES if precision is None else precision)
    if verb == "g":
        if not kind.is_float:
            return None
        if precision is None:
            return format_shortest(float(raw), kind.width)
        return format_general(float(raw), precision)
    return None


def _mismatch(message: str, rendered: str, *, strict: bool) -> str:
    if strict:
        raise FormatError(message)
    logger.debug("format mismatch rendered inline: %s", message)
    return rendered


def render(template: str, *args: Any, strict: bool = False) -> str:
    """
    Substitute each placeholder in `template`, left to right, with the next
    positional argument. Pure: returns the composed string.
    """
    out: list[str] = []
    remaining: Sequence[Any] = args
    pos = 0

    for match in _PLACEHOLDER_RE.finditer(template):
        out.append(template[pos : match.start()])
        pos = match.end()
        verb = match.group("verb")

        if verb == "%":
            out.append("%")
            continue
        if not verb:
            out.append(_mismatch("template ends with a lone '%'", "%!(NOVERB)", strict=strict))
            continue
        if not remaining:
            out.append(_mismatch(f"missing argument for %{verb}", f"%!{verb}(MISSING)", strict=strict))
            continue

        value, remaining = remaining[0], remaining[1:]
        precision_raw = match.group("precision")
        precision = None if precision_raw is None else int(precision_raw or "0")

        text = _format_one(verb, value, precision)
        if text is None:
            text = _mismatch(
                f"%{verb} cannot format {type_name(value)} value {default_text(value)!r}",
                _bad_verb(verb, value),
                strict=strict,
            )
            out.append(text)
            continue
        out.append(_pad(text, match.group("width"), bool(match.group("left"))))

    out.append(template[pos:])

    if remaining:
        extra = ", ".join(f"{type_name(v)}={default_text(v)}" for v in remaining)
        out.append(_mismatch(f"{len(remaining)} extra argument(s): {extra}", f"%!(EXTRA {extra})", strict=strict))

    return "".join(out)


class Console:
    """
    Output side of the console: writes rendered text to an injected sink.

    When no sink is given, `sys.stdout` is looked up on every write so that
    redirection (and pytest's capture) is honoured.
    """

    def __init__(self, out: TextIO | None = None, *, strict: bool = False) -> None:
        self._out = out
        self.strict = strict

    @property
    def out(self) -> TextIO:
        return self._out if self._out is not None else sys.stdout

    def _write(self, text: str) -> None:
        self.out.write(text)
        self.out.flush()

    def emit(self, *values: Any) -> None:
        """Write values with no trailing newline; a space separates two non-string operands."""
        parts: list[str] = []
        for i, value in enumerate(values):
            if i > 0 and _kind(value) is not Kind.STRING and _kind(values[i - 1]) is not Kind.STRING:
                parts.append(" ")
            parts.append(default_text(value))
        self._write("".join(parts))

    def emit_line(self, *values: Any) -> None:
        """Write values separated by spaces, followed by a newline."""
        self._write(" ".join(default_text(v) for v in values) + "\n")

    def sprintf(self, template: str, *args: Any) -> str:
        return render(template, *args, strict=self.strict)

    def emitf(self, template: str, *args: Any) -> None:
        self._write(self.sprintf(template, *args))
