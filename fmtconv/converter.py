"""
converter.py

Responsibility: Explicit, deterministic conversions between numeric kinds and
between numbers and text.

Rules:
- Fixed-width conversions wrap (two's complement truncation); they never fail.
- Integer to float conversion may lose precision silently; it never fails.
- Text parsing returns a `ConversionResult` instead of raising. On failure the
  value is the zero value of the target kind and must not be used.

This module does NOT know about templates or input streams.
"""

from __future__ import annotations

import logging
import math
import re
import struct
from dataclasses import dataclass
from decimal import Decimal, localcontext
from typing import Any

from fmtconv.kinds import Kind, TypedValue, kind_of, unwrap

logger = logging.getLogger(__name__)

SUPPORTED_WIDTHS = (8, 16, 32, 64)

_INTEGER_RE = re.compile(r"[+-]?[0-9]+")
_FLOAT_RE = re.compile(r"[+-]?(?:[0-9]+\.?[0-9]*|\.[0-9]+)(?:[eE][+-]?[0-9]+)?")
_INFINITIES = ("inf", "infinity")

# More digits than any 64-bit bound has (2**64 - 1 has 20).
_MAX_INTEGER_DIGITS = 20
_FLOAT32_INF_BITS = 0x7F800000

INVALID_SYNTAX = "invalid syntax"
OUT_OF_RANGE = "value out of range"


class ConversionError(ValueError):
    def __init__(self, func: str, text: str, reason: str) -> None:
        super().__init__(f'{func}: parsing "{text}": {reason}')
        self.func = func
        self.text = text
        self.reason = reason


@dataclass(frozen=True)
class ConversionResult:
    """Outcome of a text-to-number conversion: check `error` before using `value`."""

    value: Any
    error: ConversionError | None = None

    @property
    def ok(self) -> bool:
        return self.error is None

    def unwrap(self) -> Any:
        if self.error is not None:
            raise self.error
        return self.value


def _failed(func: str, text: str, reason: str, zero: Any) -> ConversionResult:
    error = ConversionError(func, text, reason)
    logger.debug("conversion failed: %s", error)
    return ConversionResult(value=zero, error=error)


def to_fixed_width(value: int, target_width: int, signed: bool) -> int:
    """
    Reinterpret the low `target_width` bits of `value` as a signed or unsigned
    integer. No range check: 256 as int8 is 0, -1 as uint8 is 255, and -42 as
    uint64 is 2**64 - 42.
    """
    if target_width not in SUPPORTED_WIDTHS:
        raise ValueError(f"Unsupported width: {target_width} (expected one of {SUPPORTED_WIDTHS})")
    bits = int(value) & ((1 << target_width) - 1)
    if signed and bits >= 1 << (target_width - 1):
        bits -= 1 << target_width
    return bits


def _round_to_float32(value: float) -> float:
    try:
        return struct.unpack("<f", struct.pack("<f", value))[0]
    except OverflowError:
        return math.copysign(math.inf, value)


def _float32_bits(value: float) -> int:
    return struct.unpack("<I", struct.pack("<f", value))[0]


def _float32_from_bits(bits: int) -> float:
    return struct.unpack("<f", struct.pack("<I", bits))[0]


def _parse_float32(text: str) -> float:
    """
    Round a decimal literal straight to the nearest float32, ties to even.

    Going through float64 first can land exactly on a float32 halfway point
    and then round the wrong way, so the float64-derived candidate is checked
    against its two neighbours using the exact decimal value.
    """
    exact = Decimal(text)
    magnitude = abs(_round_to_float32(float(exact)))
    if math.isinf(magnitude):
        return math.copysign(math.inf, float(exact))

    bits = _float32_bits(magnitude)
    options = [bits]
    if bits > 0:
        options.append(bits - 1)
    if bits + 1 < _FLOAT32_INF_BITS:
        options.append(bits + 1)

    target = abs(exact)
    with localcontext() as ctx:
        ctx.prec = max(1000, len(text) + 200)
        best = min(options, key=lambda b: (abs(target - Decimal(_float32_from_bits(b))), b & 1))
    value = _float32_from_bits(best)
    return -value if exact.is_signed() else value


def to_float(value: int | float, target_precision: int = 64) -> float:
    """
    Convert a number to a float of the given precision (32 or 64 bits).

    Large integers lose precision silently; magnitudes beyond the target range
    become infinities. Plain Python ints are taken at face value, not wrapped.
    """
    if target_precision not in (32, 64):
        raise ValueError(f"Unsupported float precision: {target_precision} (expected 32 or 64)")
    raw = value.value if isinstance(value, TypedValue) else value
    try:
        as_float = float(raw)
    except OverflowError:
        as_float = math.inf if raw > 0 else -math.inf
    if target_precision == 32:
        return _round_to_float32(as_float)
    return as_float


def _shortest_digits(value: float, precision: int) -> tuple[str, int]:
    """
    Return (digits, decimal_point) of the shortest decimal that reads back as
    `value` at `precision` bits. `value` must be finite and non-zero.
    """
    if precision == 32:
        for places in range(9):
            text = f"{abs(value):.{places}e}"
            if _round_to_float32(float(text)) == abs(value):
                break
    else:
        text = repr(abs(value))
    _sign, digits, exponent = Decimal(text).as_tuple()
    digits = list(digits)
    while len(digits) > 1 and digits[-1] == 0:
        digits.pop()
        exponent += 1
    return "".join(str(d) for d in digits), len(digits) + exponent


def _special_float(value: float) -> str | None:
    if math.isnan(value):
        return "NaN"
    if math.isinf(value):
        return "+Inf" if value > 0 else "-Inf"
    return None


def format_shortest(value: float, precision: int = 64) -> str:
    """
    Shortest round-trip text for a float, switching to exponent form when the
    decimal exponent is below -4 or at least 6 (`1e+06`, `3.14159`, `32`).
    """
    special = _special_float(value)
    if special is not None:
        return special
    sign = "-" if math.copysign(1.0, value) < 0 else ""
    if value == 0:
        return sign + "0"
    digits, point = _shortest_digits(value, precision)
    exponent = point - 1
    if exponent < -4 or exponent >= 6:
        mantissa = digits[0] + ("." + digits[1:] if len(digits) > 1 else "")
        exp_sign = "-" if exponent < 0 else "+"
        return f"{sign}{mantissa}e{exp_sign}{abs(exponent):02d}"
    if point <= 0:
        return f"{sign}0.{'0' * -point}{digits}"
    if point >= len(digits):
        return sign + digits + "0" * (point - len(digits))
    return f"{sign}{digits[:point]}.{digits[point:]}"


def format_fixed(value: float, places: int = 6) -> str:
    special = _special_float(value)
    if special is not None:
        return special
    return f"{value:.{places}f}"


def format_general(value: float, significant: int) -> str:
    """%g with an explicit number of significant digits (trailing zeros removed)."""
    special = _special_float(value)
    if special is not None:
        return special
    return f"{value:.{max(significant, 1)}g}"


def number_to_text(value: Any) -> str:
    """Canonical decimal text of an integer, shortest round-trip text of a float."""
    kind = kind_of(value)
    raw = unwrap(value)
    if kind.is_integer:
        return str(int(raw))
    if kind.is_float:
        return format_shortest(float(raw), kind.width)
    raise TypeError(f"number_to_text expects a numeric value, got {kind.value}")


def text_to_integer(text: str, width: int = 64, signed: bool = True) -> ConversionResult:
    """
    Parse base-10 `text` into an integer of the given width and signedness.

    Accepts an optional sign (signed targets only) followed by ASCII digits.
    Whitespace, underscores, decimal points and empty input are rejected.
    """
    if width not in SUPPORTED_WIDTHS:
        raise ValueError(f"Unsupported width: {width} (expected one of {SUPPORTED_WIDTHS})")
    if not _INTEGER_RE.fullmatch(text) or (not signed and text[0] in "+-"):
        return _failed("text_to_integer", text, INVALID_SYNTAX, 0)

    digits = text.lstrip("+-").lstrip("0")
    if len(digits) > _MAX_INTEGER_DIGITS:
        return _failed("text_to_integer", text, OUT_OF_RANGE, 0)
    value = int(digits or "0")
    if text.startswith("-"):
        value = -value
    if signed:
        low, high = -(1 << (width - 1)), (1 << (width - 1)) - 1
    else:
        low, high = 0, (1 << width) - 1
    if not low <= value <= high:
        return _failed("text_to_integer", text, OUT_OF_RANGE, 0)
    return ConversionResult(value=value)


def text_to_float(text: str, precision: int = 64) -> ConversionResult:
    """
    Parse a decimal floating point literal (optional exponent), inf or
    infinity with an optional sign, or an unsigned nan, at 32 or 64 bit
    precision. Both precisions round the decimal value once, to nearest even.
    """
    if precision not in (32, 64):
        raise ValueError(f"Unsupported float precision: {precision} (expected 32 or 64)")

    if text.lower() == "nan":
        return ConversionResult(value=math.nan)
    body = text[1:] if text[:1] in ("+", "-") else text
    if body.lower() in _INFINITIES:
        return ConversionResult(value=-math.inf if text.startswith("-") else math.inf)

    if not _FLOAT_RE.fullmatch(text):
        return _failed("text_to_float", text, INVALID_SYNTAX, 0.0)
    value = _parse_float32(text) if precision == 32 else float(text)
    if math.isinf(value):
        return _failed("text_to_float", text, OUT_OF_RANGE, 0.0)
    return ConversionResult(value=value)


_BOOL_TEXT = {
    "1": True, "t": True, "T": True, "true": True, "TRUE": True, "True": True,
    "0": False, "f": False, "F": False, "false": False, "FALSE": False, "False": False,
}


def text_to_value(text: str, kind: Kind) -> ConversionResult:
    """Parse `text` as any kind; strings are returned unchanged."""
    if kind.is_integer:
        return text_to_integer(text, kind.width, kind.signed)
    if kind.is_float:
        return text_to_float(text, kind.width)
    if kind is Kind.BOOL:
        if text in _BOOL_TEXT:
            return ConversionResult(value=_BOOL_TEXT[text])
        return _failed("text_to_value", text, INVALID_SYNTAX, False)
    return ConversionResult(value=text)


def convert(value: Any, kind: Kind) -> TypedValue:
    """
    Convert a value to another kind the way an explicit numeric cast would.

    - integer -> integer: wraps to the target width
    - float -> integer: truncates toward zero, then wraps (NaN/Inf give 0)
    - number -> float: `to_float`
    - number -> string: `number_to_text`
    """
    source = kind_of(value)
    raw = unwrap(value)

    if kind is source:
        return TypedValue.of(kind, raw)
    if kind.is_integer and source.is_float:
        if not math.isfinite(raw):
            return TypedValue(kind, 0)
        return TypedValue.of(kind, math.trunc(raw))
    if kind.is_integer and source.is_integer:
        return TypedValue.of(kind, raw)
    if kind.is_float and source.is_numeric:
        return TypedValue(kind, to_float(raw, kind.width))
    if kind is Kind.STRING and source.is_numeric:
        return TypedValue(kind, number_to_text(value))
    raise TypeError(f"Cannot convert {source.value} to {kind.value}")
