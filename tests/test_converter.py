import math

import pytest

from fmtconv.converter import (
    ConversionError,
    convert,
    number_to_text,
    text_to_float,
    text_to_integer,
    text_to_value,
    to_fixed_width,
    to_float,
)
from fmtconv.formatter import render
from fmtconv.kinds import Kind, TypedValue


@pytest.mark.parametrize("v", [-1, -42, -(2**63), -(2**63) + 1])
def test_negative_int64_to_uint64_adds_two_to_the_64(v: int) -> None:
    assert to_fixed_width(v, 64, False) == v + 2**64


@pytest.mark.parametrize("v", [0, 1, 42, 2**63 - 1])
def test_non_negative_int64_to_uint64_is_unchanged(v: int) -> None:
    assert to_fixed_width(v, 64, False) == v


def test_minus_42_as_uint64() -> None:
    assert to_fixed_width(-42, 64, False) == 18446744073709551574


@pytest.mark.parametrize(
    ("value", "width", "signed", "expected"),
    [
        (256, 8, True, 0),
        (-1, 8, False, 255),
        (128, 8, True, -128),
        (255, 8, True, -1),
        (2**32 + 5, 32, True, 5),
        (70000, 16, False, 70000 - 65536),
        (-1, 32, False, 2**32 - 1),
    ],
)
def test_fixed_width_wraps(value: int, width: int, signed: bool, expected: int) -> None:
    assert to_fixed_width(value, width, signed) == expected


def test_fixed_width_rejects_unsupported_width() -> None:
    with pytest.raises(ValueError):
        to_fixed_width(1, 12, True)


def test_to_float_loses_precision_silently() -> None:
    assert to_float(2**53 + 1) == float(2**53)
    assert to_float(16777217, 32) == 16777216.0


def test_to_float_overflow_becomes_infinity() -> None:
    assert to_float(10**400) == math.inf
    assert to_float(-(10**400)) == -math.inf
    assert to_float(2**200, 32) == math.inf


def test_to_float_rejects_unsupported_precision() -> None:
    with pytest.raises(ValueError):
        to_float(1, 16)


@pytest.mark.parametrize(
    ("value", "expected"),
    [
        (42, "42"),
        (-7, "-7"),
        (0, "0"),
        (3.14159, "3.14159"),
        (32.0, "32"),
        (1e6, "1e+06"),
        (123456.0, "123456"),
        (1e-5, "1e-05"),
        (0.0001, "0.0001"),
        (-2.5, "-2.5"),
        (TypedValue.of(Kind.FLOAT32, 0.1), "0.1"),
        (TypedValue.of(Kind.UINT8, -1), "255"),
    ],
)
def test_number_to_text(value: object, expected: str) -> None:
    assert number_to_text(value) == expected


@pytest.mark.parametrize("value", ["12", True, None])
def test_number_to_text_rejects_non_numbers(value: object) -> None:
    with pytest.raises(TypeError):
        number_to_text(value)


def test_number_to_text_wraps_plain_ints() -> None:
    assert number_to_text(2**64 + 5) == "5"
    assert number_to_text(2**63) == "-9223372036854775808"


@pytest.mark.parametrize("s", ["0", "7", "-7", "9223372036854775807", "-9223372036854775808"])
def test_integer_text_round_trip(s: str) -> None:
    result = text_to_integer(s)
    assert result.ok
    assert number_to_text(result.value) == s


@pytest.mark.parametrize("s", ["", "abc", "3.14", " 1", "1 ", "1_000", "0x10", "--1"])
def test_text_to_integer_invalid_syntax(s: str) -> None:
    result = text_to_integer(s)
    assert not result.ok
    assert result.value == 0
    assert result.error.reason == "invalid syntax"


def test_text_to_integer_error_message() -> None:
    result = text_to_integer("abc")
    assert str(result.error) == 'text_to_integer: parsing "abc": invalid syntax'
    assert result.error.func == "text_to_integer"
    with pytest.raises(ConversionError):
        result.unwrap()


@pytest.mark.parametrize(
    ("s", "width", "signed"),
    [
        ("9223372036854775808", 64, True),
        ("-9223372036854775809", 64, True),
        ("128", 8, True),
        ("256", 8, False),
        ("18446744073709551616", 64, False),
    ],
)
def test_text_to_integer_out_of_range(s: str, width: int, signed: bool) -> None:
    result = text_to_integer(s, width, signed)
    assert result.error is not None
    assert result.error.reason == "value out of range"
    assert result.value == 0


def test_text_to_integer_width_bounds() -> None:
    assert text_to_integer("-128", 8).value == -128
    assert text_to_integer("255", 8, signed=False).value == 255
    assert text_to_integer("+5").value == 5


def test_unsigned_text_rejects_sign() -> None:
    assert text_to_integer("-1", 64, signed=False).error.reason == "invalid syntax"
    assert text_to_integer("+1", 64, signed=False).error.reason == "invalid syntax"


@pytest.mark.parametrize("s", ["1" * 5000, "-" + "9" * 5000, "1" + "0" * 20])
def test_text_to_integer_very_long_input_is_out_of_range(s: str) -> None:
    result = text_to_integer(s)
    assert result.error is not None
    assert result.error.reason == "value out of range"
    assert result.value == 0


def test_text_to_integer_ignores_leading_zeros() -> None:
    assert text_to_integer("0" * 5000 + "7").value == 7
    assert text_to_integer("-" + "0" * 30 + "128", 8).value == -128


def test_text_to_float_renders_with_six_fraction_digits() -> None:
    result = text_to_float("3.14159", 64)
    assert result.ok
    assert render("%f", result.value) == "3.141590"


@pytest.mark.parametrize("s", ["", "abc", "1.2.3", "1e", " 1.5", "1_0.5"])
def test_text_to_float_invalid_syntax(s: str) -> None:
    result = text_to_float(s)
    assert result.error is not None
    assert result.error.reason == "invalid syntax"
    assert result.value == 0.0


def test_text_to_float_out_of_range() -> None:
    assert text_to_float("1e400").error.reason == "value out of range"
    assert text_to_float("3.4e39", 32).error.reason == "value out of range"
    assert text_to_float("3.4e38", 32).ok


def test_text_to_float_special_values() -> None:
    assert text_to_float("-inf").value == -math.inf
    assert text_to_float("Infinity").value == math.inf
    assert math.isnan(text_to_float("NaN").value)


@pytest.mark.parametrize("s", ["+nan", "-nan", "-NaN"])
def test_text_to_float_rejects_signed_nan(s: str) -> None:
    assert text_to_float(s).error.reason == "invalid syntax"


def test_text_to_float_single_precision_rounds_once() -> None:
    # 1 + 2**-24 is the halfway point between 1.0 and the next float32.
    assert text_to_float("1.000000059604644775390625", 32).value == 1.0
    assert text_to_float("1.00000005960464477539062501", 32).value == 1 + 2**-23
    assert text_to_float("-1.00000005960464477539062501", 32).value == -(1 + 2**-23)


def test_text_to_float_single_precision_rounds() -> None:
    value = text_to_float("0.1", 32).value
    assert value != 0.1
    assert abs(value - 0.1) < 1e-8


def test_text_to_float_accepts_exponent_and_bare_fraction() -> None:
    assert text_to_float("1.5e3").value == 1500.0
    assert text_to_float(".5").value == 0.5
    assert text_to_float("5.").value == 5.0


def test_text_to_value_bool_and_string() -> None:
    assert text_to_value("true", Kind.BOOL).value is True
    assert text_to_value("0", Kind.BOOL).value is False
    assert not text_to_value("yes", Kind.BOOL).ok
    assert text_to_value(" keep  spaces ", Kind.STRING).value == " keep  spaces "


@pytest.mark.parametrize(
    ("value", "kind", "expected"),
    [
        (3.9, Kind.INT8, 3),
        (-3.9, Kind.INT8, -3),
        (300.7, Kind.INT8, 44),
        (math.nan, Kind.INT, 0),
        (TypedValue.of(Kind.INT, -42), Kind.UINT, 18446744073709551574),
        (32, Kind.INT8, 32),
        (32, Kind.FLOAT32, 32.0),
        (32, Kind.STRING, "32"),
        (2.5, Kind.STRING, "2.5"),
    ],
)
def test_convert(value: object, kind: Kind, expected: object) -> None:
    converted = convert(value, kind)
    assert converted.kind is kind
    assert converted.value == expected


def test_convert_rejects_text_to_number() -> None:
    with pytest.raises(TypeError):
        convert("32", Kind.INT)
