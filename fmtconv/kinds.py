"""
kinds.py

Responsibility: Name the value kinds the formatter and converter understand.

A `TypedValue` carries its `Kind` explicitly so that `%T` and the fixed-width
conversions never have to guess from the Python type. Plain Python values are
still accepted everywhere; `kind_of` maps them to a default kind.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any


class Kind(str, Enum):
    INT = "int"
    INT8 = "int8"
    INT16 = "int16"
    INT32 = "int32"
    INT64 = "int64"
    UINT = "uint"
    UINT8 = "uint8"
    UINT16 = "uint16"
    UINT32 = "uint32"
    UINT64 = "uint64"
    FLOAT32 = "float32"
    FLOAT64 = "float64"
    STRING = "string"
    BOOL = "bool"

    @property
    def is_integer(self) -> bool:
        return self in _INTEGER_LAYOUT

    @property
    def is_float(self) -> bool:
        return self in (Kind.FLOAT32, Kind.FLOAT64)

    @property
    def is_numeric(self) -> bool:
        return self.is_integer or self.is_float

    @property
    def width(self) -> int:
        """Bit width of a numeric kind."""
        if self.is_integer:
            return _INTEGER_LAYOUT[self][0]
        if self is Kind.FLOAT32:
            return 32
        if self is Kind.FLOAT64:
            return 64
        raise ValueError(f"Kind {self.value} has no bit width")

    @property
    def signed(self) -> bool:
        if self.is_integer:
            return _INTEGER_LAYOUT[self][1]
        return self.is_float

    @property
    def zero(self) -> Any:
        if self.is_integer:
            return 0
        if self.is_float:
            return 0.0
        if self is Kind.BOOL:
            return False
        return ""

    @classmethod
    def parse(cls, name: str) -> Kind:
        try:
            return cls(name.strip().lower())
        except ValueError:
            known = ", ".join(k.value for k in cls)
            raise ValueError(f"Unknown kind: {name!r} (expected one of: {known})") from None


# (width, signed)
_INTEGER_LAYOUT: dict[Kind, tuple[int, bool]] = {
    Kind.INT: (64, True),
    Kind.INT8: (8, True),
    Kind.INT16: (16, True),
    Kind.INT32: (32, True),
    Kind.INT64: (64, True),
    Kind.UINT: (64, False),
    Kind.UINT8: (8, False),
    Kind.UINT16: (16, False),
    Kind.UINT32: (32, False),
    Kind.UINT64: (64, False),
}


@dataclass(frozen=True)
class TypedValue:
    """A value tagged at the call site with the kind it should be treated as."""

    kind: Kind
    value: Any

    @classmethod
    def of(cls, kind: Kind | str, value: Any) -> TypedValue:
        """
        Build a TypedValue, bringing `value` into the representation of `kind`.

        Integer kinds wrap out-of-range values (two's complement), float kinds
        round to their precision. Strings and bools go through str() and bool().
        """
        # Local import: converter depends on this module.
        from fmtconv.converter import to_fixed_width, to_float

        k = kind if isinstance(kind, Kind) else Kind.parse(kind)
        if k.is_integer:
            return cls(k, to_fixed_width(int(value), k.width, k.signed))
        if k.is_float:
            return cls(k, to_float(value, k.width))
        if k is Kind.BOOL:
            return cls(k, bool(value))
        return cls(k, str(value))


def kind_of(value: Any) -> Kind:
    """Kind of a tagged value, or the default kind of a plain Python value."""
    if isinstance(value, TypedValue):
        return value.kind
    # bool before int: bool is an int subclass.
    if isinstance(value, bool):
        return Kind.BOOL
    if isinstance(value, int):
        return Kind.INT
    if isinstance(value, float):
        return Kind.FLOAT64
    if isinstance(value, str):
        return Kind.STRING
    raise TypeError(f"Unsupported value type: {type(value).__name__}")


def unwrap(value: Any) -> Any:
    """
    Return the raw Python value behind a TypedValue (or the value itself).

    A plain Python int is read as the 64-bit `int` kind, so it is wrapped to
    that range.
    """
    if isinstance(value, TypedValue):
        return value.value
    if isinstance(value, int) and not isinstance(value, bool):
        # Local import: converter depends on this module.
        from fmtconv.converter import to_fixed_width

        return to_fixed_width(value, 64, True)
    return value
