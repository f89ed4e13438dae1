"""Numeric conversions with fixed-width semantics.

Integer destinations wrap with two's-complement truncation, so 128 copied into
``np.int8`` yields -128. Float to integer truncates toward zero. Integer and
float to float round to the nearest representable value; integers beyond the
float range are not copyable.
"""

from __future__ import annotations

import math
from typing import Any

import numpy as np

from structcopy.core.types import Kind, TypeInfo
from structcopy.errors import TypeNonCopyableError


def wrap_integer(value: int, bits: int, signed: bool) -> int:
    """Truncate an integer to ``bits`` bits, two's complement.

    Args:
        value: Arbitrary precision integer.
        bits: Destination width.
        signed: Whether the destination is signed.

    Returns:
        The integer the destination width would hold.
    """
    wrapped = value & ((1 << bits) - 1)
    if signed and wrapped >= 1 << (bits - 1):
        wrapped -= 1 << bits
    return wrapped


def is_number(value: Any) -> bool:
    if isinstance(value, (bool, np.bool_, np.complexfloating)):
        return False
    return isinstance(value, (int, float, np.integer, np.floating))


def convert_number(value: Any, dst: TypeInfo) -> Any:
    """Convert a number into the numeric type described by ``dst``.

    Raises:
        TypeNonCopyableError: If value is not a real number, a non-finite float is
            converted to an integer type, or an integer exceeds the float range.
    """
    if not is_number(value):
        raise TypeNonCopyableError(
            f"Cannot convert {type(value).__name__} to {dst.cls.__name__}: not a number"
        )
    if type(value) is dst.cls:
        return value

    if dst.kind is Kind.INT:
        if isinstance(value, (float, np.floating)) and not math.isfinite(value):
            raise TypeNonCopyableError(f"Cannot convert {value!r} to {dst.cls.__name__}")
        number = int(value)
        if dst.bits is not None:
            number = wrap_integer(number, dst.bits, dst.signed)
        return dst.cls(number)

    if isinstance(value, np.integer):
        value = int(value)
    try:
        return dst.cls(value)
    except OverflowError as e:
        raise TypeNonCopyableError(
            f"Cannot convert {type(value).__name__} to {dst.cls.__name__}: {e}"
        ) from e
