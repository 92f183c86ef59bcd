"""
Fixed-point arithmetic kernel (deterministic, integer-only).

Algorithm Design:
- Type: Arbitrary-precision integer arithmetic with explicit rounding direction
- Time Complexity: O(1) per mul_div; O(log e) for pow
- Invariant: every division states whether it rounds up or down; no floats

Prices are Q64.64 (`ONE_Q64 = 2**64`), liquidity is Q128-scaled.
"""

from __future__ import annotations

import math
from enum import Enum, unique

from ..constants import MAX_EXPONENTIAL, ONE_Q64, RESOLUTION, U128_MAX
from ..errors import CurveArithmeticError, DivisionByZeroError


@unique
class Rounding(Enum):
    UP = "up"
    DOWN = "down"


def _require_int(name: str, value: int) -> None:
    if not isinstance(value, int) or isinstance(value, bool):
        raise TypeError(f"{name} must be an int")


def ceil_div(numerator: int, denominator: int) -> int:
    if denominator == 0:
        raise DivisionByZeroError("division by zero")
    return -((-numerator) // denominator)


def mul_div(x: int, y: int, denominator: int, rounding: Rounding) -> int:
    """
    Compute `x * y / denominator` rounded in the requested direction.

    Short-circuits `denominator == 1` and zero factors the same way the
    on-chain program does.
    """
    _require_int("x", x)
    _require_int("y", y)
    _require_int("denominator", denominator)
    if denominator == 0:
        raise DivisionByZeroError("mul_div denominator is zero")
    if denominator == 1 or x == 0 or y == 0:
        return x * y
    prod = x * y
    if rounding is Rounding.UP:
        return ceil_div(prod, denominator)
    return prod // denominator


def mul_shr(x: int, y: int, offset: int) -> int:
    """Compute `(x * y) >> offset` (floor)."""
    _require_int("x", x)
    _require_int("y", y)
    if x == 0 or y == 0:
        return 0
    return (x * y) >> offset


def shl_div(x: int, y: int, offset: int, rounding: Rounding) -> int:
    """Compute `(x << offset) / y` rounded in the requested direction."""
    if y == 0:
        raise DivisionByZeroError("shl_div denominator is zero")
    return mul_div(x, 1 << offset, y, rounding)


def sqrt(value: int, precision_bits: int = 0) -> int:
    """
    Floor square root of `value * 2**precision_bits`.

    A Q64.64 operand keeps its scale with `precision_bits=64`.
    """
    _require_int("value", value)
    _require_int("precision_bits", precision_bits)
    if value < 0:
        raise CurveArithmeticError(f"square root of negative value: {value}")
    if precision_bits < 0:
        raise ValueError("precision_bits must be non-negative")
    return math.isqrt(value << precision_bits)


def pow(base: int, exponent: int) -> int:
    """
    Raise a Q64.64 `base` to an integer `exponent`, returning Q64.64.

    Bases >= 1.0 are inverted first so intermediates stay below 2**128; the
    result is re-inverted at the end. A negative exponent yields the
    reciprocal. Exponents beyond MAX_EXPONENTIAL underflow to 0.
    """
    _require_int("base", base)
    _require_int("exponent", exponent)
    if base < 0:
        raise CurveArithmeticError("pow base must be non-negative")
    if exponent == 0:
        return ONE_Q64
    if base == 0:
        return 0
    if base == ONE_Q64:
        return ONE_Q64

    invert = exponent < 0
    exp = -exponent if invert else exponent
    if exp > MAX_EXPONENTIAL:
        return 0

    if exp == 1 and not invert:
        return base

    squared = base
    if squared >= ONE_Q64:
        squared = U128_MAX // squared
        invert = not invert

    result = ONE_Q64
    while exp:
        if exp & 1:
            result = (result * squared) >> RESOLUTION
        exp >>= 1
        if exp:
            squared = (squared * squared) >> RESOLUTION

    if result == 0:
        return 0
    if invert:
        return U128_MAX // result
    return result
