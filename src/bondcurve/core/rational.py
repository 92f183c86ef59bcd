"""
Exact rational helpers for curve construction.

Human-level inputs (prices, market caps, percentages) become `Fraction`s;
irrational steps (square and n-th roots) are taken as explicit integer floors
or ceilings. Binary floats are rejected everywhere.
"""

from __future__ import annotations

import math
from decimal import Decimal
from fractions import Fraction
from typing import Union

from ..errors import CurveArithmeticError, InvalidParameterError
from ..kernels.fixed_point import sqrt as isqrt

Number = Union[int, str, Decimal, Fraction]

# Digits kept when an irrational ratio has to be carried as a Fraction.
DEFAULT_PRECISION_DIGITS = 40


def to_fraction(name: str, value: Number) -> Fraction:
    if isinstance(value, bool) or isinstance(value, float):
        raise TypeError(f"{name} must be an int, str, Decimal or Fraction (floats are not exact)")
    if isinstance(value, Fraction):
        return value
    if isinstance(value, (int, Decimal)):
        return Fraction(value)
    if isinstance(value, str):
        try:
            return Fraction(value.strip().replace("_", ""))
        except ValueError as exc:
            raise InvalidParameterError(f"{name} is not a number: {value!r}") from exc
    raise TypeError(f"{name} has unsupported type {type(value).__name__}")


def isqrt_fraction(value: Fraction) -> int:
    """`floor(sqrt(value))` for a non-negative rational."""
    return isqrt(math.floor(value))


def sqrt_fraction(value: Fraction, digits: int = DEFAULT_PRECISION_DIGITS) -> Fraction:
    """`sqrt(value)` truncated to `digits` decimal places."""
    scale = 10**digits
    return Fraction(isqrt_fraction(value * scale * scale), scale)


def nth_root_floor(value: Fraction, n: int) -> int:
    """Largest integer k with `k**n <= value`."""
    if value < 0:
        raise CurveArithmeticError(f"root of negative value: {value}")
    if n <= 0:
        raise InvalidParameterError(f"root degree must be positive: {n}")
    if n == 1:
        return math.floor(value)
    num, den = value.numerator, value.denominator
    lo, hi = 0, 1 << ((num // den).bit_length() // n + 1)
    while lo < hi:
        mid = (lo + hi + 1) // 2
        if mid**n * den <= num:
            lo = mid
        else:
            hi = mid - 1
    return lo


def nth_root_ceil(value: Fraction, n: int) -> int:
    root = nth_root_floor(value, n)
    if Fraction(root) ** n == value:
        return root
    return root + 1


def fourth_root_floor(value: int) -> int:
    return isqrt(isqrt(value))
