# [TESTER] v1

"""Tests for exact rational helpers and human-price conversions."""

from __future__ import annotations

from decimal import Decimal
from fractions import Fraction

import pytest

from bondcurve.constants import ONE_Q64
from bondcurve.core.price import (
    create_sqrt_prices,
    get_amount_with_slippage,
    get_price_from_sqrt_price,
    get_price_impact,
    get_sqrt_price_from_market_cap,
    get_sqrt_price_from_price,
)
from bondcurve.core.rational import (
    fourth_root_floor,
    isqrt_fraction,
    nth_root_ceil,
    nth_root_floor,
    sqrt_fraction,
    to_fraction,
)
from bondcurve.errors import CurveArithmeticError, InvalidParameterError
from bondcurve.state import SwapMode


def test_to_fraction_accepts_exact_inputs_only() -> None:
    assert to_fraction("x", 3) == 3
    assert to_fraction("x", " 0.5 ") == Fraction(1, 2)
    assert to_fraction("x", "1_000") == 1_000
    assert to_fraction("x", Decimal("0.1")) == Fraction(1, 10)
    assert to_fraction("x", Fraction(2, 3)) == Fraction(2, 3)
    with pytest.raises(TypeError, match="floats"):
        to_fraction("x", 0.1)  # type: ignore[arg-type]
    with pytest.raises(TypeError):
        to_fraction("x", True)
    with pytest.raises(TypeError, match="unsupported"):
        to_fraction("x", [1])  # type: ignore[arg-type]
    with pytest.raises(InvalidParameterError, match="not a number"):
        to_fraction("x", "abc")


def test_square_roots_floor() -> None:
    assert isqrt_fraction(Fraction(17, 4)) == 2
    assert sqrt_fraction(Fraction(2), digits=3) == Fraction(1_414, 1_000)
    with pytest.raises(CurveArithmeticError):
        isqrt_fraction(Fraction(-1))


def test_nth_roots() -> None:
    assert nth_root_floor(Fraction(27), 3) == 3
    assert nth_root_floor(Fraction(28), 3) == 3
    assert nth_root_ceil(Fraction(27), 3) == 3
    assert nth_root_ceil(Fraction(28), 3) == 4
    assert nth_root_floor(Fraction(7, 2), 1) == 3
    assert nth_root_floor(Fraction(1, 2), 2) == 0
    assert nth_root_floor(Fraction(ONE_Q64**4), 4) == ONE_Q64
    with pytest.raises(InvalidParameterError):
        nth_root_floor(Fraction(8), 0)
    with pytest.raises(CurveArithmeticError):
        nth_root_floor(Fraction(-8), 3)


def test_fourth_root_floor() -> None:
    assert fourth_root_floor(16) == 2
    assert fourth_root_floor(81) == 3
    assert fourth_root_floor(80) == 2
    assert fourth_root_floor(ONE_Q64**4) == ONE_Q64
    with pytest.raises(CurveArithmeticError):
        fourth_root_floor(-16)


def test_sqrt_price_from_price_is_decimal_adjusted() -> None:
    assert get_sqrt_price_from_price("1", 6, 6) == ONE_Q64
    assert get_sqrt_price_from_price(4, 9, 9) == 2 * ONE_Q64
    # One raw quote lamport per raw base lamport is 0.001 quote per base at 6/9 decimals.
    assert get_sqrt_price_from_price("0.001", 6, 9) == ONE_Q64
    assert get_price_from_sqrt_price(ONE_Q64, 6, 9) == Fraction(1, 1_000)
    assert create_sqrt_prices(["1", "4"], 6, 6) == [ONE_Q64, 2 * ONE_Q64]
    with pytest.raises(InvalidParameterError):
        get_sqrt_price_from_price("-1", 6, 6)


def test_sqrt_price_from_market_cap() -> None:
    assert get_sqrt_price_from_market_cap(1_000, 1_000, 6, 6) == ONE_Q64
    with pytest.raises(InvalidParameterError, match="total_supply"):
        get_sqrt_price_from_market_cap(1_000, 0, 6, 6)


def test_price_round_trip_stays_below_input() -> None:
    sqrt_price = get_sqrt_price_from_price("0.000000042", 6, 9)
    recovered = get_price_from_sqrt_price(sqrt_price, 6, 9)
    assert recovered <= Fraction(42, 10**9)
    assert get_price_from_sqrt_price(sqrt_price + 1, 6, 9) > Fraction(42, 10**9)


def test_amount_with_slippage() -> None:
    assert get_amount_with_slippage(10_000, 0, SwapMode.EXACT_IN) == 10_000
    assert get_amount_with_slippage(10_000, 100, SwapMode.EXACT_IN) == 9_900
    assert get_amount_with_slippage(10_000, 100, SwapMode.PARTIAL_FILL) == 9_900
    assert get_amount_with_slippage(10_000, 100, SwapMode.EXACT_OUT) == 10_100
    assert get_amount_with_slippage(10_000, 10_000, SwapMode.EXACT_IN) == 0
    with pytest.raises(InvalidParameterError):
        get_amount_with_slippage(10_000, 10_001, SwapMode.EXACT_IN)
    with pytest.raises(InvalidParameterError):
        get_amount_with_slippage(10_000, -1, SwapMode.EXACT_OUT)


def test_price_impact() -> None:
    assert get_price_impact(0, 10, ONE_Q64, True) == 0
    assert get_price_impact(10, 0, ONE_Q64, False) == 0
    assert get_price_impact(10, 10, 0, True) == 0
    assert get_price_impact(100, 99, ONE_Q64, True) == 1
    assert get_price_impact(100, 99, ONE_Q64, False) == Fraction(100, 99)
