# [TESTER] v1

"""Tests for the delta / next-price / initial-liquidity primitives."""

from __future__ import annotations

import pytest

from bondcurve.constants import MAX_SQRT_PRICE, MIN_SQRT_PRICE, ONE_Q64, Q128
from bondcurve.errors import CurveArithmeticError, DivisionByZeroError
from bondcurve.kernels.fixed_point import Rounding
from bondcurve.kernels.liquidity_math import (
    get_delta_amount_base_unsigned,
    get_delta_amount_quote_unsigned,
    get_initial_liquidity_from_delta_base,
    get_initial_liquidity_from_delta_quote,
    get_liquidity,
    get_next_sqrt_price_from_input,
    get_next_sqrt_price_from_output,
)

LOWER = ONE_Q64
UPPER = 2 * ONE_Q64
LIQUIDITY = 10**12 * Q128 // ONE_Q64


def test_delta_amounts_round_up_by_at_most_one() -> None:
    for fn in (get_delta_amount_base_unsigned, get_delta_amount_quote_unsigned):
        up = fn(LOWER, UPPER + 7, LIQUIDITY + 3, Rounding.UP)
        down = fn(LOWER, UPPER + 7, LIQUIDITY + 3, Rounding.DOWN)
        assert 0 <= up - down <= 1


def test_delta_amounts_match_closed_form_on_exact_inputs() -> None:
    # Price 1.0 -> 4.0 (sqrt 1 -> 2): base = L * (1/1 - 1/2), quote = L * (2 - 1).
    liquidity = 2 * Q128
    assert get_delta_amount_base_unsigned(LOWER, UPPER, liquidity, Rounding.DOWN) == liquidity // (2 * ONE_Q64)
    assert get_delta_amount_quote_unsigned(LOWER, UPPER, liquidity, Rounding.DOWN) == 2 * ONE_Q64


def test_delta_amount_rejects_inverted_range_and_zero_price() -> None:
    with pytest.raises(CurveArithmeticError):
        get_delta_amount_base_unsigned(UPPER, LOWER, LIQUIDITY, Rounding.UP)
    with pytest.raises(DivisionByZeroError):
        get_delta_amount_base_unsigned(0, UPPER, LIQUIDITY, Rounding.UP)


def test_next_sqrt_price_moves_in_trade_direction() -> None:
    price = (LOWER + UPPER) // 2
    assert get_next_sqrt_price_from_input(price, LIQUIDITY, 10**6, base_for_quote=True) < price
    assert get_next_sqrt_price_from_input(price, LIQUIDITY, 10**6, base_for_quote=False) > price
    assert get_next_sqrt_price_from_output(price, LIQUIDITY, 10**6, base_for_quote=True) < price
    assert get_next_sqrt_price_from_output(price, LIQUIDITY, 10**6, base_for_quote=False) > price


def test_next_sqrt_price_with_zero_amount_is_unchanged() -> None:
    assert get_next_sqrt_price_from_input(LOWER, LIQUIDITY, 0, base_for_quote=True) == LOWER
    assert get_next_sqrt_price_from_input(LOWER, LIQUIDITY, 0, base_for_quote=False) == LOWER


def test_base_input_rounds_next_price_up_for_large_products() -> None:
    # amount * price is far above 2**128; the result must still be the ceiling.
    price, liquidity, amount = 2**80, 2**120 + 12_345, 2**50 + 7
    expected = -(-liquidity * price // (liquidity + amount * price))
    assert get_next_sqrt_price_from_input(price, liquidity, amount, base_for_quote=True) == expected
    assert expected == 1_179_439_824_014_265_039_851


def test_next_sqrt_price_requires_liquidity() -> None:
    with pytest.raises(CurveArithmeticError):
        get_next_sqrt_price_from_input(LOWER, 0, 1, base_for_quote=False)


def test_base_output_beyond_segment_fails() -> None:
    # The segment cannot hand out L / P base or more.
    too_much = LIQUIDITY // LOWER + 1
    with pytest.raises(CurveArithmeticError):
        get_next_sqrt_price_from_output(LOWER, LIQUIDITY, too_much, base_for_quote=False)


def test_quote_output_beyond_price_floor_fails() -> None:
    with pytest.raises(CurveArithmeticError):
        get_next_sqrt_price_from_output(MIN_SQRT_PRICE, 1, 10**18, base_for_quote=True)


def test_initial_liquidity_round_trips_through_delta_amounts() -> None:
    base_amount = 5 * 10**15
    liquidity = get_initial_liquidity_from_delta_base(base_amount, UPPER, LOWER)
    assert get_delta_amount_base_unsigned(LOWER, UPPER, liquidity, Rounding.DOWN) <= base_amount
    assert get_delta_amount_base_unsigned(LOWER, UPPER, liquidity, Rounding.UP) >= base_amount - 1

    quote_amount = 7 * 10**12
    liquidity = get_initial_liquidity_from_delta_quote(quote_amount, LOWER, UPPER)
    assert get_delta_amount_quote_unsigned(LOWER, UPPER, liquidity, Rounding.UP) == quote_amount


def test_initial_liquidity_requires_non_empty_range() -> None:
    with pytest.raises(CurveArithmeticError):
        get_initial_liquidity_from_delta_base(1, LOWER, LOWER)
    with pytest.raises(CurveArithmeticError):
        get_initial_liquidity_from_delta_quote(1, UPPER, LOWER)


def test_get_liquidity_is_limited_by_the_scarcer_side() -> None:
    base_amount, quote_amount = 10**15, 10**9
    liquidity = get_liquidity(base_amount, quote_amount, LOWER, UPPER)
    assert liquidity == min(
        get_initial_liquidity_from_delta_base(base_amount, UPPER, LOWER),
        get_initial_liquidity_from_delta_quote(quote_amount, LOWER, UPPER),
    )
    assert get_delta_amount_base_unsigned(LOWER, UPPER, liquidity, Rounding.DOWN) <= base_amount
    assert get_delta_amount_quote_unsigned(LOWER, UPPER, liquidity, Rounding.DOWN) <= quote_amount


def test_full_range_holds_base_near_max_price() -> None:
    liquidity = get_initial_liquidity_from_delta_base(10**9, MAX_SQRT_PRICE, MIN_SQRT_PRICE)
    assert get_delta_amount_base_unsigned(MIN_SQRT_PRICE, MAX_SQRT_PRICE, liquidity, Rounding.DOWN) <= 10**9
