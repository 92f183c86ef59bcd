# [TESTER] v1

"""Tests for constant-product pool liquidity, swap and creation math."""

from __future__ import annotations

from dataclasses import replace

import pytest

from bondcurve.constants import MAX_FEE_NUMERATOR_V0, MAX_FEE_NUMERATOR_V1, ONE_Q64
from bondcurve.core.cp_amm import (
    calculate_init_sqrt_price,
    cp_swap_quote,
    cp_swap_quote_exact_in,
    cp_swap_quote_exact_out,
    cp_swap_quote_partial_fill,
    deposit_quote,
    get_amount_a_from_liquidity_delta,
    get_amount_b_from_liquidity_delta,
    get_liquidity_delta,
    get_max_fee_numerator,
    is_swap_enabled,
    withdraw_quote,
)
from bondcurve.errors import DivisionByZeroError, InsufficientLiquidityError, InvalidParameterError
from bondcurve.kernels.fixed_point import Rounding
from bondcurve.kernels.liquidity_math import get_next_sqrt_price_from_input
from bondcurve.state import (
    BaseFeeConfig,
    BaseFeeMode,
    CpCollectFeeMode,
    CpPool,
    PoolFeesConfig,
    TradeDirection,
)

A_TO_B = TradeDirection.BASE_TO_QUOTE
B_TO_A = TradeDirection.QUOTE_TO_BASE
HALF = ONE_Q64 // 2
LIQUIDITY = 10**15 << 64

POOL = CpPool(
    sqrt_price=ONE_Q64,
    liquidity=LIQUIDITY,
    pool_fees=PoolFeesConfig(
        base_fee=BaseFeeConfig(mode=BaseFeeMode.FEE_SCHEDULER_LINEAR, cliff_fee_numerator=10_000_000)
    ),
    sqrt_min_price=HALF,
    sqrt_max_price=2 * ONE_Q64,
)


def test_max_fee_numerator_by_pool_version() -> None:
    assert get_max_fee_numerator(0) == MAX_FEE_NUMERATOR_V0 == 500_000_000
    assert get_max_fee_numerator(1) == MAX_FEE_NUMERATOR_V1
    with pytest.raises(InvalidParameterError, match="unknown pool version"):
        get_max_fee_numerator(7)


def test_deposit_of_either_token_mints_the_same_liquidity_at_parity() -> None:
    from_a = deposit_quote(POOL, 10**12, is_token_a=True, slippage_bps=100)
    from_b = deposit_quote(POOL, 10**12, is_token_a=False)
    assert from_a.liquidity_delta == from_b.liquidity_delta == 2 * 10**12 * ONE_Q64
    assert from_a.output_amount == from_b.output_amount == 10**12
    assert from_a.consumed_input_amount == 10**12
    assert from_a.maximum_output_amount == 101 * 10**10


def test_withdraw_rounds_down_and_checks_pool_liquidity() -> None:
    quote = withdraw_quote(POOL, 2 * 10**12 * ONE_Q64, slippage_bps=50)
    assert (quote.out_amount_a, quote.out_amount_b) == (10**12, 10**12)
    assert quote.minimum_out_amount_a == 10**12 * 9_950 // 10_000
    with pytest.raises(InsufficientLiquidityError):
        withdraw_quote(POOL, LIQUIDITY + 1)


def test_liquidity_delta_takes_the_binding_token() -> None:
    delta = get_liquidity_delta(10**12, 5 * 10**11, 2 * ONE_Q64, HALF, ONE_Q64)
    assert delta == 10**12 * ONE_Q64
    with pytest.raises(DivisionByZeroError):
        get_liquidity_delta(1, 1, ONE_Q64, HALF, ONE_Q64)


def test_a_to_b_charges_output_in_both_token_mode() -> None:
    result = cp_swap_quote_exact_in(POOL, amount_in=10**9, direction=A_TO_B, current_point=0)
    next_sqrt_price = get_next_sqrt_price_from_input(ONE_Q64, LIQUIDITY, 10**9, True)
    raw_out = get_amount_b_from_liquidity_delta(LIQUIDITY, next_sqrt_price, ONE_Q64, Rounding.DOWN)
    assert result.next_sqrt_price == next_sqrt_price < ONE_Q64
    assert result.amount_out + result.trading_fee + result.protocol_fee == raw_out
    assert result.trading_fee + result.protocol_fee == -(-raw_out // 100)


def test_b_to_a_charges_input_in_only_b_mode() -> None:
    pool = replace(POOL, collect_fee_mode=CpCollectFeeMode.ONLY_B)
    result = cp_swap_quote(pool, amount=10**9, direction=B_TO_A, current_point=0)
    assert result.excluded_fee_input_amount == 99 * 10**7
    next_sqrt_price = get_next_sqrt_price_from_input(ONE_Q64, LIQUIDITY, 99 * 10**7, False)
    assert result.next_sqrt_price == next_sqrt_price > ONE_Q64
    assert result.amount_out == get_amount_a_from_liquidity_delta(
        LIQUIDITY, ONE_Q64, next_sqrt_price, Rounding.DOWN
    )


def test_exact_out_round_trips_exact_in() -> None:
    exact_in = cp_swap_quote(POOL, amount=10**9, direction=B_TO_A, current_point=0)
    exact_out = cp_swap_quote_exact_out(POOL, amount_out=exact_in.amount_out, direction=B_TO_A, current_point=0)
    assert abs(exact_out.included_fee_input_amount - 10**9) <= 10


def test_swaps_outside_the_price_range_raise() -> None:
    with pytest.raises(InsufficientLiquidityError, match="price range"):
        cp_swap_quote(POOL, amount=10**16, direction=A_TO_B, current_point=0)
    with pytest.raises(InsufficientLiquidityError, match="price range"):
        cp_swap_quote_exact_out(POOL, amount_out=6 * 10**14, direction=A_TO_B, current_point=0)


def test_partial_fill_stops_at_the_range_bound() -> None:
    result = cp_swap_quote_partial_fill(POOL, amount_in=10**16, direction=A_TO_B, current_point=0)
    assert result.next_sqrt_price == HALF
    assert result.amount_left == 9 * 10**15
    assert result.included_fee_input_amount == 10**15
    # 5e14 of B leaves the pool; 1% of it is the fee.
    assert result.amount_out == 495 * 10**12


def test_disabled_or_inactive_pool_rejects_swaps() -> None:
    disabled = replace(POOL, enabled=False)
    pending = replace(POOL, activation_point=100)
    assert not is_swap_enabled(disabled, 1_000)
    assert not is_swap_enabled(pending, 50)
    assert is_swap_enabled(pending, 100)
    with pytest.raises(InvalidParameterError, match="disabled"):
        cp_swap_quote(disabled, amount=1, direction=A_TO_B, current_point=0)
    with pytest.raises(InvalidParameterError, match="disabled"):
        cp_swap_quote(pending, amount=1, direction=A_TO_B, current_point=50)


def test_market_cap_scheduler_reads_price_growth_since_creation() -> None:
    fees = PoolFeesConfig(
        base_fee=BaseFeeConfig(
            mode=BaseFeeMode.FEE_MARKET_CAP_SCHEDULER_LINEAR,
            cliff_fee_numerator=100_000_000,
            first_factor=50,
            second_factor=100,
            third_factor=1_000_000,
            scheduler_expiration_duration=3_600,
        )
    )
    pool = replace(POOL, pool_fees=fees, init_sqrt_price=ONE_Q64 * 10 // 11)
    result = cp_swap_quote(pool, amount=10**9, direction=A_TO_B, current_point=10)
    next_sqrt_price = get_next_sqrt_price_from_input(ONE_Q64, LIQUIDITY, 10**9, True)
    raw_out = get_amount_b_from_liquidity_delta(LIQUIDITY, next_sqrt_price, ONE_Q64, Rounding.DOWN)
    # 10% above the creation price: ten 1% steps off a 10% cliff.
    assert result.trading_fee + result.protocol_fee == -(-raw_out * 90_000_000 // 1_000_000_000)


def test_init_sqrt_price_balances_both_amounts() -> None:
    assert calculate_init_sqrt_price(10**12, 10**12, HALF, 2 * ONE_Q64) == ONE_Q64
    skewed = calculate_init_sqrt_price(10**12, 4 * 10**12, HALF, 2 * ONE_Q64)
    assert ONE_Q64 < skewed < 2 * ONE_Q64
    with pytest.raises(InvalidParameterError):
        calculate_init_sqrt_price(0, 1, HALF, 2 * ONE_Q64)
