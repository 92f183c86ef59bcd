# [TESTER] v1

"""Tests for curve construction: every builder must conserve the token supply."""

from __future__ import annotations

import pytest

from bondcurve.constants import MAX_SQRT_PRICE, ONE_Q64
from bondcurve.core.build_params import BaseFeeParams, FeeSchedulerParams
from bondcurve.core.curve_builder import (
    BuildCurveBaseParams,
    BuildCurveResult,
    LockedVestingInput,
    build_curve,
    build_curve_with_custom_sqrt_prices,
    build_curve_with_liquidity_weights,
    build_curve_with_market_cap,
    build_curve_with_mid_price,
    build_curve_with_two_segments,
    get_liquidity_weight_sqrt_prices,
    get_total_supply_from_curve,
    get_two_segment_mid_sqrt_prices,
    solve_two_segment_liquidity,
)
from bondcurve.core.price import create_sqrt_prices, get_sqrt_price_from_market_cap
from bondcurve.core.swap_quote import swap_quote
from bondcurve.errors import InvalidParameterError, ReconciliationError
from bondcurve.state import ActivationType, BaseFeeMode, MigrationOption, SwapMode, TradeDirection, VirtualPool

SUPPLY = 1_000_000_000
SUPPLY_LAMPORTS = SUPPLY * 10**6

FLAT_FEE = BaseFeeParams(
    mode=BaseFeeMode.FEE_SCHEDULER_LINEAR,
    fee_scheduler=FeeSchedulerParams(starting_fee_bps=100, ending_fee_bps=100),
)


def _base(**overrides) -> BuildCurveBaseParams:
    fields = dict(total_token_supply=SUPPLY, token_base_decimal=6, token_quote_decimal=9, base_fee=FLAT_FEE)
    fields.update(overrides)
    return BuildCurveBaseParams(**fields)


def _assert_conserved(result: BuildCurveResult) -> None:
    assert result.total_supply == SUPPLY_LAMPORTS
    assert result.token_allocation.total == SUPPLY_LAMPORTS
    assert result.sqrt_start_price < result.migration_sqrt_price
    assert result.curve.sqrt_start_price == result.sqrt_start_price


def _assert_tradable(result: BuildCurveResult) -> None:
    quote = swap_quote(
        VirtualPool(sqrt_price=result.sqrt_start_price),
        result.pool_config(),
        amount=10**9,
        direction=TradeDirection.QUOTE_TO_BASE,
        current_point=0,
    )
    assert quote.amount_out > 0
    assert quote.next_sqrt_price > result.sqrt_start_price


def test_single_segment_reference_curve() -> None:
    result = build_curve(
        _base(migration_fee_percent=1), percentage_supply_on_migration=20, migration_quote_threshold=85
    )
    _assert_conserved(result)
    assert result.migration_quote_threshold == 85 * 10**9
    real_segments = [s for s in result.curve.segments if s.sqrt_price != MAX_SQRT_PRICE]
    assert len(real_segments) == 1
    assert result.token_allocation.padding_amount >= 0
    _assert_tradable(result)


def test_single_segment_fills_to_the_migration_price() -> None:
    result = build_curve(
        _base(migration_fee_percent=1), percentage_supply_on_migration=20, migration_quote_threshold=85
    )
    fill = swap_quote(
        VirtualPool(sqrt_price=result.sqrt_start_price),
        result.pool_config(),
        amount=10**12,
        direction=TradeDirection.QUOTE_TO_BASE,
        current_point=0,
        swap_mode=SwapMode.PARTIAL_FILL,
    )
    assert fill.next_sqrt_price == result.migration_sqrt_price
    assert abs(fill.excluded_fee_input_amount - result.migration_quote_threshold) <= 2
    assert fill.amount_left > 0


def test_single_segment_with_vesting_and_leftover() -> None:
    vesting = LockedVestingInput(
        total_locked_vesting_amount=100_000_000,
        number_of_vesting_period=10,
        total_vesting_duration=1_000,
    )
    result = build_curve(
        _base(locked_vesting=vesting, leftover=1_000, migration_option=MigrationOption.MET_DAMM),
        percentage_supply_on_migration=20,
        migration_quote_threshold=85,
    )
    _assert_conserved(result)
    assert result.token_allocation.vesting_amount == 100_000_000 * 10**6
    assert result.locked_vesting.total_amount == 100_000_000 * 10**6
    total = get_total_supply_from_curve(
        result.migration_quote_threshold,
        result.sqrt_start_price,
        result.curve.segments,
        result.locked_vesting,
        result.migration_option,
        result.token_allocation.leftover,
        0,
    )
    assert total <= SUPPLY_LAMPORTS


def test_single_segment_rejects_bad_inputs() -> None:
    with pytest.raises(InvalidParameterError):
        build_curve(_base(), percentage_supply_on_migration=0, migration_quote_threshold=85)
    with pytest.raises(InvalidParameterError):
        build_curve(_base(), percentage_supply_on_migration=100, migration_quote_threshold=85)
    with pytest.raises(InvalidParameterError):
        build_curve(_base(), percentage_supply_on_migration=20, migration_quote_threshold=0)
    with pytest.raises(InvalidParameterError, match="nothing to sell"):
        build_curve(_base(leftover=SUPPLY), percentage_supply_on_migration=20, migration_quote_threshold=85)
    with pytest.raises(TypeError):
        build_curve(_base(), percentage_supply_on_migration=20.0, migration_quote_threshold=85)


def test_base_params_validate_decimals_and_supply() -> None:
    with pytest.raises(InvalidParameterError, match="token_base_decimal"):
        _base(token_base_decimal=8)
    with pytest.raises(InvalidParameterError, match="total_token_supply"):
        _base(total_token_supply=0)
    with pytest.raises(InvalidParameterError, match="leftover"):
        _base(leftover=-1)


def test_market_cap_curve_opens_near_initial_market_cap() -> None:
    result = build_curve_with_market_cap(
        _base(leftover=10_000), initial_market_cap="23.5", migration_market_cap="405.882352941"
    )
    _assert_conserved(result)
    expected = get_sqrt_price_from_market_cap("23.5", SUPPLY, 6, 9)
    assert abs(result.sqrt_start_price - expected) * 100 < expected
    _assert_tradable(result)


def test_two_segment_mid_price_candidates() -> None:
    assert get_two_segment_mid_sqrt_prices(ONE_Q64, 16 * ONE_Q64) == [2 * ONE_Q64, 8 * ONE_Q64, 4 * ONE_Q64]


def test_solve_two_segment_liquidity_recovers_known_curve() -> None:
    liquidity = 10**15 << 64
    # [1, 2] and [2, 4] at `liquidity` sell 7.5e14 base for 3e15 quote.
    solved = solve_two_segment_liquidity(ONE_Q64, 2 * ONE_Q64, 4 * ONE_Q64, 75 * 10**13, 3 * 10**15)
    assert solved == (liquidity, liquidity)
    assert solve_two_segment_liquidity(ONE_Q64, 5 * ONE_Q64, 4 * ONE_Q64, 75 * 10**13, 3 * 10**15) is None


def test_two_segment_curve() -> None:
    base = _base(
        leftover=1_000,
        activation_type=ActivationType.TIMESTAMP,
        base_fee=BaseFeeParams(
            mode=BaseFeeMode.FEE_SCHEDULER_EXPONENTIAL,
            fee_scheduler=FeeSchedulerParams(
                starting_fee_bps=5_000, ending_fee_bps=100, number_of_period=60, total_duration=600
            ),
        ),
    )
    result = build_curve_with_two_segments(
        base, initial_market_cap=20_000, migration_market_cap=1_000_000, percentage_supply_on_migration=20
    )
    _assert_conserved(result)
    assert len(result.curve.segments) == 2
    assert all(s.liquidity >= 0 for s in result.curve.segments)
    assert result.sqrt_start_price == get_sqrt_price_from_market_cap(20_000, SUPPLY, 6, 9)
    assert result.migration_sqrt_price <= result.curve.final_sqrt_price
    assert result.activation_type is ActivationType.TIMESTAMP
    _assert_tradable(result)


def test_mid_price_outside_the_curve_fails_reconciliation() -> None:
    with pytest.raises(ReconciliationError, match="no mid price"):
        build_curve_with_mid_price(
            _base(leftover=1_000),
            initial_market_cap=20_000,
            migration_market_cap=1_000_000,
            mid_price=1,
            percentage_supply_on_migration=20,
        )


def test_liquidity_weight_bins_are_geometric() -> None:
    edges = get_liquidity_weight_sqrt_prices(ONE_Q64, ONE_Q64 << 16)
    assert edges == [ONE_Q64 << i for i in range(17)]
    with pytest.raises(InvalidParameterError):
        get_liquidity_weight_sqrt_prices(ONE_Q64, ONE_Q64 << 16, bins=8)


def test_liquidity_weighted_curve() -> None:
    weights = [f"{6**i}/{5**i}" for i in range(16)]
    result = build_curve_with_liquidity_weights(
        _base(leftover=1_000), initial_market_cap=30, migration_market_cap=300, liquidity_weights=weights
    )
    _assert_conserved(result)
    assert len(result.curve.segments) == 16
    liquidities = [s.liquidity for s in result.curve.segments]
    assert liquidities == sorted(liquidities)
    _assert_tradable(result)

    with pytest.raises(InvalidParameterError, match="exactly 16"):
        build_curve_with_liquidity_weights(
            _base(leftover=1_000), initial_market_cap=30, migration_market_cap=300, liquidity_weights=weights[:3]
        )
    with pytest.raises(InvalidParameterError, match="non-negative"):
        build_curve_with_liquidity_weights(
            _base(leftover=1_000), initial_market_cap=30, migration_market_cap=300, liquidity_weights=["-1"] * 16
        )


def test_custom_sqrt_price_curve() -> None:
    sqrt_prices = create_sqrt_prices(["0.00000003", "0.00000006", "0.00000012", "0.0000003"], 6, 9)
    result = build_curve_with_custom_sqrt_prices(_base(leftover=1_000), sqrt_prices=sqrt_prices)
    _assert_conserved(result)
    assert [s.sqrt_price for s in result.curve.segments] == sqrt_prices[1:]
    assert result.sqrt_start_price == sqrt_prices[0]
    _assert_tradable(result)


def test_custom_sqrt_prices_are_validated() -> None:
    sqrt_prices = create_sqrt_prices(["0.00000003", "0.00000006", "0.00000012"], 6, 9)
    with pytest.raises(InvalidParameterError, match="between 2"):
        build_curve_with_custom_sqrt_prices(_base(leftover=1_000), sqrt_prices=sqrt_prices[:1])
    with pytest.raises(InvalidParameterError, match="liquidity weights are required"):
        build_curve_with_custom_sqrt_prices(_base(leftover=1_000), sqrt_prices=sqrt_prices, liquidity_weights=[1])
    with pytest.raises(InvalidParameterError, match="strictly increasing"):
        build_curve_with_custom_sqrt_prices(_base(leftover=1_000), sqrt_prices=list(reversed(sqrt_prices)))
