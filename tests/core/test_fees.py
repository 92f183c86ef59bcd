# [TESTER] v1

"""Tests for fee-mode resolution, fee charging and pool fee validation."""

from __future__ import annotations

import pytest

from bondcurve.constants import MAX_FEE_NUMERATOR
from bondcurve.core.build_params import get_dynamic_fee_params, get_rate_limiter_params
from bondcurve.core.dynamic_fee import get_dynamic_fee_numerator, get_variable_fee_numerator, validate_dynamic_fee
from bondcurve.core.fees import (
    TradeContext,
    get_base_fee_numerator,
    get_cp_fee_mode,
    get_fee_mode,
    get_fee_on_amount,
    get_min_base_fee_numerator,
    get_total_fee_numerator,
    validate_pool_fees,
)
from bondcurve.core.fees_math import (
    bps_to_fee_numerator,
    get_excluded_fee_amount,
    get_included_fee_amount,
    split_fees,
)
from bondcurve.errors import InvalidParameterError
from bondcurve.state import (
    ActivationType,
    BaseFeeConfig,
    BaseFeeMode,
    CollectFeeMode,
    CpCollectFeeMode,
    DynamicFeeConfig,
    PoolFeesConfig,
    TradeDirection,
    VolatilityTracker,
)

BUY = TradeDirection.QUOTE_TO_BASE
SELL = TradeDirection.BASE_TO_QUOTE
ONE_PERCENT = BaseFeeConfig(mode=BaseFeeMode.FEE_SCHEDULER_LINEAR, cliff_fee_numerator=10_000_000)


@pytest.mark.parametrize(
    ("collect_fee_mode", "direction", "on_input", "on_base"),
    [
        (CollectFeeMode.QUOTE_TOKEN, BUY, True, False),
        (CollectFeeMode.QUOTE_TOKEN, SELL, False, False),
        (CollectFeeMode.OUTPUT_TOKEN, BUY, False, True),
        (CollectFeeMode.OUTPUT_TOKEN, SELL, False, False),
    ],
)
def test_curve_fee_mode_table(
    collect_fee_mode: CollectFeeMode, direction: TradeDirection, on_input: bool, on_base: bool
) -> None:
    mode = get_fee_mode(collect_fee_mode, direction, has_referral=True)
    assert (mode.fees_on_input, mode.fees_on_base_token, mode.has_referral) == (on_input, on_base, True)


@pytest.mark.parametrize(
    ("collect_fee_mode", "direction", "on_input", "on_base"),
    [
        (CpCollectFeeMode.BOTH_TOKEN, BUY, False, True),
        (CpCollectFeeMode.BOTH_TOKEN, SELL, False, False),
        (CpCollectFeeMode.ONLY_B, BUY, True, False),
        (CpCollectFeeMode.ONLY_B, SELL, False, False),
    ],
)
def test_cp_fee_mode_table(
    collect_fee_mode: CpCollectFeeMode, direction: TradeDirection, on_input: bool, on_base: bool
) -> None:
    mode = get_cp_fee_mode(collect_fee_mode, direction, has_referral=False)
    assert (mode.fees_on_input, mode.fees_on_base_token) == (on_input, on_base)


def test_fee_on_amount_splits_protocol_and_referral() -> None:
    pool_fees = PoolFeesConfig(base_fee=ONE_PERCENT)
    charged = get_fee_on_amount(pool_fees, 1_000_000, 10_000_000, has_referral=True)
    assert charged.amount == 990_000
    assert (charged.fee.trading_fee, charged.fee.protocol_fee, charged.fee.referral_fee) == (8_000, 1_600, 400)
    assert charged.fee.total == 10_000

    no_referral = get_fee_on_amount(pool_fees, 1_000_000, 10_000_000, has_referral=False)
    assert (no_referral.fee.protocol_fee, no_referral.fee.referral_fee) == (2_000, 0)


def test_trading_fee_rounds_up_and_shares_round_down() -> None:
    assert get_excluded_fee_amount(10_000_000, 1) == (0, 1)
    split = split_fees(7, protocol_fee_percent=20, referral_fee_percent=20, has_referral=True)
    assert (split.trading_fee, split.protocol_fee, split.referral_fee) == (6, 1, 0)


def test_included_fee_amount_inverts_the_charge() -> None:
    assert get_included_fee_amount(10_000_000, 990_000) == (1_000_000, 10_000)
    with pytest.raises(InvalidParameterError):
        get_included_fee_amount(1_000_000_000, 1)


def test_bps_conversions() -> None:
    assert bps_to_fee_numerator(25) == 2_500_000


def test_variable_fee_rounds_up() -> None:
    assert get_variable_fee_numerator(100_000, 1, 10_000) == 1_000
    assert get_variable_fee_numerator(1, 1, 1) == 1
    assert get_variable_fee_numerator(0, 1, 10_000) == 0


def test_dynamic_fee_params_size_the_variable_fee_against_the_base_fee() -> None:
    dynamic_fee = get_dynamic_fee_params(100)
    assert dynamic_fee.max_volatility_accumulator == 14_460_000
    validate_dynamic_fee(dynamic_fee)
    tracker = VolatilityTracker(volatility_accumulator=dynamic_fee.max_volatility_accumulator)
    variable = get_dynamic_fee_numerator(dynamic_fee, tracker)
    assert 1_980_000 <= variable <= 2_000_000
    assert get_dynamic_fee_numerator(None, tracker) == 0


def test_dynamic_fee_params_reject_large_price_change() -> None:
    with pytest.raises(InvalidParameterError, match="max_price_change_bps"):
        get_dynamic_fee_params(100, 1_501)


def test_validate_dynamic_fee_rejects_non_default_bins_and_periods() -> None:
    good = get_dynamic_fee_params(100)
    fields = {k: getattr(good, k) for k in good.__dataclass_fields__}
    with pytest.raises(InvalidParameterError, match="bin_step"):
        validate_dynamic_fee(DynamicFeeConfig(**{**fields, "bin_step": 2}))
    with pytest.raises(InvalidParameterError, match="filter_period"):
        validate_dynamic_fee(DynamicFeeConfig(**{**fields, "filter_period": good.decay_period}))


def test_total_fee_is_capped_at_max_fee_numerator() -> None:
    pool_fees = PoolFeesConfig(base_fee=ONE_PERCENT, dynamic_fee=get_dynamic_fee_params(100))
    calm = VolatilityTracker()
    assert get_total_fee_numerator(pool_fees, 10_000_000, calm) == 10_000_000
    wild = VolatilityTracker(volatility_accumulator=10**12)
    assert get_total_fee_numerator(pool_fees, 10_000_000, wild) == MAX_FEE_NUMERATOR


def test_base_fee_dispatches_on_mode() -> None:
    limited = PoolFeesConfig(base_fee=get_rate_limiter_params(100, 10, 1, 10, 9, ActivationType.SLOT))
    buy = TradeContext(current_point=5, activation_point=0, direction=BUY)
    sell = TradeContext(current_point=5, activation_point=0, direction=SELL)
    assert get_base_fee_numerator(limited, buy, 2_000_000_000) == 10_500_000
    assert get_base_fee_numerator(limited, sell, 2_000_000_000) == 10_000_000
    assert get_base_fee_numerator(limited, buy, 1_979_000_000, included=False) == 10_500_000
    assert get_min_base_fee_numerator(limited.base_fee) == 10_000_000

    flat = PoolFeesConfig(base_fee=ONE_PERCENT)
    assert get_base_fee_numerator(flat, buy, 2_000_000_000) == 10_000_000


def test_validate_pool_fees() -> None:
    kwargs = dict(collect_fee_mode=CollectFeeMode.QUOTE_TOKEN, activation_type=ActivationType.SLOT)
    validate_pool_fees(PoolFeesConfig(base_fee=ONE_PERCENT), **kwargs)
    with pytest.raises(InvalidParameterError, match="below"):
        validate_pool_fees(
            PoolFeesConfig(base_fee=BaseFeeConfig(mode=BaseFeeMode.FEE_SCHEDULER_LINEAR, cliff_fee_numerator=1)),
            **kwargs,
        )
    market_cap = BaseFeeConfig(
        mode=BaseFeeMode.FEE_MARKET_CAP_SCHEDULER_LINEAR,
        cliff_fee_numerator=10_000_000,
        first_factor=1,
        second_factor=1,
        third_factor=1,
        scheduler_expiration_duration=1,
    )
    with pytest.raises(InvalidParameterError, match="not a bonding-curve fee mode"):
        validate_pool_fees(PoolFeesConfig(base_fee=market_cap), **kwargs)
    limited = PoolFeesConfig(base_fee=get_rate_limiter_params(100, 10, 1, 10, 9, ActivationType.SLOT))
    with pytest.raises(InvalidParameterError, match="quote-token"):
        validate_pool_fees(limited, collect_fee_mode=CollectFeeMode.OUTPUT_TOKEN, activation_type=ActivationType.SLOT)
