"""
Trade fee resolution (deterministic, integer-only).

Resolves the effective fee numerator for one trade from the base fee schedule
plus the optional dynamic fee, decides which token pays it, and charges it.

Base fee modes are dispatched through `_BASE_FEE_HANDLERS`; each handler maps
(base fee config, trade context, amount) to a base fee numerator.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Callable

from ..constants import MIN_FEE_NUMERATOR
from ..errors import InvalidParameterError
from ..state.enums import ActivationType, BaseFeeMode, CollectFeeMode, CpCollectFeeMode, TradeDirection
from ..state.fees import BaseFeeConfig, PoolFeesConfig, VolatilityTracker
from .dynamic_fee import get_dynamic_fee_numerator, validate_dynamic_fee
from .fee_scheduler import (
    get_fee_scheduler_base_fee_numerator,
    get_fee_scheduler_min_base_fee_numerator,
    validate_fee_scheduler,
)
from .fees_math import FeeOnAmountResult, get_excluded_fee_amount, split_fees
from .rate_limiter import RateLimiter, validate_fee_rate_limiter


@dataclass(frozen=True)
class FeeMode:
    fees_on_input: bool
    fees_on_base_token: bool
    has_referral: bool


@dataclass(frozen=True)
class TradeContext:
    """Clock and price inputs a base fee schedule may depend on."""

    current_point: int
    activation_point: int
    direction: TradeDirection
    init_sqrt_price: int = 0
    current_sqrt_price: int = 0


def get_fee_mode(collect_fee_mode: CollectFeeMode, direction: TradeDirection, has_referral: bool) -> FeeMode:
    """Bonding-curve pools: quote-token mode charges buys on input, output mode charges buys in base."""
    quote_to_base = direction is TradeDirection.QUOTE_TO_BASE
    return FeeMode(
        fees_on_input=quote_to_base and collect_fee_mode is CollectFeeMode.QUOTE_TOKEN,
        fees_on_base_token=quote_to_base and collect_fee_mode is CollectFeeMode.OUTPUT_TOKEN,
        has_referral=has_referral,
    )


def get_cp_fee_mode(collect_fee_mode: CpCollectFeeMode, direction: TradeDirection, has_referral: bool) -> FeeMode:
    """Constant-product pools: `ONLY_B` charges B on the way in; `BOTH_TOKEN` always charges output."""
    b_to_a = direction is TradeDirection.QUOTE_TO_BASE
    if collect_fee_mode is CpCollectFeeMode.BOTH_TOKEN:
        return FeeMode(fees_on_input=False, fees_on_base_token=b_to_a, has_referral=has_referral)
    return FeeMode(fees_on_input=b_to_a, fees_on_base_token=False, has_referral=has_referral)


# ---------------------------------------------------------------------------
# Base fee handlers
# ---------------------------------------------------------------------------


def _scheduler_handler(
    base_fee: BaseFeeConfig, ctx: TradeContext, amount: int, included: bool, max_fee_numerator: int
) -> int:
    return get_fee_scheduler_base_fee_numerator(
        base_fee,
        current_point=ctx.current_point,
        activation_point=ctx.activation_point,
        init_sqrt_price=ctx.init_sqrt_price,
        current_sqrt_price=ctx.current_sqrt_price,
    )


def _rate_limiter_handler(
    base_fee: BaseFeeConfig, ctx: TradeContext, amount: int, included: bool, max_fee_numerator: int
) -> int:
    limiter = RateLimiter.from_base_fee(base_fee, max_fee_numerator)
    if not limiter.is_applied(
        current_point=ctx.current_point,
        activation_point=ctx.activation_point,
        direction=ctx.direction,
    ):
        return limiter.cliff_fee_numerator
    if included:
        return limiter.fee_numerator_from_included_amount(amount)
    return limiter.fee_numerator_from_excluded_amount(amount)


_BaseFeeHandler = Callable[[BaseFeeConfig, TradeContext, int, bool, int], int]

_BASE_FEE_HANDLERS: dict[BaseFeeMode, _BaseFeeHandler] = {
    BaseFeeMode.FEE_SCHEDULER_LINEAR: _scheduler_handler,
    BaseFeeMode.FEE_SCHEDULER_EXPONENTIAL: _scheduler_handler,
    BaseFeeMode.RATE_LIMITER: _rate_limiter_handler,
    BaseFeeMode.FEE_MARKET_CAP_SCHEDULER_LINEAR: _scheduler_handler,
    BaseFeeMode.FEE_MARKET_CAP_SCHEDULER_EXPONENTIAL: _scheduler_handler,
}


def get_base_fee_numerator(
    pool_fees: PoolFeesConfig, ctx: TradeContext, amount: int, *, included: bool = True
) -> int:
    handler = _BASE_FEE_HANDLERS[pool_fees.base_fee.mode]
    return handler(pool_fees.base_fee, ctx, amount, included, pool_fees.max_fee_numerator)


def get_min_base_fee_numerator(base_fee: BaseFeeConfig) -> int:
    if base_fee.mode is BaseFeeMode.RATE_LIMITER:
        return base_fee.cliff_fee_numerator
    return get_fee_scheduler_min_base_fee_numerator(base_fee)


def get_total_fee_numerator(pool_fees: PoolFeesConfig, base_fee_numerator: int, tracker: VolatilityTracker) -> int:
    total = base_fee_numerator + get_dynamic_fee_numerator(pool_fees.dynamic_fee, tracker)
    return min(total, pool_fees.max_fee_numerator)


def get_total_trading_fee_from_included_fee_amount(
    pool_fees: PoolFeesConfig, tracker: VolatilityTracker, ctx: TradeContext, included_fee_amount: int
) -> int:
    base = get_base_fee_numerator(pool_fees, ctx, included_fee_amount, included=True)
    return get_total_fee_numerator(pool_fees, base, tracker)


def get_total_trading_fee_from_excluded_fee_amount(
    pool_fees: PoolFeesConfig, tracker: VolatilityTracker, ctx: TradeContext, excluded_fee_amount: int
) -> int:
    base = get_base_fee_numerator(pool_fees, ctx, excluded_fee_amount, included=False)
    return get_total_fee_numerator(pool_fees, base, tracker)


def get_fee_on_amount(
    pool_fees: PoolFeesConfig, amount: int, fee_numerator: int, has_referral: bool
) -> FeeOnAmountResult:
    """Charge `fee_numerator` on `amount`; `result.amount` is what remains."""
    excluded, trading_fee = get_excluded_fee_amount(fee_numerator, amount)
    breakdown = split_fees(
        trading_fee,
        protocol_fee_percent=pool_fees.protocol_fee_percent,
        referral_fee_percent=pool_fees.referral_fee_percent,
        has_referral=has_referral,
    )
    return FeeOnAmountResult(amount=excluded, fee_numerator=fee_numerator, fee=breakdown)


def validate_pool_fees(
    pool_fees: PoolFeesConfig,
    *,
    collect_fee_mode: CollectFeeMode,
    activation_type: ActivationType,
) -> None:
    base_fee = pool_fees.base_fee
    if base_fee.cliff_fee_numerator < MIN_FEE_NUMERATOR:
        raise InvalidParameterError(
            f"cliff fee numerator {base_fee.cliff_fee_numerator} below {MIN_FEE_NUMERATOR}"
        )
    if base_fee.mode is BaseFeeMode.RATE_LIMITER:
        validate_fee_rate_limiter(
            RateLimiter.from_base_fee(base_fee, pool_fees.max_fee_numerator),
            collect_fee_mode=collect_fee_mode,
            activation_type=activation_type,
        )
    elif base_fee.mode.is_time_scheduler:
        validate_fee_scheduler(base_fee, max_fee_numerator=pool_fees.max_fee_numerator)
    else:
        raise InvalidParameterError(f"{base_fee.mode.name} is not a bonding-curve fee mode")
    validate_dynamic_fee(pool_fees.dynamic_fee)
