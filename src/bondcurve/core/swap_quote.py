"""
Swap quoting (deterministic, integer-only).

Algorithm Design:
- Type: Fee resolution + liquidity walk, shared by both pool types
- Time Complexity: O(segments)
- Invariant: a quote is either complete or an exception; exact-in quotes never
  silently truncate, partial-fill quotes report what was left unconsumed

`QuoteContext` carries everything the fee engine needs for one trade and
delegates the price walk to the pool type: `CurveQuoteContext` walks a
piecewise bonding curve, `bondcurve.core.cp_amm.CpQuoteContext` a single
constant-product range. Fees are charged on the input when the resolved
`FeeMode` says so, otherwise on the walk's output.
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass
from fractions import Fraction
from typing import Callable

from ..errors import InsufficientLiquidityError, InvalidParameterError, PoolCompletedError
from ..state.enums import SwapMode, TradeDirection
from ..state.fees import PoolFeesConfig, VolatilityTracker
from ..state.pool import PoolConfig, VirtualPool
from .curve import (
    SegmentWalk,
    swap_base_to_quote_from_amount_in,
    swap_base_to_quote_from_amount_out,
    swap_quote_to_base_from_amount_in,
    swap_quote_to_base_from_amount_out,
)
from .fees import (
    FeeMode,
    TradeContext,
    get_fee_mode,
    get_fee_on_amount,
    get_min_base_fee_numerator,
    get_total_trading_fee_from_excluded_fee_amount,
    get_total_trading_fee_from_included_fee_amount,
)
from .fees_math import FeeBreakdown, get_included_fee_amount, split_fees
from .price import get_amount_with_slippage, get_price_impact

logger = logging.getLogger(__name__)

_NO_FEE = FeeBreakdown(trading_fee=0, protocol_fee=0, referral_fee=0)


@dataclass(frozen=True)
class SwapQuoteResult:
    amount_out: int
    minimum_amount_out: int
    next_sqrt_price: int
    trading_fee: int
    protocol_fee: int
    referral_fee: int
    included_fee_input_amount: int
    excluded_fee_input_amount: int
    maximum_amount_in: int
    amount_left: int = 0
    price_impact: Fraction = Fraction(0)


@dataclass(frozen=True)
class QuoteContext(ABC):
    """Per-trade inputs common to every pool type."""

    pool_fees: PoolFeesConfig
    tracker: VolatilityTracker
    fee_mode: FeeMode
    trade: TradeContext
    sqrt_price: int
    eligible_for_first_swap_with_min_fee: bool = False

    @property
    def direction(self) -> TradeDirection:
        return self.trade.direction

    def fee_numerator(self, amount: int, *, included: bool) -> int:
        if self.eligible_for_first_swap_with_min_fee:
            return get_min_base_fee_numerator(self.pool_fees.base_fee)
        if included:
            return get_total_trading_fee_from_included_fee_amount(self.pool_fees, self.tracker, self.trade, amount)
        return get_total_trading_fee_from_excluded_fee_amount(self.pool_fees, self.tracker, self.trade, amount)

    def split(self, fee: int) -> FeeBreakdown:
        return split_fees(
            fee,
            protocol_fee_percent=self.pool_fees.protocol_fee_percent,
            referral_fee_percent=self.pool_fees.referral_fee_percent,
            has_referral=self.fee_mode.has_referral,
        )

    def charge(self, amount: int, fee_numerator: int) -> tuple[int, FeeBreakdown]:
        charged = get_fee_on_amount(self.pool_fees, amount, fee_numerator, self.fee_mode.has_referral)
        return charged.amount, charged.fee

    @abstractmethod
    def walk_in(self, amount_in: int, *, partial: bool) -> SegmentWalk:
        """Consume `amount_in` along the pool's price path."""

    @abstractmethod
    def walk_out(self, amount_out: int) -> SegmentWalk:
        """Input needed to take `amount_out` off the pool."""


@dataclass(frozen=True)
class CurveQuoteContext(QuoteContext):
    config: PoolConfig | None = None

    def walk_in(self, amount_in: int, *, partial: bool) -> SegmentWalk:
        curve = self.config.curve
        if self.direction.base_for_quote:
            return swap_base_to_quote_from_amount_in(curve, self.sqrt_price, amount_in)
        return swap_quote_to_base_from_amount_in(
            curve, self.sqrt_price, amount_in, self.config.migration_sqrt_price
        )

    def walk_out(self, amount_out: int) -> SegmentWalk:
        curve = self.config.curve
        if self.direction.base_for_quote:
            return swap_base_to_quote_from_amount_out(curve, self.sqrt_price, amount_out)
        walk = swap_quote_to_base_from_amount_out(curve, self.sqrt_price, amount_out)
        if walk.next_sqrt_price > self.config.migration_sqrt_price:
            raise InsufficientLiquidityError("base output pushes price past migration_sqrt_price")
        return walk


def check_quote_amount(amount: int, slippage_bps: int) -> None:
    if isinstance(amount, bool) or not isinstance(amount, int):
        raise TypeError("amount must be int")
    if amount <= 0:
        raise InvalidParameterError("amount must be positive")
    if not (0 <= slippage_bps <= 10_000):
        raise InvalidParameterError(f"slippage_bps out of range: {slippage_bps}")


def _result(
    q: QuoteContext,
    *,
    included_in: int,
    excluded_in: int,
    amount_out: int,
    walk: SegmentWalk,
    fee: FeeBreakdown,
    slippage_bps: int,
    swap_mode: SwapMode,
) -> SwapQuoteResult:
    if swap_mode is SwapMode.EXACT_OUT:
        minimum_amount_out = amount_out
        maximum_amount_in = get_amount_with_slippage(included_in, slippage_bps, swap_mode)
    else:
        minimum_amount_out = get_amount_with_slippage(amount_out, slippage_bps, swap_mode)
        maximum_amount_in = included_in
    result = SwapQuoteResult(
        amount_out=amount_out,
        minimum_amount_out=minimum_amount_out,
        next_sqrt_price=walk.next_sqrt_price,
        trading_fee=fee.trading_fee,
        protocol_fee=fee.protocol_fee,
        referral_fee=fee.referral_fee,
        included_fee_input_amount=included_in,
        excluded_fee_input_amount=excluded_in,
        maximum_amount_in=maximum_amount_in,
        amount_left=walk.amount_left if swap_mode is SwapMode.PARTIAL_FILL else 0,
        price_impact=get_price_impact(included_in, amount_out, q.sqrt_price, q.direction.base_for_quote),
    )
    logger.debug(
        "%s %s: in=%d out=%d next_sqrt_price=%d fee=%d",
        swap_mode.name,
        q.direction.name,
        included_in,
        amount_out,
        result.next_sqrt_price,
        fee.total,
    )
    return result


# ---------------------------------------------------------------------------
# Quote modes
# ---------------------------------------------------------------------------


def _quote_exact_in(q: QuoteContext, amount_in: int, slippage_bps: int) -> SwapQuoteResult:
    fee_numerator = q.fee_numerator(amount_in, included=True)
    fee = _NO_FEE
    actual_in = amount_in
    if q.fee_mode.fees_on_input:
        actual_in, fee = q.charge(amount_in, fee_numerator)

    walk = q.walk_in(actual_in, partial=False)
    if walk.amount_left != 0:
        raise InsufficientLiquidityError(
            f"not enough liquidity to absorb input; {walk.amount_left} left after the last segment"
        )

    amount_out = walk.amount
    if not q.fee_mode.fees_on_input:
        amount_out, fee = q.charge(amount_out, fee_numerator)

    return _result(
        q,
        included_in=amount_in,
        excluded_in=actual_in,
        amount_out=amount_out,
        walk=walk,
        fee=fee,
        slippage_bps=slippage_bps,
        swap_mode=SwapMode.EXACT_IN,
    )


def _quote_partial_fill(q: QuoteContext, amount_in: int, slippage_bps: int) -> SwapQuoteResult:
    fee_numerator = q.fee_numerator(amount_in, included=True)
    fee = _NO_FEE
    actual_in = amount_in
    if q.fee_mode.fees_on_input:
        actual_in, fee = q.charge(amount_in, fee_numerator)

    walk = q.walk_in(actual_in, partial=True)

    included_in = amount_in
    if walk.amount_left > 0:
        actual_in -= walk.amount_left
        if q.fee_mode.fees_on_input:
            # Recharge on what the walk actually consumed.
            consumed_numerator = q.fee_numerator(actual_in, included=False)
            included_in, trading_fee = get_included_fee_amount(consumed_numerator, actual_in)
            fee = q.split(trading_fee)
        else:
            included_in = actual_in

    amount_out = walk.amount
    if not q.fee_mode.fees_on_input:
        amount_out, fee = q.charge(amount_out, fee_numerator)

    return _result(
        q,
        included_in=included_in,
        excluded_in=actual_in,
        amount_out=amount_out,
        walk=walk,
        fee=fee,
        slippage_bps=slippage_bps,
        swap_mode=SwapMode.PARTIAL_FILL,
    )


def _quote_exact_out(q: QuoteContext, amount_out: int, slippage_bps: int) -> SwapQuoteResult:
    fee = _NO_FEE
    walked_out = amount_out
    if not q.fee_mode.fees_on_input:
        fee_numerator = q.fee_numerator(amount_out, included=False)
        walked_out, trading_fee = get_included_fee_amount(fee_numerator, amount_out)
        fee = q.split(trading_fee)

    walk = q.walk_out(walked_out)
    excluded_in = walk.amount
    included_in = excluded_in
    if q.fee_mode.fees_on_input:
        fee_numerator = q.fee_numerator(excluded_in, included=False)
        included_in, trading_fee = get_included_fee_amount(fee_numerator, excluded_in)
        fee = q.split(trading_fee)

    return _result(
        q,
        included_in=included_in,
        excluded_in=excluded_in,
        amount_out=amount_out,
        walk=walk,
        fee=fee,
        slippage_bps=slippage_bps,
        swap_mode=SwapMode.EXACT_OUT,
    )


_QuoteFn = Callable[[QuoteContext, int, int], SwapQuoteResult]

_QUOTERS: dict[SwapMode, _QuoteFn] = {
    SwapMode.EXACT_IN: _quote_exact_in,
    SwapMode.PARTIAL_FILL: _quote_partial_fill,
    SwapMode.EXACT_OUT: _quote_exact_out,
}


def run_quote(q: QuoteContext, amount: int, swap_mode: SwapMode, slippage_bps: int) -> SwapQuoteResult:
    return _QUOTERS[swap_mode](q, amount, slippage_bps)


# ---------------------------------------------------------------------------
# Bonding-curve entry points
# ---------------------------------------------------------------------------


def swap_quote(
    pool: VirtualPool,
    config: PoolConfig,
    *,
    amount: int,
    direction: TradeDirection,
    current_point: int,
    swap_mode: SwapMode = SwapMode.EXACT_IN,
    slippage_bps: int = 0,
    has_referral: bool = False,
    eligible_for_first_swap_with_min_fee: bool = False,
) -> SwapQuoteResult:
    """
    Quote one swap against a bonding-curve pool.

    `amount` is the input for `EXACT_IN`/`PARTIAL_FILL` and the desired
    output for `EXACT_OUT`. `current_point` is a slot or a unix timestamp,
    matching the config's activation type.

    Raises:
        InvalidParameterError: `amount` is zero or slippage is out of range.
        PoolCompletedError: the pool already collected its migration threshold.
        InsufficientLiquidityError: the curve cannot fill the request.
    """
    check_quote_amount(amount, slippage_bps)
    if pool.quote_reserve >= config.migration_quote_threshold:
        raise PoolCompletedError("pool reached its migration threshold; swaps are closed")
    q = CurveQuoteContext(
        pool_fees=config.pool_fees,
        tracker=pool.volatility_tracker,
        fee_mode=get_fee_mode(config.collect_fee_mode, direction, has_referral),
        trade=TradeContext(
            current_point=current_point,
            activation_point=pool.activation_point,
            direction=direction,
        ),
        sqrt_price=pool.sqrt_price,
        eligible_for_first_swap_with_min_fee=eligible_for_first_swap_with_min_fee,
        config=config,
    )
    return run_quote(q, amount, swap_mode, slippage_bps)


def swap_quote_exact_in(pool: VirtualPool, config: PoolConfig, *, amount_in: int, **kwargs) -> SwapQuoteResult:
    return swap_quote(pool, config, amount=amount_in, swap_mode=SwapMode.EXACT_IN, **kwargs)


def swap_quote_partial_fill(pool: VirtualPool, config: PoolConfig, *, amount_in: int, **kwargs) -> SwapQuoteResult:
    return swap_quote(pool, config, amount=amount_in, swap_mode=SwapMode.PARTIAL_FILL, **kwargs)


def swap_quote_exact_out(pool: VirtualPool, config: PoolConfig, *, amount_out: int, **kwargs) -> SwapQuoteResult:
    return swap_quote(pool, config, amount=amount_out, swap_mode=SwapMode.EXACT_OUT, **kwargs)
