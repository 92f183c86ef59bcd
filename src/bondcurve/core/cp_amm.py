"""
Constant-product pool math (deterministic, integer-only).

A constant-product pool is a liquidity curve with a single segment bounded by
`[sqrt_min_price, sqrt_max_price]`; it reuses the delta and next-price
primitives of the bonding curve. Token A plays the base role and token B the
quote role, so `TradeDirection.BASE_TO_QUOTE` is an A -> B swap.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from fractions import Fraction

from ..constants import MAX_FEE_NUMERATOR_V0, MAX_FEE_NUMERATOR_V1, Q128
from ..errors import DivisionByZeroError, InsufficientLiquidityError, InvalidParameterError
from ..kernels.fixed_point import Rounding
from ..kernels.liquidity_math import (
    get_delta_amount_base_unsigned,
    get_delta_amount_quote_unsigned,
    get_initial_liquidity_from_delta_base,
    get_initial_liquidity_from_delta_quote,
    get_next_sqrt_price_from_input,
    get_next_sqrt_price_from_output,
)
from ..state.enums import SwapMode, TradeDirection
from ..state.pool import CpPool
from .curve import SegmentWalk
from .fees import TradeContext, get_cp_fee_mode
from .price import get_amount_with_slippage
from .rational import isqrt_fraction
from .swap_quote import QuoteContext, SwapQuoteResult, check_quote_amount, run_quote

logger = logging.getLogger(__name__)

_MAX_FEE_NUMERATOR_BY_VERSION = {
    0: MAX_FEE_NUMERATOR_V0,
    1: MAX_FEE_NUMERATOR_V1,
}


def get_max_fee_numerator(pool_version: int) -> int:
    try:
        return _MAX_FEE_NUMERATOR_BY_VERSION[pool_version]
    except KeyError:
        raise InvalidParameterError(f"unknown pool version: {pool_version}") from None


# ---------------------------------------------------------------------------
# Liquidity <-> amounts
# ---------------------------------------------------------------------------


def _require_range(lower_sqrt_price: int, upper_sqrt_price: int) -> None:
    if upper_sqrt_price <= lower_sqrt_price:
        raise DivisionByZeroError(
            f"empty price range: [{lower_sqrt_price}, {upper_sqrt_price}]"
        )


def get_liquidity_delta_from_amount_a(amount_a: int, lower_sqrt_price: int, upper_sqrt_price: int) -> int:
    _require_range(lower_sqrt_price, upper_sqrt_price)
    return get_initial_liquidity_from_delta_base(amount_a, upper_sqrt_price, lower_sqrt_price)


def get_liquidity_delta_from_amount_b(amount_b: int, lower_sqrt_price: int, upper_sqrt_price: int) -> int:
    _require_range(lower_sqrt_price, upper_sqrt_price)
    return get_initial_liquidity_from_delta_quote(amount_b, lower_sqrt_price, upper_sqrt_price)


def get_amount_a_from_liquidity_delta(
    liquidity: int, lower_sqrt_price: int, upper_sqrt_price: int, rounding: Rounding
) -> int:
    return get_delta_amount_base_unsigned(lower_sqrt_price, upper_sqrt_price, liquidity, rounding)


def get_amount_b_from_liquidity_delta(
    liquidity: int, lower_sqrt_price: int, upper_sqrt_price: int, rounding: Rounding
) -> int:
    return get_delta_amount_quote_unsigned(lower_sqrt_price, upper_sqrt_price, liquidity, rounding)


def get_liquidity_delta(
    max_amount_a: int, max_amount_b: int, sqrt_max_price: int, sqrt_min_price: int, sqrt_price: int
) -> int:
    """Largest liquidity both token maxima can fund at `sqrt_price`."""
    from_a = get_liquidity_delta_from_amount_a(max_amount_a, sqrt_price, sqrt_max_price)
    from_b = get_liquidity_delta_from_amount_b(max_amount_b, sqrt_min_price, sqrt_price)
    return min(from_a, from_b)


# ---------------------------------------------------------------------------
# Deposit / withdraw quotes
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class DepositQuote:
    liquidity_delta: int
    consumed_input_amount: int
    output_amount: int
    maximum_output_amount: int


@dataclass(frozen=True)
class WithdrawQuote:
    liquidity_delta: int
    out_amount_a: int
    out_amount_b: int
    minimum_out_amount_a: int
    minimum_out_amount_b: int


def deposit_quote(pool: CpPool, amount: int, *, is_token_a: bool, slippage_bps: int = 0) -> DepositQuote:
    """
    Liquidity minted by depositing `amount` of one token, and how much of the
    other token the deposit owes (rounded up).
    """
    check_quote_amount(amount, slippage_bps)
    if is_token_a:
        liquidity_delta = get_liquidity_delta_from_amount_a(amount, pool.sqrt_price, pool.sqrt_max_price)
        output_amount = get_amount_b_from_liquidity_delta(
            liquidity_delta, pool.sqrt_min_price, pool.sqrt_price, Rounding.UP
        )
    else:
        liquidity_delta = get_liquidity_delta_from_amount_b(amount, pool.sqrt_min_price, pool.sqrt_price)
        output_amount = get_amount_a_from_liquidity_delta(
            liquidity_delta, pool.sqrt_price, pool.sqrt_max_price, Rounding.UP
        )
    return DepositQuote(
        liquidity_delta=liquidity_delta,
        consumed_input_amount=amount,
        output_amount=output_amount,
        maximum_output_amount=get_amount_with_slippage(output_amount, slippage_bps, SwapMode.EXACT_OUT),
    )


def withdraw_quote(pool: CpPool, liquidity_delta: int, *, slippage_bps: int = 0) -> WithdrawQuote:
    """Tokens returned for burning `liquidity_delta` (rounded down)."""
    check_quote_amount(liquidity_delta, slippage_bps)
    if liquidity_delta > pool.liquidity:
        raise InsufficientLiquidityError(
            f"cannot withdraw {liquidity_delta}; pool holds {pool.liquidity}"
        )
    out_a = get_amount_a_from_liquidity_delta(liquidity_delta, pool.sqrt_price, pool.sqrt_max_price, Rounding.DOWN)
    out_b = get_amount_b_from_liquidity_delta(liquidity_delta, pool.sqrt_min_price, pool.sqrt_price, Rounding.DOWN)
    return WithdrawQuote(
        liquidity_delta=liquidity_delta,
        out_amount_a=out_a,
        out_amount_b=out_b,
        minimum_out_amount_a=get_amount_with_slippage(out_a, slippage_bps, SwapMode.EXACT_IN),
        minimum_out_amount_b=get_amount_with_slippage(out_b, slippage_bps, SwapMode.EXACT_IN),
    )


# ---------------------------------------------------------------------------
# Swaps
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class CpQuoteContext(QuoteContext):
    pool: CpPool | None = None

    def walk_in(self, amount_in: int, *, partial: bool) -> SegmentWalk:
        pool = self.pool
        a_to_b = self.direction.base_for_quote
        if partial:
            if a_to_b:
                max_amount_in = get_amount_a_from_liquidity_delta(
                    pool.liquidity, pool.sqrt_min_price, pool.sqrt_price, Rounding.UP
                )
            else:
                max_amount_in = get_amount_b_from_liquidity_delta(
                    pool.liquidity, pool.sqrt_price, pool.sqrt_max_price, Rounding.UP
                )
            if amount_in >= max_amount_in:
                bound = pool.sqrt_min_price if a_to_b else pool.sqrt_max_price
                return SegmentWalk(
                    amount=self._output_between(bound),
                    next_sqrt_price=bound,
                    amount_left=amount_in - max_amount_in,
                )

        next_sqrt_price = get_next_sqrt_price_from_input(pool.sqrt_price, pool.liquidity, amount_in, a_to_b)
        self._check_range(next_sqrt_price)
        return SegmentWalk(amount=self._output_between(next_sqrt_price), next_sqrt_price=next_sqrt_price)

    def walk_out(self, amount_out: int) -> SegmentWalk:
        pool = self.pool
        a_to_b = self.direction.base_for_quote
        next_sqrt_price = get_next_sqrt_price_from_output(pool.sqrt_price, pool.liquidity, amount_out, a_to_b)
        self._check_range(next_sqrt_price)
        if a_to_b:
            amount_in = get_amount_a_from_liquidity_delta(pool.liquidity, next_sqrt_price, pool.sqrt_price, Rounding.UP)
        else:
            amount_in = get_amount_b_from_liquidity_delta(pool.liquidity, pool.sqrt_price, next_sqrt_price, Rounding.UP)
        return SegmentWalk(amount=amount_in, next_sqrt_price=next_sqrt_price)

    def _output_between(self, next_sqrt_price: int) -> int:
        pool = self.pool
        if self.direction.base_for_quote:
            return get_amount_b_from_liquidity_delta(pool.liquidity, next_sqrt_price, pool.sqrt_price, Rounding.DOWN)
        return get_amount_a_from_liquidity_delta(pool.liquidity, pool.sqrt_price, next_sqrt_price, Rounding.DOWN)

    def _check_range(self, next_sqrt_price: int) -> None:
        if not (self.pool.sqrt_min_price <= next_sqrt_price <= self.pool.sqrt_max_price):
            raise InsufficientLiquidityError(
                f"price range is violated: {next_sqrt_price} outside "
                f"[{self.pool.sqrt_min_price}, {self.pool.sqrt_max_price}]"
            )


def is_swap_enabled(pool: CpPool, current_point: int) -> bool:
    return pool.enabled and current_point >= pool.activation_point


def cp_swap_quote(
    pool: CpPool,
    *,
    amount: int,
    direction: TradeDirection,
    current_point: int,
    swap_mode: SwapMode = SwapMode.EXACT_IN,
    slippage_bps: int = 0,
    has_referral: bool = False,
) -> SwapQuoteResult:
    """Quote one swap against a constant-product pool."""
    check_quote_amount(amount, slippage_bps)
    if not is_swap_enabled(pool, current_point):
        raise InvalidParameterError("swap is disabled")
    q = CpQuoteContext(
        pool_fees=pool.pool_fees,
        tracker=pool.volatility_tracker,
        fee_mode=get_cp_fee_mode(pool.collect_fee_mode, direction, has_referral),
        trade=TradeContext(
            current_point=current_point,
            activation_point=pool.activation_point,
            direction=direction,
            init_sqrt_price=pool.init_sqrt_price,
            current_sqrt_price=pool.sqrt_price,
        ),
        sqrt_price=pool.sqrt_price,
        pool=pool,
    )
    result = run_quote(q, amount, swap_mode, slippage_bps)
    logger.debug("cp %s quote: next_sqrt_price=%d", swap_mode.name, result.next_sqrt_price)
    return result


def cp_swap_quote_exact_in(pool: CpPool, *, amount_in: int, **kwargs) -> SwapQuoteResult:
    return cp_swap_quote(pool, amount=amount_in, swap_mode=SwapMode.EXACT_IN, **kwargs)


def cp_swap_quote_partial_fill(pool: CpPool, *, amount_in: int, **kwargs) -> SwapQuoteResult:
    return cp_swap_quote(pool, amount=amount_in, swap_mode=SwapMode.PARTIAL_FILL, **kwargs)


def cp_swap_quote_exact_out(pool: CpPool, *, amount_out: int, **kwargs) -> SwapQuoteResult:
    return cp_swap_quote(pool, amount=amount_out, swap_mode=SwapMode.EXACT_OUT, **kwargs)


# ---------------------------------------------------------------------------
# Pool creation
# ---------------------------------------------------------------------------


def calculate_init_sqrt_price(
    token_a_amount: int, token_b_amount: int, sqrt_min_price: int, sqrt_max_price: int
) -> int:
    """
    Sqrt price at which `token_a_amount` and `token_b_amount` are both fully
    used by one liquidity position over `[sqrt_min_price, sqrt_max_price]`.

    Solves s^2 - (pa - y/pb) s - y = 0 for s, with y = B / A, and floors the
    positive root in Q64.64.
    """
    if token_a_amount <= 0 or token_b_amount <= 0:
        raise InvalidParameterError("token amounts must be positive")
    if sqrt_max_price == 0:
        raise DivisionByZeroError("sqrt_max_price is zero")
    y = Fraction(token_b_amount, token_a_amount)
    xy = y * Q128 / sqrt_max_price
    m = sqrt_min_price - xy
    discriminant = (xy - sqrt_min_price) ** 2 + 4 * y * Q128

    def fits(candidate: int) -> bool:
        t = 2 * candidate - m
        return t <= 0 or t * t <= discriminant

    root = (m + isqrt_fraction(discriminant)) // 2
    while fits(root + 1):
        root += 1
    while not fits(root):
        root -= 1
    return int(root)
