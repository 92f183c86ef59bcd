"""
Piecewise-liquidity curve walks (deterministic, integer-only).

Algorithm Design:
- Type: Segment walk over constant-liquidity price ranges
- Time Complexity: O(segments) per walk
- Invariant: input amounts round up and output amounts round down at every
  segment boundary, so a walk never pays out more than it takes in

Sells (base -> quote) walk down from the current price towards
`sqrt_start_price`; buys (quote -> base) walk up, stopping at the migration
sqrt price.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Sequence

from ..constants import MAX_SQRT_PRICE, MIN_SQRT_PRICE, SWAP_BUFFER_PERCENTAGE
from ..errors import CurveArithmeticError, InsufficientLiquidityError, InvalidParameterError
from ..kernels.fixed_point import Rounding, ceil_div
from ..kernels.liquidity_math import (
    get_delta_amount_base_unsigned,
    get_delta_amount_quote_unsigned,
    get_initial_liquidity_from_delta_quote,
    get_next_sqrt_price_from_input,
    get_next_sqrt_price_from_output,
)
from ..state.curve import Curve, CurveSegment
from ..state.enums import MigrationOption

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SegmentWalk:
    """Outcome of walking the curve; `amount` is output (exact in) or input (exact out)."""

    amount: int
    next_sqrt_price: int
    amount_left: int = 0


# ---------------------------------------------------------------------------
# Exact input
# ---------------------------------------------------------------------------


def swap_base_to_quote_from_amount_in(curve: Curve, current_sqrt_price: int, amount_in: int) -> SegmentWalk:
    segments = curve.segments
    total_output = 0
    current = current_sqrt_price
    amount_left = amount_in

    for idx in range(len(segments) - 1, 0, -1):
        lower = curve.lower_bound(idx)
        liquidity = segments[idx].liquidity
        if liquidity == 0 or lower >= current:
            continue
        max_amount_in = get_delta_amount_base_unsigned(lower, current, liquidity, Rounding.UP)
        if amount_left < max_amount_in:
            next_sqrt_price = get_next_sqrt_price_from_input(current, liquidity, amount_left, True)
            total_output += get_delta_amount_quote_unsigned(next_sqrt_price, current, liquidity, Rounding.DOWN)
            return SegmentWalk(amount=total_output, next_sqrt_price=next_sqrt_price)
        total_output += get_delta_amount_quote_unsigned(lower, current, liquidity, Rounding.DOWN)
        current = lower
        amount_left -= max_amount_in

    if amount_left != 0:
        liquidity = segments[0].liquidity
        next_sqrt_price = get_next_sqrt_price_from_input(current, liquidity, amount_left, True)
        if next_sqrt_price < curve.sqrt_start_price:
            next_sqrt_price = curve.sqrt_start_price
            amount_left -= get_delta_amount_base_unsigned(next_sqrt_price, current, liquidity, Rounding.UP)
        else:
            amount_left = 0
        total_output += get_delta_amount_quote_unsigned(next_sqrt_price, current, liquidity, Rounding.DOWN)
        current = next_sqrt_price

    return SegmentWalk(amount=total_output, next_sqrt_price=current, amount_left=amount_left)


def swap_quote_to_base_from_amount_in(
    curve: Curve, current_sqrt_price: int, amount_in: int, stop_sqrt_price: int
) -> SegmentWalk:
    if amount_in == 0:
        return SegmentWalk(amount=0, next_sqrt_price=current_sqrt_price)

    total_output = 0
    current = current_sqrt_price
    amount_left = amount_in

    for seg in curve.segments:
        if seg.liquidity == 0:
            break
        reference = min(stop_sqrt_price, seg.sqrt_price)
        if reference <= current:
            continue
        max_amount_in = get_delta_amount_quote_unsigned(current, reference, seg.liquidity, Rounding.UP)
        if amount_left < max_amount_in:
            next_sqrt_price = get_next_sqrt_price_from_input(current, seg.liquidity, amount_left, False)
            total_output += get_delta_amount_base_unsigned(current, next_sqrt_price, seg.liquidity, Rounding.DOWN)
            return SegmentWalk(amount=total_output, next_sqrt_price=next_sqrt_price)
        total_output += get_delta_amount_base_unsigned(current, reference, seg.liquidity, Rounding.DOWN)
        current = reference
        amount_left -= max_amount_in
        if reference == stop_sqrt_price:
            break

    return SegmentWalk(amount=total_output, next_sqrt_price=current, amount_left=amount_left)


# ---------------------------------------------------------------------------
# Exact output
# ---------------------------------------------------------------------------


def swap_base_to_quote_from_amount_out(curve: Curve, current_sqrt_price: int, amount_out: int) -> SegmentWalk:
    segments = curve.segments
    total_input = 0
    current = current_sqrt_price
    amount_left = amount_out

    for idx in range(len(segments) - 1, 0, -1):
        lower = curve.lower_bound(idx)
        liquidity = segments[idx].liquidity
        if liquidity == 0 or lower >= current:
            continue
        max_amount_out = get_delta_amount_quote_unsigned(lower, current, liquidity, Rounding.DOWN)
        if amount_left < max_amount_out:
            next_sqrt_price = get_next_sqrt_price_from_output(current, liquidity, amount_left, True)
            total_input += get_delta_amount_base_unsigned(next_sqrt_price, current, liquidity, Rounding.UP)
            return SegmentWalk(amount=total_input, next_sqrt_price=next_sqrt_price)
        total_input += get_delta_amount_base_unsigned(lower, current, liquidity, Rounding.UP)
        current = lower
        amount_left -= max_amount_out

    if amount_left != 0:
        liquidity = segments[0].liquidity
        max_amount_out = get_delta_amount_quote_unsigned(curve.sqrt_start_price, current, liquidity, Rounding.DOWN)
        if amount_left > max_amount_out:
            raise InsufficientLiquidityError("quote output exceeds curve liquidity")
        next_sqrt_price = get_next_sqrt_price_from_output(current, liquidity, amount_left, True)
        if next_sqrt_price < curve.sqrt_start_price:
            raise InsufficientLiquidityError("quote output moves price below sqrt_start_price")
        total_input += get_delta_amount_base_unsigned(next_sqrt_price, current, liquidity, Rounding.UP)
        current = next_sqrt_price

    return SegmentWalk(amount=total_input, next_sqrt_price=current)


def swap_quote_to_base_from_amount_out(curve: Curve, current_sqrt_price: int, amount_out: int) -> SegmentWalk:
    total_input = 0
    current = current_sqrt_price
    amount_left = amount_out

    for seg in curve.segments:
        if seg.liquidity == 0:
            break
        if seg.sqrt_price <= current:
            continue
        max_amount_out = get_delta_amount_base_unsigned(current, seg.sqrt_price, seg.liquidity, Rounding.DOWN)
        if amount_left < max_amount_out:
            next_sqrt_price = get_next_sqrt_price_from_output(current, seg.liquidity, amount_left, False)
            total_input += get_delta_amount_quote_unsigned(current, next_sqrt_price, seg.liquidity, Rounding.UP)
            return SegmentWalk(amount=total_input, next_sqrt_price=next_sqrt_price)
        total_input += get_delta_amount_quote_unsigned(current, seg.sqrt_price, seg.liquidity, Rounding.UP)
        current = seg.sqrt_price
        amount_left -= max_amount_out

    if amount_left != 0:
        raise InsufficientLiquidityError("base output exceeds curve liquidity")
    return SegmentWalk(amount=total_input, next_sqrt_price=current)


# ---------------------------------------------------------------------------
# Curve-level quantities used during construction
# ---------------------------------------------------------------------------


def get_base_token_for_swap(
    sqrt_start_price: int, sqrt_migration_price: int, segments: Sequence[CurveSegment]
) -> int:
    """Base tokens sold by the curve between the start and migration prices (rounded up)."""
    total = 0
    lower = sqrt_start_price
    for seg in segments:
        if seg.sqrt_price > sqrt_migration_price:
            total += get_delta_amount_base_unsigned(lower, sqrt_migration_price, seg.liquidity, Rounding.UP)
            break
        total += get_delta_amount_base_unsigned(lower, seg.sqrt_price, seg.liquidity, Rounding.UP)
        lower = seg.sqrt_price
    return total


def get_migration_threshold_price(
    migration_threshold: int, sqrt_start_price: int, segments: Sequence[CurveSegment]
) -> int:
    """Sqrt price reached once `migration_threshold` quote has been paid into the curve."""
    if not segments:
        raise InvalidParameterError("curve is empty")
    first = segments[0]
    total = get_delta_amount_quote_unsigned(sqrt_start_price, first.sqrt_price, first.liquidity, Rounding.UP)
    if total > migration_threshold:
        return get_next_sqrt_price_from_input(sqrt_start_price, first.liquidity, migration_threshold, False)

    amount_left = migration_threshold - total
    next_sqrt_price = first.sqrt_price
    for seg in segments[1:]:
        max_amount = get_delta_amount_quote_unsigned(next_sqrt_price, seg.sqrt_price, seg.liquidity, Rounding.UP)
        if max_amount > amount_left:
            next_sqrt_price = get_next_sqrt_price_from_input(next_sqrt_price, seg.liquidity, amount_left, False)
            amount_left = 0
            break
        amount_left -= max_amount
        next_sqrt_price = seg.sqrt_price

    if amount_left != 0:
        raise InsufficientLiquidityError(
            f"curve cannot absorb migration threshold; {amount_left} quote left"
        )
    return next_sqrt_price


def get_swap_amount_with_buffer(
    swap_base_amount: int, sqrt_start_price: int, segments: Sequence[CurveSegment]
) -> int:
    buffered = swap_base_amount + swap_base_amount * SWAP_BUFFER_PERCENTAGE // 100
    max_base_amount_on_curve = get_base_token_for_swap(sqrt_start_price, MAX_SQRT_PRICE, segments)
    if buffered > max_base_amount_on_curve:
        logger.debug("swap buffer capped at the %d base the curve holds", max_base_amount_on_curve)
    return min(buffered, max_base_amount_on_curve)


def get_migration_base_token(
    migration_quote_amount: int, sqrt_migration_price: int, migration_option: MigrationOption
) -> int:
    """Base tokens deposited next to `migration_quote_amount` when seeding the destination pool."""
    if migration_option is MigrationOption.MET_DAMM:
        price = sqrt_migration_price * sqrt_migration_price
        if price == 0:
            raise CurveArithmeticError("migration sqrt price is zero")
        return ceil_div(migration_quote_amount << 128, price)
    if migration_option is MigrationOption.MET_DAMM_V2:
        liquidity = get_initial_liquidity_from_delta_quote(
            migration_quote_amount, MIN_SQRT_PRICE, sqrt_migration_price
        )
        return get_delta_amount_base_unsigned(sqrt_migration_price, MAX_SQRT_PRICE, liquidity, Rounding.UP)
    raise InvalidParameterError(f"unsupported migration option: {migration_option}")
