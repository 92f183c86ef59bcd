"""
Curve construction from human-level targets.

Algorithm Design:
- Type: Exact constrained solve over rational numbers, then integer flooring
- Candidates: at most 3 mid prices (two-segment) or 16 geometric bins
- Invariant: every returned result satisfies
      swap + migration + vesting + leftover + padding == total supply
  exactly; otherwise construction raises before any curve is exposed

Inputs are whole-token quantities (ints, decimal strings, `Decimal` or
`Fraction`); outputs are lamports, Q64.64 sqrt prices and Q128 liquidity.
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass, field, replace
from fractions import Fraction
from typing import Sequence

from ..constants import (
    LIQUIDITY_WEIGHT_COUNT,
    MAX_CURVE_POINT,
    MAX_SQRT_PRICE,
    MAX_TOKEN_DECIMAL,
    MIN_TOKEN_DECIMAL,
    Q128,
)
from ..errors import InvalidParameterError, ReconciliationError
from ..kernels.liquidity_math import get_initial_liquidity_from_delta_base, get_liquidity
from ..state.curve import Curve, CurveSegment
from ..state.enums import ActivationType, CollectFeeMode, MigrationOption
from ..state.fees import PoolFeesConfig
from ..state.pool import PoolConfig
from ..state.vesting import LockedVestingParams
from .build_params import (
    BaseFeeParams,
    get_base_fee_params,
    get_dynamic_fee_params,
    get_locked_vesting_params,
    get_migration_quote_amount,
    get_migration_quote_amount_from_threshold,
    get_migration_quote_threshold_from_quote_amount,
    get_percentage_supply_on_migration,
    to_lamports,
)
from .curve import (
    get_base_token_for_swap,
    get_migration_base_token,
    get_migration_threshold_price,
    get_swap_amount_with_buffer,
)
from .fees import validate_pool_fees
from .price import get_sqrt_price_from_market_cap, get_sqrt_price_from_price
from .rational import Number, fourth_root_floor, to_fraction

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Parameters and results
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class LockedVestingInput:
    """Vesting schedule in whole tokens and seconds (or slots)."""

    total_locked_vesting_amount: int = 0
    number_of_vesting_period: int = 0
    cliff_unlock_amount: int = 0
    total_vesting_duration: int = 0
    cliff_duration_from_migration_time: int = 0


@dataclass(frozen=True)
class BuildCurveBaseParams:
    total_token_supply: Number
    token_base_decimal: int
    token_quote_decimal: int
    base_fee: BaseFeeParams
    locked_vesting: LockedVestingInput = field(default_factory=LockedVestingInput)
    leftover: Number = 0
    migration_fee_percent: int = 0
    migration_option: MigrationOption = MigrationOption.MET_DAMM_V2
    activation_type: ActivationType = ActivationType.SLOT
    collect_fee_mode: CollectFeeMode = CollectFeeMode.QUOTE_TOKEN
    dynamic_fee_enabled: bool = False

    def __post_init__(self) -> None:
        for name, decimals in (
            ("token_base_decimal", self.token_base_decimal),
            ("token_quote_decimal", self.token_quote_decimal),
        ):
            if decimals not in (MIN_TOKEN_DECIMAL, MAX_TOKEN_DECIMAL):
                raise InvalidParameterError(
                    f"{name} must be {MIN_TOKEN_DECIMAL} or {MAX_TOKEN_DECIMAL}: {decimals}"
                )
        if to_fraction("total_token_supply", self.total_token_supply) <= 0:
            raise InvalidParameterError("total_token_supply must be positive")
        if to_fraction("leftover", self.leftover) < 0:
            raise InvalidParameterError("leftover must be non-negative")


@dataclass(frozen=True)
class TokenAllocation:
    """Where every base lamport of the supply ends up."""

    swap_amount: int
    migration_amount: int
    vesting_amount: int
    leftover: int
    padding_amount: int = 0

    @property
    def total(self) -> int:
        return self.swap_amount + self.migration_amount + self.vesting_amount + self.leftover + self.padding_amount


@dataclass(frozen=True)
class BuildCurveResult:
    sqrt_start_price: int
    curve: Curve
    migration_sqrt_price: int
    migration_quote_threshold: int
    pool_fees: PoolFeesConfig
    locked_vesting: LockedVestingParams
    token_allocation: TokenAllocation
    total_supply: int
    migration_option: MigrationOption
    activation_type: ActivationType
    collect_fee_mode: CollectFeeMode

    def pool_config(self) -> PoolConfig:
        return PoolConfig(
            curve=self.curve,
            pool_fees=self.pool_fees,
            migration_quote_threshold=self.migration_quote_threshold,
            migration_sqrt_price=self.migration_sqrt_price,
            collect_fee_mode=self.collect_fee_mode,
            activation_type=self.activation_type,
            migration_option=self.migration_option,
        )


# ---------------------------------------------------------------------------
# Shared steps
# ---------------------------------------------------------------------------


def _pool_fees(base: BuildCurveBaseParams) -> PoolFeesConfig:
    base_fee = get_base_fee_params(base.base_fee, base.token_quote_decimal, base.activation_type)
    dynamic_fee = None
    if base.dynamic_fee_enabled:
        dynamic_fee = get_dynamic_fee_params(base.base_fee.dynamic_fee_base_bps)
    pool_fees = PoolFeesConfig(base_fee=base_fee, dynamic_fee=dynamic_fee)
    validate_pool_fees(pool_fees, collect_fee_mode=base.collect_fee_mode, activation_type=base.activation_type)
    return pool_fees


def _locked_vesting(base: BuildCurveBaseParams) -> LockedVestingParams:
    v = base.locked_vesting
    return get_locked_vesting_params(
        v.total_locked_vesting_amount,
        v.number_of_vesting_period,
        v.cliff_unlock_amount,
        v.total_vesting_duration,
        v.cliff_duration_from_migration_time,
        base.token_base_decimal,
    )


def _allocation_from_curve(
    migration_quote_threshold: int,
    sqrt_start_price: int,
    segments: Sequence[CurveSegment],
    locked_vesting: LockedVestingParams,
    migration_option: MigrationOption,
    leftover: int,
    migration_fee_percent: int,
) -> TokenAllocation:
    sqrt_migration_price = get_migration_threshold_price(migration_quote_threshold, sqrt_start_price, segments)
    swap_base_amount = get_base_token_for_swap(sqrt_start_price, sqrt_migration_price, segments)
    swap_amount = get_swap_amount_with_buffer(swap_base_amount, sqrt_start_price, segments)
    migration_quote_amount = math.floor(
        get_migration_quote_amount_from_threshold(migration_quote_threshold, migration_fee_percent)
    )
    migration_amount = get_migration_base_token(migration_quote_amount, sqrt_migration_price, migration_option)
    return TokenAllocation(
        swap_amount=swap_amount,
        migration_amount=migration_amount,
        vesting_amount=locked_vesting.total_amount,
        leftover=leftover,
    )


def get_total_supply_from_curve(
    migration_quote_threshold: int,
    sqrt_start_price: int,
    segments: Sequence[CurveSegment],
    locked_vesting: LockedVestingParams,
    migration_option: MigrationOption,
    leftover: int,
    migration_fee_percent: int,
) -> int:
    """Minimum base supply (lamports) the curve needs, swap buffer included."""
    return _allocation_from_curve(
        migration_quote_threshold,
        sqrt_start_price,
        segments,
        locked_vesting,
        migration_option,
        leftover,
        migration_fee_percent,
    ).total


def _result(
    base: BuildCurveBaseParams,
    *,
    pool_fees: PoolFeesConfig,
    locked_vesting: LockedVestingParams,
    sqrt_start_price: int,
    segments: Sequence[CurveSegment],
    migration_quote_threshold: int,
    allocation: TokenAllocation,
    total_supply: int,
) -> BuildCurveResult:
    if allocation.total != total_supply:
        raise ReconciliationError(
            f"allocation {allocation.total} does not match total supply {total_supply}",
            shortfall=allocation.total - total_supply,
        )
    curve = Curve(sqrt_start_price=sqrt_start_price, segments=tuple(segments))
    migration_sqrt_price = get_migration_threshold_price(migration_quote_threshold, sqrt_start_price, segments)
    logger.debug(
        "built curve: %d segments, start=%d migration=%d threshold=%d",
        len(curve.segments),
        sqrt_start_price,
        migration_sqrt_price,
        migration_quote_threshold,
    )
    return BuildCurveResult(
        sqrt_start_price=sqrt_start_price,
        curve=curve,
        migration_sqrt_price=migration_sqrt_price,
        migration_quote_threshold=migration_quote_threshold,
        pool_fees=pool_fees,
        locked_vesting=locked_vesting,
        token_allocation=allocation,
        total_supply=total_supply,
        migration_option=base.migration_option,
        activation_type=base.activation_type,
        collect_fee_mode=base.collect_fee_mode,
    )


def _absorb_into_leftover(allocation: TokenAllocation, total_supply: int) -> TokenAllocation:
    """Fold the gap between the curve's needs and the supply into leftover."""
    delta = total_supply - allocation.total
    if delta < 0 and -delta >= allocation.leftover:
        raise ReconciliationError(
            f"curve needs {-delta} more base than supplied; leftover {allocation.leftover} cannot cover it",
            shortfall=-delta,
        )
    return replace(allocation, leftover=allocation.leftover + delta)


def _check_percentage(name: str, value: Fraction) -> None:
    if not (0 < value < 100):
        raise InvalidParameterError(f"{name} must be in (0, 100): {value}")


# ---------------------------------------------------------------------------
# Single segment
# ---------------------------------------------------------------------------


def build_curve(
    base: BuildCurveBaseParams,
    *,
    percentage_supply_on_migration: Number,
    migration_quote_threshold: Number,
) -> BuildCurveResult:
    """
    One liquidity segment from `sqrt_start_price` to the migration price.

    Base tokens the segment does not need are parked in a padding segment
    from the migration price to `MAX_SQRT_PRICE`, unreachable before
    migration.
    """
    pool_fees = _pool_fees(base)
    locked_vesting = _locked_vesting(base)
    fee_percent = base.migration_fee_percent
    bd, qd = base.token_base_decimal, base.token_quote_decimal

    pct = to_fraction("percentage_supply_on_migration", percentage_supply_on_migration)
    _check_percentage("percentage_supply_on_migration", pct)
    threshold = to_fraction("migration_quote_threshold", migration_quote_threshold)
    if threshold <= 0:
        raise InvalidParameterError("migration_quote_threshold must be positive")

    supply = to_fraction("total_token_supply", base.total_token_supply)
    migration_base_supply = supply * pct / 100
    migration_quote_amount = get_migration_quote_amount_from_threshold(threshold, fee_percent)
    migration_price = migration_quote_amount / migration_base_supply

    total_supply = to_lamports(supply, bd)
    threshold_lamports = to_lamports(threshold, qd)
    leftover = to_lamports(base.leftover, bd)
    migration_sqrt_price = get_sqrt_price_from_price(migration_price, bd, qd)
    migration_quote_lamports = to_lamports(migration_quote_amount, qd)
    migration_base_amount = get_migration_base_token(
        migration_quote_lamports, migration_sqrt_price, base.migration_option
    )

    swap_amount = total_supply - migration_base_amount - locked_vesting.total_amount - leftover
    if swap_amount <= 0:
        raise InvalidParameterError(
            "migration, vesting and leftover amounts leave nothing to sell on the curve"
        )

    # sqrt_start = sqrt_migration * migration_base / (swap * (1 - fee))
    sqrt_start_price = (migration_sqrt_price * migration_base_amount * 100) // (swap_amount * (100 - fee_percent))
    if sqrt_start_price >= migration_sqrt_price:
        raise InvalidParameterError("migration price must exceed the start price")
    liquidity = get_liquidity(swap_amount, threshold_lamports, sqrt_start_price, migration_sqrt_price)
    segments = [CurveSegment(sqrt_price=migration_sqrt_price, liquidity=liquidity)]

    allocation = _allocation_from_curve(
        threshold_lamports,
        sqrt_start_price,
        segments,
        locked_vesting,
        base.migration_option,
        leftover,
        fee_percent,
    )
    remaining = total_supply - allocation.total
    if remaining < 0:
        raise ReconciliationError(
            f"curve needs {-remaining} more base lamports than the supply holds", shortfall=-remaining
        )
    padding_liquidity = get_initial_liquidity_from_delta_base(remaining, MAX_SQRT_PRICE, migration_sqrt_price)
    if padding_liquidity != 0:
        segments.append(CurveSegment(sqrt_price=MAX_SQRT_PRICE, liquidity=padding_liquidity))
        logger.debug("padding segment carries %d base lamports", remaining)
    allocation = replace(allocation, padding_amount=remaining)

    return _result(
        base,
        pool_fees=pool_fees,
        locked_vesting=locked_vesting,
        sqrt_start_price=sqrt_start_price,
        segments=segments,
        migration_quote_threshold=threshold_lamports,
        allocation=allocation,
        total_supply=total_supply,
    )


def build_curve_with_market_cap(
    base: BuildCurveBaseParams,
    *,
    initial_market_cap: Number,
    migration_market_cap: Number,
) -> BuildCurveResult:
    """Single-segment curve that opens at `initial_market_cap` and migrates at `migration_market_cap`."""
    locked_vesting = _locked_vesting(base)
    bd = base.token_base_decimal
    fee_percent = base.migration_fee_percent
    pct = get_percentage_supply_on_migration(
        initial_market_cap,
        migration_market_cap,
        locked_vesting,
        to_lamports(base.leftover, bd),
        to_lamports(base.total_token_supply, bd),
        migration_fee_percent=fee_percent,
    )
    quote_amount = get_migration_quote_amount(migration_market_cap, pct)
    threshold = get_migration_quote_threshold_from_quote_amount(quote_amount, fee_percent)
    logger.debug("market cap curve: %s%% supply on migration, threshold %s", pct, threshold)
    return build_curve(base, percentage_supply_on_migration=pct, migration_quote_threshold=threshold)


# ---------------------------------------------------------------------------
# Two segments
# ---------------------------------------------------------------------------


def get_two_segment_mid_sqrt_prices(initial_sqrt_price: int, migration_sqrt_price: int) -> list[int]:
    """Bend-point candidates, tried in order: (p0^3*p2)^1/4, (p0*p2^3)^1/4, sqrt(p0*p2)."""
    p0, p2 = initial_sqrt_price, migration_sqrt_price
    return [
        fourth_root_floor(p0**3 * p2),
        fourth_root_floor(p0 * p2**3),
        math.isqrt(p0 * p2),
    ]


def solve_two_segment_liquidity(
    initial_sqrt_price: int,
    mid_sqrt_price: int,
    migration_sqrt_price: int,
    swap_amount: int,
    migration_quote_threshold: int,
) -> tuple[int, int] | None:
    """
    Liquidities (l0, l1) for [p0, p1] and [p1, p2] that sell exactly
    `swap_amount` base while collecting `migration_quote_threshold` quote:

        l0 * (1/p0 - 1/p1) + l1 * (1/p1 - 1/p2) = swap_amount
        l0 * (p1 - p0)     + l1 * (p2 - p1)     = threshold * 2**128

    Returns None when the system has no non-negative solution.
    """
    p0, p1, p2 = initial_sqrt_price, mid_sqrt_price, migration_sqrt_price
    if not (0 < p0 < p1 < p2):
        return None
    a1 = Fraction(1, p0) - Fraction(1, p1)
    b1 = Fraction(1, p1) - Fraction(1, p2)
    a2 = p1 - p0
    b2 = p2 - p1
    c1 = swap_amount
    c2 = migration_quote_threshold * Q128

    determinant = a1 * b2 - a2 * b1
    if determinant == 0:
        return None
    l0 = math.floor((c1 * b2 - c2 * b1) / determinant)
    l1 = math.floor((c2 * a1 - c1 * a2) / determinant)
    if l0 < 0 or l1 < 0:
        return None
    return l0, l1


def _build_two_segment(
    base: BuildCurveBaseParams,
    *,
    initial_market_cap: Number,
    migration_market_cap: Number,
    percentage_supply_on_migration: Number,
    mid_sqrt_prices: Sequence[int] | None,
) -> BuildCurveResult:
    pool_fees = _pool_fees(base)
    locked_vesting = _locked_vesting(base)
    fee_percent = base.migration_fee_percent
    bd, qd = base.token_base_decimal, base.token_quote_decimal

    pct = to_fraction("percentage_supply_on_migration", percentage_supply_on_migration)
    _check_percentage("percentage_supply_on_migration", pct)
    supply = to_fraction("total_token_supply", base.total_token_supply)
    migration_base_supply = supply * pct / 100
    migration_quote_amount = get_migration_quote_amount(migration_market_cap, pct)
    threshold = get_migration_quote_threshold_from_quote_amount(migration_quote_amount, fee_percent)
    migration_price = migration_quote_amount / migration_base_supply

    total_supply = to_lamports(supply, bd)
    threshold_lamports = to_lamports(threshold, qd)
    if threshold_lamports <= 0:
        raise InvalidParameterError("migration market cap yields a zero quote threshold")
    leftover = to_lamports(base.leftover, bd)
    migration_sqrt_price = get_sqrt_price_from_price(migration_price, bd, qd)
    migration_base_amount = get_migration_base_token(
        to_lamports(migration_quote_amount, qd), migration_sqrt_price, base.migration_option
    )
    swap_amount = total_supply - migration_base_amount - locked_vesting.total_amount - leftover
    if swap_amount <= 0:
        raise InvalidParameterError(
            "migration, vesting and leftover amounts leave nothing to sell on the curve"
        )
    initial_sqrt_price = get_sqrt_price_from_market_cap(initial_market_cap, supply, bd, qd)

    if mid_sqrt_prices is None:
        mid_sqrt_prices = get_two_segment_mid_sqrt_prices(initial_sqrt_price, migration_sqrt_price)
    for mid in mid_sqrt_prices:
        solved = solve_two_segment_liquidity(
            initial_sqrt_price, mid, migration_sqrt_price, swap_amount, threshold_lamports
        )
        if solved is not None:
            logger.debug("two-segment bend accepted at sqrt price %d", mid)
            break
        logger.debug("two-segment bend %d has no non-negative solution", mid)
    else:
        raise ReconciliationError("no mid price yields non-negative liquidity for both segments")

    l0, l1 = solved
    segments = [
        CurveSegment(sqrt_price=mid, liquidity=l0),
        CurveSegment(sqrt_price=migration_sqrt_price, liquidity=l1),
    ]
    allocation = _absorb_into_leftover(
        _allocation_from_curve(
            threshold_lamports,
            initial_sqrt_price,
            segments,
            locked_vesting,
            base.migration_option,
            leftover,
            fee_percent,
        ),
        total_supply,
    )
    return _result(
        base,
        pool_fees=pool_fees,
        locked_vesting=locked_vesting,
        sqrt_start_price=initial_sqrt_price,
        segments=segments,
        migration_quote_threshold=threshold_lamports,
        allocation=allocation,
        total_supply=total_supply,
    )


def build_curve_with_two_segments(
    base: BuildCurveBaseParams,
    *,
    initial_market_cap: Number,
    migration_market_cap: Number,
    percentage_supply_on_migration: Number,
) -> BuildCurveResult:
    return _build_two_segment(
        base,
        initial_market_cap=initial_market_cap,
        migration_market_cap=migration_market_cap,
        percentage_supply_on_migration=percentage_supply_on_migration,
        mid_sqrt_prices=None,
    )


def build_curve_with_mid_price(
    base: BuildCurveBaseParams,
    *,
    initial_market_cap: Number,
    migration_market_cap: Number,
    mid_price: Number,
    percentage_supply_on_migration: Number,
) -> BuildCurveResult:
    """Two-segment curve bending at a caller-chosen `mid_price` (quote per base)."""
    mid_sqrt_price = get_sqrt_price_from_price(mid_price, base.token_base_decimal, base.token_quote_decimal)
    return _build_two_segment(
        base,
        initial_market_cap=initial_market_cap,
        migration_market_cap=migration_market_cap,
        percentage_supply_on_migration=percentage_supply_on_migration,
        mid_sqrt_prices=[mid_sqrt_price],
    )


# ---------------------------------------------------------------------------
# Weighted segments
# ---------------------------------------------------------------------------


def get_liquidity_weight_sqrt_prices(
    sqrt_min_price: int, sqrt_max_price: int, bins: int = LIQUIDITY_WEIGHT_COUNT
) -> list[int]:
    """`bins + 1` geometric bin edges; edge i is floor((min^(16-i) * max^i)^(1/16))."""
    if bins != LIQUIDITY_WEIGHT_COUNT:
        raise InvalidParameterError(f"geometric bins are fixed at {LIQUIDITY_WEIGHT_COUNT}")
    edges = []
    for i in range(bins + 1):
        value = sqrt_min_price ** (bins - i) * sqrt_max_price**i
        # 16th root as four nested square roots.
        for _ in range(4):
            value = math.isqrt(value)
        edges.append(value)
    return edges


def _weighted_segments(
    sqrt_prices: Sequence[int],
    weights: Sequence[Fraction],
    total_swap_and_migration_amount: int,
    migration_fee_percent: int,
) -> list[CurveSegment]:
    """
    Scale `weights` by one factor l so the curve sells its base and the
    migration pool absorbs the rest:

        l * sum_i k_i * [(p_i - p_{i-1}) / (p_i * p_{i-1})
                         + (p_i - p_{i-1}) * (1 - fee) / p_max^2] = swap + migration
    """
    p_max = sqrt_prices[-1]
    fee_factor = Fraction(100 - migration_fee_percent, 100)
    sum_factor = Fraction(0)
    for i in range(1, len(sqrt_prices)):
        lower, upper = sqrt_prices[i - 1], sqrt_prices[i]
        width = upper - lower
        sum_factor += weights[i - 1] * (Fraction(width, upper * lower) + width * fee_factor / (p_max * p_max))
    if sum_factor == 0:
        raise InvalidParameterError("liquidity weights must not all be zero")
    scale = total_swap_and_migration_amount / sum_factor
    return [
        CurveSegment(sqrt_price=sqrt_prices[i + 1], liquidity=math.floor(scale * weights[i]))
        for i in range(len(weights))
    ]


def _build_weighted(
    base: BuildCurveBaseParams,
    *,
    sqrt_prices: Sequence[int],
    weights: Sequence[Fraction],
) -> BuildCurveResult:
    pool_fees = _pool_fees(base)
    locked_vesting = _locked_vesting(base)
    fee_percent = base.migration_fee_percent
    bd = base.token_base_decimal

    if any(upper <= lower for lower, upper in zip(sqrt_prices, sqrt_prices[1:])):
        raise InvalidParameterError("sqrt prices must be strictly increasing")

    total_supply = to_lamports(base.total_token_supply, bd)
    leftover = to_lamports(base.leftover, bd)
    total_swap_and_migration = total_supply - locked_vesting.total_amount - leftover
    if total_swap_and_migration <= 0:
        raise InvalidParameterError("vesting and leftover consume the whole supply")

    p_min, p_max = sqrt_prices[0], sqrt_prices[-1]
    segments = _weighted_segments(sqrt_prices, weights, total_swap_and_migration, fee_percent)

    swap_base_amount = get_base_token_for_swap(p_min, p_max, segments)
    swap_amount = get_swap_amount_with_buffer(swap_base_amount, p_min, segments)
    migration_amount = total_swap_and_migration - swap_amount
    # quote = base * p_max^2 / 2^128
    migration_quote_amount = (migration_amount * p_max * p_max) >> 128
    threshold_lamports = math.floor(
        get_migration_quote_threshold_from_quote_amount(migration_quote_amount, fee_percent)
    )
    if threshold_lamports <= 0:
        raise InvalidParameterError("weights leave no quote to collect before migration")

    allocation = _absorb_into_leftover(
        _allocation_from_curve(
            threshold_lamports,
            p_min,
            segments,
            locked_vesting,
            base.migration_option,
            leftover,
            fee_percent,
        ),
        total_supply,
    )
    return _result(
        base,
        pool_fees=pool_fees,
        locked_vesting=locked_vesting,
        sqrt_start_price=p_min,
        segments=segments,
        migration_quote_threshold=threshold_lamports,
        allocation=allocation,
        total_supply=total_supply,
    )


def _weights(values: Sequence[Number]) -> list[Fraction]:
    weights = [to_fraction("liquidity_weight", v) for v in values]
    if any(w < 0 for w in weights):
        raise InvalidParameterError("liquidity weights must be non-negative")
    return weights


def build_curve_with_liquidity_weights(
    base: BuildCurveBaseParams,
    *,
    initial_market_cap: Number,
    migration_market_cap: Number,
    liquidity_weights: Sequence[Number],
) -> BuildCurveResult:
    """Sixteen geometric bins between the two market caps, liquidity in proportion to `liquidity_weights`."""
    if len(liquidity_weights) != LIQUIDITY_WEIGHT_COUNT:
        raise InvalidParameterError(f"exactly {LIQUIDITY_WEIGHT_COUNT} liquidity weights are required")
    bd, qd = base.token_base_decimal, base.token_quote_decimal
    p_min = get_sqrt_price_from_market_cap(initial_market_cap, base.total_token_supply, bd, qd)
    p_max = get_sqrt_price_from_market_cap(migration_market_cap, base.total_token_supply, bd, qd)
    if p_max <= p_min:
        raise InvalidParameterError("migration market cap must exceed initial market cap")
    return _build_weighted(
        base,
        sqrt_prices=get_liquidity_weight_sqrt_prices(p_min, p_max),
        weights=_weights(liquidity_weights),
    )


def build_curve_with_custom_sqrt_prices(
    base: BuildCurveBaseParams,
    *,
    sqrt_prices: Sequence[int],
    liquidity_weights: Sequence[Number] | None = None,
) -> BuildCurveResult:
    """
    Caller-chosen bin edges: `sqrt_prices[0]` is the start price and the last
    edge is the migration price. Weights default to uniform.
    """
    if not (2 <= len(sqrt_prices) <= MAX_CURVE_POINT + 1):
        raise InvalidParameterError(f"between 2 and {MAX_CURVE_POINT + 1} sqrt prices are required")
    bins = len(sqrt_prices) - 1
    if liquidity_weights is None:
        liquidity_weights = [1] * bins
    if len(liquidity_weights) != bins:
        raise InvalidParameterError(f"{bins} liquidity weights are required, got {len(liquidity_weights)}")
    return _build_weighted(base, sqrt_prices=list(sqrt_prices), weights=_weights(liquidity_weights))
