"""
Parameter builders for curve configs.

Turns human-level settings (fee bps, whole-token vesting amounts, percentages,
market caps) into the exact integer parameters stored on chain. All
validation happens here, before any config object is returned.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from fractions import Fraction

from ..constants import (
    BASIS_POINT_MAX,
    BIN_STEP_BPS_DEFAULT,
    BIN_STEP_BPS_U128_DEFAULT,
    DYNAMIC_FEE_DECAY_PERIOD_DEFAULT,
    DYNAMIC_FEE_FILTER_PERIOD_DEFAULT,
    DYNAMIC_FEE_REDUCTION_FACTOR_DEFAULT,
    DYNAMIC_FEE_ROUNDING_OFFSET,
    DYNAMIC_FEE_SCALING_FACTOR,
    FEE_DENOMINATOR,
    MAX_FEE_BPS,
    MAX_FEE_NUMERATOR,
    MAX_LOCK_DURATION_IN_SECONDS,
    MAX_MIGRATION_FEE_PERCENTAGE,
    MAX_PRICE_CHANGE_BPS_DEFAULT,
    MAX_RATE_LIMITER_DURATION_IN_SECONDS,
    MAX_RATE_LIMITER_DURATION_IN_SLOTS,
    MIN_FEE_NUMERATOR,
    ONE_Q64,
    Q128,
    U32_MAX,
    U64_MAX,
    U128_MAX,
)
from ..errors import InvalidParameterError
from ..kernels.fixed_point import _require_int
from ..state.enums import ActivationType, BaseFeeMode
from ..state.fees import BaseFeeConfig, DynamicFeeConfig
from ..state.vesting import LiquidityVestingInfo, LockedVestingParams, MigratedPoolMarketCapFeeSchedulerParams
from .fees_math import bps_to_fee_numerator
from .rational import Number, isqrt_fraction, nth_root_ceil, sqrt_fraction, to_fraction


def to_lamports(amount: Number, token_decimal: int) -> int:
    """Whole-token amount -> smallest units, floored."""
    return math.floor(to_fraction("amount", amount) * 10**token_decimal)


# ---------------------------------------------------------------------------
# Base fee
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class FeeSchedulerParams:
    starting_fee_bps: int
    ending_fee_bps: int
    number_of_period: int = 0
    total_duration: int = 0


@dataclass(frozen=True)
class RateLimiterParams:
    base_fee_bps: int
    fee_increment_bps: int
    reference_amount: Number
    max_limiter_duration: int


@dataclass(frozen=True)
class BaseFeeParams:
    mode: BaseFeeMode
    fee_scheduler: FeeSchedulerParams | None = None
    rate_limiter: RateLimiterParams | None = None

    @property
    def dynamic_fee_base_bps(self) -> int:
        """Fee the dynamic component is sized against: the settled scheduler fee or the limiter's base."""
        if self.mode is BaseFeeMode.RATE_LIMITER:
            return self.rate_limiter.base_fee_bps
        return self.fee_scheduler.ending_fee_bps


def exponential_reduction_factor(max_fee_numerator: int, min_fee_numerator: int, number_of_period: int) -> int:
    """`floor(10000 * (1 - (min / max) ** (1 / n)))`, exact."""
    ratio = Fraction(min_fee_numerator, max_fee_numerator)
    decay = nth_root_ceil(ratio * BASIS_POINT_MAX**number_of_period, number_of_period)
    return BASIS_POINT_MAX - decay


def _scheduler_reduction_factor(mode: BaseFeeMode, max_num: int, min_num: int, number_of_period: int) -> int:
    if mode.is_exponential:
        return exponential_reduction_factor(max_num, min_num, number_of_period)
    return (max_num - min_num) // number_of_period


def get_fee_scheduler_params(
    starting_fee_bps: int,
    ending_fee_bps: int,
    mode: BaseFeeMode,
    number_of_period: int,
    total_duration: int,
) -> BaseFeeConfig:
    for name, v in (
        ("starting_fee_bps", starting_fee_bps),
        ("ending_fee_bps", ending_fee_bps),
        ("number_of_period", number_of_period),
        ("total_duration", total_duration),
    ):
        _require_int(name, v)
    if not mode.is_time_scheduler:
        raise InvalidParameterError(f"{mode.name} is not a time-based fee scheduler")

    if starting_fee_bps == ending_fee_bps:
        if number_of_period != 0 or total_duration != 0:
            raise InvalidParameterError("number_of_period and total_duration must both be zero for a flat fee")
        return BaseFeeConfig(
            mode=BaseFeeMode.FEE_SCHEDULER_LINEAR,
            cliff_fee_numerator=bps_to_fee_numerator(starting_fee_bps),
        )

    if number_of_period <= 0:
        raise InvalidParameterError("number_of_period must be greater than zero")
    if starting_fee_bps > MAX_FEE_BPS:
        raise InvalidParameterError(
            f"starting_fee_bps ({starting_fee_bps}) exceeds maximum of {MAX_FEE_BPS} bps"
        )
    if ending_fee_bps > starting_fee_bps:
        raise InvalidParameterError("ending_fee_bps must not exceed starting_fee_bps")
    if total_duration <= 0:
        raise InvalidParameterError("total_duration must be greater than zero")

    max_num = bps_to_fee_numerator(starting_fee_bps)
    min_num = bps_to_fee_numerator(ending_fee_bps)
    return BaseFeeConfig(
        mode=mode,
        cliff_fee_numerator=max_num,
        first_factor=number_of_period,
        second_factor=total_duration // number_of_period,
        third_factor=_scheduler_reduction_factor(mode, max_num, min_num, number_of_period),
    )


def get_rate_limiter_params(
    base_fee_bps: int,
    fee_increment_bps: int,
    reference_amount: Number,
    max_limiter_duration: int,
    token_quote_decimal: int,
    activation_type: ActivationType,
) -> BaseFeeConfig:
    reference_lamports = to_lamports(reference_amount, token_quote_decimal)
    if base_fee_bps <= 0 or fee_increment_bps <= 0 or reference_lamports <= 0 or max_limiter_duration <= 0:
        raise InvalidParameterError("all rate limiter parameters must be greater than zero")
    if base_fee_bps > MAX_FEE_BPS:
        raise InvalidParameterError(f"base fee ({base_fee_bps} bps) exceeds maximum of {MAX_FEE_BPS} bps")
    if fee_increment_bps > MAX_FEE_BPS:
        raise InvalidParameterError(f"fee increment ({fee_increment_bps} bps) exceeds maximum of {MAX_FEE_BPS} bps")

    cliff_fee_numerator = bps_to_fee_numerator(base_fee_bps)
    fee_increment_numerator = bps_to_fee_numerator(fee_increment_bps)
    if fee_increment_numerator >= FEE_DENOMINATOR:
        raise InvalidParameterError("fee increment numerator must be below the fee denominator")
    if not (MIN_FEE_NUMERATOR <= cliff_fee_numerator <= MAX_FEE_NUMERATOR):
        raise InvalidParameterError("base fee must lie between the minimum and maximum fee")
    if (MAX_FEE_NUMERATOR - cliff_fee_numerator) // fee_increment_numerator < 1:
        raise InvalidParameterError("fee increment is too large for the given base fee")

    limit = (
        MAX_RATE_LIMITER_DURATION_IN_SLOTS
        if activation_type is ActivationType.SLOT
        else MAX_RATE_LIMITER_DURATION_IN_SECONDS
    )
    if max_limiter_duration > limit:
        raise InvalidParameterError(f"max_limiter_duration exceeds {limit}")

    return BaseFeeConfig(
        mode=BaseFeeMode.RATE_LIMITER,
        cliff_fee_numerator=cliff_fee_numerator,
        first_factor=fee_increment_bps,
        second_factor=max_limiter_duration,
        third_factor=reference_lamports,
    )


def get_base_fee_params(
    params: BaseFeeParams, token_quote_decimal: int, activation_type: ActivationType
) -> BaseFeeConfig:
    if params.mode is BaseFeeMode.RATE_LIMITER:
        r = params.rate_limiter
        if r is None:
            raise InvalidParameterError("rate limiter parameters are required for RATE_LIMITER mode")
        return get_rate_limiter_params(
            r.base_fee_bps,
            r.fee_increment_bps,
            r.reference_amount,
            r.max_limiter_duration,
            token_quote_decimal,
            activation_type,
        )
    f = params.fee_scheduler
    if f is None:
        raise InvalidParameterError(f"fee scheduler parameters are required for {params.mode.name}")
    return get_fee_scheduler_params(
        f.starting_fee_bps, f.ending_fee_bps, params.mode, f.number_of_period, f.total_duration
    )


# ---------------------------------------------------------------------------
# Dynamic fee
# ---------------------------------------------------------------------------


def get_dynamic_fee_params(
    base_fee_bps: int, max_price_change_bps: int = MAX_PRICE_CHANGE_BPS_DEFAULT
) -> DynamicFeeConfig:
    """Size the variable fee so a `max_price_change_bps` move adds 20% of the base fee."""
    if max_price_change_bps > MAX_PRICE_CHANGE_BPS_DEFAULT:
        raise InvalidParameterError(
            f"max_price_change_bps ({max_price_change_bps}) must be <= {MAX_PRICE_CHANGE_BPS_DEFAULT}"
        )
    # floor(sqrt(1 + bps / 10000) * 2**64)
    sqrt_price_ratio_q64 = isqrt_fraction(Fraction(BASIS_POINT_MAX + max_price_change_bps, BASIS_POINT_MAX) * Q128)
    delta_bin_id = (sqrt_price_ratio_q64 - ONE_Q64) // BIN_STEP_BPS_U128_DEFAULT * 2
    max_volatility_accumulator = delta_bin_id * BASIS_POINT_MAX
    square_vfa_bin = (max_volatility_accumulator * BIN_STEP_BPS_DEFAULT) ** 2
    if square_vfa_bin == 0:
        raise InvalidParameterError("max_price_change_bps too small to move one bin")

    max_dynamic_fee_numerator = Fraction(bps_to_fee_numerator(base_fee_bps) * 20, 100)
    v_fee = max_dynamic_fee_numerator * DYNAMIC_FEE_SCALING_FACTOR - DYNAMIC_FEE_ROUNDING_OFFSET
    variable_fee_control = max(math.floor(v_fee / square_vfa_bin), 0)

    return DynamicFeeConfig(
        bin_step=BIN_STEP_BPS_DEFAULT,
        bin_step_u128=BIN_STEP_BPS_U128_DEFAULT,
        variable_fee_control=variable_fee_control,
        max_volatility_accumulator=max_volatility_accumulator,
        filter_period=DYNAMIC_FEE_FILTER_PERIOD_DEFAULT,
        decay_period=DYNAMIC_FEE_DECAY_PERIOD_DEFAULT,
        reduction_factor=DYNAMIC_FEE_REDUCTION_FACTOR_DEFAULT,
    )


# ---------------------------------------------------------------------------
# Vesting
# ---------------------------------------------------------------------------


def get_locked_vesting_params(
    total_locked_vesting_amount: int,
    number_of_vesting_period: int,
    cliff_unlock_amount: int,
    total_vesting_duration: int,
    cliff_duration_from_migration_time: int,
    token_base_decimal: int,
) -> LockedVestingParams:
    """
    Build a base-token vesting schedule from whole-token amounts.

    The rounding remainder of `amount_per_period` is folded into the cliff
    unlock so the schedule releases exactly `total_locked_vesting_amount`.
    """
    for name, v in (
        ("total_locked_vesting_amount", total_locked_vesting_amount),
        ("number_of_vesting_period", number_of_vesting_period),
        ("cliff_unlock_amount", cliff_unlock_amount),
        ("total_vesting_duration", total_vesting_duration),
        ("cliff_duration_from_migration_time", cliff_duration_from_migration_time),
    ):
        _require_int(name, v)
    unit = 10**token_base_decimal

    if total_locked_vesting_amount == 0:
        return LockedVestingParams()

    if total_locked_vesting_amount == cliff_unlock_amount:
        # One token stays on the periodic leg; the program rejects a zero-period schedule.
        return LockedVestingParams(
            amount_per_period=unit,
            cliff_duration_from_migration_time=cliff_duration_from_migration_time,
            frequency=1,
            number_of_period=1,
            cliff_unlock_amount=(total_locked_vesting_amount - 1) * unit,
        )

    if number_of_vesting_period <= 0:
        raise InvalidParameterError("number_of_vesting_period must be greater than zero")
    if total_vesting_duration <= 0:
        raise InvalidParameterError("total_vesting_duration must be greater than zero")
    if cliff_unlock_amount > total_locked_vesting_amount:
        raise InvalidParameterError("cliff_unlock_amount cannot exceed total_locked_vesting_amount")

    amount_per_period = (total_locked_vesting_amount - cliff_unlock_amount) // number_of_vesting_period
    remainder = total_locked_vesting_amount - cliff_unlock_amount - amount_per_period * number_of_vesting_period
    return LockedVestingParams(
        amount_per_period=amount_per_period * unit,
        cliff_duration_from_migration_time=cliff_duration_from_migration_time,
        frequency=total_vesting_duration // number_of_vesting_period,
        number_of_period=number_of_vesting_period,
        cliff_unlock_amount=(cliff_unlock_amount + remainder) * unit,
    )


def get_total_vesting_amount(locked_vesting: LockedVestingParams) -> int:
    return locked_vesting.total_amount


def get_liquidity_vesting_info_params(
    vesting_percentage: int,
    bps_per_period: int,
    number_of_periods: int,
    cliff_duration_from_migration_time: int,
    total_duration: int,
) -> LiquidityVestingInfo:
    if not (0 <= vesting_percentage <= 100):
        raise InvalidParameterError(f"vesting_percentage must be in [0, 100]: {vesting_percentage}")
    if vesting_percentage == 0:
        if bps_per_period or number_of_periods or cliff_duration_from_migration_time or total_duration:
            raise InvalidParameterError("a zero vesting_percentage requires every other field to be zero")
        return LiquidityVestingInfo()

    if number_of_periods <= 0:
        raise InvalidParameterError("number_of_periods must be greater than zero")
    if total_duration <= 0:
        raise InvalidParameterError("total_duration must be greater than zero")
    if not (0 <= bps_per_period <= BASIS_POINT_MAX):
        raise InvalidParameterError(f"bps_per_period must be in [0, {BASIS_POINT_MAX}]")

    frequency = total_duration // number_of_periods
    if frequency == 0:
        raise InvalidParameterError("total_duration is shorter than number_of_periods")
    if bps_per_period * number_of_periods > BASIS_POINT_MAX:
        raise InvalidParameterError("bps_per_period * number_of_periods exceeds 10000")
    if cliff_duration_from_migration_time + number_of_periods * frequency > MAX_LOCK_DURATION_IN_SECONDS:
        raise InvalidParameterError(f"vesting lock exceeds {MAX_LOCK_DURATION_IN_SECONDS} seconds")
    if frequency > U32_MAX:
        raise InvalidParameterError("frequency overflows u32")

    return LiquidityVestingInfo(
        vesting_percentage=vesting_percentage,
        bps_per_period=bps_per_period,
        number_of_periods=number_of_periods,
        cliff_duration_from_migration_time=cliff_duration_from_migration_time,
        frequency=frequency,
    )


def get_vesting_locked_liquidity_bps_at_n_seconds(
    info: LiquidityVestingInfo | None, n_seconds: int
) -> int:
    """Share of LP (bps) still locked `n_seconds` after migration."""
    if info is None or info.vesting_percentage == 0:
        return 0

    total_liquidity = U128_MAX
    total_vested = total_liquidity * info.vesting_percentage // 100
    after_cliff = total_vested * (info.bps_per_period * info.number_of_periods) // BASIS_POINT_MAX

    number_of_periods = info.number_of_periods
    frequency = info.frequency
    cliff_duration = info.cliff_duration_from_migration_time
    per_period = after_cliff // number_of_periods if number_of_periods > 0 else 0
    if per_period == 0:
        number_of_periods = 0
        frequency = 0
        if cliff_duration == 0:
            cliff_duration = 1

    cliff_unlock = total_vested - per_period * number_of_periods

    unlocked = 0
    if n_seconds >= cliff_duration:
        unlocked = cliff_unlock
        if frequency > 0 and number_of_periods > 0:
            passed = min((n_seconds - cliff_duration) // frequency, number_of_periods)
            unlocked += per_period * passed

    locked = total_vested - unlocked
    return locked * BASIS_POINT_MAX // total_liquidity


def calculate_locked_liquidity_bps_at_time(
    *,
    partner_permanent_locked_liquidity_percentage: int,
    creator_permanent_locked_liquidity_percentage: int,
    partner_liquidity_vesting_info: LiquidityVestingInfo | None,
    creator_liquidity_vesting_info: LiquidityVestingInfo | None,
    n_seconds: int,
) -> int:
    return (
        get_vesting_locked_liquidity_bps_at_n_seconds(partner_liquidity_vesting_info, n_seconds)
        + partner_permanent_locked_liquidity_percentage * 100
        + get_vesting_locked_liquidity_bps_at_n_seconds(creator_liquidity_vesting_info, n_seconds)
        + creator_permanent_locked_liquidity_percentage * 100
    )


# ---------------------------------------------------------------------------
# Migrated pool fee schedule
# ---------------------------------------------------------------------------


def get_migrated_pool_market_cap_fee_scheduler_params(
    starting_base_fee_bps: int,
    ending_base_fee_bps: int,
    mode: BaseFeeMode,
    number_of_period: int,
    sqrt_price_step_bps: int,
    scheduler_expiration_duration: int,
) -> MigratedPoolMarketCapFeeSchedulerParams:
    if mode.is_time_scheduler:
        return MigratedPoolMarketCapFeeSchedulerParams()
    if mode is BaseFeeMode.RATE_LIMITER:
        raise InvalidParameterError("rate limiter is not supported on migrated pools")

    if number_of_period <= 0:
        raise InvalidParameterError("number_of_period must be greater than zero")
    if starting_base_fee_bps <= ending_base_fee_bps:
        raise InvalidParameterError("starting_base_fee_bps must exceed ending_base_fee_bps")
    if starting_base_fee_bps > MAX_FEE_BPS:
        raise InvalidParameterError(f"starting_base_fee_bps exceeds {MAX_FEE_BPS}")
    if sqrt_price_step_bps <= 0 or scheduler_expiration_duration <= 0:
        raise InvalidParameterError("sqrt_price_step_bps and scheduler_expiration_duration must be positive")

    max_num = bps_to_fee_numerator(starting_base_fee_bps)
    min_num = bps_to_fee_numerator(ending_base_fee_bps)
    reduction_factor = _scheduler_reduction_factor(mode, max_num, min_num, number_of_period)
    if reduction_factor > U64_MAX:
        raise InvalidParameterError("reduction_factor overflows u64")
    return MigratedPoolMarketCapFeeSchedulerParams(
        number_of_period=number_of_period,
        sqrt_price_step_bps=sqrt_price_step_bps,
        scheduler_expiration_duration=scheduler_expiration_duration,
        reduction_factor=reduction_factor,
    )


# ---------------------------------------------------------------------------
# Migration amounts (whole-token units, exact)
# ---------------------------------------------------------------------------


def _check_migration_fee_percent(migration_fee_percent: int) -> None:
    if not (0 <= migration_fee_percent <= MAX_MIGRATION_FEE_PERCENTAGE):
        raise InvalidParameterError(
            f"migration_fee_percent must be in [0, {MAX_MIGRATION_FEE_PERCENTAGE}]: {migration_fee_percent}"
        )


def get_migration_quote_amount_from_threshold(threshold: Number, migration_fee_percent: int) -> Fraction:
    _check_migration_fee_percent(migration_fee_percent)
    return to_fraction("threshold", threshold) * (100 - migration_fee_percent) / 100


def get_migration_quote_threshold_from_quote_amount(quote_amount: Number, migration_fee_percent: int) -> Fraction:
    _check_migration_fee_percent(migration_fee_percent)
    return to_fraction("quote_amount", quote_amount) * 100 / (100 - migration_fee_percent)


def get_migration_quote_amount(migration_market_cap: Number, percentage_supply_on_migration: Number) -> Fraction:
    return (
        to_fraction("migration_market_cap", migration_market_cap)
        * to_fraction("percentage_supply_on_migration", percentage_supply_on_migration)
        / 100
    )


def get_percentage_supply_on_migration(
    initial_market_cap: Number,
    migration_market_cap: Number,
    locked_vesting: LockedVestingParams,
    total_leftover: int,
    total_token_supply: int,
    *,
    migration_fee_percent: int = 0,
) -> Fraction:
    """
    Percentage of supply deposited at migration so a single-segment curve
    opens at `initial_market_cap` and migrates at `migration_market_cap`.

    With r = sqrt(initial / migration) and k = r * (1 - fee / 100):
        pct = k * (100 - vesting% - leftover%) / (1 + k)
    `total_leftover` and `total_token_supply` are in base lamports.
    """
    _check_migration_fee_percent(migration_fee_percent)
    if total_token_supply <= 0:
        raise InvalidParameterError("total_token_supply must be positive")
    migration = to_fraction("migration_market_cap", migration_market_cap)
    if migration <= 0:
        raise InvalidParameterError("migration_market_cap must be positive")
    sqrt_ratio = sqrt_fraction(to_fraction("initial_market_cap", initial_market_cap) / migration)
    k = sqrt_ratio * (100 - migration_fee_percent) / 100

    vesting_percentage = Fraction(locked_vesting.total_amount * 100, total_token_supply)
    leftover_percentage = Fraction(total_leftover * 100, total_token_supply)
    return k * (100 - vesting_percentage - leftover_percentage) / (1 + k)
