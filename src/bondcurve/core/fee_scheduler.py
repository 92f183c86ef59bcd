"""
Period-based base fee schedules (deterministic, integer-only).

Two clocks drive the period index:
- time scheduler: `(current_point - activation_point) // period_frequency`
- market-cap scheduler: sqrt-price growth above `init_sqrt_price` in steps of
  `sqrt_price_step_bps`, until `scheduler_expiration_duration` elapses

Both clamp the period to `[0, number_of_period]` and quote the fully reduced
fee before activation.
"""

from __future__ import annotations

from ..constants import BASIS_POINT_MAX, MIN_FEE_NUMERATOR, ONE_Q64, RESOLUTION, U16_MAX
from ..errors import CurveArithmeticError, InvalidParameterError
from ..kernels.fixed_point import pow as pow_q64
from ..state.enums import BaseFeeMode
from ..state.fees import BaseFeeConfig


def get_fee_numerator_on_linear_fee_scheduler(
    cliff_fee_numerator: int, reduction_factor: int, period: int
) -> int:
    return max(0, cliff_fee_numerator - period * reduction_factor)


def get_fee_numerator_on_exponential_fee_scheduler(
    cliff_fee_numerator: int, reduction_factor: int, period: int
) -> int:
    """`cliff * (1 - reduction_factor / 10_000) ** period` in Q64.64."""
    if period == 0 or reduction_factor == 0:
        return cliff_fee_numerator
    base = ONE_Q64 - (reduction_factor << RESOLUTION) // BASIS_POINT_MAX
    if period == 1:
        return (cliff_fee_numerator * base) >> RESOLUTION
    return (cliff_fee_numerator * pow_q64(base, period)) >> RESOLUTION


def get_base_fee_numerator_by_period(
    cliff_fee_numerator: int,
    number_of_period: int,
    period: int,
    reduction_factor: int,
    mode: BaseFeeMode,
) -> int:
    period = min(period, number_of_period)
    if period > U16_MAX:
        raise CurveArithmeticError(f"period overflows u16: {period}")
    if mode.is_exponential:
        return get_fee_numerator_on_exponential_fee_scheduler(cliff_fee_numerator, reduction_factor, period)
    return get_fee_numerator_on_linear_fee_scheduler(cliff_fee_numerator, reduction_factor, period)


def get_time_scheduler_period(
    current_point: int, activation_point: int, number_of_period: int, period_frequency: int
) -> int:
    if current_point < activation_point:
        return number_of_period
    return min((current_point - activation_point) // period_frequency, number_of_period)


def get_market_cap_scheduler_period(
    *,
    current_point: int,
    activation_point: int,
    number_of_period: int,
    sqrt_price_step_bps: int,
    scheduler_expiration_duration: int,
    init_sqrt_price: int,
    current_sqrt_price: int,
) -> int:
    expiration_point = activation_point + scheduler_expiration_duration
    if current_point > expiration_point or current_point < activation_point:
        return number_of_period
    if current_sqrt_price <= init_sqrt_price:
        return 0
    if sqrt_price_step_bps == 0 or init_sqrt_price == 0:
        raise InvalidParameterError("market cap scheduler needs a step and an init sqrt price")
    passed = (current_sqrt_price - init_sqrt_price) * BASIS_POINT_MAX // init_sqrt_price // sqrt_price_step_bps
    return min(passed, number_of_period)


def get_fee_scheduler_base_fee_numerator(
    base_fee: BaseFeeConfig,
    *,
    current_point: int,
    activation_point: int,
    init_sqrt_price: int = 0,
    current_sqrt_price: int = 0,
) -> int:
    if base_fee.mode.is_market_cap_scheduler:
        period = get_market_cap_scheduler_period(
            current_point=current_point,
            activation_point=activation_point,
            number_of_period=base_fee.number_of_period,
            sqrt_price_step_bps=base_fee.sqrt_price_step_bps,
            scheduler_expiration_duration=base_fee.scheduler_expiration_duration,
            init_sqrt_price=init_sqrt_price,
            current_sqrt_price=current_sqrt_price,
        )
    elif base_fee.period_frequency == 0:
        return base_fee.cliff_fee_numerator
    else:
        period = get_time_scheduler_period(
            current_point, activation_point, base_fee.number_of_period, base_fee.period_frequency
        )
    return get_base_fee_numerator_by_period(
        base_fee.cliff_fee_numerator,
        base_fee.number_of_period,
        period,
        base_fee.reduction_factor,
        base_fee.mode,
    )


def get_fee_scheduler_min_base_fee_numerator(base_fee: BaseFeeConfig) -> int:
    return get_base_fee_numerator_by_period(
        base_fee.cliff_fee_numerator,
        base_fee.number_of_period,
        base_fee.number_of_period,
        base_fee.reduction_factor,
        base_fee.mode,
    )


def validate_fee_scheduler(base_fee: BaseFeeConfig, *, max_fee_numerator: int) -> None:
    """Raise InvalidParameterError unless the schedule stays within fee bounds."""
    if base_fee.mode.is_market_cap_scheduler:
        if (
            base_fee.reduction_factor == 0
            or base_fee.sqrt_price_step_bps == 0
            or base_fee.scheduler_expiration_duration == 0
            or base_fee.number_of_period == 0
        ):
            raise InvalidParameterError("market cap scheduler factors must all be non-zero")
    else:
        factors = (base_fee.period_frequency, base_fee.number_of_period, base_fee.reduction_factor)
        if any(factors) and not all(factors):
            raise InvalidParameterError(
                "number_of_period, period_frequency and reduction_factor must be all zero or all non-zero"
            )
    if base_fee.number_of_period > U16_MAX:
        raise InvalidParameterError(f"number_of_period overflows u16: {base_fee.number_of_period}")
    min_fee_numerator = get_fee_scheduler_min_base_fee_numerator(base_fee)
    if min_fee_numerator < MIN_FEE_NUMERATOR:
        raise InvalidParameterError(
            f"minimum fee numerator {min_fee_numerator} below {MIN_FEE_NUMERATOR}"
        )
    if base_fee.cliff_fee_numerator > max_fee_numerator:
        raise InvalidParameterError(
            f"cliff fee numerator {base_fee.cliff_fee_numerator} above {max_fee_numerator}"
        )
