"""Fee configuration state.

`BaseFeeConfig` packs every base-fee mode into one record; factor meaning
depends on the mode:

  scheduler:     first = number_of_period, second = period_frequency, third = reduction_factor
  rate limiter:  first = fee_increment_bps, second = max_limiter_duration, third = reference_amount
  market cap:    first = number_of_period, second = sqrt_price_step_bps, third = reduction_factor,
                 plus scheduler_expiration_duration
"""

from __future__ import annotations

from dataclasses import dataclass

from ..constants import FEE_DENOMINATOR, MAX_FEE_NUMERATOR
from ..errors import InvalidParameterError
from .enums import BaseFeeMode


def _check_non_negative_ints(pairs: tuple[tuple[str, int], ...]) -> None:
    for name, v in pairs:
        if not isinstance(v, int) or isinstance(v, bool):
            raise TypeError(f"{name} must be an int")
        if v < 0:
            raise InvalidParameterError(f"{name} must be non-negative: {v}")


@dataclass(frozen=True)
class BaseFeeConfig:
    mode: BaseFeeMode
    cliff_fee_numerator: int
    first_factor: int = 0
    second_factor: int = 0
    third_factor: int = 0
    scheduler_expiration_duration: int = 0

    def __post_init__(self) -> None:
        if not isinstance(self.mode, BaseFeeMode):
            raise TypeError("mode must be a BaseFeeMode")
        _check_non_negative_ints(
            (
                ("cliff_fee_numerator", self.cliff_fee_numerator),
                ("first_factor", self.first_factor),
                ("second_factor", self.second_factor),
                ("third_factor", self.third_factor),
                ("scheduler_expiration_duration", self.scheduler_expiration_duration),
            )
        )

    # scheduler view
    @property
    def number_of_period(self) -> int:
        return self.first_factor

    @property
    def period_frequency(self) -> int:
        return self.second_factor

    @property
    def reduction_factor(self) -> int:
        return self.third_factor

    # rate limiter view
    @property
    def fee_increment_bps(self) -> int:
        return self.first_factor

    @property
    def max_limiter_duration(self) -> int:
        return self.second_factor

    @property
    def reference_amount(self) -> int:
        return self.third_factor

    # market cap view
    @property
    def sqrt_price_step_bps(self) -> int:
        return self.second_factor


@dataclass(frozen=True)
class DynamicFeeConfig:
    bin_step: int
    bin_step_u128: int
    variable_fee_control: int
    max_volatility_accumulator: int
    filter_period: int
    decay_period: int
    reduction_factor: int

    def __post_init__(self) -> None:
        _check_non_negative_ints(
            (
                ("bin_step", self.bin_step),
                ("bin_step_u128", self.bin_step_u128),
                ("variable_fee_control", self.variable_fee_control),
                ("max_volatility_accumulator", self.max_volatility_accumulator),
                ("filter_period", self.filter_period),
                ("decay_period", self.decay_period),
                ("reduction_factor", self.reduction_factor),
            )
        )


@dataclass(frozen=True)
class VolatilityTracker:
    """Snapshot of pool volatility; owned and advanced by pool state, read-only here."""

    volatility_accumulator: int = 0
    volatility_reference: int = 0
    sqrt_price_reference: int = 0
    last_update_timestamp: int = 0

    def __post_init__(self) -> None:
        _check_non_negative_ints(
            (
                ("volatility_accumulator", self.volatility_accumulator),
                ("volatility_reference", self.volatility_reference),
                ("sqrt_price_reference", self.sqrt_price_reference),
                ("last_update_timestamp", self.last_update_timestamp),
            )
        )


@dataclass(frozen=True)
class PoolFeesConfig:
    base_fee: BaseFeeConfig
    dynamic_fee: DynamicFeeConfig | None = None
    protocol_fee_percent: int = 20
    referral_fee_percent: int = 20
    max_fee_numerator: int = MAX_FEE_NUMERATOR

    def __post_init__(self) -> None:
        _check_non_negative_ints(
            (
                ("protocol_fee_percent", self.protocol_fee_percent),
                ("referral_fee_percent", self.referral_fee_percent),
                ("max_fee_numerator", self.max_fee_numerator),
            )
        )
        if self.protocol_fee_percent > 100:
            raise InvalidParameterError(f"protocol_fee_percent must be <= 100: {self.protocol_fee_percent}")
        if self.referral_fee_percent > 100:
            raise InvalidParameterError(f"referral_fee_percent must be <= 100: {self.referral_fee_percent}")
        if self.max_fee_numerator >= FEE_DENOMINATOR:
            raise InvalidParameterError(f"max_fee_numerator must be < {FEE_DENOMINATOR}")
