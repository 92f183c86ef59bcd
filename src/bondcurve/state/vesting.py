"""Vesting schedules produced at curve-construction time."""

from __future__ import annotations

from dataclasses import dataclass

from .fees import _check_non_negative_ints


@dataclass(frozen=True)
class LockedVestingParams:
    """Base-token vesting (lamports) released after migration."""

    amount_per_period: int = 0
    cliff_duration_from_migration_time: int = 0
    frequency: int = 0
    number_of_period: int = 0
    cliff_unlock_amount: int = 0

    def __post_init__(self) -> None:
        _check_non_negative_ints(
            (
                ("amount_per_period", self.amount_per_period),
                ("cliff_duration_from_migration_time", self.cliff_duration_from_migration_time),
                ("frequency", self.frequency),
                ("number_of_period", self.number_of_period),
                ("cliff_unlock_amount", self.cliff_unlock_amount),
            )
        )

    @property
    def total_amount(self) -> int:
        return self.cliff_unlock_amount + self.amount_per_period * self.number_of_period


@dataclass(frozen=True)
class LiquidityVestingInfo:
    """Post-migration LP vesting for one party (partner or creator)."""

    vesting_percentage: int = 0
    bps_per_period: int = 0
    number_of_periods: int = 0
    cliff_duration_from_migration_time: int = 0
    frequency: int = 0

    def __post_init__(self) -> None:
        _check_non_negative_ints(
            (
                ("vesting_percentage", self.vesting_percentage),
                ("bps_per_period", self.bps_per_period),
                ("number_of_periods", self.number_of_periods),
                ("cliff_duration_from_migration_time", self.cliff_duration_from_migration_time),
                ("frequency", self.frequency),
            )
        )


@dataclass(frozen=True)
class MigratedPoolMarketCapFeeSchedulerParams:
    number_of_period: int = 0
    sqrt_price_step_bps: int = 0
    scheduler_expiration_duration: int = 0
    reduction_factor: int = 0
