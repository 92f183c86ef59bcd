"""Decoded pool state consumed by the quoters."""

from __future__ import annotations

from dataclasses import dataclass, field

from ..constants import MAX_SQRT_PRICE, MIN_SQRT_PRICE
from ..errors import InvalidParameterError
from .curve import Curve
from .enums import ActivationType, CollectFeeMode, CpCollectFeeMode, MigrationOption
from .fees import PoolFeesConfig, VolatilityTracker, _check_non_negative_ints


@dataclass(frozen=True)
class PoolConfig:
    """Immutable bonding-curve config produced by the curve builder."""

    curve: Curve
    pool_fees: PoolFeesConfig
    migration_quote_threshold: int
    migration_sqrt_price: int
    collect_fee_mode: CollectFeeMode = CollectFeeMode.QUOTE_TOKEN
    activation_type: ActivationType = ActivationType.SLOT
    migration_option: MigrationOption = MigrationOption.MET_DAMM_V2

    def __post_init__(self) -> None:
        _check_non_negative_ints(
            (
                ("migration_quote_threshold", self.migration_quote_threshold),
                ("migration_sqrt_price", self.migration_sqrt_price),
            )
        )
        if self.migration_quote_threshold == 0:
            raise InvalidParameterError("migration_quote_threshold must be positive")
        if self.migration_sqrt_price <= self.curve.sqrt_start_price:
            raise InvalidParameterError("migration_sqrt_price must exceed sqrt_start_price")

    @property
    def sqrt_start_price(self) -> int:
        return self.curve.sqrt_start_price


@dataclass(frozen=True)
class VirtualPool:
    """Live bonding-curve pool state."""

    sqrt_price: int
    quote_reserve: int = 0
    base_reserve: int = 0
    activation_point: int = 0
    volatility_tracker: VolatilityTracker = field(default_factory=VolatilityTracker)

    def __post_init__(self) -> None:
        _check_non_negative_ints(
            (
                ("sqrt_price", self.sqrt_price),
                ("quote_reserve", self.quote_reserve),
                ("base_reserve", self.base_reserve),
                ("activation_point", self.activation_point),
            )
        )


@dataclass(frozen=True)
class CpPool:
    """Constant-product pool: one liquidity segment bounded by `[sqrt_min_price, sqrt_max_price]`."""

    sqrt_price: int
    liquidity: int
    pool_fees: PoolFeesConfig
    sqrt_min_price: int = MIN_SQRT_PRICE
    sqrt_max_price: int = MAX_SQRT_PRICE
    activation_point: int = 0
    collect_fee_mode: CpCollectFeeMode = CpCollectFeeMode.BOTH_TOKEN
    activation_type: ActivationType = ActivationType.TIMESTAMP
    init_sqrt_price: int = 0
    enabled: bool = True
    volatility_tracker: VolatilityTracker = field(default_factory=VolatilityTracker)

    def __post_init__(self) -> None:
        _check_non_negative_ints(
            (
                ("sqrt_price", self.sqrt_price),
                ("liquidity", self.liquidity),
                ("sqrt_min_price", self.sqrt_min_price),
                ("sqrt_max_price", self.sqrt_max_price),
                ("activation_point", self.activation_point),
                ("init_sqrt_price", self.init_sqrt_price),
            )
        )
        if not (MIN_SQRT_PRICE <= self.sqrt_min_price < self.sqrt_max_price <= MAX_SQRT_PRICE):
            raise InvalidParameterError(
                f"invalid price range: [{self.sqrt_min_price}, {self.sqrt_max_price}]"
            )
        if not (self.sqrt_min_price <= self.sqrt_price <= self.sqrt_max_price):
            raise InvalidParameterError(f"sqrt_price outside pool range: {self.sqrt_price}")
