"""Discriminants shared with the on-chain account layouts."""

from __future__ import annotations

from enum import Enum, unique


@unique
class ActivationType(Enum):
    """Clock used for activation points and fee periods."""
    SLOT = 0
    TIMESTAMP = 1


@unique
class CollectFeeMode(Enum):
    """Bonding-curve fee collection token."""
    QUOTE_TOKEN = 0
    OUTPUT_TOKEN = 1


@unique
class CpCollectFeeMode(Enum):
    """Constant-product fee collection token."""
    BOTH_TOKEN = 0
    ONLY_B = 1


@unique
class BaseFeeMode(Enum):
    """Base fee schedule. Market-cap modes only exist on constant-product pools."""
    FEE_SCHEDULER_LINEAR = 0
    FEE_SCHEDULER_EXPONENTIAL = 1
    RATE_LIMITER = 2
    FEE_MARKET_CAP_SCHEDULER_LINEAR = 3
    FEE_MARKET_CAP_SCHEDULER_EXPONENTIAL = 4

    @property
    def is_time_scheduler(self) -> bool:
        return self in (BaseFeeMode.FEE_SCHEDULER_LINEAR, BaseFeeMode.FEE_SCHEDULER_EXPONENTIAL)

    @property
    def is_market_cap_scheduler(self) -> bool:
        return self in (
            BaseFeeMode.FEE_MARKET_CAP_SCHEDULER_LINEAR,
            BaseFeeMode.FEE_MARKET_CAP_SCHEDULER_EXPONENTIAL,
        )

    @property
    def is_exponential(self) -> bool:
        return self in (
            BaseFeeMode.FEE_SCHEDULER_EXPONENTIAL,
            BaseFeeMode.FEE_MARKET_CAP_SCHEDULER_EXPONENTIAL,
        )


@unique
class TradeDirection(Enum):
    """Swap direction. On constant-product pools token A is base and B is quote."""
    BASE_TO_QUOTE = 0
    QUOTE_TO_BASE = 1

    @property
    def base_for_quote(self) -> bool:
        return self is TradeDirection.BASE_TO_QUOTE


@unique
class SwapMode(Enum):
    EXACT_IN = 0
    PARTIAL_FILL = 1
    EXACT_OUT = 2


@unique
class MigrationOption(Enum):
    """Destination pool program for a completed bonding curve."""
    MET_DAMM = 0
    MET_DAMM_V2 = 1
