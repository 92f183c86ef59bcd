"""
Decoded on-chain state: curves, fee configs, vesting schedules, pools.
"""

from .curve import Curve, CurveSegment
from .enums import (
    ActivationType,
    BaseFeeMode,
    CollectFeeMode,
    CpCollectFeeMode,
    MigrationOption,
    SwapMode,
    TradeDirection,
)
from .fees import BaseFeeConfig, DynamicFeeConfig, PoolFeesConfig, VolatilityTracker
from .pool import CpPool, PoolConfig, VirtualPool
from .vesting import LiquidityVestingInfo, LockedVestingParams, MigratedPoolMarketCapFeeSchedulerParams

__all__ = [
    "ActivationType",
    "BaseFeeConfig",
    "BaseFeeMode",
    "CollectFeeMode",
    "CpCollectFeeMode",
    "CpPool",
    "Curve",
    "CurveSegment",
    "DynamicFeeConfig",
    "LiquidityVestingInfo",
    "LockedVestingParams",
    "MigratedPoolMarketCapFeeSchedulerParams",
    "MigrationOption",
    "PoolConfig",
    "PoolFeesConfig",
    "SwapMode",
    "TradeDirection",
    "VirtualPool",
    "VolatilityTracker",
]
