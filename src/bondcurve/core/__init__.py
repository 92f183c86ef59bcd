"""
Bonding-curve algorithms: fees, curve walks, quoting, curve construction
"""

from .build_params import (
    BaseFeeParams,
    FeeSchedulerParams,
    RateLimiterParams,
    get_base_fee_params,
    get_dynamic_fee_params,
    get_fee_scheduler_params,
    get_locked_vesting_params,
    get_percentage_supply_on_migration,
    get_rate_limiter_params,
)
from .cp_amm import (
    DepositQuote,
    WithdrawQuote,
    calculate_init_sqrt_price,
    cp_swap_quote,
    deposit_quote,
    get_liquidity_delta,
    withdraw_quote,
)
from .curve_builder import (
    BuildCurveBaseParams,
    BuildCurveResult,
    LockedVestingInput,
    TokenAllocation,
    build_curve,
    build_curve_with_custom_sqrt_prices,
    build_curve_with_liquidity_weights,
    build_curve_with_market_cap,
    build_curve_with_mid_price,
    build_curve_with_two_segments,
    get_total_supply_from_curve,
)
from .fees import (
    FeeMode,
    TradeContext,
    get_base_fee_numerator,
    get_fee_mode,
    get_fee_on_amount,
    validate_pool_fees,
)
from .price import (
    get_amount_with_slippage,
    get_price_from_sqrt_price,
    get_price_impact,
    get_sqrt_price_from_market_cap,
    get_sqrt_price_from_price,
)
from .swap_quote import SwapQuoteResult, swap_quote

__all__ = [
    "BaseFeeParams",
    "FeeSchedulerParams",
    "RateLimiterParams",
    "get_base_fee_params",
    "get_dynamic_fee_params",
    "get_fee_scheduler_params",
    "get_locked_vesting_params",
    "get_percentage_supply_on_migration",
    "get_rate_limiter_params",
    "DepositQuote",
    "WithdrawQuote",
    "calculate_init_sqrt_price",
    "cp_swap_quote",
    "deposit_quote",
    "get_liquidity_delta",
    "withdraw_quote",
    "BuildCurveBaseParams",
    "BuildCurveResult",
    "LockedVestingInput",
    "TokenAllocation",
    "build_curve",
    "build_curve_with_custom_sqrt_prices",
    "build_curve_with_liquidity_weights",
    "build_curve_with_market_cap",
    "build_curve_with_mid_price",
    "build_curve_with_two_segments",
    "get_total_supply_from_curve",
    "FeeMode",
    "TradeContext",
    "get_base_fee_numerator",
    "get_fee_mode",
    "get_fee_on_amount",
    "validate_pool_fees",
    "get_amount_with_slippage",
    "get_price_from_sqrt_price",
    "get_price_impact",
    "get_sqrt_price_from_market_cap",
    "get_sqrt_price_from_price",
    "SwapQuoteResult",
    "swap_quote",
]
