"""
bondcurve: deterministic integer math for piecewise-liquidity bonding curves
and constant-product pools.

Quotes, fee numerators and constructed curves are bit-exact with the
on-chain programs: Q64.64 sqrt prices, Q128 liquidity, u64 token amounts,
fee numerators over 1e9. Every division states its rounding direction.
"""

from .config import CurvePreset, build_from_preset, list_bundled_presets, load_bundled_preset, load_preset
from .core import (
    BuildCurveBaseParams,
    BuildCurveResult,
    SwapQuoteResult,
    build_curve,
    build_curve_with_custom_sqrt_prices,
    build_curve_with_liquidity_weights,
    build_curve_with_market_cap,
    build_curve_with_mid_price,
    build_curve_with_two_segments,
    cp_swap_quote,
    swap_quote,
)
from .errors import (
    BondCurveError,
    CurveArithmeticError,
    DivisionByZeroError,
    InsufficientLiquidityError,
    InvalidParameterError,
    PoolCompletedError,
    ReconciliationError,
)

__version__ = "0.1.0"

__all__ = [
    "CurvePreset",
    "build_from_preset",
    "list_bundled_presets",
    "load_bundled_preset",
    "load_preset",
    "BuildCurveBaseParams",
    "BuildCurveResult",
    "SwapQuoteResult",
    "build_curve",
    "build_curve_with_custom_sqrt_prices",
    "build_curve_with_liquidity_weights",
    "build_curve_with_market_cap",
    "build_curve_with_mid_price",
    "build_curve_with_two_segments",
    "cp_swap_quote",
    "swap_quote",
    "BondCurveError",
    "CurveArithmeticError",
    "DivisionByZeroError",
    "InsufficientLiquidityError",
    "InvalidParameterError",
    "PoolCompletedError",
    "ReconciliationError",
]
