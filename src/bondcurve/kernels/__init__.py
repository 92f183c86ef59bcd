"""
Integer kernels: fixed-point arithmetic and liquidity primitives.
"""

from .fixed_point import Rounding, mul_div, mul_shr, pow, shl_div, sqrt
from .liquidity_math import (
    get_delta_amount_base_unsigned,
    get_delta_amount_quote_unsigned,
    get_initial_liquidity_from_delta_base,
    get_initial_liquidity_from_delta_quote,
    get_liquidity,
    get_next_sqrt_price_from_input,
    get_next_sqrt_price_from_output,
)

__all__ = [
    "Rounding",
    "mul_div",
    "mul_shr",
    "pow",
    "shl_div",
    "sqrt",
    "get_delta_amount_base_unsigned",
    "get_delta_amount_quote_unsigned",
    "get_initial_liquidity_from_delta_base",
    "get_initial_liquidity_from_delta_quote",
    "get_liquidity",
    "get_next_sqrt_price_from_input",
    "get_next_sqrt_price_from_output",
]
