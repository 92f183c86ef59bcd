"""Price conversions, slippage and price impact."""

from __future__ import annotations

from fractions import Fraction
from typing import Sequence

from ..constants import BASIS_POINT_MAX, Q128
from ..errors import InvalidParameterError
from ..state.enums import SwapMode
from .rational import Number, isqrt_fraction, to_fraction


def get_sqrt_price_from_price(price: Number, token_base_decimal: int, token_quote_decimal: int) -> int:
    """Q64.64 sqrt of a human price (quote per base), floored."""
    adjusted = to_fraction("price", price) * Fraction(10) ** (token_quote_decimal - token_base_decimal)
    if adjusted < 0:
        raise InvalidParameterError(f"price must be non-negative: {price}")
    return isqrt_fraction(adjusted * Q128)


def get_sqrt_price_from_market_cap(
    market_cap: Number, total_supply: Number, token_base_decimal: int, token_quote_decimal: int
) -> int:
    supply = to_fraction("total_supply", total_supply)
    if supply == 0:
        raise InvalidParameterError("total_supply must be positive")
    price = to_fraction("market_cap", market_cap) / supply
    return get_sqrt_price_from_price(price, token_base_decimal, token_quote_decimal)


def create_sqrt_prices(prices: Sequence[Number], token_base_decimal: int, token_quote_decimal: int) -> list[int]:
    return [get_sqrt_price_from_price(p, token_base_decimal, token_quote_decimal) for p in prices]


def get_price_from_sqrt_price(sqrt_price: int, token_base_decimal: int, token_quote_decimal: int) -> Fraction:
    """Human price (quote per base) of a Q64.64 sqrt price."""
    raw = Fraction(sqrt_price * sqrt_price, Q128)
    return raw * Fraction(10) ** (token_base_decimal - token_quote_decimal)


def get_amount_with_slippage(amount: int, slippage_bps: int, swap_mode: SwapMode) -> int:
    """Maximum input for exact-out quotes, minimum output otherwise."""
    if not (0 <= slippage_bps <= BASIS_POINT_MAX):
        raise InvalidParameterError(f"slippage_bps must be in [0, {BASIS_POINT_MAX}]: {slippage_bps}")
    if slippage_bps == 0:
        return amount
    if swap_mode is SwapMode.EXACT_OUT:
        return amount * (BASIS_POINT_MAX + slippage_bps) // BASIS_POINT_MAX
    return amount * (BASIS_POINT_MAX - slippage_bps) // BASIS_POINT_MAX


def get_price_impact(amount_in: int, amount_out: int, sqrt_price: int, base_for_quote: bool) -> Fraction:
    """
    `|execution - spot| / spot * 100`, both prices in raw quote per raw base.

    Returns 0 when either side of the trade is empty.
    """
    if amount_in == 0 or amount_out == 0 or sqrt_price == 0:
        return Fraction(0)
    spot = Fraction(sqrt_price * sqrt_price, Q128)
    if base_for_quote:
        execution = Fraction(amount_out, amount_in)
    else:
        execution = Fraction(amount_in, amount_out)
    return abs(execution - spot) / spot * 100
