"""
Concentrated-liquidity primitives shared by both curve engines (integer-only).

A segment of constant liquidity L between sqrt prices a < b holds
    base  = L * (b - a) / (a * b)
    quote = L * (b - a) / 2**128
Rounding direction is always explicit and favors the pool.
"""

from __future__ import annotations

from ..constants import Q128
from ..errors import CurveArithmeticError, DivisionByZeroError
from .fixed_point import Rounding, _require_int, ceil_div, mul_div


def _require_price_range(lower_sqrt_price: int, upper_sqrt_price: int) -> None:
    _require_int("lower_sqrt_price", lower_sqrt_price)
    _require_int("upper_sqrt_price", upper_sqrt_price)
    if upper_sqrt_price < lower_sqrt_price:
        raise CurveArithmeticError(
            f"upper sqrt price below lower: {upper_sqrt_price} < {lower_sqrt_price}"
        )


def get_delta_amount_base_unsigned(
    lower_sqrt_price: int, upper_sqrt_price: int, liquidity: int, rounding: Rounding
) -> int:
    """Base token held by `liquidity` over `[lower, upper]`."""
    _require_price_range(lower_sqrt_price, upper_sqrt_price)
    denominator = lower_sqrt_price * upper_sqrt_price
    if denominator == 0:
        raise DivisionByZeroError("sqrt price bound is zero")
    return mul_div(liquidity, upper_sqrt_price - lower_sqrt_price, denominator, rounding)


def get_delta_amount_quote_unsigned(
    lower_sqrt_price: int, upper_sqrt_price: int, liquidity: int, rounding: Rounding
) -> int:
    """Quote token held by `liquidity` over `[lower, upper]`."""
    _require_price_range(lower_sqrt_price, upper_sqrt_price)
    prod = liquidity * (upper_sqrt_price - lower_sqrt_price)
    if rounding is Rounding.UP:
        return ceil_div(prod, Q128)
    return prod >> 128


def get_next_sqrt_price_from_input(
    sqrt_price: int, liquidity: int, amount_in: int, base_for_quote: bool
) -> int:
    """
    Price after adding `amount_in` to the pool.

    Base in moves the price down (rounded up); quote in moves it up (rounded
    down). Both round so the pool never gives away more than it receives.
    """
    _require_int("amount_in", amount_in)
    if sqrt_price == 0 or liquidity == 0:
        raise CurveArithmeticError("sqrt price and liquidity must be non-zero")
    if base_for_quote:
        return get_next_sqrt_price_from_amount_base_rounding_up(sqrt_price, liquidity, amount_in)
    return get_next_sqrt_price_from_amount_quote_rounding_down(sqrt_price, liquidity, amount_in)


def get_next_sqrt_price_from_output(
    sqrt_price: int, liquidity: int, amount_out: int, base_for_quote: bool
) -> int:
    """Price after removing `amount_out` from the pool (quote out when `base_for_quote`)."""
    _require_int("amount_out", amount_out)
    if sqrt_price == 0 or liquidity == 0:
        raise CurveArithmeticError("sqrt price and liquidity must be non-zero")
    if base_for_quote:
        return get_next_sqrt_price_from_amount_quote_rounding_down_out(sqrt_price, liquidity, amount_out)
    return get_next_sqrt_price_from_amount_base_rounding_up_out(sqrt_price, liquidity, amount_out)


def get_next_sqrt_price_from_amount_base_rounding_up(sqrt_price: int, liquidity: int, amount: int) -> int:
    # sqrt_price' = L * P / (L + amount * P)
    if amount == 0:
        return sqrt_price
    denominator = liquidity + amount * sqrt_price
    return mul_div(liquidity, sqrt_price, denominator, Rounding.UP)


def get_next_sqrt_price_from_amount_quote_rounding_down(sqrt_price: int, liquidity: int, amount: int) -> int:
    # sqrt_price' = P + amount * 2**128 / L
    return sqrt_price + (amount << 128) // liquidity


def get_next_sqrt_price_from_amount_base_rounding_up_out(sqrt_price: int, liquidity: int, amount: int) -> int:
    # sqrt_price' = L * P / (L - amount * P)
    if amount == 0:
        return sqrt_price
    denominator = liquidity - amount * sqrt_price
    if denominator <= 0:
        raise CurveArithmeticError("base output exceeds available liquidity")
    return mul_div(liquidity, sqrt_price, denominator, Rounding.UP)


def get_next_sqrt_price_from_amount_quote_rounding_down_out(sqrt_price: int, liquidity: int, amount: int) -> int:
    # sqrt_price' = P - ceil(amount * 2**128 / L)
    delta = ceil_div(amount << 128, liquidity)
    next_sqrt_price = sqrt_price - delta
    if next_sqrt_price < 0:
        raise CurveArithmeticError("quote output exceeds available liquidity")
    return next_sqrt_price


# ---------------------------------------------------------------------------
# Liquidity from amounts
# ---------------------------------------------------------------------------


def get_initial_liquidity_from_delta_quote(
    quote_amount: int, sqrt_min_price: int, sqrt_price: int
) -> int:
    price_delta = sqrt_price - sqrt_min_price
    if price_delta <= 0:
        raise CurveArithmeticError("sqrt_price must exceed sqrt_min_price")
    return (quote_amount << 128) // price_delta


def get_initial_liquidity_from_delta_base(
    base_amount: int, sqrt_max_price: int, sqrt_price: int
) -> int:
    price_delta = sqrt_max_price - sqrt_price
    if price_delta <= 0:
        raise CurveArithmeticError("sqrt_max_price must exceed sqrt_price")
    return base_amount * sqrt_price * sqrt_max_price // price_delta


def get_liquidity(
    base_amount: int, quote_amount: int, min_sqrt_price: int, max_sqrt_price: int
) -> int:
    """Largest liquidity over `[min, max]` funded by both amounts."""
    liquidity_from_base = get_initial_liquidity_from_delta_base(base_amount, max_sqrt_price, min_sqrt_price)
    liquidity_from_quote = get_initial_liquidity_from_delta_quote(quote_amount, min_sqrt_price, max_sqrt_price)
    return min(liquidity_from_base, liquidity_from_quote)
