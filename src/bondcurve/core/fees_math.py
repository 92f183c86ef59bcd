"""
Fee arithmetic shared by both pool types (deterministic, integer-only).

The trading fee always rounds up against the trader; protocol and referral
shares round down out of it.
"""

from __future__ import annotations

from dataclasses import dataclass

from ..constants import BASIS_POINT_MAX, FEE_DENOMINATOR
from ..errors import InvalidParameterError
from ..kernels.fixed_point import Rounding, mul_div


@dataclass(frozen=True)
class FeeBreakdown:
    trading_fee: int
    protocol_fee: int
    referral_fee: int

    @property
    def total(self) -> int:
        return self.trading_fee + self.protocol_fee + self.referral_fee


@dataclass(frozen=True)
class FeeOnAmountResult:
    amount: int
    fee_numerator: int
    fee: FeeBreakdown


def to_numerator(bps: int) -> int:
    return mul_div(bps, FEE_DENOMINATOR, BASIS_POINT_MAX, Rounding.DOWN)


def bps_to_fee_numerator(bps: int) -> int:
    return bps * FEE_DENOMINATOR // BASIS_POINT_MAX


def get_excluded_fee_amount(fee_numerator: int, included_fee_amount: int) -> tuple[int, int]:
    """Return (excluded_amount, trading_fee) for a fee taken out of `included_fee_amount`."""
    trading_fee = mul_div(included_fee_amount, fee_numerator, FEE_DENOMINATOR, Rounding.UP)
    return included_fee_amount - trading_fee, trading_fee


def get_included_fee_amount(fee_numerator: int, excluded_fee_amount: int) -> tuple[int, int]:
    """Return (included_amount, fee) so that charging `fee_numerator` leaves `excluded_fee_amount`."""
    denominator = FEE_DENOMINATOR - fee_numerator
    if denominator <= 0:
        raise InvalidParameterError(f"invalid fee numerator: {fee_numerator}")
    included = mul_div(excluded_fee_amount, FEE_DENOMINATOR, denominator, Rounding.UP)
    return included, included - excluded_fee_amount


def split_fees(
    fee_amount: int,
    *,
    protocol_fee_percent: int,
    referral_fee_percent: int,
    has_referral: bool,
) -> FeeBreakdown:
    protocol_fee = mul_div(fee_amount, protocol_fee_percent, 100, Rounding.DOWN)
    trading_fee = fee_amount - protocol_fee
    referral_fee = 0
    if has_referral:
        referral_fee = mul_div(protocol_fee, referral_fee_percent, 100, Rounding.DOWN)
    return FeeBreakdown(
        trading_fee=trading_fee,
        protocol_fee=protocol_fee - referral_fee,
        referral_fee=referral_fee,
    )
