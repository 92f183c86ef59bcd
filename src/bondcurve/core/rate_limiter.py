"""
Rate-limiter base fee (deterministic, integer-only).

Algorithm Design:
- Type: Closed-form arithmetic series over reference-amount brackets
- Time Complexity: O(1) per fee numerator (one integer sqrt for the inverse)
- Invariant: fee(amount <= reference_amount) == cliff; fee non-decreasing in amount

Bracket k (k >= 0) of size `reference_amount` pays `cliff + k * increment`
until that exceeds the maximum fee numerator; every later bracket pays the
maximum. Only buys (quote -> base) inside the activation window are limited.
"""

from __future__ import annotations

import math
from dataclasses import dataclass

from ..constants import (
    FEE_DENOMINATOR,
    MAX_FEE_NUMERATOR,
    MAX_RATE_LIMITER_DURATION_IN_SECONDS,
    MAX_RATE_LIMITER_DURATION_IN_SLOTS,
    MIN_FEE_NUMERATOR,
    U64_MAX,
)
from ..errors import CurveArithmeticError, InvalidParameterError
from ..kernels.fixed_point import Rounding, ceil_div, mul_div
from ..state.enums import ActivationType, CollectFeeMode, TradeDirection
from ..state.fees import BaseFeeConfig
from .fees_math import to_numerator


@dataclass(frozen=True)
class RateLimiter:
    cliff_fee_numerator: int
    fee_increment_bps: int
    max_limiter_duration: int
    reference_amount: int
    max_fee_numerator: int = MAX_FEE_NUMERATOR

    @classmethod
    def from_base_fee(cls, base_fee: BaseFeeConfig, max_fee_numerator: int = MAX_FEE_NUMERATOR) -> "RateLimiter":
        return cls(
            cliff_fee_numerator=base_fee.cliff_fee_numerator,
            fee_increment_bps=base_fee.fee_increment_bps,
            max_limiter_duration=base_fee.max_limiter_duration,
            reference_amount=base_fee.reference_amount,
            max_fee_numerator=max_fee_numerator,
        )

    @property
    def is_zero(self) -> bool:
        return self.reference_amount == 0 and self.max_limiter_duration == 0 and self.fee_increment_bps == 0

    @property
    def is_non_zero(self) -> bool:
        return self.reference_amount > 0 and self.max_limiter_duration > 0 and self.fee_increment_bps > 0

    @property
    def fee_increment_numerator(self) -> int:
        return to_numerator(self.fee_increment_bps)

    def is_applied(self, *, current_point: int, activation_point: int, direction: TradeDirection) -> bool:
        if self.is_zero:
            return False
        if direction is TradeDirection.BASE_TO_QUOTE:
            return False
        return activation_point <= current_point <= activation_point + self.max_limiter_duration

    def max_index(self) -> int:
        """Last bracket whose fee stays at or below the maximum numerator."""
        if self.cliff_fee_numerator > self.max_fee_numerator:
            raise InvalidParameterError("cliff fee numerator exceeds maximum fee numerator")
        increment = self.fee_increment_numerator
        if increment == 0:
            raise InvalidParameterError("fee increment numerator cannot be zero")
        return (self.max_fee_numerator - self.cliff_fee_numerator) // increment

    def max_fee_input_amount(self) -> int:
        """Smallest included amount charged the maximum fee numerator outright."""
        return (self.max_index() + 1) * self.reference_amount

    def marginal_fee_numerator(self, amount: int) -> int:
        """Fee numerator charged on the next unit after `amount` has been traded."""
        if amount < self.reference_amount:
            return self.cliff_fee_numerator
        index = amount // self.reference_amount
        if index > self.max_index():
            return self.max_fee_numerator
        return self.cliff_fee_numerator + self.fee_increment_numerator * index

    def fee_numerator_from_included_amount(self, included_fee_amount: int) -> int:
        """
        Average numerator over the brackets `included_fee_amount` spans.

        The exact bracket sum is divided once and rounded up, so the result
        is non-decreasing in the amount. Amounts that reach the bracket past
        `max_index` pay the maximum numerator on the whole trade.
        """
        if included_fee_amount <= self.reference_amount:
            return self.cliff_fee_numerator
        if included_fee_amount >= self.max_fee_input_amount():
            return self.max_fee_numerator

        c = self.cliff_fee_numerator
        x0 = self.reference_amount
        i = self.fee_increment_numerator
        # a < max_index here: brackets 0..a are full, bracket a + 1 holds b.
        a, b = divmod(included_fee_amount - x0, x0)
        full_brackets = c * (a + 1) + i * a * (a + 1) // 2
        trading_fee_numerator = x0 * full_brackets + b * (c + i * (a + 1))
        fee_numerator = ceil_div(trading_fee_numerator, included_fee_amount)
        return min(fee_numerator, self.max_fee_numerator)

    def excluded_fee_amount(self, included_fee_amount: int) -> int:
        fee_numerator = self.fee_numerator_from_included_amount(included_fee_amount)
        trading_fee = mul_div(included_fee_amount, fee_numerator, FEE_DENOMINATOR, Rounding.UP)
        return included_fee_amount - trading_fee

    def checked_amounts(self) -> tuple[int, int, bool]:
        """(excluded, included, overflowed) at the last amount still charged the averaged fee."""
        last_averaged_input = self.max_fee_input_amount() - 1
        if last_averaged_input <= U64_MAX:
            return self.excluded_fee_amount(last_averaged_input), last_averaged_input, False
        return self.excluded_fee_amount(U64_MAX), U64_MAX, True

    def fee_numerator_from_excluded_amount(self, excluded_fee_amount: int) -> int:
        """
        Invert the included-amount schedule.

        Inside the increasing brackets the included amount solves
        `i*x**2 - y*x + z = 0` with
            y = 2*D*x0 + i*x0 - 2*c*x0,  z = 2*excluded*D*x0
        taking the smaller root; the partial bracket is grossed up at its own
        rate. Past the averaged range the whole trade pays the maximum.
        """
        if excluded_fee_amount <= self.excluded_fee_amount(self.reference_amount):
            return self.cliff_fee_numerator

        checked_excluded, checked_included, is_overflow = self.checked_amounts()
        if excluded_fee_amount == checked_excluded:
            return self.fee_numerator_from_included_amount(checked_included)

        d = FEE_DENOMINATOR
        c = self.cliff_fee_numerator
        x0 = self.reference_amount
        if excluded_fee_amount < checked_excluded:
            i = self.fee_increment_numerator
            y = 2 * d * x0 + i * x0 - 2 * c * x0
            z = 2 * excluded_fee_amount * d * x0
            discriminant = y * y - 4 * i * z
            if discriminant < 0:
                raise CurveArithmeticError("negative discriminant inverting rate limiter fee")
            included_fee_amount = (y - math.isqrt(discriminant)) // (2 * i)
            excluded_remaining = excluded_fee_amount - self.excluded_fee_amount(included_fee_amount)
            remaining_fee_numerator = self.marginal_fee_numerator(included_fee_amount)
            included_fee_amount += mul_div(
                excluded_remaining, d, d - remaining_fee_numerator, Rounding.UP
            )
        else:
            if is_overflow:
                raise CurveArithmeticError("rate limiter excluded amount overflows u64")
            included_fee_amount = mul_div(excluded_fee_amount, d, d - self.max_fee_numerator, Rounding.UP)

        trading_fee = included_fee_amount - excluded_fee_amount
        fee_numerator = mul_div(trading_fee, d, included_fee_amount, Rounding.UP)
        if fee_numerator < c:
            raise CurveArithmeticError("fee numerator below cliff fee numerator")
        return min(fee_numerator, self.max_fee_numerator)


def validate_fee_rate_limiter(
    limiter: RateLimiter,
    *,
    collect_fee_mode: CollectFeeMode,
    activation_type: ActivationType,
) -> None:
    if collect_fee_mode is not CollectFeeMode.QUOTE_TOKEN:
        raise InvalidParameterError("rate limiter requires quote-token fee collection")
    if limiter.is_zero:
        return
    if not limiter.is_non_zero:
        raise InvalidParameterError(
            "reference_amount, max_limiter_duration and fee_increment_bps must be all zero or all non-zero"
        )
    limit = (
        MAX_RATE_LIMITER_DURATION_IN_SLOTS
        if activation_type is ActivationType.SLOT
        else MAX_RATE_LIMITER_DURATION_IN_SECONDS
    )
    if limiter.max_limiter_duration > limit:
        raise InvalidParameterError(f"max_limiter_duration exceeds {limit}")
    if limiter.fee_increment_numerator >= FEE_DENOMINATOR:
        raise InvalidParameterError("fee increment numerator must be below fee denominator")
    if not (MIN_FEE_NUMERATOR <= limiter.cliff_fee_numerator <= limiter.max_fee_numerator):
        raise InvalidParameterError(
            f"cliff fee numerator out of range: {limiter.cliff_fee_numerator}"
        )
    min_fee = limiter.fee_numerator_from_included_amount(0)
    max_fee = limiter.fee_numerator_from_included_amount(2**63 - 1)
    if min_fee < MIN_FEE_NUMERATOR or max_fee > limiter.max_fee_numerator:
        raise InvalidParameterError("rate limiter fee numerator escapes fee bounds")
