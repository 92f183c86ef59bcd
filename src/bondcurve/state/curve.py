"""Piecewise-liquidity curve state.

A curve is a start sqrt price followed by segments of constant liquidity, each
ending at its own (upper) sqrt price. Segment bounds strictly increase.
"""

from __future__ import annotations

from dataclasses import dataclass

from ..constants import MAX_SQRT_PRICE, MIN_SQRT_PRICE
from ..errors import InvalidParameterError


@dataclass(frozen=True)
class CurveSegment:
    """Liquidity active from the previous bound up to `sqrt_price`."""

    sqrt_price: int
    liquidity: int

    def __post_init__(self) -> None:
        for name, v in (("sqrt_price", self.sqrt_price), ("liquidity", self.liquidity)):
            if not isinstance(v, int) or isinstance(v, bool):
                raise TypeError(f"{name} must be an int")
            if v < 0:
                raise InvalidParameterError(f"{name} must be non-negative: {v}")


@dataclass(frozen=True)
class Curve:
    sqrt_start_price: int
    segments: tuple[CurveSegment, ...]

    def __post_init__(self) -> None:
        if not isinstance(self.sqrt_start_price, int) or isinstance(self.sqrt_start_price, bool):
            raise TypeError("sqrt_start_price must be an int")
        if not isinstance(self.segments, tuple):
            object.__setattr__(self, "segments", tuple(self.segments))
        if not self.segments:
            raise InvalidParameterError("curve must have at least one segment")
        if not (MIN_SQRT_PRICE <= self.sqrt_start_price < MAX_SQRT_PRICE):
            raise InvalidParameterError(
                f"sqrt_start_price out of range: {self.sqrt_start_price}"
            )
        lower = self.sqrt_start_price
        for i, seg in enumerate(self.segments):
            if not isinstance(seg, CurveSegment):
                raise TypeError(f"segments[{i}] must be a CurveSegment")
            if seg.sqrt_price <= lower:
                raise InvalidParameterError(
                    f"segments[{i}].sqrt_price must exceed previous bound: {seg.sqrt_price} <= {lower}"
                )
            lower = seg.sqrt_price
        if lower > MAX_SQRT_PRICE:
            raise InvalidParameterError(f"last segment exceeds MAX_SQRT_PRICE: {lower}")

    @property
    def final_sqrt_price(self) -> int:
        return self.segments[-1].sqrt_price

    def lower_bound(self, index: int) -> int:
        return self.sqrt_start_price if index == 0 else self.segments[index - 1].sqrt_price
