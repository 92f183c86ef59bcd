"""Exception types for the bonding-curve math engine.

Every failure is local and non-retryable. Validation errors are raised before
any curve, fee config, or quote object is constructed.
"""

from __future__ import annotations


class BondCurveError(Exception):
    """Base class for all engine failures."""


class InvalidParameterError(BondCurveError, ValueError):
    """Raised when an input is outside its allowed domain."""


class PoolCompletedError(InvalidParameterError):
    """Raised when quoting a pool whose quote reserve reached the migration threshold."""


class CurveArithmeticError(BondCurveError, ArithmeticError):
    """Raised on an arithmetic failure (negative root, exhausted denominator, underflow)."""


class DivisionByZeroError(CurveArithmeticError, ZeroDivisionError):
    """Raised when a fixed-point division has a zero denominator."""


class InsufficientLiquidityError(BondCurveError):
    """Raised when the curve cannot absorb the requested volume."""


class ReconciliationError(BondCurveError):
    """Raised when curve construction cannot satisfy token conservation."""

    def __init__(self, message: str, *, shortfall: int | None = None) -> None:
        self.shortfall = shortfall
        super().__init__(message)
