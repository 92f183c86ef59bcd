"""Volatility-driven variable fee."""

from __future__ import annotations

from ..constants import (
    BASIS_POINT_MAX,
    BIN_STEP_BPS_DEFAULT,
    BIN_STEP_BPS_U128_DEFAULT,
    DYNAMIC_FEE_ROUNDING_OFFSET,
    DYNAMIC_FEE_SCALING_FACTOR,
    U24_MAX,
)
from ..errors import InvalidParameterError
from ..state.fees import DynamicFeeConfig, VolatilityTracker


def get_variable_fee_numerator(volatility_accumulator: int, bin_step: int, variable_fee_control: int) -> int:
    """`ceil(variable_fee_control * (volatility_accumulator * bin_step)**2 / 1e11)`."""
    square_vfa_bin = (volatility_accumulator * bin_step) ** 2
    v_fee = variable_fee_control * square_vfa_bin
    return (v_fee + DYNAMIC_FEE_ROUNDING_OFFSET) // DYNAMIC_FEE_SCALING_FACTOR


def get_dynamic_fee_numerator(dynamic_fee: DynamicFeeConfig | None, tracker: VolatilityTracker) -> int:
    if dynamic_fee is None:
        return 0
    return get_variable_fee_numerator(
        tracker.volatility_accumulator, dynamic_fee.bin_step, dynamic_fee.variable_fee_control
    )


def validate_dynamic_fee(dynamic_fee: DynamicFeeConfig | None) -> None:
    if dynamic_fee is None:
        return
    if dynamic_fee.bin_step != BIN_STEP_BPS_DEFAULT:
        raise InvalidParameterError(f"bin_step must be {BIN_STEP_BPS_DEFAULT}")
    if dynamic_fee.bin_step_u128 != BIN_STEP_BPS_U128_DEFAULT:
        raise InvalidParameterError(f"bin_step_u128 must be {BIN_STEP_BPS_U128_DEFAULT}")
    if dynamic_fee.filter_period >= dynamic_fee.decay_period:
        raise InvalidParameterError("filter_period must be below decay_period")
    if dynamic_fee.reduction_factor > BASIS_POINT_MAX:
        raise InvalidParameterError(f"reduction_factor must be <= {BASIS_POINT_MAX}")
    if dynamic_fee.variable_fee_control > U24_MAX:
        raise InvalidParameterError("variable_fee_control overflows u24")
    if dynamic_fee.max_volatility_accumulator > U24_MAX:
        raise InvalidParameterError("max_volatility_accumulator overflows u24")
