"""
Protocol constants.

Scales follow the on-chain programs: sqrt prices are Q64.64, liquidity is
Q128-scaled, fee numerators are parts of FEE_DENOMINATOR.
"""

from __future__ import annotations


RESOLUTION = 64
ONE_Q64 = 1 << RESOLUTION
Q128 = 1 << 128

U16_MAX = (1 << 16) - 1
U24_MAX = (1 << 24) - 1
U32_MAX = (1 << 32) - 1
U64_MAX = (1 << 64) - 1
U128_MAX = (1 << 128) - 1

BASIS_POINT_MAX = 10_000
FEE_DENOMINATOR = 1_000_000_000

MIN_FEE_BPS = 25
MAX_FEE_BPS = 9_900
MIN_FEE_NUMERATOR = 2_500_000
MAX_FEE_NUMERATOR = 990_000_000
# Constant-product pools created before fee version 1 cap at 50%.
MAX_FEE_NUMERATOR_V0 = 500_000_000
MAX_FEE_NUMERATOR_V1 = MAX_FEE_NUMERATOR

PROTOCOL_FEE_PERCENT = 20
HOST_FEE_PERCENT = 20

MIN_SQRT_PRICE = 4_295_048_016
MAX_SQRT_PRICE = 79_226_673_521_066_979_257_578_248_091

MAX_CURVE_POINT = 16
LIQUIDITY_WEIGHT_COUNT = 16

SWAP_BUFFER_PERCENTAGE = 25
MAX_MIGRATION_FEE_PERCENTAGE = 99

MAX_RATE_LIMITER_DURATION_IN_SECONDS = 43_200
MAX_RATE_LIMITER_DURATION_IN_SLOTS = 108_000
MAX_LOCK_DURATION_IN_SECONDS = 63_072_000

# pow() returns 0 once |exponent| exceeds this.
MAX_EXPONENTIAL = 0x80000

# Dynamic fee
DYNAMIC_FEE_FILTER_PERIOD_DEFAULT = 10
DYNAMIC_FEE_DECAY_PERIOD_DEFAULT = 120
DYNAMIC_FEE_REDUCTION_FACTOR_DEFAULT = 5_000
DYNAMIC_FEE_SCALING_FACTOR = 100_000_000_000
DYNAMIC_FEE_ROUNDING_OFFSET = 99_999_999_999
MAX_PRICE_CHANGE_BPS_DEFAULT = 1_500
BIN_STEP_BPS_DEFAULT = 1
BIN_STEP_BPS_U128_DEFAULT = 1_844_674_407_370_955

MIN_TOKEN_DECIMAL = 6
MAX_TOKEN_DECIMAL = 9
