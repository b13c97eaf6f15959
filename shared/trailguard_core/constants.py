"""
TRAILGUARD v1.0 - System Constants
===================================

Centralized constants for the TRAILGUARD trailing-stop engine.
All magic numbers and protocol bounds should be defined here.

Author: TRAILGUARD Development Team
Version: 1.0.0
"""

# =============================================================================
# SYSTEM IDENTIFICATION
# =============================================================================

VERSION = "1.0.0"
SYSTEM_NAME = "TRAILGUARD"

# =============================================================================
# FIXED-POINT ARITHMETIC
# =============================================================================

# Canonical price precision (18 decimals)
CANONICAL_DECIMALS = 18
PRICE_SCALE = 10 ** CANONICAL_DECIMALS

# Integer width emulated by all amount arithmetic
MAX_UINT256 = 2 ** 256 - 1

# Basis point denominator (10000 bps = 100%)
BPS_DENOMINATOR = 10_000

# =============================================================================
# ORDER CONFIGURATION BOUNDS
# =============================================================================

MIN_TRAILING_DISTANCE_BPS = 50       # 0.5%
MAX_TRAILING_DISTANCE_BPS = 2000     # 20%

MAX_SLIPPAGE_BPS = 5000              # 50%
MAX_PRICE_DEVIATION_BPS = 1000       # 10%

MIN_TWAP_WINDOW_SEC = 300            # 5 minutes
MAX_TWAP_WINDOW_SEC = 3600           # 1 hour

MAX_TOKEN_DECIMALS = 18

# =============================================================================
# ORACLE
# =============================================================================

# Maximum age of a feed reading before it is stale (seconds)
DEFAULT_ORACLE_HEARTBEAT_SEC = 4 * 60 * 60

# =============================================================================
# TWAP
# =============================================================================

# Newest sample younger than this selects the robust (median-blend) path
TWAP_FRESH_SAMPLE_SEC = 120

# Median outlier rejection threshold
OUTLIER_THRESHOLD_BPS = 1500

# Reference-price filter for the weighted average on the robust path
REFERENCE_DEVIATION_BPS = 2000

# Metrics refresh cadence
METRICS_UPDATE_INTERVAL_SEC = 300
METRICS_UPDATE_EVERY_N_SAMPLES = 10
METRICS_MIN_SAMPLES = 3

# Volatility regimes for the adaptive window
HIGH_VOLATILITY_BPS = 500
MEDIUM_VOLATILITY_BPS = 200

# =============================================================================
# EXPORTS
# =============================================================================

__all__ = [
    # System
    'VERSION',
    'SYSTEM_NAME',

    # Fixed point
    'CANONICAL_DECIMALS',
    'PRICE_SCALE',
    'MAX_UINT256',
    'BPS_DENOMINATOR',

    # Order bounds
    'MIN_TRAILING_DISTANCE_BPS',
    'MAX_TRAILING_DISTANCE_BPS',
    'MAX_SLIPPAGE_BPS',
    'MAX_PRICE_DEVIATION_BPS',
    'MIN_TWAP_WINDOW_SEC',
    'MAX_TWAP_WINDOW_SEC',
    'MAX_TOKEN_DECIMALS',

    # Oracle
    'DEFAULT_ORACLE_HEARTBEAT_SEC',

    # TWAP
    'TWAP_FRESH_SAMPLE_SEC',
    'OUTLIER_THRESHOLD_BPS',
    'REFERENCE_DEVIATION_BPS',
    'METRICS_UPDATE_INTERVAL_SEC',
    'METRICS_UPDATE_EVERY_N_SAMPLES',
    'METRICS_MIN_SAMPLES',
    'HIGH_VOLATILITY_BPS',
    'MEDIUM_VOLATILITY_BPS',
]
