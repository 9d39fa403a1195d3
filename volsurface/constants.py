"""Centralized constants for the volatility surface engine.

Named defaults shared by the configuration dataclasses and the models.
"""

from typing import Tuple

# =============================================================================
# Day Count
# =============================================================================

# Calendar days per year used by the default year fraction
DEFAULT_YEAR_BASIS_DAYS: float = 365.0

SECONDS_PER_DAY: float = 86400.0

# =============================================================================
# Smile Points
# =============================================================================

# At-the-money point on a delta smile
DELTA_ATM_POINT: float = 50.0

# At-the-money point on moneyness and flat smiles (strike = 100% of spot)
MONEYNESS_ATM_POINT: float = 100.0

# Admissible open interval for delta points and delta queries
DELTA_DOMAIN: Tuple[float, float] = (0.0, 100.0)

# Wing pairs used for risk reversal and butterfly
WING_PAIRS_25: Tuple[float, float] = (25.0, 75.0)
WING_PAIRS_10: Tuple[float, float] = (10.0, 90.0)

# =============================================================================
# Spreads
# =============================================================================

# Minimum volatility spread accepted on delta and moneyness surfaces
DEFAULT_MIN_VOL_SPREAD: float = 0.031

# =============================================================================
# Strike Solver
# =============================================================================

DEFAULT_DELTA_TOLERANCE: float = 1e-6
DEFAULT_DELTA_MAX_ITERATIONS: int = 50

# =============================================================================
# Effective Date Rollover
# =============================================================================

# Surfaces roll over to the next day at 17:00 New York time
ROLLOVER_HOUR: int = 17
ROLLOVER_TIMEZONE: str = "America/New_York"

# =============================================================================
# Validation
# =============================================================================

# Volatilities above this are treated as data errors (500%)
DEFAULT_MAX_VOLATILITY: float = 5.0
