"""Risk reversal and butterfly metrics of a delta smile.

For wing pair (d, 100 - d):
    RR_d = vol(d) - vol(100 - d)
    BF_d = (vol(d) + vol(100 - d)) / 2 - vol(50)
"""

from typing import Dict, Mapping

from .interpolation import normalize_smile
from ..constants import DELTA_ATM_POINT, WING_PAIRS_10, WING_PAIRS_25
from ..errors import QueryError


def risk_reversal_butterfly(smile: Mapping[float, float]) -> Dict[str, float]:
    """Return ATM, RR_25, BF_25 and, when 10/90 are quoted, RR_10 and BF_10.

    Args:
        smile: Delta smile, point -> volatility.

    Raises:
        QueryError: If the smile lacks the 25, 50 or 75 point.
    """
    values = normalize_smile(smile)
    required = (WING_PAIRS_25[0], DELTA_ATM_POINT, WING_PAIRS_25[1])
    missing = [p for p in required if p not in values]
    if missing:
        raise QueryError(
            f"Smile needs points {[int(p) for p in required]} for RR/BF, "
            f"missing {[int(p) for p in missing]}"
        )

    atm = values[DELTA_ATM_POINT]
    result = {"ATM": atm}

    for label, (low, high) in (("25", WING_PAIRS_25), ("10", WING_PAIRS_10)):
        if low not in values or high not in values:
            continue
        result[f"RR_{label}"] = values[low] - values[high]
        result[f"BF_{label}"] = (values[low] + values[high]) / 2 - atm

    return result
