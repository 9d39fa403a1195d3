"""Surface, interpolation and query models."""

from .surface_type import SurfaceType
from .query import QueryTarget, VolQuery
from .interpolation import SmileInterpolator
from .variance import VarianceBuilder
from .black_scholes import BlackScholes, Rates, strike_to_delta
from .point_resolver import PointResolver, strike_to_moneyness, moneyness_to_strike
from .engine import VolatilityEngine
from .risk_metrics import risk_reversal_butterfly
from .surface import Tenor, VolSurface

__all__ = [
    "SurfaceType",
    "QueryTarget",
    "VolQuery",
    "SmileInterpolator",
    "VarianceBuilder",
    "BlackScholes",
    "Rates",
    "strike_to_delta",
    "PointResolver",
    "strike_to_moneyness",
    "moneyness_to_strike",
    "VolatilityEngine",
    "risk_reversal_butterfly",
    "Tenor",
    "VolSurface",
]
