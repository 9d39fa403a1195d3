"""Volatility surface engine.

This package provides tools for:
- Holding raw delta, moneyness and flat volatility surfaces keyed by tenor
- Interpolating the smile at arbitrary points
- Interpolating across tenors in variance space
- Computing risk reversal and butterfly metrics
- Validating surface structure
"""

__version__ = "0.1.0"

from .errors import (
    VolSurfaceError,
    ConstructionError,
    ValidationError,
    QueryError,
    ConvergenceError,
    DataError,
)
from .models import SurfaceType, VolSurface, VolQuery, QueryTarget

__all__ = [
    "VolSurfaceError",
    "ConstructionError",
    "ValidationError",
    "QueryError",
    "ConvergenceError",
    "DataError",
    "SurfaceType",
    "VolSurface",
    "VolQuery",
    "QueryTarget",
]
