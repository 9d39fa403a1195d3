"""Variance table built from a surface's smiles.

Variance at a (tenor, point) is the interpolated smile volatility squared
times the tenor's year fraction. Entries at quoted points are computed on
first request and cached for the lifetime of the builder; other points are
recomputed from the smile fit on every request.
"""

import logging
import threading
from typing import Callable, Dict, Iterable, Mapping, Tuple

from .interpolation import SmileInterpolator
from ..errors import DataError

logger = logging.getLogger(__name__)


class VarianceBuilder:
    """Lazily populated (tenor, point) -> variance table."""

    def __init__(
        self,
        smiles: Mapping[int, Mapping[float, float]],
        year_fraction: Callable[[float], float],
        interpolator: SmileInterpolator = None
    ):
        """Initialize the builder.

        Args:
            smiles: Read-only mapping from tenor days to smile.
            year_fraction: Day-count convention, calendar days -> years.
            interpolator: Smile interpolator (default quadratic).
        """
        self._smiles = smiles
        self._year_fraction = year_fraction
        self.interpolator = interpolator or SmileInterpolator()
        self._cache: Dict[Tuple[int, float], float] = {}
        self._lock = threading.RLock()

    def volatility_at(self, tenor: int, point: float) -> float:
        """Interpolated smile volatility at ``point`` for a quoted tenor."""
        smile = self._smiles.get(tenor)
        if smile is None:
            raise DataError(f"No tenor {tenor} on the surface")
        if not smile:
            raise DataError(f"Tenor {tenor} has an empty smile")
        return self.interpolator.interpolate(smile, point)

    def variance_at(self, tenor: int, point: float) -> float:
        """Total variance vol^2 * T at ``point`` for a quoted tenor.

        Only points quoted on the tenor's smile are cached, so the table stays
        bounded by the surface's own quotes.
        """
        key = (tenor, float(point))
        smile = self._smiles.get(tenor)
        if not smile or key[1] not in smile:
            vol = self.volatility_at(tenor, point)
            return vol * vol * self._year_fraction(tenor)

        with self._lock:
            cached = self._cache.get(key)
            if cached is not None:
                return cached

            vol = self.volatility_at(tenor, point)
            variance = vol * vol * self._year_fraction(tenor)
            self._cache[key] = variance
            logger.debug(f"Variance at tenor={tenor}d point={point}: {variance:.8f}")
            return variance

    def table(self, points: Iterable[float]) -> Dict[int, Dict[float, float]]:
        """Variance for every quoted tenor at each of ``points``."""
        points = [float(p) for p in points]
        return {
            tenor: {point: self.variance_at(tenor, point) for point in points}
            for tenor in sorted(self._smiles)
            if self._smiles[tenor]
        }

    def cached_entries(self) -> int:
        """Number of (tenor, point) entries computed so far."""
        with self._lock:
            return len(self._cache)
