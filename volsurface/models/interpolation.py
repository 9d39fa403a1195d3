"""Smile interpolation.

Interpolates a volatility inside a single tenor's smile with a quadratic
through the three quoted points nearest the sought point.

Outer-boundary policy: points beyond the outermost quotes are extrapolated
with the same quadratic (or linear) fit, without clamping, so the smile has
no kink at its edges.
"""

from typing import Dict, Mapping, Tuple
import numpy as np

from ..errors import DataError


def normalize_smile(smile: Mapping[float, float]) -> Dict[float, float]:
    """Return the smile with float keys and values."""
    return {float(point): float(vol) for point, vol in smile.items()}


class SmileInterpolator:
    """Quadratic interpolation across a smile."""

    def __init__(self, n_points: int = 3):
        """Initialize the interpolator.

        Args:
            n_points: Number of nearest quotes fitted (3 gives a quadratic).
        """
        if n_points < 2:
            raise ValueError(f"n_points must be at least 2, got {n_points}")
        self.n_points = n_points

    def nearest_points(
        self,
        points: Tuple[float, ...],
        sought_point: float
    ) -> Tuple[float, ...]:
        """Select the quotes closest to ``sought_point``, ascending.

        Ties in distance go to the lower point.
        """
        ranked = sorted(points, key=lambda p: (abs(p - sought_point), p))
        return tuple(sorted(ranked[:self.n_points]))

    def interpolate(self, smile: Mapping[float, float], sought_point: float) -> float:
        """Volatility at ``sought_point`` on ``smile``.

        Args:
            smile: Mapping from smile point to volatility.
            sought_point: Point to evaluate.

        Returns:
            The stored volatility on an exact match, otherwise the value of the
            polynomial through the nearest quotes (degree 2, or 1 with only two
            quotes). A single-quote smile is flat.

        Raises:
            DataError: If the smile is empty.
        """
        if not smile:
            raise DataError("Cannot interpolate on an empty smile")

        values = normalize_smile(smile)
        sought = float(sought_point)

        if sought in values:
            return values[sought]

        if len(values) == 1:
            return next(iter(values.values()))

        nearest = self.nearest_points(tuple(values), sought)
        x = np.array(nearest)
        y = np.array([values[p] for p in nearest])

        coeffs = np.polyfit(x, y, len(nearest) - 1)
        return float(np.polyval(coeffs, sought))
