"""Volatility engine: interpolation across tenors in variance space.

Total variance V(d) at a smile point is linear in calendar days between the
two quoted tenors bracketing d:

    V(d) = V(t1) + (d - t1) / (t2 - t1) * (V(t2) - V(t1))

Before the first tenor and after the last one the nearest tenor's volatility
is held flat, V(d) = vol(t)^2 * T(d). A window [d_from, d_to] gets the forward
variance V(d_to) - V(d_from), floored at zero, and the volatility

    vol = sqrt(forward_variance / T(d_to - d_from))
"""

import bisect
import logging
import math
from typing import TYPE_CHECKING

from .query import QueryTarget, VolQuery
from ..constants import DELTA_DOMAIN
from ..errors import DataError, QueryError
from ..utils.dates import days_between, ensure_utc

if TYPE_CHECKING:
    from .surface import VolSurface

logger = logging.getLogger(__name__)


class VolatilityEngine:
    """Answers volatility queries against one surface."""

    def __init__(self, surface: "VolSurface"):
        """Initialize the engine.

        Args:
            surface: Surface providing tenors, variances and point resolution.
        """
        self.surface = surface

    def get_volatility(self, query: VolQuery) -> float:
        """Volatility applying to ``query``'s point over its date window.

        Raises:
            QueryError: If the query is malformed or unsupported.
            ConvergenceError: If a strike cannot be resolved to a delta.
            DataError: If the surface cannot answer the query.
        """
        self.validate_query(query)

        d_from = days_between(self.surface.recorded_date, query.from_date)
        d_to = days_between(self.surface.recorded_date, query.to_date)
        if d_to <= 0:
            raise QueryError(
                f"Query window ends at {query.to_date.isoformat()}, "
                f"not after the surface recorded date"
            )
        if d_from < 0:
            logger.debug(f"Window starts {-d_from:.4f}d before recorded date, starting at 0")
            d_from = 0.0

        # Strikes resolve against the volatility to expiry, not the forward window
        point = self.surface.point_resolver.resolve(
            query,
            lambda p: self.volatility_for_window(p, 0.0, d_to),
            d_to,
        )
        vol = self.volatility_for_window(point, d_from, d_to)

        logger.debug(
            f"{self.surface.symbol} {query.target.value}={query.value} -> point {point:.6f}, "
            f"window [{d_from:.4f}d, {d_to:.4f}d], vol={vol:.6f}"
        )
        return vol

    def validate_query(self, query: VolQuery) -> None:
        """Check window ordering, spot presence and the value's domain."""
        if ensure_utc(query.from_date) >= ensure_utc(query.to_date):
            raise QueryError(
                f"from ({query.from_date.isoformat()}) must be before "
                f"to ({query.to_date.isoformat()})"
            )

        spot_required = (
            self.surface.surface_type.requires_spot or query.target is QueryTarget.STRIKE
        )
        if spot_required and query.spot is None:
            raise QueryError(
                f"spot is required for {query.target.value} queries "
                f"on a {self.surface.surface_type.value} surface"
            )
        if query.spot is not None and not query.spot > 0:
            raise QueryError(f"spot must be positive, got {query.spot}")

        value = query.value
        if query.target is QueryTarget.DELTA:
            low, high = DELTA_DOMAIN
            if not low < value < high:
                raise QueryError(f"delta must be in ({low:g}, {high:g}), got {value}")
        elif not value > 0:
            raise QueryError(f"{query.target.value} must be positive, got {value}")

    def total_variance(self, point: float, days: float) -> float:
        """Total variance V(days) at ``point``.

        Raises:
            DataError: If the surface has no tenors.
        """
        if days <= 0:
            return 0.0

        terms = self.surface.term_by_day
        if not terms:
            raise DataError(f"Surface for {self.surface.symbol} has no tenors")

        builder = self.surface.variance_builder
        year_fraction = self.surface.year_fraction

        if days <= terms[0] or days >= terms[-1]:
            nearest = terms[0] if days <= terms[0] else terms[-1]
            if days == nearest:
                return builder.variance_at(nearest, point)
            vol = builder.volatility_at(nearest, point)
            return vol * vol * year_fraction(days)

        idx = bisect.bisect_left(terms, days)
        if terms[idx] == days:
            return builder.variance_at(terms[idx], point)

        lower, upper = terms[idx - 1], terms[idx]
        v_lower = builder.variance_at(lower, point)
        v_upper = builder.variance_at(upper, point)
        weight = (days - lower) / (upper - lower)
        return v_lower + weight * (v_upper - v_lower)

    def forward_variance(self, point: float, d_from: float, d_to: float) -> float:
        """Variance accumulated over [d_from, d_to], floored at zero."""
        variance = self.total_variance(point, d_to)
        if d_from > 0:
            variance -= self.total_variance(point, d_from)

        if not math.isfinite(variance):
            raise DataError(f"Non-finite variance {variance} at point {point}")

        if variance < 0:
            logger.warning(
                f"Negative forward variance {variance:.6e} at point {point} over "
                f"[{d_from:.4f}d, {d_to:.4f}d] on {self.surface.symbol}; flooring at zero"
            )
            variance = 0.0
        return variance

    def volatility_for_window(self, point: float, d_from: float, d_to: float) -> float:
        """Volatility at ``point`` over the window [d_from, d_to] in days."""
        variance = self.forward_variance(point, d_from, d_to)
        period = self.surface.year_fraction(d_to - d_from)
        if period <= 0:
            raise QueryError(f"Window [{d_from}, {d_to}] has no length")
        return math.sqrt(variance / period)
