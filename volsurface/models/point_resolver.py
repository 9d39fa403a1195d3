"""Resolution of query values to a surface's native smile coordinate.

Delta surfaces take deltas directly and convert strikes through a fixed-point
loop around an injected strike -> delta function. Moneyness surfaces take
moneyness directly and convert strikes against spot. Flat surfaces resolve
every query to their single point.
"""

import logging
from typing import Callable, Optional, Sequence

from .black_scholes import Rates
from .query import QueryTarget, VolQuery
from .surface_type import SurfaceType
from ..config import StrikeSolverConfig
from ..errors import ConvergenceError, QueryError
from ..market.rates import RateCurve

logger = logging.getLogger(__name__)

StrikeToDelta = Callable[[float, float, Rates, float, float], float]


def strike_to_moneyness(strike: float, spot: float) -> float:
    """Moneyness point (percent of spot) of ``strike``."""
    if spot <= 0:
        raise QueryError(f"spot must be positive, got {spot}")
    return 100.0 * strike / spot


def moneyness_to_strike(point: float, spot: float) -> float:
    """Strike at moneyness ``point`` (percent of spot)."""
    if spot <= 0:
        raise QueryError(f"spot must be positive, got {spot}")
    return point * spot / 100.0


class PointResolver:
    """Maps a query onto the smile coordinate of one surface type."""

    def __init__(
        self,
        surface_type: SurfaceType,
        smile_points: Sequence[float],
        year_fraction: Callable[[float], float],
        strike_to_delta: Optional[StrikeToDelta] = None,
        r_rates: Optional[RateCurve] = None,
        q_rates: Optional[RateCurve] = None,
        solver_config: Optional[StrikeSolverConfig] = None
    ):
        """Initialize the resolver.

        Args:
            surface_type: Type of the surface being queried.
            smile_points: Canonical smile points of the surface.
            year_fraction: Day-count convention for tenors passed to
                strike_to_delta.
            strike_to_delta: Conversion (strike, spot, rates, tenor, vol) ->
                delta, needed for strike queries on delta surfaces.
            r_rates: Domestic rate curve.
            q_rates: Foreign rate / dividend curve.
            solver_config: Tolerance and iteration cap of the strike loop.
        """
        self.surface_type = surface_type
        self.smile_points = tuple(smile_points)
        self._year_fraction = year_fraction
        self._strike_to_delta = strike_to_delta
        self.r_rates = r_rates
        self.q_rates = q_rates
        self.solver_config = solver_config or StrikeSolverConfig()

        self._dispatch = {
            SurfaceType.DELTA: self._resolve_delta,
            SurfaceType.MONEYNESS: self._resolve_moneyness,
            SurfaceType.FLAT: self._resolve_flat,
        }

    def resolve(
        self,
        query: VolQuery,
        volatility_for_point: Callable[[float], float],
        tenor_days: float
    ) -> float:
        """Native smile point for ``query``.

        Args:
            query: The volatility query.
            volatility_for_point: Volatility from the recorded date to the end
                of the query window at a native point; used as the vol guess
                when converting strikes to delta.
            tenor_days: Calendar days to the end of the query window.

        Returns:
            Point in the surface's own coordinate.
        """
        return self._dispatch[self.surface_type](query, volatility_for_point, tenor_days)

    def _unsupported(self, query: VolQuery) -> QueryError:
        return QueryError(
            f"Cannot query a {self.surface_type.value} surface by {query.target.value}"
        )

    def _resolve_delta(self, query, volatility_for_point, tenor_days) -> float:
        if query.target is QueryTarget.DELTA:
            return query.value
        if query.target is QueryTarget.STRIKE:
            return self.strike_to_delta_point(
                query.value, query.spot, tenor_days, volatility_for_point
            )
        raise self._unsupported(query)

    def _resolve_moneyness(self, query, volatility_for_point, tenor_days) -> float:
        if query.target is QueryTarget.MONEYNESS:
            return query.value
        if query.target is QueryTarget.STRIKE:
            return strike_to_moneyness(query.value, query.spot)
        raise self._unsupported(query)

    def _resolve_flat(self, query, volatility_for_point, tenor_days) -> float:
        if not self.smile_points:
            raise QueryError("Flat surface has no smile point")
        return self.smile_points[0]

    def rates_for(self, tenor_days: float) -> Rates:
        """Domestic and foreign rates for a term."""
        if self.r_rates is None or self.q_rates is None:
            raise QueryError("Strike queries on a delta surface need r_rates and q_rates")
        return Rates(
            domestic=self.r_rates.rate_for(tenor_days),
            foreign=self.q_rates.rate_for(tenor_days),
        )

    def strike_to_delta_point(
        self,
        strike: float,
        spot: float,
        tenor_days: float,
        volatility_for_point: Callable[[float], float]
    ) -> float:
        """Delta of ``strike`` consistent with the surface's own smile.

        Starts from the at-the-money volatility and alternates between
        converting the strike at the current volatility and re-reading the
        volatility at the resulting delta, until successive deltas agree.

        Raises:
            QueryError: If no conversion function or rates are available, or
                the strike maps outside (0, 100).
            ConvergenceError: If the deltas do not settle within the
                iteration cap.
        """
        if self._strike_to_delta is None:
            raise QueryError("No strike_to_delta conversion configured for this surface")

        rates = self.rates_for(tenor_days)
        ttm = self._year_fraction(tenor_days)
        tolerance = self.solver_config.tolerance

        vol = volatility_for_point(self.surface_type.atm_point)
        delta = None

        for iteration in range(1, self.solver_config.max_iterations + 1):
            new_delta = float(self._strike_to_delta(strike, spot, rates, ttm, vol))
            if not 0 < new_delta < 100:
                raise QueryError(
                    f"Strike {strike} maps to delta {new_delta:.6f}, outside (0, 100)"
                )

            if delta is not None and abs(new_delta - delta) < tolerance:
                logger.debug(
                    f"Strike {strike} resolved to delta {new_delta:.6f} "
                    f"after {iteration} iterations"
                )
                return new_delta

            delta = new_delta
            vol = volatility_for_point(delta)

        raise ConvergenceError(
            f"Strike {strike} to delta did not converge within "
            f"{self.solver_config.max_iterations} iterations (last delta {delta:.6f})"
        )
