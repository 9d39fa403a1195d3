"""Volatility surface value object.

A surface is built once from raw tenor data and never changes afterwards.
Derived structures (tenor list, point sets, variance entries) are computed
on first access and cached under an instance lock, so concurrent readers
see each one computed exactly once.

Raw surface data maps tenors to smile and spread records. Delta surface:

    {
        7:  {"smile": {25: 0.2, 50: 0.4, 75: 0.7},
             "spread": {25: 0.1, 50: 0.1, 75: 0.1}},
        "1M": {...},
    }

Moneyness surfaces key smiles by percent of spot (80..120) and usually quote
a single ATM spread at 100. Flat surfaces carry one point, conventionally 100.
"""

import logging
import threading
from dataclasses import dataclass, field
from datetime import date, datetime, timedelta
from types import MappingProxyType
from typing import Any, Callable, Dict, List, Mapping, Optional, Union

from .black_scholes import strike_to_delta as default_strike_to_delta
from .engine import VolatilityEngine
from .interpolation import SmileInterpolator
from .point_resolver import PointResolver, StrikeToDelta
from .query import VolQuery
from .risk_metrics import risk_reversal_butterfly
from .surface_type import SurfaceType
from .variance import VarianceBuilder
from ..config import Config
from ..errors import ConstructionError, DataError, QueryError, ValidationError
from ..market.rates import RateCurve
from ..utils.dates import (
    days_between,
    effective_date_for as default_effective_date_for,
    ensure_utc,
    make_year_fraction,
    tenor_to_days,
)
from ..utils.validation import SurfaceValidator, ValidationReport

logger = logging.getLogger(__name__)

SPREAD_KEYS = ("spread", "vol_spread")


@dataclass(frozen=True)
class Tenor:
    """Smile and spread quoted for one tenor."""
    smile: Mapping[float, float] = field(default_factory=dict)
    spread: Mapping[float, float] = field(default_factory=dict)


def _numeric_map(raw: Any, what: str, tenor: Any) -> Mapping[float, float]:
    if raw is None:
        return MappingProxyType({})
    if not isinstance(raw, Mapping):
        raise ConstructionError(f"{what} for tenor {tenor!r} must be a mapping")
    try:
        converted = {float(point): float(value) for point, value in raw.items()}
    except (TypeError, ValueError) as e:
        raise ConstructionError(f"Non-numeric {what} entry for tenor {tenor!r}: {e}")
    return MappingProxyType(dict(sorted(converted.items())))


class VolSurface:
    """Volatility surface for one underlying, recorded at one instant."""

    def __init__(
        self,
        surface: Mapping[Any, Mapping[str, Any]],
        surface_type: Union[SurfaceType, str],
        recorded_date: datetime,
        underlying: str,
        r_rates: Optional[RateCurve] = None,
        q_rates: Optional[RateCurve] = None,
        config: Optional[Config] = None,
        year_fraction: Optional[Callable[[float], float]] = None,
        strike_to_delta: Optional[StrikeToDelta] = default_strike_to_delta,
        effective_date_for: Optional[Callable[[datetime], date]] = None
    ):
        """Build a surface from raw tenor data.

        Args:
            surface: Mapping from tenor (day count or label such as 'ON',
                '1W', '6M') to a record with 'smile' and optional 'spread'.
            surface_type: Delta, moneyness or flat.
            recorded_date: Instant the surface was recorded.
            underlying: Identifier of the underlying instrument.
            r_rates: Domestic rate curve (delta surfaces queried by strike).
            q_rates: Foreign rate / dividend curve.
            config: Conventions and thresholds.
            year_fraction: Day-count convention override.
            strike_to_delta: Strike -> delta conversion for delta surfaces.
            effective_date_for: Rollover rule override.

        Raises:
            ConstructionError: On a missing type, underlying or date, or
                malformed tenor data.
        """
        if surface_type is None:
            raise ConstructionError("surface_type is required")
        if not underlying or not isinstance(underlying, str):
            raise ConstructionError("underlying is required")
        if not isinstance(recorded_date, datetime):
            raise ConstructionError("recorded_date must be a datetime")
        if surface is None or not isinstance(surface, Mapping):
            raise ConstructionError("surface must be a mapping of tenor -> record")

        self.surface_type = SurfaceType.parse(surface_type)
        self.underlying = underlying
        self.recorded_date = ensure_utc(recorded_date)
        self.r_rates = r_rates
        self.q_rates = q_rates
        self.config = config or Config()
        self.year_fraction = year_fraction or make_year_fraction(
            self.config.surface.year_basis_days
        )
        self._strike_to_delta = strike_to_delta
        self._effective_date_for = effective_date_for

        self._lock = threading.RLock()
        self._cache: Dict[str, Any] = {}

        self.surface_data = MappingProxyType(dict(surface))
        self.surface = self._build_surface(surface)

        logger.debug(
            f"Built {self.surface_type.value} surface for {underlying} "
            f"with tenors {self.term_by_day}"
        )

    def _cached(self, key: str, builder: Callable[[], Any]) -> Any:
        with self._lock:
            if key not in self._cache:
                self._cache[key] = builder()
            return self._cache[key]

    def _build_surface(self, raw: Mapping[Any, Mapping[str, Any]]) -> Mapping[int, Tenor]:
        tenors: Dict[int, Tenor] = {}
        for key, record in raw.items():
            days = tenor_to_days(key, self.effective_date)
            if days in tenors:
                raise ConstructionError(f"Tenor {key!r} duplicates {days} days")
            if not isinstance(record, Mapping):
                raise ConstructionError(f"Record for tenor {key!r} must be a mapping")

            spread_raw = next((record[k] for k in SPREAD_KEYS if k in record), None)
            tenors[days] = Tenor(
                smile=_numeric_map(record.get("smile"), "smile", key),
                spread=_numeric_map(spread_raw, "spread", key),
            )
        return MappingProxyType(dict(sorted(tenors.items())))

    # ------------------------------------------------------------------
    # Identity and conventions
    # ------------------------------------------------------------------

    @property
    def symbol(self) -> str:
        return self.underlying

    @property
    def effective_date(self) -> date:
        """Calendar date the surface applies to after the daily rollover."""
        def build():
            if self._effective_date_for is not None:
                return self._effective_date_for(self.recorded_date)
            return default_effective_date_for(
                self.recorded_date,
                self.config.surface.rollover_hour,
                self.config.surface.rollover_timezone,
            )
        return self._cached("effective_date", build)

    @property
    def atm_spread_point(self) -> float:
        return self.surface_type.atm_spread_point

    @property
    def min_vol_spread(self) -> float:
        """Minimum volatility spread accepted for this surface."""
        return self.config.surface.min_vol_spread

    # ------------------------------------------------------------------
    # Term structure index
    # ------------------------------------------------------------------

    @property
    def term_by_day(self) -> List[int]:
        """Quoted tenors in ascending order of days."""
        return list(self._cached("term_by_day", lambda: tuple(sorted(self.surface))))

    @property
    def smile_points(self) -> List[float]:
        """Points of the first tenor with a smile, ascending."""
        def build():
            day = next((d for d in self.term_by_day if self.surface[d].smile), None)
            return tuple(sorted(self.surface[day].smile)) if day is not None else ()
        return list(self._cached("smile_points", build))

    @property
    def spread_points(self) -> List[float]:
        """Points of the first tenor with a spread, ascending."""
        def build():
            day = next((d for d in self.term_by_day if self.surface[d].spread), None)
            return tuple(sorted(self.surface[day].spread)) if day is not None else ()
        return list(self._cached("spread_points", build))

    def get_surface_smile(self, days: int) -> Mapping[float, float]:
        """Raw smile quoted at ``days``, or an empty mapping."""
        tenor = self.surface.get(days)
        return tenor.smile if tenor is not None else MappingProxyType({})

    def get_surface_spread(self, days: int) -> Mapping[float, float]:
        """Raw spread quoted at ``days``, or an empty mapping."""
        tenor = self.surface.get(days)
        return tenor.spread if tenor is not None else MappingProxyType({})

    def get_smile_expiries(self) -> List[datetime]:
        """Expiry instants of the quoted smiles."""
        return [
            self.recorded_date + timedelta(days=d)
            for d in self.term_by_day
            if self.surface[d].smile
        ]

    # ------------------------------------------------------------------
    # Collaborators
    # ------------------------------------------------------------------

    @property
    def interpolator(self) -> SmileInterpolator:
        return self._cached("interpolator", SmileInterpolator)

    @property
    def variance_builder(self) -> VarianceBuilder:
        return self._cached("variance_builder", lambda: VarianceBuilder(
            MappingProxyType({d: t.smile for d, t in self.surface.items()}),
            self.year_fraction,
            self.interpolator,
        ))

    @property
    def point_resolver(self) -> PointResolver:
        return self._cached("point_resolver", lambda: PointResolver(
            self.surface_type,
            self.smile_points,
            self.year_fraction,
            strike_to_delta=self._strike_to_delta,
            r_rates=self.r_rates,
            q_rates=self.q_rates,
            solver_config=self.config.strike_solver,
        ))

    @property
    def engine(self) -> VolatilityEngine:
        return self._cached("engine", lambda: VolatilityEngine(self))

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def interpolate(self, smile: Mapping[float, float], sought_point: float) -> float:
        """Quadratic interpolation across ``smile``."""
        return self.interpolator.interpolate(smile, sought_point)

    def get_volatility(self, query: Union[VolQuery, Mapping[str, Any]]) -> float:
        """Volatility for a query.

        Accepts a VolQuery or a mapping such as
        ``{"delta": 25, "from": start, "to": end}`` or
        ``{"moneyness": 95, "spot": 104.23, "from": start, "to": end}``.
        """
        if not isinstance(query, VolQuery):
            query = VolQuery.from_mapping(query)
        return self.engine.get_volatility(query)

    def _check_days(self, days: float) -> None:
        if not days > 0:
            raise QueryError(f"days must be positive, got {days}")

    def get_variances(self, days: float) -> Dict[float, float]:
        """Total variance at each smile point for a term of ``days``."""
        self._check_days(days)
        return {p: self.engine.total_variance(p, days) for p in self.smile_points}

    def get_smile(self, days: float) -> Dict[float, float]:
        """Smile for a term of ``days``, interpolated in variance space."""
        self._check_days(days)
        quoted = self.get_surface_smile(days)
        if quoted:
            return dict(quoted)
        return {
            p: self.engine.volatility_for_window(p, 0.0, days)
            for p in self.smile_points
        }

    def get_weight(self, from_date: datetime, to_date: datetime) -> float:
        """Calendar-time weight (year fraction) between two instants."""
        days = days_between(from_date, to_date)
        if days < 0:
            raise QueryError("to_date must not be before from_date")
        return self.year_fraction(days)

    def get_spread(self, sought_point: str = "atm", days: float = 7) -> float:
        """Volatility spread at the ATM spread point or the widest quote.

        Spreads are linear in days between quoted tenors and held at the
        nearest tenor outside them.

        Args:
            sought_point: 'atm' or 'max'.
            days: Term in calendar days.
        """
        self._check_days(days)
        if sought_point not in ("atm", "max"):
            raise QueryError(f"sought_point must be 'atm' or 'max', got {sought_point!r}")

        quoted = [d for d in self.term_by_day if self.surface[d].spread]
        if not quoted:
            raise DataError(f"Surface for {self.symbol} has no spreads")

        def spread_for(day: int) -> float:
            spread = self.surface[day].spread
            if sought_point == "max":
                return max(spread.values())
            return self.interpolator.interpolate(spread, self.atm_spread_point)

        if days <= quoted[0]:
            return spread_for(quoted[0])
        if days >= quoted[-1]:
            return spread_for(quoted[-1])

        upper = next(d for d in quoted if d >= days)
        lower = max(d for d in quoted if d <= days)
        if upper == lower:
            return spread_for(upper)
        weight = (days - lower) / (upper - lower)
        return spread_for(lower) + weight * (spread_for(upper) - spread_for(lower))

    @property
    def variance_table(self) -> Dict[int, Dict[float, float]]:
        """Variance at every quoted smile point for every tenor."""
        return self.variance_builder.table(self.smile_points)

    @staticmethod
    def get_rr_bf_for_smile(smile: Mapping[float, float]) -> Dict[str, float]:
        """Risk reversal and butterfly of a delta smile."""
        return risk_reversal_butterfly(smile)

    def get_market_rr_bf(self, days: float) -> Dict[str, float]:
        """Risk reversal and butterfly of the smile for a term of ``days``."""
        if self.surface_type is not SurfaceType.DELTA:
            raise QueryError(
                f"RR/BF needs a delta surface, this is {self.surface_type.value}"
            )
        return risk_reversal_butterfly(self.get_smile(days))

    # ------------------------------------------------------------------
    # Validation
    # ------------------------------------------------------------------

    def validate(self) -> ValidationReport:
        """Run structural checks; the report is cached."""
        return self._cached("validation", lambda: SurfaceValidator(
            self.config.validation, self.config.surface
        ).validate(self))

    def is_valid(self) -> bool:
        return self.validate().is_valid

    def validation_error(self) -> Optional[str]:
        """Description of every failed check, or None for a valid surface."""
        return self.validate().error_message

    def assert_valid(self) -> None:
        """Raise ValidationError if the surface fails any structural check."""
        message = self.validation_error()
        if message is not None:
            raise ValidationError(f"Invalid volatility surface for {self.symbol}: {message}")

    def __repr__(self) -> str:
        return (
            f"VolSurface(underlying={self.underlying!r}, type={self.surface_type.value}, "
            f"recorded_date={self.recorded_date.isoformat()}, tenors={self.term_by_day})"
        )
