"""Structural validation of volatility surfaces.

Checks run without mutating the surface and without raising; problems are
collected into a report the caller can inspect, reject on, or ignore.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import TYPE_CHECKING, List, Optional
import math
import logging

from ..config import SurfaceConfig, ValidationConfig
from ..constants import DELTA_DOMAIN
from ..models.surface_type import SurfaceType

if TYPE_CHECKING:
    from ..models.surface import VolSurface


logger = logging.getLogger(__name__)


class CheckStatus(Enum):
    """Status of a validation check."""
    PASS = "pass"
    FAIL = "fail"


@dataclass
class ValidationCheckResult:
    """Result of a single validation check."""
    name: str
    status: CheckStatus
    message: str


@dataclass
class ValidationReport:
    """All checks run against one surface."""
    results: List[ValidationCheckResult] = field(default_factory=list)

    @property
    def failures(self) -> List[ValidationCheckResult]:
        return [r for r in self.results if r.status == CheckStatus.FAIL]

    @property
    def is_valid(self) -> bool:
        return not self.failures

    @property
    def error_message(self) -> Optional[str]:
        """Failure messages joined into one line, or None when valid."""
        if self.is_valid:
            return None
        return "; ".join(r.message for r in self.failures)


class SurfaceValidator:
    """Validate tenors, point sets, volatilities and spreads of a surface."""

    def __init__(
        self,
        validation_config: Optional[ValidationConfig] = None,
        surface_config: Optional[SurfaceConfig] = None
    ):
        """Initialize the validator.

        Args:
            validation_config: Validation thresholds.
            surface_config: Surface conventions (minimum vol spread).
        """
        self.config = validation_config or ValidationConfig()
        self.surface_config = surface_config or SurfaceConfig()

        self._point_checks = {
            SurfaceType.DELTA: self._check_delta_points,
            SurfaceType.MONEYNESS: self._check_moneyness_points,
            SurfaceType.FLAT: self._check_flat_points,
        }

    def validate(self, surface: "VolSurface") -> ValidationReport:
        """Run every check against ``surface``."""
        report = ValidationReport()

        if not surface.term_by_day:
            self._add(report, "non_empty", False, "Surface has no tenors")
            return report
        self._add(report, "non_empty", True, f"{len(surface.term_by_day)} tenors")

        self._check_smiles_present(report, surface)
        self._check_smile_points_consistent(report, surface)
        self._check_volatilities(report, surface)
        self._point_checks[surface.surface_type](report, surface)

        if surface.surface_type is not SurfaceType.FLAT:
            self._check_spreads(report, surface)

        if not report.is_valid:
            logger.warning(f"Surface for {surface.symbol} is invalid: {report.error_message}")
        return report

    def _add(
        self,
        report: ValidationReport,
        name: str,
        passed: bool,
        message: str
    ) -> None:
        report.results.append(ValidationCheckResult(
            name=name,
            status=CheckStatus.PASS if passed else CheckStatus.FAIL,
            message=message
        ))

    def _check_smiles_present(self, report, surface) -> None:
        empty = [d for d in surface.term_by_day if not surface.get_surface_smile(d)]
        self._add(
            report, "smiles_present", not empty,
            f"Empty smile on tenors {empty}" if empty else "Every tenor has a smile"
        )

    def _check_smile_points_consistent(self, report, surface) -> None:
        expected = set(surface.smile_points)
        mismatched = [
            d for d in surface.term_by_day
            if surface.get_surface_smile(d) and set(surface.get_surface_smile(d)) != expected
        ]
        self._add(
            report, "smile_points_consistent", not mismatched,
            (f"Smile points on tenors {mismatched} differ from "
             f"{[_fmt(p) for p in surface.smile_points]}")
            if mismatched else "Smile points consistent across tenors"
        )

    def _check_volatilities(self, report, surface) -> None:
        max_vol = self.config.max_volatility
        bad = []
        for day in surface.term_by_day:
            for point, vol in surface.get_surface_smile(day).items():
                if not math.isfinite(vol) or vol <= 0 or vol > max_vol:
                    bad.append(f"{day}d@{_fmt(point)}={vol}")
        self._add(
            report, "volatility_range", not bad,
            f"Volatilities outside (0, {max_vol}]: {', '.join(bad)}"
            if bad else "Volatilities within range"
        )

    def _check_delta_points(self, report, surface) -> None:
        low, high = DELTA_DOMAIN
        points = surface.smile_points
        outside = [_fmt(p) for p in points if not low < p < high]
        self._add(
            report, "delta_points_domain", not outside,
            f"Delta points {outside} outside ({low:g}, {high:g})"
            if outside else "Delta points within domain"
        )
        atm = surface.surface_type.atm_point
        self._add(
            report, "delta_atm_present", atm in points,
            "ATM point quoted" if atm in points else f"Delta smile has no ATM point {_fmt(atm)}"
        )

    def _check_moneyness_points(self, report, surface) -> None:
        outside = [_fmt(p) for p in surface.smile_points if not p > 0]
        self._add(
            report, "moneyness_points_domain", not outside,
            f"Moneyness points {outside} are not positive"
            if outside else "Moneyness points positive"
        )

    def _check_flat_points(self, report, surface) -> None:
        points = surface.smile_points
        self._add(
            report, "flat_single_point", len(points) == 1,
            "Flat smile has one point" if len(points) == 1
            else f"Flat surface must have exactly one smile point, got {[_fmt(p) for p in points]}"
        )

    def _check_spreads(self, report, surface) -> None:
        missing = [d for d in surface.term_by_day if not surface.get_surface_spread(d)]
        if self.config.require_spread:
            self._add(
                report, "spreads_present", not missing,
                f"Missing spread on tenors {missing}" if missing else "Every tenor has a spread"
            )

        expected = set(surface.spread_points)
        mismatched = [
            d for d in surface.term_by_day
            if surface.get_surface_spread(d) and set(surface.get_surface_spread(d)) != expected
        ]
        self._add(
            report, "spread_points_consistent", not mismatched,
            (f"Spread points on tenors {mismatched} differ from "
             f"{[_fmt(p) for p in surface.spread_points]}")
            if mismatched else "Spread points consistent across tenors"
        )

        floor = self.surface_config.min_vol_spread
        narrow = [
            f"{d}d@{_fmt(p)}={s}"
            for d in surface.term_by_day
            for p, s in surface.get_surface_spread(d).items()
            if s < floor
        ]
        self._add(
            report, "min_vol_spread", not narrow,
            f"Spreads below minimum {floor}: {', '.join(narrow)}"
            if narrow else "Spreads above minimum"
        )


def _fmt(point: float) -> str:
    """Render a point without a trailing .0 for whole numbers."""
    return f"{point:g}"
