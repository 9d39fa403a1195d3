"""Date and day-count utilities.

Provides the default collaborators a surface needs for calendar time:
- effective date rollover (surfaces roll at 17:00 New York time)
- tenor label parsing ('ON', '1W', '6M', '1Y', ...) to calendar days
- fractional day counts between instants and year fractions
"""

import math
import re
from datetime import date, datetime, timedelta, timezone
from typing import Callable, Union
from zoneinfo import ZoneInfo

from dateutil.relativedelta import relativedelta

from ..constants import (
    DEFAULT_YEAR_BASIS_DAYS,
    ROLLOVER_HOUR,
    ROLLOVER_TIMEZONE,
    SECONDS_PER_DAY,
)
from ..errors import ConstructionError


TENOR_PATTERN = re.compile(r"^(\d+)\s*([DWMY])$")

# Overnight is one calendar day; weekend adjustment belongs to the calendar
OVERNIGHT_LABELS = {"ON", "O/N"}


def ensure_utc(moment: datetime) -> datetime:
    """Return an aware UTC datetime; naive values are taken to be UTC."""
    if moment.tzinfo is None:
        return moment.replace(tzinfo=timezone.utc)
    return moment.astimezone(timezone.utc)


def effective_date_for(
    recorded_date: datetime,
    rollover_hour: int = ROLLOVER_HOUR,
    rollover_timezone: str = ROLLOVER_TIMEZONE,
) -> date:
    """Calendar date a surface recorded at ``recorded_date`` applies to.

    Vols recorded at or after the rollover hour in the rollover timezone
    belong to the next calendar day.

    Args:
        recorded_date: Instant the surface was recorded.
        rollover_hour: Local hour of the daily rollover.
        rollover_timezone: IANA timezone name of the rollover.

    Returns:
        The effective calendar date.
    """
    local = ensure_utc(recorded_date).astimezone(ZoneInfo(rollover_timezone))
    if local.hour >= rollover_hour:
        return local.date() + timedelta(days=1)
    return local.date()


def tenor_to_days(tenor: Union[int, float, str], effective_date: date) -> int:
    """Convert a raw surface key to a calendar day count.

    Accepts positive integers (or integral floats / digit strings), 'ON',
    and labels of the form nD, nW, nM, nY. Month and year labels count
    calendar days from ``effective_date``.

    Raises:
        ConstructionError: If the key is not a recognisable positive tenor.
    """
    if isinstance(tenor, bool):
        raise ConstructionError(f"Invalid tenor key {tenor!r}")

    if isinstance(tenor, (int, float)):
        if not math.isfinite(tenor):
            raise ConstructionError(f"Tenor must be a finite day count, got {tenor!r}")
        if float(tenor) != int(tenor) or int(tenor) <= 0:
            raise ConstructionError(f"Tenor must be a positive whole day count, got {tenor!r}")
        return int(tenor)

    if not isinstance(tenor, str):
        raise ConstructionError(f"Invalid tenor key {tenor!r}")

    label = tenor.strip().upper()
    if label.isdigit():
        return tenor_to_days(int(label), effective_date)

    if label in OVERNIGHT_LABELS:
        return 1

    match = TENOR_PATTERN.match(label)
    if not match:
        raise ConstructionError(f"Unrecognised tenor label {tenor!r}")

    count = int(match.group(1))
    unit = match.group(2)
    if count <= 0:
        raise ConstructionError(f"Tenor must be positive, got {tenor!r}")

    if unit == "D":
        return count
    if unit == "W":
        return 7 * count

    offset = relativedelta(months=count) if unit == "M" else relativedelta(years=count)
    return ((effective_date + offset) - effective_date).days


def days_between(start: datetime, end: datetime) -> float:
    """Fractional calendar days from ``start`` to ``end`` (negative if end is earlier)."""
    delta = ensure_utc(end) - ensure_utc(start)
    return delta.total_seconds() / SECONDS_PER_DAY


def make_year_fraction(basis_days: float = DEFAULT_YEAR_BASIS_DAYS) -> Callable[[float], float]:
    """Build a day-count convention: calendar days / basis."""
    if basis_days <= 0:
        raise ValueError(f"basis_days must be positive, got {basis_days}")

    def year_fraction(days: float) -> float:
        return days / basis_days

    return year_fraction
