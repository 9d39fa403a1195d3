"""Tests for date, tenor and day-count utilities."""

from datetime import date, datetime, timedelta, timezone

import pytest
from volsurface.errors import ConstructionError
from volsurface.utils.dates import (
    days_between,
    effective_date_for,
    ensure_utc,
    make_year_fraction,
    tenor_to_days,
)


EFFECTIVE = date(2024, 6, 3)


class TestEnsureUtc:

    def test_naive_is_utc(self):
        moment = ensure_utc(datetime(2024, 6, 3, 10, 0))
        assert moment.tzinfo == timezone.utc
        assert moment.hour == 10

    def test_aware_is_converted(self):
        plus_two = timezone(timedelta(hours=2))
        moment = ensure_utc(datetime(2024, 6, 3, 10, 0, tzinfo=plus_two))
        assert moment.hour == 8


class TestEffectiveDate:

    def test_summer_rollover(self):
        # EDT: 17:00 New York = 21:00 UTC
        assert effective_date_for(datetime(2024, 6, 3, 20, 59, tzinfo=timezone.utc)) == date(2024, 6, 3)
        assert effective_date_for(datetime(2024, 6, 3, 21, 0, tzinfo=timezone.utc)) == date(2024, 6, 4)

    def test_winter_rollover(self):
        # EST: 17:00 New York = 22:00 UTC
        assert effective_date_for(datetime(2024, 1, 15, 21, 30, tzinfo=timezone.utc)) == date(2024, 1, 15)
        assert effective_date_for(datetime(2024, 1, 15, 22, 0, tzinfo=timezone.utc)) == date(2024, 1, 16)

    def test_custom_rule(self):
        recorded = datetime(2024, 6, 3, 12, 0, tzinfo=timezone.utc)
        assert effective_date_for(recorded, rollover_hour=12, rollover_timezone="UTC") == date(2024, 6, 4)


class TestTenorToDays:

    @pytest.mark.parametrize("key,expected", [
        (7, 7),
        (30.0, 30),
        ("14", 14),
        ("ON", 1),
        ("o/n", 1),
        ("3D", 3),
        ("2W", 14),
        ("1M", 30),
        ("6M", 183),
        ("1Y", 365),
    ])
    def test_valid(self, key, expected):
        assert tenor_to_days(key, EFFECTIVE) == expected

    def test_leap_year(self):
        assert tenor_to_days("1Y", date(2024, 1, 1)) == 366

    def test_month_end(self):
        assert tenor_to_days("1M", date(2023, 1, 31)) == 28

    @pytest.mark.parametrize("key", [
        0, -1, 1.5, float("inf"), float("nan"), True, False, None, "", "W", "1Q", "0M",
    ])
    def test_invalid(self, key):
        with pytest.raises(ConstructionError):
            tenor_to_days(key, EFFECTIVE)


class TestDayCounts:

    def test_fractional_days(self):
        start = datetime(2024, 6, 3, 10, 0, tzinfo=timezone.utc)
        assert days_between(start, start + timedelta(hours=36)) == pytest.approx(1.5)
        assert days_between(start + timedelta(days=2), start) == pytest.approx(-2.0)

    def test_year_fraction(self):
        assert make_year_fraction()(73) == pytest.approx(0.2)
        assert make_year_fraction(360.0)(90) == pytest.approx(0.25)

    def test_year_fraction_basis(self):
        with pytest.raises(ValueError):
            make_year_fraction(0)
