"""Tests for surface construction, term structure index and smile queries."""

from concurrent.futures import ThreadPoolExecutor
from datetime import date, datetime, timedelta, timezone

import pytest
from volsurface.errors import ConstructionError, DataError, QueryError
from volsurface.models.surface import VolSurface
from volsurface.models.surface_type import SurfaceType


RECORDED = datetime(2024, 6, 3, 10, 0, tzinfo=timezone.utc)

SPREAD = {25: 0.05, 50: 0.04, 75: 0.05}

DELTA_SURFACE = {
    7: {"smile": {25: 0.12, 50: 0.10, 75: 0.11}, "spread": SPREAD},
    30: {"smile": {25: 0.14, 50: 0.12, 75: 0.13},
         "spread": {25: 0.07, 50: 0.06, 75: 0.08}},
}


def make_surface(data=None, surface_type="delta", recorded=RECORDED, **kwargs):
    return VolSurface(
        DELTA_SURFACE if data is None else data,
        surface_type,
        recorded,
        "frxEURUSD",
        **kwargs
    )


class TestConstruction:

    def test_type_from_string(self):
        assert make_surface(surface_type="Delta").surface_type is SurfaceType.DELTA
        assert make_surface(surface_type=SurfaceType.FLAT).surface_type is SurfaceType.FLAT

    def test_invalid_type(self):
        with pytest.raises(ConstructionError, match="Must be one of: delta, flat, moneyness"):
            make_surface(surface_type="smile")

    def test_missing_type(self):
        with pytest.raises(ConstructionError):
            make_surface(surface_type=None)

    def test_missing_underlying(self):
        with pytest.raises(ConstructionError, match="underlying"):
            VolSurface(DELTA_SURFACE, "delta", RECORDED, "")

    def test_recorded_date_required(self):
        with pytest.raises(ConstructionError, match="recorded_date"):
            VolSurface(DELTA_SURFACE, "delta", "2024-06-03", "frxEURUSD")

    @pytest.mark.parametrize("key", [0, -7, 2.5, float("inf"), "XYZ", "0W", True])
    def test_malformed_tenor(self, key):
        with pytest.raises(ConstructionError):
            make_surface({key: {"smile": {50: 0.1}}})

    def test_non_numeric_smile(self):
        with pytest.raises(ConstructionError, match="Non-numeric"):
            make_surface({7: {"smile": {50: "high"}}})

    def test_duplicate_tenor(self):
        with pytest.raises(ConstructionError, match="duplicates"):
            make_surface({"1W": {"smile": {50: 0.1}}, 7: {"smile": {50: 0.1}}})

    def test_tenor_labels(self):
        smile = {"smile": {50: 0.1}}
        surface = make_surface({"ON": smile, "1W": smile, "1M": smile, "1Y": smile, "14": smile})
        # 2024-06-03 + 1M = 2024-07-03, + 1Y = 2025-06-03
        assert surface.term_by_day == [1, 7, 14, 30, 365]

    def test_vol_spread_alias(self):
        surface = make_surface({7: {"smile": {50: 0.1}, "vol_spread": {50: 0.05}}})
        assert surface.spread_points == [50.0]

    def test_surface_is_read_only(self):
        surface = make_surface()
        with pytest.raises(TypeError):
            surface.surface[1] = None
        with pytest.raises(TypeError):
            surface.surface[7].smile[50.0] = 0.5

    def test_raw_data_kept(self):
        surface = make_surface()
        assert surface.surface_data[7] is DELTA_SURFACE[7]


class TestEffectiveDate:

    def test_before_rollover(self):
        # 16:59 New York (EDT) on 2024-06-03
        surface = make_surface(recorded=datetime(2024, 6, 3, 20, 59, tzinfo=timezone.utc))
        assert surface.effective_date == date(2024, 6, 3)

    def test_after_rollover(self):
        # 18:00 New York (EDT) on 2024-06-03
        surface = make_surface(recorded=datetime(2024, 6, 3, 22, 0, tzinfo=timezone.utc))
        assert surface.effective_date == date(2024, 6, 4)

    def test_injected_rule(self):
        surface = make_surface(effective_date_for=lambda recorded: date(2030, 1, 1))
        assert surface.effective_date == date(2030, 1, 1)

    def test_month_labels_count_from_effective_date(self):
        surface = make_surface(
            {"1M": {"smile": {50: 0.1}}},
            effective_date_for=lambda recorded: date(2024, 1, 31),
        )
        # 2024-01-31 + 1M = 2024-02-29
        assert surface.term_by_day == [29]


class TestTermStructureIndex:

    def test_term_by_day_sorted(self):
        surface = make_surface({30: DELTA_SURFACE[30], 7: DELTA_SURFACE[7]})
        assert surface.term_by_day == [7, 30]

    def test_empty_surface(self):
        surface = make_surface({})
        assert surface.term_by_day == []
        assert surface.smile_points == []
        assert surface.spread_points == []

    def test_smile_points_from_first_tenor_with_smile(self):
        surface = make_surface({
            1: {"smile": {}},
            7: {"smile": {75: 0.11, 25: 0.12, 50: 0.10}},
            30: {"smile": {10: 0.2, 50: 0.1}},
        })
        assert surface.smile_points == [25.0, 50.0, 75.0]

    def test_spread_points_from_first_tenor_with_spread(self):
        surface = make_surface({
            7: {"smile": {50: 0.1}},
            30: {"smile": {50: 0.1}, "spread": {50: 0.04, 25: 0.05}},
        })
        assert surface.spread_points == [25.0, 50.0]

    def test_index_lists_are_copies(self):
        surface = make_surface()
        surface.term_by_day.append(99)
        assert surface.term_by_day == [7, 30]

    def test_smile_expiries(self):
        surface = make_surface()
        assert surface.get_smile_expiries() == [
            RECORDED + timedelta(days=7),
            RECORDED + timedelta(days=30),
        ]

    def test_surface_smile(self):
        surface = make_surface()
        assert dict(surface.get_surface_smile(7)) == {25.0: 0.12, 50.0: 0.10, 75.0: 0.11}
        assert dict(surface.get_surface_smile(8)) == {}


class TestSmileQueries:

    def setup_method(self):
        self.surface = make_surface()

    def test_get_smile_quoted_tenor(self):
        assert self.surface.get_smile(7) == {25.0: 0.12, 50.0: 0.10, 75.0: 0.11}

    def test_get_smile_between_tenors(self):
        smile = self.surface.get_smile(14)
        assert list(smile) == [25.0, 50.0, 75.0]
        assert 0.10 < smile[50.0] < 0.12
        assert smile[25.0] > smile[75.0] > smile[50.0]

    def test_get_variances(self):
        variances = self.surface.get_variances(7)
        assert variances[50.0] == pytest.approx(0.10 ** 2 * 7 / 365)

    def test_get_smile_requires_positive_days(self):
        with pytest.raises(QueryError):
            self.surface.get_smile(0)

    def test_variance_table(self):
        table = self.surface.variance_table
        assert sorted(table) == [7, 30]
        assert table[30][75.0] == pytest.approx(0.13 ** 2 * 30 / 365)

    def test_market_rr_bf(self):
        result = self.surface.get_market_rr_bf(7)
        assert result["ATM"] == pytest.approx(0.10)
        assert result["RR_25"] == pytest.approx(0.01)
        assert result["BF_25"] == pytest.approx(0.015)

    def test_market_rr_bf_needs_delta_surface(self):
        surface = make_surface({7: {"smile": {100: 0.1}}}, surface_type="flat")
        with pytest.raises(QueryError, match="delta surface"):
            surface.get_market_rr_bf(7)

    def test_rr_bf_for_smile(self):
        result = VolSurface.get_rr_bf_for_smile({25: 0.2, 50: 0.4, 75: 0.7})
        assert result["RR_25"] == pytest.approx(-0.5)

    def test_get_weight(self):
        weight = self.surface.get_weight(RECORDED, RECORDED + timedelta(days=73))
        assert weight == pytest.approx(0.2)
        with pytest.raises(QueryError):
            self.surface.get_weight(RECORDED + timedelta(days=1), RECORDED)


class TestSpreads:

    def setup_method(self):
        self.surface = make_surface()

    def test_atm_spread_at_tenor(self):
        assert self.surface.get_spread("atm", 7) == pytest.approx(0.04)

    def test_max_spread_at_tenor(self):
        assert self.surface.get_spread("max", 30) == pytest.approx(0.08)

    def test_spread_interpolated_in_days(self):
        # Halfway between 7 and 30 days
        assert self.surface.get_spread("atm", 18.5) == pytest.approx(0.05)

    def test_spread_held_outside_tenors(self):
        assert self.surface.get_spread("atm", 1) == pytest.approx(0.04)
        assert self.surface.get_spread("max", 365) == pytest.approx(0.08)

    def test_atm_spread_point(self):
        assert self.surface.atm_spread_point == 50.0
        flat = make_surface({7: {"smile": {100: 0.1}}}, surface_type="flat")
        assert flat.atm_spread_point == 100.0

    def test_min_vol_spread(self):
        assert self.surface.min_vol_spread == pytest.approx(0.031)

    def test_unknown_sought_point(self):
        with pytest.raises(QueryError):
            self.surface.get_spread("wing", 7)

    def test_no_spreads(self):
        surface = make_surface({7: {"smile": {50: 0.1}}})
        with pytest.raises(DataError):
            surface.get_spread("atm", 7)


class TestConcurrentReaders:

    def test_parallel_queries_agree(self):
        surface = make_surface()
        query = {
            "delta": 40,
            "from": RECORDED + timedelta(days=3),
            "to": RECORDED + timedelta(days=21),
        }

        with ThreadPoolExecutor(max_workers=8) as pool:
            vols = list(pool.map(lambda _: surface.get_volatility(query), range(64)))
            builders = list(pool.map(lambda _: surface.variance_builder, range(16)))

        assert all(v == vols[0] for v in vols)
        assert all(b is builders[0] for b in builders)
