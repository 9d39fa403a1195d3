"""Tests for the lazily built variance table."""

import threading
from types import MappingProxyType

import pytest
from volsurface.errors import DataError
from volsurface.models.variance import VarianceBuilder


SMILES = MappingProxyType({
    7: MappingProxyType({25.0: 0.12, 50.0: 0.10, 75.0: 0.11}),
    30: MappingProxyType({25.0: 0.14, 50.0: 0.12, 75.0: 0.13}),
    60: MappingProxyType({}),
})


def year_fraction(days):
    return days / 365.0


class TestVarianceBuilder:

    def setup_method(self):
        self.builder = VarianceBuilder(SMILES, year_fraction)

    def test_variance_at_quoted_point(self):
        assert self.builder.variance_at(30, 50) == pytest.approx(0.12 ** 2 * 30 / 365)

    def test_variance_off_grid_uses_smile(self):
        vol = self.builder.interpolator.interpolate(SMILES[7], 40)
        assert self.builder.variance_at(7, 40) == pytest.approx(vol * vol * 7 / 365)

    def test_entries_cached_once(self):
        first = self.builder.variance_at(7, 25)
        assert self.builder.cached_entries() == 1
        assert self.builder.variance_at(7, 25.0) == first
        assert self.builder.cached_entries() == 1

    def test_off_grid_points_not_cached(self):
        for point in (12.5, 33.3, 41.0, 66.6):
            self.builder.variance_at(30, point)
        assert self.builder.cached_entries() == 0

    def test_table_skips_empty_smiles(self):
        table = self.builder.table([25, 50, 75])
        assert list(table) == [7, 30]
        assert table[7][75.0] == pytest.approx(0.11 ** 2 * 7 / 365)

    def test_unknown_tenor(self):
        with pytest.raises(DataError):
            self.builder.variance_at(14, 50)

    def test_empty_smile(self):
        with pytest.raises(DataError):
            self.builder.variance_at(60, 50)

    def test_concurrent_population(self):
        """Concurrent readers compute each entry once and agree on it."""
        calls = []

        def counting_year_fraction(days):
            calls.append(days)
            return days / 365.0

        builder = VarianceBuilder(SMILES, counting_year_fraction)
        results = []

        def worker():
            results.append(builder.variance_at(30, 25))

        threads = [threading.Thread(target=worker) for _ in range(16)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        assert len(set(results)) == 1
        assert calls == [30]
