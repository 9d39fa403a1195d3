"""Tests for smile interpolation."""

import pytest
from volsurface.errors import DataError
from volsurface.models.interpolation import SmileInterpolator


SMILE = {25: 0.12, 50: 0.10, 75: 0.11}


class TestExactMatch:
    """Quoted points come back unchanged."""

    def setup_method(self):
        self.interp = SmileInterpolator()

    def test_exact_keys_round_trip(self):
        """Every quoted point returns its stored value exactly."""
        for point, vol in SMILE.items():
            assert self.interp.interpolate(SMILE, point) == vol

    def test_float_query_matches_int_key(self):
        assert self.interp.interpolate(SMILE, 50.0) == 0.10

    def test_single_point_is_flat(self):
        """A one-point smile is flat everywhere."""
        smile = {100: 0.15}
        assert self.interp.interpolate(smile, 80) == 0.15
        assert self.interp.interpolate(smile, 130) == 0.15

    def test_empty_smile_raises(self):
        with pytest.raises(DataError):
            self.interp.interpolate({}, 50)


class TestQuadratic:
    """Quadratic fit through the nearest three quotes."""

    def setup_method(self):
        self.interp = SmileInterpolator()

    def test_interior_point(self):
        """Lagrange weights at 40 are (0.28, 0.84, -0.12)."""
        expected = 0.28 * 0.12 + 0.84 * 0.10 - 0.12 * 0.11
        assert self.interp.interpolate(SMILE, 40) == pytest.approx(expected, abs=1e-12)

    def test_extrapolation_is_not_clamped(self):
        """Beyond the wings the quadratic keeps going."""
        expected = 2.08 * 0.12 - 1.56 * 0.10 + 0.48 * 0.11
        vol = self.interp.interpolate(SMILE, 10)
        assert vol == pytest.approx(expected, abs=1e-12)
        assert vol > max(SMILE.values())

    def test_two_points_linear(self):
        smile = {25: 0.2, 75: 0.4}
        assert self.interp.interpolate(smile, 50) == pytest.approx(0.3)
        assert self.interp.interpolate(smile, 100) == pytest.approx(0.5)

    def test_uses_nearest_three(self):
        """Far quotes do not influence the fit."""
        def parabola(x):
            return 0.1 + 0.0001 * (x - 50) ** 2

        smile = {10: parabola(10), 25: parabola(25), 50: parabola(50), 75: 0.5, 90: 0.9}
        assert self.interp.interpolate(smile, 30) == pytest.approx(parabola(30), abs=1e-12)

    def test_quadratic_is_reproduced_exactly(self):
        def parabola(x):
            return 0.3 - 0.002 * x + 0.00003 * x * x

        smile = {p: parabola(p) for p in (80, 90, 100, 110, 120)}
        for x in (85, 97.5, 104, 119):
            assert self.interp.interpolate(smile, x) == pytest.approx(parabola(x), abs=1e-12)


class TestNearestPoints:
    """Selection of the fitted quotes."""

    def test_ties_go_to_lower_point(self):
        interp = SmileInterpolator()
        assert interp.nearest_points((10.0, 25.0, 50.0, 65.0), 37.5) == (10.0, 25.0, 50.0)

    def test_result_is_ascending(self):
        interp = SmileInterpolator()
        assert interp.nearest_points((90.0, 50.0, 75.0, 25.0), 80.0) == (50.0, 75.0, 90.0)

    def test_invalid_point_count(self):
        with pytest.raises(ValueError):
            SmileInterpolator(n_points=1)
