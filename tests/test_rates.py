"""Tests for rate curves."""

import pytest
from volsurface.market.rates import FlatRateCurve, RateCurve, TermRateCurve


class TestRateCurves:

    def test_flat(self):
        curve = FlatRateCurve(0.035)
        assert curve.rate_for(1) == 0.035
        assert curve.rate_for(3650) == 0.035

    def test_term_interpolation(self):
        curve = TermRateCurve({7: 0.01, 30: 0.03})
        assert curve.rate_for(18.5) == pytest.approx(0.02)

    def test_term_flat_outside(self):
        curve = TermRateCurve({30: 0.03, 7: 0.01})
        assert curve.rate_for(1) == pytest.approx(0.01)
        assert curve.rate_for(365) == pytest.approx(0.03)

    def test_protocol(self):
        assert isinstance(FlatRateCurve(0.0), RateCurve)
        assert isinstance(TermRateCurve({1: 0.0}), RateCurve)

    def test_empty_term_curve(self):
        with pytest.raises(ValueError):
            TermRateCurve({})
