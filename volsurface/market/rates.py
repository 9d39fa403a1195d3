"""Interest rate curve protocol and simple implementations.

Delta surfaces queried by strike need a domestic (r) and foreign/dividend (q)
rate for the query tenor. Any object with ``rate_for(days)`` can be supplied.
"""

from typing import Mapping, Protocol, runtime_checkable
import numpy as np


@runtime_checkable
class RateCurve(Protocol):
    """Protocol for continuously-compounded rate curves."""

    def rate_for(self, days: float) -> float:
        """Annualized rate applying to a term of ``days`` calendar days."""
        ...


class FlatRateCurve:
    """Single rate for every term."""

    def __init__(self, rate: float):
        self.rate = float(rate)

    def rate_for(self, days: float) -> float:
        return self.rate

    def __repr__(self) -> str:
        return f"FlatRateCurve(rate={self.rate})"


class TermRateCurve:
    """Rates quoted by term in days, linear in days and flat outside."""

    def __init__(self, rates: Mapping[float, float]):
        """Initialize the curve.

        Args:
            rates: Mapping from term in calendar days to annualized rate.
        """
        if not rates:
            raise ValueError("TermRateCurve needs at least one rate")
        terms = sorted(float(t) for t in rates)
        if terms[0] < 0:
            raise ValueError(f"Rate terms must be non-negative, got {terms[0]}")
        self._terms = np.array(terms)
        self._rates = np.array([float(rates[t]) for t in sorted(rates, key=float)])

    def rate_for(self, days: float) -> float:
        return float(np.interp(days, self._terms, self._rates))

    def __repr__(self) -> str:
        return f"TermRateCurve(terms={self._terms.tolist()})"
