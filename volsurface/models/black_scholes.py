"""Black-Scholes helpers for delta-quoted surfaces.

This module implements:
- d1 on the forward
- Garman-Kohlhagen call delta (spot delta, foreign-discounted) on a 0-100 scale
- The default strike -> delta conversion used by delta surfaces
- The closed-form delta -> strike inverse for a given volatility
"""

import math
from typing import NamedTuple
from scipy.stats import norm


class Rates(NamedTuple):
    """Continuously-compounded rates for one tenor."""
    domestic: float  # r
    foreign: float   # q (foreign rate or dividend yield)


class BlackScholes:
    """Black-Scholes quantities needed to move between strike and delta."""

    @staticmethod
    def forward(spot: float, rates: Rates, ttm: float) -> float:
        """Forward price F = S * exp((r - q) * T)."""
        return spot * math.exp((rates.domestic - rates.foreign) * ttm)

    @staticmethod
    def d1(forward: float, strike: float, vol: float, ttm: float) -> float:
        """Calculate d1 for Black-Scholes.

        Args:
            forward: Forward price.
            strike: Strike price.
            vol: Volatility (annualized).
            ttm: Time to maturity in years.

        Returns:
            d1 value.
        """
        if ttm <= 0 or vol <= 0:
            return 0.0
        sqrt_t = math.sqrt(ttm)
        return (math.log(forward / strike) + 0.5 * vol * vol * ttm) / (vol * sqrt_t)

    @classmethod
    def call_delta(
        cls,
        strike: float,
        spot: float,
        rates: Rates,
        ttm: float,
        vol: float
    ) -> float:
        """Spot call delta exp(-qT) * N(d1), scaled to 0-100.

        Args:
            strike: Strike price.
            spot: Spot price.
            rates: Domestic and foreign rates for the tenor.
            ttm: Time to maturity in years.
            vol: Implied volatility.

        Returns:
            Call delta in percent.
        """
        if ttm <= 0:
            return 100.0 if spot > strike else 0.0

        forward = cls.forward(spot, rates, ttm)
        d1_val = cls.d1(forward, strike, vol, ttm)
        return 100.0 * math.exp(-rates.foreign * ttm) * norm.cdf(d1_val)

    @classmethod
    def strike_from_call_delta(
        cls,
        delta: float,
        spot: float,
        rates: Rates,
        ttm: float,
        vol: float
    ) -> float:
        """Strike whose call delta is ``delta`` (percent) at volatility ``vol``.

        Raises:
            ValueError: If the delta is not attainable at this tenor.
        """
        scaled = delta / 100.0 * math.exp(rates.foreign * ttm)
        if not 0 < scaled < 1:
            raise ValueError(f"Delta {delta} is not attainable for ttm={ttm}")

        forward = cls.forward(spot, rates, ttm)
        sqrt_t = math.sqrt(ttm)
        d1_val = norm.ppf(scaled)
        return forward * math.exp(-d1_val * vol * sqrt_t + 0.5 * vol * vol * ttm)


def strike_to_delta(
    strike: float,
    spot: float,
    rates: Rates,
    tenor: float,
    vol_guess: float
) -> float:
    """Default strike -> delta conversion for delta surfaces.

    Args:
        strike: Strike price.
        spot: Spot price.
        rates: Domestic and foreign rates for the tenor.
        tenor: Tenor in years.
        vol_guess: Volatility to evaluate the delta with.

    Returns:
        Call delta in percent.
    """
    return BlackScholes.call_delta(strike, spot, rates, tenor, vol_guess)
