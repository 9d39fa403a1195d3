"""Market data collaborators consumed by the surface."""

from .rates import RateCurve, FlatRateCurve, TermRateCurve

__all__ = ["RateCurve", "FlatRateCurve", "TermRateCurve"]
