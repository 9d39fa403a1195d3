"""Utility modules."""

# dates has no dependencies on models, safe to import at module level
from .dates import (
    effective_date_for,
    tenor_to_days,
    days_between,
    make_year_fraction,
    ensure_utc,
)


def __getattr__(name):
    """Lazy import of validation to avoid circular imports."""
    if name == "SurfaceValidator":
        from .validation import SurfaceValidator
        return SurfaceValidator
    elif name == "ValidationReport":
        from .validation import ValidationReport
        return ValidationReport
    elif name == "CheckStatus":
        from .validation import CheckStatus
        return CheckStatus
    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")


__all__ = [
    "SurfaceValidator",
    "ValidationReport",
    "CheckStatus",
    "effective_date_for",
    "tenor_to_days",
    "days_between",
    "make_year_fraction",
    "ensure_utc",
]
