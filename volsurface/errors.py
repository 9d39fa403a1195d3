"""Exception types raised by the volatility surface engine."""


class VolSurfaceError(ValueError):
    """Base class for all volatility surface errors."""
    pass


class ConstructionError(VolSurfaceError):
    """Raised when a surface cannot be built from the supplied raw data."""
    pass


class ValidationError(VolSurfaceError):
    """Raised when a surface is required to be valid and is not."""
    pass


class QueryError(VolSurfaceError):
    """Raised for malformed or unsupported volatility queries."""
    pass


class ConvergenceError(VolSurfaceError):
    """Raised when the strike to delta iteration does not settle."""
    pass


class DataError(VolSurfaceError):
    """Raised when the surface data cannot answer a query."""
    pass
