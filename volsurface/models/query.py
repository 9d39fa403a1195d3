"""Volatility query value objects."""

from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Any, Mapping, Optional

from ..errors import QueryError


class QueryTarget(Enum):
    """Coordinate a query's value is expressed in."""
    DELTA = "delta"
    STRIKE = "strike"
    MONEYNESS = "moneyness"


@dataclass(frozen=True)
class VolQuery:
    """A request for the volatility over [from_date, to_date] at one smile point."""
    target: QueryTarget
    value: float
    from_date: datetime
    to_date: datetime
    spot: Optional[float] = None

    def __post_init__(self):
        if not isinstance(self.target, QueryTarget):
            raise QueryError(f"target must be a QueryTarget, got {self.target!r}")
        if not isinstance(self.from_date, datetime) or not isinstance(self.to_date, datetime):
            raise QueryError("from_date and to_date must be datetime instances")

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> "VolQuery":
        """Build a query from ``{delta|strike|moneyness, from, to, spot?}``.

        Exactly one of the target keys must be present.
        """
        targets = [t for t in QueryTarget if t.value in data]
        if len(targets) != 1:
            raise QueryError(
                "Query must specify exactly one of delta, strike or moneyness, "
                f"got {sorted(t.value for t in targets)}"
            )
        for key in ("from", "to"):
            if key not in data:
                raise QueryError(f"Query is missing '{key}'")

        target = targets[0]
        spot = data.get("spot")
        try:
            value = float(data[target.value])
            spot = None if spot is None else float(spot)
        except (TypeError, ValueError) as e:
            raise QueryError(f"Query values must be numeric: {e}")

        return cls(
            target=target,
            value=value,
            from_date=data["from"],
            to_date=data["to"],
            spot=spot,
        )
