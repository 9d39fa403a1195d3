"""Surface type variants.

The set of surface types is closed. Behaviour that depends on the type is
dispatched explicitly on these members by the point resolver and the
validator.
"""

from enum import Enum
from typing import Union

from ..constants import DELTA_ATM_POINT, MONEYNESS_ATM_POINT
from ..errors import ConstructionError


class SurfaceType(Enum):
    """Kind of smile coordinate a surface is quoted in."""
    DELTA = "delta"
    MONEYNESS = "moneyness"
    FLAT = "flat"

    @classmethod
    def parse(cls, value: Union["SurfaceType", str, None]) -> "SurfaceType":
        """Coerce a member or its name/value to a SurfaceType.

        Raises:
            ConstructionError: If the value does not name a surface type.
        """
        if isinstance(value, cls):
            return value
        if isinstance(value, str):
            try:
                return cls(value.strip().lower())
            except ValueError:
                pass
        valid = ", ".join(sorted(member.value for member in cls))
        raise ConstructionError(f"Invalid surface type {value!r}. Must be one of: {valid}")

    @property
    def atm_point(self) -> float:
        """Smile point that is at-the-money for this type."""
        if self is SurfaceType.DELTA:
            return DELTA_ATM_POINT
        return MONEYNESS_ATM_POINT

    @property
    def atm_spread_point(self) -> float:
        """Spread point quoted at-the-money for this type."""
        return self.atm_point

    @property
    def requires_spot(self) -> bool:
        """Whether every query against this type must carry a spot."""
        return self is SurfaceType.MONEYNESS
