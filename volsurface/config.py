"""Configuration management for the volatility surface engine."""

from dataclasses import dataclass, field
from pathlib import Path
import yaml

from .constants import (
    DEFAULT_YEAR_BASIS_DAYS,
    DEFAULT_MIN_VOL_SPREAD,
    DEFAULT_DELTA_TOLERANCE,
    DEFAULT_DELTA_MAX_ITERATIONS,
    DEFAULT_MAX_VOLATILITY,
    ROLLOVER_HOUR,
    ROLLOVER_TIMEZONE,
)


@dataclass
class SurfaceConfig:
    """Surface conventions configuration."""
    year_basis_days: float = DEFAULT_YEAR_BASIS_DAYS
    min_vol_spread: float = DEFAULT_MIN_VOL_SPREAD
    rollover_hour: int = ROLLOVER_HOUR
    rollover_timezone: str = ROLLOVER_TIMEZONE

    def __post_init__(self):
        if self.year_basis_days <= 0:
            raise ValueError(f"year_basis_days must be positive, got {self.year_basis_days}")
        if self.min_vol_spread < 0:
            raise ValueError(f"min_vol_spread must be non-negative, got {self.min_vol_spread}")
        if not 0 <= self.rollover_hour <= 23:
            raise ValueError(f"rollover_hour must be in [0, 23], got {self.rollover_hour}")


@dataclass
class StrikeSolverConfig:
    """Strike to delta fixed-point iteration configuration."""
    tolerance: float = DEFAULT_DELTA_TOLERANCE
    max_iterations: int = DEFAULT_DELTA_MAX_ITERATIONS

    def __post_init__(self):
        if self.tolerance <= 0:
            raise ValueError(f"tolerance must be positive, got {self.tolerance}")
        if self.max_iterations < 1:
            raise ValueError(f"max_iterations must be at least 1, got {self.max_iterations}")


@dataclass
class ValidationConfig:
    """Validation thresholds configuration."""
    max_volatility: float = DEFAULT_MAX_VOLATILITY
    require_spread: bool = True  # Delta and moneyness surfaces only


@dataclass
class Config:
    """Main configuration container."""
    surface: SurfaceConfig = field(default_factory=SurfaceConfig)
    strike_solver: StrikeSolverConfig = field(default_factory=StrikeSolverConfig)
    validation: ValidationConfig = field(default_factory=ValidationConfig)

    @classmethod
    def from_yaml(cls, path: Path) -> "Config":
        """Load configuration from YAML file."""
        with open(path, "r") as f:
            data = yaml.safe_load(f) or {}

        return cls.from_dict(data)

    @classmethod
    def from_dict(cls, data: dict) -> "Config":
        """Build configuration from a plain dictionary, section by section."""
        config = cls()

        if "surface" in data:
            config.surface = SurfaceConfig(**data["surface"])

        if "strike_solver" in data:
            config.strike_solver = StrikeSolverConfig(**data["strike_solver"])

        if "validation" in data:
            config.validation = ValidationConfig(**data["validation"])

        return config

    def to_dict(self) -> dict:
        """Convert configuration to dictionary."""
        return {
            "surface": {
                "year_basis_days": self.surface.year_basis_days,
                "min_vol_spread": self.surface.min_vol_spread,
                "rollover_hour": self.surface.rollover_hour,
                "rollover_timezone": self.surface.rollover_timezone,
            },
            "strike_solver": {
                "tolerance": self.strike_solver.tolerance,
                "max_iterations": self.strike_solver.max_iterations,
            },
            "validation": {
                "max_volatility": self.validation.max_volatility,
                "require_spread": self.validation.require_spread,
            },
        }

    def save_yaml(self, path: Path) -> None:
        """Save configuration to YAML file."""
        with open(path, "w") as f:
            yaml.dump(self.to_dict(), f, default_flow_style=False)
