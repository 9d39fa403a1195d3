"""Common CLI utilities: logging, configuration, surface files, error handling."""

import argparse
import logging
import sys
from datetime import datetime
from functools import wraps
from pathlib import Path
from typing import Any, Callable, Union

import yaml
from dateutil import parser as dateutil_parser

from volsurface.config import Config
from volsurface.errors import VolSurfaceError
from volsurface.market.rates import FlatRateCurve, TermRateCurve
from volsurface.models.surface import VolSurface
from volsurface.utils.dates import ensure_utc


# =============================================================================
# Logging Setup
# =============================================================================

def setup_logging(verbose: bool, datefmt: str = "%Y-%m-%d %H:%M:%S") -> None:
    """Configure logging.

    Args:
        verbose: If True, use DEBUG level; otherwise INFO.
        datefmt: Date format string for log timestamps.
    """
    level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(
        level=level,
        format="%(asctime)s - %(levelname)s - %(message)s",
        datefmt=datefmt
    )


# =============================================================================
# Configuration
# =============================================================================

def load_config(config_path: Path, logger: logging.Logger) -> Config:
    """Load configuration from path or use defaults.

    Args:
        config_path: Path to YAML configuration file.
        logger: Logger instance for status messages.

    Returns:
        Config object (loaded from file or defaults).
    """
    if config_path.exists():
        logger.info(f"Loading configuration from {config_path}")
        return Config.from_yaml(config_path)
    else:
        logger.info("Using default configuration")
        return Config()


# =============================================================================
# Date/Time Parsing
# =============================================================================

def parse_datetime(value: Union[str, datetime]) -> datetime:
    """Parse an ISO-like timestamp to an aware UTC datetime (naive = UTC)."""
    if isinstance(value, datetime):
        return ensure_utc(value)
    try:
        return ensure_utc(dateutil_parser.parse(str(value)))
    except (ValueError, TypeError, OverflowError) as e:
        raise VolSurfaceError(f"Could not parse datetime {value!r}: {e}")


# =============================================================================
# Surface Files
# =============================================================================

def _rate_curve(value: Any):
    if value is None:
        return None
    if isinstance(value, dict):
        return TermRateCurve(value)
    return FlatRateCurve(float(value))


def load_surface(path: Path, config: Config) -> VolSurface:
    """Build a surface from a YAML file.

    Expected layout::

        underlying: frxEURUSD
        type: delta
        recorded_date: 2024-06-03T10:00:00Z
        r_rates: 0.05            # flat rate or {days: rate}
        q_rates: {7: 0.01, 30: 0.012}
        surface:
          ON: {smile: {25: 0.12, 50: 0.1, 75: 0.11}, spread: {50: 0.04}}
          1W: {...}
    """
    with open(path, "r") as f:
        data = yaml.safe_load(f) or {}

    for key in ("underlying", "type", "recorded_date", "surface"):
        if key not in data:
            raise VolSurfaceError(f"Surface file {path} is missing '{key}'")

    return VolSurface(
        surface=data["surface"],
        surface_type=data["type"],
        recorded_date=parse_datetime(data["recorded_date"]),
        underlying=str(data["underlying"]),
        r_rates=_rate_curve(data.get("r_rates")),
        q_rates=_rate_curve(data.get("q_rates")),
        config=config,
    )


# =============================================================================
# CLI Exception Handling
# =============================================================================

def handle_cli_exceptions(func: Callable) -> Callable:
    """Decorator to handle common CLI exceptions.

    Catches surface errors, KeyboardInterrupt, and general exceptions,
    logs them appropriately, and exits with appropriate codes.

    Args:
        func: Function to wrap.

    Returns:
        Wrapped function with exception handling.
    """
    @wraps(func)
    def wrapper(*args: Any, **kwargs: Any) -> Any:
        logger = logging.getLogger(__name__)
        try:
            return func(*args, **kwargs)
        except VolSurfaceError as e:
            logger.error(f"{type(e).__name__}: {e}")
            sys.exit(1)
        except KeyboardInterrupt:
            logger.info("Interrupted by user")
            sys.exit(130)
        except Exception as e:
            logger.exception(f"Unexpected error: {e}")
            sys.exit(1)
    return wrapper


# =============================================================================
# CLI Argument Parsing
# =============================================================================

def add_common_arguments(parser: argparse.ArgumentParser) -> None:
    """Add --config and --verbose arguments used by every subcommand.

    Args:
        parser: ArgumentParser to add arguments to.
    """
    parser.add_argument(
        "--config",
        type=Path,
        default=Path("config.yaml"),
        help="Path to configuration file"
    )
    parser.add_argument(
        "-v", "--verbose",
        action="store_true",
        help="Enable verbose output"
    )
