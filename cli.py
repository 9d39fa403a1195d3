#!/usr/bin/env python3
"""
Volatility Surface - CLI Entry Point

Query interpolated volatilities and validate surfaces stored as YAML.
"""

import argparse
import json
import logging
import sys
from pathlib import Path

from volsurface.cli.common import (
    setup_logging,
    load_config,
    load_surface,
    parse_datetime,
    handle_cli_exceptions,
    add_common_arguments,
)
from volsurface.models.query import QueryTarget, VolQuery


def run_vol(args: argparse.Namespace, logger: logging.Logger) -> int:
    """Print the volatility for one query."""
    config = load_config(args.config, logger)
    surface = load_surface(args.surface, config)

    query = VolQuery(
        target=QueryTarget(args.target),
        value=args.value,
        from_date=parse_datetime(args.from_date) if args.from_date else surface.recorded_date,
        to_date=parse_datetime(args.to_date),
        spot=args.spot,
    )
    vol = surface.get_volatility(query)
    logger.info(
        f"{surface.symbol} {query.target.value}={query.value} "
        f"[{query.from_date.isoformat()} -> {query.to_date.isoformat()}]: {vol:.6f}"
    )
    print(f"{vol:.6f}")
    return 0


def run_validate(args: argparse.Namespace, logger: logging.Logger) -> int:
    """Print the validation report; exit code 1 when invalid."""
    config = load_config(args.config, logger)
    surface = load_surface(args.surface, config)
    report = surface.validate()

    if args.json:
        print(json.dumps({
            "underlying": surface.symbol,
            "valid": report.is_valid,
            "checks": [
                {"name": r.name, "status": r.status.value, "message": r.message}
                for r in report.results
            ],
        }, indent=2))
    else:
        for result in report.results:
            print(f"[{result.status.value.upper():4}] {result.name}: {result.message}")

    if not report.is_valid:
        logger.error(f"Surface invalid: {report.error_message}")
        return 1
    logger.info("Surface valid")
    return 0


@handle_cli_exceptions
def main():
    """Main entry point."""
    parser = argparse.ArgumentParser(
        description="Volatility Surface - interpolate and validate volatility surfaces"
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    vol_parser = subparsers.add_parser("vol", help="Interpolate a volatility")
    add_common_arguments(vol_parser)
    vol_parser.add_argument("surface", type=Path, help="Surface YAML file")
    vol_parser.add_argument(
        "--target",
        choices=[t.value for t in QueryTarget],
        default="delta",
        help="Coordinate of --value (default: delta)"
    )
    vol_parser.add_argument("--value", type=float, required=True, help="Query point")
    vol_parser.add_argument(
        "--from", dest="from_date",
        help="Window start (default: surface recorded date)"
    )
    vol_parser.add_argument("--to", dest="to_date", required=True, help="Window end")
    vol_parser.add_argument("--spot", type=float, default=None, help="Spot price")

    validate_parser = subparsers.add_parser("validate", help="Validate a surface")
    add_common_arguments(validate_parser)
    validate_parser.add_argument("surface", type=Path, help="Surface YAML file")
    validate_parser.add_argument("--json", action="store_true", help="JSON output")

    args = parser.parse_args()

    setup_logging(args.verbose)
    logger = logging.getLogger(__name__)

    if args.command == "vol":
        sys.exit(run_vol(args, logger))
    sys.exit(run_validate(args, logger))


if __name__ == "__main__":
    main()
