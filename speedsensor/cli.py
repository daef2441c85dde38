"""Command line entry point for the speedtest sensor."""

from __future__ import annotations

import argparse
import logging
import sys
from typing import List, Optional

from . import bootstrap
from .config import PRECISION_RANGE, RETRIES_RANGE
from .errors import SpeedtestError

LOGGER = logging.getLogger(__name__)


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="Run the Ookla speedtest CLI and print the results as monitoring sensor channels"
    )
    parser.add_argument("--config", default=None, help="Path to config.yaml")
    parser.add_argument("--server-id", default=None, help="Speedtest server id to test against")
    parser.add_argument("--output-file", default=None, help="Also write the sensor output to this file")
    parser.add_argument(
        "--precision",
        type=int,
        choices=list(PRECISION_RANGE),
        default=None,
        help="Decimals in reported values (default 1)",
    )
    parser.add_argument(
        "--retries",
        type=int,
        choices=list(RETRIES_RANGE),
        default=None,
        help="Extra attempts after a failed speedtest (default 2)",
    )
    parser.add_argument("--accept-gdpr", action="store_true", help="Accept the Ookla GDPR terms")
    parser.add_argument("--debug", action="store_true", help="Log raw speedtest output")
    return parser.parse_args(argv)


def main(argv: Optional[List[str]] = None) -> int:
    args = parse_args(argv)
    try:
        context = bootstrap(
            args.config,
            debug=args.debug,
            server_id=args.server_id,
            output_file=args.output_file,
            precision=args.precision,
            retries=args.retries,
            accept_gdpr=args.accept_gdpr,
        )
        payload = context.run()
    except (SpeedtestError, OSError) as exc:
        LOGGER.error("Speedtest sensor failed: %s", exc)
        print(f"Error: {exc}", file=sys.stderr)
        return 1

    print(payload)
    return 0


if __name__ == "__main__":
    sys.exit(main())
