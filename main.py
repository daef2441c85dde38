"""Entry point for running the speedtest sensor."""

from __future__ import annotations

import sys

from speedsensor.cli import main


if __name__ == "__main__":
    sys.exit(main())
