"""Application bootstrap helpers."""

from __future__ import annotations

from pathlib import Path
from typing import Optional

from .config import AppConfig, apply_overrides, load_config
from .exporter import SensorExporter
from .logging_setup import configure_logging
from .measurements.manager import MeasurementManager


class ApplicationContext:
    """Holds the collaborators for one sensor run."""

    def __init__(self, config: AppConfig, debug: bool = False):
        self.config = config
        configure_logging(config, debug=debug)
        self.measurements = MeasurementManager(config)
        self.exporter = SensorExporter(config)

    def run(self) -> str:
        """Measure, render and persist; returns the sensor payload."""
        rows = self.measurements.collect_rows()
        payload = self.exporter.build_payload(rows)
        self.exporter.write_snapshot(payload)
        return payload


def bootstrap(config_path: Optional[str] = None, debug: bool = False, **overrides) -> ApplicationContext:
    """Load configuration, apply command line overrides and wire dependencies."""

    config_file = Path(config_path).resolve() if config_path else None
    config = load_config(str(config_file)) if config_file else load_config()
    apply_overrides(config, **overrides)
    return ApplicationContext(config, debug=debug)
