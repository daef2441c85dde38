"""Sensor payload rendering and persistence."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Iterable, Optional
from xml.sax.saxutils import escape

from .config import AppConfig
from .measurements.models import OutputRow

LOGGER = logging.getLogger(__name__)

ROW_TEMPLATE = "<SPEEDTEST><CHANNEL>{channel}</CHANNEL><SPEED>{value}</SPEED><UNIT>{unit}</UNIT></SPEEDTEST>"


class SensorExporter:
    def __init__(self, config: AppConfig):
        self.config = config

    def build_payload(self, rows: Iterable[OutputRow]) -> str:
        return "".join(self._render_row(row) for row in rows)

    def _render_row(self, row: OutputRow) -> str:
        return ROW_TEMPLATE.format(
            channel=escape(row.channel),
            value=self._format_value(row.value),
            unit=escape(row.unit),
        )

    def _format_value(self, value: float) -> str:
        # fixed point keeps small values out of scientific notation
        return f"{value:.{self.config.speedtest.precision}f}"

    def write_snapshot(self, payload: str, target: Optional[Path] = None) -> Optional[Path]:
        target = target or self.config.output_path
        if target is None:
            return None
        target.parent.mkdir(parents=True, exist_ok=True)
        target.write_text(payload, encoding="utf-8")
        LOGGER.info("Wrote sensor output to %s", target)
        return target
