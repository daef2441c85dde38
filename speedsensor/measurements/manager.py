"""Measurement orchestration: invoke, retry, normalize."""

from __future__ import annotations

import logging
import time
from typing import Callable, Optional, Tuple

from ..config import RETRY_DELAY_SECONDS, AppConfig
from .models import MeasurementResult, OutputRow
from .normalizer import BYTES_PER_MEGABIT, normalize
from .retry import run_with_retry
from .speedtest_runner import ensure_ookla_binary, make_invoker

LOGGER = logging.getLogger(__name__)


class MeasurementManager:
    def __init__(
        self,
        config: AppConfig,
        invoke: Optional[Callable[[], str]] = None,
        sleep: Callable[[float], None] = time.sleep,
    ):
        self.config = config
        self._invoke = invoke
        self._sleep = sleep

    def _invoker(self) -> Callable[[], str]:
        if self._invoke is None:
            binary_path = ensure_ookla_binary(self.config)
            LOGGER.debug("Using speedtest CLI at %s", binary_path)
            self._invoke = make_invoker(self.config, binary_path)
        return self._invoke

    def run_speedtest(self) -> MeasurementResult:
        invoke = self._invoker()
        outcome = run_with_retry(
            invoke,
            max_retries=self.config.speedtest.retries,
            delay_seconds=RETRY_DELAY_SECONDS,
            logger=LOGGER,
            sleep=self._sleep,
        )
        result = outcome.unwrap()
        LOGGER.info(
            "Measured %.2f Mbps down / %.2f Mbps up via %s (%s)",
            result.download.bandwidth / BYTES_PER_MEGABIT,
            result.upload.bandwidth / BYTES_PER_MEGABIT,
            result.server.name,
            result.isp or "unknown ISP",
        )
        if result.result_url:
            LOGGER.debug("Result URL: %s", result.result_url)
        return result

    def collect_rows(self) -> Tuple[OutputRow, ...]:
        return normalize(self.run_speedtest(), self.config.speedtest.precision)
