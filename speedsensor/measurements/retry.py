"""Bounded retry loop around the speedtest invocation."""

from __future__ import annotations

import logging
import time
from typing import Callable, Optional

from ..config import RETRY_DELAY_SECONDS
from ..errors import AttemptError
from .models import RetryOutcome, RetryState, parse_measurement

LOGGER = logging.getLogger(__name__)


def run_with_retry(
    invoke: Callable[[], str],
    max_retries: int,
    delay_seconds: float = RETRY_DELAY_SECONDS,
    logger: Optional[logging.Logger] = None,
    sleep: Callable[[float], None] = time.sleep,
) -> RetryOutcome:
    """Run ``invoke`` until it yields a result, at most ``max_retries + 1`` times.

    Parse failures and non-result messages are retried after ``delay_seconds``.
    Any other error (missing binary, result with an unexpected shape)
    propagates on the attempt that raised it.
    """

    if max_retries < 0:
        raise ValueError("max_retries cannot be negative")

    log = logger or LOGGER
    outcome = RetryOutcome(state=RetryState(max_attempts=max_retries + 1))
    state = outcome.state

    while state.attempts_made < state.max_attempts:
        state.attempts_made += 1
        attempt = state.attempts_made
        log.info("Running speedtest (attempt %d of %d)", attempt, state.max_attempts)

        raw_output = invoke()
        log.debug("Attempt %d raw output:\n%s", attempt, raw_output)

        try:
            result = parse_measurement(raw_output)
        except AttemptError as exc:
            outcome.failures.append(exc)
            log.warning("Attempt %d of %d failed: %s", attempt, state.max_attempts, exc)
            if state.attempts_made < state.max_attempts:
                log.info("Retrying in %s seconds", delay_seconds)
                sleep(delay_seconds)
            continue

        state.succeeded = True
        state.last_result = result
        log.info("Speedtest succeeded on attempt %d", attempt)
        break
    else:
        log.error("No successful measurement after %d attempts", state.attempts_made)

    return outcome
