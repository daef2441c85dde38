"""Error kinds raised while producing a sensor reading."""

from __future__ import annotations

from typing import Iterable


class SpeedtestError(Exception):
    """Base class for every failure surfaced to the command line."""


class ConfigError(SpeedtestError, ValueError):
    pass


class ExecutableNotFound(SpeedtestError):
    """The speedtest binary could not be located, downloaded or launched."""


class AttemptError(SpeedtestError):
    """A single attempt failed in a way that is worth retrying."""


class AttemptParseFailure(AttemptError):
    pass


class IncompleteResult(AttemptParseFailure):
    """A result payload is missing a numeric or text field it must carry."""


class AttemptWrongKind(AttemptError):
    def __init__(self, kind: object):
        super().__init__(f"speedtest reported a '{kind}' message instead of a result")
        self.kind = kind


class RetriesExhausted(SpeedtestError):
    def __init__(self, attempts: int):
        super().__init__(f"no successful measurement after {attempts} attempts")
        self.attempts = attempts


class UnexpectedResultShape(SpeedtestError):
    """A result payload lacks whole sub-records, usually an incompatible CLI version."""

    def __init__(self, missing: Iterable[str]):
        self.missing = tuple(missing)
        super().__init__(
            "unexpected result shape from speedtest (missing: %s)" % ", ".join(self.missing)
        )
