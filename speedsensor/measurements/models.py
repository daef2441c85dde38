"""Shared dataclasses for measurements."""

from __future__ import annotations

import json
import math
from dataclasses import dataclass, field
from typing import Any, Dict, List, Mapping, Optional

from ..errors import (
    AttemptError,
    AttemptParseFailure,
    AttemptWrongKind,
    IncompleteResult,
    RetriesExhausted,
    UnexpectedResultShape,
)

RESULT_KIND = "result"
REQUIRED_SECTIONS = ("download", "upload", "ping", "server")


@dataclass(frozen=True)
class InterfaceInfo:
    internal_ip: Optional[str]
    external_ip: Optional[str]
    is_vpn: bool
    name: Optional[str] = None
    mac_address: Optional[str] = None


@dataclass(frozen=True)
class ServerInfo:
    id: Optional[int]
    name: str
    location: str
    country: str
    host: Optional[str] = None
    port: Optional[int] = None
    ip: Optional[str] = None

    @property
    def label(self) -> str:
        return f"{self.name} ({self.location} - {self.country})"


@dataclass(frozen=True)
class TransferStats:
    bandwidth: float  # bytes per second
    bytes: Optional[int] = None
    elapsed_ms: Optional[int] = None


@dataclass(frozen=True)
class PingStats:
    latency_ms: float
    jitter_ms: float
    low_ms: Optional[float] = None
    high_ms: Optional[float] = None


@dataclass(frozen=True)
class MeasurementResult:
    """A completed ``type == "result"`` payload from the Ookla CLI."""

    download: TransferStats
    upload: TransferStats
    ping: PingStats
    server: ServerInfo
    packet_loss_percent: Optional[float] = None
    isp: Optional[str] = None
    interface: Optional[InterfaceInfo] = None
    timestamp: Optional[str] = None
    result_url: Optional[str] = None
    raw_json: Dict[str, Any] = field(default_factory=dict, compare=False, repr=False)

    @classmethod
    def from_payload(cls, payload: Mapping[str, Any]) -> "MeasurementResult":
        missing = [name for name in REQUIRED_SECTIONS if not isinstance(payload.get(name), Mapping)]
        if missing:
            raise UnexpectedResultShape(missing)

        download = payload["download"]
        upload = payload["upload"]
        ping = payload["ping"]
        server = payload["server"]

        packet_loss = payload.get("packetLoss")
        interface = payload.get("interface")
        result = payload.get("result") or {}

        return cls(
            download=TransferStats(
                bandwidth=_number(download, "bandwidth", "download"),
                bytes=download.get("bytes"),
                elapsed_ms=download.get("elapsed"),
            ),
            upload=TransferStats(
                bandwidth=_number(upload, "bandwidth", "upload"),
                bytes=upload.get("bytes"),
                elapsed_ms=upload.get("elapsed"),
            ),
            ping=PingStats(
                latency_ms=_number(ping, "latency", "ping"),
                jitter_ms=_number(ping, "jitter", "ping"),
                low_ms=ping.get("low"),
                high_ms=ping.get("high"),
            ),
            server=ServerInfo(
                id=server.get("id"),
                name=_text(server, "name", "server"),
                location=_text(server, "location", "server"),
                country=_text(server, "country", "server"),
                host=server.get("host"),
                port=server.get("port"),
                ip=server.get("ip"),
            ),
            packet_loss_percent=None if packet_loss is None else _number(payload, "packetLoss", "result"),
            isp=payload.get("isp"),
            interface=_interface(interface) if isinstance(interface, Mapping) else None,
            timestamp=payload.get("timestamp"),
            result_url=result.get("url") if isinstance(result, Mapping) else None,
            raw_json=dict(payload),
        )


@dataclass(frozen=True)
class OutputRow:
    channel: str
    value: float
    unit: str


@dataclass
class RetryState:
    max_attempts: int
    attempts_made: int = 0
    succeeded: bool = False
    last_result: Optional[MeasurementResult] = None


@dataclass
class RetryOutcome:
    """Tagged result of a retry run: either a measurement or the failures seen."""

    state: RetryState
    failures: List[AttemptError] = field(default_factory=list)

    @property
    def succeeded(self) -> bool:
        return self.state.succeeded

    @property
    def attempts(self) -> int:
        return self.state.attempts_made

    @property
    def result(self) -> Optional[MeasurementResult]:
        return self.state.last_result

    def unwrap(self) -> MeasurementResult:
        if not self.state.succeeded or self.state.last_result is None:
            raise RetriesExhausted(self.state.attempts_made)
        return self.state.last_result


def parse_measurement(raw_text: str) -> MeasurementResult:
    """Turn the captured CLI output into a result or raise the attempt error.

    stderr is merged into the text, so the CLI may have written ``log``
    messages on their own lines around the result object.
    """

    payloads = _json_objects(raw_text)
    if not payloads:
        raise AttemptParseFailure("speedtest output did not contain a JSON object")

    for payload in payloads:
        if payload.get("type") == RESULT_KIND:
            return MeasurementResult.from_payload(payload)

    raise AttemptWrongKind(payloads[-1].get("type"))


def _json_objects(raw_text: str) -> List[Dict[str, Any]]:
    if not isinstance(raw_text, str) or not raw_text.strip():
        return []
    try:
        whole = json.loads(raw_text)
    except ValueError:
        pass
    else:
        return [whole] if isinstance(whole, dict) else []

    objects = []
    for line in raw_text.splitlines():
        try:
            candidate = json.loads(line)
        except ValueError:
            continue
        if isinstance(candidate, dict):
            objects.append(candidate)
    return objects


def _number(section: Mapping[str, Any], key: str, section_name: str) -> float:
    value = section.get(key)
    # bool is an int subclass but never a measurement
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise IncompleteResult(f"{section_name}.{key} is missing or not a number")
    try:
        number = float(value)
    except OverflowError as exc:
        raise IncompleteResult(f"{section_name}.{key} is out of range") from exc
    if not math.isfinite(number):
        raise IncompleteResult(f"{section_name}.{key} is missing or not a number")
    return number


def _text(section: Mapping[str, Any], key: str, section_name: str) -> str:
    value = section.get(key)
    if not isinstance(value, str):
        raise IncompleteResult(f"{section_name}.{key} is missing or not a string")
    return value


def _interface(data: Mapping[str, Any]) -> InterfaceInfo:
    return InterfaceInfo(
        internal_ip=data.get("internalIp"),
        external_ip=data.get("externalIp"),
        is_vpn=bool(data.get("isVpn", False)),
        name=data.get("name"),
        mac_address=data.get("macAddr"),
    )
