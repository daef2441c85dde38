"""Projection of a speedtest result onto the six sensor channels."""

from __future__ import annotations

from decimal import ROUND_HALF_UP, Decimal, localcontext
from typing import Any, Mapping, Tuple, Union

from .models import MeasurementResult, OutputRow

BYTES_PER_MEGABIT = 125_000

DOWNLOAD_SPEED = "Download Speed"
UPLOAD_SPEED = "Upload Speed"
LATENCY = "Latency"
JITTER = "Jitter"
PACKET_LOSS = "Packet Loss"
SPEEDTEST_SERVER = "Speedtest Server"

CHANNELS = (DOWNLOAD_SPEED, UPLOAD_SPEED, LATENCY, JITTER, PACKET_LOSS, SPEEDTEST_SERVER)


def round_half_away(value: float, precision: int) -> float:
    """Round to ``precision`` decimals, ties away from zero.

    Works on the shortest decimal repr of the float, so 2.675 rounds to 2.68.
    """
    exact = Decimal(repr(float(value)))
    quantum = Decimal(1).scaleb(-precision)
    with localcontext() as context:
        # room for every integer digit plus the requested decimals
        context.prec = max(context.prec, exact.adjusted() + precision + 2)
        return float(exact.quantize(quantum, rounding=ROUND_HALF_UP))


def normalize(
    result: Union[MeasurementResult, Mapping[str, Any]],
    precision: int,
) -> Tuple[OutputRow, ...]:
    if isinstance(precision, bool) or not isinstance(precision, int) or not 0 <= precision <= 8:
        raise ValueError(f"precision must be an integer between 0 and 8, got {precision!r}")
    if not isinstance(result, MeasurementResult):
        result = MeasurementResult.from_payload(result)

    packet_loss = result.packet_loss_percent or 0.0

    return (
        OutputRow(DOWNLOAD_SPEED, round_half_away(result.download.bandwidth / BYTES_PER_MEGABIT, precision), "Mb/s"),
        OutputRow(UPLOAD_SPEED, round_half_away(result.upload.bandwidth / BYTES_PER_MEGABIT, precision), "Mb/s"),
        OutputRow(LATENCY, round_half_away(result.ping.latency_ms, precision), "ms"),
        OutputRow(JITTER, round_half_away(result.ping.jitter_ms, precision), "ms"),
        OutputRow(PACKET_LOSS, round_half_away(packet_loss, precision), "%"),
        OutputRow(SPEEDTEST_SERVER, 0.0, result.server.label),
    )
