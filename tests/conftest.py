"""Shared fixtures for the sensor tests."""

from __future__ import annotations

import copy
import json
from pathlib import Path
from typing import Any, Dict

import pytest

from speedsensor.config import AppConfig, load_config

RESULT_PAYLOAD: Dict[str, Any] = {
    "type": "result",
    "timestamp": "2026-10-19T08:15:02Z",
    "ping": {"jitter": 1.2, "latency": 12.345, "low": 11.8, "high": 14.1},
    "download": {"bandwidth": 125000000, "bytes": 1180000000, "elapsed": 9500},
    "upload": {"bandwidth": 62500000, "bytes": 590000000, "elapsed": 9400},
    "packetLoss": 0.5,
    "isp": "Example ISP",
    "interface": {
        "internalIp": "192.168.1.20",
        "name": "eth0",
        "macAddr": "AA:BB:CC:DD:EE:FF",
        "isVpn": False,
        "externalIp": "203.0.113.7",
    },
    "server": {
        "id": 4242,
        "host": "speedtest.example.net",
        "port": 8080,
        "name": "ServerA",
        "location": "CityX",
        "country": "CountryY",
        "ip": "198.51.100.10",
    },
    "result": {"id": "abc-123", "url": "https://www.speedtest.net/result/c/abc-123", "persisted": True},
}


@pytest.fixture
def result_payload() -> Dict[str, Any]:
    return copy.deepcopy(RESULT_PAYLOAD)


@pytest.fixture
def result_json(result_payload: Dict[str, Any]) -> str:
    return json.dumps(result_payload)


@pytest.fixture
def config_file(tmp_path: Path) -> Path:
    path = tmp_path / "config.yaml"
    path.write_text(
        """
paths:
  logs_dir: logs
  bin_dir: bin
speedtest:
  precision: 1
  retries: 2
""",
        encoding="utf-8",
    )
    return path


@pytest.fixture
def app_config(config_file: Path) -> AppConfig:
    return load_config(str(config_file))
