"""Configuration loading helpers for the speedtest sensor."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, Optional
import platform
import yaml

from .errors import ConfigError

RETRY_DELAY_SECONDS = 5
PRECISION_RANGE = range(0, 9)
RETRIES_RANGE = range(0, 5)

DEFAULT_OOKLA_URLS = {
    "linux_x86_64": "https://install.speedtest.net/app/cli/ookla-speedtest-1.2.0-linux-x86_64.tgz",
    "linux_aarch64": "https://install.speedtest.net/app/cli/ookla-speedtest-1.2.0-linux-aarch64.tgz",
    "darwin_x86_64": "https://install.speedtest.net/app/cli/ookla-speedtest-1.2.0-macosx-universal.tgz",
    "darwin_aarch64": "https://install.speedtest.net/app/cli/ookla-speedtest-1.2.0-macosx-universal.tgz",
    "windows_x86_64": "https://install.speedtest.net/app/cli/ookla-speedtest-1.2.0-win64.zip",
}


@dataclass
class PathsConfig:
    logs_dir: Path
    bin_dir: Path


@dataclass
class OoklaConfig:
    auto_download: bool = False
    binary_name: str = "speedtest"
    urls: Dict[str, str] = field(default_factory=lambda: dict(DEFAULT_OOKLA_URLS))


@dataclass
class SpeedtestConfig:
    server_id: Optional[str] = None
    output_file: Optional[str] = None
    precision: int = 1
    retries: int = 2
    accept_gdpr: bool = False
    timeout_seconds: Optional[float] = None

    def validate(self) -> None:
        if self.precision not in PRECISION_RANGE:
            raise ConfigError(f"precision must be between 0 and 8, got {self.precision}")
        if self.retries not in RETRIES_RANGE:
            raise ConfigError(f"retries must be between 0 and 4, got {self.retries}")
        if self.timeout_seconds is not None and self.timeout_seconds <= 0:
            raise ConfigError("timeout_seconds must be positive when set")


@dataclass
class LoggingConfig:
    level: str = "INFO"


@dataclass
class AppConfig:
    root_dir: Path
    paths: PathsConfig
    ookla: OoklaConfig
    speedtest: SpeedtestConfig
    logging: LoggingConfig

    @property
    def ookla_platform_key(self) -> str:
        system = platform.system().lower()
        machine = platform.machine().lower()
        # Normalize machine architecture names
        if machine in ("amd64", "x86_64"):
            machine = "x86_64"
        elif machine in ("arm64", "aarch64"):
            machine = "aarch64"
        return f"{system}_{machine}"

    @property
    def output_path(self) -> Optional[Path]:
        if not self.speedtest.output_file:
            return None
        return (self.root_dir / self.speedtest.output_file).resolve()


def _as_path(base: Path, maybe_path: Optional[str]) -> Path:
    if not maybe_path:
        raise ConfigError("Path configuration entries cannot be empty")
    path = (base / maybe_path).resolve()
    path.mkdir(parents=True, exist_ok=True)
    return path


def _section(data: dict, name: str) -> dict:
    section = data.get(name) or {}
    if not isinstance(section, dict):
        raise ConfigError(f"Configuration section '{name}' must be a mapping")
    return section


def load_config(path: Optional[str] = None) -> AppConfig:
    """Load configuration from a YAML file.

    An explicit ``path`` must exist. Without one, ``config.yaml`` in the
    working directory is used when present and built-in defaults otherwise.
    """

    if path:
        source_path: Optional[Path] = Path(path).resolve()
        if not source_path.exists():
            raise FileNotFoundError(f"Missing configuration file at {source_path}")
        root_dir = source_path.parent
    else:
        root_dir = Path.cwd()
        source_path = root_dir / "config.yaml"
        if not source_path.exists():
            source_path = None

    data: dict = {}
    if source_path is not None:
        with source_path.open("r", encoding="utf-8") as handle:
            data = yaml.safe_load(handle) or {}
        if not isinstance(data, dict):
            raise ConfigError(f"Configuration file {source_path} must contain a mapping")

    paths_data = _section(data, "paths")
    paths = PathsConfig(
        logs_dir=_as_path(root_dir, paths_data.get("logs_dir", "logs")),
        bin_dir=_as_path(root_dir, paths_data.get("bin_dir", "bin")),
    )

    try:
        config = AppConfig(
            root_dir=root_dir,
            paths=paths,
            ookla=OoklaConfig(**_section(data, "ookla")),
            speedtest=SpeedtestConfig(**_section(data, "speedtest")),
            logging=LoggingConfig(**_section(data, "logging")),
        )
    except TypeError as exc:
        raise ConfigError(f"Invalid configuration: {exc}") from exc

    config.speedtest.validate()
    return config


def apply_overrides(config: AppConfig, **overrides) -> AppConfig:
    """Apply command line values on top of the loaded speedtest settings."""

    for name, value in overrides.items():
        if not hasattr(config.speedtest, name):
            raise ConfigError(f"Unknown speedtest setting '{name}'")
        # unset flags keep the file value
        if value is None or value is False:
            continue
        setattr(config.speedtest, name, value)
    config.speedtest.validate()
    return config
