"""Ookla speedtest CLI location, download and invocation."""

from __future__ import annotations

import logging
import platform
import shutil
import subprocess
import tarfile
import tempfile
import zipfile
from pathlib import Path
from typing import Callable, List

import requests

from ..config import AppConfig
from ..errors import ExecutableNotFound

LOGGER = logging.getLogger(__name__)


def _platform_binary_name(config: AppConfig) -> str:
    suffix = ".exe" if platform.system().lower().startswith("win") else ""
    binary_name = config.ookla.binary_name
    if suffix and not binary_name.endswith(suffix):
        binary_name = f"{binary_name}{suffix}"
    return binary_name


def get_ookla_binary_path(config: AppConfig) -> Path:
    """Path the CLI is installed to when downloaded."""
    return config.paths.bin_dir / _platform_binary_name(config)


def ensure_ookla_binary(config: AppConfig) -> Path:
    """Locate the CLI, downloading it when allowed, or raise ExecutableNotFound."""
    binary_path = get_ookla_binary_path(config)
    if binary_path.exists():
        return binary_path

    on_path = shutil.which(_platform_binary_name(config))
    if on_path:
        LOGGER.debug("Using speedtest CLI found on PATH at %s", on_path)
        return Path(on_path)

    if not config.ookla.auto_download:
        raise ExecutableNotFound(
            f"Missing Ookla CLI binary at {binary_path} or on PATH. "
            "Enable ookla.auto_download or install it manually."
        )

    platform_key = config.ookla_platform_key
    LOGGER.info("Detected platform: %s", platform_key)

    url = config.ookla.urls.get(platform_key)
    if not url:
        raise ExecutableNotFound(
            f"No Ookla download URL configured for platform {platform_key}. "
            f"Supported platforms: {list(config.ookla.urls.keys())}"
        )

    try:
        temp_path = _download_ookla_artifact(url)
    except requests.RequestException as exc:
        raise ExecutableNotFound(f"Failed to download Ookla CLI from {url}: {exc}") from exc
    try:
        _install_ookla_artifact(temp_path, url, config, binary_path)
    finally:
        if temp_path.exists():
            temp_path.unlink()

    binary_path.chmod(0o755)
    return binary_path


def _download_ookla_artifact(url: str) -> Path:
    LOGGER.info("Downloading Ookla CLI from %s", url)
    response = requests.get(url, timeout=120)
    response.raise_for_status()

    with tempfile.NamedTemporaryFile(delete=False) as temp_file:
        temp_file.write(response.content)
        return Path(temp_file.name)


def _install_ookla_artifact(temp_path: Path, url: str, config: AppConfig, destination: Path) -> None:
    if url.endswith(".exe"):
        shutil.move(str(temp_path), destination)
        return

    if url.endswith(".zip"):
        with zipfile.ZipFile(temp_path, "r") as archive:
            member = next((m for m in archive.namelist() if m.endswith(destination.name)), None)
            if not member:
                raise ExecutableNotFound(f"zip archive did not contain {destination.name}")
            archive.extract(member, path=config.paths.bin_dir)
            extracted = config.paths.bin_dir / member
            if extracted != destination:
                shutil.move(str(extracted), destination)
        return

    if url.endswith(".tgz"):
        with tarfile.open(temp_path, "r:gz") as archive:
            member = next((m for m in archive.getmembers() if m.name.endswith(destination.name)), None)
            if not member:
                raise ExecutableNotFound(f"tarball did not contain {destination.name}")
            archive.extract(member, path=config.paths.bin_dir)
            extracted = config.paths.bin_dir / member.name
            if extracted != destination:
                shutil.move(str(extracted), destination)
        return

    raise ExecutableNotFound(f"Unknown Ookla download artifact: {url}")


def build_command(config: AppConfig, binary_path: Path) -> List[str]:
    command = [
        str(binary_path),
        "--format=json",
        "--progress=no",
        "--accept-license",
        f"--precision={config.speedtest.precision}",
    ]
    if config.speedtest.server_id:
        command.append(f"--server-id={config.speedtest.server_id}")
    if config.speedtest.accept_gdpr:
        command.append("--accept-gdpr")
    return command


def make_invoker(config: AppConfig, binary_path: Path) -> Callable[[], str]:
    """Return a zero-argument callable running one speedtest attempt."""
    command = build_command(config, binary_path)
    timeout = config.speedtest.timeout_seconds

    def invoke() -> str:
        LOGGER.debug("Running speedtest command: %s", " ".join(command))
        try:
            completed = subprocess.run(
                command,
                check=False,
                stdout=subprocess.PIPE,
                stderr=subprocess.STDOUT,
                text=True,
                encoding="utf-8",
                errors="replace",
                timeout=timeout,
            )
        except (FileNotFoundError, PermissionError) as exc:
            raise ExecutableNotFound(f"Could not launch {command[0]}: {exc}") from exc
        except subprocess.TimeoutExpired:
            return f"Timeout after {timeout}s: {' '.join(command)}"
        if completed.returncode != 0:
            LOGGER.debug("speedtest exited with status %s", completed.returncode)
        return completed.stdout or ""

    return invoke
