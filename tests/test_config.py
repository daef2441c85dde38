"""Tests for configuration loading."""

from pathlib import Path

import pytest

from speedsensor.config import apply_overrides, load_config
from speedsensor.errors import ConfigError


def test_loads_yaml_and_creates_directories(config_file: Path) -> None:
    config = load_config(str(config_file))

    assert config.root_dir == config_file.parent.resolve()
    assert config.paths.logs_dir.is_dir()
    assert config.paths.bin_dir.is_dir()
    assert config.speedtest.precision == 1
    assert config.speedtest.retries == 2
    assert config.speedtest.accept_gdpr is False
    assert config.output_path is None


def test_defaults_without_config_file(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.chdir(tmp_path)

    config = load_config()

    assert config.root_dir == Path.cwd()
    assert config.speedtest.precision == 1
    assert config.speedtest.retries == 2
    assert config.speedtest.server_id is None
    assert config.ookla.auto_download is False
    assert "linux_x86_64" in config.ookla.urls


def test_missing_explicit_file(tmp_path: Path) -> None:
    with pytest.raises(FileNotFoundError):
        load_config(str(tmp_path / "absent.yaml"))


@pytest.mark.parametrize(
    "body",
    [
        "speedtest:\n  precision: 9\n",
        "speedtest:\n  retries: 5\n",
        "speedtest:\n  retries: -1\n",
        "speedtest:\n  colour: blue\n",
        "speedtest: [1, 2]\n",
        "- just\n- a list\n",
    ],
)
def test_rejects_invalid_configuration(tmp_path: Path, body: str) -> None:
    path = tmp_path / "config.yaml"
    path.write_text(body, encoding="utf-8")

    with pytest.raises(ConfigError):
        load_config(str(path))


def test_output_path_resolves_against_config_dir(config_file: Path) -> None:
    config = load_config(str(config_file))
    config.speedtest.output_file = "reports/speed.xml"

    assert config.output_path == config_file.parent.resolve() / "reports" / "speed.xml"


def test_apply_overrides_keeps_unset_values(config_file: Path) -> None:
    config = load_config(str(config_file))

    apply_overrides(config, server_id="1234", precision=0, retries=None, accept_gdpr=False)

    assert config.speedtest.server_id == "1234"
    assert config.speedtest.precision == 0
    assert config.speedtest.retries == 2
    assert config.speedtest.accept_gdpr is False


def test_apply_overrides_validates(config_file: Path) -> None:
    config = load_config(str(config_file))

    with pytest.raises(ConfigError):
        apply_overrides(config, retries=7)
    with pytest.raises(ConfigError):
        apply_overrides(config, colour="blue")
