"""Tests for settings and logger configuration."""

from pathlib import Path

import pytest
from loguru import logger

from kaiord.config.settings import Settings
from kaiord.core.logger import setup_logger, setup_logger_from_settings


@pytest.fixture
def clean_env(monkeypatch: pytest.MonkeyPatch) -> pytest.MonkeyPatch:
    for name in (
        "KAIORD_LOG_LEVEL",
        "KAIORD_LOG_FILE",
        "KAIORD_TCX_VALIDATOR",
        "KAIORD_TCX_XSD_PATH",
        "KAIORD_TCX_CUSTOM_ZONES",
        "KAIORD_TCX_PRETTY_PRINT",
    ):
        monkeypatch.delenv(name, raising=False)
    return monkeypatch


def test_defaults(clean_env: pytest.MonkeyPatch) -> None:
    """Test the default configuration."""
    config = Settings(_env_file=None)

    assert config.log_level == "INFO"
    assert config.log_file is None
    assert config.tcx_validator == "wellformed"
    assert config.tcx_xsd_path is None
    assert config.tcx_custom_zones is False
    assert config.tcx_pretty_print is True


def test_reads_environment(clean_env: pytest.MonkeyPatch, tmp_path: Path) -> None:
    """Test that KAIORD_* variables are picked up."""
    xsd = tmp_path / "tcx.xsd"
    xsd.write_text("<schema/>", encoding="utf-8")
    clean_env.setenv("KAIORD_LOG_LEVEL", "debug")
    clean_env.setenv("KAIORD_TCX_VALIDATOR", "xsd")
    clean_env.setenv("KAIORD_TCX_XSD_PATH", str(xsd))
    clean_env.setenv("KAIORD_TCX_CUSTOM_ZONES", "true")
    clean_env.setenv("KAIORD_TCX_PRETTY_PRINT", "false")

    config = Settings(_env_file=None)

    assert config.log_level == "DEBUG"
    assert config.tcx_validator == "xsd"
    assert config.tcx_xsd_path == str(xsd)
    assert config.tcx_custom_zones is True
    assert config.tcx_pretty_print is False


def test_invalid_log_level_falls_back_to_info(clean_env: pytest.MonkeyPatch) -> None:
    """Test that an unknown level is replaced with INFO."""
    clean_env.setenv("KAIORD_LOG_LEVEL", "LOUD")

    assert Settings(_env_file=None).log_level == "INFO"


def test_rejects_unknown_validator(clean_env: pytest.MonkeyPatch) -> None:
    """Test that only wellformed and xsd are accepted."""
    clean_env.setenv("KAIORD_TCX_VALIDATOR", "dtd")

    with pytest.raises(ValueError):
        Settings(_env_file=None)


def test_setup_logger_writes_file(tmp_path: Path) -> None:
    """Test that a file sink is created and receives messages."""
    log_file = tmp_path / "logs" / "kaiord.log"

    setup_logger(level="DEBUG", log_file=str(log_file))
    logger.info("Converted workout", step_count=3)
    logger.remove()

    content = log_file.read_text(encoding="utf-8")
    assert "Converted workout" in content
    assert "step_count" in content


def test_setup_logger_from_settings_debug_flag(tmp_path: Path, clean_env: pytest.MonkeyPatch) -> None:
    """Test that --debug overrides the configured level."""
    log_file = tmp_path / "debug.log"
    config = Settings(_env_file=None, log_level="WARNING", log_file=str(log_file))

    setup_logger_from_settings(config, debug=True)
    logger.debug("Debug detail")
    logger.remove()

    assert "Debug detail" in log_file.read_text(encoding="utf-8")
