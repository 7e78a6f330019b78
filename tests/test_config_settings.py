"""Tests for runtime settings loading and validation."""

from __future__ import annotations

from pathlib import Path

import pytest
from pydantic import ValidationError

from stackguard.config import AppSettings, SettingsLoadError, config_load_settings, settings_split_model_names


def test_config_settings_reads_hostnames_from_dotenv(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    """Read the virtual hosts from a `.env` file in the working directory.

    Args:
        tmp_path: Pytest temporary directory.
        monkeypatch: Pytest monkeypatch fixture.

    Returns:
        None: Assertions validate dotenv loading.

    Raises:
        AssertionError: Raised when values are not loaded.
    """

    monkeypatch.delenv("TRAEFIK_HOSTNAME", raising=False)
    monkeypatch.delenv("OLLAMA_HOSTNAME", raising=False)
    (tmp_path / ".env").write_text(
        "TRAEFIK_HOSTNAME=traefik.example.com\nOLLAMA_HOSTNAME=chat.example.com\nOLLAMA_INSTALL_MODELS=llama3.2,qwen2.5\n",
        encoding="utf-8",
    )
    monkeypatch.chdir(tmp_path)

    settings = config_load_settings()

    assert settings.traefik_hostname == "traefik.example.com"
    assert settings.ollama_hostname == "chat.example.com"
    assert settings.settings_install_models() == ("llama3.2", "qwen2.5")


def test_config_settings_blank_optional_values_become_none(monkeypatch: pytest.MonkeyPatch) -> None:
    """Normalize blank optional strings to None instead of empty strings.

    Args:
        monkeypatch: Pytest monkeypatch fixture.

    Returns:
        None: Assertions validate optional normalization.

    Raises:
        AssertionError: Raised when blank values survive.
    """

    monkeypatch.setenv("TRAEFIK_HOSTNAME", "   ")
    monkeypatch.setenv("COMPOSE_FILE", "")

    settings = AppSettings(_env_file=None)

    assert settings.traefik_hostname is None
    assert settings.compose_file is None
    assert settings.audit_target_host == "127.0.0.1"


def test_config_settings_rejects_poll_interval_not_below_timeout() -> None:
    """Reject a readiness poll interval that is not smaller than the timeout.

    Returns:
        None: Assertions validate cross-field validation.

    Raises:
        AssertionError: Raised when invalid timing is accepted.
    """

    with pytest.raises(ValidationError, match="readiness_poll_interval_seconds"):
        AppSettings(_env_file=None, readiness_timeout_seconds=5.0, readiness_poll_interval_seconds=5.0)


def test_config_load_settings_wraps_validation_errors(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    """Wrap validation failures into SettingsLoadError.

    Args:
        tmp_path: Pytest temporary directory.
        monkeypatch: Pytest monkeypatch fixture.

    Returns:
        None: Assertions validate startup error mapping.

    Raises:
        AssertionError: Raised when the error is not wrapped.
    """

    monkeypatch.chdir(tmp_path)
    monkeypatch.setenv("AUDIT_HTTPS_PORT", "70000")

    with pytest.raises(SettingsLoadError, match="Startup configuration validation failed"):
        config_load_settings()


def test_config_split_model_names_drops_blanks_and_duplicates() -> None:
    """Split comma or whitespace separated models preserving first occurrence order.

    Returns:
        None: Assertions validate model list parsing.

    Raises:
        AssertionError: Raised when parsing is incorrect.
    """

    assert settings_split_model_names(" llama3.2, ,qwen2.5 llama3.2,") == ("llama3.2", "qwen2.5")
    assert settings_split_model_names("") == ()
