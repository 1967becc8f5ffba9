"""Tests for configuration loading."""

from __future__ import annotations

from pathlib import Path

import pytest
from pydantic import ValidationError

from skillgate.core.config import Settings, get_settings


def test_defaults(monkeypatch: pytest.MonkeyPatch) -> None:
    for key in ("SKILLGATE_CAPACITY", "SKILLGATE_SCORER", "SKILLGATE_HIGH_THRESHOLD"):
        monkeypatch.delenv(key, raising=False)

    settings = Settings()

    assert settings.capacity == 2
    assert settings.high_threshold == 0.65
    assert settings.low_threshold == 0.50
    assert settings.scorer == "auto"
    assert settings.ordering == "priority"
    assert settings.catalog_path == Path(".skills/skill-rules.json")


def test_environment_overrides(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("SKILLGATE_CAPACITY", "3")
    monkeypatch.setenv("SKILLGATE_SCORER", "keyword")
    monkeypatch.setenv("SKILLGATE_CACHE_ENABLED", "false")
    monkeypatch.setenv("SKILLGATE_STATE_DIR", "/var/lib/skillgate")

    settings = Settings()

    assert settings.capacity == 3
    assert settings.scorer == "keyword"
    assert settings.cache_enabled is False
    assert settings.state_dir == Path("/var/lib/skillgate")


def test_explicit_values_beat_environment(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("SKILLGATE_CAPACITY", "3")
    assert Settings(capacity=1).capacity == 1


def test_thresholds_must_be_ordered() -> None:
    with pytest.raises(ValidationError, match="must be greater than"):
        Settings(high_threshold=0.4, low_threshold=0.5)


def test_rejects_unknown_ordering() -> None:
    with pytest.raises(ValidationError):
        Settings(ordering="alphabetical")


def test_get_settings_is_cached() -> None:
    get_settings.cache_clear()
    try:
        assert get_settings() is get_settings()
    finally:
        get_settings.cache_clear()
