"""Tests for settings persistence and overrides."""

from __future__ import annotations

import json
from pathlib import Path

import pytest

from tabmarks.services.settings import SecretVault, Settings, SettingsStore, redact_secret


@pytest.fixture
def settings_path(tmp_path: Path) -> Path:
    return tmp_path / "settings.json"


def test_missing_file_yields_defaults(settings_path: Path) -> None:
    settings = SettingsStore(settings_path).load()

    assert settings == Settings()
    assert settings.bulk_open_threshold == 5
    assert settings.share_expires_in_days == 30


def test_round_trip_encrypts_api_key(settings_path: Path) -> None:
    store = SettingsStore(settings_path)
    store.save(Settings(api_key="sk-live-123456", bulk_open_threshold=8))

    raw = json.loads(settings_path.read_text(encoding="utf-8"))
    assert "api_key" not in raw
    assert raw["api_key_ciphertext"]
    assert "sk-live-123456" not in settings_path.read_text(encoding="utf-8")
    assert raw["version"] == 1
    assert settings_path.with_suffix(".key").exists()

    loaded = SettingsStore(settings_path).load()
    assert loaded.api_key == "sk-live-123456"
    assert loaded.bulk_open_threshold == 8


def test_undecryptable_key_is_dropped(settings_path: Path, tmp_path: Path) -> None:
    SettingsStore(settings_path).save(Settings(api_key="secret"))
    other_vault = SecretVault(key_path=tmp_path / "other.key")

    loaded = SettingsStore(settings_path, vault=other_vault).load()

    assert loaded.api_key == ""


def test_invalid_json_falls_back_to_defaults(settings_path: Path, caplog) -> None:
    settings_path.write_text("{not json", encoding="utf-8")

    assert SettingsStore(settings_path).load() == Settings()
    assert "not valid JSON" in caplog.text


def test_unknown_fields_are_ignored(settings_path: Path) -> None:
    settings_path.write_text(json.dumps({"bulk_open_delay": 0.2, "legacy": True}), encoding="utf-8")

    assert SettingsStore(settings_path).load().bulk_open_delay == 0.2


def test_cli_overrides_apply_before_environment(settings_path: Path, monkeypatch) -> None:
    monkeypatch.setenv("TABMARKS_BULK_OPEN_THRESHOLD", "12")

    settings = SettingsStore(settings_path).load(
        overrides={"bulk_open_threshold": 3, "share_expires_in_days": 7, "unknown": 1}
    )

    assert settings.bulk_open_threshold == 12
    assert settings.share_expires_in_days == 7


def test_environment_overrides(settings_path: Path, monkeypatch) -> None:
    monkeypatch.setenv("TABMARKS_BASE_URL", "https://example.test/api")
    monkeypatch.setenv("TABMARKS_API_KEY", "env-key")
    monkeypatch.setenv("TABMARKS_DEBUG_LOGGING", "yes")
    monkeypatch.setenv("TABMARKS_BULK_OPEN_DELAY", "0.5")

    settings = SettingsStore(settings_path).load()

    assert settings.base_url == "https://example.test/api"
    assert settings.api_key == "env-key"
    assert settings.debug_logging is True
    assert settings.bulk_open_delay == 0.5


def test_invalid_numeric_environment_override_is_ignored(
    settings_path: Path, monkeypatch, caplog
) -> None:
    monkeypatch.setenv("TABMARKS_SHARE_EXPIRY_DAYS", "soon")

    settings = SettingsStore(settings_path).load()

    assert settings.share_expires_in_days == 30
    assert "TABMARKS_SHARE_EXPIRY_DAYS" in caplog.text


def test_vault_empty_secret() -> None:
    vault = SecretVault(key_path=Path("/nonexistent/never-created.key"))
    assert vault.encrypt("") == ""
    assert vault.decrypt(None) == ""


@pytest.mark.parametrize(
    ("value", "expected"),
    [("", ""), ("abcd", "****"), ("sk-123456", "sk*****56"), ("  xy  ", "**")],
)
def test_redact_secret(value: str, expected: str) -> None:
    assert redact_secret(value) == expected
