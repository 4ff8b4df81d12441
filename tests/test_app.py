"""Tests for the application bootstrap helpers."""

from __future__ import annotations

import io
import json
import sys
from pathlib import Path

import pytest

from tabmarks import app
from tabmarks.services.settings import Settings, SettingsStore
from tabmarks.ui.application.coordinator import TabGroupMenu
from tests.helpers import FakeOpener


@pytest.fixture
def logging_calls(monkeypatch) -> list[tuple[bool, bool]]:
    calls: list[tuple[bool, bool]] = []

    def fake_configure(debug: bool = False, *, force: bool = False) -> Path:
        calls.append((debug, force))
        return Path("tabmarks.log")

    monkeypatch.setattr(app, "configure_logging", fake_configure)
    return calls


class TestOverrides:
    def test_values_are_coerced_by_field_type(self) -> None:
        overrides = app._coerce_cli_overrides(
            [
                "bulk_open_threshold=9",
                "bulk_open_delay=0.25",
                "debug_logging=on",
                "base_url = https://svc.test ",
                "window_geometry=none",
            ]
        )

        assert overrides == {
            "bulk_open_threshold": 9,
            "bulk_open_delay": 0.25,
            "debug_logging": True,
            "base_url": "https://svc.test",
            "window_geometry": None,
        }

    @pytest.mark.parametrize(
        "entry",
        ["bulk_open_threshold", "=3", "colour=red", "bulk_open_threshold=many", "debug_logging=maybe"],
    )
    def test_invalid_entries_raise(self, entry: str) -> None:
        with pytest.raises(ValueError):
            app._coerce_cli_overrides([entry])


class TestDumpSettings:
    def test_api_key_is_redacted(self, tmp_path: Path, monkeypatch) -> None:
        monkeypatch.setenv("TABMARKS_BASE_URL", "https://svc.test")
        store = SettingsStore(tmp_path / "settings.json")
        stream = io.StringIO()

        app._dump_settings(
            Settings(api_key="sk-abcdef123"),
            store,
            overrides={"bulk_open_threshold": 2},
            stream=stream,
        )

        payload = json.loads(stream.getvalue())
        assert payload["settings"]["api_key"] == "sk********23"
        assert payload["meta"]["path"] == str(tmp_path / "settings.json")
        assert payload["meta"]["cli_overrides"] == ["bulk_open_threshold"]
        assert "TABMARKS_BASE_URL" in payload["meta"]["environment_variables"]

    def test_main_dumps_and_exits_without_qt(
        self, tmp_path: Path, monkeypatch, capsys, logging_calls
    ) -> None:
        monkeypatch.setattr(sys, "argv", ["tabmarks"])
        monkeypatch.setattr(app, "create_qapp", lambda: pytest.fail("Qt should not start"))
        settings_path = tmp_path / "settings.json"

        app.main(
            [
                "--settings",
                str(settings_path),
                "--dump-settings",
                "--set",
                "bulk_open_threshold=9",
                "--qt-flag",
            ]
        )

        payload = json.loads(capsys.readouterr().out)
        assert payload["settings"]["bulk_open_threshold"] == 9
        assert payload["meta"]["path"] == str(settings_path)
        assert sys.argv == ["tabmarks", "--qt-flag"]
        assert logging_calls == [(False, False)]

    def test_invalid_override_exits_with_usage_error(
        self, tmp_path: Path, monkeypatch, capsys, logging_calls
    ) -> None:
        monkeypatch.setattr(sys, "argv", ["tabmarks"])

        with pytest.raises(SystemExit) as excinfo:
            app.main(["--settings", str(tmp_path / "s.json"), "--set", "nope=1"])

        assert excinfo.value.code == 2
        assert "Unknown setting 'nope'" in capsys.readouterr().err

    def test_settings_path_from_environment(
        self, tmp_path: Path, monkeypatch, capsys, logging_calls
    ) -> None:
        monkeypatch.setattr(sys, "argv", ["tabmarks"])
        target = tmp_path / "env-settings.json"
        monkeypatch.setenv("TABMARKS_SETTINGS_PATH", str(target))
        monkeypatch.setenv("TABMARKS_DEBUG", "1")

        app.main(["--dump-settings"])

        payload = json.loads(capsys.readouterr().out)
        assert payload["meta"]["path"] == str(target)
        assert logging_calls == [(True, False)]


class TestSaveSettings:
    def test_main_persists_overrides_with_encrypted_key(
        self, tmp_path: Path, monkeypatch, capsys, logging_calls
    ) -> None:
        monkeypatch.setattr(sys, "argv", ["tabmarks"])
        monkeypatch.setattr(app, "create_qapp", lambda: pytest.fail("Qt should not start"))
        settings_path = tmp_path / "settings.json"

        app.main(
            [
                "--settings",
                str(settings_path),
                "--save-settings",
                "--set",
                "bulk_open_threshold=9",
                "--set",
                "api_key=sk-secret-key",
            ]
        )

        assert f"Settings saved to {settings_path}" in capsys.readouterr().out
        payload = json.loads(settings_path.read_text(encoding="utf-8"))
        assert payload["bulk_open_threshold"] == 9
        assert "api_key" not in payload
        assert payload["api_key_ciphertext"] and "sk-secret-key" not in payload["api_key_ciphertext"]
        assert settings_path.with_suffix(".key").exists()

        reloaded = SettingsStore(settings_path).load()
        assert reloaded.api_key == "sk-secret-key"
        assert reloaded.bulk_open_threshold == 9

    def test_write_failure_exits_with_error(
        self, tmp_path: Path, monkeypatch, capsys, logging_calls
    ) -> None:
        monkeypatch.setattr(sys, "argv", ["tabmarks"])
        blocker = tmp_path / "not-a-dir"
        blocker.write_text("", encoding="utf-8")

        with pytest.raises(SystemExit) as excinfo:
            app.main(["--settings", str(blocker / "settings.json"), "--save-settings"])

        assert excinfo.value.code == 1
        assert "Unable to save settings" in capsys.readouterr().err


class TestBuildServices:
    @pytest.mark.asyncio
    async def test_services_are_wired_together(self) -> None:
        browser = FakeOpener()
        settings = Settings(base_url="https://svc.test/api", api_key="k", max_retries=1)

        services = app.build_services(settings, browser=browser)

        assert isinstance(services.menu, TabGroupMenu)
        assert services.browser is browser
        assert services.client.settings.base_url == "https://svc.test/api"
        assert services.client.settings.max_retries == 1
        assert services.store.groups == ()
        assert services.dialogs.confirmation is None
        await services.client.aclose()

    def test_load_settings_falls_back_on_os_error(self) -> None:
        class BrokenStore:
            path = Path("/unreadable/settings.json")

            def load(self, *, overrides=None):
                raise PermissionError("denied")

        assert app.load_settings(store=BrokenStore()) == Settings()
