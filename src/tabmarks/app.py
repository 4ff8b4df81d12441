"""Application bootstrap helpers for the Tabmarks desktop app."""

from __future__ import annotations

import argparse
import asyncio
import contextlib
import json
import logging
import os
import sys
from dataclasses import asdict, dataclass, fields
from pathlib import Path
from typing import Any, Dict, Mapping, Optional, Sequence, TextIO, cast, get_type_hints

from .services.settings import Settings, SettingsStore, redact_secret
from .services.tab_groups import ClientSettings, TabGroupsClient
from .utils import logging as logging_utils

_LOGGER = logging.getLogger(__name__)
_TRUE_VALUES = {"1", "true", "yes", "on"}
_FALSE_VALUES = {"0", "false", "no", "off"}


@dataclass(slots=True)
class QtRuntime:
    """Container returned by :func:`create_qapp`."""

    app: Any
    loop: asyncio.AbstractEventLoop


@dataclass(slots=True)
class AppServices:
    """Objects wired together by :func:`build_services`."""

    event_bus: Any
    dialogs: Any
    store: Any
    client: TabGroupsClient
    browser: Any
    menu: Any


def configure_logging(debug: bool = False, *, force: bool = False) -> Path:
    """Configure file and console logging for the application."""

    level = logging_utils.level_for(debug)
    path = logging_utils.setup_logging(level, force=force)
    _LOGGER.debug("Logging configured (level=%s, file=%s)", logging.getLevelName(level), path)
    return path


def load_settings(
    path: Optional[Path] = None,
    *,
    store: SettingsStore | None = None,
    overrides: Mapping[str, Any] | None = None,
) -> Settings:
    """Load persisted settings or fall back to defaults."""

    active_store = store or SettingsStore(path)
    try:
        return active_store.load(overrides=overrides)
    except OSError as exc:
        _LOGGER.warning("Failed to load settings from %s: %s", active_store.path, exc)
        return Settings()


def create_qapp() -> QtRuntime:
    """Create a qasync-powered QApplication instance."""

    from PySide6.QtWidgets import QApplication
    from qasync import QEventLoop

    app = cast(Any, QApplication.instance() or QApplication(sys.argv))
    app.setApplicationName("Tabmarks")
    app.setApplicationDisplayName("Tabmarks")

    loop = QEventLoop(app)
    asyncio.set_event_loop(loop)
    app.aboutToQuit.connect(loop.stop)
    return QtRuntime(app=app, loop=loop)


def build_services(settings: Settings, *, browser: Any = None) -> AppServices:
    """Construct the event bus, stores, REST client and menu facade."""

    from .ui.application.coordinator import TabGroupMenu
    from .ui.domain.dialog_store import DialogStore
    from .ui.domain.tab_group_store import TabGroupStore
    from .ui.events import EventBus

    if browser is None:
        from .ui.infrastructure.browser_adapter import QtBrowserAdapter

        browser = QtBrowserAdapter()

    event_bus = EventBus()
    dialogs = DialogStore(event_bus)
    store = TabGroupStore(event_bus)
    client = TabGroupsClient(
        ClientSettings(
            base_url=settings.base_url,
            api_key=settings.api_key,
            request_timeout=settings.request_timeout,
            max_retries=settings.max_retries,
            retry_min_seconds=settings.retry_min_seconds,
            retry_max_seconds=settings.retry_max_seconds,
        )
    )
    menu = TabGroupMenu(
        event_bus,
        dialogs,
        store,
        client,
        browser,
        settings_provider=lambda: settings,
    )
    return AppServices(
        event_bus=event_bus,
        dialogs=dialogs,
        store=store,
        client=client,
        browser=browser,
        menu=menu,
    )


def main(argv: Sequence[str] | None = None) -> None:
    """Entry point invoked by the `tabmarks` console script."""

    args, passthrough = _parse_cli_args(argv)
    _rewrite_sys_argv(passthrough)

    debug = _env_flag("TABMARKS_DEBUG", default=False)
    configure_logging(debug)

    settings_path = args.settings_path or os.environ.get("TABMARKS_SETTINGS_PATH")
    resolved_path = Path(settings_path).expanduser() if settings_path else None
    settings_store = SettingsStore(resolved_path)
    try:
        cli_overrides = _coerce_cli_overrides(args.overrides or [])
    except ValueError as exc:
        print(f"Invalid --set override: {exc}", file=sys.stderr)
        raise SystemExit(2) from exc

    settings = load_settings(store=settings_store, overrides=cli_overrides or None)

    if args.dump_settings:
        _dump_settings(settings, settings_store, overrides=cli_overrides)
        return

    if args.save_settings:
        path = _save_settings(settings, settings_store)
        print(f"Settings saved to {path}")
        return

    if settings.debug_logging and not debug:
        configure_logging(True, force=True)

    runtime = create_qapp()

    from .ui.presentation.dialog_host import DialogHost
    from .ui.presentation.main_window import MainWindow
    from .ui.presentation.progress_window import BulkOpenProgressWindow
    from .ui.presentation.widgets.dialogs import QtDialogViewFactory

    services = build_services(settings)
    window = MainWindow(
        services.event_bus,
        services.store,
        services.menu,
        settings=settings,
        settings_store=settings_store,
    )
    host = DialogHost(services.dialogs, services.event_bus, QtDialogViewFactory(window))
    services.menu.set_progress_factory(lambda: BulkOpenProgressWindow(window))
    window.show()
    window.schedule_coroutine(services.menu.refresh())

    loop = runtime.loop
    try:
        loop.run_forever()
    except KeyboardInterrupt:  # pragma: no cover - manual shutdown path
        _LOGGER.info("Shutdown requested by user.")
    finally:
        host.dispose()
        with contextlib.suppress(RuntimeError):
            loop.run_until_complete(services.client.aclose())
        _drain_event_loop(loop)
        loop.close()


def _env_flag(name: str, *, default: bool = False) -> bool:
    value = os.environ.get(name)
    if value is None:
        return default
    return value.strip().lower() in _TRUE_VALUES


def _drain_event_loop(loop: asyncio.AbstractEventLoop) -> None:
    """Cancel outstanding tasks before closing the loop."""

    if loop.is_closed():
        return

    async def _cleanup() -> None:
        current = asyncio.current_task()
        tasks = [task for task in asyncio.all_tasks() if not task.done() and task is not current]
        if tasks:
            _LOGGER.debug("Canceling %s pending asyncio task(s) before shutdown.", len(tasks))
            for task in tasks:
                task.cancel()
            await asyncio.gather(*tasks, return_exceptions=True)
        with contextlib.suppress(RuntimeError, NotImplementedError):
            await loop.shutdown_asyncgens()

    try:
        loop.run_until_complete(_cleanup())
    except RuntimeError as exc:  # pragma: no cover - loop already stopping
        _LOGGER.debug("Unable to drain asyncio loop: %s", exc)


def _parse_cli_args(argv: Sequence[str] | None) -> tuple[argparse.Namespace, list[str]]:
    parser = argparse.ArgumentParser(
        prog="tabmarks",
        add_help=True,
        description="Browse and manage saved tab groups, or inspect the configuration.",
    )
    parser.add_argument(
        "--dump-settings",
        action="store_true",
        help="Print the effective settings payload (with secrets redacted) and exit.",
    )
    parser.add_argument(
        "--save-settings",
        action="store_true",
        help="Write the effective settings (including --set overrides) to the settings file and exit.",
    )
    parser.add_argument(
        "--settings",
        dest="settings_path",
        metavar="PATH",
        help="Override the default ~/.tabmarks/settings.json path.",
    )
    parser.add_argument(
        "--set",
        dest="overrides",
        metavar="KEY=VALUE",
        action="append",
        default=[],
        help="Override persisted settings before launch (repeatable).",
    )
    return parser.parse_known_args(argv)


def _rewrite_sys_argv(passthrough: Sequence[str]) -> None:
    program = sys.argv[0] if sys.argv else "tabmarks"
    sys.argv = [program, *passthrough]


def _coerce_cli_overrides(items: Sequence[str]) -> Dict[str, Any]:
    overrides: Dict[str, Any] = {}
    known = {field.name for field in fields(Settings)}
    type_hints = get_type_hints(Settings)
    for entry in items:
        if "=" not in entry:
            raise ValueError(f"Override '{entry}' must use KEY=VALUE syntax.")
        key, raw_value = entry.split("=", 1)
        key = key.strip()
        if not key:
            raise ValueError("Override is missing a field name.")
        if key not in known:
            raise ValueError(f"Unknown setting '{key}'.")
        overrides[key] = _coerce_value(type_hints[key], raw_value.strip())
    return overrides


def _coerce_value(annotation: Any, raw_value: str) -> Any:
    if annotation is bool:
        return _parse_bool(raw_value)
    if annotation is int:
        return int(raw_value, 10)
    if annotation is float:
        return float(raw_value)
    if raw_value.lower() in {"none", "null"} and annotation is not str:
        return None
    return raw_value


def _parse_bool(value: str) -> bool:
    lowered = value.strip().lower()
    if lowered in _TRUE_VALUES:
        return True
    if lowered in _FALSE_VALUES:
        return False
    raise ValueError(f"Cannot coerce '{value}' to a boolean.")


def _dump_settings(
    settings: Settings,
    store: SettingsStore,
    *,
    overrides: Mapping[str, Any],
    stream: TextIO | None = None,
) -> None:
    destination = stream or sys.stdout
    payload = asdict(settings)
    payload["api_key"] = redact_secret(payload.get("api_key", ""))
    metadata = {
        "path": str(store.path),
        "cli_overrides": sorted(overrides.keys()),
        "environment_variables": _active_env_overrides(),
    }
    json.dump({"settings": payload, "meta": metadata}, destination, indent=2)
    destination.write("\n")


def _save_settings(settings: Settings, store: SettingsStore) -> Path:
    try:
        return store.save(settings)
    except OSError as exc:
        print(f"Unable to save settings to {store.path}: {exc}", file=sys.stderr)
        raise SystemExit(1) from exc


def _active_env_overrides() -> list[str]:
    return sorted(name for name in os.environ if name.startswith("TABMARKS_"))


__all__ = ["AppServices", "QtRuntime", "build_services", "configure_logging", "load_settings", "main"]
