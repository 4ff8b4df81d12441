"""Shared pytest fixtures."""

from __future__ import annotations

import os

# Qt widgets are created without a display in CI.
os.environ.setdefault("QT_QPA_PLATFORM", "offscreen")

import pytest  # noqa: E402

from tabmarks.ui.domain.dialog_store import DialogStore  # noqa: E402
from tabmarks.ui.events import EventBus  # noqa: E402
from tests.helpers import AutoResponder  # noqa: E402


@pytest.fixture(autouse=True)
def _isolated_home(tmp_path, monkeypatch):
    """Keep settings, keys and logs out of the real home directory."""
    monkeypatch.setenv("TABMARKS_LOG_DIR", str(tmp_path / "logs"))
    for name in list(os.environ):
        if name.startswith("TABMARKS_") and name != "TABMARKS_LOG_DIR":
            monkeypatch.delenv(name, raising=False)


@pytest.fixture
def event_bus() -> EventBus:
    return EventBus()


@pytest.fixture
def dialog_store(event_bus: EventBus) -> DialogStore:
    return DialogStore(event_bus)


@pytest.fixture
def responder(dialog_store: DialogStore, event_bus: EventBus) -> AutoResponder:
    return AutoResponder(dialog_store, event_bus, default=True)
