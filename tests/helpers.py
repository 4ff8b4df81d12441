"""Shared test helpers and stub classes.

This module contains reusable test stubs that are used across multiple test files.
Import from here instead of duplicating these classes in individual test files.
"""

from __future__ import annotations

import asyncio
from typing import Any, Iterable

from tabmarks.services.tab_groups import ShareLink, TabGroupsServiceError
from tabmarks.ui.domain.dialog_store import DialogStore
from tabmarks.ui.events import AlertRaised, ConfirmationRaised, EventBus
from tabmarks.ui.models.dialog_models import AlertRequest, ConfirmationRequest
from tabmarks.ui.models.tab_group_models import TabGroup, TabGroupItem


def make_items(*urls: str, prefix: str = "item") -> tuple[TabGroupItem, ...]:
    return tuple(
        TabGroupItem(id=f"{prefix}-{index}", title=f"Tab {index}", url=url)
        for index, url in enumerate(urls)
    )


def make_group(group_id: str = "g1", *urls: str, **fields: Any) -> TabGroup:
    fields.setdefault("title", f"Group {group_id}")
    return TabGroup(id=group_id, items=make_items(*urls, prefix=group_id), **fields)


class AutoResponder:
    """Presenter stand-in that answers every request on the next loop tick.

    Confirmations are answered from ``answers`` in order, falling back to
    ``default``. Alerts are acknowledged. Every request is recorded.

    Example:
        responder = AutoResponder(dialog_store, event_bus, default=True)
        assert await dialog_store.confirm("Go?") is True
        assert responder.confirmations[0].message == "Go?"
    """

    def __init__(
        self,
        store: DialogStore,
        event_bus: EventBus,
        *,
        default: bool = True,
        answers: Iterable[bool] = (),
        acknowledge_alerts: bool = True,
    ) -> None:
        self._store = store
        self.default = default
        self.answers = list(answers)
        self.acknowledge_alerts = acknowledge_alerts
        self.confirmations: list[ConfirmationRequest] = []
        self.alerts: list[AlertRequest] = []
        event_bus.subscribe(ConfirmationRaised, self._on_confirmation)
        event_bus.subscribe(AlertRaised, self._on_alert)

    @property
    def last_alert(self) -> AlertRequest:
        return self.alerts[-1]

    def _on_confirmation(self, event: ConfirmationRaised) -> None:
        self.confirmations.append(event.request)
        answer = self.answers.pop(0) if self.answers else self.default
        asyncio.get_running_loop().call_soon(
            self._store.resolve_confirmation, answer, event.request.request_id
        )

    def _on_alert(self, event: AlertRaised) -> None:
        self.alerts.append(event.request)
        if self.acknowledge_alerts:
            asyncio.get_running_loop().call_soon(
                self._store.resolve_alert, event.request.request_id
            )


class FakeOpener:
    """Records opened URLs; ``blocked`` URLs return None, ``broken`` ones raise."""

    def __init__(
        self,
        *,
        blocked: Iterable[str] = (),
        broken: Iterable[str] = (),
        log: list[tuple[str, Any]] | None = None,
    ) -> None:
        self.blocked = set(blocked)
        self.broken = set(broken)
        self.opened: list[str] = []
        self.log = log if log is not None else []

    def open(self, url: str) -> Any:
        self.log.append(("open", url))
        self.opened.append(url)
        if url in self.broken:
            raise RuntimeError(f"cannot open {url}")
        if url in self.blocked:
            return None
        return object()


class FakeClipboard:
    def __init__(self, *, result: bool = True, error: Exception | None = None) -> None:
        self.result = result
        self.error = error
        self.copied: list[str] = []

    def copy_to_clipboard(self, text: str) -> bool:
        self.copied.append(text)
        if self.error is not None:
            raise self.error
        return self.result


class FakeService:
    """In-memory tab-group service recording every call.

    ``failing_items`` maps item ids to either an exception (raised) or
    ``False`` (returned) for :meth:`delete_tab_group_item`. ``error`` makes
    every group-level call raise.
    """

    def __init__(
        self,
        groups: Iterable[TabGroup] = (),
        *,
        failing_items: dict[str, Any] | None = None,
        error: Exception | None = None,
        share_url: str = "https://tabmarks.test/s/abc123",
    ) -> None:
        self.groups = list(groups)
        self.failing_items = failing_items or {}
        self.error = error
        self.share_url = share_url
        self.calls: list[tuple[str, tuple[Any, ...], dict[str, Any]]] = []

    def calls_to(self, name: str) -> list[tuple[tuple[Any, ...], dict[str, Any]]]:
        return [(args, kwargs) for call_name, args, kwargs in self.calls if call_name == name]

    def _record(self, name: str, *args: Any, **kwargs: Any) -> None:
        self.calls.append((name, args, kwargs))
        if self.error is not None:
            raise self.error

    async def list_tab_groups(self) -> list[TabGroup]:
        self._record("list_tab_groups")
        return list(self.groups)

    async def update_tab_group(self, group_id: str, **fields: Any) -> None:
        self._record("update_tab_group", group_id, **fields)

    async def delete_tab_group(self, group_id: str) -> None:
        self._record("delete_tab_group", group_id)

    async def move_tab_group(self, group_id: str, parent_id: str | None) -> None:
        self._record("move_tab_group", group_id, parent_id)

    async def create_folder(
        self, title: str, parent_id: str | None = None, *, position: int | None = None
    ) -> TabGroup:
        self._record("create_folder", title, parent_id, position=position)
        return TabGroup(
            id=f"folder-{len(self.calls)}",
            title=title,
            parent_id=parent_id,
            is_folder=True,
            position=position or 0,
        )

    async def create_share(
        self, group_id: str, *, is_public: bool = True, expires_in_days: int = 30
    ) -> ShareLink:
        self._record("create_share", group_id, is_public=is_public, expires_in_days=expires_in_days)
        return ShareLink(url=self.share_url, expires_in_days=expires_in_days)

    async def update_tab_group_item(self, item_id: str, **fields: Any) -> None:
        self._record("update_tab_group_item", item_id, **fields)

    async def move_tab_group_item(self, item_id: str, target_group_id: str) -> None:
        self._record("move_tab_group_item", item_id, target_group_id)

    async def delete_tab_group_item(self, item_id: str) -> Any:
        self.calls.append(("delete_tab_group_item", (item_id,), {}))
        await asyncio.sleep(0)
        outcome = self.failing_items.get(item_id, True)
        if isinstance(outcome, Exception):
            raise outcome
        return outcome


def service_error(message: str = "boom", status: int | None = 500) -> TabGroupsServiceError:
    return TabGroupsServiceError(message, status_code=status)
