"""Collaborator protocols consumed by the application use cases.

The use cases only depend on these narrow signatures. The production
implementations are :class:`~tabmarks.services.tab_groups.TabGroupsClient`
and :class:`~tabmarks.ui.infrastructure.browser_adapter.QtBrowserAdapter`.
"""

from __future__ import annotations

import inspect
from typing import TYPE_CHECKING, Any, Awaitable, Callable, Protocol, Sequence

if TYPE_CHECKING:  # pragma: no cover - imports for type checking only
    from ...services.tab_groups import ShareLink
    from ..models.dialog_models import BulkOperationReport
    from ..models.tab_group_models import TabGroup, TabGroupItem

RefreshCallback = Callable[[], Awaitable[None]]


class TabOpener(Protocol):
    """Opens a URL in a new browser tab/window."""

    def open(self, url: str) -> Any | None:
        """Return a handle for the new window, or a falsy value if it was blocked."""
        ...


class Clipboard(Protocol):
    """Writes text to the system clipboard."""

    def copy_to_clipboard(self, text: str) -> bool | Awaitable[bool]:
        """Return True on success; may also raise."""
        ...


class TabGroupService(Protocol):
    """Remote mutations on tab groups and their items."""

    async def list_tab_groups(self) -> list[TabGroup]: ...

    async def update_tab_group(self, group_id: str, **fields: Any) -> None: ...

    async def delete_tab_group(self, group_id: str) -> None: ...

    async def move_tab_group(self, group_id: str, parent_id: str | None) -> None: ...

    async def create_folder(
        self, title: str, parent_id: str | None = None, *, position: int | None = None
    ) -> TabGroup: ...

    async def create_share(
        self, group_id: str, *, is_public: bool = True, expires_in_days: int = 30
    ) -> ShareLink: ...

    async def update_tab_group_item(self, item_id: str, **fields: Any) -> None: ...

    async def delete_tab_group_item(self, item_id: str) -> Any: ...

    async def move_tab_group_item(self, item_id: str, target_group_id: str) -> None: ...


class ProgressReporter(Protocol):
    """Surface showing per-link progress of a bulk open.

    The orchestrator notifies it but does not own it; failures inside the
    reporter never affect the run.
    """

    def started(self, items: Sequence[TabGroupItem]) -> None: ...

    def item_finished(self, index: int, item: TabGroupItem, outcome: str) -> None: ...

    def finished(self, report: BulkOperationReport) -> None: ...


class NullProgressReporter:
    """Reporter used when no progress surface is wired in."""

    def started(self, items: Sequence[TabGroupItem]) -> None:
        pass

    def item_finished(self, index: int, item: TabGroupItem, outcome: str) -> None:
        pass

    def finished(self, report: BulkOperationReport) -> None:
        pass


async def resolve_maybe_awaitable(value: Any) -> Any:
    """Await ``value`` if it is awaitable; return it unchanged otherwise."""

    if inspect.isawaitable(value):
        return await value
    return value


__all__ = [
    "Clipboard",
    "NullProgressReporter",
    "ProgressReporter",
    "RefreshCallback",
    "TabGroupService",
    "TabOpener",
    "resolve_maybe_awaitable",
]
