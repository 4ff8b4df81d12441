"""Bulk tab-group use cases.

This module provides the multi-item operations:
- OpenAllTabsUseCase: open every tab of a group, throttled and confirmation-gated
- RemoveDuplicatesUseCase: delete repeated URLs of a group concurrently

Both treat their run as a hard catch boundary. Per-item failures are
counted into a :class:`BulkOperationReport`, and the run always ends with an
alert describing the outcome. Only task cancellation propagates.
"""

from __future__ import annotations

import asyncio
import logging
from enum import Enum
from typing import TYPE_CHECKING, Any, Awaitable, Callable, Iterable, Sequence

from ..events import ToastPosted
from ..models.dialog_models import BulkOperationReport, DialogKind
from .ports import NullProgressReporter, ProgressReporter

if TYPE_CHECKING:  # pragma: no cover - imports for type checking only
    from ...services.settings import Settings
    from ..domain.dialog_store import DialogStore
    from ..domain.tab_group_store import TabGroupStore
    from ..events import EventBus
    from ..models.tab_group_models import TabGroup, TabGroupItem
    from .ports import RefreshCallback, TabGroupService, TabOpener

LOGGER = logging.getLogger(__name__)

DEFAULT_CONFIRM_THRESHOLD = 5
DEFAULT_DISPATCH_DELAY = 0.05

OUTCOME_OPENED = "opened"
OUTCOME_BLOCKED = "blocked"
OUTCOME_FAILED = "failed"


class OpenMode(Enum):
    """Where a bulk open sends its tabs."""

    NEW_WINDOW = "new"
    CURRENT_WINDOW = "current"
    INCOGNITO = "incognito"

    @property
    def label(self) -> str:
        return {
            OpenMode.NEW_WINDOW: "a new window",
            OpenMode.CURRENT_WINDOW: "the current window",
            OpenMode.INCOGNITO: "an incognito window",
        }[self]


def normalize_url(url: str) -> str:
    """Key used for duplicate detection."""
    return (url or "").strip()


def find_duplicate_items(items: Iterable[TabGroupItem]) -> list[TabGroupItem]:
    """Return every item whose URL already appeared earlier, in scan order.

    The first occurrence of each URL is kept; all later ones are duplicates.
    """
    seen: set[str] = set()
    duplicates: list[TabGroupItem] = []
    for item in items:
        key = normalize_url(item.url)
        if key in seen:
            duplicates.append(item)
        else:
            seen.add(key)
    return duplicates


class OpenAllTabsUseCase:
    """Open all tabs of a group.

    More than ``bulk_open_threshold`` tabs requires a confirmation first.
    Tabs are opened in list order with ``bulk_open_delay`` seconds between
    consecutive attempts. An attempt whose open call returns no handle is
    *blocked*; one whose call raises is *failed*; neither stops the rest.
    """

    __slots__ = ("_dialogs", "_opener", "_event_bus", "_settings_provider", "_progress_factory", "_sleep")

    def __init__(
        self,
        dialogs: DialogStore,
        opener: TabOpener,
        event_bus: EventBus,
        *,
        settings_provider: Callable[[], Settings | None] | None = None,
        progress_factory: Callable[[], ProgressReporter] | None = None,
        sleep: Callable[[float], Awaitable[Any]] = asyncio.sleep,
    ) -> None:
        """Initialize the use case.

        Args:
            dialogs: Store used to confirm and report.
            opener: Capability that opens one URL.
            event_bus: Bus for toasts.
            settings_provider: Returns current settings (threshold/delay).
            progress_factory: Builds a progress surface per run.
            sleep: Awaitable delay between dispatches.
        """
        self._dialogs = dialogs
        self._opener = opener
        self._event_bus = event_bus
        self._settings_provider = settings_provider or (lambda: None)
        self._progress_factory = progress_factory or NullProgressReporter
        self._sleep = sleep

    async def execute(
        self, group: TabGroup, mode: OpenMode = OpenMode.NEW_WINDOW
    ) -> BulkOperationReport:
        """Open the group's tabs and report the outcome.

        Returns:
            The report; ``declined`` is set when the user said no.
        """
        items = tuple(group.items)
        report = BulkOperationReport(total=len(items))
        try:
            if not items:
                await self._dialogs.info("No tabs to open")
                return report

            threshold, delay = self._limits()
            if len(items) > threshold:
                confirmed = await self._dialogs.confirm(
                    f"Open {len(items)} tabs in {mode.label}?",
                    title="Open multiple tabs",
                    kind=DialogKind.WARNING,
                )
                if not confirmed:
                    LOGGER.debug("OpenAllTabsUseCase: user declined %d tabs", len(items))
                    report.declined = True
                    return report

            if mode is OpenMode.CURRENT_WINDOW:
                return await self._open_first_only(items[0])

            await self._dispatch(items, delay, report)
            await self._announce(report, mode)
        except Exception:
            LOGGER.exception("OpenAllTabsUseCase: run for group %s failed", group.id)
            await self._dialogs.error("Failed to open tabs, please retry")
        return report

    async def _open_first_only(self, item: TabGroupItem) -> BulkOperationReport:
        report = BulkOperationReport(total=1)
        self._tally(report, self._open_one(item))
        if report.succeeded:
            self._event_bus.publish(ToastPosted(message=f"Opened {item.title or item.url}"))
        else:
            await self._dialogs.error("Could not open the tab, check your browser settings")
        return report

    async def _dispatch(
        self, items: Sequence[TabGroupItem], delay: float, report: BulkOperationReport
    ) -> None:
        reporter = self._progress_factory()
        _notify(reporter.started, items)
        last_index = len(items) - 1
        for index, item in enumerate(items):
            outcome = self._open_one(item)
            self._tally(report, outcome)
            _notify(reporter.item_finished, index, item, outcome)
            if index < last_index:
                await self._sleep(delay)
        LOGGER.debug(
            "OpenAllTabsUseCase: opened=%d blocked=%d failed=%d",
            report.succeeded,
            report.blocked,
            report.failed,
        )
        _notify(reporter.finished, report)

    def _open_one(self, item: TabGroupItem) -> str:
        try:
            handle = self._opener.open(item.url)
        except Exception:
            LOGGER.warning("OpenAllTabsUseCase: opening %s raised", item.url, exc_info=True)
            return OUTCOME_FAILED
        return OUTCOME_OPENED if handle else OUTCOME_BLOCKED

    @staticmethod
    def _tally(report: BulkOperationReport, outcome: str) -> None:
        if outcome == OUTCOME_OPENED:
            report.succeeded += 1
        elif outcome == OUTCOME_BLOCKED:
            report.blocked += 1
        else:
            report.failed += 1

    async def _announce(self, report: BulkOperationReport, mode: OpenMode) -> None:
        if not report.blocked and not report.failed:
            await self._dialogs.success(f"Opened {report.succeeded} tabs in {mode.label}")
            return
        parts = [f"Opened {report.succeeded} of {report.total} tabs."]
        if report.blocked:
            parts.append(
                f"{report.blocked} were blocked; allow pop-ups for this site and try again."
            )
        if report.failed:
            parts.append(f"{report.failed} failed to open.")
        await self._dialogs.warning("\n\n".join(parts), title="Some tabs did not open")

    def _limits(self) -> tuple[int, float]:
        settings = self._settings_provider()
        if settings is None:
            return DEFAULT_CONFIRM_THRESHOLD, DEFAULT_DISPATCH_DELAY
        return int(settings.bulk_open_threshold), max(0.0, float(settings.bulk_open_delay))


class RemoveDuplicatesUseCase:
    """Delete repeated URLs inside a group.

    All deletions are issued concurrently once the user confirms. Successful
    deletions stay deleted when others fail; the store drops exactly the
    items whose deletion succeeded.
    """

    __slots__ = ("_dialogs", "_service", "_store", "_on_refresh")

    def __init__(
        self,
        dialogs: DialogStore,
        service: TabGroupService,
        store: TabGroupStore,
        *,
        on_refresh: RefreshCallback | None = None,
    ) -> None:
        self._dialogs = dialogs
        self._service = service
        self._store = store
        self._on_refresh = on_refresh

    async def execute(self, group: TabGroup) -> BulkOperationReport:
        duplicates = find_duplicate_items(group.items)
        report = BulkOperationReport(total=len(duplicates))
        try:
            if not duplicates:
                await self._dialogs.info("No duplicates found")
                return report

            confirmed = await self._dialogs.confirm(
                f"Found {len(duplicates)} duplicate tabs. Delete them?",
                title="Remove duplicates",
                kind=DialogKind.WARNING,
            )
            if not confirmed:
                report.declined = True
                return report

            results = await asyncio.gather(
                *(self._service.delete_tab_group_item(item.id) for item in duplicates),
                return_exceptions=True,
            )
            deleted: list[str] = []
            for item, result in zip(duplicates, results):
                if isinstance(result, BaseException) or result is False:
                    LOGGER.warning(
                        "RemoveDuplicatesUseCase: deleting item %s failed: %r", item.id, result
                    )
                    report.failed += 1
                else:
                    deleted.append(item.id)
                    report.succeeded += 1

            if deleted:
                self._store.remove_items(group.id, deleted)
                await self._refresh()
            await self._announce(report)
        except Exception:
            LOGGER.exception("RemoveDuplicatesUseCase: run for group %s failed", group.id)
            await self._dialogs.error("Failed to remove duplicates")
        return report

    async def _refresh(self) -> None:
        if self._on_refresh is None:
            return
        try:
            await self._on_refresh()
        except Exception:
            LOGGER.warning("RemoveDuplicatesUseCase: refresh failed", exc_info=True)

    async def _announce(self, report: BulkOperationReport) -> None:
        if report.failed == 0:
            await self._dialogs.success(f"Removed {report.succeeded} duplicate tabs")
        elif report.succeeded == 0:
            await self._dialogs.error(
                f"Could not delete any of the {report.total} duplicate tabs, please retry"
            )
        else:
            await self._dialogs.warning(
                f"Removed {report.succeeded} of {report.total} duplicate tabs; "
                f"{report.failed} could not be deleted.",
                title="Duplicates partially removed",
            )


def _notify(callback: Callable[..., Any], *args: Any) -> None:
    try:
        callback(*args)
    except Exception:  # pragma: no cover - progress surfaces are best effort
        LOGGER.debug("Progress reporter %r raised", callback, exc_info=True)


__all__ = [
    "DEFAULT_CONFIRM_THRESHOLD",
    "DEFAULT_DISPATCH_DELAY",
    "OUTCOME_BLOCKED",
    "OUTCOME_FAILED",
    "OUTCOME_OPENED",
    "OpenMode",
    "OpenAllTabsUseCase",
    "RemoveDuplicatesUseCase",
    "find_duplicate_items",
    "normalize_url",
]
