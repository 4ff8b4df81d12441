"""Use cases that hand a tab group to the outside world.

- ShareGroupUseCase: create a public share link and copy it
- CopyGroupToClipboardUseCase: copy titles and URLs as plain text
- ExportMarkdownUseCase: write the group to a Markdown file
"""

from __future__ import annotations

import logging
import re
from datetime import datetime
from pathlib import Path
from typing import TYPE_CHECKING, Callable, Protocol

from ..events import ToastPosted
from .ports import resolve_maybe_awaitable

if TYPE_CHECKING:  # pragma: no cover - imports for type checking only
    from ...services.settings import Settings
    from ..domain.dialog_store import DialogStore
    from ..events import EventBus
    from ..models.tab_group_models import TabGroup
    from .ports import Clipboard, TabGroupService

LOGGER = logging.getLogger(__name__)

DEFAULT_SHARE_EXPIRY_DAYS = 30


class ExportPathProvider(Protocol):
    """Protocol for choosing where an export is written."""

    def prompt_export_path(self, suggested_name: str) -> Path | None:
        """Return the target path, or None if the user cancelled."""
        ...


async def _copy(clipboard: Clipboard, text: str) -> bool:
    """Best-effort clipboard write; any failure reads as False."""
    try:
        return bool(await resolve_maybe_awaitable(clipboard.copy_to_clipboard(text)))
    except Exception:
        LOGGER.warning("Clipboard write failed", exc_info=True)
        return False


class ShareGroupUseCase:
    """Create a public share link for a group and copy it to the clipboard.

    The link is still useful when the clipboard is unavailable, so a failed
    copy downgrades the outcome to a warning that shows the link instead of
    failing the whole action.
    """

    __slots__ = ("_dialogs", "_service", "_clipboard", "_settings_provider")

    def __init__(
        self,
        dialogs: DialogStore,
        service: TabGroupService,
        clipboard: Clipboard,
        *,
        settings_provider: Callable[[], Settings | None] | None = None,
    ) -> None:
        self._dialogs = dialogs
        self._service = service
        self._clipboard = clipboard
        self._settings_provider = settings_provider or (lambda: None)

    async def execute(self, group: TabGroup) -> str | None:
        """Returns the share URL, or None when creation failed."""
        try:
            share = await self._service.create_share(
                group.id, is_public=True, expires_in_days=self._expiry_days()
            )
        except Exception:
            LOGGER.warning("ShareGroupUseCase: creating share for %s failed", group.id, exc_info=True)
            await self._dialogs.error("Failed to create share link")
            return None

        if await _copy(self._clipboard, share.url):
            await self._dialogs.success(
                f"Share link copied to clipboard:\n\n{share.url}", title="Share link created"
            )
        else:
            await self._dialogs.warning(
                f"Share link created:\n\n{share.url}\n\nCopying failed, please copy it manually.",
                title="Share link created",
            )
        return share.url

    def _expiry_days(self) -> int:
        settings = self._settings_provider()
        if settings is None:
            return DEFAULT_SHARE_EXPIRY_DAYS
        return int(settings.share_expires_in_days)


def format_group_as_text(group: TabGroup) -> str:
    """``title\\nurl`` blocks separated by a blank line."""
    return "\n\n".join(f"{item.title}\n{item.url}" for item in group.items)


class CopyGroupToClipboardUseCase:
    """Copy every tab of a group as plain text."""

    __slots__ = ("_dialogs", "_clipboard", "_event_bus")

    def __init__(self, dialogs: DialogStore, clipboard: Clipboard, event_bus: EventBus) -> None:
        self._dialogs = dialogs
        self._clipboard = clipboard
        self._event_bus = event_bus

    async def execute(self, group: TabGroup) -> bool:
        if not group.items:
            await self._dialogs.info("This group has no tabs to copy")
            return False
        if not await _copy(self._clipboard, format_group_as_text(group)):
            await self._dialogs.error("Copy failed, please retry")
            return False
        self._event_bus.publish(ToastPosted(message=f"Copied {len(group.items)} links"))
        return True


def render_markdown(group: TabGroup) -> str:
    """Render a group as a Markdown document with a numbered link list."""
    lines = [f"# {group.title}", ""]
    lines.append(f"Created: {_format_date(group.created_at)}")
    lines.append(f"Tabs: {len(group.items)}")
    lines.append("")
    if group.tags:
        lines.append(f"Tags: {', '.join(group.tags)}")
        lines.append("")
    lines.append("---")
    lines.append("")
    for index, item in enumerate(group.items, start=1):
        lines.append(f"{index}. [{item.title}]({item.url})")
        if item.is_pinned:
            lines.append("   - Pinned")
        if item.is_todo:
            lines.append("   - To-do")
        lines.append("")
    return "\n".join(lines)


def _format_date(value: str) -> str:
    if not value:
        return "unknown"
    try:
        return datetime.fromisoformat(value.replace("Z", "+00:00")).strftime("%Y-%m-%d %H:%M")
    except ValueError:
        return value


def suggested_export_name(group: TabGroup) -> str:
    stem = re.sub(r"[^\w\- ]+", "", group.title).strip() or "tab-group"
    return f"{stem}.md"


class ExportMarkdownUseCase:
    """Write a group to a Markdown file chosen by the path provider."""

    __slots__ = ("_dialogs", "_event_bus", "_path_provider", "_file_writer")

    def __init__(
        self,
        dialogs: DialogStore,
        event_bus: EventBus,
        path_provider: ExportPathProvider | None = None,
        *,
        file_writer: Callable[[Path, str], None] | None = None,
    ) -> None:
        self._dialogs = dialogs
        self._event_bus = event_bus
        self._path_provider = path_provider
        self._file_writer = file_writer or _write_text

    async def execute(self, group: TabGroup, path: Path | str | None = None) -> Path | None:
        target = Path(path) if path is not None else self._prompt(group)
        if target is None:
            LOGGER.debug("ExportMarkdownUseCase: no target chosen")
            return None
        try:
            self._file_writer(target, render_markdown(group))
        except OSError:
            LOGGER.warning("ExportMarkdownUseCase: writing %s failed", target, exc_info=True)
            await self._dialogs.error(f"Could not write {target.name}")
            return None
        self._event_bus.publish(ToastPosted(message=f"Exported to {target.name}"))
        return target

    def _prompt(self, group: TabGroup) -> Path | None:
        if self._path_provider is None:
            return None
        return self._path_provider.prompt_export_path(suggested_export_name(group))


def _write_text(path: Path, text: str) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(text, encoding="utf-8")


__all__ = [
    "DEFAULT_SHARE_EXPIRY_DAYS",
    "CopyGroupToClipboardUseCase",
    "ExportMarkdownUseCase",
    "ExportPathProvider",
    "ShareGroupUseCase",
    "format_group_as_text",
    "render_markdown",
    "suggested_export_name",
]
