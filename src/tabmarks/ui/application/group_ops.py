"""Single tab-group and tab-item use cases.

This module provides the one-shot mutations behind the group context menu
and the inline editors:
- RenameGroupUseCase / RenameItemUseCase
- MoveGroupUseCase, ToggleLockUseCase, PinToTopUseCase, CreateFolderUseCase
- ToggleItemFlagUseCase (pinned / todo)
- MoveToTrashUseCase, DeleteItemUseCase, ArchiveItemUseCase, MoveItemUseCase
  (confirmation-gated)

Each use case issues at most one confirmation and exactly one service call.
Local state changes only after that call succeeded; a failed call raises an
error alert and leaves the store untouched.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any, Awaitable, Callable

from ..events import ToastPosted
from ..models.dialog_models import DialogKind
from ..models.tab_group_models import LOCKED_TAG

if TYPE_CHECKING:  # pragma: no cover - imports for type checking only
    from ..domain.dialog_store import DialogStore
    from ..domain.tab_group_store import TabGroupStore
    from ..events import EventBus
    from ..models.tab_group_models import TabGroup, TabGroupItem
    from .ports import RefreshCallback, TabGroupService

LOGGER = logging.getLogger(__name__)

DEFAULT_FOLDER_TITLE = "New folder"
PINNED_POSITION = -1


class _GroupMutation:
    """Shared plumbing: run one service call, then update state or alert."""

    __slots__ = ("_dialogs", "_service", "_store", "_event_bus", "_on_refresh")

    def __init__(
        self,
        dialogs: DialogStore,
        service: TabGroupService,
        store: TabGroupStore,
        event_bus: EventBus,
        *,
        on_refresh: RefreshCallback | None = None,
    ) -> None:
        self._dialogs = dialogs
        self._service = service
        self._store = store
        self._event_bus = event_bus
        self._on_refresh = on_refresh

    async def _mutate(
        self,
        description: str,
        call: Callable[[], Awaitable[Any]],
        *,
        failure_message: str,
        on_success: Callable[[Any], None] | None = None,
        toast: str | None = None,
    ) -> bool:
        try:
            result = await call()
        except Exception:
            LOGGER.warning("%s failed", description, exc_info=True)
            await self._dialogs.error(failure_message)
            return False
        if result is False:
            LOGGER.warning("%s reported failure", description)
            await self._dialogs.error(failure_message)
            return False

        if on_success is not None:
            on_success(result)
        if toast:
            self._event_bus.publish(ToastPosted(message=toast))
        if self._on_refresh is not None:
            try:
                await self._on_refresh()
            except Exception:
                LOGGER.warning("Refresh after %s failed", description, exc_info=True)
        return True

    async def _require_title(self, title: str) -> str | None:
        cleaned = (title or "").strip()
        if not cleaned:
            await self._dialogs.error("Title cannot be empty")
            return None
        return cleaned


class RenameGroupUseCase(_GroupMutation):
    """Rename a group after validating the new title."""

    __slots__ = ()

    async def execute(self, group_id: str, title: str) -> bool:
        cleaned = await self._require_title(title)
        if cleaned is None:
            return False
        return await self._mutate(
            f"rename group {group_id}",
            lambda: self._service.update_tab_group(group_id, title=cleaned),
            failure_message="Rename failed, please retry",
            on_success=lambda _result: self._store.update_group(group_id, title=cleaned),
            toast="Renamed",
        )


class RenameItemUseCase(_GroupMutation):
    """Rename a single saved tab."""

    __slots__ = ()

    async def execute(self, group_id: str, item_id: str, title: str) -> bool:
        cleaned = await self._require_title(title)
        if cleaned is None:
            return False
        return await self._mutate(
            f"rename item {item_id}",
            lambda: self._service.update_tab_group_item(item_id, title=cleaned),
            failure_message="Edit failed, please retry",
            on_success=lambda _result: self._store.update_item(group_id, item_id, title=cleaned),
            toast="Saved",
        )


class ToggleItemFlagUseCase(_GroupMutation):
    """Flip ``is_pinned`` or ``is_todo`` on a tab item."""

    __slots__ = ("_field",)

    _TOASTS = {
        "is_pinned": ("Pinned", "Unpinned"),
        "is_todo": ("Marked as to-do", "Removed from to-do"),
    }

    def __init__(self, *args: Any, field: str, **kwargs: Any) -> None:
        if field not in self._TOASTS:
            raise ValueError(f"Unsupported item flag: {field}")
        super().__init__(*args, **kwargs)
        self._field = field

    async def execute(self, group_id: str, item: TabGroupItem) -> bool:
        new_value = not bool(getattr(item, self._field))
        on_toast, off_toast = self._TOASTS[self._field]
        return await self._mutate(
            f"toggle {self._field} on item {item.id}",
            # The service stores flags as 0/1.
            lambda: self._service.update_tab_group_item(item.id, **{self._field: int(new_value)}),
            failure_message="Operation failed, please retry",
            on_success=lambda _result: self._store.update_item(
                group_id, item.id, **{self._field: new_value}
            ),
            toast=on_toast if new_value else off_toast,
        )


class ToggleLockUseCase(_GroupMutation):
    """Lock or unlock a group via the reserved lock tag."""

    __slots__ = ()

    async def execute(self, group: TabGroup) -> bool:
        if group.is_locked:
            tags = tuple(tag for tag in group.tags if tag != LOCKED_TAG)
        else:
            tags = (*group.tags, LOCKED_TAG)
        return await self._mutate(
            f"toggle lock on group {group.id}",
            lambda: self._service.update_tab_group(group.id, tags=list(tags)),
            failure_message="Operation failed",
            on_success=lambda _result: self._store.update_group(group.id, tags=tags),
            toast="Unlocked" if group.is_locked else "Locked",
        )


class PinToTopUseCase(_GroupMutation):
    """Move a group to the top of its folder."""

    __slots__ = ()

    async def execute(self, group: TabGroup) -> bool:
        return await self._mutate(
            f"pin group {group.id}",
            lambda: self._service.update_tab_group(group.id, position=PINNED_POSITION),
            failure_message="Pin failed",
            on_success=lambda _result: self._store.update_group(group.id, position=PINNED_POSITION),
            toast="Pinned to top",
        )


class MoveGroupUseCase(_GroupMutation):
    """Move a group under another folder (``None`` moves it to the root)."""

    __slots__ = ()

    async def execute(self, group: TabGroup, target_parent_id: str | None) -> bool:
        if target_parent_id == group.id:
            await self._dialogs.error("A group cannot be moved into itself")
            return False
        if target_parent_id == group.parent_id:
            LOGGER.debug("MoveGroupUseCase: %s already under %s", group.id, target_parent_id)
            return True
        return await self._mutate(
            f"move group {group.id} to {target_parent_id}",
            lambda: self._service.move_tab_group(group.id, target_parent_id),
            failure_message="Move failed",
            on_success=lambda _result: self._store.update_group(group.id, parent_id=target_parent_id),
            toast="Moved",
        )


class CreateFolderUseCase(_GroupMutation):
    """Create an empty folder under ``parent_id``."""

    __slots__ = ()

    async def execute(
        self,
        parent_id: str | None,
        title: str = DEFAULT_FOLDER_TITLE,
        *,
        position: int | None = None,
    ) -> bool:
        def _append(folder: TabGroup) -> None:
            self._store.set_groups((*self._store.groups, folder))

        return await self._mutate(
            f"create folder under {parent_id}",
            lambda: self._service.create_folder(title, parent_id, position=position),
            failure_message="Failed to create folder",
            on_success=_append,
            toast="Folder created",
        )


class MoveToTrashUseCase(_GroupMutation):
    """Delete a group after confirmation; the service keeps it in the trash."""

    __slots__ = ()

    async def execute(self, group: TabGroup) -> bool:
        confirmed = await self._dialogs.confirm(
            f'Delete "{group.title}"? It will be moved to the trash.',
            title="Delete tab group",
            kind=DialogKind.WARNING,
        )
        if not confirmed:
            return False
        return await self._mutate(
            f"delete group {group.id}",
            lambda: self._service.delete_tab_group(group.id),
            failure_message="Delete failed, please retry",
            on_success=lambda _result: self._store.remove_group(group.id),
            toast="Moved to trash",
        )


class DeleteItemUseCase(_GroupMutation):
    """Delete one tab from a group after confirmation."""

    __slots__ = ()

    async def execute(self, group_id: str, item: TabGroupItem) -> bool:
        confirmed = await self._dialogs.confirm(
            f'Delete "{item.title or item.url}"? This cannot be undone.',
            title="Delete tab",
            kind=DialogKind.WARNING,
        )
        if not confirmed:
            return False
        return await self._mutate(
            f"delete item {item.id}",
            lambda: self._service.delete_tab_group_item(item.id),
            failure_message="Delete failed, please retry",
            on_success=lambda _result: self._store.remove_items(group_id, (item.id,)),
            toast="Deleted",
        )


class ArchiveItemUseCase(_GroupMutation):
    """Archive one tab after confirmation; it leaves the group view."""

    __slots__ = ()

    async def execute(self, group_id: str, item: TabGroupItem) -> bool:
        confirmed = await self._dialogs.confirm(
            f'Archive "{item.title or item.url}"? Archived tabs stay in the archive view.',
            title="Archive tab",
            confirm_label="Archive",
        )
        if not confirmed:
            return False
        return await self._mutate(
            f"archive item {item.id}",
            lambda: self._service.update_tab_group_item(item.id, is_archived=1),
            failure_message="Archive failed, please retry",
            on_success=lambda _result: self._store.remove_items(group_id, (item.id,)),
            toast="Archived",
        )


class MoveItemUseCase(_GroupMutation):
    """Move one tab into another (non-folder) group after confirmation."""

    __slots__ = ()

    async def execute(self, source_group_id: str, item: TabGroupItem, target: TabGroup) -> bool:
        if target.id == source_group_id:
            await self._dialogs.error("The tab is already in this group")
            return False
        if target.is_folder:
            await self._dialogs.error("Tabs can only be moved into a tab group")
            return False
        confirmed = await self._dialogs.confirm(
            f'Move "{item.title or item.url}" to "{target.title}"?',
            title="Move tab",
            confirm_label="Move",
        )
        if not confirmed:
            return False
        return await self._mutate(
            f"move item {item.id} to {target.id}",
            lambda: self._service.move_tab_group_item(item.id, target.id),
            failure_message="Move failed, please retry",
            on_success=lambda _result: self._store.move_item(source_group_id, item.id, target.id),
            toast=f'Moved to "{target.title}"',
        )


class RefreshTabGroupsUseCase:
    """Reload every group from the service into the store."""

    __slots__ = ("_service", "_store")

    def __init__(self, service: TabGroupService, store: TabGroupStore) -> None:
        self._service = service
        self._store = store

    async def execute(self) -> bool:
        try:
            groups = await self._service.list_tab_groups()
        except Exception:
            LOGGER.warning("RefreshTabGroupsUseCase: listing groups failed", exc_info=True)
            return False
        self._store.set_groups(groups)
        return True


__all__ = [
    "DEFAULT_FOLDER_TITLE",
    "PINNED_POSITION",
    "ArchiveItemUseCase",
    "CreateFolderUseCase",
    "DeleteItemUseCase",
    "MoveGroupUseCase",
    "MoveItemUseCase",
    "MoveToTrashUseCase",
    "PinToTopUseCase",
    "RefreshTabGroupsUseCase",
    "RenameGroupUseCase",
    "RenameItemUseCase",
    "ToggleItemFlagUseCase",
    "ToggleLockUseCase",
]
