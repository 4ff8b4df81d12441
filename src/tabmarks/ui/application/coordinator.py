"""Tab-group menu facade.

This module provides the TabGroupMenu - a facade that delegates the
context-menu and inline-editor actions to individual use cases.

The facade:
- Owns all use case instances (built on first use)
- Maps menu entries onto use case arguments (window mode, folder placement)
- Reloads groups from the service after duplicate removal
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import TYPE_CHECKING, Any, Callable

from ..models.dialog_models import BulkOperationReport
from .bulk_ops import OpenMode

if TYPE_CHECKING:  # pragma: no cover - imports for type checking only
    from ...services.settings import Settings
    from ..domain.dialog_store import DialogStore
    from ..domain.tab_group_store import TabGroupStore
    from ..events import EventBus
    from ..models.tab_group_models import TabGroup, TabGroupItem
    from .ports import Clipboard, ProgressReporter, TabGroupService, TabOpener
    from .share_ops import ExportPathProvider

LOGGER = logging.getLogger(__name__)


class TabGroupMenu:
    """Facade for every action reachable from a tab group's context menu.

    Example:
        menu = TabGroupMenu(
            event_bus=event_bus,
            dialogs=dialog_store,
            store=tab_group_store,
            service=client,
            browser=browser_adapter,
        )

        await menu.on_open_in_new_window(group)
        await menu.on_remove_duplicates(group)
        await menu.on_share(group)
    """

    __slots__ = (
        # Core dependencies
        "_event_bus",
        "_dialogs",
        "_store",
        "_service",
        "_opener",
        "_clipboard",
        # Providers
        "_settings_provider",
        "_progress_factory",
        "_export_path_provider",
        # Use cases (lazily constructed)
        "_use_cases",
    )

    def __init__(
        self,
        event_bus: EventBus,
        dialogs: DialogStore,
        store: TabGroupStore,
        service: TabGroupService,
        browser: TabOpener,
        *,
        clipboard: Clipboard | None = None,
        settings_provider: Callable[[], Settings | None] | None = None,
        progress_factory: Callable[[], ProgressReporter] | None = None,
        export_path_provider: ExportPathProvider | None = None,
    ) -> None:
        """Initialize the facade.

        Args:
            event_bus: Event bus for toasts and state events.
            dialogs: Store used by every use case to confirm and report.
            store: Local tab-group state.
            service: Remote tab-group API.
            browser: Opens URLs; also used as clipboard unless one is given.
            clipboard: Clipboard capability.
            settings_provider: Function returning current settings.
            progress_factory: Builds a progress surface for bulk opens.
            export_path_provider: Chooses Markdown export targets.
        """
        self._event_bus = event_bus
        self._dialogs = dialogs
        self._store = store
        self._service = service
        self._opener = browser
        self._clipboard = clipboard if clipboard is not None else browser
        self._settings_provider = settings_provider
        self._progress_factory = progress_factory
        self._export_path_provider = export_path_provider
        self._use_cases: dict[str, Any] = {}

    # ------------------------------------------------------------------
    # Provider Setters (for presentation layer binding)
    # ------------------------------------------------------------------

    def set_progress_factory(self, factory: Callable[[], ProgressReporter]) -> None:
        """Set the progress surface factory for bulk opens."""
        self._progress_factory = factory
        self._use_cases.pop("open_all", None)

    def set_export_path_provider(self, provider: ExportPathProvider) -> None:
        self._export_path_provider = provider
        self._use_cases.pop("export", None)

    # ------------------------------------------------------------------
    # Open
    # ------------------------------------------------------------------

    async def on_open_in_new_window(self, group: TabGroup) -> BulkOperationReport:
        return await self._open_all().execute(group, OpenMode.NEW_WINDOW)

    async def on_open_in_current_window(self, group: TabGroup) -> BulkOperationReport:
        return await self._open_all().execute(group, OpenMode.CURRENT_WINDOW)

    async def on_open_in_incognito(self, group: TabGroup) -> BulkOperationReport:
        return await self._open_all().execute(group, OpenMode.INCOGNITO)

    # ------------------------------------------------------------------
    # Group Mutations
    # ------------------------------------------------------------------

    async def on_rename(self, group: TabGroup, title: str) -> bool:
        return await self._get("rename", "RenameGroupUseCase").execute(group.id, title)

    async def on_pin_to_top(self, group: TabGroup) -> bool:
        return await self._get("pin", "PinToTopUseCase").execute(group)

    async def on_lock(self, group: TabGroup) -> bool:
        """Toggle the locked state of ``group``."""
        return await self._get("lock", "ToggleLockUseCase").execute(group)

    async def on_move(self, group: TabGroup, target_parent_id: str | None) -> bool:
        return await self._get("move", "MoveGroupUseCase").execute(group, target_parent_id)

    async def on_move_to_trash(self, group: TabGroup) -> bool:
        return await self._get("trash", "MoveToTrashUseCase").execute(group)

    async def on_create_folder_above(self, group: TabGroup) -> bool:
        return await self._create_folder().execute(group.parent_id, position=group.position)

    async def on_create_folder_below(self, group: TabGroup) -> bool:
        return await self._create_folder().execute(group.parent_id, position=group.position + 1)

    async def on_create_folder_inside(self, group: TabGroup) -> bool:
        if not group.is_folder:
            await self._dialogs.info("Folders can only be created inside another folder")
            return False
        return await self._create_folder().execute(group.id)

    async def on_remove_duplicates(self, group: TabGroup) -> BulkOperationReport:
        uc = self._use_cases.get("dedupe")
        if uc is None:
            from .bulk_ops import RemoveDuplicatesUseCase

            uc = self._use_cases["dedupe"] = RemoveDuplicatesUseCase(
                self._dialogs, self._service, self._store, on_refresh=self.refresh
            )
        return await uc.execute(group)

    # ------------------------------------------------------------------
    # Item Mutations
    # ------------------------------------------------------------------

    async def on_rename_item(self, group: TabGroup, item: TabGroupItem, title: str) -> bool:
        uc = self._get("rename_item", "RenameItemUseCase")
        return await uc.execute(group.id, item.id, title)

    async def on_toggle_item_pin(self, group: TabGroup, item: TabGroupItem) -> bool:
        return await self._toggle_flag("is_pinned").execute(group.id, item)

    async def on_toggle_item_todo(self, group: TabGroup, item: TabGroupItem) -> bool:
        return await self._toggle_flag("is_todo").execute(group.id, item)

    async def on_delete_item(self, group: TabGroup, item: TabGroupItem) -> bool:
        uc = self._get("delete_item", "DeleteItemUseCase")
        return await uc.execute(group.id, item)

    async def on_archive_item(self, group: TabGroup, item: TabGroupItem) -> bool:
        uc = self._get("archive_item", "ArchiveItemUseCase")
        return await uc.execute(group.id, item)

    def item_move_targets(self, group: TabGroup) -> tuple[TabGroup, ...]:
        """Groups a tab of ``group`` can be moved into: every other non-folder group."""
        return tuple(
            candidate
            for candidate in self._store.groups
            if not candidate.is_folder and candidate.id != group.id
        )

    async def on_move_item(self, group: TabGroup, item: TabGroupItem, target: TabGroup) -> bool:
        uc = self._get("move_item", "MoveItemUseCase")
        return await uc.execute(group.id, item, target)

    # ------------------------------------------------------------------
    # Share / Copy / Export
    # ------------------------------------------------------------------

    async def on_share(self, group: TabGroup) -> str | None:
        uc = self._use_cases.get("share")
        if uc is None:
            from .share_ops import ShareGroupUseCase

            uc = self._use_cases["share"] = ShareGroupUseCase(
                self._dialogs,
                self._service,
                self._clipboard,
                settings_provider=self._settings_provider,
            )
        return await uc.execute(group)

    async def on_copy_to_clipboard(self, group: TabGroup) -> bool:
        uc = self._use_cases.get("copy")
        if uc is None:
            from .share_ops import CopyGroupToClipboardUseCase

            uc = self._use_cases["copy"] = CopyGroupToClipboardUseCase(
                self._dialogs, self._clipboard, self._event_bus
            )
        return await uc.execute(group)

    async def on_export_markdown(self, group: TabGroup, path: Path | str | None = None) -> Path | None:
        uc = self._use_cases.get("export")
        if uc is None:
            from .share_ops import ExportMarkdownUseCase

            uc = self._use_cases["export"] = ExportMarkdownUseCase(
                self._dialogs, self._event_bus, self._export_path_provider
            )
        return await uc.execute(group, path)

    # ------------------------------------------------------------------
    # Refresh
    # ------------------------------------------------------------------

    async def refresh(self) -> None:
        uc = self._use_cases.get("refresh")
        if uc is None:
            from .group_ops import RefreshTabGroupsUseCase

            uc = self._use_cases["refresh"] = RefreshTabGroupsUseCase(self._service, self._store)
        await uc.execute()

    # ------------------------------------------------------------------
    # Use Case Construction
    # ------------------------------------------------------------------

    def _open_all(self) -> Any:
        uc = self._use_cases.get("open_all")
        if uc is None:
            from .bulk_ops import OpenAllTabsUseCase

            uc = self._use_cases["open_all"] = OpenAllTabsUseCase(
                self._dialogs,
                self._opener,
                self._event_bus,
                settings_provider=self._settings_provider,
                progress_factory=self._progress_factory,
            )
        return uc

    def _create_folder(self) -> Any:
        return self._get("create_folder", "CreateFolderUseCase")

    def _toggle_flag(self, field: str) -> Any:
        key = f"toggle_{field}"
        uc = self._use_cases.get(key)
        if uc is None:
            from .group_ops import ToggleItemFlagUseCase

            uc = self._use_cases[key] = ToggleItemFlagUseCase(
                self._dialogs,
                self._service,
                self._store,
                self._event_bus,
                field=field,
            )
        return uc

    def _get(self, key: str, name: str) -> Any:
        """Build (once) one of the ``group_ops`` mutation use cases."""
        uc = self._use_cases.get(key)
        if uc is None:
            from . import group_ops

            factory = getattr(group_ops, name)
            uc = self._use_cases[key] = factory(
                self._dialogs,
                self._service,
                self._store,
                self._event_bus,
            )
            LOGGER.debug("TabGroupMenu: created %s", name)
        return uc


__all__ = ["TabGroupMenu"]
