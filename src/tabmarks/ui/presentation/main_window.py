"""Main window: a tab-group tree with a context menu.

The window is a thin shell:
1. Renders the TabGroupStore as a folder/group/tab tree
2. Builds context menus whose entries schedule TabGroupMenu coroutines
3. Shows ToastPosted events in the status bar
4. Provides the export path prompt used by the Markdown export
5. Restores and persists its geometry through the settings store
"""

from __future__ import annotations

import asyncio
import logging
from pathlib import Path
from typing import TYPE_CHECKING, Any, Awaitable, Callable

from PySide6.QtCore import QByteArray, Qt
from PySide6.QtWidgets import (
    QFileDialog,
    QInputDialog,
    QMainWindow,
    QMenu,
    QTreeWidget,
    QTreeWidgetItem,
)

from ..events import TabGroupsChanged, ToastPosted

if TYPE_CHECKING:  # pragma: no cover - imports for type checking only
    from ..application.coordinator import TabGroupMenu
    from ..domain.tab_group_store import TabGroupStore
    from ..events import EventBus
    from ...services.settings import Settings, SettingsStore
    from ..models.tab_group_models import TabGroup, TabGroupItem

LOGGER = logging.getLogger(__name__)

WINDOW_APP_NAME = "Tabmarks"
TOAST_TIMEOUT_MS = 4000

_GROUP_ROLE = int(Qt.ItemDataRole.UserRole)
_ITEM_ROLE = _GROUP_ROLE + 1


class MainWindow(QMainWindow):
    """Top-level window listing tab groups."""

    def __init__(
        self,
        event_bus: EventBus,
        store: TabGroupStore,
        menu: TabGroupMenu,
        *,
        settings: Settings | None = None,
        settings_store: SettingsStore | None = None,
    ) -> None:
        super().__init__()
        self._event_bus = event_bus
        self._store = store
        self._menu = menu
        self._settings = settings
        self._settings_store = settings_store
        self._tasks: set[asyncio.Future[Any]] = set()

        self.setWindowTitle(WINDOW_APP_NAME)
        self.resize(720, 560)

        self._tree = QTreeWidget(self)
        self._tree.setHeaderLabels(["Title", "Tabs"])
        self._tree.setContextMenuPolicy(Qt.ContextMenuPolicy.CustomContextMenu)
        self._tree.customContextMenuRequested.connect(self._show_context_menu)
        self.setCentralWidget(self._tree)
        self.statusBar()
        self._restore_geometry()

        event_bus.subscribe(TabGroupsChanged, self._on_groups_changed)
        event_bus.subscribe(ToastPosted, self._on_toast)
        menu.set_export_path_provider(self)
        self.rebuild_tree()

    @property
    def tree(self) -> QTreeWidget:
        return self._tree

    # ------------------------------------------------------------------
    # Tree
    # ------------------------------------------------------------------

    def rebuild_tree(self) -> None:
        self._tree.clear()
        self._add_children(None, self._tree.invisibleRootItem())
        self._tree.expandAll()

    def _add_children(self, parent_id: str | None, parent_row: QTreeWidgetItem) -> None:
        for group in self._store.children_of(parent_id):
            label = f"🔒 {group.title}" if group.is_locked else group.title
            count = "" if group.is_folder else str(group.tab_count)
            row = QTreeWidgetItem(parent_row, [label, count])
            row.setData(0, _GROUP_ROLE, group.id)
            if group.is_folder:
                self._add_children(group.id, row)
                continue
            for item in group.items:
                markers = ("📌 " if item.is_pinned else "") + ("☐ " if item.is_todo else "")
                child = QTreeWidgetItem(row, [f"{markers}{item.title or item.url}", ""])
                child.setData(0, _GROUP_ROLE, group.id)
                child.setData(0, _ITEM_ROLE, item.id)
                child.setToolTip(0, item.url)

    def _on_groups_changed(self, event: TabGroupsChanged) -> None:
        self.rebuild_tree()

    def _on_toast(self, event: ToastPosted) -> None:
        self.statusBar().showMessage(event.message, TOAST_TIMEOUT_MS)

    # ------------------------------------------------------------------
    # Context Menu
    # ------------------------------------------------------------------

    def _show_context_menu(self, pos: Any) -> None:
        row = self._tree.itemAt(pos)
        if row is None:
            return
        group = self._store.get(row.data(0, _GROUP_ROLE))
        if group is None:
            return
        item_id = row.data(0, _ITEM_ROLE)
        if item_id:
            item = next((entry for entry in group.items if entry.id == item_id), None)
            if item is None:
                return
            qmenu = self.build_item_menu(group, item)
        else:
            qmenu = self.build_group_menu(group)
        qmenu.exec(self._tree.viewport().mapToGlobal(pos))

    def build_group_menu(self, group: TabGroup) -> QMenu:
        qmenu = QMenu(self)
        menu = self._menu
        if not group.is_folder:
            self._add(qmenu, "Open in new window", lambda: menu.on_open_in_new_window(group))
            self._add(qmenu, "Open in current window", lambda: menu.on_open_in_current_window(group))
            self._add(qmenu, "Open in incognito window", lambda: menu.on_open_in_incognito(group))
            qmenu.addSeparator()
        self._add(qmenu, "Rename…", lambda: self._rename_group(group))
        if not group.is_folder:
            self._add(qmenu, "Share…", lambda: menu.on_share(group))
            self._add(qmenu, "Copy to clipboard", lambda: menu.on_copy_to_clipboard(group))
            self._add(qmenu, "Export as Markdown…", lambda: menu.on_export_markdown(group))
        qmenu.addSeparator()
        folders = qmenu.addMenu("New folder")
        self._add(folders, "Above", lambda: menu.on_create_folder_above(group))
        if group.is_folder:
            self._add(folders, "Inside", lambda: menu.on_create_folder_inside(group))
        self._add(folders, "Below", lambda: menu.on_create_folder_below(group))
        self._add(qmenu, "Pin to top", lambda: menu.on_pin_to_top(group))
        if not group.is_folder:
            self._add(qmenu, "Remove duplicates", lambda: menu.on_remove_duplicates(group))
        self._add(qmenu, "Unlock" if group.is_locked else "Lock", lambda: menu.on_lock(group))
        move = qmenu.addMenu("Move to")
        self._add(move, "Top level", lambda: menu.on_move(group, None))
        for folder in self._store.groups:
            if folder.is_folder and folder.id != group.id:
                self._add(move, folder.title, lambda folder_id=folder.id: menu.on_move(group, folder_id))
        qmenu.addSeparator()
        trash = self._add(qmenu, "Move to trash", lambda: menu.on_move_to_trash(group))
        trash.setEnabled(not group.is_locked)
        return qmenu

    def build_item_menu(self, group: TabGroup, item: TabGroupItem) -> QMenu:
        qmenu = QMenu(self)
        menu = self._menu
        self._add(qmenu, "Rename…", lambda: self._rename_item(group, item))
        self._add(
            qmenu, "Unpin" if item.is_pinned else "Pin", lambda: menu.on_toggle_item_pin(group, item)
        )
        self._add(
            qmenu,
            "Remove from to-do" if item.is_todo else "Mark as to-do",
            lambda: menu.on_toggle_item_todo(group, item),
        )
        move = qmenu.addMenu("Move to group")
        targets = menu.item_move_targets(group)
        for target in targets:
            self._add(move, target.title, lambda target=target: menu.on_move_item(group, item, target))
        move.setEnabled(bool(targets))
        qmenu.addSeparator()
        self._add(qmenu, "Archive", lambda: menu.on_archive_item(group, item))
        self._add(qmenu, "Delete", lambda: menu.on_delete_item(group, item))
        return qmenu

    def _add(self, qmenu: QMenu, text: str, factory: Callable[[], Awaitable[Any] | None]) -> Any:
        action = qmenu.addAction(text)
        action.triggered.connect(lambda _checked=False: self._run(factory))
        return action

    def _run(self, factory: Callable[[], Awaitable[Any] | None]) -> None:
        coro = factory()
        if coro is not None:
            self.schedule_coroutine(coro)

    async def _rename_group(self, group: TabGroup) -> None:
        title, ok = QInputDialog.getText(self, "Rename tab group", "Title:", text=group.title)
        if ok:
            await self._menu.on_rename(group, title)

    async def _rename_item(self, group: TabGroup, item: TabGroupItem) -> None:
        title, ok = QInputDialog.getText(self, "Rename tab", "Title:", text=item.title)
        if ok:
            await self._menu.on_rename_item(group, item, title)

    # ------------------------------------------------------------------
    # ExportPathProvider
    # ------------------------------------------------------------------

    def prompt_export_path(self, suggested_name: str) -> Path | None:
        path, _ = QFileDialog.getSaveFileName(
            self, "Export as Markdown", suggested_name, "Markdown (*.md)"
        )
        return Path(path) if path else None

    # ------------------------------------------------------------------
    # Async
    # ------------------------------------------------------------------

    def schedule_coroutine(self, coro: Awaitable[Any]) -> asyncio.Future[Any]:
        """Run ``coro`` on the loop, keeping a reference until it finishes."""
        task = asyncio.ensure_future(coro)
        self._tasks.add(task)
        task.add_done_callback(self._task_done)
        return task

    def _task_done(self, task: asyncio.Future[Any]) -> None:
        self._tasks.discard(task)
        if task.cancelled():
            return
        exc = task.exception()
        if exc is not None:
            LOGGER.error("MainWindow: action failed", exc_info=exc)

    # ------------------------------------------------------------------
    # Geometry
    # ------------------------------------------------------------------

    def _restore_geometry(self) -> None:
        encoded = self._settings.window_geometry if self._settings is not None else None
        if not encoded:
            return
        geometry = QByteArray.fromBase64(QByteArray(encoded.encode("utf-8")))
        if not self.restoreGeometry(geometry):
            LOGGER.debug("MainWindow: ignoring unreadable window geometry")

    def _persist_geometry(self) -> None:
        if self._settings is None:
            return
        self._settings.window_geometry = bytes(self.saveGeometry().toBase64().data()).decode("ascii")
        if self._settings_store is None:
            return
        try:
            self._settings_store.save(self._settings)
        except OSError as exc:
            LOGGER.warning("Failed to persist window geometry: %s", exc)

    def closeEvent(self, event: Any) -> None:  # noqa: N802 - Qt override
        for task in list(self._tasks):
            task.cancel()
        self._persist_geometry()
        super().closeEvent(event)


__all__ = ["MainWindow", "WINDOW_APP_NAME"]
