"""Application layer for the tab-group UI.

This package contains use cases that orchestrate domain operations.
Each use case encapsulates one user action, asking and reporting through
the DialogStore and mutating state through the TabGroupStore.

Use Cases:
    - Bulk Operations: Open All Tabs, Remove Duplicates
    - Group Operations: Rename, Move, Lock, Pin, Create Folder, Trash,
      item rename/flags/move/archive/delete, Refresh
    - Share Operations: Share Link, Copy to Clipboard, Export Markdown

Coordinator:
    - TabGroupMenu: Facade that maps context-menu entries onto use cases.

All use cases:
    - Receive dependencies via constructor injection
    - Catch collaborator failures at their boundary and raise an alert
    - Let asyncio.CancelledError propagate
"""

from __future__ import annotations

from .ports import (
    Clipboard,
    NullProgressReporter,
    ProgressReporter,
    RefreshCallback,
    TabGroupService,
    TabOpener,
)
from .bulk_ops import (
    OpenMode,
    OpenAllTabsUseCase,
    RemoveDuplicatesUseCase,
    find_duplicate_items,
)
from .group_ops import (
    ArchiveItemUseCase,
    CreateFolderUseCase,
    DeleteItemUseCase,
    MoveGroupUseCase,
    MoveItemUseCase,
    MoveToTrashUseCase,
    PinToTopUseCase,
    RefreshTabGroupsUseCase,
    RenameGroupUseCase,
    RenameItemUseCase,
    ToggleItemFlagUseCase,
    ToggleLockUseCase,
)
from .share_ops import (
    CopyGroupToClipboardUseCase,
    ExportMarkdownUseCase,
    ExportPathProvider,
    ShareGroupUseCase,
)
from .coordinator import TabGroupMenu

__all__: list[str] = [
    # Ports
    "Clipboard",
    "NullProgressReporter",
    "ProgressReporter",
    "RefreshCallback",
    "TabGroupService",
    "TabOpener",
    # Bulk operations
    "OpenMode",
    "OpenAllTabsUseCase",
    "RemoveDuplicatesUseCase",
    "find_duplicate_items",
    # Group operations
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
    # Share operations
    "CopyGroupToClipboardUseCase",
    "ExportMarkdownUseCase",
    "ExportPathProvider",
    "ShareGroupUseCase",
    # Coordinator
    "TabGroupMenu",
]
