"""Presentation layer for the tab-group UI.

1. **DialogHost**: renders the dialog store's pending confirmation and
   alert through a view factory and reports clicks back by request id
2. **Widgets**: ConfirmDialog / AlertDialog and the bulk-open progress window
3. **MainWindow**: tab-group tree whose context menu delegates to TabGroupMenu

Design Principles:
    - Thin components that delegate to the application layer
    - Subscribe to events for reactive updates
    - No business logic - only UI updates
"""

from __future__ import annotations

from .dialog_host import DialogHost, DialogView, DialogViewFactory

__all__ = [
    "DialogHost",
    "DialogView",
    "DialogViewFactory",
]
