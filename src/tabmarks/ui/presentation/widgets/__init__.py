"""Qt widgets used by the presentation layer."""

from .dialogs import AlertDialog, ConfirmDialog, QtDialogViewFactory

__all__ = ["AlertDialog", "ConfirmDialog", "QtDialogViewFactory"]
