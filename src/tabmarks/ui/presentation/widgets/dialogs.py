"""Confirmation and alert dialogs rendered for pending dialog requests."""

from __future__ import annotations

from typing import Callable

from PySide6.QtCore import Qt
from PySide6.QtWidgets import (
    QDialog,
    QDialogButtonBox,
    QFrame,
    QHBoxLayout,
    QLabel,
    QVBoxLayout,
    QWidget,
)

from ...models.dialog_models import AlertRequest, ConfirmationRequest, DialogKind

__all__ = [
    "KIND_COLORS",
    "KIND_GLYPHS",
    "AlertDialog",
    "ConfirmDialog",
    "QtDialogViewFactory",
]

KIND_COLORS = {
    DialogKind.INFO: "#6a737d",
    DialogKind.SUCCESS: "#1a7f37",
    DialogKind.WARNING: "#b08800",
    DialogKind.ERROR: "#d73a49",
}
KIND_GLYPHS = {
    DialogKind.INFO: "i",
    DialogKind.SUCCESS: "✓",
    DialogKind.WARNING: "!",
    DialogKind.ERROR: "✕",
}


class _RequestDialog(QDialog):
    """Non-blocking dialog with a coloured severity badge and a message body.

    Exactly one of the outcome callbacks fires per dialog, and none fires
    after :meth:`dismiss`.
    """

    def __init__(
        self,
        request_id: str,
        title: str,
        message: str,
        kind: DialogKind,
        parent: QWidget | None = None,
    ) -> None:
        super().__init__(parent)
        self.request_id = request_id
        self._settled = False
        self.setWindowTitle(title)
        self.setModal(False)
        self.setAttribute(Qt.WidgetAttribute.WA_DeleteOnClose, False)

        layout = QVBoxLayout(self)
        row = QHBoxLayout()
        self._badge = QLabel(KIND_GLYPHS[kind])
        self._badge.setObjectName("dialogKindBadge")
        self._badge.setFixedSize(28, 28)
        self._badge.setAlignment(Qt.AlignmentFlag.AlignCenter)
        self._badge.setStyleSheet(
            f"background-color: {KIND_COLORS[kind]}; color: white;"
            " border-radius: 14px; font-weight: bold;"
        )
        row.addWidget(self._badge, 0, Qt.AlignmentFlag.AlignTop)

        self._message = QLabel(message)
        self._message.setObjectName("dialogMessage")
        self._message.setTextFormat(Qt.TextFormat.PlainText)
        self._message.setWordWrap(True)
        self._message.setTextInteractionFlags(Qt.TextInteractionFlag.TextSelectableByMouse)
        row.addWidget(self._message, 1)
        layout.addLayout(row)

        separator = QFrame()
        separator.setFrameShape(QFrame.Shape.HLine)
        layout.addWidget(separator)

        self._buttons = QDialogButtonBox()
        layout.addWidget(self._buttons)

    @property
    def message_text(self) -> str:
        return self._message.text()

    @property
    def button_box(self) -> QDialogButtonBox:
        return self._buttons

    def dismiss(self) -> None:
        """Close without reporting an outcome (the request is already settled)."""
        self._settled = True
        self.blockSignals(True)
        try:
            self.close()
        finally:
            self.blockSignals(False)

    def _settle(self, callback: Callable[[], None]) -> None:
        if self._settled:
            return
        self._settled = True
        callback()


class ConfirmDialog(_RequestDialog):
    """Yes/no dialog. Accept confirms; Cancel, Escape and closing decline."""

    def __init__(
        self,
        request: ConfirmationRequest,
        on_confirm: Callable[[], None],
        on_cancel: Callable[[], None],
        parent: QWidget | None = None,
    ) -> None:
        super().__init__(request.request_id, request.title, request.message, request.kind, parent)
        self._confirm_button = self._buttons.addButton(
            request.confirm_label, QDialogButtonBox.ButtonRole.AcceptRole
        )
        self._cancel_button = self._buttons.addButton(
            request.cancel_label, QDialogButtonBox.ButtonRole.RejectRole
        )
        self._confirm_button.setDefault(True)
        self._buttons.accepted.connect(self.accept)
        self._buttons.rejected.connect(self.reject)
        self.accepted.connect(lambda: self._settle(on_confirm))
        self.rejected.connect(lambda: self._settle(on_cancel))

    @property
    def confirm_button(self):
        return self._confirm_button

    @property
    def cancel_button(self):
        return self._cancel_button


class AlertDialog(_RequestDialog):
    """Acknowledge-only dialog; any way of closing it acknowledges."""

    def __init__(
        self,
        request: AlertRequest,
        on_acknowledge: Callable[[], None],
        parent: QWidget | None = None,
    ) -> None:
        super().__init__(request.request_id, request.title, request.message, request.kind, parent)
        self._ok_button = self._buttons.addButton(
            request.confirm_label, QDialogButtonBox.ButtonRole.AcceptRole
        )
        self._ok_button.setDefault(True)
        self._buttons.accepted.connect(self.accept)
        self.finished.connect(lambda _code: self._settle(on_acknowledge))

    @property
    def ok_button(self):
        return self._ok_button


class QtDialogViewFactory:
    """Builds Qt dialogs parented to the main window."""

    def __init__(self, parent: QWidget | None = None) -> None:
        self._parent = parent

    def create_confirmation(
        self,
        request: ConfirmationRequest,
        on_confirm: Callable[[], None],
        on_cancel: Callable[[], None],
    ) -> ConfirmDialog:
        return ConfirmDialog(request, on_confirm, on_cancel, self._parent)

    def create_alert(
        self, request: AlertRequest, on_acknowledge: Callable[[], None]
    ) -> AlertDialog:
        return AlertDialog(request, on_acknowledge, self._parent)
