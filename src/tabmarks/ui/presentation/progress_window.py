"""Window listing the links of a bulk open as they are dispatched."""

from __future__ import annotations

from typing import Sequence

from PySide6.QtWidgets import (
    QDialog,
    QDialogButtonBox,
    QLabel,
    QListWidget,
    QListWidgetItem,
    QProgressBar,
    QVBoxLayout,
    QWidget,
)

from ..application.bulk_ops import OUTCOME_BLOCKED, OUTCOME_OPENED
from ..models.dialog_models import BulkOperationReport
from ..models.tab_group_models import TabGroupItem

__all__ = ["BulkOpenProgressWindow"]

_PENDING = "…"
_MARKERS = {
    OUTCOME_OPENED: "✓",
    OUTCOME_BLOCKED: "⊘",
}
_FAILED_MARKER = "✕"


class BulkOpenProgressWindow(QDialog):
    """Progress reporter for :class:`OpenAllTabsUseCase`.

    One row per link, marked as it is opened, blocked or failed. The window
    stays open after the run so the user can see which links need attention.
    """

    def __init__(self, parent: QWidget | None = None) -> None:
        super().__init__(parent)
        self.setWindowTitle("Opening tabs")
        self.setModal(False)
        self.resize(480, 360)

        layout = QVBoxLayout(self)
        self._summary = QLabel("Preparing…")
        self._summary.setWordWrap(True)
        layout.addWidget(self._summary)

        self._progress = QProgressBar()
        self._progress.setRange(0, 0)
        layout.addWidget(self._progress)

        self._list = QListWidget()
        layout.addWidget(self._list)

        buttons = QDialogButtonBox(QDialogButtonBox.StandardButton.Close)
        buttons.rejected.connect(self.close)
        layout.addWidget(buttons)

    @property
    def summary_text(self) -> str:
        return self._summary.text()

    def row_text(self, index: int) -> str:
        item = self._list.item(index)
        return item.text() if item is not None else ""

    def row_count(self) -> int:
        return self._list.count()

    # ------------------------------------------------------------------
    # ProgressReporter
    # ------------------------------------------------------------------

    def started(self, items: Sequence[TabGroupItem]) -> None:
        self._list.clear()
        for item in items:
            QListWidgetItem(f"{_PENDING}  {item.title or item.url}", self._list)
        self._progress.setRange(0, len(items))
        self._progress.setValue(0)
        self._summary.setText(f"Opening {len(items)} tabs…")
        self.show()

    def item_finished(self, index: int, item: TabGroupItem, outcome: str) -> None:
        row = self._list.item(index)
        if row is not None:
            marker = _MARKERS.get(outcome, _FAILED_MARKER)
            row.setText(f"{marker}  {item.title or item.url}")
            row.setToolTip(f"{item.url} ({outcome})")
        self._progress.setValue(index + 1)

    def finished(self, report: BulkOperationReport) -> None:
        text = f"Opened {report.succeeded} of {report.total} tabs"
        if report.blocked:
            text += f", {report.blocked} blocked"
        if report.failed:
            text += f", {report.failed} failed"
        self._summary.setText(text)
        self._progress.setValue(self._progress.maximum())
