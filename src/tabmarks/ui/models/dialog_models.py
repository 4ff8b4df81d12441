"""Dialog request records and bulk-run reports.

The request dataclasses are what the :class:`~tabmarks.ui.domain.dialog_store.DialogStore`
keeps in its two slots. Each carries the callback that settles the future a
consumer is awaiting; the store invokes it exactly once.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Callable


class DialogKind(Enum):
    """Severity of a dialog, used for the icon/accent colour only."""

    INFO = "info"
    WARNING = "warning"
    ERROR = "error"
    SUCCESS = "success"


@dataclass(slots=True)
class ConfirmationRequest:
    """A pending yes/no question.

    Attributes:
        request_id: Unique identifier (e.g. ``"confirm-1a2b3c4d"``).
        title: Window title.
        message: Body text; may contain blank-line separated paragraphs.
        kind: Severity accent.
        confirm_label: Text of the accept button.
        cancel_label: Text of the reject button.
        resolve: Settles the awaiting consumer with the user's answer.
    """

    request_id: str
    title: str
    message: str
    kind: DialogKind = DialogKind.WARNING
    confirm_label: str = "OK"
    cancel_label: str = "Cancel"
    resolve: Callable[[bool], None] = field(default=lambda _result: None, repr=False)


@dataclass(slots=True)
class AlertRequest:
    """A pending acknowledgment-only notification."""

    request_id: str
    title: str
    message: str
    kind: DialogKind = DialogKind.INFO
    confirm_label: str = "OK"
    resolve: Callable[[], None] = field(default=lambda: None, repr=False)


@dataclass(slots=True)
class BulkOperationReport:
    """Outcome of a bulk run, produced once and never persisted.

    ``blocked`` only applies to tab opening: the open call returned no
    window handle (typically a popup blocker). ``failed`` counts calls that
    raised or reported failure. ``declined`` is set when the user refused the
    confirmation and nothing was dispatched.
    """

    total: int = 0
    succeeded: int = 0
    failed: int = 0
    blocked: int = 0
    declined: bool = False

    @property
    def dispatched(self) -> int:
        return self.succeeded + self.failed + self.blocked

    @property
    def all_succeeded(self) -> bool:
        return not self.declined and self.succeeded == self.total


__all__ = [
    "DialogKind",
    "ConfirmationRequest",
    "AlertRequest",
    "BulkOperationReport",
]
