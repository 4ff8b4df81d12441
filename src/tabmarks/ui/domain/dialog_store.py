"""Dialog store domain service.

Turns "ask the user" into an awaitable. A consumer raises a confirmation or
an alert and awaits the returned future; the presenter renders the request
and, when the user clicks, calls back into :meth:`DialogStore.resolve_confirmation`
or :meth:`DialogStore.resolve_alert`, which settles that future.

There are two independent single-flight slots, one for confirmations and
one for alerts. Raising into an occupied slot settles the previous request
with its negative outcome (``False`` / ``None``) before installing the new
one, so no caller is left waiting on a dialog that is no longer shown.
"""

from __future__ import annotations

import asyncio
import logging
import uuid

from ..events import (
    AlertRaised,
    AlertResolved,
    ConfirmationRaised,
    ConfirmationResolved,
    EventBus,
)
from ..models.dialog_models import AlertRequest, ConfirmationRequest, DialogKind

LOGGER = logging.getLogger(__name__)

_DEFAULT_CONFIRM_TITLE = "Confirm"
_DEFAULT_ALERT_TITLE = "Notice"
_DEFAULT_TITLES: dict[DialogKind, str] = {
    DialogKind.INFO: "Notice",
    DialogKind.WARNING: "Notice",
    DialogKind.ERROR: "Operation failed",
    DialogKind.SUCCESS: "Success",
}


class DialogStore:
    """Holds the pending confirmation and alert requests.

    Must be used from the thread running the asyncio loop; slot transitions
    are plain attribute writes and rely on the loop being single-threaded.

    Events Emitted:
        - ConfirmationRaised / AlertRaised: a request entered its slot
        - ConfirmationResolved / AlertResolved: a slot was emptied, with
          ``superseded=True`` when a newer request displaced it
    """

    __slots__ = ("_bus", "_confirmation", "_alert")

    def __init__(self, event_bus: EventBus) -> None:
        self._bus = event_bus
        self._confirmation: ConfirmationRequest | None = None
        self._alert: AlertRequest | None = None

    # ------------------------------------------------------------------
    # Properties
    # ------------------------------------------------------------------

    @property
    def confirmation(self) -> ConfirmationRequest | None:
        """The pending confirmation, if any."""
        return self._confirmation

    @property
    def alert_request(self) -> AlertRequest | None:
        """The pending alert, if any."""
        return self._alert

    # ------------------------------------------------------------------
    # Raising
    # ------------------------------------------------------------------

    def raise_confirmation(
        self,
        message: str,
        *,
        title: str | None = None,
        kind: DialogKind | str = DialogKind.WARNING,
        confirm_label: str = "OK",
        cancel_label: str = "Cancel",
    ) -> asyncio.Future[bool]:
        """Install a confirmation request and return the future it settles.

        Raises:
            RuntimeError: If called outside a running event loop.
        """
        future: asyncio.Future[bool] = asyncio.get_running_loop().create_future()

        def _resolve(result: bool) -> None:
            # The awaiting task may have been cancelled meanwhile.
            if not future.done():
                future.set_result(result)

        # A Resolved handler may raise a follow-up while we settle, so
        # displace until the slot is empty.
        while self._confirmation is not None:
            previous = self._confirmation
            LOGGER.debug("DialogStore: confirmation %s superseded", previous.request_id)
            self._settle_confirmation(previous, False, superseded=True)

        request = ConfirmationRequest(
            request_id=f"confirm-{uuid.uuid4().hex[:8]}",
            title=title or _DEFAULT_CONFIRM_TITLE,
            message=message,
            kind=DialogKind(kind),
            confirm_label=confirm_label,
            cancel_label=cancel_label,
            resolve=_resolve,
        )
        self._confirmation = request
        LOGGER.debug("DialogStore: raised %s (%s)", request.request_id, request.title)
        self._bus.publish(ConfirmationRaised(request=request))
        return future

    def raise_alert(
        self,
        message: str,
        *,
        title: str | None = None,
        kind: DialogKind | str = DialogKind.INFO,
        confirm_label: str = "OK",
    ) -> asyncio.Future[None]:
        """Install an alert request and return the future it settles."""
        future: asyncio.Future[None] = asyncio.get_running_loop().create_future()

        def _resolve() -> None:
            if not future.done():
                future.set_result(None)

        while self._alert is not None:
            previous = self._alert
            LOGGER.debug("DialogStore: alert %s superseded", previous.request_id)
            self._settle_alert(previous, superseded=True)

        request = AlertRequest(
            request_id=f"alert-{uuid.uuid4().hex[:8]}",
            title=title or _DEFAULT_ALERT_TITLE,
            message=message,
            kind=DialogKind(kind),
            confirm_label=confirm_label,
            resolve=_resolve,
        )
        self._alert = request
        LOGGER.debug("DialogStore: raised %s (%s)", request.request_id, request.title)
        self._bus.publish(AlertRaised(request=request))
        return future

    # ------------------------------------------------------------------
    # Resolving
    # ------------------------------------------------------------------

    def resolve_confirmation(self, result: bool, request_id: str | None = None) -> bool:
        """Settle the pending confirmation with ``result``.

        Args:
            result: The user's answer.
            request_id: When given, only the request with this id is
                settled. Views pass their own id so that a late click on a
                dialog that was already displaced cannot answer a newer one.

        Returns:
            True if a request was settled, False for a no-op.
        """
        current = self._confirmation
        if current is None:
            LOGGER.debug("DialogStore.resolve_confirmation: slot empty, ignoring")
            return False
        if request_id is not None and request_id != current.request_id:
            LOGGER.debug(
                "DialogStore.resolve_confirmation: stale id %s (pending %s)",
                request_id,
                current.request_id,
            )
            return False
        self._settle_confirmation(current, bool(result), superseded=False)
        return True

    def resolve_alert(self, request_id: str | None = None) -> bool:
        """Acknowledge the pending alert. Same no-op rules as confirmations."""
        current = self._alert
        if current is None:
            LOGGER.debug("DialogStore.resolve_alert: slot empty, ignoring")
            return False
        if request_id is not None and request_id != current.request_id:
            LOGGER.debug(
                "DialogStore.resolve_alert: stale id %s (pending %s)",
                request_id,
                current.request_id,
            )
            return False
        self._settle_alert(current, superseded=False)
        return True

    # ------------------------------------------------------------------
    # Consumer API
    # ------------------------------------------------------------------

    async def confirm(
        self,
        message: str,
        *,
        title: str | None = None,
        kind: DialogKind | str = DialogKind.WARNING,
        confirm_label: str = "OK",
        cancel_label: str = "Cancel",
    ) -> bool:
        """Ask a yes/no question and wait for the answer."""
        return await self.raise_confirmation(
            message,
            title=title,
            kind=kind,
            confirm_label=confirm_label,
            cancel_label=cancel_label,
        )

    async def alert(
        self,
        message: str,
        *,
        title: str | None = None,
        kind: DialogKind | str = DialogKind.INFO,
        confirm_label: str = "OK",
    ) -> None:
        """Show a notification and wait until it is acknowledged or displaced."""
        await self.raise_alert(message, title=title, kind=kind, confirm_label=confirm_label)

    async def info(self, message: str, title: str | None = None) -> None:
        await self._alert_of_kind(DialogKind.INFO, message, title)

    async def warning(self, message: str, title: str | None = None) -> None:
        await self._alert_of_kind(DialogKind.WARNING, message, title)

    async def error(self, message: str, title: str | None = None) -> None:
        await self._alert_of_kind(DialogKind.ERROR, message, title)

    async def success(self, message: str, title: str | None = None) -> None:
        await self._alert_of_kind(DialogKind.SUCCESS, message, title)

    # ------------------------------------------------------------------
    # Internal Helpers
    # ------------------------------------------------------------------

    async def _alert_of_kind(self, kind: DialogKind, message: str, title: str | None) -> None:
        await self.alert(message, title=title or _DEFAULT_TITLES[kind], kind=kind)

    def _settle_confirmation(
        self, request: ConfirmationRequest, result: bool, *, superseded: bool
    ) -> None:
        # Empty the slot before invoking the callback so a callback that
        # raises a follow-up request cannot be wiped afterwards.
        self._confirmation = None
        request.resolve(result)
        LOGGER.debug(
            "DialogStore: %s resolved result=%s superseded=%s",
            request.request_id,
            result,
            superseded,
        )
        self._bus.publish(
            ConfirmationResolved(
                request_id=request.request_id,
                result=result,
                superseded=superseded,
            )
        )

    def _settle_alert(self, request: AlertRequest, *, superseded: bool) -> None:
        self._alert = None
        request.resolve()
        LOGGER.debug(
            "DialogStore: %s acknowledged superseded=%s", request.request_id, superseded
        )
        self._bus.publish(AlertResolved(request_id=request.request_id, superseded=superseded))


__all__ = ["DialogStore"]
