"""Presenter that renders pending dialog requests.

The host subscribes to the dialog store's events and keeps at most one
confirmation view and one alert view on screen, mirroring the store's two
slots. User input flows back only through
:meth:`DialogStore.resolve_confirmation` / :meth:`DialogStore.resolve_alert`,
always tagged with the request id the view was created for.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any, Callable, Protocol

from ..events import AlertRaised, AlertResolved, ConfirmationRaised, ConfirmationResolved

if TYPE_CHECKING:  # pragma: no cover - imports for type checking only
    from ..domain.dialog_store import DialogStore
    from ..events import EventBus
    from ..models.dialog_models import AlertRequest, ConfirmationRequest

LOGGER = logging.getLogger(__name__)


class DialogView(Protocol):
    """A rendered dialog."""

    def show(self) -> None: ...

    def dismiss(self) -> None:
        """Close the view without reporting an outcome."""
        ...


class DialogViewFactory(Protocol):
    """Builds views for requests; the callbacks report the user's choice."""

    def create_confirmation(
        self,
        request: ConfirmationRequest,
        on_confirm: Callable[[], None],
        on_cancel: Callable[[], None],
    ) -> DialogView: ...

    def create_alert(
        self, request: AlertRequest, on_acknowledge: Callable[[], None]
    ) -> DialogView: ...


class DialogHost:
    """Reactive presenter for the confirmation and alert slots.

    Events Handled:
        - ConfirmationRaised / AlertRaised: build and show a view
        - ConfirmationResolved / AlertResolved: dismiss the matching view

    Example:
        host = DialogHost(dialog_store, event_bus, QtDialogViewFactory(window))
        # Views now appear whenever a use case awaits dialog_store.confirm(...)
        host.dispose()
    """

    __slots__ = ("_store", "_event_bus", "_factory", "_views", "_subscribed")

    def __init__(
        self,
        dialog_store: DialogStore,
        event_bus: EventBus,
        view_factory: DialogViewFactory,
    ) -> None:
        self._store = dialog_store
        self._event_bus = event_bus
        self._factory = view_factory
        # slot name -> (request_id, view)
        self._views: dict[str, tuple[str, DialogView]] = {}
        self._subscribed = False
        self._subscribe()

        # Requests raised before the host existed.
        if dialog_store.confirmation is not None:
            self._show_confirmation(dialog_store.confirmation)
        if dialog_store.alert_request is not None:
            self._show_alert(dialog_store.alert_request)

    # ------------------------------------------------------------------
    # Introspection
    # ------------------------------------------------------------------

    @property
    def confirmation_view(self) -> Any | None:
        entry = self._views.get("confirmation")
        return entry[1] if entry else None

    @property
    def alert_view(self) -> Any | None:
        entry = self._views.get("alert")
        return entry[1] if entry else None

    # ------------------------------------------------------------------
    # Subscription
    # ------------------------------------------------------------------

    def _subscribe(self) -> None:
        self._event_bus.subscribe(ConfirmationRaised, self._on_confirmation_raised)
        self._event_bus.subscribe(ConfirmationResolved, self._on_confirmation_resolved)
        self._event_bus.subscribe(AlertRaised, self._on_alert_raised)
        self._event_bus.subscribe(AlertResolved, self._on_alert_resolved)
        self._subscribed = True

    def dispose(self) -> None:
        """Unsubscribe and close any open views."""
        if not self._subscribed:
            return
        self._event_bus.unsubscribe(ConfirmationRaised, self._on_confirmation_raised)
        self._event_bus.unsubscribe(ConfirmationResolved, self._on_confirmation_resolved)
        self._event_bus.unsubscribe(AlertRaised, self._on_alert_raised)
        self._event_bus.unsubscribe(AlertResolved, self._on_alert_resolved)
        self._subscribed = False
        for slot in list(self._views):
            self._dismiss(slot)
        LOGGER.debug("DialogHost: disposed")

    # ------------------------------------------------------------------
    # Event Handlers
    # ------------------------------------------------------------------

    def _on_confirmation_raised(self, event: ConfirmationRaised) -> None:
        self._show_confirmation(event.request)

    def _on_confirmation_resolved(self, event: ConfirmationResolved) -> None:
        self._dismiss("confirmation", event.request_id)

    def _on_alert_raised(self, event: AlertRaised) -> None:
        self._show_alert(event.request)

    def _on_alert_resolved(self, event: AlertResolved) -> None:
        self._dismiss("alert", event.request_id)

    # ------------------------------------------------------------------
    # Internal Helpers
    # ------------------------------------------------------------------

    def _show_confirmation(self, request: ConfirmationRequest) -> None:
        self._dismiss("confirmation")
        request_id = request.request_id
        view = self._factory.create_confirmation(
            request,
            lambda: self._store.resolve_confirmation(True, request_id),
            lambda: self._store.resolve_confirmation(False, request_id),
        )
        self._views["confirmation"] = (request_id, view)
        LOGGER.debug("DialogHost: showing %s", request_id)
        view.show()

    def _show_alert(self, request: AlertRequest) -> None:
        self._dismiss("alert")
        request_id = request.request_id
        view = self._factory.create_alert(
            request, lambda: self._store.resolve_alert(request_id)
        )
        self._views["alert"] = (request_id, view)
        LOGGER.debug("DialogHost: showing %s", request_id)
        view.show()

    def _dismiss(self, slot: str, request_id: str | None = None) -> None:
        entry = self._views.get(slot)
        if entry is None:
            return
        shown_id, view = entry
        if request_id is not None and request_id != shown_id:
            return
        del self._views[slot]
        view.dismiss()


__all__ = ["DialogHost", "DialogView", "DialogViewFactory"]
