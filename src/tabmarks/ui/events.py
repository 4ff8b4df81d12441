"""Typed publish/subscribe bus and the events that flow over it.

The dialog store announces every slot transition here; the presenter and
the main window react to those events instead of polling store state.
"""

from __future__ import annotations

import logging
from collections import defaultdict
from dataclasses import dataclass
from typing import Any, Callable, Generic, TypeVar
from weakref import WeakMethod

from .models.dialog_models import AlertRequest, ConfirmationRequest

logger = logging.getLogger(__name__)

E = TypeVar("E", bound="Event")

Handler = Callable[[E], None]


@dataclass(slots=True)
class Event:
    """Base class for all events; subclasses are ``@dataclass(slots=True)``."""


# =============================================================================
# Dialog events
# =============================================================================


@dataclass(slots=True)
class ConfirmationRaised(Event):
    """A confirmation request now occupies the confirmation slot."""

    request: ConfirmationRequest


@dataclass(slots=True)
class ConfirmationResolved(Event):
    """The confirmation slot was emptied.

    Attributes:
        request_id: The request that was settled.
        result: The value delivered to the awaiting consumer.
        superseded: True when a newer confirmation displaced this one.
    """

    request_id: str
    result: bool
    superseded: bool = False


@dataclass(slots=True)
class AlertRaised(Event):
    """An alert request now occupies the alert slot."""

    request: AlertRequest


@dataclass(slots=True)
class AlertResolved(Event):
    """The alert slot was emptied, by acknowledgment or displacement."""

    request_id: str
    superseded: bool = False


# =============================================================================
# Feedback / state events
# =============================================================================


@dataclass(slots=True)
class ToastPosted(Event):
    """Short non-blocking feedback; ``kind`` is a DialogKind value."""

    message: str
    kind: str = "success"


@dataclass(slots=True)
class TabGroupsChanged(Event):
    """Local tab-group state changed.

    Attributes:
        group_ids: Groups that changed; empty when the whole list was replaced.
    """

    group_ids: tuple[str, ...] = ()


class EventBus(Generic[E]):
    """Synchronous, single-threaded publish/subscribe bus.

    Bound-method handlers are held weakly so that widgets which subscribe
    do not outlive their window; plain functions and lambdas are held
    strongly. A handler that raises is logged and the remaining handlers
    still run.
    """

    __slots__ = ("_handlers",)

    def __init__(self) -> None:
        self._handlers: defaultdict[type[Event], list[_HandlerRef]] = defaultdict(list)

    def subscribe(self, event_type: type[E], handler: Handler[E]) -> None:
        self._handlers[event_type].append(_HandlerRef.create(handler))
        logger.debug("Subscribed %s to %s", _handler_name(handler), event_type.__name__)

    def unsubscribe(self, event_type: type[E], handler: Handler[E]) -> None:
        """Remove the first registration of ``handler``; unknown handlers are ignored."""

        handlers = self._handlers.get(event_type)
        if not handlers:
            return
        for index, handler_ref in enumerate(handlers):
            if handler_ref.matches(handler):
                handlers.pop(index)
                return

    def publish(self, event: E) -> None:
        event_type = type(event)
        handlers = self._handlers.get(event_type)
        if not handlers:
            logger.debug("No handlers for %s", event_type.__name__)
            return

        dead: list[_HandlerRef] = []
        # Snapshot: handlers may subscribe/unsubscribe while we iterate.
        for handler_ref in list(handlers):
            handler = handler_ref.resolve()
            if handler is None:
                dead.append(handler_ref)
                continue
            try:
                handler(event)
            except Exception:
                logger.exception(
                    "Handler %s raised for %s",
                    _handler_name(handler),
                    event_type.__name__,
                )
        for handler_ref in dead:
            if handler_ref in handlers:
                handlers.remove(handler_ref)

    def clear(self) -> None:
        self._handlers.clear()

    def handler_count(self, event_type: type[E] | None = None) -> int:
        if event_type is not None:
            return len(self._handlers.get(event_type, []))
        return sum(len(handlers) for handlers in self._handlers.values())


class _HandlerRef:
    __slots__ = ("_ref", "_is_weak")

    def __init__(self, target: Any, is_weak: bool) -> None:
        self._ref = target
        self._is_weak = is_weak

    @classmethod
    def create(cls, handler: Handler) -> _HandlerRef:
        if hasattr(handler, "__self__") and hasattr(handler, "__func__"):
            try:
                return cls(WeakMethod(handler), is_weak=True)
            except TypeError:
                pass
        return cls(handler, is_weak=False)

    def resolve(self) -> Handler | None:
        if not self._is_weak:
            return self._ref
        return self._ref()

    def matches(self, handler: Handler) -> bool:
        resolved = self.resolve()
        return resolved is not None and resolved == handler


def _handler_name(handler: Handler) -> str:
    if hasattr(handler, "__self__") and hasattr(handler, "__func__"):
        return f"{type(handler.__self__).__name__}.{handler.__func__.__name__}"
    return getattr(handler, "__name__", repr(handler))


__all__ = [
    "Event",
    "EventBus",
    "Handler",
    "ConfirmationRaised",
    "ConfirmationResolved",
    "AlertRaised",
    "AlertResolved",
    "ToastPosted",
    "TabGroupsChanged",
]
