"""UI package holding the tab-group window, dialogs and their controllers."""

from .events import EventBus

__all__ = [
    # Event Bus
    "EventBus",
]
