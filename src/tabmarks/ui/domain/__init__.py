"""Domain layer: state holders that publish events on change.

Domain Managers:
    - DialogStore: pending confirmation/alert slots
    - TabGroupStore: locally mirrored tab groups

Both receive the event bus via constructor injection and have no Qt
dependencies.
"""

from __future__ import annotations

from .dialog_store import DialogStore
from .tab_group_store import TabGroupStore

__all__: list[str] = [
    "DialogStore",
    "TabGroupStore",
]
