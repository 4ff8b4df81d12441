"""In-memory tab-group state shown by the main window.

Application use cases only mutate this store after the corresponding
service call succeeded, so there is no rollback path here.
"""

from __future__ import annotations

import logging
from dataclasses import replace
from typing import Any, Iterable

from ..events import EventBus, TabGroupsChanged
from ..models.tab_group_models import TabGroup, TabGroupItem

LOGGER = logging.getLogger(__name__)


class TabGroupStore:
    """Ordered list of tab groups plus lookup by id.

    Events Emitted:
        - TabGroupsChanged: after every mutation
    """

    __slots__ = ("_bus", "_groups")

    def __init__(self, event_bus: EventBus, groups: Iterable[TabGroup] = ()) -> None:
        self._bus = event_bus
        self._groups: list[TabGroup] = list(groups)

    @property
    def groups(self) -> tuple[TabGroup, ...]:
        return tuple(self._groups)

    def get(self, group_id: str) -> TabGroup | None:
        for group in self._groups:
            if group.id == group_id:
                return group
        return None

    def children_of(self, parent_id: str | None) -> tuple[TabGroup, ...]:
        """Groups directly under ``parent_id`` sorted by position."""
        children = [group for group in self._groups if group.parent_id == parent_id]
        return tuple(sorted(children, key=lambda group: group.position))

    def set_groups(self, groups: Iterable[TabGroup]) -> None:
        self._groups = list(groups)
        LOGGER.debug("TabGroupStore: replaced with %d groups", len(self._groups))
        self._bus.publish(TabGroupsChanged())

    def update_group(self, group_id: str, **changes: Any) -> TabGroup | None:
        """Apply field changes to one group; returns the new record or None."""
        index = self._index_of(group_id)
        if index is None:
            LOGGER.debug("TabGroupStore.update_group: unknown id %s", group_id)
            return None
        updated = replace(self._groups[index], **changes)
        self._groups[index] = updated
        self._bus.publish(TabGroupsChanged(group_ids=(group_id,)))
        return updated

    def remove_group(self, group_id: str) -> bool:
        index = self._index_of(group_id)
        if index is None:
            return False
        del self._groups[index]
        self._bus.publish(TabGroupsChanged(group_ids=(group_id,)))
        return True

    def update_item(self, group_id: str, item_id: str, **changes: Any) -> TabGroupItem | None:
        group = self.get(group_id)
        if group is None:
            return None
        updated_item: TabGroupItem | None = None
        items: list[TabGroupItem] = []
        for item in group.items:
            if item.id == item_id:
                updated_item = replace(item, **changes)
                items.append(updated_item)
            else:
                items.append(item)
        if updated_item is None:
            return None
        self.update_group(group_id, items=tuple(items))
        return updated_item

    def remove_items(self, group_id: str, item_ids: Iterable[str]) -> int:
        """Drop items from a group; returns how many were removed."""
        index = self._index_of(group_id)
        if index is None:
            return 0
        group = self._groups[index]
        doomed = set(item_ids)
        kept = tuple(item for item in group.items if item.id not in doomed)
        removed = len(group.items) - len(kept)
        if removed:
            self._groups[index] = group.with_items(kept)
            self._bus.publish(TabGroupsChanged(group_ids=(group_id,)))
        return removed

    def move_item(self, source_id: str, item_id: str, target_id: str) -> TabGroupItem | None:
        """Move one item to the end of another group.

        Both groups change in a single ``TabGroupsChanged``. Returns the moved
        item, or None when either group or the item is unknown.
        """
        source_index = self._index_of(source_id)
        target_index = self._index_of(target_id)
        if source_index is None or target_index is None or source_index == target_index:
            return None
        source = self._groups[source_index]
        moved = next((item for item in source.items if item.id == item_id), None)
        if moved is None:
            return None
        target = self._groups[target_index]
        self._groups[source_index] = source.with_items(
            tuple(item for item in source.items if item.id != item_id)
        )
        self._groups[target_index] = target.with_items(target.items + (moved,))
        LOGGER.debug("TabGroupStore: moved item %s from %s to %s", item_id, source_id, target_id)
        self._bus.publish(TabGroupsChanged(group_ids=(source_id, target_id)))
        return moved

    def _index_of(self, group_id: str) -> int | None:
        for index, group in enumerate(self._groups):
            if group.id == group_id:
                return index
        return None


__all__ = ["TabGroupStore"]
