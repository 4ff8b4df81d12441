"""Tab group records as returned by the tab-group service."""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from typing import Any, Mapping

LOCKED_TAG = "__locked__"


def _flag(value: Any) -> bool:
    # The service encodes booleans as 0/1 integers.
    if isinstance(value, str):
        return value.strip().lower() in {"1", "true", "yes"}
    return bool(value)


@dataclass(slots=True, frozen=True)
class TabGroupItem:
    """A single saved tab inside a group."""

    id: str
    title: str
    url: str
    is_pinned: bool = False
    is_todo: bool = False

    @classmethod
    def from_payload(cls, payload: Mapping[str, Any]) -> TabGroupItem:
        return cls(
            id=str(payload["id"]),
            title=str(payload.get("title") or ""),
            url=str(payload.get("url") or ""),
            is_pinned=_flag(payload.get("is_pinned", 0)),
            is_todo=_flag(payload.get("is_todo", 0)),
        )


@dataclass(slots=True, frozen=True)
class TabGroup:
    """A tab group or folder.

    Attributes:
        id: Service identifier.
        title: Display title.
        parent_id: Containing folder, or ``None`` at the root.
        is_folder: Folders hold other groups instead of tabs.
        position: Sort key; ``-1`` pins the group to the top.
        tags: Free-form tags; :data:`LOCKED_TAG` marks a locked group.
        items: Saved tabs in display order.
        created_at: ISO-8601 creation timestamp as sent by the service.
    """

    id: str
    title: str
    parent_id: str | None = None
    is_folder: bool = False
    position: int = 0
    tags: tuple[str, ...] = ()
    items: tuple[TabGroupItem, ...] = ()
    created_at: str = ""
    item_count: int | None = field(default=None, compare=False)

    @property
    def is_locked(self) -> bool:
        return LOCKED_TAG in self.tags

    @property
    def tab_count(self) -> int:
        return self.item_count if self.item_count is not None else len(self.items)

    def with_items(self, items: tuple[TabGroupItem, ...]) -> TabGroup:
        return replace(self, items=items, item_count=len(items))

    @classmethod
    def from_payload(cls, payload: Mapping[str, Any]) -> TabGroup:
        items = tuple(TabGroupItem.from_payload(item) for item in payload.get("items") or ())
        parent = payload.get("parent_id")
        raw_count = payload.get("item_count")
        return cls(
            id=str(payload["id"]),
            title=str(payload.get("title") or ""),
            parent_id=str(parent) if parent is not None else None,
            is_folder=_flag(payload.get("is_folder", 0)),
            position=int(payload.get("position") or 0),
            tags=tuple(str(tag) for tag in payload.get("tags") or ()),
            items=items,
            created_at=str(payload.get("created_at") or ""),
            item_count=int(raw_count) if raw_count is not None else None,
        )


__all__ = ["LOCKED_TAG", "TabGroup", "TabGroupItem"]
