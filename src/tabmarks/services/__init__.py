"""Service layer helpers (settings persistence, tab-group REST client)."""

from .tab_groups import ClientSettings, ShareLink, TabGroupsClient, TabGroupsServiceError

__all__ = [
    "ClientSettings",
    "ShareLink",
    "TabGroupsClient",
    "TabGroupsServiceError",
]
