"""Async HTTP client for the tab-group service."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, List, Mapping

import httpx
from tenacity import AsyncRetrying, retry_if_exception_type, stop_after_attempt, wait_exponential

from ..ui.models.tab_group_models import TabGroup

LOGGER = logging.getLogger(__name__)


class TabGroupsServiceError(RuntimeError):
    """Raised when the service rejects a request or is unreachable."""

    def __init__(self, message: str, *, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code


class _TransientServiceError(TabGroupsServiceError):
    """5xx responses; retried before surfacing."""


@dataclass(slots=True)
class ClientSettings:
    """Subset of settings required to configure the service client."""

    base_url: str
    api_key: str = ""
    request_timeout: float = 30.0
    max_retries: int = 3
    retry_min_seconds: float = 0.5
    retry_max_seconds: float = 6.0


@dataclass(slots=True, frozen=True)
class ShareLink:
    """A created share; ``url`` is what gets copied to the clipboard."""

    url: str
    expires_in_days: int | None = None


class TabGroupsClient:
    """Thin wrapper over the tab-group REST endpoints with retry semantics.

    Connection errors, timeouts and 5xx responses are retried with
    exponential backoff; 4xx responses fail immediately.
    """

    def __init__(
        self,
        settings: ClientSettings,
        *,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._settings = settings
        headers = {"Accept": "application/json"}
        if settings.api_key:
            headers["Authorization"] = f"Bearer {settings.api_key}"
        self._http = httpx.AsyncClient(
            base_url=settings.base_url.rstrip("/"),
            headers=headers,
            timeout=settings.request_timeout,
            transport=transport,
        )

    @property
    def settings(self) -> ClientSettings:
        return self._settings

    async def aclose(self) -> None:
        await self._http.aclose()

    # ------------------------------------------------------------------
    # Groups
    # ------------------------------------------------------------------

    async def list_tab_groups(self) -> List[TabGroup]:
        payload = await self._request("GET", "/tab-groups")
        records = payload.get("tab_groups", []) if isinstance(payload, Mapping) else payload
        return [TabGroup.from_payload(record) for record in records or ()]

    async def update_tab_group(self, group_id: str, **fields: Any) -> None:
        await self._request("PATCH", f"/tab-groups/{group_id}", json=fields)

    async def delete_tab_group(self, group_id: str) -> None:
        await self._request("DELETE", f"/tab-groups/{group_id}")

    async def move_tab_group(self, group_id: str, parent_id: str | None) -> None:
        await self._request("PATCH", f"/tab-groups/{group_id}", json={"parent_id": parent_id})

    async def create_folder(
        self, title: str, parent_id: str | None = None, *, position: int | None = None
    ) -> TabGroup:
        body: dict[str, Any] = {"title": title, "parent_id": parent_id, "is_folder": 1}
        if position is not None:
            body["position"] = position
        payload = await self._request("POST", "/tab-groups", json=body)
        return TabGroup.from_payload(payload.get("tab_group", payload))

    async def create_share(
        self, group_id: str, *, is_public: bool = True, expires_in_days: int = 30
    ) -> ShareLink:
        payload = await self._request(
            "POST",
            f"/tab-groups/{group_id}/share",
            json={"is_public": is_public, "expires_in_days": expires_in_days},
        )
        share = payload.get("share", payload)
        url = share.get("share_url") or share.get("url")
        if not url:
            raise TabGroupsServiceError("Share response did not include a URL")
        return ShareLink(url=str(url), expires_in_days=expires_in_days)

    # ------------------------------------------------------------------
    # Items
    # ------------------------------------------------------------------

    async def update_tab_group_item(self, item_id: str, **fields: Any) -> None:
        await self._request("PATCH", f"/tab-groups/items/{item_id}", json=fields)

    async def delete_tab_group_item(self, item_id: str) -> None:
        await self._request("DELETE", f"/tab-groups/items/{item_id}")

    async def move_tab_group_item(self, item_id: str, target_group_id: str) -> None:
        await self._request(
            "POST", f"/tab-groups/items/{item_id}/move", json={"group_id": target_group_id}
        )

    # ------------------------------------------------------------------
    # Internal Helpers
    # ------------------------------------------------------------------

    async def _request(self, method: str, path: str, **kwargs: Any) -> Any:
        LOGGER.debug("TabGroupsClient: %s %s", method, path)
        try:
            async for attempt in self._retrying():
                with attempt:
                    response = await self._http.request(method, path, **kwargs)
                    return self._decode(response)
        except httpx.HTTPError as exc:
            raise TabGroupsServiceError(f"{method} {path} failed: {exc}") from exc
        return None  # pragma: no cover - AsyncRetrying always returns or raises

    @staticmethod
    def _decode(response: httpx.Response) -> Any:
        status = response.status_code
        if status >= 500:
            raise _TransientServiceError(
                f"{response.request.method} {response.request.url.path} returned {status}",
                status_code=status,
            )
        if status >= 400:
            raise TabGroupsServiceError(_error_message(response), status_code=status)
        if status == 204 or not response.content:
            return {}
        body = response.json()
        # Envelope: {"data": ...}
        if isinstance(body, Mapping) and "data" in body:
            return body["data"]
        return body

    def _retrying(self) -> AsyncRetrying:
        return AsyncRetrying(
            reraise=True,
            stop=stop_after_attempt(max(1, self._settings.max_retries)),
            wait=wait_exponential(
                multiplier=self._settings.retry_min_seconds,
                max=self._settings.retry_max_seconds,
            ),
            retry=retry_if_exception_type(
                (
                    httpx.TimeoutException,
                    httpx.TransportError,
                    _TransientServiceError,
                )
            ),
        )


def _error_message(response: httpx.Response) -> str:
    try:
        body = response.json()
    except ValueError:
        body = None
    if isinstance(body, Mapping):
        detail = body.get("error") or body.get("message")
        if isinstance(detail, Mapping):
            detail = detail.get("message")
        if detail:
            return str(detail)
    return f"{response.request.method} {response.request.url.path} returned {response.status_code}"


__all__ = [
    "ClientSettings",
    "ShareLink",
    "TabGroupsClient",
    "TabGroupsServiceError",
]
