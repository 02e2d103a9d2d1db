"""HTTP client for the menu management API."""

from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional

import httpx

logger = logging.getLogger(__name__)

MENU_API_PREFIX = "/api/v1/menu-management"


class MenuApiError(Exception):
    """Raised for any non-success response from the menu API.

    ``status_code`` is ``None`` when the server could not be reached at all.
    """

    def __init__(self, status_code: Optional[int], message: str) -> None:
        super().__init__(message)
        self.status_code = status_code
        self.message = message


class MenuApiClient:
    """Thin synchronous wrapper over the menu management endpoints."""

    def __init__(
        self,
        base_url: str,
        *,
        token: Optional[str] = None,
        timeout: float = 30.0,
        transport: Optional[httpx.BaseTransport] = None,
    ) -> None:
        headers = {"Accept": "application/json"}
        if token:
            headers["Authorization"] = f"Bearer {token}"
        self._client = httpx.Client(
            base_url=base_url.rstrip("/"),
            headers=headers,
            timeout=timeout,
            transport=transport,
        )

    def close(self) -> None:
        self._client.close()

    def __enter__(self) -> "MenuApiClient":
        return self

    def __exit__(self, *exc_info: Any) -> None:
        self.close()

    def _request(self, method: str, path: str, **kwargs: Any) -> Dict[str, Any]:
        try:
            response = self._client.request(method, f"{MENU_API_PREFIX}{path}", **kwargs)
        except httpx.HTTPError as e:
            logger.warning("Menu API %s %s failed: %s", method, path, e)
            raise MenuApiError(None, f"Failed to reach menu API: {e}") from e

        try:
            payload = response.json()
        except ValueError:
            payload = {}

        if response.is_error or payload.get("success") is False:
            message = payload.get("message") or response.reason_phrase or "Request failed"
            raise MenuApiError(response.status_code, message)
        return payload

    def get_menu_items(self, *, show_all: bool = False) -> List[Dict[str, Any]]:
        params = {"showAll": "true"} if show_all else None
        return self._request("GET", "/menu-items", params=params)["data"]

    def get_menu_tree(self, *, show_all: bool = False) -> List[Dict[str, Any]]:
        params = {"showAll": "true"} if show_all else None
        return self._request("GET", "/menu-tree", params=params)["data"]

    def get_status(self) -> Dict[str, Any]:
        return self._request("GET", "/status")

    def reorder(self, items: List[Dict[str, Any]]) -> int:
        """Submit a full reorder batch; returns the number of updated categories."""
        payload = self._request("PUT", "/reorder", json={"items": items})
        return payload["data"]["updated"]

    def sync_categories(self, level_policy: Optional[str] = None) -> Dict[str, Any]:
        body = {"levelPolicy": level_policy} if level_policy else {}
        return self._request("POST", "/sync-categories", json=body)["data"]

    def update_item(self, category_id: str, changes: Dict[str, Any]) -> Optional[Dict[str, Any]]:
        """Apply a partial update; returns ``None`` when the server had nothing to change."""
        return self._request("PUT", f"/update-item/{category_id}", json=changes).get("data")

    def delete_item(self, category_id: str) -> Dict[str, Any]:
        return self._request("DELETE", f"/delete-item/{category_id}")["data"]

    def toggle_visibility(self, category_id: str, show_in_menu: bool) -> Dict[str, Any]:
        payload = self._request(
            "PUT",
            f"/toggle-visibility/{category_id}",
            json={"showInMenu": show_in_menu},
        )
        return payload["data"]

    def add_item(self, item: Dict[str, Any]) -> Dict[str, Any]:
        return self._request("POST", "/add-item", json=item)["data"]

    def get_audit_log(self, limit: int = 50) -> List[Dict[str, Any]]:
        return self._request("GET", "/audit-log", params={"limit": limit})["data"]


__all__ = ["MENU_API_PREFIX", "MenuApiClient", "MenuApiError"]
