"""
Async client for a remote menu-permission store.

Speaks the `/menu-permissions` REST contract used by the back-office frontend, where every
response is wrapped as ``{"success": bool, "data": ..., "message": str}``. The client
exposes the four collaborators the cascade engine needs: menu items, permission rows,
roles, and a single-row permission upsert.
"""

import logging
import threading
from datetime import datetime
from time import perf_counter
from typing import Any

import httpx

from hotel_admin.services.menu_tree import MenuItem
from hotel_admin.services.permission_cascade import PermissionEntry

logger = logging.getLogger(__name__)

_shared_clients: dict[str, httpx.AsyncClient] = {}
_shared_clients_lock = threading.Lock()


def _get_shared_client(base_url: str, timeout: float) -> httpx.AsyncClient:
    with _shared_clients_lock:
        client = _shared_clients.get(base_url)
        if client is None:
            client = httpx.AsyncClient(
                base_url=base_url,
                timeout=httpx.Timeout(timeout, connect=10.0),
                limits=httpx.Limits(max_keepalive_connections=20, max_connections=100),
            )
            _shared_clients[base_url] = client
        return client


async def close_shared_clients() -> None:
    with _shared_clients_lock:
        clients = list(_shared_clients.values())
        _shared_clients.clear()
    for client in clients:
        await client.aclose()


class PermissionStoreError(Exception):
    """Raised when the remote store rejects a request or cannot be reached."""

    def __init__(self, message: str, status_code: int | None = None):
        super().__init__(message)
        self.status_code = status_code


def _parse_timestamp(value: Any) -> datetime | None:
    if not value:
        return None
    try:
        return datetime.fromisoformat(str(value))
    except ValueError:
        return None


class PermissionStoreClient:
    """Async client for the remote menu-permission REST API."""

    def __init__(
        self,
        base_url: str = "http://localhost:8001/api",
        token: str | None = None,
        timeout: float = 30.0,
        client: httpx.AsyncClient | None = None,
    ):
        self.base_url = base_url.rstrip("/")
        self.token = token
        self._timeout = httpx.Timeout(timeout, connect=10.0)
        self._client = client or _get_shared_client(self.base_url, timeout)

    def _headers(self) -> dict[str, str]:
        headers = {"Content-Type": "application/json"}
        if self.token:
            headers["Authorization"] = f"Bearer {self.token}"
        return headers

    async def _perform_request(
        self,
        method: str,
        path: str,
        *,
        json: Any = None,
        params: dict[str, Any] | None = None,
    ) -> Any:
        """Execute a request, log its latency, and unwrap the response envelope."""

        started = perf_counter()
        try:
            response = await self._client.request(
                method,
                path,
                headers=self._headers(),
                params=params,
                json=json,
                timeout=self._timeout,
                follow_redirects=True,
            )
            response.raise_for_status()
        except httpx.HTTPStatusError as exc:
            elapsed_ms = (perf_counter() - started) * 1000
            logger.warning(
                "Permission store request failed: method=%s path=%s status=%s elapsed_ms=%.1f",
                method,
                path,
                exc.response.status_code,
                elapsed_ms,
            )
            raise PermissionStoreError(_error_detail(exc.response), status_code=exc.response.status_code) from exc
        except httpx.HTTPError as exc:
            elapsed_ms = (perf_counter() - started) * 1000
            logger.warning(
                "Permission store request error: method=%s path=%s elapsed_ms=%.1f error=%s",
                method,
                path,
                elapsed_ms,
                exc,
            )
            raise PermissionStoreError(f"Permission store unreachable: {exc}") from exc

        elapsed_ms = (perf_counter() - started) * 1000
        logger.info(
            "Permission store request: method=%s path=%s status=%s elapsed_ms=%.1f",
            method,
            path,
            response.status_code,
            elapsed_ms,
        )

        try:
            payload = response.json()
        except ValueError as exc:
            raise PermissionStoreError(f"{method} {path} returned a non-JSON body", status_code=response.status_code) from exc
        if not isinstance(payload, dict) or not payload.get("success", False):
            message = payload.get("message") if isinstance(payload, dict) else None
            raise PermissionStoreError(message or f"{method} {path} was not successful", status_code=response.status_code)
        return payload.get("data")

    async def fetch_menu_items(self) -> list[MenuItem]:
        data = await self._perform_request("GET", "/menu-permissions/menu-items")
        return [MenuItem.from_mapping(row) for row in data or []]

    async def fetch_permission_entries(self) -> list[PermissionEntry]:
        data = await self._perform_request("GET", "/menu-permissions/permissions")
        return [
            PermissionEntry(
                role_name=row["role_name"],
                menu_id=row["menu_id"],
                can_view=bool(row.get("can_view")),
                updated_at=_parse_timestamp(row.get("updated_at")),
            )
            for row in data or []
        ]

    async def fetch_roles(self) -> list[str]:
        data = await self._perform_request("GET", "/menu-permissions/roles")
        return [row["role_name"] for row in data or []]

    async def write_permission(self, role_name: str, menu_id: str, can_view: bool) -> None:
        await self._perform_request(
            "PUT",
            "/menu-permissions/permissions",
            json={"role_name": role_name, "menu_id": menu_id, "can_view": can_view},
        )

    async def write_one(self, menu_id: str, role_name: str, can_view: bool) -> None:
        """``write_permission`` with the argument order ``apply_plan`` uses."""
        await self.write_permission(role_name, menu_id, can_view)


def _error_detail(response: httpx.Response) -> str:
    try:
        payload = response.json()
    except ValueError:
        return f"HTTP {response.status_code}"
    if isinstance(payload, dict):
        return str(payload.get("message") or payload.get("detail") or f"HTTP {response.status_code}")
    return f"HTTP {response.status_code}"
