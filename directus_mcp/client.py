from __future__ import annotations

import json
from typing import Any, Dict, List, Optional
from urllib.parse import quote

import httpx


class DirectusError(Exception):
    """Base exception for all Directus backend errors."""
    pass


class DirectusClientError(DirectusError):
    """Request rejected by Directus (4xx)."""

    def __init__(self, message: str, status_code: int, code: Optional[str] = None) -> None:
        super().__init__(message)
        self.status_code = status_code
        self.code = code


class DirectusServerError(DirectusError):
    """Directus failed (5xx) or could not be reached."""

    def __init__(self, message: str, status_code: Optional[int] = None) -> None:
        super().__init__(message)
        self.status_code = status_code


def serialize_query(params: Optional[Dict[str, Any]]) -> Dict[str, Any]:
    """
    Convert tool query arguments into Directus REST query parameters.

    fields/sort are comma separated, filter is JSON encoded; everything else
    is passed through. None values are dropped.
    """
    query: Dict[str, Any] = {}
    for key, value in (params or {}).items():
        if value is None:
            continue
        if key in ("fields", "sort") and isinstance(value, (list, tuple)):
            query[key] = ",".join(str(v) for v in value)
        elif key in ("filter", "deep", "aggregate") and not isinstance(value, str):
            query[key] = json.dumps(value, separators=(",", ":"))
        else:
            query[key] = value
    return query


def _item_path(collection: str, item_id: str) -> str:
    # The id is always exactly one segment below the collection.
    segment = quote(str(item_id), safe="").replace(".", "%2E")
    return f"/{collection}/{segment}"


def _error_details(response: httpx.Response) -> tuple[str, Optional[str]]:
    """Extract the first message/code from a Directus error body."""
    try:
        body = response.json()
    except ValueError:
        return response.text[:500] or response.reason_phrase, None
    errors = body.get("errors") if isinstance(body, dict) else None
    if errors and isinstance(errors, list) and isinstance(errors[0], dict):
        first = errors[0]
        extensions = first.get("extensions") or {}
        return str(first.get("message", response.reason_phrase)), extensions.get("code")
    return response.reason_phrase, None


class DirectusClient:
    """
    Thin async client for the Directus REST API.

    One method per CRUD operation and collection. Each call is a single HTTP
    request; no retries, no pagination handling.
    """

    def __init__(
        self,
        http_client: httpx.AsyncClient,
        base_url: str,
        token: str = "",
    ) -> None:
        self.http_client = http_client
        self.base_url = base_url.rstrip("/")
        self.token = (token or "").strip()

    async def request(
        self,
        method: str,
        path: str,
        params: Optional[Dict[str, Any]] = None,
        payload: Any = None,
    ) -> Any:
        url = f"{self.base_url}/{path.lstrip('/')}"
        headers: Dict[str, str] = {"Accept": "application/json"}
        if self.token:
            headers["Authorization"] = f"Bearer {self.token}"

        try:
            response = await self.http_client.request(
                method=method.upper(),
                url=url,
                params=serialize_query(params),
                json=payload,
                headers=headers,
            )
        except httpx.TimeoutException as exc:
            raise DirectusServerError(f"Request to {url} timed out") from exc
        except httpx.HTTPError as exc:
            raise DirectusServerError(f"Could not reach Directus at {self.base_url}: {exc}") from exc

        status = response.status_code
        if status >= 500:
            message, _ = _error_details(response)
            raise DirectusServerError(message, status_code=status)
        if status >= 400:
            message, code = _error_details(response)
            raise DirectusClientError(message, status_code=status, code=code)
        if status == 204 or not response.content:
            return None
        return response.json()

    # Generic collection operations

    async def _list(self, collection: str, params: Optional[Dict[str, Any]]) -> Any:
        return await self.request("GET", f"/{collection}", params=params)

    async def _get(self, collection: str, item_id: str, params: Optional[Dict[str, Any]]) -> Any:
        body = await self.request("GET", _item_path(collection, item_id), params=params)
        return _unwrap(body)

    async def _create(self, collection: str, data: Dict[str, Any]) -> Any:
        body = await self.request("POST", f"/{collection}", payload=data)
        return _unwrap(body)

    async def _create_many(self, collection: str, items: List[Dict[str, Any]]) -> Any:
        return await self.request("POST", f"/{collection}", payload=list(items))

    async def _update(self, collection: str, item_id: str, data: Dict[str, Any]) -> Any:
        body = await self.request("PATCH", _item_path(collection, item_id), payload=data)
        return _unwrap(body)

    async def _update_many(self, collection: str, items: List[Dict[str, Any]]) -> Any:
        return await self.request("PATCH", f"/{collection}", payload=list(items))

    async def _delete(self, collection: str, item_id: str) -> None:
        await self.request("DELETE", _item_path(collection, item_id))

    async def _delete_many(self, collection: str, ids: List[str]) -> None:
        await self.request("DELETE", f"/{collection}", payload=list(ids))

    # Dashboards

    async def list_dashboards(self, params: Optional[Dict[str, Any]] = None) -> Any:
        return await self._list("dashboards", params)

    async def get_dashboard(self, dashboard_id: str, params: Optional[Dict[str, Any]] = None) -> Any:
        return await self._get("dashboards", dashboard_id, params)

    async def create_dashboard(self, data: Dict[str, Any]) -> Any:
        return await self._create("dashboards", data)

    async def create_dashboards(self, items: List[Dict[str, Any]]) -> Any:
        return await self._create_many("dashboards", items)

    async def update_dashboard(self, dashboard_id: str, data: Dict[str, Any]) -> Any:
        return await self._update("dashboards", dashboard_id, data)

    async def update_dashboards(self, items: List[Dict[str, Any]]) -> Any:
        return await self._update_many("dashboards", items)

    async def delete_dashboard(self, dashboard_id: str) -> None:
        await self._delete("dashboards", dashboard_id)

    async def delete_dashboards(self, ids: List[str]) -> None:
        await self._delete_many("dashboards", ids)

    # Panels

    async def list_panels(self, params: Optional[Dict[str, Any]] = None) -> Any:
        return await self._list("panels", params)

    async def get_panel(self, panel_id: str, params: Optional[Dict[str, Any]] = None) -> Any:
        return await self._get("panels", panel_id, params)

    async def create_panel(self, data: Dict[str, Any]) -> Any:
        return await self._create("panels", data)

    async def create_panels(self, items: List[Dict[str, Any]]) -> Any:
        return await self._create_many("panels", items)

    async def update_panel(self, panel_id: str, data: Dict[str, Any]) -> Any:
        return await self._update("panels", panel_id, data)

    async def update_panels(self, items: List[Dict[str, Any]]) -> Any:
        return await self._update_many("panels", items)

    async def delete_panel(self, panel_id: str) -> None:
        await self._delete("panels", panel_id)

    async def delete_panels(self, ids: List[str]) -> None:
        await self._delete_many("panels", ids)


def _unwrap(body: Any) -> Any:
    """Directus wraps single items in {"data": ...}."""
    if isinstance(body, dict) and "data" in body:
        return body["data"]
    return body


def build_http_client(config: Dict[str, Any]) -> httpx.AsyncClient:
    """Create the shared httpx client from the server.http_limits config section."""
    server_cfg = config.get("server", {})
    http_limits = server_cfg.get("http_limits", {})
    directus_cfg = config.get("directus", {})
    read_timeout = float(directus_cfg.get("timeout", http_limits.get("read_timeout", 30.0)))
    return httpx.AsyncClient(
        limits=httpx.Limits(
            max_connections=int(http_limits.get("max_connections", 100)),
            max_keepalive_connections=int(http_limits.get("max_keepalive_connections", 20)),
        ),
        timeout=httpx.Timeout(
            connect=float(http_limits.get("connect_timeout", 5.0)),
            read=read_timeout,
            write=float(http_limits.get("write_timeout", 10.0)),
            pool=float(http_limits.get("pool_timeout", 5.0)),
        ),
        follow_redirects=False,
    )
