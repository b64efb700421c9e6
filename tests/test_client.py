from __future__ import annotations

import json
from typing import Any, Callable, List

import httpx
import pytest

from directus_mcp.client import (
    DirectusClient,
    DirectusClientError,
    DirectusServerError,
    serialize_query,
)

BASE_URL = "http://directus.test"


def _client(handler: Callable[[httpx.Request], httpx.Response], token: str = "secret") -> DirectusClient:
    http_client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
    return DirectusClient(http_client, base_url=BASE_URL + "/", token=token)


class _Recorder:
    def __init__(self, response: httpx.Response) -> None:
        self.response = response
        self.requests: List[httpx.Request] = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        return self.response

    @property
    def last(self) -> httpx.Request:
        return self.requests[-1]

    def last_json(self) -> Any:
        return json.loads(self.last.content)


def test_serialize_query() -> None:
    query = serialize_query(
        {
            "fields": ["id", "name"],
            "sort": ["-date_created", "name"],
            "filter": {"name": {"_contains": "sales"}},
            "search": "q",
            "limit": 10,
            "offset": 0,
            "meta": "total_count",
            "unused": None,
        }
    )
    assert query == {
        "fields": "id,name",
        "sort": "-date_created,name",
        "filter": '{"name":{"_contains":"sales"}}',
        "search": "q",
        "limit": 10,
        "offset": 0,
        "meta": "total_count",
    }


def test_serialize_query_empty() -> None:
    assert serialize_query(None) == {}


@pytest.mark.asyncio
async def test_list_dashboards_sends_query_and_token() -> None:
    body = {"data": [{"id": "dash-1"}], "meta": {"total_count": 1}}
    recorder = _Recorder(httpx.Response(200, json=body))
    client = _client(recorder)

    result = await client.list_dashboards({"fields": ["id"], "limit": 5})

    assert result == body
    request = recorder.last
    assert request.method == "GET"
    assert request.url.path == "/dashboards"
    assert request.url.params["fields"] == "id"
    assert request.url.params["limit"] == "5"
    assert request.headers["Authorization"] == "Bearer secret"


@pytest.mark.asyncio
async def test_no_authorization_header_without_token() -> None:
    recorder = _Recorder(httpx.Response(200, json={"data": []}))
    client = _client(recorder, token="")

    await client.list_panels()

    assert "Authorization" not in recorder.last.headers


@pytest.mark.asyncio
async def test_get_panel_unwraps_data() -> None:
    recorder = _Recorder(httpx.Response(200, json={"data": {"id": "panel-1", "name": "P"}}))
    client = _client(recorder)

    result = await client.get_panel("panel-1", {"fields": ["id", "name"]})

    assert result == {"id": "panel-1", "name": "P"}
    assert recorder.last.url.path == "/panels/panel-1"
    assert recorder.last.url.params["fields"] == "id,name"


@pytest.mark.asyncio
async def test_create_dashboard_posts_object() -> None:
    recorder = _Recorder(httpx.Response(200, json={"data": {"id": "dash-1", "name": "New"}}))
    client = _client(recorder)

    result = await client.create_dashboard({"name": "New"})

    assert result == {"id": "dash-1", "name": "New"}
    assert recorder.last.method == "POST"
    assert recorder.last_json() == {"name": "New"}


@pytest.mark.asyncio
async def test_batch_create_returns_full_body() -> None:
    body = {"data": [{"id": "panel-1"}, {"id": "panel-2"}]}
    recorder = _Recorder(httpx.Response(200, json=body))
    client = _client(recorder)

    result = await client.create_panels([{"name": "A"}, {"name": "B"}])

    assert result == body
    assert recorder.last_json() == [{"name": "A"}, {"name": "B"}]


@pytest.mark.asyncio
async def test_update_dashboard_patches_item() -> None:
    recorder = _Recorder(httpx.Response(200, json={"data": {"id": "dash-1", "color": "#fff"}}))
    client = _client(recorder)

    result = await client.update_dashboard("dash-1", {"color": "#fff"})

    assert result == {"id": "dash-1", "color": "#fff"}
    assert recorder.last.method == "PATCH"
    assert recorder.last.url.path == "/dashboards/dash-1"


@pytest.mark.asyncio
async def test_update_many_patches_collection() -> None:
    recorder = _Recorder(httpx.Response(200, json={"data": []}))
    client = _client(recorder)

    await client.update_dashboards([{"id": "dash-1", "name": "A"}])

    assert recorder.last.method == "PATCH"
    assert recorder.last.url.path == "/dashboards"
    assert recorder.last_json() == [{"id": "dash-1", "name": "A"}]


@pytest.mark.asyncio
async def test_delete_returns_none_on_204() -> None:
    recorder = _Recorder(httpx.Response(204))
    client = _client(recorder)

    assert await client.delete_panel("panel-1") is None
    assert recorder.last.method == "DELETE"
    assert recorder.last.url.path == "/panels/panel-1"


@pytest.mark.asyncio
async def test_delete_many_sends_ids() -> None:
    recorder = _Recorder(httpx.Response(204))
    client = _client(recorder)

    await client.delete_dashboards(["dash-1", "dash-2"])

    assert recorder.last.url.path == "/dashboards"
    assert recorder.last_json() == ["dash-1", "dash-2"]


@pytest.mark.asyncio
async def test_client_error_carries_directus_details() -> None:
    body = {"errors": [{"message": "You don't have permission to access this.", "extensions": {"code": "FORBIDDEN"}}]}
    client = _client(_Recorder(httpx.Response(403, json=body)))

    with pytest.raises(DirectusClientError) as exc_info:
        await client.get_dashboard("dash-1")

    assert exc_info.value.status_code == 403
    assert exc_info.value.code == "FORBIDDEN"
    assert str(exc_info.value) == "You don't have permission to access this."


@pytest.mark.asyncio
async def test_server_error() -> None:
    client = _client(_Recorder(httpx.Response(503, text="upstream down")))

    with pytest.raises(DirectusServerError) as exc_info:
        await client.list_dashboards()

    assert exc_info.value.status_code == 503


@pytest.mark.asyncio
async def test_transport_failure_is_wrapped() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("connection refused", request=request)

    client = _client(handler)

    with pytest.raises(DirectusServerError) as exc_info:
        await client.list_dashboards()

    assert exc_info.value.status_code is None
    assert "Could not reach Directus" in str(exc_info.value)


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "item_id, raw_path",
    [
        ("../users/x", b"/dashboards/%2E%2E%2Fusers%2Fx"),
        ("..", b"/dashboards/%2E%2E"),
        ("dash-1?fields=*", b"/dashboards/dash-1%3Ffields%3D%2A"),
    ],
)
async def test_item_id_stays_inside_collection(item_id: str, raw_path: bytes) -> None:
    recorder = _Recorder(httpx.Response(204))
    client = _client(recorder)

    await client.delete_dashboard(item_id)

    assert recorder.last.method == "DELETE"
    assert recorder.last.url.raw_path == raw_path
    assert recorder.last.url.query == b""


@pytest.mark.asyncio
async def test_timeout_is_wrapped() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ReadTimeout("read timed out", request=request)

    client = _client(handler)

    with pytest.raises(DirectusServerError) as exc_info:
        await client.get_panel("panel-1")

    assert exc_info.value.status_code is None
    assert str(exc_info.value) == f"Request to {BASE_URL}/panels/panel-1 timed out"
