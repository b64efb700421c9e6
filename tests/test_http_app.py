from __future__ import annotations

from typing import Any, Dict

import pytest
from fastapi.testclient import TestClient

from directus_mcp.http_app import compute_tools_hash, create_app
from directus_mcp.observability import get_shared_metrics


def _config(**overrides: Any) -> Dict[str, Any]:
    config: Dict[str, Any] = {
        "server": {"name": "directus-mcp-test", "log_level": "WARNING"},
        "directus": {"url": "http://directus.test", "token": "secret"},
    }
    config.update(overrides)
    return config


@pytest.fixture
def no_server_token(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.delenv("MCP_SERVER_TOKEN", raising=False)
    for name in ("ENVIRONMENT", "APP_ENV", "NODE_ENV"):
        monkeypatch.delenv(name, raising=False)


def test_health(no_server_token: None) -> None:
    client = TestClient(create_app(_config()))

    response = client.get("/health")

    assert response.status_code == 200
    assert response.json() == {"ok": True, "status": "healthy"}


def test_discovery_lists_enabled_tools(no_server_token: None) -> None:
    client = TestClient(create_app(_config(toolsets=["panels"])))

    data = client.get("/mcp/discovery").json()

    names = [tool["name"] for tool in data["tools"]]
    assert data["tool_count"] == 8
    assert all(name.endswith(("panel", "panels")) for name in names)
    assert data["tools_hash"] == compute_tools_hash(names)


def test_metrics_exposes_shared_metrics(no_server_token: None) -> None:
    client = TestClient(create_app(_config()))
    metrics = get_shared_metrics()
    assert metrics is not None
    metrics.record("list_dashboards", 12.5, error=False)

    response = client.get("/metrics")

    assert response.status_code == 200
    assert 'directus_mcp_tool_calls_total{tool="list_dashboards"} 1.0' in response.text


def test_mcp_requires_bearer_token(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("MCP_SERVER_TOKEN", "top-secret")
    client = TestClient(create_app(_config()))

    missing = client.post("/mcp", json={})
    wrong = client.post("/mcp", json={}, headers={"Authorization": "Bearer nope"})

    assert missing.status_code == 401
    assert wrong.status_code == 401


def test_production_without_token_is_unavailable(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.delenv("MCP_SERVER_TOKEN", raising=False)
    monkeypatch.setenv("ENVIRONMENT", "production")
    client = TestClient(create_app(_config()))

    response = client.post("/mcp", json={})

    assert response.status_code == 503


def test_tools_hash_is_order_independent() -> None:
    assert compute_tools_hash(["b", "a"]) == compute_tools_hash(["a", "b"])
