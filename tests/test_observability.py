from __future__ import annotations

import json
from pathlib import Path

from directus_mcp.observability import (
    AuditLogger,
    InMemoryMetrics,
    build_audit_logger,
    format_prometheus,
)


def test_metrics_snapshot() -> None:
    metrics = InMemoryMetrics()
    metrics.record("list_panels", 10.0, error=False)
    metrics.record("list_panels", 30.0, error=True)

    snapshot = metrics.snapshot()

    assert snapshot["list_panels"] == {
        "calls": 2.0,
        "errors": 1.0,
        "avg_latency_ms": 20.0,
        "max_latency_ms": 30.0,
    }


def test_prometheus_format() -> None:
    metrics = InMemoryMetrics()
    metrics.record("get_dashboard", 5.0, error=False)

    text = format_prometheus(metrics.snapshot())

    assert "directus_mcp_healthy 1" in text
    assert 'directus_mcp_tool_calls_total{tool="get_dashboard"} 1.0' in text
    assert 'directus_mcp_tool_errors_total{tool="get_dashboard"} 0.0' in text
    assert text.endswith("\n")


def test_audit_logger_appends_json_lines(tmp_path: Path) -> None:
    audit = AuditLogger(path=str(tmp_path / "nested" / "audit.log"))
    audit.log_call(tool="delete_panel", status="ok", duration_ms=1.5, is_error=False, correlation_id="c-1")
    audit.log_call(tool="delete_panel", status="error", duration_ms=2, is_error=True)

    lines = (tmp_path / "nested" / "audit.log").read_text(encoding="utf-8").splitlines()

    assert [json.loads(line)["status"] for line in lines] == ["ok", "error"]
    assert json.loads(lines[0])["correlation_id"] == "c-1"


def test_audit_disabled_by_default() -> None:
    assert build_audit_logger({}) is None


def test_audit_enabled_from_config(tmp_path: Path) -> None:
    audit = build_audit_logger({"audit": {"enabled": True, "path": str(tmp_path / "a.log")}})
    assert audit is not None
    assert audit.path == str(tmp_path / "a.log")
