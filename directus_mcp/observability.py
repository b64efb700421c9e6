import json
import os
import threading
import time
from dataclasses import dataclass
from typing import Any, Dict, List, Optional


class AuditLogger:
    """Append-only JSON-lines log of tool calls."""

    def __init__(self, path: str = "logs/audit.log") -> None:
        self._path = path
        directory = os.path.dirname(path) or "."
        os.makedirs(directory, exist_ok=True)
        self._lock = threading.Lock()

    @property
    def path(self) -> str:
        return self._path

    def log_call(
        self,
        *,
        tool: str,
        status: str,
        duration_ms: float,
        is_error: bool,
        correlation_id: Optional[str] = None,
        payload_size: Optional[int] = None,
    ) -> None:
        entry: Dict[str, Any] = {
            "ts": time.time(),
            "tool": tool,
            "status": status,
            "duration_ms": float(duration_ms),
            "is_error": bool(is_error),
            "correlation_id": correlation_id,
            "payload_size": payload_size,
        }
        line = json.dumps(entry, ensure_ascii=False, separators=(",", ":"))
        with self._lock:
            with open(self._path, "a", encoding="utf-8") as fh:
                fh.write(line + "\n")


def build_audit_logger(config: Dict[str, Any]) -> Optional[AuditLogger]:
    audit_cfg = config.get("audit", {}) or {}
    if not audit_cfg.get("enabled", False):
        return None
    return AuditLogger(path=str(audit_cfg.get("path", "logs/audit.log")))


@dataclass
class ToolMetrics:
    calls: int = 0
    errors: int = 0
    total_latency_ms: float = 0.0
    max_latency_ms: float = 0.0

    def observe(self, duration_ms: float, error: bool) -> None:
        self.calls += 1
        self.total_latency_ms += float(duration_ms)
        self.max_latency_ms = max(self.max_latency_ms, float(duration_ms))
        if error:
            self.errors += 1

    @property
    def avg_latency_ms(self) -> float:
        if self.calls == 0:
            return 0.0
        return self.total_latency_ms / self.calls


class InMemoryMetrics:
    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._tools: Dict[str, ToolMetrics] = {}

    def record(self, tool: str, duration_ms: float, error: bool) -> None:
        with self._lock:
            metrics = self._tools.setdefault(tool, ToolMetrics())
            metrics.observe(duration_ms, error)

    def snapshot(self) -> Dict[str, Dict[str, float]]:
        with self._lock:
            return {
                name: {
                    "calls": float(m.calls),
                    "errors": float(m.errors),
                    "avg_latency_ms": float(m.avg_latency_ms),
                    "max_latency_ms": float(m.max_latency_ms),
                }
                for name, m in self._tools.items()
            }


def format_prometheus(snapshot: Dict[str, Dict[str, float]]) -> str:
    """Render a metrics snapshot in the Prometheus text exposition format."""
    lines: List[str] = [
        "# HELP directus_mcp_healthy MCP server health status",
        "# TYPE directus_mcp_healthy gauge",
        "directus_mcp_healthy 1",
    ]
    series = [
        ("directus_mcp_tool_calls_total", "counter", "Total number of tool calls", "calls"),
        ("directus_mcp_tool_errors_total", "counter", "Total number of tool calls that returned an error", "errors"),
        ("directus_mcp_tool_avg_latency_ms", "gauge", "Average tool latency in milliseconds", "avg_latency_ms"),
        ("directus_mcp_tool_max_latency_ms", "gauge", "Maximum tool latency in milliseconds", "max_latency_ms"),
    ]
    for metric, kind, help_text, key in series:
        lines.append(f"# HELP {metric} {help_text}")
        lines.append(f"# TYPE {metric} {kind}")
        for tool_name in sorted(snapshot):
            lines.append(f'{metric}{{tool="{tool_name}"}} {snapshot[tool_name][key]}')
    return "\n".join(lines) + "\n"


_shared_metrics: Optional[InMemoryMetrics] = None


def set_shared_metrics(metrics: InMemoryMetrics) -> None:
    global _shared_metrics
    _shared_metrics = metrics


def get_shared_metrics() -> Optional[InMemoryMetrics]:
    return _shared_metrics
