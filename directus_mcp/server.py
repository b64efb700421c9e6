from __future__ import annotations

import json
import logging
import time
import uuid
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from dataclasses import dataclass
from typing import Any, Dict, List, Optional

import mcp.types as types
from mcp.server.lowlevel import Server
from mcp.server.stdio import stdio_server

from . import __version__
from .client import DirectusClient, build_http_client
from .config import directus_settings, enabled_toolsets
from .observability import AuditLogger, InMemoryMetrics, build_audit_logger, set_shared_metrics
from .tools import ALL_TOOLS, Tool, select_tools
from .tools.helpers import text_result

INSTRUCTIONS = (
    "Tools for managing Directus Insights dashboards and panels. "
    "List and get tools accept Directus query parameters (fields, filter, search, sort, limit, offset, meta)."
)


class StructuredFormatter(logging.Formatter):
    """One JSON object per line; structured fields default to empty strings."""

    FIELDS = ("tool", "status", "correlation_id", "duration_ms")

    def format(self, record: logging.LogRecord) -> str:
        entry: Dict[str, Any] = {
            "ts": self.formatTime(record),
            "level": record.levelname,
            "logger": record.name,
        }
        for field in self.FIELDS:
            entry[field] = getattr(record, field, "")
        entry["msg"] = record.getMessage()
        if record.exc_info:
            entry["exc"] = self.formatException(record.exc_info)
        return json.dumps(entry, ensure_ascii=False, default=str)


def setup_logger(config: Dict[str, Any]) -> logging.Logger:
    logger = logging.getLogger("directus_mcp")
    if logger.handlers:
        return logger
    server_cfg = config.get("server", {})
    level_name = str(server_cfg.get("log_level", "INFO")).upper()
    logger.setLevel(getattr(logging, level_name, logging.INFO))
    # stderr only: stdout carries the stdio transport
    handler = logging.StreamHandler()
    handler.setFormatter(StructuredFormatter())
    logger.addHandler(handler)
    logger.propagate = False
    return logger


@dataclass
class AppContext:
    config: Dict[str, Any]
    client: Any
    tools: Dict[str, Tool]
    logger: logging.Logger
    metrics: InMemoryMetrics
    audit: Optional[AuditLogger] = None


async def dispatch_tool(
    app: AppContext,
    name: str,
    arguments: Optional[Dict[str, Any]],
) -> types.CallToolResult:
    """Run one tool call: invoke the wrapped handler, then record metrics, audit and log."""
    correlation_id = str(uuid.uuid4())
    tool = app.tools.get(name)
    if tool is None:
        app.logger.warning(
            f"Unknown tool requested: {name}",
            extra={"tool": name, "status": "unknown_tool", "correlation_id": correlation_id},
        )
        return text_result(
            f"Error: Unknown tool '{name}'. Available tools: {', '.join(sorted(app.tools))}",
            is_error=True,
        )

    payload_size = len(json.dumps(arguments or {}, ensure_ascii=False, default=str))
    start = time.perf_counter()
    result = await tool.handler(app.client, arguments or {})
    duration_ms = (time.perf_counter() - start) * 1000.0

    is_error = bool(result.isError)
    status = "error" if is_error else "ok"
    app.metrics.record(name, duration_ms, error=is_error)
    if app.audit is not None:
        app.audit.log_call(
            tool=name,
            status=status,
            duration_ms=duration_ms,
            is_error=is_error,
            correlation_id=correlation_id,
            payload_size=payload_size,
        )

    extra = {
        "tool": name,
        "status": status,
        "correlation_id": correlation_id,
        "duration_ms": round(duration_ms, 2),
    }
    if is_error:
        app.logger.warning("Tool call returned an error", extra=extra)
    else:
        app.logger.info("Tool call succeeded", extra=extra)
    return result


def create_server(config: Dict[str, Any]) -> Server:
    """Build the MCP server exposing the tools of the enabled toolsets."""
    logger = setup_logger(config)
    tools = select_tools(ALL_TOOLS, enabled_toolsets(config))
    settings = directus_settings(config)
    metrics = InMemoryMetrics()
    set_shared_metrics(metrics)
    audit = build_audit_logger(config)

    if not settings["token"]:
        logger.warning(
            "Directus token missing (DIRECTUS_TOKEN not set). "
            "Requests will use the public role and may fail with 401/403."
        )
    logger.info(f"Registered {len(tools)} tools: {', '.join(tools)}")

    @asynccontextmanager
    async def lifespan(_server: Server) -> AsyncIterator[AppContext]:
        http_client = build_http_client(config)
        client = DirectusClient(http_client, base_url=settings["url"], token=settings["token"])
        try:
            yield AppContext(
                config=config,
                client=client,
                tools=tools,
                logger=logger,
                metrics=metrics,
                audit=audit,
            )
        finally:
            await http_client.aclose()

    server_cfg = config.get("server", {})
    server: Server = Server(
        server_cfg.get("name", "directus-mcp"),
        version=__version__,
        instructions=INSTRUCTIONS,
        lifespan=lifespan,
    )

    @server.list_tools()
    async def handle_list_tools() -> List[types.Tool]:
        return [tool.to_mcp_tool() for tool in tools.values()]

    # Arguments are validated by each tool's pydantic schema.
    @server.call_tool(validate_input=False)
    async def handle_call_tool(name: str, arguments: Dict[str, Any]) -> types.CallToolResult:
        app: AppContext = server.request_context.lifespan_context
        return await dispatch_tool(app, name, arguments)

    return server


async def run_stdio(server: Server) -> None:
    async with stdio_server() as (read_stream, write_stream):
        await server.run(read_stream, write_stream, server.create_initialization_options())
