"""
FastAPI/ASGI app for the streamable-HTTP transport.

- Bearer token auth middleware on /mcp
- MCP session manager under /mcp
- Healthcheck under /health, Prometheus metrics under /metrics
- Tool listing under /mcp/discovery
"""
from __future__ import annotations

import hashlib
import hmac
import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from typing import Any, Callable, Dict, Optional

from fastapi import FastAPI, Request, Response, status
from fastapi.responses import JSONResponse
from mcp.server.lowlevel import Server
from mcp.server.streamable_http_manager import StreamableHTTPSessionManager
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.routing import Route
from starlette.types import ASGIApp, Receive, Scope, Send

from . import __version__
from .config import enabled_toolsets
from .env_utils import is_production_env, server_token
from .observability import InMemoryMetrics, format_prometheus, get_shared_metrics
from .server import create_server
from .tools import ALL_TOOLS, select_tools

logger = logging.getLogger("directus_mcp.http_app")

PUBLIC_PATHS = ("/health", "/metrics", "/mcp/discovery")


class BearerTokenAuthMiddleware(BaseHTTPMiddleware):
    """Bearer token authentication for the /mcp endpoints."""

    def __init__(self, app: ASGIApp, expected_token: Optional[str] = None) -> None:
        super().__init__(app)
        self.expected_token = expected_token if expected_token is not None else server_token()

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        path = request.url.path
        if path in PUBLIC_PATHS or not path.startswith("/mcp"):
            return await call_next(request)

        if is_production_env() and not self.expected_token:
            logger.error("[Auth] MCP_SERVER_TOKEN not set in production")
            return JSONResponse(
                {"error": "server_error", "message": "MCP_SERVER_TOKEN not configured"},
                status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            )

        if self.expected_token:
            auth_header = request.headers.get("authorization", "")
            if not auth_header.startswith("Bearer "):
                logger.warning(f"[Auth] Missing or invalid Authorization header for {request.method} {path}")
                return JSONResponse(
                    {"error": "unauthorized", "message": "Missing or invalid Authorization header"},
                    status_code=status.HTTP_401_UNAUTHORIZED,
                    headers={"WWW-Authenticate": "Bearer"},
                )
            token = auth_header[len("Bearer "):]
            if not hmac.compare_digest(token, self.expected_token):
                logger.warning(f"[Auth] Invalid token for {request.method} {path}")
                return JSONResponse(
                    {"error": "unauthorized", "message": "Invalid token"},
                    status_code=status.HTTP_401_UNAUTHORIZED,
                    headers={"WWW-Authenticate": "Bearer"},
                )

        return await call_next(request)


class StreamableHTTPEndpoint:
    """Raw ASGI endpoint forwarding to the MCP session manager."""

    def __init__(self, session_manager: StreamableHTTPSessionManager) -> None:
        self.session_manager = session_manager

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        await self.session_manager.handle_request(scope, receive, send)


def compute_tools_hash(tool_names: list[str]) -> str:
    """SHA256 over the sorted, newline-joined tool names."""
    content = "\n".join(sorted(tool_names))
    return hashlib.sha256(content.encode("utf-8")).hexdigest()


def create_app(config: Dict[str, Any], server: Optional[Server] = None) -> FastAPI:
    """Create the FastAPI app; builds the MCP server from config unless one is given."""
    mcp_server = server or create_server(config)
    tools = select_tools(ALL_TOOLS, enabled_toolsets(config))
    server_cfg = config.get("server", {})
    session_manager = StreamableHTTPSessionManager(
        app=mcp_server,
        json_response=bool(server_cfg.get("json_response", False)),
        stateless=bool(server_cfg.get("stateless", False)),
    )

    @asynccontextmanager
    async def lifespan(_app: FastAPI) -> AsyncIterator[None]:
        async with session_manager.run():
            logger.info("[Mount] MCP session manager started under /mcp")
            yield

    app = FastAPI(
        title="Directus MCP Server",
        description="MCP tools for Directus dashboards and panels",
        version=__version__,
        lifespan=lifespan,
    )
    app.add_middleware(BearerTokenAuthMiddleware)

    @app.get("/health")
    async def health() -> Dict[str, Any]:
        return {"ok": True, "status": "healthy"}

    @app.get("/metrics")
    async def metrics() -> Response:
        metrics_instance = get_shared_metrics()
        if metrics_instance is None:
            logger.warning("No shared metrics instance found, metrics will be empty")
            metrics_instance = InMemoryMetrics()
        return Response(
            content=format_prometheus(metrics_instance.snapshot()),
            media_type="text/plain; version=0.0.4",
        )

    @app.get("/mcp/discovery")
    async def discovery() -> Dict[str, Any]:
        tool_names = sorted(tools)
        return {
            "version": __version__,
            "server": server_cfg.get("name", "directus-mcp"),
            "transport": "streamable-http",
            "endpoint": "/mcp",
            "tools": [{"name": name, "toolsets": list(tools[name].toolsets)} for name in tool_names],
            "tool_count": len(tool_names),
            "tools_hash": compute_tools_hash(tool_names),
        }

    app.router.routes.append(
        Route("/mcp", endpoint=StreamableHTTPEndpoint(session_manager), methods=["GET", "POST", "DELETE"])
    )
    return app
