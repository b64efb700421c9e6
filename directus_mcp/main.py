"""
Main entry point for the Directus MCP server.

MCP_TRANSPORT (or server.transport) selects the transport:
- stdio (default): for desktop MCP clients
- http: FastAPI app with the MCP endpoint under /mcp
"""
from __future__ import annotations

import asyncio
import sys

import uvicorn

from .config import apply_env_overrides, config_path, load_config
from .env_utils import require_server_token


def main() -> None:
    try:
        config = apply_env_overrides(load_config(config_path()))
        server_cfg = config.get("server", {})
        transport = str(server_cfg.get("transport", "stdio")).lower()

        if transport == "stdio":
            from .server import create_server, run_stdio

            asyncio.run(run_stdio(create_server(config)))
        elif transport in ("http", "streamable-http"):
            require_server_token()
            from .http_app import create_app

            host = server_cfg.get("host", "127.0.0.1")
            port = int(server_cfg.get("port", 9000))
            app = create_app(config)

            print(f"Starting MCP server on http://{host}:{port}", file=sys.stderr)
            print(f"MCP endpoint: http://{host}:{port}/mcp", file=sys.stderr)
            print(f"Discovery endpoint: http://{host}:{port}/mcp/discovery", file=sys.stderr)
            uvicorn.run(
                app,
                host=host,
                port=port,
                log_level=str(server_cfg.get("log_level", "INFO")).lower(),
                server_header=False,
            )
        else:
            raise ValueError(f"Unknown transport '{transport}' (expected stdio or http)")
    except KeyboardInterrupt:
        print("\nServer shutdown requested...", file=sys.stderr)
        sys.exit(0)
    except Exception as e:
        print(f"Failed to start MCP server: {e}", file=sys.stderr)
        sys.exit(1)


if __name__ == "__main__":
    main()
