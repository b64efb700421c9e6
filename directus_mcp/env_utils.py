"""
Environment utilities.
"""
from __future__ import annotations

import os


def is_production_env() -> bool:
    """
    Return True when ENVIRONMENT, APP_ENV or NODE_ENV is "production"
    (case-insensitive, surrounding whitespace ignored).
    """
    env_vars = [
        os.getenv("ENVIRONMENT", ""),
        os.getenv("APP_ENV", ""),
        os.getenv("NODE_ENV", ""),
    ]
    return any(value.strip().lower() == "production" for value in env_vars)


def server_token() -> str:
    return os.getenv("MCP_SERVER_TOKEN", "").strip()


def require_server_token() -> None:
    """The HTTP transport must not run unauthenticated in production."""
    if is_production_env() and not server_token():
        raise RuntimeError(
            "MCP_SERVER_TOKEN is required in production. "
            "Set MCP_SERVER_TOKEN environment variable before starting the MCP server."
        )
