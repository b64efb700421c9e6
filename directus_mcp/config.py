from __future__ import annotations

import os
from pathlib import Path
from typing import Any, Dict, List, Optional

import yaml

DEFAULT_CONFIG_PATH = Path(__file__).resolve().parent.parent / "config" / "server.yaml"


def config_path() -> Path:
    return Path(os.getenv("MCP_SERVER_CONFIG", str(DEFAULT_CONFIG_PATH)))


def load_config(path: Path) -> Dict[str, Any]:
    if not path.exists():
        raise FileNotFoundError(f"MCP server config not found at {path}")
    with path.open("r", encoding="utf-8") as handle:
        data = yaml.safe_load(handle) or {}
    if not isinstance(data, dict):
        raise ValueError("Config root must be a mapping")
    return data


def _split_csv(value: str) -> List[str]:
    return [part.strip() for part in value.split(",") if part.strip()]


def apply_env_overrides(config: Dict[str, Any]) -> Dict[str, Any]:
    """Environment variables win over the YAML file. Returns the same dict."""
    server_cfg = config.setdefault("server", {})
    directus_cfg = config.setdefault("directus", {})

    if os.getenv("DIRECTUS_URL"):
        directus_cfg["url"] = os.environ["DIRECTUS_URL"].strip()
    if os.getenv("DIRECTUS_TOKEN"):
        directus_cfg["token"] = os.environ["DIRECTUS_TOKEN"].strip()
    if os.getenv("MCP_TOOLSETS"):
        config["toolsets"] = _split_csv(os.environ["MCP_TOOLSETS"])
    if os.getenv("MCP_SERVER_HOST"):
        server_cfg["host"] = os.environ["MCP_SERVER_HOST"].strip()
    if os.getenv("MCP_SERVER_PORT"):
        server_cfg["port"] = int(os.environ["MCP_SERVER_PORT"])
    if os.getenv("MCP_TRANSPORT"):
        server_cfg["transport"] = os.environ["MCP_TRANSPORT"].strip().lower()
    if os.getenv("MCP_LOG_LEVEL"):
        server_cfg["log_level"] = os.environ["MCP_LOG_LEVEL"].strip().upper()
    return config


def enabled_toolsets(config: Dict[str, Any]) -> Optional[List[str]]:
    """
    Normalize the `toolsets` setting.

    Accepts a list or a comma separated string. Missing, empty or "all"
    returns None, meaning every toolset is enabled.
    """
    raw = config.get("toolsets")
    if raw is None:
        return None
    if isinstance(raw, str):
        names = _split_csv(raw)
    elif isinstance(raw, (list, tuple)):
        names = [str(name).strip() for name in raw if str(name).strip()]
    else:
        raise ValueError("toolsets must be a list or a comma separated string")
    names = [name.lower() for name in names]
    if not names or "all" in names:
        return None
    return names


def directus_settings(config: Dict[str, Any]) -> Dict[str, Any]:
    directus_cfg = config.get("directus", {}) or {}
    url = str(directus_cfg.get("url") or "").strip()
    if not url:
        raise ValueError("Directus URL is not configured (set directus.url or DIRECTUS_URL)")
    return {
        "url": url.rstrip("/"),
        "token": str(directus_cfg.get("token") or "").strip(),
    }
