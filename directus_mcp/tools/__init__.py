"""
Tool modules live here, one per Directus collection.

Each module exports a list of Tool descriptors; the server only ever sees the
flattened ALL_TOOLS list, filtered by the enabled toolsets.
"""
from __future__ import annotations

from typing import Dict, Iterable, List, Optional, Sequence

from .dashboards import DASHBOARD_TOOLS
from .helpers import Tool, create_action_tool, create_tool
from .panels import PANEL_TOOLS

ALL_TOOLS: List[Tool] = [*DASHBOARD_TOOLS, *PANEL_TOOLS]

TOOLSETS = frozenset(tag for tool in ALL_TOOLS for tag in tool.toolsets)


def get_tool(name: str, tools: Iterable[Tool] = ALL_TOOLS) -> Optional[Tool]:
    for tool in tools:
        if tool.name == name:
            return tool
    return None


def select_tools(tools: Sequence[Tool], toolsets: Optional[Sequence[str]] = None) -> Dict[str, Tool]:
    """
    Return the tools that belong to at least one of the enabled toolsets,
    keyed by name. None or "all" enables everything.
    """
    enabled = None if toolsets is None or "all" in toolsets else set(toolsets)
    if enabled is not None:
        known = {tag for tool in tools for tag in tool.toolsets}
        unknown = sorted(enabled - known)
        if unknown:
            raise ValueError(f"Unknown toolset(s): {unknown}. Available: {sorted(known)}")

    selected: Dict[str, Tool] = {}
    for tool in tools:
        if enabled is not None and not enabled.intersection(tool.toolsets):
            continue
        if tool.name in selected:
            raise ValueError(f"Duplicate tool name '{tool.name}'")
        selected[tool.name] = tool
    return selected


__all__ = [
    "ALL_TOOLS",
    "DASHBOARD_TOOLS",
    "PANEL_TOOLS",
    "TOOLSETS",
    "Tool",
    "create_action_tool",
    "create_tool",
    "get_tool",
    "select_tools",
]
