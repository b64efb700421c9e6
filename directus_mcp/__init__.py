"""MCP server exposing Directus dashboards and panels as tools."""

__version__ = "0.1.0"
