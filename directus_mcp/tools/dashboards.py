from __future__ import annotations

from typing import Any, Dict, List, Optional

from pydantic import Field

from .helpers import create_action_tool, create_tool
from .validators import ItemQuery, ListQuery, ToolArgs, Uuid


class ListDashboardsArgs(ListQuery):
    pass


class GetDashboardArgs(ItemQuery):
    id: Uuid = Field(description="Dashboard ID (UUID)")


class CreateDashboardArgs(ToolArgs):
    name: str = Field(min_length=1, description="Name of the dashboard")
    icon: Optional[str] = Field(default=None, description="Material icon for dashboard")
    note: Optional[str] = Field(default=None, description="Descriptive text about the dashboard")
    color: Optional[str] = Field(default=None, description="Accent color for the dashboard")
    user_created: Optional[str] = Field(default=None, description="User that created the dashboard (UUID)")
    date_created: Optional[str] = Field(default=None, description="When the dashboard was created (ISO 8601)")


class CreateDashboardsArgs(ToolArgs):
    dashboards: List[CreateDashboardArgs] = Field(description="Array of dashboards to create")


class UpdateDashboardArgs(ToolArgs):
    id: Uuid = Field(description="Dashboard ID (UUID) to update")
    name: Optional[str] = Field(default=None, description="Name of the dashboard")
    icon: Optional[str] = Field(default=None, description="Material icon for dashboard")
    note: Optional[str] = Field(default=None, description="Descriptive text about the dashboard")
    color: Optional[str] = Field(default=None, description="Accent color for the dashboard")


class UpdateDashboardsArgs(ToolArgs):
    dashboards: List[UpdateDashboardArgs] = Field(
        description="Array of dashboards to update (each must include id)"
    )


class DeleteDashboardArgs(ToolArgs):
    id: Uuid = Field(description="Dashboard ID (UUID) to delete")


class DeleteDashboardsArgs(ToolArgs):
    ids: List[str] = Field(description="Array of dashboard IDs (UUIDs) to delete")


async def _get_dashboard(client: Any, args: Dict[str, Any]) -> Any:
    dashboard_id = args.pop("id")
    return await client.get_dashboard(dashboard_id, args)


async def _update_dashboard(client: Any, args: Dict[str, Any]) -> Any:
    dashboard_id = args.pop("id")
    return await client.update_dashboard(dashboard_id, args)


DASHBOARD_TOOLS = [
    create_tool(
        name="list_dashboards",
        description=(
            "List all dashboards that exist in Directus. Supports filtering, sorting, pagination, and search. "
            'Example: {filter: {"name": {"_contains": "sales"}}, sort: ["-date_created"], limit: 10}'
        ),
        input_schema=ListDashboardsArgs,
        toolsets=["dashboards"],
        handler=lambda client, args: client.list_dashboards(args),
    ),
    create_tool(
        name="get_dashboard",
        description=(
            "Get a single dashboard by ID from Directus. "
            "Optionally specify fields to return and metadata options."
        ),
        input_schema=GetDashboardArgs,
        toolsets=["dashboards"],
        handler=_get_dashboard,
    ),
    create_tool(
        name="create_dashboard",
        description=(
            "Create a new dashboard in Directus. Provide the dashboard data including name and optional "
            'configuration. Example: {name: "Sales Dashboard", icon: "analytics", color: "#FF5722", '
            'note: "Main sales metrics"}'
        ),
        input_schema=CreateDashboardArgs,
        toolsets=["dashboards"],
        handler=lambda client, args: client.create_dashboard(args),
    ),
    create_tool(
        name="create_dashboards",
        description=(
            "Create multiple dashboards in Directus at once. More efficient than creating dashboards one by one. "
            'Example: {dashboards: [{name: "Dashboard 1", icon: "dashboard"}, {name: "Dashboard 2", icon: "analytics"}]}'
        ),
        input_schema=CreateDashboardsArgs,
        toolsets=["dashboards"],
        handler=lambda client, args: client.create_dashboards(args["dashboards"]),
    ),
    create_tool(
        name="update_dashboard",
        description=(
            "Update an existing dashboard in Directus. Provide the dashboard ID and fields to update. "
            'Example: {id: "dashboard-uuid", name: "Updated Dashboard Name", color: "#4CAF50"}'
        ),
        input_schema=UpdateDashboardArgs,
        toolsets=["dashboards"],
        handler=_update_dashboard,
    ),
    create_tool(
        name="update_dashboards",
        description=(
            "Update multiple dashboards in Directus at once. Each dashboard must include an id field. "
            'Example: {dashboards: [{id: "uuid-1", name: "Updated Name 1"}, {id: "uuid-2", color: "#FF9800"}]}'
        ),
        input_schema=UpdateDashboardsArgs,
        toolsets=["dashboards"],
        handler=lambda client, args: client.update_dashboards(args["dashboards"]),
    ),
    create_action_tool(
        name="delete_dashboard",
        description="Delete a dashboard from Directus by ID. This action cannot be undone.",
        input_schema=DeleteDashboardArgs,
        toolsets=["dashboards"],
        handler=lambda client, args: client.delete_dashboard(args["id"]),
        success_message=lambda args: f"Dashboard {args['id']} deleted successfully",
    ),
    create_action_tool(
        name="delete_dashboards",
        description=(
            "Delete multiple dashboards from Directus at once by their IDs. This action cannot be undone. "
            'Example: {ids: ["uuid-1", "uuid-2", "uuid-3"]}'
        ),
        input_schema=DeleteDashboardsArgs,
        toolsets=["dashboards"],
        handler=lambda client, args: client.delete_dashboards(args["ids"]),
        success_message=lambda args: f"{len(args['ids'])} dashboards deleted successfully",
    ),
]
