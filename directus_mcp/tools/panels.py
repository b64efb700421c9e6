from __future__ import annotations

from typing import Any, Dict, List, Optional

from pydantic import Field

from .helpers import create_action_tool, create_tool
from .validators import ItemQuery, ListQuery, ToolArgs, Uuid


class ListPanelsArgs(ListQuery):
    pass


class GetPanelArgs(ItemQuery):
    id: Uuid = Field(description="Panel ID (UUID)")


class CreatePanelArgs(ToolArgs):
    dashboard: Uuid = Field(description="Dashboard the panel belongs to (UUID)")
    name: str = Field(min_length=1, description="Name of the panel")
    type: str = Field(min_length=1, description='Panel type, e.g. "metric", "time-series", "list"')
    position_x: int = Field(ge=0, description="X position on the dashboard grid")
    position_y: int = Field(ge=0, description="Y position on the dashboard grid")
    width: int = Field(ge=1, description="Width of the panel in grid units")
    height: int = Field(ge=1, description="Height of the panel in grid units")
    icon: Optional[str] = Field(default=None, description="Material icon for the panel")
    color: Optional[str] = Field(default=None, description="Accent color for the panel")
    show_header: Optional[bool] = Field(default=None, description="Whether the panel header is shown")
    note: Optional[str] = Field(default=None, description="Descriptive text about the panel")
    options: Optional[Dict[str, Any]] = Field(default=None, description="Panel type specific options")
    user_created: Optional[str] = Field(default=None, description="User that created the panel (UUID)")
    date_created: Optional[str] = Field(default=None, description="When the panel was created (ISO 8601)")


class CreatePanelsArgs(ToolArgs):
    panels: List[CreatePanelArgs] = Field(description="Array of panels to create")


class UpdatePanelArgs(ToolArgs):
    id: Uuid = Field(description="Panel ID (UUID) to update")
    dashboard: Optional[Uuid] = Field(default=None, description="Move the panel to another dashboard (UUID)")
    name: Optional[str] = Field(default=None, description="Name of the panel")
    type: Optional[str] = Field(default=None, description="Panel type")
    position_x: Optional[int] = Field(default=None, ge=0, description="X position on the dashboard grid")
    position_y: Optional[int] = Field(default=None, ge=0, description="Y position on the dashboard grid")
    width: Optional[int] = Field(default=None, ge=1, description="Width of the panel in grid units")
    height: Optional[int] = Field(default=None, ge=1, description="Height of the panel in grid units")
    icon: Optional[str] = Field(default=None, description="Material icon for the panel")
    color: Optional[str] = Field(default=None, description="Accent color for the panel")
    show_header: Optional[bool] = Field(default=None, description="Whether the panel header is shown")
    note: Optional[str] = Field(default=None, description="Descriptive text about the panel")
    options: Optional[Dict[str, Any]] = Field(default=None, description="Panel type specific options")


class UpdatePanelsArgs(ToolArgs):
    panels: List[UpdatePanelArgs] = Field(description="Array of panels to update (each must include id)")


class DeletePanelArgs(ToolArgs):
    id: Uuid = Field(description="Panel ID (UUID) to delete")


class DeletePanelsArgs(ToolArgs):
    ids: List[str] = Field(description="Array of panel IDs (UUIDs) to delete")


async def _get_panel(client: Any, args: Dict[str, Any]) -> Any:
    panel_id = args.pop("id")
    return await client.get_panel(panel_id, args)


async def _update_panel(client: Any, args: Dict[str, Any]) -> Any:
    panel_id = args.pop("id")
    return await client.update_panel(panel_id, args)


PANEL_TOOLS = [
    create_tool(
        name="list_panels",
        description=(
            "List all panels that exist in Directus. Supports filtering, sorting, pagination, and search. "
            'Example: {filter: {"dashboard": {"_eq": "dashboard-uuid"}}, sort: ["position_y", "position_x"]}'
        ),
        input_schema=ListPanelsArgs,
        toolsets=["panels"],
        handler=lambda client, args: client.list_panels(args),
    ),
    create_tool(
        name="get_panel",
        description="Get a single panel by ID from Directus. Optionally specify fields to return and metadata options.",
        input_schema=GetPanelArgs,
        toolsets=["panels"],
        handler=_get_panel,
    ),
    create_tool(
        name="create_panel",
        description=(
            "Create a new panel on a Directus dashboard. Dashboard, name, type, position and size are required. "
            'Example: {dashboard: "dashboard-uuid", name: "Revenue", type: "metric", position_x: 1, '
            'position_y: 1, width: 6, height: 4, options: {collection: "sales", field: "revenue"}}'
        ),
        input_schema=CreatePanelArgs,
        toolsets=["panels"],
        handler=lambda client, args: client.create_panel(args),
    ),
    create_tool(
        name="create_panels",
        description=(
            "Create multiple panels in Directus at once. More efficient than creating panels one by one. "
            'Example: {panels: [{dashboard: "dashboard-uuid", name: "Panel 1", type: "metric", position_x: 0, '
            "position_y: 0, width: 3, height: 2}]}"
        ),
        input_schema=CreatePanelsArgs,
        toolsets=["panels"],
        handler=lambda client, args: client.create_panels(args["panels"]),
    ),
    create_tool(
        name="update_panel",
        description=(
            "Update an existing panel in Directus. Provide the panel ID and fields to update. "
            'Example: {id: "panel-uuid", name: "Updated Panel", width: 8}'
        ),
        input_schema=UpdatePanelArgs,
        toolsets=["panels"],
        handler=_update_panel,
    ),
    create_tool(
        name="update_panels",
        description=(
            "Update multiple panels in Directus at once. Each panel must include an id field. "
            'Example: {panels: [{id: "uuid-1", position_x: 2}, {id: "uuid-2", height: 3, width: 4}]}'
        ),
        input_schema=UpdatePanelsArgs,
        toolsets=["panels"],
        handler=lambda client, args: client.update_panels(args["panels"]),
    ),
    create_action_tool(
        name="delete_panel",
        description="Delete a panel from Directus by ID. This action cannot be undone.",
        input_schema=DeletePanelArgs,
        toolsets=["panels"],
        handler=lambda client, args: client.delete_panel(args["id"]),
        success_message=lambda args: f"Panel {args['id']} deleted successfully",
    ),
    create_action_tool(
        name="delete_panels",
        description=(
            "Delete multiple panels from Directus at once by their IDs. This action cannot be undone. "
            'Example: {ids: ["uuid-1", "uuid-2"]}'
        ),
        input_schema=DeletePanelsArgs,
        toolsets=["panels"],
        handler=lambda client, args: client.delete_panels(args["ids"]),
        success_message=lambda args: f"{len(args['ids'])} panels deleted successfully",
    ),
]
