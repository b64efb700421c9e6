"""
Shared argument schemas for the Directus tools.

Every list/get tool composes its input model from these primitives so that
query parameters look and validate the same way across collections.
"""
from __future__ import annotations

from typing import Annotated, Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field


# Directus primary keys are UUIDs for dashboards and panels. Only characters
# that would leave the item path are rejected here; the format is left to the
# backend to enforce.
Uuid = Annotated[str, Field(min_length=1, pattern=r"^[^/?#]+$", description="Item ID (UUID)")]

Fields = Annotated[
    Optional[List[str]],
    Field(description='Fields to return, e.g. ["id", "name"]. Supports dot notation for relations.'),
]
Filter = Annotated[
    Optional[Dict[str, Any]],
    Field(description='Directus filter object, e.g. {"name": {"_contains": "sales"}}'),
]
Search = Annotated[
    Optional[str],
    Field(description="Search query applied to all string fields"),
]
Sort = Annotated[
    Optional[List[str]],
    Field(description='Fields to sort by. Prefix with "-" for descending, e.g. ["-date_created"]'),
]
Limit = Annotated[
    Optional[int],
    Field(ge=-1, description="Maximum number of items to return (-1 for all)"),
]
Offset = Annotated[
    Optional[int],
    Field(ge=0, description="Number of items to skip"),
]
Meta = Annotated[
    Optional[str],
    Field(description='Metadata to include, e.g. "total_count", "filter_count" or "*"'),
]


class ToolArgs(BaseModel):
    """Base for tool input models. Unknown keys are dropped, not rejected."""

    model_config = ConfigDict(extra="ignore")


class ListQuery(ToolArgs):
    fields: Fields = None
    filter: Filter = None
    search: Search = None
    sort: Sort = None
    limit: Limit = None
    offset: Offset = None
    meta: Meta = None


class ItemQuery(ToolArgs):
    fields: Fields = None
    meta: Meta = None
