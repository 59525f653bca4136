"""Request and response schemas shared by both taxonomies."""

from datetime import datetime
from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class NodeCreate(BaseModel):
    """Create a node; blank names are rejected by the service."""

    name: str = Field(description="Display name, trimmed")
    description: str | None = Field(default=None, description="Optional description")
    parent_id: int | None = Field(default=None, description="Parent node id, null for a root")
    sort_order: int | None = Field(
        default=None,
        description="Position among siblings; defaults to after the last sibling",
    )
    is_active: bool = Field(default=True, description="Whether the node is listed")

    model_config = {"extra": "forbid"}


class NodeUpdate(BaseModel):
    """Partial update; only fields present in the request body are applied.

    Sending ``"parent_id": null`` moves the node to the root level.
    """

    name: str | None = None
    description: str | None = None
    parent_id: int | None = None
    sort_order: int | None = None
    is_active: bool | None = None

    model_config = {"extra": "forbid"}

    def changes(self) -> dict[str, Any]:
        return self.model_dump(exclude_unset=True)


class NodeResponse(BaseModel):
    """A stored node."""

    id: int
    name: str
    description: str | None = None
    parent_id: int | None = None
    sort_order: int
    is_active: bool
    created_at: datetime | None = None
    updated_at: datetime | None = None

    model_config = ConfigDict(from_attributes=True)


class TreeNodeResponse(BaseModel):
    """Listed node; kind-specific fields (values, products_count) ride along as extras."""

    id: int
    name: str
    description: str | None = None
    parent_id: int | None = None
    sort_order: int
    is_active: bool
    level: int
    children_count: int
    children: list["TreeNodeResponse"] | None = None
    path: list[int] | None = None

    model_config = ConfigDict(extra="allow")


TreeNodeResponse.model_rebuild()


class TreeResponse(BaseModel):
    """Listing envelope; ``data`` is nested roots or the flat list."""

    success: bool = True
    flat: bool = False
    data: list[TreeNodeResponse]
    total: int = Field(description="Number of listed nodes")


class DeleteResponse(BaseModel):
    success: bool = True
    id: int
    name: str
    force: bool
    deleted_ids: list[int]
    children_count: int
    detached_references: int
    deleted_values: int
    message: str


class DescendantInfo(BaseModel):
    id: int
    name: str


class DeletePreviewResponse(BaseModel):
    """Read-only summary of a forced delete."""

    id: int
    name: str
    descendants: list[DescendantInfo]
    values_in_node: int
    values_in_descendants: int
    references_count: int
    products_count: int
    sample_products: list[str]
    warnings: list[str]

    model_config = ConfigDict(from_attributes=True)
