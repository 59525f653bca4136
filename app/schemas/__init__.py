"""Pydantic schemas for request/response validation."""

from app.schemas.common import ErrorResponse, HealthResponse
from app.schemas.taxonomy import (
    DeletePreviewResponse,
    DeleteResponse,
    NodeCreate,
    NodeResponse,
    NodeUpdate,
    TreeNodeResponse,
    TreeResponse,
)

__all__ = [
    "ErrorResponse",
    "HealthResponse",
    "DeletePreviewResponse",
    "DeleteResponse",
    "NodeCreate",
    "NodeResponse",
    "NodeUpdate",
    "TreeNodeResponse",
    "TreeResponse",
]
