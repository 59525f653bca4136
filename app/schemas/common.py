"""Common schemas for API requests and responses."""

from typing import Any

from pydantic import BaseModel, Field


class ErrorResponse(BaseModel):
    """Standard error response.

    ``code`` is one of the stable classification strings (VALIDATION_ERROR,
    NOT_FOUND, CYCLE_DETECTED, HAS_CHILDREN, HAS_LEAF_REFERENCES, CONFLICT,
    TRANSACTION_ERROR, INTERNAL_ERROR).
    """

    success: bool = Field(default=False)
    error: str = Field(description="Error message")
    code: str = Field(description="Stable error classification")
    details: dict[str, Any] | None = Field(default=None, description="Additional error details")

    model_config = {"extra": "forbid"}


class HealthResponse(BaseModel):
    """Health check response."""

    status: str = Field(description="Health status (healthy, degraded)")
    version: str = Field(description="Service version")
    environment: str = Field(description="Environment name")
    checks: dict[str, bool] = Field(default_factory=dict, description="Individual health checks")

    model_config = {"extra": "forbid"}
