"""Pydantic schemas for data endpoints.

Record bodies are schema-driven and arbitrary, so requests are taken as
plain JSON objects and only the envelopes are modeled here.
"""

from typing import Any

from pydantic import BaseModel, Field


class RecordListResponse(BaseModel):
    """Response for listing records."""

    items: list[dict[str, Any]] = Field(..., description="Records, each tagged with 'id'")
    total: int = Field(..., description="Number of records returned")


class ValidationResponse(BaseModel):
    """Response for a successful validation."""

    valid: bool = Field(default=True, description="Whether the record is valid")


class ErrorResponse(BaseModel):
    """Error envelope returned for domain errors.

    Error context (schema id, field, violations ...) is merged in as
    additional keys.
    """

    error: str = Field(..., description="Machine-readable error code")
    message: str = Field(..., description="Human-readable error message")

    model_config = {"extra": "allow"}
