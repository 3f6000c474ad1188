"""Common Pydantic schemas used across the API."""

from datetime import datetime

from pydantic import BaseModel, ConfigDict


class BaseSchema(BaseModel):
    """Base schema with common configuration."""

    model_config = ConfigDict(
        from_attributes=True,
        populate_by_name=True,
    )


class HealthResponse(BaseSchema):
    """Health check response schema."""

    status: str
    timestamp: datetime
    version: str


class ErrorResponse(BaseSchema):
    """Error response schema."""

    error: str
    detail: str | None = None
