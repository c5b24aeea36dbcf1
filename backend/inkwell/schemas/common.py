"""
Inkwell Backend — Shared Schema Building Blocks
=================================================

What:  The camelCase base model plus the response shapes every route shares
       (errors, delete confirmations, health).
Why:   Python code uses snake_case attributes while the JSON contract uses
       camelCase keys (`authorId`, `createdAt`). One base class owns that
       mapping so no schema declares aliases by hand.
"""

from typing import Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    """
    Base for every API schema.

    - alias_generator=to_camel: `author_id` is exposed as `authorId`
    - populate_by_name: services build models with Python names
    - from_attributes: models can be validated straight from ORM objects
    """

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
    )


class ErrorResponse(CamelModel):
    """
    Standardized error body for all failures.

    Example:
        {"error": "Post not found", "code": "not_found", "requestId": "a1b2c3d4"}
    """
    error: str = Field(description="Human-readable error description")
    code: Optional[str] = Field(default=None, description="Machine-readable error code")
    request_id: Optional[str] = Field(default=None, description="Request correlation ID")


class MessageResponse(CamelModel):
    """Confirmation body returned by delete operations."""
    message: str


class HealthResponse(CamelModel):
    """Health check response showing service and database status."""
    status: str = Field(description="Overall service status: healthy, unhealthy")
    version: str = Field(description="Application version")
    database: str = Field(description="Database connectivity: connected, disconnected")
    uptime_seconds: float = Field(description="Seconds since service started")
