"""Common Pydantic schemas."""
from typing import Any, Dict, List, Optional
from datetime import datetime, timezone

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class BaseSchema(BaseModel):
    """Base schema with common configuration.

    Fields are snake_case in Python and camelCase on the wire.
    """

    model_config = ConfigDict(
        from_attributes=True,
        validate_assignment=True,
        arbitrary_types_allowed=True,
        alias_generator=to_camel,
        populate_by_name=True,
    )


class SuccessResponse(BaseSchema):
    """Response envelope shared by every endpoint."""

    success: bool = Field(True, description="Success status")
    message: str = Field(..., description="Human readable outcome")


class ErrorResponse(BaseSchema):
    """Error envelope."""

    success: bool = Field(False, description="Always false")
    message: str = Field(..., description="Error message")
    error_code: Optional[str] = Field(None, description="Error code")
    details: Optional[Dict[str, Any]] = Field(None, description="Error details")

    @classmethod
    def from_parts(
        cls,
        message: str,
        error_code: str,
        details: Optional[Dict[str, Any]] = None
    ) -> Dict[str, Any]:
        """Build the JSON body for an error response."""
        return cls(
            message=message,
            error_code=error_code,
            details=details or None,
        ).model_dump(by_alias=True, exclude_none=True)


class HealthResponse(BaseSchema):
    """Health check response."""

    status: str = Field(..., description="Overall health status")
    timestamp: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
    version: str = Field(..., description="Application version")
    services: Dict[str, str] = Field(
        default_factory=dict,
        description="Service health statuses"
    )
