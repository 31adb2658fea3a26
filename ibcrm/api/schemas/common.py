"""Common API response schemas."""

from datetime import datetime
from typing import Any

from pydantic import Field

from ibcrm.shared.datetime_utils import utc_now
from ibcrm.shared.models import BaseSchema


class SuccessResponse(BaseSchema):
    """Generic success response."""

    success: bool = True
    message: str = "Operation completed successfully"


class ErrorResponse(BaseSchema):
    """Structured error response."""

    success: bool = False
    error: dict[str, Any] = Field(
        ...,
        description="Error details",
        examples=[{
            "code": "INVALID_CREDENTIALS",
            "message": "Invalid credentials",
            "details": {},
        }],
    )
    request_id: str = Field(
        ...,
        description="Unique request identifier for debugging",
    )
    timestamp: datetime = Field(
        default_factory=utc_now,
        description="Error timestamp",
    )
