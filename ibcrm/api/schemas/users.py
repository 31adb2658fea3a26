"""User profile API schemas."""

from pydantic import Field

from ibcrm.api.schemas.auth import ProfileSchema, UserResponse
from ibcrm.shared.models import BaseSchema, UserStatus


class PreferencesUpdate(BaseSchema):
    """Partial preferences update."""

    theme: str | None = Field(default=None, max_length=16)
    notifications: bool | None = None
    timezone: str | None = Field(default=None, max_length=64)


class UpdateProfileRequest(BaseSchema):
    """Profile update. Only the fields sent are changed."""

    profile: ProfileSchema | None = None
    preferences: PreferencesUpdate | None = None


class UpdateStatusRequest(BaseSchema):
    """Admin status change."""

    status: UserStatus


class ProfileResponse(BaseSchema):
    """Profile read/update response."""

    success: bool = True
    message: str | None = None
    user: UserResponse
