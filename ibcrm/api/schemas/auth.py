"""Authentication API schemas.

Password strength is enforced by the auth service so that weak passwords
surface as ``WEAK_PASSWORD`` rather than a generic validation failure.
Likewise email/password are optional here and their absence is reported as
``MISSING_CREDENTIALS``.
"""

import re
from datetime import datetime
from typing import Literal
from uuid import UUID

from pydantic import (
    EmailStr,
    Field,
    HttpUrl,
    TypeAdapter,
    ValidationError,
    field_validator,
)

from ibcrm.shared.constants import (
    MAX_GRADUATION_YEAR,
    MAX_NAME_LENGTH,
    MAX_UNIVERSITY_LENGTH,
    MIN_GRADUATION_YEAR,
)
from ibcrm.shared.models import BaseSchema, UserRole, UserStatus

_PHONE_RE = re.compile(r"^\+?\(?[\d\s\-()]{10,}$")
_HTTP_URL = TypeAdapter(HttpUrl)


class ProfileSchema(BaseSchema):
    """Optional personal details."""

    first_name: str | None = Field(default=None, min_length=1, max_length=MAX_NAME_LENGTH)
    last_name: str | None = Field(default=None, min_length=1, max_length=MAX_NAME_LENGTH)
    university: str | None = Field(default=None, max_length=MAX_UNIVERSITY_LENGTH)
    graduation_year: int | None = Field(
        default=None,
        ge=MIN_GRADUATION_YEAR,
        le=MAX_GRADUATION_YEAR,
    )
    phone_number: str | None = Field(default=None, max_length=32)
    linkedin_url: str | None = None

    @field_validator("first_name", "last_name", "university", mode="before")
    @classmethod
    def _strip(cls, v: str | None) -> str | None:
        return v.strip() if isinstance(v, str) else v

    @field_validator("phone_number")
    @classmethod
    def _valid_phone(cls, v: str | None) -> str | None:
        if v is None:
            return v
        v = v.strip()
        if not _PHONE_RE.match(v):
            raise ValueError("Please provide a valid phone number")
        return v

    @field_validator("linkedin_url", mode="before")
    @classmethod
    def _default_scheme(cls, v: str | None) -> str | None:
        if not isinstance(v, str):
            return v
        v = v.strip()
        if not re.match(r"^[a-z][a-z0-9+.\-]*://", v, re.IGNORECASE):
            v = f"https://{v}"
        return v

    @field_validator("linkedin_url")
    @classmethod
    def _valid_url(cls, v: str | None) -> str | None:
        if v is None:
            return v
        try:
            return str(_HTTP_URL.validate_python(v))
        except ValidationError:
            raise ValueError("LinkedIn URL must be a valid URL") from None


class PreferencesSchema(BaseSchema):
    """UI preferences."""

    theme: str = "light"
    notifications: bool = True
    timezone: str = "UTC"


class SignupRequest(BaseSchema):
    """User registration request."""

    email: EmailStr | None = Field(
        default=None,
        description="User's email address",
        examples=["user@example.com"],
    )
    password: str | None = Field(
        default=None,
        description="Password (min 8 chars, must include uppercase, lowercase and a digit)",
    )
    profile: ProfileSchema | None = None


class LoginRequest(BaseSchema):
    """User login request."""

    email: EmailStr | None = Field(
        default=None,
        description="User's email address",
    )
    password: str | None = Field(
        default=None,
        description="User's password",
    )


class RefreshTokenRequest(BaseSchema):
    """Token refresh request. The refresh cookie is used when omitted."""

    refresh_token: str | None = Field(
        default=None,
        description="Valid refresh token",
    )


class LogoutRequest(BaseSchema):
    """Logout request. The refresh cookie is used when omitted."""

    refresh_token: str | None = Field(
        default=None,
        description="Refresh token to revoke",
    )


class ChangePasswordRequest(BaseSchema):
    """Password change request."""

    current_password: str = Field(
        ...,
        description="Current password for verification",
    )
    new_password: str = Field(
        ...,
        description="New password",
    )


class ForgotPasswordRequest(BaseSchema):
    """Password reset request."""

    email: EmailStr = Field(
        ...,
        description="User's email address",
    )


class ResetPasswordRequest(BaseSchema):
    """Complete password reset."""

    token: str = Field(
        ...,
        description="Password reset token",
    )
    new_password: str = Field(
        ...,
        description="New password",
    )


class UserResponse(BaseSchema):
    """User information response."""

    id: UUID
    email: str
    role: UserRole
    status: UserStatus
    email_verified: bool = False
    profile: ProfileSchema
    preferences: PreferencesSchema
    last_login: datetime | None = None
    created_at: datetime


class AuthResponse(BaseSchema):
    """Successful signup/login response. The refresh token travels in a cookie."""

    success: bool = True
    message: str
    access_token: str = Field(
        ...,
        description="JWT access token",
    )
    token_type: Literal["bearer"] = "bearer"
    expires_in: int = Field(
        ...,
        description="Access token expiration time in seconds",
        examples=[86400],
    )
    user: UserResponse


class TokenResponse(BaseSchema):
    """Refreshed access token."""

    success: bool = True
    message: str = "Token refreshed successfully"
    access_token: str
    token_type: Literal["bearer"] = "bearer"


class VerifyResponse(BaseSchema):
    """Token verification response."""

    success: bool = True
    message: str = "Token is valid"
    user: UserResponse


class PasswordResetResponse(BaseSchema):
    """Password reset request response."""

    success: bool = True
    message: str = Field(
        default="If an account exists with this email, a password reset link has been sent",
        description="Generic success message (prevents email enumeration)",
    )
