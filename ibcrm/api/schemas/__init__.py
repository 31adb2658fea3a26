"""API schemas package."""

from ibcrm.api.schemas.auth import (
    AuthResponse,
    ChangePasswordRequest,
    ForgotPasswordRequest,
    LoginRequest,
    LogoutRequest,
    PasswordResetResponse,
    PreferencesSchema,
    ProfileSchema,
    RefreshTokenRequest,
    ResetPasswordRequest,
    SignupRequest,
    TokenResponse,
    UserResponse,
    VerifyResponse,
)
from ibcrm.api.schemas.common import ErrorResponse, SuccessResponse
from ibcrm.api.schemas.users import (
    PreferencesUpdate,
    ProfileResponse,
    UpdateProfileRequest,
    UpdateStatusRequest,
)

__all__ = [
    # Common
    "ErrorResponse",
    "SuccessResponse",
    # Auth
    "SignupRequest",
    "LoginRequest",
    "RefreshTokenRequest",
    "LogoutRequest",
    "ChangePasswordRequest",
    "ForgotPasswordRequest",
    "ResetPasswordRequest",
    "ProfileSchema",
    "PreferencesSchema",
    "UserResponse",
    "AuthResponse",
    "TokenResponse",
    "VerifyResponse",
    "PasswordResetResponse",
    # Users
    "PreferencesUpdate",
    "UpdateProfileRequest",
    "UpdateStatusRequest",
    "ProfileResponse",
]
