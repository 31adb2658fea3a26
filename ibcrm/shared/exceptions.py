"""Shared exceptions for the CRM backend.

This module defines the exception hierarchy used across all modules. Every
exception carries a stable ``error_code`` and the HTTP ``status_code`` the API
layer answers with, so handlers never need per-class mapping tables.
"""

from typing import Any
from uuid import UUID


class CrmError(Exception):
    """Base exception for all application errors.

    All domain-specific exceptions should inherit from this class
    to enable consistent error handling at the API layer.
    """

    error_code: str = "DOMAIN_ERROR"
    status_code: int = 500

    def __init__(self, message: str, details: dict[str, Any] | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.details = details or {}

    def to_dict(self) -> dict[str, Any]:
        """Convert exception to dictionary for API responses."""
        return {
            "code": self.error_code,
            "message": self.message,
            "details": self.details,
        }


# ===================
# Validation Errors
# ===================

class ValidationError(CrmError):
    """Raised when input validation fails."""

    error_code = "VALIDATION_ERROR"
    status_code = 400


class DuplicateEmailError(ValidationError):
    """Raised when signing up with an email that is already registered."""

    error_code = "DUPLICATE_EMAIL"

    def __init__(self, email: str) -> None:
        super().__init__("User already exists with this email", {"email": email})


class WeakPasswordError(ValidationError):
    """Raised when a password does not satisfy the strength policy."""

    error_code = "WEAK_PASSWORD"

    def __init__(self, reason: str) -> None:
        super().__init__(reason, {"field": "password"})


class MissingCredentialsError(ValidationError):
    """Raised when email or password is absent."""

    error_code = "MISSING_CREDENTIALS"

    def __init__(self) -> None:
        super().__init__("Email and password are required")


class InvalidCurrentPasswordError(ValidationError):
    """Raised when a password change presents the wrong current password."""

    error_code = "INVALID_CURRENT_PASSWORD"

    def __init__(self) -> None:
        super().__init__("Current password is incorrect")


class InvalidResetTokenError(ValidationError):
    """Raised when a reset token was not minted for password resets."""

    error_code = "INVALID_RESET_TOKEN"

    def __init__(self) -> None:
        super().__init__("Invalid reset token")


class InvalidOrExpiredTokenError(ValidationError):
    """Raised when a reset token is unknown, already used, or expired."""

    error_code = "INVALID_OR_EXPIRED_TOKEN"

    def __init__(self) -> None:
        super().__init__("Invalid or expired reset token")


# ===================
# Authentication Errors
# ===================

class AuthenticationError(CrmError):
    """Base class for authentication-related errors."""

    error_code = "AUTHENTICATION_ERROR"
    status_code = 401


class InvalidCredentialsError(AuthenticationError):
    """Raised when login credentials are invalid.

    Covers both unknown email and wrong password so callers cannot tell
    which one happened.
    """

    error_code = "INVALID_CREDENTIALS"

    def __init__(self) -> None:
        super().__init__("Invalid credentials")


class AccountLockedError(AuthenticationError):
    """Raised when too many failed attempts have temporarily locked an account."""

    error_code = "ACCOUNT_LOCKED"
    status_code = 423

    def __init__(self, locked_until: str | None = None) -> None:
        super().__init__(
            "Account is temporarily locked due to too many failed login attempts",
            {"locked_until": locked_until} if locked_until else None,
        )


class AccountInactiveError(AuthenticationError):
    """Raised when a non-active account tries to authenticate."""

    error_code = "ACCOUNT_INACTIVE"

    def __init__(self) -> None:
        super().__init__("Account is inactive")


class InvalidRefreshTokenError(AuthenticationError):
    """Raised when a refresh token cannot be exchanged."""

    error_code = "INVALID_REFRESH_TOKEN"

    def __init__(self) -> None:
        super().__init__("Invalid refresh token")


class MissingRefreshTokenError(AuthenticationError):
    """Raised when no refresh token was supplied."""

    error_code = "MISSING_REFRESH_TOKEN"

    def __init__(self) -> None:
        super().__init__("Refresh token required")


class MissingTokenError(AuthenticationError):
    """Raised when a protected route is called without a bearer token."""

    error_code = "MISSING_TOKEN"

    def __init__(self) -> None:
        super().__init__("Access token required")


class ExpiredTokenError(AuthenticationError):
    """Raised when a token's expiry has passed."""

    error_code = "EXPIRED_TOKEN"

    def __init__(self) -> None:
        super().__init__("Token expired")


class InvalidTokenError(AuthenticationError):
    """Raised when a token is malformed, mis-signed, or of the wrong class."""

    error_code = "INVALID_TOKEN"
    status_code = 403

    def __init__(self) -> None:
        super().__init__("Invalid token")


class UserNotFoundError(AuthenticationError):
    """Raised when a token's subject no longer exists."""

    error_code = "USER_NOT_FOUND"

    def __init__(self, user_id: UUID | str | None = None) -> None:
        super().__init__(
            "User not found",
            {"user_id": str(user_id)} if user_id is not None else None,
        )


# ===================
# Authorization Errors
# ===================

class AdminRequiredError(CrmError):
    """Raised when a non-admin calls an admin-only operation."""

    error_code = "ADMIN_REQUIRED"
    status_code = 403

    def __init__(self) -> None:
        super().__init__("Admin access required")


# ===================
# Resource Errors
# ===================

class RecordNotFoundError(CrmError):
    """Raised when a persisted record is missing."""

    error_code = "NOT_FOUND"
    status_code = 404

    def __init__(self, resource_type: str, resource_id: UUID | str) -> None:
        super().__init__(
            f"{resource_type} not found: {resource_id}",
            {"resource_type": resource_type, "resource_id": str(resource_id)},
        )


# ===================
# Configuration Errors
# ===================

class ConfigurationError(CrmError):
    """Raised when there's a configuration problem."""

    error_code = "CONFIGURATION_ERROR"
    status_code = 500
