"""Auth module - credentials, tokens, lockout and session lifecycle."""

from ibcrm.modules.auth.interface import (
    AuthResult,
    Credential,
    IAuthService,
    ICredentialStore,
    INotificationSender,
    TokenClaims,
    TokenPair,
    TokenType,
    User,
    UserPreferences,
    UserProfile,
    canonical_email,
)
from ibcrm.modules.auth.lockout import LockoutPolicy, is_locked
from ibcrm.modules.auth.models import UserModel
from ibcrm.modules.auth.notifications import LoggingNotificationSender
from ibcrm.modules.auth.passwords import PasswordHasher, check_password_strength
from ibcrm.modules.auth.service import AuthService, build_auth_service, get_auth_service
from ibcrm.modules.auth.store import CredentialStore
from ibcrm.modules.auth.tokens import TokenIssuer

__all__ = [
    # Interface
    "IAuthService",
    "ICredentialStore",
    "INotificationSender",
    "AuthResult",
    "Credential",
    "TokenClaims",
    "TokenPair",
    "TokenType",
    "User",
    "UserPreferences",
    "UserProfile",
    "canonical_email",
    # Components
    "CredentialStore",
    "PasswordHasher",
    "check_password_strength",
    "TokenIssuer",
    "LockoutPolicy",
    "is_locked",
    "LoggingNotificationSender",
    # Service
    "AuthService",
    "build_auth_service",
    "get_auth_service",
    # Models
    "UserModel",
]
