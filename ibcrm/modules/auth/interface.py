"""Auth Module - credential records, token types and service contracts."""

from dataclasses import dataclass, field, replace
from datetime import datetime
from enum import Enum
from typing import Protocol
from uuid import UUID, uuid4

from ibcrm.shared.datetime_utils import utc_now
from ibcrm.shared.models import UserRole, UserStatus


def canonical_email(email: str) -> str:
    """Canonical form of an email address, used as the uniqueness key."""
    return (email or "").strip().lower()


@dataclass
class UserProfile:
    """Optional personal details captured at signup or on the profile page."""

    first_name: str | None = None
    last_name: str | None = None
    university: str | None = None
    graduation_year: int | None = None
    phone_number: str | None = None
    linkedin_url: str | None = None


@dataclass
class UserPreferences:
    """UI preferences."""

    theme: str = "light"
    notifications: bool = True
    timezone: str = "UTC"


@dataclass
class User:
    """Public view of an account. Never carries secrets."""

    id: UUID
    email: str
    role: UserRole = UserRole.USER
    status: UserStatus = UserStatus.ACTIVE
    email_verified: bool = False
    profile: UserProfile = field(default_factory=UserProfile)
    preferences: UserPreferences = field(default_factory=UserPreferences)
    last_login: datetime | None = None
    created_at: datetime = field(default_factory=utc_now)

    @property
    def is_admin(self) -> bool:
        return self.role == UserRole.ADMIN


@dataclass
class Credential:
    """Persisted credential record for one registered identity.

    Plain value object: the lockout policy and auth service derive updated
    copies with ``dataclasses.replace`` and hand them to the store.
    """

    id: UUID
    email: str
    password_hash: str
    role: UserRole = UserRole.USER
    status: UserStatus = UserStatus.ACTIVE
    email_verified: bool = False
    profile: UserProfile = field(default_factory=UserProfile)
    preferences: UserPreferences = field(default_factory=UserPreferences)
    refresh_tokens: list[str] = field(default_factory=list)
    login_attempts: int = 0
    lock_until: datetime | None = None
    last_login: datetime | None = None
    password_reset_token: str | None = None
    password_reset_expires: datetime | None = None
    created_at: datetime = field(default_factory=utc_now)
    updated_at: datetime = field(default_factory=utc_now)

    @classmethod
    def new(
        cls,
        email: str,
        password_hash: str,
        *,
        role: UserRole = UserRole.USER,
        profile: UserProfile | None = None,
    ) -> "Credential":
        """Build a fresh, active record with a new id."""
        now = utc_now()
        return cls(
            id=uuid4(),
            email=canonical_email(email),
            password_hash=password_hash,
            role=role,
            profile=profile or UserProfile(),
            created_at=now,
            updated_at=now,
        )

    def with_refresh_token(self, token: str, limit: int) -> "Credential":
        """Append a refresh token, evicting the oldest beyond ``limit``."""
        tokens = [*self.refresh_tokens, token]
        return replace(self, refresh_tokens=tokens[-limit:])

    def without_refresh_token(self, token: str) -> "Credential":
        return replace(self, refresh_tokens=[t for t in self.refresh_tokens if t != token])

    def public(self) -> User:
        return User(
            id=self.id,
            email=self.email,
            role=self.role,
            status=self.status,
            email_verified=self.email_verified,
            profile=replace(self.profile),
            preferences=replace(self.preferences),
            last_login=self.last_login,
            created_at=self.created_at,
        )


class TokenType(str, Enum):
    """Token classes. Each class is signed with its own secret."""

    ACCESS = "access"
    REFRESH = "refresh"
    RESET = "reset"


@dataclass
class TokenClaims:
    """Verified token payload."""

    subject: UUID
    email: str
    token_type: TokenType
    expires_at: datetime
    purpose: str | None = None


@dataclass
class TokenPair:
    """Access and refresh token pair."""

    access_token: str
    refresh_token: str
    token_type: str = "bearer"
    expires_in: int = 86400  # seconds


@dataclass
class AuthResult:
    """Result of a successful signup or login."""

    user: User
    tokens: TokenPair


class ICredentialStore(Protocol):
    """Persistence contract for credential records.

    Emails are canonicalized by the store before every lookup and write.
    """

    async def find_by_email(self, email: str) -> Credential | None:
        ...

    async def find_by_id(self, user_id: UUID) -> Credential | None:
        ...

    async def create(self, record: Credential) -> Credential:
        """Persist a new record.

        Raises:
            DuplicateEmailError: If the canonical email is already registered
        """
        ...

    async def save(self, record: Credential) -> Credential:
        """Persist all mutable fields of an existing record.

        Raises:
            RecordNotFoundError: If the record no longer exists
        """
        ...


class INotificationSender(Protocol):
    """Hands password-reset tokens to the outside world (email, queue, ...)."""

    async def send_password_reset(self, email: str, token: str) -> None:
        ...


class IAuthService(Protocol):
    """Interface for the authentication & session-lifecycle service.

    Every operation raises a ``CrmError`` subclass on failure and never
    retries internally.
    """

    async def signup(
        self,
        email: str,
        password: str,
        profile: UserProfile | None = None,
        role: UserRole = UserRole.USER,
    ) -> AuthResult:
        """Register a new account and issue its first token pair.

        Raises:
            MissingCredentialsError, WeakPasswordError, DuplicateEmailError
        """
        ...

    async def login(self, email: str, password: str) -> AuthResult:
        """Authenticate with email and password.

        Raises:
            MissingCredentialsError, InvalidCredentialsError,
            AccountLockedError, AccountInactiveError
        """
        ...

    async def refresh(self, refresh_token: str) -> str:
        """Exchange a refresh token for a new access token.

        Raises:
            MissingRefreshTokenError, InvalidRefreshTokenError
        """
        ...

    async def logout(self, user_id: UUID, refresh_token: str | None = None) -> None:
        """Forget one refresh token. Always succeeds."""
        ...

    async def logout_all(self, user_id: UUID) -> None:
        """Forget every refresh token of the account. Always succeeds."""
        ...

    async def change_password(
        self, user_id: UUID, current_password: str, new_password: str
    ) -> None:
        """Change password and sign out every session.

        Raises:
            InvalidCurrentPasswordError, WeakPasswordError
        """
        ...

    async def forgot_password(self, email: str) -> None:
        """Start a password reset. Behaves identically for unknown emails."""
        ...

    async def reset_password(self, token: str, new_password: str) -> None:
        """Complete a password reset.

        Raises:
            WeakPasswordError, InvalidResetTokenError, InvalidOrExpiredTokenError
        """
        ...

    async def authenticate(self, access_token: str) -> User:
        """Resolve an access token to its account.

        Raises:
            InvalidTokenError, ExpiredTokenError, UserNotFoundError,
            AccountInactiveError
        """
        ...

    async def get_user_by_id(self, user_id: UUID) -> User | None:
        ...
