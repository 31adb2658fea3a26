"""Auth Service - signup, login, token refresh, logout and password flows."""

import hmac
import logging
from dataclasses import replace
from uuid import UUID

from ibcrm.modules.auth.interface import (
    AuthResult,
    Credential,
    ICredentialStore,
    INotificationSender,
    TokenPair,
    TokenType,
    User,
    UserProfile,
    canonical_email,
)
from ibcrm.modules.auth.lockout import LockoutPolicy
from ibcrm.modules.auth.notifications import LoggingNotificationSender
from ibcrm.modules.auth.passwords import PasswordHasher, check_password_strength
from ibcrm.modules.auth.store import CredentialStore
from ibcrm.modules.auth.tokens import TokenIssuer
from ibcrm.shared.config import get_settings
from ibcrm.shared.constants import PASSWORD_RESET_PURPOSE
from ibcrm.shared.datetime_utils import datetime_to_iso, is_expired, utc_now
from ibcrm.shared.exceptions import (
    AccountInactiveError,
    AccountLockedError,
    AuthenticationError,
    DuplicateEmailError,
    InvalidCredentialsError,
    InvalidCurrentPasswordError,
    InvalidOrExpiredTokenError,
    InvalidRefreshTokenError,
    InvalidResetTokenError,
    MissingCredentialsError,
    MissingRefreshTokenError,
    UserNotFoundError,
)
from ibcrm.shared.models import UserRole, UserStatus

logger = logging.getLogger(__name__)


class AuthService:
    """JWT-based authentication service using bcrypt.

    Composes the credential store, password hasher, token issuer, lockout
    policy and notification sender. Operations raise typed errors and never
    retry.
    """

    def __init__(
        self,
        store: ICredentialStore,
        hasher: PasswordHasher,
        tokens: TokenIssuer,
        lockout: LockoutPolicy,
        notifier: INotificationSender,
        *,
        max_refresh_tokens: int = 5,
    ) -> None:
        self.store = store
        self.hasher = hasher
        self.tokens = tokens
        self.lockout = lockout
        self.notifier = notifier
        self.max_refresh_tokens = max_refresh_tokens
        self._dummy_hash: str | None = None

    # ===================
    # Helpers
    # ===================

    def _create_token_pair(self, record: Credential) -> TokenPair:
        """Create access and refresh token pair."""
        return TokenPair(
            access_token=self.tokens.issue_access(record),
            refresh_token=self.tokens.issue_refresh(record),
            expires_in=int(self.tokens.ttl(TokenType.ACCESS).total_seconds()),
        )

    async def _burn_hash_time(self, password: str) -> None:
        """Spend one bcrypt verification so unknown emails answer as slowly as known ones."""
        if self._dummy_hash is None:
            self._dummy_hash = await self.hasher.hash("dummy_password_for_timing_attack_prevention")
        await self.hasher.verify(password, self._dummy_hash)

    async def _require_record(self, user_id: UUID) -> Credential:
        record = await self.store.find_by_id(user_id)
        if record is None:
            raise UserNotFoundError(user_id)
        return record

    # ===================
    # Public Methods
    # ===================

    async def signup(
        self,
        email: str,
        password: str,
        profile: UserProfile | None = None,
        role: UserRole = UserRole.USER,
    ) -> AuthResult:
        """Register a new user and issue the first token pair."""
        email = canonical_email(email)
        if not email or not password:
            raise MissingCredentialsError()

        check_password_strength(password)

        if await self.store.find_by_email(email) is not None:
            raise DuplicateEmailError(email)

        password_hash = await self.hasher.hash(password)
        record = Credential.new(email, password_hash, role=role, profile=profile)
        record = replace(record, last_login=utc_now())

        tokens = self._create_token_pair(record)
        record = record.with_refresh_token(tokens.refresh_token, self.max_refresh_tokens)

        record = await self.store.create(record)
        logger.info("Signup succeeded", extra={"user_id": str(record.id)})

        return AuthResult(user=record.public(), tokens=tokens)

    async def login(self, email: str, password: str) -> AuthResult:
        """Authenticate user and return tokens."""
        email = canonical_email(email)
        if not email or not password:
            raise MissingCredentialsError()

        record = await self.store.find_by_email(email)
        if record is None:
            await self._burn_hash_time(password)
            raise InvalidCredentialsError()

        now = utc_now()
        if self.lockout.is_locked(record, now):
            logger.info("Login refused: account locked", extra={"user_id": str(record.id)})
            raise AccountLockedError(datetime_to_iso(record.lock_until))

        if record.status != UserStatus.ACTIVE:
            raise AccountInactiveError()

        if not await self.hasher.verify(password, record.password_hash):
            record = self.lockout.register_failure(record, now)
            await self.store.save(record)
            logger.info(
                "Login failed: wrong password",
                extra={"user_id": str(record.id), "login_attempts": record.login_attempts},
            )
            if self.lockout.is_locked(record, now):
                logger.warning("Account locked", extra={"user_id": str(record.id)})
                raise AccountLockedError(datetime_to_iso(record.lock_until))
            raise InvalidCredentialsError()

        record = self.lockout.register_success(record)
        record = replace(record, last_login=now)
        tokens = self._create_token_pair(record)
        record = record.with_refresh_token(tokens.refresh_token, self.max_refresh_tokens)
        record = await self.store.save(record)

        logger.info("Login succeeded", extra={"user_id": str(record.id)})
        return AuthResult(user=record.public(), tokens=tokens)

    async def refresh(self, refresh_token: str) -> str:
        """Issue a new access token for a live refresh token.

        The refresh token must still be in the account's stored set, so
        logout, logout-all and password changes revoke it immediately.
        """
        if not refresh_token:
            raise MissingRefreshTokenError()

        try:
            claims = self.tokens.verify(refresh_token, TokenType.REFRESH)
        except AuthenticationError as e:
            raise InvalidRefreshTokenError() from e

        record = await self.store.find_by_id(claims.subject)
        if record is None or refresh_token not in record.refresh_tokens:
            raise InvalidRefreshTokenError()

        return self.tokens.issue_access(record)

    async def logout(self, user_id: UUID, refresh_token: str | None = None) -> None:
        """Revoke one refresh token."""
        if not refresh_token:
            return

        record = await self.store.find_by_id(user_id)
        if record is None or refresh_token not in record.refresh_tokens:
            return

        await self.store.save(record.without_refresh_token(refresh_token))
        logger.info("Logged out", extra={"user_id": str(user_id)})

    async def logout_all(self, user_id: UUID) -> None:
        """Revoke all refresh tokens for user."""
        record = await self.store.find_by_id(user_id)
        if record is None:
            return

        await self.store.save(replace(record, refresh_tokens=[]))
        logger.info("Logged out of all sessions", extra={"user_id": str(user_id)})

    async def change_password(
        self, user_id: UUID, current_password: str, new_password: str
    ) -> None:
        """Change user password and revoke every refresh token."""
        record = await self._require_record(user_id)

        if not current_password or not await self.hasher.verify(
            current_password, record.password_hash
        ):
            raise InvalidCurrentPasswordError()

        check_password_strength(new_password)

        record = replace(
            record,
            password_hash=await self.hasher.hash(new_password),
            refresh_tokens=[],
        )
        await self.store.save(record)
        logger.info("Password changed", extra={"user_id": str(user_id)})

    async def forgot_password(self, email: str) -> None:
        """Request password reset.

        Returns normally whether or not the email is registered.
        """
        record = await self.store.find_by_email(email)
        if record is None:
            return

        token = self.tokens.issue_reset(record)
        record = replace(
            record,
            password_reset_token=token,
            password_reset_expires=utc_now() + self.tokens.ttl(TokenType.RESET),
        )
        await self.store.save(record)

        try:
            await self.notifier.send_password_reset(record.email, token)
        except Exception:
            # Hand-off is fire-and-forget; the caller's answer must not change
            logger.exception(
                "Password reset notification failed",
                extra={"user_id": str(record.id)},
            )

    async def reset_password(self, token: str, new_password: str) -> None:
        """Reset password with a single-use reset token."""
        check_password_strength(new_password)

        try:
            claims = self.tokens.verify(token, TokenType.RESET)
        except AuthenticationError as e:
            raise InvalidOrExpiredTokenError() from e

        if claims.purpose != PASSWORD_RESET_PURPOSE:
            raise InvalidResetTokenError()

        record = await self.store.find_by_id(claims.subject)
        if (
            record is None
            or record.password_reset_token is None
            or not hmac.compare_digest(record.password_reset_token, token)
            or record.password_reset_expires is None
            or is_expired(record.password_reset_expires)
        ):
            raise InvalidOrExpiredTokenError()

        record = replace(
            record,
            password_hash=await self.hasher.hash(new_password),
            password_reset_token=None,
            password_reset_expires=None,
            refresh_tokens=[],
        )
        await self.store.save(record)
        logger.info("Password reset completed", extra={"user_id": str(record.id)})

    async def authenticate(self, access_token: str) -> User:
        """Validate access token and return user."""
        claims = self.tokens.verify(access_token, TokenType.ACCESS)

        record = await self.store.find_by_id(claims.subject)
        if record is None:
            raise UserNotFoundError(claims.subject)

        if record.status == UserStatus.INACTIVE:
            raise AccountInactiveError()

        return record.public()

    async def get_user_by_id(self, user_id: UUID) -> User | None:
        """Get user by ID."""
        record = await self.store.find_by_id(user_id)
        return record.public() if record else None


# Singleton instance
_auth_service: AuthService | None = None


def build_auth_service(store: ICredentialStore | None = None) -> AuthService:
    """Wire an AuthService from application settings."""
    settings = get_settings()
    return AuthService(
        store=store or CredentialStore(),
        hasher=PasswordHasher(rounds=settings.bcrypt_rounds),
        tokens=TokenIssuer.from_settings(settings),
        lockout=LockoutPolicy(
            max_attempts=settings.max_login_attempts,
            lock_duration=settings.lockout_duration,
        ),
        notifier=LoggingNotificationSender(),
        max_refresh_tokens=settings.max_refresh_tokens,
    )


def get_auth_service() -> AuthService:
    """Get auth service singleton."""
    global _auth_service
    if _auth_service is None:
        _auth_service = build_auth_service()
    return _auth_service
