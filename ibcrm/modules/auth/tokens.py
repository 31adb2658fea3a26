"""Token Issuer - JWT access, refresh and password-reset tokens."""

from datetime import datetime, timedelta, timezone
from typing import Protocol
from uuid import UUID, uuid4

import jwt

from ibcrm.modules.auth.interface import TokenClaims, TokenType
from ibcrm.shared.config import Settings
from ibcrm.shared.constants import PASSWORD_RESET_PURPOSE
from ibcrm.shared.exceptions import ExpiredTokenError, InvalidTokenError


class TokenSubject(Protocol):
    """Anything with an id and an email can be issued a token."""

    id: UUID
    email: str


class TokenIssuer:
    """Signs and verifies the three token classes.

    Each class has its own secret, so a token of one class never verifies as
    another; the ``type`` claim is checked as well.
    """

    def __init__(
        self,
        access_secret: str,
        refresh_secret: str,
        reset_secret: str,
        *,
        algorithm: str = "HS256",
        access_ttl: timedelta = timedelta(hours=24),
        refresh_ttl: timedelta = timedelta(days=7),
        reset_ttl: timedelta = timedelta(hours=1),
    ) -> None:
        self.algorithm = algorithm
        self._secrets = {
            TokenType.ACCESS: access_secret,
            TokenType.REFRESH: refresh_secret,
            TokenType.RESET: reset_secret,
        }
        self._ttls = {
            TokenType.ACCESS: access_ttl,
            TokenType.REFRESH: refresh_ttl,
            TokenType.RESET: reset_ttl,
        }

    @classmethod
    def from_settings(cls, settings: Settings) -> "TokenIssuer":
        return cls(
            settings.jwt_access_secret,
            settings.jwt_refresh_secret,
            settings.jwt_reset_secret,
            algorithm=settings.jwt_algorithm,
            access_ttl=settings.access_token_ttl,
            refresh_ttl=settings.refresh_token_ttl,
            reset_ttl=settings.reset_token_ttl,
        )

    def ttl(self, token_type: TokenType) -> timedelta:
        return self._ttls[token_type]

    def _issue(self, subject: TokenSubject, token_type: TokenType, **extra: str) -> str:
        now = datetime.now(timezone.utc)
        payload = {
            "sub": str(subject.id),
            "email": subject.email,
            "type": token_type.value,
            "iat": now,
            "exp": now + self._ttls[token_type],
            # Unique per token, even for two issued within the same second
            "jti": uuid4().hex,
            **extra,
        }
        return jwt.encode(payload, self._secrets[token_type], algorithm=self.algorithm)

    def issue_access(self, subject: TokenSubject) -> str:
        return self._issue(subject, TokenType.ACCESS)

    def issue_refresh(self, subject: TokenSubject) -> str:
        return self._issue(subject, TokenType.REFRESH)

    def issue_reset(self, subject: TokenSubject) -> str:
        return self._issue(subject, TokenType.RESET, purpose=PASSWORD_RESET_PURPOSE)

    def verify(self, token: str, token_type: TokenType) -> TokenClaims:
        """Verify a token of the given class.

        Raises:
            ExpiredTokenError: Signature valid but ``exp`` has passed
            InvalidTokenError: Malformed, wrongly signed, or of another class
        """
        try:
            payload = jwt.decode(
                token,
                self._secrets[token_type],
                algorithms=[self.algorithm],
                options={"require": ["sub", "exp", "type"]},
            )
        except jwt.ExpiredSignatureError as e:
            raise ExpiredTokenError() from e
        except jwt.InvalidTokenError as e:
            raise InvalidTokenError() from e

        if payload.get("type") != token_type.value:
            raise InvalidTokenError()

        try:
            subject = UUID(str(payload["sub"]))
        except ValueError as e:
            raise InvalidTokenError() from e

        return TokenClaims(
            subject=subject,
            email=str(payload.get("email", "")),
            token_type=token_type,
            expires_at=datetime.fromtimestamp(payload["exp"], tz=timezone.utc),
            purpose=payload.get("purpose"),
        )
