"""Credential Store - SQLAlchemy persistence for credential records."""

import logging
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from ibcrm.modules.auth.interface import (
    Credential,
    UserPreferences,
    UserProfile,
    canonical_email,
)
from ibcrm.modules.auth.models import UserModel
from ibcrm.shared.database import get_db_session
from ibcrm.shared.datetime_utils import ensure_utc, utc_now
from ibcrm.shared.exceptions import DuplicateEmailError, RecordNotFoundError
from ibcrm.shared.models import UserRole, UserStatus

logger = logging.getLogger(__name__)


def _to_record(model: UserModel) -> Credential:
    """Convert UserModel to a Credential value."""
    return Credential(
        id=model.id,
        email=model.email,
        password_hash=model.password_hash,
        role=UserRole(model.role),
        status=UserStatus(model.status),
        email_verified=bool(model.email_verified),
        profile=UserProfile(
            first_name=model.first_name,
            last_name=model.last_name,
            university=model.university,
            graduation_year=model.graduation_year,
            phone_number=model.phone_number,
            linkedin_url=model.linkedin_url,
        ),
        preferences=UserPreferences(
            theme=model.theme,
            notifications=model.notifications,
            timezone=model.timezone,
        ),
        refresh_tokens=list(model.refresh_tokens or []),
        login_attempts=model.login_attempts or 0,
        lock_until=ensure_utc(model.lock_until),
        last_login=ensure_utc(model.last_login),
        password_reset_token=model.password_reset_token,
        password_reset_expires=ensure_utc(model.password_reset_expires),
        created_at=ensure_utc(model.created_at),
        updated_at=ensure_utc(model.updated_at),
    )


def _apply(model: UserModel, record: Credential) -> None:
    """Copy every mutable field of ``record`` onto ``model``."""
    model.email = canonical_email(record.email)
    model.password_hash = record.password_hash
    model.role = record.role.value
    model.status = record.status.value
    model.email_verified = record.email_verified
    model.first_name = record.profile.first_name
    model.last_name = record.profile.last_name
    model.university = record.profile.university
    model.graduation_year = record.profile.graduation_year
    model.phone_number = record.profile.phone_number
    model.linkedin_url = record.profile.linkedin_url
    model.theme = record.preferences.theme
    model.notifications = record.preferences.notifications
    model.timezone = record.preferences.timezone
    # New list object so the JSON column is flagged dirty
    model.refresh_tokens = list(record.refresh_tokens)
    model.login_attempts = record.login_attempts
    model.lock_until = record.lock_until
    model.last_login = record.last_login
    model.password_reset_token = record.password_reset_token
    model.password_reset_expires = record.password_reset_expires


class CredentialStore:
    """Credential records backed by the ``users`` table.

    Every call runs in its own transaction and re-reads current state;
    nothing is cached between calls.
    """

    def __init__(
        self, session_factory: async_sessionmaker[AsyncSession] | None = None
    ) -> None:
        """Initialize the store.

        Args:
            session_factory: Session factory to use; the application's
                per-event-loop factory is used when omitted
        """
        self._session_factory = session_factory

    async def find_by_email(self, email: str) -> Credential | None:
        email = canonical_email(email)
        if not email:
            return None
        async with get_db_session(self._session_factory) as session:
            result = await session.execute(
                select(UserModel).where(UserModel.email == email)
            )
            model = result.scalar_one_or_none()
            return _to_record(model) if model else None

    async def find_by_id(self, user_id: UUID) -> Credential | None:
        async with get_db_session(self._session_factory) as session:
            model = await session.get(UserModel, user_id)
            return _to_record(model) if model else None

    async def create(self, record: Credential) -> Credential:
        """Insert a new record.

        Raises:
            DuplicateEmailError: If the canonical email is already registered
        """
        email = canonical_email(record.email)
        try:
            async with get_db_session(self._session_factory) as session:
                existing = await session.execute(
                    select(UserModel.id).where(UserModel.email == email)
                )
                if existing.scalar_one_or_none() is not None:
                    raise DuplicateEmailError(email)

                model = UserModel(
                    id=record.id,
                    created_at=record.created_at,
                    updated_at=record.updated_at,
                )
                _apply(model, record)
                session.add(model)
                await session.flush()
                created = _to_record(model)
        except IntegrityError as e:
            # Unique index caught a concurrent signup for the same email
            logger.info(f"Duplicate email rejected by unique index: {e.orig!r}")
            raise DuplicateEmailError(email) from e

        logger.info("User created", extra={"user_id": str(created.id)})
        return created

    async def save(self, record: Credential) -> Credential:
        """Persist all mutable fields of an existing record.

        Raises:
            RecordNotFoundError: If the record was deleted concurrently
        """
        async with get_db_session(self._session_factory) as session:
            model = await session.get(UserModel, record.id)
            if model is None:
                raise RecordNotFoundError("User", record.id)
            _apply(model, record)
            model.updated_at = utc_now()
            await session.flush()
            return _to_record(model)
