"""User Service - profile, preferences and account administration."""

import logging
from dataclasses import fields, replace
from typing import Any
from uuid import UUID

from ibcrm.modules.auth.interface import Credential, ICredentialStore, User
from ibcrm.modules.auth.lockout import LockoutPolicy
from ibcrm.modules.auth.store import CredentialStore
from ibcrm.shared.exceptions import RecordNotFoundError
from ibcrm.shared.models import UserStatus

logger = logging.getLogger(__name__)


def _merge(current: Any, changes: dict[str, Any] | None) -> Any:
    """Overlay the known, supplied keys of ``changes`` onto a dataclass value."""
    if not changes:
        return current
    known = {f.name for f in fields(current)}
    return replace(current, **{k: v for k, v in changes.items() if k in known})


class UserService:
    """User profile and account administration.

    Reads and writes go through the credential store, so profile edits and
    status changes see the same record the auth service does.
    """

    def __init__(
        self,
        store: ICredentialStore | None = None,
        lockout: LockoutPolicy | None = None,
    ) -> None:
        self.store = store or CredentialStore()
        self.lockout = lockout or LockoutPolicy()

    async def _require(self, user_id: UUID) -> Credential:
        record = await self.store.find_by_id(user_id)
        if record is None:
            raise RecordNotFoundError("User", user_id)
        return record

    # ===================
    # Profile Methods
    # ===================

    async def get_profile(self, user_id: UUID) -> User:
        """Get user's public profile.

        Raises:
            RecordNotFoundError: If the user does not exist
        """
        return (await self._require(user_id)).public()

    async def update_profile(
        self,
        user_id: UUID,
        profile: dict[str, Any] | None = None,
        preferences: dict[str, Any] | None = None,
    ) -> User:
        """Merge the supplied profile and preference fields.

        Args:
            user_id: User's UUID
            profile: Partial ``UserProfile`` fields (snake_case keys)
            preferences: Partial ``UserPreferences`` fields (snake_case keys)

        Returns:
            Updated public user
        """
        record = await self._require(user_id)
        record = replace(
            record,
            profile=_merge(record.profile, profile),
            preferences=_merge(record.preferences, preferences),
        )
        record = await self.store.save(record)
        logger.info("Profile updated", extra={"user_id": str(user_id)})
        return record.public()

    # ===================
    # Administration
    # ===================

    async def find_by_email(self, email: str) -> User | None:
        record = await self.store.find_by_email(email)
        return record.public() if record else None

    async def set_status(self, user_id: UUID, status: UserStatus) -> User:
        """Activate, deactivate or suspend an account."""
        record = await self._require(user_id)
        record = await self.store.save(replace(record, status=status))
        logger.info(
            "Account status changed",
            extra={"user_id": str(user_id), "status": status.value},
        )
        return record.public()

    async def unlock(self, user_id: UUID) -> User:
        """Clear failed-attempt counters and any lock."""
        record = await self._require(user_id)
        record = await self.store.save(self.lockout.register_success(record))
        logger.info("Account unlocked", extra={"user_id": str(user_id)})
        return record.public()


# Singleton instance
_user_service: UserService | None = None


def get_user_service() -> UserService:
    """Get user service singleton."""
    global _user_service
    if _user_service is None:
        _user_service = UserService()
    return _user_service
