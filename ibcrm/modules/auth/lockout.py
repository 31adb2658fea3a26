"""Lockout Policy - temporary refusal after repeated failed password checks.

Lock state is derived on read from ``lock_until``; nothing sweeps expired
locks. A lock whose time has passed is only cleared the next time an attempt
is evaluated, so every consumer must go through ``is_locked`` rather than
testing ``lock_until`` for presence.
"""

from dataclasses import dataclass, replace
from datetime import datetime, timedelta

from ibcrm.modules.auth.interface import Credential
from ibcrm.shared.datetime_utils import is_expired, utc_now


def is_locked(record: Credential, now: datetime | None = None) -> bool:
    """True while ``lock_until`` is set and still in the future."""
    return record.lock_until is not None and not is_expired(record.lock_until, now)


@dataclass(frozen=True)
class LockoutPolicy:
    """Decides lock/unlock from the attempt history of one record."""

    max_attempts: int = 5
    lock_duration: timedelta = timedelta(hours=2)

    def is_locked(self, record: Credential, now: datetime | None = None) -> bool:
        return is_locked(record, now)

    def register_failure(self, record: Credential, now: datetime | None = None) -> Credential:
        """Record a failed password check.

        Returns:
            Updated copy of the record
        """
        now = now or utc_now()

        if is_locked(record, now):
            return record

        if record.lock_until is not None:
            # Previous lock has run out: start counting afresh
            return replace(record, login_attempts=1, lock_until=None)

        attempts = record.login_attempts + 1
        lock_until = now + self.lock_duration if attempts >= self.max_attempts else None
        return replace(record, login_attempts=attempts, lock_until=lock_until)

    def register_success(self, record: Credential) -> Credential:
        """Record a successful password check."""
        return replace(record, login_attempts=0, lock_until=None)
