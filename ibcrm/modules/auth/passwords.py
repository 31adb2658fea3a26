"""Password hashing and strength policy."""

import asyncio
import re

import bcrypt

from ibcrm.shared.constants import MAX_PASSWORD_BYTES, MIN_PASSWORD_LENGTH
from ibcrm.shared.exceptions import WeakPasswordError


def check_password_strength(password: str) -> str:
    """Validate password meets security requirements.

    Requirements:
    - At least 8 characters
    - At most 72 bytes once UTF-8 encoded
    - At least one uppercase letter
    - At least one lowercase letter
    - At least one digit

    Returns:
        The password, unchanged

    Raises:
        WeakPasswordError: Naming the first requirement that is not met
    """
    if len(password) < MIN_PASSWORD_LENGTH:
        raise WeakPasswordError(
            f"Password must be at least {MIN_PASSWORD_LENGTH} characters long"
        )
    if len(password.encode()) > MAX_PASSWORD_BYTES:
        raise WeakPasswordError(f"Password must be at most {MAX_PASSWORD_BYTES} bytes long")
    if not re.search(r"[A-Z]", password):
        raise WeakPasswordError("Password must contain at least one uppercase letter")
    if not re.search(r"[a-z]", password):
        raise WeakPasswordError("Password must contain at least one lowercase letter")
    if not re.search(r"\d", password):
        raise WeakPasswordError("Password must contain at least one number")
    return password


class PasswordHasher:
    """bcrypt hashing, run in a worker thread so the event loop keeps serving."""

    def __init__(self, rounds: int = 12) -> None:
        self.rounds = rounds

    def _hash_sync(self, password: str) -> str:
        return bcrypt.hashpw(password.encode(), bcrypt.gensalt(rounds=self.rounds)).decode()

    def _verify_sync(self, password: str, password_hash: str) -> bool:
        encoded = password.encode()
        if len(encoded) > MAX_PASSWORD_BYTES:
            # Never hashed by us; newer bcrypt releases refuse such input
            return False
        return bcrypt.checkpw(encoded, password_hash.encode())

    async def hash(self, password: str) -> str:
        """Hash password using bcrypt."""
        return await asyncio.to_thread(self._hash_sync, password)

    async def verify(self, password: str, password_hash: str) -> bool:
        """Verify password against hash."""
        return await asyncio.to_thread(self._verify_sync, password, password_hash)
