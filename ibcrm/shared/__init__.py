"""Shared utilities and common code."""

from ibcrm.shared.config import Settings, get_settings
from ibcrm.shared.database import (
    Base,
    close_db,
    get_db_session,
    init_db,
    shutdown,
    startup,
)
from ibcrm.shared.models import BaseSchema, UserRole, UserStatus

__all__ = [
    # Config
    "Settings",
    "get_settings",
    # Database
    "Base",
    "get_db_session",
    "init_db",
    "close_db",
    "startup",
    "shutdown",
    # Models
    "BaseSchema",
    # Enums
    "UserRole",
    "UserStatus",
]
