"""User module - profile, preferences and account administration."""

from ibcrm.modules.user.service import UserService, get_user_service

__all__ = [
    "UserService",
    "get_user_service",
]
