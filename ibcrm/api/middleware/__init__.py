"""API middleware package."""

from ibcrm.api.middleware.auth import (
    AdminUser,
    CurrentUser,
    OptionalUser,
    get_current_user,
    get_current_user_optional,
    require_admin,
)
from ibcrm.api.middleware.error_handler import create_error_response, setup_exception_handlers
from ibcrm.api.middleware.logging import RequestLoggingMiddleware, setup_logging
from ibcrm.api.middleware.rate_limit import RateLimitConfig, RateLimitMiddleware
from ibcrm.api.middleware.timeout import RequestTimeoutMiddleware

__all__ = [
    "AdminUser",
    "CurrentUser",
    "OptionalUser",
    "get_current_user",
    "get_current_user_optional",
    "require_admin",
    "create_error_response",
    "setup_exception_handlers",
    "RequestLoggingMiddleware",
    "setup_logging",
    "RateLimitConfig",
    "RateLimitMiddleware",
    "RequestTimeoutMiddleware",
]
