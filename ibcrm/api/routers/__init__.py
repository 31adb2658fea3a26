"""API routers package."""

from ibcrm.api.routers.auth import router as auth_router
from ibcrm.api.routers.health import router as health_router
from ibcrm.api.routers.users import router as users_router

__all__ = [
    "auth_router",
    "users_router",
    "health_router",
]
