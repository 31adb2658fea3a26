"""FastAPI dependency injection for services.

Routes depend on these providers rather than on the module singletons so
tests can swap them through ``app.dependency_overrides``.
"""

from typing import Annotated

from fastapi import Depends

from ibcrm.modules.auth.service import AuthService
from ibcrm.modules.auth.service import get_auth_service as _auth_service
from ibcrm.modules.user.service import UserService
from ibcrm.modules.user.service import get_user_service as _user_service


def get_auth_service() -> AuthService:
    """Get auth service instance."""
    return _auth_service()


def get_user_service() -> UserService:
    """Get user service instance."""
    return _user_service()


AuthServiceDep = Annotated[AuthService, Depends(get_auth_service)]
UserServiceDep = Annotated[UserService, Depends(get_user_service)]
