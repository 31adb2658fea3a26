"""Bearer-token request gate for protected routes."""

from typing import Annotated

from fastapi import Depends, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from ibcrm.api.dependencies import AuthServiceDep
from ibcrm.modules.auth.interface import User
from ibcrm.shared.exceptions import (
    AdminRequiredError,
    AuthenticationError,
    MissingTokenError,
)

# auto_error is off so a missing header surfaces as MISSING_TOKEN
bearer_scheme = HTTPBearer(auto_error=False)


async def get_current_user(
    request: Request,
    credentials: Annotated[HTTPAuthorizationCredentials | None, Depends(bearer_scheme)],
    auth_service: AuthServiceDep,
) -> User:
    """Validate the bearer token and attach the user to the request.

    Raises:
        MissingTokenError: No bearer token was sent
        ExpiredTokenError: The access token has expired
        InvalidTokenError: The token is malformed, mis-signed or not an access token
        UserNotFoundError: The token's subject no longer exists
        AccountInactiveError: The account has been deactivated
    """
    if credentials is None or not credentials.credentials:
        raise MissingTokenError()

    user = await auth_service.authenticate(credentials.credentials)
    request.state.user = user
    return user


async def get_current_user_optional(
    request: Request,
    credentials: Annotated[HTTPAuthorizationCredentials | None, Depends(bearer_scheme)],
    auth_service: AuthServiceDep,
) -> User | None:
    """Like ``get_current_user`` but any failure yields an anonymous request."""
    if credentials is None or not credentials.credentials:
        return None

    try:
        user = await auth_service.authenticate(credentials.credentials)
    except AuthenticationError:
        return None

    request.state.user = user
    return user


async def require_admin(
    user: Annotated[User, Depends(get_current_user)],
) -> User:
    """Require an authenticated admin."""
    if not user.is_admin:
        raise AdminRequiredError()
    return user


# Type aliases
CurrentUser = Annotated[User, Depends(get_current_user)]
OptionalUser = Annotated[User | None, Depends(get_current_user_optional)]
AdminUser = Annotated[User, Depends(require_admin)]
