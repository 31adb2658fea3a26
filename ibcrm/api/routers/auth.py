"""Authentication API routes.

The access token is returned in the body; the refresh token travels in an
httpOnly cookie. ``refresh`` and ``logout`` also accept the refresh token in
the body, which takes precedence over the cookie.
"""

from fastapi import APIRouter, BackgroundTasks, Request, Response, status

from ibcrm.api.dependencies import AuthServiceDep
from ibcrm.api.middleware.auth import CurrentUser
from ibcrm.api.schemas.auth import (
    AuthResponse,
    ChangePasswordRequest,
    ForgotPasswordRequest,
    LoginRequest,
    LogoutRequest,
    PasswordResetResponse,
    RefreshTokenRequest,
    ResetPasswordRequest,
    SignupRequest,
    TokenResponse,
    UserResponse,
    VerifyResponse,
)
from ibcrm.api.schemas.common import SuccessResponse
from ibcrm.modules.auth.interface import AuthResult, UserProfile
from ibcrm.shared.config import get_settings

router = APIRouter()


def _set_refresh_cookie(response: Response, token: str) -> None:
    settings = get_settings()
    response.set_cookie(
        key=settings.refresh_cookie_name,
        value=token,
        max_age=int(settings.refresh_token_ttl.total_seconds()),
        path="/",
        httponly=True,
        secure=settings.is_production,
        samesite="strict" if settings.is_production else "lax",
    )


def _clear_refresh_cookie(response: Response) -> None:
    settings = get_settings()
    response.delete_cookie(
        key=settings.refresh_cookie_name,
        path="/",
        httponly=True,
        secure=settings.is_production,
        samesite="strict" if settings.is_production else "lax",
    )


def _presented_refresh_token(request: Request, body_token: str | None) -> str | None:
    return body_token or request.cookies.get(get_settings().refresh_cookie_name)


def _auth_response(result: AuthResult, message: str, response: Response) -> AuthResponse:
    _set_refresh_cookie(response, result.tokens.refresh_token)
    return AuthResponse(
        message=message,
        access_token=result.tokens.access_token,
        expires_in=result.tokens.expires_in,
        user=UserResponse.model_validate(result.user),
    )


@router.post(
    "/signup",
    response_model=AuthResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Register new user",
    description="Create a new account and sign it in.",
)
async def signup(
    body: SignupRequest,
    response: Response,
    auth_service: AuthServiceDep,
) -> AuthResponse:
    """Register a new user account.

    Raises:
        MissingCredentialsError: Email or password absent
        WeakPasswordError: Password fails the strength policy
        DuplicateEmailError: Email is already registered
    """
    profile = UserProfile(**body.profile.model_dump()) if body.profile else None
    result = await auth_service.signup(
        email=body.email or "",
        password=body.password or "",
        profile=profile,
    )
    return _auth_response(result, "User created successfully", response)


@router.post(
    "/login",
    response_model=AuthResponse,
    summary="Login user",
    description="Authenticate user with email and password.",
)
async def login(
    body: LoginRequest,
    response: Response,
    auth_service: AuthServiceDep,
) -> AuthResponse:
    """Authenticate user and return tokens.

    Raises:
        InvalidCredentialsError: Unknown email or wrong password
        AccountLockedError: Too many failed attempts
        AccountInactiveError: Account is not active
    """
    result = await auth_service.login(
        email=body.email or "",
        password=body.password or "",
    )
    return _auth_response(result, "Login successful", response)


@router.post(
    "/refresh",
    response_model=TokenResponse,
    summary="Refresh access token",
    description="Exchange a live refresh token for a new access token.",
)
async def refresh_token(
    request: Request,
    auth_service: AuthServiceDep,
    body: RefreshTokenRequest | None = None,
) -> TokenResponse:
    token = _presented_refresh_token(request, body.refresh_token if body else None)
    access_token = await auth_service.refresh(token or "")
    return TokenResponse(access_token=access_token)


@router.post(
    "/logout",
    response_model=SuccessResponse,
    summary="Logout user",
    description="Revoke the presented refresh token.",
)
async def logout(
    request: Request,
    response: Response,
    current_user: CurrentUser,
    auth_service: AuthServiceDep,
    body: LogoutRequest | None = None,
) -> SuccessResponse:
    token = _presented_refresh_token(request, body.refresh_token if body else None)
    await auth_service.logout(current_user.id, token)
    _clear_refresh_cookie(response)
    return SuccessResponse(message="Logged out successfully")


@router.post(
    "/logout-all",
    response_model=SuccessResponse,
    summary="Logout everywhere",
    description="Revoke every refresh token held by the current user.",
)
async def logout_all(
    response: Response,
    current_user: CurrentUser,
    auth_service: AuthServiceDep,
) -> SuccessResponse:
    await auth_service.logout_all(current_user.id)
    _clear_refresh_cookie(response)
    return SuccessResponse(message="Logged out from all devices")


@router.post(
    "/change-password",
    response_model=SuccessResponse,
    summary="Change password",
    description="Change the password and sign out of every session.",
)
async def change_password(
    body: ChangePasswordRequest,
    response: Response,
    current_user: CurrentUser,
    auth_service: AuthServiceDep,
) -> SuccessResponse:
    """Change the current user's password.

    Raises:
        InvalidCurrentPasswordError: Current password is wrong
        WeakPasswordError: New password fails the strength policy
    """
    await auth_service.change_password(
        user_id=current_user.id,
        current_password=body.current_password,
        new_password=body.new_password,
    )
    _clear_refresh_cookie(response)
    return SuccessResponse(message="Password changed successfully. Please login again.")


@router.get(
    "/verify",
    response_model=VerifyResponse,
    summary="Verify access token",
)
async def verify(current_user: CurrentUser) -> VerifyResponse:
    return VerifyResponse(user=UserResponse.model_validate(current_user))


@router.post(
    "/forgot-password",
    response_model=PasswordResetResponse,
    summary="Request password reset",
    description="Send a password reset link. The answer never reveals whether the email exists.",
)
async def forgot_password(
    body: ForgotPasswordRequest,
    background_tasks: BackgroundTasks,
    auth_service: AuthServiceDep,
) -> PasswordResetResponse:
    """Queue the reset so the answer is sent before any lookup or token work."""
    background_tasks.add_task(auth_service.forgot_password, body.email)
    return PasswordResetResponse()


@router.post(
    "/reset-password",
    response_model=SuccessResponse,
    summary="Reset password",
    description="Set a new password using a reset token.",
)
async def reset_password(
    body: ResetPasswordRequest,
    auth_service: AuthServiceDep,
) -> SuccessResponse:
    """Complete a password reset.

    Raises:
        WeakPasswordError: New password fails the strength policy
        InvalidOrExpiredTokenError: Token is unknown, used or expired
        InvalidResetTokenError: Token was not minted for password resets
    """
    await auth_service.reset_password(body.token, body.new_password)
    return SuccessResponse(message="Password reset successfully")
