"""User profile API routes."""

from uuid import UUID

from fastapi import APIRouter

from ibcrm.api.dependencies import UserServiceDep
from ibcrm.api.middleware.auth import AdminUser, CurrentUser
from ibcrm.api.schemas.auth import UserResponse
from ibcrm.api.schemas.users import (
    ProfileResponse,
    UpdateProfileRequest,
    UpdateStatusRequest,
)

router = APIRouter()


@router.get(
    "/profile",
    response_model=ProfileResponse,
    summary="Get current user's profile",
)
async def get_profile(
    current_user: CurrentUser,
    user_service: UserServiceDep,
) -> ProfileResponse:
    user = await user_service.get_profile(current_user.id)
    return ProfileResponse(user=UserResponse.model_validate(user))


@router.put(
    "/profile",
    response_model=ProfileResponse,
    summary="Update current user's profile",
    description="Only the profile and preference fields present in the body are changed.",
)
async def update_profile(
    body: UpdateProfileRequest,
    current_user: CurrentUser,
    user_service: UserServiceDep,
) -> ProfileResponse:
    user = await user_service.update_profile(
        current_user.id,
        profile=body.profile.model_dump(exclude_unset=True) if body.profile else None,
        preferences=(
            body.preferences.model_dump(exclude_unset=True, exclude_none=True)
            if body.preferences
            else None
        ),
    )
    return ProfileResponse(
        message="Profile updated successfully",
        user=UserResponse.model_validate(user),
    )


@router.patch(
    "/{user_id}/status",
    response_model=ProfileResponse,
    summary="Change account status",
    description="Admin only. Activate, deactivate or suspend an account.",
)
async def update_status(
    user_id: UUID,
    body: UpdateStatusRequest,
    admin: AdminUser,
    user_service: UserServiceDep,
) -> ProfileResponse:
    user = await user_service.set_status(user_id, body.status)
    return ProfileResponse(
        message=f"User status set to {body.status.value}",
        user=UserResponse.model_validate(user),
    )
