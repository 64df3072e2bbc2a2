"""User API: directory, current user and profile, preferences, admin account management."""

from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException, Request, Response

from app.api.v1.dependencies import (
    get_current_user,
    get_user_manager_for_write,
    get_user_repo,
    get_user_repo_for_write,
    require_admin,
)
from app.application.dtos.user import NotificationPreferences, UserResult
from app.application.use_cases.users import UserManager
from app.core.limiter import limit_writes
from app.infrastructure.persistence.repositories.user_repo import UserRepository
from app.schemas.user import (
    NotificationPreferencesSchema,
    ProfileUpdateRequest,
    UserResponse,
    UserStatusRequest,
    UserUpdateRequest,
)

router = APIRouter()


def _user_not_found(user_id: int) -> HTTPException:
    return HTTPException(status_code=404, detail=f"User {user_id} not found")


@router.get("", response_model=list[UserResponse])
async def list_users(
    _: Annotated[UserResult, Depends(get_current_user)],
    user_repo: Annotated[UserRepository, Depends(get_user_repo)],
):
    """All users, ordered by name (for assignee pickers)."""
    return [UserResponse.model_validate(u) for u in await user_repo.list_all()]


@router.get("/me", response_model=UserResponse)
async def get_me(
    current_user: Annotated[UserResult, Depends(get_current_user)],
):
    """Return the currently authenticated user."""
    return UserResponse.model_validate(current_user)


@router.patch("/me", response_model=UserResponse)
@limit_writes
async def update_profile(
    request: Request,
    body: ProfileUpdateRequest,
    current_user: Annotated[UserResult, Depends(get_current_user)],
    manager: Annotated[UserManager, Depends(get_user_manager_for_write)],
):
    """Change the caller's name and/or email. 400 if the email is taken."""
    updated = await manager.update_profile(
        current_user.id, name=body.name, email=body.email
    )
    if updated is None:
        raise _user_not_found(current_user.id)
    return UserResponse.model_validate(updated)


@router.get("/me/notification-preferences", response_model=NotificationPreferencesSchema)
async def get_notification_preferences(
    current_user: Annotated[UserResult, Depends(get_current_user)],
):
    """Channel and event flags of the caller."""
    return NotificationPreferencesSchema.model_validate(
        current_user.notification_preferences
    )


@router.put("/me/notification-preferences", response_model=NotificationPreferencesSchema)
@limit_writes
async def update_notification_preferences(
    request: Request,
    body: NotificationPreferencesSchema,
    current_user: Annotated[UserResult, Depends(get_current_user)],
    user_repo: Annotated[UserRepository, Depends(get_user_repo_for_write)],
):
    """Replace the caller's preferences; flags omitted from the body reset to true."""
    updated = await user_repo.update_notification_preferences(
        current_user.id, NotificationPreferences(**body.model_dump())
    )
    if updated is None:
        raise HTTPException(status_code=404, detail="User not found")
    return NotificationPreferencesSchema.model_validate(updated.notification_preferences)


@router.get("/{user_id}", response_model=UserResponse)
async def get_user(
    user_id: int,
    _: Annotated[UserResult, Depends(require_admin)],
    user_repo: Annotated[UserRepository, Depends(get_user_repo)],
):
    user = await user_repo.get_by_id(user_id)
    if user is None:
        raise _user_not_found(user_id)
    return UserResponse.model_validate(user)


@router.put("/{user_id}", response_model=UserResponse)
@limit_writes
async def update_user(
    request: Request,
    user_id: int,
    body: UserUpdateRequest,
    current_user: Annotated[UserResult, Depends(require_admin)],
    manager: Annotated[UserManager, Depends(get_user_manager_for_write)],
):
    """Admin edit of name, email, role and active flag. Omitted fields are unchanged."""
    updated = await manager.update_user(
        user_id, body.model_dump(exclude_unset=True), acting_user_id=current_user.id
    )
    if updated is None:
        raise _user_not_found(user_id)
    return UserResponse.model_validate(updated)


@router.patch("/{user_id}/status", response_model=UserResponse)
@limit_writes
async def set_user_status(
    request: Request,
    user_id: int,
    body: UserStatusRequest,
    current_user: Annotated[UserResult, Depends(require_admin)],
    manager: Annotated[UserManager, Depends(get_user_manager_for_write)],
):
    """Activate or deactivate an account. Deactivated users cannot sign in."""
    updated = await manager.set_active(
        user_id, body.is_active, acting_user_id=current_user.id
    )
    if updated is None:
        raise _user_not_found(user_id)
    return UserResponse.model_validate(updated)


@router.delete("/{user_id}", status_code=204)
@limit_writes
async def delete_user(
    request: Request,
    user_id: int,
    current_user: Annotated[UserResult, Depends(require_admin)],
    manager: Annotated[UserManager, Depends(get_user_manager_for_write)],
):
    """Delete an account that neither created nor holds any task."""
    if not await manager.delete_user(user_id, acting_user_id=current_user.id):
        raise _user_not_found(user_id)
    return Response(status_code=204)
