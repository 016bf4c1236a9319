"""User management endpoints (admin roles; password reset is super admin only)."""

from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException, status

from truckore.api.deps import get_container, http_error
from truckore.api.v1.auth import require_admin, require_super_admin
from truckore.container import Container
from truckore.core.errors import TruckoreError
from truckore.schemas.auth import CurrentUser
from truckore.schemas.user import (
    PasswordResetRequest,
    User,
    UserCreateRequest,
    UsersListResponse,
    UserUpdateRequest,
)

router = APIRouter()


@router.get("", response_model=UsersListResponse)
async def list_users(
    _admin: Annotated[CurrentUser, Depends(require_admin)],
    container: Annotated[Container, Depends(get_container)],
) -> UsersListResponse:
    """List all users, newest first (no password hashes)."""
    return UsersListResponse(users=await container.users.list_users())


@router.post("", response_model=User, status_code=status.HTTP_201_CREATED)
async def create_user(
    body: UserCreateRequest,
    admin: Annotated[CurrentUser, Depends(require_admin)],
    container: Annotated[Container, Depends(get_container)],
) -> User:
    if body.role == "super_admin" and admin.role != "super_admin":
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Only a Super Admin can create Super Admin accounts",
        )
    try:
        return await container.users.create_user(
            body.username, body.password, body.role, body.email
        )
    except TruckoreError as e:
        raise http_error(e) from e


@router.patch("/{user_id}", response_model=User)
async def update_user(
    user_id: str,
    body: UserUpdateRequest,
    admin: Annotated[CurrentUser, Depends(require_admin)],
    container: Annotated[Container, Depends(get_container)],
) -> User:
    if body.role == "super_admin" and admin.role != "super_admin":
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Only a Super Admin can grant the Super Admin role",
        )
    try:
        return await container.users.update_user(
            user_id,
            username=body.username,
            email=body.email,
            role=body.role,
            is_active=body.is_active,
        )
    except TruckoreError as e:
        raise http_error(e) from e


@router.delete("/{user_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_user(
    user_id: str,
    admin: Annotated[CurrentUser, Depends(require_admin)],
    container: Annotated[Container, Depends(get_container)],
) -> None:
    if user_id == admin.id:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="You cannot delete your own account",
        )
    try:
        await container.users.delete_user(user_id)
    except TruckoreError as e:
        raise http_error(e) from e


@router.post("/{user_id}/reset-password", status_code=status.HTTP_204_NO_CONTENT)
async def reset_password(
    user_id: str,
    body: PasswordResetRequest,
    _super_admin: Annotated[CurrentUser, Depends(require_super_admin)],
    container: Annotated[Container, Depends(get_container)],
) -> None:
    try:
        await container.users.reset_password(user_id, body.new_password)
    except TruckoreError as e:
        raise http_error(e) from e
