"""JWT login/logout, password change and auth dependencies (get_current_user, require_admin)."""

import logging
from typing import Annotated

import jwt
from fastapi import APIRouter, Depends, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from truckore.api.deps import get_container, http_error
from truckore.container import Container
from truckore.core.errors import TruckoreError
from truckore.core.security import create_access_token, decode_access_token
from truckore.schemas.auth import (
    ChangePasswordRequest,
    CurrentUser,
    LoginRequest,
    TokenResponse,
)
from truckore.schemas.user import User

logger = logging.getLogger(__name__)
router = APIRouter()
security = HTTPBearer(auto_error=False)

ADMIN_ROLES = frozenset({"super_admin", "admin"})


def _unauthorized(detail: str) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail=detail,
        headers={"WWW-Authenticate": "Bearer"},
    )


@router.post("/login", response_model=TokenResponse)
async def login(
    body: LoginRequest,
    container: Annotated[Container, Depends(get_container)],
) -> TokenResponse:
    """
    Authenticate with username and password; returns a JWT access token.
    Include the token in the Authorization header as: Bearer <access_token>
    """
    try:
        user = await container.users.verify_credentials(body.username, body.password)
    except TruckoreError as e:
        raise http_error(e) from e
    token = create_access_token(sub=user.id, role=user.role, settings=container.settings)
    return TokenResponse(access_token=token, token_type="bearer", user=user)


async def get_current_user(
    credentials: Annotated[HTTPAuthorizationCredentials | None, Depends(security)],
    container: Annotated[Container, Depends(get_container)],
) -> CurrentUser:
    """Dependency: require valid Bearer JWT and return the current user. Raises 401 if missing or invalid."""
    if credentials is None:
        raise _unauthorized("Not authenticated")
    try:
        payload = decode_access_token(credentials.credentials, settings=container.settings)
    except jwt.PyJWTError:
        raise _unauthorized("Invalid or expired token")
    sub = payload.get("sub")
    if not sub:
        raise _unauthorized("Invalid token payload")
    user = await container.users.get_user_by_id(str(sub))
    if user is None:
        raise _unauthorized("User not found")
    if not user.is_active:
        raise _unauthorized("Account is disabled. Contact Super Admin.")
    return CurrentUser(id=user.id, username=user.username, role=user.role)


def require_admin(
    current_user: Annotated[CurrentUser, Depends(get_current_user)],
) -> CurrentUser:
    """Dependency: require role 'admin' or 'super_admin'. Raises 403 otherwise."""
    if current_user.role not in ADMIN_ROLES:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Admin access required",
        )
    return current_user


def require_super_admin(
    current_user: Annotated[CurrentUser, Depends(get_current_user)],
) -> CurrentUser:
    """Dependency: require role 'super_admin'. Raises 403 otherwise."""
    if current_user.role != "super_admin":
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Super Admin access required",
        )
    return current_user


@router.post("/logout", status_code=status.HTTP_204_NO_CONTENT)
async def logout(
    current_user: Annotated[CurrentUser, Depends(get_current_user)],
    container: Annotated[Container, Depends(get_container)],
) -> None:
    """Record the logout; tokens are stateless and simply discarded by the client."""
    await container.audit_log.record(
        "LOGOUT", current_user.id, f"User '{current_user.username}' logged out"
    )


@router.get("/me", response_model=User)
async def me(
    current_user: Annotated[CurrentUser, Depends(get_current_user)],
    container: Annotated[Container, Depends(get_container)],
) -> User:
    user = await container.users.get_user_by_id(current_user.id)
    if user is None:
        raise _unauthorized("User not found")
    return user


@router.post("/change-password", status_code=status.HTTP_204_NO_CONTENT)
async def change_password(
    body: ChangePasswordRequest,
    current_user: Annotated[CurrentUser, Depends(get_current_user)],
    container: Annotated[Container, Depends(get_container)],
) -> None:
    """Change own password; the current password must be supplied."""
    try:
        await container.users.change_password(
            current_user.id, body.old_password, body.new_password
        )
    except TruckoreError as e:
        raise http_error(e) from e
