"""Request/response schemas for auth endpoints."""

from pydantic import BaseModel, Field

from truckore.schemas.user import User, UserRole


class LoginRequest(BaseModel):
    """Credentials for login."""

    username: str = Field(..., min_length=1, max_length=255, description="Username")
    password: str = Field(..., min_length=1, max_length=128, description="Password")


class TokenResponse(BaseModel):
    """JWT access token returned after successful login."""

    access_token: str = Field(..., description="JWT access token")
    token_type: str = Field(default="bearer", description="Token type")
    user: User


class CurrentUser(BaseModel):
    """Authenticated user (id, username, role) for dependency injection."""

    id: str
    username: str
    role: UserRole


class ChangePasswordRequest(BaseModel):
    """Change own password; the old password is re-verified."""

    old_password: str = Field(..., min_length=1, max_length=128)
    new_password: str = Field(..., min_length=8, max_length=128)


class SetupRequest(BaseModel):
    """First-run provisioning of the super admin account."""

    username: str = Field(..., min_length=3, max_length=255)
    password: str = Field(..., min_length=8, max_length=128)
    email: str | None = Field(default=None, max_length=255)


class SetupStatusResponse(BaseModel):
    """Whether first-run setup has completed."""

    setup_completed: bool
