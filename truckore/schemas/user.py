"""Pydantic schemas for user accounts: domain model (never carries the password hash) and admin API bodies."""

from datetime import datetime
from typing import Any, Literal

from pydantic import BaseModel, Field

from truckore.core.time_utils import parse_iso

# Exactly one role per user. super_admin is deletion-protected while it is the only one.
UserRole = Literal["super_admin", "admin", "operator"]

USER_ROLE_VALUES: frozenset[str] = frozenset({"super_admin", "admin", "operator"})


class User(BaseModel):
    """User account as exposed outside the repository."""

    id: str
    username: str
    email: str | None = None
    role: UserRole
    is_active: bool = True
    failed_login_attempts: int = Field(default=0, ge=0)
    locked_until: datetime | None = None
    last_login_at: datetime | None = None
    created_at: datetime
    updated_at: datetime

    @classmethod
    def from_row(cls, row: dict[str, Any]) -> "User":
        """Build from a storage row (either backend); drops password_hash."""
        return cls(
            id=row["id"],
            username=row["username"],
            email=row.get("email"),
            role=row["role"],
            is_active=bool(row.get("is_active", True)),
            failed_login_attempts=int(row.get("failed_login_attempts") or 0),
            locked_until=parse_iso(row.get("locked_until")),
            last_login_at=parse_iso(row.get("last_login_at")),
            created_at=parse_iso(row["created_at"]),
            updated_at=parse_iso(row["updated_at"]),
        )


class UserCreateRequest(BaseModel):
    """Body for creating a user (admin only)."""

    username: str = Field(..., min_length=3, max_length=255)
    password: str = Field(..., min_length=8, max_length=128)
    role: UserRole = "operator"
    email: str | None = Field(default=None, max_length=255)


class UserUpdateRequest(BaseModel):
    """Partial update; omitted fields are left unchanged."""

    username: str | None = Field(default=None, min_length=3, max_length=255)
    email: str | None = Field(default=None, max_length=255)
    role: UserRole | None = None
    is_active: bool | None = None


class PasswordResetRequest(BaseModel):
    """Administrative password reset (no old password)."""

    new_password: str = Field(..., min_length=8, max_length=128)


class UsersListResponse(BaseModel):
    """Response for GET /users."""

    users: list[User]
