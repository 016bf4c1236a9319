"""Pydantic schemas for the security audit trail."""

from datetime import datetime
from typing import Any, Literal

from pydantic import BaseModel, Field

from truckore.core.time_utils import parse_iso

SecurityAction = Literal[
    "LOGIN_SUCCESS",
    "LOGIN_FAILED",
    "ACCOUNT_LOCKED",
    "USER_CREATED",
    "USER_UPDATED",
    "USER_DELETED",
    "PASSWORD_RESET",
    "PASSWORD_CHANGED",
    "LOGOUT",
    "SETUP_COMPLETED",
]

SECURITY_ACTION_VALUES: frozenset[str] = frozenset(
    {
        "LOGIN_SUCCESS",
        "LOGIN_FAILED",
        "ACCOUNT_LOCKED",
        "USER_CREATED",
        "USER_UPDATED",
        "USER_DELETED",
        "PASSWORD_RESET",
        "PASSWORD_CHANGED",
        "LOGOUT",
        "SETUP_COMPLETED",
    }
)


class SecurityLogEntry(BaseModel):
    """One immutable audit record. user_id is None for unknown usernames."""

    id: str
    user_id: str | None = None
    action: SecurityAction
    details: str | None = None
    timestamp: datetime

    @classmethod
    def from_row(cls, row: dict[str, Any]) -> "SecurityLogEntry":
        return cls(
            id=row["id"],
            user_id=row.get("user_id"),
            action=row["action"],
            details=row.get("details"),
            timestamp=parse_iso(row["timestamp"]),
        )


class SecurityLogsResponse(BaseModel):
    """Response for GET /security-logs."""

    logs: list[SecurityLogEntry]


class CleanupResponse(BaseModel):
    """Response for POST /security-logs/cleanup."""

    deleted: int = Field(..., ge=0, description="Number of entries removed")
    days_kept: int = Field(..., ge=1)
