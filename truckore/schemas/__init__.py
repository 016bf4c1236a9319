"""Pydantic request/response schemas."""

from truckore.schemas.auth import (
    ChangePasswordRequest,
    CurrentUser,
    LoginRequest,
    SetupRequest,
    SetupStatusResponse,
    TokenResponse,
)
from truckore.schemas.health import HealthResponse
from truckore.schemas.query import QueryRequest, QueryResponse
from truckore.schemas.security_log import (
    SECURITY_ACTION_VALUES,
    CleanupResponse,
    SecurityAction,
    SecurityLogEntry,
    SecurityLogsResponse,
)
from truckore.schemas.serial_number import (
    SerialNumberConfig,
    SerialNumberConfigUpdate,
    SerialNumberPreviewRequest,
    SerialNumberResponse,
)
from truckore.schemas.user import (
    USER_ROLE_VALUES,
    PasswordResetRequest,
    User,
    UserCreateRequest,
    UserRole,
    UsersListResponse,
    UserUpdateRequest,
)

__all__ = [
    "ChangePasswordRequest",
    "CleanupResponse",
    "CurrentUser",
    "HealthResponse",
    "LoginRequest",
    "PasswordResetRequest",
    "QueryRequest",
    "QueryResponse",
    "SECURITY_ACTION_VALUES",
    "SecurityAction",
    "SecurityLogEntry",
    "SecurityLogsResponse",
    "SerialNumberConfig",
    "SerialNumberConfigUpdate",
    "SerialNumberPreviewRequest",
    "SerialNumberResponse",
    "SetupRequest",
    "SetupStatusResponse",
    "TokenResponse",
    "USER_ROLE_VALUES",
    "User",
    "UserCreateRequest",
    "UserRole",
    "UserUpdateRequest",
    "UsersListResponse",
]
