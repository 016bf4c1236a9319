"""Shared route dependencies and domain-error to HTTP translation."""

from fastapi import HTTPException, Request, status

from truckore.container import Container
from truckore.core.errors import (
    AccountInactive,
    AccountLocked,
    ConstraintViolation,
    DuplicateUsername,
    IncorrectPassword,
    InvalidCredentials,
    ProtectedAccount,
    SetupAlreadyCompleted,
    TruckoreError,
    UnsupportedStatement,
    UserNotFound,
    ValidationError,
)

_STATUS_BY_ERROR: dict[type[TruckoreError], int] = {
    InvalidCredentials: status.HTTP_401_UNAUTHORIZED,
    AccountLocked: status.HTTP_423_LOCKED,
    AccountInactive: status.HTTP_403_FORBIDDEN,
    DuplicateUsername: status.HTTP_409_CONFLICT,
    ProtectedAccount: status.HTTP_403_FORBIDDEN,
    IncorrectPassword: status.HTTP_400_BAD_REQUEST,
    ValidationError: status.HTTP_422_UNPROCESSABLE_ENTITY,
    UnsupportedStatement: status.HTTP_400_BAD_REQUEST,
    UserNotFound: status.HTTP_404_NOT_FOUND,
    SetupAlreadyCompleted: status.HTTP_409_CONFLICT,
    ConstraintViolation: status.HTTP_409_CONFLICT,
}


def get_container(request: Request) -> Container:
    """Dependency: the container built at application startup."""
    return request.app.state.container


def http_error(error: TruckoreError) -> HTTPException:
    """Map a domain error to an HTTPException carrying its message verbatim."""
    for error_type, status_code in _STATUS_BY_ERROR.items():
        if isinstance(error, error_type):
            break
    else:
        status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    headers = None
    if isinstance(error, InvalidCredentials):
        headers = {"WWW-Authenticate": "Bearer"}
    return HTTPException(status_code=status_code, detail=error.message, headers=headers)
