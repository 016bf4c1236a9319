"""Security audit trail read access and retention cleanup (super admin only)."""

from datetime import datetime
from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException, Query, status

from truckore.api.deps import get_container
from truckore.api.v1.auth import require_super_admin
from truckore.container import Container
from truckore.schemas.auth import CurrentUser
from truckore.schemas.security_log import CleanupResponse, SecurityLogsResponse

router = APIRouter()


@router.get("", response_model=SecurityLogsResponse)
async def get_security_logs(
    _super_admin: Annotated[CurrentUser, Depends(require_super_admin)],
    container: Annotated[Container, Depends(get_container)],
    limit: Annotated[int, Query(ge=1, le=1000)] = 100,
    user_id: str | None = None,
    start: datetime | None = None,
    end: datetime | None = None,
) -> SecurityLogsResponse:
    """Most recent entries first. With start and end, returns that time range instead."""
    if (start is None) != (end is None):
        raise HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            detail="start and end must be given together",
        )
    if start is not None and end is not None:
        logs = await container.audit_log.query_by_date_range(start, end)
        if user_id:
            logs = [entry for entry in logs if entry.user_id == user_id]
        return SecurityLogsResponse(logs=logs[:limit])
    return SecurityLogsResponse(logs=await container.audit_log.query(limit, user_id))


@router.post("/cleanup", response_model=CleanupResponse)
async def cleanup_security_logs(
    _super_admin: Annotated[CurrentUser, Depends(require_super_admin)],
    container: Annotated[Container, Depends(get_container)],
    days_to_keep: Annotated[int | None, Query(ge=1, le=3650)] = None,
) -> CleanupResponse:
    days = days_to_keep or container.settings.SECURITY_LOG_RETENTION_DAYS
    deleted = await container.audit_log.cleanup(days)
    return CleanupResponse(deleted=deleted, days_kept=days)
