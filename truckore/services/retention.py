"""Data retention: delete security log entries older than SECURITY_LOG_RETENTION_DAYS."""

import logging
from typing import TYPE_CHECKING

from truckore.services.security_log import SecurityAuditLog

if TYPE_CHECKING:
    from truckore.core.config import Settings

logger = logging.getLogger(__name__)


async def run_retention(audit_log: SecurityAuditLog, settings: "Settings") -> int:
    """
    Delete security log entries older than SECURITY_LOG_RETENTION_DAYS.

    Returns the number of entries deleted. Idempotent: safe to run repeatedly.
    """
    if not settings.RETENTION_ENABLED:
        logger.info("Retention is disabled (RETENTION_ENABLED=false); skipping.")
        return 0

    deleted_count = await audit_log.cleanup(settings.SECURITY_LOG_RETENTION_DAYS)
    if deleted_count > 0:
        logger.info(
            "Retention run: days_kept=%s, security_logs_deleted=%s",
            settings.SECURITY_LOG_RETENTION_DAYS,
            deleted_count,
        )
    return deleted_count
