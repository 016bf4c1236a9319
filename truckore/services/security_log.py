"""Append-only security audit trail: best-effort writes, read access for admin tooling, age-based cleanup."""

import logging
import uuid
from datetime import datetime, timedelta

from truckore.core.time_utils import Clock, parse_iso, to_iso, utcnow
from truckore.schemas.security_log import SECURITY_ACTION_VALUES, SecurityAction, SecurityLogEntry
from truckore.storage.base import StorageBackend
from truckore.storage.statements import Delete, Insert, Select, Where

logger = logging.getLogger(__name__)

TABLE = "security_logs"
DEFAULT_QUERY_LIMIT = 100
DEFAULT_DAYS_TO_KEEP = 90


class SecurityAuditLog:
    """
    Records security events. Rows are never updated; cleanup() is the only delete path.
    """

    def __init__(self, store: StorageBackend, clock: Clock = utcnow) -> None:
        self._store = store
        self._clock = clock

    async def record(
        self,
        action: SecurityAction,
        user_id: str | None = None,
        details: str | None = None,
    ) -> None:
        """
        Append one event. Never raises: a failed write is logged and dropped so the
        security operation being described is not affected.
        """
        try:
            if action not in SECURITY_ACTION_VALUES:
                raise ValueError(f"Unknown security action: {action!r}")
            await self._store.execute_non_query(
                Insert(
                    TABLE,
                    {
                        "id": str(uuid.uuid4()),
                        "user_id": user_id or None,
                        "action": action,
                        "details": details or None,
                        "timestamp": to_iso(self._clock()),
                    },
                )
            )
        except Exception:
            logger.exception("Failed to record security event %s (user_id=%s)", action, user_id)

    async def query(
        self, limit: int = DEFAULT_QUERY_LIMIT, user_id: str | None = None
    ) -> list[SecurityLogEntry]:
        """Most recent entries first, optionally for one user."""
        if limit <= 0:
            return []
        where = Where("user_id", user_id) if user_id else None
        entries = await self._entries(where)
        return entries[:limit]

    async def query_by_date_range(self, start: datetime, end: datetime) -> list[SecurityLogEntry]:
        """Entries with start <= timestamp <= end, most recent first."""
        start_at, end_at = parse_iso(start), parse_iso(end)
        return [e for e in await self._entries() if start_at <= e.timestamp <= end_at]

    async def cleanup(self, days_to_keep: int = DEFAULT_DAYS_TO_KEEP) -> int:
        """
        Delete entries strictly older than now - days_to_keep.

        Returns the number of entries deleted. Entries at or after the cutoff are untouched.
        """
        if days_to_keep < 1:
            raise ValueError("days_to_keep must be at least 1")
        cutoff = self._clock() - timedelta(days=days_to_keep)
        expired = [e for e in await self._entries() if e.timestamp < cutoff]
        for entry in expired:
            await self._store.execute_non_query(Delete(TABLE, Where("id", entry.id)))
        if expired:
            logger.info(
                "Security log cleanup: cutoff=%s, entries_deleted=%s",
                to_iso(cutoff),
                len(expired),
            )
        return len(expired)

    async def _entries(self, where: Where | None = None) -> list[SecurityLogEntry]:
        rows = await self._store.execute_query(Select(TABLE, where))
        entries = []
        for row in rows:
            try:
                entries.append(SecurityLogEntry.from_row(row))
            except (KeyError, ValueError) as e:
                logger.warning("Skipping malformed security log row %s: %s", row.get("id"), e)
        entries.sort(key=lambda e: e.timestamp, reverse=True)
        return entries
