"""Tests for the security audit log: best-effort writes, queries and cleanup."""

import asyncio
import unittest
from datetime import timedelta
from unittest.mock import AsyncMock, MagicMock

from _support import ContainerTestCase, FakeClock
from truckore.core.errors import BackendUnavailable
from truckore.services.security_log import SecurityAuditLog


class TestRecordNeverRaises(unittest.TestCase):
    def test_storage_failure_is_logged_not_raised(self) -> None:
        store = MagicMock()
        store.execute_non_query = AsyncMock(side_effect=BackendUnavailable("disk gone"))
        audit_log = SecurityAuditLog(store, clock=FakeClock())
        with self.assertLogs("truckore.services.security_log", level="ERROR") as logs:
            asyncio.run(audit_log.record("LOGIN_SUCCESS", "u1", "ok"))
        self.assertIn("LOGIN_SUCCESS", logs.output[0])

    def test_unknown_action_is_dropped(self) -> None:
        store = MagicMock()
        store.execute_non_query = AsyncMock()
        audit_log = SecurityAuditLog(store, clock=FakeClock())
        with self.assertLogs("truckore.services.security_log", level="ERROR"):
            asyncio.run(audit_log.record("FORMAT_DISK", "u1"))
        store.execute_non_query.assert_not_called()


class TestSecurityAuditLog(ContainerTestCase, unittest.TestCase):
    def setUp(self) -> None:
        super().setUp()
        self.container.store.init_database()
        self.audit_log = self.container.audit_log

    def _record_at(self, offset: timedelta, action: str = "LOGIN_SUCCESS", user_id: str = "u1") -> None:
        saved = self.clock.now
        self.clock.now = saved + offset
        try:
            asyncio.run(self.audit_log.record(action, user_id, f"at {offset}"))
        finally:
            self.clock.now = saved

    def test_query_newest_first_with_limit(self) -> None:
        for minutes in (1, 3, 2):
            self._record_at(timedelta(minutes=minutes))
        entries = asyncio.run(self.audit_log.query(limit=2))
        self.assertEqual([e.details for e in entries], ["at 0:03:00", "at 0:02:00"])

    def test_query_filters_by_user(self) -> None:
        self._record_at(timedelta(0), user_id="u1")
        self._record_at(timedelta(0), action="LOGIN_FAILED", user_id="u2")
        entries = asyncio.run(self.audit_log.query(user_id="u2"))
        self.assertEqual([e.action for e in entries], ["LOGIN_FAILED"])

    def test_null_user_id_is_stored(self) -> None:
        asyncio.run(self.audit_log.record("LOGIN_FAILED", None, "Unknown username 'ghost'"))
        (entry,) = asyncio.run(self.audit_log.query())
        self.assertIsNone(entry.user_id)

    def test_query_by_date_range_is_inclusive(self) -> None:
        for hours in (-2, -1, 0, 1):
            self._record_at(timedelta(hours=hours))
        start = self.clock.now - timedelta(hours=1)
        end = self.clock.now
        entries = asyncio.run(self.audit_log.query_by_date_range(start, end))
        self.assertEqual([e.details for e in entries], ["at 0:00:00", "at -1 day, 23:00:00"])

    def test_cleanup_deletes_only_older_entries(self) -> None:
        self._record_at(timedelta(days=-100))
        self._record_at(timedelta(days=-91))
        self._record_at(timedelta(days=-10))
        self._record_at(timedelta(0))
        before = {e.id: e for e in asyncio.run(self.audit_log.query(limit=1000))}

        deleted = asyncio.run(self.audit_log.cleanup(90))

        self.assertEqual(deleted, 2)
        after = asyncio.run(self.audit_log.query(limit=1000))
        self.assertEqual(len(after), 2)
        for entry in after:
            self.assertEqual(entry, before[entry.id])

    def test_cleanup_with_nothing_to_delete(self) -> None:
        self._record_at(timedelta(days=-1))
        self.assertEqual(asyncio.run(self.audit_log.cleanup(90)), 0)

    def test_cleanup_rejects_non_positive_days(self) -> None:
        with self.assertRaises(ValueError):
            asyncio.run(self.audit_log.cleanup(0))


class TestSecurityAuditLogOnFallback(TestSecurityAuditLog):
    native = False


if __name__ == "__main__":
    unittest.main()
