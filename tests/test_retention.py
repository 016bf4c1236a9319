"""Unit and integration tests for data retention: delete-only run_retention."""

import asyncio
import unittest
from datetime import timedelta
from unittest.mock import AsyncMock, MagicMock

from _support import ContainerTestCase
from truckore.services.retention import run_retention


class TestRetentionDisabled(unittest.TestCase):
    """When RETENTION_ENABLED is False, run_retention does nothing."""

    def test_returns_zero_and_does_not_clean_up(self) -> None:
        settings = MagicMock()
        settings.RETENTION_ENABLED = False
        settings.SECURITY_LOG_RETENTION_DAYS = 90
        audit_log = MagicMock()
        audit_log.cleanup = AsyncMock(return_value=5)
        deleted = asyncio.run(run_retention(audit_log, settings))
        self.assertEqual(deleted, 0)
        audit_log.cleanup.assert_not_called()


class TestRetentionUsesConfiguredDays(unittest.TestCase):
    """run_retention passes SECURITY_LOG_RETENTION_DAYS to cleanup and returns its count."""

    def test_returns_cleanup_count(self) -> None:
        settings = MagicMock()
        settings.RETENTION_ENABLED = True
        settings.SECURITY_LOG_RETENTION_DAYS = 30
        audit_log = MagicMock()
        audit_log.cleanup = AsyncMock(return_value=2)
        deleted = asyncio.run(run_retention(audit_log, settings))
        self.assertEqual(deleted, 2)
        audit_log.cleanup.assert_awaited_once_with(30)


class TestRetentionIntegration(ContainerTestCase, unittest.TestCase):
    """Integration test on a real store: insert old entries, run retention, assert deleted."""

    def test_retention_run_against_real_store(self) -> None:
        asyncio.run(self.container.initialize())
        audit_log = self.container.audit_log
        now = self.clock.now
        self.clock.now = now - timedelta(days=self.settings.SECURITY_LOG_RETENTION_DAYS + 1)
        asyncio.run(audit_log.record("LOGIN_SUCCESS", "u1", "old"))
        self.clock.now = now
        asyncio.run(audit_log.record("LOGIN_SUCCESS", "u1", "recent"))

        deleted = asyncio.run(run_retention(audit_log, self.settings))

        self.assertEqual(deleted, 1)
        remaining = asyncio.run(audit_log.query())
        self.assertEqual([e.details for e in remaining], ["recent"])
        # Second run is a no-op.
        self.assertEqual(asyncio.run(run_retention(audit_log, self.settings)), 0)


if __name__ == "__main__":
    unittest.main()
