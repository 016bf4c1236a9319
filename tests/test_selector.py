"""Tests for backend selection and fallback on native failure."""

import asyncio
import tempfile
import unittest
from pathlib import Path

from sqlalchemy import create_engine

from _support import memory_engine
from truckore.core.errors import ConstraintViolation, UnsupportedStatement
from truckore.storage import BackendSelector, FallbackStore, NativeStore
from truckore.storage.statements import Insert, Select, Where

NOW = "2025-06-15T12:00:00.000000+00:00"


def _config(key: str, value: str) -> Insert:
    return Insert("app_config", {"key": key, "value": value, "updated_at": NOW})


class SelectorTestCase(unittest.TestCase):
    def setUp(self) -> None:
        tmp = tempfile.TemporaryDirectory()
        self.addCleanup(tmp.cleanup)
        self.engine = memory_engine()
        self.addCleanup(self.engine.dispose)
        self.native = NativeStore(self.engine)
        self.fallback = FallbackStore(Path(tmp.name) / "fallback")
        self.selector = BackendSelector(self.native, self.fallback)


class TestNativeMode(SelectorTestCase):
    def test_uses_native_when_available(self) -> None:
        self.selector.init_database()
        self.assertEqual(self.selector.mode, "native")
        asyncio.run(self.selector.execute_non_query(_config("a", "1")))
        self.assertEqual(len(asyncio.run(self.native.execute_query(Select("app_config")))), 1)
        self.assertEqual(asyncio.run(self.fallback.execute_query(Select("app_config"))), [])

    def test_constraint_violation_does_not_fall_back(self) -> None:
        self.selector.init_database()
        asyncio.run(self.selector.execute_non_query(_config("a", "1")))
        with self.assertRaises(ConstraintViolation):
            asyncio.run(self.selector.execute_non_query(_config("a", "2")))
        self.assertEqual(self.selector.mode, "native")
        self.assertEqual(asyncio.run(self.fallback.execute_query(Select("app_config"))), [])

    def test_unsupported_statement_propagates(self) -> None:
        self.selector.init_database()
        with self.assertRaises(UnsupportedStatement):
            asyncio.run(self.selector.execute_query(Select("weighments")))
        self.assertEqual(self.selector.mode, "native")


class TestFallbackMode(SelectorTestCase):
    def test_no_native_store_runs_on_fallback(self) -> None:
        selector = BackendSelector(None, self.fallback)
        with self.assertLogs("truckore.storage.selector", level="WARNING") as logs:
            selector.init_database()
        self.assertEqual(selector.mode, "fallback")
        self.assertIn("degraded", logs.output[0])
        asyncio.run(selector.execute_non_query(_config("a", "1")))
        rows = asyncio.run(selector.execute_query(Select("app_config", Where("key", "a"))))
        self.assertEqual(rows[0]["value"], "1")

    def test_detach_switches_to_fallback_and_logs_once(self) -> None:
        self.selector.init_database()
        self.native.detach()
        with self.assertLogs("truckore.storage.selector", level="WARNING") as logs:
            asyncio.run(self.selector.execute_non_query(_config("a", "1")))
            asyncio.run(self.selector.execute_query(Select("app_config")))
        self.assertEqual(self.selector.mode, "fallback")
        self.assertEqual(len(logs.output), 1)
        self.assertEqual(len(asyncio.run(self.fallback.execute_query(Select("app_config")))), 1)

    def test_reattach_returns_to_native(self) -> None:
        self.selector.init_database()
        engine = self.native.detach()
        asyncio.run(self.selector.execute_query(Select("app_config")))
        self.native.attach(engine)
        with self.assertLogs("truckore.storage.selector", level="INFO") as logs:
            asyncio.run(self.selector.execute_query(Select("app_config")))
        self.assertEqual(self.selector.mode, "native")
        self.assertIn("-> native", logs.output[0])

    def test_native_error_reruns_same_statement_on_fallback(self) -> None:
        broken = NativeStore(create_engine("sqlite:////nonexistent-truckore-dir/sub/data.db"))
        selector = BackendSelector(broken, self.fallback)
        self.fallback.init_storage()
        with self.assertLogs("truckore.storage.selector", level="WARNING") as logs:
            asyncio.run(
                selector.execute_non_query(
                    "INSERT INTO app_config (key, value, updated_at) VALUES (?, ?, ?)",
                    ["b", "2", NOW],
                )
            )
        self.assertEqual(selector.mode, "fallback")
        self.assertTrue(any("Native store failed" in line for line in logs.output))
        rows = asyncio.run(self.fallback.execute_query(Select("app_config", Where("key", "b"))))
        self.assertEqual(rows[0]["value"], "2")


if __name__ == "__main__":
    unittest.main()
