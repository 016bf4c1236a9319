"""Tests for the JSON-file fallback store: schema parity, constraints and persistence."""

import asyncio
import json
import re
import tempfile
import unittest
from pathlib import Path

from truckore.core.errors import ConstraintViolation, UnsupportedStatement
from truckore.storage.fallback import FallbackStore, synthesize_id
from truckore.storage.statements import Delete, Insert, Select, Update, Where

NOW = "2025-06-15T12:00:00.000000+00:00"


def _user(user_id: str, username: str) -> dict:
    return {
        "id": user_id,
        "username": username,
        "password_hash": "hash",
        "role": "operator",
        "created_at": NOW,
        "updated_at": NOW,
    }


class FallbackStoreTestCase(unittest.TestCase):
    def setUp(self) -> None:
        tmp = tempfile.TemporaryDirectory()
        self.addCleanup(tmp.cleanup)
        self.directory = Path(tmp.name) / "fallback"
        self.store = FallbackStore(self.directory, prefix="truckore_")
        self.store.init_storage()


class TestInitStorage(FallbackStoreTestCase):
    def test_creates_one_file_per_table(self) -> None:
        names = sorted(p.name for p in self.directory.glob("*.json"))
        self.assertEqual(
            names,
            ["truckore_app_config.json", "truckore_security_logs.json", "truckore_users.json"],
        )

    def test_reinit_keeps_existing_rows(self) -> None:
        asyncio.run(self.store.execute_non_query(Insert("users", _user("u1", "alice"))))
        self.store.init_storage()
        rows = asyncio.run(self.store.execute_query(Select("users")))
        self.assertEqual(len(rows), 1)


class TestInsert(FallbackStoreTestCase):
    def test_injects_column_defaults(self) -> None:
        asyncio.run(self.store.execute_non_query(Insert("users", _user("u1", "alice"))))
        (row,) = asyncio.run(self.store.execute_query(Select("users", Where("id", "u1"))))
        self.assertIs(row["is_active"], True)
        self.assertEqual(row["failed_login_attempts"], 0)
        self.assertIsNone(row["locked_until"])
        self.assertIsNone(row["email"])

    def test_synthesizes_id_when_missing(self) -> None:
        asyncio.run(
            self.store.execute_non_query(
                Insert("security_logs", {"action": "LOGOUT", "timestamp": NOW})
            )
        )
        (row,) = asyncio.run(self.store.execute_query(Select("security_logs")))
        self.assertRegex(row["id"], r"^security_logs_\d+_[a-z0-9]{9}$")

    def test_synthesize_id_format(self) -> None:
        ids = {synthesize_id("users") for _ in range(50)}
        self.assertEqual(len(ids), 50)
        for value in ids:
            self.assertTrue(re.match(r"^users_\d{13,}_[a-z0-9]{9}$", value), value)

    def test_unique_username_enforced(self) -> None:
        asyncio.run(self.store.execute_non_query(Insert("users", _user("u1", "alice"))))
        with self.assertRaises(ConstraintViolation) as ctx:
            asyncio.run(self.store.execute_non_query(Insert("users", _user("u2", "alice"))))
        self.assertEqual(ctx.exception.column, "username")
        rows = asyncio.run(self.store.execute_query(Select("users")))
        self.assertEqual(len(rows), 1)

    def test_primary_key_enforced(self) -> None:
        asyncio.run(self.store.execute_non_query(Insert("users", _user("u1", "alice"))))
        with self.assertRaises(ConstraintViolation) as ctx:
            asyncio.run(self.store.execute_non_query(Insert("users", _user("u1", "bob"))))
        self.assertEqual(ctx.exception.column, "id")

    def test_not_null_enforced(self) -> None:
        values = _user("u1", "alice")
        del values["password_hash"]
        with self.assertRaises(ConstraintViolation):
            asyncio.run(self.store.execute_non_query(Insert("users", values)))

    def test_unknown_table_and_column_rejected(self) -> None:
        with self.assertRaises(UnsupportedStatement):
            asyncio.run(self.store.execute_query(Select("weighments")))
        with self.assertRaises(UnsupportedStatement):
            asyncio.run(
                self.store.execute_non_query(Insert("app_config", {"key": "k", "colour": "red"}))
            )


class TestUpdateDelete(FallbackStoreTestCase):
    def setUp(self) -> None:
        super().setUp()
        asyncio.run(self.store.execute_non_query(Insert("users", _user("u1", "alice"))))
        asyncio.run(self.store.execute_non_query(Insert("users", _user("u2", "bob"))))

    def test_update_only_matching_rows(self) -> None:
        asyncio.run(
            self.store.execute_non_query(
                Update("users", {"role": "admin"}, Where("id", "u1"))
            )
        )
        rows = {r["id"]: r for r in asyncio.run(self.store.execute_query(Select("users")))}
        self.assertEqual(rows["u1"]["role"], "admin")
        self.assertEqual(rows["u2"]["role"], "operator")

    def test_update_cannot_create_duplicate_username(self) -> None:
        with self.assertRaises(ConstraintViolation):
            asyncio.run(
                self.store.execute_non_query(
                    Update("users", {"username": "bob"}, Where("id", "u1"))
                )
            )
        (row,) = asyncio.run(self.store.execute_query(Select("users", Where("id", "u1"))))
        self.assertEqual(row["username"], "alice")

    def test_update_without_match_is_noop(self) -> None:
        asyncio.run(
            self.store.execute_non_query(Update("users", {"role": "admin"}, Where("id", "nope")))
        )
        rows = asyncio.run(self.store.execute_query(Select("users", Where("role", "admin"))))
        self.assertEqual(rows, [])

    def test_delete(self) -> None:
        asyncio.run(self.store.execute_non_query(Delete("users", Where("id", "u1"))))
        rows = asyncio.run(self.store.execute_query(Select("users")))
        self.assertEqual([r["id"] for r in rows], ["u2"])


class TestRawStatements(FallbackStoreTestCase):
    def test_raw_sql_runs_through_parser(self) -> None:
        asyncio.run(
            self.store.execute_non_query(
                "INSERT INTO app_config (key, value, updated_at) VALUES (?, ?, ?)",
                ["setup_completed", "false", NOW],
            )
        )
        rows = asyncio.run(
            self.store.execute_query("SELECT * FROM app_config WHERE key = ?", ["setup_completed"])
        )
        self.assertEqual(rows[0]["value"], "false")

    def test_query_and_non_query_are_not_interchangeable(self) -> None:
        with self.assertRaises(UnsupportedStatement):
            asyncio.run(self.store.execute_query(Delete("users", Where("id", "u1"))))
        with self.assertRaises(UnsupportedStatement):
            asyncio.run(self.store.execute_non_query(Select("users")))

    def test_params_rejected_with_commands(self) -> None:
        with self.assertRaises(UnsupportedStatement):
            asyncio.run(self.store.execute_query(Select("users"), ["x"]))


class TestPersistence(FallbackStoreTestCase):
    def test_rows_survive_a_new_instance(self) -> None:
        asyncio.run(self.store.execute_non_query(Insert("users", _user("u1", "alice"))))
        reopened = FallbackStore(self.directory, prefix="truckore_")
        rows = asyncio.run(reopened.execute_query(Select("users")))
        self.assertEqual(rows[0]["username"], "alice")

    def test_table_file_is_plain_json_list(self) -> None:
        asyncio.run(self.store.execute_non_query(Insert("users", _user("u1", "alice"))))
        data = json.loads((self.directory / "truckore_users.json").read_text(encoding="utf-8"))
        self.assertIsInstance(data, list)
        self.assertEqual(data[0]["id"], "u1")
        self.assertEqual(list(self.directory.glob("*.tmp")), [])


if __name__ == "__main__":
    unittest.main()
