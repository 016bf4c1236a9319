"""
Fallback store: the supported statement subset over JSON table files.

Used when the native SQLite store is unavailable. Each table lives in its own
file (<prefix><table>.json) holding a list of row objects. Every mutation
rewrites the affected table file immediately via a temp file and os.replace,
so a crash mid-write leaves the previous version of the table intact. There is
no atomicity across statements.

The table set, column names, scalar defaults, NOT NULL, primary-key and unique
constraints all come from the shared SQLAlchemy metadata, so rows written here
have the same shape and obey the same constraints as rows in the native store.
"""

import asyncio
import json
import logging
import os
import secrets
import string
import tempfile
import threading
import time
from collections.abc import Sequence
from pathlib import Path

from sqlalchemy import MetaData, Table

from truckore.core.errors import ConstraintViolation, StorageError, UnsupportedStatement
from truckore.models import Base
from truckore.storage.base import StorageBackend
from truckore.storage.coercion import coerce_values, coerce_where
from truckore.storage.statements import (
    Command,
    Delete,
    Insert,
    Row,
    Scalar,
    Select,
    Statement,
    Update,
    Where,
    is_query,
    parse_statement,
)

logger = logging.getLogger(__name__)

_ID_ALPHABET = string.ascii_lowercase + string.digits


def synthesize_id(table: str) -> str:
    """Recency + randomness id, unique within the local store only."""
    suffix = "".join(secrets.choice(_ID_ALPHABET) for _ in range(9))
    return f"{table}_{int(time.time() * 1000)}_{suffix}"


class FallbackStore(StorageBackend):
    """Table-per-file JSON store implementing SELECT/INSERT/UPDATE/DELETE with equality filters."""

    name = "fallback"

    def __init__(
        self,
        directory: str | Path,
        prefix: str = "truckore_",
        metadata: MetaData = Base.metadata,
    ) -> None:
        self.directory = Path(directory)
        self.prefix = prefix
        self._metadata = metadata
        self._lock = threading.RLock()

    def is_available(self) -> bool:
        return True

    def init_storage(self) -> None:
        """Create missing table files; existing tables are left untouched."""
        with self._lock:
            self.directory.mkdir(parents=True, exist_ok=True)
            for table in self._metadata.sorted_tables:
                if not self._path(table.name).exists():
                    self._save(table.name, [])
                    logger.info("Fallback store: created table %s", table.name)

    async def execute_query(self, statement: Statement, params: Sequence[Scalar] = ()) -> list[Row]:
        command = self._coerce(statement, params)
        if not is_query(command):
            raise UnsupportedStatement("execute_query requires a SELECT statement")
        return await asyncio.to_thread(self.run, command)

    async def execute_non_query(self, statement: Statement, params: Sequence[Scalar] = ()) -> None:
        command = self._coerce(statement, params)
        if is_query(command):
            raise UnsupportedStatement("execute_non_query does not accept SELECT statements")
        await asyncio.to_thread(self.run, command)

    def run(self, command: Command) -> list[Row]:
        """Execute one command synchronously; mutations return an empty list."""
        table = self._table(command.table)
        if isinstance(command, Select):
            with self._lock:
                return self._select(table, command.where)
        with self._lock:
            if isinstance(command, Insert):
                self._insert(table, command.values)
            elif isinstance(command, Update):
                self._update(table, command.values, command.where)
            elif isinstance(command, Delete):
                self._delete(table, command.where)
            else:
                raise UnsupportedStatement(f"Unsupported command: {command!r}")
        return []

    # Statement handling

    def _select(self, table: Table, where: Where | None) -> list[Row]:
        if where is not None:
            self._check_columns(table, [where.column])
            where = coerce_where(table, where)
        rows = self._load(table.name)
        return [dict(row) for row in rows if where is None or where.matches(row)]

    def _insert(self, table: Table, values: dict[str, Scalar]) -> None:
        self._check_columns(table, values)
        values = coerce_values(table, values)
        row: Row = {}
        for column in table.columns:
            if column.name in values:
                row[column.name] = values[column.name]
            elif column.default is not None and column.default.is_scalar:
                row[column.name] = column.default.arg
            else:
                row[column.name] = None
        if "id" in table.columns and not row.get("id"):
            row["id"] = synthesize_id(table.name)

        self._check_not_null(table, row)
        rows = self._load(table.name)
        self._check_unique(table, row, rows)
        rows.append(row)
        self._save(table.name, rows)

    def _update(self, table: Table, values: dict[str, Scalar], where: Where) -> None:
        self._check_columns(table, [*values, where.column])
        values = coerce_values(table, values)
        where = coerce_where(table, where)
        rows = self._load(table.name)
        matched = [i for i, row in enumerate(rows) if where.matches(row)]
        if not matched:
            return

        updated = list(rows)
        for i in matched:
            updated[i] = {**rows[i], **values}
            self._check_not_null(table, updated[i])
        for column in self._unique_columns(table):
            if column not in values:
                continue
            seen: set = set()
            for row in updated:
                value = row.get(column)
                if value is None:
                    continue
                if value in seen:
                    raise ConstraintViolation(
                        f"UNIQUE constraint failed: {table.name}.{column}", table.name, column
                    )
                seen.add(value)
        self._save(table.name, updated)

    def _delete(self, table: Table, where: Where) -> None:
        self._check_columns(table, [where.column])
        where = coerce_where(table, where)
        rows = self._load(table.name)
        kept = [row for row in rows if not where.matches(row)]
        if len(kept) != len(rows):
            self._save(table.name, kept)

    # Schema checks

    def _table(self, name: str) -> Table:
        table = self._metadata.tables.get(name)
        if table is None:
            raise UnsupportedStatement(f"Unknown table: {name}")
        return table

    @staticmethod
    def _check_columns(table: Table, columns) -> None:
        unknown = [c for c in columns if c not in table.columns]
        if unknown:
            raise UnsupportedStatement(
                f"Unknown column(s) for table {table.name}: {', '.join(unknown)}"
            )

    @staticmethod
    def _check_not_null(table: Table, row: Row) -> None:
        for column in table.columns:
            if not column.nullable and row.get(column.name) is None:
                raise ConstraintViolation(
                    f"NOT NULL constraint failed: {table.name}.{column.name}",
                    table.name,
                    column.name,
                )

    @staticmethod
    def _unique_columns(table: Table) -> list[str]:
        return [c.name for c in table.columns if c.primary_key or c.unique]

    def _check_unique(self, table: Table, row: Row, existing: list[Row]) -> None:
        for column in self._unique_columns(table):
            value = row.get(column)
            if value is None:
                continue
            if any(other.get(column) == value for other in existing):
                raise ConstraintViolation(
                    f"UNIQUE constraint failed: {table.name}.{column}", table.name, column
                )

    # Persistence

    def _path(self, table: str) -> Path:
        return self.directory / f"{self.prefix}{table}.json"

    def _load(self, table: str) -> list[Row]:
        path = self._path(table)
        if not path.exists():
            return []
        try:
            with path.open("r", encoding="utf-8") as f:
                data = json.load(f)
        except (OSError, json.JSONDecodeError) as e:
            raise StorageError(f"Fallback table {table} is unreadable: {e}") from e
        if not isinstance(data, list):
            raise StorageError(f"Fallback table {table} is not a list of rows")
        return data

    def _save(self, table: str, rows: list[Row]) -> None:
        self.directory.mkdir(parents=True, exist_ok=True)
        fd, tmp_name = tempfile.mkstemp(
            prefix=f".{self.prefix}{table}.", suffix=".tmp", dir=self.directory
        )
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                json.dump(rows, f, ensure_ascii=False)
                f.flush()
                os.fsync(f.fileno())
            os.replace(tmp_name, self._path(table))
        except BaseException:
            try:
                os.unlink(tmp_name)
            except FileNotFoundError:
                pass
            raise

    @staticmethod
    def _coerce(statement: Statement, params: Sequence[Scalar]) -> Command:
        if isinstance(statement, str):
            return parse_statement(statement, params)
        if params:
            raise UnsupportedStatement("Parameters are only accepted with raw SQL statements")
        return statement
