"""
Native store adapter: forwards statements to the embedded SQLite engine.

Owns no logic beyond marshaling commands into SQLAlchemy Core and translating
errors. Raw SQL in the four supported shapes is parsed and compiled like a
command, so its parameters and results carry the same types as on the
fallback store; any other SQL runs verbatim.

The engine plays the role of the host bridge: it can be attached or detached
at runtime, and callers must re-check availability on every call.
"""

import asyncio
import logging
import re
import threading
from collections.abc import Sequence

from sqlalchemy import Engine, MetaData, delete, insert, select, update
from sqlalchemy.exc import IntegrityError, ProgrammingError, SQLAlchemyError

from truckore.core.errors import BackendUnavailable, ConstraintViolation, UnsupportedStatement
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
    is_query,
    parse_statement,
)

logger = logging.getLogger(__name__)

_CONSTRAINT_RE = re.compile(r"constraint failed: (?P<table>\w+)\.(?P<column>\w+)", re.IGNORECASE)


class NativeStore(StorageBackend):
    """SQLite-backed store with full parameterized SQL support."""

    name = "native"

    def __init__(self, engine: Engine | None = None, metadata: MetaData = Base.metadata) -> None:
        self._engine = engine
        self._metadata = metadata
        # SQLite allows one writer; serialize calls instead of surfacing "database is locked".
        self._lock = threading.Lock()

    def attach(self, engine: Engine) -> None:
        self._engine = engine

    def detach(self) -> Engine | None:
        engine, self._engine = self._engine, None
        return engine

    def is_available(self) -> bool:
        return self._engine is not None

    def init_storage(self) -> None:
        engine = self._require_engine()
        try:
            self._metadata.create_all(bind=engine)
        except SQLAlchemyError as e:
            raise BackendUnavailable(f"Native store schema init failed: {e}") from e

    async def execute_query(self, statement: Statement, params: Sequence[Scalar] = ()) -> list[Row]:
        if not isinstance(statement, str) and not is_query(statement):
            raise UnsupportedStatement("execute_query requires a SELECT statement")
        return await asyncio.to_thread(self._run, statement, params)

    async def execute_non_query(self, statement: Statement, params: Sequence[Scalar] = ()) -> None:
        if not isinstance(statement, str) and is_query(statement):
            raise UnsupportedStatement("execute_non_query does not accept SELECT statements")
        await asyncio.to_thread(self._run, statement, params)

    def _require_engine(self) -> Engine:
        engine = self._engine
        if engine is None:
            raise BackendUnavailable("Native store bridge is not attached")
        return engine

    def _run(self, statement: Statement, params: Sequence[Scalar]) -> list[Row]:
        engine = self._require_engine()
        compiled = self._prepare(statement, params)

        try:
            with self._lock, engine.begin() as conn:
                if compiled is None:
                    result = conn.exec_driver_sql(statement, tuple(params))
                else:
                    result = conn.execute(compiled)
                if result.returns_rows:
                    return [dict(row._mapping) for row in result]
                return []
        except IntegrityError as e:
            message = str(e.orig)
            m = _CONSTRAINT_RE.search(message)
            raise ConstraintViolation(
                message,
                m.group("table") if m else None,
                m.group("column") if m else None,
            ) from e
        except ProgrammingError as e:
            # Binding mismatches are statement errors, not an unavailable backend.
            raise UnsupportedStatement(f"Invalid statement: {e.orig}") from e
        except (SQLAlchemyError, OSError) as e:
            raise BackendUnavailable(f"Native store error: {e}") from e

    def _prepare(self, statement: Statement, params: Sequence[Scalar]):
        """
        Compile commands, and raw SQL within the supported subset, through Core.

        Returns None for raw SQL outside the subset, which runs verbatim.
        """
        if not isinstance(statement, str):
            if params:
                raise UnsupportedStatement("Parameters are only accepted with raw SQL statements")
            return self._compile(statement)
        try:
            command = parse_statement(statement, params)
        except UnsupportedStatement:
            return None
        if command.table not in self._metadata.tables:
            return None
        return self._compile(command)

    def _compile(self, command: Command):
        table = self._metadata.tables.get(command.table)
        if table is None:
            raise UnsupportedStatement(f"Unknown table: {command.table}")

        columns = []
        where = getattr(command, "where", None)
        if where is not None:
            columns.append(where.column)
        if isinstance(command, (Insert, Update)):
            columns.extend(command.values)
        unknown = [c for c in columns if c not in table.c]
        if unknown:
            raise UnsupportedStatement(
                f"Unknown column(s) for table {table.name}: {', '.join(unknown)}"
            )

        if where is not None:
            where = coerce_where(table, where)
        values = coerce_values(table, command.values) if isinstance(command, (Insert, Update)) else {}

        if isinstance(command, Select):
            stmt = select(table)
            if where is not None:
                stmt = stmt.where(table.c[where.column] == where.value)
            return stmt
        if isinstance(command, Insert):
            return insert(table).values(**values)
        if isinstance(command, Update):
            return (
                update(table)
                .where(table.c[where.column] == where.value)
                .values(**values)
            )
        if isinstance(command, Delete):
            return delete(table).where(table.c[where.column] == where.value)
        raise UnsupportedStatement(f"Unsupported command: {command!r}")
