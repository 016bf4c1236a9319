"""
Storage commands: the statement subset both backends must agree on.

Repositories build these tagged commands directly. Raw SQL arriving through
the command boundary is parsed into the same types by parse_statement; any
shape outside the four supported forms is rejected with UnsupportedStatement
instead of being guessed at.
"""

import re
from collections.abc import Sequence
from dataclasses import dataclass
from typing import Any, Union

from truckore.core.errors import UnsupportedStatement

Scalar = Union[str, int, float, bool, None]
Row = dict[str, Any]


@dataclass(frozen=True)
class Where:
    """Single-column equality filter: column = value."""

    column: str
    value: Scalar

    def matches(self, row: Row) -> bool:
        return self.column in row and row[self.column] == self.value


@dataclass(frozen=True)
class Select:
    table: str
    where: Where | None = None


@dataclass(frozen=True)
class Insert:
    table: str
    values: dict[str, Scalar]

    def __post_init__(self) -> None:
        if not self.values:
            raise UnsupportedStatement(f"INSERT INTO {self.table} has no columns")


@dataclass(frozen=True)
class Update:
    table: str
    values: dict[str, Scalar]
    where: Where

    def __post_init__(self) -> None:
        if not self.values:
            raise UnsupportedStatement(f"UPDATE {self.table} has no SET columns")


@dataclass(frozen=True)
class Delete:
    table: str
    where: Where


Command = Union[Select, Insert, Update, Delete]
Statement = Union[str, Command]

_IDENT = r"[A-Za-z_][A-Za-z0-9_]*"

_SELECT_RE = re.compile(
    rf"^SELECT\s+\*\s+FROM\s+(?P<table>{_IDENT})"
    rf"(?:\s+WHERE\s+(?P<col>{_IDENT})\s*=\s*\?)?$",
    re.IGNORECASE,
)
_INSERT_RE = re.compile(
    rf"^INSERT\s+INTO\s+(?P<table>{_IDENT})\s*\((?P<cols>[^)]*)\)"
    r"\s*VALUES\s*\((?P<vals>[^)]*)\)$",
    re.IGNORECASE,
)
_UPDATE_RE = re.compile(
    rf"^UPDATE\s+(?P<table>{_IDENT})\s+SET\s+(?P<sets>.+?)"
    rf"\s+WHERE\s+(?P<col>{_IDENT})\s*=\s*\?$",
    re.IGNORECASE | re.DOTALL,
)
_DELETE_RE = re.compile(
    rf"^DELETE\s+FROM\s+(?P<table>{_IDENT})\s+WHERE\s+(?P<col>{_IDENT})\s*=\s*\?$",
    re.IGNORECASE,
)
_ASSIGNMENT_RE = re.compile(rf"^(?P<col>{_IDENT})\s*=\s*\?$")
_IDENT_RE = re.compile(rf"^{_IDENT}$")


def _normalize(sql: str) -> str:
    sql = " ".join(sql.split())
    return sql[:-1].rstrip() if sql.endswith(";") else sql


def _check_param_count(sql: str, params: Sequence[Scalar], expected: int) -> None:
    if len(params) != expected:
        raise UnsupportedStatement(
            f"Statement expects {expected} parameter(s), got {len(params)}: {sql}"
        )


def _split_columns(raw: str, sql: str) -> list[str]:
    columns = [c.strip() for c in raw.split(",")]
    if not columns or any(not _IDENT_RE.match(c) for c in columns):
        raise UnsupportedStatement(f"Unsupported column list: {sql}")
    if len(set(columns)) != len(columns):
        raise UnsupportedStatement(f"Duplicate column in statement: {sql}")
    return columns


def parse_statement(sql: str, params: Sequence[Scalar] = ()) -> Command:
    """
    Parse one of the four supported SQL shapes into a command.

    Supported: SELECT * FROM t [WHERE col = ?], INSERT INTO t (cols) VALUES (?, ...),
    UPDATE t SET col = ?, ... WHERE col = ?, DELETE FROM t WHERE col = ?.
    Only '?' placeholders are accepted and the parameter count must match.
    """
    params = list(params)
    normalized = _normalize(sql)

    m = _SELECT_RE.match(normalized)
    if m:
        if m.group("col"):
            _check_param_count(sql, params, 1)
            return Select(m.group("table"), Where(m.group("col"), params[0]))
        _check_param_count(sql, params, 0)
        return Select(m.group("table"))

    m = _INSERT_RE.match(normalized)
    if m:
        columns = _split_columns(m.group("cols"), sql)
        placeholders = [v.strip() for v in m.group("vals").split(",")]
        if any(p != "?" for p in placeholders) or len(placeholders) != len(columns):
            raise UnsupportedStatement(f"INSERT values must be one '?' per column: {sql}")
        _check_param_count(sql, params, len(columns))
        return Insert(m.group("table"), dict(zip(columns, params)))

    m = _UPDATE_RE.match(normalized)
    if m:
        columns = []
        for assignment in m.group("sets").split(","):
            am = _ASSIGNMENT_RE.match(assignment.strip())
            if not am:
                raise UnsupportedStatement(f"SET clause must be 'col = ?' only: {sql}")
            columns.append(am.group("col"))
        if len(set(columns)) != len(columns):
            raise UnsupportedStatement(f"Duplicate column in statement: {sql}")
        _check_param_count(sql, params, len(columns) + 1)
        return Update(
            m.group("table"),
            dict(zip(columns, params[:-1])),
            Where(m.group("col"), params[-1]),
        )

    m = _DELETE_RE.match(normalized)
    if m:
        _check_param_count(sql, params, 1)
        return Delete(m.group("table"), Where(m.group("col"), params[0]))

    raise UnsupportedStatement(f"Unsupported statement: {sql}")


def is_query(command: Command) -> bool:
    """True for row-returning commands."""
    return isinstance(command, Select)


def describe(statement: Statement) -> str:
    """Short label (operation and table) for log lines."""
    if isinstance(statement, str):
        words = statement.split()
        return " ".join(words[:4]) if words else "<empty>"
    return f"{type(statement).__name__.upper()} {statement.table}"
