"""Parameter coercion to the declared column type, shared by both backends."""

from typing import Any

from sqlalchemy import Column, Table

from truckore.core.errors import UnsupportedStatement
from truckore.storage.statements import Scalar, Where

_TRUE_STRINGS = frozenset({"1", "true"})
_FALSE_STRINGS = frozenset({"0", "false"})


def _to_bool(value: Scalar) -> bool:
    if isinstance(value, str):
        lowered = value.strip().lower()
        if lowered in _TRUE_STRINGS:
            return True
        if lowered in _FALSE_STRINGS:
            return False
        raise ValueError(value)
    if value in (0, 1):
        return bool(value)
    raise ValueError(value)


def _to_int(value: Scalar) -> int:
    if isinstance(value, bool):
        raise ValueError(value)
    if isinstance(value, float) and not value.is_integer():
        raise ValueError(value)
    return int(value)


def coerce_value(column: Column, value: Scalar) -> Any:
    """
    Convert value to column.type.python_type.

    None passes through. A value that cannot represent the column type
    raises UnsupportedStatement, on either backend.
    """
    if value is None:
        return None
    try:
        python_type = column.type.python_type
    except NotImplementedError:
        return value
    try:
        if python_type is bool:
            return value if isinstance(value, bool) else _to_bool(value)
        if python_type is int:
            return value if type(value) is int else _to_int(value)
        if python_type is str:
            return value if isinstance(value, str) else str(value)
        return value if isinstance(value, python_type) else python_type(value)
    except (TypeError, ValueError) as e:
        raise UnsupportedStatement(
            f"Value {value!r} does not match type of column {column.table.name}.{column.name}"
        ) from e


def coerce_values(table: Table, values: dict[str, Scalar]) -> dict[str, Any]:
    return {name: coerce_value(table.c[name], value) for name, value in values.items()}


def coerce_where(table: Table, where: Where) -> Where:
    return Where(where.column, coerce_value(table.c[where.column], where.value))
