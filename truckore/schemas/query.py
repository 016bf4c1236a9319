"""Schemas for the raw executeQuery / executeNonQuery command boundary."""

from typing import Any

from pydantic import BaseModel, Field

from truckore.storage.statements import Scalar


class QueryRequest(BaseModel):
    """A parameterized statement with '?' placeholders."""

    statement: str = Field(..., min_length=1, max_length=10000)
    params: list[Scalar] = Field(default_factory=list)


class QueryResponse(BaseModel):
    rows: list[dict[str, Any]]
