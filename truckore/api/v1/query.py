"""Raw executeQuery / executeNonQuery command boundary (super admin only)."""

from typing import Annotated

from fastapi import APIRouter, Depends, status

from truckore.api.deps import get_container, http_error
from truckore.api.v1.auth import require_super_admin
from truckore.container import Container
from truckore.core.errors import TruckoreError
from truckore.schemas.auth import CurrentUser
from truckore.schemas.query import QueryRequest, QueryResponse

router = APIRouter()


@router.post("/query", response_model=QueryResponse)
async def execute_query(
    body: QueryRequest,
    _super_admin: Annotated[CurrentUser, Depends(require_super_admin)],
    container: Annotated[Container, Depends(get_container)],
) -> QueryResponse:
    """Run a row-returning statement with '?' parameters."""
    try:
        rows = await container.store.execute_query(body.statement, body.params)
    except TruckoreError as e:
        raise http_error(e) from e
    return QueryResponse(rows=rows)


@router.post("/execute", status_code=status.HTTP_204_NO_CONTENT)
async def execute_non_query(
    body: QueryRequest,
    _super_admin: Annotated[CurrentUser, Depends(require_super_admin)],
    container: Annotated[Container, Depends(get_container)],
) -> None:
    """Run an INSERT/UPDATE/DELETE with '?' parameters."""
    try:
        await container.store.execute_non_query(body.statement, body.params)
    except TruckoreError as e:
        raise http_error(e) from e
