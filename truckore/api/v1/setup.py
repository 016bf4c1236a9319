"""First-run setup endpoints. Open until setup completes, then closed."""

from typing import Annotated

from fastapi import APIRouter, Depends, status

from truckore.api.deps import get_container, http_error
from truckore.container import Container
from truckore.core.errors import TruckoreError
from truckore.schemas.auth import SetupRequest, SetupStatusResponse
from truckore.schemas.user import User

router = APIRouter()


@router.get("/status", response_model=SetupStatusResponse)
async def get_setup_status(
    container: Annotated[Container, Depends(get_container)],
) -> SetupStatusResponse:
    return SetupStatusResponse(setup_completed=await container.setup.check_setup_status())


@router.post("", response_model=User, status_code=status.HTTP_201_CREATED)
async def complete_setup(
    body: SetupRequest,
    container: Annotated[Container, Depends(get_container)],
) -> User:
    """Create the initial Super Admin account and mark setup completed."""
    try:
        return await container.setup.complete_first_run(body.username, body.password, body.email)
    except TruckoreError as e:
        raise http_error(e) from e
