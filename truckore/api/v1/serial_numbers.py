"""Serial number configuration, issuing and preview."""

from typing import Annotated

from fastapi import APIRouter, Depends

from truckore.api.deps import get_container
from truckore.api.v1.auth import get_current_user, require_admin
from truckore.container import Container
from truckore.schemas.auth import CurrentUser
from truckore.schemas.serial_number import (
    SerialNumberConfig,
    SerialNumberConfigUpdate,
    SerialNumberPreviewRequest,
    SerialNumberResponse,
)

router = APIRouter()


@router.get("/config", response_model=SerialNumberConfig, response_model_by_alias=True)
async def get_serial_number_config(
    _user: Annotated[CurrentUser, Depends(get_current_user)],
    container: Annotated[Container, Depends(get_container)],
) -> SerialNumberConfig:
    return await container.serial_numbers.get_config()


@router.put("/config", response_model=SerialNumberConfig, response_model_by_alias=True)
async def update_serial_number_config(
    body: SerialNumberConfigUpdate,
    _admin: Annotated[CurrentUser, Depends(require_admin)],
    container: Annotated[Container, Depends(get_container)],
) -> SerialNumberConfig:
    config = SerialNumberConfig.model_validate(body.model_dump(exclude={"reset_counter_now"}))
    return await container.serial_numbers.update_config(
        config, reset_counter_now=body.reset_counter_now
    )


@router.post("/next", response_model=SerialNumberResponse)
async def next_serial_number(
    _user: Annotated[CurrentUser, Depends(get_current_user)],
    container: Annotated[Container, Depends(get_container)],
) -> SerialNumberResponse:
    """Consume and return the next serial number."""
    return SerialNumberResponse(serial_number=await container.serial_numbers.get_next())


@router.post("/preview", response_model=SerialNumberResponse)
async def preview_serial_number(
    body: SerialNumberPreviewRequest,
    _user: Annotated[CurrentUser, Depends(get_current_user)],
    container: Annotated[Container, Depends(get_container)],
) -> SerialNumberResponse:
    """Format a candidate config without consuming the counter."""
    partial = body.model_dump(exclude_none=True)
    return SerialNumberResponse(serial_number=container.serial_numbers.preview(partial))


@router.post("/reset", response_model=SerialNumberConfig, response_model_by_alias=True)
async def reset_serial_number_counter(
    _admin: Annotated[CurrentUser, Depends(require_admin)],
    container: Annotated[Container, Depends(get_container)],
) -> SerialNumberConfig:
    return await container.serial_numbers.reset_counter()
