"""Health check endpoint reporting the active storage backend."""

from typing import Annotated

from fastapi import APIRouter, Depends

from truckore.api.deps import get_container
from truckore.container import Container
from truckore.schemas.health import HealthResponse

router = APIRouter()


@router.get("/", response_model=HealthResponse)
async def get_health(
    container: Annotated[Container, Depends(get_container)],
) -> HealthResponse:
    """
    Return service health, storage mode and setup status.
    storage_mode 'fallback' means the app is running degraded on the JSON store.
    """
    setup_completed = await container.setup.check_setup_status()
    return HealthResponse(
        status="ok",
        environment=container.settings.APP_ENV,
        storage_mode=container.store.mode,
        native_available=container.store.is_native_available(),
        setup_completed=setup_completed,
    )
