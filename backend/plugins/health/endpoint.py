from datetime import datetime, timezone
from typing import Annotated

from fastapi import APIRouter, Depends

from backend.plugins.config.service import ConfigService, get_config_service

from .models import HealthResponse

router = APIRouter()


@router.get(
    "",
    response_model=HealthResponse,
    summary="Health check",
    description="Always answers 200; `storeAvailable` tells whether Redis responds.",
)
async def health_check(
    service: Annotated[ConfigService, Depends(get_config_service)],
):
    return HealthResponse(
        status="ok",
        timestamp=datetime.now(timezone.utc),
        store_available=await service.store_available(),
    )
