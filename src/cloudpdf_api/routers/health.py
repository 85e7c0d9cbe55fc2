from fastapi import APIRouter, Depends

from cloudpdf_api.config.settings import Settings
from cloudpdf_api.dependencies import get_app_settings
from cloudpdf_api.schemas import HealthResponse

router = APIRouter()


@router.get("/health", response_model=HealthResponse)
async def health_check(settings: Settings = Depends(get_app_settings)) -> HealthResponse:
    """
    Health check endpoint for monitoring API status.

    Reports the storage mode and whether Telegram features are enabled.
    """
    return HealthResponse(storage_mode=settings.storage_mode, telegram=settings.telegram_enabled)
