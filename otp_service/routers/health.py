from fastapi import APIRouter, Depends

from otp_service.config import settings
from otp_service.dependencies import get_otp_engine
from otp_service.models.common import HealthResponse, ReadyResponse
from otp_service.services.otp_engine import OtpEngine

router = APIRouter(tags=["Health"])


@router.get("/health", response_model=HealthResponse)
async def health():
    return HealthResponse(status="ok")


@router.get("/ready", response_model=ReadyResponse)
async def ready(engine: OtpEngine = Depends(get_otp_engine)):
    try:
        engine.store.ping()
        return ReadyResponse(status="ready", storage=settings.storage_backend)
    except Exception as e:
        return ReadyResponse(status="degraded", storage=settings.storage_backend, detail=str(e))
