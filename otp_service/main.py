import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI

from otp_service.config import settings
from otp_service.middleware.error_handler import ErrorHandlerMiddleware
from otp_service.routers import health, otp

logging.basicConfig(
    level=getattr(logging, settings.log_level.upper(), logging.INFO),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger("otp-service")


@asynccontextmanager
async def lifespan(app: FastAPI):
    logger.info("OTP service starting on %s:%s", settings.host, settings.port)
    yield
    logger.info("OTP service shutting down")


app = FastAPI(
    title="OTP Service",
    version="0.1.0",
    description="One-time passcode issuance and verification over SMS and email",
    lifespan=lifespan,
)

app.add_middleware(ErrorHandlerMiddleware)

app.include_router(health.router)
app.include_router(otp.router)
