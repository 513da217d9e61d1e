import logging

from fastapi import Request
from fastapi.responses import JSONResponse
from starlette.middleware.base import BaseHTTPMiddleware

from otp_service.models.common import ErrorResponse

logger = logging.getLogger("otp-service")


class ErrorHandlerMiddleware(BaseHTTPMiddleware):
    """Turn exceptions escaping a route (store outages and the like) into a JSON 500."""

    async def dispatch(self, request: Request, call_next):
        try:
            return await call_next(request)
        except Exception as exc:
            logger.exception("Unhandled error on %s %s: %s", request.method, request.url.path, exc)
            body = ErrorResponse(error="internal_error", detail=str(exc))
            return JSONResponse(status_code=500, content=body.model_dump())
