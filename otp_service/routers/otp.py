import logging

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse

from otp_service.dependencies import get_otp_engine
from otp_service.models.otp import OtpResult, ResultKind
from otp_service.models.requests import OtpResponse, SendOtpRequest, VerifyOtpRequest
from otp_service.services.otp_engine import OtpEngine

logger = logging.getLogger("otp-service")

router = APIRouter(prefix="/otp/v1", tags=["OTP"])


def _status_for(result: OtpResult) -> int:
    if result.kind is ResultKind.OK:
        return 200
    if result.kind.is_not_found:
        return 404
    return 500


def _respond(result: OtpResult) -> JSONResponse:
    body = OtpResponse(success=result.success, message=result.message)
    return JSONResponse(status_code=_status_for(result), content=body.model_dump())


@router.post("/sms", response_model=OtpResponse)
async def send_sms_otp(req: SendOtpRequest, engine: OtpEngine = Depends(get_otp_engine)):
    """Send an OTP to the user's phone number."""
    return _respond(engine.send_sms_otp(req.user_id))


@router.post("/mail", response_model=OtpResponse)
async def send_mail_otp(req: SendOtpRequest, engine: OtpEngine = Depends(get_otp_engine)):
    """Send an OTP to the user's email address."""
    return _respond(engine.send_mail_otp(req.user_id))


@router.post("/verify", response_model=OtpResponse)
async def verify_otp(req: VerifyOtpRequest, engine: OtpEngine = Depends(get_otp_engine)):
    """Verify a submitted OTP for the given channel type."""
    return _respond(engine.verify_otp(req.user_id, req.otp, req.type))
