from pydantic import BaseModel, Field

from otp_service.models.otp import ChannelType


class SendOtpRequest(BaseModel):
    user_id: str = Field(..., min_length=1)


class VerifyOtpRequest(BaseModel):
    user_id: str = Field(..., min_length=1)
    otp: str = Field(..., min_length=1, max_length=16)
    type: ChannelType


class OtpResponse(BaseModel):
    success: bool
    message: str
