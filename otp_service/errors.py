from otp_service.models.otp import ResultKind


class OtpError(Exception):
    """Base for per-request OTP failures. Each carries a boundary message and kind."""

    kind: ResultKind = ResultKind.DELIVERY_FAILED
    default_message = "OTP request failed"

    def __init__(self, message: str | None = None):
        self.message = message or self.default_message
        super().__init__(self.message)


class UserNotFound(OtpError):
    kind = ResultKind.USER_NOT_FOUND
    default_message = "User not found!"


class RecordNotFound(OtpError):
    # Reported with the same wording as UserNotFound, kind stays distinct.
    kind = ResultKind.RECORD_NOT_FOUND
    default_message = "User not found!"


class DeliveryFailed(OtpError):
    kind = ResultKind.DELIVERY_FAILED
    default_message = "Failed to deliver OTP"


class OtpExpired(OtpError):
    kind = ResultKind.EXPIRED
    default_message = "OTP has expired or is invalid"


class InvalidOtp(OtpError):
    kind = ResultKind.INVALID
    default_message = "Invalid OTP!"
