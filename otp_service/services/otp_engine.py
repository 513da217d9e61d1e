import hmac
import logging
import secrets
from collections.abc import Callable, Mapping
from datetime import datetime, timedelta, timezone

from otp_service.config import Settings, settings as default_settings
from otp_service.errors import DeliveryFailed, InvalidOtp, OtpError, OtpExpired, RecordNotFound, UserNotFound
from otp_service.models.otp import ChannelType, OtpRecord, OtpResult, ResultKind
from otp_service.providers.base import DeliveryGateway
from otp_service.storage.base import OtpStore, UserDirectory

logger = logging.getLogger("otp-service")

OTP_VERIFIED = "OTP verified successfully!"

# User field flipped on successful verification, per channel.
_VERIFIED_FLAG = {
    ChannelType.SMS: "phone_verified",
    ChannelType.MAIL: "email_verified",
}

_CONTACT_FIELD = {
    ChannelType.SMS: "phone number",
    ChannelType.MAIL: "email address",
}


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def generate_code(length: int) -> str:
    """Generate a random numeric OTP code."""
    return "".join(str(secrets.randbelow(10)) for _ in range(length))


class OtpEngine:
    """
    Issues and verifies one-time passcodes.

    Records live in the OTP store keyed by (user_id, channel type); a new
    issuance replaces the previous record for its key. Expiry is evaluated
    at verification time only.
    """

    def __init__(
        self,
        directory: UserDirectory,
        store: OtpStore,
        gateways: Mapping[ChannelType, DeliveryGateway],
        *,
        config: Settings | None = None,
        clock: Callable[[], datetime] = utcnow,
    ):
        missing = [c.value for c in ChannelType if c not in gateways]
        if missing:
            raise ValueError(f"No delivery gateway for channel(s): {', '.join(missing)}")
        for channel, gateway in gateways.items():
            if gateway.channel is not channel:
                raise ValueError(f"Gateway for {channel.value} delivers over {gateway.channel.value}")
        self.directory = directory
        self.store = store
        self.gateways = dict(gateways)
        self.config = config or default_settings
        self.clock = clock

    @property
    def validity_window(self) -> timedelta:
        return timedelta(minutes=self.config.otp_expire_minutes)

    # -- issuance --

    def issue_otp(self, user_id: str, channel_type: ChannelType) -> OtpResult:
        """Generate, store and deliver a code. Failures come back as an unsuccessful result."""
        try:
            message = self._issue(user_id, ChannelType(channel_type))
        except OtpError as e:
            return self._failure(e, "issue", user_id, channel_type)
        return OtpResult(success=True, message=message)

    def send_sms_otp(self, user_id: str) -> OtpResult:
        return self.issue_otp(user_id, ChannelType.SMS)

    def send_mail_otp(self, user_id: str) -> OtpResult:
        return self.issue_otp(user_id, ChannelType.MAIL)

    def _issue(self, user_id: str, channel_type: ChannelType) -> str:
        user = self.directory.find_one(user_id)
        if user is None:
            raise UserNotFound()

        recipient = user.contact_for(channel_type)
        if not recipient:
            raise DeliveryFailed(f"User has no {_CONTACT_FIELD[channel_type]} on file")

        previous = self.store.find_one(user_id, channel_type) if self.config.otp_rollback_on_delivery_failure else None

        record = OtpRecord(
            user_id=user_id,
            type=channel_type,
            otp=generate_code(self.config.otp_length),
            expiry_time=self.clock() + self.validity_window,
        )
        # Stored before dispatch so the code is verifiable even if delivery is slow.
        if not self.store.upsert(record):
            raise DeliveryFailed("Failed to store OTP")

        result = self.gateways[channel_type].send(recipient, record.otp)
        if not result.success:
            if self.config.otp_rollback_on_delivery_failure:
                self._rollback(record, previous)
            raise DeliveryFailed(result.message)

        logger.info("Issued %s OTP for user %s", channel_type.value, user_id)
        return result.message

    def _rollback(self, record: OtpRecord, previous: OtpRecord | None) -> None:
        if previous is not None:
            self.store.upsert(previous)
        else:
            self.store.delete(record.user_id, record.type)
        logger.info("Rolled back %s OTP for user %s after failed delivery", record.type.value, record.user_id)

    # -- verification --

    def verify_otp(self, user_id: str, code: str, channel_type: ChannelType) -> OtpResult:
        """Check `code` against the stored record. Expiry is checked before the code."""
        try:
            self._verify(user_id, code, ChannelType(channel_type))
        except OtpError as e:
            return self._failure(e, "verify", user_id, channel_type)
        return OtpResult(success=True, message=OTP_VERIFIED)

    def _verify(self, user_id: str, code: str, channel_type: ChannelType) -> None:
        record = self.store.find_one(user_id, channel_type)
        if record is None:
            if self.directory.find_one(user_id) is None:
                raise UserNotFound()
            raise RecordNotFound()

        now = self.clock()
        if record.is_expired(now):
            raise OtpExpired()
        if record.is_verified and self.config.otp_single_use:
            raise OtpExpired()

        if not hmac.compare_digest(record.otp.encode(), (code or "").encode()):
            raise InvalidOtp()

        # Already-verified records only get here when reuse is allowed.
        if not record.is_verified and not self.store.mark_verified(user_id, channel_type, record.otp, now):
            # Superseded by a new issuance, or consumed by a concurrent verify.
            current = self.store.find_one(user_id, channel_type)
            if self.config.otp_single_use or current is None or current.otp != record.otp:
                raise OtpExpired()

        flag = _VERIFIED_FLAG[channel_type]
        if not self.directory.update_one(user_id, {flag: True}):
            logger.warning("OTP verified but could not set %s for user %s", flag, user_id)

    def _failure(self, error: OtpError, op: str, user_id: str, channel_type) -> OtpResult:
        level = logging.INFO if error.kind is ResultKind.INVALID else logging.WARNING
        channel = getattr(channel_type, "value", channel_type)
        logger.log(level, "OTP %s failed for user %s (%s): %s", op, user_id, channel, error.message)
        return OtpResult(success=False, message=error.message, kind=error.kind)
