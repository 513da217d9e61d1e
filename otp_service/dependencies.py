import logging

from otp_service.config import settings
from otp_service.models.otp import ChannelType, User
from otp_service.providers.base import DeliveryGateway
from otp_service.providers.console import ConsoleGateway
from otp_service.providers.mail import MailGateway
from otp_service.providers.sms import SmsGateway
from otp_service.services.otp_engine import OtpEngine
from otp_service.storage.base import OtpStore, UserDirectory
from otp_service.storage.memory import InMemoryOtpStore, InMemoryUserDirectory
from otp_service.storage.supabase import SupabaseOtpStore, SupabaseUserDirectory

logger = logging.getLogger("otp-service")


def build_gateways() -> dict[ChannelType, DeliveryGateway]:
    if settings.otp_provider == "console":
        return {channel: ConsoleGateway(channel) for channel in ChannelType}
    return {
        ChannelType.SMS: SmsGateway(),
        ChannelType.MAIL: MailGateway(),
    }


def build_storage() -> tuple[UserDirectory, OtpStore]:
    if settings.storage_backend == "supabase":
        return SupabaseUserDirectory(), SupabaseOtpStore()
    if settings.storage_backend != "memory":
        raise ValueError(f"Unknown storage backend: {settings.storage_backend}")
    users = [User.from_row(row) for row in settings.seed_users]
    return InMemoryUserDirectory(users), InMemoryOtpStore()


_engine: OtpEngine | None = None


def get_otp_engine() -> OtpEngine:
    """FastAPI dependency returning the process-wide engine."""
    global _engine
    if _engine is None:
        directory, store = build_storage()
        _engine = OtpEngine(directory, store, build_gateways())
        logger.info(
            "OTP engine ready (storage=%s, provider=%s)",
            settings.storage_backend, settings.otp_provider,
        )
    return _engine
