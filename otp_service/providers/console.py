import logging

from otp_service.models.otp import ChannelType, DeliveryResult
from otp_service.providers.base import DeliveryGateway

logger = logging.getLogger("otp-service")


class ConsoleGateway(DeliveryGateway):
    """Dev/testing gateway that logs codes instead of sending them."""

    def __init__(self, channel: ChannelType):
        self._channel = channel

    @property
    def channel(self) -> ChannelType:
        return self._channel

    def send(self, recipient: str, code: str) -> DeliveryResult:
        logger.info(
            "═══════════════════════════════════════════\n"
            "  OTP CODE (%s)\n"
            "  Recipient: %s\n"
            "  Code:      %s\n"
            "═══════════════════════════════════════════",
            self._channel.value, recipient, code,
        )
        if self._channel is ChannelType.SMS:
            return DeliveryResult(success=True, message="SMS sent successfully")
        return DeliveryResult(success=True, message="Mail sent successfully")
