import logging

import httpx

from otp_service.config import settings
from otp_service.models.otp import ChannelType, DeliveryResult
from otp_service.providers.base import DeliveryGateway

logger = logging.getLogger("otp-service")

SMS_SENT = "SMS sent successfully"
SMS_FAILED = "Failed to send SMS"


class SmsGateway(DeliveryGateway):
    """SMS gateway speaking a JSON-over-HTTP send API."""

    def __init__(
        self,
        api_url: str | None = None,
        api_key: str | None = None,
        *,
        sender: str | None = None,
        client: httpx.Client | None = None,
    ):
        self._api_url = api_url if api_url is not None else settings.sms_api_url
        self._api_key = api_key if api_key is not None else settings.sms_api_key
        self._sender = sender or settings.sms_sender
        self._client = client or httpx.Client(timeout=settings.gateway_timeout_seconds)

    @property
    def channel(self) -> ChannelType:
        return ChannelType.SMS

    def send(self, recipient: str, code: str) -> DeliveryResult:
        if not self._api_url:
            logger.error("SMS gateway not configured (SMS_API_URL is empty)")
            return DeliveryResult(success=False, message=SMS_FAILED)

        payload = {
            "to": recipient,
            "from": self._sender,
            "message": f"Your verification code is {code}",
        }
        try:
            resp = self._client.post(
                self._api_url,
                json=payload,
                headers={"Authorization": f"Bearer {self._api_key}"},
            )
        except httpx.HTTPError as e:
            logger.error("SMS send to %s failed: %s", recipient, e)
            return DeliveryResult(success=False, message=SMS_FAILED)

        if resp.status_code >= 300:
            logger.error("SMS send to %s failed (%s): %s", recipient, resp.status_code, resp.text)
            return DeliveryResult(success=False, message=SMS_FAILED)

        return DeliveryResult(success=True, message=SMS_SENT)
