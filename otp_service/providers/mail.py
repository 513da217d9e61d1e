import logging

import httpx

from otp_service.config import settings
from otp_service.models.otp import ChannelType, DeliveryResult
from otp_service.providers.base import DeliveryGateway

logger = logging.getLogger("otp-service")

MAIL_SENT = "Mail sent successfully"
MAIL_FAILED = "Failed to send mail"


class MailGateway(DeliveryGateway):
    """Email gateway using the Brevo transactional email API."""

    def __init__(
        self,
        api_url: str | None = None,
        api_key: str | None = None,
        *,
        from_email: str | None = None,
        client: httpx.Client | None = None,
    ):
        self._api_url = api_url or settings.mail_api_url
        self._api_key = api_key if api_key is not None else settings.mail_api_key
        self._from_email = from_email if from_email is not None else settings.mail_from
        self._client = client or httpx.Client(timeout=settings.gateway_timeout_seconds)

    @property
    def channel(self) -> ChannelType:
        return ChannelType.MAIL

    def _payload(self, recipient: str, code: str) -> dict:
        html = (
            '<div style="font-family:Arial,sans-serif">'
            "<p>Your verification code is:</p>"
            f'<div style="font-size:28px;font-weight:700;letter-spacing:2px">{code}</div>'
            f"<p>This code expires in {settings.otp_expire_minutes} minutes.</p>"
            "</div>"
        )
        return {
            "sender": {"email": self._from_email},
            "to": [{"email": recipient}],
            "subject": settings.mail_subject,
            "htmlContent": html,
            "textContent": f"Your verification code is {code}",
        }

    def send(self, recipient: str, code: str) -> DeliveryResult:
        if not self._api_key or not self._from_email:
            logger.error("Mail gateway not configured (MAIL_API_KEY / MAIL_FROM missing)")
            return DeliveryResult(success=False, message=MAIL_FAILED)

        try:
            resp = self._client.post(
                self._api_url,
                json=self._payload(recipient, code),
                headers={"accept": "application/json", "api-key": self._api_key},
            )
        except httpx.HTTPError as e:
            logger.error("Mail send to %s failed: %s", recipient, e)
            return DeliveryResult(success=False, message=MAIL_FAILED)

        if resp.status_code >= 300:
            logger.error("Mail send to %s failed (%s): %s", recipient, resp.status_code, resp.text)
            return DeliveryResult(success=False, message=MAIL_FAILED)

        return DeliveryResult(success=True, message=MAIL_SENT)
