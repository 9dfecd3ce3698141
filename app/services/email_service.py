"""
app/services/email_service.py

Purpose: Transactional email via the Resend API

- Sends HTML emails (OTP codes)
- Reports whether a credential is configured
- Maps transport and API failures to EmailDeliveryFailed
"""

import httpx
from typing import Any, Dict, List, Optional

from app.core.config import settings
from app.core.exceptions import EmailDeliveryFailed, MissingCredential
from app.core.logging import get_logger

logger = get_logger(__name__)


class EmailService:
    """Service for sending email through Resend"""

    def __init__(
        self,
        api_key: Optional[str] = None,
        sender: Optional[str] = None,
        api_url: Optional[str] = None,
        timeout: Optional[float] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.api_key = api_key if api_key is not None else settings.RESEND_API_KEY
        self.sender = sender or settings.MAIL_FROM
        self.base_url = (api_url or settings.RESEND_API_URL).rstrip("/")
        self.timeout = timeout if timeout is not None else settings.HTTP_TIMEOUT_SECONDS
        self._transport = transport

    def is_configured(self) -> bool:
        """Check if Resend is configured"""
        return bool(self.api_key)

    async def send_email(self, to: List[str], subject: str, html: str) -> Dict[str, Any]:
        """
        Sends an HTML email.

        Args:
            to: Recipient addresses
            subject: Subject line
            html: HTML body

        Returns:
            {"id": "<resend message id>"}

        Raises:
            MissingCredential: No API key configured
            EmailDeliveryFailed: Resend rejected the message or was unreachable
        """
        if not self.is_configured():
            raise MissingCredential()

        payload = {
            "from": self.sender,
            "to": to,
            "subject": subject,
            "html": html,
        }

        logger.info(f"📤 Sending email to {', '.join(to)}")

        try:
            async with httpx.AsyncClient(timeout=self.timeout, transport=self._transport) as client:
                response = await client.post(
                    f"{self.base_url}/emails",
                    json=payload,
                    headers={"Authorization": f"Bearer {self.api_key}"},
                )
        except httpx.TimeoutException as e:
            logger.error("Resend API timeout")
            raise EmailDeliveryFailed("Email delivery failed: timeout") from e
        except httpx.RequestError as e:
            logger.error(f"Network error sending email: {e}")
            raise EmailDeliveryFailed(f"Email delivery failed: {e}") from e

        if not response.is_success:
            error_text = response.text
            logger.error(f"❌ Resend API error: {response.status_code} - {error_text}")
            raise EmailDeliveryFailed(
                f"Email delivery failed: {response.status_code} {error_text}",
                status=response.status_code,
                body=error_text,
            )

        try:
            result = response.json()
        except ValueError:
            result = {}
        logger.info(f"✅ Email sent: id={result.get('id')}")
        return {"id": result.get("id")}
