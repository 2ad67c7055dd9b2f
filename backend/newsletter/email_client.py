"""HTTP client for the transactional email API."""

import logging

import httpx

from backend.newsletter.config import Settings
from backend.newsletter.domain import SubscriberEmail
from backend.newsletter.errors import EmailDeliveryError

logger = logging.getLogger(__name__)

AUTHORIZATION_HEADER = "X-Postmark-Server-Token"


class EmailClient:
    """Sends one email per call to ``{base_url}/email``.

    Every call is bounded by ``timeout`` seconds. A timeout, a transport
    error or a non-2xx answer all raise ``EmailDeliveryError``.
    """

    def __init__(
        self,
        base_url: str,
        sender: SubscriberEmail,
        authorization_token: str,
        timeout: float,
        transport: httpx.BaseTransport | None = None,
    ) -> None:
        """Initialize email client.

        Args:
            base_url: Root URL of the email API
            sender: From address
            authorization_token: Server token for the email API
            timeout: Per-request timeout in seconds
            transport: Optional httpx transport (tests pass a MockTransport)
        """
        self.base_url = base_url.rstrip("/")
        self.sender = sender
        self._authorization_token = authorization_token
        self._http = httpx.Client(timeout=timeout, transport=transport)

    @classmethod
    def from_settings(cls, settings: Settings) -> "EmailClient":
        return cls(
            base_url=settings.email_base_url,
            sender=SubscriberEmail.parse(settings.email_sender),
            authorization_token=settings.email_authorization_token,
            timeout=settings.email_timeout_ms / 1000,
        )

    def send_email(
        self,
        recipient: SubscriberEmail,
        subject: str,
        html_content: str,
        text_content: str,
    ) -> None:
        """Deliver a single message.

        Args:
            recipient: Validated destination address
            subject: Subject line
            html_content: HTML body
            text_content: Plain-text body

        Raises:
            EmailDeliveryError: If the API could not be reached, timed out or
                answered with an error status
        """
        payload = {
            "From": self.sender.value,
            "To": recipient.value,
            "Subject": subject,
            "HtmlBody": html_content,
            "TextBody": text_content,
        }
        try:
            response = self._http.post(
                f"{self.base_url}/email",
                json=payload,
                headers={AUTHORIZATION_HEADER: self._authorization_token},
            )
            response.raise_for_status()
        except httpx.HTTPError as e:
            logger.warning(
                "email_send_failed",
                extra={"recipient": recipient.value, "error": str(e)},
            )
            raise EmailDeliveryError(f"Failed to send email to {recipient}: {e}") from e

    def close(self) -> None:
        self._http.close()
