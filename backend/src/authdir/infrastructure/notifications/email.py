"""HTTP email provider client used to deliver recovery outcomes."""
import logging
from dataclasses import dataclass

import httpx

from authdir.config import get_settings

logger = logging.getLogger(__name__)


class NotificationError(Exception):
    """The email provider rejected the message or could not be reached."""
    pass


@dataclass(frozen=True)
class NotificationReceipt:
    provider_id: str
    body: str


class EmailDispatcher:
    def __init__(
        self,
        endpoint: str,
        sender: str,
        api_key: str | None = None,
        timeout: float = 10.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._endpoint = endpoint
        self._sender = sender
        self._api_key = api_key
        self._timeout = timeout
        self._transport = transport

    async def send(self, to: str, subject: str, html_body: str) -> NotificationReceipt:
        headers = {"Authorization": f"Bearer {self._api_key}"} if self._api_key else {}
        payload = {"from": self._sender, "to": to, "subject": subject, "html": html_body}
        try:
            async with httpx.AsyncClient(timeout=self._timeout, transport=self._transport) as client:
                response = await client.post(self._endpoint, json=payload, headers=headers)
                response.raise_for_status()
                data = response.json()
        except httpx.HTTPError as exc:
            raise NotificationError(f"Email provider request failed: {exc}") from exc
        except ValueError as exc:
            raise NotificationError("Email provider returned a non-JSON body") from exc

        provider_id = data.get("id") or data.get("messageId")
        if not provider_id:
            raise NotificationError("Email provider response carries no message id")
        logger.info("Email %s sent to %s", provider_id, to)
        return NotificationReceipt(provider_id=str(provider_id), body=html_body)


def get_email_dispatcher() -> EmailDispatcher:
    settings = get_settings()
    return EmailDispatcher(
        endpoint=settings.email_provider_url,
        sender=settings.email_sender,
        api_key=settings.email_provider_api_key,
        timeout=settings.notification_timeout_seconds,
    )
