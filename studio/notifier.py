"""Outbound notifications for new leads.

The lead pipeline only depends on the ``Notifier`` protocol. Two backends
ship here: ``LogNotifier`` for development and ``EmailApiNotifier``, which
posts the message to a transactional mail HTTP API.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Protocol

import httpx
from jinja2 import Environment
from tenacity import (
    AsyncRetrying,
    RetryError,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
)

from .config import NotifierBackend, NotifierSettings
from .errors import NotificationError

logger = logging.getLogger(__name__)

_templates = Environment(autoescape=True)

CONTACT_SUBJECT = "New Contact Form Submission"

CONTACT_TEMPLATE = _templates.from_string(
    """
<h2>New Contact Form Submission</h2>
<p><strong>Name:</strong> {{ name }}</p>
<p><strong>Email:</strong> {{ email }}</p>
<p><strong>Company:</strong> {{ company or 'N/A' }}</p>
<p><strong>Service:</strong> {{ service or 'N/A' }}</p>
<p><strong>Message:</strong> {{ message }}</p>
""".strip()
)


@dataclass
class Message:
    """A rendered notification."""
    subject: str
    html: str


def render_contact_message(
    *,
    name: str,
    email: str,
    company: str | None,
    service: str | None,
    message: str,
) -> Message:
    """Fixed-format summary of a contact submission."""
    html = CONTACT_TEMPLATE.render(
        name=name,
        email=email,
        company=company,
        service=service,
        message=message,
    )
    return Message(subject=CONTACT_SUBJECT, html=html)


class Notifier(Protocol):
    async def send(self, message: Message) -> None:
        """Deliver ``message``; raise ``NotificationError`` on failure."""
        ...

    async def aclose(self) -> None:
        ...


class LogNotifier:
    """Writes notifications to the log instead of sending them."""

    async def send(self, message: Message) -> None:
        logger.info(f"Notification: {message.subject}\n{message.html}")

    async def aclose(self) -> None:
        return None


class _TransientDeliveryError(Exception):
    pass


class EmailApiNotifier:
    """Sends notifications through an HTTP mail API with retries."""

    def __init__(self, config: NotifierSettings, client: httpx.AsyncClient | None = None):
        if not config.api_url:
            raise ValueError("NOTIFY_API_URL is required for the email_api notifier")
        self.config = config
        headers = {"Authorization": f"Bearer {config.api_key}"} if config.api_key else {}
        self._client = client or httpx.AsyncClient(timeout=config.timeout, headers=headers)

    def _payload(self, message: Message) -> dict:
        return {
            "from": self.config.sender,
            "to": [self.config.recipient],
            "subject": message.subject,
            "html": message.html,
        }

    async def _post(self, message: Message) -> None:
        try:
            response = await self._client.post(self.config.api_url, json=self._payload(message))
        except httpx.TransportError as e:
            raise _TransientDeliveryError(f"transport error: {e}") from e

        if response.status_code >= 500 or response.status_code == 429:
            raise _TransientDeliveryError(f"mail API returned {response.status_code}")
        if response.is_error:
            raise NotificationError(f"Mail API rejected message: {response.status_code} {response.text}")

    async def send(self, message: Message) -> None:
        """Deliver ``message``, retrying transport errors and 5xx/429 responses."""
        try:
            async for attempt in AsyncRetrying(
                stop=stop_after_attempt(self.config.max_attempts),
                wait=wait_exponential(multiplier=self.config.retry_backoff, max=5),
                retry=retry_if_exception_type(_TransientDeliveryError),
                reraise=False,
            ):
                with attempt:
                    await self._post(message)
        except RetryError as e:
            cause = e.last_attempt.exception()
            logger.error(f"Notification '{message.subject}' failed after retries: {cause}")
            raise NotificationError(f"Notification delivery failed: {cause}") from cause

        logger.info(f"Notification sent: {message.subject} -> {self.config.recipient}")

    async def aclose(self) -> None:
        await self._client.aclose()


def build_notifier(config: NotifierSettings) -> Notifier:
    if config.backend == NotifierBackend.EMAIL_API:
        return EmailApiNotifier(config)
    return LogNotifier()
