"""Lead intake: contact submissions and newsletter subscriptions.

A contact is persisted first and the notifier is called afterwards. The two
steps are not transactional; when the notifier fails the contact stays
saved. Whether that failure reaches the caller is controlled by
``LeadSettings.notify_failure_is_error``.
"""
from __future__ import annotations

import logging

from studio.config import LeadSettings
from studio.errors import NotificationError
from studio.models import Contact, NewsletterSubscriber
from studio.notifier import Notifier, render_contact_message
from studio.schemas import ContactCreate
from studio.store import EntityStore

logger = logging.getLogger(__name__)


class LeadIntakePipeline:
    """Persists leads and notifies the studio about new contacts."""

    def __init__(
        self,
        contacts: EntityStore[Contact],
        subscribers: EntityStore[NewsletterSubscriber],
        notifier: Notifier,
        config: LeadSettings,
    ):
        self.contacts = contacts
        self.subscribers = subscribers
        self.notifier = notifier
        self.config = config

    async def submit_contact(self, payload: ContactCreate) -> Contact:
        """Save a contact submission, then send the notification.

        Raises:
            NotificationError: the notifier failed and failures are reported;
                ``record_id`` holds the id of the saved contact
        """
        contact = await self.contacts.create(payload.model_dump())
        logger.info(f"Saved contact {contact.id} from {contact.email}")

        message = render_contact_message(
            name=contact.name,
            email=contact.email,
            company=contact.company,
            service=contact.service,
            message=contact.message,
        )
        try:
            await self.notifier.send(message)
        except NotificationError as e:
            logger.error(f"Contact {contact.id} saved but notification failed: {e}")
            if self.config.notify_failure_is_error:
                raise NotificationError(
                    f"Contact saved but notification failed: {e}",
                    record_id=contact.id,
                ) from e

        return contact

    async def subscribe(self, email: str) -> NewsletterSubscriber:
        """Add a newsletter subscriber.

        Raises:
            DuplicateKeyError: the email is already subscribed
        """
        subscriber = await self.subscribers.create({"email": email})
        logger.info(f"New newsletter subscriber {subscriber.id}")
        return subscriber

    async def list_contacts(self) -> list[Contact]:
        return await self.contacts.list("submitted_at", descending=True)

    async def list_subscribers(self) -> list[NewsletterSubscriber]:
        return await self.subscribers.list("subscribed_at", descending=True)

    async def delete_contact(self, contact_id: str) -> None:
        await self.contacts.delete(contact_id)

    async def delete_subscriber(self, subscriber_id: str) -> None:
        await self.subscribers.delete(subscriber_id)
