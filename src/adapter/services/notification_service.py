"""Notification dispatchers

The outbox processor hands each NOTIFICATION follow-up to one dispatcher.
A False return (or an exception) leaves the follow-up pending for retry.
"""

import logging
from typing import Optional
import httpx
from src.app.services.notification_service import NotificationDispatcher
from src.domain.notification import NotificationEvent

logger = logging.getLogger(__name__)


class LoggingNotificationDispatcher(NotificationDispatcher):
    """Writes every event to the log. Used when no webhook is configured."""

    async def dispatch(self, event: NotificationEvent) -> bool:
        logger.info(f"[NOTIFICATION] {event.type.value} -> {event.recipient} {event.data}")
        return True


class WebhookNotificationDispatcher(NotificationDispatcher):
    """
    Delivers events as JSON to an HTTP webhook

    Client errors (4xx) are logged and treated as delivered, since resending
    the same body cannot succeed. Transport errors and 5xx are retryable.
    """

    def __init__(self, webhook_url: str, timeout: float = 10.0, transport: Optional[httpx.AsyncBaseTransport] = None):
        self.webhook_url = webhook_url
        self.timeout = timeout
        self.transport = transport

    def build_payload(self, event: NotificationEvent) -> dict:
        payload = event.model_dump(mode="json")
        payload["recipient"] = event.recipient
        return payload

    async def dispatch(self, event: NotificationEvent) -> bool:
        try:
            async with httpx.AsyncClient(timeout=self.timeout, transport=self.transport) as client:
                response = await client.post(self.webhook_url, json=self.build_payload(event))
        except httpx.HTTPError as e:
            logger.error(f"Webhook delivery of {event.type.value} to {event.recipient} failed: {e}")
            return False

        if response.status_code >= 500:
            logger.warning(f"Webhook returned {response.status_code} for {event.type.value}, will retry")
            return False
        if response.status_code >= 400:
            logger.error(
                f"Webhook refused {event.type.value} for {event.recipient} "
                f"with {response.status_code}, dropping"
            )
            return True

        logger.info(f"Delivered {event.type.value} to {event.recipient}")
        return True


class AuditedNotificationDispatcher(NotificationDispatcher):
    """Logs every event, then reports the delivery result of the wrapped dispatcher"""

    def __init__(self, delivery: NotificationDispatcher):
        self.audit = LoggingNotificationDispatcher()
        self.delivery = delivery

    async def dispatch(self, event: NotificationEvent) -> bool:
        await self.audit.dispatch(event)
        return await self.delivery.dispatch(event)


def create_notification_dispatcher(webhook_url: Optional[str] = None) -> NotificationDispatcher:
    if not webhook_url:
        return LoggingNotificationDispatcher()
    return AuditedNotificationDispatcher(WebhookNotificationDispatcher(webhook_url))
