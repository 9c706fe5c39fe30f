"""Notification Dispatcher Interface

Defines the contract for delivering notification events.
"""

from abc import ABC, abstractmethod
from src.domain.notification import NotificationEvent


class NotificationDispatcher(ABC):
    """
    Abstract notification dispatcher

    Implementations can deliver notifications via:
    - Logging
    - Webhook (HTTP POST)
    - Push / email gateways behind a webhook
    """

    @abstractmethod
    async def dispatch(self, event: NotificationEvent) -> bool:
        """
        Deliver one notification event

        Args:
            event: Typed notification payload

        Returns:
            True if delivered successfully, False otherwise
        """
        pass
