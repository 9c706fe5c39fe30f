"""Subscription Repository Interface

Defines the contract for subscription data access.
"""

from abc import ABC, abstractmethod
from typing import List, Optional
from src.domain.subscription import Subscription, SubscriptionStatus


class SubscriptionRepository(ABC):
    """Repository interface for Subscription entities"""

    @abstractmethod
    async def get_by_id(self, subscription_id: str) -> Optional[Subscription]:
        """
        Retrieve subscription by ID

        Args:
            subscription_id: Subscription ID

        Returns:
            Subscription if found, None otherwise
        """
        pass

    @abstractmethod
    async def get_by_user_id(
        self, user_id: str, status: Optional[SubscriptionStatus] = None
    ) -> Optional[Subscription]:
        """
        Retrieve the subscription of a user

        Args:
            user_id: Subscribed consumer
            status: Optional filter by status

        Returns:
            Subscription if found, None otherwise
        """
        pass

    @abstractmethod
    async def get_active_subscriptions(self) -> List[Subscription]:
        """
        Retrieve all active subscriptions

        Returns:
            List of active subscriptions
        """
        pass

    @abstractmethod
    async def create(self, subscription: Subscription) -> Subscription:
        """
        Create a new subscription

        Args:
            subscription: Subscription entity to persist

        Returns:
            Created Subscription
        """
        pass
