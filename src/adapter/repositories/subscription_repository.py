"""SQLAlchemy Subscription Repository Implementation

Implements subscription persistence using SQLAlchemy async session.
"""

from typing import List, Optional
from sqlmodel import select
from sqlmodel.ext.asyncio.session import AsyncSession
from src.app.repositories.subscription_repository import SubscriptionRepository
from src.domain.subscription import Subscription, SubscriptionStatus


class SqlAlchemySubscriptionRepository(SubscriptionRepository):
    """
    SQLAlchemy implementation of SubscriptionRepository

    Uses async session for database operations.
    """

    def __init__(self, session: AsyncSession):
        self.session = session

    async def get_by_id(self, subscription_id: str) -> Optional[Subscription]:
        statement = select(Subscription).where(Subscription.id == subscription_id)
        result = await self.session.execute(statement)
        return result.scalar_one_or_none()

    async def get_by_user_id(
        self, user_id: str, status: Optional[SubscriptionStatus] = None
    ) -> Optional[Subscription]:
        """
        Retrieve the most recent subscription of a user

        Args:
            user_id: Subscribed consumer
            status: Optional filter by status

        Returns:
            Subscription if found, None otherwise
        """
        statement = select(Subscription).where(Subscription.user_id == user_id)

        if status:
            statement = statement.where(Subscription.status == status)

        statement = statement.order_by(Subscription.created_at.desc()).limit(1)
        result = await self.session.execute(statement)
        return result.scalar_one_or_none()

    async def get_active_subscriptions(self) -> List[Subscription]:
        statement = select(Subscription).where(
            Subscription.status == SubscriptionStatus.ACTIVE
        )
        result = await self.session.execute(statement)
        return list(result.scalars().all())

    async def create(self, subscription: Subscription) -> Subscription:
        self.session.add(subscription)
        await self.session.flush()
        await self.session.refresh(subscription)
        return subscription
