"""SQLAlchemy Outbox Repository Implementation"""

from typing import List, Optional
from sqlmodel import select
from sqlmodel.ext.asyncio.session import AsyncSession
from src.app.repositories.outbox_repository import OutboxRepository
from src.domain.outbox_event import FollowUpKind, OutboxEvent, OutboxStatus


class SqlAlchemyOutboxRepository(OutboxRepository):

    def __init__(self, session: AsyncSession):
        self.session = session

    async def list_pending(self, limit: int = 100) -> List[OutboxEvent]:
        stmt = (
            select(OutboxEvent)
            .where(OutboxEvent.status == OutboxStatus.PENDING)
            .order_by(OutboxEvent.created_at)
            .limit(limit)
        )
        result = await self.session.execute(stmt)
        return list(result.scalars().all())

    async def list_by_kind(self, kind: FollowUpKind) -> List[OutboxEvent]:
        stmt = select(OutboxEvent).where(OutboxEvent.kind == kind).order_by(OutboxEvent.created_at)
        result = await self.session.execute(stmt)
        return list(result.scalars().all())

    async def get_by_id(self, event_id: str) -> Optional[OutboxEvent]:
        result = await self.session.execute(select(OutboxEvent).where(OutboxEvent.id == event_id))
        return result.scalar_one_or_none()

    async def update(self, event: OutboxEvent) -> OutboxEvent:
        self.session.add(event)
        await self.session.flush()
        return event
