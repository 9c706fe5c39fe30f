"""Outbox-backed Follow-up Scheduler

Adds OutboxEvent rows to the writer's session; they become visible to the
outbox worker only when that session commits.
"""

import json
from typing import Any, Dict
from sqlmodel.ext.asyncio.session import AsyncSession
from src.app.services.follow_up_scheduler import FollowUpScheduler
from src.domain.outbox_event import FollowUpKind, OutboxEvent


class SqlAlchemyOutboxScheduler(FollowUpScheduler):

    def __init__(self, session: AsyncSession):
        self.session = session

    async def enqueue(self, kind: FollowUpKind, payload: Dict[str, Any]) -> OutboxEvent:
        # Reject unserializable payloads here instead of failing the flush of the whole write
        json.dumps(payload)
        event = OutboxEvent(kind=kind, payload=payload)
        self.session.add(event)
        return event
