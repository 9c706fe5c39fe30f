"""Outbox Repository Interface"""

from abc import ABC, abstractmethod
from typing import List, Optional
from src.domain.outbox_event import FollowUpKind, OutboxEvent


class OutboxRepository(ABC):
    """
    Repository interface for OutboxEvent processing

    Rows are added by the FollowUpScheduler inside the writer's unit of
    work; the outbox worker reads and updates them.
    """

    @abstractmethod
    async def list_pending(self, limit: int = 100) -> List[OutboxEvent]:
        """
        Retrieve pending events in creation order

        Args:
            limit: Maximum number of events

        Returns:
            List of pending OutboxEvent
        """
        pass

    @abstractmethod
    async def list_by_kind(self, kind: FollowUpKind) -> List[OutboxEvent]:
        pass

    @abstractmethod
    async def get_by_id(self, event_id: str) -> Optional[OutboxEvent]:
        pass

    @abstractmethod
    async def update(self, event: OutboxEvent) -> OutboxEvent:
        pass
