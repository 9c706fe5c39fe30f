"""Follow-up Scheduler Interface

Deferred work (notifications, moderation, geocoding) is enqueued here and
only executed after the enqueuing write has committed.
"""

from abc import ABC, abstractmethod
from typing import Any, Dict
from src.domain.outbox_event import FollowUpKind, OutboxEvent


class FollowUpScheduler(ABC):

    @abstractmethod
    async def enqueue(self, kind: FollowUpKind, payload: Dict[str, Any]) -> OutboxEvent:
        """
        Record follow-up work to run after commit

        Args:
            kind: What the worker must do
            payload: JSON-serializable arguments

        Returns:
            The pending OutboxEvent
        """
        pass
