"""Entity Writer Interface

Every insert or patch of a propagating entity (venue, template, instance,
booking, review, user, subscription event) goes through the writer so the
change-propagation handlers run in the same unit of work as the write.
"""

from abc import ABC, abstractmethod
from typing import Any, Dict, List
from src.domain.outbox_event import OutboxEvent


class EntityWriter(ABC):

    @abstractmethod
    async def insert(self, entity) -> List[OutboxEvent]:
        """
        Persist a new entity and run its insert handlers

        Args:
            entity: SQLModel table instance

        Returns:
            Follow-up events enqueued by the handlers (including nested cascades)

        Raises:
            DomainError: If a synchronous cascade fails; the caller must roll back
        """
        pass

    @abstractmethod
    async def patch(self, entity, changes: Dict[str, Any]) -> List[OutboxEvent]:
        """
        Apply field changes to a loaded entity and run its update handlers

        Args:
            entity: Loaded SQLModel table instance
            changes: Field name -> new value (JSON fields are replaced, not merged)

        Returns:
            Follow-up events enqueued by the handlers (including nested cascades)
        """
        pass
