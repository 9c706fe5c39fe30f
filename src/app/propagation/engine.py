"""Change propagation engine

Explicit dispatch table keyed by entity table name. Handlers run
synchronously inside the writer's unit of work: anything they raise rejects
the whole write. Follow-up work is enqueued best-effort to the outbox and a
failed enqueue is only logged.
"""

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any, Dict, Iterable, List, Optional

from src.app.services.follow_up_scheduler import FollowUpScheduler
from src.domain.errors import ErrorCodes, PropagationError
from src.domain.notification import NotificationEvent
from src.domain.outbox_event import FollowUpKind, OutboxEvent

logger = logging.getLogger(__name__)

DEFAULT_MAX_DEPTH = 8


@dataclass(frozen=True)
class Change:
    """One committed-to-session write; old is None for inserts"""

    entity_type: str
    entity: Any
    old: Optional[Dict[str, Any]]
    new: Dict[str, Any]

    @property
    def is_insert(self) -> bool:
        return self.old is None

    def before(self, field: str) -> Any:
        return (self.old or {}).get(field)

    def after(self, field: str) -> Any:
        return self.new.get(field)

    def changed(self, field: str) -> bool:
        if self.is_insert:
            return self.after(field) is not None
        return self.before(field) != self.after(field)

    def changed_any(self, fields: Iterable[str]) -> bool:
        return any(self.changed(field) for field in fields)

    def became_true(self, field: str) -> bool:
        return self.before(field) is not True and self.after(field) is True


class ChangeHandler(ABC):

    @abstractmethod
    async def handle(self, change: Change, propagator: "ChangePropagator") -> None:
        pass


class ChangePropagator:
    """
    Dispatches entity changes to their registered handlers

    Handlers may write other entities through the EntityWriter, which
    re-enters dispatch. Nesting deeper than max_depth raises
    PROPAGATION_DEPTH_EXCEEDED so a handler cycle cannot loop forever.
    Follow-ups enqueued anywhere in a cascade are returned by the outermost
    dispatch.
    """

    def __init__(self, scheduler: FollowUpScheduler, max_depth: int = DEFAULT_MAX_DEPTH):
        self.scheduler = scheduler
        self.max_depth = max_depth
        self._handlers: Dict[str, List[ChangeHandler]] = {}
        self._depth = 0
        self._collected: List[OutboxEvent] = []

    def register(self, entity_type: str, handler: ChangeHandler) -> None:
        self._handlers.setdefault(entity_type, []).append(handler)

    def handlers_for(self, entity_type: str) -> List[ChangeHandler]:
        return list(self._handlers.get(entity_type, []))

    async def dispatch(self, change: Change) -> List[OutboxEvent]:
        if self._depth >= self.max_depth:
            raise PropagationError(
                ErrorCodes.PROPAGATION_DEPTH_EXCEEDED,
                f"Change cascade exceeded {self.max_depth} levels at {change.entity_type}",
                {"entity_type": change.entity_type, "max_depth": self.max_depth},
            )

        outermost = self._depth == 0
        if outermost:
            self._collected = []

        self._depth += 1
        try:
            for handler in self.handlers_for(change.entity_type):
                await handler.handle(change, self)
        finally:
            self._depth -= 1

        if not outermost:
            return []

        collected, self._collected = self._collected, []
        return collected

    async def enqueue(self, kind: FollowUpKind, payload: Dict[str, Any]) -> Optional[OutboxEvent]:
        """Best-effort: failures are logged and never reject the write"""
        try:
            event = await self.scheduler.enqueue(kind, payload)
        except Exception as e:
            logger.error(f"Failed to enqueue {kind.value} follow-up {payload}: {e}")
            return None
        self._collected.append(event)
        return event

    async def notify(self, event: NotificationEvent) -> Optional[OutboxEvent]:
        return await self.enqueue(FollowUpKind.NOTIFICATION, event.model_dump(mode="json"))
