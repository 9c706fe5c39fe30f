"""SQLAlchemy Entity Writer

Writes an entity through the session, flushes so handlers see the new state,
then dispatches the change to the propagation engine within the same
transaction.
"""

import copy
from datetime import datetime
from typing import Any, Dict, List
from sqlmodel.ext.asyncio.session import AsyncSession
from src.app.propagation.engine import Change, ChangePropagator
from src.app.services.entity_writer import EntityWriter
from src.domain.outbox_event import OutboxEvent


class SqlAlchemyEntityWriter(EntityWriter):

    def __init__(self, session: AsyncSession, propagator: ChangePropagator):
        self.session = session
        self.propagator = propagator

    @staticmethod
    def _state(entity) -> Dict[str, Any]:
        return copy.deepcopy(entity.model_dump())

    async def insert(self, entity) -> List[OutboxEvent]:
        self.session.add(entity)
        await self.session.flush()
        change = Change(
            entity_type=entity.__tablename__,
            entity=entity,
            old=None,
            new=self._state(entity),
        )
        return await self.propagator.dispatch(change)

    async def patch(self, entity, changes: Dict[str, Any]) -> List[OutboxEvent]:
        old = self._state(entity)

        for field, value in changes.items():
            if field not in type(entity).model_fields:
                raise AttributeError(f"{type(entity).__name__} has no field {field!r}")
            # JSON columns are only tracked on reassignment
            setattr(entity, field, copy.deepcopy(value))

        if "updated_at" in type(entity).model_fields and "updated_at" not in changes:
            entity.updated_at = datetime.utcnow()

        self.session.add(entity)
        await self.session.flush()

        change = Change(
            entity_type=entity.__tablename__,
            entity=entity,
            old=old,
            new=self._state(entity),
        )
        return await self.propagator.dispatch(change)
