"""SQLAlchemy Class Template / Class Instance Repository Implementations"""

from typing import List, Optional
from sqlmodel import select
from sqlmodel.ext.asyncio.session import AsyncSession
from src.app.repositories.class_repository import ClassInstanceRepository, ClassTemplateRepository
from src.domain.class_instance import ClassInstance, ClassInstanceStatus
from src.domain.class_template import ClassTemplate


class SqlAlchemyClassTemplateRepository(ClassTemplateRepository):

    def __init__(self, session: AsyncSession):
        self.session = session

    async def get_by_id(self, template_id: str) -> Optional[ClassTemplate]:
        result = await self.session.execute(select(ClassTemplate).where(ClassTemplate.id == template_id))
        return result.scalar_one_or_none()


class SqlAlchemyClassInstanceRepository(ClassInstanceRepository):

    def __init__(self, session: AsyncSession):
        self.session = session

    async def get_by_id(self, instance_id: str, for_update: bool = False) -> Optional[ClassInstance]:
        stmt = select(ClassInstance).where(ClassInstance.id == instance_id)

        if for_update:
            stmt = stmt.with_for_update()

        result = await self.session.execute(stmt)
        return result.scalar_one_or_none()

    def _scheduled(self):
        return select(ClassInstance).where(
            ClassInstance.status == ClassInstanceStatus.SCHEDULED,
            ClassInstance.deleted == False,  # noqa: E712
        )

    async def list_scheduled_by_venue(self, venue_id: str) -> List[ClassInstance]:
        result = await self.session.execute(self._scheduled().where(ClassInstance.venue_id == venue_id))
        return list(result.scalars().all())

    async def list_scheduled_by_template(self, template_id: str) -> List[ClassInstance]:
        result = await self.session.execute(self._scheduled().where(ClassInstance.template_id == template_id))
        return list(result.scalars().all())
