"""SQLAlchemy User Repository Implementation"""

from datetime import datetime
from typing import List, Optional
from sqlmodel import select
from sqlmodel.ext.asyncio.session import AsyncSession
from src.app.repositories.user_repository import UserRepository
from src.domain.user import User


class SqlAlchemyUserRepository(UserRepository):

    def __init__(self, session: AsyncSession):
        self.session = session

    async def get_by_id(self, user_id: str, for_update: bool = False) -> Optional[User]:
        stmt = select(User).where(User.id == user_id, User.deleted == False)  # noqa: E712

        if for_update:
            stmt = stmt.with_for_update()

        result = await self.session.execute(stmt)
        return result.scalar_one_or_none()

    async def update(self, user: User) -> User:
        user.updated_at = datetime.utcnow()
        self.session.add(user)
        await self.session.flush()
        return user

    async def list_all(self) -> List[User]:
        result = await self.session.execute(select(User))
        return list(result.scalars().all())
