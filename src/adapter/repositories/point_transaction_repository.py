"""SQLAlchemy Point Transaction Repository Implementation"""

from typing import Dict, List
from sqlmodel import select
from sqlmodel.ext.asyncio.session import AsyncSession
from sqlalchemy import func
from src.app.repositories.point_transaction_repository import PointTransactionRepository
from src.domain.point_transaction import PointTransaction


class SqlAlchemyPointTransactionRepository(PointTransactionRepository):

    def __init__(self, session: AsyncSession):
        self.session = session

    async def create(self, transaction: PointTransaction) -> PointTransaction:
        self.session.add(transaction)
        await self.session.flush()
        await self.session.refresh(transaction)
        return transaction

    async def list_by_user(self, user_id: str) -> List[PointTransaction]:
        stmt = (
            select(PointTransaction)
            .where(PointTransaction.user_id == user_id)
            .order_by(PointTransaction.created_at)
        )
        result = await self.session.execute(stmt)
        return list(result.scalars().all())

    async def sum_by_user(self) -> Dict[str, int]:
        stmt = select(PointTransaction.user_id, func.sum(PointTransaction.amount)).group_by(
            PointTransaction.user_id
        )
        result = await self.session.execute(stmt)
        return {user_id: int(total or 0) for user_id, total in result.all()}
