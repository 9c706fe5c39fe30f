"""SQLAlchemy Booking Repository Implementation"""

from typing import List, Optional
from sqlmodel import select
from sqlmodel.ext.asyncio.session import AsyncSession
from src.app.repositories.booking_repository import BookingRepository
from src.domain.booking import Booking
from src.domain.booking_status import ACTIVE_STATES


class SqlAlchemyBookingRepository(BookingRepository):

    def __init__(self, session: AsyncSession):
        self.session = session

    async def get_by_id(self, booking_id: str, for_update: bool = False) -> Optional[Booking]:
        stmt = select(Booking).where(Booking.id == booking_id, Booking.deleted == False)  # noqa: E712

        if for_update:
            stmt = stmt.with_for_update()

        result = await self.session.execute(stmt)
        return result.scalar_one_or_none()

    async def find_active(self, user_id: str, class_instance_id: str) -> Optional[Booking]:
        stmt = (
            select(Booking)
            .where(
                Booking.user_id == user_id,
                Booking.class_instance_id == class_instance_id,
                Booking.status.in_(list(ACTIVE_STATES)),
                Booking.deleted == False,  # noqa: E712
            )
            .order_by(Booking.created_at)
            .limit(1)
        )
        result = await self.session.execute(stmt)
        return result.scalar_one_or_none()

    async def list_by_class_instance(self, class_instance_id: str) -> List[Booking]:
        stmt = select(Booking).where(
            Booking.class_instance_id == class_instance_id,
            Booking.deleted == False,  # noqa: E712
        )
        result = await self.session.execute(stmt)
        return list(result.scalars().all())
