"""SQLAlchemy Venue / Review Repository Implementations"""

from typing import List, Optional
from sqlmodel import select
from sqlmodel.ext.asyncio.session import AsyncSession
from src.app.repositories.venue_repository import ReviewRepository, VenueRepository
from src.domain.moderation import ModerationStatus
from src.domain.review import Review
from src.domain.venue import Venue


class SqlAlchemyVenueRepository(VenueRepository):

    def __init__(self, session: AsyncSession):
        self.session = session

    async def get_by_id(self, venue_id: str) -> Optional[Venue]:
        result = await self.session.execute(select(Venue).where(Venue.id == venue_id))
        return result.scalar_one_or_none()


class SqlAlchemyReviewRepository(ReviewRepository):

    def __init__(self, session: AsyncSession):
        self.session = session

    async def get_by_id(self, review_id: str) -> Optional[Review]:
        result = await self.session.execute(select(Review).where(Review.id == review_id))
        return result.scalar_one_or_none()

    async def list_approved_by_venue(self, venue_id: str) -> List[Review]:
        stmt = select(Review).where(
            Review.venue_id == venue_id,
            Review.moderation_status == ModerationStatus.APPROVED,
            Review.deleted == False,  # noqa: E712
        )
        result = await self.session.execute(stmt)
        return list(result.scalars().all())
