"""Venue / Review Repository Interfaces"""

from abc import ABC, abstractmethod
from typing import List, Optional
from src.domain.review import Review
from src.domain.venue import Venue


class VenueRepository(ABC):

    @abstractmethod
    async def get_by_id(self, venue_id: str) -> Optional[Venue]:
        pass


class ReviewRepository(ABC):

    @abstractmethod
    async def get_by_id(self, review_id: str) -> Optional[Review]:
        pass

    @abstractmethod
    async def list_approved_by_venue(self, venue_id: str) -> List[Review]:
        """
        Approved, non-deleted reviews of a venue

        Args:
            venue_id: Venue ID

        Returns:
            Reviews counted towards the venue rating
        """
        pass
