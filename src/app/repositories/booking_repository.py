"""Booking Repository Interface"""

from abc import ABC, abstractmethod
from typing import List, Optional
from src.domain.booking import Booking


class BookingRepository(ABC):
    """
    Repository interface for Booking reads

    Bookings are inserted and patched through the EntityWriter so that every
    write passes through change propagation.
    """

    @abstractmethod
    async def get_by_id(self, booking_id: str, for_update: bool = False) -> Optional[Booking]:
        """
        Retrieve booking by ID

        Args:
            booking_id: Booking ID
            for_update: If True, lock the row with SELECT FOR UPDATE

        Returns:
            Booking if found and not soft-deleted, None otherwise
        """
        pass

    @abstractmethod
    async def find_active(self, user_id: str, class_instance_id: str) -> Optional[Booking]:
        """
        Retrieve the user's pending / awaiting-approval booking for an instance

        Returns:
            Booking if one exists, None otherwise
        """
        pass

    @abstractmethod
    async def list_by_class_instance(self, class_instance_id: str) -> List[Booking]:
        pass
