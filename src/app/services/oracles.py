"""External oracle interfaces

Moderation and geocoding are slow external calls. They are only ever invoked
by the outbox worker, never inside a write.
"""

from abc import ABC, abstractmethod
from typing import Optional, Tuple
from src.domain.moderation import ModerationStatus


class ModerationOracle(ABC):

    @abstractmethod
    async def moderate_text(self, text: str) -> ModerationStatus:
        """
        Verdict for user-written text (review comments)

        Returns:
            APPROVED, REJECTED, or PENDING when no verdict could be reached
        """
        pass

    @abstractmethod
    async def moderate_image(self, image_id: str) -> ModerationStatus:
        """Verdict for an uploaded image"""
        pass


class GeocodingOracle(ABC):

    @abstractmethod
    async def geocode(self, address: str) -> Optional[Tuple[float, float]]:
        """
        Resolve an address to (latitude, longitude)

        Returns:
            Coordinates, or None if the address could not be resolved
        """
        pass
