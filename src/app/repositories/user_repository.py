"""User Repository Interface"""

from abc import ABC, abstractmethod
from typing import List, Optional
from src.domain.user import User


class UserRepository(ABC):
    """
    Repository interface for User reads

    Profile changes go through the EntityWriter; the points balance is
    written by the points use cases while the row is locked.
    """

    @abstractmethod
    async def get_by_id(self, user_id: str, for_update: bool = False) -> Optional[User]:
        """
        Retrieve user by ID

        Args:
            user_id: User ID
            for_update: If True, lock the row with SELECT FOR UPDATE

        Returns:
            User if found and not deleted, None otherwise
        """
        pass

    @abstractmethod
    async def update(self, user: User) -> User:
        pass

    @abstractmethod
    async def list_all(self) -> List[User]:
        pass
