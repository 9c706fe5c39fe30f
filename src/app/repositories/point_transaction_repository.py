"""Point Transaction Repository Interface"""

from abc import ABC, abstractmethod
from typing import Dict, List
from src.domain.point_transaction import PointTransaction


class PointTransactionRepository(ABC):
    """Append-only loyalty points history"""

    @abstractmethod
    async def create(self, transaction: PointTransaction) -> PointTransaction:
        pass

    @abstractmethod
    async def list_by_user(self, user_id: str) -> List[PointTransaction]:
        pass

    @abstractmethod
    async def sum_by_user(self) -> Dict[str, int]:
        """
        Sum of point amounts per user

        Returns:
            user_id -> total points, for reconciliation against User.points
        """
        pass
