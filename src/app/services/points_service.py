"""Points Service

One-sided loyalty points balance. Each movement appends a PointTransaction
and adjusts the user's cached ``points`` in the same unit of work. Like the
ledger service, it never commits.
"""

import logging
from typing import Optional

from src.app.repositories.point_transaction_repository import PointTransactionRepository
from src.app.repositories.user_repository import UserRepository
from src.domain.errors import ErrorCodes, PointsError
from src.domain.point_transaction import PointTransaction, PointTransactionType
from src.domain.user import User

logger = logging.getLogger(__name__)


class PointsService:

    def __init__(self, user_repo: UserRepository, point_repo: PointTransactionRepository):
        self.user_repo = user_repo
        self.point_repo = point_repo

    async def _locked_user(self, user_id: str) -> User:
        user = await self.user_repo.get_by_id(user_id, for_update=True)
        if not user:
            raise PointsError(ErrorCodes.USER_NOT_FOUND, f"User {user_id} not found", {"user_id": user_id})
        return user

    @staticmethod
    def _validate_amount(amount) -> None:
        if isinstance(amount, bool) or not isinstance(amount, int) or amount <= 0:
            raise PointsError(
                ErrorCodes.INVALID_AMOUNT,
                "Points amount must be a positive integer",
                {"amount": amount},
            )

    async def add_points(
        self,
        user_id: str,
        amount: int,
        reason: str,
        description: str,
        transaction_type: PointTransactionType = PointTransactionType.EARN,
        booking_id: Optional[str] = None,
        class_instance_id: Optional[str] = None,
        created_by: Optional[str] = None,
    ) -> PointTransaction:
        """
        Credit points to a user (earn or gift)

        Raises:
            PointsError: INVALID_AMOUNT or USER_NOT_FOUND
        """
        self._validate_amount(amount)
        user = await self._locked_user(user_id)

        transaction = await self.point_repo.create(
            PointTransaction(
                user_id=user_id,
                amount=amount,
                type=transaction_type,
                reason=reason,
                description=description,
                booking_id=booking_id,
                class_instance_id=class_instance_id,
                created_by=created_by,
            )
        )

        user.points = (user.points or 0) + amount
        await self.user_repo.update(user)

        logger.info(f"Added {amount} points to user {user_id} ({reason})")
        return transaction

    async def redeem_points(
        self,
        user_id: str,
        amount: int,
        reason: str,
        description: str,
        booking_id: Optional[str] = None,
        class_instance_id: Optional[str] = None,
    ) -> PointTransaction:
        """
        Spend points; the transaction amount is stored negative

        Raises:
            PointsError: INVALID_AMOUNT, USER_NOT_FOUND or INSUFFICIENT_POINTS
        """
        self._validate_amount(amount)
        user = await self._locked_user(user_id)

        available = user.points or 0
        if available < amount:
            raise PointsError(
                ErrorCodes.INSUFFICIENT_POINTS,
                f"Insufficient points. Required: {amount}, Available: {available}",
                {"required": amount, "available": available},
            )

        transaction = await self.point_repo.create(
            PointTransaction(
                user_id=user_id,
                amount=-amount,
                type=PointTransactionType.REDEEM,
                reason=reason,
                description=description,
                booking_id=booking_id,
                class_instance_id=class_instance_id,
            )
        )

        user.points = available - amount
        await self.user_repo.update(user)

        logger.info(f"Redeemed {amount} points from user {user_id} ({reason})")
        return transaction
