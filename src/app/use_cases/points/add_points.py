"""AddPoints / RedeemPoints Use Cases"""

from libs.result import Result, Return, Error
from src.app.repositories.user_repository import UserRepository
from src.app.services.points_service import PointsService
from src.app.services.unit_of_work import UnitOfWork
from src.app.use_cases.errors import error_from
from src.domain.errors import PointsError
from src.domain.point_transaction import PointTransaction
from .dtos import AddPointsCommandDTO, PointsResponseDTO, RedeemPointsCommandDTO


async def _response(user_repo: UserRepository, transaction: PointTransaction) -> PointsResponseDTO:
    user = await user_repo.get_by_id(transaction.user_id)
    return PointsResponseDTO(
        transaction_id=transaction.id,
        user_id=transaction.user_id,
        amount=transaction.amount,
        type=transaction.type.value,
        balance=user.points if user else 0,
        created_at=transaction.created_at,
    )


class AddPoints:
    """
    Use Case: Earn or gift loyalty points

    Errors:
        INVALID_AMOUNT, USER_NOT_FOUND
    """

    def __init__(self, uow: UnitOfWork, user_repo: UserRepository, points_service: PointsService):
        self.uow = uow
        self.user_repo = user_repo
        self.points_service = points_service

    async def execute(self, command: AddPointsCommandDTO) -> Result[PointsResponseDTO]:
        try:
            transaction = await self.points_service.add_points(
                command.user_id,
                command.amount,
                command.reason,
                command.description,
                transaction_type=command.type,
                booking_id=command.booking_id,
                class_instance_id=command.class_instance_id,
                created_by=command.created_by,
            )
            response = await _response(self.user_repo, transaction)
            await self.uow.commit()
            return Return.ok(response)

        except PointsError as e:
            await self.uow.rollback()
            return Return.err(error_from(e))

        except Exception as e:
            await self.uow.rollback()
            return Return.err(Error(code="ADD_POINTS_FAILED", message="Failed to add points", reason=str(e)))


class RedeemPoints:
    """
    Use Case: Spend loyalty points

    Errors:
        INVALID_AMOUNT, USER_NOT_FOUND, INSUFFICIENT_POINTS
    """

    def __init__(self, uow: UnitOfWork, user_repo: UserRepository, points_service: PointsService):
        self.uow = uow
        self.user_repo = user_repo
        self.points_service = points_service

    async def execute(self, command: RedeemPointsCommandDTO) -> Result[PointsResponseDTO]:
        try:
            transaction = await self.points_service.redeem_points(
                command.user_id,
                command.amount,
                command.reason,
                command.description,
                booking_id=command.booking_id,
                class_instance_id=command.class_instance_id,
            )
            response = await _response(self.user_repo, transaction)
            await self.uow.commit()
            return Return.ok(response)

        except PointsError as e:
            await self.uow.rollback()
            return Return.err(error_from(e))

        except Exception as e:
            await self.uow.rollback()
            return Return.err(Error(code="REDEEM_POINTS_FAILED", message="Failed to redeem points", reason=str(e)))
