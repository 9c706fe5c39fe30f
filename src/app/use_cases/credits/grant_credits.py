"""GrantCredits Use Case

Issues platform credits to a consumer (credit purchase, manual bonus).
"""

from libs.result import Result, Return, Error
from src.app.services.ledger_service import LedgerService
from src.app.services.unit_of_work import UnitOfWork
from src.app.use_cases.errors import error_from
from src.domain.credit_ledger import LedgerEntryInput
from src.domain.errors import DomainError
from .apply_credit_transaction import to_result_dto
from .dtos import GrantCreditsCommandDTO, TransactionResultDTO


class GrantCredits:
    """
    Use Case: Move credits from a system account to a consumer

    The system account is the double-entry counterpart and may go negative.
    """

    def __init__(self, uow: UnitOfWork, ledger_service: LedgerService):
        self.uow = uow
        self.ledger_service = ledger_service

    async def execute(self, command: GrantCreditsCommandDTO) -> Result[TransactionResultDTO]:
        try:
            application = await self.ledger_service.apply_transaction(
                command.idempotency_key,
                command.description,
                [
                    LedgerEntryInput(amount=command.amount, user_id=command.user_id),
                    LedgerEntryInput(amount=-command.amount, system_entity=command.system_entity),
                ],
            )
            if not application.replayed:
                await self.uow.commit()
            return Return.ok(to_result_dto(application))

        except DomainError as e:
            await self.uow.rollback()
            return Return.err(error_from(e))

        except Exception as e:
            await self.uow.rollback()
            return Return.err(
                Error(
                    code="GRANT_CREDITS_FAILED",
                    message="Failed to grant credits",
                    reason=str(e),
                )
            )
