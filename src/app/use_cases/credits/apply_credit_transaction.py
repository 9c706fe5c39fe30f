"""ApplyCreditTransaction Use Case

Applies a double-entry credit transaction with idempotency guarantees
and pessimistic locking to prevent race conditions.
"""

import logging
from libs.result import Result, Return, Error
from src.app.services.ledger_service import LedgerApplication, LedgerService
from src.app.services.unit_of_work import UnitOfWork
from src.app.use_cases.errors import error_from
from src.domain.errors import ErrorCodes, LedgerConsistencyError, LedgerValidationError
from .dtos import ApplyTransactionCommandDTO, TransactionResultDTO

logger = logging.getLogger(__name__)


def to_result_dto(application: LedgerApplication) -> TransactionResultDTO:
    transaction = application.transaction
    return TransactionResultDTO(
        transaction_id=transaction.id,
        idempotency_key=transaction.idempotency_key,
        status=transaction.status.value,
        balances=application.balances,
        completed_at=transaction.completed_at,
    )


class ApplyCreditTransaction:
    """
    Use Case: Apply a set of ledger entries as one transaction

    Business Rules:
    1. Validation: key, description, entries, entity shape, amounts, zero sum
    2. Idempotency: a completed key returns its stored result unchanged
    3. Sufficient balance: every debited consumer covers its net debit
    4. Atomic updates: balances, entries and status committed together
    5. Insufficient balance marks the key FAILED; it can never be retried

    Flow:
    1. Validate and apply through LedgerService (locks accounts)
    2. Commit, unless the call was a replay
    3. On insufficient balance: roll back, record the failed key, commit
    """

    def __init__(self, uow: UnitOfWork, ledger_service: LedgerService):
        self.uow = uow
        self.ledger_service = ledger_service

    async def execute(self, command: ApplyTransactionCommandDTO) -> Result[TransactionResultDTO]:
        """
        Execute credit transaction

        Args:
            command: ApplyTransactionCommandDTO with idempotency_key, description, entries

        Returns:
            Result[TransactionResultDTO]: Success with post-transaction balances or error
        """
        entries = [entry.to_input() for entry in command.entries]

        try:
            application = await self.ledger_service.apply_transaction(
                command.idempotency_key, command.description, entries
            )
            if not application.replayed:
                await self.uow.commit()
            return Return.ok(to_result_dto(application))

        except LedgerValidationError as e:
            await self.uow.rollback()
            return Return.err(error_from(e))

        except LedgerConsistencyError as e:
            await self.uow.rollback()
            if e.code == ErrorCodes.INSUFFICIENT_BALANCE:
                await self._mark_failed(command, e.code)
            return Return.err(error_from(e))

        except Exception as e:
            await self.uow.rollback()
            logger.exception(f"Credit transaction {command.idempotency_key} failed")
            return Return.err(
                Error(
                    code="APPLY_TRANSACTION_FAILED",
                    message="Failed to apply credit transaction",
                    reason=str(e),
                )
            )

    async def _mark_failed(self, command: ApplyTransactionCommandDTO, failure_code: str) -> None:
        try:
            await self.ledger_service.record_failure(
                command.idempotency_key, command.description, failure_code
            )
            await self.uow.commit()
        except Exception as e:
            await self.uow.rollback()
            logger.error(f"Could not record failed credit transaction {command.idempotency_key}: {e}")
