"""Get Balance Use Case

Retrieves the current credit balance of a ledger entity.
"""

from decimal import Decimal
from libs.result import Result, Return, Error
from src.app.repositories.credit_account_repository import CreditAccountRepository
from src.domain.credit_account import LedgerEntityType
from .dtos import BalanceResponseDTO


class GetBalance:
    """
    Get Balance Use Case

    Read-only operation. An entity that never received a movement has a
    zero balance rather than an error.
    """

    def __init__(self, account_repo: CreditAccountRepository):
        """
        Initialize GetBalance use case

        Args:
            account_repo: Repository for accessing credit accounts
        """
        self.account_repo = account_repo

    async def execute(self, entity_type: str, entity_id: str) -> Result[BalanceResponseDTO]:
        """
        Execute get balance operation

        Args:
            entity_type: user, business or system
            entity_id: Owner identifier

        Returns:
            Result[BalanceResponseDTO]: Success with balance data or error

        Errors:
            CREDIT_INVALID_ENTITY: Unknown entity type
        """
        try:
            ledger_entity = LedgerEntityType(entity_type)
        except ValueError:
            return Return.err(
                Error(
                    code="CREDIT_INVALID_ENTITY",
                    message=f"Unknown ledger entity type {entity_type}",
                )
            )

        account = await self.account_repo.get_by_entity(ledger_entity, entity_id)

        if not account:
            return Return.ok(
                BalanceResponseDTO(entity_type=ledger_entity.value, entity_id=entity_id, balance=Decimal("0"))
            )

        return Return.ok(
            BalanceResponseDTO(
                entity_type=account.entity_type.value,
                entity_id=account.entity_id,
                balance=account.balance,
                last_updated=account.updated_at,
            )
        )
