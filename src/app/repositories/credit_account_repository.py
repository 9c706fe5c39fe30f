"""Credit Account Repository Interface

Defines the contract for materialized credit balance persistence.
"""

from abc import ABC, abstractmethod
from decimal import Decimal
from typing import List, Optional
from src.domain.credit_account import CreditAccount, LedgerEntityType


class CreditAccountRepository(ABC):
    """
    Repository interface for CreditAccount persistence

    Methods use pessimistic locking (SELECT FOR UPDATE) so two transactions
    touching the same account serialize on the balance row.
    """

    @abstractmethod
    async def get_by_entity(
        self, entity_type: LedgerEntityType, entity_id: str, for_update: bool = False
    ) -> Optional[CreditAccount]:
        """
        Retrieve account by owning entity

        Args:
            entity_type: user, business or system
            entity_id: Owner identifier
            for_update: If True, lock the row with SELECT FOR UPDATE (pessimistic lock)

        Returns:
            CreditAccount if found, None otherwise
        """
        pass

    @abstractmethod
    async def get_or_create(
        self, entity_type: LedgerEntityType, entity_id: str, for_update: bool = True
    ) -> CreditAccount:
        """
        Retrieve account by owning entity, creating a zero-balance account if missing

        Args:
            entity_type: user, business or system
            entity_id: Owner identifier
            for_update: If True, lock the row with SELECT FOR UPDATE

        Returns:
            Existing or newly created CreditAccount
        """
        pass

    @abstractmethod
    async def update_balance(self, account: CreditAccount, new_balance: Decimal) -> CreditAccount:
        """
        Update account balance

        Args:
            account: Locked CreditAccount
            new_balance: New balance value
        """
        pass

    @abstractmethod
    async def list_all(self) -> List[CreditAccount]:
        """Retrieve every account (reconciliation)"""
        pass
