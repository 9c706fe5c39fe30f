"""Credit Transaction Repository Interface

Defines the contract for credit transaction and ledger entry persistence.
"""

from abc import ABC, abstractmethod
from decimal import Decimal
from typing import Dict, List, Optional, Tuple
from src.domain.credit_ledger import CreditLedgerEntry
from src.domain.credit_transaction import CreditTransaction


class CreditTransactionRepository(ABC):
    """
    Repository interface for CreditTransaction persistence

    Entries are immutable and append-only for audit trail.
    Idempotency is enforced via unique idempotency_key.
    """

    @abstractmethod
    async def create(self, transaction: CreditTransaction) -> CreditTransaction:
        """
        Create a new credit transaction

        Args:
            transaction: CreditTransaction entity to persist

        Returns:
            Created CreditTransaction

        Raises:
            IntegrityError: If idempotency_key already exists (duplicate transaction)
        """
        pass

    @abstractmethod
    async def update(self, transaction: CreditTransaction) -> CreditTransaction:
        """
        Persist status / result changes of a transaction

        Args:
            transaction: CreditTransaction with updated values

        Returns:
            Updated CreditTransaction
        """
        pass

    @abstractmethod
    async def get_by_idempotency_key(self, idempotency_key: str) -> Optional[CreditTransaction]:
        """
        Retrieve transaction by idempotency key

        Used to check if transaction already exists (idempotency check).

        Args:
            idempotency_key: Unique idempotency key

        Returns:
            CreditTransaction if found, None otherwise
        """
        pass

    @abstractmethod
    async def get_by_id(self, transaction_id: str) -> Optional[CreditTransaction]:
        """
        Retrieve transaction by ID

        Args:
            transaction_id: Transaction ID

        Returns:
            CreditTransaction if found, None otherwise
        """
        pass

    @abstractmethod
    async def add_entries(self, entries: List[CreditLedgerEntry]) -> List[CreditLedgerEntry]:
        """
        Append ledger entries belonging to one transaction

        Args:
            entries: Entries to persist

        Returns:
            Persisted entries
        """
        pass

    @abstractmethod
    async def get_entries(self, transaction_id: str) -> List[CreditLedgerEntry]:
        """
        Retrieve the entries of a transaction in insertion order

        Args:
            transaction_id: Transaction ID

        Returns:
            List of CreditLedgerEntry (empty if none)
        """
        pass

    @abstractmethod
    async def sum_entries_by_account(self) -> Dict[Tuple[str, str], Decimal]:
        """
        Sum of entry amounts per (entity_type, entity_id)

        Returns:
            Mapping used to reconcile materialized balances against the ledger
        """
        pass
