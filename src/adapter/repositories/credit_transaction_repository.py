"""SQLAlchemy implementation of CreditTransactionRepository

Provides persistence for CreditTransaction entities and their ledger entries,
with idempotency enforcement via unique constraint on idempotency_key.
"""

from decimal import Decimal
from typing import Dict, List, Optional, Tuple
from sqlmodel import select
from sqlmodel.ext.asyncio.session import AsyncSession
from sqlalchemy import func
from src.app.repositories.credit_transaction_repository import CreditTransactionRepository
from src.domain.credit_ledger import CreditLedgerEntry
from src.domain.credit_transaction import CreditTransaction


class SqlAlchemyCreditTransactionRepository(CreditTransactionRepository):
    """
    SQLAlchemy implementation of CreditTransactionRepository

    Features:
    - Idempotency enforcement via unique idempotency_key constraint
    - Immutable append-only ledger entries
    - Aggregation of entries per account for reconciliation
    """

    def __init__(self, session: AsyncSession):
        self.session = session

    async def create(self, transaction: CreditTransaction) -> CreditTransaction:
        """
        Create a new credit transaction

        Raises:
            IntegrityError: If idempotency_key already exists (duplicate transaction attempt)
        """
        self.session.add(transaction)
        await self.session.flush()
        await self.session.refresh(transaction)
        return transaction

    async def update(self, transaction: CreditTransaction) -> CreditTransaction:
        self.session.add(transaction)
        await self.session.flush()
        await self.session.refresh(transaction)
        return transaction

    async def get_by_idempotency_key(self, idempotency_key: str) -> Optional[CreditTransaction]:
        """
        Retrieve transaction by idempotency key

        Used to check if transaction already exists (idempotency check).
        """
        stmt = select(CreditTransaction).where(
            CreditTransaction.idempotency_key == idempotency_key
        )
        result = await self.session.execute(stmt)
        return result.scalar_one_or_none()

    async def get_by_id(self, transaction_id: str) -> Optional[CreditTransaction]:
        stmt = select(CreditTransaction).where(CreditTransaction.id == transaction_id)
        result = await self.session.execute(stmt)
        return result.scalar_one_or_none()

    async def add_entries(self, entries: List[CreditLedgerEntry]) -> List[CreditLedgerEntry]:
        self.session.add_all(entries)
        await self.session.flush()
        return entries

    async def get_entries(self, transaction_id: str) -> List[CreditLedgerEntry]:
        stmt = (
            select(CreditLedgerEntry)
            .where(CreditLedgerEntry.transaction_id == transaction_id)
            .order_by(CreditLedgerEntry.created_at, CreditLedgerEntry.id)
        )
        result = await self.session.execute(stmt)
        return list(result.scalars().all())

    async def sum_entries_by_account(self) -> Dict[Tuple[str, str], Decimal]:
        """
        Sum of entry amounts per (entity_type, entity_id)

        Returns:
            Mapping keyed by the entity type value and entity id
        """
        stmt = select(
            CreditLedgerEntry.entity_type,
            CreditLedgerEntry.entity_id,
            func.sum(CreditLedgerEntry.amount),
        ).group_by(CreditLedgerEntry.entity_type, CreditLedgerEntry.entity_id)
        result = await self.session.execute(stmt)

        totals: Dict[Tuple[str, str], Decimal] = {}
        for entity_type, entity_id, total in result.all():
            type_value = getattr(entity_type, "value", entity_type)
            totals[(type_value, entity_id)] = Decimal(str(total or 0))
        return totals
