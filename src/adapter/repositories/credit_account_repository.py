"""SQLAlchemy implementation of CreditAccountRepository

Provides persistence for CreditAccount entities with pessimistic locking support
to prevent race conditions during concurrent credit operations.
"""

from datetime import datetime
from decimal import Decimal
from typing import List, Optional
from sqlmodel import select
from sqlmodel.ext.asyncio.session import AsyncSession
from src.app.repositories.credit_account_repository import CreditAccountRepository
from src.domain.credit_account import CreditAccount, LedgerEntityType


class SqlAlchemyCreditAccountRepository(CreditAccountRepository):
    """
    SQLAlchemy implementation of CreditAccountRepository

    Features:
    - Pessimistic locking via SELECT FOR UPDATE
    - Lazy account creation on first movement
    - Balance updates flushed inside the caller's transaction
    """

    def __init__(self, session: AsyncSession):
        self.session = session

    async def get_by_entity(
        self, entity_type: LedgerEntityType, entity_id: str, for_update: bool = False
    ) -> Optional[CreditAccount]:
        """
        Retrieve account by owning entity with optional row-level locking

        Args:
            entity_type: user, business or system
            entity_id: Owner identifier
            for_update: If True, locks the row with SELECT FOR UPDATE (prevents concurrent modifications)

        Returns:
            CreditAccount if found, None otherwise
        """
        stmt = select(CreditAccount).where(
            CreditAccount.entity_type == entity_type,
            CreditAccount.entity_id == entity_id,
        )

        if for_update:
            stmt = stmt.with_for_update()

        result = await self.session.execute(stmt)
        return result.scalar_one_or_none()

    async def get_or_create(
        self, entity_type: LedgerEntityType, entity_id: str, for_update: bool = True
    ) -> CreditAccount:
        """
        Retrieve account by owning entity, creating it with a zero balance if missing

        Args:
            entity_type: user, business or system
            entity_id: Owner identifier
            for_update: If True, locks an existing row with SELECT FOR UPDATE

        Returns:
            CreditAccount
        """
        account = await self.get_by_entity(entity_type, entity_id, for_update=for_update)
        if account:
            return account

        account = CreditAccount(entity_type=entity_type, entity_id=entity_id, balance=Decimal("0"))
        self.session.add(account)
        await self.session.flush()
        await self.session.refresh(account)
        return account

    async def update_balance(self, account: CreditAccount, new_balance: Decimal) -> CreditAccount:
        """
        Update account balance and updated_at timestamp

        Note:
            Should be called within a transaction with the account already locked
        """
        account.balance = new_balance
        account.updated_at = datetime.utcnow()
        self.session.add(account)
        await self.session.flush()
        return account

    async def list_all(self) -> List[CreditAccount]:
        result = await self.session.execute(select(CreditAccount))
        return list(result.scalars().all())
