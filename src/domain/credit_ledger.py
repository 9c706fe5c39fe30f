"""Credit Ledger Domain Entities

Append-only ledger lines. Each line moves credits into or out of exactly one
account; the lines of one CreditTransaction sum to zero.
"""

from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal
from typing import Optional, Union
from sqlmodel import Field, Column
from sqlalchemy import ForeignKey, Numeric, String
from src.domain.base import BaseModel, generate_uuid
from src.domain.credit_account import LedgerEntityType


@dataclass(frozen=True)
class LedgerEntryInput:
    """
    Proposed ledger line as supplied by a caller

    Exactly one of user_id, business_id or system_entity must be set and amount
    must be a finite non-zero number. Positive amounts credit the account,
    negative amounts debit it. Nothing is enforced here; see ledger_rules.
    """

    amount: Union[Decimal, int, float]
    user_id: Optional[str] = None
    business_id: Optional[str] = None
    system_entity: Optional[str] = None

    def entity_references(self) -> list:
        refs = []
        if self.user_id:
            refs.append((LedgerEntityType.USER, self.user_id))
        if self.business_id:
            refs.append((LedgerEntityType.BUSINESS, self.business_id))
        if self.system_entity:
            refs.append((LedgerEntityType.SYSTEM, self.system_entity))
        return refs

    def entity(self) -> tuple:
        """(entity_type, entity_id); only valid after entity validation"""
        return self.entity_references()[0]

    def negated(self) -> "LedgerEntryInput":
        return LedgerEntryInput(
            amount=-Decimal(str(self.amount)),
            user_id=self.user_id,
            business_id=self.business_id,
            system_entity=self.system_entity,
        )


class CreditLedgerEntry(BaseModel, table=True):
    """
    Credit Ledger Entry - One signed balance adjustment

    Domain Rules:
    - Immutable (append-only)
    - Belongs to exactly one CreditTransaction
    - References exactly one account via (entity_type, entity_id)
    """

    __tablename__ = "credit_ledger_entries"

    id: str = Field(
        default_factory=generate_uuid,
        primary_key=True,
        description="Unique ledger entry identifier"
    )

    transaction_id: str = Field(
        sa_column=Column(String(36), ForeignKey("credit_transactions.id", ondelete="CASCADE"), nullable=False, index=True),
        description="Foreign key to CreditTransaction"
    )

    entity_type: LedgerEntityType = Field(
        index=True,
        description="Kind of account credited or debited"
    )

    entity_id: str = Field(
        index=True,
        description="Account owner identifier"
    )

    amount: Decimal = Field(
        sa_column=Column(Numeric(18, 6), nullable=False),
        description="Signed credit amount (precision: 18,6)"
    )

    created_at: datetime = Field(
        default_factory=datetime.utcnow,
        description="Entry timestamp (immutable)"
    )

    def to_input(self) -> LedgerEntryInput:
        kwargs = {
            LedgerEntityType.USER: "user_id",
            LedgerEntityType.BUSINESS: "business_id",
            LedgerEntityType.SYSTEM: "system_entity",
        }
        return LedgerEntryInput(amount=self.amount, **{kwargs[self.entity_type]: self.entity_id})
