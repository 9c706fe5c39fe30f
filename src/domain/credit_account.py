"""Credit Account Domain Entity

Materialized credit balance per ledger entity (consumer, business or system).
The ledger entries are the source of truth; the balance here is a cache that is
only ever written in the same unit of work that appends ledger entries.
"""

from datetime import datetime
from decimal import Decimal
from enum import Enum
from sqlmodel import Field, Column
from sqlalchemy import Numeric, UniqueConstraint
from src.domain.base import BaseModel, generate_uuid


class LedgerEntityType(str, Enum):
    """Kinds of accounts that can hold credits"""
    USER = "user"            # Consumer wallet (may never go negative)
    BUSINESS = "business"    # Business revenue account
    SYSTEM = "system"        # Platform accounts (issuer, payment processor)


def account_key(entity_type: LedgerEntityType, entity_id: str) -> str:
    """Stable string key used in balance maps, e.g. ``user:usr_1``"""
    return f"{entity_type.value}:{entity_id}"


class CreditAccount(BaseModel, table=True):
    """
    Credit Account - Current balance of one ledger entity

    Domain Rules:
    - One account per (entity_type, entity_id)
    - Consumer balances must stay >= 0 (checked before applying a transaction)
    - Business and system balances may go negative (platform issues credits,
      businesses refund revenue)
    - Balance changes only through CreditTransactions
    """

    __tablename__ = "credit_accounts"
    __table_args__ = (
        UniqueConstraint("entity_type", "entity_id", name="uq_credit_accounts_entity"),
    )

    id: str = Field(
        default_factory=generate_uuid,
        primary_key=True,
        description="Unique account identifier"
    )

    entity_type: LedgerEntityType = Field(
        index=True,
        description="Kind of entity owning the account"
    )

    entity_id: str = Field(
        index=True,
        description="User ID, business ID or system entity name"
    )

    balance: Decimal = Field(
        default=Decimal("0"),
        sa_column=Column(Numeric(18, 6), nullable=False, default=0),
        description="Current credit balance (precision: 18,6)"
    )

    created_at: datetime = Field(
        default_factory=datetime.utcnow,
        description="Account creation timestamp"
    )

    updated_at: datetime = Field(
        default_factory=datetime.utcnow,
        description="Last balance update timestamp"
    )

    @property
    def key(self) -> str:
        return account_key(self.entity_type, self.entity_id)

    class Config:
        """SQLModel configuration"""
        json_schema_extra = {
            "example": {
                "id": "5f0c7c1e-2f1b-4f5e-9d7c-0b8e7f4b1a10",
                "entity_type": "user",
                "entity_id": "usr_123",
                "balance": "50.000000",
                "created_at": "2024-01-01T00:00:00Z",
                "updated_at": "2024-01-01T00:00:00Z"
            }
        }
