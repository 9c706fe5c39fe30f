"""Data Transfer Objects for Credit Use Cases

Pydantic models for command inputs and response outputs.
"""

from datetime import date, datetime
from decimal import Decimal
from typing import Dict, List, Optional
from pydantic import BaseModel, Field

from src.domain.credit_ledger import LedgerEntryInput


class LedgerEntryDTO(BaseModel):
    """
    One proposed ledger line

    Exactly one of user_id, business_id, system_entity must be set.
    Positive amounts credit the account, negative amounts debit it.
    """

    amount: Decimal = Field(..., description="Signed credit amount")
    user_id: Optional[str] = None
    business_id: Optional[str] = None
    system_entity: Optional[str] = None

    def to_input(self) -> LedgerEntryInput:
        return LedgerEntryInput(
            amount=self.amount,
            user_id=self.user_id,
            business_id=self.business_id,
            system_entity=self.system_entity,
        )


class ApplyTransactionCommandDTO(BaseModel):
    """
    Command DTO for applying a double-entry credit transaction

    Fields are deliberately permissive; the ledger rules report missing or
    malformed values with their own error codes.
    """

    idempotency_key: Optional[str] = Field(
        default=None,
        description="Unique key for idempotent operations (e.g., booking:<booking_id>)"
    )

    description: Optional[str] = Field(default=None)

    entries: List[LedgerEntryDTO] = Field(default_factory=list)

    class Config:
        json_schema_extra = {
            "example": {
                "idempotency_key": "booking:bk_456",
                "description": "Booking for Morning Flow",
                "entries": [
                    {"amount": "-25", "user_id": "usr_123"},
                    {"amount": "25", "business_id": "biz_9"},
                ]
            }
        }


class TransactionResultDTO(BaseModel):
    """Outcome of a credit transaction; identical for the first call and every replay"""

    transaction_id: str
    idempotency_key: str
    status: str
    balances: Dict[str, Decimal] = Field(
        default_factory=dict,
        description="Account key (e.g. user:usr_123) -> balance after the transaction"
    )
    completed_at: Optional[datetime] = None


class GrantCreditsCommandDTO(BaseModel):
    """Command DTO for issuing platform credits to a consumer (purchase, bonus)"""

    user_id: str
    amount: Decimal = Field(..., gt=0, description="Credits to grant (must be > 0)")
    idempotency_key: str = Field(..., description="e.g. purchase:<payment_id>")
    description: str = Field(default="Credit purchase")
    system_entity: str = Field(default="payment_processor", description="Issuing platform account")


class BalanceResponseDTO(BaseModel):
    entity_type: str
    entity_id: str
    balance: Decimal
    last_updated: Optional[datetime] = None


class AllocateSubscriptionCreditsCommandDTO(BaseModel):
    subscription_id: str
    period: Optional[str] = Field(
        default=None,
        description="Billing period (YYYY-MM); defaults to the current month"
    )
    as_of: Optional[date] = None


class SubscriptionAllocationDTO(BaseModel):
    subscription_id: str
    user_id: str
    period: str
    credits_allocated: Decimal
    transaction: TransactionResultDTO
    notification_events: List[str] = Field(default_factory=list)


class AccountDiscrepancyDTO(BaseModel):
    account: str
    materialized: Decimal
    ledger_total: Decimal

    @property
    def difference(self) -> Decimal:
        return self.materialized - self.ledger_total


class PointsDiscrepancyDTO(BaseModel):
    user_id: str
    cached_points: int
    transaction_total: int


class ReconciliationReportDTO(BaseModel):
    accounts_checked: int
    users_checked: int
    account_discrepancies: List[AccountDiscrepancyDTO] = Field(default_factory=list)
    points_discrepancies: List[PointsDiscrepancyDTO] = Field(default_factory=list)

    @property
    def is_consistent(self) -> bool:
        return not self.account_discrepancies and not self.points_discrepancies
