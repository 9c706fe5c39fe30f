"""Credit Transaction Domain Entity

One logical movement of credits, keyed by a caller-supplied idempotency key.
The ledger entries belonging to it always sum to zero.
"""

from datetime import datetime
from enum import Enum
from typing import Any, Dict, Optional
from sqlmodel import Field, Column
from sqlalchemy import JSON, String
from src.domain.base import BaseModel, generate_uuid


class TransactionStatus(str, Enum):
    """Credit transaction processing status"""
    PENDING = "pending"        # Processing started, entries not applied yet
    COMPLETED = "completed"    # Entries applied, record is immutable
    FAILED = "failed"          # Processing aborted, key cannot be reused


class CreditTransaction(BaseModel, table=True):
    """
    Credit Transaction - Idempotent unit of credit movement

    Domain Rules:
    - idempotency_key must be unique (prevents double-charging)
    - Immutable once COMPLETED; a replay returns the stored result
    - A FAILED key can never be retried, callers must use a new key
    - balances_after stores the post-transaction balances of every touched
      account so replays return byte-identical results
    """

    __tablename__ = "credit_transactions"

    id: str = Field(
        default_factory=generate_uuid,
        primary_key=True,
        description="Unique transaction identifier"
    )

    idempotency_key: str = Field(
        unique=True,
        index=True,
        description="Unique key for idempotent operations (e.g., booking:<booking_id>)"
    )

    description: str = Field(
        description="Human readable description of the movement"
    )

    status: TransactionStatus = Field(
        default=TransactionStatus.PENDING,
        description="Processing status (pending, completed, failed)"
    )

    failure_code: Optional[str] = Field(
        default=None,
        sa_column=Column(String(64), nullable=True),
        description="Error code recorded when the transaction failed"
    )

    balances_after: Dict[str, Any] = Field(
        default_factory=dict,
        sa_column=Column(JSON, nullable=False),
        description="Account key -> balance after the transaction (string decimals)"
    )

    created_at: datetime = Field(
        default_factory=datetime.utcnow,
        description="First processing attempt timestamp"
    )

    completed_at: Optional[datetime] = Field(
        default=None,
        description="Completion timestamp"
    )

    class Config:
        """SQLModel configuration"""
        json_schema_extra = {
            "example": {
                "id": "0d7b0a1c-6a4e-4f77-8d1e-2b7d3f0e9c55",
                "idempotency_key": "booking:bk_456",
                "description": "Booking for Morning Flow",
                "status": "completed",
                "failure_code": None,
                "balances_after": {"user:usr_123": "25.000000", "business:biz_9": "25.000000"},
                "created_at": "2024-01-01T00:00:00Z",
                "completed_at": "2024-01-01T00:00:00Z"
            }
        }
