"""Booking Domain Entity

A consumer's seat in a class instance. Prices are cents, credits_paid is what
the ledger actually debited. Questionnaire answers and the applied discount
are stored by value so later template edits never change a past booking.
"""

from datetime import datetime
from decimal import Decimal
from typing import Any, Dict, Optional
from sqlmodel import Field, Column, Index
from sqlalchemy import JSON, Numeric
from src.domain.base import BaseModel, generate_uuid
from src.domain.booking_status import BookingStatus, CancelledBy


class Booking(BaseModel, table=True):
    """
    Booking - Priced and paid reservation of one class instance

    Domain Rules:
    - status changes only through the booking state machine
    - credit_transaction_key points at the ledger transaction that paid for it
      (None for free bookings)
    - Soft-deleted only
    """

    __tablename__ = "bookings"
    __table_args__ = (
        Index('ix_bookings_user_instance', 'user_id', 'class_instance_id'),
        Index('ix_bookings_business_status', 'business_id', 'status'),
    )

    id: str = Field(
        default_factory=generate_uuid,
        primary_key=True,
        description="Unique booking identifier"
    )

    user_id: str = Field(index=True)
    business_id: str = Field(index=True)
    class_instance_id: str = Field(index=True)
    venue_id: Optional[str] = Field(default=None)

    status: BookingStatus = Field(default=BookingStatus.PENDING)

    original_price: int = Field(description="Base price in cents before discount and fees")
    final_price: int = Field(description="Charged price in cents")

    credits_paid: Decimal = Field(
        default=Decimal("0"),
        sa_column=Column(Numeric(18, 6), nullable=False, default=0),
        description="Credits debited from the consumer"
    )

    credit_transaction_key: Optional[str] = Field(
        default=None,
        description="Idempotency key of the paying ledger transaction"
    )

    questionnaire_answers: Optional[Dict[str, Any]] = Field(
        default=None,
        sa_column=Column(JSON, nullable=True),
        description="Snapshot of questions, priced answers and total fees"
    )

    applied_discount: Optional[Dict[str, Any]] = Field(
        default=None,
        sa_column=Column(JSON, nullable=True),
        description="Snapshot of the discount applied at booking time"
    )

    cancelled_by: Optional[CancelledBy] = Field(default=None)
    cancel_reason: Optional[str] = Field(default=None)
    reject_by_business_reason: Optional[str] = Field(default=None)
    refunded_credits: Optional[Decimal] = Field(
        default=None,
        sa_column=Column(Numeric(18, 6), nullable=True),
    )
    points_awarded: Optional[int] = Field(default=None)

    class_start_time: Optional[datetime] = Field(default=None)

    deleted: bool = Field(default=False)
    created_at: datetime = Field(default_factory=datetime.utcnow)
    updated_at: datetime = Field(default_factory=datetime.utcnow)
    cancelled_at: Optional[datetime] = Field(default=None)
