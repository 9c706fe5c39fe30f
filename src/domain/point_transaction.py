"""Point Transaction Domain Entity

Immutable history of loyalty point movements. The user's ``points`` field is a
running balance that must equal the sum of that user's transactions.
"""

import math
from datetime import datetime
from enum import Enum
from typing import Optional
from sqlmodel import Field
from src.domain.base import BaseModel, generate_uuid


class PointTransactionType(str, Enum):
    EARN = "earn"
    REDEEM = "redeem"
    GIFT = "gift"


class PointTransaction(BaseModel, table=True):
    __tablename__ = "point_transactions"

    id: str = Field(default_factory=generate_uuid, primary_key=True)
    user_id: str = Field(index=True)
    amount: int = Field(description="Signed points; negative for redemptions")
    type: PointTransactionType
    reason: str = Field(description="booking_cashback, welcome_bonus, free_class, ...")
    description: str

    booking_id: Optional[str] = Field(default=None, index=True)
    class_instance_id: Optional[str] = Field(default=None)

    created_by: Optional[str] = Field(default=None)
    created_at: datetime = Field(default_factory=datetime.utcnow)


def calculate_points_for_purchase(amount_in_cents: int, cashback_rate: float) -> int:
    """Points awarded for a paid amount, rounded down"""
    return math.floor(amount_in_cents * cashback_rate)
