"""Data Transfer Objects for Points Use Cases"""

from datetime import datetime
from typing import Optional
from pydantic import BaseModel, Field

from src.domain.point_transaction import PointTransactionType


class AddPointsCommandDTO(BaseModel):
    user_id: str
    amount: int = Field(..., description="Points to add (positive integer)")
    reason: str = Field(..., description="e.g. booking_cashback, referral, gift")
    description: str
    type: PointTransactionType = PointTransactionType.EARN
    booking_id: Optional[str] = None
    class_instance_id: Optional[str] = None
    created_by: Optional[str] = None


class RedeemPointsCommandDTO(BaseModel):
    user_id: str
    amount: int = Field(..., description="Points to spend (positive integer)")
    reason: str
    description: str
    booking_id: Optional[str] = None
    class_instance_id: Optional[str] = None


class PointsResponseDTO(BaseModel):
    transaction_id: str
    user_id: str
    amount: int
    type: str
    balance: int
    created_at: datetime
