"""User Domain Entity

Consumer profile. Credit balances live in CreditAccount; the loyalty points
balance is denormalized here and must equal the sum of PointTransactions.
"""

from datetime import datetime
from typing import Optional
from sqlmodel import Field
from src.domain.base import BaseModel, generate_uuid
from src.domain.moderation import ModerationStatus


class User(BaseModel, table=True):
    __tablename__ = "users"

    id: str = Field(default_factory=generate_uuid, primary_key=True)
    name: Optional[str] = Field(default=None)
    email: Optional[str] = Field(default=None, index=True)

    has_consumer_onboarded: bool = Field(
        default=False,
        description="Flips to True once; the False -> True transition grants the welcome bonus"
    )

    points: int = Field(default=0, description="Loyalty points balance (cache of point transactions)")

    profile_image_id: Optional[str] = Field(default=None)
    profile_image_moderation_status: Optional[ModerationStatus] = Field(default=None)

    deleted: bool = Field(default=False)
    created_at: datetime = Field(default_factory=datetime.utcnow)
    updated_at: datetime = Field(default_factory=datetime.utcnow)
