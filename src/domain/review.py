"""Review Domain Entity"""

from datetime import datetime
from typing import Optional
from sqlmodel import Field
from src.domain.base import BaseModel, generate_uuid
from src.domain.moderation import ModerationStatus


class Review(BaseModel, table=True):
    """
    Review - Consumer rating of a venue

    Domain Rules:
    - rating is 1..5
    - Reviews with a comment go through asynchronous moderation
    - Rating-only reviews are approved immediately
    - Only approved reviews count towards the venue rating
    """

    __tablename__ = "reviews"

    id: str = Field(default_factory=generate_uuid, primary_key=True)
    venue_id: str = Field(index=True)
    user_id: str = Field(index=True)
    booking_id: Optional[str] = Field(default=None)

    rating: int = Field(ge=1, le=5)
    comment: Optional[str] = Field(default=None)
    moderation_status: ModerationStatus = Field(default=ModerationStatus.PENDING)

    deleted: bool = Field(default=False)
    created_at: datetime = Field(default_factory=datetime.utcnow)
    updated_at: datetime = Field(default_factory=datetime.utcnow)

    def has_text(self) -> bool:
        return bool(self.comment and self.comment.strip())
