from typing import List, Optional
from pydantic import BaseModel, Field


class SubmitReviewCommandDTO(BaseModel):
    user_id: str
    venue_id: str
    rating: int = Field(..., ge=1, le=5)
    comment: Optional[str] = Field(default=None, description="Reviews with text go through moderation")
    booking_id: Optional[str] = None


class ReviewResponseDTO(BaseModel):
    review_id: str
    venue_id: str
    rating: int
    moderation_status: str
    venue_rating: Optional[float] = None
    venue_review_count: int = 0
    follow_up_kinds: List[str] = Field(default_factory=list)
    notification_events: List[str] = Field(default_factory=list)
