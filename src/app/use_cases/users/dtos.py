from typing import List, Optional
from pydantic import BaseModel, Field


class UpdateUserProfileCommandDTO(BaseModel):
    user_id: str
    name: Optional[str] = None
    has_consumer_onboarded: Optional[bool] = Field(
        default=None,
        description="Completing onboarding grants the welcome bonus once"
    )
    profile_image_id: Optional[str] = None


class UserProfileDTO(BaseModel):
    user_id: str
    name: Optional[str] = None
    has_consumer_onboarded: bool
    points: int
    profile_image_id: Optional[str] = None
    profile_image_moderation_status: Optional[str] = None
    follow_up_kinds: List[str] = Field(default_factory=list)
