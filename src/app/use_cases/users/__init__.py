from .update_user_profile import UpdateUserProfile
from .dtos import UpdateUserProfileCommandDTO, UserProfileDTO

__all__ = ["UpdateUserProfile", "UpdateUserProfileCommandDTO", "UserProfileDTO"]
