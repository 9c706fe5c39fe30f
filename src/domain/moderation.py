from enum import Enum


class ModerationStatus(str, Enum):
    """Verdict state for user generated content"""
    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"
