"""Notification events

Typed payloads handed to the notification dispatcher. Exactly one event is
enqueued per classified domain transition.
"""

from enum import Enum
from typing import Any, Dict, Optional
from pydantic import BaseModel, Field


class NotificationType(str, Enum):
    """Typed notification events handed to the notification dispatcher"""
    BOOKING_CREATED = "booking_created"
    BOOKING_AWAITING_APPROVAL = "booking_awaiting_approval"
    BOOKING_CANCELLED_BY_CONSUMER = "booking_cancelled_by_consumer"
    BOOKING_CANCELLED_BY_BUSINESS = "booking_cancelled_by_business"
    CLASS_REBOOKABLE = "class_rebookable"
    BOOKING_APPROVED = "booking_approved"
    BOOKING_REJECTED = "booking_rejected"
    WELCOME_BONUS = "welcome_bonus"
    REVIEW_APPROVED = "review_approved"
    CREDITS_RECEIVED_SUBSCRIPTION = "credits_received_subscription"


# Events addressed to the business rather than the consumer
BUSINESS_NOTIFICATIONS = frozenset({
    NotificationType.BOOKING_CREATED,
    NotificationType.BOOKING_AWAITING_APPROVAL,
    NotificationType.BOOKING_CANCELLED_BY_CONSUMER,
    NotificationType.REVIEW_APPROVED,
})


class NotificationEvent(BaseModel):
    type: NotificationType
    user_id: Optional[str] = None
    business_id: Optional[str] = None
    data: Dict[str, Any] = Field(default_factory=dict)

    @property
    def recipient(self) -> str:
        if self.type in BUSINESS_NOTIFICATIONS and self.business_id:
            return f"business:{self.business_id}"
        return f"user:{self.user_id}"
