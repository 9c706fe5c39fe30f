from .base import BaseModel, generate_uuid
from .credit_account import CreditAccount, LedgerEntityType
from .credit_ledger import CreditLedgerEntry, LedgerEntryInput
from .credit_transaction import CreditTransaction, TransactionStatus
from .subscription import Subscription, SubscriptionEvent, SubscriptionStatus
from .user import User
from .point_transaction import PointTransaction, PointTransactionType
from .venue import Venue
from .review import Review
from .class_template import ClassTemplate
from .class_instance import ClassInstance, ClassInstanceStatus
from .booking import Booking
from .booking_status import BookingStatus, CancelledBy
from .outbox_event import OutboxEvent, FollowUpKind, OutboxStatus
from .moderation import ModerationStatus

__all__ = [
    "BaseModel",
    "generate_uuid",
    "CreditAccount",
    "LedgerEntityType",
    "CreditLedgerEntry",
    "LedgerEntryInput",
    "CreditTransaction",
    "TransactionStatus",
    "Subscription",
    "SubscriptionEvent",
    "SubscriptionStatus",
    "User",
    "PointTransaction",
    "PointTransactionType",
    "Venue",
    "Review",
    "ClassTemplate",
    "ClassInstance",
    "ClassInstanceStatus",
    "Booking",
    "BookingStatus",
    "CancelledBy",
    "OutboxEvent",
    "FollowUpKind",
    "OutboxStatus",
    "ModerationStatus",
]
