from .booking_repository import BookingRepository
from .class_repository import ClassInstanceRepository, ClassTemplateRepository
from .credit_account_repository import CreditAccountRepository
from .credit_transaction_repository import CreditTransactionRepository
from .outbox_repository import OutboxRepository
from .point_transaction_repository import PointTransactionRepository
from .subscription_repository import SubscriptionRepository
from .user_repository import UserRepository
from .venue_repository import ReviewRepository, VenueRepository

__all__ = [
    "BookingRepository",
    "ClassInstanceRepository",
    "ClassTemplateRepository",
    "CreditAccountRepository",
    "CreditTransactionRepository",
    "OutboxRepository",
    "PointTransactionRepository",
    "SubscriptionRepository",
    "UserRepository",
    "ReviewRepository",
    "VenueRepository",
]
