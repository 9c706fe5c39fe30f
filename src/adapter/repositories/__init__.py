from .booking_repository import SqlAlchemyBookingRepository
from .class_repository import SqlAlchemyClassInstanceRepository, SqlAlchemyClassTemplateRepository
from .credit_account_repository import SqlAlchemyCreditAccountRepository
from .credit_transaction_repository import SqlAlchemyCreditTransactionRepository
from .outbox_repository import SqlAlchemyOutboxRepository
from .point_transaction_repository import SqlAlchemyPointTransactionRepository
from .subscription_repository import SqlAlchemySubscriptionRepository
from .user_repository import SqlAlchemyUserRepository
from .venue_repository import SqlAlchemyReviewRepository, SqlAlchemyVenueRepository

__all__ = [
    "SqlAlchemyBookingRepository",
    "SqlAlchemyClassInstanceRepository",
    "SqlAlchemyClassTemplateRepository",
    "SqlAlchemyCreditAccountRepository",
    "SqlAlchemyCreditTransactionRepository",
    "SqlAlchemyOutboxRepository",
    "SqlAlchemyPointTransactionRepository",
    "SqlAlchemySubscriptionRepository",
    "SqlAlchemyUserRepository",
    "SqlAlchemyReviewRepository",
    "SqlAlchemyVenueRepository",
]
