"""Dispatch table wiring

The single place that decides which handler reacts to which entity.
"""

from src.app.propagation.engine import ChangePropagator
from src.app.propagation.handlers import (
    BookingChangeHandler,
    ClassTemplateChangeHandler,
    ReviewChangeHandler,
    SubscriptionEventChangeHandler,
    UserChangeHandler,
    VenueChangeHandler,
)
from src.app.repositories.class_repository import ClassInstanceRepository
from src.app.repositories.subscription_repository import SubscriptionRepository
from src.app.repositories.venue_repository import ReviewRepository, VenueRepository
from src.app.services.entity_writer import EntityWriter
from src.app.services.ledger_service import LedgerService
from src.domain.booking import Booking
from src.domain.class_template import ClassTemplate
from src.domain.review import Review
from src.domain.subscription import SubscriptionEvent
from src.domain.user import User
from src.domain.venue import Venue


def register_handlers(
    propagator: ChangePropagator,
    writer: EntityWriter,
    ledger_service: LedgerService,
    instance_repo: ClassInstanceRepository,
    venue_repo: VenueRepository,
    review_repo: ReviewRepository,
    subscription_repo: SubscriptionRepository,
    welcome_bonus_credits,
) -> ChangePropagator:
    propagator.register(Venue.__tablename__, VenueChangeHandler(instance_repo, writer))
    propagator.register(ClassTemplate.__tablename__, ClassTemplateChangeHandler(instance_repo, writer))
    propagator.register(User.__tablename__, UserChangeHandler(ledger_service, writer, welcome_bonus_credits))
    propagator.register(Booking.__tablename__, BookingChangeHandler())
    propagator.register(Review.__tablename__, ReviewChangeHandler(review_repo, venue_repo, writer))
    propagator.register(SubscriptionEvent.__tablename__, SubscriptionEventChangeHandler(subscription_repo))
    return propagator
