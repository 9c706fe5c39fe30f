"""Change handlers

One handler per source entity. Cascades that keep derived data consistent
run synchronously through the EntityWriter; everything slow or external is
enqueued as a follow-up.
"""

import logging
from decimal import Decimal
from typing import Any, Dict, Optional

from src.app.propagation.engine import Change, ChangeHandler, ChangePropagator
from src.app.repositories.class_repository import ClassInstanceRepository
from src.app.repositories.subscription_repository import SubscriptionRepository
from src.app.repositories.venue_repository import ReviewRepository, VenueRepository
from src.app.services.entity_writer import EntityWriter
from src.app.services.ledger_service import LedgerService
from src.domain.booking import Booking
from src.domain.booking_status import INITIAL_NOTIFICATIONS, TRANSITIONS, BookingStatus
from src.domain.class_template import ClassTemplate
from src.domain.credit_ledger import LedgerEntryInput
from src.domain.moderation import ModerationStatus
from src.domain.notification import NotificationEvent, NotificationType
from src.domain.outbox_event import FollowUpKind
from src.domain.review import Review
from src.domain.subscription import SubscriptionEvent
from src.domain.user import User
from src.domain.venue import ADDRESS_FIELDS, Venue

logger = logging.getLogger(__name__)

VENUE_RELEVANT_FIELDS = ("deleted", "name", "address", "image_ids")
TEMPLATE_RELEVANT_FIELDS = ("deleted", "name", "description", "instructor", "image_ids")

WELCOME_BONUS_SYSTEM_ENTITY = "welcome_bonus"


def welcome_bonus_key(user_id: str) -> str:
    return f"welcome_bonus:{user_id}"


def address_changed(change: Change) -> bool:
    old = change.before("address") or {}
    new = change.after("address") or {}
    return any(old.get(part) != new.get(part) for part in ADDRESS_FIELDS)


def venue_snapshot(venue: Venue, previous: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
    previous = previous or {}
    return {
        **previous,
        "name": venue.name,
        "address": {**(previous.get("address") or {}), **(venue.address or {})},
        "image_ids": list(venue.image_ids or []),
        "deleted": venue.deleted,
    }


def template_snapshot(template: ClassTemplate, previous: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
    return {
        **(previous or {}),
        "name": template.name,
        "description": template.description,
        "instructor": template.instructor,
        "image_ids": list(template.image_ids or []),
        "deleted": template.deleted,
    }


class VenueChangeHandler(ChangeHandler):
    """Keeps scheduled instances' venue snapshot current; re-geocodes on address change"""

    def __init__(self, instance_repo: ClassInstanceRepository, writer: EntityWriter):
        self.instance_repo = instance_repo
        self.writer = writer

    async def handle(self, change: Change, propagator: ChangePropagator) -> None:
        venue: Venue = change.entity
        if change.is_insert or not change.changed_any(VENUE_RELEVANT_FIELDS):
            return

        instances = await self.instance_repo.list_scheduled_by_venue(venue.id)
        for instance in instances:
            await self.writer.patch(
                instance, {"venue_snapshot": venue_snapshot(venue, instance.venue_snapshot)}
            )
        if instances:
            logger.info(f"Venue {venue.id} change cascaded to {len(instances)} scheduled instances")

        if address_changed(change) and not venue.deleted:
            await propagator.enqueue(
                FollowUpKind.VENUE_GEOCODING,
                {"venue_id": venue.id, "address": venue.full_address()},
            )


class ClassTemplateChangeHandler(ChangeHandler):
    """Copies displayed template fields into its scheduled instances"""

    def __init__(self, instance_repo: ClassInstanceRepository, writer: EntityWriter):
        self.instance_repo = instance_repo
        self.writer = writer

    async def handle(self, change: Change, propagator: ChangePropagator) -> None:
        template: ClassTemplate = change.entity
        if change.is_insert or not change.changed_any(TEMPLATE_RELEVANT_FIELDS):
            return

        instances = await self.instance_repo.list_scheduled_by_template(template.id)
        for instance in instances:
            await self.writer.patch(
                instance,
                {
                    "name": template.name,
                    "description": template.description,
                    "instructor": template.instructor,
                    "template_snapshot": template_snapshot(template, instance.template_snapshot),
                },
            )
        if instances:
            logger.info(f"Template {template.id} change cascaded to {len(instances)} scheduled instances")


class UserChangeHandler(ChangeHandler):
    """
    Welcome bonus on first onboarding, re-moderation on a new profile image

    The bonus is guarded twice: only the has_consumer_onboarded False -> True
    transition grants it, and the ledger key welcome_bonus:<user_id> makes a
    second grant a replay.
    """

    def __init__(self, ledger_service: LedgerService, writer: EntityWriter, welcome_bonus_credits):
        self.ledger_service = ledger_service
        self.writer = writer
        self.welcome_bonus_credits = Decimal(str(welcome_bonus_credits))

    async def handle(self, change: Change, propagator: ChangePropagator) -> None:
        user: User = change.entity

        if change.became_true("has_consumer_onboarded") and self.welcome_bonus_credits > 0:
            application = await self.ledger_service.apply_transaction(
                welcome_bonus_key(user.id),
                "Welcome bonus",
                [
                    LedgerEntryInput(amount=self.welcome_bonus_credits, user_id=user.id),
                    LedgerEntryInput(amount=-self.welcome_bonus_credits, system_entity=WELCOME_BONUS_SYSTEM_ENTITY),
                ],
            )
            if not application.replayed:
                await propagator.notify(
                    NotificationEvent(
                        type=NotificationType.WELCOME_BONUS,
                        user_id=user.id,
                        data={"credits": str(self.welcome_bonus_credits)},
                    )
                )

        if change.changed("profile_image_id") and user.profile_image_id:
            if user.profile_image_moderation_status != ModerationStatus.PENDING:
                await self.writer.patch(user, {"profile_image_moderation_status": ModerationStatus.PENDING})
            await propagator.enqueue(
                FollowUpKind.PROFILE_IMAGE_MODERATION,
                {"user_id": user.id, "image_id": user.profile_image_id},
            )


class BookingChangeHandler(ChangeHandler):
    """Exactly one notification per classified booking transition"""

    @staticmethod
    def classify(change: Change) -> Optional[NotificationType]:
        status = BookingStatus(change.after("status"))
        if change.is_insert:
            return INITIAL_NOTIFICATIONS.get(status)
        if not change.changed("status"):
            return None
        rule = TRANSITIONS.get(BookingStatus(change.before("status")), {}).get(status)
        return rule.notification if rule else None

    async def handle(self, change: Change, propagator: ChangePropagator) -> None:
        booking: Booking = change.entity
        notification_type = self.classify(change)
        if notification_type is None:
            return

        data = {
            "booking_id": booking.id,
            "class_instance_id": booking.class_instance_id,
            "status": BookingStatus(booking.status).value,
            "final_price": booking.final_price,
        }
        if booking.reject_by_business_reason:
            data["reason"] = booking.reject_by_business_reason
        if booking.refunded_credits is not None:
            data["refunded_credits"] = str(booking.refunded_credits)

        await propagator.notify(
            NotificationEvent(
                type=notification_type,
                user_id=booking.user_id,
                business_id=booking.business_id,
                data=data,
            )
        )


class ReviewChangeHandler(ChangeHandler):
    """
    Routes reviews through moderation and keeps venue rating stats current

    Text reviews go to asynchronous moderation; rating-only reviews are
    approved on the spot by a nested patch, which re-enters this handler as an
    ordinary approval. The review_approved notification fires only on the
    transition into APPROVED.
    """

    def __init__(self, review_repo: ReviewRepository, venue_repo: VenueRepository, writer: EntityWriter):
        self.review_repo = review_repo
        self.venue_repo = venue_repo
        self.writer = writer

    async def handle(self, change: Change, propagator: ChangePropagator) -> None:
        review: Review = change.entity

        if (change.is_insert or change.changed("comment")) and not review.deleted:
            if review.has_text():
                if review.moderation_status != ModerationStatus.PENDING:
                    await self.writer.patch(review, {"moderation_status": ModerationStatus.PENDING})
                await propagator.enqueue(FollowUpKind.REVIEW_MODERATION, {"review_id": review.id})
                return
            if review.moderation_status != ModerationStatus.APPROVED:
                await self.writer.patch(review, {"moderation_status": ModerationStatus.APPROVED})
                return

        if change.is_insert or change.changed_any(("moderation_status", "rating", "deleted")):
            await self._recompute_venue_stats(review.venue_id)

        was_approved = change.before("moderation_status") == ModerationStatus.APPROVED
        if not was_approved and review.moderation_status == ModerationStatus.APPROVED and not review.deleted:
            venue = await self.venue_repo.get_by_id(review.venue_id)
            await propagator.notify(
                NotificationEvent(
                    type=NotificationType.REVIEW_APPROVED,
                    user_id=review.user_id,
                    business_id=venue.business_id if venue else None,
                    data={"review_id": review.id, "venue_id": review.venue_id, "rating": review.rating},
                )
            )

    async def _recompute_venue_stats(self, venue_id: str) -> None:
        venue = await self.venue_repo.get_by_id(venue_id)
        if not venue:
            logger.warning(f"Review references missing venue {venue_id}")
            return

        reviews = await self.review_repo.list_approved_by_venue(venue_id)
        count = len(reviews)
        rating = round(sum(r.rating for r in reviews) / count, 2) if count else None

        if venue.rating != rating or venue.review_count != count:
            await self.writer.patch(venue, {"rating": rating, "review_count": count})


class SubscriptionEventChangeHandler(ChangeHandler):

    def __init__(self, subscription_repo: SubscriptionRepository):
        self.subscription_repo = subscription_repo

    async def handle(self, change: Change, propagator: ChangePropagator) -> None:
        event: SubscriptionEvent = change.entity
        if not change.is_insert or not event.credits_allocated or event.credits_allocated <= 0:
            return

        subscription = await self.subscription_repo.get_by_id(event.subscription_id)
        if not subscription:
            logger.warning(f"Subscription event {event.id} references missing subscription {event.subscription_id}")
            return

        await propagator.notify(
            NotificationEvent(
                type=NotificationType.CREDITS_RECEIVED_SUBSCRIPTION,
                user_id=subscription.user_id,
                data={
                    "subscription_id": subscription.id,
                    "plan_name": subscription.plan_name,
                    "credits": str(event.credits_allocated),
                    "period": event.period,
                },
            )
        )
