"""Unit tests for OutboxProcessorWorker follow-up handling"""

import pytest
from unittest.mock import AsyncMock, MagicMock

from src.domain.moderation import ModerationStatus
from src.domain.outbox_event import FollowUpKind, OutboxEvent
from src.domain.review import Review
from src.domain.user import User
from src.domain.venue import Venue
from src.worker.outbox_processor import NotificationDeliveryError, OutboxProcessorWorker


@pytest.fixture
def dispatcher():
    mock = MagicMock()
    mock.dispatch = AsyncMock(return_value=True)
    return mock


@pytest.fixture
def moderation_oracle():
    mock = MagicMock()
    mock.moderate_text = AsyncMock(return_value=ModerationStatus.APPROVED)
    mock.moderate_image = AsyncMock(return_value=ModerationStatus.REJECTED)
    return mock


@pytest.fixture
def geocoding_oracle():
    mock = MagicMock()
    mock.geocode = AsyncMock(return_value=(48.85, 2.35))
    return mock


@pytest.fixture
def worker(dispatcher, moderation_oracle, geocoding_oracle):
    return OutboxProcessorWorker(
        session_factory=MagicMock(),
        dispatcher=dispatcher,
        moderation_oracle=moderation_oracle,
        geocoding_oracle=geocoding_oracle,
        batch_size=10,
    )


@pytest.fixture
def services():
    mock = MagicMock()
    mock.writer.patch = AsyncMock(return_value=[])
    return mock


@pytest.mark.asyncio
class TestOutboxFollowUpHandling:

    async def test_notification_is_dispatched(self, worker, dispatcher, services):
        event = OutboxEvent(
            kind=FollowUpKind.NOTIFICATION,
            payload={"type": "booking_created", "user_id": "usr_1", "business_id": "biz_1", "data": {}},
        )

        await worker._handle(event, services)

        notification = dispatcher.dispatch.call_args.args[0]
        assert notification.type.value == "booking_created"
        assert notification.recipient == "business:biz_1"

    async def test_undelivered_notification_raises(self, worker, dispatcher, services):
        dispatcher.dispatch = AsyncMock(return_value=False)
        event = OutboxEvent(kind=FollowUpKind.NOTIFICATION, payload={"type": "welcome_bonus", "user_id": "usr_1"})

        with pytest.raises(NotificationDeliveryError):
            await worker._handle(event, services)

    async def test_review_verdict_written_through_entity_writer(self, worker, services):
        review = Review(id="rev_1", venue_id="venue_1", user_id="usr_1", rating=3, comment="Fine")
        services.review_repo.get_by_id = AsyncMock(return_value=review)
        event = OutboxEvent(kind=FollowUpKind.REVIEW_MODERATION, payload={"review_id": "rev_1"})

        await worker._handle(event, services)

        services.writer.patch.assert_called_once_with(review, {"moderation_status": ModerationStatus.APPROVED})

    async def test_already_moderated_review_is_skipped(self, worker, moderation_oracle, services):
        review = Review(
            id="rev_1", venue_id="venue_1", user_id="usr_1", rating=3, comment="Fine",
            moderation_status=ModerationStatus.APPROVED,
        )
        services.review_repo.get_by_id = AsyncMock(return_value=review)
        event = OutboxEvent(kind=FollowUpKind.REVIEW_MODERATION, payload={"review_id": "rev_1"})

        await worker._handle(event, services)

        moderation_oracle.moderate_text.assert_not_called()
        services.writer.patch.assert_not_called()

    async def test_replaced_profile_image_is_skipped(self, worker, moderation_oracle, services):
        services.user_repo.get_by_id = AsyncMock(return_value=User(id="usr_1", profile_image_id="img_new"))
        event = OutboxEvent(
            kind=FollowUpKind.PROFILE_IMAGE_MODERATION, payload={"user_id": "usr_1", "image_id": "img_old"}
        )

        await worker._handle(event, services)

        moderation_oracle.moderate_image.assert_not_called()

    async def test_profile_image_verdict(self, worker, services):
        user = User(id="usr_1", profile_image_id="img_1", profile_image_moderation_status=ModerationStatus.PENDING)
        services.user_repo.get_by_id = AsyncMock(return_value=user)
        event = OutboxEvent(
            kind=FollowUpKind.PROFILE_IMAGE_MODERATION, payload={"user_id": "usr_1", "image_id": "img_1"}
        )

        await worker._handle(event, services)

        services.writer.patch.assert_called_once_with(
            user, {"profile_image_moderation_status": ModerationStatus.REJECTED}
        )

    async def test_geocoding_patches_coordinates(self, worker, services):
        venue = Venue(id="venue_1", business_id="biz_1", name="Studio", address={"street": "1 Main St", "city": "Paris"})
        services.venue_repo.get_by_id = AsyncMock(return_value=venue)
        event = OutboxEvent(
            kind=FollowUpKind.VENUE_GEOCODING, payload={"venue_id": "venue_1", "address": "1 Main St Paris"}
        )

        await worker._handle(event, services)

        services.writer.patch.assert_called_once_with(venue, {"latitude": 48.85, "longitude": 2.35})

    async def test_unresolved_address_leaves_venue_alone(self, worker, geocoding_oracle, services):
        geocoding_oracle.geocode = AsyncMock(return_value=None)
        venue = Venue(id="venue_1", business_id="biz_1", name="Studio", address={"street": "Nowhere"})
        services.venue_repo.get_by_id = AsyncMock(return_value=venue)
        event = OutboxEvent(kind=FollowUpKind.VENUE_GEOCODING, payload={"venue_id": "venue_1", "address": "Nowhere"})

        await worker._handle(event, services)

        services.writer.patch.assert_not_called()
