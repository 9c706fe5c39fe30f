"""Integration tests for booking, pricing and the booking lifecycle

Tests cover:
- Pricing with questionnaire fees and the ledger debit it causes
- One active booking per consumer and class
- Rejection and business cancellation reverse the payment exactly
- Consumer cancellation inside and outside the cancellation window
- Completion cashback points
- Booking snapshots survive later template edits
"""

import pytest
from datetime import datetime, timedelta
from decimal import Decimal
from sqlmodel import select
from src.adapter.repositories.outbox_repository import SqlAlchemyOutboxRepository
from src.app.use_cases.bookings import BookClassCommandDTO, PriceQuoteCommandDTO, TransitionBookingCommandDTO
from src.app.use_cases.catalog import UpdateClassTemplateCommandDTO
from src.domain.booking import Booking
from src.domain.booking_status import BookingStatus
from src.domain.class_instance import ClassInstance
from src.domain.credit_account import LedgerEntityType
from src.domain.errors import ErrorCodes
from src.domain.outbox_event import FollowUpKind
from src.domain.point_transaction import PointTransaction

NOW = datetime(2024, 6, 1, 9, 0, 0)
CLASS_START = NOW + timedelta(days=2)

ANSWERS = [
    {"question_id": "equipment", "boolean_answer": True},
    {"question_id": "mat", "single_select_answer": "premium"},
]


async def balance(services, entity_type: LedgerEntityType, entity_id: str) -> Decimal:
    account = await services.account_repo.get_by_entity(entity_type, entity_id)
    return account.balance if account else Decimal("0")


async def notification_types(db_session):
    events = await SqlAlchemyOutboxRepository(db_session).list_by_kind(FollowUpKind.NOTIFICATION)
    return [event.payload["type"] for event in events]


async def book(services, answers=ANSWERS):
    return await services.book_class.execute(
        BookClassCommandDTO(user_id="usr_1", class_instance_id="ci_1", answers=answers)
    )


async def transition(services, booking_id, target, reason=None):
    return await services.transition_booking.execute(
        TransitionBookingCommandDTO(booking_id=booking_id, target_status=target, reason=reason)
    )


async def booked_count(db_session) -> int:
    instance = (await db_session.execute(
        select(ClassInstance).where(ClassInstance.id == "ci_1")
    )).scalar_one()
    await db_session.refresh(instance)
    return instance.booked_count


@pytest.mark.asyncio
class TestBookingFlowIntegration:

    async def test_quote_matches_booking_price(self, services, catalog):
        result = await services.price_booking.execute(
            PriceQuoteCommandDTO(class_instance_id="ci_1", answers=ANSWERS)
        )

        assert result.is_ok()
        assert result.value.original_price == 1000
        assert result.value.questionnaire_fees == 250
        assert result.value.final_price == 1250
        assert result.value.final_credits == Decimal("25")

    async def test_book_paid_class(self, services, db_session, catalog, consumer, fund):
        """
        Given: A consumer with 50 credits and a 1000 cent class
        When: Booking with +200 and +50 cent answers
        Then: 1250 cents = 25 credits move from consumer to business
        """
        # Arrange
        await fund("usr_1", 50)

        # Act
        result = await book(services)

        # Assert
        assert result.is_ok()
        dto = result.value
        assert dto.status == "pending"
        assert dto.original_price == 1000
        assert dto.final_price == 1250
        assert dto.credits_paid == Decimal("25")
        assert dto.notification_events == ["booking_created"]

        assert await balance(services, LedgerEntityType.USER, "usr_1") == Decimal("25")
        assert await balance(services, LedgerEntityType.BUSINESS, "biz_1") == Decimal("25")
        assert await booked_count(db_session) == 1

        booking = await services.booking_repo.get_by_id(dto.booking_id)
        assert booking.credit_transaction_key == f"booking:{dto.booking_id}"
        assert booking.questionnaire_answers["total_fees"] == 250
        assert await notification_types(db_session) == ["booking_created"]

    async def test_second_booking_returns_existing(self, services, catalog, consumer, fund):
        await fund("usr_1", 100)
        first = await book(services)

        second = await book(services)

        assert second.value.already_booked is True
        assert second.value.booking_id == first.value.booking_id
        assert await balance(services, LedgerEntityType.USER, "usr_1") == Decimal("75")

    async def test_missing_required_answer_charges_nothing(self, services, db_session, catalog, consumer, fund):
        await fund("usr_1", 50)

        result = await book(services, answers=[{"question_id": "mat", "single_select_answer": "standard"}])

        assert result.error.code == ErrorCodes.QUESTION_REQUIRED_UNANSWERED
        assert await balance(services, LedgerEntityType.USER, "usr_1") == Decimal("50")
        bookings = (await db_session.execute(select(Booking))).scalars().all()
        assert bookings == []

    async def test_insufficient_credits_leaves_no_booking(self, services, db_session, catalog, consumer, fund):
        await fund("usr_1", 10)

        result = await book(services)

        assert result.error.code == ErrorCodes.INSUFFICIENT_BALANCE
        assert (await db_session.execute(select(Booking))).scalars().all() == []
        assert await balance(services, LedgerEntityType.USER, "usr_1") == Decimal("10")

    async def test_rejection_refunds_and_notifies_once(self, services, db_session, catalog, consumer, fund):
        """
        Given: A class requiring confirmation and a paid booking awaiting approval
        When: The business rejects the booking
        Then: The debit is reversed, the seat freed and booking_rejected sent exactly once
        """
        # Arrange
        _, template, _ = catalog
        template.requires_confirmation = True
        db_session.add(template)
        await db_session.commit()
        await fund("usr_1", 50)
        booked = await book(services)
        assert booked.value.status == "awaiting_approval"

        # Act
        result = await transition(
            services, booked.value.booking_id, BookingStatus.REJECTED_BY_BUSINESS, reason="Private session"
        )

        # Assert
        assert result.is_ok()
        assert result.value.refunded_credits == Decimal("25")
        assert result.value.notification_events == ["booking_rejected"]
        assert await balance(services, LedgerEntityType.USER, "usr_1") == Decimal("50")
        assert await balance(services, LedgerEntityType.BUSINESS, "biz_1") == Decimal("0")
        assert await booked_count(db_session) == 0

        types = await notification_types(db_session)
        assert types.count("booking_rejected") == 1
        assert sorted(types) == ["booking_awaiting_approval", "booking_rejected"]

        booking = await services.booking_repo.get_by_id(booked.value.booking_id)
        assert booking.reject_by_business_reason == "Private session"

    async def test_rejecting_twice_is_invalid(self, services, db_session, catalog, consumer, fund):
        _, template, _ = catalog
        template.requires_confirmation = True
        db_session.add(template)
        await db_session.commit()
        await fund("usr_1", 50)
        booked = await book(services)
        await transition(services, booked.value.booking_id, BookingStatus.REJECTED_BY_BUSINESS)

        again = await transition(services, booked.value.booking_id, BookingStatus.REJECTED_BY_BUSINESS)

        assert again.error.code == ErrorCodes.INVALID_STATUS_TRANSITION
        assert await balance(services, LedgerEntityType.USER, "usr_1") == Decimal("50")

    async def test_early_consumer_cancellation_refunds_everything(self, services, catalog, consumer, fund):
        await fund("usr_1", 50)
        booked = await book(services)

        result = await transition(services, booked.value.booking_id, BookingStatus.CANCELLED_BY_CONSUMER)

        assert result.value.refunded_credits == Decimal("25")
        assert result.value.notification_events == ["booking_cancelled_by_consumer"]
        assert await balance(services, LedgerEntityType.USER, "usr_1") == Decimal("50")

    async def test_late_consumer_cancellation_refunds_half_rounded_up(self, services, catalog, consumer, fund, clock):
        """
        Given: A 25 credit booking and a 24 hour cancellation window
        When: The consumer cancels 12 hours before the class
        Then: ceil(25 * 0.5) = 13 credits come back, the business keeps 12
        """
        await fund("usr_1", 50)
        booked = await book(services)

        clock.now = CLASS_START - timedelta(hours=12)

        result = await transition(services, booked.value.booking_id, BookingStatus.CANCELLED_BY_CONSUMER)

        assert result.value.refunded_credits == Decimal("13")
        assert await balance(services, LedgerEntityType.USER, "usr_1") == Decimal("38")
        assert await balance(services, LedgerEntityType.BUSINESS, "biz_1") == Decimal("12")

    async def test_business_cancellation_frees_seat(self, services, db_session, catalog, consumer, fund):
        await fund("usr_1", 50)
        booked = await book(services)

        result = await transition(
            services, booked.value.booking_id, BookingStatus.CANCELLED_BY_BUSINESS_REBOOKABLE,
            reason="Instructor ill",
        )

        assert result.value.notification_events == ["class_rebookable"]
        assert await balance(services, LedgerEntityType.USER, "usr_1") == Decimal("50")
        assert await booked_count(db_session) == 0

        booking = await services.booking_repo.get_by_id(booked.value.booking_id)
        assert booking.cancelled_by == "business"
        assert booking.cancel_reason == "Instructor ill"

    async def test_completion_awards_cashback_points(self, services, db_session, catalog, consumer, fund):
        await fund("usr_1", 50)
        booked = await book(services)

        result = await transition(services, booked.value.booking_id, BookingStatus.COMPLETED)

        # 1250 cents at 0.03 points per cent
        assert result.value.points_awarded == 37
        assert result.value.notification_events == []

        user = await services.user_repo.get_by_id("usr_1")
        assert user.points == 37
        [points] = (await db_session.execute(select(PointTransaction))).scalars().all()
        assert points.booking_id == booked.value.booking_id
        assert points.reason == "booking_cashback"

        # Completed bookings keep their credits and their seat
        assert await balance(services, LedgerEntityType.USER, "usr_1") == Decimal("25")
        assert await booked_count(db_session) == 1

    async def test_booking_snapshot_survives_template_edit(self, services, db_session, catalog, consumer, fund):
        """
        Given: A booking made against the original questionnaire
        When: The business renames the class and reprices the equipment question
        Then: Scheduled instances follow the template, the booking does not
        """
        # Arrange
        await fund("usr_1", 50)
        booked = await book(services)

        # Act
        result = await services.update_class_template.execute(
            UpdateClassTemplateCommandDTO(
                template_id="tpl_1",
                name="Power Flow",
                questionnaire=[
                    {
                        "id": "equipment",
                        "question": "Rent equipment?",
                        "type": "boolean",
                        "required": True,
                        "boolean_config": {"fee_on_true": 900},
                    },
                ],
            )
        )

        # Assert
        assert result.is_ok()

        booking = await services.booking_repo.get_by_id(booked.value.booking_id)
        assert booking.final_price == 1250
        snapshot = booking.questionnaire_answers
        assert snapshot["questionnaire"][0]["boolean_config"]["fee_on_true"] == 200
        assert [answer["fee_applied"] for answer in snapshot["answers"]] == [200, 50]

        instance = await services.instance_repo.get_by_id("ci_1")
        assert instance.name == "Power Flow"
        assert instance.template_snapshot["name"] == "Power Flow"

    async def test_free_class_moves_no_credits(self, services, db_session, catalog, consumer):
        _, _, instance = catalog
        instance.price = 0
        db_session.add(instance)
        await db_session.commit()

        result = await book(services, answers=[{"question_id": "equipment", "boolean_answer": False}])

        assert result.is_ok()
        assert result.value.final_price == 0
        assert result.value.ledger_transaction_id is None
        assert await balance(services, LedgerEntityType.USER, "usr_1") == Decimal("0")

        cancelled = await transition(services, result.value.booking_id, BookingStatus.CANCELLED_BY_BUSINESS)
        assert cancelled.value.refunded_credits == Decimal("0")

    async def test_full_class_rejected(self, services, db_session, catalog, consumer, fund):
        _, _, instance = catalog
        instance.capacity = 1
        instance.booked_count = 1
        db_session.add(instance)
        await db_session.commit()
        await fund("usr_1", 50)

        result = await book(services)

        assert result.error.code == ErrorCodes.CLASS_FULL
        assert await balance(services, LedgerEntityType.USER, "usr_1") == Decimal("50")
