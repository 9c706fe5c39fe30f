"""BookClass Use Case

Prices a booking, debits the consumer's credits and records the booking in
one unit of work. The booking insert is what triggers the consumer/business
notification.
"""

import logging
from datetime import datetime
from typing import Callable
from libs.result import Result, Return, Error
from src.app.repositories.booking_repository import BookingRepository
from src.app.repositories.class_repository import ClassInstanceRepository, ClassTemplateRepository
from src.app.services.entity_writer import EntityWriter
from src.app.services.ledger_service import LedgerService
from src.app.services.unit_of_work import UnitOfWork
from src.app.use_cases.errors import error_from
from src.domain.base import generate_uuid
from src.domain.booking import Booking
from src.domain.booking_status import BookingStatus, initial_status
from src.domain.class_instance import ClassInstance, ClassInstanceStatus
from src.domain.class_template import ClassTemplate
from src.domain.credit_ledger import LedgerEntryInput
from src.domain.errors import BookingError, DomainError, ErrorCodes
from src.domain.outbox_event import FollowUpKind
from .dtos import BookClassCommandDTO, BookingResponseDTO
from .price_booking import load_class, quote_booking

logger = logging.getLogger(__name__)


def booking_payment_key(booking_id: str) -> str:
    """Format: booking:{booking_id}"""
    return f"booking:{booking_id}"


def ensure_bookable(instance: ClassInstance, now: datetime) -> None:
    if instance.deleted or instance.status != ClassInstanceStatus.SCHEDULED or instance.start_time <= now:
        raise BookingError(
            ErrorCodes.CLASS_NOT_BOOKABLE,
            f"Class instance {instance.id} is not open for booking",
            {"class_instance_id": instance.id, "status": ClassInstanceStatus(instance.status).value},
        )
    if instance.capacity is not None and instance.booked_count >= instance.capacity:
        raise BookingError(
            ErrorCodes.CLASS_FULL,
            f"Class instance {instance.id} is full",
            {"class_instance_id": instance.id, "capacity": instance.capacity},
        )


def requires_confirmation(instance: ClassInstance, template: ClassTemplate) -> bool:
    if instance.requires_confirmation is not None:
        return instance.requires_confirmation
    return bool(template.requires_confirmation)


def to_booking_dto(booking: Booking, **extra) -> BookingResponseDTO:
    return BookingResponseDTO(
        booking_id=booking.id,
        status=BookingStatus(booking.status).value,
        original_price=booking.original_price,
        final_price=booking.final_price,
        credits_paid=booking.credits_paid,
        applied_discount=booking.applied_discount,
        **extra,
    )


class BookClass:
    """
    Use Case: Book a seat in a class instance

    Business Rules:
    1. Only scheduled, future, non-full instances can be booked
    2. A user holds at most one active booking per instance; a repeat request
       returns the existing booking
    3. Required questions must be answered before anything is charged
    4. Questionnaire and discount are stored by value on the booking
    5. Paid bookings debit the user and credit the business under the key
       booking:{booking_id}; free bookings touch no ledger
    6. Instances requiring confirmation start AWAITING_APPROVAL, others PENDING

    Flow:
    1. Lock instance, check for an existing active booking
    2. Price (validates answers)
    3. Apply ledger transaction
    4. Insert booking and bump booked_count through the EntityWriter
    5. Commit
    """

    def __init__(
        self,
        uow: UnitOfWork,
        instance_repo: ClassInstanceRepository,
        template_repo: ClassTemplateRepository,
        booking_repo: BookingRepository,
        ledger_service: LedgerService,
        writer: EntityWriter,
        credits_to_cents_ratio: int,
        clock: Callable[[], datetime] = datetime.utcnow,
    ):
        self.uow = uow
        self.instance_repo = instance_repo
        self.template_repo = template_repo
        self.booking_repo = booking_repo
        self.ledger_service = ledger_service
        self.writer = writer
        self.credits_to_cents_ratio = credits_to_cents_ratio
        self.clock = clock

    async def execute(self, command: BookClassCommandDTO) -> Result[BookingResponseDTO]:
        now = self.clock()

        try:
            instance, template = await load_class(
                self.instance_repo, self.template_repo, command.class_instance_id, for_update=True
            )

            existing = await self.booking_repo.find_active(command.user_id, instance.id)
            if existing:
                logger.info(f"User {command.user_id} already holds booking {existing.id} for {instance.id}")
                return Return.ok(to_booking_dto(existing, already_booked=True))

            ensure_bookable(instance, now)

            price = quote_booking(instance, template, command.answers, now, self.credits_to_cents_ratio)

            booking_id = generate_uuid()
            payment_key = None
            application = None
            if not price.is_free:
                payment_key = booking_payment_key(booking_id)
                application = await self.ledger_service.apply_transaction(
                    payment_key,
                    f"Booking: {instance.name}",
                    [
                        LedgerEntryInput(amount=-price.final_credits, user_id=command.user_id),
                        LedgerEntryInput(amount=price.final_credits, business_id=instance.business_id),
                    ],
                )

            snapshot = price.questionnaire_snapshot
            discount = price.applied_discount
            booking = Booking(
                id=booking_id,
                user_id=command.user_id,
                business_id=instance.business_id,
                class_instance_id=instance.id,
                venue_id=instance.venue_id,
                status=initial_status(requires_confirmation(instance, template)),
                original_price=price.original_price,
                final_price=price.final_price,
                credits_paid=price.final_credits,
                credit_transaction_key=payment_key,
                questionnaire_answers=snapshot.model_dump(mode="json") if snapshot else None,
                applied_discount=discount.model_dump(mode="json") if discount else None,
                class_start_time=instance.start_time,
            )

            follow_ups = await self.writer.insert(booking)
            await self.writer.patch(instance, {"booked_count": instance.booked_count + 1})

            await self.uow.commit()
            logger.info(
                f"Booked {instance.id} for user {command.user_id}: "
                f"{price.final_price} cents ({price.final_credits} credits)"
            )

            return Return.ok(
                to_booking_dto(
                    booking,
                    questionnaire_fees=price.questionnaire_fees,
                    discount_amount=price.discount_amount,
                    ledger_transaction_id=application.transaction.id if application else None,
                    balances=application.balances if application else {},
                    notification_events=[
                        event.notification_type for event in follow_ups
                        if event.kind == FollowUpKind.NOTIFICATION
                    ],
                )
            )

        except DomainError as e:
            await self.uow.rollback()
            return Return.err(error_from(e))

        except Exception as e:
            await self.uow.rollback()
            logger.exception(f"Booking {command.class_instance_id} for user {command.user_id} failed")
            return Return.err(Error(code="BOOK_CLASS_FAILED", message="Failed to book class", reason=str(e)))
