"""TransitionBooking Use Case

Moves a booking through its lifecycle. The status change and the money it
moves (refund or cashback points) commit together or not at all.
"""

import logging
from datetime import datetime
from decimal import Decimal
from typing import Any, Callable, Dict, Optional, Tuple
from libs.result import Result, Return, Error
from src.app.repositories.booking_repository import BookingRepository
from src.app.repositories.class_repository import ClassInstanceRepository, ClassTemplateRepository
from src.app.services.entity_writer import EntityWriter
from src.app.services.ledger_service import LedgerApplication, LedgerService
from src.app.services.points_service import PointsService
from src.app.services.refund_policy import RefundPolicy
from src.app.services.unit_of_work import UnitOfWork
from src.app.use_cases.errors import error_from
from src.domain.booking import Booking
from src.domain.booking_status import BookingStatus, CancelledBy, MoneyEffect, get_transition
from src.domain.credit_ledger import LedgerEntryInput
from src.domain.errors import BookingError, DomainError, ErrorCodes
from src.domain.outbox_event import FollowUpKind
from src.domain.point_transaction import calculate_points_for_purchase
from .dtos import TransitionBookingCommandDTO, TransitionResultDTO

logger = logging.getLogger(__name__)

SEAT_RELEASING_STATES = frozenset({
    BookingStatus.CANCELLED_BY_CONSUMER,
    BookingStatus.CANCELLED_BY_BUSINESS,
    BookingStatus.CANCELLED_BY_BUSINESS_REBOOKABLE,
    BookingStatus.REJECTED_BY_BUSINESS,
})


def refund_key(booking_id: str) -> str:
    """Format: refund:{booking_id}; a booking is refunded at most once"""
    return f"refund:{booking_id}"


class TransitionBooking:
    """
    Use Case: Apply one booking status transition

    Business Rules:
    1. Only transitions in the booking state machine are accepted
    2. Rejection and business cancellation reverse the original debit exactly
    3. Consumer cancellation refunds what the RefundPolicy allows
    4. Completion awards cashback points on the paid price
    5. Cancellations and rejections free the seat on the instance
    6. Any failure rolls back status and money together
    """

    def __init__(
        self,
        uow: UnitOfWork,
        booking_repo: BookingRepository,
        instance_repo: ClassInstanceRepository,
        template_repo: ClassTemplateRepository,
        ledger_service: LedgerService,
        points_service: PointsService,
        refund_policy: RefundPolicy,
        writer: EntityWriter,
        cashback_rate: float,
        clock: Callable[[], datetime] = datetime.utcnow,
    ):
        self.uow = uow
        self.booking_repo = booking_repo
        self.instance_repo = instance_repo
        self.template_repo = template_repo
        self.ledger_service = ledger_service
        self.points_service = points_service
        self.refund_policy = refund_policy
        self.writer = writer
        self.cashback_rate = cashback_rate
        self.clock = clock

    async def execute(self, command: TransitionBookingCommandDTO) -> Result[TransitionResultDTO]:
        now = self.clock()

        try:
            booking = await self.booking_repo.get_by_id(command.booking_id, for_update=True)
            if not booking:
                raise BookingError(
                    ErrorCodes.BOOKING_NOT_FOUND,
                    f"Booking {command.booking_id} not found",
                    {"booking_id": command.booking_id},
                )

            previous = BookingStatus(booking.status)
            rule = get_transition(previous, command.target_status)

            changes: Dict[str, Any] = {"status": rule.target}
            application: Optional[LedgerApplication] = None

            if rule.money == MoneyEffect.FULL_REFUND:
                application, changes["refunded_credits"] = await self._full_refund(booking)
            elif rule.money == MoneyEffect.POLICY_REFUND:
                application, changes["refunded_credits"] = await self._policy_refund(booking, now)
            elif rule.money == MoneyEffect.POINTS_CASHBACK:
                changes["points_awarded"] = await self._award_cashback(booking)

            if rule.cancelled_by:
                changes["cancelled_by"] = rule.cancelled_by
                changes["cancelled_at"] = now
                changes["cancel_reason"] = command.reason
            if rule.target == BookingStatus.REJECTED_BY_BUSINESS:
                changes["reject_by_business_reason"] = command.reason

            follow_ups = await self.writer.patch(booking, changes)

            if rule.target in SEAT_RELEASING_STATES:
                await self._release_seat(booking.class_instance_id)

            await self.uow.commit()
            logger.info(f"Booking {booking.id}: {previous.value} -> {rule.target.value}")

            return Return.ok(
                TransitionResultDTO(
                    booking_id=booking.id,
                    previous_status=previous.value,
                    new_status=rule.target.value,
                    ledger_transaction_id=application.transaction.id if application else None,
                    refunded_credits=changes.get("refunded_credits"),
                    points_awarded=changes.get("points_awarded"),
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
            logger.exception(f"Transition of booking {command.booking_id} failed")
            return Return.err(
                Error(code="TRANSITION_BOOKING_FAILED", message="Failed to change booking status", reason=str(e))
            )

    async def _full_refund(self, booking: Booking) -> Tuple[Optional[LedgerApplication], Decimal]:
        """Exact negation of the booking debit; free bookings refund nothing"""
        if not booking.credit_transaction_key:
            return None, Decimal("0")

        application = await self.ledger_service.reverse_transaction(
            booking.credit_transaction_key,
            refund_key(booking.id),
            f"Refund for booking {booking.id}",
        )
        if application is None:
            logger.warning(f"Booking {booking.id} has no completed payment to reverse")
            return None, Decimal("0")
        return application, Decimal(str(booking.credits_paid))

    async def _policy_refund(self, booking: Booking, now: datetime) -> Tuple[Optional[LedgerApplication], Decimal]:
        credits_paid = Decimal(str(booking.credits_paid or 0))
        if not booking.credit_transaction_key or credits_paid <= 0:
            return None, Decimal("0")

        window = await self._cancellation_window(booking.class_instance_id)
        refund = self.refund_policy.refund_credits(
            credits_paid, CancelledBy.CONSUMER, booking.class_start_time, window, now
        )
        if refund <= 0:
            return None, Decimal("0")
        if refund == credits_paid:
            return await self._full_refund(booking)

        application = await self.ledger_service.apply_transaction(
            refund_key(booking.id),
            f"Partial refund for booking {booking.id}",
            [
                LedgerEntryInput(amount=refund, user_id=booking.user_id),
                LedgerEntryInput(amount=-refund, business_id=booking.business_id),
            ],
        )
        return application, refund

    async def _cancellation_window(self, class_instance_id: str) -> int:
        instance = await self.instance_repo.get_by_id(class_instance_id)
        if not instance:
            return 0
        if instance.cancellation_window_hours is not None:
            return instance.cancellation_window_hours
        template = await self.template_repo.get_by_id(instance.template_id)
        return template.cancellation_window_hours if template else 0

    async def _award_cashback(self, booking: Booking) -> int:
        points = calculate_points_for_purchase(booking.final_price, self.cashback_rate)
        if points <= 0:
            return 0
        await self.points_service.add_points(
            booking.user_id,
            points,
            reason="booking_cashback",
            description=f"Cashback for booking {booking.id}",
            booking_id=booking.id,
            class_instance_id=booking.class_instance_id,
        )
        return points

    async def _release_seat(self, class_instance_id: str) -> None:
        instance = await self.instance_repo.get_by_id(class_instance_id, for_update=True)
        if instance and instance.booked_count > 0:
            await self.writer.patch(instance, {"booked_count": instance.booked_count - 1})
