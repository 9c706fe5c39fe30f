"""Booking lifecycle state machine

Legal status transitions of a booking and what each one must trigger. The
table is the single source of truth for both the transition use case and the
booking notification classifier.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Dict, FrozenSet, Optional

from src.domain.errors import InvalidTransitionError
from src.domain.notification import NotificationType


class BookingStatus(str, Enum):
    AWAITING_APPROVAL = "awaiting_approval"
    PENDING = "pending"
    COMPLETED = "completed"
    NO_SHOW = "no_show"
    CANCELLED_BY_CONSUMER = "cancelled_by_consumer"
    CANCELLED_BY_BUSINESS = "cancelled_by_business"
    CANCELLED_BY_BUSINESS_REBOOKABLE = "cancelled_by_business_rebookable"
    REJECTED_BY_BUSINESS = "rejected_by_business"


class CancelledBy(str, Enum):
    CONSUMER = "consumer"
    BUSINESS = "business"


class MoneyEffect(str, Enum):
    """Money movement a transition requires"""
    NONE = "none"
    FULL_REFUND = "full_refund"          # Reverse the original booking debit
    POLICY_REFUND = "policy_refund"      # Refund decided by the cancellation-window policy
    POINTS_CASHBACK = "points_cashback"  # Award loyalty points, no credits move


@dataclass(frozen=True)
class TransitionRule:
    source: BookingStatus
    target: BookingStatus
    money: MoneyEffect
    notification: Optional[NotificationType] = None
    cancelled_by: Optional[CancelledBy] = None


ACTIVE_STATES: FrozenSet[BookingStatus] = frozenset({
    BookingStatus.AWAITING_APPROVAL,
    BookingStatus.PENDING,
})

TERMINAL_STATES: FrozenSet[BookingStatus] = frozenset(set(BookingStatus) - ACTIVE_STATES)

_RULES = (
    TransitionRule(
        BookingStatus.AWAITING_APPROVAL, BookingStatus.PENDING,
        MoneyEffect.NONE, NotificationType.BOOKING_APPROVED,
    ),
    TransitionRule(
        BookingStatus.AWAITING_APPROVAL, BookingStatus.REJECTED_BY_BUSINESS,
        MoneyEffect.FULL_REFUND, NotificationType.BOOKING_REJECTED,
    ),
    TransitionRule(
        BookingStatus.PENDING, BookingStatus.COMPLETED,
        MoneyEffect.POINTS_CASHBACK,
    ),
    TransitionRule(
        BookingStatus.PENDING, BookingStatus.CANCELLED_BY_CONSUMER,
        MoneyEffect.POLICY_REFUND, NotificationType.BOOKING_CANCELLED_BY_CONSUMER, CancelledBy.CONSUMER,
    ),
    TransitionRule(
        BookingStatus.PENDING, BookingStatus.CANCELLED_BY_BUSINESS,
        MoneyEffect.FULL_REFUND, NotificationType.BOOKING_CANCELLED_BY_BUSINESS, CancelledBy.BUSINESS,
    ),
    TransitionRule(
        BookingStatus.PENDING, BookingStatus.CANCELLED_BY_BUSINESS_REBOOKABLE,
        MoneyEffect.FULL_REFUND, NotificationType.CLASS_REBOOKABLE, CancelledBy.BUSINESS,
    ),
    TransitionRule(
        BookingStatus.PENDING, BookingStatus.NO_SHOW,
        MoneyEffect.NONE,
    ),
)

TRANSITIONS: Dict[BookingStatus, Dict[BookingStatus, TransitionRule]] = {}
for _rule in _RULES:
    TRANSITIONS.setdefault(_rule.source, {})[_rule.target] = _rule

# Notification sent when a booking is first created in a given state
INITIAL_NOTIFICATIONS: Dict[BookingStatus, NotificationType] = {
    BookingStatus.PENDING: NotificationType.BOOKING_CREATED,
    BookingStatus.AWAITING_APPROVAL: NotificationType.BOOKING_AWAITING_APPROVAL,
}


def initial_status(requires_confirmation: bool) -> BookingStatus:
    return BookingStatus.AWAITING_APPROVAL if requires_confirmation else BookingStatus.PENDING


def is_terminal(status: BookingStatus) -> bool:
    return status in TERMINAL_STATES


def allowed_targets(status: BookingStatus) -> FrozenSet[BookingStatus]:
    return frozenset(TRANSITIONS.get(status, {}))


def get_transition(current: BookingStatus, target: BookingStatus) -> TransitionRule:
    """Return the rule for current -> target or raise InvalidTransitionError"""
    rule = TRANSITIONS.get(current, {}).get(target)
    if rule is None:
        raise InvalidTransitionError(BookingStatus(current).value, BookingStatus(target).value)
    return rule
