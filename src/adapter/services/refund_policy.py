"""Cancellation-window Refund Policy"""

import math
from datetime import datetime, timedelta
from decimal import Decimal
from typing import Optional
from src.app.services.refund_policy import RefundPolicy
from src.domain.booking_status import CancelledBy


class CancellationWindowRefundPolicy(RefundPolicy):
    """
    Business cancellations always refund in full. A consumer cancelling
    inside the cancellation window (later than start - window hours) gets
    late_refund_rate of the credits back, rounded up to a whole credit;
    earlier cancellations refund in full.
    """

    def __init__(self, late_refund_rate: float = 0.5):
        self.late_refund_rate = Decimal(str(late_refund_rate))

    def is_late(self, class_start: Optional[datetime], cancellation_window_hours: int, now: datetime) -> bool:
        if class_start is None:
            return False
        return now > class_start - timedelta(hours=cancellation_window_hours or 0)

    def refund_credits(
        self,
        credits_paid: Decimal,
        cancelled_by: CancelledBy,
        class_start: Optional[datetime],
        cancellation_window_hours: int,
        now: datetime,
    ) -> Decimal:
        credits_paid = Decimal(str(credits_paid))
        if cancelled_by == CancelledBy.BUSINESS:
            return credits_paid
        if not self.is_late(class_start, cancellation_window_hours, now):
            return credits_paid
        refund = Decimal(math.ceil(credits_paid * self.late_refund_rate))
        return min(refund, credits_paid)
