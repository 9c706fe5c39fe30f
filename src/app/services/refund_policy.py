"""Refund Policy Interface"""

from abc import ABC, abstractmethod
from datetime import datetime
from decimal import Decimal
from typing import Optional
from src.domain.booking_status import CancelledBy


class RefundPolicy(ABC):
    """Decides how many of the paid credits go back on a cancellation"""

    @abstractmethod
    def refund_credits(
        self,
        credits_paid: Decimal,
        cancelled_by: CancelledBy,
        class_start: Optional[datetime],
        cancellation_window_hours: int,
        now: datetime,
    ) -> Decimal:
        """
        Credits to return to the consumer

        Args:
            credits_paid: Credits debited when booking
            cancelled_by: Who cancelled
            class_start: Start time of the class instance
            cancellation_window_hours: Hours before start after which a consumer
                cancellation is late
            now: Cancellation time

        Returns:
            Refund amount, 0 <= refund <= credits_paid
        """
        pass
