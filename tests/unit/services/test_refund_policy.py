"""Unit tests for the cancellation-window refund policy"""

from datetime import datetime, timedelta
from decimal import Decimal
from src.adapter.services.refund_policy import CancellationWindowRefundPolicy
from src.domain.booking_status import CancelledBy

START = datetime(2024, 6, 2, 18, 0, 0)


class TestCancellationWindowRefundPolicy:

    def setup_method(self):
        self.policy = CancellationWindowRefundPolicy(late_refund_rate=0.5)

    def test_business_cancellation_refunds_everything(self):
        refund = self.policy.refund_credits(
            Decimal("25"), CancelledBy.BUSINESS, START, 24, START - timedelta(minutes=5)
        )
        assert refund == Decimal("25")

    def test_early_consumer_cancellation_refunds_everything(self):
        refund = self.policy.refund_credits(
            Decimal("25"), CancelledBy.CONSUMER, START, 24, START - timedelta(hours=30)
        )
        assert refund == Decimal("25")

    def test_late_consumer_cancellation_refunds_rate_rounded_up(self):
        refund = self.policy.refund_credits(
            Decimal("25"), CancelledBy.CONSUMER, START, 24, START - timedelta(hours=2)
        )
        assert refund == Decimal("13")

    def test_zero_window_is_never_late_before_start(self):
        refund = self.policy.refund_credits(
            Decimal("10"), CancelledBy.CONSUMER, START, 0, START - timedelta(minutes=1)
        )
        assert refund == Decimal("10")

    def test_refund_never_exceeds_paid(self):
        policy = CancellationWindowRefundPolicy(late_refund_rate=2)
        refund = policy.refund_credits(Decimal("3"), CancelledBy.CONSUMER, START, 24, START)
        assert refund == Decimal("3")
