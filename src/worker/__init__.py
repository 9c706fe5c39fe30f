"""Background workers for the booking core"""
from .balance_reconciler import BalanceReconcilerWorker
from .outbox_processor import OutboxProcessorWorker
from .subscription_allocation import SubscriptionAllocationWorker

__all__ = ["BalanceReconcilerWorker", "OutboxProcessorWorker", "SubscriptionAllocationWorker"]
