from .unit_of_work import UnitOfWork
from .entity_writer import EntityWriter
from .follow_up_scheduler import FollowUpScheduler
from .notification_service import NotificationDispatcher
from .oracles import GeocodingOracle, ModerationOracle
from .refund_policy import RefundPolicy

__all__ = [
    "UnitOfWork",
    "EntityWriter",
    "FollowUpScheduler",
    "NotificationDispatcher",
    "GeocodingOracle",
    "ModerationOracle",
    "RefundPolicy",
]
