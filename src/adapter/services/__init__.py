from .unit_of_work import SqlAlchemyUnitOfWork
from .entity_writer import SqlAlchemyEntityWriter
from .follow_up_scheduler import SqlAlchemyOutboxScheduler
from .notification_service import (
    LoggingNotificationDispatcher,
    WebhookNotificationDispatcher,
    AuditedNotificationDispatcher,
    create_notification_dispatcher,
)
from .oracles import AutoApproveModerationOracle, HttpGeocodingOracle, NullGeocodingOracle, create_geocoding_oracle
from .refund_policy import CancellationWindowRefundPolicy

__all__ = [
    "SqlAlchemyUnitOfWork",
    "SqlAlchemyEntityWriter",
    "SqlAlchemyOutboxScheduler",
    "LoggingNotificationDispatcher",
    "WebhookNotificationDispatcher",
    "AuditedNotificationDispatcher",
    "create_notification_dispatcher",
    "AutoApproveModerationOracle",
    "HttpGeocodingOracle",
    "NullGeocodingOracle",
    "create_geocoding_oracle",
    "CancellationWindowRefundPolicy",
]
