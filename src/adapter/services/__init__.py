from .unit_of_work import SqlAlchemyUnitOfWork
from .notification_service import (
    CompositeNotificationService,
    LoggingNotificationService,
    WebhookNotificationService,
    create_notification_service,
)

__all__ = [
    "SqlAlchemyUnitOfWork",
    "CompositeNotificationService",
    "LoggingNotificationService",
    "WebhookNotificationService",
    "create_notification_service",
]
