from .unit_of_work import UnitOfWork
from .notification_service import NotificationService
from .execution_guard import ExecutionGuard

__all__ = [
    "UnitOfWork",
    "NotificationService",
    "ExecutionGuard",
]
