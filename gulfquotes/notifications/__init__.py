"""In-app notifications and follower email fan-out.

Note: Router is not exported here to avoid circular imports.
Import directly from gulfquotes.notifications.router when needed.
"""

from .dispatcher import NotificationEmailDispatcher
from .models import NOTIFICATIONS_TABLES_CQL, Notification, NotificationType
from .service import NotificationService


__all__ = [
    "NOTIFICATIONS_TABLES_CQL",
    "Notification",
    "NotificationEmailDispatcher",
    "NotificationService",
    "NotificationType",
]
