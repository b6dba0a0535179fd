"""Domain entities exposed by the application."""

from .notification import (
    Notification,
    NotificationPage,
    NotificationPriority,
    NotificationStats,
    NotificationType,
    NotificationTypeStats,
)

__all__ = [
    "Notification",
    "NotificationPage",
    "NotificationPriority",
    "NotificationStats",
    "NotificationType",
    "NotificationTypeStats",
]
