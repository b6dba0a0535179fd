"""Aggregate application use cases."""

from .notifications import NotificationIngestor, purge_expired_notifications

__all__ = [
    "NotificationIngestor",
    "purge_expired_notifications",
]
