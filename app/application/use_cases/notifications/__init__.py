"""Use cases around the notification lifecycle."""

from .ingest import NotificationIngestor, UserEvent, build_notification, parse_event
from .retention import purge_expired_notifications, run_retention_reaper
from .templates import EVENT_TEMPLATES, NotificationTemplate, render_event

__all__ = [
    "EVENT_TEMPLATES",
    "NotificationIngestor",
    "NotificationTemplate",
    "UserEvent",
    "build_notification",
    "parse_event",
    "purge_expired_notifications",
    "render_event",
    "run_retention_reaper",
]
