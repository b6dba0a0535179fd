"""Realtime notification helpers for the infrastructure layer."""

from .dispatcher import (
    NEW_NOTIFICATION,
    UNREAD_COUNT,
    NotificationDispatcher,
    PushTarget,
    serialize_notification,
)
from .registry import PresenceRegistry
from .session import ClientSession

__all__ = [
    "NEW_NOTIFICATION",
    "UNREAD_COUNT",
    "ClientSession",
    "NotificationDispatcher",
    "PresenceRegistry",
    "PushTarget",
    "serialize_notification",
]
