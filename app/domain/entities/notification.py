"""Domain entity representing a user notification."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any


class NotificationType(str, Enum):
    """Closed set of notification kinds stored by the service."""

    USER_CREATED = "USER_CREATED"
    USER_LOGGED_IN = "USER_LOGGED_IN"
    FUND_CREATED = "FUND_CREATED"
    INVESTMENT_MADE = "INVESTMENT_MADE"
    SYSTEM_ALERT = "SYSTEM_ALERT"

    @classmethod
    def from_event_type(cls, event_type: str) -> "NotificationType":
        """Return the member matching ``event_type`` or ``SYSTEM_ALERT``."""

        try:
            return cls(event_type)
        except ValueError:
            return cls.SYSTEM_ALERT


class NotificationPriority(str, Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    URGENT = "urgent"


@dataclass
class Notification:
    """Information message delivered to a specific user."""

    id: str | None
    user_id: str
    type: NotificationType
    title: str
    message: str
    data: dict[str, Any] = field(default_factory=dict)
    read: bool = False
    priority: NotificationPriority = NotificationPriority.MEDIUM
    created_at: datetime | None = None
    expires_at: datetime | None = None


@dataclass(frozen=True)
class NotificationPage:
    """One page of a user's notifications plus the size of the full result."""

    items: list[Notification]
    total: int
    page: int
    page_size: int

    @property
    def pages(self) -> int:
        if self.page_size <= 0:
            return 0
        return -(-self.total // self.page_size)


@dataclass(frozen=True)
class NotificationTypeStats:
    type: str
    count: int
    unread: int


@dataclass(frozen=True)
class NotificationStats:
    """Aggregated counters for a user's live notifications."""

    total: int
    unread: int
    by_type: list[NotificationTypeStats] = field(default_factory=list)


__all__ = [
    "Notification",
    "NotificationPage",
    "NotificationPriority",
    "NotificationStats",
    "NotificationType",
    "NotificationTypeStats",
]
