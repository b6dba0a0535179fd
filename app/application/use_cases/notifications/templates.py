"""Title, message and priority rendering for incoming user events."""

from __future__ import annotations

from collections.abc import Callable, Mapping
from dataclasses import dataclass
from typing import Any

from app.domain.entities import NotificationPriority, NotificationType
from app.utils import now_utc, parse_timestamp, to_app_timezone

_TIMESTAMP_FORMAT = "%Y-%m-%d %H:%M:%S %Z"


@dataclass(frozen=True)
class NotificationTemplate:
    """Human readable content derived from one event."""

    title: str
    message: str
    priority: NotificationPriority


EventRenderer = Callable[[Mapping[str, Any]], NotificationTemplate]


def _render_user_created(event: Mapping[str, Any]) -> NotificationTemplate:
    first_name = str(event.get("firstName") or "").strip() or "there"
    return NotificationTemplate(
        title="Welcome to Marketplace!",
        message=f"Hello {first_name}! Your account has been successfully created.",
        priority=NotificationPriority.HIGH,
    )


def _render_user_logged_in(event: Mapping[str, Any]) -> NotificationTemplate:
    logged_at = parse_timestamp(event.get("timestamp")) or now_utc()
    rendered = to_app_timezone(logged_at).strftime(_TIMESTAMP_FORMAT)
    return NotificationTemplate(
        title="Login Detected",
        message=f"You logged into your account at {rendered}.",
        priority=NotificationPriority.LOW,
    )


def _render_generic(event: Mapping[str, Any]) -> NotificationTemplate:
    return NotificationTemplate(
        title="System Notification",
        message=f"Event: {event.get('eventType')}",
        priority=NotificationPriority.MEDIUM,
    )


EVENT_TEMPLATES: dict[str, EventRenderer] = {
    NotificationType.USER_CREATED.value: _render_user_created,
    NotificationType.USER_LOGGED_IN.value: _render_user_logged_in,
}


def render_event(event: Mapping[str, Any]) -> NotificationTemplate:
    """Render ``event`` with its registered template, or the generic one."""

    renderer = EVENT_TEMPLATES.get(str(event.get("eventType")), _render_generic)
    return renderer(event)


__all__ = ["EVENT_TEMPLATES", "EventRenderer", "NotificationTemplate", "render_event"]
