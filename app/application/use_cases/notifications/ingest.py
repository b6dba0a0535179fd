"""Turn bus events into stored notifications and hand them to the dispatcher."""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass, field
from typing import Any

import anyio
from sqlalchemy.orm import Session, sessionmaker

from app.domain.entities import Notification, NotificationType
from app.domain.exceptions import ValidationError
from app.infrastructure.notifications import NotificationDispatcher
from app.infrastructure.repositories import NotificationRepository

from .templates import render_event

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class UserEvent:
    """A decoded event with the fields every notification needs."""

    event_type: str
    user_id: str
    payload: dict[str, Any] = field(default_factory=dict)


def parse_event(raw: bytes | str | None) -> UserEvent | None:
    """Decode ``raw`` into a :class:`UserEvent`; return ``None`` when it is unusable."""

    if raw is None:
        logger.warning("Skipping empty event message")
        return None
    try:
        payload = json.loads(raw)
    except (TypeError, ValueError, UnicodeDecodeError):
        logger.warning("Skipping event that is not valid JSON: %.200r", raw)
        return None
    if not isinstance(payload, dict):
        logger.warning("Skipping event that is not a JSON object: %.200r", payload)
        return None

    event_type = payload.get("eventType")
    user_id = payload.get("userId")
    if not isinstance(event_type, str) or not event_type.strip():
        logger.warning("Skipping event without eventType: %.200r", payload)
        return None
    if user_id is None or isinstance(user_id, (dict, list, bool)) or not str(user_id).strip():
        logger.warning("Skipping %s event without userId", event_type)
        return None
    return UserEvent(event_type=event_type.strip(), user_id=str(user_id).strip(), payload=payload)


def build_notification(event: UserEvent) -> Notification:
    """Render the notification for ``event`` without persisting it."""

    payload = {**event.payload, "eventType": event.event_type}
    template = render_event(payload)
    return Notification(
        id=None,
        user_id=event.user_id,
        type=NotificationType.from_event_type(event.event_type),
        title=template.title,
        message=template.message,
        data=payload,
        priority=template.priority,
    )


class NotificationIngestor:
    """Process one raw bus message at a time.

    :meth:`handle` returns the stored notification, or ``None`` when the message
    was skipped. Store outages raise :class:`TransientIOError` so the caller can
    keep the message uncommitted and retry it.
    """

    def __init__(
        self,
        session_factory: sessionmaker[Session],
        dispatcher: NotificationDispatcher | None = None,
    ) -> None:
        self._session_factory = session_factory
        self._dispatcher = dispatcher

    async def handle(self, raw: bytes | str | None) -> Notification | None:
        event = parse_event(raw)
        if event is None:
            return None
        logger.info("Received %s event for user %s", event.event_type, event.user_id)

        notification = build_notification(event)
        try:
            stored = await anyio.to_thread.run_sync(self._store, notification)
        except ValidationError as exc:
            logger.warning("Discarding %s event: %s", event.event_type, exc.message)
            return None
        logger.info(
            "Notification created: id=%s user=%s type=%s",
            stored.id,
            stored.user_id,
            stored.type.value,
        )

        if self._dispatcher is not None:
            await self._dispatcher.publish(stored)
        return stored

    def _store(self, notification: Notification) -> Notification:
        with self._session_factory() as session:
            return NotificationRepository(session).create(notification)


__all__ = ["NotificationIngestor", "UserEvent", "build_notification", "parse_event"]
