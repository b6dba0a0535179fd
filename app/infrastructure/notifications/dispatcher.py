"""Push stored notifications and unread counters to connected sessions."""

from __future__ import annotations

import asyncio
import logging
import weakref
from typing import Any, Protocol

import anyio
from anyio import from_thread
from sqlalchemy.orm import Session, sessionmaker

from app.domain.entities import Notification
from app.domain.exceptions import DeliveryError, TransientIOError
from app.infrastructure.repositories import NotificationRepository

from .registry import PresenceRegistry

logger = logging.getLogger(__name__)

NEW_NOTIFICATION = "new_notification"
UNREAD_COUNT = "unread_count"


class PushTarget(Protocol):
    """Anything able to queue a message for one client."""

    def send(self, message: dict[str, Any]) -> None: ...


class NotificationDispatcher:
    """Deliver notifications to every live session of their owner.

    Delivery is best-effort: a failing session is logged and skipped, and no
    error ever travels back to the caller. Clients that miss a push recover the
    state through the HTTP API.

    ``publish`` and ``on_join`` run on the event loop. ``publish_unread_count``
    may also be called from worker threads (synchronous FastAPI endpoints).
    """

    def __init__(
        self,
        registry: PresenceRegistry,
        session_factory: sessionmaker[Session],
    ) -> None:
        self._registry = registry
        self._session_factory = session_factory
        self._count_locks: weakref.WeakValueDictionary[str, asyncio.Lock] = (
            weakref.WeakValueDictionary()
        )

    @property
    def registry(self) -> PresenceRegistry:
        return self._registry

    async def on_join(self, user_id: str, session: PushTarget) -> None:
        """Register ``session`` and send it the current unread counter."""

        self._registry.join(user_id, session)
        logger.info("User %s joined notification channel", user_id)
        # Held across read and push so a concurrent publish always pushes last.
        async with self._count_lock(user_id):
            try:
                count = await self.count_unread(user_id)
            except TransientIOError:
                logger.warning(
                    "Could not compute unread count for %s on join", user_id, exc_info=True
                )
                return
            self._push(session, {"type": UNREAD_COUNT, "data": count})

    def on_disconnect(self, session: PushTarget) -> None:
        user_id = self._registry.leave(session)
        if user_id is not None:
            logger.info("User %s left notification channel", user_id)

    async def publish(self, notification: Notification) -> None:
        """Push ``notification`` and the refreshed unread count to its user."""

        sessions = self._registry.sessions_for(notification.user_id)
        if not sessions:
            return

        message = {"type": NEW_NOTIFICATION, "data": serialize_notification(notification)}
        for session in sessions:
            self._push(session, message)

        async with self._count_lock(notification.user_id):
            try:
                count = await self.count_unread(notification.user_id)
            except TransientIOError:
                logger.warning(
                    "Could not refresh unread count for %s", notification.user_id, exc_info=True
                )
                return
            self.broadcast_unread_count(notification.user_id, count)
        logger.info(
            "Real-time notification %s sent to user %s (%d sessions)",
            notification.id,
            notification.user_id,
            len(sessions),
        )

    def broadcast_unread_count(self, user_id: str, count: int) -> None:
        """Send ``count`` to every session of ``user_id``. Event loop thread only."""

        message = {"type": UNREAD_COUNT, "data": count}
        for session in self._registry.sessions_for(user_id):
            self._push(session, message)

    def publish_unread_count(self, user_id: str, count: int) -> None:
        """Thread-safe variant of :meth:`broadcast_unread_count`."""

        if not self._registry.sessions_for(user_id):
            return
        try:
            asyncio.get_running_loop()
        except RuntimeError:
            try:
                from_thread.run_sync(self.broadcast_unread_count, user_id, count)
            except RuntimeError:
                logger.warning(
                    "No event loop available to push unread count for %s", user_id
                )
        else:
            self.broadcast_unread_count(user_id, count)

    async def count_unread(self, user_id: str) -> int:
        return await anyio.to_thread.run_sync(self._count_unread_sync, user_id)

    def _count_lock(self, user_id: str) -> asyncio.Lock:
        lock = self._count_locks.get(user_id)
        if lock is None:
            lock = asyncio.Lock()
            self._count_locks[user_id] = lock
        return lock

    def _count_unread_sync(self, user_id: str) -> int:
        with self._session_factory() as session:
            return NotificationRepository(session).count_unread(user_id)

    def _push(self, session: PushTarget, message: dict[str, Any]) -> None:
        try:
            session.send(message)
        except DeliveryError as exc:
            logger.warning("Skipping session %r: %s", session, exc.message)
        except Exception:
            logger.exception("Unexpected failure pushing to session %r", session)


def serialize_notification(notification: Notification) -> dict[str, Any]:
    """Return the websocket payload representation for ``notification``."""

    return {
        "id": notification.id,
        "type": notification.type.value,
        "title": notification.title,
        "message": notification.message,
        "priority": notification.priority.value,
        "createdAt": notification.created_at.isoformat()
        if notification.created_at
        else None,
        "data": notification.data or {},
    }


__all__ = [
    "NEW_NOTIFICATION",
    "UNREAD_COUNT",
    "NotificationDispatcher",
    "PushTarget",
    "serialize_notification",
]
