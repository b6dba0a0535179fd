"""Background removal of notifications past their retention window."""

from __future__ import annotations

import asyncio
import logging

import anyio
from sqlalchemy.orm import Session, sessionmaker

from app.domain.exceptions import TransientIOError
from app.infrastructure.repositories import NotificationRepository

logger = logging.getLogger(__name__)


def purge_expired_notifications(session_factory: sessionmaker[Session]) -> int:
    """Delete expired notifications and return how many were removed."""

    with session_factory() as session:
        removed = NotificationRepository(session).purge_expired()
    if removed:
        logger.info("Purged %d expired notifications", removed)
    return removed


async def run_retention_reaper(
    session_factory: sessionmaker[Session], *, interval_seconds: float
) -> None:
    """Purge expired notifications every ``interval_seconds`` until cancelled."""

    while True:
        try:
            await anyio.to_thread.run_sync(purge_expired_notifications, session_factory)
        except TransientIOError:
            logger.warning("Expired notification purge failed; will retry", exc_info=True)
        await asyncio.sleep(interval_seconds)


__all__ = ["purge_expired_notifications", "run_retention_reaper"]
