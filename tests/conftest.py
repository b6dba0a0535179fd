"""Shared fixtures: an isolated SQLite database and test doubles for sessions."""

from __future__ import annotations

import os
import sys
import tempfile
from pathlib import Path

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

_TEST_DB_DIR = Path(tempfile.mkdtemp(prefix="notification-service-tests-"))
os.environ["DATABASE_URL"] = f"sqlite:///{_TEST_DB_DIR / 'test.db'}"
os.environ["KAFKA_ENABLED"] = "false"
os.environ["APP_TIMEZONE"] = "UTC"

from datetime import timedelta  # noqa: E402
from typing import Any  # noqa: E402

import pytest  # noqa: E402

from app.domain.entities import (  # noqa: E402
    Notification,
    NotificationPriority,
    NotificationType,
)
from app.domain.exceptions import DeliveryError  # noqa: E402
from app.infrastructure import database  # noqa: E402
from app.infrastructure.models import NotificationModel  # noqa: E402
from app.utils import ensure_naive_utc, now_utc  # noqa: E402


@pytest.fixture(autouse=True)
def clean_database():
    """Start every test with empty tables."""

    database.Base.metadata.drop_all(bind=database.engine)
    database.initialize_database()
    yield


@pytest.fixture()
def anyio_backend():
    return "asyncio"


@pytest.fixture()
def session_factory():
    return database.get_session_factory()


@pytest.fixture()
def db_session(session_factory):
    with session_factory() as session:
        yield session


def make_notification(
    user_id: str = "u1",
    *,
    type_: NotificationType = NotificationType.SYSTEM_ALERT,
    title: str = "System Notification",
    message: str = "Event: SYSTEM_ALERT",
    priority: NotificationPriority = NotificationPriority.MEDIUM,
    data: dict[str, Any] | None = None,
) -> Notification:
    return Notification(
        id=None,
        user_id=user_id,
        type=type_,
        title=title,
        message=message,
        data=data or {},
        priority=priority,
    )


def expire_notification(session, notification_id: str) -> None:
    """Move the expiry of a stored notification into the past."""

    model = session.query(NotificationModel).filter_by(id=notification_id).one()
    model.expires_at = ensure_naive_utc(now_utc() - timedelta(seconds=1))
    session.commit()


class RecordingSession:
    """Push target that keeps every message it receives."""

    def __init__(self, name: str = "session") -> None:
        self.name = name
        self.messages: list[dict[str, Any]] = []

    def send(self, message: dict[str, Any]) -> None:
        self.messages.append(message)

    def __repr__(self) -> str:
        return f"RecordingSession({self.name!r})"


class BrokenSession:
    """Push target whose connection is already gone."""

    def __init__(self) -> None:
        self.attempts = 0

    def send(self, message: dict[str, Any]) -> None:
        self.attempts += 1
        raise DeliveryError("connection closed")
