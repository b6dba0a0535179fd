"""Tests for the SQLAlchemy backed notification store."""

from __future__ import annotations

from concurrent.futures import ThreadPoolExecutor
from datetime import timedelta

import pytest

from app.domain.entities import NotificationPriority, NotificationType
from app.domain.exceptions import NotFoundError, ValidationError
from app.infrastructure.models import NotificationModel
from app.infrastructure.repositories import NotificationRepository
from app.utils import now_utc
from conftest import expire_notification, make_notification


def test_create_assigns_identity_and_retention_window(db_session) -> None:
    repository = NotificationRepository(db_session)

    stored = repository.create(
        make_notification(
            type_=NotificationType.USER_CREATED,
            title="Welcome to Marketplace!",
            message="Hello Ann! Your account has been successfully created.",
            priority=NotificationPriority.HIGH,
            data={"firstName": "Ann"},
        )
    )

    assert stored.id
    assert stored.read is False
    assert stored.priority is NotificationPriority.HIGH
    assert stored.data == {"firstName": "Ann"}
    assert stored.expires_at > stored.created_at
    assert stored.expires_at - stored.created_at == timedelta(days=30)


def test_create_generates_unique_ids(db_session) -> None:
    repository = NotificationRepository(db_session)

    ids = {repository.create(make_notification()).id for _ in range(5)}

    assert len(ids) == 5


@pytest.mark.parametrize("field", ["user_id", "title", "message"])
def test_create_rejects_incomplete_notifications(db_session, field: str) -> None:
    repository = NotificationRepository(db_session)
    notification = make_notification()
    setattr(notification, field, "")

    with pytest.raises(ValidationError):
        repository.create(notification)

    assert db_session.query(NotificationModel).count() == 0


def test_counts_match_number_of_created_notifications(db_session) -> None:
    repository = NotificationRepository(db_session)
    for _ in range(4):
        repository.create(make_notification("u1"))
    repository.create(make_notification("u2"))

    assert repository.stats("u1").total == 4
    assert repository.count_unread("u1") == 4
    assert repository.count_unread("u2") == 1


def test_list_returns_newest_first(db_session) -> None:
    repository = NotificationRepository(db_session)
    first = repository.create(make_notification(message="first"))
    second = repository.create(make_notification(message="second"))

    page = repository.list_for_user("u1")

    assert [item.id for item in page.items] == [second.id, first.id]


def test_listing_keeps_insertion_order_when_the_clock_steps_back(
    db_session, monkeypatch
) -> None:
    repository = NotificationRepository(db_session)
    first = repository.create(make_notification(title="first"))
    monkeypatch.setattr(
        "app.infrastructure.repositories.notification_repository.now_utc",
        lambda: first.created_at - timedelta(minutes=5),
    )

    second = repository.create(make_notification(title="second"))

    assert second.created_at >= first.created_at
    listed = repository.list_for_user("u1").items
    assert [item.title for item in listed] == ["second", "first"]


def test_list_paginates_and_reports_totals(db_session) -> None:
    repository = NotificationRepository(db_session)
    created = [repository.create(make_notification(message=f"n{i}")) for i in range(5)]

    page = repository.list_for_user("u1", page=2, page_size=2)

    assert page.total == 5
    assert page.pages == 3
    assert [item.message for item in page.items] == ["n2", "n1"]
    assert created[0].id not in {item.id for item in page.items}

    empty = repository.list_for_user("u1", page=4, page_size=2)
    assert empty.items == []
    assert empty.total == 5

    assert repository.list_for_user("nobody").items == []


def test_unread_only_listing_matches_unread_count(db_session) -> None:
    repository = NotificationRepository(db_session)
    notifications = [repository.create(make_notification()) for _ in range(3)]
    repository.mark_read(notifications[1].id)

    page = repository.list_for_user("u1", unread_only=True)

    assert page.total == repository.count_unread("u1") == 2
    assert all(not item.read for item in page.items)


def test_mark_read_is_idempotent(db_session) -> None:
    repository = NotificationRepository(db_session)
    notification = repository.create(make_notification())
    repository.create(make_notification())

    first = repository.mark_read(notification.id)
    assert first.read is True
    assert repository.count_unread("u1") == 1

    second = repository.mark_read(notification.id)
    assert second == first
    assert repository.count_unread("u1") == 1


def test_mark_read_unknown_notification(db_session) -> None:
    with pytest.raises(NotFoundError):
        NotificationRepository(db_session).mark_read("missing")


def test_mark_all_read_reports_changes_once(db_session) -> None:
    repository = NotificationRepository(db_session)
    for _ in range(3):
        repository.create(make_notification())
    repository.create(make_notification("u2"))

    assert repository.mark_all_read("u1") == 3
    assert repository.count_unread("u1") == 0
    assert repository.mark_all_read("u1") == 0
    assert repository.count_unread("u2") == 1


def test_delete_removes_notification(db_session) -> None:
    repository = NotificationRepository(db_session)
    notification = repository.create(make_notification())

    deleted = repository.delete(notification.id)

    assert deleted.id == notification.id
    assert repository.get(notification.id) is None
    with pytest.raises(NotFoundError):
        repository.delete(notification.id)


def test_stats_group_by_type(db_session) -> None:
    repository = NotificationRepository(db_session)
    welcome = repository.create(make_notification(type_=NotificationType.USER_CREATED))
    repository.create(make_notification(type_=NotificationType.USER_LOGGED_IN))
    repository.create(make_notification(type_=NotificationType.USER_LOGGED_IN))
    repository.mark_read(welcome.id)

    stats = repository.stats("u1")

    assert stats.total == 3
    assert stats.unread == 2
    by_type = {entry.type: (entry.count, entry.unread) for entry in stats.by_type}
    assert by_type == {"USER_CREATED": (1, 0), "USER_LOGGED_IN": (2, 2)}


def test_stats_for_unknown_user_are_empty(db_session) -> None:
    stats = NotificationRepository(db_session).stats("nobody")

    assert stats.total == 0
    assert stats.unread == 0
    assert stats.by_type == []


def test_expired_notifications_are_invisible(db_session) -> None:
    repository = NotificationRepository(db_session)
    live = repository.create(make_notification())
    expired = repository.create(make_notification())
    expire_notification(db_session, expired.id)

    page = repository.list_for_user("u1")

    assert [item.id for item in page.items] == [live.id]
    assert repository.count_unread("u1") == 1
    assert repository.stats("u1").total == 1
    assert repository.get(expired.id) is None
    with pytest.raises(NotFoundError):
        repository.mark_read(expired.id)


def test_purge_expired_removes_rows(db_session) -> None:
    repository = NotificationRepository(db_session)
    repository.create(make_notification())
    expired = repository.create(make_notification())
    expire_notification(db_session, expired.id)

    assert repository.purge_expired() == 1
    assert db_session.query(NotificationModel).count() == 1
    assert repository.purge_expired(now_utc() + timedelta(days=31)) == 1
    assert db_session.query(NotificationModel).count() == 0


def test_concurrent_mark_read_calls_all_succeed(session_factory) -> None:
    with session_factory() as session:
        notification = NotificationRepository(session).create(make_notification())

    def mark() -> bool:
        with session_factory() as session:
            return NotificationRepository(session).mark_read(notification.id).read

    with ThreadPoolExecutor(max_workers=4) as executor:
        results = list(executor.map(lambda _: mark(), range(8)))

    assert results == [True] * 8
    with session_factory() as session:
        assert NotificationRepository(session).count_unread("u1") == 0
