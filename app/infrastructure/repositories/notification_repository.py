"""Persistence helpers for notification entities."""

from __future__ import annotations

import uuid
from collections.abc import Iterator
from contextlib import contextmanager
from datetime import datetime, timedelta

from sqlalchemy import case, func
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Query, Session

from app.config import get_settings
from app.domain.entities import (
    Notification,
    NotificationPage,
    NotificationPriority,
    NotificationStats,
    NotificationType,
    NotificationTypeStats,
)
from app.domain.exceptions import NotFoundError, TransientIOError, ValidationError
from app.infrastructure.models import NotificationModel
from app.utils import ensure_naive_utc, ensure_utc, now_utc

_REQUIRED_FIELDS = ("user_id", "type", "title", "message")


class NotificationRepository:
    """Provide CRUD and aggregate operations for :class:`Notification` objects.

    Every read ignores notifications whose ``expires_at`` is in the past, so an
    expired record behaves as deleted even before :meth:`purge_expired` removes it.
    Database failures are reported as :class:`TransientIOError`.
    """

    def __init__(self, session: Session, *, retention: timedelta | None = None) -> None:
        self.session = session
        if retention is None:
            retention = timedelta(days=get_settings().notification_retention_days)
        self.retention = retention

    def create(self, notification: Notification) -> Notification:
        missing = [name for name in _REQUIRED_FIELDS if not getattr(notification, name)]
        if missing:
            raise ValidationError(f"Missing required fields: {', '.join(missing)}")
        try:
            notification_type = NotificationType(notification.type)
            priority = NotificationPriority(notification.priority)
        except ValueError as exc:
            raise ValidationError(str(exc)) from exc

        created_at = now_utc()
        with self._guard("create notification"):
            latest = (
                self.session.query(func.max(NotificationModel.created_at))
                .filter(NotificationModel.user_id == notification.user_id)
                .scalar()
            )
            # Never older than the user's newest row, even if the clock steps back.
            if latest is not None and ensure_utc(latest) > created_at:
                created_at = ensure_utc(latest)
            model = NotificationModel(
                id=str(uuid.uuid4()),
                user_id=notification.user_id,
                type=notification_type.value,
                title=notification.title,
                message=notification.message,
                data=notification.data or {},
                read=False,
                priority=priority.value,
                created_at=ensure_naive_utc(created_at),
                expires_at=ensure_naive_utc(created_at + self.retention),
            )
            self.session.add(model)
            self.session.commit()
            self.session.refresh(model)
        return self._to_entity(model)

    def get(self, notification_id: str) -> Notification | None:
        with self._guard("load notification"):
            model = self._get_live_model(notification_id)
        return self._to_entity(model) if model is not None else None

    def list_for_user(
        self,
        user_id: str,
        *,
        page: int = 1,
        page_size: int = 20,
        unread_only: bool = False,
    ) -> NotificationPage:
        page = max(page, 1)
        page_size = max(page_size, 1)
        with self._guard("list notifications"):
            query = self._live_query().filter(NotificationModel.user_id == user_id)
            if unread_only:
                query = query.filter(NotificationModel.read.is_(False))
            total = query.count()
            models = (
                query.order_by(
                    NotificationModel.created_at.desc(), NotificationModel.sequence.desc()
                )
                .offset((page - 1) * page_size)
                .limit(page_size)
                .all()
            )
        return NotificationPage(
            items=[self._to_entity(model) for model in models],
            total=total,
            page=page,
            page_size=page_size,
        )

    def count_unread(self, user_id: str) -> int:
        with self._guard("count unread notifications"):
            return (
                self._live_query()
                .filter(NotificationModel.user_id == user_id)
                .filter(NotificationModel.read.is_(False))
                .count()
            )

    def mark_read(self, notification_id: str) -> Notification:
        """Flag the notification as read; already read notifications are returned as is."""

        with self._guard("mark notification as read"):
            model = self._get_live_model(notification_id)
            if model is None:
                raise NotFoundError("Notification not found")
            if not model.read:
                # Conditional update so concurrent callers cannot flip the flag twice.
                self.session.query(NotificationModel).filter(
                    NotificationModel.sequence == model.sequence,
                    NotificationModel.read.is_(False),
                ).update({NotificationModel.read: True}, synchronize_session=False)
                self.session.commit()
                self.session.refresh(model)
        return self._to_entity(model)

    def mark_all_read(self, user_id: str) -> int:
        with self._guard("mark all notifications as read"):
            modified = (
                self._live_query()
                .filter(NotificationModel.user_id == user_id)
                .filter(NotificationModel.read.is_(False))
                .update({NotificationModel.read: True}, synchronize_session=False)
            )
            self.session.commit()
        return int(modified or 0)

    def delete(self, notification_id: str) -> Notification:
        """Remove the notification and return the deleted record."""

        with self._guard("delete notification"):
            model = self._get_live_model(notification_id)
            if model is None:
                raise NotFoundError("Notification not found")
            deleted = self._to_entity(model)
            self.session.delete(model)
            self.session.commit()
        return deleted

    def stats(self, user_id: str) -> NotificationStats:
        unread_expr = func.sum(case((NotificationModel.read.is_(False), 1), else_=0))
        with self._guard("aggregate notification stats"):
            rows = (
                self.session.query(
                    NotificationModel.type,
                    func.count(NotificationModel.sequence),
                    unread_expr,
                )
                .filter(NotificationModel.user_id == user_id)
                .filter(NotificationModel.expires_at > ensure_naive_utc(now_utc()))
                .group_by(NotificationModel.type)
                .order_by(NotificationModel.type)
                .all()
            )
        by_type = [
            NotificationTypeStats(type=type_, count=int(count), unread=int(unread or 0))
            for type_, count, unread in rows
        ]
        return NotificationStats(
            total=sum(entry.count for entry in by_type),
            unread=sum(entry.unread for entry in by_type),
            by_type=by_type,
        )

    def purge_expired(self, now: datetime | None = None) -> int:
        """Physically delete every notification whose retention window has passed."""

        cutoff = ensure_naive_utc(now or now_utc())
        with self._guard("purge expired notifications"):
            removed = (
                self.session.query(NotificationModel)
                .filter(NotificationModel.expires_at <= cutoff)
                .delete(synchronize_session=False)
            )
            self.session.commit()
        return int(removed or 0)

    def _live_query(self) -> Query:
        return self.session.query(NotificationModel).filter(
            NotificationModel.expires_at > ensure_naive_utc(now_utc())
        )

    def _get_live_model(self, notification_id: str) -> NotificationModel | None:
        return (
            self._live_query().filter(NotificationModel.id == notification_id).one_or_none()
        )

    @contextmanager
    def _guard(self, action: str) -> Iterator[None]:
        try:
            yield
        except SQLAlchemyError as exc:
            self.session.rollback()
            raise TransientIOError(f"Could not {action}") from exc

    @staticmethod
    def _to_entity(model: NotificationModel) -> Notification:
        return Notification(
            id=model.id,
            user_id=model.user_id,
            type=NotificationType(model.type),
            title=model.title,
            message=model.message,
            data=model.data or {},
            read=bool(model.read),
            priority=NotificationPriority(model.priority),
            created_at=ensure_utc(model.created_at),
            expires_at=ensure_utc(model.expires_at),
        )


__all__ = ["NotificationRepository"]
