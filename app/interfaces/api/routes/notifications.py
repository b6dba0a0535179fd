"""Query and mutation endpoints for stored notifications."""

from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.orm import Session

from app.domain.entities import Notification
from app.domain.exceptions import NotFoundError
from app.infrastructure.database import get_db
from app.infrastructure.notifications import NotificationDispatcher
from app.infrastructure.repositories import NotificationRepository
from app.interfaces.api.dependencies import get_dispatcher
from app.interfaces.api.schemas import (
    NotificationDeleteResponse,
    NotificationListResponse,
    NotificationMarkAllReadResponse,
    NotificationMarkReadResponse,
    NotificationRead,
    NotificationStatsOverview,
    NotificationStatsResponse,
    NotificationTypeStatsRead,
    Pagination,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/notifications", tags=["notifications"])


def _notification_to_schema(notification: Notification) -> NotificationRead:
    return NotificationRead(
        id=notification.id or "",
        user_id=notification.user_id,
        type=notification.type.value,
        title=notification.title,
        message=notification.message,
        data=notification.data or {},
        read=notification.read,
        priority=notification.priority.value,
        created_at=notification.created_at,
        expires_at=notification.expires_at,
    )


@router.get("/{user_id}", response_model=NotificationListResponse)
def list_notifications(
    user_id: str,
    page: int = Query(default=1, ge=1),
    limit: int = Query(default=20, ge=1),
    unread_only: bool = Query(default=False, alias="unreadOnly"),
    db: Session = Depends(get_db),
) -> NotificationListResponse:
    """Return one page of the user's notifications, newest first."""

    repository = NotificationRepository(db)
    result = repository.list_for_user(
        user_id, page=page, page_size=limit, unread_only=unread_only
    )
    unread_count = repository.count_unread(user_id)
    logger.info("Found %d notifications for user %s", len(result.items), user_id)
    return NotificationListResponse(
        notifications=[_notification_to_schema(item) for item in result.items],
        pagination=Pagination(
            page=result.page, limit=result.page_size, total=result.total, pages=result.pages
        ),
        unread_count=unread_count,
    )


@router.patch("/{notification_id}/read", response_model=NotificationMarkReadResponse)
def mark_notification_read(
    notification_id: str,
    db: Session = Depends(get_db),
    dispatcher: NotificationDispatcher = Depends(get_dispatcher),
) -> NotificationMarkReadResponse:
    """Mark a single notification as read. Already read notifications are left untouched."""

    repository = NotificationRepository(db)
    try:
        notification = repository.mark_read(notification_id)
    except NotFoundError as exc:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=exc.message) from exc

    unread_count = repository.count_unread(notification.user_id)
    dispatcher.publish_unread_count(notification.user_id, unread_count)
    return NotificationMarkReadResponse(
        message="Notification marked as read",
        notification=_notification_to_schema(notification),
        unread_count=unread_count,
    )


@router.patch("/{user_id}/read-all", response_model=NotificationMarkAllReadResponse)
def mark_all_notifications_read(
    user_id: str,
    db: Session = Depends(get_db),
    dispatcher: NotificationDispatcher = Depends(get_dispatcher),
) -> NotificationMarkAllReadResponse:
    """Mark every unread notification of ``user_id`` as read."""

    modified = NotificationRepository(db).mark_all_read(user_id)
    logger.info("Marked %d notifications as read for user %s", modified, user_id)
    dispatcher.publish_unread_count(user_id, 0)
    return NotificationMarkAllReadResponse(
        message="All notifications marked as read",
        modified_count=modified,
        unread_count=0,
    )


@router.delete("/{notification_id}", response_model=NotificationDeleteResponse)
def delete_notification(
    notification_id: str,
    db: Session = Depends(get_db),
    dispatcher: NotificationDispatcher = Depends(get_dispatcher),
) -> NotificationDeleteResponse:
    repository = NotificationRepository(db)
    try:
        deleted = repository.delete(notification_id)
    except NotFoundError as exc:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=exc.message) from exc

    unread_count = repository.count_unread(deleted.user_id)
    dispatcher.publish_unread_count(deleted.user_id, unread_count)
    return NotificationDeleteResponse(message="Notification deleted", unread_count=unread_count)


@router.get("/{user_id}/stats", response_model=NotificationStatsResponse)
def notification_stats(
    user_id: str,
    db: Session = Depends(get_db),
) -> NotificationStatsResponse:
    stats = NotificationRepository(db).stats(user_id)
    return NotificationStatsResponse(
        overview=NotificationStatsOverview(total=stats.total, unread=stats.unread),
        by_type=[
            NotificationTypeStatsRead(type=entry.type, count=entry.count, unread=entry.unread)
            for entry in stats.by_type
        ],
    )
