"""Pydantic models describing notification payloads."""

from __future__ import annotations

from datetime import datetime
from typing import Any

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    """Base model serialized with camelCase keys."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class NotificationRead(CamelModel):
    """Representation of a notification delivered to the client."""

    id: str
    user_id: str
    type: str
    title: str
    message: str
    data: dict[str, Any] = Field(default_factory=dict)
    read: bool
    priority: str
    created_at: datetime
    expires_at: datetime


class Pagination(CamelModel):
    page: int
    limit: int
    total: int
    pages: int


class NotificationListResponse(CamelModel):
    notifications: list[NotificationRead]
    pagination: Pagination
    unread_count: int


class NotificationMarkReadResponse(CamelModel):
    message: str
    notification: NotificationRead
    unread_count: int


class NotificationMarkAllReadResponse(CamelModel):
    message: str
    modified_count: int
    unread_count: int = 0


class NotificationDeleteResponse(CamelModel):
    message: str
    unread_count: int


class NotificationStatsOverview(CamelModel):
    total: int
    unread: int


class NotificationTypeStatsRead(CamelModel):
    type: str
    count: int
    unread: int


class NotificationStatsResponse(CamelModel):
    overview: NotificationStatsOverview
    by_type: list[NotificationTypeStatsRead]


class HealthResponse(CamelModel):
    status: str
    service: str
    database: str
    kafka: str
    websocket: str
    connected_clients: int


__all__ = [
    "HealthResponse",
    "NotificationDeleteResponse",
    "NotificationListResponse",
    "NotificationMarkAllReadResponse",
    "NotificationMarkReadResponse",
    "NotificationRead",
    "NotificationStatsOverview",
    "NotificationStatsResponse",
    "NotificationTypeStatsRead",
    "Pagination",
]
