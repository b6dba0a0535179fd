from .notification import (
    HealthResponse,
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
