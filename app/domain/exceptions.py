"""Errors raised by the notification domain and its adapters."""

from __future__ import annotations


class NotificationError(Exception):
    """Base class for notification service errors."""

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class ValidationError(NotificationError):
    """A notification could not be created because its input is incomplete."""


class NotFoundError(NotificationError):
    """The requested notification does not exist or has expired."""


class TransientIOError(NotificationError):
    """The store or the message bus is temporarily unreachable."""


class DeliveryError(NotificationError):
    """A push to a single client session failed."""


__all__ = [
    "DeliveryError",
    "NotFoundError",
    "NotificationError",
    "TransientIOError",
    "ValidationError",
]
