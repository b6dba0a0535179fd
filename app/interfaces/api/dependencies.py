"""FastAPI dependency utilities."""

from fastapi import HTTPException, Request, status

from app.infrastructure.events import KafkaEventConsumer
from app.infrastructure.notifications import NotificationDispatcher


def get_dispatcher(request: Request) -> NotificationDispatcher:
    """Return the dispatcher created by the application lifespan."""

    dispatcher = getattr(request.app.state, "dispatcher", None)
    if dispatcher is None:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Notification dispatcher is not running",
        )
    return dispatcher


def get_event_consumer(request: Request) -> KafkaEventConsumer | None:
    """Return the Kafka consumer, or ``None`` when consumption is disabled."""

    return getattr(request.app.state, "event_consumer", None)
