"""Service health endpoint."""

from __future__ import annotations

from fastapi import APIRouter, Depends

from app.config import get_settings
from app.infrastructure.database import check_database
from app.infrastructure.events import KafkaEventConsumer
from app.infrastructure.notifications import NotificationDispatcher
from app.interfaces.api.dependencies import get_dispatcher, get_event_consumer
from app.interfaces.api.schemas import HealthResponse

router = APIRouter(tags=["health"])


@router.get("/health", response_model=HealthResponse)
def health(
    dispatcher: NotificationDispatcher = Depends(get_dispatcher),
    consumer: KafkaEventConsumer | None = Depends(get_event_consumer),
) -> HealthResponse:
    if consumer is None:
        kafka_status = "disabled"
    else:
        kafka_status = "connected" if consumer.connected else "disconnected"
    return HealthResponse(
        status="ok",
        service=get_settings().kafka_client_id,
        database="connected" if check_database() else "disconnected",
        kafka=kafka_status,
        websocket="active",
        connected_clients=dispatcher.registry.connected_count(),
    )
