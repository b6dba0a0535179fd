import asyncio
import logging
from contextlib import asynccontextmanager, suppress

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from app.application.use_cases.notifications import (
    NotificationIngestor,
    run_retention_reaper,
)
from app.config import get_settings
from app.infrastructure import database
from app.infrastructure.events import KafkaEventConsumer
from app.infrastructure.notifications import NotificationDispatcher, PresenceRegistry
from app.interfaces.api.errors import register_error_handlers
from app.interfaces.api.routes import register_routes
from app.logging_config import configure_logging

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Prepare the store, the realtime dispatcher and the event consumer."""

    settings = get_settings()
    configure_logging(settings.log_level)
    database.initialize_database()
    session_factory = database.get_session_factory()

    dispatcher = NotificationDispatcher(
        PresenceRegistry(settings.presence_shard_count), session_factory
    )
    ingestor = NotificationIngestor(session_factory, dispatcher)
    consumer = None
    if settings.kafka_enabled:
        consumer = KafkaEventConsumer.from_settings(ingestor.handle, settings)
        consumer.start()
    else:
        logger.warning("Kafka consumption disabled; only the HTTP API is served")

    reaper = asyncio.get_running_loop().create_task(
        run_retention_reaper(
            session_factory,
            interval_seconds=settings.notification_purge_interval_seconds,
        ),
        name="notification-retention-reaper",
    )

    app.state.dispatcher = dispatcher
    app.state.ingestor = ingestor
    app.state.event_consumer = consumer
    logger.info("Notification service ready")
    try:
        yield
    finally:
        reaper.cancel()
        with suppress(asyncio.CancelledError):
            await reaper
        if consumer is not None:
            await consumer.stop()
        database.engine.dispose()
        logger.info("Graceful shutdown completed")


def create_app() -> FastAPI:
    """Create and configure the FastAPI application."""

    app = FastAPI(title="Notification Service", lifespan=lifespan)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=get_settings().cors_origins,
        allow_credentials=False,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    register_error_handlers(app)
    register_routes(app)
    return app


app = create_app()
