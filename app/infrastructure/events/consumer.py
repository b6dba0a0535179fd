"""Kafka consumer feeding user events into the notification pipeline."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Awaitable, Callable
from typing import Any

from aiokafka import AIOKafkaConsumer, TopicPartition
from aiokafka.errors import KafkaError

from app.config import Settings
from app.domain.exceptions import TransientIOError

logger = logging.getLogger(__name__)

MessageHandler = Callable[[bytes | None], Awaitable[Any]]


class KafkaEventConsumer:
    """Consume one topic sequentially and commit offsets only after processing.

    Messages are handled one at a time in partition order. When the handler
    raises :class:`TransientIOError` the same message is retried after a fixed
    backoff and its offset stays uncommitted, giving at-least-once processing. A
    lost broker connection is retried with the same backoff forever.
    """

    def __init__(
        self,
        handler: MessageHandler,
        *,
        topic: str,
        bootstrap_servers: list[str],
        group_id: str,
        client_id: str,
        retry_backoff_seconds: float = 5.0,
        consumer_factory: Callable[[], AIOKafkaConsumer] | None = None,
    ) -> None:
        self._handler = handler
        self._topic = topic
        self._bootstrap_servers = bootstrap_servers
        self._group_id = group_id
        self._client_id = client_id
        self._retry_backoff_seconds = retry_backoff_seconds
        self._consumer_factory = consumer_factory or self._create_consumer
        self._connected = False
        self._task: asyncio.Task[None] | None = None

    @classmethod
    def from_settings(
        cls, handler: MessageHandler, settings: Settings
    ) -> "KafkaEventConsumer":
        return cls(
            handler,
            topic=settings.kafka_topic,
            bootstrap_servers=settings.kafka_bootstrap_servers,
            group_id=settings.kafka_group_id,
            client_id=settings.kafka_client_id,
            retry_backoff_seconds=settings.kafka_retry_backoff_seconds,
        )

    @property
    def connected(self) -> bool:
        return self._connected

    def start(self) -> None:
        """Run the consumer loop in a background task."""

        if self._task is None:
            self._task = asyncio.get_running_loop().create_task(
                self.run(), name="kafka-event-consumer"
            )

    async def stop(self) -> None:
        task, self._task = self._task, None
        if task is None:
            return
        task.cancel()
        try:
            await task
        except asyncio.CancelledError:
            pass
        logger.info("Kafka consumer stopped")

    async def run(self) -> None:
        while True:
            consumer = self._consumer_factory()
            try:
                await consumer.start()
                self._connected = True
                logger.info("Kafka consumer connected and subscribed to %s", self._topic)
                async for message in consumer:
                    await self._process(consumer, message)
            except KafkaError as exc:
                logger.error(
                    "Kafka consumer error (%s); reconnecting in %.1fs",
                    exc,
                    self._retry_backoff_seconds,
                )
            finally:
                self._connected = False
                await self._shutdown(consumer)
            await asyncio.sleep(self._retry_backoff_seconds)

    async def _process(self, consumer: AIOKafkaConsumer, message: Any) -> None:
        while True:
            try:
                await self._handler(message.value)
            except TransientIOError as exc:
                logger.warning(
                    "Could not store event at %s[%d]@%d (%s); retrying in %.1fs",
                    message.topic,
                    message.partition,
                    message.offset,
                    exc.message,
                    self._retry_backoff_seconds,
                )
                await asyncio.sleep(self._retry_backoff_seconds)
                continue
            except Exception:
                logger.exception(
                    "Error processing event at %s[%d]@%d; skipping",
                    message.topic,
                    message.partition,
                    message.offset,
                )
            break
        partition = TopicPartition(message.topic, message.partition)
        await consumer.commit({partition: message.offset + 1})

    async def _shutdown(self, consumer: AIOKafkaConsumer) -> None:
        try:
            await consumer.stop()
        except KafkaError:
            logger.warning("Error while stopping Kafka consumer", exc_info=True)

    def _create_consumer(self) -> AIOKafkaConsumer:
        return AIOKafkaConsumer(
            self._topic,
            bootstrap_servers=self._bootstrap_servers,
            group_id=self._group_id,
            client_id=self._client_id,
            enable_auto_commit=False,
            auto_offset_reset="latest",
        )


__all__ = ["KafkaEventConsumer", "MessageHandler"]
