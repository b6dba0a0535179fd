"""Outbound channel for a single websocket client."""

from __future__ import annotations

import asyncio
import copy
import logging
import uuid
from collections.abc import Callable
from typing import Any

from fastapi import WebSocket

from app.domain.exceptions import DeliveryError

logger = logging.getLogger(__name__)


class ClientSession:
    """Queue messages for one websocket and write them from a dedicated task.

    :meth:`send` never blocks the caller. Messages are written in the order they
    were queued, which keeps every user's notifications in creation order. When
    a write fails, or a client stops reading and more than ``max_queued``
    messages pile up, the session closes itself and invokes ``on_failure``.
    """

    def __init__(
        self,
        websocket: WebSocket,
        *,
        on_failure: Callable[["ClientSession"], None] | None = None,
        max_queued: int = 100,
    ) -> None:
        self.session_id = uuid.uuid4().hex
        self._websocket = websocket
        self._on_failure = on_failure
        self._queue: asyncio.Queue[Any] = asyncio.Queue(maxsize=max_queued)
        self._writer: asyncio.Task[None] | None = None
        self._closed = False

    @property
    def closed(self) -> bool:
        return self._closed

    def start(self) -> None:
        """Spawn the writer task on the running event loop."""

        if self._writer is None:
            self._writer = asyncio.get_running_loop().create_task(
                self._run_writer(), name=f"notification-session-{self.session_id}"
            )

    def send(self, message: dict[str, Any]) -> None:
        """Queue ``message`` for delivery. Must be called from the event loop thread."""

        if self._closed:
            raise DeliveryError(f"Session {self.session_id} is closed")
        try:
            self._queue.put_nowait(copy.deepcopy(message))
        except asyncio.QueueFull:
            error = DeliveryError(
                f"Session {self.session_id} stopped reading; {self._queue.maxsize} messages pending"
            )
            logger.warning("%s", error.message)
            self._abandon()
            raise error from None

    def _abandon(self) -> None:
        self._closed = True
        if self._writer is not None:
            self._writer.cancel()
        if self._on_failure is not None:
            self._on_failure(self)

    async def close(self) -> None:
        """Stop the writer; queued messages that were not sent are discarded."""

        self._closed = True
        writer, self._writer = self._writer, None
        if writer is None or writer is asyncio.current_task():
            return
        writer.cancel()
        try:
            await writer
        except asyncio.CancelledError:
            pass

    async def _run_writer(self) -> None:
        while True:
            message = await self._queue.get()
            try:
                await self._websocket.send_json(message)
            except Exception as exc:
                error = DeliveryError(f"Push to session {self.session_id} failed: {exc}")
                logger.warning("%s", error.message)
                self._closed = True
                if self._on_failure is not None:
                    self._on_failure(self)
                return

    def __repr__(self) -> str:
        return f"ClientSession({self.session_id!r})"


__all__ = ["ClientSession"]
