"""Websocket endpoint streaming notifications to connected clients."""

from __future__ import annotations

import logging

from fastapi import APIRouter, WebSocket, WebSocketDisconnect

from app.config import get_settings
from app.infrastructure.notifications import ClientSession, NotificationDispatcher

logger = logging.getLogger(__name__)

router = APIRouter(tags=["realtime"])


@router.websocket("/ws")
async def notifications_websocket(websocket: WebSocket) -> None:
    """Accept a client, register it on ``join`` and push updates until it leaves.

    Client messages are JSON objects: ``{"type": "join", "userId": "..."}`` and
    ``{"type": "ping"}``.
    """

    dispatcher: NotificationDispatcher = websocket.app.state.dispatcher
    await websocket.accept()
    session = ClientSession(
        websocket,
        on_failure=dispatcher.on_disconnect,
        max_queued=get_settings().session_queue_size,
    )
    session.start()
    logger.info("Client connected: %s", session.session_id)
    try:
        while True:
            try:
                message = await websocket.receive_json()
            except WebSocketDisconnect:
                raise
            except (KeyError, TypeError, ValueError):
                # Binary frames and malformed JSON are ignored.
                continue

            if session.closed:
                break
            if not isinstance(message, dict):
                continue

            message_type = message.get("type")
            if message_type == "join":
                user_id = message.get("userId")
                if isinstance(user_id, (str, int)) and str(user_id).strip():
                    await dispatcher.on_join(str(user_id).strip(), session)
                continue

            if message_type == "ping":
                session.send({"type": "pong"})
                continue
    except WebSocketDisconnect:
        logger.info("Client disconnected: %s", session.session_id)
    finally:
        dispatcher.on_disconnect(session)
        await session.close()
