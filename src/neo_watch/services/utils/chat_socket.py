"""WebSocket chat handling: frame dispatch between a client socket and the ChatRelay."""
import json
import logging
from typing import Any
from uuid import uuid4

from fastapi import WebSocket, WebSocketDisconnect

from neo_watch.auth import Principal
from neo_watch.errors import InvalidMessage, StorageFault
from neo_watch.services.chat_relay import SEND_ERROR, ChatRelay

logger = logging.getLogger(__name__)

JOIN_ROOM = "join-room"
LEAVE_ROOM = "leave-room"
SEND_MESSAGE = "send-message"


class WebSocketConnection:
    """ChatConnection over a FastAPI WebSocket; frames are {"event", "data"}."""

    def __init__(self, websocket: WebSocket) -> None:
        self.connection_id = uuid4().hex
        self._websocket = websocket

    async def send(self, event: str, data: Any) -> None:
        await self._websocket.send_json({"event": event, "data": data})


async def dispatch_frame(
    relay: ChatRelay,
    connection: WebSocketConnection,
    principal: Principal,
    frame: Any,
) -> None:
    """Apply one client frame. Errors go back to this connection only."""
    if not isinstance(frame, dict):
        await connection.send(SEND_ERROR, {"reason": "Frame must be a JSON object"})
        return

    event = frame.get("event")
    room_id = frame.get("roomId")
    try:
        if event == JOIN_ROOM:
            await relay.join(connection.connection_id, room_id)
        elif event == LEAVE_ROOM:
            relay.leave(connection.connection_id, room_id)
        elif event == SEND_MESSAGE:
            await relay.send(
                connection.connection_id,
                room_id,
                principal.id,
                principal.name,
                frame.get("body"),
            )
        else:
            await connection.send(SEND_ERROR, {"reason": f"Unknown event: {event}"})
    except InvalidMessage as exc:
        await connection.send(SEND_ERROR, {"reason": str(exc)})
    except StorageFault:
        await connection.send(SEND_ERROR, {"reason": "Chat is temporarily unavailable"})


async def handle_chat_socket(
    websocket: WebSocket,
    relay: ChatRelay,
    principal: Principal,
) -> None:
    """Register the (already accepted) socket with the relay and serve frames until it closes."""
    connection = WebSocketConnection(websocket)
    relay.register(connection)
    logger.debug("Chat client %s connected as %s", connection.connection_id, principal.id)
    try:
        while True:
            text = await websocket.receive_text()
            try:
                frame = json.loads(text)
            except ValueError:
                await connection.send(SEND_ERROR, {"reason": "Frame must be valid JSON"})
                continue
            await dispatch_frame(relay, connection, principal, frame)
    except WebSocketDisconnect:
        logger.debug("Chat client %s disconnected", connection.connection_id)
    finally:
        relay.disconnect(connection.connection_id)
