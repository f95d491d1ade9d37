"""Realtime chat over WebSocket, one room per object id (plus ``general``).

Client frames: {"event": "join-room" | "leave-room", "roomId"} and
{"event": "send-message", "roomId", "body"}. Server frames:
{"event": "room-history" | "new-message" | "send-error", "data"}.
"""
import logging

from fastapi import APIRouter, Query, WebSocket

from neo_watch.auth import AuthError, decode_principal
from neo_watch.deps import ChatRelayWs
from neo_watch.services.utils import handle_chat_socket

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/chat", tags=["chat"])

UNAUTHORIZED_CLOSE_CODE = 4401


@router.websocket("/ws")
async def chat_socket(
    websocket: WebSocket,
    relay: ChatRelayWs,
    token: str | None = Query(default=None),
) -> None:
    """Authenticate with ?token=<jwt>, then exchange chat frames until disconnect."""
    await websocket.accept()
    config = websocket.scope["app"].state.container.config
    try:
        principal = decode_principal(token, config.jwt_secret(), config.jwt_algorithm())
    except AuthError as exc:
        logger.debug("Rejecting chat socket: %s", exc)
        await websocket.close(code=UNAUTHORIZED_CLOSE_CODE, reason=str(exc))
        return
    await handle_chat_socket(websocket, relay, principal)
