"""Room-scoped chat relay: subscriber registry, persisted log, broadcast."""
import asyncio
import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from typing import Any, Protocol

from neo_watch.db import ChatMessage
from neo_watch.db.models import MAX_CHAT_BODY_LENGTH
from neo_watch.errors import InvalidMessage
from neo_watch.schemas import ChatMessageRead
from neo_watch.stores import ChatStore

logger = logging.getLogger(__name__)

GENERAL_ROOM = "general"
HISTORY_LIMIT = 50

ROOM_HISTORY = "room-history"
NEW_MESSAGE = "new-message"
SEND_ERROR = "send-error"


class ChatConnection(Protocol):
    """One connected client (e.g. a WebSocket)."""

    connection_id: str

    async def send(self, event: str, data: Any) -> None:
        """Push a server event to the client."""
        ...


def message_payload(message: ChatMessage) -> dict[str, Any]:
    return ChatMessageRead.model_validate(message).model_dump(mode="json")


class ChatRelay:
    """Publish/subscribe over rooms keyed by object id (or ``general``).

    Holds an explicit room -> connection-id registry. Messages are persisted
    through the chat store before being broadcast; persist+broadcast is
    serialized per room so every subscriber sees insertion order.
    """

    def __init__(
        self,
        chat_store: ChatStore,
        history_limit: int = HISTORY_LIMIT,
        max_body_length: int = MAX_CHAT_BODY_LENGTH,
    ) -> None:
        self._store = chat_store
        self._history_limit = history_limit
        self._max_body_length = max_body_length
        self._connections: dict[str, ChatConnection] = {}
        self._rooms: dict[str, set[str]] = {}
        self._memberships: dict[str, set[str]] = {}
        self._room_locks: dict[str, asyncio.Lock] = {}
        self._room_lock_users: dict[str, int] = {}

    def register(self, connection: ChatConnection) -> None:
        self._connections[connection.connection_id] = connection

    def subscribers(self, room_id: str) -> set[str]:
        return set(self._rooms.get(room_id, ()))

    def rooms_of(self, connection_id: str) -> set[str]:
        return set(self._memberships.get(connection_id, ()))

    async def join(self, connection_id: str, room_id: str) -> None:
        """Subscribe and push the room's recent history (oldest first) to the connection."""
        self._check_room(room_id)
        connection = self._connections.get(connection_id)
        if connection is None:
            raise KeyError(f"Unknown chat connection {connection_id}")
        async with self._room_lock(room_id):
            self._rooms.setdefault(room_id, set()).add(connection_id)
            self._memberships.setdefault(connection_id, set()).add(room_id)
            logger.debug("Connection %s joined room %s", connection_id, room_id)

            history = await asyncio.to_thread(self._store.recent, room_id, self._history_limit)
            await connection.send(ROOM_HISTORY, [message_payload(m) for m in history])

    def leave(self, connection_id: str, room_id: str) -> None:
        """Unsubscribe; leaving a room that was never joined is a no-op."""
        members = self._rooms.get(room_id)
        if members is not None:
            members.discard(connection_id)
            if not members:
                del self._rooms[room_id]
        rooms = self._memberships.get(connection_id)
        if rooms is not None:
            rooms.discard(room_id)

    async def send(
        self,
        connection_id: str,
        room_id: str,
        author_id: str,
        author_name: str,
        body: Any,
    ) -> ChatMessage:
        """Validate, persist, then broadcast to every subscriber of the room.

        Raises:
            InvalidMessage: Empty or oversized body (or bad room); nothing is stored or sent.
        """
        self._check_room(room_id)
        if not isinstance(body, str) or not body:
            raise InvalidMessage("Message body must not be empty")
        if len(body) > self._max_body_length:
            raise InvalidMessage(
                f"Message body exceeds {self._max_body_length} characters"
            )

        async with self._room_lock(room_id):
            message = await asyncio.to_thread(
                self._store.append,
                ChatMessage(
                    author_id=author_id,
                    author_name=author_name,
                    room_id=room_id,
                    body=body,
                )
            )
            await self._broadcast(room_id, NEW_MESSAGE, message_payload(message))
        logger.debug("Connection %s posted message %s to room %s", connection_id, message.id, room_id)
        return message

    def disconnect(self, connection_id: str) -> None:
        """Leave every joined room and forget the connection."""
        for room_id in self._memberships.pop(connection_id, set()):
            members = self._rooms.get(room_id)
            if members is not None:
                members.discard(connection_id)
                if not members:
                    del self._rooms[room_id]
        self._connections.pop(connection_id, None)

    @asynccontextmanager
    async def _room_lock(self, room_id: str) -> AsyncIterator[None]:
        """Serialize work on one room. The lock is dropped once nobody holds or awaits it."""
        lock = self._room_locks.setdefault(room_id, asyncio.Lock())
        self._room_lock_users[room_id] = self._room_lock_users.get(room_id, 0) + 1
        try:
            async with lock:
                yield
        finally:
            self._room_lock_users[room_id] -= 1
            if not self._room_lock_users[room_id]:
                del self._room_lock_users[room_id]
                del self._room_locks[room_id]

    async def _broadcast(self, room_id: str, event: str, data: Any) -> None:
        for connection_id in list(self._rooms.get(room_id, ())):
            connection = self._connections.get(connection_id)
            if connection is None:
                continue
            try:
                await connection.send(event, data)
            except Exception as exc:  # pylint: disable=broad-except
                logger.warning(
                    "Dropping chat connection %s after failed delivery: %s", connection_id, exc
                )
                self.disconnect(connection_id)

    @staticmethod
    def _check_room(room_id: Any) -> None:
        if not isinstance(room_id, str) or not room_id.strip():
            raise InvalidMessage("A room id is required")
