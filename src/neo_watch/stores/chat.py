"""Chat store: append-only message log keyed by room."""
from sqlmodel import select

from neo_watch.db import ChatMessage
from neo_watch.stores.base import SqlStore


class ChatStore(SqlStore):
    def append(self, message: ChatMessage) -> ChatMessage:
        with self._session("append chat message") as session:
            session.add(message)
            return message

    def recent(self, room_id: str, limit: int = 50) -> list[ChatMessage]:
        """The room's most recent messages, oldest first (insertion order)."""
        with self._session("load chat history") as session:
            statement = (
                select(ChatMessage)
                .where(ChatMessage.room_id == room_id)
                .order_by(ChatMessage.id.desc())
                .limit(limit)
            )
            newest_first = session.exec(statement).all()
        return list(reversed(newest_first))
