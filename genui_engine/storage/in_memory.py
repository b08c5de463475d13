"""Dict-backed message store — suitable for single-process dev/test."""

from __future__ import annotations

from datetime import datetime, timezone

from genui_engine.engine.models import Conversation, PersistedMessage
from genui_engine.storage.interface import MessageStore


class InMemoryMessageStore(MessageStore):
    def __init__(self) -> None:
        self._conversations: dict[str, Conversation] = {}
        self._messages: dict[str, list[PersistedMessage]] = {}
        self._next_id = 1

    def _touch(self, session_id: str) -> Conversation:
        now = datetime.now(timezone.utc)
        convo = self._conversations.pop(session_id, None)
        if convo is None:
            convo = Conversation(id=session_id, created_at=now, updated_at=now)
        else:
            convo = convo.model_copy(update={"updated_at": now})
        # Re-insert so dict order tracks recency
        self._conversations[session_id] = convo
        return convo

    async def append_message(self, message: PersistedMessage) -> PersistedMessage:
        stored = message.model_copy(update={"id": self._next_id})
        self._next_id += 1
        self._touch(message.session_id)
        self._messages.setdefault(message.session_id, []).append(stored)
        return stored.model_copy()

    async def list_messages(self, session_id: str) -> list[PersistedMessage]:
        return [m.model_copy() for m in self._messages.get(session_id, [])]

    async def get_conversation(self, session_id: str) -> Conversation | None:
        convo = self._conversations.get(session_id)
        return convo.model_copy() if convo is not None else None

    async def list_conversations(self) -> list[Conversation]:
        return [c.model_copy() for c in reversed(self._conversations.values())]

    async def update_title(self, session_id: str, title: str) -> Conversation | None:
        if session_id not in self._conversations:
            return None
        convo = self._touch(session_id)
        convo.title = title
        return convo.model_copy()

    async def delete_conversation(self, session_id: str) -> bool:
        self._messages.pop(session_id, None)
        return self._conversations.pop(session_id, None) is not None
