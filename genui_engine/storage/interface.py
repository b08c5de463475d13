"""Message store interface — the persistence collaborator.

Implementations have an explicit lifecycle: ``open()`` once at process start,
``close()`` once at shutdown. The generation core only appends and reads.
"""

from __future__ import annotations

from abc import ABC, abstractmethod

from genui_engine.engine.models import Conversation, PersistedMessage


class MessageStore(ABC):
    """Async append-only message store keyed by session id.

    Swap to Postgres/Redis by implementing this ABC.
    """

    async def open(self) -> None:
        """Acquire resources. Default: nothing to do."""

    async def close(self) -> None:
        """Release resources. Default: nothing to do."""

    @abstractmethod
    async def append_message(self, message: PersistedMessage) -> PersistedMessage:
        """Store ``message``, creating its conversation if needed.

        Returns the stored copy with ``id`` assigned. Appends for one session
        keep their insertion order.
        """

    @abstractmethod
    async def list_messages(self, session_id: str) -> list[PersistedMessage]: ...

    @abstractmethod
    async def get_conversation(self, session_id: str) -> Conversation | None: ...

    @abstractmethod
    async def list_conversations(self) -> list[Conversation]:
        """All conversations, most recently active first."""

    @abstractmethod
    async def update_title(self, session_id: str, title: str) -> Conversation | None: ...

    @abstractmethod
    async def delete_conversation(self, session_id: str) -> bool: ...
