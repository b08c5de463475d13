"""SQLite-backed message store.

A single connection is opened in ``open()`` and closed in ``close()``; calls
run in a worker thread under a lock so appends for a session stay ordered.
"""

from __future__ import annotations

import asyncio
import logging
import sqlite3
import threading
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Callable, TypeVar

from genui_engine.engine.models import Conversation, PersistedMessage
from genui_engine.storage.interface import MessageStore

logger = logging.getLogger(__name__)

T = TypeVar("T")

SCHEMA = (
    """
    CREATE TABLE IF NOT EXISTS conversations (
        id TEXT PRIMARY KEY,
        title TEXT NOT NULL DEFAULT 'New Conversation',
        created_at TEXT NOT NULL,
        updated_at TEXT NOT NULL
    )
    """,
    """
    CREATE TABLE IF NOT EXISTS messages (
        id INTEGER PRIMARY KEY AUTOINCREMENT,
        conversation_id TEXT NOT NULL REFERENCES conversations(id) ON DELETE CASCADE,
        role TEXT NOT NULL CHECK (role IN ('user', 'ai')),
        content TEXT NOT NULL,
        component_code TEXT,
        provider_name TEXT,
        created_at TEXT NOT NULL
    )
    """,
    "CREATE INDEX IF NOT EXISTS idx_messages_conversation ON messages(conversation_id, id)",
    "CREATE INDEX IF NOT EXISTS idx_conversations_updated ON conversations(updated_at)",
)


def _now() -> str:
    return datetime.now(timezone.utc).isoformat()


def _message_from_row(row: sqlite3.Row) -> PersistedMessage:
    return PersistedMessage(
        id=row["id"],
        session_id=row["conversation_id"],
        role=row["role"],
        content=row["content"],
        component_code=row["component_code"],
        provider_name=row["provider_name"],
        created_at=row["created_at"],
    )


def _conversation_from_row(row: sqlite3.Row) -> Conversation:
    return Conversation(
        id=row["id"],
        title=row["title"],
        created_at=row["created_at"],
        updated_at=row["updated_at"],
    )


class SQLiteMessageStore(MessageStore):
    def __init__(self, db_path: str | Path = "conversations.db") -> None:
        self.db_path = str(db_path)
        self._conn: sqlite3.Connection | None = None
        self._lock = threading.Lock()

    # -- lifecycle ----------------------------------------------------------

    async def open(self) -> None:
        if self._conn is not None:
            return
        if self.db_path != ":memory:":
            Path(self.db_path).parent.mkdir(parents=True, exist_ok=True)
        conn = sqlite3.connect(self.db_path, check_same_thread=False)
        conn.row_factory = sqlite3.Row
        conn.execute("PRAGMA foreign_keys = ON")
        with conn:
            for statement in SCHEMA:
                conn.execute(statement)
        self._conn = conn
        logger.info("Opened message store at %s", self.db_path)

    async def close(self) -> None:
        if self._conn is None:
            return
        with self._lock:
            self._conn.close()
            self._conn = None
        logger.info("Closed message store at %s", self.db_path)

    async def _run(self, fn: Callable[[sqlite3.Connection], T]) -> T:
        if self._conn is None:
            raise RuntimeError("Message store is not open; call open() first")
        conn = self._conn

        def _locked() -> T:
            with self._lock, conn:
                return fn(conn)

        return await asyncio.to_thread(_locked)

    # -- operations ---------------------------------------------------------

    async def append_message(self, message: PersistedMessage) -> PersistedMessage:
        created_at = message.created_at.isoformat()

        def _insert(conn: sqlite3.Connection) -> int:
            now = _now()
            conn.execute(
                "INSERT INTO conversations (id, created_at, updated_at) VALUES (?, ?, ?) "
                "ON CONFLICT(id) DO UPDATE SET updated_at = excluded.updated_at",
                (message.session_id, now, now),
            )
            cur = conn.execute(
                "INSERT INTO messages "
                "(conversation_id, role, content, component_code, provider_name, created_at) "
                "VALUES (?, ?, ?, ?, ?, ?)",
                (
                    message.session_id,
                    message.role,
                    message.content,
                    message.component_code,
                    message.provider_name,
                    created_at,
                ),
            )
            return cur.lastrowid

        row_id = await self._run(_insert)
        return message.model_copy(update={"id": row_id})

    async def list_messages(self, session_id: str) -> list[PersistedMessage]:
        def _select(conn: sqlite3.Connection) -> list[Any]:
            return conn.execute(
                "SELECT * FROM messages WHERE conversation_id = ? ORDER BY id ASC",
                (session_id,),
            ).fetchall()

        return [_message_from_row(r) for r in await self._run(_select)]

    async def get_conversation(self, session_id: str) -> Conversation | None:
        def _select(conn: sqlite3.Connection) -> Any:
            return conn.execute(
                "SELECT * FROM conversations WHERE id = ?", (session_id,)
            ).fetchone()

        row = await self._run(_select)
        return _conversation_from_row(row) if row is not None else None

    async def list_conversations(self) -> list[Conversation]:
        def _select(conn: sqlite3.Connection) -> list[Any]:
            return conn.execute(
                "SELECT * FROM conversations ORDER BY updated_at DESC, rowid DESC"
            ).fetchall()

        return [_conversation_from_row(r) for r in await self._run(_select)]

    async def update_title(self, session_id: str, title: str) -> Conversation | None:
        def _update(conn: sqlite3.Connection) -> int:
            return conn.execute(
                "UPDATE conversations SET title = ?, updated_at = ? WHERE id = ?",
                (title, _now(), session_id),
            ).rowcount

        if not await self._run(_update):
            return None
        return await self.get_conversation(session_id)

    async def delete_conversation(self, session_id: str) -> bool:
        def _delete(conn: sqlite3.Connection) -> int:
            conn.execute("DELETE FROM messages WHERE conversation_id = ?", (session_id,))
            return conn.execute(
                "DELETE FROM conversations WHERE id = ?", (session_id,)
            ).rowcount

        return bool(await self._run(_delete))
