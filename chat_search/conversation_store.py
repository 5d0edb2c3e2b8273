"""SQLite conversation store."""
import json
import aiosqlite
from datetime import datetime
from pathlib import Path
from typing import Optional, List

from chat_search.config import DEFAULT_DATA_DIR
from chat_search.corpus import InMemoryCorpus
from chat_search.models import Conversation, Message, parse_datetime, to_naive_utc


# Default database location
DEFAULT_DB_PATH = DEFAULT_DATA_DIR / "conversations.db"


def _to_iso(value: Optional[datetime]) -> Optional[str]:
    # Stored as naive UTC so ORDER BY created_at sorts chronologically
    value = to_naive_utc(value)
    return value.isoformat() if value else None


class ConversationStore:
    """Async SQLite store for conversations and messages.

    The search engine is synchronous, so callers hand it a ``snapshot()``
    rather than the store itself.
    """

    def __init__(self, db_path: Optional[Path] = None):
        """Initialize the conversation store.

        Args:
            db_path: Path to SQLite database. Defaults to ~/.chat-search/conversations.db
        """
        self.db_path = db_path or DEFAULT_DB_PATH
        self._connection: Optional[aiosqlite.Connection] = None

    async def initialize(self) -> None:
        """Initialize the database, creating tables if needed."""
        # Ensure parent directory exists
        self.db_path.parent.mkdir(parents=True, exist_ok=True)

        self._connection = await aiosqlite.connect(self.db_path)
        self._connection.row_factory = aiosqlite.Row
        await self._connection.execute("PRAGMA foreign_keys = ON")

        await self._connection.execute("""
            CREATE TABLE IF NOT EXISTS conversations (
                id TEXT PRIMARY KEY,
                title TEXT NOT NULL,
                created_at TEXT NOT NULL,
                updated_at TEXT NOT NULL,
                pinned INTEGER DEFAULT 0,
                archived INTEGER DEFAULT 0,
                deleted INTEGER DEFAULT 0,
                sort_order INTEGER DEFAULT 0,
                provider_id TEXT DEFAULT 'echo',
                model_name TEXT DEFAULT 'echo-model',
                metadata TEXT DEFAULT '{}'
            )
        """)

        await self._connection.execute("""
            CREATE TABLE IF NOT EXISTS messages (
                id TEXT PRIMARY KEY,
                conversation_id TEXT NOT NULL,
                role TEXT NOT NULL,
                text TEXT NOT NULL,
                created_at TEXT NOT NULL,
                metadata TEXT DEFAULT '{}',
                parent_id TEXT,
                is_streaming INTEGER DEFAULT 0,
                FOREIGN KEY (conversation_id) REFERENCES conversations(id) ON DELETE CASCADE
            )
        """)

        await self._connection.execute("""
            CREATE INDEX IF NOT EXISTS idx_messages_conversation
            ON messages(conversation_id, created_at)
        """)

        await self._connection.commit()

    async def close(self) -> None:
        """Close the database connection."""
        if self._connection:
            await self._connection.close()
            self._connection = None

    def _require_connection(self) -> aiosqlite.Connection:
        if not self._connection:
            raise RuntimeError("Database not initialized. Call initialize() first.")
        return self._connection

    async def create_conversation(self, conversation: Conversation) -> None:
        """Insert a new conversation.

        Raises:
            sqlite3.IntegrityError: If a conversation with the same id exists
        """
        connection = self._require_connection()
        await connection.execute("""
            INSERT INTO conversations (id, title, created_at, updated_at, pinned, archived,
                                       deleted, sort_order, provider_id, model_name, metadata)
            VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
        """, self._conversation_params(conversation))
        await connection.commit()

    async def update_conversation(self, conversation: Conversation) -> bool:
        """Update an existing conversation.

        Returns:
            True if updated, False if not found
        """
        connection = self._require_connection()
        params = self._conversation_params(conversation)
        cursor = await connection.execute("""
            UPDATE conversations SET title = ?, created_at = ?, updated_at = ?, pinned = ?,
                archived = ?, deleted = ?, sort_order = ?, provider_id = ?, model_name = ?,
                metadata = ?
            WHERE id = ?
        """, params[1:] + params[:1])
        await connection.commit()

        return cursor.rowcount > 0

    async def delete_conversation(self, conversation_id: str) -> bool:
        """Delete a conversation and all of its messages.

        Returns:
            True if deleted, False if not found
        """
        connection = self._require_connection()
        await connection.execute("DELETE FROM messages WHERE conversation_id = ?", (conversation_id,))
        cursor = await connection.execute("DELETE FROM conversations WHERE id = ?", (conversation_id,))
        await connection.commit()

        return cursor.rowcount > 0

    async def get_conversation(self, conversation_id: str) -> Optional[Conversation]:
        connection = self._require_connection()
        cursor = await connection.execute("SELECT * FROM conversations WHERE id = ?", (conversation_id,))
        row = await cursor.fetchone()

        if row is None:
            return None

        return self._row_to_conversation(row)

    async def get_all_conversations(self) -> List[Conversation]:
        """Get all conversations, most recently updated first."""
        connection = self._require_connection()
        cursor = await connection.execute("SELECT * FROM conversations ORDER BY updated_at DESC")
        rows = await cursor.fetchall()

        return [self._row_to_conversation(row) for row in rows]

    async def create_message(self, message: Message) -> None:
        """Insert a message and touch its conversation's updated_at.

        Raises:
            sqlite3.IntegrityError: If the conversation does not exist
        """
        connection = self._require_connection()
        await connection.execute("""
            INSERT INTO messages (id, conversation_id, role, text, created_at, metadata,
                                  parent_id, is_streaming)
            VALUES (?, ?, ?, ?, ?, ?, ?, ?)
        """, (
            message.id,
            message.conversation_id,
            message.role,
            message.text,
            _to_iso(message.created_at),
            json.dumps(message.metadata),
            message.parent_id or None,
            int(message.is_streaming),
        ))
        await connection.execute(
            "UPDATE conversations SET updated_at = ? WHERE id = ?",
            (datetime.now().isoformat(), message.conversation_id)
        )
        await connection.commit()

    async def delete_message(self, message_id: str) -> bool:
        """Delete a message.

        Returns:
            True if deleted, False if not found
        """
        connection = self._require_connection()
        cursor = await connection.execute("DELETE FROM messages WHERE id = ?", (message_id,))
        await connection.commit()

        return cursor.rowcount > 0

    async def get_messages_for_conversation(self, conversation_id: str) -> List[Message]:
        """Get the messages of a conversation in creation order."""
        connection = self._require_connection()
        cursor = await connection.execute(
            "SELECT * FROM messages WHERE conversation_id = ? ORDER BY created_at ASC",
            (conversation_id,)
        )
        rows = await cursor.fetchall()

        return [self._row_to_message(row) for row in rows]

    async def get_conversation_message_count(self, conversation_id: str) -> int:
        connection = self._require_connection()
        cursor = await connection.execute(
            "SELECT COUNT(*) FROM messages WHERE conversation_id = ?",
            (conversation_id,)
        )
        row = await cursor.fetchone()

        return row[0]

    async def snapshot(self) -> InMemoryCorpus:
        """Copy the current conversations and messages into an in-memory corpus.

        Returns:
            InMemoryCorpus that stays stable while the store keeps changing
        """
        connection = self._require_connection()
        conversations = await self.get_all_conversations()

        cursor = await connection.execute("SELECT * FROM messages ORDER BY created_at ASC")
        rows = await cursor.fetchall()

        return InMemoryCorpus(conversations, [self._row_to_message(row) for row in rows])

    def _conversation_params(self, conversation: Conversation) -> tuple:
        return (
            conversation.id,
            conversation.title,
            _to_iso(conversation.created_at),
            _to_iso(conversation.updated_at or conversation.created_at),
            int(conversation.pinned),
            int(conversation.archived),
            int(conversation.deleted),
            conversation.sort_order,
            conversation.provider_id,
            conversation.model_name,
            json.dumps(conversation.metadata),
        )

    def _row_to_conversation(self, row: aiosqlite.Row) -> Conversation:
        return Conversation(
            id=row["id"],
            title=row["title"],
            created_at=parse_datetime(row["created_at"]),
            updated_at=parse_datetime(row["updated_at"]),
            pinned=bool(row["pinned"]),
            archived=bool(row["archived"]),
            deleted=bool(row["deleted"]),
            sort_order=row["sort_order"],
            provider_id=row["provider_id"],
            model_name=row["model_name"],
            metadata=self._parse_metadata(row["metadata"]),
        )

    def _row_to_message(self, row: aiosqlite.Row) -> Message:
        return Message(
            id=row["id"],
            conversation_id=row["conversation_id"],
            text=row["text"],
            created_at=parse_datetime(row["created_at"]),
            role=row["role"],
            metadata=self._parse_metadata(row["metadata"]),
            parent_id=row["parent_id"] or "",
            is_streaming=bool(row["is_streaming"]),
        )

    def _parse_metadata(self, value: Optional[str]) -> dict:
        if not value:
            return {}
        try:
            return json.loads(value)
        except json.JSONDecodeError:
            return {}
