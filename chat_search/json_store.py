"""JSON file conversation store.

Reads the ``conversations.json`` and ``messages.json`` files written by the
chat application. Both files hold a single JSON object keyed by id.
"""
import json
from pathlib import Path
from typing import Any, Dict, List, Optional

from chat_search.config import DEFAULT_DATA_DIR
from chat_search.models import Conversation, Message


CONVERSATIONS_FILE = "conversations.json"
MESSAGES_FILE = "messages.json"


def load_json_object(path: Path) -> Dict[str, Any]:
    """Load a JSON object from a file.

    Args:
        path: Path to the JSON file

    Returns:
        Parsed JSON object, or an empty dict if the file does not exist

    Raises:
        json.JSONDecodeError: If the file is malformed
    """
    if not path.exists():
        return {}

    with open(path, "r", encoding="utf-8") as f:
        data = json.load(f)

    return data if isinstance(data, dict) else {}


class JsonConversationStore:
    """Conversation store backed by the chat application's JSON files."""

    def __init__(self, data_dir: Optional[Path] = None):
        """Initialize the store.

        Args:
            data_dir: Directory holding the JSON files. Defaults to ~/.chat-search
        """
        self.data_dir = data_dir or DEFAULT_DATA_DIR
        self._conversations: Dict[str, Any] = {}
        self._messages: Dict[str, Any] = {}

    @property
    def conversations_file(self) -> Path:
        return self.data_dir / CONVERSATIONS_FILE

    @property
    def messages_file(self) -> Path:
        return self.data_dir / MESSAGES_FILE

    def load(self) -> "JsonConversationStore":
        """(Re)load both files from disk.

        Raises:
            json.JSONDecodeError: If either file is malformed
        """
        self._conversations = load_json_object(self.conversations_file)
        self._messages = load_json_object(self.messages_file)
        return self

    def get_conversation(self, conversation_id: str) -> Optional[Conversation]:
        data = self._conversations.get(conversation_id)
        if data is None:
            return None
        return Conversation.from_dict(data)

    def get_all_conversations(self) -> List[Conversation]:
        """Return all valid conversations."""
        conversations = [Conversation.from_dict(data) for data in self._conversations.values()]
        return [c for c in conversations if c.is_valid()]

    def get_recent_conversations(self, limit: int = 50) -> List[Conversation]:
        """Return active conversations, pinned first, then most recently updated.

        Args:
            limit: Maximum number of conversations (0 or less for no limit)
        """
        active = [c for c in self.get_all_conversations() if not c.archived and not c.deleted]
        active.sort(key=lambda c: (c.updated_at or c.created_at), reverse=True)
        active.sort(key=lambda c: c.pinned, reverse=True)

        if limit > 0:
            active = active[:limit]
        return active

    def get_messages_for_conversation(self, conversation_id: str) -> List[Message]:
        """Return the valid messages of a conversation sorted by creation time."""
        messages = [
            Message.from_dict(data)
            for data in self._messages.values()
            if data.get("conversationId") == conversation_id
        ]
        messages = [m for m in messages if m.is_valid()]
        messages.sort(key=lambda m: m.created_at)
        return messages

    def get_conversation_message_count(self, conversation_id: str) -> int:
        return sum(1 for data in self._messages.values() if data.get("conversationId") == conversation_id)
