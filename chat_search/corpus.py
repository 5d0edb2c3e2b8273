"""In-memory corpus snapshot."""
from datetime import datetime
from typing import Dict, Iterable, List

from chat_search.models import Conversation, Message, to_naive_utc


class InMemoryCorpus:
    """Read-only snapshot of conversations and their messages.

    Messages are grouped by conversation and kept in creation order.
    """

    def __init__(self, conversations: Iterable[Conversation], messages: Iterable[Message] = ()):
        self._conversations: List[Conversation] = list(conversations)
        self._messages: Dict[str, List[Message]] = {}
        for message in messages:
            self._messages.setdefault(message.conversation_id, []).append(message)
        for conversation_messages in self._messages.values():
            # Stable sort keeps insertion order for equal timestamps
            conversation_messages.sort(key=lambda m: to_naive_utc(m.created_at) or datetime.min)

    def get_all_conversations(self) -> List[Conversation]:
        return list(self._conversations)

    def get_messages_for_conversation(self, conversation_id: str) -> List[Message]:
        return list(self._messages.get(conversation_id, []))
