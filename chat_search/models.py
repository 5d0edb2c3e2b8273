"""Data models for conversations, messages and search results."""
import uuid
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Dict, Optional


MESSAGE_ROLES = ("user", "assistant", "system")


def to_naive_utc(value: Optional[datetime]) -> Optional[datetime]:
    """Convert an aware datetime to naive UTC so all timestamps compare."""
    if value is None or value.tzinfo is None:
        return value
    return value.astimezone(timezone.utc).replace(tzinfo=None)


def parse_datetime(value: Optional[str]) -> Optional[datetime]:
    """Parse an ISO 8601 timestamp as naive UTC.

    Returns None when the value is missing or invalid.
    """
    if not value:
        return None
    if value.endswith("Z"):
        value = value[:-1] + "+00:00"
    try:
        return to_naive_utc(datetime.fromisoformat(value))
    except ValueError:
        return None


def _format_datetime(value: Optional[datetime]) -> str:
    return value.isoformat() if value else ""


@dataclass
class Conversation:
    """Chat conversation as stored by the conversation store."""
    id: str
    title: str
    created_at: Optional[datetime]
    updated_at: Optional[datetime] = None
    pinned: bool = False
    archived: bool = False
    deleted: bool = False  # soft delete (trash)
    sort_order: int = 0  # manual ordering for pinned conversations
    provider_id: str = "echo"
    model_name: str = "echo-model"
    metadata: Dict[str, Any] = field(default_factory=dict)

    @classmethod
    def create(cls, title: str) -> "Conversation":
        """Create a new conversation with a generated id and current timestamps."""
        now = datetime.now()
        return cls(id=str(uuid.uuid4()), title=title, created_at=now, updated_at=now)

    def is_valid(self) -> bool:
        return bool(self.id) and bool(self.title) and self.created_at is not None

    def to_dict(self) -> Dict[str, Any]:
        """Convert to the JSON layout used by the conversations file."""
        return {
            "id": self.id,
            "title": self.title,
            "createdAt": _format_datetime(self.created_at),
            "updatedAt": _format_datetime(self.updated_at),
            "pinned": self.pinned,
            "archived": self.archived,
            "deleted": self.deleted,
            "sortOrder": self.sort_order,
            "providerId": self.provider_id,
            "modelName": self.model_name,
            "metadata": self.metadata,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Conversation":
        return cls(
            id=data.get("id", ""),
            title=data.get("title", ""),
            created_at=parse_datetime(data.get("createdAt")),
            updated_at=parse_datetime(data.get("updatedAt")),
            pinned=bool(data.get("pinned", False)),
            archived=bool(data.get("archived", False)),
            deleted=bool(data.get("deleted", False)),
            sort_order=int(data.get("sortOrder", 0)),
            provider_id=data.get("providerId") or "echo",
            model_name=data.get("modelName") or "echo-model",
            metadata=data.get("metadata") or {},
        )


@dataclass
class Message:
    """Individual message within a conversation."""
    id: str
    conversation_id: str
    text: str
    created_at: Optional[datetime]
    role: str = "user"
    metadata: Dict[str, Any] = field(default_factory=dict)
    parent_id: str = ""  # for message threading/editing
    is_streaming: bool = False

    def __post_init__(self):
        # Unknown roles fall back to "user"
        self.role = self.role.lower() if self.role else "user"
        if self.role not in MESSAGE_ROLES:
            self.role = "user"

    @classmethod
    def create(cls, conversation_id: str, text: str, role: str = "user") -> "Message":
        """Create a new message with a generated id, timestamped now."""
        return cls(
            id=str(uuid.uuid4()),
            conversation_id=conversation_id,
            text=text,
            created_at=datetime.now(),
            role=role,
        )

    def is_valid(self) -> bool:
        return bool(self.id) and bool(self.conversation_id) and self.created_at is not None

    def to_dict(self) -> Dict[str, Any]:
        """Convert to the JSON layout used by the messages file."""
        return {
            "id": self.id,
            "conversationId": self.conversation_id,
            "role": self.role,
            "text": self.text,
            "createdAt": _format_datetime(self.created_at),
            "metadata": self.metadata,
            "parentId": self.parent_id,
            "isStreaming": self.is_streaming,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Message":
        return cls(
            id=data.get("id", ""),
            conversation_id=data.get("conversationId", ""),
            text=data.get("text", ""),
            created_at=parse_datetime(data.get("createdAt")),
            role=data.get("role", "user"),
            metadata=data.get("metadata") or {},
            parent_id=data.get("parentId") or "",
            is_streaming=bool(data.get("isStreaming", False)),
        )


@dataclass(frozen=True)
class SearchTerm:
    """A parsed unit of a search query.

    ``is_exact`` terms are quoted phrases matched as a contiguous substring;
    the others are single keywords matched on word boundaries.
    """
    word: str
    weight: float
    is_exact: bool


@dataclass
class SearchResult:
    """A message that matched a query."""
    message_id: str
    conversation_id: str
    snippet: str
    relevance: float  # relative ranking score, not bounded to [0, 1]
    timestamp: Optional[datetime]

    def to_dict(self) -> Dict[str, Any]:
        return {
            "message_id": self.message_id,
            "conversation_id": self.conversation_id,
            "snippet": self.snippet,
            "relevance": self.relevance,
            "timestamp": _format_datetime(self.timestamp),
        }


@dataclass
class SearchStats:
    """Diagnostic snapshot of the searchable corpus."""
    total_indexed_messages: int = 0
    total_unique_words: int = 0
    index_size: int = 0  # sum of raw message text lengths

    def to_dict(self) -> Dict[str, int]:
        return {
            "total_indexed_messages": self.total_indexed_messages,
            "total_unique_words": self.total_unique_words,
            "index_size": self.index_size,
        }
