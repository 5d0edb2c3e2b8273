"""Configuration for the chat search engine and MCP server."""
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional

from chat_search.snippet import DEFAULT_SNIPPET_LENGTH, SNIPPET_STEP_DIVISOR


DEFAULT_DATA_DIR = Path.home() / ".chat-search"


@dataclass
class SearchConfig:
    """Tuning constants for ranking, snippets and suggestions."""
    # Snippet extraction
    snippet_length: int = DEFAULT_SNIPPET_LENGTH
    snippet_step_divisor: int = SNIPPET_STEP_DIVISOR  # window step = snippet_length / divisor

    # Suggestions
    suggestion_message_window: int = 10  # only the last N messages per conversation
    suggestion_min_length: int = 2

    # Default result limits
    message_limit: int = 50
    conversation_limit: int = 20
    suggestion_limit: int = 10

    @classmethod
    def from_env(cls) -> "SearchConfig":
        """Create config from environment variables."""
        return cls(
            snippet_length=int(os.environ.get("CHAT_SEARCH_SNIPPET_LENGTH", str(DEFAULT_SNIPPET_LENGTH))),
            snippet_step_divisor=int(os.environ.get("CHAT_SEARCH_SNIPPET_STEP_DIVISOR", str(SNIPPET_STEP_DIVISOR))),
            suggestion_message_window=int(os.environ.get("CHAT_SEARCH_SUGGESTION_WINDOW", "10")),
            suggestion_min_length=int(os.environ.get("CHAT_SEARCH_SUGGESTION_MIN_LENGTH", "2")),
            message_limit=int(os.environ.get("CHAT_SEARCH_MESSAGE_LIMIT", "50")),
            conversation_limit=int(os.environ.get("CHAT_SEARCH_CONVERSATION_LIMIT", "20")),
            suggestion_limit=int(os.environ.get("CHAT_SEARCH_SUGGESTION_LIMIT", "10")),
        )


@dataclass
class Config:
    """Main configuration for the chat search MCP server."""
    search: SearchConfig = field(default_factory=SearchConfig.from_env)
    data_dir: Optional[Path] = None  # None = use default
    db_path: Optional[Path] = None  # None = read the JSON files in data_dir

    @classmethod
    def from_env(cls) -> "Config":
        """Create config from environment variables."""
        data_dir_str = os.environ.get("CHAT_SEARCH_DATA_DIR")
        db_path_str = os.environ.get("CHAT_SEARCH_DB")

        return cls(
            search=SearchConfig.from_env(),
            data_dir=Path(data_dir_str) if data_dir_str else None,
            db_path=Path(db_path_str) if db_path_str else None,
        )

    def resolved_data_dir(self) -> Path:
        return self.data_dir or DEFAULT_DATA_DIR


# Global config instance
_config: Optional[Config] = None


def get_config() -> Config:
    """Get the global config instance.

    Returns:
        Config loaded from environment
    """
    global _config

    if _config is None:
        _config = Config.from_env()

    return _config
