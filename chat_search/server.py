"""MCP server exposing chat search over the conversation store."""
import json
import sqlite3
import sys
from pathlib import Path
from typing import Any, Optional

from mcp.server import Server
from mcp.server.stdio import stdio_server
from mcp.types import Tool, TextContent

from chat_search.config import get_config
from chat_search.conversation_store import ConversationStore
from chat_search.json_store import JsonConversationStore
from chat_search.search import CorpusProvider, SearchEngine


def load_json_corpus(data_dir: Path) -> Optional[JsonConversationStore]:
    """Read conversations.json and messages.json from a data directory.

    Args:
        data_dir: Directory holding conversations.json and messages.json

    Returns:
        Loaded store, or None if it could not be read
    """
    if not data_dir.exists():
        print(f"Warning: Conversation data directory not found: {data_dir}", file=sys.stderr)
        return None
    try:
        return JsonConversationStore(data_dir).load()
    except (OSError, ValueError) as e:
        print(f"Error loading conversations: {e}", file=sys.stderr)
        return None


async def load_db_corpus(db_path: Path) -> Optional[CorpusProvider]:
    """Snapshot the conversations held in a SQLite database.

    Returns:
        In-memory snapshot, or None if the database could not be read
    """
    if not db_path.exists():
        print(f"Warning: Conversation database not found: {db_path}", file=sys.stderr)
        return None

    store = ConversationStore(db_path)
    try:
        await store.initialize()
        return await store.snapshot()
    except (OSError, sqlite3.Error) as e:
        print(f"Error loading conversation database: {e}", file=sys.stderr)
        return None
    finally:
        await store.close()


async def load_corpus() -> Optional[CorpusProvider]:
    """Load the current corpus.

    Re-read on every call so each search sees the latest conversations.
    CHAT_SEARCH_DB selects the SQLite store, otherwise the JSON files in
    the data directory are used.
    """
    config = get_config()
    if config.db_path:
        return await load_db_corpus(config.db_path)
    return load_json_corpus(config.resolved_data_dir())


async def get_engine() -> SearchEngine:
    return SearchEngine(await load_corpus(), get_config().search)


def _text(text: str) -> list[TextContent]:
    return [TextContent(type="text", text=text)]


async def search_messages_tool(query: str, limit: Optional[int] = None) -> list[TextContent]:
    """Tool handler for search_messages."""
    engine = await get_engine()
    results = engine.search_messages(query, limit or engine.config.message_limit)

    if not results:
        return _text(f"No messages found matching query: {query}")

    return _text(json.dumps([r.to_dict() for r in results], indent=2))


async def search_conversations_tool(query: str, limit: Optional[int] = None) -> list[TextContent]:
    """Tool handler for search_conversations."""
    engine = await get_engine()
    conversations = engine.search_conversations(query, limit or engine.config.conversation_limit)

    if not conversations:
        return _text(f"No conversations found matching query: {query}")

    return _text(json.dumps([c.to_dict() for c in conversations], indent=2))


async def get_search_suggestions_tool(partial_query: str, limit: Optional[int] = None) -> list[TextContent]:
    """Tool handler for get_search_suggestions."""
    engine = await get_engine()
    suggestions = engine.get_search_suggestions(partial_query, limit or engine.config.suggestion_limit)
    return _text(json.dumps(suggestions))


async def get_search_stats_tool() -> list[TextContent]:
    """Tool handler for get_search_stats."""
    stats = (await get_engine()).get_search_stats()
    return _text(json.dumps(stats.to_dict(), indent=2))


def _query_schema(name: str, description: str) -> dict:
    return {
        "type": "object",
        "properties": {
            name: {"type": "string", "description": description},
            "limit": {"type": "integer", "description": "Maximum number of results"},
        },
        "required": [name],
    }


def create_server() -> Server:
    """Create and configure the MCP server.

    Returns:
        Configured Server instance
    """
    server = Server("chat-search-mcp")

    @server.list_tools()
    async def list_tools() -> list[Tool]:
        """List available tools."""
        return [
            Tool(
                name="search_messages",
                description="Search chat messages by relevance. Quote a phrase to match it exactly. Returns message ids, conversation ids, snippets and scores.",
                inputSchema=_query_schema("query", "Search query; use double quotes for exact phrases"),
            ),
            Tool(
                name="search_conversations",
                description="Find conversations whose title or messages match a query.",
                inputSchema=_query_schema("query", "Search query"),
            ),
            Tool(
                name="get_search_suggestions",
                description="Suggest words from titles and recent messages that complete a partial query.",
                inputSchema=_query_schema("partial_query", "Partial search term (at least two characters)"),
            ),
            Tool(
                name="get_search_stats",
                description="Report the number of searchable messages, distinct words and total text size.",
                inputSchema={"type": "object", "properties": {}},
            ),
        ]

    @server.call_tool()
    async def call_tool(name: str, arguments: Any) -> list[TextContent]:
        """Handle tool calls."""
        arguments = arguments or {}
        limit = arguments.get("limit")

        if name == "search_messages":
            query = arguments.get("query", "")
            if not query:
                return _text("Error: 'query' parameter is required")
            return await search_messages_tool(query, limit)
        elif name == "search_conversations":
            query = arguments.get("query", "")
            if not query:
                return _text("Error: 'query' parameter is required")
            return await search_conversations_tool(query, limit)
        elif name == "get_search_suggestions":
            partial_query = arguments.get("partial_query", "")
            if not partial_query:
                return _text("Error: 'partial_query' parameter is required")
            return await get_search_suggestions_tool(partial_query, limit)
        elif name == "get_search_stats":
            return await get_search_stats_tool()
        else:
            raise ValueError(f"Unknown tool: {name}")

    return server


async def main():
    """Main entry point for the MCP server."""
    server = create_server()

    async with stdio_server() as (read_stream, write_stream):
        initialization_options = server.create_initialization_options()
        await server.run(read_stream, write_stream, initialization_options)
