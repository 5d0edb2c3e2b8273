"""Main entry point for the chat search MCP server."""
import asyncio

from chat_search.server import main as server_main


def main():
    asyncio.run(server_main())


if __name__ == "__main__":
    main()
