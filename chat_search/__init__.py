"""Live full-text relevance search over chat conversations."""
from chat_search.corpus import InMemoryCorpus
from chat_search.models import Conversation, Message, SearchResult, SearchStats, SearchTerm
from chat_search.search import CorpusProvider, SearchEngine

__all__ = [
    "Conversation",
    "CorpusProvider",
    "InMemoryCorpus",
    "Message",
    "SearchEngine",
    "SearchResult",
    "SearchStats",
    "SearchTerm",
]
