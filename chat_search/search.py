"""Full-text relevance search over conversations and messages."""
import functools
import logging
from typing import List, Optional, Protocol, Sequence, Set, Tuple

from chat_search.config import SearchConfig
from chat_search.models import Conversation, Message, SearchResult, SearchStats, SearchTerm, to_naive_utc
from chat_search.query import parse_query
from chat_search.scoring import calculate_relevance
from chat_search.snippet import extract_snippet
from chat_search.text import extract_words, normalize_text


logger = logging.getLogger(__name__)

# Titles count double against message content
TITLE_WEIGHT = 2.0
# Scores closer than this are considered tied
RELEVANCE_EPSILON = 0.001
# Suggestion candidates collected per requested suggestion
SUGGESTION_CANDIDATE_FACTOR = 2


class CorpusProvider(Protocol):
    """Read-only access to the conversations being searched."""

    def get_all_conversations(self) -> Sequence[Conversation]:
        """Return every conversation in the corpus."""
        ...

    def get_messages_for_conversation(self, conversation_id: str) -> Sequence[Message]:
        """Return the messages of a conversation in a stable (chronological) order."""
        ...


def _truncate(items: list, limit: int) -> list:
    # A negative limit means no limit
    return items if limit < 0 else items[:limit]


def _compare_results(a: SearchResult, b: SearchResult) -> int:
    if abs(a.relevance - b.relevance) < RELEVANCE_EPSILON:
        # More recent first for the same relevance
        a_time = to_naive_utc(a.timestamp)
        b_time = to_naive_utc(b.timestamp)
        if a_time == b_time:
            return 0
        if a_time is None:
            return 1
        if b_time is None:
            return -1
        return -1 if a_time > b_time else 1
    return -1 if a.relevance > b.relevance else 1


class SearchEngine:
    """Live full-text search engine.

    Nothing is indexed ahead of time: every call re-scans the corpus
    returned by the provider, so results always reflect its current state.
    The caller must keep the corpus stable for the duration of a call.
    """

    def __init__(self, corpus: Optional[CorpusProvider], config: Optional[SearchConfig] = None):
        """Initialize the search engine.

        Args:
            corpus: Provider of conversations and messages. None behaves as an
                empty corpus.
            config: Tuning constants. Defaults to SearchConfig().
        """
        self.corpus = corpus
        self.config = config or SearchConfig()

    def _parse(self, query: str) -> List[SearchTerm]:
        if not query or not query.strip() or self.corpus is None:
            return []
        return parse_query(query)

    def search_messages(self, query: str, limit: int = 50) -> List[SearchResult]:
        """Search for messages matching the query.

        Args:
            query: Search query; quoted phrases are matched exactly
            limit: Maximum number of results to return, negative for no limit

        Returns:
            List of SearchResult objects, most relevant first. Results within
            0.001 of each other are ordered most recent first.
        """
        terms = self._parse(query)
        if not terms:
            return []

        results = []
        for conversation in self.corpus.get_all_conversations():
            for message in self.corpus.get_messages_for_conversation(conversation.id):
                relevance = calculate_relevance(message.text, terms)
                if relevance > 0.0:
                    results.append(SearchResult(
                        message_id=message.id,
                        conversation_id=message.conversation_id,
                        snippet=extract_snippet(
                            message.text,
                            terms,
                            self.config.snippet_length,
                            self.config.snippet_step_divisor,
                        ),
                        relevance=relevance,
                        timestamp=message.created_at,
                    ))

        results.sort(key=functools.cmp_to_key(_compare_results))
        results = _truncate(results, limit)

        logger.debug("Search for %r returned %d results", query, len(results))
        return results

    def search_conversations(self, query: str, limit: int = 20) -> List[Conversation]:
        """Search conversations by title and content.

        A conversation scores twice its title relevance plus the average
        relevance of its messages.

        Args:
            query: Search query
            limit: Maximum number of conversations to return, negative for no limit

        Returns:
            Matching conversations, most relevant first
        """
        terms = self._parse(query)
        if not terms:
            return []

        scored: List[Tuple[Conversation, float]] = []
        for conversation in self.corpus.get_all_conversations():
            title_relevance = calculate_relevance(conversation.title, terms) * TITLE_WEIGHT

            messages = self.corpus.get_messages_for_conversation(conversation.id)
            content_relevance = 0.0
            if messages:
                content_relevance = sum(calculate_relevance(m.text, terms) for m in messages) / len(messages)

            total = title_relevance + content_relevance
            if total > 0.0:
                scored.append((conversation, total))

        scored.sort(key=lambda item: item[1], reverse=True)
        return [conversation for conversation, _ in _truncate(scored, limit)]

    def get_search_suggestions(self, partial_query: str, limit: int = 10) -> List[str]:
        """Suggest completions for a partially typed search term.

        Only conversation titles and the most recent messages of each
        conversation are scanned.

        Args:
            partial_query: Prefix typed so far (at least two characters)
            limit: Maximum number of suggestions, negative for no limit

        Returns:
            Words starting with the prefix, shortest first, then alphabetical
        """
        if len(partial_query) < self.config.suggestion_min_length or self.corpus is None:
            return []

        prefix = normalize_text(partial_query).lower()
        if not prefix:
            return []

        max_candidates = limit * SUGGESTION_CANDIDATE_FACTOR if limit >= 0 else None
        candidates: Set[str] = set()

        def collect(text: str) -> bool:
            """Add matching words from text; True once enough candidates are collected."""
            for word in extract_words(text):
                if word.startswith(prefix) and len(word) > len(prefix):
                    candidates.add(word)
                    if max_candidates is not None and len(candidates) >= max_candidates:
                        return True
            return False

        window = self.config.suggestion_message_window
        for conversation in self.corpus.get_all_conversations():
            texts = [conversation.title]
            if window > 0:
                messages = list(self.corpus.get_messages_for_conversation(conversation.id))
                texts.extend(message.text for message in messages[-window:])

            if any(collect(text) for text in texts):
                break

        suggestions = sorted(candidates, key=lambda word: (len(word), word))
        return _truncate(suggestions, limit)

    def get_search_stats(self) -> SearchStats:
        """Compute corpus statistics by re-scanning every message.

        Returns:
            SearchStats with the message count, the number of distinct
            searchable words and the total raw text length
        """
        stats = SearchStats()
        if self.corpus is None:
            return stats

        unique_words: Set[str] = set()
        for conversation in self.corpus.get_all_conversations():
            messages = self.corpus.get_messages_for_conversation(conversation.id)
            stats.total_indexed_messages += len(messages)
            for message in messages:
                unique_words.update(extract_words(message.text))
                stats.index_size += len(message.text)

        stats.total_unique_words = len(unique_words)
        return stats

    # Index maintenance hooks. Search is live, so there is no index to update.

    def index_message(self, message: Message) -> None:
        logger.debug("Message indexed for search: %s", message.id)

    def remove_message(self, message_id: str) -> None:
        logger.debug("Message removed from search index: %s", message_id)

    def rebuild_index(self) -> bool:
        logger.debug("Search index rebuild completed (live search mode)")
        return True
