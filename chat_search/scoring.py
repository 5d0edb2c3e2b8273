"""Relevance scoring of a text against parsed search terms."""
import math
import re
from typing import List, Sequence

from chat_search.models import SearchTerm
from chat_search.text import normalize_text


# Length normalization constant: a text of this length gets a 1.5x boost
LENGTH_NORM_BASE = 100.0
# A match at the very end of a text keeps half its weight
POSITION_DECAY = 0.5


def _word_pattern(word: str) -> "re.Pattern[str]":
    return re.compile(r"\b%s\b" % re.escape(word), re.IGNORECASE)


def count_word_occurrences(text: str, word: str) -> int:
    """Count case-insensitive whole-word occurrences of ``word`` in ``text``."""
    return len(_word_pattern(word).findall(text))


def contains_phrase(text: str, phrase: str) -> bool:
    return phrase.lower() in text.lower()


def _term_relevance(normalized_text: str, term: SearchTerm) -> float:
    if term.is_exact:
        return term.weight if contains_phrase(normalized_text, term.word) else 0.0

    occurrences = count_word_occurrences(normalized_text, term.word)
    if occurrences == 0:
        return 0.0

    # Logarithmic term frequency: repeated hits give diminishing returns
    relevance = term.weight * (1.0 + math.log(occurrences))

    first_pos = normalized_text.lower().find(term.word.lower())
    if first_pos >= 0:
        relevance *= 1.0 - (first_pos / len(normalized_text)) * POSITION_DECAY

    return relevance


def calculate_relevance(text: str, terms: Sequence[SearchTerm]) -> float:
    """Score how well a text matches a list of search terms.

    Exact phrases contribute their weight when present. Keywords contribute
    ``weight * (1 + ln(occurrences))``, scaled down linearly the later the
    first occurrence appears. A non-zero total is finally boosted for short
    texts by ``1 + 100 / (100 + len(text))``.

    Args:
        text: Text to score
        terms: Parsed search terms

    Returns:
        Non-negative relevance score (0.0 when nothing matches)
    """
    if not text or not terms:
        return 0.0

    normalized_text = normalize_text(text)
    total = sum(_term_relevance(normalized_text, term) for term in terms)

    if total > 0.0:
        length_norm = LENGTH_NORM_BASE / (LENGTH_NORM_BASE + len(normalized_text))
        total *= 1.0 + length_norm

    return total


def score_window(window: str, terms: List[SearchTerm], phrase_bonus: int = 10) -> int:
    """Count term hits inside a snippet window.

    Every exact phrase present is worth ``phrase_bonus``; every keyword
    occurrence is worth one.
    """
    score = 0
    for term in terms:
        if term.is_exact:
            if contains_phrase(window, term.word):
                score += phrase_bonus
        else:
            score += count_word_occurrences(window, term.word)
    return score
