"""Query parsing into weighted search terms."""
import re
from typing import List

from chat_search.models import SearchTerm
from chat_search.text import extract_words, normalize_text


PHRASE_WEIGHT = 2.0
KEYWORD_WEIGHT = 1.0

_QUOTED_RE = re.compile(r'"([^"]+)"')


def parse_query(query: str) -> List[SearchTerm]:
    """Parse a raw query string into search terms.

    Double-quoted substrings become exact phrase terms; whatever remains is
    tokenized into keyword terms. Phrases come first, in order of
    appearance, followed by keywords.

    Args:
        query: Raw search query

    Returns:
        List of SearchTerm objects (empty for a blank query)
    """
    normalized = normalize_text(query)
    if not normalized:
        return []

    terms = []
    phrases = _QUOTED_RE.findall(normalized)
    for phrase in phrases:
        terms.append(SearchTerm(word=phrase, weight=PHRASE_WEIGHT, is_exact=True))

    # A phrase's words must not be counted again as keywords
    remaining = normalized
    for phrase in phrases:
        remaining = remaining.replace(f'"{phrase}"', "")

    for word in extract_words(remaining):
        terms.append(SearchTerm(word=word, weight=KEYWORD_WEIGHT, is_exact=False))

    return terms
