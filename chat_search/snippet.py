"""Snippet extraction for search result previews."""
from typing import List

from chat_search.models import SearchTerm
from chat_search.scoring import score_window
from chat_search.text import normalize_text


DEFAULT_SNIPPET_LENGTH = 150
# Windows advance by max_length / SNIPPET_STEP_DIVISOR characters
SNIPPET_STEP_DIVISOR = 4
# How far into a window we look for a space to avoid cutting a word
WORD_BOUNDARY_SLACK = 20
ELLIPSIS = "..."


def _best_window_start(text: str, terms: List[SearchTerm], max_length: int, step_divisor: int) -> int:
    normalized_text = normalize_text(text)
    step = max(1, max_length // step_divisor)

    best_start = 0
    best_score = 0
    for start in range(0, len(text) - max_length + 1, step):
        score = score_window(normalized_text[start:start + max_length], terms)
        # Strictly greater: ties keep the earliest window
        if score > best_score:
            best_score = score
            best_start = start

    return best_start


def extract_snippet(
    text: str,
    terms: List[SearchTerm],
    max_length: int = DEFAULT_SNIPPET_LENGTH,
    step_divisor: int = SNIPPET_STEP_DIVISOR,
) -> str:
    """Extract the excerpt of ``text`` with the most search term hits.

    Args:
        text: Full message text
        terms: Parsed search terms
        max_length: Width of the excerpt window
        step_divisor: Windows are tried every ``max_length // step_divisor`` characters

    Returns:
        The text itself when it fits in ``max_length``, otherwise a trimmed
        excerpt bounded by "..." where it was cut
    """
    if len(text) <= max_length:
        return text

    best_start = _best_window_start(text, terms, max_length, step_divisor)
    snippet = text[best_start:best_start + max_length]

    if best_start > 0:
        space_pos = snippet.find(" ")
        if 0 < space_pos < WORD_BOUNDARY_SLACK:
            snippet = snippet[space_pos + 1:]
        snippet = ELLIPSIS + snippet

    if best_start + max_length < len(text):
        last_space = snippet.rfind(" ")
        if last_space >= 0 and last_space > len(snippet) - WORD_BOUNDARY_SLACK:
            snippet = snippet[:last_space]
        snippet += ELLIPSIS

    return snippet.strip()
