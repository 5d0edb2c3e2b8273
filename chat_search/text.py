"""Text normalization and tokenization."""
import re
from typing import List

from chat_search.stop_words import STOP_WORDS


_TAG_RE = re.compile(r"<[^>]*>")
_WHITESPACE_RE = re.compile(r"\s+")
# Apostrophes stay inside tokens so contractions like "don't" are one word
_WORD_RE = re.compile(r"\b[\w']+\b")


def normalize_text(text: str) -> str:
    """Strip HTML-like tags and collapse whitespace.

    Args:
        text: Raw text

    Returns:
        Text without tags, trimmed, with interior whitespace runs collapsed
        to single spaces
    """
    without_tags = _TAG_RE.sub("", text)
    return _WHITESPACE_RE.sub(" ", without_tags).strip()


def is_stop_word(word: str) -> bool:
    return word.lower() in STOP_WORDS


def extract_words(text: str) -> List[str]:
    """Tokenize text into lowercase words.

    Tokens of a single character and stop words are dropped. Order and
    duplicates are preserved because term frequency matters downstream.

    Args:
        text: Text to tokenize

    Returns:
        List of lowercase words
    """
    words = []
    for match in _WORD_RE.finditer(normalize_text(text)):
        word = match.group(0).lower()
        if len(word) > 1 and not is_stop_word(word):
            words.append(word)
    return words
