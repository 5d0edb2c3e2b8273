"""Common English stop words excluded from tokenization and suggestions."""
from typing import FrozenSet


STOP_WORDS: FrozenSet[str] = frozenset({
    # Articles, conjunctions and prepositions
    "the", "a", "an", "and", "or", "but", "in", "on", "at", "to", "for", "of", "with", "by", "from",
    "up", "about", "into", "through", "during", "before", "after", "above", "below", "between",
    "among",
    # Auxiliary and modal verbs
    "is", "are", "was", "were", "be", "been", "being", "have", "has", "had", "do", "does",
    "did", "will", "would", "could", "should", "may", "might", "must", "can", "shall",
    # Pronouns and determiners
    "i", "you", "he", "she", "it", "we", "they", "me", "him", "her", "us", "them",
    "my", "your", "his", "its", "our", "their", "this", "that", "these", "those",
})
