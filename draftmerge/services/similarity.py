"""Title normalization and lexical similarity scoring."""
from __future__ import annotations

import re
from typing import Set

# "chapter 12", optionally followed by one separator and whitespace
_CHAPTER_PREFIX_RE = re.compile(r"^chapter\s+\d+\s*[:—–\-]?\s*", re.IGNORECASE)


def normalize_title(title: str) -> str:
    """Canonical form of a document title for comparison.

    Lowercases, trims, then drops a leading ordinal chapter label, so
    "Chapter 12 - Aftermath" and "Aftermath" compare equal. Idempotent.
    """
    normalized = (title or "").lower().strip()
    return _CHAPTER_PREFIX_RE.sub("", normalized).strip()


def _word_set(text: str) -> Set[str]:
    return set((text or "").lower().split())


def jaccard_similarity(text_a: str, text_b: str) -> float:
    """Word-set Jaccard overlap in [0, 1].

    Two empty texts are vacuously identical (1.0); exactly one empty text
    scores 0.0.
    """
    words_a = _word_set(text_a)
    words_b = _word_set(text_b)

    if not words_a and not words_b:
        return 1.0
    if not words_a or not words_b:
        return 0.0

    intersection = len(words_a & words_b)
    union = len(words_a) + len(words_b) - intersection
    return intersection / union
