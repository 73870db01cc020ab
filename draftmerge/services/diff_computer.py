"""Word-level diff between the two sides of a matched pair."""
from __future__ import annotations

import re
from difflib import SequenceMatcher
from typing import List, Sequence

from draftmerge.services.types import DiffChange, MatchedPair, PairDiff

# Words and whitespace runs as separate tokens; joined, they reproduce the input
_TOKEN_RE = re.compile(r"\s+|\S+")


def tokenize_words(text: str) -> List[str]:
    return _TOKEN_RE.findall(text)


def diff_words(text_a: str, text_b: str) -> List[DiffChange]:
    """Diff two texts word by word.

    Unchanged plus removed runs rebuild ``text_a``; unchanged plus added
    runs rebuild ``text_b``. Identical texts yield no flagged runs.
    """
    tokens_a = tokenize_words(text_a)
    tokens_b = tokenize_words(text_b)
    # autojunk would treat frequent words as noise on long chapters
    matcher = SequenceMatcher(None, tokens_a, tokens_b, autojunk=False)

    changes: List[DiffChange] = []
    for tag, a_start, a_end, b_start, b_end in matcher.get_opcodes():
        if tag == "equal":
            changes.append(DiffChange(value=_join(tokens_a[a_start:a_end])))
            continue
        if tag in ("replace", "delete"):
            changes.append(DiffChange(value=_join(tokens_a[a_start:a_end]), removed=True))
        if tag in ("replace", "insert"):
            changes.append(DiffChange(value=_join(tokens_b[b_start:b_end]), added=True))
    return changes


def _join(tokens: Sequence[str]) -> str:
    return "".join(tokens)


def compute_pair_diff(pair: MatchedPair, pair_index: int) -> PairDiff:
    """Diff a matched pair; a missing side counts as an empty text."""
    text_a = pair.doc_a.plaintext if pair.doc_a else ""
    text_b = pair.doc_b.plaintext if pair.doc_b else ""

    return PairDiff(
        pair_index=pair_index,
        changes=diff_words(text_a, text_b),
        word_count_a=pair.doc_a.word_count if pair.doc_a else 0,
        word_count_b=pair.doc_b.word_count if pair.doc_b else 0,
    )
