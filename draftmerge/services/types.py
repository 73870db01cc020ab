"""Shared dataclasses used across the compare and merge services."""
from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import List, Optional


class MatchMethod(str, Enum):
    """How a matched pair was formed."""

    EXACT_TITLE = "exact_title"
    FUZZY_TITLE = "fuzzy_title"
    CONTENT_SIMILARITY = "content_similarity"
    UNMATCHED_A = "unmatched_a"
    UNMATCHED_B = "unmatched_b"


class MergeChoice(str, Enum):
    """Reviewer decision for one matched pair."""

    A = "a"
    B = "b"
    BOTH = "both"
    SKIP = "skip"


@dataclass(frozen=True, slots=True)
class ComparableDocument:
    """One document of a manuscript, flattened for comparison."""

    id: str
    title: str
    manuscript_id: str
    word_count: int
    plaintext: str
    html: str


@dataclass(slots=True)
class MatchedPair:
    """Correspondence between a document of draft A and one of draft B.

    Exactly one side is None for the two unmatched methods; both sides are
    present otherwise.
    """

    doc_a: Optional[ComparableDocument]
    doc_b: Optional[ComparableDocument]
    method: MatchMethod
    similarity: float = 0.0
    title_similarity: float = 0.0


@dataclass(slots=True)
class DiffChange:
    """Contiguous run of a word diff; neither flag set means unchanged."""

    value: str
    added: Optional[bool] = None
    removed: Optional[bool] = None


@dataclass(slots=True)
class PairDiff:
    pair_index: int
    changes: List[DiffChange] = field(default_factory=list)
    word_count_a: int = 0
    word_count_b: int = 0


@dataclass(frozen=True, slots=True)
class MergeInstruction:
    pair_index: int
    choice: MergeChoice


@dataclass(slots=True)
class MergeReport:
    """Summary of a completed merge; returned once, never stored."""

    manuscript_id: str
    title: str
    documents_created: int = 0
    folders_created: int = 0
    variant_folders: int = 0
    total_word_count: int = 0
