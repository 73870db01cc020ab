"""Pairs the documents of two drafts of a manuscript.

Matching runs in fixed phases over the still-unpaired documents:

1. exact title, after normalization (first hit in B order wins)
2. fuzzy title, where one normalized title contains the other and the
   length ratio exceeds ``FUZZY_TITLE_THRESHOLD`` (best ratio wins)
3. content similarity, greedily taking the globally best remaining
   Jaccard score while it reaches ``CONTENT_THRESHOLD``
4. assembly: every A document in A order (matched or ``unmatched_a``),
   then every unpaired B document in B order as ``unmatched_b``

Ties always resolve to the first candidate found, so the output is fully
determined by the input order. The heuristic is greedy on purpose: a
writer has to be able to predict and explain each pairing.
"""
from __future__ import annotations

from typing import Dict, List, Optional, Sequence, Set, Tuple

from draftmerge.services.similarity import jaccard_similarity, normalize_title
from draftmerge.services.types import ComparableDocument, MatchedPair, MatchMethod

FUZZY_TITLE_THRESHOLD = 0.7
CONTENT_THRESHOLD = 0.3


def _match_exact_titles(
    docs_a: Sequence[ComparableDocument],
    docs_b: Sequence[ComparableDocument],
    consumed_a: Set[str],
    consumed_b: Set[str],
) -> List[MatchedPair]:
    pairs: List[MatchedPair] = []
    for a in docs_a:
        if a.id in consumed_a:
            continue
        norm_a = normalize_title(a.title)
        if not norm_a:
            continue
        for b in docs_b:
            if b.id in consumed_b:
                continue
            if normalize_title(b.title) == norm_a:
                pairs.append(
                    MatchedPair(
                        doc_a=a,
                        doc_b=b,
                        method=MatchMethod.EXACT_TITLE,
                        similarity=jaccard_similarity(a.plaintext, b.plaintext),
                        title_similarity=1.0,
                    )
                )
                consumed_a.add(a.id)
                consumed_b.add(b.id)
                break
    return pairs


def _match_fuzzy_titles(
    docs_a: Sequence[ComparableDocument],
    docs_b: Sequence[ComparableDocument],
    consumed_a: Set[str],
    consumed_b: Set[str],
) -> List[MatchedPair]:
    pairs: List[MatchedPair] = []
    for a in docs_a:
        if a.id in consumed_a:
            continue
        norm_a = normalize_title(a.title)
        if not norm_a:
            continue

        best: Optional[Tuple[ComparableDocument, float]] = None
        for b in docs_b:
            if b.id in consumed_b:
                continue
            norm_b = normalize_title(b.title)
            if not norm_b:
                continue
            if norm_b not in norm_a and norm_a not in norm_b:
                continue
            title_sim = min(len(norm_a), len(norm_b)) / max(len(norm_a), len(norm_b))
            if title_sim > FUZZY_TITLE_THRESHOLD and (best is None or title_sim > best[1]):
                best = (b, title_sim)

        if best is not None:
            b, title_sim = best
            pairs.append(
                MatchedPair(
                    doc_a=a,
                    doc_b=b,
                    method=MatchMethod.FUZZY_TITLE,
                    similarity=jaccard_similarity(a.plaintext, b.plaintext),
                    title_similarity=title_sim,
                )
            )
            consumed_a.add(a.id)
            consumed_b.add(b.id)
    return pairs


def _match_content(
    docs_a: Sequence[ComparableDocument],
    docs_b: Sequence[ComparableDocument],
    consumed_a: Set[str],
    consumed_b: Set[str],
) -> List[MatchedPair]:
    pairs: List[MatchedPair] = []
    while True:
        best: Optional[Tuple[ComparableDocument, ComparableDocument, float]] = None
        for a in docs_a:
            if a.id in consumed_a:
                continue
            for b in docs_b:
                if b.id in consumed_b:
                    continue
                sim = jaccard_similarity(a.plaintext, b.plaintext)
                if sim >= CONTENT_THRESHOLD and (best is None or sim > best[2]):
                    best = (a, b, sim)

        if best is None:
            return pairs

        a, b, sim = best
        pairs.append(
            MatchedPair(
                doc_a=a,
                doc_b=b,
                method=MatchMethod.CONTENT_SIMILARITY,
                similarity=sim,
                title_similarity=0.0,
            )
        )
        consumed_a.add(a.id)
        consumed_b.add(b.id)


def match_documents(
    docs_a: Sequence[ComparableDocument],
    docs_b: Sequence[ComparableDocument],
) -> List[MatchedPair]:
    """Match two ordered document sequences; see the module docstring."""
    consumed_a: Set[str] = set()
    consumed_b: Set[str] = set()

    matched: List[MatchedPair] = []
    matched += _match_exact_titles(docs_a, docs_b, consumed_a, consumed_b)
    matched += _match_fuzzy_titles(docs_a, docs_b, consumed_a, consumed_b)
    matched += _match_content(docs_a, docs_b, consumed_a, consumed_b)

    by_a_id: Dict[str, MatchedPair] = {pair.doc_a.id: pair for pair in matched}

    result: List[MatchedPair] = []
    for a in docs_a:
        pair = by_a_id.get(a.id)
        if pair is None:
            pair = MatchedPair(doc_a=a, doc_b=None, method=MatchMethod.UNMATCHED_A)
        result.append(pair)

    for b in docs_b:
        if b.id not in consumed_b:
            result.append(MatchedPair(doc_a=None, doc_b=b, method=MatchMethod.UNMATCHED_B))

    return result
