"""Tests for draftmerge.services.document_matcher (four-phase document pairing)."""

import pytest

from draftmerge.services.document_matcher import match_documents
from draftmerge.services.types import ComparableDocument, MatchMethod


def _doc(doc_id, title, plaintext, manuscript_id=None):
    return ComparableDocument(
        id=doc_id,
        title=title,
        manuscript_id=manuscript_id or ("ms-a" if doc_id.startswith("a") else "ms-b"),
        word_count=len(plaintext.split()),
        plaintext=plaintext,
        html=f"<p>{plaintext}</p>",
    )


def _ids(pairs):
    return [
        (pair.doc_a.id if pair.doc_a else None, pair.doc_b.id if pair.doc_b else None, pair.method)
        for pair in pairs
    ]


# ===========================================================================
# Phase 1: exact titles
# ===========================================================================

class TestExactTitle:
    def test_identical_documents(self):
        pairs = match_documents(
            [_doc("a1", "Chapter One", "the cat sat")],
            [_doc("b1", "Chapter One", "the cat sat")],
        )
        assert len(pairs) == 1
        assert pairs[0].method == MatchMethod.EXACT_TITLE
        assert pairs[0].similarity == 1.0
        assert pairs[0].title_similarity == 1.0

    def test_title_wins_over_low_content_similarity(self):
        pairs = match_documents(
            [_doc("a1", "Chapter One", "the cat sat")],
            [_doc("b1", "Chapter One", "totally different unrelated words")],
        )
        assert len(pairs) == 1
        assert pairs[0].method == MatchMethod.EXACT_TITLE
        assert pairs[0].title_similarity == 1.0
        assert pairs[0].similarity == 0.0

    def test_chapter_numbers_ignored(self):
        pairs = match_documents(
            [_doc("a1", "Chapter 3: Low Tide", "x")],
            [_doc("b1", "Chapter 4 — Low Tide", "y")],
        )
        assert _ids(pairs) == [("a1", "b1", MatchMethod.EXACT_TITLE)]

    def test_first_b_in_order_wins(self):
        pairs = match_documents(
            [_doc("a1", "Storm", "rain")],
            [_doc("b1", "Storm", "wind"), _doc("b2", "Storm", "rain")],
        )
        assert _ids(pairs) == [
            ("a1", "b1", MatchMethod.EXACT_TITLE),
            (None, "b2", MatchMethod.UNMATCHED_B),
        ]

    def test_empty_normalized_titles_never_match_by_title(self):
        pairs = match_documents(
            [_doc("a1", "Chapter 7", "gulls circled the mast")],
            [_doc("b1", "Chapter 7", "nothing in common here")],
        )
        assert _ids(pairs) == [
            ("a1", None, MatchMethod.UNMATCHED_A),
            (None, "b1", MatchMethod.UNMATCHED_B),
        ]


# ===========================================================================
# Phase 2: fuzzy titles
# ===========================================================================

class TestFuzzyTitle:
    def test_containment_above_threshold(self):
        pairs = match_documents(
            [_doc("a1", "Homecoming", "alpha")],
            [_doc("b1", "Homecoming!", "beta")],
        )
        assert len(pairs) == 1
        assert pairs[0].method == MatchMethod.FUZZY_TITLE
        assert pairs[0].title_similarity == pytest.approx(10 / 11)
        assert pairs[0].similarity == 0.0

    def test_picks_highest_length_ratio(self):
        pairs = match_documents(
            [_doc("a1", "Homecoming", "alpha")],
            [_doc("b1", "Homecoming Day", "beta"), _doc("b2", "Homecoming!", "gamma")],
        )
        assert _ids(pairs)[0] == ("a1", "b2", MatchMethod.FUZZY_TITLE)

    def test_ratio_at_or_below_threshold_is_not_fuzzy(self):
        # "storm" in "storm at sea": ratio 5/12
        pairs = match_documents(
            [_doc("a1", "Storm", "thunder rolled")],
            [_doc("b1", "Storm at Sea", "calm morning light")],
        )
        assert [pair.method for pair in pairs] == [MatchMethod.UNMATCHED_A, MatchMethod.UNMATCHED_B]

    def test_exact_match_consumes_before_fuzzy(self):
        pairs = match_documents(
            [_doc("a1", "Homecoming!", "x"), _doc("a2", "Homecoming", "y")],
            [_doc("b1", "Homecoming", "z")],
        )
        assert _ids(pairs) == [
            ("a1", None, MatchMethod.UNMATCHED_A),
            ("a2", "b1", MatchMethod.EXACT_TITLE),
        ]


# ===========================================================================
# Phase 3: content similarity
# ===========================================================================

class TestContentSimilarity:
    def test_matches_when_titles_differ(self):
        text = "the silver moon rose over the quiet village and the stars twinkled brightly"
        pairs = match_documents([_doc("a1", "Opening", text)], [_doc("b1", "The Beginning", text)])
        assert len(pairs) == 1
        assert pairs[0].method == MatchMethod.CONTENT_SIMILARITY
        assert pairs[0].similarity == 1.0
        assert pairs[0].title_similarity == 0.0

    def test_greedy_takes_global_best_first(self):
        docs_a = [
            _doc("a1", "First", "red green blue yellow"),
            _doc("a2", "Second", "red green blue yellow purple"),
        ]
        docs_b = [_doc("b1", "Other", "red green blue yellow purple")]
        pairs = match_documents(docs_a, docs_b)
        assert _ids(pairs) == [
            ("a1", None, MatchMethod.UNMATCHED_A),
            ("a2", "b1", MatchMethod.CONTENT_SIMILARITY),
        ]

    def test_ties_keep_first_found(self):
        docs_a = [_doc("a1", "One", "same words here"), _doc("a2", "Two", "same words here")]
        docs_b = [_doc("b1", "Three", "same words here")]
        pairs = match_documents(docs_a, docs_b)
        assert _ids(pairs)[0] == ("a1", "b1", MatchMethod.CONTENT_SIMILARITY)

    def test_threshold_is_inclusive(self):
        # 3 shared of 10 distinct words: exactly 0.3
        docs_a = [_doc("a1", "X", "s1 s2 s3 a1 a2 a3 a4")]
        docs_b = [_doc("b1", "Y", "s1 s2 s3 b1 b2 b3")]
        pairs = match_documents(docs_a, docs_b)
        assert pairs[0].method == MatchMethod.CONTENT_SIMILARITY
        assert pairs[0].similarity == pytest.approx(0.3)

    def test_below_threshold_stays_unmatched(self):
        # {a, b, c} vs {c, d}: 1 shared of 4 distinct = 0.25
        pairs = match_documents([_doc("a1", "X", "a b c")], [_doc("b1", "Y", "c d")])
        assert [pair.method for pair in pairs] == [MatchMethod.UNMATCHED_A, MatchMethod.UNMATCHED_B]

    def test_two_empty_bodies_pair_up(self):
        pairs = match_documents([_doc("a1", "Blank", "")], [_doc("b1", "Empty", "")])
        assert _ids(pairs) == [("a1", "b1", MatchMethod.CONTENT_SIMILARITY)]


# ===========================================================================
# Assembly and invariants
# ===========================================================================

class TestAssembly:
    def test_unmatched_on_both_sides(self):
        pairs = match_documents(
            [_doc("a1", "Epilogue", "stars faded")],
            [_doc("b1", "Prologue", "morning began")],
        )
        assert _ids(pairs) == [
            ("a1", None, MatchMethod.UNMATCHED_A),
            (None, "b1", MatchMethod.UNMATCHED_B),
        ]
        assert all(pair.similarity == 0 and pair.title_similarity == 0 for pair in pairs)

    def test_empty_inputs(self):
        assert match_documents([], []) == []

    def test_one_side_empty(self):
        pairs = match_documents([], [_doc("b1", "Prologue", "x"), _doc("b2", "Coda", "y")])
        assert _ids(pairs) == [
            (None, "b1", MatchMethod.UNMATCHED_B),
            (None, "b2", MatchMethod.UNMATCHED_B),
        ]

    def test_different_chapter_counts(self):
        docs_a = [
            _doc("a1", "Chapter One", "hello"),
            _doc("a2", "Chapter Two", "world"),
            _doc("a3", "Chapter Three", "foo"),
        ]
        pairs = match_documents(docs_a, [_doc("b1", "Chapter One", "hello")])
        assert len([p for p in pairs if p.doc_a and p.doc_b]) == 1
        assert len([p for p in pairs if p.method == MatchMethod.UNMATCHED_A]) == 2

    def test_unmatched_a_keeps_its_position(self):
        docs_a = [
            _doc("a1", "Chapter One", "hello"),
            _doc("a2", "Interlude", "unique interlude content xyz"),
            _doc("a3", "Chapter Three", "goodbye"),
        ]
        docs_b = [_doc("b1", "Chapter One", "hello"), _doc("b3", "Chapter Three", "goodbye")]
        pairs = match_documents(docs_a, docs_b)
        assert [pair.doc_a.id for pair in pairs if pair.doc_a] == ["a1", "a2", "a3"]

    def test_pairs_follow_a_order_even_when_matched_late(self):
        docs_a = [
            _doc("a1", "Opening", "waves broke on the rocks below the lighthouse"),
            _doc("a2", "Chapter Two", "x"),
        ]
        docs_b = [
            _doc("b2", "Chapter Two", "y"),
            _doc("b1", "Dawn", "waves broke on the rocks below the lighthouse"),
            _doc("b9", "Appendix", "index"),
        ]
        assert _ids(match_documents(docs_a, docs_b)) == [
            ("a1", "b1", MatchMethod.CONTENT_SIMILARITY),
            ("a2", "b2", MatchMethod.EXACT_TITLE),
            (None, "b9", MatchMethod.UNMATCHED_B),
        ]

    def test_every_document_appears_exactly_once(self):
        docs_a = [
            _doc("a1", "Chapter One", "the harbor at night"),
            _doc("a2", "Homecoming", "ships returned"),
            _doc("a3", "Storm", "thunder over the bay and rain"),
            _doc("a4", "Notes", "misc"),
        ]
        docs_b = [
            _doc("b1", "Homecoming!", "ships came back"),
            _doc("b2", "Chapter 1 - Chapter One", "the harbor at night"),
            _doc("b3", "Tempest", "thunder over the bay and hail"),
            _doc("b4", "Chapter One", "the harbor by night"),
            _doc("b5", "Glossary", "terms"),
        ]
        pairs = match_documents(docs_a, docs_b)

        a_ids = [pair.doc_a.id for pair in pairs if pair.doc_a]
        b_ids = [pair.doc_b.id for pair in pairs if pair.doc_b]
        assert sorted(a_ids) == ["a1", "a2", "a3", "a4"]
        assert sorted(b_ids) == ["b1", "b2", "b3", "b4", "b5"]
        assert len(pairs) >= max(len(docs_a), len(docs_b))

        for pair in pairs:
            unmatched = pair.method in (MatchMethod.UNMATCHED_A, MatchMethod.UNMATCHED_B)
            assert unmatched == (pair.doc_a is None or pair.doc_b is None)
            assert 0.0 <= pair.similarity <= 1.0
            assert 0.0 <= pair.title_similarity <= 1.0

    def test_deterministic(self):
        docs_a = [_doc("a1", "Tide", "salt and spray"), _doc("a2", "Reef", "coral and spray")]
        docs_b = [_doc("b1", "Shoal", "salt and spray"), _doc("b2", "Bank", "coral and salt")]
        assert _ids(match_documents(docs_a, docs_b)) == _ids(match_documents(docs_a, docs_b))
