"""Tests for notecap.similarity — Jaccard similarity and related-note lookup."""

import pytest

from notecap.errors import StoreError
from notecap.similarity import BACKLINK_THRESHOLD, find_related_notes, similarity

PAIRS = [
    ("", ""),
    ("alpha", ""),
    ("a b c", "b c d"),
    ("Buy milk", "buy MILK today"),
    ("one two three four", "five six"),
]


# ── similarity ────────────────────────────────────────────────────────────────


class TestSimilarity:
    def test_both_empty_is_zero(self):
        assert similarity("", "") == 0.0

    def test_whitespace_only_counts_as_empty(self):
        assert similarity("  \n ", "\t") == 0.0

    def test_one_empty_is_zero(self):
        assert similarity("alpha", "") == 0.0

    def test_identical_texts_score_one(self):
        assert similarity("buy milk and eggs", "buy milk and eggs") == 1.0

    def test_partial_overlap(self):
        # {a, b} ∩ {b, c} = {b}; union has three words
        assert similarity("a b", "b c") == pytest.approx(1 / 3)

    def test_disjoint_texts_score_zero(self):
        assert similarity("alpha beta", "gamma delta") == 0.0

    def test_is_case_insensitive(self):
        assert similarity("Buy Milk", "buy milk") == 1.0

    def test_duplicates_collapse(self):
        assert similarity("a a a b", "a b") == 1.0

    def test_punctuation_is_part_of_the_word(self):
        assert similarity("milk.", "milk") == 0.0

    @pytest.mark.parametrize("a,b", PAIRS)
    def test_is_symmetric(self, a, b):
        assert similarity(a, b) == similarity(b, a)

    @pytest.mark.parametrize("a,b", PAIRS)
    def test_is_within_unit_interval(self, a, b):
        assert 0.0 <= similarity(a, b) <= 1.0


# ── find_related_notes ────────────────────────────────────────────────────────

NOTE_WORDS = [f"w{i}" for i in range(10)]
NOTE_TEXT = " ".join(NOTE_WORDS)


def _doc_with_overlap(shared: int, extra_prefix: str) -> str:
    """Shares *shared* words with NOTE_TEXT and adds ten words of its own."""
    return " ".join(NOTE_WORDS[:shared] + [f"{extra_prefix}{i}" for i in range(10)])


class TestFindRelatedNotes:
    def test_threshold_is_point_three(self):
        assert BACKLINK_THRESHOLD == 0.3

    def test_only_documents_above_threshold_are_related(self, store, vault_dir):
        (vault_dir / "Close.md").write_text(_doc_with_overlap(7, "x"))  # 7 / 20 = 0.35
        (vault_dir / "Distant.md").write_text(_doc_with_overlap(5, "y"))  # 5 / 20 = 0.25
        assert find_related_notes(NOTE_TEXT, store) == ["Close"]

    def test_score_equal_to_threshold_is_not_related(self, store, vault_dir):
        (vault_dir / "Edge.md").write_text(" ".join(NOTE_WORDS[:3]))  # 3 / 10 = 0.3
        assert find_related_notes(NOTE_TEXT, store) == []

    def test_returns_base_names_in_store_order(self, store, vault_dir):
        (vault_dir / "b").mkdir()
        (vault_dir / "b" / "Second.md").write_text(NOTE_TEXT)
        (vault_dir / "a-First.md").write_text(NOTE_TEXT)
        assert find_related_notes(NOTE_TEXT, store) == ["a-First", "Second"]

    def test_custom_threshold(self, store, vault_dir):
        (vault_dir / "Distant.md").write_text(_doc_with_overlap(5, "y"))
        assert find_related_notes(NOTE_TEXT, store, threshold=0.2) == ["Distant"]

    def test_empty_vault_has_no_related_notes(self, store):
        assert find_related_notes(NOTE_TEXT, store) == []

    def test_store_errors_propagate(self, store, vault_dir, monkeypatch):
        (vault_dir / "Note.md").write_text(NOTE_TEXT)

        def broken_read(document_id):
            raise StoreError("disk on fire")

        monkeypatch.setattr(store, "read_text", broken_read)
        with pytest.raises(StoreError):
            find_related_notes(NOTE_TEXT, store)
