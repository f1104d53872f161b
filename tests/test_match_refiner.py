"""
Tests for over-broad snippet truncation.
"""

from revision_compare.services.match_refiner import refine
from revision_compare.services.types import MatchCandidate


class TestRefine:

    def test_two_tokens_unchanged(self):
        candidate = MatchCandidate("老木匠 说", "explanation")
        assert refine(candidate, "老木匠") is candidate

    def test_three_tokens_truncated(self):
        candidate = MatchCandidate("老木匠 坐在 门口", "explanation")
        refined = refine(candidate, "老木匠")
        assert refined.snippet == "老木匠"
        assert refined.explanation == "explanation"

    def test_exactly_double_unchanged(self):
        candidate = MatchCandidate("one two three four")
        assert refine(candidate, "a b") is candidate

    def test_keeps_prefix_not_best_window(self):
        """The leading tokens win even when a later window matches better."""
        candidate = MatchCandidate("the door where old carpenter sat")
        refined = refine(candidate, "old carpenter")
        assert refined.snippet == "the door"

    def test_rejoins_with_single_spaces(self):
        candidate = MatchCandidate("a   b\tc d e")
        assert refine(candidate, "x y").snippet == "a b"

    def test_offsets_shift_with_prefix(self):
        candidate = MatchCandidate("  the old carpenter sat by the door", start=10, end=45)
        refined = refine(candidate, "old carpenter")
        assert refined.snippet == "the old"
        assert refined.start == 12
        assert refined.end == 19

    def test_missing_offsets_stay_missing(self):
        refined = refine(MatchCandidate("a b c d"), "x")
        assert refined.snippet == "a"
        assert refined.start is None
        assert refined.end is None

    def test_blank_selection_unchanged(self):
        candidate = MatchCandidate("a b c")
        assert refine(candidate, "   ") is candidate
