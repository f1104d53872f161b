"""
Tests for the sweep-line highlight compositor.
"""

import random

from revision_compare.services.highlight_store import HighlightCounter, HighlightStore
from revision_compare.services.interval_compositor import render, to_markup, to_runs
from revision_compare.services.types import Highlight, Run, Segment

RED = "#FF6347"
BLUE = "#7FFFD4"
GOLD = "#FFD700"
DOC = "abcdefghij"


def _assert_partition(document, segments):
    if not document:
        assert segments == []
        return
    assert segments[0].start == 0
    assert segments[-1].end == len(document)
    for left, right in zip(segments, segments[1:]):
        assert left.end == right.start
    assert all(s.start < s.end for s in segments)


class TestRender:

    def test_empty_document(self):
        assert render("", [Highlight(1, 0, 0, RED)]) == []

    def test_no_highlights(self):
        assert render("hello", []) == [Segment(0, 5)]

    def test_non_overlapping_partition(self):
        segments = render(DOC, [Highlight(1, 1, 3, RED), Highlight(2, 5, 7, BLUE)])
        assert segments == [
            Segment(0, 1),
            Segment(1, 3, RED, 1),
            Segment(3, 5),
            Segment(5, 7, BLUE, 2),
            Segment(7, 10),
        ]

    def test_adjacent_highlights_do_not_overlap(self):
        segments = render("abcdef", [Highlight(1, 0, 3, RED), Highlight(2, 3, 6, BLUE)])
        assert segments == [Segment(0, 3, RED, 1), Segment(3, 6, BLUE, 2)]

    def test_overlap_later_highlight_on_top(self):
        a = Highlight(1, 0, 6, RED)
        b = Highlight(2, 3, 9, BLUE)
        segments = render(DOC, [a, b])
        assert segments == [
            Segment(0, 3, RED, 1),
            Segment(3, 6, BLUE, 2),
            Segment(6, 9, BLUE, 2),
            Segment(9, 10),
        ]

    def test_nested_inner_visible(self):
        segments = render(DOC, [Highlight(1, 0, 10, RED), Highlight(2, 2, 4, BLUE)])
        assert segments == [
            Segment(0, 2, RED, 1),
            Segment(2, 4, BLUE, 2),
            Segment(4, 10, RED, 1),
        ]

    def test_most_recently_opened_wins(self):
        """An older highlight opened inside a newer one is drawn on top of it."""
        segments = render(DOC, [Highlight(1, 2, 4, BLUE), Highlight(2, 0, 10, RED)])
        assert segments == [
            Segment(0, 2, RED, 2),
            Segment(2, 4, BLUE, 1),
            Segment(4, 10, RED, 2),
        ]

    def test_same_range_higher_id_wins(self):
        segments = render(DOC, [Highlight(2, 0, 10, BLUE), Highlight(1, 0, 10, RED)])
        assert segments == [Segment(0, 10, BLUE, 2)]

    def test_shared_end_position(self):
        segments = render(DOC, [Highlight(1, 0, 5, RED), Highlight(2, 2, 5, BLUE), Highlight(3, 5, 8, GOLD)])
        assert segments == [
            Segment(0, 2, RED, 1),
            Segment(2, 5, BLUE, 2),
            Segment(5, 8, GOLD, 3),
            Segment(8, 10),
        ]

    def test_uncolored_highlight(self):
        segments = render(DOC, [Highlight(1, 0, 10, RED), Highlight(2, 4, 6, None)])
        assert segments[1] == Segment(4, 6, None, 2)

    def test_highlights_clipped_to_document(self):
        segments = render("abcde", [Highlight(1, 3, 20, RED), Highlight(2, 7, 9, BLUE)])
        assert segments == [Segment(0, 3), Segment(3, 5, RED, 1)]

    def test_storage_order_irrelevant(self):
        rng = random.Random(7)
        highlights = [Highlight(i, *sorted(rng.sample(range(11), 2)), rng.choice([RED, BLUE, GOLD])) for i in range(1, 12)]
        expected = render(DOC, highlights)
        for _ in range(5):
            shuffled = highlights[:]
            rng.shuffle(shuffled)
            assert render(DOC, shuffled) == expected

    def test_always_full_coverage(self):
        rng = random.Random(11)
        for trial in range(50):
            document = "x" * rng.randint(0, 30)
            highlights = []
            for i in range(rng.randint(0, 8)):
                if len(document) < 1:
                    break
                start = rng.randrange(len(document))
                end = rng.randint(start + 1, len(document))
                highlights.append(Highlight(i + 1, start, end, rng.choice([RED, BLUE])))
            _assert_partition(document, render(document, highlights))

    def test_disjoint_sets_match_trivial_partition(self):
        rng = random.Random(23)
        for trial in range(100):
            document = "y" * rng.randint(1, 40)
            cuts = sorted(rng.sample(range(len(document) + 1), min(len(document) + 1, rng.randint(2, 10))))
            ids = list(range(1, len(cuts)))
            rng.shuffle(ids)
            highlights = [
                Highlight(ids[i], start, end, rng.choice([RED, BLUE, GOLD, None]))
                for i, (start, end) in enumerate(zip(cuts, cuts[1:]))
                if rng.random() < 0.6
            ]

            owner = [(None, None)] * len(document)
            for h in highlights:
                for pos in range(h.start, h.end):
                    owner[pos] = (h.color, h.id)
            expected = []
            for pos, (color, hid) in enumerate(owner):
                if expected and (expected[-1].color, expected[-1].highlight_id) == (color, hid):
                    expected[-1] = Segment(expected[-1].start, pos + 1, color, hid)
                else:
                    expected.append(Segment(pos, pos + 1, color, hid))

            assert render(document, highlights) == expected, trial

    def test_remove_round_trip(self):
        store = HighlightStore(HighlightCounter(), limit=len(DOC))
        store.add(0, 4, RED)
        store.add(6, 9, GOLD)
        before = render(DOC, store.highlights())
        added = store.add(2, 8, BLUE)
        assert render(DOC, store.highlights()) != before
        store.remove(added)
        assert render(DOC, store.highlights()) == before


class TestMarkup:

    def test_runs(self):
        runs = to_runs(DOC, [Segment(0, 3, RED, 1), Segment(3, 10)])
        assert runs == [Run("abc", RED, 1), Run("defghij")]

    def test_escapes_and_line_breaks(self):
        markup = to_markup([Run("<b>&", None), Run("x\ny", GOLD, 4), Run("'\"")])
        assert markup == (
            "&lt;b&gt;&amp;"
            '<mark data-highlight-id="4" style="background-color: #FFD700; color: inherit;">x<br/>y</mark>'
            "&#x27;&quot;"
        )
