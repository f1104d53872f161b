"""
Tests for the per-side highlight store.
"""

import pytest

from revision_compare.core.errors import StoreContractViolation
from revision_compare.services.highlight_store import HighlightCounter, HighlightStore


@pytest.fixture
def counter() -> HighlightCounter:
    return HighlightCounter()


@pytest.fixture
def store(counter) -> HighlightStore:
    return HighlightStore(counter, limit=20, name="left")


class TestAdd:

    def test_ids_increase(self, store):
        assert store.add(0, 3, "#FFD700") == 1
        assert store.add(0, 3, "#FFD700") == 2
        assert len(store) == 2

    def test_shared_counter(self, counter, store):
        other = HighlightStore(counter, limit=20, name="right")
        assert store.add(0, 1) == 1
        assert other.add(0, 1) == 2
        assert store.add(1, 2) == 3

    def test_ids_not_reused(self, store):
        first = store.add(0, 3)
        store.remove(first)
        store.clear()
        assert store.add(0, 3) == first + 1

    @pytest.mark.parametrize("start,end", [(3, 3), (5, 2), (-1, 2), (10, 21)])
    def test_contract_violation(self, store, start, end):
        with pytest.raises(StoreContractViolation):
            store.add(start, end)

    def test_unbounded_store(self, counter):
        store = HighlightStore(counter)
        assert store.add(100, 200) == 1


class TestRemove:

    def test_remove_overlapping_half_open(self, store):
        store.add(0, 5, "#FFD700")
        store.add(8, 12, "#FF6347")
        assert store.remove_overlapping(5, 8) == []
        removed = store.remove_overlapping(4, 9)
        assert [h.id for h in removed] == [1, 2]
        assert len(store) == 0

    def test_remove_overlapping_keeps_others(self, store):
        store.add(0, 2)
        keep = store.add(10, 15)
        store.remove_overlapping(0, 5)
        assert [h.id for h in store] == [keep]

    def test_remove_by_id(self, store):
        hid = store.add(1, 4, "#7FFFD4")
        assert store.remove(hid).start == 1
        assert store.remove(hid) is None
        assert store.get(hid) is None

    def test_clear(self, store):
        store.add(0, 1)
        store.add(1, 2)
        store.clear()
        assert store.highlights() == []
