from __future__ import annotations

import pytest

from six_degrees.core.ranking import jaccard_overlap


def test_identical_sets_overlap_fully() -> None:
    assert jaccard_overlap({"action", "rpg"}, {"rpg", "action"}) == 1.0


def test_disjoint_and_empty_sets() -> None:
    assert jaccard_overlap({"action"}, {"puzzle"}) == 0.0
    assert jaccard_overlap(set(), set()) == 0.0
    assert jaccard_overlap({"action"}, set()) == 0.0


def test_partial_overlap_is_symmetric() -> None:
    a = frozenset({"action", "rpg", "indie"})
    b = frozenset({"rpg", "indie", "strategy", "co-op"})

    assert jaccard_overlap(a, b) == pytest.approx(2 / 5)
    assert jaccard_overlap(a, b) == jaccard_overlap(b, a)
