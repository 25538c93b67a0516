import pytest

from app.services.similarity import mean, numeric_similarity, ordinal_similarity, set_overlap, shared_items, table_lookup


def test_set_overlap_boundaries():
    assert set_overlap([], []) == 1.0
    assert set_overlap(["a"], []) == 0.0
    assert set_overlap([], ["a"]) == 0.0
    assert set_overlap(["a", "b"], ["b", "c"]) == pytest.approx(1 / 3)


def test_set_overlap_ignores_case_and_duplicates():
    assert set_overlap(["Honesty", "honesty", "Family"], ["family", "HONESTY"]) == 1.0


def test_numeric_similarity_scale():
    assert numeric_similarity(5, 5) == 1.0
    assert numeric_similarity(1, 10) == pytest.approx(0.1)
    assert numeric_similarity(0, 20) == 0.0


def test_ordinal_similarity_steps_and_default():
    scale = ("a", "b", "c", "d", "e")
    assert ordinal_similarity("a", "a", scale, default="c") == 1.0
    assert ordinal_similarity("a", "b", scale, default="c") == pytest.approx(0.8)
    assert ordinal_similarity("a", "e", scale, default="c") == pytest.approx(0.2)
    assert ordinal_similarity("zzz", "c", scale, default="c") == 1.0


def test_table_lookup_is_symmetric_and_defaults():
    table = {"x": {"y": 0.2}, "y": {"x": 0.6}}
    assert table_lookup(table, "x", "y") == pytest.approx(0.4)
    assert table_lookup(table, "y", "x") == pytest.approx(0.4)
    assert table_lookup(table, "x", "missing") == 0.5


def test_shared_items_keeps_first_order():
    assert shared_items(["Hiking", "Chess", "hiking", "Jazz"], ["jazz", "hiking"]) == ["Hiking", "Jazz"]


def test_mean_of_nothing_is_neutral():
    assert mean([]) == 0.5
    assert mean([1.0, 0.0]) == 0.5
