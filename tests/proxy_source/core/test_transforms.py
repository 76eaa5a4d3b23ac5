from __future__ import annotations

import pytest

from proxy_source.core.pagination import PruneWindow
from proxy_source.core.transforms import (
    Filter,
    Sorter,
    filter_records,
    group_records,
    prune_records,
    sort_records,
)


def _make_people():
    return [
        {"name": "ann", "age": 31, "team": "red", "tags": ["a", "b"]},
        {"name": "bob", "age": 25, "team": "blue"},
        {"name": "cid", "age": 40, "team": "red", "tags": ["b"]},
        {"name": "dee", "team": "green"},
    ]


def test_filter_returns_original_record_objects():
    people = _make_people()

    out = filter_records(people, [Filter("team", "red")])

    assert [p["name"] for p in out] == ["ann", "cid"]
    assert out[0] is people[0]


def test_filters_are_and_combined():
    people = _make_people()

    out = filter_records(people, [Filter("team", "red"), Filter("age", 35, "gt")])

    assert [p["name"] for p in out] == ["cid"]


def test_missing_values_only_match_negative_operators():
    people = _make_people()

    assert [p["name"] for p in filter_records(people, [Filter("age", 30, "lt")])] == ["bob"]
    assert [p["name"] for p in filter_records(people, [Filter("age", 25, "ne")])] == ["ann", "cid", "dee"]
    assert filter_records(people, [Filter("missing_field", 1)]) == []
    assert len(filter_records(people, [Filter("missing_field", [1], "not_in")])) == 4


def test_in_and_contains_operators():
    people = _make_people()

    assert [p["name"] for p in filter_records(people, [Filter("team", ["blue", "green"], "in")])] == ["bob", "dee"]
    assert [p["name"] for p in filter_records(people, [Filter("tags", "a", "contains")])] == ["ann"]
    assert [p["name"] for p in filter_records(people, [Filter("name", "d", "contains")])] == ["cid", "dee"]


def test_empty_filter_list_keeps_everything():
    people = _make_people()
    assert filter_records(people, []) == people


def test_unknown_operator_is_rejected():
    with pytest.raises(ValueError, match="Unknown filter operator"):
        Filter("age", 1, "between")


def test_membership_filters_need_a_collection():
    people = _make_people()

    with pytest.raises(ValueError, match="needs a list"):
        Filter("team", "red", "in")
    with pytest.raises(ValueError, match="needs a list"):
        Filter("team", "red", "not_in")
    assert [p["name"] for p in filter_records(people, [Filter("team", ("red",), "in")])] == ["ann", "cid"]


def test_large_ints_next_to_missing_values_keep_precision():
    big = 2**53 + 1
    data = [{"id": big}, {"id": None}, {"id": 2**53}]

    assert filter_records(data, [Filter("id", big)]) == [data[0]]
    assert filter_records(data, [Filter("id", [big], "in")]) == [data[0]]


def test_sort_is_stable_with_missing_values_last():
    people = _make_people()

    asc = sort_records(people, Sorter("age"))
    desc = sort_records(people, Sorter("age", descending=True))
    by_team = sort_records(people, Sorter("team"))

    assert [p["name"] for p in asc] == ["bob", "ann", "cid", "dee"]
    assert [p["name"] for p in desc] == ["cid", "ann", "bob", "dee"]
    assert [p["name"] for p in by_team] == ["bob", "dee", "ann", "cid"]


def test_sort_mixed_types_ranks_numbers_before_strings():
    data = [{"v": 2}, {"v": "a"}, {"v": 1}, {}, {"v": "b"}]

    asc = sort_records(data, Sorter("v"))
    desc = sort_records(data, Sorter("v", descending=True))

    assert [r.get("v") for r in asc] == [1, 2, "a", "b", None]
    assert [r.get("v") for r in desc] == ["b", "a", 2, 1, None]


def test_sort_by_unknown_field_leaves_order():
    people = _make_people()
    assert sort_records(people, Sorter("nope")) == people


def test_prune_slices_window():
    data = [{"i": i} for i in range(45)]

    assert prune_records(data, PruneWindow(40, 20)) == data[40:]
    assert prune_records(data, PruneWindow(0, 20)) == data[:20]


def test_group_keeps_first_appearance_order():
    people = _make_people() + [{"name": "eve", "age": 22}]

    groups = group_records(people, "team")

    assert [g["key"] for g in groups] == ["red", "blue", "green", None]
    assert [p["name"] for p in groups[0]["data"]] == ["ann", "cid"]
    assert [p["name"] for p in groups[3]["data"]] == ["eve"]


def test_group_by_unhashable_values():
    data = [{"k": [1]}, {"k": [2]}, {"k": [1]}, {"k": {"x": 1}}]

    groups = group_records(data, "k")

    assert [g["key"] for g in groups] == [[1], [2], {"x": 1}]
    assert [len(g["data"]) for g in groups] == [2, 1, 1]
    assert groups[0]["data"][1] is data[2]


def test_transforms_handle_empty_input():
    assert filter_records([], [Filter("a", 1)]) == []
    assert sort_records([], Sorter("a")) == []
    assert group_records([], "a") == []
