from __future__ import annotations

import pytest

from proxy_source.core.pagination import (
    PruneWindow,
    compute_pagination,
    next_start,
    previous_start,
)


def test_pagination_first_page_of_45():
    p = compute_pagination(45, PruneWindow(start=0, limit=20))

    assert p.total == 45
    assert p.current_page == 1
    assert p.last_page == 2
    assert p.per_page == 20
    assert p.from_ == 0
    assert p.to == 20
    assert p.has_previous_page is False
    assert p.has_next_page is True


def test_pagination_keeps_unclamped_arithmetic():
    # last_page floors and 'to' is not clamped to the total
    p = compute_pagination(45, PruneWindow(start=40, limit=20))

    assert p.current_page == 3
    assert p.last_page == 2
    assert p.to == 60
    assert p.has_next_page is False
    assert p.has_previous_page is True


def test_pagination_to_dict_uses_from_key():
    d = compute_pagination(5, PruneWindow(start=0, limit=2)).to_dict()
    assert d["from"] == 0
    assert "from_" not in d
    assert d["to"] == 2


def test_missing_window_defaults_to_twenty():
    p = compute_pagination(10, None)
    assert p.per_page == 20
    assert p.current_page == 1


def test_next_start_clamps_to_last_full_page():
    assert next_start(45, PruneWindow(0, 20)) == 20
    assert next_start(45, PruneWindow(20, 20)) == 40
    assert next_start(45, PruneWindow(40, 20)) == 40


def test_previous_start_never_negative():
    assert previous_start(45, PruneWindow(40, 20)) == 20
    assert previous_start(45, PruneWindow(10, 20)) == 0
    assert previous_start(45, PruneWindow(0, 20)) == 0


@pytest.mark.parametrize("start,limit", [(-1, 20), (0, 0), (0, -5)])
def test_prune_window_rejects_invalid_bounds(start, limit):
    with pytest.raises(ValueError):
        PruneWindow(start=start, limit=limit)


def test_prune_window_from_dict_defaults():
    assert PruneWindow.from_dict({}) == PruneWindow(0, 20)
    assert PruneWindow.from_dict({"start": 40, "limit": None}) == PruneWindow(40, 20)
