# tests/test_grouping.py
"""
Anchor filtering, grouping of coincident anchors and processing order.
"""

from __future__ import annotations

import logging
import math

from pointlabel.core.grouping import (
    filter_anchors,
    group_anchors,
    order_groups,
    prepare_groups,
    round_half_up,
)
from pointlabel.core.types import Anchor


def _a(x: float, y: float, text: str = "P", w: float = 10.0, h: float = 10.0) -> Anchor:
    return Anchor(x=x, y=y, text=text, width=w, height=h)


def test_round_half_up() -> None:
    assert round_half_up(2.5) == 3
    assert round_half_up(-2.5) == -2
    assert round_half_up(1.49) == 1
    assert round_half_up(0.5) == 1


def test_filter_anchors_drops_blank_and_non_finite() -> None:
    kept = filter_anchors([
        _a(1, 1, "ok"),
        _a(2, 2, ""),
        _a(3, 3, "   "),
        _a(math.nan, 4, "nan"),
        _a(5, math.inf, "inf"),
        _a(6, 6, "also ok"),
    ])
    assert [a.text for a in kept] == ["ok", "also ok"]


def test_filter_anchors_drops_negative_boxes(caplog) -> None:
    caplog.set_level(logging.DEBUG, logger="pointlabel.core.grouping")
    kept = filter_anchors([_a(1, 1, "neg", w=-10), _a(2, 2, "flat", h=-0.5), _a(3, 3, "empty box", w=0, h=0)])
    assert [a.text for a in kept] == ["empty box"]
    assert sum("invalid_anchor" in r.getMessage() for r in caplog.records) == 2


def test_group_merges_same_rounded_coordinate() -> None:
    groups = group_anchors([_a(50.2, 50.4, "A", 10, 10), _a(49.8, 50.1, "B", 12, 8)])
    assert len(groups) == 1
    g = groups[0]
    assert g.key == (50, 50)
    assert g.text == "A, B"
    assert g.width == 12 and g.height == 10
    assert (g.x, g.y) == (50.2, 50.4)


def test_group_keeps_distinct_coordinates_apart() -> None:
    groups = group_anchors([_a(50, 50, "A"), _a(52, 52, "B")])
    assert [g.text for g in groups] == ["A", "B"]


def test_group_owns_by_identity() -> None:
    a = _a(1, 1, "A")
    twin = _a(1, 1, "A")
    g = group_anchors([a])[0]
    assert g.owns(a)
    assert not g.owns(twin)


def test_order_groups_by_first_member_y_stable() -> None:
    groups = group_anchors([_a(10, 30, "low"), _a(20, 10, "top"), _a(30, 30, "low2"), _a(40, 20, "mid")])
    ordered = order_groups(groups)
    assert [g.text for g in ordered] == ["top", "mid", "low", "low2"]


def test_prepare_groups_pipeline() -> None:
    ordered = prepare_groups([_a(0, 5, "b"), _a(0, 1, ""), _a(0, 2, "a"), _a(0.2, 5.3, "c")])
    assert [g.text for g in ordered] == ["a", "b, c"]
