# tests/test_layout_properties.py
"""
Multi-label placement: no overlap, exclusion zones, bounds, determinism,
grouping and ordering over realistic scatters, plus the degenerate cases.
"""

from __future__ import annotations

import logging
import math
import time

import numpy as np
import pytest

from pointlabel.core.error_codes import ALL_CANDIDATES_DISQUALIFIED, NO_CANDIDATES
from pointlabel.core.evaluate import evaluate_layout, exclusion_violations
from pointlabel.core.geometry import bounds_intersect, padded_bounds, violates_exclusion
from pointlabel.core.layout import LabelPlacer, place_labels
from pointlabel.core.types import Anchor, AreaSize, PlacerOptions


def _grid_anchors(seed: int = 7) -> list[Anchor]:
    """Well spread scatter: jittered 5x4 grid, 90 px spacing, 30x12 labels."""
    rng = np.random.default_rng(seed)
    out = []
    for row in range(4):
        for col in range(5):
            x = 60 + col * 90 + float(rng.uniform(-10, 10))
            y = 50 + row * 90 + float(rng.uniform(-10, 10))
            out.append(Anchor(x=x, y=y, text=f"P{row}{col}", width=30, height=12))
    return out


def _crowded_anchors(seed: int = 3, n: int = 60) -> list[Anchor]:
    rng = np.random.default_rng(seed)
    return [
        Anchor(x=float(x), y=float(y), text=f"L{i}", width=28, height=12)
        for i, (x, y) in enumerate(zip(rng.uniform(10, 190, n), rng.uniform(10, 140, n)))
    ]


AREA = AreaSize(500.0, 400.0)


def test_no_padded_overlap_in_crowded_scatter() -> None:
    anchors = _crowded_anchors()
    outcome = place_labels(AreaSize(200.0, 150.0), anchors)
    assert outcome.labels
    assert len(outcome.labels) + len(outcome.dropped) == len(anchors)
    boxes = [padded_bounds(l.x, l.y, l.width, l.height) for l in outcome.labels]
    for i in range(len(boxes)):
        for j in range(i + 1, len(boxes)):
            assert not bounds_intersect(boxes[i], boxes[j])


def test_crowded_scatter_drops_some_labels_without_raising() -> None:
    outcome = place_labels(AreaSize(200.0, 150.0), _crowded_anchors())
    assert outcome.dropped
    for d in outcome.dropped:
        assert d.reason in (ALL_CANDIDATES_DISQUALIFIED, NO_CANDIDATES)


def test_labels_never_enter_own_exclusion_zone() -> None:
    opts = PlacerOptions()
    outcome = place_labels(AreaSize(200.0, 150.0), _crowded_anchors(), opts)
    for lab in outcome.labels:
        assert not violates_exclusion(
            lab.x, lab.y, lab.width, lab.height, lab.owner.x, lab.owner.y, opts.exclusion_radius,
        )


def test_labels_avoid_foreign_exclusion_zones_when_room_exists() -> None:
    anchors = _grid_anchors()
    opts = PlacerOptions()
    outcome = place_labels(AREA, anchors, opts)
    assert len(outcome.labels) == len(anchors)
    assert exclusion_violations(outcome, anchors, opts) == []


def test_labels_inside_area() -> None:
    anchors = _grid_anchors()
    outcome = place_labels(AREA, anchors)
    assert len(outcome.labels) == len(anchors)
    eps = 1.0
    for lab in outcome.labels:
        assert lab.x >= -eps and lab.x + lab.width <= AREA.width + eps
        assert lab.y >= -eps and lab.y + lab.height <= AREA.height + eps


def test_labels_stay_close_to_anchor() -> None:
    anchors = _grid_anchors()
    outcome = place_labels(AREA, anchors)
    metrics = evaluate_layout(outcome, anchors, AREA)
    assert metrics.max_leader_px < 30.0
    assert metrics.overlapping_pairs == 0
    assert metrics.out_of_bounds_count == 0


def test_deterministic_output() -> None:
    anchors = _crowded_anchors()
    a = place_labels(AreaSize(200.0, 150.0), anchors)
    b = place_labels(AreaSize(200.0, 150.0), list(anchors))
    assert [l.as_tuple() for l in a.labels] == [l.as_tuple() for l in b.labels]
    assert [d.text for d in a.dropped] == [d.text for d in b.dropped]


def test_output_follows_ascending_anchor_y() -> None:
    outcome = place_labels(AreaSize(200.0, 150.0), _crowded_anchors())
    ys = [lab.owner.first.y for lab in outcome.labels]
    assert ys == sorted(ys)


def test_coincident_anchors_share_one_label() -> None:
    anchors = [
        Anchor(x=50.3, y=50.2, text="A", width=10, height=10),
        Anchor(x=49.9, y=50.4, text="B", width=14, height=8),
    ]
    opts = PlacerOptions()
    outcome = place_labels(AreaSize(100.0, 100.0), anchors, opts)
    assert len(outcome.labels) == 1
    lab = outcome.labels[0]
    assert lab.text == "A, B"
    assert (lab.width, lab.height) == (14, 10)
    assert not violates_exclusion(lab.x, lab.y, lab.width, lab.height, 50.3, 50.2, opts.exclusion_radius)
    assert 1.0 <= lab.x and lab.x + lab.width <= 99.0
    assert 1.0 <= lab.y and lab.y + lab.height <= 99.0
    cx, cy = lab.center
    assert math.hypot(cx - 50.3, cy - 50.2) < 20.0


def test_near_but_distinct_anchors_get_two_labels() -> None:
    anchors = [
        Anchor(x=50, y=50, text="A", width=10, height=10),
        Anchor(x=52, y=52, text="B", width=10, height=10),
    ]
    outcome = place_labels(AreaSize(100.0, 100.0), anchors)
    assert [l.text for l in outcome.labels] == ["A", "B"]
    a, b = (padded_bounds(l.x, l.y, l.width, l.height) for l in outcome.labels)
    assert not bounds_intersect(a, b)


def test_unplaceable_label_is_dropped() -> None:
    opts = PlacerOptions(point_radius=7, boundary_buffer=1)
    anchors = [Anchor(x=5, y=5, text="P", width=4, height=4)]
    outcome = place_labels(AreaSize(10.0, 10.0), anchors, opts)
    assert outcome.labels == []
    assert len(outcome.dropped) == 1
    assert outcome.dropped[0].text == "P"


def test_degenerate_inputs_return_empty() -> None:
    assert place_labels(AREA, []).labels == []
    anchor = Anchor(x=5, y=5, text="P", width=4, height=4)
    assert place_labels(AreaSize(0.0, 100.0), [anchor]).labels == []
    assert place_labels(AreaSize(100.0, -1.0), [anchor]).labels == []


def test_malformed_anchors_are_skipped() -> None:
    anchors = [
        Anchor(x=math.nan, y=5, text="nan", width=10, height=10),
        Anchor(x=50, y=50, text=" ", width=10, height=10),
        Anchor(x=30, y=70, text="neg", width=-10, height=12),
        Anchor(x=70, y=70, text="flat", width=10, height=-1),
        Anchor(x=50, y=20, text="ok", width=10, height=10),
    ]
    outcome = place_labels(AreaSize(100.0, 100.0), anchors)
    assert [l.text for l in outcome.labels] == ["ok"]
    assert outcome.dropped == []


def test_accepts_tuple_area_and_mapping_options() -> None:
    anchors = [Anchor(x=50, y=50, text="A", width=10, height=10)]
    outcome = place_labels((100, 100), anchors, {"anglesPerRing": 16, "rings": 2})
    assert len(outcome.labels) == 1


def test_label_placer_facade_matches_function() -> None:
    anchors = _grid_anchors()
    placer = LabelPlacer(AREA)
    labels = placer.place_all(anchors)
    expected = place_labels(AREA, anchors).labels
    assert [l.as_tuple() for l in labels] == [l.as_tuple() for l in expected]
    assert placer.last_outcome is not None


@pytest.mark.parametrize("rings,angles", [(1, 8), (3, 16), (5, 32)])
def test_option_variants_keep_no_overlap(rings: int, angles: int) -> None:
    opts = PlacerOptions(rings=rings, angles_per_ring=angles)
    outcome = place_labels(AreaSize(200.0, 150.0), _crowded_anchors(n=30), opts)
    metrics = evaluate_layout(outcome, _crowded_anchors(n=30), AreaSize(200.0, 150.0), opts)
    assert metrics.overlapping_pairs == 0


def test_out_of_bounds_penalty_keeps_edge_label_inside() -> None:
    opts = PlacerOptions(out_of_bounds_penalty=300)
    anchors = [Anchor(x=3, y=200, text="edge", width=30, height=12)]
    outcome = place_labels(AREA, anchors, opts)
    assert len(outcome.labels) == 1
    lab = outcome.labels[0]
    assert lab.x >= 1.0 and lab.x + lab.width <= AREA.width - 1.0
    assert lab.y >= 1.0 and lab.y + lab.height <= AREA.height - 1.0


def test_out_of_bounds_choice_only_when_it_outscores_inside_candidates() -> None:
    opts = PlacerOptions(debug=True)
    anchors = [Anchor(x=3, y=200, text="edge", width=30, height=12)]
    outcome = place_labels(AREA, anchors, opts)
    entry = outcome.diagnostics[0]
    chosen = entry.candidates[entry.selected_index]
    inside = [
        c for c in entry.candidates
        if c.x >= 1.0 and c.y >= 1.0 and c.x + 30 <= AREA.width - 1.0 and c.y + 12 <= AREA.height - 1.0
    ]
    assert inside
    assert chosen.score >= max(c.score for c in inside)


def test_hundred_anchor_pass_stays_fast() -> None:
    rng = np.random.default_rng(11)
    anchors = [
        Anchor(x=float(x), y=float(y), text=f"A{i}", width=28, height=12)
        for i, (x, y) in enumerate(zip(rng.uniform(10, 630, 100), rng.uniform(10, 470, 100)))
    ]
    area = AreaSize(640.0, 480.0)
    place_labels(area, anchors[:5])
    start = time.perf_counter()
    outcome = place_labels(area, anchors)
    elapsed = time.perf_counter() - start
    assert len(outcome.labels) + len(outcome.dropped) == 100
    assert elapsed < 2.0


def test_unavoidable_neighbor_violation_is_logged(caplog) -> None:
    # every in-bounds spot for A reaches B's exclusion zone; off-area spots are priced out
    anchors = [
        Anchor(x=15, y=15, text="A", width=20, height=10),
        Anchor(x=45, y=15, text="B", width=20, height=10),
    ]
    opts = PlacerOptions(out_of_bounds_penalty=100000)
    with caplog.at_level(logging.WARNING, logger="pointlabel.core.layout"):
        outcome = place_labels(AreaSize(60.0, 30.0), anchors, opts)
    assert outcome.labels[0].text == "A"
    hits = exclusion_violations(outcome, anchors, opts)
    assert any(i == 0 and a.text == "B" for i, a in hits)
    assert any("'A' enters the exclusion zone" in r.getMessage() for r in caplog.records)
