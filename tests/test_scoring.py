# tests/test_scoring.py
"""
Each score term in isolation, then the summed score with its breakdown.
"""

from __future__ import annotations

import pytest
from shapely.geometry import box

from pointlabel.core.candidates import generate_candidates
from pointlabel.core.grouping import group_anchors
from pointlabel.core.scoring import (
    AnchorField,
    border_penalty,
    center_bonus,
    distance_penalty,
    exclusion_penalty,
    neighbor_penalty,
    out_of_bounds_penalty,
    overlap_penalty,
    point_penalty,
    score_candidate,
    score_candidates,
)
from pointlabel.core.spatial_index import LabelIndex
from pointlabel.core.types import Anchor, AreaSize, Candidate, LabelBox, PlacerOptions

AREA = AreaSize(100.0, 100.0)
OPTS = PlacerOptions()


def _two_groups():
    groups = group_anchors([
        Anchor(x=50, y=50, text="A", width=20, height=10),
        Anchor(x=80, y=52, text="B", width=20, height=10),
    ])
    return groups, AnchorField(groups)


def test_border_penalty_quadratic_inside_threshold() -> None:
    assert border_penalty(50.0, 50.0, AREA) == 0.0
    assert border_penalty(5.0, 50.0, AREA) == pytest.approx(25.0)
    assert border_penalty(50.0, 100.0, AREA) == pytest.approx(100.0)


def test_center_bonus_peaks_at_centre() -> None:
    assert center_bonus(50.0, 50.0, AREA) == pytest.approx(10.0)
    assert center_bonus(0.0, 0.0, AREA) == pytest.approx(0.0)
    assert 0.0 < center_bonus(25.0, 50.0, AREA) < 10.0


def test_distance_penalty_ten_per_pixel() -> None:
    groups, _ = _two_groups()
    a = groups[0]
    # label centre at (67, 50): 17 px from the anchor
    assert distance_penalty(Candidate(x=57, y=45), a) == pytest.approx(170.0)


def test_exclusion_penalty_vetoes_covering_own_anchor() -> None:
    groups, _ = _two_groups()
    a = groups[0]
    assert exclusion_penalty(Candidate(x=45, y=45), a, OPTS) == 100000.0
    assert exclusion_penalty(Candidate(x=57, y=45), a, OPTS) == 0.0
    # corner 5 px from the anchor
    assert exclusion_penalty(Candidate(x=53, y=54), a, OPTS) == 100000.0


def test_out_of_bounds_penalty_uses_option() -> None:
    groups, _ = _two_groups()
    a = groups[0]
    assert out_of_bounds_penalty(Candidate(x=0, y=10), a, AREA, OPTS) == 0.0
    strict = PlacerOptions(out_of_bounds_penalty=300)
    assert out_of_bounds_penalty(Candidate(x=0, y=10), a, AREA, strict) == 300.0
    assert out_of_bounds_penalty(Candidate(x=1, y=10), a, AREA, strict) == 0.0
    assert out_of_bounds_penalty(Candidate(x=79.5, y=10), a, AREA, strict) == 300.0


def test_point_penalty_counts_foreign_anchors_inside() -> None:
    groups, field = _two_groups()
    a = groups[0]
    others = field.excluding(a)
    assert len(others) == 1
    assert point_penalty(box(75, 45, 95, 55), others, OPTS) == 500.0
    assert point_penalty(box(10, 10, 30, 20), others, OPTS) == 0.0


def test_point_penalty_ignores_own_group() -> None:
    groups, field = _two_groups()
    a = groups[0]
    assert point_penalty(box(40, 40, 60, 60), field.excluding(a), OPTS) == 0.0


def test_neighbor_penalty_for_disk_without_centre() -> None:
    groups, field = _two_groups()
    others = field.excluding(groups[0])
    # right edge 3 px left of B (80, 52): disk reaches in, centre outside
    assert neighbor_penalty(box(57, 47, 77, 57), others, OPTS) == 500.0
    # centre inside: counted by point_penalty only
    assert neighbor_penalty(box(75, 45, 95, 55), others, OPTS) == 0.0
    # exactly on the radius is allowed
    assert neighbor_penalty(box(53, 47, 73, 57), others, OPTS) == 0.0


def test_overlap_penalty_per_collision() -> None:
    groups, _ = _two_groups()
    a = groups[0]
    index = LabelIndex()
    assert overlap_penalty(Candidate(x=57, y=45), a, index, OPTS) == 0.0
    index.insert(LabelBox(x=60, y=45, width=10, height=10, rotation=0.0, text="X", owner=groups[1]))
    index.insert(LabelBox(x=70, y=47, width=10, height=10, rotation=0.0, text="Y", owner=groups[1]))
    assert overlap_penalty(Candidate(x=57, y=45), a, index, OPTS) == 200000.0
    # 4 px gap between the boxes still touches once both are padded by 2
    assert overlap_penalty(Candidate(x=36, y=45), a, index, OPTS) == 100000.0
    assert overlap_penalty(Candidate(x=35, y=45), a, index, OPTS) == 0.0


def test_score_candidate_sums_breakdown() -> None:
    groups, field = _two_groups()
    a = groups[0]
    total, breakdown = score_candidate(Candidate(x=50, y=60), a, field, LabelIndex(), AREA, OPTS)
    assert total == pytest.approx(breakdown.total)
    assert breakdown.overlap_penalty == 0.0
    assert breakdown.exclusion_penalty == 0.0
    assert breakdown.distance_penalty < 0.0
    assert breakdown.center_bonus > 0.0
    for name, value in breakdown.as_dict().items():
        if name != "center_bonus":
            assert value <= 0.0


def test_score_candidate_veto_reaches_disqualify_threshold() -> None:
    groups, field = _two_groups()
    total, breakdown = score_candidate(Candidate(x=45, y=45), groups[0], field, LabelIndex(), AREA, OPTS)
    assert breakdown.exclusion_penalty == -100000.0
    assert total <= -100000.0


def test_batch_scores_match_single_candidate_scores() -> None:
    groups = group_anchors([
        Anchor(x=40, y=40, text="A", width=20, height=10),
        Anchor(x=62, y=44, text="B", width=16, height=10),
        Anchor(x=30, y=58, text="C", width=16, height=10),
        Anchor(x=6, y=35, text="D", width=16, height=10),
    ])
    field = AnchorField(groups)
    opts = PlacerOptions(out_of_bounds_penalty=50, padding=1)
    index = LabelIndex()
    index.insert(LabelBox(x=45, y=20, width=20, height=10, rotation=0.0, text="placed", owner=groups[1]))
    a = groups[0]
    cands = generate_candidates(a, AREA, opts) + [Candidate(x=35, y=35)]

    terms = score_candidates(cands, a, field.excluding(a), index, AREA, opts)
    assert len(terms) == len(cands)
    totals = terms.total
    for i, c in enumerate(cands):
        total, expected = score_candidate(c, a, field, index, AREA, opts)
        got = terms.breakdown(i)
        for name, value in expected.as_dict().items():
            assert getattr(got, name) == pytest.approx(value, abs=1e-9), (i, name)
        assert totals[i] == pytest.approx(total, abs=1e-9)
        assert totals[i] == got.total
    # the batch covers every kind of term at least once
    for name in ("overlap_penalty", "neighbor_penalty", "out_of_bounds_penalty", "exclusion_penalty"):
        assert (getattr(terms, name) < 0).any(), name


def test_batch_scores_without_foreign_anchors_or_labels() -> None:
    groups = group_anchors([Anchor(x=50, y=50, text="solo", width=20, height=10)])
    field = AnchorField(groups)
    cands = generate_candidates(groups[0], AREA, OPTS)
    terms = score_candidates(cands, groups[0], field.excluding(groups[0]), LabelIndex(), AREA, OPTS)
    assert not terms.point_penalty.any()
    assert not terms.neighbor_penalty.any()
    assert not terms.overlap_penalty.any()
