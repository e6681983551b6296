# pointlabel/core/scoring.py
"""
Candidate scoring: one function per term, summed by score_candidate.
score_candidates computes the same terms for a whole group's candidates as
numpy arrays; the orchestrator uses that. Higher is better. Overlap with placed labels and entering the own anchor's
exclusion zone are scaled to dominate every other term, so any such candidate
ends at or below DISQUALIFY_SCORE.
"""

from __future__ import annotations

import math
from dataclasses import dataclass, field, fields
from typing import Sequence

import numpy as np
import shapely
from shapely.geometry import Polygon

from pointlabel.core.config import (
    BORDER_PENALTY_SCALE,
    BORDER_THRESHOLD_PX,
    CENTER_BONUS_MAX,
    DISTANCE_WEIGHT,
    EXCLUSION_VIOLATION_PENALTY,
    LABEL_PADDING_PX,
)
from pointlabel.core.geometry import (
    center_distance,
    disks_hit_rect,
    inner_bounds,
    is_out_of_bounds,
    label_rect,
    padded_bounds,
    points_in_rect,
    violates_exclusion,
)
from pointlabel.core.spatial_index import LabelIndex
from pointlabel.core.types import AnchorGroup, AreaSize, Candidate, PlacerOptions, ScoreBreakdown


@dataclass(frozen=True)
class AnchorSet:
    """Coordinates of a set of anchors as parallel arrays."""
    xs: np.ndarray
    ys: np.ndarray
    points: np.ndarray

    def __len__(self) -> int:
        return len(self.xs)


@dataclass(eq=False)
class AnchorField:
    """
    Every anchor of a pass, grouped, for vectorized coverage queries.
    excluding(group) gives the anchors a candidate of that group must avoid.
    """
    groups: Sequence[AnchorGroup]
    xs: np.ndarray = field(init=False)
    ys: np.ndarray = field(init=False)
    points: np.ndarray = field(init=False)
    group_ids: np.ndarray = field(init=False)
    _positions: dict[int, int] = field(init=False, repr=False)

    def __post_init__(self) -> None:
        members = [(gid, a) for gid, g in enumerate(self.groups) for a in g.members]
        self.xs = np.array([a.x for _, a in members], dtype=np.float64)
        self.ys = np.array([a.y for _, a in members], dtype=np.float64)
        self.group_ids = np.array([gid for gid, _ in members], dtype=np.int64)
        self.points = shapely.points(self.xs, self.ys) if members else np.empty(0, dtype=object)
        self._positions = {id(g): gid for gid, g in enumerate(self.groups)}

    def excluding(self, group: AnchorGroup) -> AnchorSet:
        gid = self._positions.get(id(group))
        if gid is not None:
            mask = self.group_ids != gid
        else:
            mask = np.array(
                [not group.owns(a) for g in self.groups for a in g.members],
                dtype=bool,
            )
        return AnchorSet(xs=self.xs[mask], ys=self.ys[mask], points=self.points[mask])


def overlap_penalty(
    candidate: Candidate, group: AnchorGroup, index: LabelIndex, options: PlacerOptions,
) -> float:
    """overlap_penalty per placed label whose padded box touches the padded candidate."""
    query = padded_bounds(candidate.x, candidate.y, group.width, group.height, LABEL_PADDING_PX)
    return options.overlap_penalty * index.count(query)


def point_penalty(rect: Polygon, others: AnchorSet, options: PlacerOptions) -> float:
    """point_penalty per foreign anchor lying inside the candidate box."""
    return options.point_penalty * int(np.count_nonzero(points_in_rect(rect, others.xs, others.ys)))


def neighbor_penalty(rect: Polygon, others: AnchorSet, options: PlacerOptions) -> float:
    """
    point_penalty per foreign anchor whose exclusion disk reaches into the box
    while its centre stays outside (centre-inside anchors are point_penalty's).
    """
    if len(others) == 0:
        return 0.0
    hits = disks_hit_rect(rect, others.points, options.exclusion_radius)
    inside = points_in_rect(rect, others.xs, others.ys)
    return options.point_penalty * int(np.count_nonzero(hits & ~inside))


def border_penalty(cx: float, cy: float, area: AreaSize) -> float:
    """Quadratic in how far the label centre has come within the border threshold."""
    nearest = min(cx, area.width - cx, cy, area.height - cy)
    if nearest >= BORDER_THRESHOLD_PX:
        return 0.0
    return ((BORDER_THRESHOLD_PX - nearest) / BORDER_THRESHOLD_PX) ** 2 * BORDER_PENALTY_SCALE


def center_bonus(cx: float, cy: float, area: AreaSize) -> float:
    """CENTER_BONUS_MAX at the area centre, 0 at a corner (normalized distance)."""
    half_w = area.width / 2.0
    half_h = area.height / 2.0
    dx = (cx - half_w) / half_w
    dy = (cy - half_h) / half_h
    return (1.0 - math.hypot(dx, dy) / math.sqrt(2.0)) * CENTER_BONUS_MAX


def out_of_bounds_penalty(
    candidate: Candidate, group: AnchorGroup, area: AreaSize, options: PlacerOptions,
) -> float:
    if is_out_of_bounds(candidate.x, candidate.y, group.width, group.height, area, options.padding):
        return options.out_of_bounds_penalty
    return 0.0


def distance_penalty(candidate: Candidate, group: AnchorGroup) -> float:
    return DISTANCE_WEIGHT * center_distance(
        candidate.x, candidate.y, group.width, group.height, group.x, group.y,
    )


def exclusion_penalty(candidate: Candidate, group: AnchorGroup, options: PlacerOptions) -> float:
    """Veto for entering the own anchor's exclusion zone."""
    if violates_exclusion(
        candidate.x, candidate.y, group.width, group.height,
        group.x, group.y, options.exclusion_radius,
    ):
        return EXCLUSION_VIOLATION_PENALTY
    return 0.0


def score_candidate(
    candidate: Candidate,
    group: AnchorGroup,
    anchors: AnchorField,
    index: LabelIndex,
    area: AreaSize,
    options: PlacerOptions,
) -> tuple[float, ScoreBreakdown]:
    """Total score and its signed per-term breakdown."""
    rect = label_rect(candidate.x, candidate.y, group.width, group.height)
    others = anchors.excluding(group)
    cx = candidate.x + group.width / 2.0
    cy = candidate.y + group.height / 2.0
    breakdown = ScoreBreakdown(
        overlap_penalty=-overlap_penalty(candidate, group, index, options),
        point_penalty=-point_penalty(rect, others, options),
        neighbor_penalty=-neighbor_penalty(rect, others, options),
        border_penalty=-border_penalty(cx, cy, area),
        center_bonus=center_bonus(cx, cy, area),
        out_of_bounds_penalty=-out_of_bounds_penalty(candidate, group, area, options),
        distance_penalty=-distance_penalty(candidate, group),
        exclusion_penalty=-exclusion_penalty(candidate, group, options),
    )
    return breakdown.total, breakdown


@dataclass(frozen=True)
class ScoreTerms:
    """Signed per-term values for a batch of candidates, one array entry per candidate."""
    overlap_penalty: np.ndarray
    point_penalty: np.ndarray
    neighbor_penalty: np.ndarray
    border_penalty: np.ndarray
    center_bonus: np.ndarray
    out_of_bounds_penalty: np.ndarray
    distance_penalty: np.ndarray
    exclusion_penalty: np.ndarray

    def __len__(self) -> int:
        return len(self.overlap_penalty)

    @property
    def total(self) -> np.ndarray:
        # ScoreBreakdown field order, the order breakdown.total sums in
        out = np.zeros(len(self), dtype=np.float64)
        for f in fields(ScoreBreakdown):
            out = out + getattr(self, f.name)
        return out

    def breakdown(self, i: int) -> ScoreBreakdown:
        return ScoreBreakdown(**{f.name: float(getattr(self, f.name)[i]) for f in fields(ScoreBreakdown)})


def _overlap_counts(
    x0: np.ndarray, y0: np.ndarray, x1: np.ndarray, y1: np.ndarray, index: LabelIndex,
) -> np.ndarray:
    """Placed labels touching each padded candidate; one index query for the whole batch."""
    counts = np.zeros(len(x0), dtype=np.int64)
    if len(x0) == 0 or len(index) == 0:
        return counts
    qx0, qy0 = x0 - LABEL_PADDING_PX, y0 - LABEL_PADDING_PX
    qx1, qy1 = x1 + LABEL_PADDING_PX, y1 + LABEL_PADDING_PX
    nearby = index.query((float(qx0.min()), float(qy0.min()), float(qx1.max()), float(qy1.max())))
    if not nearby:
        return counts
    b = np.array([e.bounds for e in nearby], dtype=np.float64)
    hit = (
        (qx0[:, None] <= b[:, 2]) & (b[:, 0] <= qx1[:, None])
        & (qy0[:, None] <= b[:, 3]) & (b[:, 1] <= qy1[:, None])
    )
    return hit.sum(axis=1)


def score_candidates(
    candidates: Sequence[Candidate],
    group: AnchorGroup,
    others: AnchorSet,
    index: LabelIndex,
    area: AreaSize,
    options: PlacerOptions,
) -> ScoreTerms:
    """
    Every term for all of a group's candidates at once, same values as
    score_candidate. others is anchors.excluding(group), computed once per group.
    """
    n = len(candidates)
    w, h = group.width, group.height
    x0 = np.fromiter((c.x for c in candidates), dtype=np.float64, count=n)
    y0 = np.fromiter((c.y for c in candidates), dtype=np.float64, count=n)
    x1 = x0 + w
    y1 = y0 + h
    cx = x0 + w / 2.0
    cy = y0 + h / 2.0
    r = options.exclusion_radius

    # foreign anchors: inside the box (closed) and disks reaching in from outside
    ox = others.xs[None, :]
    oy = others.ys[None, :]
    inside = (ox >= x0[:, None]) & (ox <= x1[:, None]) & (oy >= y0[:, None]) & (oy <= y1[:, None])
    gap_x = np.maximum(np.maximum(x0[:, None] - ox, ox - x1[:, None]), 0.0)
    gap_y = np.maximum(np.maximum(y0[:, None] - oy, oy - y1[:, None]), 0.0)
    reached = (np.hypot(gap_x, gap_y) < r) & ~inside

    nearest = np.minimum(np.minimum(cx, area.width - cx), np.minimum(cy, area.height - cy))
    border = np.where(
        nearest >= BORDER_THRESHOLD_PX,
        0.0,
        ((BORDER_THRESHOLD_PX - nearest) / BORDER_THRESHOLD_PX) ** 2 * BORDER_PENALTY_SCALE,
    )
    half_w = area.width / 2.0
    half_h = area.height / 2.0
    center = (1.0 - np.hypot((cx - half_w) / half_w, (cy - half_h) / half_h) / math.sqrt(2.0)) * CENTER_BONUS_MAX

    min_x, min_y, max_x, max_y = inner_bounds(area, options.padding)
    oob = (x0 < min_x) | (y0 < min_y) | (x1 > max_x) | (y1 > max_y)

    px, py = group.x, group.y
    vetoed = (
        (x0 < px + r) & (x1 > px - r) & (y0 < py + r) & (y1 > py - r)
    )
    for ex, ey in ((x0, y0), (x1, y0), (x0, y1), (x1, y1)):
        vetoed |= np.hypot(ex - px, ey - py) < r

    return ScoreTerms(
        overlap_penalty=-(options.overlap_penalty * _overlap_counts(x0, y0, x1, y1, index)),
        point_penalty=-(options.point_penalty * inside.sum(axis=1)),
        neighbor_penalty=-(options.point_penalty * reached.sum(axis=1)),
        border_penalty=-border,
        center_bonus=center,
        out_of_bounds_penalty=-np.where(oob, options.out_of_bounds_penalty, 0.0),
        distance_penalty=-(DISTANCE_WEIGHT * np.hypot(cx - px, cy - py)),
        exclusion_penalty=-np.where(vetoed, EXCLUSION_VIOLATION_PENALTY, 0.0),
    )
