# pointlabel/core/evaluate.py
"""
Layout quality metrics for a placement outcome: overlapping label pairs,
labels entering foreign exclusion zones, out-of-bounds labels, leader lengths.
Used by the CLI summary and by tests as an independent check of the engine.
"""

from __future__ import annotations

from dataclasses import asdict, dataclass
from typing import Iterable

import numpy as np
import shapely
from shapely.geometry import box

from pointlabel.core.config import LABEL_PADDING_PX
from pointlabel.core.geometry import is_out_of_bounds, padded_bounds
from pointlabel.core.grouping import filter_anchors
from pointlabel.core.types import Anchor, AreaSize, PlacementOutcome, PlacerOptions


@dataclass
class LayoutMetrics:
    """Summary of one placement pass."""
    placed_count: int
    dropped_count: int
    overlapping_pairs: int
    exclusion_violations: int
    out_of_bounds_count: int
    mean_leader_px: float
    max_leader_px: float

    def as_dict(self) -> dict:
        return asdict(self)


def overlapping_pairs(outcome: PlacementOutcome, pad: float = LABEL_PADDING_PX) -> list[tuple[int, int]]:
    """Index pairs (i < j) of labels whose padded boxes share positive area."""
    boxes = [box(*padded_bounds(lab.x, lab.y, lab.width, lab.height, pad)) for lab in outcome.labels]
    if len(boxes) < 2:
        return []
    tree = shapely.STRtree(boxes)
    left, right = tree.query(boxes, predicate="intersects")
    pairs = [
        (int(i), int(j)) for i, j in zip(left, right)
        if i < j and boxes[i].intersection(boxes[j]).area > 0
    ]
    return sorted(pairs)


def exclusion_violations(
    outcome: PlacementOutcome,
    anchors: Iterable[Anchor],
    options: PlacerOptions,
) -> list[tuple[int, Anchor]]:
    """(label index, anchor) for every foreign anchor whose exclusion disk reaches into a label."""
    valid = filter_anchors(anchors)
    if not valid or not outcome.labels:
        return []
    points = shapely.points([a.x for a in valid], [a.y for a in valid])
    out: list[tuple[int, Anchor]] = []
    for i, lab in enumerate(outcome.labels):
        rect = box(*lab.bounds)
        dist = shapely.distance(rect, points)
        for j in np.flatnonzero(dist < options.exclusion_radius):
            anchor = valid[int(j)]
            if not lab.owner.owns(anchor):
                out.append((i, anchor))
    return out


def evaluate_layout(
    outcome: PlacementOutcome,
    anchors: Iterable[Anchor],
    area: AreaSize,
    options: PlacerOptions | None = None,
) -> LayoutMetrics:
    opts = options or PlacerOptions()
    anchors = list(anchors)
    leaders = np.array([
        float(np.hypot(lab.center[0] - lab.owner.x, lab.center[1] - lab.owner.y))
        for lab in outcome.labels
    ], dtype=np.float64)
    oob = sum(
        1 for lab in outcome.labels
        if is_out_of_bounds(lab.x, lab.y, lab.width, lab.height, area, opts.padding)
    )
    return LayoutMetrics(
        placed_count=len(outcome.labels),
        dropped_count=len(outcome.dropped),
        overlapping_pairs=len(overlapping_pairs(outcome)),
        exclusion_violations=len(exclusion_violations(outcome, anchors, opts)),
        out_of_bounds_count=oob,
        mean_leader_px=float(leaders.mean()) if leaders.size else 0.0,
        max_leader_px=float(leaders.max()) if leaders.size else 0.0,
    )
