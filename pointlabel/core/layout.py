# pointlabel/core/layout.py
"""
Multi-label placement orchestration with collision avoidance.
Groups coincident anchors, walks groups top to bottom, and for each one
generates, scores and picks a candidate, committing the winner to a
per-pass spatial index so later labels avoid it.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Iterable, Mapping

import numpy as np

from pointlabel.core.candidates import generate_candidates
from pointlabel.core.config import DISQUALIFY_SCORE
from pointlabel.core.error_codes import ALL_CANDIDATES_DISQUALIFIED, NO_CANDIDATES
from pointlabel.core.grouping import prepare_groups
from pointlabel.core.scoring import AnchorField, score_candidates
from pointlabel.core.spatial_index import LabelIndex
from pointlabel.core.types import (
    Anchor,
    AnchorGroup,
    AreaSize,
    Candidate,
    DiagnosticsEntry,
    DroppedLabel,
    LabelBox,
    PlacementOutcome,
    PlacerOptions,
    ScoreBreakdown,
)

logger = logging.getLogger(__name__)


@dataclass
class GroupResult:
    """Scored candidates for one group and what became of them."""
    group: AnchorGroup
    candidates: list[Candidate]
    selected_index: int | None
    reason: str | None = None
    breakdown: ScoreBreakdown | None = None
    """Breakdown of the best candidate, kept even when candidates carry none."""

    @property
    def best(self) -> Candidate | None:
        if self.selected_index is None:
            return None
        return self.candidates[self.selected_index]


def _as_area(area: AreaSize | tuple[float, float]) -> AreaSize:
    if isinstance(area, AreaSize):
        return area
    width, height = area
    return AreaSize(width=float(width), height=float(height))


def _as_options(options: PlacerOptions | Mapping[str, Any] | None) -> PlacerOptions:
    if isinstance(options, PlacerOptions):
        return options
    return PlacerOptions.from_mapping(options)


def place_group(
    group: AnchorGroup,
    anchors: AnchorField,
    index: LabelIndex,
    area: AreaSize,
    options: PlacerOptions,
) -> GroupResult:
    """
    Generate and score every candidate for group; does not touch the index.
    Candidates carry their breakdown only when options.debug is set.
    """
    generated = generate_candidates(group, area, options)
    if not generated:
        return GroupResult(group=group, candidates=[], selected_index=None, reason=NO_CANDIDATES)
    terms = score_candidates(generated, group, anchors.excluding(group), index, area, options)
    totals = terms.total
    scored = [
        Candidate(
            x=c.x, y=c.y, rotation=c.rotation, score=float(totals[i]),
            breakdown=terms.breakdown(i) if options.debug else None,
        )
        for i, c in enumerate(generated)
    ]
    # argmax returns the first maximum
    best = int(np.argmax(totals))
    if totals[best] <= DISQUALIFY_SCORE:
        return GroupResult(
            group=group, candidates=scored, selected_index=None,
            reason=ALL_CANDIDATES_DISQUALIFIED, breakdown=terms.breakdown(best),
        )
    return GroupResult(group=group, candidates=scored, selected_index=best, breakdown=terms.breakdown(best))


def _warn_soft_violations(label: LabelBox, b: ScoreBreakdown | None) -> None:
    if b is None:
        return
    if b.overlap_penalty < 0:
        logger.warning("Label %r overlaps an already placed label", label.text)
    if b.point_penalty < 0 or b.neighbor_penalty < 0:
        logger.warning("Label %r enters the exclusion zone of another point", label.text)


def place_labels(
    area: AreaSize | tuple[float, float],
    anchors: Iterable[Anchor],
    options: PlacerOptions | Mapping[str, Any] | None = None,
) -> PlacementOutcome:
    """
    One placement pass. Never raises for anchor data: malformed anchors are
    skipped, unplaceable groups are reported in outcome.dropped.
    Labels come back in processing order (ascending anchor y).
    """
    area = _as_area(area)
    opts = _as_options(options)
    outcome = PlacementOutcome(diagnostics=[] if opts.debug else None)
    if area.is_degenerate:
        return outcome

    groups = prepare_groups(anchors)
    if not groups:
        return outcome

    field = AnchorField(groups)
    index = LabelIndex()

    for group in groups:
        result = place_group(group, field, index, area, opts)
        chosen = result.best
        if outcome.diagnostics is not None:
            outcome.diagnostics.append(DiagnosticsEntry(
                group=group,
                candidates=tuple(result.candidates),
                selected_index=result.selected_index,
                placed_before=tuple((lab.x, lab.y, lab.text) for lab in outcome.labels),
            ))
        if chosen is None:
            best_score = max((c.score for c in result.candidates), default=None)
            logger.warning("Could not place label %r (%s)", group.text, result.reason)
            outcome.dropped.append(DroppedLabel(group=group, reason=result.reason or NO_CANDIDATES, best_score=best_score))
            continue
        label = LabelBox(
            x=chosen.x,
            y=chosen.y,
            width=group.width,
            height=group.height,
            rotation=chosen.rotation,
            text=group.text,
            owner=group,
        )
        _warn_soft_violations(label, result.breakdown)
        index.insert(label)
        outcome.labels.append(label)

    logger.debug(
        "Placed %d of %d label groups (%d dropped)",
        len(outcome.labels), len(groups), len(outcome.dropped),
    )
    return outcome


class LabelPlacer:
    """
    Stateful facade over place_labels for callers that redraw repeatedly.
    Holds only the last pass's diagnostics, cleared at the start of each pass.
    """

    def __init__(
        self,
        area: AreaSize | tuple[float, float],
        options: PlacerOptions | Mapping[str, Any] | None = None,
    ) -> None:
        self.area = _as_area(area)
        self.options = _as_options(options)
        self._diagnostics: list[DiagnosticsEntry] = []
        self.last_outcome: PlacementOutcome | None = None

    @property
    def diagnostics(self) -> list[DiagnosticsEntry]:
        return list(self._diagnostics)

    def clear_diagnostics(self) -> None:
        self._diagnostics = []

    def place_all(self, anchors: Iterable[Anchor]) -> list[LabelBox]:
        self.clear_diagnostics()
        outcome = place_labels(self.area, anchors, self.options)
        self.last_outcome = outcome
        if outcome.diagnostics is not None:
            self._diagnostics = outcome.diagnostics
        return list(outcome.labels)
