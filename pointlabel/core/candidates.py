# pointlabel/core/candidates.py
"""
Candidate label positions around one anchor group.
Four ring strategies, each a lazy generator of top-left corners; generate_candidates
chains them and drops positions that sit inside the exclusion radius or outside the area.
All functions are pure and deterministic.
"""

from __future__ import annotations

import itertools
import math
from typing import Iterator

from pointlabel.core.config import (
    FALLBACK_RING_STEP_PX,
    MIN_ANGLES_PER_RING,
    PRIMARY_RING_ANGLES,
    RING_SCALE_STEP,
)
from pointlabel.core.geometry import center_distance, clamp_to_area, is_visible
from pointlabel.core.types import AnchorGroup, AreaSize, Candidate, PlacerOptions


def _clamped(group: AnchorGroup, x: float, y: float, area: AreaSize, options: PlacerOptions) -> Candidate:
    cx, cy = clamp_to_area(x, y, group.width, group.height, area, options.padding)
    return Candidate(x=cx, y=cy)


def primary_ring(
    group: AnchorGroup,
    area: AreaSize,
    options: PlacerOptions,
    n_angles: int = PRIMARY_RING_ANGLES,
) -> Iterator[Candidate]:
    """
    Dense ring where the label edge nearest the anchor sits exactly on the
    exclusion radius. Mostly-horizontal angles put the left/right edge there,
    the rest the top/bottom edge. Clamped into the area.
    """
    r = options.exclusion_radius
    w, h = group.width, group.height
    step = 2.0 * math.pi / n_angles
    for i in range(n_angles):
        angle = i * step
        cos_a = math.cos(angle)
        sin_a = math.sin(angle)
        if abs(cos_a) > abs(sin_a):
            dx = r if cos_a > 0 else -r - w
            dy = sin_a * r - h / 2.0
        else:
            dy = r if sin_a > 0 else -r - h
            dx = cos_a * r - w / 2.0
        yield _clamped(group, group.x + dx, group.y + dy, area, options)


def expanding_rings(group: AnchorGroup, area: AreaSize, options: PlacerOptions) -> Iterator[Candidate]:
    """rings - 1 rings at exclusion_radius * (1 + 0.5 * ring), fewer angles further out. Clamped."""
    r0 = options.exclusion_radius
    for ring in range(1, options.rings):
        r = r0 * (1.0 + ring * RING_SCALE_STEP)
        n_angles = max(MIN_ANGLES_PER_RING, options.angles_per_ring // (ring + 1))
        for i in range(n_angles):
            angle = (i / n_angles) * 2.0 * math.pi
            x = group.x + math.cos(angle) * r
            y = group.y + math.sin(angle) * r
            yield _clamped(group, x, y, area, options)


def fallback_rings(group: AnchorGroup, options: PlacerOptions) -> Iterator[Candidate]:
    """Label centres on rings 5 px apart beyond the exclusion radius. Not clamped."""
    n_angles = options.angles_per_ring
    step = 2.0 * math.pi / n_angles
    for ring in range(1, options.rings + 1):
        r = options.exclusion_radius + ring * FALLBACK_RING_STEP_PX
        for i in range(n_angles):
            angle = i * step
            x = group.x + r * math.cos(angle) - group.width / 2.0
            y = group.y + r * math.sin(angle) - group.height / 2.0
            yield Candidate(x=x, y=y)


def half_step_rings(group: AnchorGroup, options: PlacerOptions) -> Iterator[Candidate]:
    """Label centres on radius * ring, phase-shifted half an angle step. Not clamped."""
    n_angles = options.angles_per_ring
    step = 2.0 * math.pi / n_angles
    half = step / 2.0
    for ring in range(1, options.rings + 1):
        r = max(options.exclusion_radius, options.radius * ring)
        for i in range(n_angles):
            angle = i * step + half
            x = group.x + r * math.cos(angle) - group.width / 2.0
            y = group.y + r * math.sin(angle) - group.height / 2.0
            yield Candidate(x=x, y=y)


def _keep(c: Candidate, group: AnchorGroup, area: AreaSize, options: PlacerOptions) -> bool:
    d = center_distance(c.x, c.y, group.width, group.height, group.x, group.y)
    if d < options.exclusion_radius:
        return False
    return is_visible(c.x, c.y, group.width, group.height, area, options.padding)


def generate_candidates(group: AnchorGroup, area: AreaSize, options: PlacerOptions) -> list[Candidate]:
    """All ring strategies in order, minus candidates inside the exclusion radius or fully off-area."""
    if area.is_degenerate:
        return []
    rings = itertools.chain(
        primary_ring(group, area, options),
        expanding_rings(group, area, options),
        fallback_rings(group, options),
        half_step_rings(group, options),
    )
    return [c for c in rings if _keep(c, group, area, options)]
