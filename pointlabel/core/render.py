# pointlabel/core/render.py
"""
Matplotlib PNG rendering for inspecting a pass: layout.png (anchors, labels,
connector lines) and debug.png (exclusion disks, scored candidates, padded boxes).
Pixel space, y pointing down.
"""

from __future__ import annotations

from pathlib import Path

import matplotlib

matplotlib.use("Agg")
import matplotlib.pyplot as plt
import numpy as np
from matplotlib.patches import Circle, Rectangle

from pointlabel.core.config import (
    DEBUG_CANDIDATE_MARKER_SIZE,
    DISQUALIFY_SCORE,
    LABEL_PADDING_PX,
    RENDER_DPI,
)
from pointlabel.core.grouping import filter_anchors
from pointlabel.core.types import Anchor, AreaSize, PlacementOutcome, PlacerOptions

DEFAULT_TEXT_COLOR = "black"


def _new_fig(area: AreaSize, scale: int = 1) -> tuple[plt.Figure, plt.Axes]:
    fig, ax = plt.subplots(figsize=(area.width * scale / RENDER_DPI, area.height * scale / RENDER_DPI), dpi=RENDER_DPI)
    fig.subplots_adjust(left=0, right=1, bottom=0, top=1)
    ax.set_xlim(0, area.width)
    ax.set_ylim(area.height, 0)
    ax.set_aspect("equal")
    ax.set_axis_off()
    ax.add_patch(Rectangle((0, 0), area.width, area.height, fill=False, edgecolor="lightgray", linewidth=1))
    return fig, ax


def _draw_anchors(ax: plt.Axes, anchors: list[Anchor], radius: float) -> None:
    for a in anchors:
        ax.add_patch(Circle((a.x, a.y), radius, facecolor=a.fill_color or "gray", edgecolor="none", alpha=0.8, zorder=3))


def _save(fig: plt.Figure, output_path: str | Path) -> None:
    try:
        fig.savefig(output_path, dpi=RENDER_DPI, facecolor="white")
    finally:
        plt.close(fig)


def render_layout(
    area: AreaSize,
    anchors: list[Anchor],
    outcome: PlacementOutcome,
    output_path: str | Path,
    options: PlacerOptions | None = None,
    scale: int = 1,
) -> None:
    """Anchors, placed labels in their anchor's colour and a connector from anchor to label centre."""
    opts = options or PlacerOptions()
    fig, ax = _new_fig(area, scale)
    _draw_anchors(ax, filter_anchors(anchors), opts.point_radius)
    for lab in outcome.labels:
        cx, cy = lab.center
        ax.plot([lab.owner.x, cx], [lab.owner.y, cy], color="red", alpha=0.3, linewidth=0.8, zorder=2)
        ax.text(
            cx, cy, lab.text,
            fontsize=lab.height * 72.0 / RENDER_DPI,
            ha="center", va="center",
            color=lab.fill_color or DEFAULT_TEXT_COLOR,
            zorder=5,
        )
    _save(fig, output_path)


def render_debug(
    area: AreaSize,
    anchors: list[Anchor],
    outcome: PlacementOutcome,
    output_path: str | Path,
    options: PlacerOptions | None = None,
    scale: int = 1,
) -> None:
    """
    Exclusion disks, padded label boxes and, when the pass collected
    diagnostics, every candidate coloured by score (disqualified ones grey).
    """
    opts = options or PlacerOptions()
    fig, ax = _new_fig(area, scale)
    valid = filter_anchors(anchors)
    for a in valid:
        ax.add_patch(Circle((a.x, a.y), opts.exclusion_radius, fill=False, edgecolor="orange", linewidth=0.6, zorder=2))
    _draw_anchors(ax, valid, opts.point_radius)

    if outcome.diagnostics:
        cands = [c for e in outcome.diagnostics for c in e.candidates]
        xs = np.array([c.x for c in cands])
        ys = np.array([c.y for c in cands])
        scores = np.array([c.score for c in cands])
        ok = scores > DISQUALIFY_SCORE
        if (~ok).any():
            ax.scatter(xs[~ok], ys[~ok], s=DEBUG_CANDIDATE_MARKER_SIZE / 2, color="lightgray", zorder=1)
        if ok.any():
            ax.scatter(xs[ok], ys[ok], s=DEBUG_CANDIDATE_MARKER_SIZE, c=scores[ok], cmap="viridis", zorder=1)

    for lab in outcome.labels:
        ax.add_patch(Rectangle(
            (lab.x - LABEL_PADDING_PX, lab.y - LABEL_PADDING_PX),
            lab.width + 2 * LABEL_PADDING_PX, lab.height + 2 * LABEL_PADDING_PX,
            fill=False, edgecolor="navy", linestyle="--", linewidth=0.6, zorder=4,
        ))
        ax.add_patch(Rectangle((lab.x, lab.y), lab.width, lab.height, fill=False, edgecolor="navy", linewidth=1, zorder=4))
    for d in outcome.dropped:
        ax.plot([d.group.x], [d.group.y], marker="x", color="red", markersize=8, zorder=5)
    _save(fig, output_path)
