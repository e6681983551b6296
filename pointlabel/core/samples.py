# pointlabel/core/samples.py
"""
Deterministic sample anchors for demos, the CLI and tests.
"""

from __future__ import annotations

import numpy as np

from pointlabel.core.config import DEFAULT_FONT_FAMILY, DEFAULT_FONT_SIZE_PX, SEED
from pointlabel.core.text_metrics import anchor_from_text
from pointlabel.core.types import Anchor, AreaSize

SAMPLE_COLORS: tuple[str, ...] = ("#1f77b4", "#ff7f0e", "#2ca02c", "#d62728", "#9467bd", "#8c564b")


def generate_sample_anchors(
    n: int,
    area: AreaSize,
    seed: int | None = SEED,
    duplicate_fraction: float = 0.0,
    inset_px: float = 20.0,
    font_family: str = DEFAULT_FONT_FAMILY,
    font_size_px: float = DEFAULT_FONT_SIZE_PX,
) -> list[Anchor]:
    """
    n anchors uniformly inside the area (inset from the edges), labelled with
    their rounded coordinates like "(12, 40)". duplicate_fraction of them reuse
    an earlier anchor's position so grouping gets exercised.
    """
    if n <= 0 or area.is_degenerate:
        return []
    rng = np.random.default_rng(seed)
    inset = min(inset_px, area.width / 4.0, area.height / 4.0)
    xs = rng.uniform(inset, area.width - inset, size=n)
    ys = rng.uniform(inset, area.height - inset, size=n)
    n_dup = int(n * max(0.0, min(1.0, duplicate_fraction)))
    if n_dup and n > 1:
        targets = rng.choice(np.arange(1, n), size=min(n_dup, n - 1), replace=False)
        for t in targets:
            src = int(rng.integers(0, t))
            xs[t], ys[t] = xs[src], ys[src]
    out: list[Anchor] = []
    for i, (x, y) in enumerate(zip(xs, ys)):
        text = f"({int(round(x))}, {int(round(y))})"
        out.append(anchor_from_text(
            float(x), float(y), text,
            font_family=font_family,
            font_size_px=font_size_px,
            fill_color=SAMPLE_COLORS[i % len(SAMPLE_COLORS)],
        ))
    return out
