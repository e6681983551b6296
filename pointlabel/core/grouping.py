# pointlabel/core/grouping.py
"""
Anchor filtering, bucketing of coincident anchors and processing order.
"""

from __future__ import annotations

import logging
import math
from typing import Iterable

from pointlabel.core.config import COORD_ROUNDING_PX
from pointlabel.core.error_codes import INVALID_ANCHOR
from pointlabel.core.types import Anchor, AnchorGroup

logger = logging.getLogger(__name__)


def round_half_up(value: float, step: float = COORD_ROUNDING_PX) -> int:
    """Grid cell of value; halves round towards +inf (2.5 -> 3, -2.5 -> -2)."""
    return int(math.floor(value / step + 0.5))


def group_key(anchor: Anchor, step: float = COORD_ROUNDING_PX) -> tuple[int, int]:
    return (round_half_up(anchor.x, step), round_half_up(anchor.y, step))


def filter_anchors(anchors: Iterable[Anchor]) -> list[Anchor]:
    """Drop anchors with blank text or non-finite values; order is kept."""
    kept: list[Anchor] = []
    for anchor in anchors:
        if anchor.is_valid:
            kept.append(anchor)
        else:
            logger.debug("Skipping anchor %r at (%s, %s): %s", anchor.text, anchor.x, anchor.y, INVALID_ANCHOR)
    return kept


def group_anchors(anchors: Iterable[Anchor], step: float = COORD_ROUNDING_PX) -> list[AnchorGroup]:
    """Bucket by rounded (x, y). Groups and their members keep first-seen order."""
    buckets: dict[tuple[int, int], list[Anchor]] = {}
    for anchor in anchors:
        buckets.setdefault(group_key(anchor, step), []).append(anchor)
    return [AnchorGroup(key=k, members=tuple(v)) for k, v in buckets.items()]


def order_groups(groups: Iterable[AnchorGroup]) -> list[AnchorGroup]:
    """Ascending y of the first member; stable, so ties keep insertion order."""
    return sorted(groups, key=lambda g: g.first.y)


def prepare_groups(anchors: Iterable[Anchor], step: float = COORD_ROUNDING_PX) -> list[AnchorGroup]:
    """filter -> group -> order, the unit sequence one placement pass walks."""
    return order_groups(group_anchors(filter_anchors(anchors), step))
