# pointlabel/core/geometry.py
"""
Geometry helpers for axis-aligned label boxes: shapely rectangles, padding,
clamping, out-of-bounds and exclusion-zone tests, vectorized anchor queries.
"""

from __future__ import annotations

import math

import numpy as np
import shapely
from shapely.geometry import Polygon, box

from pointlabel.core.config import AREA_MARGIN_PX, LABEL_PADDING_PX
from pointlabel.core.types import AreaSize


Bounds = tuple[float, float, float, float]


def label_rect(x: float, y: float, width: float, height: float) -> Polygon:
    """Rectangle with top-left (x, y)."""
    return box(x, y, x + width, y + height)


def padded_bounds(
    x: float, y: float, width: float, height: float,
    pad: float = LABEL_PADDING_PX,
) -> Bounds:
    """(min_x, min_y, max_x, max_y) grown by pad on every side."""
    return (x - pad, y - pad, x + width + pad, y + height + pad)


def bounds_intersect(a: Bounds, b: Bounds) -> bool:
    """Closed-interval overlap; touching edges count, as in the index."""
    return a[0] <= b[2] and b[0] <= a[2] and a[1] <= b[3] and b[1] <= a[3]


def inner_bounds(area: AreaSize, padding: float = 0.0) -> Bounds:
    """Area rectangle shrunk by the fixed margin plus caller padding."""
    m = AREA_MARGIN_PX + padding
    return (m, m, area.width - m, area.height - m)


def clamp_to_area(
    x: float, y: float, width: float, height: float,
    area: AreaSize, padding: float = 0.0,
) -> tuple[float, float]:
    """
    Clamp a top-left corner so the box sits inside the inner area.
    Boxes larger than the area end up pinned to the left/top margin.
    """
    min_x, min_y, max_x, max_y = inner_bounds(area, padding)
    cx = max(min_x, min(x, max_x - width))
    cy = max(min_y, min(y, max_y - height))
    return cx, cy


def is_out_of_bounds(
    x: float, y: float, width: float, height: float,
    area: AreaSize, padding: float = 0.0,
) -> bool:
    """True if any part of the box is past the inner margin."""
    min_x, min_y, max_x, max_y = inner_bounds(area, padding)
    return x < min_x or y < min_y or x + width > max_x or y + height > max_y


def is_visible(
    x: float, y: float, width: float, height: float,
    area: AreaSize, padding: float = 0.0,
) -> bool:
    """True if the box shares some positive area with the inner area."""
    min_x, min_y, max_x, max_y = inner_bounds(area, padding)
    return x < max_x and x + width > min_x and y < max_y and y + height > min_y


def center_distance(
    x: float, y: float, width: float, height: float,
    px: float, py: float,
) -> float:
    """Euclidean distance from box centre to (px, py)."""
    return math.hypot(x + width / 2.0 - px, y + height / 2.0 - py)


def violates_exclusion(
    x: float, y: float, width: float, height: float,
    px: float, py: float, radius: float,
) -> bool:
    """
    Box enters the exclusion zone of (px, py): a corner strictly closer than
    radius, or the box strictly overlapping the zone's bounding square.
    """
    corners = ((x, y), (x + width, y), (x, y + height), (x + width, y + height))
    for cx, cy in corners:
        if math.hypot(cx - px, cy - py) < radius:
            return True
    overlaps_x = x < px + radius and x + width > px - radius
    overlaps_y = y < py + radius and y + height > py - radius
    return overlaps_x and overlaps_y


def points_in_rect(rect: Polygon, xs: np.ndarray, ys: np.ndarray) -> np.ndarray:
    """Boolean mask of points inside or on the edge of rect."""
    if len(xs) == 0:
        return np.zeros(0, dtype=bool)
    return shapely.intersects_xy(rect, xs, ys)


def disks_hit_rect(rect: Polygon, points: np.ndarray, radius: float) -> np.ndarray:
    """Boolean mask of disks (centre points, shared radius) reaching strictly into rect."""
    if len(points) == 0:
        return np.zeros(0, dtype=bool)
    return shapely.distance(rect, points) < radius
