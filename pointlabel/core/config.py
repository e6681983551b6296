# pointlabel/core/config.py
"""
Central configuration for point label placement.
All tunable values live here; no magic numbers in other modules.
Pixel units throughout: anchors, label boxes and the area share one space.
"""

from __future__ import annotations
import os

# ----- Paths (repo-relative) -----
REPORTS_DIR: str = "reports"

# ----- Anchor footprint -----
POINT_RADIUS_PX: float = 6.0
"""Drawn radius of an anchor marker."""

BOUNDARY_BUFFER_PX: float = 1.0
"""Gap kept between the marker edge and any label. Exclusion radius = point radius + buffer."""

COORD_ROUNDING_PX: float = 1.0
"""Grid used to bucket anchors into groups (round half up to this step)."""

GROUP_TEXT_SEPARATOR: str = ", "
"""Joiner for the texts of coincident anchors."""

# ----- Area and label padding -----
AREA_MARGIN_PX: float = 1.0
"""Inner margin of the area; labels touching it count as out of bounds."""

LABEL_PADDING_PX: float = 2.0
"""Pad added on each side of a placed label when inserted into / queried against the index."""

# ----- Candidate rings -----
PRIMARY_RING_ANGLES: int = 64
"""Angles on the primary ring, where the nearest label edge touches the exclusion radius."""

RING_SCALE_STEP: float = 0.5
"""Expanding rings scale the exclusion radius by 1 + RING_SCALE_STEP * ring."""

MIN_ANGLES_PER_RING: int = 8
"""Lower bound on angle count for expanding rings."""

FALLBACK_RING_STEP_PX: float = 5.0
"""Radius step of the unclamped fallback rings beyond the exclusion radius."""

# ----- Scoring. Penalties are subtracted, bonuses added -----
BORDER_THRESHOLD_PX: float = 10.0
"""Label centres closer than this to an area edge are penalised."""

BORDER_PENALTY_SCALE: float = 100.0
"""Border penalty = ((threshold - distance) / threshold)^2 * scale."""

CENTER_BONUS_MAX: float = 10.0
"""Bonus at the exact area centre, falling linearly to 0 at the corners."""

DISTANCE_WEIGHT: float = 10.0
"""Penalty per pixel between label centre and anchor."""

EXCLUSION_VIOLATION_PENALTY: float = 100000.0
"""Veto applied when a candidate enters its own anchor's exclusion zone."""

DISQUALIFY_SCORE: float = -100000.0
"""Best scores at or below this drop the label instead of placing it."""

# ----- Option defaults (see PlacerOptions) -----
DEFAULT_RADIUS: float = 10.0
DEFAULT_RINGS: int = 5
DEFAULT_ANGLES_PER_RING: int = 32
DEFAULT_PADDING: float = 0.0
DEFAULT_OVERLAP_PENALTY: float = 100000.0
DEFAULT_POINT_PENALTY: float = 500.0
DEFAULT_OUT_OF_BOUNDS_PENALTY: float = 0.0
DEFAULT_IDEAL_ANGLE_BONUS: float = 0.0
"""Reserved; no angular preference is applied."""

# ----- Text metrics -----
DEFAULT_FONT_FAMILY: str = "DejaVu Sans"
DEFAULT_FONT_SIZE_PX: float = 12.0

# ----- Samples -----
SEED: int | None = 42
"""Random seed for generated sample anchors; None for non-deterministic."""

DEFAULT_AREA_WIDTH_PX: float = 640.0
DEFAULT_AREA_HEIGHT_PX: float = 480.0

# ----- Rendering -----
RENDER_DPI: int = 100
DEBUG_CANDIDATE_MARKER_SIZE: float = 6.0

# ----- Debug flags -----
DEBUG_DIAGNOSTICS: bool = os.environ.get("POINTLABEL_DEBUG", "").lower() in ("1", "true", "yes")
"""Collect diagnostics by default. Set env POINTLABEL_DEBUG=1 to enable."""
