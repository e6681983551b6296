# pointlabel/core/types.py
"""
Dataclasses for anchors, candidates, placed label boxes, options and diagnostics.
Coordinates are pixels; (x, y) of a box is its top-left corner, y grows downwards.
"""

from __future__ import annotations

import logging
import math
from dataclasses import asdict, dataclass, field, fields
from typing import Any, Mapping

from pointlabel.core.config import (
    BOUNDARY_BUFFER_PX,
    DEBUG_DIAGNOSTICS,
    DEFAULT_ANGLES_PER_RING,
    DEFAULT_IDEAL_ANGLE_BONUS,
    DEFAULT_OUT_OF_BOUNDS_PENALTY,
    DEFAULT_OVERLAP_PENALTY,
    DEFAULT_PADDING,
    DEFAULT_POINT_PENALTY,
    DEFAULT_RADIUS,
    DEFAULT_RINGS,
    GROUP_TEXT_SEPARATOR,
    POINT_RADIUS_PX,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class AreaSize:
    """Usable pixel rectangle, origin at (0, 0)."""
    width: float
    height: float

    @property
    def is_degenerate(self) -> bool:
        return not (self.width > 0 and self.height > 0)

    @property
    def center(self) -> tuple[float, float]:
        return (self.width / 2.0, self.height / 2.0)


@dataclass(frozen=True)
class Anchor:
    """A point needing a label; width/height is the measured text box."""
    x: float
    y: float
    text: str
    width: float
    height: float
    fill_color: str | None = None

    @property
    def is_valid(self) -> bool:
        """Finite coordinates, finite non-negative box, non-blank text."""
        if not self.text or not self.text.strip():
            return False
        if not all(math.isfinite(v) for v in (self.x, self.y, self.width, self.height)):
            return False
        return self.width >= 0 and self.height >= 0


@dataclass(frozen=True)
class AnchorGroup:
    """
    Anchors sharing one rounded coordinate; the unit of placement.
    Acts as a single synthetic anchor: position of the first member, joined
    texts, per-axis maximum of member boxes.
    """
    key: tuple[int, int]
    members: tuple[Anchor, ...]

    @property
    def first(self) -> Anchor:
        return self.members[0]

    @property
    def x(self) -> float:
        return self.first.x

    @property
    def y(self) -> float:
        return self.first.y

    @property
    def text(self) -> str:
        if len(self.members) == 1:
            return self.first.text
        return GROUP_TEXT_SEPARATOR.join(m.text for m in self.members)

    @property
    def width(self) -> float:
        return max(m.width for m in self.members)

    @property
    def height(self) -> float:
        return max(m.height for m in self.members)

    @property
    def fill_color(self) -> str | None:
        return self.first.fill_color

    def owns(self, anchor: Anchor) -> bool:
        """Identity membership; equal-valued anchors elsewhere are not members."""
        return any(anchor is m for m in self.members)


@dataclass(frozen=True)
class ScoreBreakdown:
    """Signed per-term contributions; penalties are stored negative."""
    overlap_penalty: float = 0.0
    point_penalty: float = 0.0
    neighbor_penalty: float = 0.0
    border_penalty: float = 0.0
    center_bonus: float = 0.0
    out_of_bounds_penalty: float = 0.0
    distance_penalty: float = 0.0
    exclusion_penalty: float = 0.0

    @property
    def total(self) -> float:
        return sum(getattr(self, f.name) for f in fields(self))

    def as_dict(self) -> dict[str, float]:
        return asdict(self)


@dataclass(frozen=True)
class Candidate:
    """Proposed top-left position for the group's box. rotation is reserved (always 0)."""
    x: float
    y: float
    rotation: float = 0.0
    score: float = 0.0
    breakdown: ScoreBreakdown | None = None


@dataclass(frozen=True, eq=False)
class LabelBox:
    """A committed label. owner is a lookup reference to the placed group."""
    x: float
    y: float
    width: float
    height: float
    rotation: float
    text: str
    owner: AnchorGroup

    @property
    def bounds(self) -> tuple[float, float, float, float]:
        return (self.x, self.y, self.x + self.width, self.y + self.height)

    @property
    def center(self) -> tuple[float, float]:
        return (self.x + self.width / 2.0, self.y + self.height / 2.0)

    @property
    def fill_color(self) -> str | None:
        return self.owner.fill_color

    def as_tuple(self) -> tuple[float, float, float, float, float, str]:
        return (self.x, self.y, self.width, self.height, self.rotation, self.text)


@dataclass(frozen=True)
class IndexEntry:
    """Padded rectangle of a placed label, used as the overlap query key."""
    min_x: float
    min_y: float
    max_x: float
    max_y: float
    label: LabelBox

    @property
    def bounds(self) -> tuple[float, float, float, float]:
        return (self.min_x, self.min_y, self.max_x, self.max_y)


# camelCase spellings accepted by PlacerOptions.from_mapping
_OPTION_ALIASES: dict[str, str] = {
    "anglesPerRing": "angles_per_ring",
    "overlapPenalty": "overlap_penalty",
    "pointPenalty": "point_penalty",
    "outOfBoundsPenalty": "out_of_bounds_penalty",
    "idealAngleBonus": "ideal_angle_bonus",
    "pointRadius": "point_radius",
    "boundaryBuffer": "boundary_buffer",
}


@dataclass(frozen=True)
class PlacerOptions:
    """Options for one placement pass. Immutable; omitted values use config defaults."""
    radius: float = DEFAULT_RADIUS
    rings: int = DEFAULT_RINGS
    angles_per_ring: int = DEFAULT_ANGLES_PER_RING
    padding: float = DEFAULT_PADDING
    overlap_penalty: float = DEFAULT_OVERLAP_PENALTY
    point_penalty: float = DEFAULT_POINT_PENALTY
    out_of_bounds_penalty: float = DEFAULT_OUT_OF_BOUNDS_PENALTY
    ideal_angle_bonus: float = DEFAULT_IDEAL_ANGLE_BONUS
    point_radius: float = POINT_RADIUS_PX
    boundary_buffer: float = BOUNDARY_BUFFER_PX
    debug: bool = DEBUG_DIAGNOSTICS

    def __post_init__(self) -> None:
        if self.rings < 1:
            raise ValueError(f"rings must be >= 1, got {self.rings}")
        if self.angles_per_ring < 1:
            raise ValueError(f"angles_per_ring must be >= 1, got {self.angles_per_ring}")
        for name in ("radius", "padding", "point_radius", "boundary_buffer"):
            value = getattr(self, name)
            if not math.isfinite(value) or value < 0:
                raise ValueError(f"{name} must be a finite value >= 0, got {value}")

    @property
    def exclusion_radius(self) -> float:
        return self.point_radius + self.boundary_buffer

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any] | None) -> PlacerOptions:
        """Build from camelCase or snake_case keys; unknown keys are ignored."""
        if not data:
            return cls()
        known = {f.name: f for f in fields(cls)}
        kwargs: dict[str, Any] = {}
        for key, value in data.items():
            name = _OPTION_ALIASES.get(key, key)
            if name not in known:
                logger.debug("Ignoring unrecognized placer option %r", key)
                continue
            if value is None:
                continue
            if name in ("rings", "angles_per_ring"):
                kwargs[name] = int(value)
            elif name == "debug":
                kwargs[name] = bool(value)
            else:
                kwargs[name] = float(value)
        return cls(**kwargs)

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


@dataclass(frozen=True)
class DroppedLabel:
    """A group that could not be placed. reason is a key from error_codes."""
    group: AnchorGroup
    reason: str
    best_score: float | None = None

    @property
    def text(self) -> str:
        return self.group.text


@dataclass(frozen=True)
class DiagnosticsEntry:
    """
    Everything considered for one group. candidates are in generation order
    and selected_index points into them (None when the group was dropped).
    """
    group: AnchorGroup
    candidates: tuple[Candidate, ...]
    selected_index: int | None
    placed_before: tuple[tuple[float, float, str], ...]


@dataclass
class PlacementOutcome:
    """Result of one pass. diagnostics is None unless options.debug was set."""
    labels: list[LabelBox] = field(default_factory=list)
    dropped: list[DroppedLabel] = field(default_factory=list)
    diagnostics: list[DiagnosticsEntry] | None = None

    @property
    def placed_count(self) -> int:
        return len(self.labels)
