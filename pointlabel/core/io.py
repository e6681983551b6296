# pointlabel/core/io.py
"""
Load placement inputs from a JSON document.

    {
      "area": {"width": 640, "height": 480},
      "anchors": [{"x": 10, "y": 20, "text": "A", "width": 8, "height": 12, "fill_color": "#f00"}],
      "options": {"rings": 5, "anglesPerRing": 32}
    }

width/height of an anchor are optional; missing ones are measured from the text.
Coordinates are already in pixel space.
"""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from pointlabel.core.config import DEFAULT_FONT_FAMILY, DEFAULT_FONT_SIZE_PX
from pointlabel.core.text_metrics import measure_label
from pointlabel.core.types import Anchor, AreaSize, PlacerOptions


@dataclass
class PlacementInput:
    """Everything one pass needs, as read from disk."""
    area: AreaSize
    anchors: list[Anchor]
    options: PlacerOptions = field(default_factory=PlacerOptions)
    source: str = ""


def _input_path(path: str | Path, repo_root: Path | None) -> Path:
    """Absolute path of an input file; relative paths are taken from repo_root when given."""
    p = Path(path)
    base = repo_root if repo_root is not None and not p.is_absolute() else None
    return (base / p if base is not None else p).resolve()


def _number(obj: dict, key: str, where: str) -> float:
    if key not in obj:
        raise ValueError(f"{where}: missing {key!r}")
    value = obj[key]
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise ValueError(f"{where}: {key!r} must be a number, got {value!r}")
    return float(value)


def parse_anchor(
    obj: Any,
    where: str = "anchor",
    font_family: str = DEFAULT_FONT_FAMILY,
    font_size_px: float = DEFAULT_FONT_SIZE_PX,
) -> Anchor:
    """Build an Anchor from one JSON object; measures the text when no box is given."""
    if not isinstance(obj, dict):
        raise ValueError(f"{where}: expected an object, got {type(obj).__name__}")
    x = _number(obj, "x", where)
    y = _number(obj, "y", where)
    if "text" not in obj:
        raise ValueError(f"{where}: missing 'text'")
    text = str(obj["text"])
    if "width" in obj and "height" in obj:
        width = _number(obj, "width", where)
        height = _number(obj, "height", where)
    else:
        width, height = measure_label(text, font_family, font_size_px)
    fill = obj.get("fill_color", obj.get("fillColor"))
    return Anchor(x=x, y=y, text=text, width=width, height=height, fill_color=fill)


def parse_placement_input(
    data: Any,
    source: str = "",
    font_family: str = DEFAULT_FONT_FAMILY,
    font_size_px: float = DEFAULT_FONT_SIZE_PX,
) -> PlacementInput:
    """
    Validate document shape and build a PlacementInput.
    Raises ValueError on malformed documents.
    """
    if not isinstance(data, dict):
        raise ValueError("Placement input must be a JSON object")
    area_obj = data.get("area")
    if not isinstance(area_obj, dict):
        raise ValueError("Placement input needs an 'area' object with width and height")
    area = AreaSize(width=_number(area_obj, "width", "area"), height=_number(area_obj, "height", "area"))
    raw = data.get("anchors", [])
    if not isinstance(raw, list):
        raise ValueError("'anchors' must be a list")
    anchors = [
        parse_anchor(obj, f"anchors[{i}]", font_family, font_size_px)
        for i, obj in enumerate(raw)
    ]
    options_obj = data.get("options") or {}
    if not isinstance(options_obj, dict):
        raise ValueError("'options' must be an object")
    return PlacementInput(
        area=area,
        anchors=anchors,
        options=PlacerOptions.from_mapping(options_obj),
        source=source,
    )


def load_placement_input(
    path: str | Path,
    repo_root: Path | None = None,
    font_family: str = DEFAULT_FONT_FAMILY,
    font_size_px: float = DEFAULT_FONT_SIZE_PX,
) -> PlacementInput:
    """
    Load a placement input JSON file.
    Raises FileNotFoundError if path is missing, ValueError if the document is invalid.
    """
    resolved = _input_path(path, repo_root)
    if not resolved.exists():
        raise FileNotFoundError(f"Anchors file not found: {resolved}")
    try:
        data = json.loads(resolved.read_text(encoding="utf-8"))
    except json.JSONDecodeError as exc:
        raise ValueError(f"Invalid JSON in {resolved}: {exc}") from exc
    return parse_placement_input(data, source=str(path), font_family=font_family, font_size_px=font_size_px)
