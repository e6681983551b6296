# pointlabel/core/reporting.py
"""
Create reports/<run_name>/ and write placements.json, diagnostics.json, run_metadata.json.
"""

from __future__ import annotations

import json
from datetime import datetime, timezone
from pathlib import Path

from pointlabel.core import config
from pointlabel.core.error_codes import user_message
from pointlabel.core.evaluate import LayoutMetrics
from pointlabel.core.types import (
    AreaSize,
    Candidate,
    DiagnosticsEntry,
    LabelBox,
    PlacementOutcome,
    PlacerOptions,
)

SCHEMA_VERSION = "1.0"


def label_to_dict(label: LabelBox) -> dict:
    return {
        "text": label.text,
        "box": {"x": label.x, "y": label.y, "width": label.width, "height": label.height},
        "rotation": label.rotation,
        "anchor": {"x": label.owner.x, "y": label.owner.y},
        "members": len(label.owner.members),
        "fill_color": label.fill_color,
    }


def placements_to_dict(
    outcome: PlacementOutcome,
    area: AreaSize,
    options: PlacerOptions,
    metrics: LayoutMetrics | None = None,
    source: str = "",
) -> dict:
    """Structure of placements.json."""
    return {
        "schema_version": SCHEMA_VERSION,
        "input": {
            "source": source,
            "area": {"width": area.width, "height": area.height},
            "options": options.to_dict(),
        },
        "labels": [label_to_dict(lab) for lab in outcome.labels],
        "dropped": [
            {
                "text": d.text,
                "anchor": {"x": d.group.x, "y": d.group.y},
                "reason": d.reason,
                "message": user_message(d.reason),
                "best_score": d.best_score,
            }
            for d in outcome.dropped
        ],
        "summary": metrics.as_dict() if metrics is not None else {
            "placed_count": len(outcome.labels),
            "dropped_count": len(outcome.dropped),
        },
    }


def _candidate_to_dict(c: Candidate) -> dict:
    out = {"x": c.x, "y": c.y, "rotation": c.rotation, "score": c.score}
    if c.breakdown is not None:
        out["breakdown"] = c.breakdown.as_dict()
    return out


def diagnostics_to_list(entries: list[DiagnosticsEntry]) -> list[dict]:
    """One record per processed group: anchor, candidates, selection, labels placed before it."""
    return [
        {
            "anchor": {"x": e.group.x, "y": e.group.y, "text": e.group.text},
            "candidates": [_candidate_to_dict(c) for c in e.candidates],
            "selected_index": e.selected_index,
            "placed_before": [{"x": x, "y": y, "text": t} for x, y, t in e.placed_before],
        }
        for e in entries
    ]


def run_metadata_dict(
    run_name: str,
    source: str,
    area: AreaSize,
    n_anchors: int,
    options: PlacerOptions,
    seed: int | None,
) -> dict:
    """run_metadata.json: when, from what input, and the constants in effect."""
    return {
        "run_name": run_name,
        "created_utc": datetime.now(timezone.utc).isoformat(),
        "source": source,
        "area": {"width": area.width, "height": area.height},
        "n_anchors": n_anchors,
        "seed": seed,
        "options": options.to_dict(),
        "config": {
            "POINT_RADIUS_PX": config.POINT_RADIUS_PX,
            "BOUNDARY_BUFFER_PX": config.BOUNDARY_BUFFER_PX,
            "LABEL_PADDING_PX": config.LABEL_PADDING_PX,
            "AREA_MARGIN_PX": config.AREA_MARGIN_PX,
            "PRIMARY_RING_ANGLES": config.PRIMARY_RING_ANGLES,
            "FALLBACK_RING_STEP_PX": config.FALLBACK_RING_STEP_PX,
            "BORDER_THRESHOLD_PX": config.BORDER_THRESHOLD_PX,
            "CENTER_BONUS_MAX": config.CENTER_BONUS_MAX,
            "DISTANCE_WEIGHT": config.DISTANCE_WEIGHT,
            "DISQUALIFY_SCORE": config.DISQUALIFY_SCORE,
        },
    }


def ensure_report_dir(
    repo_root: Path,
    run_name: str,
    output_dir: str | None = None,
) -> Path:
    """<repo_root>/<output_dir or REPORTS_DIR>/<run_name>, created if missing."""
    report_dir = (repo_root / (output_dir or config.REPORTS_DIR)).resolve() / run_name
    report_dir.mkdir(parents=True, exist_ok=True)
    return report_dir


def _dump_json(path: Path, payload: dict | list) -> Path:
    path.write_text(json.dumps(payload, indent=2), encoding="utf-8")
    return path


def write_placements_json(
    report_dir: Path,
    outcome: PlacementOutcome,
    area: AreaSize,
    options: PlacerOptions,
    metrics: LayoutMetrics | None = None,
    source: str = "",
) -> Path:
    payload = placements_to_dict(outcome, area, options, metrics=metrics, source=source)
    return _dump_json(report_dir / "placements.json", payload)


def write_diagnostics_json(report_dir: Path, outcome: PlacementOutcome) -> Path | None:
    """diagnostics.json, only for passes run with debug on."""
    if outcome.diagnostics is None:
        return None
    return _dump_json(report_dir / "diagnostics.json", diagnostics_to_list(outcome.diagnostics))


def write_run_metadata_json(
    report_dir: Path,
    run_name: str,
    source: str,
    area: AreaSize,
    n_anchors: int,
    options: PlacerOptions,
    seed: int | None,
) -> Path:
    payload = run_metadata_dict(run_name, source, area, n_anchors, options, seed)
    return _dump_json(report_dir / "run_metadata.json", payload)
