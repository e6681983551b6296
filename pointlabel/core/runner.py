# pointlabel/core/runner.py
"""
CLI entrypoint: load anchors JSON (or generate samples), run one placement pass,
evaluate, export reports and PNGs.
"""

from __future__ import annotations

import argparse
import logging
import os
from pathlib import Path

from pointlabel.core.config import (
    DEBUG_DIAGNOSTICS,
    DEFAULT_AREA_HEIGHT_PX,
    DEFAULT_AREA_WIDTH_PX,
    DEFAULT_FONT_FAMILY,
    DEFAULT_FONT_SIZE_PX,
    REPORTS_DIR,
    SEED,
)
from pointlabel.core.evaluate import evaluate_layout
from pointlabel.core.io import PlacementInput, load_placement_input
from pointlabel.core.layout import place_labels
from pointlabel.core.render import render_debug, render_layout
from pointlabel.core.reporting import (
    ensure_report_dir,
    write_diagnostics_json,
    write_placements_json,
    write_run_metadata_json,
)
from pointlabel.core.samples import generate_sample_anchors
from pointlabel.core.types import AreaSize, PlacerOptions

logger = logging.getLogger(__name__)


def _parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    p = argparse.ArgumentParser(description="Place point labels without overlap.")
    p.add_argument("--anchors", type=str, default=None, help="Placement input JSON (area, anchors, options)")
    p.add_argument("--samples", type=int, default=0, help="Generate N sample anchors instead of reading a file")
    p.add_argument("--duplicates", type=float, default=0.0, help="Fraction of sample anchors sharing a position")
    p.add_argument("--width", type=float, default=DEFAULT_AREA_WIDTH_PX, help="Area width (px) for samples")
    p.add_argument("--height", type=float, default=DEFAULT_AREA_HEIGHT_PX, help="Area height (px) for samples")
    p.add_argument("--seed", type=int, default=SEED, help="Random seed for samples")
    p.add_argument("--font-family", type=str, default=DEFAULT_FONT_FAMILY, dest="font_family", help="Font used to measure labels")
    p.add_argument("--font-size-px", type=float, default=DEFAULT_FONT_SIZE_PX, dest="font_size_px", help="Font size (px)")
    p.add_argument("--rings", type=int, default=None, help="Override rings option")
    p.add_argument("--angles-per-ring", type=int, default=None, dest="angles_per_ring", help="Override anglesPerRing option")
    p.add_argument("--debug", action="store_true", default=DEBUG_DIAGNOSTICS, help="Collect diagnostics and write diagnostics.json")
    p.add_argument("--no-render", action="store_true", dest="no_render", help="Skip PNG output")
    p.add_argument("--run-name", type=str, default="run", dest="run_name", help="Reports subdir name")
    p.add_argument("--output-dir", type=str, default=REPORTS_DIR, dest="output_dir", help="Output directory (repo-relative)")
    p.add_argument("--repo-root", type=str, default=None, dest="repo_root", help="Repo root (default: cwd)")
    args = p.parse_args(argv)
    if not args.anchors and args.samples <= 0:
        p.error("one of --anchors or --samples N is required")
    return args


def _load_input(args: argparse.Namespace, repo_root: Path) -> PlacementInput:
    if args.anchors:
        return load_placement_input(
            args.anchors, repo_root=repo_root,
            font_family=args.font_family, font_size_px=args.font_size_px,
        )
    area = AreaSize(width=args.width, height=args.height)
    anchors = generate_sample_anchors(
        args.samples, area, seed=args.seed,
        duplicate_fraction=args.duplicates,
        font_family=args.font_family, font_size_px=args.font_size_px,
    )
    return PlacementInput(area=area, anchors=anchors, source=f"samples:{args.samples}:seed={args.seed}")


def _effective_options(base: PlacerOptions, args: argparse.Namespace) -> PlacerOptions:
    overrides = base.to_dict()
    if args.rings is not None:
        overrides["rings"] = args.rings
    if args.angles_per_ring is not None:
        overrides["angles_per_ring"] = args.angles_per_ring
    if args.debug:
        overrides["debug"] = True
    return PlacerOptions(**overrides)


def main(argv: list[str] | None = None) -> list[Path]:
    log_level = os.environ.get("LOG_LEVEL", "INFO").upper()
    logging.basicConfig(level=getattr(logging, log_level, logging.INFO))
    args = _parse_args(argv)
    repo_root = Path(args.repo_root).resolve() if args.repo_root else Path.cwd().resolve()

    data = _load_input(args, repo_root)
    options = _effective_options(data.options, args)
    outcome = place_labels(data.area, data.anchors, options)
    metrics = evaluate_layout(outcome, data.anchors, data.area, options)
    logger.info(
        "Placed %d labels, dropped %d (mean leader %.1f px)",
        metrics.placed_count, metrics.dropped_count, metrics.mean_leader_px,
    )

    report_dir = ensure_report_dir(repo_root, args.run_name, output_dir=args.output_dir)
    written = [
        write_placements_json(report_dir, outcome, data.area, options, metrics=metrics, source=data.source),
        write_run_metadata_json(
            report_dir, args.run_name, data.source, data.area,
            len(data.anchors), options, args.seed if not args.anchors else None,
        ),
    ]
    diag_path = write_diagnostics_json(report_dir, outcome)
    if diag_path is not None:
        written.append(diag_path)
    if not args.no_render and not data.area.is_degenerate:
        layout_path = report_dir / "layout.png"
        debug_path = report_dir / "debug.png"
        render_layout(data.area, data.anchors, outcome, layout_path, options)
        render_debug(data.area, data.anchors, outcome, debug_path, options)
        written.extend([layout_path, debug_path])

    for p in written:
        print(p)
    return written


if __name__ == "__main__":
    main()
