#!/usr/bin/env python3
"""
knot_grid CLI
Turn an image into a knot chart: a cols x rows grid of colour cells, optionally
limited to a palette, rendered with gridlines for weaving.

Usage:
  knot-grid INPUT [--out OUT] [--cols N --rows N | --auto-size] [--contrast F]
            [--palette PRESET | --colours HEX,HEX,...] [--extract-palette [--depth D]]
            [--resample box|nearest|bilinear|bicubic|lanczos] [--cell-size PX]
            [--no-grid] [--numbers] [--save-project JSON] [--debug]
  knot-grid --load-project JSON [--out OUT] [--cell-size PX]

Output:
  PNG chart. If --out is omitted, writes <stem>_knots.png next to INPUT.

Notes:
  Palette mode is on when --palette, --colours or --extract-palette is given.
  --load-project re-renders a saved grid exactly; nothing is re-rasterized.
"""

from __future__ import annotations

import argparse
import os
import sys
import time
from pathlib import Path
from typing import List, Optional

from .config import DEFAULT_COLS, DEFAULT_ROWS, MAX_CONTRAST, MIN_CONTRAST
from .image_io import ImageDecodeError, save_png
from .palette_data import PRESET_PALETTES, Palette, parse_palette
from .project import ProjectSnapshot
from .quantize import QUANTIZE_DEPTH, EmptySampleError
from .render import DEFAULT_CELL_SIZE
from .session import Session
from .utils import (
    RESAMPLE_NAMES,
    colour_usage_report,
    debug_log,
    error,
    format_seconds_compact,
    format_total_duration_compact,
    key_value_pairs_to_string,
    log,
    print_banner,
    print_config_line,
)


def parse_cli_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    """
    Parse CLI arguments.

    Returns:
      argparse.Namespace with:
        src: input image (optional with --load-project)
        out: output PNG path
        cols, rows: grid size (None -> default or auto)
        auto_size: size the grid from the image
        contrast: contrast factor
        palette: preset key, colours: comma separated hexes
        extract_palette, depth: median-cut palette options
        resample: Pillow filter name
        cell_size: pixels per knot in the chart
        no_grid, numbers: overlay switches
        save_project, load_project: snapshot JSON paths
        debug: verbose details
    """
    parser = argparse.ArgumentParser(
        prog="knot-grid",
        description="Convert an image into a knot grid chart.",
    )
    parser.add_argument("src", type=Path, nargs="?", help="Input image")
    parser.add_argument("--out", type=Path, default=None, help="Output PNG")
    parser.add_argument("--cols", type=int, default=None, help="Grid width in knots")
    parser.add_argument("--rows", type=int, default=None, help="Grid height in knots")
    parser.add_argument(
        "--auto-size",
        action="store_true",
        help="Pick cols/rows from the image (explicit --cols/--rows still win).",
    )
    parser.add_argument(
        "--contrast",
        type=float,
        default=1.0,
        help=f"Contrast factor {MIN_CONTRAST}..{MAX_CONTRAST}",
    )
    group = parser.add_mutually_exclusive_group()
    group.add_argument(
        "--palette", choices=sorted(PRESET_PALETTES), help="Preset palette"
    )
    group.add_argument("--colours", type=str, default=None, help="Comma separated hex colours")
    group.add_argument(
        "--extract-palette",
        action="store_true",
        help="Derive the palette from the image (median cut).",
    )
    parser.add_argument(
        "--depth", type=int, default=QUANTIZE_DEPTH, help="Median-cut split depth"
    )
    parser.add_argument(
        "--resample", choices=list(RESAMPLE_NAMES), default="box", help="Scaling filter"
    )
    parser.add_argument(
        "--cell-size", type=int, default=DEFAULT_CELL_SIZE, help="Pixels per knot"
    )
    parser.add_argument("--no-grid", action="store_true", help="Hide gridlines")
    parser.add_argument("--numbers", action="store_true", help="Label every 10th column")
    parser.add_argument("--save-project", type=Path, default=None, help="Write project JSON")
    parser.add_argument("--load-project", type=Path, default=None, help="Read project JSON")
    parser.add_argument("--debug", action="store_true", help="Verbose details")
    args = parser.parse_args(argv)
    if args.src is None and args.load_project is None:
        parser.error("an input image or --load-project is required")
    return args


def _initial_palette(args: argparse.Namespace) -> Optional[Palette]:
    if args.palette:
        return Palette.from_preset(args.palette)
    if args.colours:
        return parse_palette([h for h in args.colours.split(",") if h.strip()])
    return None


def _report(session: Session, out_path: Path) -> None:
    grid = session.grid
    if grid is None:
        return
    cfg = session.config
    log(
        f"Wrote {out_path.name} | grid={cfg.cols}x{cfg.rows} | "
        f"palette={'on' if cfg.use_palette else 'off'}"
    )
    log("Colours used:")
    for hex_code, count in colour_usage_report(grid):
        log(f"  {hex_code}: {count:,}")
    log(f"Total knots: {grid.rows * grid.cols:,}")


def _run_project(args: argparse.Namespace) -> int:
    t_start = time.perf_counter()
    path: Path = args.load_project
    print_banner(path.name)
    snapshot = ProjectSnapshot.from_json(path.read_text(encoding="utf-8"))
    session = Session(debug=args.debug)
    session.restore(snapshot, reload_source=False)
    if args.no_grid or args.numbers:
        session.update_config(
            show_grid=not args.no_grid and snapshot.config.show_grid,
            show_numbers=args.numbers or snapshot.config.show_numbers,
        )
    image = session.render(args.cell_size)
    if image is None:
        error("project has an empty grid")
        return 1
    out_path = save_png(args.out or path.with_name(f"{path.stem}_knots.png"), image)
    _report(session, out_path)
    log(f"Total time {format_total_duration_compact(time.perf_counter() - t_start)}")
    return 0


def _run_image(args: argparse.Namespace) -> int:
    t_start = time.perf_counter()
    src: Path = args.src
    print_banner(src.name)

    session = Session(resample=args.resample, debug=args.debug)
    auto_size = bool(args.auto_size)
    session.load_source(src, auto_size=auto_size)
    source = session.wait_for_source()
    t_loaded = time.perf_counter()
    if source is None:
        error(f"no pixels decoded from {src}")
        return 1
    if args.debug:
        debug_log(
            key_value_pairs_to_string(
                [
                    ("Loaded", f"{source.width}x{source.height}"),
                    ("Aspect", session.aspect_ratio),
                    ("Decode", format_seconds_compact(t_loaded - t_start)),
                ]
            )
        )

    changes = {
        "contrast": args.contrast,
        "show_grid": not args.no_grid,
        "show_numbers": args.numbers,
    }
    if args.cols is not None:
        changes["cols"] = args.cols
    elif not auto_size:
        changes["cols"] = DEFAULT_COLS
    if args.rows is not None:
        changes["rows"] = args.rows
    elif not auto_size:
        changes["rows"] = DEFAULT_ROWS
    palette = _initial_palette(args)
    if palette is not None:
        changes["palette"] = palette
        changes["use_palette"] = True
    session.update_config(**changes)

    if args.extract_palette:
        extracted = session.extract_palette(depth=args.depth)
        if extracted is not None:
            log(f"Extracted palette ({len(extracted)}): {' '.join(extracted.hexes)}")
    t_built = time.perf_counter()

    cfg = session.config
    print_config_line(
        "grid",
        [
            ("Cols", cfg.cols),
            ("Rows", cfg.rows),
            ("Contrast", cfg.contrast),
            ("Palette", cfg.use_palette),
            ("Colours", len(cfg.palette) if cfg.use_palette else "-"),
            ("Resample", args.resample),
        ],
        debug=False,
    )

    image = session.render(args.cell_size)
    if image is None:
        error("nothing to render")
        return 1
    out_path = save_png(args.out or src.with_name(f"{src.stem}_knots.png"), image)
    t_saved = time.perf_counter()

    if args.save_project is not None:
        snapshot = session.snapshot()
        if snapshot is not None:
            args.save_project.parent.mkdir(parents=True, exist_ok=True)
            args.save_project.write_text(snapshot.to_json(indent=2), encoding="utf-8")
            log(f"Saved project {args.save_project.name}")

    _report(session, out_path)
    if args.debug:
        debug_log(
            f"Total {format_total_duration_compact(t_saved - t_start)}  "
            f"(load={format_seconds_compact(t_loaded - t_start)}, "
            f"grid={format_seconds_compact(t_built - t_loaded)}, "
            f"render+save={format_seconds_compact(t_saved - t_built)})"
        )
    else:
        log(f"Total time {format_total_duration_compact(t_saved - t_start)}")
    return 0


def main(argv: Optional[List[str]] = None) -> int:
    """CLI entry point. Returns a process exit status."""
    args = parse_cli_args(argv)
    if args.debug:
        debug_log(key_value_pairs_to_string([("CPU cores", os.cpu_count() or 1)]))
    try:
        if args.load_project is not None:
            return _run_project(args)
        if not args.src.exists():
            error(f"not found: {args.src}")
            return 2
        return _run_image(args)
    except ImageDecodeError as e:
        error(str(e))
        return 2
    except (EmptySampleError, ValueError, KeyError, OSError) as e:
        error(str(e))
        return 1


if __name__ == "__main__":
    sys.exit(main())
