#!/usr/bin/env python3
"""
extract_palette.py
Extract the dominant colours of images with one of four quantizers.

Usage:
  python extract_palette.py INPUT --algorithm [eigen|kmeans|mean_shift|sectored] --colours N
      [--kmeans-space rgb|lab] [--seed S] [--hs HS] [--hr HR]
      [--sectored-mode category|levels] [--levels N]
      [--regroup D] [--min-percentage P] [--black D] [--white D] [--gray D]
      [--sort KEY] [--blur] [--no-resize] [--quantized] [--palette] [--outdir DIR]
      [--debug]

Algorithms:
  eigen      : recursive principal-axis splits in CIE Lab. Deterministic.
  kmeans     : Lloyd's k-means with k-means++ seeding. Random unless --seed.
  mean_shift : mean-shift filtering and region growing, truncated to N colours.
  sectored   : hue sector x lightness x chroma buckets, truncated to N colours.

Input:
  Any Pillow-readable image, or a folder of them. Alpha is ignored.

Output:
  The palette as one line per colour. With --quantized, writes
  <stem>_quantized.png next to INPUT (or into --outdir). With --palette,
  writes <stem>_palette.png, one band per colour sized by its share.

Notes:
  Images are shrunk to 512 px on the longest side unless --no-resize.
  Distances (--regroup, --black, --white, --gray) are CIEDE2000 units.
"""

from __future__ import annotations

import argparse
import sys
import time
from pathlib import Path
from typing import List, Optional

from dominant_colours.constants import (
    DEFAULT_N_COLOURS,
    MS_DEFAULT_COLOUR,
    MS_DEFAULT_SPATIAL,
    SECTORED_DEFAULT_LEVELS,
    SORT_KEYS,
)
from dominant_colours.engine import Algorithm, ComputeParams, DominantColoursEngine
from dominant_colours.image_io import (
    IMAGE_EXTS,
    MAX_ANALYSIS_SIDE,
    is_image_file,
    load_image_rgb,
    preprocess_image,
    save_image_rgb,
)
from dominant_colours.palette_builder import render_palette_strip
from dominant_colours.quantize import KMEANS_SPACES, SECTORED_MODES
from dominant_colours.utils import (
    # formatting
    format_seconds_compact,
    format_total_duration_compact,
    key_value_pairs_to_string,
    palette_report_lines,
    # pretty logging
    debug_log,
    enable_line_buffered_stdout,
    error,
    log,
    print_banner,
    print_config_line,
    warn,
)

QUANTIZED_SUFFIX = "_quantized"
PALETTE_SUFFIX = "_palette"


# CLI args


def parse_cli_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    """
    Parse CLI arguments for palette extraction.

    Returns:
      argparse.Namespace with:
        src: Path to image or folder
        algorithm, colours: quantizer and requested count
        kmeans_space, seed, hs, hr, sectored_mode, levels: quantizer options
        regroup, min_percentage, black, white, gray: palette filters
        sort: palette order
        blur, no_resize: preprocessing switches
        quantized, palette, outdir: image outputs
        debug: bool for verbose details
    """
    parser = argparse.ArgumentParser(
        prog="extract_palette",
        description="Extract dominant colours from image(s) with tidy, readable output.",
    )
    parser.add_argument("src", type=Path, help="Input image or folder")
    parser.add_argument(
        "--algorithm",
        choices=[a.value for a in Algorithm],
        default=Algorithm.EIGEN.value,
        help="Quantizer.",
    )
    parser.add_argument(
        "--colours", type=int, default=DEFAULT_N_COLOURS, help="Requested colour count"
    )
    parser.add_argument(
        "--kmeans-space", choices=list(KMEANS_SPACES), default="lab", help="k-means space"
    )
    parser.add_argument("--seed", type=int, default=None, help="k-means random seed")
    parser.add_argument(
        "--hs", type=float, default=MS_DEFAULT_SPATIAL, help="Mean-shift spatial bandwidth (px)"
    )
    parser.add_argument(
        "--hr", type=float, default=MS_DEFAULT_COLOUR, help="Mean-shift colour bandwidth (Lab)"
    )
    parser.add_argument(
        "--sectored-mode", choices=list(SECTORED_MODES), default="category", help="Bucket scheme"
    )
    parser.add_argument(
        "--levels", type=int, default=SECTORED_DEFAULT_LEVELS, help="Bins per axis in levels mode"
    )
    parser.add_argument(
        "--regroup", type=float, default=0.0, help="Merge colours closer than this (0 = off)"
    )
    parser.add_argument(
        "--min-percentage",
        type=float,
        default=0.0,
        help="Drop colours below this share, in percent (0 = off)",
    )
    parser.add_argument("--black", type=float, default=0.0, help="Drop near-black colours")
    parser.add_argument("--white", type=float, default=0.0, help="Drop near-white colours")
    parser.add_argument("--gray", type=float, default=0.0, help="Drop near-gray colours")
    parser.add_argument("--sort", choices=list(SORT_KEYS), default="percentage", help="Order")
    parser.add_argument("--blur", action="store_true", help="Gaussian blur before analysis")
    parser.add_argument(
        "--no-resize",
        action="store_true",
        help=f"Keep full size (default shrinks to {MAX_ANALYSIS_SIDE} px)",
    )
    parser.add_argument(
        "--quantized", action="store_true", help="Write the quantized image as PNG"
    )
    parser.add_argument(
        "--palette", action="store_true", help="Write the palette strip as PNG"
    )
    parser.add_argument(
        "--outdir",
        type=Path,
        default=None,
        help="Output directory for --quantized and --palette",
    )
    parser.add_argument("--debug", action="store_true", help="Verbose details")
    return parser.parse_args(argv)


def params_from_args(args: argparse.Namespace) -> ComputeParams:
    """Build validated engine parameters from parsed arguments."""
    return ComputeParams(
        algorithm=args.algorithm,
        n_colours=args.colours,
        kmeans_space=args.kmeans_space,
        kmeans_seed=args.seed,
        ms_spatial=args.hs,
        ms_colour=args.hr,
        sectored_mode=args.sectored_mode,
        sectored_levels=args.levels,
        regroup_distance=args.regroup,
        black_threshold=args.black,
        white_threshold=args.white,
        gray_threshold=args.gray,
        min_percentage=args.min_percentage / 100.0,
        sort_by=args.sort,
        debug=args.debug,
    ).validate()


# Per-file processing


def _process_single_image(
    src_path: Path,
    engine: DominantColoursEngine,
    params: ComputeParams,
    *,
    blur: bool,
    resize: bool,
    write_quantized: bool,
    write_palette: bool,
    outdir: Optional[Path],
) -> None:
    """
    Process a single image path end-to-end:
      load -> preprocess -> compute -> report -> optional save.
    """
    t_start = time.perf_counter()
    print_banner(src_path.name)

    rgb = load_image_rgb(src_path)
    height0, width0 = rgb.shape[:2]
    rgb = preprocess_image(
        rgb, blur=blur, max_side=MAX_ANALYSIS_SIDE if resize else None
    )
    height, width = rgb.shape[:2]
    t_loaded = time.perf_counter()

    if params.debug:
        debug_log(
            key_value_pairs_to_string(
                [
                    ("Loaded", f"{width0}x{height0}"),
                    ("Analysed", f"{width}x{height}"),
                    ("Blur", blur),
                    ("Prep time", format_seconds_compact(t_loaded - t_start)),
                ]
            )
        )

    result = engine.compute(rgb, params)
    t_computed = time.perf_counter()

    log(f"Colours: {len(result.palette)}")
    for line in palette_report_lines(result.palette):
        log(f"  {line}")

    target_dir = outdir if outdir is not None else src_path.parent
    if write_quantized:
        out_path = save_image_rgb(
            target_dir / f"{src_path.stem}{QUANTIZED_SUFFIX}.png", result.quantized
        )
        log(f"Wrote {out_path.name} | size={width}x{height}")
    if write_palette:
        strip = render_palette_strip(result.palette)
        out_path = save_image_rgb(target_dir / f"{src_path.stem}{PALETTE_SUFFIX}.png", strip)
        log(f"Wrote {out_path.name} | size={strip.shape[1]}x{strip.shape[0]}")

    if params.debug:
        debug_log(
            f"Total {format_total_duration_compact(time.perf_counter() - t_start)}  "
            f"(load={format_seconds_compact(t_loaded - t_start)}, "
            f"compute={format_seconds_compact(t_computed - t_loaded)})"
        )
    else:
        log(f"Total time {format_total_duration_compact(time.perf_counter() - t_start)}")


# Entry point


def main(argv: Optional[List[str]] = None) -> None:
    """
    CLI entry point.

    Handles a single file or a folder (processed in name order).
    """
    enable_line_buffered_stdout()
    args = parse_cli_args(argv)

    try:
        params = params_from_args(args)
    except ValueError as exc:
        error(str(exc))
        sys.exit(2)

    print_config_line(
        "run",
        [
            ("Algorithm", params.algorithm.value),
            ("Colours", params.n_colours),
            ("Sort", params.sort_by),
        ],
        debug=False,
    )

    src = args.src
    if not src.exists():
        error(f"not found: {src}")
        sys.exit(2)

    if args.outdir is not None:
        args.outdir.mkdir(parents=True, exist_ok=True)

    if src.is_dir():
        all_entries = list(src.iterdir())
        files = [
            p
            for p in all_entries
            if p.is_file()
            and p.suffix.lower() in IMAGE_EXTS
            and not p.stem.endswith((QUANTIZED_SUFFIX, PALETTE_SUFFIX))
        ]
        files.sort(key=lambda p: p.name.lower())
        if args.debug:
            debug_log(
                key_value_pairs_to_string(
                    [("Folder entries", len(all_entries)), ("Images", len(files))]
                )
            )
    else:
        files = [src]

    engine = DominantColoursEngine()
    for path in files:
        if not is_image_file(path):
            warn(f"skipping unreadable image: {path.name}")
            continue
        _process_single_image(
            path,
            engine,
            params,
            blur=args.blur,
            resize=not args.no_resize,
            write_quantized=args.quantized,
            write_palette=args.palette,
            outdir=args.outdir,
        )


if __name__ == "__main__":
    main()
