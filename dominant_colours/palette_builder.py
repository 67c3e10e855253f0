# dominant_colours/palette_builder.py
from __future__ import annotations

"""
Palette building from raw quantizer output.

Pipeline (each pass returns a new list; entries may be mutated):
  count_entries(result)                     -> per-cluster counts, exact-RGB merge
  regroup_entries(palette, threshold)       -> merge CIEDE2000-close pairs
  filter_grays(palette, black, white, gray) -> drop near-neutral entries
  filter_percentage(palette, minimum)       -> drop rarely used entries
  truncate_entries(palette, max_colours)    -> keep the most used entries
  attach_names(palette, index)              -> exact or nearest names
  sort_palette(palette, key)                -> stable ordering

PaletteBuilder chains the passes in this order with one set of options.
The filters run before truncation, so a dropped neutral frees its slot for
the next most used colour.
render_quantized(result, palette) paints the quantized image.
render_palette_strip(palette, width, height) paints the palette as bands.
"""

from dataclasses import dataclass
from typing import Callable, Dict, List, Optional, Tuple

import numpy as np

from .colour_convert import (
    lab_to_cie,
    perceived_brightness,
    rgb_mean,
    rgb_to_lab,
    u8_to_unit,
    unit_to_u8,
)
from .colour_distance import delta_e2000
from .constants import (
    HUE_LUMA_REPETITIONS,
    PALETTE_STRIP_HEIGHT,
    PALETTE_STRIP_WIDTH,
    SORT_KEYS,
)
from .core_types import (
    Palette,
    PaletteEntry,
    QuantizationResult,
    RGBTuple,
    U8Image,
    coerce_to_rgb_tuple,
)
from .name_data import NameIndex
from .utils import debug_log


# Helpers


def _renormalise(palette: Palette) -> Palette:
    total = sum(entry.percentage for entry in palette)
    if total > 0.0:
        for entry in palette:
            entry.percentage = entry.percentage / total
    return palette


def _entries_lab(palette: Palette) -> np.ndarray:
    rgb = np.array([entry.rgb for entry in palette], dtype=np.uint8).reshape(-1, 3)
    return lab_to_cie(rgb_to_lab(u8_to_unit(rgb)))


def _closest_pair(palette: Palette) -> Tuple[int, int, float]:
    """(i, j, distance) of the closest pair, i < j. Needs two entries."""
    lab = _entries_lab(palette)
    distances = delta_e2000(lab[:, None, :], lab[None, :, :])
    upper_i, upper_j = np.triu_indices(len(palette), k=1)
    pair_d = distances[upper_i, upper_j]
    best = int(np.argmin(pair_d))
    return int(upper_i[best]), int(upper_j[best]), float(pair_d[best])


def merge_entries(first: PaletteEntry, second: PaletteEntry) -> PaletteEntry:
    """One entry at the share-weighted linear-light mean of two entries."""
    mixed = rgb_mean(
        u8_to_unit(first.rgb),
        u8_to_unit(second.rgb),
        first.percentage,
        second.percentage,
    )
    return PaletteEntry(
        rgb=coerce_to_rgb_tuple(unit_to_u8(mixed)),
        count=first.count + second.count,
        percentage=first.percentage + second.percentage,
        name=None,
        cluster_ids=sorted(set(first.cluster_ids) | set(second.cluster_ids)),
    )


# Passes


def count_entries(result: QuantizationResult) -> Palette:
    """
    Count pixels per cluster and build entries in cluster order.

    Empty clusters are dropped; clusters whose colours round to the same
    8-bit RGB become one entry.
    """
    total = int(result.labels.size)
    if total == 0 or result.n_colours == 0:
        return []

    counts = np.bincount(result.labels.ravel(), minlength=result.n_colours)
    rgb_rows = unit_to_u8(result.colours)

    merged: Dict[RGBTuple, Tuple[int, List[int]]] = {}
    for cluster_id, count in enumerate(counts[: result.n_colours]):
        if count <= 0:
            continue
        rgb = coerce_to_rgb_tuple(rgb_rows[cluster_id])
        prev_count, ids = merged.get(rgb, (0, []))
        merged[rgb] = (prev_count + int(count), ids + [cluster_id])

    return [
        PaletteEntry(rgb=rgb, count=count, percentage=count / total, cluster_ids=ids)
        for rgb, (count, ids) in merged.items()
    ]


def regroup_entries(palette: Palette, threshold: float, *, debug: bool = False) -> Palette:
    """
    Merge the closest pair while its CIEDE2000 distance is below threshold.
    Shares are summed, not renormalised.
    """
    out = list(palette)
    if threshold <= 0.0:
        return out
    while len(out) > 1:
        i, j, distance = _closest_pair(out)
        if distance >= threshold:
            break
        merged = merge_entries(out[i], out[j])
        if debug:
            debug_log(
                f"[regroup] {out[i].hex} + {out[j].hex} (dE={distance:.2f}) -> {merged.hex}"
            )
        out[i] = merged
        del out[j]
    return out


def truncate_entries(palette: Palette, max_colours: int) -> Palette:
    """Keep the max_colours most used entries (stable), renormalised."""
    max_colours = max(1, int(max_colours))
    if len(palette) <= max_colours:
        return list(palette)
    ranked = sorted(palette, key=lambda entry: -entry.count)
    return _renormalise(ranked[:max_colours])


def filter_grays(
    palette: Palette, black: float = 0.0, white: float = 0.0, gray: float = 0.0
) -> Palette:
    """
    Drop entries closer (CIEDE2000) than the thresholds to black, white or
    their own gray; renormalise. A threshold of 0 disables that test.
    """
    kept = [
        entry
        for entry in palette
        if not (
            entry.distance_black < black
            or entry.distance_white < white
            or entry.distance_gray < gray
        )
    ]
    return _renormalise(kept)


def filter_percentage(palette: Palette, minimum: float) -> Palette:
    """Drop entries whose share is below minimum (0..1); renormalise."""
    if minimum <= 0.0:
        return list(palette)
    return _renormalise([entry for entry in palette if entry.percentage >= minimum])


def attach_names(palette: Palette, index: Optional[NameIndex]) -> Palette:
    """Set entry.name from the index; leaves names unset without one."""
    if index is None or len(index) == 0:
        return palette
    for entry in palette:
        entry.name = index.name_of(entry.rgb)
    return palette


def _hue_luma_key(entry: PaletteEntry) -> Tuple[int, float]:
    bucket = int(entry.hsl_h * HUE_LUMA_REPETITIONS)
    luma = float(perceived_brightness(u8_to_unit(entry.rgb)))
    return bucket, luma


_SORT_KEYS: Dict[str, Tuple[Callable[[PaletteEntry], object], bool]] = {
    "percentage": (lambda e: e.percentage, True),
    "hue_hsl": (lambda e: e.hsl_h, False),
    "hue_lch": (lambda e: e.lch_h, False),
    "lightness": (lambda e: e.hsl_l, True),
    "chroma": (lambda e: e.lch_c, True),
    "saturation": (lambda e: e.hsl_s, True),
    "hex": (lambda e: e.hex, False),
    "hue_luma": (_hue_luma_key, False),
}


def sort_palette(palette: Palette, key: str = "percentage") -> Palette:
    """
    Stable sort. percentage, lightness, chroma and saturation run largest
    first; hue_hsl, hue_lch, hex and hue_luma run smallest first.
    """
    if key not in _SORT_KEYS:
        raise ValueError(f"unknown sort key {key!r}; expected one of {SORT_KEYS}")
    key_fn, descending = _SORT_KEYS[key]
    return sorted(palette, key=key_fn, reverse=descending)  # type: ignore[arg-type]


def render_quantized(result: QuantizationResult, palette: Palette) -> U8Image:
    """
    Per-pixel colour buffer: each pixel takes its cluster colour, then
    clusters represented by a palette entry take that entry's colour.
    """
    height, width = result.labels.shape
    if result.n_colours == 0:
        return np.zeros((height, width, 3), dtype=np.uint8)
    lut = unit_to_u8(result.colours)
    for entry in palette:
        if entry.cluster_ids:
            lut[entry.cluster_ids] = entry.rgb
    return lut[result.labels]


def render_palette_strip(
    palette: Palette,
    width: int = PALETTE_STRIP_WIDTH,
    height: int = PALETTE_STRIP_HEIGHT,
) -> U8Image:
    """
    Horizontal strip, one band per entry in palette order.

    Band widths follow the shares; band edges are rounded from the running
    total, so the bands always cover the full width. An empty palette gives
    a black strip.
    """
    strip = np.zeros((max(0, int(height)), max(0, int(width)), 3), dtype=np.uint8)
    shares = np.array([entry.percentage for entry in palette], dtype=np.float64)
    total = float(shares.sum())
    if strip.size == 0 or total <= 0.0:
        return strip
    edges = np.rint(np.cumsum(shares) / total * strip.shape[1]).astype(np.int64)
    edges[-1] = strip.shape[1]
    start = 0
    for entry, stop in zip(palette, edges):
        strip[:, start:stop] = entry.rgb
        start = int(stop)
    return strip


# Builder


@dataclass(frozen=True)
class PaletteBuilder:
    """
    Chains the passes with one set of options.

    max_colours truncates by usage after the filters; None keeps every entry.
    """

    regroup_distance: float = 0.0
    max_colours: Optional[int] = None
    black_threshold: float = 0.0
    white_threshold: float = 0.0
    gray_threshold: float = 0.0
    min_percentage: float = 0.0
    sort_by: str = "percentage"
    name_index: Optional[NameIndex] = None
    debug: bool = False

    def build(self, result: QuantizationResult) -> Palette:
        palette = count_entries(result)
        if self.debug:
            debug_log(f"[builder] {len(palette)} entries from {result.n_colours} clusters")
        palette = regroup_entries(palette, self.regroup_distance, debug=self.debug)
        palette = filter_grays(
            palette, self.black_threshold, self.white_threshold, self.gray_threshold
        )
        palette = filter_percentage(palette, self.min_percentage)
        if self.max_colours is not None:
            palette = truncate_entries(palette, self.max_colours)
        palette = attach_names(palette, self.name_index)
        palette = sort_palette(palette, self.sort_by)
        if self.debug:
            debug_log(f"[builder] {len(palette)} entries kept")
        return palette


__all__ = [
    "merge_entries",
    "count_entries",
    "regroup_entries",
    "truncate_entries",
    "filter_grays",
    "filter_percentage",
    "attach_names",
    "sort_palette",
    "render_quantized",
    "render_palette_strip",
    "PaletteBuilder",
]
