# dominant_colours/quantize/mean_shift.py
from __future__ import annotations

"""
Mean-shift filtering and segmentation in CIE Lab.

Filtering moves every pixel toward the mean of the window points whose Lab
colour lies within the colour bandwidth. The window stays centred on the
pixel and always reads the unfiltered image. Segmentation then grows
8-connected regions from raster-order seeds.

Exports:
  MeanShift(spatial_bandwidth, colour_bandwidth)
    .filter(lab) -> lab
    .segment(lab) -> (labels, modes)
  mean_shift_quantize(image, spatial_bandwidth, colour_bandwidth) -> QuantizationResult
"""

from typing import List, Tuple

import numpy as np

from ..colour_convert import cie_to_lab, lab_to_cie, lab_to_rgb, rgb_to_lab, u8_to_unit
from ..constants import (
    MS_DEFAULT_COLOUR,
    MS_DEFAULT_SPATIAL,
    MS_MAX_NUM_CONVERGENCE_STEPS,
    MS_MEAN_SHIFT_TOL_COLOR,
    MS_MEAN_SHIFT_TOL_SPATIAL,
    MS_NEIGHBOURS,
)
from ..core_types import QuantizationResult, U8Image, assert_u8_image_rgb
from ..utils import debug_log


def _window_slices(
    height: int, width: int, dy: int, dx: int
) -> Tuple[Tuple[slice, slice], Tuple[slice, slice]]:
    """(target, source) slices pairing each pixel with its (dy, dx) neighbour."""
    y0, y1 = max(0, -dy), min(height, height - dy)
    x0, x1 = max(0, -dx), min(width, width - dx)
    target = (slice(y0, y1), slice(x0, x1))
    source = (slice(y0 + dy, y1 + dy), slice(x0 + dx, x1 + dx))
    return target, source


class MeanShift:
    """
    Mean-shift filter and segmenter.

    spatial_bandwidth : window radius in pixels
    colour_bandwidth  : Lab Euclidean radius (CIE units)
    """

    def __init__(
        self,
        spatial_bandwidth: float = MS_DEFAULT_SPATIAL,
        colour_bandwidth: float = MS_DEFAULT_COLOUR,
        *,
        debug: bool = False,
    ) -> None:
        if not spatial_bandwidth > 0:
            raise ValueError(f"spatial bandwidth must be positive, got {spatial_bandwidth}")
        if not colour_bandwidth > 0:
            raise ValueError(f"colour bandwidth must be positive, got {colour_bandwidth}")
        self.hs = max(1, int(round(spatial_bandwidth)))
        self.hr = float(colour_bandwidth)
        self.debug = debug

    def filter(self, lab: np.ndarray) -> np.ndarray:
        """Mean-shift filter a (H, W, 3) Lab image in CIE units."""
        source = np.asarray(lab, dtype=np.float64)
        height, width = source.shape[:2]
        hr_sq = self.hr * self.hr

        ys, xs = np.mgrid[0:height, 0:width].astype(np.float64)
        cur_col = source.copy()
        cur_pos = np.stack([ys, xs], axis=-1)
        active = np.ones((height, width), dtype=bool)

        steps = 0
        while steps < MS_MAX_NUM_CONVERGENCE_STEPS and active.any():
            sum_col = np.zeros_like(cur_col)
            sum_pos = np.zeros_like(cur_pos)
            count = np.zeros((height, width), dtype=np.float64)

            for dy in range(-self.hs, self.hs + 1):
                for dx in range(-self.hs, self.hs + 1):
                    target, src = _window_slices(height, width, dy, dx)
                    neighbour = source[src]
                    diff = neighbour - cur_col[target]
                    inside = np.einsum("hwc,hwc->hw", diff, diff) < hr_sq
                    weight = inside.astype(np.float64)
                    sum_col[target] += neighbour * weight[..., None]
                    sum_pos[target][..., 0] += ys[src] * weight
                    sum_pos[target][..., 1] += xs[src] * weight
                    count[target] += weight

            moved = active & (count > 0)
            safe = np.where(count > 0, count, 1.0)[..., None]
            new_col = sum_col / safe
            new_pos = sum_pos / safe

            col_shift = np.linalg.norm(new_col - cur_col, axis=-1)
            pos_shift = np.linalg.norm(new_pos - cur_pos, axis=-1)
            cur_col[moved] = new_col[moved]
            cur_pos[moved] = new_pos[moved]

            steps += 1
            active = (
                moved
                & (col_shift > MS_MEAN_SHIFT_TOL_COLOR)
                & (pos_shift > MS_MEAN_SHIFT_TOL_SPATIAL)
            )
            if self.debug:
                debug_log(f"[mean-shift] step {steps}: {int(active.sum())} px still moving")

        return cur_col

    def segment(self, lab: np.ndarray) -> Tuple[np.ndarray, np.ndarray]:
        """
        Region-grow a (filtered) Lab image.

        A neighbour joins a region when its colour lies within the colour
        bandwidth of the region's seed. Returns (labels int32 [H,W],
        modes float64 [R,3] mean Lab per region).
        """
        image = np.asarray(lab, dtype=np.float64)
        height, width = image.shape[:2]
        flat = image.reshape(-1, 3)
        labels = np.full(height * width, -1, dtype=np.int32)
        hr_sq = self.hr * self.hr
        modes: List[np.ndarray] = []

        for seed in range(height * width):
            if labels[seed] >= 0:
                continue
            label = len(modes)
            labels[seed] = label
            seed_col = flat[seed]
            total = seed_col.copy()
            members = 1
            stack = [seed]
            while stack:
                idx = stack.pop()
                y, x = divmod(idx, width)
                for dy, dx in MS_NEIGHBOURS:
                    ny, nx = y + dy, x + dx
                    if ny < 0 or nx < 0 or ny >= height or nx >= width:
                        continue
                    n_idx = ny * width + nx
                    if labels[n_idx] >= 0:
                        continue
                    diff = flat[n_idx] - seed_col
                    if float(diff @ diff) < hr_sq:
                        labels[n_idx] = label
                        total += flat[n_idx]
                        members += 1
                        stack.append(n_idx)
            modes.append(total / members)

        if self.debug:
            debug_log(f"[mean-shift] {len(modes)} regions")
        return labels.reshape(height, width), np.asarray(modes, dtype=np.float64).reshape(-1, 3)


def mean_shift_quantize(
    image: U8Image,
    spatial_bandwidth: float = MS_DEFAULT_SPATIAL,
    colour_bandwidth: float = MS_DEFAULT_COLOUR,
    *,
    debug: bool = False,
) -> QuantizationResult:
    """
    Filter then segment. One colour per region; the region count is not
    planned, so callers usually truncate by pixel count afterwards.
    """
    shifter = MeanShift(spatial_bandwidth, colour_bandwidth, debug=debug)
    rgb = assert_u8_image_rgb(image)
    height, width = rgb.shape[:2]
    if height * width == 0:
        return QuantizationResult(
            labels=np.zeros((height, width), dtype=np.int32),
            colours=np.zeros((0, 3), dtype=np.float64),
        )

    lab = lab_to_cie(rgb_to_lab(u8_to_unit(rgb)))
    labels, modes = shifter.segment(shifter.filter(lab))
    colours = lab_to_rgb(cie_to_lab(modes))
    return QuantizationResult(labels=labels, colours=colours)


__all__ = ["MeanShift", "mean_shift_quantize"]
