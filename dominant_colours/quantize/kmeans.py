# dominant_colours/quantize/kmeans.py
from __future__ import annotations

"""
K-means quantizer (Lloyd's algorithm) in device RGB or CIE Lab.

Seeding uses scikit-learn's k-means++. Runs are random unless a seed is
given; callers must not rely on cluster order.
"""

from typing import Optional, Tuple

import numpy as np
from sklearn.cluster import kmeans_plusplus

from ..colour_convert import cie_to_lab, lab_to_cie, lab_to_rgb, rgb_to_lab, u8_to_unit
from ..constants import KMEANS_EPS, KMEANS_MAX_ITER
from ..core_types import QuantizationResult, U8Image, assert_u8_image_rgb
from ..utils import debug_log

KMEANS_SPACES: Tuple[str, ...] = ("rgb", "lab")


def _assign(data: np.ndarray, centres: np.ndarray) -> np.ndarray:
    """
    Index of the nearest centre (squared Euclidean) per row.

    Expands |x - c|^2 as |x|^2 - 2 x.c + |c|^2 so only an (N, k) matrix is
    held, never the (N, k, 3) differences.
    """
    cross = data @ centres.T
    cross *= -2.0
    cross += np.einsum("kc,kc->k", centres, centres)[None, :]
    # |x|^2 is constant per row and cannot change the argmin
    return np.argmin(cross, axis=1).astype(np.int32)


def _update(data: np.ndarray, labels: np.ndarray, centres: np.ndarray) -> np.ndarray:
    """Member means per centre; an empty cluster keeps its previous centre."""
    k = centres.shape[0]
    sums = np.zeros_like(centres)
    np.add.at(sums, labels, data)
    counts = np.bincount(labels, minlength=k).astype(np.float64)
    filled = counts > 0
    out = centres.copy()
    out[filled] = sums[filled] / counts[filled, None]
    return out


def lloyd(
    data: np.ndarray,
    centres: np.ndarray,
    *,
    max_iter: int = KMEANS_MAX_ITER,
    eps: float = KMEANS_EPS,
) -> Tuple[np.ndarray, np.ndarray, int]:
    """
    Refine centres until every one moves less than eps or max_iter passes.

    Returns (labels, centres, iterations).
    """
    centres = np.asarray(centres, dtype=np.float64).copy()
    iterations = 0
    for iterations in range(1, max_iter + 1):
        labels = _assign(data, centres)
        updated = _update(data, labels, centres)
        shift = float(np.sqrt(((updated - centres) ** 2).sum(axis=1)).max())
        centres = updated
        if shift < eps:
            break
    return _assign(data, centres), centres, iterations


def kmeans_quantize(
    image: U8Image,
    n_colours: int,
    *,
    space: str = "lab",
    seed: Optional[int] = None,
    debug: bool = False,
) -> QuantizationResult:
    """
    Quantize an RGB image with k-means.

    space="rgb" clusters 0..255 device values; space="lab" clusters CIE Lab
    in conventional units. k is clamped to the number of distinct pixels.
    """
    if space not in KMEANS_SPACES:
        raise ValueError(f"unknown k-means space {space!r}; expected one of {KMEANS_SPACES}")
    rgb = assert_u8_image_rgb(image)
    height, width = rgb.shape[:2]
    if height * width == 0:
        return QuantizationResult(
            labels=np.zeros((height, width), dtype=np.int32),
            colours=np.zeros((0, 3), dtype=np.float64),
        )

    flat = rgb.reshape(-1, 3)
    if space == "rgb":
        data = flat.astype(np.float64)
    else:
        data = lab_to_cie(rgb_to_lab(u8_to_unit(flat)))

    distinct = int(np.unique(flat, axis=0).shape[0])
    k = min(max(1, int(n_colours)), distinct)

    seeds, _ = kmeans_plusplus(data, n_clusters=k, random_state=seed)
    labels, centres, iterations = lloyd(data, seeds)
    if debug:
        debug_log(f"[kmeans] space={space} k={k} iterations={iterations}")

    if space == "rgb":
        colours = np.clip(centres / 255.0, 0.0, 1.0)
    else:
        colours = lab_to_rgb(cie_to_lab(centres))

    return QuantizationResult(labels=labels.reshape(height, width), colours=colours)


__all__ = ["KMEANS_SPACES", "lloyd", "kmeans_quantize"]
