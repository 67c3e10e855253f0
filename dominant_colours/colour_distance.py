# dominant_colours/colour_distance.py
from __future__ import annotations

"""
Colour distances.

CIEDE2000 works over conventional CIE Lab units (L 0..100, a/b about
-128..127); ciede2000() and the RGB helpers accept the package's normalised
values and rescale first.

Exports:
  euclidean_distance_plane(p1, p2)
  euclidean_distance_space(p1, p2)
  delta_e2000(lab1, lab2, k_l, k_c, k_h)
  delta_e2000_pair(lab1, lab2, k_l, k_c, k_h)
  ciede2000(L1, a1, b1, L2, a2, b2, k_l, k_c, k_h)
  distance_rgb(rgb1, rgb2)
  distance_from_black_rgb(rgb), distance_from_white_rgb(rgb),
  distance_from_gray_rgb(rgb)
"""

from typing import Sequence

import numpy as np
from numpy.typing import ArrayLike, NDArray

from .colour_convert import lab_to_cie, rgb_to_lab

_POW25_7 = 25.0**7


# Euclidean


def euclidean_distance_plane(p1: ArrayLike, p2: ArrayLike) -> np.ndarray:
    """L2 distance over the last axis of (..., 2) points."""
    d = np.asarray(p1, dtype=np.float64)[..., :2] - np.asarray(p2, dtype=np.float64)[..., :2]
    return np.sqrt(np.sum(d * d, axis=-1))


def euclidean_distance_space(p1: ArrayLike, p2: ArrayLike) -> np.ndarray:
    """L2 distance over the last axis of (..., 3) points."""
    d = np.asarray(p1, dtype=np.float64)[..., :3] - np.asarray(p2, dtype=np.float64)[..., :3]
    return np.sqrt(np.sum(d * d, axis=-1))


# CIEDE2000


def _hue_degrees(a: np.ndarray, b: np.ndarray) -> np.ndarray:
    hue = np.mod(np.degrees(np.arctan2(b, a)), 360.0)
    return np.where((a == 0.0) & (b == 0.0), 0.0, hue)


def delta_e2000(
    lab1: ArrayLike,
    lab2: ArrayLike,
    k_l: float = 1.0,
    k_c: float = 1.0,
    k_h: float = 1.0,
) -> NDArray[np.float64]:
    """
    CIEDE2000 distance, broadcast over (..., 3) Lab arrays in CIE units.

    k_l, k_c, k_h weight lightness, chroma and hue; values below 1 make
    that component count more.
    """
    p = np.asarray(lab1, dtype=np.float64)
    q = np.asarray(lab2, dtype=np.float64)
    L1, a1, b1 = p[..., 0], p[..., 1], p[..., 2]
    L2, a2, b2 = q[..., 0], q[..., 1], q[..., 2]

    C1 = np.hypot(a1, b1)
    C2 = np.hypot(a2, b2)
    C_bar7 = (0.5 * (C1 + C2)) ** 7
    G = 0.5 * (1.0 - np.sqrt(C_bar7 / (C_bar7 + _POW25_7)))

    a1p = (1.0 + G) * a1
    a2p = (1.0 + G) * a2
    C1p = np.hypot(a1p, b1)
    C2p = np.hypot(a2p, b2)
    h1p = _hue_degrees(a1p, b1)
    h2p = _hue_degrees(a2p, b2)

    chroma_product = C1p * C2p
    achromatic = chroma_product == 0.0

    dLp = L2 - L1
    dCp = C2p - C1p
    dhp = h2p - h1p
    dhp = np.where(dhp > 180.0, dhp - 360.0, dhp)
    dhp = np.where(dhp < -180.0, dhp + 360.0, dhp)
    dhp = np.where(achromatic, 0.0, dhp)
    dHp = 2.0 * np.sqrt(chroma_product) * np.sin(np.radians(dhp / 2.0))

    L_bar = 0.5 * (L1 + L2)
    C_bar_p = 0.5 * (C1p + C2p)
    h_sum = h1p + h2p
    h_bar_p = np.select(
        [achromatic, np.abs(h1p - h2p) <= 180.0, h_sum < 360.0],
        [h_sum, 0.5 * h_sum, 0.5 * (h_sum + 360.0)],
        0.5 * (h_sum - 360.0),
    )

    T = (
        1.0
        - 0.17 * np.cos(np.radians(h_bar_p - 30.0))
        + 0.24 * np.cos(np.radians(2.0 * h_bar_p))
        + 0.32 * np.cos(np.radians(3.0 * h_bar_p + 6.0))
        - 0.20 * np.cos(np.radians(4.0 * h_bar_p - 63.0))
    )
    d_theta = 30.0 * np.exp(-(((h_bar_p - 275.0) / 25.0) ** 2))
    C_bar_p7 = C_bar_p**7
    R_c = 2.0 * np.sqrt(C_bar_p7 / (C_bar_p7 + _POW25_7))

    L_dev = (L_bar - 50.0) ** 2
    S_l = 1.0 + (0.015 * L_dev) / np.sqrt(20.0 + L_dev)
    S_c = 1.0 + 0.045 * C_bar_p
    S_h = 1.0 + 0.015 * C_bar_p * T
    R_t = -np.sin(np.radians(2.0 * d_theta)) * R_c

    l_term = dLp / (k_l * S_l)
    c_term = dCp / (k_c * S_c)
    h_term = dHp / (k_h * S_h)
    squared = l_term**2 + c_term**2 + h_term**2 + R_t * c_term * h_term
    return np.sqrt(np.maximum(squared, 0.0))


def delta_e2000_pair(
    lab1: Sequence[float] | NDArray[np.floating],
    lab2: Sequence[float] | NDArray[np.floating],
    k_l: float = 1.0,
    k_c: float = 1.0,
    k_h: float = 1.0,
) -> float:
    """CIEDE2000 distance between two Lab colours in CIE units."""
    return float(delta_e2000(lab1, lab2, k_l, k_c, k_h))


def ciede2000(
    L1: float,
    a1: float,
    b1: float,
    L2: float,
    a2: float,
    b2: float,
    k_l: float = 1.0,
    k_c: float = 1.0,
    k_h: float = 1.0,
) -> float:
    """CIEDE2000 between two normalised Lab triplets."""
    lab1 = lab_to_cie((L1, a1, b1))
    lab2 = lab_to_cie((L2, a2, b2))
    return delta_e2000_pair(lab1, lab2, k_l, k_c, k_h)


# RGB helpers


def distance_rgb(rgb1: ArrayLike, rgb2: ArrayLike) -> np.ndarray:
    """CIEDE2000 between sRGB colours (0..1), broadcast over (..., 3)."""
    return delta_e2000(lab_to_cie(rgb_to_lab(rgb1)), lab_to_cie(rgb_to_lab(rgb2)))


def distance_from_black_rgb(rgb: ArrayLike) -> np.ndarray:
    """CIEDE2000 to Lab black (0, 0, 0)."""
    lab = lab_to_cie(rgb_to_lab(rgb))
    return delta_e2000(lab, np.zeros(3))


def distance_from_white_rgb(rgb: ArrayLike) -> np.ndarray:
    """CIEDE2000 to Lab white (100, 0, 0)."""
    lab = lab_to_cie(rgb_to_lab(rgb))
    return delta_e2000(lab, np.array([100.0, 0.0, 0.0]))


def distance_from_gray_rgb(rgb: ArrayLike) -> np.ndarray:
    """CIEDE2000 to the achromatic colour of the same lightness."""
    lab = lab_to_cie(rgb_to_lab(rgb))
    gray = np.zeros_like(lab)
    gray[..., 0] = lab[..., 0]
    return delta_e2000(lab, gray)


__all__ = [
    "euclidean_distance_plane",
    "euclidean_distance_space",
    "delta_e2000",
    "delta_e2000_pair",
    "ciede2000",
    "distance_rgb",
    "distance_from_black_rgb",
    "distance_from_white_rgb",
    "distance_from_gray_rgb",
]
