# dominant_colours/quantize/sectored.py
from __future__ import annotations

"""
Sectored means: deterministic hue / lightness / chroma bucketing.

Every pixel falls into one of 24 HSL hue sectors, then into a lightness
band (Lab L) and a chroma band (LCHab C over the sector's gamut maximum).
Each non-empty bucket yields the linear-light mean of its pixels.

Modes:
  category : 6 named lightness bands x 5 named chroma bands
  levels   : N equal bins for both lightness and normalised chroma
"""

from functools import lru_cache
from typing import NamedTuple, Tuple

import numpy as np

from ..colour_convert import (
    gamma_decode,
    gamma_encode,
    hsl_to_rgb,
    lab_to_lchab,
    rgb_to_hsl,
    rgb_to_lab,
    u8_to_unit,
)
from ..constants import (
    CHROMA_BANDS,
    HUE_SECTORS,
    LIGHTNESS_BANDS,
    SECTOR_HUE_STEP_DEG,
    SECTOR_LIGHTNESS_SAMPLES,
    SECTORED_DEFAULT_LEVELS,
)
from ..core_types import QuantizationResult, U8Image, assert_u8_image_rgb
from ..utils import debug_log

SECTORED_MODES: Tuple[str, ...] = ("category", "levels")

_SECTOR_WIDTH = 360.0 / len(HUE_SECTORS)
# Degrees to rotate so the first sector starts at 0
_SECTOR_OFFSET = (360.0 - HUE_SECTORS[0][1]) % 360.0


class HueSector(NamedTuple):
    name: str
    begin: float
    end: float
    max_chroma: float


def _sector_span(begin: float, end: float) -> float:
    return (end - begin) % 360.0 or 360.0


@lru_cache(maxsize=1)
def sector_max_chroma() -> np.ndarray:
    """
    Largest LCHab chroma reachable in sRGB for each hue sector.

    Samples fully saturated HSL colours across the sector's hue range and
    the whole lightness axis.
    """
    lightness = np.linspace(0.0, 1.0, SECTOR_LIGHTNESS_SAMPLES)
    out = np.empty(len(HUE_SECTORS), dtype=np.float64)
    for i, (_, begin, end) in enumerate(HUE_SECTORS):
        offsets = np.arange(0.0, _sector_span(begin, end), SECTOR_HUE_STEP_DEG)
        hues = ((begin + offsets) % 360.0) / 360.0
        h_grid, l_grid = np.meshgrid(hues, lightness, indexing="ij")
        hsl = np.stack([h_grid, np.ones_like(h_grid), l_grid], axis=-1)
        chroma = lab_to_lchab(rgb_to_lab(hsl_to_rgb(hsl)))[..., 1]
        out[i] = float(chroma.max())
    return out


def hue_sectors() -> Tuple[HueSector, ...]:
    """The sector table with its chroma bounds."""
    bounds = sector_max_chroma()
    return tuple(
        HueSector(name, begin, end, float(bounds[i]))
        for i, (name, begin, end) in enumerate(HUE_SECTORS)
    )


def hue_sector_index(hue_deg: np.ndarray) -> np.ndarray:
    """Sector index for hues in degrees."""
    shifted = np.mod(np.asarray(hue_deg, dtype=np.float64) + _SECTOR_OFFSET, 360.0)
    idx = np.floor(shifted / _SECTOR_WIDTH).astype(np.int64)
    return np.clip(idx, 0, len(HUE_SECTORS) - 1)


def _band_index(values: np.ndarray, bands) -> np.ndarray:
    upper = np.array([bound for _, bound in bands], dtype=np.float64)
    idx = np.searchsorted(upper, values, side="right")
    return np.clip(idx, 0, len(bands) - 1)


def _level_index(values: np.ndarray, levels: int) -> np.ndarray:
    idx = np.floor(np.clip(values, 0.0, None) * levels).astype(np.int64)
    return np.clip(idx, 0, levels - 1)


def _band_counts(mode: str, levels: int) -> Tuple[int, int]:
    if mode == "category":
        return len(LIGHTNESS_BANDS), len(CHROMA_BANDS)
    return levels, levels


def _check_mode(mode: str, levels: int) -> None:
    if mode not in SECTORED_MODES:
        raise ValueError(f"unknown sectored mode {mode!r}; expected one of {SECTORED_MODES}")
    if mode == "levels" and int(levels) < 1:
        raise ValueError(f"levels must be >= 1, got {levels}")


def bucket_keys(
    unit_rgb: np.ndarray, *, mode: str = "category", levels: int = SECTORED_DEFAULT_LEVELS
) -> np.ndarray:
    """
    Bucket key per colour for sRGB rows (..., 3) in 0..1.

    key = (sector * n_lightness + lightness) * n_chroma + chroma
    """
    _check_mode(mode, levels)
    levels = int(levels)
    hue_deg = rgb_to_hsl(unit_rgb)[..., 0] * 360.0
    lch = lab_to_lchab(rgb_to_lab(unit_rgb))
    sector = hue_sector_index(hue_deg)
    norm_chroma = lch[..., 1] / sector_max_chroma()[sector]

    if mode == "category":
        l_idx = _band_index(lch[..., 0], LIGHTNESS_BANDS)
        c_idx = _band_index(norm_chroma, CHROMA_BANDS)
    else:
        l_idx = _level_index(lch[..., 0], levels)
        c_idx = _level_index(norm_chroma, levels)

    n_l, n_c = _band_counts(mode, levels)
    return (sector * n_l + l_idx) * n_c + c_idx


def describe_bucket(
    key: int, *, mode: str = "category", levels: int = SECTORED_DEFAULT_LEVELS
) -> Tuple[str, str, str]:
    """(hue sector, lightness, chroma) labels for a bucket key."""
    _check_mode(mode, levels)
    n_l, n_c = _band_counts(mode, int(levels))
    sector, rest = divmod(int(key), n_l * n_c)
    l_idx, c_idx = divmod(rest, n_c)
    if not 0 <= sector < len(HUE_SECTORS):
        raise ValueError(f"bucket key {key} out of range")
    if mode == "category":
        return HUE_SECTORS[sector][0], LIGHTNESS_BANDS[l_idx][0], CHROMA_BANDS[c_idx][0]
    return (
        HUE_SECTORS[sector][0],
        f"lightness {l_idx + 1}/{n_l}",
        f"chroma {c_idx + 1}/{n_c}",
    )


def sectored_means_quantize(
    image: U8Image,
    *,
    mode: str = "category",
    levels: int = SECTORED_DEFAULT_LEVELS,
    debug: bool = False,
) -> Tuple[QuantizationResult, np.ndarray]:
    """
    Bucket every pixel and average each non-empty bucket in linear light.

    Returns (result, keys) where keys[i] is the bucket key of cluster id i.
    """
    _check_mode(mode, levels)
    rgb = assert_u8_image_rgb(image)
    height, width = rgb.shape[:2]
    if height * width == 0:
        empty = QuantizationResult(
            labels=np.zeros((height, width), dtype=np.int32),
            colours=np.zeros((0, 3), dtype=np.float64),
        )
        return empty, np.zeros((0,), dtype=np.int64)

    unit = u8_to_unit(rgb.reshape(-1, 3))
    keys = bucket_keys(unit, mode=mode, levels=levels)
    unique_keys, inverse = np.unique(keys, return_inverse=True)
    inverse = inverse.reshape(-1)

    sums = np.zeros((unique_keys.size, 3), dtype=np.float64)
    np.add.at(sums, inverse, gamma_decode(unit))
    counts = np.bincount(inverse, minlength=unique_keys.size).astype(np.float64)
    colours = np.clip(gamma_encode(sums / counts[:, None]), 0.0, 1.0)

    if debug:
        debug_log(f"[sectored] mode={mode} buckets={unique_keys.size}")
        for key, count in zip(unique_keys, counts):
            sector, light, chroma = describe_bucket(int(key), mode=mode, levels=levels)
            debug_log(f"[sectored]   {sector} / {light} / {chroma}: {int(count)} px")

    result = QuantizationResult(
        labels=inverse.astype(np.int32).reshape(height, width), colours=colours
    )
    return result, unique_keys


__all__ = [
    "SECTORED_MODES",
    "HueSector",
    "sector_max_chroma",
    "hue_sectors",
    "hue_sector_index",
    "bucket_keys",
    "describe_bucket",
    "sectored_means_quantize",
]
