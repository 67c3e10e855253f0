# dominant_colours/core_types.py
from __future__ import annotations

"""
Core type aliases, value objects, and lightweight helpers.
"""

from dataclasses import dataclass, field
from typing import List, NamedTuple, Optional, Sequence, Tuple, Union

import numpy as np
from numpy.typing import NDArray

# Basic aliases

RGBTuple = Tuple[int, int, int]
HexStr = str

U8Image = NDArray[np.uint8]  # (H, W, 3)
FloatImage = NDArray[np.float64]  # (H, W, 3)
Lab = NDArray[np.float64]  # (..., 3) CIE Lab
Lch = NDArray[np.float64]  # (..., 3) CIE LCh
LabelMap = NDArray[np.int32]  # (H, W) cluster ids

# Value objects


class NameRecord(NamedTuple):
    """One row of an externally supplied colour-name table."""

    r: int
    g: int
    b: int
    name: str

    @property
    def rgb(self) -> RGBTuple:
        return (self.r, self.g, self.b)


@dataclass(frozen=True)
class QuantizationResult:
    """
    Raw quantizer output.

    labels : int32 [H,W], cluster id per pixel
    colours: float64 [K,3], sRGB in 0..1, one row per cluster id
    """

    labels: LabelMap
    colours: NDArray[np.float64]

    @property
    def n_colours(self) -> int:
        return int(self.colours.shape[0])


@dataclass
class PaletteEntry:
    """
    Palette colour with usage and derived components.

    hsl_* and lch_* are in 0..1 (hues as turn fractions).
    cluster_ids lists the quantizer clusters folded into this entry.
    """

    rgb: RGBTuple
    count: int
    percentage: float
    hex: HexStr = ""
    hsl_h: float = 0.0
    hsl_s: float = 0.0
    hsl_l: float = 0.0
    lch_c: float = 0.0
    lch_h: float = 0.0
    distance_black: float = 0.0
    distance_white: float = 0.0
    distance_gray: float = 0.0
    name: Optional[str] = None
    cluster_ids: List[int] = field(default_factory=list, repr=False)

    def __post_init__(self) -> None:
        self.refresh()

    def refresh(self) -> None:
        """Recompute every field derived from rgb."""
        # Local import: colour modules import this one.
        from .colour_convert import rgb_to_hsl, rgb_to_lchab, u8_to_unit
        from .colour_distance import (
            distance_from_black_rgb,
            distance_from_gray_rgb,
            distance_from_white_rgb,
        )

        unit = u8_to_unit(np.array(self.rgb, dtype=np.uint8))
        hsl = rgb_to_hsl(unit)
        lch = rgb_to_lchab(unit)
        self.hex = rgb_to_hex(self.rgb)
        self.hsl_h, self.hsl_s, self.hsl_l = (float(v) for v in hsl)
        self.lch_c, self.lch_h = float(lch[1]), float(lch[2])
        self.distance_black = float(distance_from_black_rgb(unit))
        self.distance_white = float(distance_from_white_rgb(unit))
        self.distance_gray = float(distance_from_gray_rgb(unit))


Palette = List[PaletteEntry]

# Small helpers


def rgb_to_hex(rgb: RGBTuple) -> HexStr:
    """RGB tuple to uppercase hex string '#RRGGBB'."""
    return f"#{rgb[0]:02X}{rgb[1]:02X}{rgb[2]:02X}"


def hex_to_rgb(hex_str: str) -> RGBTuple:
    """Parse '#rgb' or '#rrggbb' (case-insensitive) into an RGB tuple."""
    s = hex_str.strip().lower()
    if not s.startswith("#"):
        raise ValueError("hex must start with '#'")
    if len(s) == 4:
        r, g, b = s[1], s[2], s[3]
        s = f"#{r}{r}{g}{g}{b}{b}"
    if len(s) != 7:
        raise ValueError("hex must be '#rrggbb' or '#rgb'")
    return (int(s[1:3], 16), int(s[3:5], 16), int(s[5:7], 16))


def coerce_to_rgb_tuple(value: Union[Sequence[int], NDArray[np.generic]]) -> RGBTuple:
    """
    Coerce a 3-length sequence or array to an (int, int, int) RGB tuple.
    Helpful when extracting values from NumPy rows.
    """
    if isinstance(value, np.ndarray):
        if value.size < 3:
            raise ValueError("array too small for RGB")
        flat = value.reshape(-1)
        return (int(flat[0]), int(flat[1]), int(flat[2]))
    if len(value) < 3:
        raise ValueError("sequence too small for RGB")
    return (int(value[0]), int(value[1]), int(value[2]))


def assert_u8_image_rgb(image: np.ndarray) -> U8Image:
    """Validate a uint8 (H,W,3 or 4) image and return its RGB channels."""
    if (
        not isinstance(image, np.ndarray)
        or image.dtype != np.uint8
        or image.ndim != 3
        or image.shape[-1] not in (3, 4)
    ):
        raise TypeError("expected uint8 (H,W,3/4) image")
    return image[..., :3]


__all__ = [
    # aliases / types
    "RGBTuple",
    "HexStr",
    "U8Image",
    "FloatImage",
    "Lab",
    "Lch",
    "LabelMap",
    "Palette",
    # value objects
    "NameRecord",
    "QuantizationResult",
    "PaletteEntry",
    # helpers
    "rgb_to_hex",
    "hex_to_rgb",
    "coerce_to_rgb_tuple",
    "assert_u8_image_rgb",
]
