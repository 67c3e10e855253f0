# dominant_colours/name_data.py
from __future__ import annotations

"""
Colour-name table and lookup index.

Exports:
  DEFAULT_NAME_TABLE: list[NameRecord]  # small built-in table of basic names
  NameIndex(table)
    .name_of(rgb) -> str  # exact name, else "nearest: <name>"
  build_name_index(table=DEFAULT_NAME_TABLE) -> NameIndex
"""

from typing import Dict, List, Optional, Sequence, Tuple, Union

import numpy as np

from .colour_convert import lab_to_cie, rgb_to_lab, u8_to_unit
from .colour_distance import delta_e2000
from .constants import NAME_WEIGHTS, NEAREST_NAME_PREFIX
from .core_types import NameRecord, RGBTuple, hex_to_rgb


DEFAULT_NAME_TABLE: List[NameRecord] = [
    NameRecord(0, 0, 0, "black"),
    NameRecord(64, 64, 64, "dark gray"),
    NameRecord(128, 128, 128, "gray"),
    NameRecord(192, 192, 192, "silver"),
    NameRecord(255, 255, 255, "white"),
    NameRecord(128, 0, 0, "maroon"),
    NameRecord(139, 0, 0, "dark red"),
    NameRecord(255, 0, 0, "red"),
    NameRecord(220, 20, 60, "crimson"),
    NameRecord(250, 128, 114, "salmon"),
    NameRecord(255, 127, 80, "coral"),
    NameRecord(255, 69, 0, "red-orange"),
    NameRecord(255, 165, 0, "orange"),
    NameRecord(210, 105, 30, "chocolate"),
    NameRecord(139, 69, 19, "brown"),
    NameRecord(210, 180, 140, "tan"),
    NameRecord(245, 245, 220, "beige"),
    NameRecord(255, 215, 0, "gold"),
    NameRecord(255, 255, 0, "yellow"),
    NameRecord(255, 255, 224, "light yellow"),
    NameRecord(128, 128, 0, "olive"),
    NameRecord(127, 255, 0, "chartreuse"),
    NameRecord(0, 255, 0, "lime"),
    NameRecord(0, 128, 0, "green"),
    NameRecord(0, 100, 0, "dark green"),
    NameRecord(0, 255, 127, "spring green"),
    NameRecord(46, 139, 87, "sea green"),
    NameRecord(0, 128, 128, "teal"),
    NameRecord(0, 255, 255, "cyan"),
    NameRecord(224, 255, 255, "light cyan"),
    NameRecord(64, 224, 208, "turquoise"),
    NameRecord(0, 127, 255, "azure"),
    NameRecord(135, 206, 235, "sky blue"),
    NameRecord(0, 0, 255, "blue"),
    NameRecord(0, 0, 128, "navy"),
    NameRecord(65, 105, 225, "royal blue"),
    NameRecord(138, 43, 226, "blue violet"),
    NameRecord(127, 0, 255, "violet"),
    NameRecord(128, 0, 128, "purple"),
    NameRecord(255, 0, 255, "magenta"),
    NameRecord(218, 112, 214, "orchid"),
    NameRecord(255, 192, 203, "pink"),
    NameRecord(255, 20, 147, "deep pink"),
]


class NameIndex:
    """
    Read-only lookup over a (R, G, B, name) table.

    Exact RGB matches win; otherwise the nearest entry by CIEDE2000 with
    NAME_WEIGHTS (lightness weighted up) is returned with a "nearest: "
    prefix.
    """

    def __init__(
        self,
        table: Sequence[NameRecord],
        weights: Tuple[float, float, float] = NAME_WEIGHTS,
    ) -> None:
        self.records: Tuple[NameRecord, ...] = tuple(NameRecord(*row) for row in table)
        self.weights = weights
        self.exact: Dict[RGBTuple, str] = {}
        for record in self.records:
            self.exact.setdefault(record.rgb, record.name)
        if self.records:
            rgb = np.array([record.rgb for record in self.records], dtype=np.uint8)
            self.lab = lab_to_cie(rgb_to_lab(u8_to_unit(rgb)))
        else:
            self.lab = np.zeros((0, 3), dtype=np.float64)

    def __len__(self) -> int:
        return len(self.records)

    def nearest(self, rgb: RGBTuple) -> Optional[NameRecord]:
        """Closest record by weighted CIEDE2000, or None for an empty table."""
        if not self.records:
            return None
        src = lab_to_cie(rgb_to_lab(u8_to_unit(np.array(rgb, dtype=np.uint8))))
        k_l, k_c, k_h = self.weights
        distances = delta_e2000(src[None, :], self.lab, k_l, k_c, k_h)
        return self.records[int(np.argmin(distances))]

    def name_of(self, rgb: Union[RGBTuple, str]) -> Optional[str]:
        """Exact name, 'nearest: <name>', or None for an empty table. Accepts '#rrggbb'."""
        if isinstance(rgb, str):
            rgb = hex_to_rgb(rgb)
        rgb = (int(rgb[0]), int(rgb[1]), int(rgb[2]))
        exact = self.exact.get(rgb)
        if exact is not None:
            return exact
        record = self.nearest(rgb)
        if record is None:
            return None
        return f"{NEAREST_NAME_PREFIX}{record.name}"


def build_name_index(table: Sequence[NameRecord] = DEFAULT_NAME_TABLE) -> NameIndex:
    """Build the lookup index once; it is only read afterwards."""
    return NameIndex(table)


__all__ = ["DEFAULT_NAME_TABLE", "NameIndex", "build_name_index"]
