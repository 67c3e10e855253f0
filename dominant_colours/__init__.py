# dominant_colours/__init__.py
"""
dominant_colours package.

Purpose:
  Dominant-colour extraction: colour space conversions, CIEDE2000, four
  quantizers and a palette builder. See extract_palette.py for the CLI.

Public API:
  compute_palette      : one-call functional entry point.
  DominantColoursEngine: engine holding a colour-name index.
  ComputeParams        : parameter set (algorithm, counts, thresholds, sort).
  Algorithm            : eigen | kmeans | mean_shift | sectored.
  colour_convert       : colour space transforms (rgb_to_lab, lab_to_lchab, ...).
  colour_distance      : CIEDE2000 and distance helpers.
  quantize             : the four quantizers.
  palette_builder      : counting, regrouping, filtering, naming and sorting passes.
  name_data            : default name table and name index.
  core_types           : shared types (PaletteEntry, QuantizationResult, NameRecord).
  utils                : formatting and logging helpers.

Quick start:
  import numpy as np
  from dominant_colours import compute_palette
  result = compute_palette(image_u8, algorithm="kmeans", n_colours=5, kmeans_seed=1)
  for entry in result.palette:
      print(entry.hex, entry.percentage, entry.name)
"""

__version__ = "0.1.0"

# Re-export namespaces for convenience.
from . import colour_convert
from . import colour_distance
from . import core_types
from . import name_data
from . import palette_builder
from . import quantize
from . import utils

from .core_types import NameRecord, PaletteEntry, QuantizationResult  # noqa: E402
from .engine import (  # noqa: E402
    Algorithm,
    ComputeParams,
    ComputeResult,
    DominantColoursEngine,
    compute_palette,
)

__all__ = [
    "__version__",
    "colour_convert",
    "colour_distance",
    "core_types",
    "name_data",
    "palette_builder",
    "quantize",
    "utils",
    "NameRecord",
    "PaletteEntry",
    "QuantizationResult",
    "Algorithm",
    "ComputeParams",
    "ComputeResult",
    "DominantColoursEngine",
    "compute_palette",
]
