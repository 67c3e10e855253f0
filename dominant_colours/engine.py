# dominant_colours/engine.py
from __future__ import annotations

"""
Engine: one synchronous call from pixels and parameters to a palette.

Exports:
  Algorithm            : eigen | kmeans | mean_shift | sectored
  ComputeParams        : frozen parameter set, .validate() -> normalised copy
  ComputeResult        : palette, quantized image, raw clusters
  DominantColoursEngine(name_table).compute(image, params) -> ComputeResult
  compute_palette(image, params=None, *, name_table, **overrides) -> ComputeResult
"""

import time
from dataclasses import dataclass, replace
from enum import Enum
from typing import Any, Optional, Sequence, Union

import numpy as np

from .constants import (
    DEFAULT_N_COLOURS,
    MS_DEFAULT_COLOUR,
    MS_DEFAULT_SPATIAL,
    SECTORED_DEFAULT_LEVELS,
    SORT_KEYS,
)
from .core_types import NameRecord, Palette, QuantizationResult, U8Image, assert_u8_image_rgb
from .name_data import DEFAULT_NAME_TABLE, NameIndex, build_name_index
from .palette_builder import PaletteBuilder, render_quantized
from .quantize import (
    KMEANS_SPACES,
    SECTORED_MODES,
    eigen_split_quantize,
    kmeans_quantize,
    mean_shift_quantize,
    sectored_means_quantize,
)
from .utils import debug_log, format_seconds_compact, print_config_line


class Algorithm(str, Enum):
    EIGEN = "eigen"
    KMEANS = "kmeans"
    MEAN_SHIFT = "mean_shift"
    SECTORED = "sectored"


# Quantizers whose cluster count is not planned; truncated to n_colours.
_UNPLANNED = (Algorithm.MEAN_SHIFT, Algorithm.SECTORED)


@dataclass(frozen=True)
class ComputeParams:
    """
    Parameters for one compute call.

    Distances are CIEDE2000 units; min_percentage is a 0..1 share.
    Zero thresholds disable their pass.
    """

    algorithm: Union[Algorithm, str] = Algorithm.EIGEN
    n_colours: int = DEFAULT_N_COLOURS
    kmeans_space: str = "lab"
    kmeans_seed: Optional[int] = None
    ms_spatial: float = MS_DEFAULT_SPATIAL
    ms_colour: float = MS_DEFAULT_COLOUR
    sectored_mode: str = "category"
    sectored_levels: int = SECTORED_DEFAULT_LEVELS
    regroup_distance: float = 0.0
    black_threshold: float = 0.0
    white_threshold: float = 0.0
    gray_threshold: float = 0.0
    min_percentage: float = 0.0
    sort_by: str = "percentage"
    debug: bool = False

    def validate(self) -> "ComputeParams":
        """
        Return a normalised copy, or raise ValueError for an unsupported
        combination. n_colours <= 0 becomes 1.
        """
        try:
            algorithm = Algorithm(self.algorithm)
        except ValueError:
            choices = [a.value for a in Algorithm]
            raise ValueError(
                f"unknown algorithm {self.algorithm!r}; expected one of {choices}"
            ) from None
        if self.kmeans_space not in KMEANS_SPACES:
            raise ValueError(f"unknown k-means space {self.kmeans_space!r}")
        if not self.ms_spatial > 0 or not self.ms_colour > 0:
            raise ValueError("mean-shift bandwidths must be positive")
        if self.sectored_mode not in SECTORED_MODES:
            raise ValueError(f"unknown sectored mode {self.sectored_mode!r}")
        if int(self.sectored_levels) < 1:
            raise ValueError("sectored levels must be >= 1")
        if self.sort_by not in SORT_KEYS:
            raise ValueError(f"unknown sort key {self.sort_by!r}; expected one of {SORT_KEYS}")
        for name in (
            "regroup_distance",
            "black_threshold",
            "white_threshold",
            "gray_threshold",
            "min_percentage",
        ):
            if getattr(self, name) < 0:
                raise ValueError(f"{name} must be >= 0")
        if self.min_percentage > 1.0:
            raise ValueError("min_percentage is a share in 0..1")

        return replace(
            self,
            algorithm=algorithm,
            n_colours=max(1, int(self.n_colours)),
            sectored_levels=int(self.sectored_levels),
        )


@dataclass(frozen=True)
class ComputeResult:
    palette: Palette
    quantized: U8Image
    clusters: QuantizationResult


class DominantColoursEngine:
    """
    Holds the read-only name index; compute() is a pure function of
    (image, params) otherwise. One compute() at a time per instance.
    """

    def __init__(self, name_table: Optional[Sequence[NameRecord]] = DEFAULT_NAME_TABLE) -> None:
        self.name_index: Optional[NameIndex] = (
            build_name_index(name_table) if name_table is not None else None
        )

    def quantize(self, image: U8Image, params: ComputeParams) -> QuantizationResult:
        """Run the selected quantizer on validated params."""
        algorithm = params.algorithm
        if algorithm == Algorithm.EIGEN:
            return eigen_split_quantize(image, params.n_colours, debug=params.debug)
        if algorithm == Algorithm.KMEANS:
            return kmeans_quantize(
                image,
                params.n_colours,
                space=params.kmeans_space,
                seed=params.kmeans_seed,
                debug=params.debug,
            )
        if algorithm == Algorithm.MEAN_SHIFT:
            return mean_shift_quantize(
                image, params.ms_spatial, params.ms_colour, debug=params.debug
            )
        result, _ = sectored_means_quantize(
            image,
            mode=params.sectored_mode,
            levels=params.sectored_levels,
            debug=params.debug,
        )
        return result

    def compute(self, image: np.ndarray, params: Optional[ComputeParams] = None) -> ComputeResult:
        """
        Quantize, build the palette and paint the quantized image.

        Raises TypeError for a non-uint8 image and ValueError for bad params,
        both before any pixel work.
        """
        params = (params or ComputeParams()).validate()
        rgb = assert_u8_image_rgb(image)

        if params.debug:
            print_config_line(
                str(params.algorithm.value),
                [
                    ("Size", f"{rgb.shape[1]}x{rgb.shape[0]}"),
                    ("Colours", params.n_colours),
                    ("Regroup", params.regroup_distance),
                    ("Min share", params.min_percentage),
                    ("Sort", params.sort_by),
                ],
                debug=True,
            )

        t_start = time.perf_counter()
        clusters = self.quantize(rgb, params)
        t_quant = time.perf_counter()

        builder = PaletteBuilder(
            regroup_distance=params.regroup_distance,
            max_colours=params.n_colours if params.algorithm in _UNPLANNED else None,
            black_threshold=params.black_threshold,
            white_threshold=params.white_threshold,
            gray_threshold=params.gray_threshold,
            min_percentage=params.min_percentage,
            sort_by=params.sort_by,
            name_index=self.name_index,
            debug=params.debug,
        )
        palette = builder.build(clusters)
        quantized = render_quantized(clusters, palette)

        if params.debug:
            debug_log(
                f"quantize={format_seconds_compact(t_quant - t_start)}  "
                f"palette={format_seconds_compact(time.perf_counter() - t_quant)}"
            )
        return ComputeResult(palette=palette, quantized=quantized, clusters=clusters)


def compute_palette(
    image: np.ndarray,
    params: Optional[ComputeParams] = None,
    *,
    name_table: Optional[Sequence[NameRecord]] = DEFAULT_NAME_TABLE,
    **overrides: Any,
) -> ComputeResult:
    """
    Functional form of DominantColoursEngine.compute.

    Keyword overrides replace fields of params (or of the defaults).
    """
    base = params if params is not None else ComputeParams()
    if overrides:
        base = replace(base, **overrides)
    return DominantColoursEngine(name_table).compute(image, base)


__all__ = [
    "Algorithm",
    "ComputeParams",
    "ComputeResult",
    "DominantColoursEngine",
    "compute_palette",
]
