# dominant_colours/quantize/__init__.py
"""
Quantizers.

Provides:
  eigen_split_quantize(image, n_colours, *, debug=False) -> QuantizationResult
    Recursive principal-axis splits in CIE Lab. Deterministic.

  kmeans_quantize(image, n_colours, *, space="lab", seed=None, debug=False) -> QuantizationResult
    Lloyd's k-means with k-means++ seeding, in device RGB or CIE Lab.

  mean_shift_quantize(image, spatial_bandwidth, colour_bandwidth, *, debug=False) -> QuantizationResult
    Mean-shift filtering then 8-connected region growing. Region count is unplanned.

  sectored_means_quantize(image, *, mode="category", levels=4, debug=False)
    -> (QuantizationResult, bucket_keys)
    Hue sector x lightness x chroma bucketing. Deterministic.

    Args (all):
      image : uint8 [H,W,3] (alpha channel, if any, is ignored)

    Returns:
      QuantizationResult with int32 [H,W] labels and float64 [K,3] sRGB colours.
"""

from .eigen import ColourNode, eigen_split_quantize
from .kmeans import KMEANS_SPACES, kmeans_quantize
from .mean_shift import MeanShift, mean_shift_quantize
from .sectored import (
    SECTORED_MODES,
    HueSector,
    bucket_keys,
    describe_bucket,
    hue_sectors,
    sectored_means_quantize,
)

__all__ = [
    "ColourNode",
    "eigen_split_quantize",
    "KMEANS_SPACES",
    "kmeans_quantize",
    "MeanShift",
    "mean_shift_quantize",
    "SECTORED_MODES",
    "HueSector",
    "bucket_keys",
    "describe_bucket",
    "hue_sectors",
    "sectored_means_quantize",
]
