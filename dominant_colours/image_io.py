# dominant_colours/image_io.py
from __future__ import annotations

import io
from pathlib import Path
from typing import Optional

import numpy as np
from PIL import Image, ImageCms, ImageFilter, ImageOps, UnidentifiedImageError

from .core_types import U8Image

"""
Host-side image I/O: load to sRGB, blur / downsize before analysis, save.
The engine itself never touches files.
"""

IMAGE_EXTS = {".png", ".jpg", ".jpeg", ".webp", ".bmp", ".tif", ".tiff"}

# Longest side kept for analysis
MAX_ANALYSIS_SIDE = 512
# Gaussian radius close to a 3x3 kernel
BLUR_RADIUS = 1.0


def _convert_to_srgb_rgb(im: Image.Image) -> Image.Image:
    im = ImageOps.exif_transpose(im)
    icc_bytes = im.info.get("icc_profile")

    if icc_bytes:
        try:
            src_prof = ImageCms.ImageCmsProfile(io.BytesIO(icc_bytes))
            dst_prof = ImageCms.createProfile("sRGB")
            im2 = ImageCms.profileToProfile(
                im.convert("RGB"),
                src_prof,
                dst_prof,
                renderingIntent=ImageCms.Intent.PERCEPTUAL,
                outputMode="RGB",
            )
            if im2 is not None:
                return im2
        except (ImageCms.PyCMSError, OSError):
            pass

    return im.convert("RGB")


def load_image_rgb(path: Path) -> U8Image:
    """Load any Pillow-readable image as uint8 [H,W,3] sRGB; alpha is dropped."""
    with Image.open(path) as im0:
        im = _convert_to_srgb_rgb(im0)
    return np.array(im, dtype=np.uint8)


def preprocess_image(
    rgb: U8Image, *, blur: bool = False, max_side: Optional[int] = MAX_ANALYSIS_SIDE
) -> U8Image:
    """
    Optional Gaussian blur, then shrink so the longest side <= max_side.
    max_side None or <= 0 keeps the size.
    """
    im = Image.fromarray(np.ascontiguousarray(rgb))
    if blur:
        im = im.filter(ImageFilter.GaussianBlur(radius=BLUR_RADIUS))
    if max_side is not None and max_side > 0 and max(im.size) > max_side:
        im.thumbnail((max_side, max_side), resample=Image.Resampling.LANCZOS)
    return np.array(im, dtype=np.uint8)


def save_image_rgb(path: Path, rgb: U8Image) -> Path:
    """Save uint8 [H,W,3] as PNG (suffix forced to .png)."""
    if path.suffix.lower() != ".png":
        path = path.with_suffix(".png")
    Image.fromarray(np.ascontiguousarray(rgb)).save(path)
    return path


def is_image_file(path: Path) -> bool:
    try:
        with Image.open(path) as im:
            im.seek(0)
            im.load()
        return True
    except (UnidentifiedImageError, OSError):
        return False


__all__ = [
    "IMAGE_EXTS",
    "MAX_ANALYSIS_SIDE",
    "load_image_rgb",
    "preprocess_image",
    "save_image_rgb",
    "is_image_file",
]
