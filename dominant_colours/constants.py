# dominant_colours/constants.py
"""
Colorimetric constants and tunables used across the project.

- D65 reference white, CIE epsilon / kappa, RGB<->XYZ and XYZ<->LMS matrices
- CIE 1931 2-degree observer table (10 nm grid)
- Quantizer tunables (KMEANS_*, MS_*)
- Hue sectors and lightness / chroma bands for sectored means
- Palette builder defaults
"""
from __future__ import annotations

from typing import Dict, List, Tuple

import numpy as np

# =======================
# Reference white (D65)
# =======================
REF_X: float = 0.95047
REF_Y: float = 1.0
REF_Z: float = 1.08883
REF_WHITE = np.array([REF_X, REF_Y, REF_Z], dtype=np.float64)

# D65 chromaticity, used for xyY of pure black
D65_X_CHROMA: float = 0.3127
D65_Y_CHROMA: float = 0.3290

# CIE constants
CIE_E: float = 216.0 / 24389.0
CIE_K: float = 24389.0 / 27.0

# Normalisation of Lab / Luv into [0..1]-ish ranges
LAB_L_SCALE: float = 100.0
LAB_AB_SCALE: float = 127.0
LUV_SCALE: float = 100.0

# sRGB gamma
SRGB_DECODE_THRESH: float = 0.04045
SRGB_ENCODE_THRESH: float = 0.0031308
SRGB_GAMMA: float = 2.4

# ===========
# Matrices
# ===========
RGB_TO_XYZ = np.array(
    [
        [0.4124564, 0.3575761, 0.1804375],
        [0.2126729, 0.7151522, 0.0721750],
        [0.0193339, 0.1191920, 0.9503041],
    ],
    dtype=np.float64,
)

XYZ_TO_RGB = np.linalg.inv(RGB_TO_XYZ)

# CIECAM02
XYZ_TO_LMS = np.array(
    [
        [0.7328, 0.4296, -0.1624],
        [-0.7036, 1.6975, 0.0061],
        [0.0030, 0.0136, 0.9834],
    ],
    dtype=np.float64,
)
LMS_TO_XYZ = np.linalg.inv(XYZ_TO_LMS)

# Hunter Lab coefficients against D65
HUNTER_KA: float = (175.0 / 198.04) * (REF_X + REF_Y)
HUNTER_KB: float = (70.0 / 218.11) * (REF_Y + REF_Z)

# ======================================
# CIE 1931 2-degree observer (nm: X,Y,Z)
# ======================================
WAVELENGTH_XYZ: Dict[int, Tuple[float, float, float]] = {
    380: (0.001368, 0.000039, 0.006450),
    390: (0.004243, 0.000120, 0.020050),
    400: (0.014310, 0.000396, 0.067850),
    410: (0.043510, 0.001210, 0.207400),
    420: (0.134380, 0.004000, 0.645600),
    430: (0.283900, 0.011600, 1.385600),
    440: (0.348280, 0.023000, 1.747060),
    450: (0.336200, 0.038000, 1.772110),
    460: (0.290800, 0.060000, 1.669200),
    470: (0.195360, 0.090980, 1.287640),
    480: (0.095640, 0.139020, 0.812950),
    490: (0.032010, 0.208020, 0.465180),
    500: (0.004900, 0.323000, 0.272000),
    510: (0.009300, 0.503000, 0.158200),
    520: (0.063270, 0.710000, 0.078250),
    530: (0.165500, 0.862000, 0.042160),
    540: (0.290400, 0.954000, 0.020300),
    550: (0.433450, 0.994950, 0.008750),
    560: (0.594500, 0.995000, 0.003900),
    570: (0.762100, 0.952000, 0.002100),
    580: (0.916300, 0.870000, 0.001650),
    590: (1.026300, 0.757000, 0.001100),
    600: (1.062200, 0.631000, 0.000800),
    610: (1.002600, 0.503000, 0.000340),
    620: (0.854450, 0.381000, 0.000190),
    630: (0.642400, 0.265000, 0.000050),
    640: (0.447900, 0.175000, 0.000020),
    650: (0.283500, 0.107000, 0.000000),
    660: (0.164900, 0.061000, 0.000000),
    670: (0.087400, 0.032000, 0.000000),
    680: (0.046770, 0.017000, 0.000000),
    690: (0.022700, 0.008210, 0.000000),
    700: (0.011359, 0.004102, 0.000000),
    710: (0.005790, 0.002091, 0.000000),
    720: (0.002899, 0.001047, 0.000000),
    730: (0.001440, 0.000520, 0.000000),
    740: (0.000690, 0.000249, 0.000000),
    750: (0.000332, 0.000120, 0.000000),
    760: (0.000166, 0.000060, 0.000000),
    770: (0.000083, 0.000030, 0.000000),
    780: (0.000042, 0.000015, 0.000000),
}

# ==========
# KMeans
# ==========
KMEANS_MAX_ITER: int = 100
KMEANS_EPS: float = 1.0

# ===========
# Mean shift
# ===========
MS_MAX_NUM_CONVERGENCE_STEPS: int = 5
MS_MEAN_SHIFT_TOL_COLOR: float = 0.3
MS_MEAN_SHIFT_TOL_SPATIAL: float = 0.3
MS_NEIGHBOURS: Tuple[Tuple[int, int], ...] = (
    (-1, -1),
    (-1, 0),
    (-1, 1),
    (0, -1),
    (0, 1),
    (1, -1),
    (1, 0),
    (1, 1),
)
MS_DEFAULT_SPATIAL: int = 8
MS_DEFAULT_COLOUR: float = 10.0

# ==============================
# Sectored means (HSL hue, deg)
# ==============================
HUE_SECTORS: List[Tuple[str, float, float]] = [
    ("red", 352.5, 7.5),
    ("red-orange", 7.5, 22.5),
    ("orange", 22.5, 37.5),
    ("orange-yellow", 37.5, 52.5),
    ("yellow", 52.5, 67.5),
    ("yellow-chartreuse", 67.5, 82.5),
    ("chartreuse", 82.5, 97.5),
    ("chartreuse-green", 97.5, 112.5),
    ("green", 112.5, 127.5),
    ("green-spring", 127.5, 142.5),
    ("spring", 142.5, 157.5),
    ("spring-cyan", 157.5, 172.5),
    ("cyan", 172.5, 187.5),
    ("cyan-azure", 187.5, 202.5),
    ("azure", 202.5, 217.5),
    ("azure-blue", 217.5, 232.5),
    ("blue", 232.5, 247.5),
    ("blue-violet", 247.5, 262.5),
    ("violet", 262.5, 277.5),
    ("violet-magenta", 277.5, 292.5),
    ("magenta", 292.5, 307.5),
    ("magenta-pink", 307.5, 322.5),
    ("pink", 322.5, 337.5),
    ("red-pink", 337.5, 352.5),
]

# (name, upper bound) on Lab L in [0..1]; last bound is open
LIGHTNESS_BANDS: List[Tuple[str, float]] = [
    ("black", 0.10),
    ("dark", 0.30),
    ("medium", 0.50),
    ("light", 0.70),
    ("pale", 0.92),
    ("white", float("inf")),
]

# (name, upper bound) on chroma / sector max chroma
CHROMA_BANDS: List[Tuple[str, float]] = [
    ("gray", 0.08),
    ("dull", 0.25),
    ("moderate", 0.50),
    ("intense", 0.80),
    ("very intense", float("inf")),
]

# Gamut sampling for per-sector maximum chroma
SECTOR_HUE_STEP_DEG: float = 0.25
SECTOR_LIGHTNESS_SAMPLES: int = 201

SECTORED_DEFAULT_LEVELS: int = 4

# =================
# Palette builder
# =================
DEFAULT_N_COLOURS: int = 6
# CIEDE2000 weights for name lookup (k_L < 1 weights lightness up)
NAME_WEIGHTS: Tuple[float, float, float] = (0.5, 1.0, 1.0)
NEAREST_NAME_PREFIX: str = "nearest: "
# Hue buckets for the composite hue + luma sort
HUE_LUMA_REPETITIONS: int = 8

SORT_KEYS: Tuple[str, ...] = (
    "percentage",
    "hue_hsl",
    "hue_lch",
    "lightness",
    "chroma",
    "saturation",
    "hex",
    "hue_luma",
)

# Palette strip image size (px)
PALETTE_STRIP_WIDTH: int = 1000
PALETTE_STRIP_HEIGHT: int = 250
