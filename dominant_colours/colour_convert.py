# dominant_colours/colour_convert.py
from __future__ import annotations

"""
Colour space conversions (D65). Vectorised NumPy over arrays shaped (..., 3).

All components are normalised:
  RGB, XYZ, HSL, HSV, HWB, CMYK   0..1
  Lab                              L/100, a/127, b/127
  Luv                              L/100, u/100, v/100
  hues (HSL, HSV, HWB, LCh)        fraction of a turn in [0, 1)

Exports:
  u8_to_unit(rgb), unit_to_u8(rgb)
  gamma_decode(srgb), gamma_encode(linear)
  rgb_to_xyz(rgb), xyz_to_rgb(xyz), xyz_to_rgb_no_clip(xyz)
  xyz_to_lab(xyz), lab_to_xyz(lab), lab_to_cie(lab), cie_to_lab(lab_cie)
  lab_to_lchab(lab), lchab_to_lab(lch)
  xyz_to_luv(xyz), luv_to_xyz(luv), luv_to_lchuv(luv), lchuv_to_luv(lch)
  xyz_to_hunter_lab(xyz), hunter_lab_to_xyz(hlab)
  xyz_to_xyy(xyz), xyy_to_xyz(xyy)
  xyz_to_lms(xyz), lms_to_xyz(lms)
  rgb_to_hsl / hsl_to_rgb, rgb_to_hsv / hsv_to_rgb
  hsv_to_hwb / hwb_to_hsv, rgb_to_hwb / hwb_to_rgb
  rgb_to_cmyk / cmyk_to_rgb
  wavelength_to_xyz(nm), spectral_colour_to_rgb(nm)
  rgb_mean(rgb1, rgb2, w1, w2), perceived_brightness(rgb)
  rgb_to_lab(rgb), lab_to_rgb(lab), rgb_to_lchab(rgb)
"""

import math

import numpy as np
from numpy.typing import ArrayLike

from .constants import (
    CIE_E,
    CIE_K,
    D65_X_CHROMA,
    D65_Y_CHROMA,
    HUNTER_KA,
    HUNTER_KB,
    LAB_AB_SCALE,
    LAB_L_SCALE,
    LMS_TO_XYZ,
    LUV_SCALE,
    REF_WHITE,
    REF_X,
    REF_Y,
    REF_Z,
    RGB_TO_XYZ,
    SRGB_DECODE_THRESH,
    SRGB_ENCODE_THRESH,
    SRGB_GAMMA,
    WAVELENGTH_XYZ,
    XYZ_TO_LMS,
    XYZ_TO_RGB,
)
from .core_types import Lab, Lch

GAMUT_TOL = 1e-9

# Chromaticity of the reference white for Luv
_U_REF = 4.0 * REF_X / (REF_X + 15.0 * REF_Y + 3.0 * REF_Z)
_V_REF = 9.0 * REF_Y / (REF_X + 15.0 * REF_Y + 3.0 * REF_Z)


def _as_float(values: ArrayLike) -> np.ndarray:
    return np.asarray(values, dtype=np.float64)


def _stack(*channels: np.ndarray) -> np.ndarray:
    return np.stack(np.broadcast_arrays(*channels), axis=-1).astype(
        np.float64, copy=False
    )


def _zero_invalid(values: np.ndarray) -> np.ndarray:
    """Coerce NaN / inf from degenerate denominators to 0."""
    return np.nan_to_num(values, nan=0.0, posinf=0.0, neginf=0.0)


def _wrap_turn(hue: np.ndarray) -> np.ndarray:
    """Wrap a hue expressed in turns into [0, 1)."""
    wrapped = np.mod(hue, 1.0)
    return np.where(wrapped >= 1.0, 0.0, wrapped)


# uint8 <-> unit


def u8_to_unit(rgb: ArrayLike) -> np.ndarray:
    """uint8 0..255 to float64 0..1."""
    return _as_float(rgb) / 255.0


def unit_to_u8(rgb: ArrayLike) -> np.ndarray:
    """float 0..1 to rounded, clipped uint8 0..255."""
    return np.clip(np.rint(_as_float(rgb) * 255.0), 0, 255).astype(np.uint8)


# sRGB gamma


def gamma_decode(srgb: ArrayLike) -> np.ndarray:
    """sRGB (non-linear 0..1) to linear RGB (0..1)."""
    u = _as_float(srgb)
    with np.errstate(invalid="ignore"):
        return np.where(
            u > SRGB_DECODE_THRESH,
            ((u + 0.055) / 1.055) ** SRGB_GAMMA,
            u / 12.92,
        )


def gamma_encode(linear: ArrayLike) -> np.ndarray:
    """Linear RGB (0..1) to sRGB (non-linear 0..1)."""
    v = _as_float(linear)
    with np.errstate(invalid="ignore"):
        return np.where(
            v > SRGB_ENCODE_THRESH,
            1.055 * v ** (1.0 / SRGB_GAMMA) - 0.055,
            v * 12.92,
        )


# RGB <-> XYZ


def rgb_to_xyz(rgb: ArrayLike) -> np.ndarray:
    """sRGB to CIE XYZ (D65)."""
    return gamma_decode(rgb) @ RGB_TO_XYZ.T


def _xyz_to_rgb_raw(xyz: ArrayLike) -> np.ndarray:
    return gamma_encode(_as_float(xyz) @ XYZ_TO_RGB.T)


def xyz_to_rgb(xyz: ArrayLike) -> np.ndarray:
    """CIE XYZ to sRGB, clamped to [0, 1]."""
    return np.clip(_xyz_to_rgb_raw(xyz), 0.0, 1.0)


def xyz_to_rgb_no_clip(xyz: ArrayLike) -> np.ndarray:
    """
    CIE XYZ to sRGB without clamping.
    Colours outside the sRGB gamut come back as black.
    """
    rgb = _xyz_to_rgb_raw(xyz)
    in_gamut = np.all((rgb >= -GAMUT_TOL) & (rgb <= 1.0 + GAMUT_TOL), axis=-1)
    return np.where(in_gamut[..., None], np.clip(rgb, 0.0, 1.0), 0.0)


# XYZ <-> Lab


def xyz_to_lab(xyz: ArrayLike) -> Lab:
    """CIE XYZ to normalised CIE Lab."""
    ratios = _as_float(xyz) / REF_WHITE
    with np.errstate(invalid="ignore"):
        f = np.where(ratios > CIE_E, np.cbrt(ratios), (CIE_K * ratios + 16.0) / 116.0)
    fx, fy, fz = f[..., 0], f[..., 1], f[..., 2]
    L = 116.0 * fy - 16.0
    a = 500.0 * (fx - fy)
    b = 200.0 * (fy - fz)
    return _stack(L / LAB_L_SCALE, a / LAB_AB_SCALE, b / LAB_AB_SCALE)


def lab_to_xyz(lab: ArrayLike) -> np.ndarray:
    """Normalised CIE Lab to CIE XYZ. L == 0 maps to exact black."""
    arr = _as_float(lab)
    l = arr[..., 0] * LAB_L_SCALE
    fy = (l + 16.0) / 116.0
    fz = fy - arr[..., 2] * LAB_AB_SCALE / 200.0
    fx = arr[..., 1] * LAB_AB_SCALE / 500.0 + fy

    xr = np.where(fx**3 > CIE_E, fx**3, (116.0 * fx - 16.0) / CIE_K)
    yr = np.where(l > CIE_K * CIE_E, fy**3, l / CIE_K)
    zr = np.where(fz**3 > CIE_E, fz**3, (116.0 * fz - 16.0) / CIE_K)

    xyz = _stack(xr, yr, zr) * REF_WHITE
    return np.where((l == 0.0)[..., None], 0.0, xyz)


def lab_to_cie(lab: ArrayLike) -> Lab:
    """Normalised Lab to conventional units (L 0..100, a/b about -128..127)."""
    return _as_float(lab) * np.array([LAB_L_SCALE, LAB_AB_SCALE, LAB_AB_SCALE])


def cie_to_lab(lab_cie: ArrayLike) -> Lab:
    """Conventional Lab units back to the normalised form."""
    return _as_float(lab_cie) / np.array([LAB_L_SCALE, LAB_AB_SCALE, LAB_AB_SCALE])


# Cartesian <-> polar (LCHab, LCHuv)


def _to_polar(values: ArrayLike) -> Lch:
    arr = _as_float(values)
    C = np.hypot(arr[..., 1], arr[..., 2])
    h = _wrap_turn(np.arctan2(arr[..., 2], arr[..., 1]) / (2.0 * math.pi))
    return _stack(arr[..., 0], C, h)


def _from_polar(values: ArrayLike) -> np.ndarray:
    arr = _as_float(values)
    angle = arr[..., 2] * 2.0 * math.pi
    return _stack(arr[..., 0], arr[..., 1] * np.cos(angle), arr[..., 1] * np.sin(angle))


def lab_to_lchab(lab: ArrayLike) -> Lch:
    """Lab to LCHab: L kept, C = hypot(a, b), h = atan2(b, a) in turns."""
    return _to_polar(lab)


def lchab_to_lab(lch: ArrayLike) -> Lab:
    """LCHab to Lab."""
    return _from_polar(lch)


def luv_to_lchuv(luv: ArrayLike) -> Lch:
    """Luv to LCHuv."""
    return _to_polar(luv)


def lchuv_to_luv(lch: ArrayLike) -> np.ndarray:
    """LCHuv to Luv."""
    return _from_polar(lch)


# XYZ <-> Luv


def xyz_to_luv(xyz: ArrayLike) -> np.ndarray:
    """CIE XYZ to normalised CIE Luv. Black gives (0, 0, 0)."""
    arr = _as_float(xyz)
    X, Y, Z = arr[..., 0], arr[..., 1], arr[..., 2]
    yr = Y / REF_Y
    with np.errstate(invalid="ignore", divide="ignore"):
        L = np.where(yr > CIE_E, 116.0 * np.cbrt(yr) - 16.0, CIE_K * yr)
        denom = X + 15.0 * Y + 3.0 * Z
        u_prime = 4.0 * X / denom
        v_prime = 9.0 * Y / denom
        u = _zero_invalid(13.0 * L * (u_prime - _U_REF))
        v = _zero_invalid(13.0 * L * (v_prime - _V_REF))
    return _stack(L / LUV_SCALE, u / LUV_SCALE, v / LUV_SCALE)


def luv_to_xyz(luv: ArrayLike) -> np.ndarray:
    """Normalised CIE Luv to CIE XYZ."""
    arr = _as_float(luv)
    l = arr[..., 0] * LUV_SCALE
    u = arr[..., 1] * LUV_SCALE
    v = arr[..., 2] * LUV_SCALE
    with np.errstate(invalid="ignore", divide="ignore"):
        u_prime = u / (13.0 * l) + _U_REF
        v_prime = v / (13.0 * l) + _V_REF
        Y = REF_Y * np.where(l > CIE_K * CIE_E, ((l + 16.0) / 116.0) ** 3, l / CIE_K)
        X = _zero_invalid(Y * 9.0 * u_prime / (4.0 * v_prime))
        Z = _zero_invalid(Y * (12.0 - 3.0 * u_prime - 20.0 * v_prime) / (4.0 * v_prime))
    return _stack(X, Y, Z)


# XYZ <-> Hunter Lab


def xyz_to_hunter_lab(xyz: ArrayLike) -> np.ndarray:
    """CIE XYZ to Hunter Lab (L 0..1). Y == 0 gives (0, 0, 0)."""
    arr = _as_float(xyz)
    yr = arr[..., 1] / REF_Y
    root = np.sqrt(np.maximum(yr, 0.0))
    with np.errstate(invalid="ignore", divide="ignore"):
        A = HUNTER_KA * ((arr[..., 0] / REF_X) - yr) / root
        B = HUNTER_KB * (yr - (arr[..., 2] / REF_Z)) / root
    black = arr[..., 1] == 0.0
    return _stack(
        np.where(black, 0.0, root),
        np.where(black, 0.0, _zero_invalid(A)),
        np.where(black, 0.0, _zero_invalid(B)),
    )


def hunter_lab_to_xyz(hlab: ArrayLike) -> np.ndarray:
    """Hunter Lab to CIE XYZ."""
    arr = _as_float(hlab)
    Y = arr[..., 0] ** 2 * REF_Y
    yr = Y / REF_Y
    root = np.sqrt(yr)
    X = (arr[..., 1] / HUNTER_KA * root + yr) * REF_X
    Z = -(arr[..., 2] / HUNTER_KB * root - yr) * REF_Z
    return _stack(X, Y, Z)


# XYZ <-> xyY


def xyz_to_xyy(xyz: ArrayLike) -> np.ndarray:
    """CIE XYZ to xyY. Black takes the D65 chromaticity."""
    arr = _as_float(xyz)
    total = arr.sum(axis=-1)
    with np.errstate(invalid="ignore", divide="ignore"):
        x = np.where(total == 0.0, D65_X_CHROMA, arr[..., 0] / total)
        y = np.where(total == 0.0, D65_Y_CHROMA, arr[..., 1] / total)
    return _stack(x, y, arr[..., 1])


def xyy_to_xyz(xyy: ArrayLike) -> np.ndarray:
    """CIE xyY to XYZ. Y == 0 gives black."""
    arr = _as_float(xyy)
    x, y, Y = arr[..., 0], arr[..., 1], arr[..., 2]
    with np.errstate(invalid="ignore", divide="ignore"):
        X = np.where(Y == 0.0, 0.0, _zero_invalid(x * Y / y))
        Z = np.where(Y == 0.0, 0.0, _zero_invalid((1.0 - x - y) * Y / y))
    return _stack(X, Y, Z)


# XYZ <-> LMS


def xyz_to_lms(xyz: ArrayLike) -> np.ndarray:
    """CIE XYZ to LMS cone space (CIECAM02 matrix)."""
    return _as_float(xyz) @ XYZ_TO_LMS.T


def lms_to_xyz(lms: ArrayLike) -> np.ndarray:
    """LMS cone space to CIE XYZ."""
    return _as_float(lms) @ LMS_TO_XYZ.T


# RGB <-> HSL / HSV / HWB


def _rgb_hue(rgb: np.ndarray, cmax: np.ndarray, diff: np.ndarray) -> np.ndarray:
    """Hue in turns from the dominant channel; 0 for achromatic input."""
    r, g, b = rgb[..., 0], rgb[..., 1], rgb[..., 2]
    chromatic = diff > 0.0
    safe = np.where(chromatic, diff, 1.0)
    sextant = np.select(
        [cmax == r, cmax == g],
        [(g - b) / safe, 2.0 + (b - r) / safe],
        4.0 + (r - g) / safe,
    )
    hue = _wrap_turn(sextant / 6.0)
    return np.where(chromatic, hue, 0.0)


def rgb_to_hsl(rgb: ArrayLike) -> np.ndarray:
    """sRGB to HSL."""
    arr = _as_float(rgb)
    cmax = arr.max(axis=-1)
    cmin = arr.min(axis=-1)
    diff = cmax - cmin
    light = (cmax + cmin) / 2.0
    with np.errstate(invalid="ignore", divide="ignore"):
        sat = np.where(light < 0.5, diff / (cmax + cmin), diff / (2.0 - cmax - cmin))
    sat = np.where(diff > 0.0, sat, 0.0)
    return _stack(_rgb_hue(arr, cmax, diff), sat, light)


def _hue_to_channel(v1: np.ndarray, v2: np.ndarray, hue: np.ndarray) -> np.ndarray:
    vh = np.where(hue < 0.0, hue + 1.0, hue)
    vh = np.where(vh > 1.0, vh - 1.0, vh)
    return np.select(
        [6.0 * vh < 1.0, 2.0 * vh < 1.0, 3.0 * vh < 2.0],
        [v1 + (v2 - v1) * 6.0 * vh, v2, v1 + (v2 - v1) * ((2.0 / 3.0) - vh) * 6.0],
        v1,
    )


def hsl_to_rgb(hsl: ArrayLike) -> np.ndarray:
    """HSL to sRGB."""
    arr = _as_float(hsl)
    h, s, l = arr[..., 0], arr[..., 1], arr[..., 2]
    v2 = np.where(l < 0.5, l * (1.0 + s), (l + s) - (s * l))
    v1 = 2.0 * l - v2
    r = _hue_to_channel(v1, v2, h + 1.0 / 3.0)
    g = _hue_to_channel(v1, v2, h)
    b = _hue_to_channel(v1, v2, h - 1.0 / 3.0)
    grey = s == 0.0
    return _stack(np.where(grey, l, r), np.where(grey, l, g), np.where(grey, l, b))


def rgb_to_hsv(rgb: ArrayLike) -> np.ndarray:
    """sRGB to HSV."""
    arr = _as_float(rgb)
    cmax = arr.max(axis=-1)
    diff = cmax - arr.min(axis=-1)
    with np.errstate(invalid="ignore", divide="ignore"):
        sat = np.where(cmax > 0.0, diff / cmax, 0.0)
    sat = np.where(diff > 0.0, sat, 0.0)
    return _stack(_rgb_hue(arr, cmax, diff), sat, cmax)


def hsv_to_rgb(hsv: ArrayLike) -> np.ndarray:
    """HSV to sRGB."""
    arr = _as_float(hsv)
    h, s, v = arr[..., 0], arr[..., 1], arr[..., 2]
    chroma = v * s
    h_prime = _wrap_turn(h) * 6.0
    x = chroma * (1.0 - np.abs(np.mod(h_prime, 2.0) - 1.0))
    zero = np.zeros_like(chroma)
    sector = np.clip(np.floor(h_prime).astype(np.int64), 0, 5)
    r = np.choose(sector, [chroma, x, zero, zero, x, chroma])
    g = np.choose(sector, [x, chroma, chroma, x, zero, zero])
    b = np.choose(sector, [zero, zero, x, chroma, chroma, x])
    m = v - chroma
    return _stack(r + m, g + m, b + m)


def hsv_to_hwb(hsv: ArrayLike) -> np.ndarray:
    """HSV to HWB."""
    arr = _as_float(hsv)
    return _stack(arr[..., 0], (1.0 - arr[..., 1]) * arr[..., 2], 1.0 - arr[..., 2])


def hwb_to_hsv(hwb: ArrayLike) -> np.ndarray:
    """HWB to HSV. Pure black (B == 1) has zero saturation."""
    arr = _as_float(hwb)
    w, blk = arr[..., 1], arr[..., 2]
    with np.errstate(invalid="ignore", divide="ignore"):
        sat = np.where(blk >= 1.0, 0.0, 1.0 - (w / (1.0 - blk)))
    return _stack(arr[..., 0], np.clip(_zero_invalid(sat), 0.0, 1.0), 1.0 - blk)


def rgb_to_hwb(rgb: ArrayLike) -> np.ndarray:
    """sRGB to HWB."""
    return hsv_to_hwb(rgb_to_hsv(rgb))


def hwb_to_rgb(hwb: ArrayLike) -> np.ndarray:
    """HWB to sRGB."""
    return hsv_to_rgb(hwb_to_hsv(hwb))


# RGB <-> CMYK


def rgb_to_cmyk(rgb: ArrayLike) -> np.ndarray:
    """sRGB to CMYK, shape (..., 4). Pure black gives C = M = Y = 0."""
    arr = _as_float(rgb)
    k = 1.0 - arr.max(axis=-1)
    with np.errstate(invalid="ignore", divide="ignore"):
        cmy = (1.0 - arr - k[..., None]) / (1.0 - k[..., None])
    cmy = np.where(np.isnan(cmy) | (cmy < 0.0), 0.0, cmy)
    cmy = np.where(np.isinf(cmy), 0.0, cmy)
    k = np.maximum(k, 0.0)
    return np.concatenate([cmy, k[..., None]], axis=-1)


def cmyk_to_rgb(cmyk: ArrayLike) -> np.ndarray:
    """CMYK (..., 4) to sRGB, clamped to [0, 1]."""
    arr = _as_float(cmyk)
    rgb = (1.0 - arr[..., :3]) * (1.0 - arr[..., 3:4])
    return np.clip(rgb, 0.0, 1.0)


# Spectral


def wavelength_to_xyz(wavelength_nm: float) -> np.ndarray:
    """
    CIE 1931 observer lookup for an integer wavelength.
    Wavelengths missing from the table give (0, 0, 0).
    """
    return np.array(
        WAVELENGTH_XYZ.get(int(wavelength_nm), (0.0, 0.0, 0.0)), dtype=np.float64
    )


def spectral_colour_to_rgb(wavelength_nm: float) -> np.ndarray:
    """Rough visible-spectrum colour for 400..700 nm, sRGB clamped to [0, 1]."""
    L = float(wavelength_nm)
    r = g = b = 0.0

    if 400.0 <= L < 410.0:
        t = (L - 400.0) / 10.0
        r = 0.33 * t - 0.20 * t * t
    elif 410.0 <= L < 475.0:
        t = (L - 410.0) / 65.0
        r = 0.14 - 0.13 * t * t
    elif 545.0 <= L < 595.0:
        t = (L - 545.0) / 50.0
        r = 1.98 * t - t * t
    elif 595.0 <= L < 650.0:
        t = (L - 595.0) / 55.0
        r = 0.98 + 0.06 * t - 0.40 * t * t
    elif 650.0 <= L < 700.0:
        t = (L - 650.0) / 50.0
        r = 0.65 - 0.84 * t + 0.20 * t * t

    if 415.0 <= L < 475.0:
        t = (L - 415.0) / 60.0
        g = 0.80 * t * t
    elif 475.0 <= L < 590.0:
        t = (L - 475.0) / 115.0
        g = 0.8 + 0.76 * t - 0.80 * t * t
    elif 585.0 <= L < 639.0:
        t = (L - 585.0) / 54.0
        g = 0.84 - 0.84 * t

    if 400.0 <= L < 475.0:
        t = (L - 400.0) / 75.0
        b = 2.20 * t - 1.50 * t * t
    elif 475.0 <= L < 560.0:
        t = (L - 475.0) / 85.0
        b = 0.7 - t + 0.30 * t * t

    return np.clip(np.array([r, g, b], dtype=np.float64), 0.0, 1.0)


# Blending / brightness


def rgb_mean(
    rgb1: ArrayLike, rgb2: ArrayLike, w1: float = 1.0, w2: float = 1.0
) -> np.ndarray:
    """Weighted mean of two sRGB colours, averaged in linear light."""
    if w1 + w2 <= 0.0:
        w1 = w2 = 1.0
    linear = (w1 * gamma_decode(rgb1) + w2 * gamma_decode(rgb2)) / (w1 + w2)
    return gamma_encode(linear)


def perceived_brightness(rgb: ArrayLike) -> np.ndarray:
    """sqrt(0.299 R^2 + 0.587 G^2 + 0.114 B^2), 0..1."""
    arr = _as_float(rgb)
    return np.sqrt(
        0.299 * arr[..., 0] ** 2 + 0.587 * arr[..., 1] ** 2 + 0.114 * arr[..., 2] ** 2
    )


# Compositions


def rgb_to_lab(rgb: ArrayLike) -> Lab:
    """sRGB (0..1) to normalised Lab."""
    return xyz_to_lab(rgb_to_xyz(rgb))


def lab_to_rgb(lab: ArrayLike) -> np.ndarray:
    """Normalised Lab to sRGB (0..1), clamped."""
    return xyz_to_rgb(lab_to_xyz(lab))


def rgb_to_lchab(rgb: ArrayLike) -> Lch:
    """sRGB (0..1) to LCHab."""
    return lab_to_lchab(rgb_to_lab(rgb))


__all__ = [
    "u8_to_unit",
    "unit_to_u8",
    "gamma_decode",
    "gamma_encode",
    "rgb_to_xyz",
    "xyz_to_rgb",
    "xyz_to_rgb_no_clip",
    "xyz_to_lab",
    "lab_to_xyz",
    "lab_to_cie",
    "cie_to_lab",
    "lab_to_lchab",
    "lchab_to_lab",
    "xyz_to_luv",
    "luv_to_xyz",
    "luv_to_lchuv",
    "lchuv_to_luv",
    "xyz_to_hunter_lab",
    "hunter_lab_to_xyz",
    "xyz_to_xyy",
    "xyy_to_xyz",
    "xyz_to_lms",
    "lms_to_xyz",
    "rgb_to_hsl",
    "hsl_to_rgb",
    "rgb_to_hsv",
    "hsv_to_rgb",
    "hsv_to_hwb",
    "hwb_to_hsv",
    "rgb_to_hwb",
    "hwb_to_rgb",
    "rgb_to_cmyk",
    "cmyk_to_rgb",
    "wavelength_to_xyz",
    "spectral_colour_to_rgb",
    "rgb_mean",
    "perceived_brightness",
    "rgb_to_lab",
    "lab_to_rgb",
    "rgb_to_lchab",
]
