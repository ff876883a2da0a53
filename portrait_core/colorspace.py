from __future__ import annotations

import re
from typing import NamedTuple

import numpy as np

# D65 reference white, XYZ scaled to 0..100.
XN, YN, ZN = 95.047, 100.0, 108.883
_LAB_EPSILON = 0.008856
_HEX_RE = re.compile(r"^#?([a-f\d]{2})([a-f\d]{2})([a-f\d]{2})$", re.IGNORECASE)


class RGB(NamedTuple):
    r: float
    g: float
    b: float


class YCbCr(NamedTuple):
    y: float
    cb: float
    cr: float


class HSV(NamedTuple):
    h: float  # degrees, [0, 360)
    s: float
    v: float


class HSL(NamedTuple):
    h: float  # [0, 1]
    s: float
    l: float


class LAB(NamedTuple):
    l: float
    a: float
    b: float


def _round_half_up(x: np.ndarray) -> np.ndarray:
    # Math.round semantics; numpy's round() is half-to-even.
    return np.floor(x + 0.5)


def _split(rgb: np.ndarray) -> tuple[np.ndarray, np.ndarray, np.ndarray]:
    rgb = np.asarray(rgb, dtype=np.float64)
    return rgb[..., 0], rgb[..., 1], rgb[..., 2]


def ycbcr_planes(rgb: np.ndarray) -> tuple[np.ndarray, np.ndarray, np.ndarray]:
    r, g, b = _split(rgb)
    y = 0.299 * r + 0.587 * g + 0.114 * b
    cb = -0.169 * r - 0.331 * g + 0.5 * b + 128
    cr = 0.5 * r - 0.419 * g - 0.081 * b + 128
    return y, cb, cr


def hsv_planes(rgb: np.ndarray) -> tuple[np.ndarray, np.ndarray, np.ndarray]:
    """
    Hue in whole degrees [0, 360), saturation and value in [0, 1].
    Ties on the max channel resolve red first, then green, then blue.
    """
    r, g, b = _split(rgb)
    mx = np.maximum(np.maximum(r, g), b)
    mn = np.minimum(np.minimum(r, g), b)
    diff = mx - mn
    safe_diff = np.where(diff == 0, 1.0, diff)

    h = np.select(
        [diff == 0, mx == r, mx == g],
        [0.0, np.fmod((g - b) / safe_diff, 6.0), (b - r) / safe_diff + 2.0],
        default=(r - g) / safe_diff + 4.0,
    )
    h = _round_half_up(h * 60.0)
    h = np.where(h < 0, h + 360.0, h)

    s = np.where(mx == 0, 0.0, diff / np.where(mx == 0, 1.0, mx))
    v = mx / 255.0
    return h, s, v


def hsl_planes(rgb: np.ndarray) -> tuple[np.ndarray, np.ndarray, np.ndarray]:
    r, g, b = _split(rgb)
    r, g, b = r / 255.0, g / 255.0, b / 255.0
    mx = np.maximum(np.maximum(r, g), b)
    mn = np.minimum(np.minimum(r, g), b)
    d = mx - mn
    l = (mx + mn) / 2.0

    chromatic = d != 0
    safe_d = np.where(chromatic, d, 1.0)
    s_hi = np.where(chromatic, d / np.where(chromatic, 2.0 - mx - mn, 1.0), 0.0)
    s_lo = np.where(chromatic, d / np.where(chromatic, mx + mn, 1.0), 0.0)
    s = np.where(l > 0.5, s_hi, s_lo)

    h = np.select(
        [~chromatic, mx == r, mx == g],
        [0.0, (g - b) / safe_d + np.where(g < b, 6.0, 0.0), (b - r) / safe_d + 2.0],
        default=(r - g) / safe_d + 4.0,
    )
    return h / 6.0, s, l


def _hue_to_channel(p: np.ndarray, q: np.ndarray, t: np.ndarray) -> np.ndarray:
    t = np.where(t < 0, t + 1.0, t)
    t = np.where(t > 1, t - 1.0, t)
    return np.select(
        [t < 1.0 / 6.0, t < 1.0 / 2.0, t < 2.0 / 3.0],
        [p + (q - p) * 6.0 * t, q, p + (q - p) * (2.0 / 3.0 - t) * 6.0],
        default=p,
    )


def hsl_to_rgb_planes(h, s, l) -> tuple[np.ndarray, np.ndarray, np.ndarray]:
    """Inverse of hsl_planes; inputs broadcast, channels come back as rounded 0..255 floats."""
    h, s, l = np.broadcast_arrays(
        np.asarray(h, dtype=np.float64), np.asarray(s, dtype=np.float64), np.asarray(l, dtype=np.float64)
    )
    q = np.where(l < 0.5, l * (1.0 + s), l + s - l * s)
    p = 2.0 * l - q
    grey = s == 0
    r = np.where(grey, l, _hue_to_channel(p, q, h + 1.0 / 3.0))
    g = np.where(grey, l, _hue_to_channel(p, q, h))
    b = np.where(grey, l, _hue_to_channel(p, q, h - 1.0 / 3.0))
    return _round_half_up(r * 255.0), _round_half_up(g * 255.0), _round_half_up(b * 255.0)


def _srgb_to_linear(c: np.ndarray) -> np.ndarray:
    c = c / 255.0
    return np.where(c > 0.04045, np.power((c + 0.055) / 1.055, 2.4), c / 12.92)


def _lab_f(t: np.ndarray) -> np.ndarray:
    return np.where(t > _LAB_EPSILON, np.cbrt(t), 7.787 * t + 16.0 / 116.0)


def lab_planes(rgb: np.ndarray) -> tuple[np.ndarray, np.ndarray, np.ndarray]:
    r, g, b = _split(rgb)
    r, g, b = _srgb_to_linear(r), _srgb_to_linear(g), _srgb_to_linear(b)

    x = (r * 0.4124564 + g * 0.3575761 + b * 0.1804375) * 100
    y = (r * 0.2126729 + g * 0.7151522 + b * 0.0721750) * 100
    z = (r * 0.0193339 + g * 0.1191920 + b * 0.9503041) * 100

    fx, fy, fz = _lab_f(x / XN), _lab_f(y / YN), _lab_f(z / ZN)
    return 116.0 * fy - 16.0, 500.0 * (fx - fy), 200.0 * (fy - fz)


def _triple(r: float, g: float, b: float) -> np.ndarray:
    return np.array([r, g, b], dtype=np.float64)


def rgb_to_ycbcr(r: float, g: float, b: float) -> YCbCr:
    return YCbCr(*(float(c) for c in ycbcr_planes(_triple(r, g, b))))


def rgb_to_hsv(r: float, g: float, b: float) -> HSV:
    return HSV(*(float(c) for c in hsv_planes(_triple(r, g, b))))


def rgb_to_hsl(r: float, g: float, b: float) -> HSL:
    return HSL(*(float(c) for c in hsl_planes(_triple(r, g, b))))


def hsl_to_rgb(h: float, s: float, l: float) -> RGB:
    return RGB(*(int(c) for c in hsl_to_rgb_planes(h, s, l)))


def rgb_to_lab(r: float, g: float, b: float) -> LAB:
    return LAB(*(float(c) for c in lab_planes(_triple(r, g, b))))


def parse_hex_color(value: str) -> RGB:
    """'#rrggbb' (hash optional) to RGB; anything unparseable is black."""
    match = _HEX_RE.match((value or "").strip())
    if match is None:
        return RGB(0, 0, 0)
    return RGB(*(int(part, 16) for part in match.groups()))
