from __future__ import annotations

import logging
import math

import numpy as np

from portrait_core.colorspace import hsv_planes, ycbcr_planes
from portrait_core.errors import InvalidDimensions
from portrait_core.models import Mask, PixelBuffer

logger = logging.getLogger(__name__)

# Row bands, as fractions of image height.
HAIR_BAND_TOP = 0.05
HAIR_BAND_BOTTOM = 0.55
CLOTHING_BAND_TOP = 0.4
RECOLOR_BAND_TOP = 0.1
RECOLOR_BAND_BOTTOM = 0.6


def _channels(rgb: np.ndarray) -> tuple[np.ndarray, np.ndarray, np.ndarray]:
    rgb = np.asarray(rgb, dtype=np.float64)
    return rgb[..., 0], rgb[..., 1], rgb[..., 2]


def _skin_rules(rgb: np.ndarray) -> np.ndarray:
    """
    Skin if the YCbCr chroma box matches, or if both the HSV and the RGB rule sets match.
    Works on any ...x3 array; returns a bool array of the leading shape.
    """
    _y, cb, cr = ycbcr_planes(rgb)
    ycbcr_skin = (cr >= 133) & (cr <= 173) & (cb >= 77) & (cb <= 127)

    h, s, v = hsv_planes(rgb)
    hsv_skin = (h >= 0) & (h <= 50) & (s >= 0.2) & (s <= 0.7) & (v >= 0.4)

    r, g, b = _channels(rgb)
    spread = np.maximum(np.maximum(r, g), b) - np.minimum(np.minimum(r, g), b)
    rgb_skin = (r > 95) & (g > 40) & (b > 20) & (spread > 15) & (np.abs(r - g) > 15) & (r > g) & (r > b)

    return ycbcr_skin | (hsv_skin & rgb_skin)


def _hair_rules(rgb: np.ndarray) -> np.ndarray:
    # Dark pixels with some colour, or very dark pixels regardless of colour.
    r, g, b = _channels(rgb)
    brightness = (r + g + b) / 3.0
    mx = np.maximum(np.maximum(r, g), b)
    mn = np.minimum(np.minimum(r, g), b)
    saturation = np.where(mx == 0, 0.0, (mx - mn) / np.where(mx == 0, 1.0, mx))
    return (brightness < 140) & ((saturation > 0.1) | (brightness < 80))


def _recolor_hair_rules(rgb: np.ndarray) -> np.ndarray:
    # Recolouring is stricter than segmentation: flat greys are left alone.
    r, g, b = _channels(rgb)
    brightness = (r + g + b) / 3.0
    spread = np.maximum(np.maximum(r, g), b) - np.minimum(np.minimum(r, g), b)
    return (brightness < 120) & (spread > 10)


def _clothing_rules(rgb: np.ndarray) -> np.ndarray:
    # Anything that is not a flat, bright backdrop.
    r, g, b = _channels(rgb)
    brightness = (r + g + b) / 3.0
    variance = (r - brightness) ** 2 + (g - brightness) ** 2 + (b - brightness) ** 2
    return (variance > 100) | (brightness < 200)


def _hair_rows(height: int) -> tuple[int, int]:
    return int(math.floor(height * HAIR_BAND_TOP)), int(math.floor(height * HAIR_BAND_BOTTOM))


def _recolor_rows(height: int) -> tuple[int, int]:
    return int(math.floor(height * RECOLOR_BAND_TOP)), int(math.floor(height * RECOLOR_BAND_BOTTOM))


def _clothing_top(height: int) -> int:
    return int(math.floor(height * CLOTHING_BAND_TOP))


def is_skin_color(r: float, g: float, b: float) -> bool:
    return bool(_skin_rules(np.array([r, g, b], dtype=np.float64)))


def is_hair_pixel(r: float, g: float, b: float, y: int, height: int) -> bool:
    top, bottom = _hair_rows(height)
    if not top <= y < bottom:
        return False
    return bool(_hair_rules(np.array([r, g, b], dtype=np.float64)))


def is_clothing_pixel(r: float, g: float, b: float, y: int, height: int, is_skin: bool) -> bool:
    if y < _clothing_top(height) or is_skin:
        return False
    return bool(_clothing_rules(np.array([r, g, b], dtype=np.float64)))


def skin_mask(buffer: PixelBuffer) -> Mask:
    mask = _skin_rules(buffer.rgb)
    logger.debug("skin pass: %d/%d pixels", int(mask.sum()), mask.size)
    return mask


def hair_mask(buffer: PixelBuffer) -> Mask:
    mask = np.zeros(buffer.shape, dtype=bool)
    top, bottom = _hair_rows(buffer.height)
    if bottom > top:
        mask[top:bottom] = _hair_rules(buffer.rgb[top:bottom])
    logger.debug("hair pass: %d/%d pixels", int(mask.sum()), mask.size)
    return mask


def clothing_mask(buffer: PixelBuffer, skin: Mask) -> Mask:
    """Lower-body pixels that are neither skin nor a flat bright backdrop."""
    skin = np.asarray(skin, dtype=bool)
    if skin.shape != buffer.shape:
        raise InvalidDimensions(buffer.shape, skin.shape)

    mask = np.zeros(buffer.shape, dtype=bool)
    top = _clothing_top(buffer.height)
    mask[top:] = _clothing_rules(buffer.rgb[top:]) & ~skin[top:]
    logger.debug("clothing pass: %d/%d pixels", int(mask.sum()), mask.size)
    return mask


def recolor_hair_mask(buffer: PixelBuffer) -> Mask:
    """Pixels that hair recolouring repaints. Uses its own band and rules, not `hair_mask`."""
    mask = np.zeros(buffer.shape, dtype=bool)
    top, bottom = _recolor_rows(buffer.height)
    if bottom > top:
        mask[top:bottom] = _recolor_hair_rules(buffer.rgb[top:bottom])
    logger.debug("recolour hair pass: %d/%d pixels", int(mask.sum()), mask.size)
    return mask
