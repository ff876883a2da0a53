from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum

import numpy as np

from portrait_core.colorspace import hsl_planes, hsl_to_rgb_planes, parse_hex_color, rgb_to_hsl
from portrait_core.errors import InvalidDimensions, NoForegroundDetected
from portrait_core.models import Mask, PixelBuffer
from portrait_core.morphology import combine, refine
from portrait_core.settings import settings
from portrait_core.skin import clothing_mask, hair_mask, recolor_hair_mask, skin_mask

logger = logging.getLogger(__name__)


class EmptyMaskPolicy(str, Enum):
    TRANSPARENT = "transparent"
    ORIGINAL = "original"
    ERROR = "error"


@dataclass(frozen=True)
class Segmentation:
    buffer: PixelBuffer
    mask: Mask

    @property
    def foreground_ratio(self) -> float:
        return float(self.mask.mean())


def person_mask(buffer: PixelBuffer) -> Mask:
    """Skin, hair and clothing passes, OR-ed together and refined."""
    skin = skin_mask(buffer)
    hair = hair_mask(buffer)
    clothing = clothing_mask(buffer, skin)
    return refine(combine(skin, hair, clothing))


def apply_mask(buffer: PixelBuffer, mask: Mask) -> PixelBuffer:
    """Copy of `buffer` with alpha zeroed wherever `mask` is False; other pixels keep their alpha."""
    mask = np.asarray(mask, dtype=bool)
    if mask.shape != buffer.shape:
        raise InvalidDimensions(buffer.shape, mask.shape)
    out = buffer.pixels.copy()
    out[~mask, 3] = 0
    return PixelBuffer(out)


def segment_with_mask(
    buffer: PixelBuffer,
    *,
    empty_policy: EmptyMaskPolicy | str | None = None,
) -> Segmentation:
    policy = EmptyMaskPolicy(empty_policy or settings.empty_mask_policy)
    mask = person_mask(buffer)

    if not mask.any():
        logger.warning("no foreground detected in %dx%d image (policy=%s)", buffer.width, buffer.height, policy.value)
        if policy is EmptyMaskPolicy.ERROR:
            raise NoForegroundDetected("no foreground detected")
        if policy is EmptyMaskPolicy.ORIGINAL:
            return Segmentation(buffer=buffer.copy(), mask=mask)

    result = Segmentation(buffer=apply_mask(buffer, mask), mask=mask)
    logger.debug("foreground ratio %.3f", result.foreground_ratio)
    return result


def segment(buffer: PixelBuffer, *, empty_policy: EmptyMaskPolicy | str | None = None) -> PixelBuffer:
    return segment_with_mask(buffer, empty_policy=empty_policy).buffer


segment_foreground = segment


def recolor_hair(buffer: PixelBuffer, color: str) -> PixelBuffer:
    """
    Repaint hair pixels with the hue and saturation of `color` ('#rrggbb'),
    keeping each pixel's own HSL lightness. Alpha is left alone.
    """
    target = parse_hex_color(color)
    target_hsl = rgb_to_hsl(*target)

    mask = recolor_hair_mask(buffer)
    out = buffer.pixels.copy()
    if not mask.any():
        return PixelBuffer(out)

    _h, _s, lightness = hsl_planes(out[mask][:, :3])
    r, g, b = hsl_to_rgb_planes(target_hsl.h, target_hsl.s, lightness)
    out[mask, 0] = r.astype(np.uint8)
    out[mask, 1] = g.astype(np.uint8)
    out[mask, 2] = b.astype(np.uint8)
    logger.debug("recoloured %d hair pixels to %s", int(mask.sum()), color)
    return PixelBuffer(out)
