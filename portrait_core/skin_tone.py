from __future__ import annotations

import logging

import numpy as np

from portrait_core.colorspace import RGB, rgb_to_lab
from portrait_core.models import ClassificationResult, PixelBuffer, SkinTone, SkinToneResult, SkinUndertone

logger = logging.getLogger(__name__)

TONE_CONFIDENCE = 0.8
SAMPLE_FRACTION = 0.1
WARM_PINK_RED_MARGIN = 10
COOL_PINK_BLUE_MARGIN = 5


def sample_patch(buffer: PixelBuffer) -> tuple[int, int, int]:
    """Top-left corner and side of the centred square patch that stands in for the face."""
    # Corner uses the unrounded side; every value truncates toward zero.
    raw = min(buffer.width, buffer.height) * SAMPLE_FRACTION
    x0 = int(buffer.width / 2 - raw / 2)
    y0 = int(buffer.height / 2 - raw / 2)
    return x0, y0, max(1, int(raw))


def average_center_color(buffer: PixelBuffer) -> RGB:
    x0, y0, side = sample_patch(buffer)
    patch = buffer.rgb[y0 : y0 + side, x0 : x0 + side].reshape(-1, 3).astype(np.float64)
    avg = patch.mean(axis=0)
    return RGB(float(avg[0]), float(avg[1]), float(avg[2]))


def tone_from_color(avg: RGB) -> tuple[SkinTone, SkinUndertone]:
    lab = rgb_to_lab(*avg)
    if lab.a > 0 and lab.b > 0:
        undertone = SkinUndertone.PINK if avg.r > avg.g + WARM_PINK_RED_MARGIN else SkinUndertone.YELLOW
        return SkinTone.WARM, undertone
    if lab.a < 0:
        undertone = SkinUndertone.PINK if avg.b > avg.r + COOL_PINK_BLUE_MARGIN else SkinUndertone.OLIVE
        return SkinTone.COOL, undertone
    return SkinTone.NEUTRAL, SkinUndertone.YELLOW


def classify_skin_tone(buffer: PixelBuffer) -> SkinToneResult:
    avg = average_center_color(buffer)
    tone, undertone = tone_from_color(avg)
    logger.debug("skin tone %s/%s from average rgb %s", tone.value, undertone.value, tuple(round(c, 1) for c in avg))
    return SkinToneResult(
        tone=ClassificationResult(label=tone, confidence=TONE_CONFIDENCE),
        undertone=ClassificationResult(label=undertone, confidence=TONE_CONFIDENCE),
    )
