from __future__ import annotations

import logging
from dataclasses import dataclass

from portrait_core.models import ClassificationResult, FaceMeasurement, FaceShape

logger = logging.getLogger(__name__)

# ---------------- Tunables ----------------
BASE_CONFIDENCE = 0.85
DEFAULT_CONFIDENCE = 0.7

LONG_ASPECT_MIN = 1.5
LONG_JAW_FOREHEAD_MIN = 0.8
WIDE_ASPECT_MAX = 1.2
ROUND_JAW_FOREHEAD_MIN = 0.9
ROUND_CHEEK_JAW_MAX = 1.1
SQUARE_JAW_FOREHEAD_MIN = 0.85
NARROW_JAW_FOREHEAD_MAX = 0.75
HEART_CHEEK_FOREHEAD_MIN = 0.9
DIAMOND_CHEEK_JAW_MIN = 1.15
DIAMOND_CHEEK_FOREHEAD_MIN = 1.1

# Proportions of the image used by the stand-in landmark source.
SYNTHETIC_FACE_WIDTH = 0.6
SYNTHETIC_FACE_HEIGHT = 0.8
SYNTHETIC_JAWLINE_WIDTH = 0.5
SYNTHETIC_FOREHEAD_WIDTH = 0.55
SYNTHETIC_CHEEKBONE_WIDTH = 0.58
SYNTHETIC_CHIN_WIDTH = 0.35
# ------------------------------------------


@dataclass(frozen=True)
class FaceRatios:
    aspect: float
    jaw_to_forehead: float
    cheekbone_to_jaw: float
    cheekbone_to_forehead: float


def face_ratios(m: FaceMeasurement) -> FaceRatios:
    for name in ("face_width", "face_height", "jawline_width", "forehead_width", "cheekbone_width"):
        value = float(getattr(m, name))
        if not value > 0:
            raise ValueError(f"{name} must be > 0 (got {value!r})")
    return FaceRatios(
        aspect=m.face_height / m.face_width,
        jaw_to_forehead=m.jawline_width / m.forehead_width,
        cheekbone_to_jaw=m.cheekbone_width / m.jawline_width,
        cheekbone_to_forehead=m.cheekbone_width / m.forehead_width,
    )


def _decide(r: FaceRatios) -> tuple[FaceShape, float]:
    # Ordered decision list: the first matching rule wins.
    if r.aspect > LONG_ASPECT_MIN and r.jaw_to_forehead > LONG_JAW_FOREHEAD_MIN:
        return FaceShape.LONG, BASE_CONFIDENCE
    if r.aspect < WIDE_ASPECT_MAX:
        if r.jaw_to_forehead > ROUND_JAW_FOREHEAD_MIN and r.cheekbone_to_jaw < ROUND_CHEEK_JAW_MAX:
            return FaceShape.ROUND, BASE_CONFIDENCE
        if r.jaw_to_forehead > SQUARE_JAW_FOREHEAD_MIN:
            return FaceShape.SQUARE, BASE_CONFIDENCE
    if r.jaw_to_forehead < NARROW_JAW_FOREHEAD_MAX:
        if r.cheekbone_to_forehead > HEART_CHEEK_FOREHEAD_MIN:
            return FaceShape.HEART, BASE_CONFIDENCE
        return FaceShape.TRIANGLE, BASE_CONFIDENCE
    if r.cheekbone_to_jaw > DIAMOND_CHEEK_JAW_MIN and r.cheekbone_to_forehead > DIAMOND_CHEEK_FOREHEAD_MIN:
        return FaceShape.DIAMOND, BASE_CONFIDENCE
    return FaceShape.OVAL, DEFAULT_CONFIDENCE


def classify_face_shape(measurement: FaceMeasurement) -> ClassificationResult[FaceShape]:
    ratios = face_ratios(measurement)
    shape, confidence = _decide(ratios)
    logger.debug("face shape %s (%.2f) from %s", shape.value, confidence, ratios)
    return ClassificationResult(label=shape, confidence=confidence)


def synthetic_measurement(width: int, height: int) -> FaceMeasurement:
    """
    Placeholder landmark source: fixed proportions of the frame.
    Replace with a real landmark detector to get per-face geometry.
    """
    if width <= 0 or height <= 0:
        raise ValueError(f"invalid image size {width}x{height}")
    return FaceMeasurement(
        face_width=width * SYNTHETIC_FACE_WIDTH,
        face_height=height * SYNTHETIC_FACE_HEIGHT,
        jawline_width=width * SYNTHETIC_JAWLINE_WIDTH,
        forehead_width=width * SYNTHETIC_FOREHEAD_WIDTH,
        cheekbone_width=width * SYNTHETIC_CHEEKBONE_WIDTH,
        chin_width=width * SYNTHETIC_CHIN_WIDTH,
    )
