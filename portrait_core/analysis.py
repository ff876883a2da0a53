from __future__ import annotations

from dataclasses import dataclass

from portrait_core.face_shape import FaceRatios, classify_face_shape, face_ratios, synthetic_measurement
from portrait_core.models import FaceMeasurement, FaceShape, PixelBuffer, SkinTone, SkinUndertone
from portrait_core.skin_tone import classify_skin_tone


@dataclass(frozen=True)
class Analysis:
    face_shape: FaceShape
    skin_tone: SkinTone
    skin_undertone: SkinUndertone
    confidence: float
    ratios: FaceRatios


def analyze(buffer: PixelBuffer, measurement: FaceMeasurement | None = None) -> Analysis:
    """
    Face shape plus skin tone for one image. Without a measurement the synthetic
    landmark source is used. Overall confidence is the weaker of the two results.
    """
    if measurement is None:
        measurement = synthetic_measurement(buffer.width, buffer.height)
    shape = classify_face_shape(measurement)
    tone = classify_skin_tone(buffer)
    return Analysis(
        face_shape=shape.label,
        skin_tone=tone.tone.label,
        skin_undertone=tone.undertone.label,
        confidence=min(shape.confidence, tone.tone.confidence),
        ratios=face_ratios(measurement),
    )
