from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Generic, TypeVar

import numpy as np

from portrait_core.errors import InvalidImage

# HxW bool, True marks foreground.
Mask = np.ndarray


class FaceShape(str, Enum):
    OVAL = "oval"
    ROUND = "round"
    SQUARE = "square"
    HEART = "heart"
    LONG = "long"
    DIAMOND = "diamond"
    TRIANGLE = "triangle"


class SkinTone(str, Enum):
    COOL = "cool"
    WARM = "warm"
    NEUTRAL = "neutral"


class SkinUndertone(str, Enum):
    PINK = "pink"
    YELLOW = "yellow"
    OLIVE = "olive"


T = TypeVar("T")


@dataclass(frozen=True)
class ClassificationResult(Generic[T]):
    label: T
    confidence: float

    def __post_init__(self) -> None:
        if not 0.0 <= float(self.confidence) <= 1.0:
            raise ValueError(f"confidence must be in [0, 1] (got {self.confidence!r})")


@dataclass(frozen=True)
class PixelBuffer:
    """
    HxWx4 uint8 RGBA pixels.

    Pipeline stages treat a buffer as read-only and hand back a fresh one, so a
    buffer is never shared between two stages that both write to it.
    """

    pixels: np.ndarray

    def __post_init__(self) -> None:
        pixels = self.pixels
        if not isinstance(pixels, np.ndarray):
            raise InvalidImage("pixels must be a numpy array")
        if pixels.dtype != np.uint8:
            raise InvalidImage(f"pixels must be uint8 (got {pixels.dtype})")
        if pixels.ndim != 3 or pixels.shape[2] != 4:
            raise InvalidImage(f"pixels must be HxWx4 RGBA (got shape {pixels.shape})")
        if pixels.shape[0] <= 0 or pixels.shape[1] <= 0:
            raise InvalidImage("image must have a positive width and height")

    @classmethod
    def from_rgb(cls, rgb: np.ndarray, alpha: int = 255) -> PixelBuffer:
        if not isinstance(rgb, np.ndarray) or rgb.ndim != 3 or rgb.shape[2] != 3:
            raise InvalidImage("rgb must be an HxWx3 array")
        if rgb.shape[0] <= 0 or rgb.shape[1] <= 0:
            raise InvalidImage("image must have a positive width and height")
        if rgb.dtype != np.uint8:
            raise InvalidImage(f"rgb must be uint8, got {rgb.dtype}")
        a = np.full(rgb.shape[:2] + (1,), alpha, dtype=np.uint8)
        return cls(np.concatenate([rgb, a], axis=2))

    @classmethod
    def filled(cls, width: int, height: int, rgba: tuple[int, int, int, int]) -> PixelBuffer:
        if width <= 0 or height <= 0:
            raise InvalidImage(f"invalid image size {width}x{height}")
        pixels = np.empty((height, width, 4), dtype=np.uint8)
        pixels[:, :] = rgba
        return cls(pixels)

    @property
    def width(self) -> int:
        return int(self.pixels.shape[1])

    @property
    def height(self) -> int:
        return int(self.pixels.shape[0])

    @property
    def shape(self) -> tuple[int, int]:
        return self.height, self.width

    @property
    def rgb(self) -> np.ndarray:
        return self.pixels[:, :, :3]

    @property
    def alpha(self) -> np.ndarray:
        return self.pixels[:, :, 3]

    def copy(self) -> PixelBuffer:
        return PixelBuffer(self.pixels.copy())


@dataclass(frozen=True)
class FaceMeasurement:
    face_width: float
    face_height: float
    jawline_width: float
    forehead_width: float
    cheekbone_width: float
    # Carried through from the landmark source; the shape rules do not read it.
    chin_width: float = 0.0


@dataclass(frozen=True)
class SkinToneResult:
    tone: ClassificationResult[SkinTone]
    undertone: ClassificationResult[SkinUndertone]
