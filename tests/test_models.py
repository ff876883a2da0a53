import numpy as np
import pytest

from portrait_core.errors import InvalidImage
from portrait_core.models import ClassificationResult, FaceShape, PixelBuffer


def test_pixel_buffer_dimensions():
    buffer = PixelBuffer(np.zeros((3, 7, 4), dtype=np.uint8))
    assert (buffer.width, buffer.height) == (7, 3)
    assert buffer.shape == (3, 7)


@pytest.mark.parametrize(
    "pixels",
    [
        np.zeros((0, 4, 4), dtype=np.uint8),
        np.zeros((4, 0, 4), dtype=np.uint8),
        np.zeros((4, 4), dtype=np.uint8),
        np.zeros((4, 4, 4), dtype=np.float32),
    ],
)
def test_pixel_buffer_rejects_malformed_input(pixels):
    with pytest.raises(InvalidImage):
        PixelBuffer(pixels)


def test_from_rgb_adds_opaque_alpha():
    buffer = PixelBuffer.from_rgb(np.full((2, 2, 3), 9, dtype=np.uint8))
    assert (buffer.alpha == 255).all()
    assert (buffer.rgb == 9).all()


@pytest.mark.parametrize(
    "rgb",
    [
        np.full((2, 2, 3), 256, dtype=np.int64),
        np.full((2, 2, 3), 0.5, dtype=np.float64),
    ],
)
def test_from_rgb_rejects_non_uint8(rgb):
    with pytest.raises(InvalidImage):
        PixelBuffer.from_rgb(rgb)


def test_filled_rejects_zero_size():
    with pytest.raises(InvalidImage):
        PixelBuffer.filled(0, 3, (0, 0, 0, 255))


def test_copy_is_independent():
    buffer = PixelBuffer.filled(2, 2, (1, 2, 3, 4))
    clone = buffer.copy()
    clone.pixels[0, 0] = 0
    assert tuple(buffer.pixels[0, 0]) == (1, 2, 3, 4)


def test_confidence_range():
    assert ClassificationResult(FaceShape.OVAL, 1.0).confidence == 1.0
    with pytest.raises(ValueError):
        ClassificationResult(FaceShape.OVAL, 1.2)
    with pytest.raises(ValueError):
        ClassificationResult(FaceShape.OVAL, -0.1)


def test_labels_serialise_as_strings():
    assert FaceShape.LONG == "long"
