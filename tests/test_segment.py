import numpy as np
import pytest

from portrait_core.errors import InvalidDimensions, InvalidImage, NoForegroundDetected
from portrait_core.models import PixelBuffer
from portrait_core.segment import (
    apply_mask,
    person_mask,
    recolor_hair,
    segment,
    segment_foreground,
    segment_with_mask,
)


def test_uniform_background_becomes_fully_transparent(solid):
    buffer = solid((255, 255, 255))
    out = segment(buffer, empty_policy="transparent")
    assert (out.alpha == 0).all()
    assert np.array_equal(out.rgb, buffer.rgb)


def test_empty_mask_original_policy_returns_opaque_copy(solid):
    buffer = solid((255, 255, 255))
    out = segment(buffer, empty_policy="original")
    assert np.array_equal(out.pixels, buffer.pixels)
    assert out.pixels is not buffer.pixels


def test_empty_mask_error_policy_raises(solid):
    with pytest.raises(NoForegroundDetected):
        segment(solid((255, 255, 255)), empty_policy="error")


def test_empty_mask_policy_comes_from_settings(solid, monkeypatch):
    from portrait_core.settings import settings

    monkeypatch.setattr(settings, "empty_mask_policy", "error")
    with pytest.raises(NoForegroundDetected):
        segment(solid((255, 255, 255)))


def test_dark_subject_kept_and_corner_dropped(solid):
    buffer = solid((30, 30, 30), width=30, height=30)
    result = segment_with_mask(buffer)
    assert result.mask.shape == (30, 30)
    assert result.buffer.alpha[15, 15] == 255
    assert result.buffer.alpha[0, 0] == 0
    assert 0.0 < result.foreground_ratio < 1.0
    assert np.array_equal(result.buffer.rgb, buffer.rgb)


def test_segment_does_not_mutate_input(solid):
    buffer = solid((30, 30, 30), width=30, height=30)
    before = buffer.pixels.copy()
    segment_foreground(buffer)
    assert np.array_equal(buffer.pixels, before)


def test_person_mask_matches_buffer_shape(solid):
    buffer = solid((220, 180, 150), width=17, height=23)
    assert person_mask(buffer).shape == (23, 17)


def test_apply_mask_only_touches_background_alpha(solid):
    buffer = solid((10, 20, 30), width=4, height=3, alpha=128)
    mask = np.zeros((3, 4), dtype=bool)
    mask[1, 2] = True
    out = apply_mask(buffer, mask)
    assert out.alpha[1, 2] == 128
    assert out.alpha.sum() == 128
    assert np.array_equal(out.rgb, buffer.rgb)


def test_apply_mask_rejects_mismatched_mask(solid):
    with pytest.raises(InvalidDimensions):
        apply_mask(solid((0, 0, 0), width=4, height=3), np.ones((4, 3), dtype=bool))


def test_zero_area_buffer_is_invalid():
    with pytest.raises(InvalidImage):
        PixelBuffer(np.zeros((0, 5, 4), dtype=np.uint8))
    with pytest.raises(InvalidImage):
        PixelBuffer(np.zeros((5, 5, 3), dtype=np.uint8))


def test_recolor_hair_keeps_lightness(solid):
    buffer = solid((60, 40, 30), width=20, height=20)
    out = recolor_hair(buffer, "#ff0000")
    assert tuple(out.pixels[5, 5]) == (90, 0, 0, 255)
    # outside the hair band nothing changes
    assert tuple(out.pixels[15, 5]) == (60, 40, 30, 255)
    assert tuple(buffer.pixels[5, 5]) == (60, 40, 30, 255)


def test_recolor_hair_without_hair_is_a_copy(solid):
    buffer = solid((250, 250, 250))
    out = recolor_hair(buffer, "#00ff00")
    assert np.array_equal(out.pixels, buffer.pixels)


def test_recolor_hair_leaves_flat_grey_alone(solid):
    buffer = solid((60, 60, 60), width=20, height=20)
    out = recolor_hair(buffer, "#ff0000")
    assert np.array_equal(out.pixels, buffer.pixels)


def test_recolor_hair_uses_its_own_row_band(solid):
    out = recolor_hair(solid((60, 40, 30), width=20, height=20), "#ff0000")
    assert tuple(out.pixels[1, 5]) == (60, 40, 30, 255)
    assert tuple(out.pixels[2, 5]) == (90, 0, 0, 255)
    assert tuple(out.pixels[11, 5]) == (90, 0, 0, 255)
    assert tuple(out.pixels[12, 5]) == (60, 40, 30, 255)
