from __future__ import annotations

import numpy as np
import pytest

from portrait_core.models import PixelBuffer


@pytest.fixture
def solid():
    def make(rgb: tuple[int, int, int], width: int = 20, height: int = 20, alpha: int = 255) -> PixelBuffer:
        return PixelBuffer.filled(width, height, (*rgb, alpha))

    return make


@pytest.fixture
def rng() -> np.random.Generator:
    return np.random.default_rng(1234)
