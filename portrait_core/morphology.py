from __future__ import annotations

import numpy as np
import cv2

from portrait_core.errors import InvalidDimensions
from portrait_core.models import Mask

ERODE_RADIUS = 2
DILATE_RADIUS = 3
FILL_MIN_NEIGHBORS = 6

_RING = np.array([[1, 1, 1], [1, 0, 1], [1, 1, 1]], dtype=np.float32)
_BOX = np.ones((3, 3), dtype=np.float32)
# Centre 4, orthogonal 2, diagonal 1: total weight 16.
_SMOOTH = np.array([[1, 2, 1], [2, 4, 2], [1, 2, 1]], dtype=np.float32)
_SMOOTH_THRESHOLD = 0.5 * float(_SMOOTH.sum())

_INNER = (slice(1, -1), slice(1, -1))


def _as_mask(mask: Mask) -> np.ndarray:
    mask = np.asarray(mask)
    if mask.ndim != 2:
        raise ValueError(f"mask must be 2-D (got shape {mask.shape})")
    return mask.astype(bool, copy=False)


def _check_radius(radius: int) -> int:
    radius = int(radius)
    if radius < 0:
        raise ValueError(f"radius must be >= 0 (got {radius})")
    return radius


def _neighbor_sum(mask: np.ndarray, kernel: np.ndarray) -> np.ndarray:
    # Only the interior of the result is ever read, so the border mode does not matter.
    return cv2.filter2D(mask.astype(np.float32), -1, kernel, borderType=cv2.BORDER_REPLICATE)


def _disk(radius: int) -> np.ndarray:
    dy, dx = np.ogrid[-radius : radius + 1, -radius : radius + 1]
    return (dx * dx + dy * dy <= radius * radius).astype(np.uint8)


def combine(*masks: Mask) -> Mask:
    """Pointwise OR of equally sized masks."""
    if not masks:
        raise ValueError("combine needs at least one mask")
    first = _as_mask(masks[0])
    out = first.copy()
    for mask in masks[1:]:
        mask = _as_mask(mask)
        if mask.shape != first.shape:
            raise InvalidDimensions(first.shape, mask.shape)
        out |= mask
    return out


def erode(mask: Mask, radius: int) -> Mask:
    """
    Square-window erosion: a pixel survives only when its whole (2r+1)^2 window is set.
    Pixels closer than `radius` to any edge are always cleared.
    """
    mask = _as_mask(mask)
    radius = _check_radius(radius)
    if radius == 0:
        return mask.copy()

    kernel = np.ones((2 * radius + 1, 2 * radius + 1), dtype=np.uint8)
    out = cv2.erode(mask.astype(np.uint8), kernel, borderType=cv2.BORDER_CONSTANT, borderValue=0) > 0
    out[:radius, :] = False
    out[-radius:, :] = False
    out[:, :radius] = False
    out[:, -radius:] = False
    return out


def dilate(mask: Mask, radius: int) -> Mask:
    """
    Disk dilation (dx^2 + dy^2 <= r^2). Only pixels at least `radius` away from every
    edge act as sources, but their disks may reach into the border band.
    """
    mask = _as_mask(mask)
    radius = _check_radius(radius)
    if radius == 0:
        return mask.copy()

    height, width = mask.shape
    sources = np.zeros((height, width), dtype=np.uint8)
    if height > 2 * radius and width > 2 * radius:
        inner = (slice(radius, height - radius), slice(radius, width - radius))
        sources[inner] = mask[inner]

    spread = cv2.dilate(sources, _disk(radius), borderType=cv2.BORDER_CONSTANT, borderValue=0) > 0
    return mask | spread


def fill_holes(mask: Mask) -> Mask:
    """Single majority pass: a cleared interior pixel with >= 6 of 8 neighbours set becomes set."""
    mask = _as_mask(mask)
    out = mask.copy()
    counts = _neighbor_sum(mask, _RING)
    out[_INNER] |= ~mask[_INNER] & (counts[_INNER] >= FILL_MIN_NEIGHBORS)
    return out


def smooth_edges(mask: Mask) -> Mask:
    mask = _as_mask(mask)
    out = mask.copy()
    box = _neighbor_sum(mask, _BOX)[_INNER]
    edge = (box > 0) & (box < 9)
    vote = _neighbor_sum(mask, _SMOOTH)[_INNER] > _SMOOTH_THRESHOLD
    out[_INNER] = np.where(edge, vote, mask[_INNER])
    return out


def refine(mask: Mask) -> Mask:
    """Erode 2, dilate 3, fill holes, smooth edges. Order and radii are fixed."""
    refined = erode(mask, ERODE_RADIUS)
    refined = dilate(refined, DILATE_RADIUS)
    refined = fill_holes(refined)
    return smooth_edges(refined)
