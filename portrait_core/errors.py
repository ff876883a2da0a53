from __future__ import annotations


class InvalidImage(ValueError):
    """Raised for zero-area or malformed pixel buffers."""


class InvalidDimensions(ValueError):
    """Raised when masks (or a mask and a buffer) disagree on shape."""

    def __init__(self, expected: tuple[int, ...], got: tuple[int, ...]) -> None:
        super().__init__(f"mask shape mismatch: expected {expected}, got {got}")
        self.expected = expected
        self.got = got


class NoForegroundDetected(InvalidImage):
    """Raised by the 'error' empty-mask policy when segmentation finds nothing."""
