"""Exceptions raised by lazyimages."""

from __future__ import annotations


class LazyImagesError(Exception):
    """Base class for lazyimages errors."""


class UnreadableImageError(LazyImagesError):
    """Source is missing, empty, or not a supported raster format."""


class PixelOutOfBoundsError(LazyImagesError, IndexError):
    """Pixel coordinate lies outside the image."""

    def __init__(self, x: int, y: int, width: int, height: int) -> None:
        super().__init__(f"Pixel ({x}, {y}) outside {width}x{height} image")
        self.x = x
        self.y = y
        self.width = width
        self.height = height


class NoBackendAvailableError(LazyImagesError):
    """No imaging library could be loaded."""
