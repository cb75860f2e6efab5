"""Imaging backend interface.

A backend wraps one imaging library and exposes the handful of operations the
summary engine needs. Handles are opaque to the engine.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any, Protocol, Union, runtime_checkable

from lazyimages.errors import UnreadableImageError
from lazyimages.summaries.colors import RGBA

ImageSource = Union[str, Path, bytes]


@runtime_checkable
class ImageBackend(Protocol):
    """Decode, resample and read pixels from raster images."""

    name: str

    def decode(self, source: ImageSource) -> Any:
        """Decode a file path or byte buffer into a handle.

        Raises:
            UnreadableImageError: If the source is missing, empty or not a
                supported raster format.
        """
        ...

    def dimensions(self, handle: Any) -> tuple[int, int]:
        """Return (width, height) of the handle."""
        ...

    def resize(self, handle: Any, width: int, height: int) -> Any:
        """Resample to exactly width x height and return a new handle."""
        ...

    def grayscale(self, handle: Any) -> Any:
        """Return a desaturated copy of the handle."""
        ...

    def read_pixel(self, handle: Any, x: int, y: int) -> RGBA:
        """Read one pixel.

        Raises:
            PixelOutOfBoundsError: If (x, y) lies outside the handle.
        """
        ...


def read_source_bytes(source: ImageSource) -> bytes:
    """Read raw bytes from a path or pass a buffer through.

    Raises:
        UnreadableImageError: If the file is missing or the data is empty.
    """
    if isinstance(source, (bytes, bytearray, memoryview)):
        data = bytes(source)
    else:
        path = Path(source)
        if not path.is_file():
            raise UnreadableImageError(f"Image file not found: {path}")
        try:
            data = path.read_bytes()
        except OSError as e:
            raise UnreadableImageError(f"Cannot read {path}: {e}") from e

    if not data:
        raise UnreadableImageError("Image data is empty")
    return data


def check_resize_target(width: int, height: int) -> None:
    """Reject non-positive resize targets."""
    if width < 1 or height < 1:
        raise ValueError(f"Resize target must be at least 1x1, got {width}x{height}")
