"""OpenCV imaging backend."""

from __future__ import annotations

from dataclasses import dataclass

import cv2
import numpy as np

from lazyimages.errors import PixelOutOfBoundsError, UnreadableImageError
from lazyimages.summaries.backends.base import (
    ImageSource,
    check_resize_target,
    read_source_bytes,
)
from lazyimages.summaries.colors import RGBA


@dataclass(frozen=True)
class OpenCVImage:
    """Decoded image: 8-bit BGR or BGRA pixel array."""

    pixels: np.ndarray

    @property
    def has_alpha(self) -> bool:
        return self.pixels.shape[2] == 4

    @property
    def width(self) -> int:
        return int(self.pixels.shape[1])

    @property
    def height(self) -> int:
        return int(self.pixels.shape[0])


class OpenCVBackend:
    """Whole-image backend built on OpenCV.

    Resampling uses area interpolation, which averages every source pixel
    covered by a target pixel when shrinking.
    """

    name = "opencv"

    def decode(self, source: ImageSource) -> OpenCVImage:
        data = read_source_bytes(source)
        buffer = np.frombuffer(data, dtype=np.uint8)
        try:
            pixels = cv2.imdecode(buffer, cv2.IMREAD_UNCHANGED)
        except cv2.error as e:
            raise UnreadableImageError(f"Cannot decode image: {e}") from e
        if pixels is None or pixels.size == 0:
            raise UnreadableImageError("Cannot decode image: unsupported format")

        return OpenCVImage(self._normalize(pixels))

    def dimensions(self, handle: OpenCVImage) -> tuple[int, int]:
        return handle.width, handle.height

    def resize(self, handle: OpenCVImage, width: int, height: int) -> OpenCVImage:
        check_resize_target(width, height)
        resized = cv2.resize(
            handle.pixels, (width, height), interpolation=cv2.INTER_AREA
        )
        return OpenCVImage(resized.reshape(height, width, handle.pixels.shape[2]))

    def grayscale(self, handle: OpenCVImage) -> OpenCVImage:
        if handle.has_alpha:
            luminance = cv2.cvtColor(handle.pixels, cv2.COLOR_BGRA2GRAY)
            gray = cv2.cvtColor(luminance, cv2.COLOR_GRAY2BGRA)
            gray[:, :, 3] = handle.pixels[:, :, 3]
            return OpenCVImage(gray)
        luminance = cv2.cvtColor(handle.pixels, cv2.COLOR_BGR2GRAY)
        return OpenCVImage(cv2.cvtColor(luminance, cv2.COLOR_GRAY2BGR))

    def read_pixel(self, handle: OpenCVImage, x: int, y: int) -> RGBA:
        if not (0 <= x < handle.width and 0 <= y < handle.height):
            raise PixelOutOfBoundsError(x, y, handle.width, handle.height)
        channels = [int(v) for v in handle.pixels[y, x]]
        alpha = channels[3] / 255 if handle.has_alpha else 1.0
        return RGBA(r=channels[2], g=channels[1], b=channels[0], a=alpha)

    @staticmethod
    def _normalize(pixels: np.ndarray) -> np.ndarray:
        """Convert any decoded array to 8-bit BGR or BGRA."""
        if pixels.dtype == np.uint16:
            pixels = (pixels // 257).astype(np.uint8)
        elif pixels.dtype != np.uint8:
            pixels = cv2.normalize(pixels, None, 0, 255, cv2.NORM_MINMAX).astype(
                np.uint8
            )

        if pixels.ndim == 2:
            return cv2.cvtColor(pixels, cv2.COLOR_GRAY2BGR)
        channels = pixels.shape[2]
        if channels == 1:
            return cv2.cvtColor(np.ascontiguousarray(pixels[:, :, 0]), cv2.COLOR_GRAY2BGR)
        if channels == 2:
            # Gray + alpha
            bgr = cv2.cvtColor(np.ascontiguousarray(pixels[:, :, 0]), cv2.COLOR_GRAY2BGR)
            return np.dstack([bgr, pixels[:, :, 1]])
        return np.ascontiguousarray(pixels[:, :, :4])
