"""Pillow imaging backend."""

from __future__ import annotations

from io import BytesIO

import numpy as np
from PIL import Image, UnidentifiedImageError

from lazyimages.errors import PixelOutOfBoundsError, UnreadableImageError
from lazyimages.summaries.backends.base import (
    ImageSource,
    check_resize_target,
    read_source_bytes,
)
from lazyimages.summaries.colors import RGBA

SIXTEEN_BIT_MODES = ("I", "I;16", "I;16B", "I;16L", "I;16N")


class PillowBackend:
    """Raster backend built on Pillow.

    Handles are ``PIL.Image.Image`` objects in RGB or RGBA mode. Every
    transform returns a new image, so handles are never modified in place.
    """

    name = "pillow"

    def decode(self, source: ImageSource) -> Image.Image:
        data = read_source_bytes(source)
        try:
            image = Image.open(BytesIO(data))
            # Animated images are summarized from their first frame
            image.seek(0)
            image.load()
        except (
            UnidentifiedImageError,
            Image.DecompressionBombError,
            OSError,
            SyntaxError,
            ValueError,
        ) as e:
            raise UnreadableImageError(f"Cannot decode image: {e}") from e

        if image.mode in SIXTEEN_BIT_MODES:
            # Scale 16-bit gray to 8 bits the same way the OpenCV backend does
            pixels = np.clip(np.asarray(image, dtype=np.int64), 0, 65535) // 257
            image = Image.fromarray(pixels.astype(np.uint8))
        return image.convert("RGBA" if self._has_alpha(image) else "RGB")

    def dimensions(self, handle: Image.Image) -> tuple[int, int]:
        return handle.size

    def resize(self, handle: Image.Image, width: int, height: int) -> Image.Image:
        check_resize_target(width, height)
        return handle.resize((width, height), Image.Resampling.BOX)

    def grayscale(self, handle: Image.Image) -> Image.Image:
        luminance = handle.convert("L")
        if handle.mode == "RGBA":
            return Image.merge(
                "RGBA", (luminance, luminance, luminance, handle.getchannel("A"))
            )
        return luminance.convert("RGB")

    def read_pixel(self, handle: Image.Image, x: int, y: int) -> RGBA:
        width, height = handle.size
        if not (0 <= x < width and 0 <= y < height):
            raise PixelOutOfBoundsError(x, y, width, height)
        return RGBA.from_tuple(handle.getpixel((x, y)))

    @staticmethod
    def _has_alpha(image: Image.Image) -> bool:
        """Check if an image carries transparency information."""
        if image.mode in ("RGBA", "LA", "PA", "RGBa", "La"):
            return True
        return "transparency" in image.info
