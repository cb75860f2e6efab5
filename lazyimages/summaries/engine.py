"""Color summary engine.

Downsamples one image into an average color, an average grayscale, five
horizontal stripes and an aspect-preserving color grid. Each summary is
computed at most once per engine, from its own freshly decoded handle.
"""

from __future__ import annotations

import logging
import math
import threading
from enum import Enum
from typing import Any, Callable

from lazyimages.errors import UnreadableImageError
from lazyimages.summaries.backends.base import ImageBackend, ImageSource
from lazyimages.summaries.colors import RGBA, greatest_common_divisor, is_dark
from lazyimages.summaries.config import GRID_MAX_SIZE, GRID_MIN_SIZE, STRIPE_COUNT
from lazyimages.summaries.models import ImageSummary

logger = logging.getLogger(__name__)

Stripes = tuple[RGBA, ...]
Grid = tuple[tuple[RGBA, ...], ...]


class SummaryKind(str, Enum):
    """Memoized values of an engine."""

    DIMENSIONS = "dimensions"
    AVERAGE_COLOR = "average_color"
    AVERAGE_GRAYSCALE = "average_grayscale"
    HORIZONTAL_STRIPES = "horizontal_stripes"
    GRID = "grid"


def round_half_up(value: float) -> int:
    """Round a non-negative value, halves away from zero."""
    return int(math.floor(value + 0.5))


def grid_dimensions(width: int, height: int) -> tuple[int, int]:
    """Compute the (resize width, resize height) of the color grid.

    The width/height ratio is reduced by its greatest common divisor and
    scaled so the longer side lies between GRID_MIN_SIZE and GRID_MAX_SIZE.
    The shorter side follows from the source proportions. The first value is
    passed to the backend as the width, the second as the height.
    """
    if width < 1 or height < 1:
        raise ValueError(f"Image dimensions must be positive, got {width}x{height}")

    divisor = greatest_common_divisor(width, height)
    rows = min(GRID_MAX_SIZE, width // divisor) if height < width else 0
    columns = min(GRID_MAX_SIZE, height // divisor) if width < height else 0

    if rows:
        while rows < GRID_MIN_SIZE:
            rows *= 2
    if columns:
        while columns < GRID_MIN_SIZE:
            columns *= 2

    if not rows and not columns:
        rows = columns = GRID_MAX_SIZE
    elif not rows:
        rows = int(columns * (width / height))
    elif not columns:
        columns = round_half_up(rows * (height / width))

    # Extreme ratios can truncate the short side to zero
    return max(1, rows), max(1, columns)


class ColorSummaryEngine:
    """Compute and memoize the color summaries of one image.

    An engine without a backend, or whose source cannot be decoded, answers
    every summary with an empty result (None or an empty tuple) instead of
    raising. Programming errors such as out-of-bounds reads still propagate.
    """

    def __init__(
        self,
        source: ImageSource | None,
        backend: ImageBackend | None = None,
    ) -> None:
        self.source = source
        self.backend = backend
        self._results: dict[SummaryKind, Any] = {}
        self._locks = {kind: threading.Lock() for kind in SummaryKind}
        self._unreadable = source is None or backend is None

        if backend is None:
            logger.debug(f"No backend for {self._describe_source()}, summaries are empty")

    @property
    def available(self) -> bool:
        """False once the source is known to be unreadable."""
        return not self._unreadable

    def original_dimensions(self) -> tuple[int, int] | None:
        """Return (width, height) of the source image."""
        return self._memoize(SummaryKind.DIMENSIONS, self._compute_dimensions, None)

    def average_color(self) -> RGBA | None:
        return self._memoize(SummaryKind.AVERAGE_COLOR, self._compute_average_color, None)

    def average_grayscale(self) -> RGBA | None:
        return self._memoize(
            SummaryKind.AVERAGE_GRAYSCALE, self._compute_average_grayscale, None
        )

    def color_stripes_horizontal(self) -> Stripes:
        """Average colors of five horizontal bands, topmost first."""
        return self._memoize(
            SummaryKind.HORIZONTAL_STRIPES, self._compute_horizontal_stripes, ()
        )

    def color_grid(self) -> Grid:
        """Grid of cell colors indexed as grid[column][row]."""
        return self._memoize(SummaryKind.GRID, self._compute_grid, ())

    def is_dark(self) -> bool | None:
        """True if the average color is dark, None if there is no data."""
        color = self.average_color()
        if color is None:
            return None
        return is_dark(color)

    def summarize(self) -> ImageSummary:
        """Compute every summary and bundle them into an ImageSummary."""
        dimensions = self.original_dimensions()
        return ImageSummary(
            average_color=self.average_color(),
            average_grayscale=self.average_grayscale(),
            is_dark=self.is_dark(),
            horizontal_stripes=list(self.color_stripes_horizontal()),
            grid=[list(column) for column in self.color_grid()],
            original_width=dimensions[0] if dimensions else None,
            original_height=dimensions[1] if dimensions else None,
            backend=self.backend.name if self.backend is not None else None,
        )

    def _memoize(self, kind: SummaryKind, compute: Callable[[], Any], empty: Any) -> Any:
        if kind in self._results:
            return self._results[kind]
        # Concurrent callers of the same summary wait for one computation
        with self._locks[kind]:
            if kind not in self._results:
                self._results[kind] = self._compute(compute, empty)
        return self._results[kind]

    def _compute(self, compute: Callable[[], Any], empty: Any) -> Any:
        if self._unreadable:
            return empty
        try:
            return compute()
        except UnreadableImageError as e:
            self._unreadable = True
            logger.warning(f"Cannot summarize {self._describe_source()}: {e}")
            return empty

    def _decode(self) -> Any:
        assert self.backend is not None and self.source is not None
        return self.backend.decode(self.source)

    def _compute_dimensions(self) -> tuple[int, int]:
        return self.backend.dimensions(self._decode())

    def _compute_average_color(self) -> RGBA:
        image = self.backend.resize(self._decode(), 1, 1)
        return self.backend.read_pixel(image, 0, 0)

    def _compute_average_grayscale(self) -> RGBA:
        image = self.backend.grayscale(self._decode())
        image = self.backend.resize(image, 1, 1)
        return self.backend.read_pixel(image, 0, 0)

    def _compute_horizontal_stripes(self) -> Stripes:
        image = self.backend.resize(self._decode(), 1, STRIPE_COUNT)
        return tuple(self.backend.read_pixel(image, 0, i) for i in range(STRIPE_COUNT))

    def _compute_grid(self) -> Grid:
        image = self._decode()
        width, height = self.backend.dimensions(image)
        image = self.backend.resize(image, *grid_dimensions(width, height))
        # Bounds come from the resized image, not the requested size
        columns, rows = self.backend.dimensions(image)
        return tuple(
            tuple(self.backend.read_pixel(image, i, j) for j in range(rows))
            for i in range(columns)
        )

    def _describe_source(self) -> str:
        if isinstance(self.source, (bytes, bytearray)):
            return f"<{len(self.source)} bytes>"
        return str(self.source)
