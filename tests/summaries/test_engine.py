"""Tests for the color summary engine."""

from __future__ import annotations

import struct
import threading
import time
import zlib
from concurrent.futures import ThreadPoolExecutor
from pathlib import Path
from typing import Any, Callable

import pytest

from lazyimages.errors import PixelOutOfBoundsError
from lazyimages.summaries import ColorSummaryEngine, ImageSummary, grid_dimensions
from lazyimages.summaries.backends.pillow import PillowBackend
from lazyimages.summaries.colors import RGBA
from lazyimages.summaries.engine import round_half_up


class CountingBackend(PillowBackend):
    """Pillow backend that counts decodes and can slow them down."""

    def __init__(self, delay: float = 0.0) -> None:
        self.delay = delay
        self.decodes = 0
        self._lock = threading.Lock()

    def decode(self, source: Any) -> Any:
        with self._lock:
            self.decodes += 1
        if self.delay:
            time.sleep(self.delay)
        return super().decode(source)


def png_header(width: int, height: int) -> bytes:
    """PNG that declares its size but carries no pixel data."""

    def chunk(kind: bytes, data: bytes) -> bytes:
        body = kind + data
        return struct.pack(">I", len(data)) + body + struct.pack(">I", zlib.crc32(body))

    ihdr = struct.pack(">IIBBBBB", width, height, 8, 2, 0, 0, 0)
    return b"\x89PNG\r\n\x1a\n" + chunk(b"IHDR", ihdr) + chunk(b"IEND", b"")


def assert_close(color: RGBA, expected: tuple[int, int, int], tolerance: int = 2) -> None:
    for actual, wanted in zip((color.r, color.g, color.b), expected):
        assert abs(actual - wanted) <= tolerance, f"{color} != {expected}"


class TestGridDimensions:
    """Tests for the aspect-preserving grid size derivation."""

    @pytest.mark.parametrize(
        "width, height, expected",
        [
            (100, 100, (16, 16)),  # square
            (1, 1, (16, 16)),
            (16, 8, (8, 4)),  # 2:1, ratio doubled up to the minimum
            (1920, 1080, (16, 9)),  # 16:9
            (1080, 1920, (9, 16)),  # 9:16
            (800, 600, (8, 6)),  # 4:3
            (600, 800, (6, 8)),  # 3:4
            (3, 2, (12, 8)),
            (32, 18, (16, 9)),
            (1000, 1, (16, 1)),  # short side rounds to zero
            (1, 1000, (1, 16)),
        ],
    )
    def test_dimensions(self, width: int, height: int, expected: tuple[int, int]) -> None:
        assert grid_dimensions(width, height) == expected

    def test_longer_side_bounded(self) -> None:
        for width, height in [(7, 3), (640, 480), (1023, 767), (5000, 4999)]:
            rows, columns = grid_dimensions(width, height)
            assert 8 <= max(rows, columns) <= 16
            assert min(rows, columns) >= 1

    def test_invalid_dimensions(self) -> None:
        with pytest.raises(ValueError):
            grid_dimensions(0, 10)

    def test_round_half_up(self) -> None:
        assert round_half_up(0.5) == 1
        assert round_half_up(2.5) == 3
        assert round_half_up(2.49) == 2


class TestSummaries:
    """Tests for the individual summaries using the Pillow backend."""

    @pytest.fixture
    def backend(self) -> PillowBackend:
        return PillowBackend()

    def test_average_color_solid(self, make_image: Callable[..., Path], backend) -> None:
        engine = ColorSummaryEngine(make_image(color=(255, 0, 0)), backend)
        assert engine.average_color() == RGBA(r=255, g=0, b=0, a=1.0)

    def test_average_color_mixed(self, split_image: Callable[..., bytes], backend) -> None:
        data = split_image((10, 10), (255, 255, 255), (0, 0, 0))
        color = ColorSummaryEngine(data, backend).average_color()
        assert color is not None
        assert_close(color, (128, 128, 128), tolerance=1)

    def test_average_grayscale(self, make_image: Callable[..., Path], backend) -> None:
        color = ColorSummaryEngine(make_image(color=(255, 0, 0)), backend).average_grayscale()
        assert color is not None
        assert color.r == color.g == color.b
        assert abs(color.r - 76) <= 1
        assert color.a == 1.0

    def test_stripes_top_to_bottom(self, split_image: Callable[..., bytes], backend) -> None:
        data = split_image((10, 10), (255, 255, 255), (0, 0, 0))
        stripes = ColorSummaryEngine(data, backend).color_stripes_horizontal()
        assert len(stripes) == 5
        assert_close(stripes[0], (255, 255, 255))
        assert_close(stripes[4], (0, 0, 0))

    @pytest.mark.parametrize("height", [1, 4, 5, 100])
    def test_stripes_always_five(
        self, make_image: Callable[..., Path], backend, height: int
    ) -> None:
        engine = ColorSummaryEngine(make_image(size=(7, height)), backend)
        stripes = engine.color_stripes_horizontal()
        assert len(stripes) == 5
        assert all(stripe == RGBA(r=255, g=0, b=0) for stripe in stripes)

    @pytest.mark.parametrize(
        "size, expected",
        [((16, 8), (8, 4)), ((32, 18), (16, 9)), ((20, 20), (16, 16)), ((6, 8), (6, 8))],
    )
    def test_grid_shape(
        self,
        make_image: Callable[..., Path],
        backend,
        size: tuple[int, int],
        expected: tuple[int, int],
    ) -> None:
        grid = ColorSummaryEngine(make_image(size=size), backend).color_grid()
        assert len(grid) == expected[0]
        assert all(len(column) == expected[1] for column in grid)

    def test_grid_outer_index_is_column(
        self, split_image: Callable[..., bytes], backend
    ) -> None:
        data = split_image((16, 16), (255, 0, 0), (0, 0, 255), vertical=True)
        grid = ColorSummaryEngine(data, backend).color_grid()
        assert grid[0][0] == RGBA(r=255, g=0, b=0)
        assert grid[0][15] == RGBA(r=255, g=0, b=0)
        assert grid[15][0] == RGBA(r=0, g=0, b=255)

    def test_grid_inner_index_is_row(self, split_image: Callable[..., bytes], backend) -> None:
        data = split_image((16, 16), (255, 0, 0), (0, 0, 255))
        grid = ColorSummaryEngine(data, backend).color_grid()
        assert grid[0][0] == RGBA(r=255, g=0, b=0)
        assert grid[0][15] == RGBA(r=0, g=0, b=255)
        assert grid[15][0] == RGBA(r=255, g=0, b=0)

    def test_is_dark(self, make_image: Callable[..., Path], backend) -> None:
        assert ColorSummaryEngine(make_image("black.png", color=(0, 0, 0)), backend).is_dark()
        assert not ColorSummaryEngine(
            make_image("white.png", color=(255, 255, 255)), backend
        ).is_dark()

    def test_alpha_reported(self, encode_image: Callable[..., bytes], backend) -> None:
        data = encode_image(color=(255, 0, 0, 128), mode="RGBA")
        color = ColorSummaryEngine(data, backend).average_color()
        assert color is not None
        assert color.a == pytest.approx(128 / 255, abs=0.01)
        assert color.r >= 250

    def test_jpeg_is_opaque(self, encode_image: Callable[..., bytes], backend) -> None:
        data = encode_image(color=(0, 128, 255), format="JPEG")
        color = ColorSummaryEngine(data, backend).average_color()
        assert color is not None
        assert color.a == 1.0
        assert_close(color, (0, 128, 255), tolerance=6)

    def test_gif(self, encode_image: Callable[..., bytes], backend) -> None:
        data = encode_image(color=(0, 255, 0), format="GIF")
        assert ColorSummaryEngine(data, backend).average_color() == RGBA(r=0, g=255, b=0)

    def test_original_dimensions(self, make_image: Callable[..., Path], backend) -> None:
        engine = ColorSummaryEngine(make_image(size=(12, 7)), backend)
        assert engine.original_dimensions() == (12, 7)

    def test_summarize(self, make_image: Callable[..., Path], backend) -> None:
        summary = ColorSummaryEngine(make_image(size=(16, 8)), backend).summarize()
        assert isinstance(summary, ImageSummary)
        assert not summary.empty
        assert summary.average_color == RGBA(r=255, g=0, b=0)
        assert summary.is_dark is False
        assert len(summary.horizontal_stripes) == 5
        assert summary.grid_size == (8, 4)
        assert (summary.original_width, summary.original_height) == (16, 8)
        assert summary.backend == "pillow"

    def test_summary_json_round_trip(self, make_image: Callable[..., Path], backend) -> None:
        summary = ColorSummaryEngine(make_image(), backend).summarize()
        assert ImageSummary.model_validate_json(summary.model_dump_json()) == summary


class TestMemoization:
    """Tests for per-summary caching and fresh decoding."""

    def test_summary_computed_once(self, make_image: Callable[..., Path]) -> None:
        backend = CountingBackend()
        engine = ColorSummaryEngine(make_image(), backend)

        first = engine.average_color()
        second = engine.average_color()
        assert first is second
        assert backend.decodes == 1

    def test_each_summary_decodes_fresh(self, make_image: Callable[..., Path]) -> None:
        backend = CountingBackend()
        engine = ColorSummaryEngine(make_image(size=(16, 8)), backend)

        engine.color_stripes_horizontal()
        grid = engine.color_grid()
        engine.average_color()
        assert backend.decodes == 3
        # The grid is not affected by the earlier 1x5 resize
        assert len(grid) == 8

        engine.color_grid()
        engine.color_stripes_horizontal()
        assert backend.decodes == 3

    def test_concurrent_callers_share_one_computation(
        self, make_image: Callable[..., Path]
    ) -> None:
        backend = CountingBackend(delay=0.05)
        engine = ColorSummaryEngine(make_image(), backend)

        with ThreadPoolExecutor(max_workers=8) as executor:
            results = list(executor.map(lambda _: engine.average_color(), range(8)))

        assert backend.decodes == 1
        assert all(result is results[0] for result in results)


class TestUnreadableSources:
    """Tests for absorbed decode failures."""

    def _assert_empty(self, engine: ColorSummaryEngine) -> None:
        assert engine.average_color() is None
        assert engine.average_grayscale() is None
        assert engine.color_stripes_horizontal() == ()
        assert engine.color_grid() == ()
        assert engine.is_dark() is None
        assert engine.original_dimensions() is None
        assert engine.summarize().empty
        assert not engine.available

    def test_missing_file(self, temp_dir: Path) -> None:
        self._assert_empty(ColorSummaryEngine(temp_dir / "missing.png", PillowBackend()))

    def test_empty_bytes(self) -> None:
        self._assert_empty(ColorSummaryEngine(b"", PillowBackend()))

    def test_not_an_image(self, temp_dir: Path) -> None:
        path = temp_dir / "fake.png"
        path.write_text("definitely not a png")
        self._assert_empty(ColorSummaryEngine(path, PillowBackend()))

    def test_no_backend(self, make_image: Callable[..., Path]) -> None:
        engine = ColorSummaryEngine(make_image(), None)
        self._assert_empty(engine)
        assert engine.summarize().backend is None

    def test_oversized_image(self) -> None:
        # 400M pixels is past the decompression bomb limit
        self._assert_empty(ColorSummaryEngine(png_header(20000, 20000), PillowBackend()))

    def test_unreadable_decoded_once(self, temp_dir: Path) -> None:
        backend = CountingBackend()
        engine = ColorSummaryEngine(temp_dir / "missing.png", backend)
        engine.average_color()
        engine.color_grid()
        engine.color_stripes_horizontal()
        assert backend.decodes == 1

    def test_out_of_bounds_read_raises(self, make_image: Callable[..., Path]) -> None:
        backend = PillowBackend()
        handle = backend.decode(make_image(size=(4, 3)))
        with pytest.raises(PixelOutOfBoundsError):
            backend.read_pixel(handle, 4, 0)
        with pytest.raises(IndexError):
            backend.read_pixel(handle, 0, 3)
