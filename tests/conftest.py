"""Pytest configuration and shared fixtures."""

from __future__ import annotations

import tempfile
from io import BytesIO
from pathlib import Path
from typing import Callable, Generator

import pytest
from PIL import Image

from lazyimages.summaries import SummaryStore


def image_bytes(
    size: tuple[int, int] = (10, 10),
    color: tuple[int, ...] | str = (255, 0, 0),
    mode: str = "RGB",
    format: str = "PNG",
) -> bytes:
    """Encode a solid-color image."""
    buffer = BytesIO()
    Image.new(mode, size, color).save(buffer, format=format)
    return buffer.getvalue()


@pytest.fixture
def temp_dir() -> Generator[Path, None, None]:
    """Create a temporary directory for tests."""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir)


@pytest.fixture
def make_image(temp_dir: Path) -> Callable[..., Path]:
    """Factory writing solid-color images into the temp directory."""

    def _make(
        name: str = "image.png",
        size: tuple[int, int] = (10, 10),
        color: tuple[int, ...] | str = (255, 0, 0),
        mode: str = "RGB",
    ) -> Path:
        path = temp_dir / name
        Image.new(mode, size, color).save(path)
        return path

    return _make


@pytest.fixture
def split_image() -> Callable[..., bytes]:
    """Factory for PNGs split into two colors, top/bottom or left/right."""

    def _make(
        size: tuple[int, int],
        first: tuple[int, int, int],
        second: tuple[int, int, int],
        vertical: bool = False,
    ) -> bytes:
        width, height = size
        image = Image.new("RGB", size, first)
        if vertical:
            image.paste(second, (width // 2, 0, width, height))
        else:
            image.paste(second, (0, height // 2, width, height))
        buffer = BytesIO()
        image.save(buffer, format="PNG")
        return buffer.getvalue()

    return _make


@pytest.fixture
def store(temp_dir: Path) -> Generator[SummaryStore, None, None]:
    """Create a temporary summary store."""
    summary_store = SummaryStore(temp_dir / "summaries.db")
    yield summary_store
    summary_store.close()


@pytest.fixture
def encode_image() -> Callable[..., bytes]:
    """Factory returning encoded solid-color image bytes."""
    return image_bytes
