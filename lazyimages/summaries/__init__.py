"""Image color summaries: engine, backends, storage and batch generation."""

from lazyimages.summaries.cache import SummaryEntry, SummaryStats, SummaryStore
from lazyimages.summaries.colors import (
    RGBA,
    greatest_common_divisor,
    hex_to_rgba,
    is_dark,
    rgb_to_hex,
    to_css_rgba,
    to_hex2,
)
from lazyimages.summaries.config import BackendName, PlaceholderStyle, SummaryConfig
from lazyimages.summaries.engine import ColorSummaryEngine, SummaryKind, grid_dimensions
from lazyimages.summaries.generator import GenerationResult, SummaryGenerator
from lazyimages.summaries.models import ImageSummary

__all__ = [
    "BackendName",
    "ColorSummaryEngine",
    "GenerationResult",
    "ImageSummary",
    "PlaceholderStyle",
    "RGBA",
    "SummaryConfig",
    "SummaryEntry",
    "SummaryGenerator",
    "SummaryKind",
    "SummaryStats",
    "SummaryStore",
    "greatest_common_divisor",
    "grid_dimensions",
    "hex_to_rgba",
    "is_dark",
    "rgb_to_hex",
    "to_css_rgba",
    "to_hex2",
]
