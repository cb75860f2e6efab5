"""lazyimages - Image color summaries and lazy-loading SVG placeholders."""

from lazyimages.placeholders import PlaceholderRewriter, render_placeholder
from lazyimages.summaries import ColorSummaryEngine, ImageSummary, SummaryStore

__version__ = "0.1.0"
__all__ = [
    "ColorSummaryEngine",
    "ImageSummary",
    "PlaceholderRewriter",
    "SummaryStore",
    "render_placeholder",
]
