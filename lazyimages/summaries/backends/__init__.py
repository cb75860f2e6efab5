"""Imaging backends for the summary engine."""

from lazyimages.summaries.backends.base import ImageBackend, ImageSource
from lazyimages.summaries.backends.registry import (
    available_backends,
    get_backend,
    require_backend,
)

__all__ = [
    "ImageBackend",
    "ImageSource",
    "available_backends",
    "get_backend",
    "require_backend",
]
