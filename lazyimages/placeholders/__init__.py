"""Placeholder SVG rendering and HTML rewriting."""

from lazyimages.placeholders.html import (
    PlaceholderRewriter,
    StoreResolver,
    build_img_tag,
    parse_img_attributes,
)
from lazyimages.placeholders.svg import (
    render_flat_svg,
    render_grid_svg,
    render_placeholder,
    render_stripes_svg,
    to_data_uri,
)

__all__ = [
    "PlaceholderRewriter",
    "StoreResolver",
    "build_img_tag",
    "parse_img_attributes",
    "render_flat_svg",
    "render_grid_svg",
    "render_placeholder",
    "render_stripes_svg",
    "to_data_uri",
]
