"""Render image summaries into placeholder SVGs."""

from __future__ import annotations

from collections.abc import Sequence
from html import escape
from urllib.parse import quote

from lazyimages.summaries.colors import ColorLike, to_css_rgba
from lazyimages.summaries.config import PlaceholderStyle
from lazyimages.summaries.models import ImageSummary

SVG_NAMESPACE = "http://www.w3.org/2000/svg"
DATA_URI_PREFIX = "data:image/svg+xml;charset=UTF-8,"


def _size_attributes(width: int | str | None, height: int | str | None) -> str:
    """Render optional width/height attributes as absolute integers."""
    attrs = ""
    if width is not None:
        attrs += f' width="{_absint(width)}"'
    if height is not None:
        attrs += f' height="{_absint(height)}"'
    return attrs


def _absint(value: int | str) -> int:
    try:
        return abs(int(float(value)))
    except (TypeError, ValueError):
        return 0


def _css(color: ColorLike | None) -> str:
    return escape(to_css_rgba(color), quote=True)


def render_grid_svg(
    grid: Sequence[Sequence[ColorLike]],
    average_color: ColorLike | None = None,
    width: int | str | None = None,
    height: int | str | None = None,
) -> str:
    """Render a color grid as one unit rectangle per cell.

    grid[column][row]; the viewBox is "0 0 columns rows".
    """
    if not grid or not grid[0]:
        return ""

    background = f' style="background:{_css(average_color)};"' if average_color else ""
    rects = "".join(
        f'<rect x="{x}" y="{y}" width="1" height="1" stroke="none" fill="{_css(color)}" />'
        for x, column in enumerate(grid)
        for y, color in enumerate(column)
    )
    return (
        f'<svg xmlns="{SVG_NAMESPACE}" preserveAspectRatio="none"'
        f"{_size_attributes(width, height)}"
        f' viewBox="0 0 {len(grid)} {len(grid[0])}"{background}>'
        f"{rects}</svg>"
    )


def render_stripes_svg(
    stripes: Sequence[ColorLike],
    width: int | str | None = None,
    height: int | str | None = None,
) -> str:
    """Render stripes as a linear gradient with hard stops, top band first."""
    if not stripes:
        return ""

    stripe_width = 100 / len(stripes)
    stops = ",".join(
        f"{_css(color)} {int(index * stripe_width)}%,"
        f"{_css(color)} {int((index + 1) * stripe_width)}%"
        for index, color in enumerate(stripes)
    )
    return (
        f'<svg xmlns="{SVG_NAMESPACE}"{_size_attributes(width, height)}'
        f' style="background: linear-gradient({stops})"></svg>'
    )


def render_flat_svg(
    color: ColorLike | None,
    width: int | str | None = None,
    height: int | str | None = None,
) -> str:
    """Render a single color as a flat background."""
    if not color:
        return ""
    return (
        f'<svg xmlns="{SVG_NAMESPACE}"{_size_attributes(width, height)}'
        f' style="background:{_css(color)};"></svg>'
    )


def render_placeholder(
    summary: ImageSummary,
    style: PlaceholderStyle | str = PlaceholderStyle.COLOR_BLOCK_GRID,
    width: int | str | None = None,
    height: int | str | None = None,
) -> str:
    """Render a summary in the given style.

    Returns an empty string when the summary lacks the data the style needs.
    """
    style = PlaceholderStyle(style)

    if style is PlaceholderStyle.COLOR_BLOCK_GRID:
        return render_grid_svg(summary.grid, summary.average_color, width, height)
    if style is PlaceholderStyle.COLOR_BLOCK_HORIZONTAL:
        return render_stripes_svg(summary.horizontal_stripes, width, height)
    if style is PlaceholderStyle.AVERAGE_COLOR:
        return render_flat_svg(summary.average_color, width, height)
    return render_flat_svg(summary.average_grayscale, width, height)


def to_data_uri(svg: str) -> str:
    """Encode an SVG string as a data URI."""
    return DATA_URI_PREFIX + quote(svg, safe="-_.~")
