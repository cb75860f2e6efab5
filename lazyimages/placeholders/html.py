"""Replace <img> tags in HTML fragments with lazy-loading placeholders."""

from __future__ import annotations

import logging
import re
from html import escape, unescape
from typing import Callable

from lazyimages.placeholders.svg import render_placeholder, to_data_uri
from lazyimages.summaries.cache import SummaryStore
from lazyimages.summaries.config import PlaceholderStyle
from lazyimages.summaries.models import ImageSummary

logger = logging.getLogger(__name__)

IMG_TAG = re.compile(r"<img [^>]+>", re.IGNORECASE)
IMG_ATTRIBUTE = re.compile(
    r"""\s([\w-]+)(?:\s*=\s*(?:(["'])(.*?)\2|([^\s"'>]+)))?""", re.DOTALL
)

NOSCRIPT_FALLBACK = (
    '<noscript><form><button name="noscript-load-images" value="true">'
    "Load Images</button></form></noscript>"
)

SummaryResolver = Callable[[dict[str, str]], "ImageSummary | None"]


def parse_img_attributes(tag: str) -> dict[str, str]:
    """Parse the attributes of an <img> tag, in order.

    Attributes without a value map to an empty string.
    """
    attrs: dict[str, str] = {}
    body = re.sub(r"^<img", "", tag, flags=re.IGNORECASE).rstrip(">").rstrip("/")
    for match in IMG_ATTRIBUTE.finditer(body):
        name, _, quoted, bare = match.groups()
        value = quoted if quoted is not None else bare
        attrs[name.lower()] = unescape(value) if value is not None else ""
    return attrs


def build_img_tag(attrs: dict[str, str]) -> str:
    """Render attributes back into a self-closing <img> tag."""
    rendered = " ".join(
        f'{escape(name, quote=True)}="{escape(value, quote=True)}"'
        for name, value in attrs.items()
    )
    return f"<img {rendered} />"


class StoreResolver:
    """Resolve <img> attributes to a stored summary.

    Looks for an image id in the class attribute first, then falls back to
    looking up the src URL.
    """

    def __init__(
        self,
        store: SummaryStore,
        id_class_pattern: str = r"wp-image-([0-9]+)",
    ) -> None:
        self.store = store
        self.id_class_pattern = re.compile(id_class_pattern, re.IGNORECASE)

    def resolve_id(self, attrs: dict[str, str]) -> str | None:
        match = self.id_class_pattern.search(attrs.get("class", ""))
        if match:
            return match.group(1)
        src = attrs.get("src")
        if src:
            return self.store.find_by_url(src)
        return None

    def __call__(self, attrs: dict[str, str]) -> ImageSummary | None:
        image_id = self.resolve_id(attrs)
        if image_id is None:
            return None
        return self.store.get(image_id)


class PlaceholderRewriter:
    """Swap image sources for SVG placeholders.

    The real src, srcset and sizes move to data-* attributes so a client-side
    loader can restore them once the image scrolls into view.
    """

    def __init__(
        self,
        resolver: SummaryResolver,
        style: PlaceholderStyle | str = PlaceholderStyle.COLOR_BLOCK_GRID,
        noscript_fallback: bool = True,
    ) -> None:
        self.resolver = resolver
        self.style = PlaceholderStyle(style)
        self.noscript_fallback = noscript_fallback

    def rewrite(self, content: str, load_images: bool = False) -> str:
        """Replace every resolvable <img> tag in content.

        Args:
            content: HTML fragment
            load_images: If True, images are wanted right away and the
                content is returned unchanged.

        Returns:
            The rewritten HTML.
        """
        if load_images:
            return content
        return IMG_TAG.sub(self._replace_tag, content)

    def rewrite_tag(self, tag: str) -> str | None:
        """Return the placeholder markup for one tag, or None to keep it."""
        attrs = parse_img_attributes(tag)
        summary = self.resolver(attrs)
        if summary is None:
            logger.debug(f"No summary for image {attrs.get('src')!r}")
            return None

        svg = render_placeholder(summary, self.style, attrs.get("width"), attrs.get("height"))
        if not svg:
            return None

        if "src" in attrs:
            attrs["data-src"] = attrs["src"]
            attrs["src"] = to_data_uri(svg)
        if "srcset" in attrs:
            attrs["data-srcset"] = attrs.pop("srcset")
        if "sizes" in attrs:
            attrs["data-sizes"] = attrs.pop("sizes")

        markup = build_img_tag(attrs)
        if self.noscript_fallback:
            markup += NOSCRIPT_FALLBACK
        return markup

    def _replace_tag(self, match: re.Match[str]) -> str:
        replacement = self.rewrite_tag(match.group(0))
        return match.group(0) if replacement is None else replacement
