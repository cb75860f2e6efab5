"""Image URL helpers."""

from __future__ import annotations

import re

# name-e1234-300x200.jpg?ver=2 -> name.jpg
_SIZED_IMAGE_URL = re.compile(
    r"^(.+?)(?:-e\d+)?(?:-\d+x\d+)?\.(jpg|jpeg|png|gif)(?:(?:\?|#).+)?$",
    re.IGNORECASE,
)


def normalize_image_url(url: str) -> str:
    """Strip edit and size suffixes plus query strings from an image URL.

    URLs that do not end in a jpg, jpeg, png or gif file are returned unchanged.
    """
    return _SIZED_IMAGE_URL.sub(r"\1.\2", url)
