"""RGBA color model and color-math helpers.

The helpers are pure functions so stored summaries can be rendered to CSS or
SVG without decoding the source image again.
"""

from __future__ import annotations

import re
from collections.abc import Mapping
from typing import Any, Union

from pydantic import BaseModel, ConfigDict, Field

# Sum of r+g+b above which a color counts as light (roughly half of 765)
DARK_THRESHOLD = 382

_HEX_COLOR = re.compile(r"(?:[0-9a-fA-F]{3}){1,2}")


class RGBA(BaseModel):
    """RGBA color with integer channels and a 0-1 alpha."""

    model_config = ConfigDict(frozen=True)

    r: int = Field(..., ge=0, le=255)
    g: int = Field(..., ge=0, le=255)
    b: int = Field(..., ge=0, le=255)
    a: float = Field(default=1.0, ge=0.0, le=1.0)

    @property
    def hex(self) -> str:
        """Get six character hex representation (no alpha, no '#')."""
        return rgb_to_hex(self)

    @property
    def css(self) -> str:
        """Get CSS rgba() representation."""
        return to_css_rgba(self)

    @property
    def is_dark(self) -> bool:
        return is_dark(self)

    @classmethod
    def from_tuple(cls, values: tuple[int, ...], alpha: float = 1.0) -> "RGBA":
        """Create from an (r, g, b) or (r, g, b, a) tuple of 8-bit values."""
        if len(values) >= 4:
            alpha = values[3] / 255
        return cls(r=int(values[0]), g=int(values[1]), b=int(values[2]), a=alpha)


ColorLike = Union[RGBA, Mapping[str, Any], str]


def _channels(color: RGBA | Mapping[str, Any]) -> Mapping[str, Any]:
    if isinstance(color, RGBA):
        return color.model_dump()
    return color


def is_dark(color: RGBA | Mapping[str, Any]) -> bool:
    """Return True if the color is dark and might need light overlay text."""
    rgb = _channels(color)
    return rgb["r"] + rgb["g"] + rgb["b"] <= DARK_THRESHOLD


def to_hex2(value: int) -> str:
    """Convert an integer 0-255 to a zero-padded two character hex string."""
    return f"{int(value) & 0xFF:02x}"


def rgb_to_hex(color: RGBA | Mapping[str, Any]) -> str:
    """Convert r, g, b channels to a six character hex string."""
    rgb = _channels(color)
    return to_hex2(rgb["r"]) + to_hex2(rgb["g"]) + to_hex2(rgb["b"])


def sanitize_hex(hex_color: str) -> str | None:
    """Strip a leading '#' and return the digits, or None if not 3 or 6 hex digits."""
    if not isinstance(hex_color, str):
        return None
    digits = hex_color.strip()
    if digits.startswith("#"):
        digits = digits[1:]
    if not _HEX_COLOR.fullmatch(digits):
        return None
    return digits


def hex_to_rgba(hex_color: str) -> RGBA:
    """Convert a three or six character hex string to an RGBA color.

    Three character strings duplicate each digit. Alpha is always 1.
    Anything that is not a valid hex color yields opaque black.
    """
    digits = sanitize_hex(hex_color)
    if digits is None:
        return RGBA(r=0, g=0, b=0, a=1.0)
    if len(digits) == 3:
        digits = "".join(c * 2 for c in digits)
    return RGBA(
        r=int(digits[0:2], 16),
        g=int(digits[2:4], 16),
        b=int(digits[4:6], 16),
        a=1.0,
    )


def _absint(value: Any) -> int:
    try:
        return abs(int(float(value)))
    except (TypeError, ValueError, OverflowError):
        return 0


def _format_alpha(alpha: Any) -> str:
    try:
        return format(float(alpha), "g")
    except (TypeError, ValueError):
        return "1"


def to_css_rgba(color: ColorLike | None) -> str:
    """Convert a hex string, RGBA model or partial channel mapping to rgba().

    Missing or non-numeric channels fall back to r=g=b=0 and a=1.
    """
    rgba: dict[str, Any] = {"r": 0, "g": 0, "b": 0, "a": 1}
    if isinstance(color, str):
        if sanitize_hex(color) is not None:
            rgba = hex_to_rgba(color).model_dump()
    elif isinstance(color, (RGBA, Mapping)):
        for channel, value in _channels(color).items():
            if channel in rgba and value is not None:
                rgba[channel] = value

    return "rgba({},{},{},{})".format(
        _absint(rgba["r"]),
        _absint(rgba["g"]),
        _absint(rgba["b"]),
        _format_alpha(rgba["a"]),
    )


def greatest_common_divisor(a: int, b: int) -> int:
    """Euclidean greatest common divisor."""
    if not b:
        return a
    return greatest_common_divisor(b, a % b)
