"""Image summary model."""

from __future__ import annotations

from pydantic import BaseModel, Field

from lazyimages.summaries.colors import RGBA


class ImageSummary(BaseModel):
    """Color summaries extracted from one image."""

    # Color analysis
    average_color: RGBA | None = Field(default=None, description="Average color")
    average_grayscale: RGBA | None = Field(
        default=None, description="Average color after desaturation"
    )
    is_dark: bool | None = Field(
        default=None, description="True if the average color is dark"
    )
    horizontal_stripes: list[RGBA] = Field(
        default_factory=list, description="Average colors of five bands, top first"
    )
    grid: list[list[RGBA]] = Field(
        default_factory=list,
        description="Cell colors, outer index = column, inner index = row",
    )

    # Dimensions
    original_width: int | None = Field(default=None, description="Source image width")
    original_height: int | None = Field(default=None, description="Source image height")

    backend: str | None = Field(default=None, description="Backend that computed it")

    @property
    def empty(self) -> bool:
        """True if no summary could be computed."""
        return (
            self.average_color is None
            and self.average_grayscale is None
            and not self.horizontal_stripes
            and not self.grid
        )

    @property
    def grid_size(self) -> tuple[int, int]:
        """Return (columns, rows) of the grid."""
        if not self.grid:
            return 0, 0
        return len(self.grid), len(self.grid[0])
