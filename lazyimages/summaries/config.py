"""Summary configuration and placeholder style definitions."""

from __future__ import annotations

from enum import Enum
from pathlib import Path

import yaml
from pydantic import BaseModel, Field

# Stripe count and grid bounds are fixed so stored summaries stay comparable
STRIPE_COUNT = 5
GRID_MAX_SIZE = 16
GRID_MIN_SIZE = 8


class BackendName(str, Enum):
    """Imaging library used to decode and resample images."""

    AUTO = "auto"
    PILLOW = "pillow"
    OPENCV = "opencv"


class PlaceholderStyle(str, Enum):
    """How a summary is rendered into a placeholder SVG."""

    COLOR_BLOCK_GRID = "color-block-grid"
    COLOR_BLOCK_HORIZONTAL = "color-block-horizontal"
    AVERAGE_COLOR = "average-color"
    AVERAGE_GRAYSCALE = "average-grayscale"


class SummaryConfig(BaseModel):
    """Configuration for summary generation and placeholder rendering."""

    backend: BackendName = Field(
        default=BackendName.AUTO, description="Imaging backend to use"
    )
    placeholder_style: PlaceholderStyle = Field(
        default=PlaceholderStyle.COLOR_BLOCK_GRID,
        description="Placeholder style used when rewriting HTML",
    )
    store_path: Path | None = Field(
        default=None, description="SQLite file holding computed summaries"
    )
    workers: int = Field(default=4, ge=1, description="Number of parallel workers")

    @property
    def supported_formats(self) -> set[str]:
        """File extensions that can be summarized."""
        return {"jpg", "jpeg", "png", "gif", "webp", "bmp"}

    def get_store_path(self, base_dir: Path) -> Path:
        """Get the summary database path, defaulting to base_dir/summaries.db."""
        if self.store_path is not None:
            return self.store_path
        return base_dir / "summaries.db"

    @classmethod
    def from_yaml(cls, path: Path) -> "SummaryConfig":
        """Load configuration from a YAML file."""
        with open(path) as f:
            data = yaml.safe_load(f) or {}
        return cls.model_validate(data)

    @classmethod
    def load(cls, path: Path | None = None) -> "SummaryConfig":
        """Load configuration from path if it exists, else defaults."""
        if path is not None and path.exists():
            return cls.from_yaml(path)
        return cls()
