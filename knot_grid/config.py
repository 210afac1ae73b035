from __future__ import annotations

"""
Grid configuration and automatic sizing.

Exports:
  GridConfig (frozen; change with .with_changes(**kw))
  RESAMPLE_FIELDS: config fields whose change forces a resample
  suggest_grid_size(width, height) -> (rows, cols)
  nearest_aspect_ratio(width, height) -> str
"""

import dataclasses
from dataclasses import dataclass, field
from typing import Any, Dict, Tuple

from .palette_data import Palette, default_palette

DEFAULT_ROWS = 80
DEFAULT_COLS = 60
MAX_GRID_DIM = 500
MIN_CONTRAST = 0.5
MAX_CONTRAST = 2.0

# Auto sizing on load
AUTO_COLS = 100
AUTO_SMALL_WIDTH = 150

# Label -> height / width
ASPECT_RATIOS: Dict[str, float] = {
    "1:1": 1.0,
    "3:4": 4.0 / 3.0,
    "4:3": 3.0 / 4.0,
    "9:16": 16.0 / 9.0,
    "16:9": 9.0 / 16.0,
}

RESAMPLE_FIELDS = ("rows", "cols", "contrast", "use_palette", "palette")


@dataclass(frozen=True)
class GridConfig:
    """Knot grid settings owned by a session."""

    rows: int = DEFAULT_ROWS
    cols: int = DEFAULT_COLS
    contrast: float = 1.0
    use_palette: bool = False
    palette: Palette = field(default_factory=default_palette)
    show_grid: bool = True
    show_numbers: bool = False

    def __post_init__(self) -> None:
        for name in ("rows", "cols"):
            v = getattr(self, name)
            if not isinstance(v, int) or isinstance(v, bool):
                raise TypeError(f"{name} must be an int, got {type(v).__name__}")
            if not 1 <= v <= MAX_GRID_DIM:
                raise ValueError(f"{name}={v} outside 1..{MAX_GRID_DIM}")
        if not MIN_CONTRAST <= float(self.contrast) <= MAX_CONTRAST:
            raise ValueError(
                f"contrast={self.contrast} outside {MIN_CONTRAST}..{MAX_CONTRAST}"
            )
        object.__setattr__(self, "contrast", float(self.contrast))

    def with_changes(self, **changes: Any) -> "GridConfig":
        return dataclasses.replace(self, **changes)

    def needs_resample(self, other: "GridConfig") -> bool:
        """True if any field that feeds the rasterizer/mapper differs."""
        return any(getattr(self, f) != getattr(other, f) for f in RESAMPLE_FIELDS)


def suggest_grid_size(width: int, height: int) -> Tuple[int, int]:
    """
    Grid size for a freshly loaded image: one knot per pixel for narrow images,
    otherwise AUTO_COLS wide; rows follow the aspect ratio.
    Returns (rows, cols).
    """
    if width <= 0 or height <= 0:
        raise ValueError(f"invalid image size {width}x{height}")
    cols = width if width < AUTO_SMALL_WIDTH else AUTO_COLS
    rows = int(round(cols * (height / float(width))))
    rows = max(1, min(MAX_GRID_DIM, rows))
    return rows, cols


def nearest_aspect_ratio(width: int, height: int) -> str:
    """Closest preset aspect label by height/width; the first preset wins ties."""
    aspect = height / float(width)
    best = "1:1"
    best_err = float("inf")
    for label, value in ASPECT_RATIOS.items():
        err = abs(aspect - value)
        if err < best_err:
            best_err = err
            best = label
    return best


__all__ = [
    "DEFAULT_ROWS",
    "DEFAULT_COLS",
    "MAX_GRID_DIM",
    "MIN_CONTRAST",
    "MAX_CONTRAST",
    "ASPECT_RATIOS",
    "RESAMPLE_FIELDS",
    "GridConfig",
    "suggest_grid_size",
    "nearest_aspect_ratio",
]
