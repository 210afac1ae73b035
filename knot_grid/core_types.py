from __future__ import annotations

"""
Core type aliases, small value objects, and lightweight helpers.
"""

import numbers
import re
from dataclasses import dataclass, field
from typing import Iterable, Optional, Sequence, Tuple

import numpy as np
from numpy.typing import NDArray

# Basic aliases

RGBTuple = Tuple[int, int, int]
HexStr = str

U8Image = NDArray[np.uint8]  # (H, W, 3)
F32Image = NDArray[np.float32]  # (H, W, 3), channel values 0..255

_HEX_RE = re.compile(r"^#?([0-9a-f]{2})([0-9a-f]{2})([0-9a-f]{2})$", re.IGNORECASE)


# Small helpers


def clamp_value(value: float, lo: float, hi: float) -> float:
    """Clamp value to [lo, hi]."""
    return lo if value < lo else hi if value > hi else value


def round_half_up(value: float) -> int:
    """Round to nearest int with .5 going up (matches canvas/JS rounding)."""
    return int(np.floor(value + 0.5))


def rgb_to_hex(rgb: RGBTuple) -> HexStr:
    """RGB tuple to lowercase hex string '#rrggbb'."""
    return f"#{rgb[0]:02x}{rgb[1]:02x}{rgb[2]:02x}"


def hex_to_rgb(hex_str: str) -> Optional[RGBTuple]:
    """
    Parse 'rrggbb' or '#rrggbb' (case-insensitive) into an RGB tuple.
    Returns None for anything else; callers treat that as an invalid colour.
    """
    m = _HEX_RE.match(hex_str.strip()) if isinstance(hex_str, str) else None
    if m is None:
        return None
    return (int(m.group(1), 16), int(m.group(2), 16), int(m.group(3), 16))


# Value objects


@dataclass(frozen=True)
class Colour:
    """One knot colour. `hex` is derived from the channels, never set directly."""

    r: int
    g: int
    b: int
    hex: HexStr = field(init=False, compare=False)

    def __post_init__(self) -> None:
        for name in ("r", "g", "b"):
            v = getattr(self, name)
            if isinstance(v, bool) or not isinstance(v, numbers.Integral):
                raise TypeError(f"channel {name} must be an int, got {v!r}")
            if not 0 <= int(v) <= 255:
                raise ValueError(f"channel {name}={v} outside 0..255")
            object.__setattr__(self, name, int(v))
        object.__setattr__(self, "hex", rgb_to_hex(self.rgb))

    @property
    def rgb(self) -> RGBTuple:
        return (self.r, self.g, self.b)

    @classmethod
    def from_hex(cls, hex_str: str) -> Optional["Colour"]:
        """Parse a hex string; None when it is not exactly six hex digits."""
        rgb = hex_to_rgb(hex_str)
        return None if rgb is None else cls(*rgb)

    @classmethod
    def from_rgb(cls, rgb: Sequence[int]) -> "Colour":
        return cls(int(rgb[0]), int(rgb[1]), int(rgb[2]))


WHITE = Colour(255, 255, 255)
BLACK = Colour(0, 0, 0)

Row = Tuple[Colour, ...]


@dataclass(frozen=True)
class Grid:
    """
    Rectangular row-major grid of knots.

    Rows are tuples so they can be shared between grids and compared by
    identity; a paint stroke only replaces the rows it actually touches.
    """

    cells: Tuple[Row, ...]
    rows: int
    cols: int

    def __post_init__(self) -> None:
        if len(self.cells) != self.rows:
            raise ValueError(f"grid has {len(self.cells)} rows, expected {self.rows}")
        for y, row in enumerate(self.cells):
            if len(row) != self.cols:
                raise ValueError(
                    f"grid row {y} has {len(row)} cells, expected {self.cols}"
                )

    @classmethod
    def from_rows(cls, rows: Iterable[Iterable[Colour]]) -> "Grid":
        cells = tuple(tuple(row) for row in rows)
        n_cols = len(cells[0]) if cells else 0
        return cls(cells=cells, rows=len(cells), cols=n_cols)

    @classmethod
    def filled(cls, rows: int, cols: int, colour: Colour = WHITE) -> "Grid":
        row = tuple([colour] * cols)
        return cls(cells=tuple(row for _ in range(rows)), rows=rows, cols=cols)

    @property
    def is_empty(self) -> bool:
        return self.rows == 0 or self.cols == 0

    def get(self, row: int, col: int) -> Colour:
        return self.cells[row][col]


# Array conversions


def grid_from_array(rgb: U8Image) -> Grid:
    """Build a Grid from a uint8 (rows, cols, 3) array. Equal colours share one object."""
    rgb = assert_u8_image_rgb(rgb)
    cache: dict = {}
    cells = []
    for row in rgb[..., :3].tolist():
        out_row = []
        for r, g, b in row:
            key = (r, g, b)
            colour = cache.get(key)
            if colour is None:
                colour = Colour(r, g, b)
                cache[key] = colour
            out_row.append(colour)
        cells.append(tuple(out_row))
    return Grid(cells=tuple(cells), rows=rgb.shape[0], cols=rgb.shape[1])


def grid_to_array(grid: Grid) -> U8Image:
    """Grid to a uint8 (rows, cols, 3) array."""
    out = np.zeros((grid.rows, grid.cols, 3), dtype=np.uint8)
    if grid.is_empty:
        return out
    for y, row in enumerate(grid.cells):
        out[y] = [c.rgb for c in row]
    return out


def assert_u8_image_rgb(image: np.ndarray) -> U8Image:
    """Validate a uint8 (H,W,3 or 4) image and return it typed as U8Image."""
    if image.dtype != np.uint8 or image.ndim != 3 or image.shape[-1] < 3:
        raise TypeError("expected uint8 (H,W,3/4) image")
    return image  # type: ignore[return-value]


__all__ = [
    # aliases / types
    "RGBTuple",
    "HexStr",
    "U8Image",
    "F32Image",
    "Row",
    # value objects
    "Colour",
    "Grid",
    "WHITE",
    "BLACK",
    # helpers
    "clamp_value",
    "round_half_up",
    "rgb_to_hex",
    "hex_to_rgb",
    "grid_from_array",
    "grid_to_array",
    "assert_u8_image_rgb",
]
