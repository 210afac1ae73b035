from __future__ import annotations

"""
Paint engine: brush, eraser and dropper over a GridStore.

Tool transitions:
  select(t) with t already active -> NONE
  DROPPER + pointer down on a cell -> brush colour = cell, tool = BRUSH
BRUSH and ERASER paint on pointer down and on moves while the button is held.
The eraser is the brush with white paint.
"""

import dataclasses
import math
from dataclasses import dataclass
from enum import Enum
from typing import Optional, Tuple

from .core_types import BLACK, WHITE, Colour
from .grid_store import GridStore


class Tool(Enum):
    NONE = "none"
    BRUSH = "brush"
    ERASER = "eraser"
    DROPPER = "dropper"


@dataclass(frozen=True)
class ToolState:
    """Session-scoped drawing settings; never affects the rasterizer."""

    active: Tool = Tool.NONE
    brush_colour: Colour = BLACK
    brush_size: int = 1
    opacity: float = 1.0

    def __post_init__(self) -> None:
        if self.brush_size < 1:
            raise ValueError(f"brush_size must be >= 1, got {self.brush_size}")
        if not 0.0 < float(self.opacity) <= 1.0:
            raise ValueError(f"opacity must be in (0, 1], got {self.opacity}")

    def select(self, tool: Tool) -> "ToolState":
        """Activate a tool; selecting the active tool switches back to NONE."""
        return dataclasses.replace(
            self, active=Tool.NONE if tool is self.active else tool
        )

    def with_brush_colour(self, colour: Colour) -> "ToolState":
        return dataclasses.replace(self, brush_colour=colour)

    def with_opacity_percent(self, percent: float) -> "ToolState":
        return dataclasses.replace(self, opacity=float(percent) / 100.0)

    @property
    def paint_colour(self) -> Optional[Colour]:
        if self.active is Tool.BRUSH:
            return self.brush_colour
        if self.active is Tool.ERASER:
            return WHITE
        return None


def cell_from_pixel(x: float, y: float, cell_size: int) -> Tuple[int, int]:
    """Pixel position on the rendered canvas -> (row, col)."""
    return int(math.floor(y / cell_size)), int(math.floor(x / cell_size))


class PaintEngine:
    """Turns pointer events into grid edits."""

    def __init__(self, store: GridStore, tools: Optional[ToolState] = None) -> None:
        self.store = store
        self.tools = tools if tools is not None else ToolState()
        self._button_held = False

    @property
    def button_held(self) -> bool:
        return self._button_held

    def select_tool(self, tool: Tool) -> Tool:
        self.tools = self.tools.select(tool)
        return self.tools.active

    def pick_colour(self, colour: Colour) -> None:
        """Load a colour into the brush and activate it (dropper / swatch click)."""
        self.tools = dataclasses.replace(
            self.tools, brush_colour=colour, active=Tool.BRUSH
        )

    def pointer_down(self, row: int, col: int) -> bool:
        """Press. Returns True if the grid changed."""
        self._button_held = True
        return self._apply(row, col)

    def pointer_move(self, row: int, col: int) -> bool:
        """Move. Only paints while the button is held; the dropper never fires here."""
        if not self._button_held or self.tools.active is Tool.DROPPER:
            return False
        return self._apply(row, col)

    def pointer_up(self) -> None:
        self._button_held = False

    def pointer_leave(self) -> None:
        """Pointer left the canvas: ends the stroke like a release."""
        self.pointer_up()

    def _apply(self, row: int, col: int) -> bool:
        tool = self.tools.active
        if tool is Tool.NONE or self.store.is_empty:
            return False
        if not self.store.in_bounds(row, col):
            return False

        if tool is Tool.DROPPER:
            self.pick_colour(self.store.get(row, col))
            return False

        paint = self.tools.paint_colour
        if paint is None:
            return False
        return self.store.paint_region(
            row, col, self.tools.brush_size, paint, self.tools.opacity
        )


__all__ = ["Tool", "ToolState", "cell_from_pixel", "PaintEngine"]
