from __future__ import annotations

"""
Grid store: the authoritative, mutable knot grid.

Rows are immutable tuples. A paint application rebuilds only the rows it
changes, so a snapshot taken earlier still shares every untouched row and
changed_rows() can diff by identity.
"""

from typing import List, Optional

from .colour_math import blend
from .core_types import Colour, Grid, Row


class GridStore:
    """Holds one Grid of fixed rows x cols."""

    def __init__(self, rows: int, cols: int) -> None:
        self._rows = int(rows)
        self._cols = int(cols)
        self._cells: List[Row] = []

    @property
    def rows(self) -> int:
        return self._rows

    @property
    def cols(self) -> int:
        return self._cols

    @property
    def is_empty(self) -> bool:
        return not self._cells

    def resize(self, rows: int, cols: int) -> None:
        """Change the expected dimensions. The current grid is dropped."""
        self._rows = int(rows)
        self._cols = int(cols)
        self._cells = []

    def replace(self, grid: Grid) -> None:
        """
        Swap in a whole grid.

        Raises:
          ValueError: grid dimensions differ from the store's rows/cols.
        """
        if (grid.rows, grid.cols) != (self._rows, self._cols):
            raise ValueError(
                f"grid is {grid.cols}x{grid.rows}, store expects {self._cols}x{self._rows}"
            )
        self._cells = list(grid.cells)

    def get(self, row: int, col: int) -> Colour:
        if self.is_empty:
            raise LookupError("grid store is empty")
        if not self.in_bounds(row, col):
            raise IndexError(f"cell ({row}, {col}) outside {self._rows}x{self._cols}")
        return self._cells[row][col]

    def in_bounds(self, row: int, col: int) -> bool:
        return 0 <= row < self._rows and 0 <= col < self._cols

    def snapshot(self) -> Optional[Grid]:
        """Current grid as an immutable value (rows are shared, not copied)."""
        if self.is_empty:
            return None
        return Grid(cells=tuple(self._cells), rows=self._rows, cols=self._cols)

    def changed_rows(self, previous: Optional[Grid]) -> List[int]:
        """Row indices whose row object is not the one held by `previous`."""
        if previous is None or (previous.rows, previous.cols) != (
            self._rows,
            self._cols,
        ):
            return list(range(len(self._cells)))
        if self.is_empty:
            return []
        return [
            y
            for y, (now, before) in enumerate(zip(self._cells, previous.cells))
            if now is not before
        ]

    def paint_region(
        self,
        center_row: int,
        center_col: int,
        size: int,
        paint_colour: Colour,
        alpha: float,
    ) -> bool:
        """
        Blend paint_colour into the size x size square around the centre cell.

        The square starts at centre - size // 2, so even sizes reach one cell
        further up/left than down/right. Out-of-bounds cells are skipped and
        cells whose hex would not change are left untouched.

        Returns:
          True if at least one cell changed.
        """
        if self.is_empty or size < 1:
            return False
        offset = size // 2
        changed = False
        for dy in range(size):
            y = center_row - offset + dy
            if not 0 <= y < self._rows:
                continue
            current = self._cells[y]
            new_row: Optional[List[Colour]] = None
            for dx in range(size):
                x = center_col - offset + dx
                if not 0 <= x < self._cols:
                    continue
                cell = current[x]
                blended = blend(cell, paint_colour, alpha)
                if blended.hex == cell.hex:
                    continue
                if new_row is None:
                    new_row = list(current)
                new_row[x] = blended
            if new_row is not None:
                self._cells[y] = tuple(new_row)
                changed = True
        return changed


__all__ = ["GridStore"]
