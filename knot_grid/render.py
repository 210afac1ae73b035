from __future__ import annotations

"""
Grid renderer.

Draws each knot as a cell_size square, then optional overlays:
  - thin lines on every cell boundary
  - heavy lines every MAJOR_LINE_EVERY boundaries
  - dashed gold crosshair through the grid centre
  - column numbers above the heavy lines (in a label band on top)
"""

from typing import List, Optional, Tuple

from PIL import Image, ImageDraw, ImageFont

from .core_types import Grid

DEFAULT_CELL_SIZE = 20
MAJOR_LINE_EVERY = 10
LABEL_BAND = 14

BACKGROUND: Tuple[int, int, int] = (255, 255, 255)
THIN_LINE: Tuple[int, int, int, int] = (0, 0, 0, 38)  # 15%
HEAVY_LINE: Tuple[int, int, int, int] = (0, 0, 0, 204)  # 80%
CENTRE_LINE: Tuple[int, int, int, int] = (212, 175, 55, 204)
LABEL_INK: Tuple[int, int, int] = (0, 0, 0)
DASH = (5, 5)  # on, off


def _boundaries(count: int, cell_size: int, every: int = 1) -> List[int]:
    """Pixel offsets of every `every`-th cell boundary, clipped to the last pixel."""
    last = count * cell_size - 1
    return [min(i * cell_size, last) for i in range(0, count + 1, every)]


def _dashed_line(
    draw: ImageDraw.ImageDraw,
    start: Tuple[int, int],
    end: Tuple[int, int],
    fill: Tuple[int, int, int, int],
    width: int,
) -> None:
    """Axis-aligned dashed line."""
    on, off = DASH
    x0, y0 = start
    x1, y1 = end
    horizontal = y0 == y1
    length = abs(x1 - x0) if horizontal else abs(y1 - y0)
    pos = 0
    while pos < length:
        seg_end = min(pos + on, length)
        if horizontal:
            draw.line([(x0 + pos, y0), (x0 + seg_end, y0)], fill=fill, width=width)
        else:
            draw.line([(x0, y0 + pos), (x0, y0 + seg_end)], fill=fill, width=width)
        pos += on + off


def _overlay(size: Tuple[int, int]) -> Tuple[Image.Image, ImageDraw.ImageDraw]:
    layer = Image.new("RGBA", size, (0, 0, 0, 0))
    return layer, ImageDraw.Draw(layer)


def render_cells(grid: Grid, cell_size: int = DEFAULT_CELL_SIZE) -> Image.Image:
    """Plain cells, no overlays."""
    width = grid.cols * cell_size
    height = grid.rows * cell_size
    img = Image.new("RGB", (width, height), BACKGROUND)
    draw = ImageDraw.Draw(img)
    for y, row in enumerate(grid.cells):
        top = y * cell_size
        for x, colour in enumerate(row):
            left = x * cell_size
            draw.rectangle(
                [left, top, left + cell_size - 1, top + cell_size - 1],
                fill=colour.rgb,
            )
    return img


def render_grid(
    grid: Optional[Grid],
    cell_size: int = DEFAULT_CELL_SIZE,
    show_grid: bool = True,
    show_numbers: bool = False,
) -> Optional[Image.Image]:
    """
    Render a knot grid to an RGB image.

    Returns None for a missing or empty grid. With show_grid and show_numbers
    the image gains a LABEL_BAND pixel strip on top holding column numbers.
    """
    if grid is None or grid.is_empty:
        return None
    if cell_size < 1:
        raise ValueError(f"cell_size must be >= 1, got {cell_size}")

    img = render_cells(grid, cell_size)
    width, height = img.size

    if show_grid:
        base = img.convert("RGBA")

        thin, thin_draw = _overlay(base.size)
        for x in _boundaries(grid.cols, cell_size):
            thin_draw.line([(x, 0), (x, height - 1)], fill=THIN_LINE, width=1)
        for y in _boundaries(grid.rows, cell_size):
            thin_draw.line([(0, y), (width - 1, y)], fill=THIN_LINE, width=1)
        base = Image.alpha_composite(base, thin)

        heavy, heavy_draw = _overlay(base.size)
        for x in _boundaries(grid.cols, cell_size, MAJOR_LINE_EVERY):
            heavy_draw.line([(x, 0), (x, height - 1)], fill=HEAVY_LINE, width=2)
        for y in _boundaries(grid.rows, cell_size, MAJOR_LINE_EVERY):
            heavy_draw.line([(0, y), (width - 1, y)], fill=HEAVY_LINE, width=2)
        base = Image.alpha_composite(base, heavy)

        centre, centre_draw = _overlay(base.size)
        mid_x = min(int(grid.cols / 2 * cell_size), width - 1)
        mid_y = min(int(grid.rows / 2 * cell_size), height - 1)
        _dashed_line(centre_draw, (mid_x, 0), (mid_x, height - 1), CENTRE_LINE, 2)
        _dashed_line(centre_draw, (0, mid_y), (width - 1, mid_y), CENTRE_LINE, 2)
        img = Image.alpha_composite(base, centre).convert("RGB")

        if show_numbers:
            img = _add_column_labels(img, grid.cols, cell_size)

    return img


def _add_column_labels(img: Image.Image, cols: int, cell_size: int) -> Image.Image:
    """Add a label band with a number above each interior heavy column line."""
    width, height = img.size
    out = Image.new("RGB", (width, height + LABEL_BAND), BACKGROUND)
    out.paste(img, (0, LABEL_BAND))
    draw = ImageDraw.Draw(out)
    font = ImageFont.load_default()
    for col in range(MAJOR_LINE_EVERY, cols, MAJOR_LINE_EVERY):
        text = str(col)
        bbox = draw.textbbox((0, 0), text, font=font)
        tw, th = bbox[2] - bbox[0], bbox[3] - bbox[1]
        tx = col * cell_size - tw // 2
        ty = max(0, LABEL_BAND - th - 2 - bbox[1])
        draw.text((tx, ty), text, fill=LABEL_INK, font=font)
    return out


__all__ = [
    "DEFAULT_CELL_SIZE",
    "MAJOR_LINE_EVERY",
    "LABEL_BAND",
    "render_cells",
    "render_grid",
]
