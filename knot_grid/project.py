from __future__ import annotations

"""
Project snapshots: {grid, config, source ref, aspect ratio, timestamp}.

A snapshot restores the edited grid verbatim; nothing is re-rasterized.
Serialised as plain JSON with knots stored as '#rrggbb' strings per row.
"""

import json
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from .config import GridConfig
from .core_types import Colour, Grid
from .palette_data import Palette

SNAPSHOT_VERSION = 1


def _now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


@dataclass(frozen=True)
class ProjectSnapshot:
    grid: Grid
    config: GridConfig
    source_ref: Optional[str] = None
    aspect_ratio: str = "3:4"
    timestamp: str = field(default_factory=_now_iso)

    def __post_init__(self) -> None:
        if (self.grid.rows, self.grid.cols) != (self.config.rows, self.config.cols):
            raise ValueError(
                f"snapshot grid is {self.grid.cols}x{self.grid.rows} but config says "
                f"{self.config.cols}x{self.config.rows}"
            )

    def to_dict(self) -> Dict[str, Any]:
        cfg = self.config
        return {
            "version": SNAPSHOT_VERSION,
            "pixels": [[c.hex for c in row] for row in self.grid.cells],
            "gridConfig": {
                "rows": cfg.rows,
                "cols": cfg.cols,
                "contrast": cfg.contrast,
                "usePalette": cfg.use_palette,
                "palette": cfg.palette.hexes,
                "showGrid": cfg.show_grid,
                "showNumbers": cfg.show_numbers,
            },
            "imageSrc": self.source_ref,
            "aspectRatio": self.aspect_ratio,
            "timestamp": self.timestamp,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ProjectSnapshot":
        """
        Raises:
          ValueError: malformed snapshot (missing keys, bad colours, bad shape).
        """
        try:
            cfg_raw = data["gridConfig"]
            pixel_rows: List[List[str]] = data["pixels"]
        except (KeyError, TypeError) as e:
            raise ValueError(f"malformed project snapshot: {e}") from e
        if not isinstance(cfg_raw, dict) or not isinstance(pixel_rows, list):
            raise ValueError("malformed project snapshot: wrong field types")
        version = data.get("version", SNAPSHOT_VERSION)
        if version != SNAPSHOT_VERSION:
            raise ValueError(
                f"project snapshot version {version} not supported (expected {SNAPSHOT_VERSION})"
            )

        palette_colours = []
        for hx in cfg_raw.get("palette", []):
            colour = Colour.from_hex(hx)
            if colour is None:
                raise ValueError(f"invalid palette colour '{hx}' in snapshot")
            palette_colours.append(colour)

        try:
            config = GridConfig(
                rows=int(cfg_raw["rows"]),
                cols=int(cfg_raw["cols"]),
                contrast=float(cfg_raw.get("contrast", 1.0)),
                use_palette=bool(cfg_raw.get("usePalette", False)),
                palette=Palette(tuple(palette_colours)),
                show_grid=bool(cfg_raw.get("showGrid", True)),
                show_numbers=bool(cfg_raw.get("showNumbers", False)),
            )
        except (KeyError, TypeError) as e:
            raise ValueError(f"malformed grid config in snapshot: {e}") from e

        cache: Dict[str, Colour] = {}
        cells = []
        for y, row in enumerate(pixel_rows):
            out_row = []
            for hx in row:
                colour = cache.get(hx)
                if colour is None:
                    parsed = Colour.from_hex(hx)
                    if parsed is None:
                        raise ValueError(f"invalid knot colour '{hx}' in row {y}")
                    colour = cache[hx] = parsed
                out_row.append(colour)
            cells.append(tuple(out_row))
        grid = Grid(cells=tuple(cells), rows=config.rows, cols=config.cols)

        return cls(
            grid=grid,
            config=config,
            source_ref=data.get("imageSrc"),
            aspect_ratio=data.get("aspectRatio") or "3:4",
            timestamp=data.get("timestamp") or _now_iso(),
        )

    def to_json(self, indent: Optional[int] = None) -> str:
        return json.dumps(self.to_dict(), indent=indent)

    @classmethod
    def from_json(cls, text: str) -> "ProjectSnapshot":
        try:
            data = json.loads(text)
        except json.JSONDecodeError as e:
            raise ValueError(f"project snapshot is not valid JSON: {e}") from e
        if not isinstance(data, dict):
            raise ValueError("project snapshot must be a JSON object")
        return cls.from_dict(data)


__all__ = ["SNAPSHOT_VERSION", "ProjectSnapshot"]
