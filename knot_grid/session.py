from __future__ import annotations

"""
Editing session: the single owner of the source image, grid configuration,
grid store and paint tools.

All mutations take the session lock, so a paint stroke can never interleave
with a resample. Decoding is the only asynchronous step; a resample waits for
the pending decode and swaps in a complete new Grid or nothing at all.
"""

import threading
import time
from concurrent.futures import CancelledError, Executor, Future
from pathlib import Path
from typing import Any, List, Optional, Tuple, Union

from PIL import Image

from .config import GridConfig, nearest_aspect_ratio, suggest_grid_size
from .core_types import Colour, Grid
from .grid_store import GridStore
from .image_io import ImageDecodeError, SourceImage, decode_image_async
from .paint import PaintEngine, Tool, ToolState
from .palette_data import Palette, parse_palette
from .pipeline import build_grid
from .project import ProjectSnapshot
from .quantize import QUANTIZE_DEPTH, QUANTIZE_MAX_DIM, extract_palette
from .render import DEFAULT_CELL_SIZE, render_grid
from .utils import (
    debug_log,
    format_seconds_compact,
    key_value_pairs_to_string,
    warn,
)


class Session:
    def __init__(
        self,
        config: Optional[GridConfig] = None,
        *,
        resample: Union[str, Image.Resampling] = "box",
        executor: Optional[Executor] = None,
        debug: bool = False,
    ) -> None:
        self._config = config if config is not None else GridConfig()
        self._resample = resample
        self._executor = executor
        self.debug = debug

        self.store = GridStore(self._config.rows, self._config.cols)
        self.engine = PaintEngine(self.store)
        self.aspect_ratio = "3:4"

        self._source: Optional[SourceImage] = None
        self._source_ref: Optional[str] = None
        self._pending: Optional["Future[SourceImage]"] = None
        self._auto_size_pending = False
        # False when the pending decode only backs a restored grid
        self._rebuild_pending = True
        self._lock = threading.RLock()

    # Read-only views

    @property
    def config(self) -> GridConfig:
        return self._config

    @property
    def tools(self) -> ToolState:
        return self.engine.tools

    @property
    def source(self) -> Optional[SourceImage]:
        return self._source

    @property
    def grid(self) -> Optional[Grid]:
        return self.store.snapshot()

    @property
    def has_pending_source(self) -> bool:
        return self._pending is not None

    # Source image

    def load_source(
        self, path: Union[str, Path], *, auto_size: bool = True
    ) -> "Future[SourceImage]":
        """
        Start decoding a new source. Supersedes any decode still in flight.
        The grid is rebuilt by the next resample(), which waits for the decode.
        """
        with self._lock:
            if self._pending is not None:
                self._pending.cancel()
            self._pending = decode_image_async(path, self._executor)
            self._auto_size_pending = auto_size
            self._rebuild_pending = True
            return self._pending

    def set_source(self, source: SourceImage, *, auto_size: bool = True) -> Grid:
        """Use an already-decoded source and rebuild the grid from it."""
        with self._lock:
            if self._pending is not None:
                self._pending.cancel()
                self._pending = None
            self._auto_size_pending = False
            config = self._config
            aspect = self.aspect_ratio
            if auto_size:
                rows, cols = suggest_grid_size(source.width, source.height)
                config = config.with_changes(rows=rows, cols=cols)
                aspect = nearest_aspect_ratio(source.width, source.height)
            grid = self._build(source, config)
            self.aspect_ratio = aspect
            self._commit(config, grid, source)
            self._source_ref = source.ref or None
            return grid

    def _resolve_source(self) -> Tuple[Optional[SourceImage], GridConfig, str]:
        """
        Finish any pending decode. Returns (source, config, aspect ratio) where
        config already carries the auto-sized rows/cols for a new source; the
        caller commits them together with the rebuilt grid.

        Raises:
          ImageDecodeError: the decode failed or was cancelled; the previous
            source, config and grid stay in place.
        """
        pending = self._pending
        if pending is None:
            return self._source, self._config, self.aspect_ratio
        self._pending = None
        auto_size = self._auto_size_pending
        self._auto_size_pending = False
        self._rebuild_pending = True
        try:
            source = pending.result()
        except CancelledError as e:
            raise ImageDecodeError("source decode was cancelled") from e
        except ImageDecodeError:
            raise
        except OSError as e:
            raise ImageDecodeError(str(e)) from e

        config = self._config
        aspect = self.aspect_ratio
        if auto_size:
            rows, cols = suggest_grid_size(source.width, source.height)
            config = config.with_changes(rows=rows, cols=cols)
            aspect = nearest_aspect_ratio(source.width, source.height)
        return source, config, aspect

    def wait_for_source(self) -> Optional[SourceImage]:
        """
        Block until a pending decode finishes. A newly loaded source is
        rasterized; a source reloaded by restore() is only attached, so the
        restored grid keeps its edits.
        """
        with self._lock:
            if self._pending is None:
                return self._source
            if self._rebuild_pending:
                self.resample()
            else:
                source, _, _ = self._resolve_source()
                self._adopt_source(source)
            return self._source

    # Pipeline

    def _build(self, source: SourceImage, config: GridConfig) -> Grid:
        t0 = time.perf_counter()
        grid = build_grid(source.pixels, config, self._resample)
        if self.debug:
            debug_log(
                key_value_pairs_to_string(
                    [
                        ("Resampled", f"{config.cols}x{config.rows}"),
                        ("Contrast", config.contrast),
                        ("Palette", config.use_palette),
                        ("Time", format_seconds_compact(time.perf_counter() - t0)),
                    ]
                )
            )
        return grid

    def _adopt_source(self, source: Optional[SourceImage]) -> None:
        if source is not None and source is not self._source:
            self._source = source
            self._source_ref = source.ref or self._source_ref

    def _commit(
        self,
        config: GridConfig,
        grid: Optional[Grid],
        source: Optional[SourceImage] = None,
    ) -> None:
        self._adopt_source(source)
        if (config.rows, config.cols) != (self.store.rows, self.store.cols):
            self.store.resize(config.rows, config.cols)
        self._config = config
        if grid is not None:
            self.store.replace(grid)

    def resample(self) -> Optional[Grid]:
        """
        Rebuild the grid from the source under the current config, discarding
        manual edits. Returns None when there is no source yet.
        """
        with self._lock:
            source, config, aspect = self._resolve_source()
            if source is None:
                return None
            grid = self._build(source, config)
            self.aspect_ratio = aspect
            self._commit(config, grid, source)
            return grid

    def update_config(self, **changes: Any) -> GridConfig:
        """
        Apply config changes. Changes to rows, cols, contrast, use_palette or
        palette rebuild the grid when a source is available; a failed rebuild
        leaves both config and grid unchanged.
        """
        with self._lock:
            candidate = self._config.with_changes(**changes)
            if not self._config.needs_resample(candidate):
                self._config = candidate
                return candidate
            source, base, aspect = self._resolve_source()
            new_config = base.with_changes(**changes)
            grid = self._build(source, new_config) if source is not None else None
            self.aspect_ratio = aspect
            self._commit(new_config, grid, source)
            return new_config

    # Palette editing

    def set_palette(self, palette: Palette) -> GridConfig:
        return self.update_config(palette=palette)

    def apply_preset(self, key: str) -> GridConfig:
        return self.update_config(palette=Palette.from_preset(key))

    def set_palette_hexes(self, hexes: List[str]) -> GridConfig:
        """Replace the palette from hex strings; invalid entries are skipped."""
        return self.update_config(palette=parse_palette(hexes))

    def add_palette_colour(self, colour: Optional[Colour] = None) -> GridConfig:
        with self._lock:
            palette = self._config.palette
            return self.update_config(
                palette=palette.add() if colour is None else palette.add(colour)
            )

    def update_palette_colour(self, index: int, hex_str: str) -> bool:
        """Change one palette entry. An invalid hex is rejected with a warning."""
        with self._lock:
            try:
                palette = self._config.palette.update(index, hex_str)
            except (ValueError, IndexError) as e:
                warn(f"palette edit rejected: {e}")
                return False
            self.update_config(palette=palette)
            return True

    def remove_palette_colour(self, index: int) -> bool:
        """Remove one palette entry; False when the palette would drop below two."""
        with self._lock:
            palette = self._config.palette
            smaller = palette.remove(index)
            if smaller is palette:
                return False
            self.update_config(palette=smaller)
            return True

    def extract_palette(
        self, depth: int = QUANTIZE_DEPTH, max_dim: int = QUANTIZE_MAX_DIM
    ) -> Optional[Palette]:
        """Median-cut palette from the source; enables palette mode and resamples."""
        with self._lock:
            source, base, aspect = self._resolve_source()
            if source is None:
                return None
            palette = Palette.of(
                extract_palette(source.pixels, depth, max_dim, debug=self.debug)
            )
            new_config = base.with_changes(palette=palette, use_palette=True)
            grid = self._build(source, new_config)
            self.aspect_ratio = aspect
            self._commit(new_config, grid, source)
            return palette

    # Tools

    def select_tool(self, tool: Tool) -> Tool:
        with self._lock:
            return self.engine.select_tool(tool)

    def set_tools(self, tools: ToolState) -> None:
        with self._lock:
            self.engine.tools = tools

    def pick_palette_colour(self, index: int) -> Colour:
        """Load a palette swatch into the brush and activate it."""
        with self._lock:
            colour = self._config.palette[index]
            self.engine.pick_colour(colour)
            return colour

    def pointer_down(self, row: int, col: int) -> bool:
        with self._lock:
            return self.engine.pointer_down(row, col)

    def pointer_move(self, row: int, col: int) -> bool:
        with self._lock:
            return self.engine.pointer_move(row, col)

    def pointer_up(self) -> None:
        with self._lock:
            self.engine.pointer_up()

    def pointer_leave(self) -> None:
        with self._lock:
            self.engine.pointer_leave()

    # Persistence / output

    def snapshot(self) -> Optional[ProjectSnapshot]:
        """Current project state, or None if there is no grid to save."""
        with self._lock:
            grid = self.store.snapshot()
            if grid is None:
                return None
            return ProjectSnapshot(
                grid=grid,
                config=self._config,
                source_ref=self._source_ref,
                aspect_ratio=self.aspect_ratio,
            )

    def restore(self, snapshot: ProjectSnapshot, *, reload_source: bool = True) -> None:
        """
        Reinstate a saved grid and config verbatim without rasterizing.
        If the source reference is a readable path its decode is started in
        the background so later config changes can resample again.
        """
        with self._lock:
            if self._pending is not None:
                self._pending.cancel()
                self._pending = None
            self._auto_size_pending = False
            self._source = None
            self._source_ref = snapshot.source_ref
            self.aspect_ratio = snapshot.aspect_ratio
            self._commit(snapshot.config, snapshot.grid)
            ref = snapshot.source_ref
            if reload_source and ref and Path(ref).is_file():
                self._pending = decode_image_async(ref, self._executor)
                self._rebuild_pending = False

    def render(self, cell_size: int = DEFAULT_CELL_SIZE) -> Optional[Image.Image]:
        with self._lock:
            return render_grid(
                self.store.snapshot(),
                cell_size=cell_size,
                show_grid=self._config.show_grid,
                show_numbers=self._config.show_numbers,
            )


__all__ = ["Session"]
