"""Paint engine: tool state machine and pointer handling."""

import pytest

from knot_grid.core_types import BLACK, WHITE, Colour, Grid
from knot_grid.grid_store import GridStore
from knot_grid.paint import PaintEngine, Tool, ToolState, cell_from_pixel

RED = Colour(255, 0, 0)


def make_engine(grid=None, **tool_kw):
    grid = grid if grid is not None else Grid.filled(4, 4, BLACK)
    store = GridStore(grid.rows, grid.cols)
    store.replace(grid)
    return PaintEngine(store, ToolState(**tool_kw))


def test_selecting_active_tool_toggles_off():
    engine = make_engine()
    assert engine.select_tool(Tool.BRUSH) is Tool.BRUSH
    assert engine.select_tool(Tool.BRUSH) is Tool.NONE
    assert engine.select_tool(Tool.ERASER) is Tool.ERASER
    assert engine.select_tool(Tool.DROPPER) is Tool.DROPPER


def test_none_tool_never_paints():
    engine = make_engine()
    before = engine.store.snapshot()
    assert not engine.pointer_down(1, 1)
    assert not engine.pointer_move(2, 2)
    assert engine.store.snapshot() == before


def test_brush_paints_on_down_and_drag():
    engine = make_engine(active=Tool.BRUSH, brush_colour=RED)
    assert engine.pointer_down(0, 0)
    assert engine.pointer_move(0, 1)
    engine.pointer_up()
    assert engine.store.get(0, 0) == RED
    assert engine.store.get(0, 1) == RED
    assert engine.store.get(1, 1) == BLACK


def test_move_without_button_is_ignored():
    engine = make_engine(active=Tool.BRUSH, brush_colour=RED)
    assert not engine.pointer_move(0, 0)
    engine.pointer_down(3, 3)
    engine.pointer_up()
    assert not engine.pointer_move(2, 2)
    assert engine.store.get(2, 2) == BLACK


def test_eraser_paints_white_with_opacity():
    engine = make_engine(active=Tool.ERASER, opacity=0.5)
    engine.pointer_down(1, 1)
    assert engine.store.get(1, 1).hex == "#808080"
    engine.tools = engine.tools.with_opacity_percent(100)
    engine.pointer_down(1, 1)
    assert engine.store.get(1, 1) == WHITE


def test_dropper_reads_cell_and_switches_to_brush():
    grid = Grid.from_rows([[BLACK, RED], [WHITE, BLACK]])
    engine = make_engine(grid, active=Tool.DROPPER, brush_colour=WHITE)
    before = engine.store.snapshot()
    assert not engine.pointer_down(0, 1)
    assert engine.tools.active is Tool.BRUSH
    assert engine.tools.brush_colour == RED
    assert engine.store.snapshot() == before
    engine.pointer_up()
    engine.pointer_down(1, 0)
    assert engine.store.get(1, 0) == RED


def test_dropper_ignores_moves():
    grid = Grid.from_rows([[BLACK, RED], [WHITE, BLACK]])
    engine = make_engine(grid, active=Tool.DROPPER)
    # press outside the grid: button held, nothing picked
    assert not engine.pointer_down(-1, -1)
    assert engine.button_held
    assert not engine.pointer_move(0, 1)
    assert engine.tools.active is Tool.DROPPER


def test_out_of_bounds_pointer_is_ignored():
    engine = make_engine(active=Tool.BRUSH, brush_colour=RED, brush_size=3)
    before = engine.store.snapshot()
    assert not engine.pointer_down(-1, 0)
    assert not engine.pointer_down(0, 4)
    assert engine.store.snapshot() == before

    dropper = make_engine(active=Tool.DROPPER)
    assert not dropper.pointer_down(9, 9)
    assert dropper.tools.active is Tool.DROPPER


def test_brush_size_three_at_corner():
    engine = make_engine(Grid.filled(3, 3, BLACK), active=Tool.BRUSH, brush_colour=WHITE, brush_size=3)
    engine.pointer_down(0, 0)
    painted = sum(engine.store.get(r, c) == WHITE for r in range(3) for c in range(3))
    assert painted == 4


def test_pick_colour_activates_brush():
    engine = make_engine()
    engine.pick_colour(RED)
    assert engine.tools.active is Tool.BRUSH
    assert engine.tools.brush_colour == RED


@pytest.mark.parametrize("kw", [{"brush_size": 0}, {"opacity": 0.0}, {"opacity": 1.5}])
def test_tool_state_validation(kw):
    with pytest.raises(ValueError):
        ToolState(**kw)


def test_cell_from_pixel():
    assert cell_from_pixel(0, 0, 20) == (0, 0)
    assert cell_from_pixel(19.9, 40, 20) == (2, 0)
    assert cell_from_pixel(-1, 5, 20) == (0, -1)


def test_brush_colour_change_keeps_tool():
    engine = make_engine(active=Tool.BRUSH)
    engine.tools = engine.tools.with_brush_colour(RED)
    assert engine.tools.active is Tool.BRUSH
    engine.pointer_down(2, 2)
    assert engine.store.get(2, 2) == RED


def test_leaving_the_canvas_ends_the_stroke():
    engine = make_engine(Grid.filled(10, 1, BLACK), active=Tool.ERASER)
    assert engine.pointer_down(5, 0)
    assert not engine.pointer_move(-3, 0)
    engine.pointer_leave()
    assert not engine.button_held
    assert not engine.pointer_move(9, 0)
    assert engine.store.get(9, 0) == BLACK
