"""Formatting helpers and the colour usage report."""

from PIL import Image

from knot_grid.core_types import BLACK, WHITE, Colour, Grid
from knot_grid.utils import (
    colour_usage_report,
    format_number_compact,
    format_seconds_compact,
    key_value_pairs_to_string,
    pillow_resample_from_name,
    print_config_line,
)


def test_usage_report_sorted_by_count_then_hex():
    red = Colour(255, 0, 0)
    grid = Grid.from_rows([[WHITE, red, BLACK], [red, BLACK, WHITE], [red, red, WHITE]])
    assert colour_usage_report(grid) == [("#ff0000", 4), ("#ffffff", 3), ("#000000", 2)]
    tie = Grid.from_rows([[WHITE, BLACK]])
    assert colour_usage_report(tie) == [("#000000", 1), ("#ffffff", 1)]


def test_resample_names():
    assert pillow_resample_from_name("box") is Image.Resampling.BOX
    assert pillow_resample_from_name("lanczos") is Image.Resampling.LANCZOS
    assert pillow_resample_from_name("whatever") is Image.Resampling.BOX


def test_formatting():
    assert format_seconds_compact(0.25) == "250.0ms"
    assert format_seconds_compact(2.5) == "2.500s"
    assert format_seconds_compact(125) == "2m 5.0s"
    assert format_number_compact(12345) == "12,345"
    assert format_number_compact(1.50) == "1.5"
    assert key_value_pairs_to_string([("Palette", True), ("Cols", 60)]) == "Palette: on  Cols: 60"


def test_config_line_routes_to_debug(capsys):
    print_config_line("grid", [("Rows", 4)], debug=True)
    print_config_line("grid", [("Rows", 4)], debug=False)
    out = capsys.readouterr().out.splitlines()
    assert out == ["[debug] [grid] Rows: 4", "[grid] Rows: 4"]
