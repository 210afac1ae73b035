"""Command line: image -> chart PNG, project save/load, error exits."""

import json

import pytest
from PIL import Image

from knot_grid.cli import main, parse_cli_args
from knot_grid.render import LABEL_BAND


def test_renders_chart(image_file, tmp_path, capsys):
    out = tmp_path / "chart.png"
    code = main([str(image_file), "--out", str(out), "--cols", "4", "--rows", "2", "--cell-size", "10"])
    assert code == 0
    with Image.open(out) as im:
        assert im.size == (40, 20)
    text = capsys.readouterr().out
    assert "=== halves.png ===" in text
    assert "Total knots: 8" in text


def test_default_output_name(image_file):
    assert main([str(image_file), "--cols", "2", "--rows", "2", "--no-grid"]) == 0
    out = image_file.with_name("halves_knots.png")
    with Image.open(out) as im:
        assert im.size == (40, 40)
        assert im.getpixel((0, 0)) == (0, 0, 0)
        assert im.getpixel((39, 0)) == (255, 255, 255)


def test_numbers_add_band(image_file, tmp_path):
    out = tmp_path / "numbered.png"
    assert main([str(image_file), "--out", str(out), "--auto-size", "--numbers", "--cell-size", "4"]) == 0
    with Image.open(out) as im:
        assert im.size == (80, 40 + LABEL_BAND)


def test_palette_preset_and_project_round_trip(image_file, tmp_path):
    out = tmp_path / "a.png"
    project = tmp_path / "proj" / "a.json"
    code = main([
        str(image_file), "--out", str(out), "--cols", "4", "--rows", "2",
        "--palette", "blue", "--save-project", str(project),
    ])
    assert code == 0
    data = json.loads(project.read_text(encoding="utf-8"))
    assert data["gridConfig"]["usePalette"] is True
    assert data["gridConfig"]["cols"] == 4
    allowed = set(data["gridConfig"]["palette"])
    assert all(hx in allowed for row in data["pixels"] for hx in row)

    again = tmp_path / "b.png"
    assert main(["--load-project", str(project), "--out", str(again)]) == 0
    with Image.open(out) as first, Image.open(again) as second:
        assert first.size == second.size == (80, 40)
        assert list(first.getdata()) == list(second.getdata())


def test_extract_palette_flag(image_file, tmp_path, capsys):
    out = tmp_path / "x.png"
    assert main([str(image_file), "--out", str(out), "--cols", "2", "--rows", "1", "--extract-palette"]) == 0
    assert "Extracted palette (2): #000000 #ffffff" in capsys.readouterr().out


def test_missing_input(tmp_path, capsys):
    assert main([str(tmp_path / "nope.png")]) == 2
    assert "[error]" in capsys.readouterr().err


def test_undecodable_input(tmp_path, capsys):
    bad = tmp_path / "bad.png"
    bad.write_bytes(b"\x00\x01")
    assert main([str(bad)]) == 2
    assert "[error]" in capsys.readouterr().err


def test_invalid_grid_size(image_file, capsys):
    assert main([str(image_file), "--cols", "0"]) == 1
    assert "[error]" in capsys.readouterr().err


def test_source_or_project_required():
    with pytest.raises(SystemExit):
        parse_cli_args([])


def test_palette_options_are_exclusive(image_file):
    with pytest.raises(SystemExit):
        parse_cli_args([str(image_file), "--palette", "blue", "--extract-palette"])
