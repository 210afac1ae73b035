from __future__ import annotations

"""
Palette definitions and builders.

Exports:
  PRESET_PALETTES: dict[key, (name, [hex, ...])]
  MIN_PALETTE_SIZE
  Palette: ordered, immutable colour list with edit helpers
  parse_palette(hex_list) -> Palette   # invalid entries skipped with a warning
"""

from dataclasses import dataclass
from typing import Dict, Iterator, List, Sequence, Tuple

from .core_types import BLACK, Colour
from .utils import warn

MIN_PALETTE_SIZE = 2

PRESET_PALETTES: Dict[str, Tuple[str, List[str]]] = {
    "traditional": (
        "Traditional Crimson",
        ["#8B0000", "#F5F5DC", "#000080", "#D4AF37", "#000000", "#006400"],
    ),
    "earthy": (
        "Nature & Desert",
        ["#8B4513", "#D2691E", "#F4A460", "#556B2F", "#FAEBD7", "#2F4F4F"],
    ),
    "modern": (
        "Modern Grey",
        ["#2C3E50", "#95A5A6", "#ECF0F1", "#E74C3C", "#34495E"],
    ),
    "blue": (
        "Indigo & Turquoise",
        ["#000080", "#4169E1", "#87CEEB", "#E0FFFF", "#FFFFFF", "#191970"],
    ),
}

DEFAULT_PRESET = "traditional"


@dataclass(frozen=True)
class Palette:
    """Ordered palette. Order decides nearest-colour ties."""

    colours: Tuple[Colour, ...] = ()

    def __len__(self) -> int:
        return len(self.colours)

    def __iter__(self) -> Iterator[Colour]:
        return iter(self.colours)

    def __getitem__(self, index: int) -> Colour:
        return self.colours[index]

    @property
    def hexes(self) -> List[str]:
        return [c.hex for c in self.colours]

    @classmethod
    def of(cls, colours: Sequence[Colour]) -> "Palette":
        return cls(tuple(colours))

    @classmethod
    def from_preset(cls, key: str) -> "Palette":
        if key not in PRESET_PALETTES:
            raise KeyError(
                f"unknown preset '{key}' (choose from {', '.join(PRESET_PALETTES)})"
            )
        return parse_palette(PRESET_PALETTES[key][1])

    def add(self, colour: Colour = BLACK) -> "Palette":
        """Append a colour (black unless given)."""
        return Palette(self.colours + (colour,))

    def update(self, index: int, hex_str: str) -> "Palette":
        """
        Replace one entry from a hex string.

        Raises:
          ValueError: hex_str is not a valid colour (palette is left as is).
          IndexError: index out of range.
        """
        colour = Colour.from_hex(hex_str)
        if colour is None:
            raise ValueError(f"invalid colour '{hex_str}'")
        if not -len(self.colours) <= index < len(self.colours):
            raise IndexError(f"palette index {index} out of range")
        items = list(self.colours)
        items[index] = colour
        return Palette(tuple(items))

    def remove(self, index: int) -> "Palette":
        """
        Drop one entry. Returns this same palette when the removal would leave
        fewer than MIN_PALETTE_SIZE colours or the index is out of range.
        """
        if len(self.colours) <= MIN_PALETTE_SIZE:
            return self
        if not 0 <= index < len(self.colours):
            return self
        return Palette(self.colours[:index] + self.colours[index + 1 :])


def parse_palette(hex_list: Sequence[str]) -> Palette:
    """Parse hex strings in order; unparseable entries are skipped."""
    colours: List[Colour] = []
    for hx in hex_list:
        colour = Colour.from_hex(hx)
        if colour is None:
            warn(f"skipping invalid palette colour '{hx}'")
            continue
        colours.append(colour)
    return Palette(tuple(colours))


def default_palette() -> Palette:
    return Palette.from_preset(DEFAULT_PRESET)


__all__ = [
    "MIN_PALETTE_SIZE",
    "PRESET_PALETTES",
    "DEFAULT_PRESET",
    "Palette",
    "parse_palette",
    "default_palette",
]
