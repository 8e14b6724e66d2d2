"""Plain-text rendering of grids for debugging and test failure messages."""

from typing import Dict

from grid_dungeon.grid import Grid
from grid_dungeon.types import Cell

GLYPHS: Dict[Cell, str] = {
    Cell.FLOOR: ".",
    Cell.WALL: "#",
    Cell.START: "S",
    Cell.GOAL: "G",
    Cell.ENEMY: "E",
    Cell.WEAPON: "W",
}


def render_ascii(grid: Grid) -> str:
    """One line per ``i`` row, one glyph per cell."""
    return "\n".join("".join(GLYPHS[cell] for cell in row) for row in grid.cells)


def parse_ascii(text: str) -> Grid:
    """Inverse of :func:`render_ascii`; blank lines and indentation are ignored."""
    lookup = {glyph: cell for cell, glyph in GLYPHS.items()}
    rows = [
        [lookup[glyph] for glyph in line.strip()]
        for line in text.strip().splitlines()
        if line.strip()
    ]
    return Grid.from_rows(rows)
