"""Immutable generated grid.

A :class:`Grid` is the published result of one generation pass. Cells are
stored as a persistent vector of persistent vectors (``pyrsistent.PVector``)
indexed ``cells[i][j]``. A grid is never edited after it is built; the next
regeneration replaces it wholesale.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import List, Optional, Sequence

import numpy as np
from pyrsistent import pvector
from pyrsistent.typing import PVector

from grid_dungeon.types import Cell, Coord, is_passable


@dataclass(frozen=True)
class Grid:
    """Square grid of tagged cells.

    Attributes:
        size: Side length of the grid (``size x size`` cells).
        cells: Persistent rows, ``cells[i][j]``.
    """

    size: int
    cells: PVector[PVector[Cell]]

    @classmethod
    def from_rows(cls, rows: Sequence[Sequence[Cell]]) -> "Grid":
        """Freeze nested sequences into a ``Grid``.

        Raises:
            ValueError: If ``rows`` is not square.
        """
        size = len(rows)
        if any(len(row) != size for row in rows):
            raise ValueError(f"Grid rows must form a square of side {size}")
        return cls(size=size, cells=pvector(pvector(row) for row in rows))

    def to_rows(self) -> List[List[Cell]]:
        """Return a mutable nested-list copy of the cells."""
        return [list(row) for row in self.cells]

    def in_bounds(self, coord: Coord) -> bool:
        i, j = coord
        return 0 <= i < self.size and 0 <= j < self.size

    def at(self, coord: Coord) -> Cell:
        """Return the cell at ``coord``.

        Raises:
            IndexError: If ``coord`` lies outside the grid.
        """
        if not self.in_bounds(coord):
            raise IndexError(
                f"Out of bounds: {coord} for grid {self.size}x{self.size}"
            )
        i, j = coord
        return self.cells[i][j]

    def positions_of(self, cell: Cell) -> List[Coord]:
        """All coordinates holding ``cell`` in scan order (i, then j)."""
        return [
            (i, j)
            for i, row in enumerate(self.cells)
            for j, value in enumerate(row)
            if value is cell
        ]

    def count(self, cell: Cell) -> int:
        return sum(1 for row in self.cells for value in row if value is cell)

    def single(self, cell: Cell) -> Optional[Coord]:
        """Coordinate of the first ``cell`` in scan order, or None."""
        positions = self.positions_of(cell)
        return positions[0] if positions else None

    def passability(self) -> np.ndarray:
        """Boolean map, True where the cell can be walked on.

        The returned array is flagged read-only.
        """
        passable = np.array(
            [[is_passable(value) for value in row] for row in self.cells],
            dtype=bool,
        )
        passable.setflags(write=False)
        return passable
