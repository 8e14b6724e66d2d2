"""Common type aliases and enumerations.

``Cell`` tags every square of a generated :class:`grid_dungeon.grid.Grid`;
``PieceCategory`` names the pooled pieces that materialize a level.
"""

from enum import StrEnum, auto
from typing import Sequence, Tuple

# Grid index (i, j); i runs along world x, j along world z.
Coord = Tuple[int, int]

# World-space position (x, y, z).
Vector3 = Tuple[float, float, float]

PieceHandle = int


class Cell(StrEnum):
    """Contents of a single grid cell."""

    FLOOR = auto()
    WALL = auto()
    START = auto()
    GOAL = auto()
    ENEMY = auto()
    WEAPON = auto()


class PieceCategory(StrEnum):
    """Pooled piece kinds (reflected in pool bookkeeping)."""

    FLOOR = auto()
    WALL = auto()
    AGENT = auto()
    ENEMY = auto()
    COIN = auto()
    WEAPON = auto()


CellRows = Sequence[Sequence[Cell]]


def is_passable(cell: Cell) -> bool:
    """Return True for every cell kind except ``WALL``."""
    return cell is not Cell.WALL
