"""Grid / world / percentage coordinate transforms.

The level footprint is centered on ``origin``: cell ``(i, j)`` sits at
``origin + (i, j) * spacing - (size - 1) / 2 * spacing`` on the x/z plane,
keeping the origin's y. Percentages span the whole footprint including the
half-cell margin around the outermost cell centers, so they do not depend on
the grid size.

Functions here are pure and are called every simulation tick; keep them
allocation-light.
"""

import math
from dataclasses import dataclass
from typing import Sequence, Tuple

from grid_dungeon.types import Coord, Vector3


def _planar(position: Sequence[float]) -> Tuple[float, float]:
    """Return the (x, z) pair of a 3D position, or a 2D (x, z) pair as-is."""
    if len(position) == 2:
        return float(position[0]), float(position[1])
    return float(position[0]), float(position[2])


def _clamp(value: int, low: int, high: int) -> int:
    return max(low, min(high, value))


def _clamp01(value: float) -> float:
    return max(0.0, min(1.0, value))


@dataclass(frozen=True)
class GridCoordinateMapper:
    """Bidirectional mapping between grid indices and world positions.

    Attributes:
        size: Grid side length.
        spacing: World distance between neighbouring cell centers.
        origin: World position the grid is centered on.
    """

    size: int
    spacing: float = 1.0
    origin: Vector3 = (0.0, 0.0, 0.0)

    @property
    def shift(self) -> float:
        """Centering offset applied to both planar axes."""
        return (self.size - 1) / 2 * self.spacing

    def index_to_position(self, i: int, j: int) -> Vector3:
        ox, oy, oz = self.origin
        return (
            ox + i * self.spacing - self.shift,
            oy,
            oz + j * self.spacing - self.shift,
        )

    def position_to_index(
        self, position: Sequence[float], clamp: bool = True
    ) -> Coord:
        """Nearest grid index to ``position``.

        Arguments:
            position: World (x, y, z) or planar (x, z) position.
            clamp: If True, each axis is clamped into ``[0, size - 1]``;
                otherwise off-grid positions yield out-of-range indices.
        """
        x, z = _planar(position)
        ox, _, oz = self.origin
        i = math.floor((x - ox + self.shift) / self.spacing + 0.5)
        j = math.floor((z - oz + self.shift) / self.spacing + 0.5)
        if clamp:
            i = _clamp(i, 0, self.size - 1)
            j = _clamp(j, 0, self.size - 1)
        return i, j

    def position_to_percentage(self, position: Sequence[float]) -> Tuple[float, float]:
        """Relative (x, z) location within the footprint, each in ``[0, 1]``."""
        x, z = _planar(position)
        ox, _, oz = self.origin
        extent = self.size * self.spacing
        half = extent / 2
        return (
            _clamp01((x - ox + half) / extent),
            _clamp01((z - oz + half) / extent),
        )

    def in_bounds(self, coord: Coord) -> bool:
        i, j = coord
        return 0 <= i < self.size and 0 <= j < self.size
