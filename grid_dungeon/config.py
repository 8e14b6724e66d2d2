"""Level configuration.

``GenerationConfig`` bundles the generator knobs with the layout and sensor
settings a :class:`grid_dungeon.state.LevelState` needs. Out-of-range wall
fractions and enemy counts are clamped; values that leave no sensible level
(``size < 2``, non-positive spacing, ...) raise ``ValueError``.
"""

from dataclasses import dataclass
from typing import Optional

from grid_dungeon.types import Vector3

# Sensor window codes.
ENEMY_VALUE = 0.0
WALL_VALUE = 0.5
FLOOR_VALUE = 1.0


@dataclass(frozen=True)
class GenerationConfig:
    """Immutable level settings.

    Attributes:
        size: Grid side length (at least 2).
        wall_fraction: Share of cells to try turning into walls, clamped to [0, 1].
        desired_enemies: Enemies to try to place, clamped to >= 0.
        piece_spacing: World distance between neighbouring cells.
        origin: World position the level is centered on.
        with_goal: Place a goal coin in the corner opposite the pick for Start.
        outer_walls: Surround the grid with a ring of wall pieces.
        floor_variants: Number of interchangeable floor visuals.
        wall_variants: Number of interchangeable wall visuals.
        sensor_radius: Default half-width of the observation window.
        out_of_bounds_value: Window code for cells outside the grid.
        seed: Seed for the level's random source (None draws from entropy).
    """

    size: int = 10
    wall_fraction: float = 0.1
    desired_enemies: int = 3
    piece_spacing: float = 1.0
    origin: Vector3 = (0.0, 0.0, 0.0)
    with_goal: bool = True
    outer_walls: bool = True
    floor_variants: int = 1
    wall_variants: int = 1
    sensor_radius: int = 3
    out_of_bounds_value: float = WALL_VALUE
    seed: Optional[int] = None

    def __post_init__(self) -> None:
        if self.size < 2:
            raise ValueError(f"size must be at least 2, got {self.size}")
        if self.piece_spacing <= 0:
            raise ValueError(f"piece_spacing must be positive, got {self.piece_spacing}")
        if self.floor_variants < 1 or self.wall_variants < 1:
            raise ValueError("floor_variants and wall_variants must be at least 1")
        if self.sensor_radius < 0:
            raise ValueError(f"sensor_radius must be >= 0, got {self.sensor_radius}")
        object.__setattr__(
            self, "wall_fraction", max(0.0, min(1.0, float(self.wall_fraction)))
        )
        object.__setattr__(self, "desired_enemies", max(0, int(self.desired_enemies)))
