"""Runtime level state.

:class:`LevelState` owns the current immutable :class:`~grid_dungeon.grid.Grid`,
the coordinate mapper for its footprint, and the piece pool that materializes
it. Regeneration is a full replacement:

* every pooled piece is retired first, so nothing stale stays visible;
* a new grid is generated from the level's random source;
* floors, walls, the outer ring and the dynamic pieces (agent, coin, weapon,
  enemies) are placed again, reusing retired instances where possible.

The grid decides *where* enemies stand; the pool decides *which* instance is
bound to each enemy cell for the episode. Between regenerations the only
mutation is enemy elimination.

Read queries (passability, the observation window, coordinate transforms)
are pure and meant to be called every tick from the simulation thread.
"""

import logging
import random
from dataclasses import dataclass, field, replace
from typing import Any, Dict, List, Optional, Sequence, Tuple

import numpy as np

from grid_dungeon.config import ENEMY_VALUE, FLOOR_VALUE, WALL_VALUE, GenerationConfig
from grid_dungeon.grid import Grid
from grid_dungeon.levels.generator import generate
from grid_dungeon.pool import PieceInstance, PieceInstancePool
from grid_dungeon.types import Cell, Coord, PieceCategory, PieceHandle, Vector3
from grid_dungeon.utils.coords import GridCoordinateMapper
from grid_dungeon.utils.orientation import face_center, random_quarter_turn

logger = logging.getLogger(__name__)


def outer_ring(size: int) -> List[Coord]:
    """Indices one step outside the grid on every side, corners included."""
    ring: List[Coord] = [(-1, -1), (-1, size), (size, -1), (size, size)]
    for k in range(size):
        ring.extend([(-1, k), (k, -1), (size, k), (k, size)])
    return ring


@dataclass(eq=False)
class LevelState:
    """Current level plus the pieces that represent it.

    Attributes:
        config: Active settings; ``regenerate`` may replace it.
        rng: Random source for generation and piece variety. Seeded from
            ``config.seed`` when not given.
        pool: Piece arena, kept across regenerations.
        grid: Grid of the current episode (None before the first generation).
        mapper: Coordinate transforms for the current footprint.
    """

    config: GenerationConfig = field(default_factory=GenerationConfig)
    rng: Optional[random.Random] = None
    pool: PieceInstancePool = field(default_factory=PieceInstancePool)
    grid: Optional[Grid] = None
    mapper: GridCoordinateMapper = field(init=False)

    _passable: np.ndarray = field(init=False, repr=False)
    _enemy_cells: Dict[Coord, PieceHandle] = field(
        init=False, repr=False, default_factory=dict
    )
    _agent: Optional[PieceHandle] = field(init=False, default=None)
    _coin: Optional[PieceHandle] = field(init=False, default=None)
    _weapon: Optional[PieceHandle] = field(init=False, default=None)
    # Runtime queries draw from here so they never shift later layouts.
    _query_rng: random.Random = field(
        init=False, repr=False, default_factory=random.Random
    )

    def __post_init__(self) -> None:
        if self.rng is None:
            self.rng = random.Random(self.config.seed)
        self.mapper = self._make_mapper()
        self._passable = np.zeros((self.config.size, self.config.size), dtype=bool)

    def _make_mapper(self) -> GridCoordinateMapper:
        return GridCoordinateMapper(
            size=self.config.size,
            spacing=self.config.piece_spacing,
            origin=self.config.origin,
        )

    # -------- Generation --------

    def regenerate(self, **overrides: Any) -> Grid:
        """Generate a new layout and materialize it.

        Arguments:
            **overrides: ``GenerationConfig`` fields to change first, e.g.
                ``size=12`` or ``desired_enemies=5``. Passing ``seed``
                restarts the random source from that seed.

        Returns:
            The newly published grid.
        """
        if overrides:
            self.config = replace(self.config, **overrides)
            self.mapper = self._make_mapper()
            if "seed" in overrides:
                self.rng = random.Random(self.config.seed)

        for category in PieceCategory:
            self.pool.release_all(category)
        self._enemy_cells = {}
        self._agent = self._coin = self._weapon = None

        cfg = self.config
        self.grid = generate(
            cfg.size,
            cfg.wall_fraction,
            cfg.desired_enemies,
            self.rng,
            with_goal=cfg.with_goal,
        )
        self._passable = self.grid.passability()
        self._place_tiles(self.grid)
        self._place_dynamic(self.grid)
        self._query_rng = random.Random(self.rng.getrandbits(64))
        self.pool.log_summary()
        return self.grid

    def _place_tiles(self, grid: Grid) -> None:
        cfg = self.config
        for i, row in enumerate(grid.cells):
            for j, cell in enumerate(row):
                position = self.mapper.index_to_position(i, j)
                if cell is Cell.WALL:
                    self.pool.place(
                        PieceCategory.WALL,
                        (i, j),
                        position,
                        variant=self.rng.randrange(cfg.wall_variants),
                    )
                else:
                    self.pool.place(
                        PieceCategory.FLOOR,
                        (i, j),
                        position,
                        orientation=random_quarter_turn(self.rng),
                        variant=self.rng.randrange(cfg.floor_variants),
                    )
        if cfg.outer_walls:
            for i, j in outer_ring(grid.size):
                self.pool.place(
                    PieceCategory.WALL,
                    (i, j),
                    self.mapper.index_to_position(i, j),
                    variant=self.rng.randrange(cfg.wall_variants),
                )

    def _place_dynamic(self, grid: Grid) -> None:
        center = self.config.origin
        for i, row in enumerate(grid.cells):
            for j, cell in enumerate(row):
                position = self.mapper.index_to_position(i, j)
                if cell is Cell.START:
                    self._agent = self.pool.place(
                        PieceCategory.AGENT,
                        (i, j),
                        position,
                        orientation=face_center(position, center),
                    )
                elif cell is Cell.GOAL:
                    self._coin = self.pool.place(PieceCategory.COIN, (i, j), position)
                elif cell is Cell.WEAPON:
                    self._weapon = self.pool.place(
                        PieceCategory.WEAPON,
                        (i, j),
                        position,
                        orientation=random_quarter_turn(self.rng),
                    )
                elif cell is Cell.ENEMY:
                    self._enemy_cells[(i, j)] = self.pool.place(
                        PieceCategory.ENEMY,
                        (i, j),
                        position,
                        orientation=face_center(position, center),
                    )

    # -------- Enemies --------

    @property
    def active_enemies(self) -> List[PieceInstance]:
        return self.pool.active(PieceCategory.ENEMY)

    @property
    def enemies_count(self) -> int:
        return self.pool.active_count(PieceCategory.ENEMY)

    def eliminate_enemy(self, handle: PieceHandle) -> bool:
        """Defeat an enemy and return its instance to the pool.

        Handles are only meaningful for the current episode: instances are
        reused by ``regenerate``, so a handle kept from an earlier episode
        may name a different enemy now or none at all.

        Returns:
            True if the enemy was active in the current episode.

        Raises:
            KeyError: If ``handle`` is unknown.
            ValueError: If ``handle`` is not an enemy.
        """
        instance = self.pool.get(handle)
        if instance.category is not PieceCategory.ENEMY:
            raise ValueError(f"Piece {handle} is a {instance.category}, not an enemy")
        if self._enemy_cells.get(instance.index) != handle:
            return False
        self.pool.release(handle)
        instance.eliminated = True
        del self._enemy_cells[instance.index]
        return True

    # -------- Queries --------

    def passability_map(self) -> np.ndarray:
        """Read-only ``size x size`` bool array, True where walkable."""
        return self._passable

    def local_observation_window(
        self,
        center: Sequence[float],
        radius: Optional[int] = None,
        out: Optional[np.ndarray] = None,
    ) -> np.ndarray:
        """Encoded square view of the grid around ``center``.

        ``window[a, b]`` describes grid cell
        ``(ci + a - radius, cj + b - radius)`` where ``(ci, cj)`` is the
        nearest (unclamped) index to ``center``. Codes: ``ENEMY_VALUE`` where an
        active enemy stands, ``FLOOR_VALUE`` for other walkable cells,
        ``WALL_VALUE`` for walls and ``config.out_of_bounds_value`` off-grid.

        Arguments:
            center: World position to center on.
            radius: Half-width; defaults to ``config.sensor_radius``.
            out: Optional float buffer of shape ``(2r+1, 2r+1)`` to fill.
        """
        if radius is None:
            radius = self.config.sensor_radius
        width = 2 * radius + 1
        if out is None:
            out = np.empty((width, width), dtype=np.float32)
        elif out.shape != (width, width):
            raise ValueError(f"out must have shape {(width, width)}, got {out.shape}")

        ci, cj = self.mapper.position_to_index(center, clamp=False)
        size = self._passable.shape[0]
        oob = self.config.out_of_bounds_value
        for a in range(width):
            i = ci + a - radius
            for b in range(width):
                j = cj + b - radius
                if not (0 <= i < size and 0 <= j < size):
                    out[a, b] = oob
                elif (i, j) in self._enemy_cells:
                    out[a, b] = ENEMY_VALUE
                elif self._passable[i, j]:
                    out[a, b] = FLOOR_VALUE
                else:
                    out[a, b] = WALL_VALUE
        return out

    def index_to_position(self, i: int, j: int) -> Vector3:
        return self.mapper.index_to_position(i, j)

    def position_to_index(self, position: Sequence[float], clamp: bool = True) -> Coord:
        return self.mapper.position_to_index(position, clamp)

    def position_to_percentage(self, position: Sequence[float]) -> Tuple[float, float]:
        return self.mapper.position_to_percentage(position)

    def random_walkable_position(self) -> Vector3:
        """World position of a uniformly chosen active floor piece.

        Uses a per-episode random source split off at regeneration, so the
        number of calls does not change the layouts that follow.

        Raises:
            RuntimeError: If no level has been generated yet.
        """
        floors = self.pool.active(PieceCategory.FLOOR)
        if not floors:
            raise RuntimeError("No level generated yet")
        return floors[self._query_rng.randrange(len(floors))].position

    def _position_of(self, handle: Optional[PieceHandle]) -> Optional[Vector3]:
        if handle is None:
            return None
        return self.pool.get(handle).position

    @property
    def agent(self) -> Optional[PieceInstance]:
        return None if self._agent is None else self.pool.get(self._agent)

    @property
    def start_position(self) -> Optional[Vector3]:
        return self._position_of(self._agent)

    @property
    def goal_position(self) -> Optional[Vector3]:
        return self._position_of(self._coin)

    @property
    def weapon_position(self) -> Optional[Vector3]:
        return self._position_of(self._weapon)


def generate_level(
    size: int,
    wall_fraction: float,
    desired_enemies: int,
    seed: Optional[int] = None,
    config: Optional[GenerationConfig] = None,
) -> LevelState:
    """Build a ``LevelState`` and generate its first layout.

    Arguments:
        size: Grid side length (at least 2).
        wall_fraction: Share of cells to try turning into walls.
        desired_enemies: Enemies to try to place.
        seed: Seed for the level's random source; overrides ``config.seed``.
        config: Base settings for everything not passed explicitly.
    """
    base = config if config is not None else GenerationConfig()
    cfg = replace(
        base,
        size=size,
        wall_fraction=wall_fraction,
        desired_enemies=desired_enemies,
        seed=seed if seed is not None else base.seed,
    )
    level = LevelState(config=cfg)
    level.regenerate()
    logger.debug("level ready size=%d enemies=%d", cfg.size, level.enemies_count)
    return level
