import random
from typing import Iterator, List, Tuple

from grid_dungeon.config import GenerationConfig
from grid_dungeon.grid import Grid
from grid_dungeon.levels.generator import generate
from grid_dungeon.state import LevelState
from grid_dungeon.types import Cell, Coord
from grid_dungeon.utils.bfs import is_fully_connected
from grid_dungeon.utils.render import parse_ascii, render_ascii


def grid_from_ascii(text: str) -> Grid:
    """Build a grid from ``.#SGEW`` glyph rows."""
    return parse_ascii(text)


def seeded_grids(
    size: int,
    wall_fraction: float,
    desired_enemies: int,
    seeds: range = range(10),
    with_goal: bool = True,
) -> Iterator[Tuple[int, Grid]]:
    for seed in seeds:
        rng = random.Random(seed)
        yield seed, generate(size, wall_fraction, desired_enemies, rng, with_goal)


def start_of(grid: Grid) -> Coord:
    start = grid.single(Cell.START)
    assert start is not None, f"No start cell in\n{render_ascii(grid)}"
    return start


def assert_fully_connected(grid: Grid) -> None:
    """Every non-wall cell must be reachable from Start."""
    expected = grid.size * grid.size - grid.count(Cell.WALL)
    assert is_fully_connected(grid.cells, start_of(grid), expected), (
        f"Disconnected grid:\n{render_ascii(grid)}"
    )


def make_level(
    size: int = 8,
    wall_fraction: float = 0.2,
    desired_enemies: int = 3,
    seed: int = 0,
    **config_fields: object,
) -> LevelState:
    """Generated level with a seeded random source."""
    config = GenerationConfig(
        size=size,
        wall_fraction=wall_fraction,
        desired_enemies=desired_enemies,
        seed=seed,
        **config_fields,  # type: ignore[arg-type]
    )
    level = LevelState(config=config)
    level.regenerate()
    return level


def neighbours(coord: Coord, size: int) -> List[Coord]:
    i, j = coord
    candidates = [(i - 1, j), (i + 1, j), (i, j - 1), (i, j + 1)]
    return [(a, b) for a, b in candidates if 0 <= a < size and 0 <= b < size]
