"""Procedural dungeon generator.

Pipeline (every random draw comes from the injected ``rng``):

1. Fill the grid with floors.
2. Put Start and the second corner (Goal, or a plain floor when
   ``with_goal`` is False) in two distinct random corners.
3. Carve walls by rejection sampling: a random floor is turned into a wall and
   kept only if every passable cell is still reachable from Start.
4. Turn the floors farthest from Start (BFS walking distance) into enemies.
5. Put the weapon on a random leftover floor.

The generator never fails for ``size >= 2``: wall density and enemy count are
silently capped by what the connectivity constraint and free space allow.
"""

import logging
import math
import random
from typing import List, Tuple

from grid_dungeon.grid import Grid
from grid_dungeon.types import Cell, Coord
from grid_dungeon.utils.bfs import compute_distances, is_fully_connected

logger = logging.getLogger(__name__)

# Start, second corner, weapon.
RESERVED_FIXED_CELLS = 3
WALL_ATTEMPTS_PER_WALL = 10

Rows = List[List[Cell]]


def corners(size: int) -> List[Coord]:
    return [(0, 0), (0, size - 1), (size - 1, 0), (size - 1, size - 1)]


def choose_corners(size: int, rng: random.Random) -> Tuple[Coord, Coord]:
    """Pick two distinct corners uniformly, rejecting coinciding picks."""
    options = corners(size)
    start_index = rng.randrange(len(options))
    end_index = rng.randrange(len(options))
    while end_index == start_index:
        end_index = rng.randrange(len(options))
    return options[start_index], options[end_index]


def wall_target(size: int, wall_fraction: float, desired_enemies: int) -> int:
    """Number of walls to attempt, capped so required entities keep room."""
    total = size * size
    max_walls = total - RESERVED_FIXED_CELLS - desired_enemies
    if max_walls <= 0:
        return 0
    return min(math.floor(total * wall_fraction), max_walls)


def carve_walls(
    rows: Rows, start: Coord, target_walls: int, rng: random.Random
) -> Tuple[int, int]:
    """Place up to ``target_walls`` walls without disconnecting the level.

    Mutates ``rows`` in place. Gives up after ``target_walls * 10`` attempts.

    Returns:
        (walls_placed, attempts_used)
    """
    size = len(rows)
    traversable = sum(1 for row in rows for cell in row if cell is not Cell.WALL)
    placed = 0
    attempts = 0
    max_attempts = target_walls * WALL_ATTEMPTS_PER_WALL

    while placed < target_walls and attempts < max_attempts:
        attempts += 1
        i = rng.randrange(size)
        j = rng.randrange(size)
        if rows[i][j] is not Cell.FLOOR:
            continue
        rows[i][j] = Cell.WALL
        if is_fully_connected(rows, start, traversable - 1):
            traversable -= 1
            placed += 1
        else:
            rows[i][j] = Cell.FLOOR

    return placed, attempts


def place_enemies(
    rows: Rows, start: Coord, desired_enemies: int
) -> Tuple[List[Coord], List[Coord]]:
    """Turn the floors farthest from ``start`` into enemies.

    At least one floor is always left over. Ties keep scan order.

    Returns:
        (enemy_positions, leftover_floor_positions)
    """
    distances = compute_distances(rows, start)
    floors: List[Coord] = [
        (i, j)
        for i, row in enumerate(rows)
        for j, cell in enumerate(row)
        if cell is Cell.FLOOR
    ]
    floors.sort(key=lambda pos: -int(distances[pos]))

    count = max(0, min(desired_enemies, len(floors) - 1))
    enemies = floors[:count]
    for i, j in enemies:
        rows[i][j] = Cell.ENEMY
    return enemies, floors[count:]


def place_weapon(
    rows: Rows, leftovers: List[Coord], rng: random.Random
) -> List[Coord]:
    """Put the weapon on a random leftover floor; returns the remaining floors."""
    if not leftovers:
        return leftovers
    remaining = leftovers[:]
    i, j = remaining.pop(rng.randrange(len(remaining)))
    rows[i][j] = Cell.WEAPON
    return remaining


def generate(
    size: int,
    wall_fraction: float,
    desired_enemies: int,
    rng: random.Random,
    with_goal: bool = True,
) -> Grid:
    """Generate a fully traversable dungeon grid.

    Arguments:
        size: Side length; must be at least 2.
        wall_fraction: Share of all cells to try turning into walls, in [0, 1].
        desired_enemies: Upper bound on the number of enemies.
        rng: Random source driving every choice.
        with_goal: Place a Goal in the second corner; otherwise that corner is
            left as a floor.

    Raises:
        ValueError: If ``size < 2``.
    """
    if size < 2:
        raise ValueError(f"size must be at least 2, got {size}")
    wall_fraction = max(0.0, min(1.0, wall_fraction))
    desired_enemies = max(0, desired_enemies)

    rows: Rows = [[Cell.FLOOR] * size for _ in range(size)]

    start, end = choose_corners(size, rng)
    rows[start[0]][start[1]] = Cell.START
    if with_goal:
        rows[end[0]][end[1]] = Cell.GOAL

    target = wall_target(size, wall_fraction, desired_enemies)
    placed, attempts = carve_walls(rows, start, target, rng)

    enemies, leftovers = place_enemies(rows, start, desired_enemies)
    place_weapon(rows, leftovers, rng)

    logger.debug(
        "generated size=%d walls=%d/%d attempts=%d enemies=%d/%d",
        size,
        placed,
        target,
        attempts,
        len(enemies),
        desired_enemies,
    )
    return Grid.from_rows(rows)
