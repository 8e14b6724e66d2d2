"""Breadth-first search over cell grids.

Both helpers walk the 4-neighbourhood and treat ``Cell.WALL`` as the only
impassable kind. They accept any nested ``cells[i][j]`` sequence so the
generator can run them against its scratch rows as well as a frozen
:class:`grid_dungeon.grid.Grid`. Neither mutates its input.
"""

from collections import deque

import numpy as np

from grid_dungeon.types import CellRows, Coord, is_passable

DIRECTIONS: list[tuple[int, int]] = [(0, -1), (0, 1), (-1, 0), (1, 0)]

UNREACHED = -1


def is_fully_connected(cells: CellRows, source: Coord, expected_count: int) -> bool:
    """Flood fill from ``source`` and compare the visited count.

    Returns True only if exactly ``expected_count`` passable cells are reachable
    from ``source``. The fill always runs until the frontier is exhausted.
    """
    size = len(cells)
    visited = [[False] * size for _ in range(size)]
    queue: deque[Coord] = deque([source])
    visited[source[0]][source[1]] = True
    reachable = 1

    while queue:
        i, j = queue.popleft()
        for di, dj in DIRECTIONS:
            ni, nj = i + di, j + dj
            if 0 <= ni < size and 0 <= nj < size:
                if not visited[ni][nj] and is_passable(cells[ni][nj]):
                    visited[ni][nj] = True
                    reachable += 1
                    queue.append((ni, nj))

    return reachable == expected_count


def compute_distances(cells: CellRows, source: Coord) -> np.ndarray:
    """Shortest 4-directional step count from ``source`` to every cell.

    Walls and cells that cannot be reached keep ``UNREACHED`` (-1); the source
    itself is 0.
    """
    size = len(cells)
    distances = np.full((size, size), UNREACHED, dtype=np.int64)
    queue: deque[Coord] = deque([source])
    distances[source] = 0

    while queue:
        i, j = queue.popleft()
        step = distances[i, j] + 1
        for di, dj in DIRECTIONS:
            ni, nj = i + di, j + dj
            if 0 <= ni < size and 0 <= nj < size:
                if distances[ni, nj] == UNREACHED and is_passable(cells[ni][nj]):
                    distances[ni, nj] = step
                    queue.append((ni, nj))

    return distances


def count_passable(cells: CellRows) -> int:
    return sum(1 for row in cells for value in row if is_passable(value))
