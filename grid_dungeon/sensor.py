"""Observation sensor for learning agents.

Wraps :meth:`grid_dungeon.state.LevelState.local_observation_window` with a
Gymnasium space description and a flat writer. The window is written
row-major into a 1D ``float32`` buffer that an observation pipeline can append
to its own vector.

Usage:

``sensor = DungeonSensor(radius=3)``
``obs = sensor.write(level, level.agent.position)``
"""

from typing import Optional, Sequence

import numpy as np
from gymnasium import spaces

from grid_dungeon.state import LevelState


class DungeonSensor:
    """Square local grid sensor of side ``2 * radius + 1``."""

    def __init__(self, radius: int = 3, name: str = "DungeonSensor"):
        if radius < 0:
            raise ValueError(f"radius must be >= 0, got {radius}")
        self.radius = radius
        self.name = name
        self._window = np.empty((self.width, self.width), dtype=np.float32)

    @property
    def width(self) -> int:
        return 2 * self.radius + 1

    @property
    def observation_space(self) -> spaces.Box:
        """Single-channel visual space, values in ``[0, 1]``."""
        return spaces.Box(
            low=0.0,
            high=1.0,
            shape=(1, self.width, self.width),
            dtype=np.float32,
        )

    def observe(self, level: LevelState, center: Sequence[float]) -> np.ndarray:
        """Window shaped like ``observation_space`` (a fresh array)."""
        window = level.local_observation_window(center, self.radius, out=self._window)
        return window.reshape(1, self.width, self.width).copy()

    def write(
        self,
        level: LevelState,
        center: Sequence[float],
        out: Optional[np.ndarray] = None,
        offset: int = 0,
    ) -> np.ndarray:
        """Write the flattened window into ``out`` starting at ``offset``.

        Arguments:
            level: Level to sample.
            center: World position the window is centered on.
            out: 1D float buffer; a new one of exactly ``width ** 2`` is made
                if omitted.
            offset: First index of ``out`` to write.

        Returns:
            The buffer that was written.
        """
        level.local_observation_window(center, self.radius, out=self._window)
        count = self.width * self.width
        if out is None:
            out = np.empty(count, dtype=np.float32)
        if offset < 0 or offset + count > out.shape[0]:
            raise ValueError(
                f"Buffer of length {out.shape[0]} cannot hold {count} values at {offset}"
            )
        out[offset : offset + count] = self._window.ravel()
        return out
