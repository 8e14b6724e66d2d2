"""Piece instance pool.

Every piece ever created lives in one arena and is addressed by a stable
integer handle (allocated like entity ids: monotonically, never recycled).
Per category the pool keeps an ordered *active* list and a *free* list of
retired handles. Placing a piece pops a free handle when there is one and only
allocates a new record otherwise, so repeated regenerations with similar
layouts stop allocating once a steady state is reached.

Records are mutable on purpose: a handle keeps its identity across
activation cycles and callers (renderers, enemy behaviour) can hold on to it.
"""

import logging
from dataclasses import dataclass, field
from typing import Dict, Iterator, List

from grid_dungeon.types import Coord, PieceCategory, PieceHandle, Vector3

logger = logging.getLogger(__name__)


@dataclass
class PieceInstance:
    """A pooled piece.

    Attributes:
        handle: Stable arena index.
        category: Piece kind; never changes.
        index: Grid index the piece currently stands on (may lie on the
            outer ring, e.g. ``(-1, 3)``, for boundary walls).
        position: World position.
        orientation: Yaw in degrees.
        variant: Visual variant index.
        active: True while the piece is part of the current layout.
        eliminated: Enemy-only flag, set when the enemy is defeated and
            cleared when the handle is reused.
    """

    handle: PieceHandle
    category: PieceCategory
    index: Coord
    position: Vector3
    orientation: float = 0.0
    variant: int = 0
    active: bool = True
    eliminated: bool = False


def _handle_generator() -> Iterator[PieceHandle]:
    handle = 0
    while True:
        yield handle
        handle += 1


@dataclass
class PieceInstancePool:
    """Arena of :class:`PieceInstance` records with per-category free lists."""

    _instances: List[PieceInstance] = field(default_factory=list)
    _active: Dict[PieceCategory, List[PieceHandle]] = field(
        default_factory=lambda: {category: [] for category in PieceCategory}
    )
    _free: Dict[PieceCategory, List[PieceHandle]] = field(
        default_factory=lambda: {category: [] for category in PieceCategory}
    )
    _handles: Iterator[PieceHandle] = field(default_factory=_handle_generator)

    def place(
        self,
        category: PieceCategory,
        index: Coord,
        position: Vector3,
        orientation: float = 0.0,
        variant: int = 0,
    ) -> PieceHandle:
        """Activate a piece of ``category`` at ``index``.

        Reuses a retired instance of the same category when one exists,
        otherwise creates a new one.
        """
        free = self._free[category]
        if free:
            instance = self._instances[free.pop()]
            instance.index = index
            instance.position = position
            instance.orientation = orientation
            instance.variant = variant
            instance.active = True
            instance.eliminated = False
        else:
            instance = PieceInstance(
                handle=next(self._handles),
                category=category,
                index=index,
                position=position,
                orientation=orientation,
                variant=variant,
            )
            self._instances.append(instance)
        self._active[category].append(instance.handle)
        return instance.handle

    def release(self, handle: PieceHandle) -> bool:
        """Retire one active instance.

        Returns:
            True if the instance was active, False if it already was retired.

        Raises:
            KeyError: If ``handle`` was never issued by this pool.
        """
        instance = self.get(handle)
        if not instance.active:
            return False
        instance.active = False
        self._active[instance.category].remove(handle)
        self._free[instance.category].append(handle)
        return True

    def release_all(self, category: PieceCategory) -> int:
        """Retire every active instance of ``category``; returns how many."""
        active = self._active[category]
        for handle in active:
            self._instances[handle].active = False
        self._free[category].extend(active)
        released = len(active)
        active.clear()
        return released

    def get(self, handle: PieceHandle) -> PieceInstance:
        if not 0 <= handle < len(self._instances):
            raise KeyError(f"Unknown piece handle: {handle}")
        return self._instances[handle]

    def active(self, category: PieceCategory) -> List[PieceInstance]:
        """Active instances of ``category`` in placement order."""
        return [self._instances[handle] for handle in self._active[category]]

    def inactive(self, category: PieceCategory) -> List[PieceInstance]:
        return [self._instances[handle] for handle in self._free[category]]

    def active_count(self, category: PieceCategory) -> int:
        return len(self._active[category])

    def created_count(self, category: PieceCategory) -> int:
        """Number of distinct instances ever created for ``category``."""
        return len(self._active[category]) + len(self._free[category])

    def log_summary(self) -> None:
        for category in PieceCategory:
            logger.debug(
                "pool %s active=%d created=%d",
                category,
                self.active_count(category),
                self.created_count(category),
            )
