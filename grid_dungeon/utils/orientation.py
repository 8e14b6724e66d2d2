"""Yaw helpers for placing pieces.

Orientations are yaw angles in degrees about the vertical axis, with 0 facing
world +z and 90 facing +x.
"""

import math
import random
from typing import Sequence

QUARTER_TURNS = (0.0, 90.0, 180.0, 270.0)


def face_center(position: Sequence[float], center: Sequence[float]) -> float:
    """Yaw that turns a piece at ``position`` toward ``center`` on the x/z plane.

    A piece already on the center keeps yaw 0.
    """
    dx = center[0] - position[0]
    dz = center[2] - position[2]
    if dx == 0 and dz == 0:
        return 0.0
    return math.degrees(math.atan2(dx, dz)) % 360.0


def random_quarter_turn(rng: random.Random) -> float:
    return QUARTER_TURNS[rng.randrange(len(QUARTER_TURNS))]
