"""components.spatial — Position and blocking shapes.

All coordinates are in world units (1 tile = 1 unit).  A tile is the
integer cell a position rounds to; see ``logic.obstacles.tile_of``.
"""

from __future__ import annotations
from dataclasses import dataclass


@dataclass
class Position:
    x: float = 0.0
    y: float = 0.0
    surface: str = "overworld"

    def as_tuple(self) -> tuple[float, float]:
        return (self.x, self.y)


@dataclass
class Collider:
    """Footprint of an object.  ``solid`` objects block bot movement.

    The pathfinder rasterizes every solid collider to the single tile its
    position rounds to.
    """
    width: float = 1.0
    height: float = 1.0
    solid: bool = True
