"""logic/obstacles.py — Obstacle rasterization for one planning call.

A world position maps to the tile it rounds to (halves round up, so
``tile_of((2.5, -0.5)) == (3, 0)``).  ``build_occupancy`` collects every
solid object in the box spanned by start and goal plus a margin and
marks its tile blocked.  Tiles outside that box count as blocked too,
which bounds the A* search.

The grid is built fresh for every planning call and thrown away after:
there is no incremental invalidation.
"""

from __future__ import annotations
import math
from dataclasses import dataclass, field

from core.tuning import get as _tun

Tile = tuple[int, int]


def tile_of(pos: tuple[float, float]) -> Tile:
    """Round a world position to its tile coordinate."""
    return (math.floor(pos[0] + 0.5), math.floor(pos[1] + 0.5))


def tile_centre(tile: Tile) -> tuple[float, float]:
    return (float(tile[0]), float(tile[1]))


@dataclass
class OccupancyGrid:
    """Blocked tiles inside an inclusive bounding box."""
    min_x: int
    max_x: int
    min_y: int
    max_y: int
    blocked: set[Tile] = field(default_factory=set)

    def in_bounds(self, x: int, y: int) -> bool:
        return self.min_x <= x <= self.max_x and self.min_y <= y <= self.max_y

    def is_blocked(self, x: int, y: int) -> bool:
        if not self.in_bounds(x, y):
            return True
        return (x, y) in self.blocked

    @classmethod
    def from_rows(cls, rows: list[str], origin: Tile = (0, 0),
                  wall: str = "#") -> "OccupancyGrid":
        """Build a grid from ASCII rows (``rows[y][x]``, *wall* = blocked).

        Handy for tests and the sandbox::

            OccupancyGrid.from_rows(["....",
                                     ".##.",
                                     "...."])
        """
        ox, oy = origin
        height = len(rows)
        width = max((len(r) for r in rows), default=0)
        blocked = {
            (ox + x, oy + y)
            for y, row in enumerate(rows)
            for x, ch in enumerate(row)
            if ch == wall
        }
        return cls(min_x=ox, max_x=ox + width - 1,
                   min_y=oy, max_y=oy + height - 1, blocked=blocked)


def build_occupancy(query, surface: str,
                    start: tuple[float, float], goal: tuple[float, float],
                    margin: int | None = None) -> OccupancyGrid:
    """Rasterize blocking objects around *start* and *goal*.

    The grid box is ``[min(start, goal) - margin, max(start, goal) + margin]``
    on each axis.  Objects are searched one tile beyond the box so a wall
    sitting on the border is still seen.
    """
    if margin is None:
        margin = int(_tun("pathfinding", "search_margin", 32))
    sx, sy = tile_of(start)
    gx, gy = tile_of(goal)

    grid = OccupancyGrid(
        min_x=min(sx, gx) - margin,
        max_x=max(sx, gx) + margin,
        min_y=min(sy, gy) - margin,
        max_y=max(sy, gy) + margin,
    )
    area = (grid.min_x - 1, grid.min_y - 1, grid.max_x + 1, grid.max_y + 1)
    for pos in query.find_blocking_objects(surface, area):
        grid.blocked.add(tile_of(pos))
    return grid


def is_position_blocked(query, surface: str, pos: tuple[float, float],
                        half_extent: float | None = None) -> bool:
    """True if any blocking object lies within *half_extent* of *pos*."""
    if half_extent is None:
        half_extent = _tun("pathfinding", "blocking_half_extent", 0.4)
    x, y = pos
    area = (x - half_extent, y - half_extent, x + half_extent, y + half_extent)
    return len(query.find_blocking_objects(surface, area)) > 0
