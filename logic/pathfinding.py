"""logic/pathfinding.py — A* pathfinding on the occupancy grid.

Movement model
--------------
8-connected tiles.  Cardinal steps cost 1, diagonal steps cost √2.  A
diagonal step is refused when either orthogonal tile it cuts across is
blocked, so paths never clip a wall corner.  The heuristic is Chebyshev
distance, which is admissible and consistent for this model.

Best effort
-----------
A blocked *start* tile fails immediately: the bot is inside an obstacle.
A blocked or walled-off *goal* does not.  The search keeps the node with
the smallest heuristic it has discovered; when the frontier runs dry the
path to that node is returned instead, so the bot still gets as close as
it can.  Only if nothing better than the start tile was found does
planning fail.

Public API
----------
``plan(grid, start, goal)``                      → ``list[(x, y)]`` or ``None``
``find_path(query, surface, start, goal, ...)``  → rasterize + ``plan``
``path_cost(path, start)``                       → summed step length
"""

from __future__ import annotations
import heapq
import math

from logic.obstacles import OccupancyGrid, Tile, build_occupancy, tile_of, tile_centre

DIAGONAL_COST = math.sqrt(2.0)


# ── 8-directional offsets ────────────────────────────────────────────

_DIRS = (
    ( 1,  0), (-1,  0), ( 0,  1), ( 0, -1),    # cardinal
    ( 1,  1), ( 1, -1), (-1,  1), (-1, -1),    # diagonal
)
_COSTS = (
    1.0, 1.0, 1.0, 1.0,
    DIAGONAL_COST, DIAGONAL_COST, DIAGONAL_COST, DIAGONAL_COST,
)


def chebyshev(a: Tile, b: Tile) -> int:
    return max(abs(a[0] - b[0]), abs(a[1] - b[1]))


# ── A* search ────────────────────────────────────────────────────────

def plan(grid: OccupancyGrid,
         start: tuple[float, float],
         goal: tuple[float, float]) -> list[tuple[float, float]] | None:
    """A* from *start* to *goal* over *grid*.

    Returns
    -------
    list[(float, float)] | None
        Waypoints from the tile after the start to the end of the path.
        On success the last waypoint is *goal* itself (not its tile
        centre).  If the goal cannot be reached, the path ends at the
        centre of the reachable tile closest to it by Chebyshev
        distance.  ``None`` if the start is blocked or nothing closer
        than the start tile is reachable.
    """
    sx, sy = tile_of(start)
    gx, gy = tile_of(goal)

    # Trivial case: already there
    if (sx, sy) == (gx, gy):
        return [(goal[0], goal[1])]

    if grid.is_blocked(sx, sy):
        return None

    start_t = (sx, sy)
    goal_t = (gx, gy)
    start_h = chebyshev(start_t, goal_t)

    # Open set: (f_score, h, x, y).  h breaks f ties toward the goal.
    open_set: list[tuple[float, int, int, int]] = [(float(start_h), start_h, sx, sy)]
    g_score: dict[Tile, float] = {start_t: 0.0}
    came_from: dict[Tile, Tile] = {}
    closed: set[Tile] = set()

    best_t = start_t
    best_h = start_h

    while open_set:
        _f, _h, x, y = heapq.heappop(open_set)
        cur = (x, y)

        if cur in closed:
            continue
        closed.add(cur)

        if cur == goal_t:
            path = _reconstruct(came_from, cur)
            path[-1] = (goal[0], goal[1])
            return path

        for (dx, dy), move_cost in zip(_DIRS, _COSTS):
            nx, ny = x + dx, y + dy
            nxt = (nx, ny)
            if nxt in closed:
                continue
            if grid.is_blocked(nx, ny):
                continue

            # Diagonal: prevent corner-cutting through walls
            if dx != 0 and dy != 0:
                if grid.is_blocked(x + dx, y) or grid.is_blocked(x, y + dy):
                    continue

            new_g = g_score[cur] + move_cost
            if new_g < g_score.get(nxt, float("inf")):
                g_score[nxt] = new_g
                came_from[nxt] = cur
                h = chebyshev(nxt, goal_t)
                if h < best_h:
                    best_h = h
                    best_t = nxt
                heapq.heappush(open_set, (new_g + h, h, nx, ny))

    # Frontier exhausted; fall back to the closest reachable tile
    if best_t == start_t:
        return None
    return _reconstruct(came_from, best_t)


def _reconstruct(came_from: dict[Tile, Tile], end: Tile) -> list[tuple[float, float]]:
    """Walk parent links back to the start (exclusive) and reverse."""
    path: list[tuple[float, float]] = []
    node = end
    while node in came_from:
        path.append(tile_centre(node))
        node = came_from[node]
    path.reverse()
    return path


def find_path(query, surface: str,
              start: tuple[float, float], goal: tuple[float, float],
              margin: int | None = None) -> list[tuple[float, float]] | None:
    """Rasterize obstacles around *start* / *goal* and plan between them."""
    grid = build_occupancy(query, surface, start, goal, margin)
    return plan(grid, start, goal)


def path_cost(path: list[tuple[float, float]],
              start: tuple[float, float] | None = None) -> float:
    """Sum of straight-line step lengths along *path* (from *start* if given)."""
    total = 0.0
    prev = start
    for wp in path:
        if prev is not None:
            total += math.hypot(wp[0] - prev[0], wp[1] - prev[1])
        prev = wp
    return total
