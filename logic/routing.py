"""logic/routing.py — Which damaged object the bot visits next.

``build_route`` orders targets greedily: from the current point, always
go to the nearest unvisited target (squared Euclidean distance), then
continue from there.  O(n²) and not optimal, which is fine for the
handful of targets around an actor; the route is rebuilt often anyway.
"""

from __future__ import annotations
from typing import Callable, Iterable

from components import Route
from logic.health import NON_TARGET_KINDS, is_damaged, square_area


def build_route(targets: Iterable[int], start: tuple[float, float],
                query) -> list[int]:
    """Greedy nearest-neighbour ordering of the valid *targets*."""
    candidates = list(targets)
    used: set[int] = set()
    ordered: list[int] = []
    cx, cy = start

    while True:
        best_i: int | None = None
        best_d2 = float("inf")
        for i, eid in enumerate(candidates):
            if i in used or not query.is_valid(eid):
                continue
            ex, ey = query.get_position(eid)
            d2 = (ex - cx) ** 2 + (ey - cy) ** 2
            if d2 < best_d2:
                best_d2 = d2
                best_i = i
        if best_i is None:
            break
        used.add(best_i)
        chosen = candidates[best_i]
        ordered.append(chosen)
        cx, cy = query.get_position(chosen)

    return ordered


def find_damaged(query, surface: str, force: str | None,
                 centre: tuple[float, float], radius: float) -> list[int]:
    """Damaged objects of *force* in the square of half-size *radius*."""
    found = []
    for eid in query.find_objects(surface, square_area(centre, radius), force=force):
        if query.get_kind(eid) in NON_TARGET_KINDS:
            continue
        if is_damaged(query, eid):
            found.append(eid)
    return found


def rebuild(route: Route, damaged: list[int], start: tuple[float, float],
            query) -> None:
    """Replace *route* with a fresh ordering of *damaged* from *start*."""
    route.targets = build_route(damaged, start, query)
    route.index = 0
    route.members = frozenset(damaged)


def current_target(route: Route, query,
                   still_wanted: Callable[[int], bool] | None = None) -> int | None:
    """Return the route's current target, skipping stale entries.

    Targets that are no longer valid (or for which *still_wanted* says
    no) are passed over and the index advances.  ``None`` once the route
    is exhausted.
    """
    while route.index < len(route.targets):
        eid = route.targets[route.index]
        if query.is_valid(eid) and (still_wanted is None or still_wanted(eid)):
            return eid
        route.index += 1
    return None
