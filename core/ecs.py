"""
core/ecs.py — Entity-Component-System

Entities are ints. Components are any object, stored by type.
Query by component types to get matching entities.

    w = World()
    e = w.spawn()
    w.add(e, Position(5.0, 3.0))
    w.add(e, Health(100))

    for eid, pos, hp in w.query(Position, Health):
        pos.x += 1
        hp.current -= 5

Entity ids are never reused, so a stale id held across cycles simply
stops being ``alive()`` once the entity is killed.
"""

from __future__ import annotations
from typing import Any, Iterator


class World:
    def __init__(self):
        self._next_id = 0
        self._stores: dict[type, dict[int, Any]] = {}
        self._dead: set[int] = set()
        # Surface index: surface name → entity IDs living on it.  Kept in
        # sync by surface_add / surface_set so area queries only scan one
        # surface instead of every Position component.
        self._surface_index: dict[str, set[int]] = {}

    # -- Surface helpers (keep index in sync) --

    def surface_add(self, eid: int, surface: str):
        """Register *eid* in the surface index for *surface*."""
        self._surface_index.setdefault(surface, set()).add(eid)

    def surface_set(self, eid: int, new_surface: str):
        """Move *eid* to *new_surface* in the index."""
        for eids in self._surface_index.values():
            eids.discard(eid)
        self._surface_index.setdefault(new_surface, set()).add(eid)

    def surface_entities(self, surface: str) -> set[int]:
        """Return the set of living entity IDs on *surface*."""
        return self._surface_index.get(surface, set()) - self._dead

    # -- Spatial queries --

    def query_surface(self, surface: str, *types: type) -> Iterator[tuple]:
        """Yield ``(eid, comp1, comp2, ...)`` for entities on *surface*."""
        eids = self.surface_entities(surface)
        if not eids or not types:
            return
        stores = [self._stores.get(t, {}) for t in types]
        for eid in sorted(eids):
            if all(eid in s for s in stores):
                yield (eid, *(s[eid] for s in stores))

    def in_area(self, surface: str, area: tuple[float, float, float, float],
                *types: type) -> Iterator[tuple]:
        """Yield ``(eid, comp1, ...)`` whose first component lies in *area*.

        *area* is ``(min_x, min_y, max_x, max_y)``, inclusive.  The first
        type must carry ``x`` / ``y`` (normally ``Position``).
        """
        min_x, min_y, max_x, max_y = area
        for result in self.query_surface(surface, *types):
            pos = result[1]
            if min_x <= pos.x <= max_x and min_y <= pos.y <= max_y:
                yield result

    def nearby(self, surface: str, x: float, y: float, radius: float,
               *types: type) -> Iterator[tuple]:
        """Yield ``(eid, comp1, comp2, ..., dist_sq)`` within *radius*.

        The last element is the squared distance so callers can compare
        without an extra sqrt.
        """
        r_sq = radius * radius
        for result in self.query_surface(surface, *types):
            pos = result[1]
            dx = pos.x - x
            dy = pos.y - y
            dsq = dx * dx + dy * dy
            if dsq <= r_sq:
                yield (*result, dsq)

    # -- Entities --

    def spawn(self) -> int:
        self._next_id += 1
        return self._next_id

    def kill(self, eid: int):
        self._dead.add(eid)

    def alive(self, eid: int | None) -> bool:
        if eid is None or eid <= 0 or eid > self._next_id:
            return False
        return eid not in self._dead

    def purge(self):
        """Remove dead entities from all stores.

        Dead ids stay in ``_dead`` so ``alive()`` keeps answering False
        for handles that outlived their entity.
        """
        for store in self._stores.values():
            for eid in self._dead:
                store.pop(eid, None)
        for eids in self._surface_index.values():
            eids -= self._dead

    # -- Components --

    def add(self, eid: int, comp: Any):
        t = type(comp)
        if t not in self._stores:
            self._stores[t] = {}
        self._stores[t][eid] = comp

    def get(self, eid: int, comp_type: type) -> Any | None:
        return self._stores.get(comp_type, {}).get(eid)

    def has(self, eid: int, comp_type: type) -> bool:
        return eid in self._stores.get(comp_type, {})

    # -- Queries --

    def query(self, *types: type) -> Iterator[tuple]:
        """Yield (eid, comp1, comp2, ...) for entities that have ALL types."""
        if not types:
            return
        # Iterate over the smallest bucket
        buckets = [(t, self._stores.get(t, {})) for t in types]
        buckets.sort(key=lambda b: len(b[1]))
        smallest = buckets[0][1]
        for eid in list(smallest):
            if eid < 0 or eid in self._dead:
                continue
            if all(eid in b for _, b in buckets):
                yield (eid, *(self._stores[t][eid] for t in types))

    def query_one(self, *types: type) -> tuple | None:
        """Return first match or None."""
        for result in self.query(*types):
            return result
        return None

    def all_of(self, comp_type: type) -> Iterator[tuple[int, Any]]:
        """Yield (eid, component) for every entity with this type."""
        for eid, comp in list(self._stores.get(comp_type, {}).items()):
            if eid not in self._dead and eid >= 0:
                yield eid, comp

    def count(self, comp_type: type) -> int:
        return sum(1 for _ in self.all_of(comp_type))

    # -- Resources (singletons, not tied to entities) --

    def set_res(self, resource: Any):
        t = type(resource)
        if t not in self._stores:
            self._stores[t] = {}
        self._stores[t][-1] = resource

    def res(self, res_type: type) -> Any | None:
        return self._stores.get(res_type, {}).get(-1)
