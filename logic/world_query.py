"""logic/world_query.py — World-model operations the bot core consumes.

The pathfinder, follower, route sequencer, pool, and state machine never
touch components directly.  They call the operations below on a *query*
object, so any world model exposing the same methods can drive them.
``WorldQuery`` is the implementation backed by ``core.ecs.World``.

Every entity reference is an int id.  Callers check ``is_valid(eid)``
before use; the getters also return ``None`` for dead ids instead of
raising.

    query = WorldQuery(world)
    walls = query.find_blocking_objects("overworld", (0, 0, 10, 10))
    query.set_position(bot, (3.0, 4.0))
"""

from __future__ import annotations
from typing import TYPE_CHECKING

from components import (
    Position, Collider, Health, Inventory, Identity, Sprite, RepairBot,
)
from logic.health import MaxHealthTable
from logic.inventory_ops import count_item, remove_item

if TYPE_CHECKING:
    from core.ecs import World

Area = tuple[float, float, float, float]     # (min_x, min_y, max_x, max_y)


class WorldQuery:
    """ECS-backed world query.  Holds no per-actor state."""

    def __init__(self, world: "World", max_health: MaxHealthTable | None = None):
        self.world = world
        self.max_health = max_health or MaxHealthTable()

    # ── Validity ─────────────────────────────────────────────────────

    def is_valid(self, eid: int | None) -> bool:
        return self.world.alive(eid) and self.world.has(eid, Position)

    # ── Area searches ────────────────────────────────────────────────

    def find_blocking_objects(self, surface: str,
                              area: Area) -> list[tuple[float, float]]:
        """Positions of every solid collider inside *area*."""
        return [
            (pos.x, pos.y)
            for _eid, pos, col in self.world.in_area(surface, area, Position, Collider)
            if col.solid
        ]

    def find_objects(self, surface: str, area: Area, *,
                     force: str | None = None,
                     kind: str | None = None,
                     name: str | None = None) -> list[int]:
        """Ids of identified objects inside *area* matching every filter."""
        found = []
        for eid, _pos, ident in self.world.in_area(surface, area, Position, Identity):
            if force is not None and ident.force != force:
                continue
            if kind is not None and ident.kind != kind:
                continue
            if name is not None and ident.name != name:
                continue
            found.append(eid)
        return found

    # ── Health ───────────────────────────────────────────────────────

    def get_health(self, eid: int) -> float | None:
        if not self.world.alive(eid):
            return None
        hp = self.world.get(eid, Health)
        return hp.current if hp is not None else None

    def set_health(self, eid: int, value: float) -> None:
        hp = self.world.get(eid, Health)
        if hp is not None and self.world.alive(eid):
            hp.current = value

    def get_max_health(self, eid: int) -> float | None:
        if not self.world.alive(eid):
            return None
        ident = self.world.get(eid, Identity)
        if ident is None:
            return None
        force = ident.force

        def observe(name: str):
            for _eid, other, hp in self.world.query(Identity, Health):
                if other.name == name and other.force == force:
                    yield hp.current

        return self.max_health.lookup(ident.name, observe)

    # ── Position ─────────────────────────────────────────────────────

    def get_position(self, eid: int) -> tuple[float, float] | None:
        if not self.world.alive(eid):
            return None
        pos = self.world.get(eid, Position)
        return pos.as_tuple() if pos is not None else None

    def set_position(self, eid: int, xy: tuple[float, float]) -> None:
        """Teleport *eid* to *xy* (no velocity, no collision)."""
        pos = self.world.get(eid, Position)
        if pos is not None and self.world.alive(eid):
            pos.x, pos.y = xy

    def get_surface(self, eid: int) -> str | None:
        pos = self.world.get(eid, Position)
        return pos.surface if pos is not None and self.world.alive(eid) else None

    def get_force(self, eid: int) -> str | None:
        ident = self.world.get(eid, Identity)
        return ident.force if ident is not None and self.world.alive(eid) else None

    def get_kind(self, eid: int) -> str | None:
        ident = self.world.get(eid, Identity)
        return ident.kind if ident is not None and self.world.alive(eid) else None

    # ── Inventories ──────────────────────────────────────────────────

    def inventory_count(self, eid: int | None, item: str) -> int:
        if not self.world.alive(eid):
            return 0
        return count_item(self.world.get(eid, Inventory), item)

    def inventory_remove(self, eid: int | None, item: str, count: int) -> int:
        if not self.world.alive(eid):
            return 0
        return remove_item(self.world.get(eid, Inventory), item, count)

    def locate_container(self, surface: str, force: str | None,
                         near: tuple[float, float], item: str) -> int | None:
        """Nearest container of *force* holding at least one *item*."""
        best: int | None = None
        best_d2 = float("inf")
        nx, ny = near
        for eid, pos, ident, inv in self.world.query_surface(
                surface, Position, Identity, Inventory):
            if ident.kind != "container":
                continue
            if force is not None and ident.force != force:
                continue
            if count_item(inv, item) < 1:
                continue
            d2 = (pos.x - nx) ** 2 + (pos.y - ny) ** 2
            if d2 < best_d2:
                best_d2 = d2
                best = eid
        return best

    # ── Bot lifecycle ────────────────────────────────────────────────

    def spawn_bot(self, surface: str, force: str, xy: tuple[float, float],
                  owner: int, name: str = "repair_bot") -> int | None:
        world = self.world
        eid = world.spawn()
        world.add(eid, Position(x=xy[0], y=xy[1], surface=surface))
        world.add(eid, Identity(name=name, kind="bot", force=force))
        world.add(eid, Sprite(char="b", color=(90, 220, 90), layer=5))
        world.add(eid, RepairBot(owner=owner))
        world.surface_add(eid, surface)
        return eid

    def destroy(self, eid: int | None) -> None:
        if self.world.alive(eid):
            self.world.kill(eid)
