"""logic/repair_pool.py — Repair packs → spendable health points.

Each actor owns a ``RepairPool`` holding a health-point *capacity*.
Repairs draw from it with ``consume()``; when it runs short it is topped
up by withdrawing whole repair packs, each worth
``[bots.pool] health_per_unit`` points.

Refill order (stops as soon as the request is covered):

1. one pack from the preferred supply container — the cached one while
   it is valid and non-empty, otherwise the nearest container of the
   actor's force holding packs, which becomes the new preference;
2. the actor's own inventory, as many whole packs as the deficit needs;
3. the container again for anything still missing, relocating when it
   empties.

The grant is ``min(requested, capacity)``.  When nothing at all can be
granted and no source holds a pack, the pool raises its ``warned`` flag
and reports exhaustion once; the flag drops the next time capacity is
available, so each dry spell produces exactly one notice.

Invariant: ``capacity_after == capacity_before + refilled - granted``.
"""

from __future__ import annotations
import math
from typing import Callable

from components import RepairPool
from core.tuning import get as _tun


def _item() -> str:
    return _tun("bots.pool", "item", "repair_pack")


def _per_unit() -> float:
    return float(_tun("bots.pool", "health_per_unit", 100.0))


def reset(pool: RepairPool) -> None:
    pool.capacity = 0.0
    pool.container = None
    pool.warned = False


def preferred_container(pool: RepairPool, query, actor: int,
                        item: str | None = None) -> int | None:
    """Return the cached container if still usable, else locate and cache one."""
    item = item or _item()
    cached = pool.container
    if cached is not None and query.is_valid(cached) and query.inventory_count(cached, item) > 0:
        return cached
    pool.container = None
    if not query.is_valid(actor):
        return None
    found = query.locate_container(query.get_surface(actor), query.get_force(actor),
                                   query.get_position(actor), item)
    pool.container = found
    return found


def _withdraw(pool: RepairPool, query, source: int, item: str,
              units: int, per_unit: float) -> float:
    if units <= 0:
        return 0.0
    taken = query.inventory_remove(source, item, units)
    added = taken * per_unit
    pool.capacity += added
    return added


def refill(pool: RepairPool, requested: float, query, actor: int) -> float:
    """Top the pool up toward *requested*.  Returns capacity added."""
    item = _item()
    per_unit = _per_unit()
    if per_unit <= 0:
        return 0.0

    def deficit() -> float:
        return requested - pool.capacity

    added = 0.0

    # Tier 1: a single pack from the preferred container
    container = preferred_container(pool, query, actor, item)
    if container is not None and deficit() > 0:
        added += _withdraw(pool, query, container, item, 1, per_unit)

    # Tier 2: the actor's inventory, whole packs rounded up
    if deficit() > 0 and query.is_valid(actor):
        added += _withdraw(pool, query, actor, item,
                           math.ceil(deficit() / per_unit), per_unit)

    # Tier 3: back to containers for whatever is left
    while deficit() > 0:
        container = preferred_container(pool, query, actor, item)
        if container is None:
            break
        got = _withdraw(pool, query, container, item,
                        math.ceil(deficit() / per_unit), per_unit)
        if got <= 0:
            break
        added += got

    return added


def has_any_packs(pool: RepairPool, query, actor: int) -> bool:
    """True if the actor's inventory or any reachable container holds a pack."""
    item = _item()
    if query.inventory_count(actor, item) > 0:
        return True
    return preferred_container(pool, query, actor, item) is not None


def consume(pool: RepairPool, requested: float, query, actor: int,
            on_exhausted: Callable[[], None] | None = None) -> float:
    """Spend up to *requested* health points from *pool*.

    Returns the amount granted, ``0 <= granted <= requested``.
    *on_exhausted* is called once per exhaustion episode.
    """
    if requested <= 0:
        return 0.0

    if pool.capacity < requested:
        refill(pool, requested, query, actor)

    granted = min(requested, max(pool.capacity, 0.0))
    if granted > 0:
        pool.capacity -= granted
        pool.warned = False
        return granted

    if not pool.warned and not has_any_packs(pool, query, actor):
        pool.warned = True
        if on_exhausted is not None:
            on_exhausted()
    return 0.0


def pool_status(pool: RepairPool, query, actor: int) -> tuple[float, int, int]:
    """``(capacity, packs in preferred container, packs carried by actor)``."""
    item = _item()
    chest = 0
    if pool.container is not None and query.is_valid(pool.container):
        chest = query.inventory_count(pool.container, item)
    return (pool.capacity, chest, query.inventory_count(actor, item))
