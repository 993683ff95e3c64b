"""test_repair_pool.py — Repair packs → spendable health points.

Covers:
1. Container first, then inventory (whole packs, rounded up)
2. No refill while the pool already covers the request
3. Conservation over a long sequence of requests
4. Exhaustion: partial grants, one notice per dry spell
5. Preferred container caching and relocation

Run:  python test_repair_pool.py
"""
from __future__ import annotations
import sys, random, traceback

from core.ecs import World
from components import Position, Identity, Inventory, RepairPool
from logic import repair_pool
from logic.inventory_ops import add_item
from logic.world_query import WorldQuery


# ── Test harness ─────────────────────────────────────────────────────

_passed = 0
_failed = 0

def ok(label: str):
    global _passed
    _passed += 1
    print(f"  [PASS] {label}")

def fail(label: str, detail: str = ""):
    global _failed
    _failed += 1
    msg = f"  [FAIL] {label}"
    if detail:
        msg += f" — {detail}"
    print(msg)

def check(cond: bool, label: str, detail: str = ""):
    if cond:
        ok(label)
    else:
        fail(label, detail)
    assert cond, f"{label}: {detail}"


# ── Helpers ──────────────────────────────────────────────────────────

PACK = "repair_pack"


def _holder(world: World, x: float, y: float, kind: str, packs: int,
            force: str = "player") -> int:
    eid = world.spawn()
    world.add(eid, Position(x=x, y=y))
    world.add(eid, Identity(name=kind, kind=kind, force=force))
    world.add(eid, Inventory(items={PACK: packs} if packs else {}))
    world.surface_add(eid, "overworld")
    return eid


def _packs(world: World, eid: int) -> int:
    return world.get(eid, Inventory).items.get(PACK, 0)


# ═══════════════════════════════════════════════════════════════════════
#  1 — Refill tiers
# ═══════════════════════════════════════════════════════════════════════

def test_refill_tiers():
    print("\n=== 1: Refill tiers ===")
    world = World()
    q = WorldQuery(world)
    actor = _holder(world, 0.0, 0.0, "actor", 3)
    chest = _holder(world, 4.0, 0.0, "container", 5)
    pool = RepairPool()
    events = []

    granted = repair_pool.consume(pool, 150.0, q, actor, lambda: events.append("dry"))
    check(granted == 150.0, f"1a: full request granted ({granted})")
    check(_packs(world, chest) == 4, "1b: exactly one pack taken from the container")
    check(_packs(world, actor) == 2, "1c: remaining 50 hp → one whole pack from inventory")
    check(pool.capacity == 50.0, f"1d: 200 in, 150 out → 50 left ({pool.capacity})")
    check(not pool.warned and not events, "1e: no exhaustion notice")
    check(pool.container == chest, "1f: container remembered as preferred")

    # Inventory empty → the container covers the rest
    world = World()
    q = WorldQuery(world)
    actor = _holder(world, 0.0, 0.0, "actor", 0)
    chest = _holder(world, 4.0, 0.0, "container", 5)
    pool = RepairPool()
    granted = repair_pool.consume(pool, 350.0, q, actor)
    check(granted == 350.0 and _packs(world, chest) == 1,
          "1g: container tops up what the inventory could not",
          f"granted={granted} chest={_packs(world, chest)}")


# ═══════════════════════════════════════════════════════════════════════
#  2 — Already covered
# ═══════════════════════════════════════════════════════════════════════

def test_no_refill_when_covered():
    print("\n=== 2: Already covered ===")
    world = World()
    q = WorldQuery(world)
    actor = _holder(world, 0.0, 0.0, "actor", 3)
    chest = _holder(world, 4.0, 0.0, "container", 5)
    pool = RepairPool(capacity=200.0)

    granted = repair_pool.consume(pool, 50.0, q, actor)
    check(granted == 50.0, "2a: request granted")
    check(pool.capacity == 150.0, f"2b: capacity 200 → 150 ({pool.capacity})")
    check(_packs(world, chest) == 5 and _packs(world, actor) == 3,
          "2c: no packs withdrawn")
    check(repair_pool.consume(pool, 0.0, q, actor) == 0.0
          and repair_pool.consume(pool, -5.0, q, actor) == 0.0,
          "2d: zero or negative requests grant nothing")


# ═══════════════════════════════════════════════════════════════════════
#  3 — Conservation
# ═══════════════════════════════════════════════════════════════════════

def test_conservation():
    print("\n=== 3: Conservation ===")
    world = World()
    q = WorldQuery(world)
    actor = _holder(world, 0.0, 0.0, "actor", 6)
    chests = [_holder(world, 3.0, 0.0, "container", 4),
              _holder(world, 9.0, 0.0, "container", 3)]
    pool = RepairPool()
    rng = random.Random(3)
    start_packs = 6 + 4 + 3

    bad = []
    total_granted = 0.0
    for i in range(60):
        req = rng.uniform(0.0, 180.0)
        before = pool.capacity
        packs_before = _packs(world, actor) + sum(_packs(world, c) for c in chests)
        got = repair_pool.consume(pool, req, q, actor)
        packs_after = _packs(world, actor) + sum(_packs(world, c) for c in chests)
        refilled = (packs_before - packs_after) * 100.0
        if not 0.0 <= got <= req:
            bad.append(f"#{i}: granted {got} for {req}")
        if abs(pool.capacity - (before + refilled - got)) > 1e-6:
            bad.append(f"#{i}: {before} + {refilled} - {got} != {pool.capacity}")
        if pool.capacity < -1e-9:
            bad.append(f"#{i}: negative capacity {pool.capacity}")
        total_granted += got

    check(not bad, "3a: capacity_after = before + refilled - granted, 0 ≤ granted ≤ requested",
          "; ".join(bad[:3]))
    check(abs(total_granted + pool.capacity - start_packs * 100.0) < 1e-6,
          f"3b: every pack's worth is accounted for ({total_granted:.1f} + {pool.capacity:.1f})")


# ═══════════════════════════════════════════════════════════════════════
#  4 — Exhaustion
# ═══════════════════════════════════════════════════════════════════════

def test_exhaustion():
    print("\n=== 4: Exhaustion ===")
    world = World()
    q = WorldQuery(world)
    actor = _holder(world, 0.0, 0.0, "actor", 1)
    pool = RepairPool()
    notices = []
    dry = lambda: notices.append(1)

    granted = repair_pool.consume(pool, 250.0, q, actor, dry)
    check(granted == 100.0, f"4a: partial grant when supply runs short ({granted})")
    check(not notices, "4b: no notice for a partial grant")

    grants = [repair_pool.consume(pool, 50.0, q, actor, dry) for _ in range(5)]
    check(grants == [0.0] * 5, f"4c: dry pool grants nothing ({grants})")
    check(len(notices) == 1 and pool.warned,
          f"4d: exactly one notice per dry spell ({len(notices)})")

    add_item(world.get(actor, Inventory), PACK)
    check(repair_pool.consume(pool, 30.0, q, actor, dry) == 30.0,
          "4e: supply restored → grants again")
    check(not pool.warned, "4f: warned flag cleared once capacity returns")

    pool.capacity = 0.0
    world.get(actor, Inventory).items.clear()
    repair_pool.consume(pool, 30.0, q, actor, dry)
    check(len(notices) == 2, "4g: next dry spell warns again")


# ═══════════════════════════════════════════════════════════════════════
#  5 — Preferred container
# ═══════════════════════════════════════════════════════════════════════

def test_preferred_container():
    print("\n=== 5: Preferred container ===")
    world = World()
    q = WorldQuery(world)
    actor = _holder(world, 0.0, 0.0, "actor", 0)
    near = _holder(world, 2.0, 0.0, "container", 1)
    far = _holder(world, 8.0, 0.0, "container", 3)
    _holder(world, 1.0, 0.0, "container", 9, force="enemy")
    pool = RepairPool()

    check(repair_pool.preferred_container(pool, q, actor) == near,
          "5a: nearest own-force container with packs")

    repair_pool.consume(pool, 100.0, q, actor)
    check(_packs(world, near) == 0, "5b: pack drawn from the nearest container")

    repair_pool.consume(pool, 100.0, q, actor)
    check(pool.container == far and _packs(world, far) == 2,
          "5c: empty cached container replaced by the next one")

    q.destroy(far)
    check(repair_pool.preferred_container(pool, q, actor) is None,
          "5d: destroyed container dropped, nothing else usable")

    cap, chest, carried = repair_pool.pool_status(pool, q, actor)
    check((cap, chest, carried) == (0.0, 0, 0), f"5e: status ({cap}, {chest}, {carried})")


# ═══════════════════════════════════════════════════════════════════════
#  MAIN
# ═══════════════════════════════════════════════════════════════════════

if __name__ == "__main__":
    sections = [
        ("Refill Tiers", test_refill_tiers),
        ("Already Covered", test_no_refill_when_covered),
        ("Conservation", test_conservation),
        ("Exhaustion", test_exhaustion),
        ("Preferred Container", test_preferred_container),
    ]

    for name, fn in sections:
        try:
            fn()
        except Exception:
            _failed += 1
            print(f"\n  [CRASH] {name} — unhandled exception:")
            traceback.print_exc()

    total = _passed + _failed
    print(f"\n{'=' * 60}")
    print(f"  Repair Pool Tests: {_passed} passed, {_failed} failed  "
          f"(total {total})")
    print(f"{'=' * 60}")
    sys.exit(1 if _failed else 0)
