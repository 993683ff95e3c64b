"""test_routing.py — Damaged-object discovery and route sequencing.

Covers:
1. Nearest-neighbour ordering
2. Route totality over a scattered field
3. Damaged-object search (force, kind, radius, health filters)
4. Stale targets are skipped and the cursor advances

Run:  python test_routing.py
"""
from __future__ import annotations
import sys, random, traceback

from core.ecs import World
from components import Position, Identity, Health, Route
from logic import routing
from logic.health import MaxHealthTable
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

MAX_HP = {"gun_turret": 400, "inserter": 150}


def _make_world():
    world = World()
    q = WorldQuery(world, MaxHealthTable(static=MAX_HP))
    return world, q


def _thing(world: World, x: float, y: float, name: str = "gun_turret",
           hp: float | None = 100.0, force: str = "player",
           kind: str = "object") -> int:
    eid = world.spawn()
    world.add(eid, Position(x=x, y=y))
    world.add(eid, Identity(name=name, kind=kind, force=force))
    if hp is not None:
        world.add(eid, Health(current=hp))
    world.surface_add(eid, "overworld")
    return eid


# ═══════════════════════════════════════════════════════════════════════
#  1 — Ordering
# ═══════════════════════════════════════════════════════════════════════

def test_nearest_neighbour_order():
    print("\n=== 1: Nearest-neighbour ordering ===")
    world, q = _make_world()
    far = _thing(world, 5.0, 0.0)
    near = _thing(world, 1.0, 0.0)
    mid = _thing(world, 3.0, 0.0)

    order = routing.build_route([far, near, mid], (0.0, 0.0), q)
    check(order == [near, mid, far], f"1a: visits nearest first ({order})")

    # Greedy continues from the last chosen target, not from the start
    a = _thing(world, 0.0, 4.0)
    b = _thing(world, 0.0, -5.0)
    c = _thing(world, 0.0, 7.0)
    order = routing.build_route([a, b, c], (0.0, 0.0), q)
    check(order == [a, c, b], f"1b: greedy hops from the last target ({order})")

    check(routing.build_route([], (0.0, 0.0), q) == [], "1c: no targets → empty route")


# ═══════════════════════════════════════════════════════════════════════
#  2 — Totality
# ═══════════════════════════════════════════════════════════════════════

def test_route_totality():
    print("\n=== 2: Route totality ===")
    world, q = _make_world()
    rng = random.Random(7)
    targets = [_thing(world, rng.uniform(-30, 30), rng.uniform(-30, 30))
               for _ in range(40)]
    gone = targets[::9]
    for eid in gone:
        q.destroy(eid)

    order = routing.build_route(targets, (0.0, 0.0), q)
    valid = [t for t in targets if t not in gone]
    check(sorted(order) == sorted(valid),
          f"2a: every valid target exactly once ({len(order)}/{len(valid)})")
    check(len(set(order)) == len(order), "2b: no duplicates")
    check(not set(order) & set(gone), "2c: invalid targets dropped")


# ═══════════════════════════════════════════════════════════════════════
#  3 — Damaged search
# ═══════════════════════════════════════════════════════════════════════

def test_find_damaged():
    print("\n=== 3: Damaged-object search ===")
    world, q = _make_world()
    hurt = _thing(world, 2.0, 2.0, hp=120.0)
    full = _thing(world, 3.0, 1.0, hp=400.0)
    enemy = _thing(world, 1.0, 1.0, hp=10.0, force="enemy")
    far = _thing(world, 80.0, 0.0, hp=10.0)
    bot = _thing(world, 0.5, 0.5, name="repair_bot", hp=5.0, kind="bot")
    no_hp = _thing(world, 1.5, 0.0, hp=None)
    corner = _thing(world, 10.0, -10.0, name="inserter", hp=20.0)

    found = routing.find_damaged(q, "overworld", "player", (0.0, 0.0), 10.0)
    check(hurt in found, "3a: damaged own object found")
    check(full not in found, "3b: full-health object ignored")
    check(enemy not in found, "3c: other force ignored")
    check(far not in found, "3d: object outside the radius ignored")
    check(bot not in found, "3e: bots are never targets")
    check(no_hp not in found, "3f: objects without health ignored")
    check(corner in found, "3g: search area is a square (corner included)")

    route = Route()
    routing.rebuild(route, found, (0.0, 0.0), q)
    check(route.members == frozenset(found) and route.index == 0,
          "3h: rebuild records the damaged set and resets the cursor")
    check(route.targets[0] == hurt, "3i: nearest damaged object first")


# ═══════════════════════════════════════════════════════════════════════
#  4 — Stale targets
# ═══════════════════════════════════════════════════════════════════════

def test_stale_targets():
    print("\n=== 4: Stale targets ===")
    world, q = _make_world()
    a = _thing(world, 1.0, 0.0)
    b = _thing(world, 2.0, 0.0)
    c = _thing(world, 3.0, 0.0)
    route = Route()
    routing.rebuild(route, [a, b, c], (0.0, 0.0), q)

    check(routing.current_target(route, q) == a, "4a: first target returned")
    q.destroy(a)
    check(routing.current_target(route, q) == b, "4b: destroyed target skipped")
    check(route.index == 1, f"4c: cursor advanced past it (index {route.index})")

    world.get(b, Health).current = 400.0
    wanted = lambda eid: routing.is_damaged(q, eid)
    check(routing.current_target(route, q, wanted) == c,
          "4d: target repaired by someone else is skipped")

    q.destroy(c)
    check(routing.current_target(route, q, wanted) is None, "4e: exhausted → None")
    check(route.exhausted, "4f: route reports exhaustion")


# ═══════════════════════════════════════════════════════════════════════
#  MAIN
# ═══════════════════════════════════════════════════════════════════════

if __name__ == "__main__":
    sections = [
        ("Ordering", test_nearest_neighbour_order),
        ("Totality", test_route_totality),
        ("Damaged Search", test_find_damaged),
        ("Stale Targets", test_stale_targets),
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
    print(f"  Routing Tests: {_passed} passed, {_failed} failed  "
          f"(total {total})")
    print(f"{'=' * 60}")
    sys.exit(1 if _failed else 0)
