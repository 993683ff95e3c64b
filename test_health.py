"""test_health.py — Max-health resolution and area repair.

Covers:
1. Static table lookups
2. Inference from live instances, once per name
3. Unknown kinds with no usable instances are unrepairable
4. Area repair pays per object and stops when the budget runs out; actors are skipped

Run:  python test_health.py
"""
from __future__ import annotations
import sys, traceback

from core import tuning
from core.ecs import World
from components import Position, Identity, Health
from logic.health import (
    MaxHealthTable, is_damaged, missing_health, repair_area, square_area,
)
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

def _thing(world: World, x: float, y: float, name: str, hp: float | None,
           force: str = "player") -> int:
    eid = world.spawn()
    world.add(eid, Position(x=x, y=y))
    world.add(eid, Identity(name=name, kind="object", force=force))
    if hp is not None:
        world.add(eid, Health(current=hp))
    world.surface_add(eid, "overworld")
    return eid


# ═══════════════════════════════════════════════════════════════════════
#  1 — Static table
# ═══════════════════════════════════════════════════════════════════════

def test_static_table():
    print("\n=== 1: Static table ===")
    table = MaxHealthTable(static={"gun_turret": 400, "broken": 0})
    never = lambda name: iter(())
    check(table.lookup("gun_turret", never) == 400.0, "1a: known name → table value")
    check(table.static_value("broken") is None, "1b: non-positive entries ignored")

    tuning.reset()
    tuning.override("bots.max_health", "small_lamp", 100)
    try:
        live = MaxHealthTable()
        check(live.static_value("small_lamp") == 100.0,
              "1c: default table reads [bots.max_health] from tuning")
    finally:
        tuning.reset()


# ═══════════════════════════════════════════════════════════════════════
#  2 — Inference
# ═══════════════════════════════════════════════════════════════════════

def test_inference():
    print("\n=== 2: Inference ===")
    reported = []
    table = MaxHealthTable(static={},
                           on_inferred=lambda n, v: reported.append((n, v)))
    scans = []

    def observe(name):
        scans.append(name)
        return iter([120.0, 249.6, 80.0])

    check(table.lookup("gate", observe) == 250.0, "2a: highest observed, rounded half-up")
    check(table.lookup("gate", observe) == 250.0, "2b: second lookup hits the cache")
    check(scans == ["gate"], f"2c: live instances scanned once ({scans})")
    check(reported == [("gate", 250.0)], f"2d: inference reported once ({reported})")

    table.forget("gate")
    table.lookup("gate", observe)
    check(len(scans) == 2, "2e: forget() forces a rescan")

    # Through the world query: same name and force only
    world = World()
    q = WorldQuery(world, MaxHealthTable(static={}))
    a = _thing(world, 0.0, 0.0, "pipe", 60.0)
    _thing(world, 1.0, 0.0, "pipe", 90.0)
    _thing(world, 2.0, 0.0, "pipe", 500.0, force="enemy")
    check(q.get_max_health(a) == 90.0, "2f: inferred from own-force instances")
    check(is_damaged(q, a) and missing_health(q, a) == 30.0,
          "2g: damaged against the inferred maximum")


# ═══════════════════════════════════════════════════════════════════════
#  3 — Unrepairable kinds
# ═══════════════════════════════════════════════════════════════════════

def test_unrepairable():
    print("\n=== 3: Unrepairable kinds ===")
    world = World()
    table = MaxHealthTable(static={})
    q = WorldQuery(world, table)
    ghost = _thing(world, 0.0, 0.0, "ghost", 0.0)

    check(q.get_max_health(ghost) is None, "3a: no positive health observed → None")
    check("ghost" in table.inferred and table.inferred["ghost"] is None,
          "3b: the None is cached")
    check(not is_damaged(q, ghost), "3c: unrepairable object is never damaged")
    check(missing_health(q, ghost) == 0.0, "3d: nothing missing")

    # A later healthy instance does not change the cached verdict
    _thing(world, 1.0, 0.0, "ghost", 50.0)
    check(q.get_max_health(ghost) is None, "3e: verdict sticks until forgotten")


# ═══════════════════════════════════════════════════════════════════════
#  4 — Area repair
# ═══════════════════════════════════════════════════════════════════════

def test_repair_area():
    print("\n=== 4: Area repair ===")
    world = World()
    q = WorldQuery(world, MaxHealthTable(static={"gun_turret": 400, "inserter": 150}))
    t1 = _thing(world, 0.0, 0.0, "gun_turret", 300.0)      # needs 100
    t2 = _thing(world, 2.0, 1.0, "inserter", 100.0)        # needs 50
    t3 = _thing(world, 3.0, 3.0, "gun_turret", 100.0)      # needs 300
    outside = _thing(world, 9.0, 0.0, "gun_turret", 10.0)
    enemy = _thing(world, 1.0, 1.0, "gun_turret", 10.0, force="enemy")

    budget = [180.0]

    def grant(need):
        got = min(need, budget[0])
        budget[0] -= got
        return got

    repaired = repair_area(q, "overworld", "player", (0.0, 0.0), 5.0, grant)
    amounts = dict(repaired)
    check(amounts.get(t1) == 100.0 and amounts.get(t2) == 50.0,
          f"4a: objects paid in full while budget lasts ({amounts})")
    check(amounts.get(t3) == 30.0, "4b: last object gets the remainder")
    check(world.get(t3, Health).current == 130.0, "4c: health applied")
    check(outside not in amounts and enemy not in amounts,
          "4d: radius and force respected")

    calls = []
    repaired = repair_area(q, "overworld", "player", (0.0, 0.0), 5.0,
                           lambda need: calls.append(need) or 0.0)
    check(repaired == [] and len(calls) == 1,
          f"4e: zero grant stops the pass ({len(calls)} call(s))")

    check(square_area((1.0, 2.0), 3.0) == (-2.0, -1.0, 4.0, 5.0), "4f: square area bounds")

    # A wounded actor standing in the area is not healed from the pool
    world = World()
    q = WorldQuery(world, MaxHealthTable(static={"engineer": 100}))
    wounded = world.spawn()
    world.add(wounded, Position(x=1.0, y=0.0))
    world.add(wounded, Identity(name="engineer", kind="actor"))
    world.add(wounded, Health(current=40.0))
    world.surface_add(wounded, "overworld")
    calls = []
    repaired = repair_area(q, "overworld", "player", (0.0, 0.0), 5.0,
                           lambda need: calls.append(need) or need)
    check(repaired == [] and calls == [] and world.get(wounded, Health).current == 40.0,
          f"4g: actors are skipped ({calls})")


# ═══════════════════════════════════════════════════════════════════════
#  MAIN
# ═══════════════════════════════════════════════════════════════════════

if __name__ == "__main__":
    sections = [
        ("Static Table", test_static_table),
        ("Inference", test_inference),
        ("Unrepairable", test_unrepairable),
        ("Area Repair", test_repair_area),
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
    print(f"  Health Tests: {_passed} passed, {_failed} failed  "
          f"(total {total})")
    print(f"{'=' * 60}")
    sys.exit(1 if _failed else 0)
