"""logic/health.py — Maximum health resolution and repair helpers.

Max health
----------
Objects do not carry their own maximum.  ``MaxHealthTable`` resolves it:

1. the static ``[bots.max_health]`` table, keyed by object name;
2. otherwise, once per name, the highest ``Health.current`` observed on
   any live instance of that name (rounded half-up).  The result — a
   number or ``None`` — is cached, so unknown names cost one scan.

A name whose scan finds no instance with positive health resolves to
``None``: such objects count as *unrepairable* (never damaged).

Repair
------
``repair_area`` tops up every damaged object in a square around a point,
paying for each through a *grant* callable (normally the actor's
resource pool).  It stops at the first zero grant.
"""

from __future__ import annotations
import math
from typing import Callable, Iterable

from core.tuning import section as _tun_section

# Kinds that are never repaired even when they carry health.
NON_TARGET_KINDS = frozenset({"bot", "actor"})


def square_area(centre: tuple[float, float],
                radius: float) -> tuple[float, float, float, float]:
    """``(min_x, min_y, max_x, max_y)`` of the square of half-size *radius*."""
    cx, cy = centre
    return (cx - radius, cy - radius, cx + radius, cy + radius)


class MaxHealthTable:
    """Static max-health table with once-per-name inference."""

    def __init__(self, static: dict[str, float] | None = None,
                 on_inferred: Callable[[str, float | None], None] | None = None):
        # None → read [bots.max_health] lazily so tuning reloads apply
        self._static = dict(static) if static is not None else None
        self._inferred: dict[str, float | None] = {}
        self._on_inferred = on_inferred

    def static_value(self, name: str) -> float | None:
        table = self._static if self._static is not None else _tun_section("bots.max_health")
        value = table.get(name)
        if isinstance(value, (int, float)) and value > 0:
            return float(value)
        return None

    def lookup(self, name: str,
               observe: Callable[[str], Iterable[float]]) -> float | None:
        """Return the max health for *name*.

        *observe(name)* yields current health values of live instances;
        it is only called the first time an unknown name is seen.
        """
        known = self.static_value(name)
        if known is not None:
            return known
        if name in self._inferred:
            return self._inferred[name]

        highest = 0.0
        for hp in observe(name):
            if hp is not None and hp > highest:
                highest = hp

        inferred: float | None = None
        if highest > 0:
            inferred = float(math.floor(highest + 0.5))
            print(f"[HEALTH] Observed max health {highest:.1f} for '{name}'. "
                  f"Suggested: [bots.max_health] {name} = {int(inferred)}")
        else:
            print(f"[HEALTH] Could not infer max health for '{name}' "
                  f"(no live instances with health).")
        self._inferred[name] = inferred
        if self._on_inferred is not None:
            self._on_inferred(name, inferred)
        return inferred

    def forget(self, name: str | None = None) -> None:
        """Drop inferred values (all, or just *name*) so they are re-scanned."""
        if name is None:
            self._inferred.clear()
        else:
            self._inferred.pop(name, None)

    @property
    def inferred(self) -> dict[str, float | None]:
        return dict(self._inferred)


def is_damaged(query, eid: int) -> bool:
    """True if *eid* is valid, has health, a known maximum, and is below it."""
    if not query.is_valid(eid):
        return False
    hp = query.get_health(eid)
    if hp is None:
        return False
    maximum = query.get_max_health(eid)
    if maximum is None:
        return False
    return hp < maximum


def missing_health(query, eid: int) -> float:
    """Health points needed to bring *eid* back to full (0 if not damaged)."""
    if not is_damaged(query, eid):
        return 0.0
    return query.get_max_health(eid) - query.get_health(eid)


def repair_area(query, surface: str, force: str | None,
                centre: tuple[float, float], radius: float,
                grant: Callable[[float], float]) -> list[tuple[int, float]]:
    """Repair damaged objects of *force* around *centre*, skipping bots and actors.

    Each object asks *grant* for its missing health and receives whatever
    is granted.  Returns ``[(eid, amount), ...]`` for objects that gained
    health.  A zero grant ends the pass (the budget is exhausted).
    """
    repaired: list[tuple[int, float]] = []
    for eid in query.find_objects(surface, square_area(centre, radius), force=force):
        if query.get_kind(eid) in NON_TARGET_KINDS:
            continue
        need = missing_health(query, eid)
        if need <= 0:
            continue
        amount = grant(need)
        if amount <= 0:
            break
        query.set_health(eid, query.get_health(eid) + amount)
        repaired.append((eid, amount))
    return repaired
