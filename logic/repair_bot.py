"""logic/repair_bot.py — Repair bot state machine.

Modes
-----
``off``     no bot exists; nothing runs.
``follow``  no damaged objects near the actor; the bot trails the actor.
``repair``  the bot walks the nearest-neighbour route and repairs what it
            reaches, paying from the actor's resource pool.

The toggle command moves ``off → follow`` (spawn bot, reset caches) and
``follow/repair → off`` (destroy bot, clear caches).  ``update()`` runs
one cycle for one actor; the simulation calls it at a fixed cadence.

A cycle never raises for world-state reasons.  Vanished targets and
empty pools are logged and retried next cycle.  A target the bot cannot
get within ``repair_distance`` of is skipped until the route is rebuilt.
"""

from __future__ import annotations
import math
from typing import TYPE_CHECKING

from components import (
    BotState, DevLog, TickClock,
    MODE_OFF, MODE_FOLLOW, MODE_REPAIR, MODES,
)
from core.events import (
    BotModeChanged, BotNotice, RepairPerformed, PoolExhausted,
)
from core.tuning import get as _tun
from logic import follower, repair_pool, routing
from logic.health import is_damaged, repair_area
from logic.obstacles import is_position_blocked

if TYPE_CHECKING:
    from core.events import EventBus


class RepairBotController:
    """Drives ``BotState`` objects through the OFF / FOLLOW / REPAIR cycle.

    Holds no per-actor data itself; everything lives on the state passed
    in, so one controller serves every actor.
    """

    def __init__(self, query, bus: "EventBus | None" = None,
                 log: DevLog | None = None, clock: TickClock | None = None):
        self.query = query
        self.bus = bus
        self.log = log
        self.clock = clock

    # ── Reporting ────────────────────────────────────────────────────

    def _record(self, state: BotState, cat: str, msg: str,
                details: dict | None = None) -> None:
        if self.log is not None:
            t = self.clock.tick if self.clock is not None else 0
            self.log.record(state.actor, cat, msg, t=t, details=details)

    def _emit(self, event) -> None:
        if self.bus is not None:
            self.bus.emit(event)

    def _notice(self, state: BotState, text: str) -> None:
        self._emit(BotNotice(actor=state.actor, text=text))
        self._record(state, "mode", text)

    def set_mode(self, state: BotState, mode: str) -> None:
        if mode not in MODES:
            raise ValueError(f"unknown bot mode {mode!r}")
        if state.mode == mode:
            return
        old = state.mode
        state.mode = mode
        self._emit(BotModeChanged(actor=state.actor, old_mode=old, new_mode=mode))
        self._record(state, "mode", f"{old} → {mode}")

    # ── Lifecycle ────────────────────────────────────────────────────

    def _spawn_bot(self, state: BotState) -> bool:
        q = self.query
        actor = state.actor
        if not q.is_valid(actor):
            return False
        surface = q.get_surface(actor)
        ax, ay = q.get_position(actor)
        spot = (ax + _tun("bots", "spawn_offset_x", 1.0), ay)
        if is_position_blocked(q, surface, spot):
            spot = (ax, ay)
        bot = q.spawn_bot(surface, q.get_force(actor), spot, owner=actor,
                          name=_tun("bots", "bot_name", "repair_bot"))
        if bot is None:
            self._notice(state, "Failed to spawn repair bot.")
            return False
        state.bot = bot
        follower.reset(state.follow)
        state.route = type(state.route)()
        self._record(state, "mode", "bot spawned", {"bot": bot, "at": spot})
        return True

    def _clear_caches(self, state: BotState) -> None:
        follower.reset(state.follow)
        state.route = type(state.route)()
        state.pool.container = None
        state.pool.warned = False
        state.damaged = []
        state.last_actor_pos = None
        state.side_offset_x = None

    def enable(self, state: BotState) -> bool:
        """``off → follow``.  False if the bot could not be spawned."""
        if state.enabled:
            return True
        self._clear_caches(state)
        if not self.query.is_valid(state.bot) and not self._spawn_bot(state):
            return False
        self.set_mode(state, MODE_FOLLOW)
        self._notice(state, "Repair bot enabled.")
        return True

    def disable(self, state: BotState) -> None:
        """``follow/repair → off``.  Destroys the bot and clears every cache."""
        if self.query.is_valid(state.bot):
            self.query.destroy(state.bot)
        state.bot = None
        self._clear_caches(state)
        if state.enabled:
            self.set_mode(state, MODE_OFF)
            self._notice(state, "Repair bot disabled.")

    def toggle(self, state: BotState) -> str:
        if state.enabled:
            self.disable(state)
        else:
            self.enable(state)
        return state.mode

    # ── Per-cycle update ─────────────────────────────────────────────

    def update(self, state: BotState) -> str:
        """Run one cycle for *state*.  Returns the mode afterwards."""
        if not state.enabled:
            return state.mode
        q = self.query
        actor = state.actor

        if not q.is_valid(actor):
            self._record(state, "mode", "actor gone, shutting bot down")
            self.disable(state)
            return state.mode

        if not q.is_valid(state.bot):
            # Bot was destroyed by something else, respawn it
            if not self._spawn_bot(state):
                return state.mode

        surface = q.get_surface(actor)
        force = q.get_force(actor)
        damaged = routing.find_damaged(
            q, surface, force, q.get_position(actor),
            _tun("bots.repair", "search_radius", 64.0))
        state.damaged = damaged

        target = self._next_target(state, damaged)
        if target is None:
            self.set_mode(state, MODE_FOLLOW)
            follower.follow_actor(state, q, actor)
            return state.mode

        self.set_mode(state, MODE_REPAIR)
        tp = q.get_position(target)
        bp = q.get_position(state.bot)
        reach = _tun("bots.repair", "repair_distance", 2.0)

        if math.hypot(tp[0] - bp[0], tp[1] - bp[1]) <= reach:
            self._repair_at(state, target, tp)
        else:
            result = follower.step(state.follow, q, state.bot, tp)
            if result in (follower.ARRIVED, follower.NO_PATH):
                # Closest reachable spot is still out of reach: move on to
                # the next target, a later rebuild retries this one
                self._record(state, "path", "target out of reach, skipped",
                             {"target": target, "from": bp, "to": tp,
                              "result": result})
                state.route.index += 1
                follower.reset(state.follow)
        return state.mode

    def _next_target(self, state: BotState, damaged: list[int]) -> int | None:
        """Current route target, rebuilding the route when it went stale."""
        q = self.query
        route = state.route
        bot_pos = q.get_position(state.bot)

        if route.members != frozenset(damaged) or route.exhausted:
            routing.rebuild(route, damaged, bot_pos, q)
            if damaged:
                self._record(state, "route", "rebuilt",
                             {"targets": list(route.targets)})

        wanted = lambda eid: is_damaged(q, eid)
        target = routing.current_target(route, q, wanted)
        if target is None and damaged:
            # Walked off the end; start over from the bot's position
            routing.rebuild(route, damaged, bot_pos, q)
            target = routing.current_target(route, q, wanted)
        return target

    def _repair_at(self, state: BotState, target: int,
                   centre: tuple[float, float]) -> None:
        q = self.query
        actor = state.actor
        pool = state.pool

        def on_exhausted():
            item = _tun("bots.pool", "item", "repair_pack")
            self._emit(PoolExhausted(actor=actor, item=item))
            self._notice(state, f"No {item} left, repairs paused.")

        def grant(need: float) -> float:
            return repair_pool.consume(pool, need, q, actor, on_exhausted)

        repaired = repair_area(q, q.get_surface(actor), q.get_force(actor),
                               centre, _tun("bots.repair", "repair_radius", 5.0),
                               grant)
        for eid, amount in repaired:
            self._emit(RepairPerformed(actor=actor, target=eid, amount=amount))
        if repaired:
            self._record(state, "repair", f"repaired {len(repaired)} object(s)",
                         {"target": target,
                          "amount": sum(a for _, a in repaired),
                          "pool": pool.capacity})
        else:
            self._record(state, "pool", "repair skipped, pool empty",
                         {"target": target})

        # Health changed: re-sequence, then move past the target just visited
        damaged = routing.find_damaged(
            q, q.get_surface(actor), q.get_force(actor), q.get_position(actor),
            _tun("bots.repair", "search_radius", 64.0))
        state.damaged = damaged
        route = state.route
        routing.rebuild(route, damaged, q.get_position(state.bot), q)
        if route.targets and route.targets[0] == target:
            route.index = 1
        follower.reset(state.follow)
