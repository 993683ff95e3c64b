"""simulation/bot_sim.py — Top-level repair bot manager.

Provides the ``BotSim`` class that wires the bot core onto an ECS world
and exposes a single ``tick()`` method for the game loop.

Usage in sandbox_scene.py::

    # In on_enter():
    self.bot_sim = BotSim(app.world)

    # On the toggle key:
    self.bot_sim.request_toggle(actor)

    # In update():
    self.bot_sim.tick()

Per tick: queued events are drained (toggle requests are handled
here), the scheduler fires the repair cycle when it is due, events
produced by the cycle are drained, and the clock advances.  With the
default cadence the cycle runs on ticks 0, 30, 60 ...
"""

from __future__ import annotations

from components import BotState, DevLog, TickClock
from core.ecs import World
from core.events import EventBus, BotToggleRequested, MaxHealthInferred
from core.tuning import get as _tun
from logic.health import MaxHealthTable
from logic.repair_bot import RepairBotController
from logic.world_query import WorldQuery
from simulation.registry import BotRegistry
from simulation.scheduler import CycleScheduler

CYCLE_JOB = "repair_bots"


class BotSim:
    """Orchestrates every actor's repair bot.

    Shares the world's ``TickClock``, ``EventBus``, ``DevLog``,
    ``BotRegistry`` and ``CycleScheduler`` resources, creating any that
    are missing.
    """

    def __init__(self, world: World | None = None,
                 interval: int | None = None) -> None:
        self.world = world if world is not None else World()
        self.clock = self._resource(TickClock)
        self.bus = self._resource(EventBus)
        self.log = self._resource(DevLog)
        self.registry = self._resource(BotRegistry)
        self.scheduler = self._resource(CycleScheduler)

        self.max_health = MaxHealthTable(on_inferred=self._on_inferred)
        self.query = WorldQuery(self.world, self.max_health)
        self.controller = RepairBotController(self.query, self.bus,
                                              self.log, self.clock)

        self.bus.subscribe(BotToggleRequested, self._on_toggle)
        self.set_interval(interval)

    def _resource(self, res_type: type):
        res = self.world.res(res_type)
        if res is None:
            res = res_type()
            self.world.set_res(res)
        return res

    # ── Setup ────────────────────────────────────────────────────────

    def set_interval(self, interval: int | None = None) -> None:
        """(Re)register the repair cycle, every *interval* ticks.

        ``None`` reads ``[bots.repair] update_interval``.
        """
        if interval is None:
            interval = _tun("bots.repair", "update_interval", 30)
        self.scheduler.every(CYCLE_JOB, interval, self._run_cycle)

    # ── Commands ─────────────────────────────────────────────────────

    def request_toggle(self, actor: int) -> None:
        """Queue a toggle; handled on the next ``tick()``."""
        self.bus.emit(BotToggleRequested(actor=actor))

    def toggle(self, actor: int) -> str:
        """Toggle *actor*'s bot right now.  Returns the new mode."""
        return self.controller.toggle(self.registry.get_or_create(actor))

    def update_now(self) -> int:
        """Run one repair cycle immediately, off-cadence."""
        return self._run_cycle(self.clock.tick)

    # ── Per-frame tick ───────────────────────────────────────────────

    def tick(self) -> int:
        """Process the current tick, then advance the clock.

        Returns the number of scheduled jobs that ran (0 or 1).
        """
        self.bus.drain()
        ran = self.scheduler.tick(self.clock.tick)
        self.bus.drain()
        self.clock.tick += 1
        return ran

    def run(self, ticks: int) -> int:
        return sum(self.tick() for _ in range(ticks))

    # ── Handlers ─────────────────────────────────────────────────────

    def _on_toggle(self, event: BotToggleRequested) -> None:
        self.toggle(event.actor)

    def _on_inferred(self, name: str, value: float | None) -> None:
        self.bus.emit(MaxHealthInferred(name=name, value=value))

    def _run_cycle(self, tick: int) -> int:
        count = 0
        for state in list(self.registry.enabled()):
            self.controller.update(state)
            count += 1
            # Actor is gone for good: its bot was shut down, drop the state
            if not state.enabled and not self.query.is_valid(state.actor):
                self.registry.release(state.actor)
        return count

    # ── Queries ──────────────────────────────────────────────────────

    def state(self, actor: int) -> BotState | None:
        return self.registry.get(actor)

    def debug_info(self) -> dict:
        """Return debug information about the bot simulation."""
        return {
            "tick": self.clock.tick,
            "bots": [
                {"actor": s.actor, "mode": s.mode, "bot": s.bot,
                 "route": list(s.route.targets), "route_index": s.route.index,
                 "pool": s.pool.capacity}
                for s in self.registry.states()
            ],
            "next_cycle": self.scheduler.peek_tick(),
            "cycles_run": self.scheduler.job(CYCLE_JOB).runs
            if self.scheduler.has(CYCLE_JOB) else 0,
            "events": self.bus.stats(),
        }
