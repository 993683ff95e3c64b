"""components.resources — World-level singletons and marker components."""

from __future__ import annotations
from dataclasses import dataclass


@dataclass
class TickClock:
    """Monotonic discrete tick counter (60 ticks = 1 s of game time).

    Advanced once per ``BotSim.tick()``; the cycle scheduler reads it to
    decide which jobs are due.
    """
    tick: int = 0


@dataclass
class Actor:
    """Marks a supervising actor (the entity a repair bot works for)."""
    speed: float = 6.0         # world units per second (sandbox input only)


@dataclass
class RepairBot:
    """Marks a spawned repair bot and remembers which actor owns it."""
    owner: int = 0
