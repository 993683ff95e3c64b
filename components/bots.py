"""components.bots — Per-actor repair bot state.

One ``BotState`` exists per actor (see ``simulation.registry``).  It owns
the three caches the core mutates every cycle:

    FollowState   cached A* path, waypoint index, the target it was built for
    Route         nearest-neighbour ordered repair targets + cursor
    RepairPool    health-point budget refilled from repair packs

Entity references (bot, targets, container) are plain ids.  They are
re-validated through the world query before every use and never trusted
across cycles.
"""

from __future__ import annotations
from dataclasses import dataclass, field


MODE_OFF = "off"
MODE_FOLLOW = "follow"
MODE_REPAIR = "repair"

MODES = (MODE_OFF, MODE_FOLLOW, MODE_REPAIR)


@dataclass
class FollowState:
    """Cached path for the follower.

    ``index`` points at the waypoint currently being steered toward
    (0-based).  ``target`` is the world position the path was planned for.
    """
    path: list[tuple[float, float]] | None = None
    index: int = 0
    target: tuple[float, float] | None = None


@dataclass
class Route:
    """Ordered repair targets and the set they were built from.

    ``members`` lets the state machine tell whether the damaged set
    changed since the route was sequenced.
    """
    targets: list[int] = field(default_factory=list)
    index: int = 0
    members: frozenset[int] = frozenset()

    @property
    def exhausted(self) -> bool:
        return self.index >= len(self.targets)


@dataclass
class RepairPool:
    """Spendable repair budget in health points.

    ``container`` is the preferred supply container (may go stale).
    ``warned`` rate-limits the "out of repair packs" notice to once per
    exhaustion episode.
    """
    capacity: float = 0.0
    container: int | None = None
    warned: bool = False


@dataclass
class BotState:
    """Everything the repair bot core remembers about one actor."""
    actor: int = 0
    mode: str = MODE_OFF
    bot: int | None = None
    follow: FollowState = field(default_factory=FollowState)
    route: Route = field(default_factory=Route)
    pool: RepairPool = field(default_factory=RepairPool)
    # Damaged objects found around the actor this cycle (for overlays).
    damaged: list[int] = field(default_factory=list)
    # Follow-mode side bookkeeping.
    last_actor_pos: tuple[float, float] | None = None
    side_offset_x: float | None = None

    @property
    def enabled(self) -> bool:
        return self.mode != MODE_OFF
