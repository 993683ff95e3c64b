"""components.rpg — Health and inventory."""

from __future__ import annotations
from dataclasses import dataclass, field


@dataclass
class Health:
    """Current hit points of a repairable object.

    The maximum is not stored per entity: it comes from the
    ``[bots.max_health]`` table or is inferred per object name
    (see ``logic.health.MaxHealthTable``).
    """
    current: float = 100.0     # HP


@dataclass
class Inventory:
    items: dict[str, int] = field(default_factory=dict)
    capacity: float = 50.0
