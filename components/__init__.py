"""components — ECS component dataclasses, organised by domain.

Submodules
----------
spatial        Position, Collider
rendering      Identity, Sprite
rpg            Health, Inventory
resources      TickClock, Actor, RepairBot
bots           FollowState, Route, RepairPool, BotState, mode names
dev_log        DevLog

All public names are re-exported here so code can do
``from components import Position``.
"""

# ── Spatial ──────────────────────────────────────────────────────────
from components.spatial import Position, Collider

# ── Rendering ────────────────────────────────────────────────────────
from components.rendering import Identity, Sprite

# ── RPG ──────────────────────────────────────────────────────────────
from components.rpg import Health, Inventory

# ── World resources / markers ────────────────────────────────────────
from components.resources import TickClock, Actor, RepairBot

# ── Bots ─────────────────────────────────────────────────────────────
from components.bots import (
    FollowState, Route, RepairPool, BotState,
    MODE_OFF, MODE_FOLLOW, MODE_REPAIR, MODES,
)

# ── Dev tooling ──────────────────────────────────────────────────────
from components.dev_log import DevLog

__all__ = [
    # spatial
    "Position", "Collider",
    # rendering
    "Identity", "Sprite",
    # rpg
    "Health", "Inventory",
    # resources
    "TickClock", "Actor", "RepairBot",
    # bots
    "FollowState", "Route", "RepairPool", "BotState",
    "MODE_OFF", "MODE_FOLLOW", "MODE_REPAIR", "MODES",
    # dev tooling
    "DevLog",
]
