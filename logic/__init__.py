"""logic — Repair bot systems package.

Top-level modules
-----------------
world_query     — world-model operations the bot core calls (ECS-backed)
obstacles       — tile rounding + occupancy grid rasterization
pathfinding     — A* navigation with best-effort fallback
follower        — incremental path following + follow-mode offsets
routing         — damaged-object search + nearest-neighbour sequencing
health          — max-health table / inference + area repair
repair_pool     — repair packs → spendable health points
inventory_ops   — item counting and withdrawal
repair_bot      — OFF / FOLLOW / REPAIR state machine
"""
