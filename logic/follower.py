"""logic/follower.py — Walk a bot along a cached A* path.

One call to ``step()`` per bot cycle.  The path is planned once per
target and reused while the target stays within a small tolerance, so a
bot chasing a slowly moving actor does not replan every cycle.

Each step:

1. reuse or replan the cached path;
2. advance past a waypoint the bot is already standing on;
3. skip every waypoint that is farther from the final target than the
   bot itself — the bot never steps toward a point that loses progress,
   even where the raw grid path doubles back;
4. move at most ``step_distance`` toward the current waypoint, snapping
   onto it instead of overshooting.

``follow_actor()`` is FOLLOW mode: trail the actor at a side offset that
swaps sides when the actor changes horizontal direction.
"""

from __future__ import annotations
import math

from components import FollowState, BotState
from core.tuning import get as _tun
from logic.pathfinding import find_path

MOVED = "moved"
ARRIVED = "arrived"
NO_PATH = "no_path"
IDLE = "idle"


def reset(follow: FollowState) -> None:
    """Forget the cached path."""
    follow.path = None
    follow.index = 0
    follow.target = None


def _dist(a: tuple[float, float], b: tuple[float, float]) -> float:
    return math.hypot(a[0] - b[0], a[1] - b[1])


def ensure_path(follow: FollowState, query, bot: int,
                target: tuple[float, float], tolerance: float) -> bool:
    """Make sure *follow* holds a path toward *target*.  False if unplannable."""
    if (follow.path and follow.target is not None
            and _dist(follow.target, target) < tolerance):
        return True

    surface = query.get_surface(bot)
    path = find_path(query, surface, query.get_position(bot), target)
    if not path:
        reset(follow)
        return False
    follow.path = path
    follow.index = 0
    follow.target = (target[0], target[1])
    return True


def step_towards(query, bot: int, waypoint: tuple[float, float],
                 step_distance: float) -> None:
    """Move *bot* up to *step_distance* toward *waypoint*, never past it."""
    bx, by = query.get_position(bot)
    dx = waypoint[0] - bx
    dy = waypoint[1] - by
    d = math.hypot(dx, dy)
    if d == 0:
        return
    if d <= step_distance:
        query.set_position(bot, (waypoint[0], waypoint[1]))
        return
    scale = step_distance / d
    query.set_position(bot, (bx + dx * scale, by + dy * scale))


def step(follow: FollowState, query, bot: int,
         target: tuple[float, float],
         tolerance: float | None = None,
         step_distance: float | None = None) -> str:
    """Advance *bot* one cycle toward *target*.

    Returns ``MOVED``, ``ARRIVED`` (path used up, state cleared), or
    ``NO_PATH`` (planner failed, state cleared; retry next cycle).
    """
    if tolerance is None:
        tolerance = _tun("bots.movement", "path_target_tolerance", 0.5)
    if step_distance is None:
        step_distance = _tun("bots.movement", "step_distance", 0.8)
    reach = _tun("bots.movement", "waypoint_reach", 0.2)
    eps = _tun("bots.movement", "progress_epsilon", 0.01)

    if not query.is_valid(bot):
        reset(follow)
        return NO_PATH

    if not ensure_path(follow, query, bot, target, tolerance):
        return NO_PATH

    path = follow.path
    idx = min(max(follow.index, 0), len(path) - 1)
    bp = query.get_position(bot)

    # Standing on the current waypoint, move on to the next one
    if _dist(bp, path[idx]) < reach:
        idx += 1
        if idx >= len(path):
            reset(follow)
            return ARRIVED

    # Skip waypoints that would lose ground on the final target
    final = follow.target
    bot_to_final = _dist(bp, final)
    while idx < len(path) and _dist(path[idx], final) > bot_to_final + eps:
        idx += 1

    if idx >= len(path):
        reset(follow)
        return ARRIVED

    follow.index = idx
    step_towards(query, bot, path[idx], step_distance)
    return MOVED


# ── Follow mode ──────────────────────────────────────────────────────

def follow_target(state: BotState, actor_pos: tuple[float, float]) -> tuple[float, float]:
    """Where the bot should stand next to the actor.

    The side offset flips to the side opposite the actor's horizontal
    motion, so the bot trails rather than leads.
    """
    side = _tun("bots.follow", "side_offset", 2.0)
    offset_y = _tun("bots.follow", "offset_y", -0.666)
    threshold = _tun("bots.follow", "move_threshold", 0.1)

    so = state.side_offset_x if state.side_offset_x is not None else -side
    prev = state.last_actor_pos
    if prev is not None:
        dx = actor_pos[0] - prev[0]
        if dx < -threshold:
            so = side
        elif dx > threshold:
            so = -side
    state.last_actor_pos = (actor_pos[0], actor_pos[1])
    state.side_offset_x = so
    return (actor_pos[0] + so, actor_pos[1] + offset_y)


def follow_actor(state: BotState, query, actor: int) -> str:
    """FOLLOW mode step: keep the bot near *actor*.  ``IDLE`` if close enough."""
    bot = state.bot
    if not (query.is_valid(bot) and query.is_valid(actor)):
        return NO_PATH
    actor_pos = query.get_position(actor)
    target = follow_target(state, actor_pos)

    follow_distance = _tun("bots.follow", "follow_distance", 1.0)
    if _dist(query.get_position(bot), target) <= follow_distance:
        return IDLE
    return step(state.follow, query, bot, target)
