"""scenes/sandbox_scene.py — Interactive repair bot sandbox.

Arrow keys move the actor, ``R`` toggles its repair bot, ``D`` damages
everything around the actor, ``F4`` hot-reloads tuning, ``Esc`` quits.

The scene owns no bot logic: it forwards input to ``BotSim`` and draws
what the world and the bot states look like.
"""

from __future__ import annotations
import pygame

from core import tuning
from core.app import App
from core.events import BotNotice
from core.scene import Scene
from components import Position, Sprite, Collider, Health, Identity
from logic import repair_pool
from logic.health import square_area
from logic.obstacles import is_position_blocked
from simulation.bot_sim import BotSim

_BG = (24, 26, 30)
_GRID = (34, 36, 42)
_WALL = (110, 110, 120)
_PATH = (80, 200, 255)
_ROUTE = (255, 170, 60)


class SandboxScene(Scene):
    def __init__(self, actor: int):
        self.actor = actor
        self.sim: BotSim | None = None
        self.notices: list[str] = []
        self.show_grid = True

    # ── Lifecycle ────────────────────────────────────────────────────

    def on_enter(self, app: App):
        self.sim = BotSim(app.world)
        self.sim.bus.subscribe(BotNotice, self._on_notice)

    def _on_notice(self, event: BotNotice) -> None:
        print(f"[REPAIRBOT] {event.text}")
        self.notices.append(event.text)
        self.notices = self.notices[-4:]

    # ── Input ────────────────────────────────────────────────────────

    def handle_event(self, event: pygame.event.Event, app: App):
        if event.type != pygame.KEYDOWN:
            return
        if event.key == pygame.K_ESCAPE:
            app.running = False
        elif event.key == pygame.K_r:
            self.sim.request_toggle(self.actor)
        elif event.key == pygame.K_d:
            self._damage_around_actor()
        elif event.key == pygame.K_g:
            self.show_grid = not self.show_grid
        elif event.key == pygame.K_F4:
            tuning.reload()
            self.sim.max_health.forget()
            self.sim.set_interval()

    def _damage_around_actor(self) -> None:
        q = self.sim.query
        pos = q.get_position(self.actor)
        surface = q.get_surface(self.actor)
        for eid in q.find_objects(surface, square_area(pos, 6.0),
                                  force=q.get_force(self.actor)):
            hp = q.get_health(eid)
            if hp is not None and q.get_kind(eid) not in ("actor", "bot"):
                q.set_health(eid, max(1.0, hp * 0.5))

    # ── Update ───────────────────────────────────────────────────────

    def update(self, dt: float, app: App):
        self._move_actor(dt)
        for _ in range(int(tuning.get("sandbox", "ticks_per_frame", 1))):
            self.sim.tick()

    def _move_actor(self, dt: float) -> None:
        keys = pygame.key.get_pressed()
        dx = (keys[pygame.K_RIGHT] - keys[pygame.K_LEFT])
        dy = (keys[pygame.K_DOWN] - keys[pygame.K_UP])
        if not dx and not dy:
            return
        q = self.sim.query
        speed = tuning.get("sandbox", "actor_speed", 6.0) * dt
        x, y = q.get_position(self.actor)
        surface = q.get_surface(self.actor)
        # Axis-separated so the actor slides along walls
        if dx and not is_position_blocked(q, surface, (x + dx * speed, y)):
            x += dx * speed
        if dy and not is_position_blocked(q, surface, (x, y + dy * speed)):
            y += dy * speed
        q.set_position(self.actor, (x, y))

    # ── Draw ─────────────────────────────────────────────────────────

    def draw(self, surface: pygame.Surface, app: App):
        ts = int(tuning.get("sandbox", "tile_px", 20))
        w = int(tuning.get("sandbox", "width", 48))
        h = int(tuning.get("sandbox", "height", 32))
        surface.fill(_BG)

        if self.show_grid:
            for col in range(w + 1):
                pygame.draw.line(surface, _GRID, (col * ts, 0), (col * ts, h * ts))
            for row in range(h + 1):
                pygame.draw.line(surface, _GRID, (0, row * ts), (w * ts, row * ts))

        world = app.world
        q = self.sim.query

        def to_px(xy: tuple[float, float]) -> tuple[int, int]:
            # Tile (x, y) is centred on (x, y); see logic.obstacles.tile_of
            return (int(xy[0] * ts + ts / 2), int(xy[1] * ts + ts / 2))

        for _eid, pos, col in world.query(Position, Collider):
            if col.solid:
                rect = pygame.Rect(0, 0, int(col.width * ts), int(col.height * ts))
                rect.center = to_px((pos.x, pos.y))
                pygame.draw.rect(surface, _WALL, rect)

        state = self.sim.state(self.actor)
        if state is not None and state.enabled and q.is_valid(state.bot):
            self._draw_overlays(surface, state, to_px)

        drawn = sorted(world.query(Position, Sprite), key=lambda e: e[2].layer)
        for eid, pos, sprite in drawn:
            px, py = to_px((pos.x, pos.y))
            app.draw_text(surface, sprite.char, px - 4, py - 8, color=sprite.color)
            self._draw_health_bar(surface, eid, px, py, ts)

        self._draw_hud(surface, app, state, h * ts)

    def _draw_overlays(self, surface, state, to_px) -> None:
        q = self.sim.query
        path = state.follow.path
        if path:
            points = [to_px(q.get_position(state.bot))]
            points += [to_px(wp) for wp in path[state.follow.index:]]
            if len(points) > 1:
                pygame.draw.lines(surface, _PATH, False, points, 2)
        route = [to_px(q.get_position(t)) for t in state.route.targets[state.route.index:]
                 if q.is_valid(t)]
        if len(route) > 1:
            pygame.draw.lines(surface, _ROUTE, False, route, 1)
        for px, py in route:
            pygame.draw.circle(surface, _ROUTE, (px, py), 4, 1)

    def _draw_health_bar(self, surface, eid: int, px: int, py: int, ts: int) -> None:
        world = self.sim.world
        hp = world.get(eid, Health)
        ident = world.get(eid, Identity)
        if hp is None or ident is None or ident.kind in ("actor", "bot"):
            return
        maximum = self.sim.query.get_max_health(eid)
        if not maximum or hp.current >= maximum:
            return
        bar_w = ts - 4
        ratio = max(0.0, hp.current / maximum)
        if ratio > 0.5:
            color = (50, 200, 50)
        elif ratio > 0.25:
            color = (220, 200, 50)
        else:
            color = (220, 50, 50)
        x, y = px - bar_w // 2, py - ts // 2 - 4
        pygame.draw.rect(surface, (40, 40, 40), (x, y, bar_w, 3))
        pygame.draw.rect(surface, color, (x, y, max(1, int(bar_w * ratio)), 3))

    def _draw_hud(self, surface, app: App, state, top: int) -> None:
        y = top + 6
        mode = state.mode if state is not None else "off"
        line = f"bot: {mode}   [R] toggle  [D] damage  [G] grid  [F4] reload"
        if state is not None:
            cap, chest, carried = repair_pool.pool_status(
                state.pool, self.sim.query, self.actor)
            line += f"   pool {cap:.0f} hp | chest {chest} | carried {carried}"
            if state.route.targets:
                line += f"   route {state.route.index}/{len(state.route.targets)}"
        app.draw_text(surface, line, 6, y)
        for i, text in enumerate(reversed(self.notices)):
            app.draw_text(surface, text, 6, y + 18 + i * 14,
                          color=(200, 200, 120), font=app.font_sm)
