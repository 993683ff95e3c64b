"""
main.py — Sandbox bootstrap

1. Load tuning
2. Create the app
3. Build the demo world: a walled yard, damaged machines, a supply chest
4. Push the sandbox scene
5. Run
"""

from core import tuning
from core.app import App
from core.ecs import World
from components import (
    Position, Collider, Identity, Sprite, Health, Inventory, Actor,
)
from scenes.sandbox_scene import SandboxScene

SURFACE = "overworld"
FORCE = "player"

# '#' wall, 'T' turret, 'B' belt, 'I' inserter, 'C' supply chest, '@' actor
YARD = [
    "################################################",
    "#..............................................#",
    "#..@...........................................#",
    "#..............................................#",
    "#.....C................########................#",
    "#......................#......#.........T......#",
    "#......................#..I...#................#",
    "#......................#......#................#",
    "#.........BBBBBBBB.....###.####................#",
    "#..............................................#",
    "#..............................................#",
    "#...........#######..........T.................#",
    "#...........#.....#............................#",
    "#...........#..T..#.............IIII...........#",
    "#...........#.....#............................#",
    "#...........#######............................#",
    "#..............................................#",
    "#.......................BBBBBBBBBBBB...........#",
    "#..............................................#",
    "#.....T........................................#",
    "#..............................................#",
    "#......................................#########",
    "#......................................#.......#",
    "#...............IIII...................#...T...#",
    "#......................................#.......#",
    "#......................................#.......#",
    "#..............................................#",
    "#..............................................#",
    "#..............................................#",
    "#..............................................#",
    "#..............................................#",
    "################################################",
]

_OBJECTS = {
    "T": ("gun_turret", "T", (230, 90, 90)),
    "B": ("transport_belt", "=", (220, 200, 60)),
    "I": ("inserter", "i", (120, 170, 255)),
}


def _spawn(world: World, x: int, y: int, *components) -> int:
    eid = world.spawn()
    world.add(eid, Position(x=float(x), y=float(y), surface=SURFACE))
    for comp in components:
        world.add(eid, comp)
    world.surface_add(eid, SURFACE)
    return eid


def build_demo_world(world: World, rows: list[str] = YARD) -> int:
    """Populate *world* from *rows*.  Returns the actor's entity id.

    Walls and machines start at 40 % health so the bot has work to do;
    one full-health wall per kind keeps max-health inference honest for
    names missing from ``[bots.max_health]``.
    """
    max_table = tuning.section("bots.max_health")
    actor = None

    for y, row in enumerate(rows):
        for x, ch in enumerate(row):
            if ch == "#":
                full = float(max_table.get("stone_wall", 350))
                hp = full * 0.4 if (x + y) % 7 == 0 else full
                _spawn(world, x, y,
                       Identity(name="stone_wall", kind="wall", force=FORCE),
                       Collider(), Health(current=hp),
                       Sprite(char="#", color=(150, 150, 160), layer=1))
            elif ch in _OBJECTS:
                name, glyph, color = _OBJECTS[ch]
                full = float(max_table.get(name, 150))
                _spawn(world, x, y,
                       Identity(name=name, kind="object", force=FORCE),
                       Collider(), Health(current=full * 0.4),
                       Sprite(char=glyph, color=color, layer=2))
            elif ch == "C":
                _spawn(world, x, y,
                       Identity(name="supply_chest", kind="container", force=FORCE),
                       Collider(), Inventory(items={"repair_pack": 20}),
                       Sprite(char="C", color=(200, 140, 60), layer=2))
            elif ch == "@":
                actor = _spawn(world, x, y,
                               Identity(name="engineer", kind="actor", force=FORCE),
                               Actor(speed=tuning.get("sandbox", "actor_speed", 6.0)),
                               Inventory(items={"repair_pack": 5}),
                               Sprite(char="@", color=(255, 255, 100), layer=10))

    if actor is None:
        raise ValueError("demo world has no '@' actor tile")
    return actor


def main():
    tuning.load()
    tile = int(tuning.get("sandbox", "tile_px", 20))
    width = int(tuning.get("sandbox", "width", 48)) * tile
    height = int(tuning.get("sandbox", "height", 32)) * tile + 80

    app = App(title="Repair Bots", width=width, height=height)
    actor = build_demo_world(app.world)
    print(f"[MAIN] Demo world ready, actor #{actor}")

    app.push_scene(SandboxScene(actor))
    app.run()


if __name__ == "__main__":
    main()
