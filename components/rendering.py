"""components.rendering — Identity and debug display."""

from __future__ import annotations
from dataclasses import dataclass


@dataclass
class Identity:
    name: str = "unnamed"
    kind: str = "object"       # "object", "wall", "container", "bot", "actor"
    force: str = "player"      # owning faction; bots only repair their own force


@dataclass
class Sprite:
    char: str = "?"            # single character for debug rendering
    color: tuple = (255, 255, 255)
    layer: int = 0             # draw order
