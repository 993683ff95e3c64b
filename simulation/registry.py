"""simulation/registry.py — Per-actor repair bot state.

One ``BotState`` per actor id, created on first use.  Stored as a world
resource so any system can reach it:

    reg = world.res(BotRegistry)
    state = reg.get_or_create(actor)
"""

from __future__ import annotations
from typing import Iterator

from components import BotState


class BotRegistry:
    """Actor id → ``BotState``."""

    def __init__(self) -> None:
        self._states: dict[int, BotState] = {}

    def get_or_create(self, actor: int) -> BotState:
        state = self._states.get(actor)
        if state is None:
            state = BotState(actor=actor)
            self._states[actor] = state
        return state

    def get(self, actor: int) -> BotState | None:
        return self._states.get(actor)

    def release(self, actor: int) -> BotState | None:
        """Drop an actor's state entirely.  Returns what was removed."""
        return self._states.pop(actor, None)

    def states(self) -> list[BotState]:
        """All states in actor-id order."""
        return [self._states[a] for a in sorted(self._states)]

    def enabled(self) -> Iterator[BotState]:
        for state in self.states():
            if state.enabled:
                yield state

    def __len__(self) -> int:
        return len(self._states)

    def __contains__(self, actor: int) -> bool:
        return actor in self._states
