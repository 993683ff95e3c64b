"""core/events.py — Lightweight typed event bus.

Decouples the repair-bot core from whoever reacts to it (the sandbox
HUD, the dev log, tests).  The bus lives as an ECS resource::

    from core.events import EventBus, BotToggleRequested
    bus = world.res(EventBus)
    bus.emit(BotToggleRequested(actor=7))

Consumers subscribe with the event class and a callable::

    bus.subscribe(PoolExhausted, my_handler)

And the simulation drains once per tick::

    bus.drain()          # calls all handlers for pending events

Design rules:
  - Events are plain dataclasses — no behaviour.
  - ``emit()`` is O(1) (just appends).
  - ``drain()`` processes all queued events in FIFO order.
  - Handlers may emit new events; those are processed in the same drain.
"""

from __future__ import annotations
import traceback
from collections import defaultdict
from dataclasses import dataclass
from typing import Any, Callable


# ═══════════════════════════════════════════════════════════════════
#  Event definitions
# ═══════════════════════════════════════════════════════════════════

@dataclass
class BotToggleRequested:
    """The actor pressed the on/off toggle for their repair bot."""
    actor: int = 0


@dataclass
class BotModeChanged:
    """A bot moved between "off", "follow" and "repair"."""
    actor: int = 0
    old_mode: str = ""
    new_mode: str = ""


@dataclass
class BotNotice:
    """A one-line, user-facing message for the actor."""
    actor: int = 0
    text: str = ""


@dataclass
class RepairPerformed:
    """Health was restored on one object."""
    actor: int = 0
    target: int = 0
    amount: float = 0.0


@dataclass
class PoolExhausted:
    """No repair packs left anywhere the actor's pool can draw from."""
    actor: int = 0
    item: str = ""


@dataclass
class MaxHealthInferred:
    """An unknown object kind got its maximum health from live instances."""
    name: str = ""
    value: float | None = None


# ═══════════════════════════════════════════════════════════════════
#  Event Bus
# ═══════════════════════════════════════════════════════════════════

class EventBus:
    """Fire-and-forget event bus stored as an ECS resource."""

    def __init__(self):
        self._queue: list[Any] = []
        self._subs: dict[type, list[Callable]] = defaultdict(list)
        self._stats: dict[str, int] = defaultdict(int)

    # ── Public API ───────────────────────────────────────────────────

    def emit(self, event) -> None:
        """Queue an event for processing on next ``drain()``."""
        self._queue.append(event)

    def subscribe(self, event_type: type, handler: Callable) -> None:
        """Register *handler* to receive events of class *event_type*."""
        self._subs[event_type].append(handler)

    def unsubscribe(self, event_type: type, handler: Callable) -> None:
        handlers = self._subs.get(event_type)
        if handlers and handler in handlers:
            handlers.remove(handler)

    def drain(self) -> int:
        """Process all queued events.  Returns number processed.

        Handlers may emit new events — those are processed in the
        same drain pass (breadth-first).
        """
        processed = 0
        safety = 1000  # prevent infinite loops
        while self._queue and safety > 0:
            batch = self._queue[:]
            self._queue.clear()
            for event in batch:
                etype = type(event)
                self._stats[etype.__name__] += 1
                for handler in list(self._subs.get(etype, [])):
                    try:
                        handler(event)
                    except Exception as exc:
                        print(f"[EVENT] handler error for {etype.__name__}: {exc}")
                        traceback.print_exc()
            processed += len(batch)
            safety -= 1
        return processed

    @property
    def pending(self) -> int:
        return len(self._queue)

    def stats(self) -> dict[str, int]:
        """Return ``{event_name: times_dispatched}``."""
        return dict(self._stats)
