"""components.dev_log — Structured bot decision log.

A ring-buffer resource that records timestamped decisions taken by
repair bots: mode transitions, path plans and failures, route rebuilds,
repairs, and pool refills.  Read by the sandbox HUD and by tests that
want to know *why* a bot did something.

Usage:
    log = world.res(DevLog)
    log.record(actor, "path", "replanned", t=clock.tick,
               details={"waypoints": 12})

Each entry is a dict:
    {"t": int, "eid": int, "cat": str, "msg": str, "details": dict | None}
"""

from __future__ import annotations
from dataclasses import dataclass, field


@dataclass
class DevLog:
    """Ring-buffer of bot events for the dev tools."""

    entries: list[dict] = field(default_factory=list)
    max_entries: int = 500
    _paused: bool = False

    # If non-empty, only entries whose ``cat`` is in the set are kept.
    cat_filter: set[str] = field(default_factory=set)

    def record(self, eid: int, cat: str, msg: str, *,
               t: int = 0, details: dict | None = None) -> None:
        if self._paused:
            return
        if self.cat_filter and cat not in self.cat_filter:
            return
        self.entries.append({
            "t": t,
            "eid": eid,
            "cat": cat,
            "msg": msg,
            "details": details,
        })
        if len(self.entries) > self.max_entries:
            self.entries = self.entries[-self.max_entries:]

    def clear(self):
        self.entries.clear()

    def pause(self):
        self._paused = True

    def resume(self):
        self._paused = False

    def recent(self, n: int = 50) -> list[dict]:
        """Return the *n* most recent entries (newest last)."""
        return self.entries[-n:]

    def for_eid(self, eid: int, n: int = 30) -> list[dict]:
        """Return last *n* entries for a specific actor."""
        return [e for e in self.entries if e["eid"] == eid][-n:]

    def for_cat(self, cat: str, n: int = 50) -> list[dict]:
        """Return last *n* entries in a category."""
        return [e for e in self.entries if e["cat"] == cat][-n:]
