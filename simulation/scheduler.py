"""simulation/scheduler.py — Tick-cadence job scheduler.

Runs named callbacks every N ticks.  Jobs sit in a priority queue
ordered by their next due tick; between due ticks a job costs nothing.

    scheduler = CycleScheduler()
    scheduler.every("repair_bots", 30, lambda tick: controller_pass())
    ...
    scheduler.tick(current_tick=clock.tick)

A job that falls behind (the host skipped ticks) runs once and is
rescheduled onto its cadence; it is never replayed in a burst.
"""

from __future__ import annotations
import heapq
from dataclasses import dataclass, field
from typing import Callable


@dataclass(order=True)
class ScheduledJob:
    """One recurring job in the scheduler priority queue.

    Ordered by ``due`` so the heap gives us earliest-first.
    """
    due: int
    # heapq tiebreaker (insertion order) so callbacks are never compared
    _seq: int = field(compare=True, repr=False)
    name: str = field(compare=False, default="")
    interval: int = field(compare=False, default=1)
    callback: Callable[[int], None] | None = field(compare=False, default=None, repr=False)
    cancelled: bool = field(compare=False, default=False)
    runs: int = field(compare=False, default=0)


class CycleScheduler:
    """Priority-queue scheduler for fixed-cadence jobs.

    Stored as a world resource on the ECS World.
    """

    def __init__(self) -> None:
        self._queue: list[ScheduledJob] = []
        self._seq: int = 0
        self._jobs: dict[str, ScheduledJob] = {}
        # Stats
        self.jobs_run: int = 0

    # ── Registration ─────────────────────────────────────────────────

    def every(self, name: str, interval: int,
              callback: Callable[[int], None], offset: int = 0) -> ScheduledJob:
        """Run ``callback(tick)`` on every tick where ``tick % interval == offset``.

        Re-registering a name replaces the previous job.
        """
        interval = int(interval)
        if interval <= 0:
            raise ValueError(f"job {name!r}: interval must be positive, got {interval}")
        if not 0 <= offset < interval:
            raise ValueError(f"job {name!r}: offset {offset} outside [0, {interval})")
        self.cancel(name)
        self._seq += 1
        job = ScheduledJob(due=offset, _seq=self._seq, name=name,
                           interval=interval, callback=callback)
        heapq.heappush(self._queue, job)
        self._jobs[name] = job
        return job

    def cancel(self, name: str) -> bool:
        """Cancel a job by name.  True if one was pending."""
        job = self._jobs.pop(name, None)
        if job is None:
            return False
        job.cancelled = True
        return True

    # ── Tick ─────────────────────────────────────────────────────────

    def peek_tick(self) -> int | None:
        """Return the next due tick, or None if nothing is scheduled."""
        while self._queue and self._queue[0].cancelled:
            heapq.heappop(self._queue)
        if self._queue:
            return self._queue[0].due
        return None

    def tick(self, current_tick: int) -> int:
        """Run every job due at or before ``current_tick``.

        Returns the number of callbacks invoked.
        """
        count = 0
        ran: list[ScheduledJob] = []

        while self._queue:
            if self._queue[0].cancelled:
                heapq.heappop(self._queue)
                continue
            if self._queue[0].due > current_tick:
                break

            job = heapq.heappop(self._queue)
            job.callback(current_tick)
            job.runs += 1
            count += 1
            ran.append(job)

        # Reschedule after the loop so a job never runs twice in one tick
        for job in ran:
            if job.cancelled:
                continue
            due = job.due + job.interval
            if due <= current_tick:
                behind = current_tick - job.due
                due = job.due + (behind // job.interval + 1) * job.interval
            job.due = due
            heapq.heappush(self._queue, job)

        self.jobs_run += count
        return count

    # ── Queries ──────────────────────────────────────────────────────

    def has(self, name: str) -> bool:
        return name in self._jobs

    def job(self, name: str) -> ScheduledJob | None:
        return self._jobs.get(name)

    def pending_count(self) -> int:
        """Number of live jobs."""
        return len(self._jobs)
