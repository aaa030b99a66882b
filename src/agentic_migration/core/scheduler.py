"""Virtual-time scheduler — the single source of timing for the orchestrator.

Every delayed effect (typing delays, message spacing, task mutations,
auto-advance, user replies) is a :class:`ScheduledCall` on one
:class:`Scheduler`.  Time is read from an injectable clock, so tests drive
the whole walkthrough deterministically with :meth:`Scheduler.advance` and
:meth:`Scheduler.run_until_idle` instead of waiting on the wall clock.

Calls may carry a *generation*.  :meth:`Scheduler.new_generation` opens a
new one and cancels every pending call of earlier generations; calls whose
generation went stale are also dropped when they come due.  Calls without
a generation are never superseded.

:class:`RealtimeDriver` paces the virtual scheduler against real time on an
asyncio loop for interactive hosts.
"""

from __future__ import annotations

import asyncio
import heapq
import itertools
import logging
from collections.abc import Callable
from dataclasses import dataclass, field
from typing import Protocol

logger = logging.getLogger(__name__)


class Clock(Protocol):
    """Millisecond clock read by the scheduler."""

    def now(self) -> float: ...

    def set(self, value: float) -> None: ...


class ManualClock:
    """Clock that only moves when told to."""

    def __init__(self, start: float = 0.0) -> None:
        self._now = start

    def now(self) -> float:
        return self._now

    def set(self, value: float) -> None:
        if value < self._now:
            msg = f"clock cannot move backwards ({value} < {self._now})"
            raise ValueError(msg)
        self._now = value


@dataclass(order=True)
class ScheduledCall:
    """A callback due at ``due`` milliseconds of virtual time."""

    due: float
    seq: int
    callback: Callable[[], None] = field(compare=False)
    generation: int | None = field(default=None, compare=False)
    label: str = field(default="", compare=False)
    cancelled: bool = field(default=False, compare=False)

    def cancel(self) -> None:
        self.cancelled = True


class Scheduler:
    """Single-threaded, generation-aware timer queue."""

    def __init__(self, clock: Clock | None = None) -> None:
        self.clock: Clock = clock or ManualClock()
        self._queue: list[ScheduledCall] = []
        self._seq = itertools.count()
        self._generation = 0
        self.dropped = 0

    @property
    def now(self) -> float:
        return self.clock.now()

    @property
    def generation(self) -> int:
        return self._generation

    # ------------------------------------------------------------------
    # Scheduling
    # ------------------------------------------------------------------

    def call_later(
        self,
        delay: float,
        callback: Callable[[], None],
        *,
        generation: int | None = None,
        label: str = "",
    ) -> ScheduledCall:
        """Schedule *callback* to run *delay* ms from now."""
        if delay < 0:
            msg = f"delay must be >= 0, got {delay}"
            raise ValueError(msg)
        call = ScheduledCall(
            due=self.now + delay,
            seq=next(self._seq),
            callback=callback,
            generation=generation,
            label=label,
        )
        heapq.heappush(self._queue, call)
        return call

    def new_generation(self) -> int:
        """Open a new generation and cancel pending calls of older ones."""
        self._generation += 1
        cancelled = self.cancel_generation(lambda g: g < self._generation)
        if cancelled:
            logger.debug(
                "Generation %d superseded %d pending call(s)", self._generation, cancelled
            )
        return self._generation

    def cancel_generation(self, predicate: Callable[[int], bool]) -> int:
        """Cancel pending calls whose generation satisfies *predicate*."""
        count = 0
        for call in self._queue:
            if call.cancelled or call.generation is None:
                continue
            if predicate(call.generation):
                call.cancel()
                count += 1
        return count

    def pending(self) -> list[ScheduledCall]:
        """Live (non-cancelled) calls in firing order."""
        return sorted(c for c in self._queue if not c.cancelled)

    @property
    def next_due(self) -> float | None:
        self._discard_cancelled_head()
        return self._queue[0].due if self._queue else None

    # ------------------------------------------------------------------
    # Running
    # ------------------------------------------------------------------

    def advance(self, ms: float) -> int:
        """Move time forward by *ms*, firing every call that comes due.

        Calls scheduled by fired callbacks run in the same pass when their
        due time falls inside the window.  Returns the number of calls fired.
        """
        target = self.now + ms
        fired = 0
        while True:
            due = self.next_due
            if due is None or due > target:
                break
            self.clock.set(due)
            fired += self._fire_next()
        self.clock.set(target)
        return fired

    def run_until_idle(self, *, max_calls: int = 10_000) -> int:
        """Fire calls in order until the queue is empty."""
        fired = 0
        while (due := self.next_due) is not None:
            if fired >= max_calls:
                msg = f"scheduler did not go idle after {max_calls} calls"
                raise RuntimeError(msg)
            self.clock.set(due)
            fired += self._fire_next()
        return fired

    def _fire_next(self) -> int:
        call = heapq.heappop(self._queue)
        if call.cancelled:
            return 0
        if call.generation is not None and call.generation < self._generation:
            self.dropped += 1
            logger.debug("Dropping stale call %r (generation %d)", call.label, call.generation)
            return 0
        try:
            call.callback()
        except Exception:
            logger.exception("Scheduled call %r failed", call.label)
        return 1

    def _discard_cancelled_head(self) -> None:
        while self._queue and self._queue[0].cancelled:
            heapq.heappop(self._queue)


class RealtimeDriver:
    """Drive a :class:`Scheduler` against wall-clock time on asyncio.

    ``speed`` scales virtual milliseconds: ``2.0`` plays the walkthrough at
    double speed.
    """

    def __init__(self, scheduler: Scheduler, *, speed: float = 1.0) -> None:
        if speed <= 0:
            msg = f"speed must be > 0, got {speed}"
            raise ValueError(msg)
        self.scheduler = scheduler
        self.speed = speed

    async def run(
        self,
        *,
        stop: Callable[[], bool] | None = None,
        on_tick: Callable[[], None] | None = None,
    ) -> None:
        """Sleep until each call comes due and fire it, until idle or *stop*.

        *on_tick* runs after every batch of calls fires.
        """
        while (due := self.scheduler.next_due) is not None:
            if stop is not None and stop():
                return
            wait_ms = max(0.0, due - self.scheduler.now)
            await asyncio.sleep(wait_ms / 1000 / self.speed)
            self.scheduler.advance(wait_ms)
            if on_tick is not None:
                on_tick()
