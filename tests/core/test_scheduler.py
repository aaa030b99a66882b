"""Tests for the virtual-time Scheduler and RealtimeDriver."""

from __future__ import annotations

import logging

import pytest

from agentic_migration.core.scheduler import ManualClock, RealtimeDriver, Scheduler


class TestManualClock:
    def test_starts_at_given_time(self) -> None:
        assert ManualClock(250.0).now() == 250.0

    def test_set_forward(self) -> None:
        clock = ManualClock()
        clock.set(10.0)
        assert clock.now() == 10.0

    def test_cannot_move_backwards(self) -> None:
        clock = ManualClock(100.0)
        with pytest.raises(ValueError, match="backwards"):
            clock.set(50.0)


class TestScheduling:
    def setup_method(self) -> None:
        self.scheduler = Scheduler()
        self.fired: list[str] = []

    def _mark(self, name: str):
        return lambda: self.fired.append(name)

    def test_fires_in_due_order(self) -> None:
        self.scheduler.call_later(300, self._mark("c"))
        self.scheduler.call_later(100, self._mark("a"))
        self.scheduler.call_later(200, self._mark("b"))
        self.scheduler.run_until_idle()
        assert self.fired == ["a", "b", "c"]

    def test_same_due_time_is_fifo(self) -> None:
        for name in ("first", "second", "third"):
            self.scheduler.call_later(50, self._mark(name))
        self.scheduler.run_until_idle()
        assert self.fired == ["first", "second", "third"]

    def test_negative_delay_rejected(self) -> None:
        with pytest.raises(ValueError, match="delay"):
            self.scheduler.call_later(-1, self._mark("x"))

    def test_advance_fires_only_due_calls(self) -> None:
        self.scheduler.call_later(100, self._mark("a"))
        self.scheduler.call_later(500, self._mark("b"))
        fired = self.scheduler.advance(100)
        assert fired == 1
        assert self.fired == ["a"]
        assert self.scheduler.now == 100

    def test_advance_moves_clock_to_target(self) -> None:
        self.scheduler.advance(1234)
        assert self.scheduler.now == 1234

    def test_nested_calls_inside_window_fire(self) -> None:
        def outer() -> None:
            self.fired.append("outer")
            self.scheduler.call_later(50, self._mark("inner"))

        self.scheduler.call_later(100, outer)
        self.scheduler.advance(150)
        assert self.fired == ["outer", "inner"]

    def test_nested_calls_outside_window_wait(self) -> None:
        def outer() -> None:
            self.fired.append("outer")
            self.scheduler.call_later(100, self._mark("inner"))

        self.scheduler.call_later(100, outer)
        self.scheduler.advance(150)
        assert self.fired == ["outer"]
        self.scheduler.advance(50)
        assert self.fired == ["outer", "inner"]

    def test_callback_sees_its_due_time(self) -> None:
        seen: list[float] = []
        self.scheduler.call_later(420, lambda: seen.append(self.scheduler.now))
        self.scheduler.advance(1000)
        assert seen == [420]

    def test_cancelled_call_does_not_fire(self) -> None:
        call = self.scheduler.call_later(100, self._mark("a"))
        call.cancel()
        assert self.scheduler.run_until_idle() == 0
        assert self.fired == []

    def test_pending_excludes_cancelled(self) -> None:
        keep = self.scheduler.call_later(200, self._mark("keep"), label="keep")
        drop = self.scheduler.call_later(100, self._mark("drop"), label="drop")
        drop.cancel()
        assert self.scheduler.pending() == [keep]

    def test_next_due(self) -> None:
        assert self.scheduler.next_due is None
        self.scheduler.call_later(70, self._mark("a"))
        assert self.scheduler.next_due == 70

    def test_run_until_idle_bounded(self) -> None:
        def forever() -> None:
            self.scheduler.call_later(1, forever)

        self.scheduler.call_later(1, forever)
        with pytest.raises(RuntimeError, match="did not go idle"):
            self.scheduler.run_until_idle(max_calls=50)

    def test_failing_callback_is_logged(self, caplog: pytest.LogCaptureFixture) -> None:
        def boom() -> None:
            raise RuntimeError("kaput")

        self.scheduler.call_later(10, boom, label="boom")
        self.scheduler.call_later(20, self._mark("after"))
        with caplog.at_level(logging.ERROR, logger="agentic_migration.core.scheduler"):
            self.scheduler.run_until_idle()
        assert self.fired == ["after"]
        assert "boom" in caplog.text


class TestGenerations:
    def setup_method(self) -> None:
        self.scheduler = Scheduler()
        self.fired: list[str] = []

    def test_new_generation_cancels_older_calls(self) -> None:
        gen = self.scheduler.new_generation()
        self.scheduler.call_later(100, lambda: self.fired.append("old"), generation=gen)
        self.scheduler.new_generation()
        self.scheduler.run_until_idle()
        assert self.fired == []

    def test_calls_without_generation_survive(self) -> None:
        self.scheduler.new_generation()
        self.scheduler.call_later(100, lambda: self.fired.append("reply"))
        self.scheduler.new_generation()
        self.scheduler.run_until_idle()
        assert self.fired == ["reply"]

    def test_stale_call_dropped_when_due(self) -> None:
        old = self.scheduler.new_generation()
        self.scheduler.new_generation()
        self.scheduler.call_later(10, lambda: self.fired.append("stale"), generation=old)
        self.scheduler.run_until_idle()
        assert self.fired == []
        assert self.scheduler.dropped == 1

    def test_cancel_generation_predicate(self) -> None:
        self.scheduler.call_later(10, lambda: None, generation=1)
        self.scheduler.call_later(10, lambda: None, generation=2)
        self.scheduler.call_later(10, lambda: None)
        assert self.scheduler.cancel_generation(lambda g: g == 2) == 1
        assert len(self.scheduler.pending()) == 2

    def test_generation_counter(self) -> None:
        assert self.scheduler.generation == 0
        assert self.scheduler.new_generation() == 1
        assert self.scheduler.generation == 1


class TestRealtimeDriver:
    def test_rejects_non_positive_speed(self) -> None:
        with pytest.raises(ValueError, match="speed"):
            RealtimeDriver(Scheduler(), speed=0)

    @pytest.mark.asyncio
    async def test_runs_until_idle(self) -> None:
        scheduler = Scheduler()
        fired: list[float] = []
        scheduler.call_later(100, lambda: fired.append(scheduler.now))
        scheduler.call_later(500, lambda: fired.append(scheduler.now))

        await RealtimeDriver(scheduler, speed=1000).run()

        assert fired == [100, 500]
        assert scheduler.next_due is None

    @pytest.mark.asyncio
    async def test_stop_predicate(self) -> None:
        scheduler = Scheduler()
        fired: list[str] = []
        scheduler.call_later(100, lambda: fired.append("a"))

        await RealtimeDriver(scheduler, speed=1000).run(stop=lambda: True)

        assert fired == []

    @pytest.mark.asyncio
    async def test_on_tick_runs_after_each_batch(self) -> None:
        scheduler = Scheduler()
        events: list[str] = []
        scheduler.call_later(100, lambda: events.append("a"))
        scheduler.call_later(100, lambda: events.append("b"))
        scheduler.call_later(300, lambda: events.append("c"))

        await RealtimeDriver(scheduler, speed=1000).run(on_tick=lambda: events.append("tick"))

        assert events == ["a", "b", "tick", "c", "tick"]

    @pytest.mark.asyncio
    async def test_on_tick_does_not_stop_run(self) -> None:
        scheduler = Scheduler()
        fired: list[str] = []
        scheduler.call_later(100, lambda: fired.append("a"))
        scheduler.call_later(200, lambda: fired.append("b"))

        await RealtimeDriver(scheduler, speed=1000).run(on_tick=lambda: None)

        assert fired == ["a", "b"]
