"""
Unit tests for the polling scheduler.
"""

import asyncio

import pytest

from InventoryConsole.core.client.utils import TransientNetworkError
from InventoryConsole.core.sync import PollingScheduler


class TestPollingScheduler:
    """Tests for PollingScheduler timers."""

    def setup_method(self):
        self.scheduler = PollingScheduler()

    @pytest.mark.asyncio
    async def test_runs_repeatedly(self):
        calls = []

        async def task():
            calls.append(1)

        handle = self.scheduler.start("list", 0.01, task)
        await asyncio.sleep(0.055)
        self.scheduler.stop(handle)

        assert handle.runs >= 3
        assert len(calls) == handle.runs

    @pytest.mark.asyncio
    async def test_skips_tick_while_busy(self):
        release = asyncio.Event()
        started = []

        async def slow():
            started.append(1)
            await release.wait()

        handle = self.scheduler.start("slow", 0.01, slow)
        await asyncio.sleep(0.06)

        assert len(started) == 1
        assert handle.busy
        assert handle.skipped >= 2

        release.set()
        await asyncio.sleep(0.03)
        self.scheduler.stop(handle)
        assert handle.runs >= 2

    @pytest.mark.asyncio
    async def test_not_immediate_waits_one_interval(self):
        calls = []

        async def task():
            calls.append(1)

        handle = self.scheduler.start("detail", 10, task, immediate=False)
        await asyncio.sleep(0.01)
        self.scheduler.stop(handle)

        assert calls == []

    @pytest.mark.asyncio
    async def test_stop_cancels_in_flight_refresh(self):
        cancelled = []

        async def hang():
            try:
                await asyncio.sleep(10)
            except asyncio.CancelledError:
                cancelled.append(1)
                raise

        handle = self.scheduler.start("hang", 1, hang)
        await asyncio.sleep(0.01)
        self.scheduler.stop(handle)
        await asyncio.sleep(0.01)

        assert cancelled == [1]
        assert not handle.active
        assert not self.scheduler.is_running("hang")

    @pytest.mark.asyncio
    async def test_failures_are_counted_and_polling_continues(self):
        async def failing():
            raise TransientNetworkError("offline")

        handle = self.scheduler.start("flaky", 0.01, failing)
        await asyncio.sleep(0.035)
        self.scheduler.stop(handle)

        assert handle.failures >= 2
        assert handle.failures == handle.runs

    @pytest.mark.asyncio
    async def test_unexpected_errors_do_not_stop_the_timer(self):
        async def broken():
            raise RuntimeError("bug")

        handle = self.scheduler.start("broken", 0.01, broken)
        await asyncio.sleep(0.035)
        self.scheduler.stop(handle)

        assert handle.runs >= 2

    @pytest.mark.asyncio
    async def test_stop_consumer_and_stop_all(self):
        async def noop():
            pass

        self.scheduler.start("a", 10, noop)
        self.scheduler.start("a", 10, noop)
        self.scheduler.start("b", 10, noop)

        assert len(self.scheduler.handles("a")) == 2
        assert self.scheduler.stop_consumer("a") == 2
        assert not self.scheduler.is_running("a")
        assert self.scheduler.is_running("b")

        self.scheduler.stop_all()
        assert self.scheduler.handles() == []

    @pytest.mark.asyncio
    async def test_stop_is_idempotent(self):
        async def noop():
            pass

        handle = self.scheduler.start("once", 10, noop)
        self.scheduler.stop(handle)
        self.scheduler.stop(handle)
        self.scheduler.stop(None)

        assert not handle.active

    @pytest.mark.asyncio
    async def test_rejects_non_positive_interval(self):
        async def noop():
            pass

        with pytest.raises(ValueError):
            self.scheduler.start("bad", 0, noop)
