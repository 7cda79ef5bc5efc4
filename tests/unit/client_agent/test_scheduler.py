"""
Unit tests for PeriodicTask.
"""
import asyncio

import pytest

from client_agent.scheduler import PeriodicTask


@pytest.mark.asyncio
class TestPeriodicTask:
    """Tests for PeriodicTask."""

    async def test_runs_repeatedly(self):
        calls = []

        async def tick():
            calls.append(1)

        task = PeriodicTask(0.01, tick, "tick")
        task.start()
        await asyncio.sleep(0.05)
        await task.stop()

        assert len(calls) >= 2
        assert not task.running

    async def test_first_run_waits_one_interval(self):
        calls = []

        async def tick():
            calls.append(1)

        task = PeriodicTask(10, tick, "slow")
        task.start()
        await asyncio.sleep(0.01)

        assert calls == []
        assert task.running
        await task.stop()

    async def test_failures_do_not_stop_schedule(self):
        """Test that a failing run is logged and the next run still happens."""
        calls = []

        async def flaky():
            calls.append(1)
            raise RuntimeError("boom")

        task = PeriodicTask(0.01, flaky, "flaky")
        task.start()
        await asyncio.sleep(0.05)
        await task.stop()

        assert len(calls) >= 2

    async def test_start_twice_is_noop(self):
        async def tick():
            pass

        task = PeriodicTask(10, tick, "tick")
        task.start()
        first = task._task
        task.start()

        assert task._task is first
        await task.stop()

    async def test_cancel_from_callback(self):
        """Test that a run may cancel its own schedule."""
        calls = []
        task = None

        async def once():
            calls.append(1)
            task.cancel()

        task = PeriodicTask(0.01, once, "once")
        task.start()
        await asyncio.sleep(0.05)

        assert calls == [1]
        assert not task.running


def test_interval_must_be_positive():
    with pytest.raises(ValueError):
        PeriodicTask(0, lambda: None, "bad")
