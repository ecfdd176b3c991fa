"""Tests for the debouncer."""
import asyncio
from unittest.mock import AsyncMock

import pytest

from custom_components.resideo.debouncer import Debouncer


class TestDebouncer:
    """Test Debouncer class."""

    @pytest.mark.asyncio
    async def test_burst_runs_once(self):
        """Test calls inside the window collapse into one run."""
        function = AsyncMock()
        debouncer = Debouncer(function, 0.05)

        debouncer.async_call()
        await asyncio.sleep(0.01)
        debouncer.async_call()
        await asyncio.sleep(0.01)
        debouncer.async_call()

        assert debouncer.pending
        function.assert_not_called()

        await asyncio.sleep(0.15)
        await debouncer.async_wait()

        function.assert_awaited_once()
        assert not debouncer.pending

    @pytest.mark.asyncio
    async def test_calls_after_window_run_again(self):
        function = AsyncMock()
        debouncer = Debouncer(function, 0.02)

        debouncer.async_call()
        await asyncio.sleep(0.1)
        debouncer.async_call()
        await asyncio.sleep(0.1)
        await debouncer.async_wait()

        assert function.await_count == 2

    @pytest.mark.asyncio
    async def test_cancel_pending(self):
        function = AsyncMock()
        debouncer = Debouncer(function, 0.02)

        debouncer.async_call()
        debouncer.async_cancel()
        await asyncio.sleep(0.1)

        function.assert_not_called()
        assert not debouncer.pending

    @pytest.mark.asyncio
    async def test_running_flush_not_cancelled_by_new_call(self):
        """Test a new call while a run is in flight schedules another run."""
        started = asyncio.Event()
        release = asyncio.Event()
        runs = []

        async def function():
            runs.append(len(runs))
            started.set()
            await release.wait()

        debouncer = Debouncer(function, 0.01)
        debouncer.async_call()
        await started.wait()

        debouncer.async_call()
        release.set()
        await asyncio.sleep(0.1)
        await debouncer.async_wait()

        assert runs == [0, 1]

    @pytest.mark.asyncio
    async def test_wait_without_run(self):
        debouncer = Debouncer(AsyncMock(), 0.01)

        await debouncer.async_wait()

    @pytest.mark.asyncio
    async def test_runs_do_not_overlap(self):
        """Test a run scheduled during another waits for it to finish."""
        active = []
        overlaps = []

        async def function():
            if active:
                overlaps.append(True)
            active.append(True)
            await asyncio.sleep(0.05)
            active.pop()

        debouncer = Debouncer(function, 0.01)
        debouncer.async_call()
        await asyncio.sleep(0.02)
        debouncer.async_call()
        await asyncio.sleep(0.2)
        await debouncer.async_wait()

        assert overlaps == []

    @pytest.mark.asyncio
    async def test_has_pending_work(self):
        seen = []
        debouncer = None

        async def function():
            seen.append(debouncer.has_pending_work())
            await asyncio.sleep(0.05)
            seen.append(debouncer.has_pending_work())

        debouncer = Debouncer(function, 0.01)
        assert not debouncer.has_pending_work()

        debouncer.async_call()
        assert debouncer.has_pending_work()

        await asyncio.sleep(0.03)
        debouncer.async_call()
        await asyncio.sleep(0.2)
        await debouncer.async_wait()

        assert seen == [False, True, False, False]
        assert not debouncer.has_pending_work()
