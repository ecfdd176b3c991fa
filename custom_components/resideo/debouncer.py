import asyncio
import logging
from collections.abc import Awaitable, Callable

_LOGGER = logging.getLogger(__name__)


class Debouncer:
    """Collapse bursts of calls into a single run of ``function``.

    Every call to ``async_call`` cancels the pending timer and arms a new one,
    so the function runs once, ``delay`` seconds after the last call. A run
    that has already started is never cancelled by a new call; the next run
    waits for it to finish, so runs never overlap.
    """

    def __init__(self, function: Callable[[], Awaitable[None]], delay: float, name: str = "debouncer"):
        self._function = function
        self._delay = delay
        self._name = name
        self._timer: asyncio.TimerHandle | None = None
        self._task: asyncio.Task | None = None

    @property
    def pending(self) -> bool:
        """True while a run is scheduled but has not started."""
        return self._timer is not None

    def has_pending_work(self) -> bool:
        """True if a timer is armed or a run other than the caller's is queued or running."""
        if self._timer is not None:
            return True
        task = self._task
        return task is not None and not task.done() and task is not asyncio.current_task()

    def async_call(self) -> None:
        """(Re)arm the timer. Must be called from the event loop."""
        if self._timer is not None:
            self._timer.cancel()
        loop = asyncio.get_running_loop()
        self._timer = loop.call_later(self._delay, self._on_timer)

    def _on_timer(self) -> None:
        self._timer = None
        previous = self._task
        self._task = asyncio.get_running_loop().create_task(self._run(previous))

    async def _run(self, previous: asyncio.Task | None) -> None:
        if previous is not None and not previous.done():
            _LOGGER.debug("%s: waiting for the previous run", self._name)
            await asyncio.wait((previous,))
        _LOGGER.debug("%s: running debounced function", self._name)
        await self._function()

    async def async_wait(self) -> None:
        """Wait for the most recently started run to finish."""
        if self._task is not None and not self._task.done():
            await self._task

    def async_cancel(self) -> None:
        """Cancel the pending timer and any run in progress."""
        if self._timer is not None:
            self._timer.cancel()
            self._timer = None
        if self._task is not None and not self._task.done():
            self._task.cancel()
