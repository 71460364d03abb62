"""Cancellable delayed callbacks for the opponent's thinking pause."""

import asyncio
import logging
from abc import ABC, abstractmethod
from typing import Callable

logger = logging.getLogger(__name__)


class ScheduledTask(ABC):
    """Handle to a pending callback."""

    @abstractmethod
    def cancel(self) -> None:
        """Prevent the callback from running. Safe to call more than once."""
        ...

    @property
    @abstractmethod
    def cancelled(self) -> bool:
        """Check if the task was cancelled."""
        ...


class Scheduler(ABC):
    """Runs a callback once after a delay, on the caller's logical thread."""

    @abstractmethod
    def schedule(self, delay: float, callback: Callable[[], None]) -> ScheduledTask:
        """
        Schedule a callback.

        Args:
            delay: Seconds to wait before running
            callback: Zero-argument function to run

        Returns:
            A handle that can cancel the callback
        """
        ...


class _ManualTask(ScheduledTask):
    def __init__(self, due: float, callback: Callable[[], None]) -> None:
        self.due = due
        self.callback = callback
        self._cancelled = False

    def cancel(self) -> None:
        self._cancelled = True

    @property
    def cancelled(self) -> bool:
        return self._cancelled


class ManualScheduler(Scheduler):
    """
    Frame-driven scheduler.

    Time only moves when ``advance(dt)`` is called, which suits game loops
    that tick every frame and makes delays deterministic in tests.
    """

    def __init__(self) -> None:
        self._now = 0.0
        self._tasks: list[_ManualTask] = []

    def schedule(self, delay: float, callback: Callable[[], None]) -> ScheduledTask:
        task = _ManualTask(self._now + max(delay, 0.0), callback)
        self._tasks.append(task)
        return task

    def advance(self, dt: float) -> int:
        """
        Move the clock forward and run every task that came due.

        Tasks scheduled by a running callback are run too if they fall due
        inside the same window.

        Returns:
            Number of callbacks run
        """
        self._now += dt
        ran = 0
        while True:
            due = [t for t in self._tasks if not t.cancelled and t.due <= self._now]
            if not due:
                break
            task = min(due, key=lambda t: t.due)
            self._tasks.remove(task)
            task.callback()
            ran += 1
        self._tasks = [t for t in self._tasks if not t.cancelled]
        return ran

    @property
    def pending(self) -> int:
        """Number of tasks still waiting."""
        return sum(1 for t in self._tasks if not t.cancelled)

    @property
    def now(self) -> float:
        """Current scheduler clock in seconds."""
        return self._now


class _AsyncioTask(ScheduledTask):
    def __init__(self, handle: asyncio.TimerHandle) -> None:
        self._handle = handle

    def cancel(self) -> None:
        self._handle.cancel()

    @property
    def cancelled(self) -> bool:
        return self._handle.cancelled()


class AsyncioScheduler(Scheduler):
    """Scheduler backed by an asyncio event loop's ``call_later``."""

    def __init__(self, loop: asyncio.AbstractEventLoop | None = None) -> None:
        self._loop = loop

    def schedule(self, delay: float, callback: Callable[[], None]) -> ScheduledTask:
        loop = self._loop or asyncio.get_running_loop()
        logger.debug("Scheduling callback in %.2fs", delay)
        return _AsyncioTask(loop.call_later(delay, callback))
