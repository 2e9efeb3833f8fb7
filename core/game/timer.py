"""Cancelable tickers that drive the round countdown."""

import asyncio
from abc import ABC, abstractmethod
from typing import Callable

TickCallback = Callable[[], None]


class Ticker(ABC):
    """A recurring callback that can be started and stopped."""

    @abstractmethod
    def start(self, interval: float, callback: TickCallback) -> None:
        """Invoke callback every interval seconds, replacing any running schedule."""
        ...

    @abstractmethod
    def stop(self) -> None:
        """Cancel the schedule. The callback is not invoked again."""
        ...

    @property
    @abstractmethod
    def running(self) -> bool:
        """Check if a schedule is active."""
        ...


class AsyncioTicker(Ticker):
    """
    Ticker backed by a task on the running event loop.

    Game actions and ticks share the loop, so a tick can never interleave
    with a half-finished action.
    """

    def __init__(self) -> None:
        self._task: asyncio.Task | None = None

    def start(self, interval: float, callback: TickCallback) -> None:
        """
        Start ticking on the current loop.

        Raises:
            RuntimeError: If called outside a running event loop
        """
        self.stop()
        loop = asyncio.get_running_loop()
        self._task = loop.create_task(self._run(interval, callback))

    async def _run(self, interval: float, callback: TickCallback) -> None:
        while True:
            await asyncio.sleep(interval)
            callback()

    def stop(self) -> None:
        """Cancel the ticking task."""
        if self._task is not None:
            self._task.cancel()
            self._task = None

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()


class ManualTicker(Ticker):
    """Ticker advanced explicitly, for tests and headless simulation."""

    def __init__(self) -> None:
        self._callback: TickCallback | None = None
        self.interval: float | None = None
        self.starts = 0

    def start(self, interval: float, callback: TickCallback) -> None:
        self.interval = interval
        self._callback = callback
        self.starts += 1

    def stop(self) -> None:
        self._callback = None

    @property
    def running(self) -> bool:
        return self._callback is not None

    def tick(self, count: int = 1) -> int:
        """
        Fire the callback up to count times, stopping early if it is cancelled.

        Returns:
            Number of ticks delivered
        """
        delivered = 0
        for _ in range(count):
            if self._callback is None:
                break
            self._callback()
            delivered += 1
        return delivered
