"""A timed wait that can be settled early."""

from __future__ import annotations

import asyncio
from typing import Any, Generator, Generic, Optional, TypeVar

T = TypeVar("T")


class CancellableDelay(Generic[T]):
    """Awaitable that resolves to ``value`` after ``delay`` seconds.

    ``cancel()`` clears the timer and resolves immediately with ``value``;
    ``cancel(error)`` clears the timer and raises ``error`` in the awaiting
    code instead. Once settled, further ``cancel`` calls do nothing.

    Must be created while an event loop is running.

    Example:
        delay = CancellableDelay(5.0, "done")
        asyncio.get_running_loop().call_soon(delay.cancel)
        assert await delay == "done"
    """

    def __init__(self, delay: float, value: Optional[T] = None):
        loop = asyncio.get_running_loop()
        self.value = value
        self.future: asyncio.Future = loop.create_future()
        self.timer: Optional[asyncio.TimerHandle] = loop.call_later(max(float(delay), 0.0), self._elapse)

    @property
    def settled(self) -> bool:
        return self.future.done()

    def _elapse(self) -> None:
        self.timer = None
        if not self.future.done():
            self.future.set_result(self.value)

    def cancel(self, error: Optional[BaseException] = None) -> None:
        if not self.future.done():
            if error is None:
                self.future.set_result(self.value)
            else:
                self.future.set_exception(error)
        if self.timer is not None:
            self.timer.cancel()
            self.timer = None

    async def wait(self) -> T:
        return await self.future

    def __await__(self) -> Generator[Any, None, T]:
        return self.future.__await__()
