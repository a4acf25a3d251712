"""Cancellation and barrier primitives for watch sessions."""

import asyncio


class CancelToken:
    """One-shot cooperative cancellation signal.

    Each watch task receives its own token. Once cancelled a token stays
    cancelled.
    """

    def __init__(self) -> None:
        self._event = asyncio.Event()

    def cancel(self) -> None:
        self._event.set()

    @property
    def cancelled(self) -> bool:
        return self._event.is_set()

    async def wait(self) -> None:
        """Block until the token is cancelled."""
        await self._event.wait()

    async def sleep(self, seconds: float) -> bool:
        """Sleep up to ``seconds``, waking early on cancellation.

        Returns:
            True if the token was cancelled during (or before) the sleep
        """
        try:
            await asyncio.wait_for(self._event.wait(), timeout=seconds)
        except asyncio.TimeoutError:
            return False
        return True


class WaitGroup:
    """Counter of running tasks that can be awaited until it reaches zero."""

    def __init__(self) -> None:
        self._count = 0
        self._idle = asyncio.Event()
        self._idle.set()

    @property
    def count(self) -> int:
        return self._count

    def add(self, n: int = 1) -> None:
        if self._count + n < 0:
            raise ValueError("negative WaitGroup counter")
        self._count += n
        if self._count == 0:
            self._idle.set()
        else:
            self._idle.clear()

    def done(self) -> None:
        self.add(-1)

    async def wait(self) -> None:
        """Block until the counter reaches zero."""
        await self._idle.wait()
