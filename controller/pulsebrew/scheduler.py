"""Periodic tick source for the brew session."""
from __future__ import annotations

import asyncio
import logging
from collections.abc import Awaitable, Callable
from typing import Optional, Protocol

logger = logging.getLogger(__name__)

TickCallback = Callable[[], Awaitable[None]]


class TickScheduler(Protocol):
    def start(self, callback: TickCallback) -> None: ...

    def stop(self) -> None: ...


class AsyncioTickScheduler:
    """Fires ``callback`` every ``interval_seconds`` on the running loop.

    ``stop()`` is synchronous: it cancels the loop task and bumps the
    generation, so a beat that already woke up is dropped instead of ticking
    a brew that has since been paused or reset.
    """

    def __init__(self, interval_seconds: float = 1.0) -> None:
        self.interval_seconds = interval_seconds
        self._task: Optional[asyncio.Task[None]] = None
        self._generation = 0

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    @property
    def generation(self) -> int:
        return self._generation

    def start(self, callback: TickCallback) -> None:
        if self.running:
            return
        self._generation += 1
        self._task = asyncio.get_running_loop().create_task(
            self._run_loop(callback, self._generation), name="brew-ticker"
        )

    def stop(self) -> None:
        self._generation += 1
        if self._task:
            self._task.cancel()
            self._task = None

    async def _run_loop(self, callback: TickCallback, generation: int) -> None:
        logger.debug("Tick loop started (interval=%.2fs, generation=%d)", self.interval_seconds, generation)
        try:
            while generation == self._generation:
                await asyncio.sleep(self.interval_seconds)
                if generation != self._generation:
                    logger.debug("Dropping stale tick (generation %d)", generation)
                    break
                try:
                    await callback()
                except asyncio.CancelledError:
                    raise
                except Exception as exc:
                    logger.exception("Tick callback failed: %s", exc)
        except asyncio.CancelledError:
            logger.debug("Tick loop cancelled (generation=%d)", generation)
            raise


__all__ = ["AsyncioTickScheduler", "TickCallback", "TickScheduler"]
