"""Best-effort acquisition of the audio engine and screen wake-lock."""
from __future__ import annotations

import asyncio
import logging
from collections.abc import Awaitable, Callable

from .devices.base import AudioDevice, WakeLockDevice

logger = logging.getLogger(__name__)


class ResourceCoordinator:
    """Sequences audio readiness and the wake-lock around start/stop.

    Every step is fail-soft: a failure or timeout is logged and brewing
    proceeds without the resource. Retries belong to the collaborators.
    """

    def __init__(self, audio: AudioDevice, wake_lock: WakeLockDevice, *, timeout: float = 5.0) -> None:
        self._audio = audio
        self._wake_lock = wake_lock
        self._timeout = timeout

    async def acquire(self) -> tuple[bool, bool]:
        """Returns (audio_ready, wake_lock_held) as far as the attempts succeeded."""
        audio_ok = await self._attempt("audio initialize", self._audio.initialize)
        lock_ok = await self._attempt("wake-lock request", self._wake_lock.request)
        return audio_ok, lock_ok

    async def release(self) -> bool:
        return await self._attempt("wake-lock release", self._wake_lock.release)

    async def _attempt(self, label: str, step: Callable[[], Awaitable[None]]) -> bool:
        try:
            await asyncio.wait_for(step(), timeout=self._timeout)
            return True
        except asyncio.TimeoutError:
            logger.warning("%s timed out after %.1fs", label, self._timeout)
        except Exception as exc:
            logger.warning("%s failed: %s", label, exc)
        return False


__all__ = ["ResourceCoordinator"]
