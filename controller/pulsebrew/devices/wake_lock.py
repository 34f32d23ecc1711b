"""Screen wake-lock relay."""
from __future__ import annotations

import logging

from .base import DirectivePublisher

logger = logging.getLogger(__name__)


class RelayWakeLock:
    """Tracks whether the front-end should hold a screen wake-lock.

    The browser drops its lock whenever the page is hidden, so a held lock is
    re-requested when the page reports it is visible again.
    """

    def __init__(self, publish: DirectivePublisher) -> None:
        self._publish = publish
        self._held = False

    @property
    def held(self) -> bool:
        return self._held

    async def request(self) -> None:
        if self._held:
            return
        self._publish("wake_lock", {"action": "request"})
        self._held = True
        logger.debug("Wake-lock requested")

    async def release(self) -> None:
        if not self._held:
            return
        self._publish("wake_lock", {"action": "release"})
        self._held = False
        logger.debug("Wake-lock released")

    async def handle_visibility_change(self, visible: bool) -> bool:
        """Re-acquire after the page comes back. Returns True when a request was sent."""
        if not (self._held and visible):
            return False
        self._publish("wake_lock", {"action": "request", "reason": "visibility"})
        logger.info("Wake-lock re-requested after visibility change")
        return True


__all__ = ["RelayWakeLock"]
