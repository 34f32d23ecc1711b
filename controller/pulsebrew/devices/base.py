"""Collaborator contracts the brew core talks to."""
from __future__ import annotations

from collections.abc import Callable, Sequence
from typing import Any, Dict, Protocol, Union

HapticPattern = Union[int, Sequence[int]]
DirectivePublisher = Callable[[str, Dict[str, Any]], None]


class AudioDevice(Protocol):
    async def initialize(self) -> None: ...

    def set_mute(self, muted: bool) -> None: ...

    def play_arpeggio(self) -> None: ...

    def play_low_ping(self) -> None: ...

    def play_high_ping(self) -> None: ...


class HapticDevice(Protocol):
    def vibrate(self, pattern: HapticPattern) -> None: ...


class WakeLockDevice(Protocol):
    async def request(self) -> None: ...

    async def release(self) -> None: ...


__all__ = [
    "AudioDevice",
    "DirectivePublisher",
    "HapticDevice",
    "HapticPattern",
    "WakeLockDevice",
]
