"""Haptic relay."""
from __future__ import annotations

from .base import DirectivePublisher, HapticPattern


class RelayHaptics:
    """Forwards vibration patterns to the front-end; no-op when unsupported."""

    def __init__(self, publish: DirectivePublisher, *, supported: bool = True) -> None:
        self._publish = publish
        self.supported = supported

    def vibrate(self, pattern: HapticPattern) -> None:
        if not self.supported:
            return
        if isinstance(pattern, int):
            pulses = [pattern]
        else:
            pulses = [int(ms) for ms in pattern]
        self._publish("haptic", {"pattern": pulses})


__all__ = ["RelayHaptics"]
