"""Phase state machine for a pour-over brew.

The engine is pure bookkeeping: no timers, no I/O. The session feeds it one
``tick()`` per scheduler beat and forwards any returned transition to the
cue dispatcher.
"""
from __future__ import annotations

import logging
from typing import Dict, Optional

from .config import BrewConfig
from .state import BrewPhase, TimerState, TransitionEvent, TransitionKind

logger = logging.getLogger(__name__)

# phase that just ran out -> (next phase, event)
_TRANSITIONS: Dict[BrewPhase, tuple[BrewPhase, TransitionKind]] = {
    BrewPhase.BLOOM: (BrewPhase.POUR, TransitionKind.BLOOM_COMPLETE),
    BrewPhase.POUR: (BrewPhase.WAIT, TransitionKind.POUR_COMPLETE),
    BrewPhase.WAIT: (BrewPhase.POUR, TransitionKind.WAIT_COMPLETE),
}


def _committed(duration: int) -> int:
    # A zero-length phase still lasts one tick.
    return max(int(duration), 1)


class TimerEngine:
    """Owns phase, in-phase countdown and total elapsed time."""

    def __init__(self, config: Optional[BrewConfig] = None) -> None:
        self._config = config or BrewConfig()
        self._phase = BrewPhase.IDLE
        self._phase_time_remaining = self._config.bloom_duration
        self._total_time = 0
        self._is_active = False

    @property
    def config(self) -> BrewConfig:
        return self._config

    @property
    def phase(self) -> BrewPhase:
        return self._phase

    @property
    def is_active(self) -> bool:
        return self._is_active

    def snapshot(self) -> TimerState:
        return TimerState(
            phase=self._phase,
            phase_time_remaining=self._phase_time_remaining,
            total_time=self._total_time,
            is_active=self._is_active,
        )

    def phase_duration(self) -> int:
        """Configured length of the current phase."""
        if self._phase in (BrewPhase.IDLE, BrewPhase.BLOOM):
            return self._config.bloom_duration
        return self._config.pulse_interval

    def start(self) -> TimerState:
        if self._phase == BrewPhase.IDLE:
            self._phase = BrewPhase.BLOOM
            self._phase_time_remaining = _committed(self._config.bloom_duration)
            logger.info("Brew started (bloom=%ss)", self._phase_time_remaining)
        else:
            logger.info("Brew resumed in %s (%ss left)", self._phase.value, self._phase_time_remaining)
        self._is_active = True
        return self.snapshot()

    def stop(self) -> TimerState:
        self._is_active = False
        return self.snapshot()

    def reset(self) -> TimerState:
        self._phase = BrewPhase.IDLE
        self._phase_time_remaining = self._config.bloom_duration
        self._total_time = 0
        self._is_active = False
        return self.snapshot()

    def reconfigure(self, config: BrewConfig) -> TimerState:
        self._config = config
        if self._phase == BrewPhase.IDLE:
            self._phase_time_remaining = config.bloom_duration
        return self.snapshot()

    def tick(self) -> Optional[TransitionEvent]:
        """Advance one second. Returns the transition fired by this tick, if any."""
        if not self._is_active or self._phase == BrewPhase.IDLE:
            logger.debug("Discarding tick while inactive (phase=%s)", self._phase.value)
            return None

        config = self._config
        self._phase_time_remaining -= 1
        self._total_time += 1

        if self._phase_time_remaining > 0:
            return None

        next_phase, kind = _TRANSITIONS[self._phase]
        self._phase = next_phase
        self._phase_time_remaining = _committed(config.pulse_interval)
        logger.info("Phase -> %s at %ss (%s)", next_phase.value, self._total_time, kind.value)
        return TransitionEvent(kind=kind)


__all__ = ["TimerEngine"]
