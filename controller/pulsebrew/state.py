"""Shared brew state definitions for the pulsebrew controller."""
from __future__ import annotations

import enum
from dataclasses import dataclass
from typing import Any, Dict, Mapping, Optional


class BrewPhase(str, enum.Enum):
    """
    Brew phases in chronological order:

    1. IDLE   - Not started since the last reset
    2. BLOOM  - Initial degassing pour (bloom_duration)
    3. POUR   - Pulse pour (pulse_interval)
    4. WAIT   - Drain between pours (pulse_interval) -> POUR
    """
    IDLE = "idle"
    BLOOM = "bloom"
    POUR = "pour"
    WAIT = "wait"


class TransitionKind(str, enum.Enum):
    """Semantic signal emitted when a phase runs out."""

    BLOOM_COMPLETE = "bloom_complete"
    POUR_COMPLETE = "pour_complete"
    WAIT_COMPLETE = "wait_complete"


@dataclass(frozen=True)
class PhaseInfo:
    label: str
    hint: str


PHASE_LEXICON: Mapping[BrewPhase, PhaseInfo] = {
    BrewPhase.IDLE: PhaseInfo(label="READY", hint="Begin your ritual"),
    BrewPhase.BLOOM: PhaseInfo(label="BLOOM", hint="Let the coffee degas"),
    BrewPhase.POUR: PhaseInfo(label="POUR", hint="Add water slowly & evenly"),
    BrewPhase.WAIT: PhaseInfo(label="WAIT", hint="Let it drain through"),
}


@dataclass(frozen=True)
class TimerState:
    """Read-only snapshot of the engine."""

    phase: BrewPhase
    phase_time_remaining: int
    total_time: int
    is_active: bool

    def as_dict(self) -> Dict[str, Any]:
        return {
            "phase": self.phase.value,
            "phase_time_remaining": self.phase_time_remaining,
            "total_time": self.total_time,
            "is_active": self.is_active,
        }


@dataclass(frozen=True)
class TransitionEvent:
    kind: TransitionKind


@dataclass
class ControllerEvent:
    """Event payload distributed to UI clients over the local WebSocket."""

    type: str
    data: Dict[str, Any]
    phase: BrewPhase
    error: Optional[str] = None


def format_clock(seconds: int) -> str:
    """Render elapsed seconds as m:ss."""
    minutes, secs = divmod(max(int(seconds), 0), 60)
    return f"{minutes}:{secs:02d}"


__all__ = [
    "BrewPhase",
    "TransitionKind",
    "PhaseInfo",
    "PHASE_LEXICON",
    "TimerState",
    "TransitionEvent",
    "ControllerEvent",
    "format_clock",
]
