"""Audio cue relay: forwards tone directives to the browser front-end."""
from __future__ import annotations

import logging
from dataclasses import asdict, dataclass
from typing import Dict, Tuple

from .base import DirectivePublisher

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Tone:
    frequency_hz: float
    duration_s: float
    offset_s: float = 0.0
    volume: float = 0.15
    waveform: str = "sine"


CUE_TONES: Dict[str, Tuple[Tone, ...]] = {
    # C major arpeggio: C4, E4, G4, C5
    "arpeggio": (
        Tone(261.63, 0.5, 0.0, 0.2),
        Tone(329.63, 0.5, 0.12, 0.2),
        Tone(392.00, 0.5, 0.24, 0.2),
        Tone(523.25, 1.0, 0.36, 0.15),
    ),
    "high_ping": (Tone(880.0, 0.6),),  # A5
    "low_ping": (Tone(440.0, 0.8),),  # A4
}


class RelayAudio:
    """Audio collaborator backed by the UI event stream."""

    def __init__(self, publish: DirectivePublisher) -> None:
        self._publish = publish
        self._muted = False
        self._ready = False

    @property
    def is_muted(self) -> bool:
        return self._muted

    @property
    def is_ready(self) -> bool:
        return self._ready

    async def initialize(self) -> None:
        if self._ready:
            return
        self._publish("audio", {"action": "initialize"})
        self._ready = True
        logger.info("Audio relay initialized")

    def set_mute(self, muted: bool) -> None:
        self._muted = bool(muted)

    def play_arpeggio(self) -> None:
        self._play("arpeggio")

    def play_low_ping(self) -> None:
        self._play("low_ping")

    def play_high_ping(self) -> None:
        self._play("high_ping")

    def _play(self, cue: str) -> None:
        if self._muted or not self._ready:
            logger.debug("Audio cue %s skipped (muted=%s, ready=%s)", cue, self._muted, self._ready)
            return
        self._publish(
            "audio",
            {"action": "play", "cue": cue, "tones": [asdict(tone) for tone in CUE_TONES[cue]]},
        )


__all__ = ["CUE_TONES", "RelayAudio", "Tone"]
