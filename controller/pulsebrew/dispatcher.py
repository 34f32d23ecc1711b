"""Maps brew transitions to audio and haptic cues."""
from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Dict, Optional

from .config import BrewConfig
from .devices.base import AudioDevice, HapticDevice, HapticPattern
from .state import TransitionKind

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Cue:
    audio: Optional[str]  # AudioDevice method name
    haptic: HapticPattern


START_CUE = Cue(audio=None, haptic=50)

TRANSITION_CUES: Dict[TransitionKind, Cue] = {
    TransitionKind.BLOOM_COMPLETE: Cue(audio="play_arpeggio", haptic=(300, 100, 300, 100, 300)),
    TransitionKind.POUR_COMPLETE: Cue(audio="play_low_ping", haptic=70),
    TransitionKind.WAIT_COMPLETE: Cue(audio="play_high_ping", haptic=(150, 50, 150)),
}


class CueDispatcher:
    """Fires exactly one audio cue and one haptic pattern per event.

    Collaborator failures are logged and swallowed; a missing cue must never
    reach the engine or the tick loop.
    """

    def __init__(self, audio: AudioDevice, haptics: HapticDevice, *, haptics_follow_mute: bool = False) -> None:
        self._audio = audio
        self._haptics = haptics
        self.haptics_follow_mute = haptics_follow_mute

    def dispatch_start(self, config: BrewConfig) -> Cue:
        self._fire(START_CUE, config, label="start")
        return START_CUE

    def dispatch(self, kind: TransitionKind, config: BrewConfig) -> Cue:
        cue = TRANSITION_CUES[kind]
        self._fire(cue, config, label=kind.value)
        return cue

    def _fire(self, cue: Cue, config: BrewConfig, *, label: str) -> None:
        if cue.audio and not config.is_muted:
            try:
                getattr(self._audio, cue.audio)()
            except Exception as exc:
                logger.warning("Audio cue %s failed for %s: %s", cue.audio, label, exc)

        if config.is_muted and self.haptics_follow_mute:
            logger.debug("Haptic cue for %s suppressed (muted)", label)
            return
        try:
            self._haptics.vibrate(cue.haptic)
        except Exception as exc:
            logger.warning("Haptic cue failed for %s: %s", label, exc)


__all__ = ["Cue", "CueDispatcher", "START_CUE", "TRANSITION_CUES"]
