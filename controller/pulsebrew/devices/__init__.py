"""Device collaborators relayed to the browser front-end."""
from .audio import CUE_TONES, RelayAudio, Tone
from .base import AudioDevice, DirectivePublisher, HapticDevice, HapticPattern, WakeLockDevice
from .haptics import RelayHaptics
from .wake_lock import RelayWakeLock

__all__ = [
    "AudioDevice",
    "CUE_TONES",
    "DirectivePublisher",
    "HapticDevice",
    "HapticPattern",
    "RelayAudio",
    "RelayHaptics",
    "RelayWakeLock",
    "Tone",
    "WakeLockDevice",
]
