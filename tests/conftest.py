from __future__ import annotations

import asyncio
from typing import Any, List, Optional, Tuple

import pytest

from pulsebrew.config import BrewConfig, Settings
from pulsebrew.scheduler import TickCallback
from pulsebrew.session import BrewSession


class FakeAudio:
    def __init__(self, *, fail_init: bool = False, fail_play: bool = False) -> None:
        self.calls: List[str] = []
        self.muted = False
        self.fail_init = fail_init
        self.fail_play = fail_play

    async def initialize(self) -> None:
        self.calls.append("initialize")
        if self.fail_init:
            raise RuntimeError("audio context unavailable")

    def set_mute(self, muted: bool) -> None:
        self.muted = muted

    def _play(self, name: str) -> None:
        self.calls.append(name)
        if self.fail_play:
            raise RuntimeError("speaker gone")

    def play_arpeggio(self) -> None:
        self._play("play_arpeggio")

    def play_low_ping(self) -> None:
        self._play("play_low_ping")

    def play_high_ping(self) -> None:
        self._play("play_high_ping")


class FakeHaptics:
    def __init__(self, *, fail: bool = False) -> None:
        self.patterns: List[Any] = []
        self.fail = fail

    def vibrate(self, pattern: Any) -> None:
        if self.fail:
            raise RuntimeError("vibration unsupported")
        self.patterns.append(pattern)


class FakeWakeLock:
    def __init__(self, *, fail_request: bool = False, request_delay: float = 0.0) -> None:
        self.calls: List[str] = []
        self.held = False
        self.fail_request = fail_request
        self.request_delay = request_delay

    async def request(self) -> None:
        self.calls.append("request")
        if self.request_delay:
            await asyncio.sleep(self.request_delay)
        if self.fail_request:
            raise RuntimeError("wake lock denied")
        self.held = True

    async def release(self) -> None:
        self.calls.append("release")
        self.held = False


class ManualScheduler:
    """Scheduler stand-in; ticks are delivered by awaiting ``fire()``."""

    def __init__(self) -> None:
        self.callback: Optional[TickCallback] = None
        self.last_callback: Optional[TickCallback] = None
        self.starts = 0
        self.stops = 0

    @property
    def running(self) -> bool:
        return self.callback is not None

    def start(self, callback: TickCallback) -> None:
        self.starts += 1
        self.callback = callback
        self.last_callback = callback

    def stop(self) -> None:
        self.stops += 1
        self.callback = None

    async def fire(self, count: int = 1) -> None:
        for _ in range(count):
            assert self.callback is not None, "scheduler is not running"
            await self.callback()


SessionParts = Tuple[BrewSession, FakeAudio, FakeHaptics, FakeWakeLock, ManualScheduler]


@pytest.fixture
def settings(tmp_path) -> Settings:
    return Settings(log_directory=tmp_path / "logs", resource_timeout_seconds=0.5)


@pytest.fixture
def make_session(settings):
    def _make(config: Optional[BrewConfig] = None, **overrides: Any) -> SessionParts:
        audio = overrides.pop("audio", FakeAudio())
        haptics = overrides.pop("haptics", FakeHaptics())
        wake_lock = overrides.pop("wake_lock", FakeWakeLock())
        scheduler = ManualScheduler()
        session_settings = settings.model_copy(update=overrides) if overrides else settings
        session = BrewSession(
            settings=session_settings,
            config=config or BrewConfig(bloom_duration=30, pulse_interval=5),
            audio=audio,
            haptics=haptics,
            wake_lock=wake_lock,
            scheduler=scheduler,
        )
        return session, audio, haptics, wake_lock, scheduler

    return _make
