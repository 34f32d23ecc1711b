"""Brew orchestration: engine, cues, resources and the UI event stream."""
from __future__ import annotations

import asyncio
from asyncio import QueueEmpty
import logging
from typing import Any, Dict, List, Optional

from .config import BrewConfig, Settings, get_settings
from .devices.audio import RelayAudio
from .devices.base import AudioDevice, HapticDevice, WakeLockDevice
from .devices.haptics import RelayHaptics
from .devices.wake_lock import RelayWakeLock
from .dispatcher import CueDispatcher
from .engine import TimerEngine
from .resources import ResourceCoordinator
from .scheduler import AsyncioTickScheduler, TickScheduler
from .state import PHASE_LEXICON, BrewPhase, ControllerEvent, TimerState, format_clock

logger = logging.getLogger(__name__)


class BrewSession:
    """Coordinates the timer engine, cue dispatch, device resources and UI updates.

    Commands and ticks are serialized behind one lock, so the engine only
    ever sees one mutation at a time.
    """

    def __init__(
        self,
        *,
        settings: Optional[Settings] = None,
        config: Optional[BrewConfig] = None,
        audio: Optional[AudioDevice] = None,
        haptics: Optional[HapticDevice] = None,
        wake_lock: Optional[WakeLockDevice] = None,
        scheduler: Optional[TickScheduler] = None,
    ) -> None:
        self.settings = settings or get_settings()
        self._lock = asyncio.Lock()
        self._ui_subscribers: List[asyncio.Queue[ControllerEvent]] = []
        self._engine = TimerEngine(config or self.settings.brew)

        self.audio: AudioDevice = audio or RelayAudio(self._publish_directive)
        self.haptics: HapticDevice = haptics or RelayHaptics(self._publish_directive)
        self.wake_lock: WakeLockDevice = wake_lock or RelayWakeLock(self._publish_directive)

        self._dispatcher = CueDispatcher(
            self.audio,
            self.haptics,
            haptics_follow_mute=self.settings.haptics_follow_mute,
        )
        self._resources = ResourceCoordinator(
            self.audio,
            self.wake_lock,
            timeout=self.settings.resource_timeout_seconds,
        )
        self._scheduler: TickScheduler = scheduler or AsyncioTickScheduler(self.settings.tick_interval_seconds)
        self._background_tasks: list[asyncio.Task[Any]] = []

        self._sync_mute(self._engine.config)

    @property
    def phase(self) -> BrewPhase:
        return self._engine.phase

    @property
    def config(self) -> BrewConfig:
        return self._engine.config

    def snapshot(self) -> TimerState:
        return self._engine.snapshot()

    def view(self) -> Dict[str, Any]:
        """State plus everything a renderer needs to draw it."""
        state = self._engine.snapshot()
        config = self._engine.config
        info = PHASE_LEXICON[state.phase]
        if state.phase == BrewPhase.IDLE:
            display_time = config.bloom_duration
            progress = 1.0
        else:
            display_time = state.phase_time_remaining
            progress = min(1.0, state.phase_time_remaining / max(self._engine.phase_duration(), 1))
        return {
            **state.as_dict(),
            "label": info.label,
            "hint": info.hint,
            "display_time": display_time,
            "progress": round(progress, 4),
            "total_clock": format_clock(state.total_time),
            "config": config.model_dump(),
            "recipe": {
                "total_water": config.total_water,
                "bloom_water": config.bloom_water,
                "main_pour_water": config.main_pour_water,
            },
        }

    # ------------------------------------------------------------------
    # Service lifecycle
    # ------------------------------------------------------------------
    async def open(self) -> None:
        logger.info("Starting brew session")
        self._background_tasks.append(asyncio.create_task(self._heartbeat_loop(), name="controller-heartbeat"))
        logger.info("Brew session ready in IDLE (bloom=%ss, pulse=%ss)",
                    self.config.bloom_duration, self.config.pulse_interval)

    async def close(self) -> None:
        logger.info("Stopping brew session")
        self._scheduler.stop()

        for task in self._background_tasks:
            task.cancel()
        for task in self._background_tasks:
            try:
                await task
            except asyncio.CancelledError:
                pass
            except Exception as e:
                logger.warning("Error stopping background task: %s", e)
        self._background_tasks.clear()

        await self._resources.release()
        logger.info("Brew session stopped")

    def register_ui(self) -> asyncio.Queue[ControllerEvent]:
        queue: asyncio.Queue[ControllerEvent] = asyncio.Queue(maxsize=self.settings.ui_event_queue_size)
        self._ui_subscribers.append(queue)
        return queue

    def unregister_ui(self, queue: asyncio.Queue[ControllerEvent]) -> None:
        if queue in self._ui_subscribers:
            self._ui_subscribers.remove(queue)

    # ------------------------------------------------------------------
    # Brew commands
    # ------------------------------------------------------------------
    async def start(self) -> TimerState:
        async with self._lock:
            if self._engine.is_active:
                logger.info("Brew already running; ignoring start")
                return self._engine.snapshot()

            audio_ok, lock_ok = await self._resources.acquire()
            if not (audio_ok and lock_ok):
                logger.warning("Starting without full resources (audio=%s, wake_lock=%s)", audio_ok, lock_ok)

            config = self._engine.config
            state = self._engine.start()
            self._dispatcher.dispatch_start(config)
            self._scheduler.start(self._on_tick)
            self._publish_state()
            return state

    async def stop(self) -> TimerState:
        async with self._lock:
            self._scheduler.stop()
            state = self._engine.stop()
            await self._resources.release()
            logger.info("Brew paused in %s (%ss left, total %ss)",
                        state.phase.value, state.phase_time_remaining, state.total_time)
            self._publish_state()
            return state

    async def reset(self) -> TimerState:
        async with self._lock:
            self._scheduler.stop()
            state = self._engine.reset()
            await self._resources.release()
            logger.info("Brew reset")
            self._publish_state()
            return state

    async def reconfigure(self, config: BrewConfig) -> TimerState:
        async with self._lock:
            return self._reconfigure_locked(config)

    async def set_muted(self, muted: Optional[bool] = None) -> BrewConfig:
        """Set mute, or toggle it when ``muted`` is None."""
        async with self._lock:
            current = self._engine.config
            target = (not current.is_muted) if muted is None else bool(muted)
            config = current.model_copy(update={"is_muted": target})
            self._reconfigure_locked(config)
            return config

    def _reconfigure_locked(self, config: BrewConfig) -> TimerState:
        # caller holds self._lock
        state = self._engine.reconfigure(config)
        self._sync_mute(config)
        logger.info(
            "Reconfigured: bloom=%ss pulse=%ss muted=%s dose=%sg ratio=%s",
            config.bloom_duration, config.pulse_interval, config.is_muted,
            config.coffee_weight, config.water_ratio,
        )
        self._publish_state()
        return state

    async def handle_visibility_change(self, visible: bool) -> bool:
        handler = getattr(self.wake_lock, "handle_visibility_change", None)
        if handler is None:
            return False
        try:
            return bool(await handler(visible))
        except Exception as exc:
            logger.warning("Wake-lock visibility handling failed: %s", exc)
            return False

    # ------------------------------------------------------------------
    # Tick handling
    # ------------------------------------------------------------------
    async def _on_tick(self) -> None:
        async with self._lock:
            if not self._engine.is_active:
                logger.debug("Tick arrived after stop/reset; discarded")
                return
            config = self._engine.config
            event = self._engine.tick()
            if event is not None:
                self._dispatcher.dispatch(event.kind, config)
                self._broadcast(
                    ControllerEvent(type="transition", data={"event": event.kind.value}, phase=self._engine.phase)
                )
            self._publish_state()

    # ------------------------------------------------------------------
    # UI stream
    # ------------------------------------------------------------------
    def _broadcast(self, event: ControllerEvent) -> None:
        """Broadcast event to all UI subscribers, dropping the oldest when full."""
        for queue in list(self._ui_subscribers):
            try:
                if queue.full():
                    try:
                        queue.get_nowait()
                    except QueueEmpty:
                        pass
                queue.put_nowait(event)
            except Exception as e:
                logger.warning("Failed to broadcast event to subscriber: %s", e)

    def _publish_state(self) -> None:
        self._broadcast(ControllerEvent(type="state", data=self.view(), phase=self._engine.phase))

    def _publish_directive(self, kind: str, data: Dict[str, Any]) -> None:
        self._broadcast(ControllerEvent(type=kind, data=data, phase=self._engine.phase))

    def _sync_mute(self, config: BrewConfig) -> None:
        try:
            self.audio.set_mute(config.is_muted)
        except Exception as exc:
            logger.warning("Failed to apply mute setting: %s", exc)

    async def _heartbeat_loop(self) -> None:
        """Send periodic heartbeat to UI clients."""
        try:
            while True:
                await asyncio.sleep(self.settings.heartbeat_seconds)
                try:
                    self._broadcast(ControllerEvent(type="heartbeat", data={}, phase=self.phase))
                except Exception as e:
                    logger.warning("Failed to send heartbeat: %s", e)
        except asyncio.CancelledError:
            raise
        except Exception as e:
            logger.exception("Heartbeat loop crashed: %s", e)


__all__ = ["BrewSession"]
