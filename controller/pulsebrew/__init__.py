"""Pour-over brew timer controller."""
from .config import BrewConfig, Settings, get_settings
from .dispatcher import CueDispatcher
from .engine import TimerEngine
from .resources import ResourceCoordinator
from .scheduler import AsyncioTickScheduler, TickScheduler
from .session import BrewSession
from .state import PHASE_LEXICON, BrewPhase, TimerState, TransitionEvent, TransitionKind

__version__ = "0.1.0"

__all__ = [
    "AsyncioTickScheduler",
    "BrewConfig",
    "BrewPhase",
    "BrewSession",
    "CueDispatcher",
    "PHASE_LEXICON",
    "ResourceCoordinator",
    "Settings",
    "TickScheduler",
    "TimerEngine",
    "TimerState",
    "TransitionEvent",
    "TransitionKind",
    "get_settings",
]
