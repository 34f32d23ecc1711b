"""Central configuration for the pulsebrew controller service."""
from __future__ import annotations

import math
from functools import lru_cache
from pathlib import Path
from typing import Dict, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

ROOT_DIR = Path(__file__).resolve().parents[2]
DEFAULT_ENV_FILE = ROOT_DIR / ".env"

# Rule of thumb from the recipe card: bloom with twice the coffee weight in water.
BLOOM_WATER_FACTOR = 2


def _round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


# ============================================================
# Brew Configuration
# ============================================================

class BrewConfig(BaseModel):
    """Brew recipe snapshot handed to the timer engine.

    Instances are frozen; reconfiguring the engine swaps the whole object so a
    tick in progress always reads one consistent snapshot.
    """

    model_config = ConfigDict(frozen=True)

    bloom_duration: int = Field(30, ge=1, description="Bloom phase length (seconds)")
    pulse_interval: int = Field(5, ge=1, description="Length of each pour and wait pulse (seconds)")
    is_muted: bool = Field(False, description="Suppress transition tones")
    coffee_weight: float = Field(15.0, gt=0, description="Dose of ground coffee (grams)")
    water_ratio: float = Field(15.5, gt=0, description="Grams of water per gram of coffee")

    @property
    def total_water(self) -> int:
        return _round_half_up(self.coffee_weight * self.water_ratio)

    @property
    def bloom_water(self) -> int:
        return _round_half_up(self.coffee_weight * BLOOM_WATER_FACTOR)

    @property
    def main_pour_water(self) -> int:
        return self.total_water - self.bloom_water


# ============================================================
# Service Settings
# ============================================================

class Settings(BaseSettings):
    """Environment-driven settings for the controller service."""

    # Controller HTTP Server
    controller_host: str = Field("0.0.0.0", description="Host interface for local FastAPI server")
    controller_port: int = Field(5000, description="Port for FastAPI server")

    # Timing
    tick_interval_seconds: float = Field(1.0, gt=0, description="Scheduler cadence while brewing")
    resource_timeout_seconds: float = Field(5.0, gt=0, description="Upper bound for audio/wake-lock acquisition")
    heartbeat_seconds: float = Field(30.0, gt=0, description="UI heartbeat interval")

    # Cues
    haptics_follow_mute: bool = Field(False, description="Suppress haptic cues while audio is muted")

    # UI stream
    ui_event_queue_size: int = Field(16, ge=1, description="Max buffered UI events per subscriber")

    # Logging
    log_level: str = Field("INFO", description="Logging level")
    log_directory: Path = Field(ROOT_DIR / "logs", description="Log directory path")
    log_retention_days: int = Field(14, description="Number of log files to retain")
    log_module_levels: Dict[str, str] = Field(
        default_factory=dict, description="Per-logger level overrides, e.g. {\"pulsebrew.engine\": \"DEBUG\"}"
    )

    # Brew defaults applied at startup
    brew: BrewConfig = Field(default_factory=BrewConfig, description="Initial brew configuration")

    @field_validator("log_level", mode="before")
    @classmethod
    def _normalise_log_level(cls, value: object) -> object:
        if isinstance(value, str):
            return value.strip().upper()
        return value

    model_config = SettingsConfigDict(
        env_file=str(DEFAULT_ENV_FILE),
        env_file_encoding="utf-8",
        env_nested_delimiter="__",
        case_sensitive=False,
        extra="ignore",
    )


@lru_cache()
def get_settings(override_env_file: Optional[Path] = None) -> Settings:
    """Cached Settings instance; accepts optional env override for tests."""

    if override_env_file:
        return Settings(_env_file=str(override_env_file))
    return Settings()


__all__ = ["BrewConfig", "Settings", "get_settings"]
