"""Logging bootstrap for the controller service.

Everything goes to the console and ``pulsebrew-runtime.log``. Phase
transitions and brew commands are also kept in ``pulsebrew-brews.log`` so a
brew history survives the noisier runtime log. Handlers do not filter by
level; the root level and ``module_levels`` decide what is emitted.
"""
from __future__ import annotations

import logging
from logging.config import dictConfig
from pathlib import Path
from typing import Any, Dict, Mapping, Optional

BREW_LOGGERS = ("pulsebrew.engine", "pulsebrew.session")


def _rotating(path: Path, retention_days: int, level: str = "NOTSET") -> Dict[str, Any]:
    return {
        "class": "logging.handlers.TimedRotatingFileHandler",
        "formatter": "default",
        "level": level,
        "filename": str(path),
        "when": "midnight",
        "backupCount": max(int(retention_days), 1),
        "utc": True,
        "delay": True,
        "encoding": "utf-8",
    }


def configure_logging(
    level: str = "INFO",
    log_dir: Optional[Path] = None,
    retention_days: int = 14,
    module_levels: Optional[Mapping[str, str]] = None,
) -> None:
    if log_dir is None:
        log_dir = Path(__file__).resolve().parents[2] / "logs"
    log_dir = Path(log_dir).expanduser()
    log_dir.mkdir(parents=True, exist_ok=True)

    loggers: Dict[str, Dict[str, Any]] = {
        # uvicorn installs its own handlers; route them through ours instead
        "uvicorn": {"handlers": [], "propagate": True},
        "uvicorn.access": {"level": "WARNING"},
    }
    for name in BREW_LOGGERS:
        loggers[name] = {"handlers": ["brew_file"], "propagate": True}
    for name, module_level in (module_levels or {}).items():
        loggers.setdefault(name, {})["level"] = str(module_level).upper()

    dictConfig(
        {
            "version": 1,
            "disable_existing_loggers": False,
            "formatters": {
                "default": {
                    "format": "%(asctime)s | %(levelname)s | %(name)s | %(message)s",
                }
            },
            "handlers": {
                "console": {
                    "class": "logging.StreamHandler",
                    "formatter": "default",
                },
                "runtime_file": _rotating(log_dir / "pulsebrew-runtime.log", retention_days),
                # debug chatter from a module override stays out of the brew history
                "brew_file": _rotating(log_dir / "pulsebrew-brews.log", retention_days, level="INFO"),
            },
            "loggers": loggers,
            "root": {"level": level, "handlers": ["console", "runtime_file"]},
        }
    )
    logging.getLogger(__name__).debug(
        "Logging configured (level=%s, dir=%s, overrides=%s)", level, log_dir, dict(module_levels or {})
    )


__all__ = ["BREW_LOGGERS", "configure_logging"]
