"""
Runtime configuration.

Values are read from the environment after loading an optional `.env` file
from the project directory.

Environment variables (all optional):
- DELIVERY_LATENCY_SECONDS: simulated delivery latency (default 2.0)
- DELIVERY_SUCCESS_RATE: probability a simulated delivery succeeds (default 0.8)
- ANALYTICS_RECENT_LIMIT: how many recent sends the analytics view lists (default 10)
- LOG_LEVEL: root logging level for the API (default INFO)
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Callable, Mapping, Optional, TypeVar

from dotenv import load_dotenv

T = TypeVar("T")

_ENV_PATH = Path(__file__).parent.parent / ".env"


@dataclass(frozen=True, slots=True)
class Settings:
    delivery_latency_seconds: float = 2.0
    delivery_success_rate: float = 0.8
    analytics_recent_limit: int = 10
    log_level: str = "INFO"


_DEFAULTS = Settings()


def _read(env: Mapping[str, str], name: str, parse: Callable[[str], T], default: T) -> T:
    raw = env.get(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        return parse(raw.strip())
    except ValueError:
        raise RuntimeError(f"Invalid value for environment variable {name}: {raw!r}")


def load_settings(env: Optional[Mapping[str, str]] = None) -> Settings:
    """
    Build Settings from the environment.

    Pass `env` to read from a plain mapping instead (no .env loading).

    Raises:
        RuntimeError: If a variable is set to an unusable value
    """
    if env is None:
        load_dotenv(dotenv_path=_ENV_PATH)
        env = os.environ

    settings = Settings(
        delivery_latency_seconds=_read(env, "DELIVERY_LATENCY_SECONDS", float, _DEFAULTS.delivery_latency_seconds),
        delivery_success_rate=_read(env, "DELIVERY_SUCCESS_RATE", float, _DEFAULTS.delivery_success_rate),
        analytics_recent_limit=_read(env, "ANALYTICS_RECENT_LIMIT", int, _DEFAULTS.analytics_recent_limit),
        log_level=_read(env, "LOG_LEVEL", str.upper, _DEFAULTS.log_level),
    )

    if settings.delivery_latency_seconds < 0:
        raise RuntimeError("DELIVERY_LATENCY_SECONDS must be non-negative")
    if not 0.0 <= settings.delivery_success_rate <= 1.0:
        raise RuntimeError("DELIVERY_SUCCESS_RATE must be between 0 and 1")
    if settings.analytics_recent_limit < 1:
        raise RuntimeError("ANALYTICS_RECENT_LIMIT must be at least 1")
    if not isinstance(logging.getLevelName(settings.log_level), int):
        raise RuntimeError(f"Unknown LOG_LEVEL: {settings.log_level}")

    return settings


__all__ = ["Settings", "load_settings"]
