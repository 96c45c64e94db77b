"""
Environment variable loading for Rewards Goblin.

- Loads .env from project root when available.
- Typed getters raise ConfigError naming the variable when a value is
  required but missing, or present but malformed.
"""

from __future__ import annotations

import os
from pathlib import Path

from dotenv import load_dotenv

from rewards_goblin.core.exceptions import ConfigError

# Project root: config is rewards_goblin/config/, root is 2 levels up
_CONFIG_DIR = Path(__file__).resolve().parent
_PACKAGE_DIR = _CONFIG_DIR.parent
_ROOT = _PACKAGE_DIR.parent
_ENV_PATH = _ROOT / ".env"


def load_rewards_env() -> None:
    """Load .env from project root. Safe to call multiple times; never overrides set vars."""
    if _ENV_PATH.is_file():
        load_dotenv(_ENV_PATH)


def env_str(name: str, default: str | None = None, *, required: bool = False) -> str | None:
    raw = (os.getenv(name) or "").strip()
    if raw:
        return raw
    if required:
        raise ConfigError(f"{name} is required in environment config")
    return default


def env_int(name: str, default: int) -> int:
    raw = (os.getenv(name) or "").strip()
    if not raw:
        return default
    try:
        return int(raw)
    except ValueError as e:
        raise ConfigError(f"{name} must be an integer, got {raw!r}") from e


def env_float(name: str, default: float) -> float:
    raw = (os.getenv(name) or "").strip()
    if not raw:
        return default
    try:
        return float(raw)
    except ValueError as e:
        raise ConfigError(f"{name} must be a number, got {raw!r}") from e
