"""
Application settings and environment configuration.

- AO_CHEESE_MINT_PROCESS_ID: ledger process id (required)
- AO_WALLET_JWK_PATH: path to the signing wallet JWK (required)
- AO_STATE_CACHE_TTL_MS: ledger state cache TTL (default 300000)
- CU_URL / MU_URL: AO compute and messenger unit endpoints
- REDIS_MODE: standalone | sentinel, plus REDIS_* connection settings
- WORKER_CONCURRENCY, API_HOST, PORT
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from rewards_goblin.config.env import env_float, env_int, env_str, load_rewards_env
from rewards_goblin.core.exceptions import ConfigError

DEFAULT_STATE_CACHE_TTL_MS = 300_000
DEFAULT_CU_URL = "https://cu.ao-testnet.xyz"
DEFAULT_MU_URL = "https://mu.ao-testnet.xyz"
DEFAULT_AO_REQUEST_TIMEOUT_SEC = 30.0
DEFAULT_REDIS_HOST = "localhost"
DEFAULT_REDIS_PORT = 6379
DEFAULT_WORKER_CONCURRENCY = 1
DEFAULT_API_HOST = "0.0.0.0"
DEFAULT_API_PORT = 3000

REDIS_MODE_STANDALONE = "standalone"
REDIS_MODE_SENTINEL = "sentinel"
SENTINEL_COUNT = 3


@dataclass(frozen=True)
class RedisSettings:
    """Connection settings for the queue's Redis (standalone or sentinel)."""

    mode: str = REDIS_MODE_STANDALONE
    host: str = DEFAULT_REDIS_HOST
    port: int = DEFAULT_REDIS_PORT
    master_name: str | None = None
    sentinels: tuple[tuple[str, int], ...] = ()

    def describe(self) -> dict[str, Any]:
        if self.mode == REDIS_MODE_SENTINEL:
            return {"mode": self.mode, "name": self.master_name, "sentinels": list(self.sentinels)}
        return {"mode": self.mode, "host": self.host, "port": self.port}


@dataclass(frozen=True)
class Settings:
    """Typed service settings; build with get_settings()."""

    process_id: str
    wallet_jwk_path: str
    state_cache_ttl_ms: int = DEFAULT_STATE_CACHE_TTL_MS
    cu_url: str = DEFAULT_CU_URL
    mu_url: str = DEFAULT_MU_URL
    ao_request_timeout_sec: float = DEFAULT_AO_REQUEST_TIMEOUT_SEC
    redis: RedisSettings = field(default_factory=RedisSettings)
    worker_concurrency: int = DEFAULT_WORKER_CONCURRENCY
    api_host: str = DEFAULT_API_HOST
    api_port: int = DEFAULT_API_PORT

    def __post_init__(self) -> None:
        if self.state_cache_ttl_ms < 0:
            raise ConfigError("AO_STATE_CACHE_TTL_MS must not be negative")
        if self.worker_concurrency < 1:
            raise ConfigError("WORKER_CONCURRENCY must be at least 1")


def load_redis_settings() -> RedisSettings:
    mode = (env_str("REDIS_MODE", REDIS_MODE_STANDALONE) or REDIS_MODE_STANDALONE).lower()
    if mode == REDIS_MODE_SENTINEL:
        sentinels = tuple(
            (
                env_str(f"REDIS_SENTINEL_{i}_HOST", required=True),
                env_int(f"REDIS_SENTINEL_{i}_PORT", 26379),
            )
            for i in range(1, SENTINEL_COUNT + 1)
        )
        return RedisSettings(
            mode=mode,
            master_name=env_str("REDIS_MASTER_NAME", required=True),
            sentinels=sentinels,
        )
    if mode != REDIS_MODE_STANDALONE:
        raise ConfigError(f"REDIS_MODE must be standalone or sentinel, got {mode!r}")
    return RedisSettings(
        mode=mode,
        host=env_str("REDIS_HOST", DEFAULT_REDIS_HOST),
        port=env_int("REDIS_PORT", DEFAULT_REDIS_PORT),
    )


def get_settings() -> Settings:
    """
    Return the current application settings.

    Loads .env first; environment variables already set take precedence.
    Raises ConfigError when a required variable is missing or malformed.
    """
    load_rewards_env()
    return Settings(
        process_id=env_str("AO_CHEESE_MINT_PROCESS_ID", required=True),
        wallet_jwk_path=env_str("AO_WALLET_JWK_PATH", required=True),
        state_cache_ttl_ms=env_int("AO_STATE_CACHE_TTL_MS", DEFAULT_STATE_CACHE_TTL_MS),
        cu_url=env_str("CU_URL", DEFAULT_CU_URL),
        mu_url=env_str("MU_URL", DEFAULT_MU_URL),
        ao_request_timeout_sec=env_float("AO_REQUEST_TIMEOUT_SEC", DEFAULT_AO_REQUEST_TIMEOUT_SEC),
        redis=load_redis_settings(),
        worker_concurrency=env_int("WORKER_CONCURRENCY", DEFAULT_WORKER_CONCURRENCY),
        api_host=env_str("API_HOST", DEFAULT_API_HOST),
        api_port=env_int("PORT", DEFAULT_API_PORT),
    )
