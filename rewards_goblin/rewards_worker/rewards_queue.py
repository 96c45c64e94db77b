"""
Queue wiring for the rewards-events queue (Redis-backed BullMQ).

- redis_connection: standalone URL or sentinel-managed master connection.
- create_queue / create_worker: producer handle (health counts, enqueue) and
  consumer bound to RewardsProcessor.process.
- enqueue_reward_event: validate and add one reward event with the default
  job options (3 attempts, exponential backoff from 2s, bounded retention).
"""

from __future__ import annotations

from typing import Any

from bullmq import Queue, Worker
from redis.asyncio.sentinel import Sentinel

from rewards_goblin.config.settings import REDIS_MODE_SENTINEL, RedisSettings, Settings
from rewards_goblin.rewards_logging import get_logger
from rewards_goblin.rewards_worker.events import RewardEvent, RewardEventType
from rewards_goblin.rewards_worker.processor import RewardsProcessor

logger = get_logger(__name__)

QUEUE_NAME = "rewards-events"
JOB_STATES = ("waiting", "active", "completed", "failed", "delayed")

DEFAULT_JOB_OPTIONS: dict[str, Any] = {
    "attempts": 3,
    "backoff": {"type": "exponential", "delay": 2000},
    "removeOnComplete": 100,
    "removeOnFail": 500,
}


def redis_connection(redis_settings: RedisSettings) -> Any:
    """BullMQ connection: redis URL for standalone, master client for sentinel."""
    logger.info("redis_connecting", **redis_settings.describe())
    if redis_settings.mode == REDIS_MODE_SENTINEL:
        sentinel = Sentinel(list(redis_settings.sentinels))
        return sentinel.master_for(redis_settings.master_name, decode_responses=True)
    return f"redis://{redis_settings.host}:{redis_settings.port}"


def create_queue(settings: Settings) -> Queue:
    return Queue(QUEUE_NAME, {"connection": redis_connection(settings.redis)})


def create_worker(settings: Settings, processor: RewardsProcessor) -> Worker:
    worker = Worker(
        QUEUE_NAME,
        processor.process,
        {
            "connection": redis_connection(settings.redis),
            "concurrency": settings.worker_concurrency,
        },
    )
    worker.on("completed", processor.on_completed)
    worker.on("failed", processor.on_failed)
    logger.info("rewards_worker_started", queue=QUEUE_NAME, concurrency=settings.worker_concurrency)
    return worker


async def get_job_counts(queue: Any) -> dict[str, int]:
    counts = await queue.getJobCounts(*JOB_STATES)
    return {state: int(counts.get(state, 0) or 0) for state in JOB_STATES}


async def enqueue_reward_event(
    queue: Any,
    event_type: str,
    wallet_address: str,
    metadata: dict[str, Any] | None = None,
    opts: dict[str, Any] | None = None,
) -> Any:
    """
    Add a reward event job named after its event type. Raises UnknownEventTypeError
    for unsupported types and ValueError for an empty wallet; wallet format is
    checked by the worker.
    """
    if not isinstance(wallet_address, str) or not wallet_address.strip():
        raise ValueError("walletAddress must be a non-empty string")
    event = RewardEvent(
        event_type=RewardEventType.parse(event_type),
        wallet_address=wallet_address.strip(),
        metadata=metadata,
    )
    job_opts = {**DEFAULT_JOB_OPTIONS, **(opts or {})}
    job = await queue.add(event.event_type.value, event.to_job_data(), job_opts)
    logger.info(
        "reward_event_enqueued",
        job_id=getattr(job, "id", None),
        reward_event_type=event.event_type.value,
        wallet_id=event.wallet_address,
    )
    return job
