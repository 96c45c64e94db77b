#!/usr/bin/env python3
"""
Enqueue one reward event on the rewards-events queue.

Usage:
  python enqueue_reward.py EVENT_TYPE WALLET [--metadata '{"searchQuery": "cheese"}'] [--attempts N]

EVENT_TYPE: arns-search | image-search | audio-search | video-search
Env: REDIS_MODE, REDIS_HOST, REDIS_PORT (or sentinel settings).
"""

from __future__ import annotations

import argparse
import asyncio
import json
import sys
from typing import Any

from rewards_goblin.config.env import load_rewards_env
from rewards_goblin.config.settings import load_redis_settings
from rewards_goblin.core.exceptions import RewardsGoblinError
from rewards_goblin.rewards_logging import get_logger
from rewards_goblin.rewards_worker.events import RewardEventType
from rewards_goblin.rewards_worker.rewards_queue import QUEUE_NAME, enqueue_reward_event, redis_connection

logger = get_logger("enqueue_reward")


async def _enqueue(event_type: str, wallet: str, metadata: dict[str, Any] | None, attempts: int | None) -> str:
    from bullmq import Queue

    load_rewards_env()
    queue = Queue(QUEUE_NAME, {"connection": redis_connection(load_redis_settings())})
    try:
        opts = {"attempts": attempts} if attempts else None
        job = await enqueue_reward_event(queue, event_type, wallet, metadata=metadata, opts=opts)
        return str(job.id)
    finally:
        await queue.close()


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description="Enqueue one reward event.")
    parser.add_argument("event_type", choices=[t.value for t in RewardEventType], help="Reward event type")
    parser.add_argument("wallet", help="Arweave, EVM or Solana wallet address")
    parser.add_argument("--metadata", default=None, help="Optional JSON object attached to the event")
    parser.add_argument("--attempts", type=int, default=None, help="Override job attempts (default 3)")
    args = parser.parse_args(argv)

    metadata = None
    if args.metadata:
        try:
            metadata = json.loads(args.metadata)
        except json.JSONDecodeError as e:
            parser.error(f"--metadata must be JSON: {e}")
        if not isinstance(metadata, dict):
            parser.error("--metadata must be a JSON object")

    try:
        job_id = asyncio.run(_enqueue(args.event_type, args.wallet, metadata, args.attempts))
    except (RewardsGoblinError, ValueError) as e:
        logger.error("enqueue_reward_failed", error=str(e))
        return 1
    print(f"job_id={job_id} queue={QUEUE_NAME} event_type={args.event_type}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
