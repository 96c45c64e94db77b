"""
Reward event processor: job -> wallet validation -> routed awards -> result.

One call per dequeued job. The processor never decides whether a failure is
worth retrying: every error is logged and re-raised so the queue applies its
attempt budget and backoff.
"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Any, Protocol

from rewards_goblin.core.exceptions import WalletValidationError
from rewards_goblin.rewards_logging import get_logger, job_context
from rewards_goblin.rewards_worker.events import REWARD_ROUTES, RewardEvent, RewardEventType
from rewards_goblin.utils.wallet_validator import validate_and_normalize

logger = get_logger(__name__)


class AchievementAwarder(Protocol):
    async def award_achievement(self, achievement_name: str, wallet_address: str) -> None: ...


def _max_attempts(job: Any) -> int:
    opts = getattr(job, "opts", None) or {}
    return int(opts.get("attempts") or 1)


def _attempts_made(job: Any) -> int:
    return int(getattr(job, "attemptsMade", 0) or 0)


class RewardsProcessor:
    """
    Queue job handler. Jobs carry name = event type and data =
    {eventType, walletAddress, metadata?}; attempt counters are read for
    logging only.
    """

    def __init__(self, achievements: AchievementAwarder) -> None:
        self._achievements = achievements

    async def process(self, job: Any, token: str | None = None) -> dict[str, Any]:
        with job_context(job):
            logger.debug("reward_job_active", max_attempts=_max_attempts(job))
            try:
                data = job.data if isinstance(job.data, dict) else {}
                validation = validate_and_normalize(data.get("walletAddress"))
                if not validation.valid:
                    raise WalletValidationError(f"Wallet validation failed: {validation.error}")
                logger.debug(
                    "reward_wallet_validated",
                    wallet_type=validation.wallet_type.value,
                    wallet_id=validation.normalized,
                )
                event = RewardEvent(
                    event_type=RewardEventType.parse(job.name),
                    wallet_address=validation.normalized,
                    metadata=data.get("metadata"),
                )
                result = await self.handle_event(event, validation.wallet_type.value)
                logger.info("reward_job_completed")
                return result
            except Exception as e:
                logger.error("reward_job_failed", error=str(e), exc_info=True)
                raise

    async def handle_event(self, event: RewardEvent, wallet_type: str) -> dict[str, Any]:
        """Award every achievement routed for event.event_type, one after another."""
        logger.info(
            "reward_event_processing",
            reward_event_type=event.event_type.value,
            wallet_id=event.wallet_address,
            wallet_type=wallet_type,
        )
        # One at a time, in route order
        for achievement_name in REWARD_ROUTES[event.event_type]:
            await self._achievements.award_achievement(achievement_name, event.wallet_address)
        return {
            "success": True,
            "eventType": event.event_type.value,
            "wallet": event.wallet_address,
            "walletType": wallet_type,
            "processedAt": datetime.now(timezone.utc).isoformat(),
            "metadata": event.metadata,
        }

    def on_completed(self, job: Any, result: Any) -> None:
        logger.debug("reward_job_completed_event", job_id=job.id, job_name=job.name, result=result)

    def on_failed(self, job: Any, error: BaseException) -> None:
        max_attempts = _max_attempts(job)
        attempts_made = _attempts_made(job)
        if attempts_made >= max_attempts:
            logger.error(
                "reward_job_exhausted",
                job_id=job.id,
                job_name=job.name,
                max_attempts=max_attempts,
                error=str(error),
            )
        else:
            logger.warning(
                "reward_job_retry_pending",
                job_id=job.id,
                job_name=job.name,
                attempts_made=attempts_made,
                max_attempts=max_attempts,
            )
