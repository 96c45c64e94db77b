"""
FastAPI server: health endpoint over the rewards queue.

GET / returns service status and job counts by state. The lifespan performs
the fatal startup sequence (settings, wallet, ACL and catalog verification)
before starting the rewards worker, and closes everything on shutdown.
"""

from __future__ import annotations

from contextlib import asynccontextmanager
from datetime import datetime, timezone
from typing import Any

from fastapi import Depends, FastAPI, Request
from pydantic import BaseModel, Field

from rewards_goblin.achievements import AchievementsService
from rewards_goblin.config import get_settings
from rewards_goblin.rewards_logging import get_logger
from rewards_goblin.rewards_worker import RewardsProcessor
from rewards_goblin.rewards_worker.rewards_queue import (
    QUEUE_NAME,
    create_queue,
    create_worker,
    get_job_counts,
)

logger = get_logger(__name__)

SERVICE_NAME = "rewards-goblin"


# -----------------------------------------------------------------------------
# Response models
# -----------------------------------------------------------------------------

class QueueStatus(BaseModel):
    name: str = Field(..., description="Queue name")
    counts: dict[str, int] = Field(default_factory=dict, description="Job counts by state")


class HealthResponse(BaseModel):
    """GET / response."""

    status: str = Field("ok", description="Service status")
    service: str = Field(SERVICE_NAME, description="Service name")
    timestamp: str = Field(..., description="ISO 8601 UTC time of the check")
    queue: QueueStatus


# -----------------------------------------------------------------------------
# Lifespan: bootstrap achievements service, start rewards worker
# -----------------------------------------------------------------------------


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Startup failures propagate and abort the process; nothing is served half-initialized."""
    settings = get_settings()
    achievements = AchievementsService.from_settings(settings)
    try:
        await achievements.initialize()
    except Exception:
        logger.exception("achievements_init_failed")
        await achievements.aclose()
        raise

    queue = None
    worker = None
    try:
        queue = create_queue(settings)
        worker = create_worker(settings, RewardsProcessor(achievements))
        app.state.rewards_queue = queue
        app.state.achievements = achievements
        logger.info("server_ready", queue=QUEUE_NAME, wallet_address=achievements.wallet_address)
        yield
    finally:
        logger.info("server_shutdown")
        if worker is not None:
            await worker.close()
        if queue is not None:
            await queue.close()
        await achievements.aclose()


app = FastAPI(
    title="Rewards Goblin",
    description="Awards search achievements to wallets via the AO cheese-mint collection process.",
    version="0.1.0",
    lifespan=lifespan,
)


def get_rewards_queue(request: Request) -> Any:
    """Dependency: queue handle opened by the lifespan."""
    return request.app.state.rewards_queue


@app.get("/", response_model=HealthResponse)
async def get_health(queue: Any = Depends(get_rewards_queue)) -> HealthResponse:
    counts = await get_job_counts(queue)
    return HealthResponse(
        timestamp=datetime.now(timezone.utc).isoformat(),
        queue=QueueStatus(name=QUEUE_NAME, counts=counts),
    )
