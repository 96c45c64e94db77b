"""
Reward event types, payload model and the event -> achievements routing table.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Mapping

from rewards_goblin.achievements.catalog import (
    ACHIEVEMENT_ARNS_SEARCHER,
    ACHIEVEMENT_AUDIO_SEARCHER,
    ACHIEVEMENT_IMAGE_SEARCHER,
    ACHIEVEMENT_SEARCHER,
    ACHIEVEMENT_VIDEO_SEARCHER,
)
from rewards_goblin.core.exceptions import UnknownEventTypeError


class RewardEventType(str, Enum):
    ARNS_SEARCH = "arns-search"
    IMAGE_SEARCH = "image-search"
    AUDIO_SEARCH = "audio-search"
    VIDEO_SEARCH = "video-search"

    @classmethod
    def parse(cls, value: Any) -> "RewardEventType":
        try:
            return cls(value)
        except ValueError as e:
            raise UnknownEventTypeError(f"Unknown job type: {value}") from e


# Achievements granted per event type, awarded in this order
REWARD_ROUTES: Mapping[RewardEventType, tuple[str, ...]] = {
    RewardEventType.ARNS_SEARCH: (ACHIEVEMENT_SEARCHER, ACHIEVEMENT_ARNS_SEARCHER),
    RewardEventType.IMAGE_SEARCH: (ACHIEVEMENT_SEARCHER, ACHIEVEMENT_IMAGE_SEARCHER),
    RewardEventType.AUDIO_SEARCH: (ACHIEVEMENT_SEARCHER, ACHIEVEMENT_AUDIO_SEARCHER),
    RewardEventType.VIDEO_SEARCH: (ACHIEVEMENT_SEARCHER, ACHIEVEMENT_VIDEO_SEARCHER),
}


@dataclass(frozen=True)
class RewardEvent:
    """Queued reward event payload. Identified by the queue's job id, not by content."""

    event_type: RewardEventType
    wallet_address: str
    metadata: dict[str, Any] | None = field(default=None)

    def to_job_data(self) -> dict[str, Any]:
        data: dict[str, Any] = {
            "eventType": self.event_type.value,
            "walletAddress": self.wallet_address,
        }
        if self.metadata is not None:
            data["metadata"] = self.metadata
        return data
