"""
Achievements package: cheese-mint catalog and award service.

AchievementsService owns the cached ledger state and the signing wallet,
verifies ACL permissions at startup, and awards achievements idempotently.
"""

from rewards_goblin.achievements.catalog import (
    ACHIEVEMENT_ARNS_SEARCHER,
    ACHIEVEMENT_AUDIO_SEARCHER,
    ACHIEVEMENT_IMAGE_SEARCHER,
    ACHIEVEMENT_SEARCHER,
    ACHIEVEMENT_VIDEO_SEARCHER,
    REQUIRED_ACHIEVEMENTS,
)
from rewards_goblin.achievements.service import AchievementsService

__all__ = [
    "ACHIEVEMENT_ARNS_SEARCHER",
    "ACHIEVEMENT_AUDIO_SEARCHER",
    "ACHIEVEMENT_IMAGE_SEARCHER",
    "ACHIEVEMENT_SEARCHER",
    "ACHIEVEMENT_VIDEO_SEARCHER",
    "REQUIRED_ACHIEVEMENTS",
    "AchievementsService",
]
