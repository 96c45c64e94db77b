"""
Rewards worker package: queue consumer for reward events.

Validates each event's wallet, routes the event type to the achievements it
grants, awards them in order, and reports success or failure back to the
queue, which owns retry scheduling.
"""

from rewards_goblin.rewards_worker.events import REWARD_ROUTES, RewardEvent, RewardEventType
from rewards_goblin.rewards_worker.processor import RewardsProcessor

__all__ = ["REWARD_ROUTES", "RewardEvent", "RewardEventType", "RewardsProcessor"]
