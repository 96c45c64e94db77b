"""
Structured logging for Rewards Goblin.

JSON logs with service, event_type and timestamp; wallet_id and job context
bound where relevant. Use get_logger() in all modules.
"""

from rewards_goblin.rewards_logging.logger import bind_wallet, get_logger, job_context

__all__ = ["bind_wallet", "get_logger", "job_context"]
