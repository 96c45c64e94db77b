"""
Retry policy for ledger round trips.

Pure decision functions: given the attempt number (0-based) and the error
observed, decide whether to retry and how long to wait. Only transport errors
with a server status are retryable; the delay is 2**attempt * base with no jitter.
"""

from __future__ import annotations

from dataclasses import dataclass

from rewards_goblin.core.exceptions import LedgerTransportError

DEFAULT_MAX_ATTEMPTS = 3
DEFAULT_BASE_DELAY_SEC = 2.0


@dataclass(frozen=True)
class RetryPolicy:
    max_attempts: int = DEFAULT_MAX_ATTEMPTS
    base_delay_sec: float = DEFAULT_BASE_DELAY_SEC

    def __post_init__(self) -> None:
        if self.max_attempts < 1:
            raise ValueError("max_attempts must be at least 1")
        if self.base_delay_sec < 0:
            raise ValueError("base_delay_sec must not be negative")


@dataclass(frozen=True)
class RetryDecision:
    retry: bool
    delay_sec: float = 0.0


def is_retryable(error: BaseException) -> bool:
    """True only for transport errors where the remote endpoint reported an internal failure."""
    return isinstance(error, LedgerTransportError) and error.is_server_error


def backoff_delay(attempt: int, base_delay_sec: float = DEFAULT_BASE_DELAY_SEC) -> float:
    """Delay after a failed attempt: attempt 0 -> 2s, 1 -> 4s, 2 -> 8s."""
    return (2 ** attempt) * base_delay_sec


def decide(attempt: int, error: BaseException, policy: RetryPolicy | None = None) -> RetryDecision:
    """
    Decide what to do after attempt `attempt` failed with `error`.

    Non-retryable errors never retry. Retryable errors back off after every
    attempt, including the last; the caller stops once max_attempts is spent.
    """
    policy = policy or RetryPolicy()
    if not is_retryable(error):
        return RetryDecision(retry=False)
    return RetryDecision(retry=attempt + 1 < policy.max_attempts, delay_sec=backoff_delay(attempt, policy.base_delay_sec))
