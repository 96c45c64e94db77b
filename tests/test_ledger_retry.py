"""
Tests for the ledger retry policy (pure decisions, no sleeping).
"""

from __future__ import annotations

import pytest

from rewards_goblin.core.exceptions import LedgerStateParseError, LedgerTransportError
from rewards_goblin.ledger.retry import RetryPolicy, backoff_delay, decide, is_retryable


def test_backoff_delay_doubles_from_two_seconds():
    assert [backoff_delay(a) for a in range(3)] == [2.0, 4.0, 8.0]


@pytest.mark.parametrize("status", [500, 502, 503])
def test_server_errors_are_retryable(status):
    assert is_retryable(LedgerTransportError("boom", status_code=status)) is True


@pytest.mark.parametrize(
    "error",
    [
        LedgerTransportError("bad request", status_code=400),
        LedgerTransportError("connection refused"),
        LedgerStateParseError("Invalid process info format"),
        ValueError("nope"),
    ],
)
def test_other_errors_are_not_retryable(error):
    assert is_retryable(error) is False
    assert decide(0, error).retry is False


def test_decide_retries_until_attempts_spent():
    err = LedgerTransportError("internal", status_code=500)
    decisions = [decide(a, err) for a in range(3)]
    assert [d.retry for d in decisions] == [True, True, False]
    assert [d.delay_sec for d in decisions] == [2.0, 4.0, 8.0]


def test_policy_rejects_zero_attempts():
    with pytest.raises(ValueError):
        RetryPolicy(max_attempts=0)


def test_custom_policy_base_delay():
    policy = RetryPolicy(max_attempts=2, base_delay_sec=0.5)
    err = LedgerTransportError("internal", status_code=500)
    assert decide(0, err, policy).delay_sec == 0.5
    assert decide(1, err, policy).retry is False
