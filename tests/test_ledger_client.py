"""
Tests for AOClient: retry/backoff discipline and the signed send round trip.

Transport is an AsyncMock; sleeps are recorded, not awaited.
"""

from __future__ import annotations

import asyncio
from unittest.mock import AsyncMock, MagicMock

import pytest

from conftest import PROCESS_ID, SleepRecorder
from rewards_goblin.core.exceptions import LedgerTransportError
from rewards_goblin.ledger.client import AOClient
from rewards_goblin.ledger.signer import ArweaveSigner

TAGS = [{"name": "Action", "value": "View-State"}]
OK_RESULT = {"Messages": [{"Data": "{}"}]}


def _server_error() -> LedgerTransportError:
    return LedgerTransportError("AO dry run failed with status 500", status_code=500)


def _client(transport, sleep) -> AOClient:
    return AOClient(transport, sleep=sleep)


def test_dry_run_retries_server_errors_then_succeeds():
    transport = MagicMock()
    transport.dry_run = AsyncMock(side_effect=[_server_error(), _server_error(), OK_RESULT])
    sleep = SleepRecorder()

    result = asyncio.run(_client(transport, sleep).dry_run(PROCESS_ID, TAGS))

    assert result == OK_RESULT
    assert transport.dry_run.await_count == 3
    assert sleep.delays == [2.0, 4.0]


def test_dry_run_non_server_error_not_retried():
    transport = MagicMock()
    transport.dry_run = AsyncMock(side_effect=LedgerTransportError("bad request", status_code=400))
    sleep = SleepRecorder()

    with pytest.raises(LedgerTransportError, match="bad request"):
        asyncio.run(_client(transport, sleep).dry_run(PROCESS_ID, TAGS))

    assert transport.dry_run.await_count == 1
    assert sleep.delays == []


def test_network_error_not_retried():
    transport = MagicMock()
    transport.dry_run = AsyncMock(side_effect=LedgerTransportError("connection refused"))
    sleep = SleepRecorder()

    with pytest.raises(LedgerTransportError):
        asyncio.run(_client(transport, sleep).dry_run(PROCESS_ID, TAGS))
    assert sleep.delays == []


def test_exhausted_attempts_raise_last_error():
    errors = [
        LedgerTransportError("first", status_code=500),
        LedgerTransportError("second", status_code=502),
        LedgerTransportError("third", status_code=503),
    ]
    transport = MagicMock()
    transport.dry_run = AsyncMock(side_effect=errors)
    sleep = SleepRecorder()

    with pytest.raises(LedgerTransportError, match="third"):
        asyncio.run(_client(transport, sleep).dry_run(PROCESS_ID, TAGS))

    assert transport.dry_run.await_count == 3
    assert sleep.delays == [2.0, 4.0, 8.0]


def test_dry_run_passes_tags_and_data():
    transport = MagicMock()
    transport.dry_run = AsyncMock(return_value=OK_RESULT)
    asyncio.run(_client(transport, SleepRecorder()).dry_run(PROCESS_ID, TAGS, "payload"))
    transport.dry_run.assert_awaited_once_with(PROCESS_ID, TAGS, "payload")


def test_send_posts_signed_item_and_fetches_result(rsa_jwk):
    signer = ArweaveSigner(rsa_jwk)
    transport = MagicMock()
    transport.post_data_item = AsyncMock(return_value={"id": "mu-message-id"})
    transport.fetch_result = AsyncMock(return_value={"Messages": [], "Output": "ok"})

    sent = asyncio.run(
        _client(transport, SleepRecorder()).send(
            PROCESS_ID, [{"name": "Action", "value": "Award-Cheese-Mint"}], signer
        )
    )

    assert sent.message_id == "mu-message-id"
    assert sent.result == {"Messages": [], "Output": "ok"}
    raw = transport.post_data_item.await_args.args[0]
    assert isinstance(raw, bytes)
    assert b"Award-Cheese-Mint" in raw
    assert b"Data-Protocol" in raw
    transport.fetch_result.assert_awaited_once_with("mu-message-id", PROCESS_ID)


def test_send_retries_whole_round_trip_on_result_server_error(rsa_jwk):
    signer = ArweaveSigner(rsa_jwk)
    transport = MagicMock()
    transport.post_data_item = AsyncMock(return_value={"id": "mu-message-id"})
    transport.fetch_result = AsyncMock(side_effect=[_server_error(), {"Messages": []}])
    sleep = SleepRecorder()

    sent = asyncio.run(_client(transport, sleep).send(PROCESS_ID, TAGS, signer))

    assert sent.result == {"Messages": []}
    assert transport.post_data_item.await_count == 2
    assert sleep.delays == [2.0]


def test_aclose_closes_transport():
    transport = MagicMock()
    transport.aclose = AsyncMock()
    asyncio.run(_client(transport, SleepRecorder()).aclose())
    transport.aclose.assert_awaited_once()

