"""
Pytest fixtures for Rewards Goblin tests.

No network, Redis or real sleeps: the AO client, queue, clock and sleep are
replaced with in-memory doubles. The RSA wallet key is generated once per session.
"""

from __future__ import annotations

import json
from types import SimpleNamespace
from typing import Any
from unittest.mock import AsyncMock

import pytest
from Crypto.PublicKey import RSA

from rewards_goblin.achievements import REQUIRED_ACHIEVEMENTS, AchievementsService
from rewards_goblin.ledger.signer import b64url_encode

SERVICE_WALLET = "Svc0WalletAddr0000000000000000000000000000A"
OTHER_WALLET = "Other0WalletAddr00000000000000000000000000B"
PROCESS_ID = "Proc0CheeseMintCollection000000000000000000"
ARWEAVE_WALLET = "vLRHFqCw1uHu75xqB4fCDW-QxpkpJxBtFD9g4QYUbfw"
MINT_IDS = {name: f"mint-{i}" for i, name in enumerate(REQUIRED_ACHIEVEMENTS, start=1)}


def _int_b64(value: int) -> str:
    return b64url_encode(value.to_bytes((value.bit_length() + 7) // 8, "big"))


def make_state(
    *,
    acl_members: dict[str, bool] | None = None,
    names: tuple[str, ...] = REQUIRED_ACHIEVEMENTS,
    awards: dict[str, dict[str, Any]] | None = None,
) -> dict[str, Any]:
    """View-State payload as the cheese-mint collection process returns it."""
    members = {SERVICE_WALLET: True} if acl_members is None else acl_members
    return {
        "owner": OTHER_WALLET,
        "acl": {"roles": {"Award-Cheese-Mint": members}},
        "cheese_mints_by_id": {
            MINT_IDS.get(name, f"mint-{name}"): {
                "id": MINT_IDS.get(name, f"mint-{name}"),
                "name": name,
                "created_at": 1_700_000_000_000,
                "created_by": OTHER_WALLET,
                "description": f"{name} badge",
                "points": 10,
                "icon": "icon-tx",
                "category": "search",
            }
            for name in names
        },
        # Lua JSON encodes an empty table as an array
        "cheese_mints_by_address": awards if awards else [],
    }


def award_record(message_id: str = "msg-1") -> dict[str, Any]:
    return {"awarded_by": SERVICE_WALLET, "awarded_at": 1_700_000_000_500, "message_id": message_id}


def dry_run_result(state: dict[str, Any]) -> dict[str, Any]:
    return {"Messages": [{"Data": json.dumps(state)}], "Spawns": [], "Output": "", "Error": None}


class FakeClock:
    """Monotonic clock double; advance() moves time forward in seconds."""

    def __init__(self, now: float = 1000.0) -> None:
        self.now = now

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


class SleepRecorder:
    """Async sleep double that records requested delays instead of waiting."""

    def __init__(self) -> None:
        self.delays: list[float] = []

    async def __call__(self, delay: float) -> None:
        self.delays.append(delay)


@pytest.fixture(scope="session")
def rsa_jwk() -> dict[str, str]:
    """4096-bit Arweave-style RSA JWK."""
    key = RSA.generate(4096)
    return {
        "kty": "RSA",
        "n": _int_b64(key.n),
        "e": _int_b64(key.e),
        "d": _int_b64(key.d),
        "p": _int_b64(key.p),
        "q": _int_b64(key.q),
    }


@pytest.fixture
def jwk_file(tmp_path, rsa_jwk):
    path = tmp_path / "wallet.json"
    path.write_text(json.dumps(rsa_jwk), encoding="utf-8")
    return path


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def fake_ao_client():
    """AOClient double: dry_run returns a valid state, send returns a message id."""
    client = SimpleNamespace()
    client.dry_run = AsyncMock(return_value=dry_run_result(make_state()))
    client.send = AsyncMock(
        return_value=SimpleNamespace(message_id="msg-sent", result={"Messages": [], "Output": "", "Error": None})
    )
    client.aclose = AsyncMock()
    return client


@pytest.fixture
def achievements_service(fake_ao_client, clock) -> AchievementsService:
    """Service wired to the fake client; not yet initialized."""
    return AchievementsService(
        fake_ao_client,
        PROCESS_ID,
        SimpleNamespace(address=SERVICE_WALLET),
        state_cache_ttl_ms=300_000,
        clock=clock,
    )
