"""
Achievements service: ledger state cache, ACL bootstrap, idempotent awards.

Startup (initialize): force-fetch state, verify the signing wallet holds the
Award-Cheese-Mint role, build the achievement name -> id map and require every
name in REQUIRED_ACHIEVEMENTS. Any failure raises StartupError.

Runtime: get_process_state() serves a TTL-bounded snapshot; refreshes are
serialized behind one lock and installed with a single attribute swap.
award_achievement() checks the snapshot for an existing award before sending,
then invalidates the cache. Two concurrent jobs can still both send for the
same wallet/achievement (check-then-send race); the ledger has no conditional
award primitive to close it.
"""

from __future__ import annotations

import asyncio
import time
from dataclasses import dataclass
from typing import Any, Callable

from rewards_goblin.achievements.catalog import REQUIRED_ACHIEVEMENTS
from rewards_goblin.config.settings import DEFAULT_STATE_CACHE_TTL_MS, Settings
from rewards_goblin.core.exceptions import LedgerError, StartupError
from rewards_goblin.ledger.client import AOClient
from rewards_goblin.ledger.models import ROLE_AWARD_CHEESE_MINT, LedgerState
from rewards_goblin.ledger.signer import ArweaveSigner, load_signer
from rewards_goblin.ledger.transport import AOHttpTransport
from rewards_goblin.rewards_logging import bind_wallet, get_logger

logger = get_logger(__name__)

VIEW_STATE_TAGS = [{"name": "Action", "value": "View-State"}]


def award_tags(achievement_id: str, wallet_address: str) -> list[dict[str, str]]:
    return [
        {"name": "Action", "value": "Award-Cheese-Mint"},
        {"name": "Cheese-Mint-Id", "value": achievement_id},
        {"name": "Award-To-Address", "value": wallet_address},
    ]


@dataclass(frozen=True)
class _CachedState:
    state: LedgerState
    fetched_at: float


class AchievementsService:
    """
    Owns the signing wallet and the ledger state cache for one ledger process.

    Construct once per process (from_settings), call initialize() before
    serving awards, share the instance across concurrent jobs.
    """

    def __init__(
        self,
        client: AOClient,
        process_id: str,
        signer: ArweaveSigner,
        *,
        state_cache_ttl_ms: int = DEFAULT_STATE_CACHE_TTL_MS,
        required_achievements: tuple[str, ...] = REQUIRED_ACHIEVEMENTS,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        if not process_id:
            raise StartupError("AO_CHEESE_MINT_PROCESS_ID is required in environment config")
        self._client = client
        self._process_id = process_id
        self._signer = signer
        self._ttl_sec = state_cache_ttl_ms / 1000.0
        self._required = tuple(required_achievements)
        self._clock = clock
        self._achievement_ids_by_name: dict[str, str] = {}
        self._cache: _CachedState | None = None
        self._cache_generation = 0
        self._refresh_lock = asyncio.Lock()

    @classmethod
    def from_settings(cls, settings: Settings, client: AOClient | None = None) -> "AchievementsService":
        """Load the wallet JWK and build the AO client from settings (steps 1-2 of startup)."""
        signer = load_signer(settings.wallet_jwk_path)
        if client is None:
            client = AOClient(
                AOHttpTransport(
                    settings.cu_url,
                    settings.mu_url,
                    timeout_sec=settings.ao_request_timeout_sec,
                )
            )
        logger.info(
            "achievements_service_configured",
            wallet_address=signer.address,
            process_id=settings.process_id,
            state_cache_ttl_ms=settings.state_cache_ttl_ms,
        )
        return cls(
            client,
            settings.process_id,
            signer,
            state_cache_ttl_ms=settings.state_cache_ttl_ms,
        )

    @property
    def wallet_address(self) -> str:
        return self._signer.address

    @property
    def process_id(self) -> str:
        return self._process_id

    async def aclose(self) -> None:
        await self._client.aclose()

    # ------------------------------------------------------------------
    # Startup
    # ------------------------------------------------------------------

    async def initialize(self) -> None:
        """Verify ACL permissions and load achievement ids. Raises StartupError."""
        logger.info("achievements_verify_started", process_id=self._process_id)
        try:
            state = await self.get_process_state(force_refresh=True)
        except LedgerError as e:
            logger.error("achievements_verify_failed", error=str(e))
            raise StartupError(f"Failed to fetch ledger state: {e}") from e
        self._verify_acl_permissions(state)
        self._load_achievement_ids(state)
        logger.info("achievements_verify_succeeded", process_id=self._process_id)

    def _verify_acl_permissions(self, state: LedgerState) -> None:
        if not state.has_acl:
            raise StartupError("No ACL found in process info")
        members = state.role_members(ROLE_AWARD_CHEESE_MINT)
        if members is None:
            raise StartupError(f"{ROLE_AWARD_CHEESE_MINT} permission not configured in ACL")
        if not members.get(self.wallet_address):
            allowed = [addr for addr, enabled in members.items() if enabled]
            logger.error(
                "achievements_acl_missing",
                wallet_address=self.wallet_address,
                role=ROLE_AWARD_CHEESE_MINT,
                allowed_addresses=allowed,
            )
            raise StartupError(
                f"Wallet {self.wallet_address} does not have {ROLE_AWARD_CHEESE_MINT} permission "
                f"in AO process. Allowed addresses: {', '.join(allowed) or '(none)'}"
            )
        logger.info("achievements_acl_verified", wallet_address=self.wallet_address, role=ROLE_AWARD_CHEESE_MINT)

    def _load_achievement_ids(self, state: LedgerState) -> None:
        ids_by_name = state.achievement_ids_by_name()
        missing = [name for name in self._required if name not in ids_by_name]
        if missing:
            logger.error(
                "achievements_missing_required",
                missing=missing,
                available=sorted(ids_by_name),
            )
            raise StartupError(f"Required achievements not found: {', '.join(missing)}")
        self._achievement_ids_by_name = ids_by_name
        logger.info(
            "achievements_loaded",
            count=len(ids_by_name),
            required={name: ids_by_name[name] for name in self._required},
        )

    # ------------------------------------------------------------------
    # State cache
    # ------------------------------------------------------------------

    def _fresh(self, cached: _CachedState | None) -> bool:
        return cached is not None and (self._clock() - cached.fetched_at) < self._ttl_sec

    async def get_process_state(self, force_refresh: bool = False) -> LedgerState:
        """
        Return cached state if younger than the TTL, otherwise dry-run View-State.

        Parse failures raise LedgerStateParseError and leave the cache untouched.
        """
        cached = self._cache
        if not force_refresh and self._fresh(cached):
            logger.debug("ledger_state_cache_hit", age_sec=round(self._clock() - cached.fetched_at, 1))
            return cached.state

        async with self._refresh_lock:
            # Another job may have refreshed while this one waited
            cached = self._cache
            if not force_refresh and self._fresh(cached):
                return cached.state
            generation = self._cache_generation
            fetched_at = self._clock()
            logger.debug("ledger_state_fetch", process_id=self._process_id, forced=force_refresh)
            result = await self._client.dry_run(self._process_id, VIEW_STATE_TAGS)
            try:
                state = LedgerState.from_dry_run(result)
            except LedgerError as e:
                logger.error("ledger_state_parse_failed", error=str(e), raw_result=_truncate(result))
                raise
            if generation == self._cache_generation:
                self._cache = _CachedState(state=state, fetched_at=fetched_at)
                logger.debug("ledger_state_cached")
            return state

    def invalidate_state_cache(self) -> None:
        """Drop the cached snapshot; a refresh already in flight will not install its result."""
        logger.debug("ledger_state_cache_invalidated")
        self._cache_generation += 1
        self._cache = None

    # ------------------------------------------------------------------
    # Awards
    # ------------------------------------------------------------------

    def get_achievement_id(self, achievement_name: str) -> str | None:
        achievement_id = self._achievement_ids_by_name.get(achievement_name)
        if achievement_id is None:
            logger.warning("achievement_id_not_found", achievement=achievement_name)
        return achievement_id

    async def has_achievement(self, wallet_address: str, achievement_id: str) -> bool:
        state = await self.get_process_state()
        return state.has_award(wallet_address, achievement_id)

    async def award_achievement(self, achievement_name: str, wallet_address: str) -> None:
        """
        Award achievement_name to wallet_address unless the ledger already shows it.

        Unknown names are a logged no-op. Send errors propagate to the caller.
        """
        log = bind_wallet(logger, wallet_address)
        achievement_id = self.get_achievement_id(achievement_name)
        if achievement_id is None:
            return

        if await self.has_achievement(wallet_address, achievement_id):
            log.debug("achievement_already_awarded", achievement=achievement_name, achievement_id=achievement_id)
            return

        log.info("achievement_award_sending", achievement=achievement_name, achievement_id=achievement_id)
        try:
            sent = await self._client.send(
                self._process_id,
                award_tags(achievement_id, wallet_address),
                self._signer,
            )
        except Exception as e:
            log.error("achievement_award_failed", achievement_id=achievement_id, error=str(e), exc_info=True)
            raise

        # Ledger state has (or may have) changed
        self.invalidate_state_cache()

        process_error = sent.result.get("Error")
        if process_error:
            # Process-level rejection: logged, not raised
            log.error(
                "achievement_award_rejected",
                achievement_id=achievement_id,
                message_id=sent.message_id,
                error=str(process_error),
            )
            return

        log.info("achievement_awarded", achievement_id=achievement_id, message_id=sent.message_id)
        log.debug("achievement_award_result", message_id=sent.message_id, result=_truncate(sent.result))


def _truncate(value: Any, limit: int = 500) -> str:
    text = str(value)
    return text if len(text) <= limit else text[:limit] + "..."
