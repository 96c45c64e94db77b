"""
AO ledger client: read-only dry runs and signed state-mutating messages.

Both operations share one retry discipline (see ledger.retry): up to 3
attempts, only server errors are retried, exponential backoff 2s/4s/8s
slept after each server-error failure. After the attempts are spent the last
error is raised.
"""

from __future__ import annotations

import asyncio
from dataclasses import dataclass
from typing import Any, Awaitable, Callable, TypeVar

from rewards_goblin.core.exceptions import LedgerError
from rewards_goblin.ledger.retry import RetryPolicy, decide, is_retryable
from rewards_goblin.ledger.signer import ArweaveSigner, Tag
from rewards_goblin.ledger.transport import AO_PROTOCOL_TAGS, SDK_TAG, AOHttpTransport
from rewards_goblin.rewards_logging import get_logger

logger = get_logger(__name__)

DEFAULT_MESSAGE_DATA = " "

T = TypeVar("T")
SleepFn = Callable[[float], Awaitable[None]]


@dataclass(frozen=True)
class SendResult:
    message_id: str
    result: dict[str, Any]


class AOClient:
    """
    Retrying client for a single AO process endpoint pair.

    transport: AOHttpTransport (or any object with dry_run, post_data_item,
    fetch_result coroutines). sleep is injectable so backoff can be observed
    without real delays.
    """

    def __init__(
        self,
        transport: AOHttpTransport,
        *,
        retry_policy: RetryPolicy | None = None,
        sleep: SleepFn = asyncio.sleep,
    ) -> None:
        self._transport = transport
        self._policy = retry_policy or RetryPolicy()
        self._sleep = sleep

    async def aclose(self) -> None:
        await self._transport.aclose()

    async def _with_retry(self, operation: str, process_id: str, call: Callable[[], Awaitable[T]]) -> T:
        last_error: Exception | None = None
        for attempt in range(self._policy.max_attempts):
            try:
                logger.debug("ao_request_attempt", operation=operation, process_id=process_id, attempt=attempt)
                return await call()
            except Exception as e:
                logger.error(
                    "ao_request_failed",
                    operation=operation,
                    process_id=process_id,
                    attempt=attempt,
                    error=str(e),
                )
                if not is_retryable(e):
                    raise
                decision = decide(attempt, e, self._policy)
                last_error = e
                logger.info(
                    "ao_request_backoff",
                    operation=operation,
                    process_id=process_id,
                    attempt=attempt,
                    max_attempts=self._policy.max_attempts,
                    delay_sec=decision.delay_sec,
                )
                await self._sleep(decision.delay_sec)
                if not decision.retry:
                    break
        if last_error is not None:
            raise last_error
        raise LedgerError(f"Unknown error occurred during AO {operation}")

    async def dry_run(self, process_id: str, tags: list[Tag], data: str | None = None) -> dict[str, Any]:
        """Read-only query against process_id; returns the raw dry-run result."""
        return await self._with_retry(
            "dry_run",
            process_id,
            lambda: self._transport.dry_run(process_id, tags, data),
        )

    async def send(
        self,
        process_id: str,
        tags: list[Tag],
        signer: ArweaveSigner,
        data: str | None = None,
    ) -> SendResult:
        """
        Sign and post a message to process_id, then fetch its result.

        A retry re-signs and re-posts the whole message.
        """

        async def _send_once() -> SendResult:
            item = signer.create_data_item(
                data if data is not None else DEFAULT_MESSAGE_DATA,
                list(tags) + AO_PROTOCOL_TAGS + [SDK_TAG],
                target=process_id,
            )
            posted = await self._transport.post_data_item(item.raw)
            message_id = str(posted.get("id") or item.id)
            logger.debug("ao_message_posted", process_id=process_id, message_id=message_id)
            result = await self._transport.fetch_result(message_id, process_id)
            logger.debug("ao_message_result", process_id=process_id, message_id=message_id)
            return SendResult(message_id=message_id, result=result)

        return await self._with_retry("send", process_id, _send_once)
