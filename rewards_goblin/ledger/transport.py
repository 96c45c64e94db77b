"""
HTTP transport to AO compute (CU) and messenger (MU) units.

- dry_run: POST {cu}/dry-run?process-id=<pid> with a JSON message body.
- post_data_item: POST signed data item bytes to {mu}/, returns the MU response.
- fetch_result: GET {cu}/result/<message>?process-id=<pid>.

HTTP status >= 400 raises LedgerTransportError carrying the status code;
network failures raise LedgerTransportError with no status.
"""

from __future__ import annotations

from typing import Any

import httpx

from rewards_goblin.core.exceptions import LedgerTransportError
from rewards_goblin.ledger.signer import Tag
from rewards_goblin.rewards_logging import get_logger

logger = get_logger(__name__)

DEFAULT_REQUEST_TIMEOUT_SEC = 30.0
DRY_RUN_PLACEHOLDER = "1234"
# Tags every AO message carries (legacy network)
AO_PROTOCOL_TAGS: list[Tag] = [
    {"name": "Data-Protocol", "value": "ao"},
    {"name": "Variant", "value": "ao.TN.1"},
    {"name": "Type", "value": "Message"},
]
SDK_TAG: Tag = {"name": "SDK", "value": "rewards-goblin"}


def _raise_for_status(resp: httpx.Response, what: str) -> None:
    if resp.status_code >= 400:
        body = resp.text[:200] if resp.text else ""
        raise LedgerTransportError(
            f"{what} failed with status {resp.status_code}: {body}",
            status_code=resp.status_code,
        )


def _json_object(resp: httpx.Response, what: str) -> dict[str, Any]:
    try:
        data = resp.json()
    except ValueError as e:
        raise LedgerTransportError(f"{what} returned non-JSON body", status_code=resp.status_code) from e
    if not isinstance(data, dict):
        raise LedgerTransportError(f"{what} returned unexpected payload", status_code=resp.status_code)
    return data


class AOHttpTransport:
    """
    One round trip per call; no retries here (see AOClient).

    The underlying httpx.AsyncClient is shared across concurrent jobs and
    closed with aclose().
    """

    def __init__(
        self,
        cu_url: str,
        mu_url: str,
        *,
        timeout_sec: float = DEFAULT_REQUEST_TIMEOUT_SEC,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        if not cu_url.strip() or not mu_url.strip():
            raise ValueError("cu_url and mu_url must be non-empty")
        self._cu_url = cu_url.rstrip("/")
        self._mu_url = mu_url.rstrip("/")
        self._client = client or httpx.AsyncClient(timeout=httpx.Timeout(timeout_sec))

    async def aclose(self) -> None:
        await self._client.aclose()

    async def _request(self, method: str, url: str, what: str, **kwargs: Any) -> httpx.Response:
        logger.debug("ao_http_request", method=method, url=url)
        try:
            resp = await self._client.request(method, url, **kwargs)
        except httpx.HTTPError as e:
            raise LedgerTransportError(f"{what} request error: {e}") from e
        _raise_for_status(resp, what)
        return resp

    async def dry_run(self, process_id: str, tags: list[Tag], data: str | None = None) -> dict[str, Any]:
        body = {
            "Id": DRY_RUN_PLACEHOLDER,
            "Target": process_id,
            "Owner": DRY_RUN_PLACEHOLDER,
            "Anchor": "0",
            "Data": data if data is not None else DRY_RUN_PLACEHOLDER,
            "Tags": list(tags) + AO_PROTOCOL_TAGS,
        }
        resp = await self._request(
            "POST",
            f"{self._cu_url}/dry-run",
            "AO dry run",
            params={"process-id": process_id},
            json=body,
        )
        return _json_object(resp, "AO dry run")

    async def post_data_item(self, raw: bytes) -> dict[str, Any]:
        resp = await self._request(
            "POST",
            f"{self._mu_url}/",
            "AO message",
            content=raw,
            headers={"Content-Type": "application/octet-stream", "Accept": "application/json"},
        )
        return _json_object(resp, "AO message")

    async def fetch_result(self, message_id: str, process_id: str) -> dict[str, Any]:
        resp = await self._request(
            "GET",
            f"{self._cu_url}/result/{message_id}",
            "AO result",
            params={"process-id": process_id},
        )
        return _json_object(resp, "AO result")
