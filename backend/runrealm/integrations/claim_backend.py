"""
Claim Backend Client

HTTP client for the wallet/contract relay service that mints territories.

Endpoints:
- GET  /territories/{geohash}/claimed  -> {"claimed": bool}
- GET  /wallet                          -> {"address": str, "chain_id": int}
- POST /territories/claim               -> {"transaction_hash": str}
- POST /cross-chain/claims              -> 202, result arrives later

Status mapping:
- 503: contract/relay not ready
- 404/409 on /wallet: no wallet connected
- other non-2xx: generic claim backend error (message passed through)
"""

import logging
from typing import Optional

import httpx

from .interfaces import (
    ClaimBackendError,
    ClaimBackendNotReadyError,
    TerritoryClaimData,
    WalletInfo,
    WalletNotConnectedError,
)

logger = logging.getLogger(__name__)


class HttpClaimBackend:
    """
    Async client for the claim relay.

    Usage:
        backend = HttpClaimBackend("https://relay.example", api_key="...")
        wallet = await backend.get_wallet()
        tx = await backend.claim_territory(data)
    """

    def __init__(
        self,
        base_url: str,
        api_key: Optional[str] = None,
        timeout: float = 15.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.base_url = base_url.rstrip("/")
        self.api_key = api_key
        self.timeout = timeout
        self._transport = transport

    # -------------------------------------------------------------------------
    # Claim backend operations
    # -------------------------------------------------------------------------

    async def is_geohash_claimed(self, geohash: str) -> bool:
        data = await self._request("GET", f"/territories/{geohash}/claimed")
        return bool(data.get("claimed", False))

    async def get_wallet(self) -> WalletInfo:
        try:
            data = await self._request("GET", "/wallet")
        except ClaimBackendError as e:
            if e.status_code in (404, 409):
                raise WalletNotConnectedError() from e
            raise
        return WalletInfo.model_validate(data)

    async def claim_territory(self, data: TerritoryClaimData) -> str:
        result = await self._request(
            "POST",
            "/territories/claim",
            json=data.model_dump(exclude_none=True),
        )
        transaction_hash = result.get("transaction_hash")
        if not transaction_hash:
            raise ClaimBackendError("Claim backend returned no transaction hash")
        return transaction_hash

    async def request_cross_chain_claim(
        self,
        data: TerritoryClaimData,
        target_chain_id: int,
    ) -> None:
        await self._request(
            "POST",
            "/cross-chain/claims",
            json={
                "territory": data.model_dump(exclude_none=True),
                "target_chain_id": target_chain_id,
            },
        )

    # -------------------------------------------------------------------------
    # HTTP
    # -------------------------------------------------------------------------

    async def _request(
        self,
        method: str,
        endpoint: str,
        json: Optional[dict] = None,
    ) -> dict:
        headers = {}
        if self.api_key:
            headers["Authorization"] = f"Bearer {self.api_key}"

        try:
            async with httpx.AsyncClient(
                base_url=self.base_url,
                timeout=self.timeout,
                transport=self._transport,
            ) as client:
                response = await client.request(
                    method=method,
                    url=endpoint,
                    headers=headers,
                    json=json,
                )
        except httpx.HTTPError as e:
            logger.error(f"Claim backend request {method} {endpoint} failed: {e}")
            raise ClaimBackendNotReadyError(f"Claim backend unreachable: {e}") from e

        if response.status_code == 503:
            raise ClaimBackendNotReadyError("Territory contract not ready")

        if response.status_code >= 400:
            message = _error_message(response)
            logger.error(f"Claim backend error: {response.status_code} - {message}")
            raise ClaimBackendError(message, status_code=response.status_code)

        if not response.content:
            return {}
        return response.json()


def _error_message(response: httpx.Response) -> str:
    try:
        body = response.json()
    except ValueError:
        return response.text or f"Claim backend error: {response.status_code}"
    if isinstance(body, dict):
        return body.get("error") or body.get("detail") or str(body)
    return str(body)


class UnavailableClaimBackend:
    """
    Stand-in when no claim backend URL is configured.

    Availability checks fail as "not ready" (so geohashes are assumed free)
    and every claim fails with a readable message.
    """

    MESSAGE = "Claim backend not configured"

    async def is_geohash_claimed(self, geohash: str) -> bool:
        raise ClaimBackendNotReadyError(self.MESSAGE)

    async def get_wallet(self) -> WalletInfo:
        raise WalletNotConnectedError()

    async def claim_territory(self, data: TerritoryClaimData) -> str:
        raise ClaimBackendNotReadyError(self.MESSAGE)

    async def request_cross_chain_claim(
        self,
        data: TerritoryClaimData,
        target_chain_id: int,
    ) -> None:
        raise ClaimBackendNotReadyError(self.MESSAGE)
