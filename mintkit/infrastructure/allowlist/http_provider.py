"""
HTTP allowlist provider.
Fetches a wallet's (index, proof) allowlist entries for a merkle tree.
"""

from __future__ import annotations

import logging
from typing import List, Optional

import httpx

from mintkit.config import settings
from mintkit.domain.errors import AllowlistProviderError
from mintkit.domain.models.claim import MerkleEntry

logger = logging.getLogger(__name__)

# Numeric app id the allowlist API uses for edition claims
EDITION_APP_ID = 2522713783


class HttpAllowlistProvider:
    def __init__(
        self,
        api_base_url: Optional[str] = None,
        timeout_seconds: Optional[float] = None,
        app_id: int = EDITION_APP_ID,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.api_base_url = (api_base_url or settings.ALLOWLIST_API_BASE_URL).rstrip("/")
        self.timeout_seconds = (
            settings.ALLOWLIST_TIMEOUT_SECONDS if timeout_seconds is None else timeout_seconds
        )
        self.app_id = app_id
        self._transport = transport

    async def _request_json(self, url: str, params: Optional[dict] = None) -> object:
        headers = {"Accept": "application/json"}
        try:
            async with httpx.AsyncClient(
                timeout=self.timeout_seconds, transport=self._transport
            ) as client:
                response = await client.get(url, headers=headers, params=params)
        except httpx.HTTPError as exc:
            raise AllowlistProviderError(
                f"Allowlist request failed: {exc}", details={"url": url}
            ) from exc
        if response.status_code != 200:
            logger.debug("Allowlist API %s: %s", response.status_code, response.text)
            raise AllowlistProviderError(
                f"Allowlist API returned {response.status_code}",
                details={"url": url, "status": response.status_code},
            )
        try:
            return response.json()
        except ValueError as exc:
            raise AllowlistProviderError(
                "Allowlist API returned invalid JSON", details={"url": url}
            ) from exc

    async def get_merkle_entries(self, merkle_tree_id: int, wallet: str) -> List[MerkleEntry]:
        url = f"{self.api_base_url}/merkleTree/{merkle_tree_id}/merkleInfo"
        params = {"address": wallet, "appId": self.app_id}
        payload = await self._request_json(url, params=params)
        if not isinstance(payload, list):
            raise AllowlistProviderError(
                "Unexpected allowlist payload", details={"merkle_tree_id": merkle_tree_id}
            )

        entries: List[MerkleEntry] = []
        for item in payload:
            # entries without an index are unusable for minting
            if not isinstance(item, dict) or item.get("value") is None:
                continue
            entries.append(
                MerkleEntry(
                    index=int(item["value"]),
                    proof=tuple(item.get("merkleProof") or ()),
                )
            )
        logger.debug(
            "Allowlist tree %s returned %s entries for %s", merkle_tree_id, len(entries), wallet
        )
        return entries
