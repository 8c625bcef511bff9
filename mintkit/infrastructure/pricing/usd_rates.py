"""
Coinbase spot price client.
Optional USD snapshots for displayed amounts; a missing rate is never an error.
"""

from __future__ import annotations

import logging
import time
from decimal import Decimal, InvalidOperation
from typing import Dict, Optional

import httpx

from mintkit.config import settings
from mintkit.domain.models.money import Money

logger = logging.getLogger(__name__)

# Stablecoins priced at par without a request
_USD_PEGGED = {"USDC", "USDT", "DAI", "USDBC"}
# Wrapped tokens that share the spot price of the underlying asset
_ALIASES = {"WETH": "ETH", "WPOL": "POL", "WMATIC": "POL", "MATIC": "POL"}


class CoinbaseRateProvider:
    def __init__(
        self,
        api_base_url: Optional[str] = None,
        cache_ttl_seconds: Optional[int] = None,
        timeout_seconds: float = 5.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.api_base_url = (api_base_url or settings.PRICE_API_BASE_URL).rstrip("/")
        self.cache_ttl_seconds = (
            settings.PRICE_CACHE_TTL if cache_ttl_seconds is None else cache_ttl_seconds
        )
        self.timeout_seconds = timeout_seconds
        self._transport = transport
        self._cache: Dict[str, tuple[float, Decimal]] = {}

    def _cache_get(self, key: str) -> Optional[Decimal]:
        cached = self._cache.get(key)
        if not cached:
            return None
        ts, value = cached
        if time.time() - ts > self.cache_ttl_seconds:
            return None
        return value

    def _cache_set(self, key: str, value: Decimal) -> None:
        self._cache[key] = (time.time(), value)

    async def _request_json(self, url: str) -> Optional[dict]:
        try:
            async with httpx.AsyncClient(
                timeout=self.timeout_seconds, transport=self._transport
            ) as client:
                response = await client.get(url, headers={"Accept": "application/json"})
                if response.status_code != 200:
                    logger.debug("Coinbase API %s: %s", response.status_code, response.text)
                    return None
                return response.json()
        except (httpx.HTTPError, ValueError) as exc:
            logger.debug("Coinbase API request failed: %s", exc)
            return None

    async def get_usd_rate(self, symbol: str) -> Optional[Decimal]:
        symbol = _ALIASES.get(symbol.upper(), symbol.upper())
        if symbol in _USD_PEGGED:
            return Decimal("1")

        cached = self._cache_get(symbol)
        if cached is not None:
            return cached

        payload = await self._request_json(f"{self.api_base_url}/prices/{symbol}-USD/spot")
        if not payload:
            return None
        try:
            rate = Decimal(str(payload["data"]["amount"]))
        except (KeyError, TypeError, InvalidOperation):
            logger.debug("Unexpected Coinbase payload for %s: %s", symbol, payload)
            return None
        self._cache_set(symbol, rate)
        return rate

    async def attach_usd(self, money: Money) -> Money:
        """Return ``money`` with a USD snapshot, or unchanged if no rate is known."""
        rate = await self.get_usd_rate(money.symbol)
        if rate is None:
            return money
        amount = Decimal(money.raw_value).scaleb(-money.decimals) * rate
        return money.with_usd(amount.quantize(Decimal("0.01")))
