"""
CLAIM STATE READER

Fetches and caches the on-chain claim of a product instance.

RESPONSIBILITIES:
- Fan out the claim getter and platform-fee getters concurrently
- Decode through the product family strategy
- Resolve the payment token and build Money values
- Own the cache: an entry is swapped only after a fully successful read

RULES:
- No eligibility logic here
- A failed refresh never touches the previous entry
- Concurrent refreshes: last write wins
"""

from __future__ import annotations

import asyncio
import logging
from typing import Dict, Optional

from mintkit.domain.errors import ContractReadError, MintKitError
from mintkit.domain.families import get_strategy
from mintkit.domain.models.claim import ClaimState
from mintkit.domain.models.money import Money
from mintkit.domain.models.product import ProductRef
from mintkit.infrastructure.chain.tokens import TokenMetadataResolver
from mintkit.infrastructure.chain.types import ChainReader
from mintkit.infrastructure.pricing.usd_rates import CoinbaseRateProvider

logger = logging.getLogger(__name__)


class ClaimStateReader:
    def __init__(
        self,
        reader: ChainReader,
        tokens: Optional[TokenMetadataResolver] = None,
        rates: Optional[CoinbaseRateProvider] = None,
    ):
        self.reader = reader
        self.tokens = tokens or TokenMetadataResolver(reader)
        self.rates = rates
        self._cache: Dict[str, ClaimState] = {}

    def cached(self, product: ProductRef) -> Optional[ClaimState]:
        """Last good state, for display paths that tolerate staleness."""
        return self._cache.get(product.key)

    def invalidate(self, product: ProductRef) -> None:
        self._cache.pop(product.key, None)

    async def fetch_claim_state(
        self, product: ProductRef, force_refresh: bool = False
    ) -> ClaimState:
        if not force_refresh:
            cached = self._cache.get(product.key)
            if cached is not None:
                logger.debug("Claim cache hit for %s", product.key)
                return cached

        try:
            state = await self._read(product)
        except ContractReadError:
            raise
        except MintKitError as exc:
            raise ContractReadError(
                f"Failed to read claim {product.key}: {exc}",
                details={"product": product.key},
            ) from exc
        except Exception as exc:
            raise ContractReadError(
                f"Failed to decode claim {product.key}: {exc}",
                details={"product": product.key},
            ) from exc

        self._cache[product.key] = state
        logger.debug(
            "Claim %s refreshed: minted=%s max=%s wallet_max=%s",
            product.key, state.total_minted, state.total_max, state.wallet_max,
        )
        return state

    async def _read(self, product: ProductRef) -> ClaimState:
        strategy = get_strategy(product.family)
        raw_claim, *fee_values = await asyncio.gather(
            strategy.read_claim(self.reader, product),
            *(strategy.read_fee(self.reader, product, name) for name in strategy.fee_functions),
        )
        fees = dict(zip(strategy.fee_functions, fee_values))
        decoded = strategy.decode_claim(product, raw_claim)

        unit_cost, fee = await asyncio.gather(
            self.tokens.money(product.network_id, decoded.payment_token, decoded.unit_cost),
            self.tokens.money(product.network_id, None, strategy.select_fee(decoded, fees)),
        )
        if self.rates is not None:
            unit_cost, fee = await asyncio.gather(
                self._with_usd(unit_cost), self._with_usd(fee)
            )

        return ClaimState(
            total_minted=decoded.total_minted,
            total_max=decoded.total_max,
            wallet_max=decoded.wallet_max,
            start_date=decoded.start_date,
            end_date=decoded.end_date,
            allowlist_root=decoded.allowlist_root,
            unit_cost=unit_cost,
            platform_fee_per_unit=fee,
            payment_receiver=decoded.payment_receiver,
            extra=decoded.extra,
        )

    async def _with_usd(self, money: Money) -> Money:
        return await self.rates.attach_usd(money)
