"""
MintClient
Entry point: builds the read path from settings and hands out product handles.
"""

from __future__ import annotations

import logging
from dataclasses import replace
from datetime import datetime
from typing import Callable, Dict, Optional

from mintkit.config import settings
from mintkit.config.networks import NetworkRegistry, networks
from mintkit.domain.models.product import ProductRef
from mintkit.infrastructure.allowlist.http_provider import HttpAllowlistProvider
from mintkit.infrastructure.chain.provider_factory import get_chain_reader
from mintkit.infrastructure.chain.tokens import TokenMetadataResolver
from mintkit.infrastructure.chain.types import AllowlistProvider, ChainReader
from mintkit.infrastructure.pricing.usd_rates import CoinbaseRateProvider
from mintkit.services.claim_state_reader import ClaimStateReader
from mintkit.services.product_service import ProductHandle
from mintkit.utils.logging_redaction import install_redaction_filter
from mintkit.utils.validation import normalize_address

logger = logging.getLogger(__name__)


class MintClient:
    """
    Usage:
        client = MintClient()
        handle = client.get_product(ProductRef(...))
        prepared = await handle.prepare_purchase(wallet, EditionPayload(quantity=2))
        order = await handle.purchase(account, prepared)
    """

    def __init__(
        self,
        reader: Optional[ChainReader] = None,
        primary_reader: Optional[ChainReader] = None,
        allowlist: Optional[AllowlistProvider] = None,
        rates: Optional[CoinbaseRateProvider] = None,
        registry: Optional[NetworkRegistry] = None,
        clock: Optional[Callable[[], datetime]] = None,
    ):
        # child logger records only meet handler filters
        install_redaction_filter()
        self.registry = registry or networks
        self.reader = reader or get_chain_reader(primary_reader, self.registry)
        self.allowlist = allowlist or HttpAllowlistProvider()
        if rates is None and settings.FETCH_USD_PRICES:
            rates = CoinbaseRateProvider()
        self.tokens = TokenMetadataResolver(self.reader, self.registry)
        self.claim_reader = ClaimStateReader(self.reader, self.tokens, rates)
        self.clock = clock
        self._handles: Dict[str, ProductHandle] = {}

    def get_product(self, product: ProductRef) -> ProductHandle:
        """Handles are cached per product, so the claim cache is shared."""
        self.registry.get(product.network_id)
        product = _normalized(product)
        handle = self._handles.get(product.key)
        if handle is None:
            handle = ProductHandle(
                product,
                self.reader,
                claim_reader=self.claim_reader,
                allowlist=self.allowlist,
                clock=self.clock,
            )
            self._handles[product.key] = handle
            logger.debug("Created handle for %s (%s)", product.key, product.family.value)
        return handle


def _normalized(product: ProductRef) -> ProductRef:
    return replace(
        product,
        creator_contract=normalize_address(product.creator_contract, "creator_contract"),
        extension_address=normalize_address(product.extension_address, "extension_address"),
    )
