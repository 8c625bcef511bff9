"""
Token metadata resolution.
Native currency comes from the network table; ERC-20 decimals/symbol are
read once per (network, token) and cached.
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from typing import Dict, Optional, Tuple

from eth_utils import to_checksum_address

from mintkit.config.networks import NetworkRegistry, networks
from mintkit.domain.models.money import NATIVE_TOKEN, ZERO_ADDRESS, Money
from mintkit.infrastructure.chain.abis import ERC20_ABI
from mintkit.infrastructure.chain.types import ChainReader

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class TokenMetadata:
    token_id: str
    symbol: str
    decimals: int

    @property
    def is_native(self) -> bool:
        return self.token_id == NATIVE_TOKEN


def is_native_token(token: Optional[str]) -> bool:
    return token is None or token == NATIVE_TOKEN or token.lower() == ZERO_ADDRESS


class TokenMetadataResolver:
    def __init__(self, reader: ChainReader, registry: Optional[NetworkRegistry] = None):
        self.reader = reader
        self.registry = registry or networks
        self._cache: Dict[Tuple[int, str], TokenMetadata] = {}

    async def describe(self, network_id: int, token: Optional[str]) -> TokenMetadata:
        if is_native_token(token):
            return TokenMetadata(NATIVE_TOKEN, self.registry.native_symbol(network_id), 18)

        address = to_checksum_address(token)
        key = (network_id, address.lower())
        cached = self._cache.get(key)
        if cached is not None:
            return cached

        decimals, symbol = await asyncio.gather(
            self.reader.read_contract(network_id, address, ERC20_ABI, "decimals"),
            self.reader.read_contract(network_id, address, ERC20_ABI, "symbol"),
        )
        metadata = TokenMetadata(address, str(symbol), int(decimals))
        self._cache[key] = metadata
        logger.debug("Resolved token %s on %s: %s/%s", address, network_id, symbol, decimals)
        return metadata

    async def money(self, network_id: int, token: Optional[str], raw_value: int) -> Money:
        metadata = await self.describe(network_id, token)
        return Money(
            raw_value=int(raw_value),
            decimals=metadata.decimals,
            token_id=metadata.token_id,
            symbol=metadata.symbol,
            network_id=network_id,
        )
