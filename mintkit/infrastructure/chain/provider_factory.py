"""
Chain reader factory (config-driven).
"""

from __future__ import annotations

from typing import Dict, List, Optional

from mintkit.config.networks import NetworkRegistry, networks
from mintkit.infrastructure.chain.provider_chain import (
    ChainedChainReader,
    NamedReader,
    TrackedChainReader,
)
from mintkit.infrastructure.chain.types import ChainReader
from mintkit.infrastructure.chain.web3_reader import Web3ChainReader


def _build_rpc_readers(registry: NetworkRegistry) -> List[NamedReader]:
    """One Web3ChainReader per url rank: rpc-0 holds every network's first url."""
    by_rank: List[Dict[int, str]] = []
    for network_id in registry.ids():
        for rank, url in enumerate(registry.rpc_urls(network_id)):
            while len(by_rank) <= rank:
                by_rank.append({})
            by_rank[rank][network_id] = url
    return [
        NamedReader(f"rpc-{rank}", Web3ChainReader(rpc_urls=urls))
        for rank, urls in enumerate(by_rank)
    ]


def get_chain_reader(
    primary: Optional[ChainReader] = None,
    registry: Optional[NetworkRegistry] = None,
    timeout: Optional[float] = None,
) -> ChainReader:
    """
    Build the read path.

    ``primary`` is the caller's own (wallet-supplied) reader; it is tried
    first and the configured public RPCs act as fallbacks.
    """
    registry = registry or networks
    readers: List[NamedReader] = []
    if primary is not None:
        readers.append(NamedReader("wallet", primary))
    readers.extend(_build_rpc_readers(registry))

    if not readers:
        raise RuntimeError("No chain readers configured")
    if len(readers) == 1 and timeout is None:
        only = readers[0]
        return TrackedChainReader(only.reader, only.name)
    return ChainedChainReader(readers, timeout=timeout)
