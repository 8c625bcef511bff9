"""
Network registry.

Built-in table of supported EVM networks, optionally extended/overridden
from a YAML file (see ``Settings.NETWORKS_FILE``)::

    networks:
      8453:
        name: Base
        native_symbol: ETH
        explorer: https://basescan.org
        rpc_urls: [https://mainnet.base.org]
"""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from pathlib import Path
from typing import Dict, List, Optional

import yaml

from mintkit.config import settings
from mintkit.domain.errors import UnsupportedNetworkError


@dataclass(frozen=True)
class NetworkConfig:
    network_id: int
    name: str
    native_symbol: str
    explorer: str
    rpc_urls: List[str] = field(default_factory=list)


_BUILTIN_NETWORKS: Dict[int, NetworkConfig] = {
    1: NetworkConfig(1, "Ethereum", "ETH", "https://etherscan.io", ["https://eth.llamarpc.com"]),
    10: NetworkConfig(10, "Optimism", "ETH", "https://optimistic.etherscan.io", ["https://mainnet.optimism.io"]),
    137: NetworkConfig(137, "Polygon", "POL", "https://polygonscan.com", ["https://polygon-rpc.com"]),
    360: NetworkConfig(360, "Shape", "ETH", "https://shapescan.xyz", ["https://mainnet.shape.network"]),
    8453: NetworkConfig(8453, "Base", "ETH", "https://basescan.org", ["https://mainnet.base.org"]),
    42161: NetworkConfig(42161, "Arbitrum One", "ETH", "https://arbiscan.io", ["https://arb1.arbitrum.io/rpc"]),
    7777777: NetworkConfig(7777777, "Zora", "ETH", "https://explorer.zora.energy", ["https://rpc.zora.energy"]),
    11155111: NetworkConfig(11155111, "Sepolia", "ETH", "https://sepolia.etherscan.io", ["https://rpc.sepolia.org"]),
    84532: NetworkConfig(84532, "Base Sepolia", "ETH", "https://sepolia.basescan.org", ["https://sepolia.base.org"]),
}


def _load_yaml_networks(path: Path) -> Dict[int, dict]:
    with open(path, "r") as f:
        data = yaml.safe_load(f) or {}
    return {int(k): (v or {}) for k, v in data.get("networks", {}).items()}


class NetworkRegistry:
    def __init__(self, overrides_file: Optional[str] = None):
        self._networks: Dict[int, NetworkConfig] = dict(_BUILTIN_NETWORKS)
        if overrides_file:
            self.load_file(Path(overrides_file))

    def load_file(self, path: Path) -> None:
        for network_id, raw in _load_yaml_networks(path).items():
            base = self._networks.get(network_id)
            if base is None:
                base = NetworkConfig(network_id, f"Network {network_id}", "ETH", "")
            self._networks[network_id] = replace(
                base,
                name=raw.get("name", base.name),
                native_symbol=raw.get("native_symbol", base.native_symbol),
                explorer=raw.get("explorer", base.explorer),
                rpc_urls=list(raw.get("rpc_urls", base.rpc_urls)),
            )

    def get(self, network_id: int) -> NetworkConfig:
        network = self._networks.get(network_id)
        if network is None:
            raise UnsupportedNetworkError(
                f"Network {network_id} is not supported",
                details={"network_id": network_id},
            )
        return network

    def ids(self) -> List[int]:
        return sorted(self._networks)

    def native_symbol(self, network_id: int) -> str:
        return self.get(network_id).native_symbol

    def rpc_urls(self, network_id: int) -> List[str]:
        """Configured RPC urls win over the built-in public endpoints."""
        configured = settings.RPC_URLS.get(network_id)
        if configured:
            return list(configured)
        return list(self.get(network_id).rpc_urls)

    def tx_url(self, network_id: int, tx_hash: str) -> str:
        explorer = self.get(network_id).explorer
        return f"{explorer.rstrip('/')}/tx/{tx_hash}" if explorer else ""


networks = NetworkRegistry(settings.NETWORKS_FILE)
