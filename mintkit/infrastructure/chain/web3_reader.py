"""
web3.py backed chain reader.
One AsyncWeb3 client per network, built lazily from RPC urls.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional, Sequence

from eth_utils import to_checksum_address
from web3 import AsyncHTTPProvider, AsyncWeb3

from mintkit.domain.errors import UnsupportedNetworkError
from mintkit.domain.models.money import NATIVE_TOKEN, ZERO_ADDRESS
from mintkit.domain.models.purchase import TransactionRequest
from mintkit.infrastructure.chain.abis import ERC20_ABI

logger = logging.getLogger(__name__)


class Web3ChainReader:
    def __init__(
        self,
        rpc_urls: Optional[Dict[int, str]] = None,
        clients: Optional[Dict[int, AsyncWeb3]] = None,
        request_timeout: float = 10.0,
    ):
        self.rpc_urls = dict(rpc_urls or {})
        self.request_timeout = request_timeout
        self._clients: Dict[int, AsyncWeb3] = dict(clients or {})
        self._chain_ids: Dict[int, int] = {}

    def client(self, network_id: int) -> AsyncWeb3:
        client = self._clients.get(network_id)
        if client is not None:
            return client
        url = self.rpc_urls.get(network_id)
        if not url:
            raise UnsupportedNetworkError(
                f"No RPC url configured for network {network_id}",
                details={"network_id": network_id},
            )
        client = AsyncWeb3(
            AsyncHTTPProvider(url, request_kwargs={"timeout": self.request_timeout})
        )
        self._clients[network_id] = client
        return client

    def serves(self, network_id: int) -> bool:
        return network_id in self._clients or network_id in self.rpc_urls

    async def get_chain_id(self, network_id: int) -> int:
        cached = self._chain_ids.get(network_id)
        if cached is not None:
            return cached
        chain_id = await self.client(network_id).eth.chain_id
        self._chain_ids[network_id] = chain_id
        return chain_id

    async def read_contract(
        self,
        network_id: int,
        address: str,
        abi: List[dict],
        function_name: str,
        args: Sequence[Any] = (),
    ) -> Any:
        w3 = self.client(network_id)
        contract = w3.eth.contract(address=to_checksum_address(address), abi=abi)
        call = contract.functions[function_name](*args)
        return await call.call()

    async def get_balance(
        self, network_id: int, address: str, token: Optional[str] = None
    ) -> int:
        owner = to_checksum_address(address)
        if token is None or token in (NATIVE_TOKEN, ZERO_ADDRESS):
            return int(await self.client(network_id).eth.get_balance(owner))
        return int(
            await self.read_contract(network_id, token, ERC20_ABI, "balanceOf", [owner])
        )

    async def estimate_gas(
        self, network_id: int, request: TransactionRequest, sender: str
    ) -> int:
        tx = {
            "from": to_checksum_address(sender),
            "to": to_checksum_address(request.to),
            "data": request.data,
            "value": request.value,
        }
        return int(await self.client(network_id).eth.estimate_gas(tx))
